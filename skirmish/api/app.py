import logging
from dataclasses import asdict
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from skirmish.config import get_settings
from skirmish.engine.model import DAMAGE_CHOICES, SPEED_MODES, Event
from skirmish.runtime.controller import SimulationController
from skirmish.runtime.frames import AsyncioFrameScheduler
from .schemas import (ConfigOut, DamageChoiceOut, EventOut, EventsResponse, MetricsOut, OptionsResponse,
                      SettingsIn, SpeedModeOut, StateResponse, UnitOut)

log = logging.getLogger(__name__)

settings = get_settings()
app = FastAPI(title="Skirmish Battle API")
controller: SimulationController | None = None

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def _get_controller() -> SimulationController:
    """Return the single battle controller, creating it on first use."""
    global controller
    if controller is None:
        controller = SimulationController(
            AsyncioFrameScheduler(frame_interval_ms=settings.frame_interval_ms),
            config=settings.battle_config(),
            max_delta_s=settings.max_delta_seconds,
            event_limit=settings.event_limit,
        )
    return controller

def _event_out(e: Event) -> EventOut:
    return EventOut(id=e.id, tick=e.tick, timestamp=e.timestamp, summary=e.summary,
                    tone=e.tone, kind=e.kind, data=dict(e.data))

def _state(ctl: SimulationController) -> StateResponse:
    view = ctl.view()
    return StateResponse(
        status=view.status.value,
        config=ConfigOut(damage_multiplier=view.config.damage_multiplier,
                         speed_mode=view.config.speed_mode,
                         speed_multiplier=view.config.speed_multiplier),
        metrics=MetricsOut(**asdict(view.metrics)),
        units=[UnitOut(**asdict(u)) for u in view.units],
    )

@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "message": "Skirmish Battle API",
        "docs": "/docs",
        "version": "1.0"
    }

@app.on_event("startup")
async def startup():
    """Configure logging and create the battle controller."""
    logging.basicConfig(level=settings.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    _get_controller()

@app.on_event("shutdown")
async def shutdown():
    """Stop scheduling frames on app shutdown."""
    if controller:
        log.info("Shutting down, pausing battle")
        controller.pause()

@app.get("/battle/state", response_model=StateResponse)
async def get_state():
    """Get current battle state snapshot."""
    return _state(_get_controller())

@app.get("/battle/events", response_model=EventsResponse)
async def get_events(since: int = Query(default=0, ge=0),
                     limit: int = Query(default=settings.feed_limit, ge=1, le=settings.event_limit)):
    """Get events newer than the given event id."""
    evts, next_since = _get_controller().events_since(since, limit)
    return EventsResponse(next_since=next_since, events=[_event_out(e) for e in evts])

@app.get("/battle/options", response_model=OptionsResponse)
async def get_options():
    """List speed modes and damage multipliers offered by the settings panel."""
    return OptionsResponse(
        speed_modes=[SpeedModeOut(**asdict(m)) for m in SPEED_MODES.values()],
        damage_choices=[DamageChoiceOut(label=label, value=value) for label, value in DAMAGE_CHOICES],
    )

@app.post("/battle/start", response_model=StateResponse)
async def start_battle():
    """Start, resume or restart the battle."""
    ctl = _get_controller()
    ctl.start()
    return _state(ctl)

@app.post("/battle/pause", response_model=StateResponse)
async def pause_battle():
    """Pause the battle."""
    ctl = _get_controller()
    ctl.pause()
    return _state(ctl)

@app.post("/battle/reset", response_model=StateResponse)
async def reset_battle():
    """Reset the battle to its initial roster."""
    ctl = _get_controller()
    ctl.reset()
    return _state(ctl)

@app.put("/battle/settings", response_model=StateResponse)
async def update_settings(req: SettingsIn):
    """Change damage multiplier and/or speed mode without resetting the battle."""
    ctl = _get_controller()
    if req.damage_multiplier is not None:
        ctl.set_damage_multiplier(req.damage_multiplier)
    if req.speed_mode is not None:
        ctl.set_speed_mode(req.speed_mode)
    return _state(ctl)
