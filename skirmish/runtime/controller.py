import itertools
import logging
import math
from dataclasses import dataclass, replace
from typing import Callable, Dict, Hashable, List, Optional, Tuple
from skirmish.engine.engine import CombatEngine
from skirmish.engine.model import (EVENT_LIMIT, FEED_LIMIT, MAX_DELTA_SECONDS, BattleConfig, BattleStatus,
                                   Event, Metrics, Outcome, UnitSnapshot)
from skirmish.engine.roster import make_roster
from .eventlog import EventFeed
from .frames import FrameScheduler

log = logging.getLogger(__name__)

OUTCOME_SUMMARIES = {
    "victory": "Allies suppressed the resistance.",
    "defeat": "Allies were wiped out.",
}

@dataclass(frozen=True)
class BattleView:
    """Everything a presentation layer may read, copied at publish time."""
    status: BattleStatus
    units: Tuple[UnitSnapshot, ...]
    events: Tuple[Event, ...]
    metrics: Metrics
    config: BattleConfig

Listener = Callable[[BattleView], None]

class SimulationController:
    """Owns one battle's lifecycle and drives the engine once per frame."""

    def __init__(self, scheduler: FrameScheduler, config: Optional[BattleConfig] = None,
                 max_delta_s: float = MAX_DELTA_SECONDS, event_limit: int = EVENT_LIMIT):
        self._scheduler = scheduler
        self._config = config or BattleConfig()
        self.max_delta_s = max_delta_s
        self._event_ids = itertools.count(1)
        self._feed = EventFeed(limit=event_limit)
        self._listeners: List[Listener] = []
        self._status = BattleStatus.IDLE
        self._frame: Optional[Hashable] = None
        self._last_ts_ms: Optional[float] = None
        self._new_battle()

    def _new_battle(self) -> None:
        self._units = make_roster(self._config)
        self._engine = CombatEngine(max_delta_s=self.max_delta_s, event_ids=self._event_ids)
        self._snapshot = tuple(u.snapshot() for u in self._units)

    # -- read-only view ---------------------------------------------------

    @property
    def status(self) -> BattleStatus:
        return self._status

    @property
    def config(self) -> BattleConfig:
        return self._config

    @property
    def snapshot(self) -> Tuple[UnitSnapshot, ...]:
        return self._snapshot

    @property
    def events(self) -> Tuple[Event, ...]:
        return tuple(self._feed.latest())

    @property
    def metrics(self) -> Metrics:
        return replace(self._engine.metrics)

    def events_since(self, after_id: int, limit: int = EVENT_LIMIT) -> Tuple[List[Event], int]:
        """Events newer than after_id for polling consumers, plus the next cursor."""
        return self._feed.since(after_id, limit)

    def unit_speeds(self) -> Dict[str, float]:
        """Current movement speed per unit id, after the active speed mode."""
        return {u.id: u.speed for u in self._units}

    def display_feed(self, limit: int = FEED_LIMIT) -> Tuple[Event, ...]:
        """Newest events trimmed for on-screen display."""
        return tuple(self._feed.latest(limit))

    def view(self) -> BattleView:
        return BattleView(status=self._status, units=self._snapshot, events=self.events,
                          metrics=self.metrics, config=self._config)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with a fresh view after every publish; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _publish(self) -> None:
        self._snapshot = tuple(u.snapshot() for u in self._units)
        if not self._listeners:
            return
        view = self.view()
        for listener in list(self._listeners):
            try:
                listener(view)
            except Exception:
                log.exception("Battle listener %r failed", listener)

    # -- commands -----------------------------------------------------------

    def start(self) -> None:
        """Start or resume the battle; a finished battle is reset first."""
        if self._status is BattleStatus.RUNNING:
            return
        if self._status.terminal:
            self.reset()
        log.info("Battle %s -> running", self._status.value)
        self._status = BattleStatus.RUNNING
        self._last_ts_ms = None
        self._request_frame()
        self._publish()

    def pause(self) -> None:
        """Freeze the battle exactly as last stepped."""
        if self._status is not BattleStatus.RUNNING:
            return
        self._cancel_frame()
        self._status = BattleStatus.PAUSED
        log.info("Battle paused at tick %d", self._engine.metrics.ticks)
        self._publish()

    def reset(self) -> None:
        """Stop scheduling and restore the fixed roster, zero metrics and an empty feed."""
        self._cancel_frame()
        self._new_battle()
        self._feed.clear()
        self._status = BattleStatus.IDLE
        log.info("Battle reset")
        self._publish()

    def set_damage_multiplier(self, value: float) -> None:
        if not (isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value) and value > 0):
            log.warning("Ignoring invalid damage multiplier %r", value)
            return
        self._apply_config(replace(self._config, damage_multiplier=float(value)))

    def set_speed_mode(self, mode_id: str) -> None:
        self._apply_config(replace(self._config, speed_mode=mode_id))

    def _apply_config(self, config: BattleConfig) -> None:
        self._config = config
        self._engine.apply_config(self._units, config)
        log.info("Config set to damage x%s, speed mode %s (x%s)",
                 config.damage_multiplier, config.speed_mode, config.speed_multiplier)
        self._publish()

    # -- frame loop -----------------------------------------------------------

    def _request_frame(self) -> None:
        if self._frame is None:
            self._frame = self._scheduler.request_frame(self._on_frame)

    def _cancel_frame(self) -> None:
        if self._frame is not None:
            self._scheduler.cancel_frame(self._frame)
            self._frame = None
        self._last_ts_ms = None

    def _on_frame(self, timestamp_ms: float) -> None:
        self._frame = None
        if self._status is not BattleStatus.RUNNING:
            return

        # First frame after a (re)start only establishes the time base
        if self._last_ts_ms is None:
            self._last_ts_ms = timestamp_ms
        delta_s = min(max(0.0, (timestamp_ms - self._last_ts_ms) / 1000.0), self.max_delta_s)
        self._last_ts_ms = timestamp_ms

        result = self._engine.step(self._units, delta_s, self._config)
        self._feed.push(result.events)
        if result.outcome is not None:
            self._finish(result.outcome)

        if self._status is BattleStatus.RUNNING:
            self._request_frame()
        self._publish()

    def _finish(self, outcome: Outcome) -> None:
        self._cancel_frame()
        self._status = BattleStatus(outcome)
        m = self._engine.metrics
        self._feed.push([Event(id=next(self._event_ids), tick=m.ticks, timestamp=m.elapsed_seconds,
                               summary=OUTCOME_SUMMARIES[outcome], tone="system", kind="outcome",
                               data={"outcome": outcome})])
        log.info("Battle ended in %s after %d ticks (%.2fs)", outcome, m.ticks, m.elapsed_seconds)
