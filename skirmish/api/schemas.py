from typing import List, Literal, Optional, Tuple
from pydantic import BaseModel, Field

SpeedModeId = Literal["standard", "fast", "veryFast"]

class SettingsIn(BaseModel):
    """Battle settings update; omitted fields keep their current value."""
    damage_multiplier: Optional[float] = Field(default=None, gt=0)
    speed_mode: Optional[SpeedModeId] = None

class ConfigOut(BaseModel):
    damage_multiplier: float
    speed_mode: str
    speed_multiplier: float

class MetricsOut(BaseModel):
    ticks: int
    elapsed_seconds: float
    teammate_damage_inflicted: float
    enemy_damage_inflicted: float

class UnitOut(BaseModel):
    id: str
    role: Literal["ally", "enemy"]
    pos: Tuple[float, float]
    hp: float
    max_hp: float
    attack_timer: float
    attack_cooldown: float
    alive: bool

class EventOut(BaseModel):
    id: int
    tick: int
    timestamp: float
    summary: str
    tone: Literal["ally", "enemy", "system"]
    kind: str
    data: dict

class StateResponse(BaseModel):
    """Battle state snapshot schema."""
    status: str
    config: ConfigOut
    metrics: MetricsOut
    units: List[UnitOut]

class EventsResponse(BaseModel):
    """Events response schema."""
    next_since: int
    events: List[EventOut]

class SpeedModeOut(BaseModel):
    id: str
    label: str
    description: str
    multiplier: float

class DamageChoiceOut(BaseModel):
    label: str
    value: float

class OptionsResponse(BaseModel):
    speed_modes: List[SpeedModeOut]
    damage_choices: List[DamageChoiceOut]
