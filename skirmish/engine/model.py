from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Literal, Mapping, Optional, Tuple

Role = Literal["ally", "enemy"]
Tone = Literal["ally", "enemy", "system"]
Outcome = Literal["victory", "defeat"]
Position = Tuple[float, float]  # (x, y) in map units

ATTACK_RANGE = 48.0
MAX_DELTA_SECONDS = 0.08  # Upper bound for one step, avoids catch-up jumps after a stall
MOVE_EPSILON = 1.0
EVENT_LIMIT = 36
FEED_LIMIT = 14

class BattleStatus(Enum):
    """Lifecycle state of a battle"""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    VICTORY = "victory"
    DEFEAT = "defeat"

    @property
    def terminal(self) -> bool:
        return self in (BattleStatus.VICTORY, BattleStatus.DEFEAT)

@dataclass(frozen=True)
class UnitTemplate:
    """Fixed combat stats shared by every unit of a role"""
    max_hp: float
    speed: float
    attack_cooldown: float  # seconds between hits
    damage: float

UNIT_TEMPLATES: Dict[str, UnitTemplate] = {
    "ally": UnitTemplate(max_hp=180, speed=110, attack_cooldown=0.75, damage=26),
    "enemy": UnitTemplate(max_hp=160, speed=90, attack_cooldown=0.95, damage=18),
}

ALLY_SPAWNS: Tuple[Position, ...] = ((120, 140), (110, 260), (130, 380))
ENEMY_SPAWNS: Tuple[Position, ...] = ((660, 160), (680, 260), (650, 360))

@dataclass(frozen=True)
class SpeedModeOption:
    id: str
    label: str
    description: str
    multiplier: float

SPEED_MODES: Dict[str, SpeedModeOption] = {
    "standard": SpeedModeOption("standard", "1. Standard", "Classic pace", 1.0),
    "fast": SpeedModeOption("fast", "2. Fast", "Accelerated advance", 1.55),
    "veryFast": SpeedModeOption("veryFast", "3. Very fast", "Blitz map control", 2.15),
}

# (label, multiplier) pairs offered by the settings panel
DAMAGE_CHOICES: Tuple[Tuple[str, float], ...] = (
    ("x1 Baseline", 1.0),
    ("x1.5 Reinforced", 1.5),
    ("x2 Aggressive", 2.0),
    ("x2.5 Extreme", 2.5),
)

def resolve_speed_multiplier(mode_id: str) -> float:
    """Movement multiplier for a speed mode; unknown ids fall back to 1."""
    option = SPEED_MODES.get(mode_id)
    return option.multiplier if option else 1.0

@dataclass(frozen=True)
class BattleConfig:
    damage_multiplier: float = 1.0  # applies to ally damage only
    speed_mode: str = "standard"  # applies to ally movement only

    @property
    def speed_multiplier(self) -> float:
        return resolve_speed_multiplier(self.speed_mode)

@dataclass(frozen=True)
class UnitSnapshot:
    """Read-only copy of a unit handed to renderers"""
    id: str
    role: Role
    pos: Position
    hp: float
    max_hp: float
    attack_timer: float
    attack_cooldown: float
    alive: bool

@dataclass
class Unit:
    id: str
    role: Role
    pos: Position
    hp: float
    max_hp: float
    base_speed: float
    speed: float
    attack_cooldown: float
    base_damage: float
    attack_timer: float = 0.0
    target_id: Optional[str] = None

    @property
    def alive(self) -> bool:
        return self.hp > 0

    def snapshot(self) -> UnitSnapshot:
        return UnitSnapshot(
            id=self.id,
            role=self.role,
            pos=(self.pos[0], self.pos[1]),
            hp=self.hp,
            max_hp=self.max_hp,
            attack_timer=self.attack_timer,
            attack_cooldown=self.attack_cooldown,
            alive=self.alive,
        )

@dataclass
class Metrics:
    ticks: int = 0
    elapsed_seconds: float = 0.0
    teammate_damage_inflicted: float = 0.0
    enemy_damage_inflicted: float = 0.0

@dataclass(frozen=True)
class Event:
    id: int
    tick: int
    timestamp: float  # elapsed battle seconds at emission
    summary: str
    tone: Tone
    kind: str = "system"  # hit, kill or outcome
    data: Mapping = field(default_factory=dict)

    def __post_init__(self):
        # Read-only copy so retained events cannot be edited through a reader
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

@dataclass
class StepResult:
    events: List[Event] = field(default_factory=list)  # most recent first
    outcome: Optional[Outcome] = None
