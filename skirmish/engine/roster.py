from typing import List, Optional, Sequence
from .model import ALLY_SPAWNS, ENEMY_SPAWNS, UNIT_TEMPLATES, BattleConfig, Position, Role, Unit

def make_unit(role: Role, index: int, pos: Position, speed_multiplier: float = 1.0) -> Unit:
    """Create a full-health unit from its role template."""
    t = UNIT_TEMPLATES[role]
    speed = t.speed * speed_multiplier if role == "ally" else t.speed
    return Unit(
        id=f"{role}-{index}",
        role=role,
        pos=(float(pos[0]), float(pos[1])),
        hp=t.max_hp,
        max_hp=t.max_hp,
        base_speed=t.speed,
        speed=speed,
        attack_cooldown=t.attack_cooldown,
        base_damage=t.damage,
    )

def make_roster(config: Optional[BattleConfig] = None,
                ally_spawns: Sequence[Position] = ALLY_SPAWNS,
                enemy_spawns: Sequence[Position] = ENEMY_SPAWNS) -> List[Unit]:
    """Create the fixed battle roster, allies first."""
    multiplier = (config or BattleConfig()).speed_multiplier
    allies = [make_unit("ally", i, p, multiplier) for i, p in enumerate(ally_spawns)]
    enemies = [make_unit("enemy", i, p) for i, p in enumerate(enemy_spawns)]
    return allies + enemies
