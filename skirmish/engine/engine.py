import itertools
import logging
import math
from typing import Iterator, List, Optional, Sequence
from .model import (ATTACK_RANGE, MAX_DELTA_SECONDS, MOVE_EPSILON, BattleConfig, Event, Metrics,
                    Outcome, Position, StepResult, Unit)

log = logging.getLogger(__name__)

def distance_2d(pos1: Position, pos2: Position) -> float:
    """Calculate Euclidean distance between two 2D positions."""
    return math.hypot(pos2[0] - pos1[0], pos2[1] - pos1[1])

def effective_damage(unit: Unit, config: BattleConfig) -> float:
    """Base damage after the role multiplier; only allies are boosted."""
    multiplier = config.damage_multiplier if unit.role == "ally" else 1.0
    return unit.base_damage * multiplier

def battle_outcome(units: Sequence[Unit]) -> Optional[Outcome]:
    """Terminal outcome of a roster, or None while both sides stand.

    A roster with no living units on either side is a defeat.
    """
    if not any(u.alive for u in units if u.role == "ally"):
        return "defeat"
    if not any(u.alive for u in units if u.role == "enemy"):
        return "victory"
    return None

def unit_label(unit: Unit) -> str:
    index = unit.id.rsplit("-", 1)[-1]
    return f"Ally {index}" if unit.role == "ally" else f"Enemy {index}"

class CombatEngine:
    """Per-battle state transition: movement, targeting, combat and outcome.

    The engine mutates a roster owned by the caller and keeps the battle's
    metrics. It never deletes units; dead units simply stop acting.
    """

    def __init__(self, attack_range: float = ATTACK_RANGE, max_delta_s: float = MAX_DELTA_SECONDS,
                 event_ids: Optional[Iterator[int]] = None):
        self.attack_range = attack_range
        self.max_delta_s = max_delta_s
        self.metrics = Metrics()
        self._event_ids = event_ids if event_ids is not None else itertools.count(1)

    def clamp_delta(self, delta_s: float) -> float:
        """Bound a raw frame delta to [0, max_delta_s]."""
        return min(max(0.0, delta_s), self.max_delta_s)

    def apply_config(self, units: Sequence[Unit], config: BattleConfig) -> None:
        """Recompute live speeds; positions, hp and targets are left alone."""
        multiplier = config.speed_multiplier
        for u in units:
            u.speed = u.base_speed * multiplier if u.role == "ally" else u.base_speed

    def select_target(self, unit: Unit, candidates: Sequence[Unit]) -> Optional[Unit]:
        """Keep a still-valid target, otherwise lock onto the nearest living opponent.

        Ties go to the first candidate found at the minimal distance.
        """
        for c in candidates:
            if c.id == unit.target_id and c.alive:
                return c

        best: Optional[Unit] = None
        best_d = float('inf')
        for c in candidates:
            if not c.alive:
                continue
            d = distance_2d(unit.pos, c.pos)
            if d < best_d:
                best, best_d = c, d

        unit.target_id = best.id if best else None
        return best

    def _move(self, unit: Unit, target: Unit, dist: float, dt: float) -> None:
        """Straight-line pursuit that never overshoots the target."""
        if dist <= MOVE_EPSILON:
            return
        travel = min(unit.speed * dt, dist)
        dir_x = (target.pos[0] - unit.pos[0]) / dist
        dir_y = (target.pos[1] - unit.pos[1]) / dist
        unit.pos = (unit.pos[0] + dir_x * travel, unit.pos[1] + dir_y * travel)

    def _new_event(self, summary: str, tone: str, kind: str, data: dict) -> Event:
        return Event(id=next(self._event_ids), tick=self.metrics.ticks,
                     timestamp=self.metrics.elapsed_seconds, summary=summary,
                     tone=tone, kind=kind, data=data)

    def _attack(self, attacker: Unit, target: Unit, config: BattleConfig) -> List[Event]:
        """Land one hit and return the resulting events, oldest first."""
        dmg = effective_damage(attacker, config)
        target.hp = max(0.0, target.hp - dmg)
        attacker.attack_timer = attacker.attack_cooldown

        if attacker.role == "ally":
            self.metrics.teammate_damage_inflicted += dmg
        else:
            self.metrics.enemy_damage_inflicted += dmg

        tone = attacker.role
        evts = [self._new_event(
            f"{unit_label(attacker)} deals {dmg:.0f} damage to {unit_label(target)}.",
            tone, "hit",
            {"attacker": attacker.id, "target": target.id, "damage": dmg, "hp": target.hp})]

        if not target.alive:
            evts.append(self._new_event(
                f"{unit_label(attacker)} eliminates {unit_label(target)}.",
                tone, "kill", {"attacker": attacker.id, "target": target.id}))
        return evts

    def step(self, units: Sequence[Unit], delta_s: float, config: BattleConfig) -> StepResult:
        """Advance the battle by one tick of at most max_delta_s seconds."""
        self.apply_config(units, config)

        outcome = battle_outcome(units)
        if outcome is not None:
            return StepResult(events=[], outcome=outcome)

        dt = self.clamp_delta(delta_s)
        self.metrics.ticks += 1
        self.metrics.elapsed_seconds += dt

        allies = [u for u in units if u.role == "ally" and u.alive]
        enemies = [u for u in units if u.role == "enemy" and u.alive]

        evts: List[Event] = []
        for u in units:
            # Units killed earlier in this tick do not act
            if not u.alive:
                continue

            target = self.select_target(u, enemies if u.role == "ally" else allies)
            dist = distance_2d(u.pos, target.pos) if target else 0.0
            if target is not None:
                self._move(u, target, dist, dt)

            u.attack_timer = max(0.0, u.attack_timer - dt)

            # Range is checked against the distance before this tick's movement
            if target is not None and dist <= self.attack_range and u.attack_timer <= 0 and target.alive:
                for e in self._attack(u, target, config):
                    evts.insert(0, e)

        if evts:
            log.debug("Tick %d produced %d events", self.metrics.ticks, len(evts))
        return StepResult(events=evts, outcome=battle_outcome(units))
