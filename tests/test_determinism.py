"""Test that the engine produces deterministic results."""
from skirmish.engine.engine import CombatEngine
from skirmish.engine.model import BattleConfig
from skirmish.engine.roster import make_roster


def run_battle(config: BattleConfig, deltas):
    """Run a fresh battle over a fixed delta sequence."""
    eng = CombatEngine()
    units = make_roster(config)
    events = []
    outcome = None
    for d in deltas:
        result = eng.step(units, d, config)
        events.extend(result.events)
        if result.outcome:
            outcome = result.outcome
            break
    return eng, units, events, outcome


def test_engine_determinism():
    """Same config and deltas should produce identical results."""
    config = BattleConfig(damage_multiplier=1.5, speed_mode="fast")
    deltas = [0.016, 0.033, 0.05, 0.08, 0.012] * 200

    eng1, units1, events1, outcome1 = run_battle(config, deltas)
    eng2, units2, events2, outcome2 = run_battle(config, deltas)

    assert outcome1 == outcome2 is not None
    assert eng1.metrics == eng2.metrics
    assert len(events1) == len(events2)
    for e1, e2 in zip(events1, events2):
        assert (e1.id, e1.tick, e1.timestamp, e1.summary, e1.data) == \
               (e2.id, e2.tick, e2.timestamp, e2.summary, e2.data)
    assert [u.snapshot() for u in units1] == [u.snapshot() for u in units2]


def test_different_configs_produce_different_results():
    """A bigger damage multiplier should end the battle sooner."""
    deltas = [0.05] * 2000

    eng_slow, _, _, outcome_slow = run_battle(BattleConfig(damage_multiplier=1.0), deltas)
    eng_fast, _, _, outcome_fast = run_battle(BattleConfig(damage_multiplier=2.5), deltas)

    assert outcome_slow == outcome_fast == "victory"
    assert eng_fast.metrics.ticks < eng_slow.metrics.ticks
