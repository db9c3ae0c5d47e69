"""Unit tests for battle resolution."""

from __future__ import annotations

import copy

import pytest
from hypothesis import given
from hypothesis import strategies as st

from strategos.domain import combat
from strategos.domain import models as dm
from strategos.domain.enums import BattleOutcome, ConsumptionPolicy
from strategos.domain.rules_config import LogisticsRules, RulesConfig

A, B, C = dm.TerritoryID("A"), dm.TerritoryID("B"), dm.TerritoryID("C")
N1, N2 = dm.NationID("n1"), dm.NationID("n2")


def _world(*, defender_troops: int = 5, defender_supply: int = 5) -> dm.World:
    nations = {
        N1: dm.Nation(id=N1, name="North", color="#0000ff"),
        N2: dm.Nation(id=N2, name="South", color="#ff0000"),
    }
    territories = {
        A: dm.Territory(id=A, name="Alpha", owner=N1, infrastructure=30, troops=20, supply=20),
        B: dm.Territory(
            id=B,
            name="Bravo",
            owner=N2,
            infrastructure=20,
            troops=defender_troops,
            supply=defender_supply,
        ),
        C: dm.Territory(id=C, name="Charlie", owner=N1, infrastructure=10, troops=6, supply=0),
    }
    return dm.World(active_nation_id=N1, nations=nations, territories=territories)


def _attack(world: dm.World, source: dm.TerritoryID, troops: int, *, move_no: int = 1) -> None:
    world.territories[source].troops -= troops
    world.pending_moves.append(
        dm.TroopMove(
            id=dm.MoveID(f"move-{move_no}"),
            source=source,
            destination=B,
            troops=troops,
            nation_id=world.territories[source].owner,
        )
    )


class TestEffectiveStrength:
    def test_fully_supplied_troops_fight_at_full_strength(self):
        assert combat.effective_strength(10, 10) == 10
        assert combat.effective_strength(10, 25) == 10

    def test_shortfall_fights_at_half_weight(self):
        assert combat.effective_strength(10, 4) == 7.0

    def test_unsupplied_troops_fight_at_half_strength(self):
        assert combat.effective_strength(10, 0) == 5.0

    def test_custom_weight(self):
        assert combat.effective_strength(10, 6, undersupplied_weight=0.25) == 7.0

    def test_empty_garrison_has_no_strength(self):
        assert combat.effective_strength(0, 0) == 0


class TestResolveEngagement:
    def test_attacker_captures_with_scaled_survivors(self):
        result = combat.resolve_engagement(10.0, 10, 5.0, 5)
        assert result == combat.EngagementResult(BattleOutcome.CAPTURED, 5)

    def test_capturing_force_keeps_at_least_one_unit(self):
        result = combat.resolve_engagement(5.5, 11, 5.0, 5)
        assert result.outcome == BattleOutcome.CAPTURED
        assert result.survivors == 1

    def test_defender_holds_with_scaled_survivors(self):
        # 12 raw defenders at 9.0 strength beat 5.0: floor(4.0 * 12 / 9) = 5
        result = combat.resolve_engagement(5.0, 5, 9.0, 12)
        assert result == combat.EngagementResult(BattleOutcome.HELD, 5)

    def test_narrow_defence_can_leave_no_survivors(self):
        result = combat.resolve_engagement(9.5, 10, 10.0, 10)
        assert result == combat.EngagementResult(BattleOutcome.HELD, 0)

    def test_tie_destroys_both_sides(self):
        result = combat.resolve_engagement(7.0, 10, 7.0, 10)
        assert result == combat.EngagementResult(BattleOutcome.MUTUAL_DESTRUCTION, 0)

    def test_empty_defender_is_captured(self):
        result = combat.resolve_engagement(3.0, 3, 0.0, 0)
        assert result == combat.EngagementResult(BattleOutcome.CAPTURED, 3)


def test_supplied_attack_captures_territory():
    world = _world()
    _attack(world, A, 10)

    updates, battles, reinforcements = combat.resolve_combat(world)

    assert updates[B].owner == N1
    assert updates[B].troops == 5
    assert reinforcements == []
    (battle,) = battles
    assert battle.outcome == BattleOutcome.CAPTURED
    assert battle.previous_owner == N2
    assert battle.new_owner == N1
    assert battle.attacker_strength == 10
    assert battle.defender_strength == 5
    assert battle.move_ids == ("move-1",)


def test_undersupplied_defender_fights_weaker():
    world = _world(defender_troops=10, defender_supply=4)
    _attack(world, A, 10)

    updates, battles, _ = combat.resolve_combat(world)

    assert battles[0].defender_strength == 7.0
    assert updates[B].owner == N1
    assert updates[B].troops == 3


def test_resolution_does_not_touch_the_world():
    world = _world()
    _attack(world, A, 10)
    before = copy.deepcopy(world)

    combat.resolve_combat(world)

    assert world == before


def test_attacks_from_several_sources_are_summed():
    world = _world(defender_troops=12, defender_supply=12)
    _attack(world, A, 8, move_no=1)
    _attack(world, C, 6, move_no=2)

    updates, battles, _ = combat.resolve_combat(world)

    # 8 supplied + 6 unsupplied at half weight = 11 < 12
    assert battles[0].attacker_strength == 11.0
    assert battles[0].attacker_troops == 14
    assert battles[0].outcome == BattleOutcome.HELD
    assert updates[B].owner == N2
    assert updates[B].troops == 1


def test_equal_strengths_wipe_out_the_garrison():
    world = _world(defender_troops=10, defender_supply=10)
    _attack(world, A, 10)

    updates, battles, _ = combat.resolve_combat(world)

    assert battles[0].outcome == BattleOutcome.MUTUAL_DESTRUCTION
    assert updates[B].troops == 0
    assert updates[B].owner == N2


def test_moves_into_own_territory_reinforce():
    world = _world()
    world.territories[B].owner = N1
    _attack(world, A, 4)

    updates, battles, reinforcements = combat.resolve_combat(world)

    assert battles == []
    assert updates[B].troops == 9
    assert reinforcements == [combat.Reinforcement(B, 4, (dm.MoveID("move-1"),))]


def test_attrition_policy_uses_raw_troop_counts():
    rules = RulesConfig(logistics=LogisticsRules(consumption_policy=ConsumptionPolicy.ATTRITION))
    world = _world(defender_troops=10, defender_supply=4)
    _attack(world, A, 10)

    updates, battles, _ = combat.resolve_combat(world, rules=rules)

    assert battles[0].defender_strength == 10
    assert battles[0].outcome == BattleOutcome.MUTUAL_DESTRUCTION
    assert updates[B].troops == 0


@given(
    attacker=st.floats(min_value=0.5, max_value=1e6, allow_nan=False),
    attackers=st.integers(min_value=1, max_value=10_000),
    defender=st.floats(min_value=0.0, max_value=1e6, allow_nan=False),
    defenders=st.integers(min_value=0, max_value=10_000),
)
def test_engagement_is_deterministic(attacker, attackers, defender, defenders):
    first = combat.resolve_engagement(attacker, attackers, defender, defenders)
    second = combat.resolve_engagement(attacker, attackers, defender, defenders)
    assert first == second
    assert first.survivors >= 0
    if first.outcome == BattleOutcome.CAPTURED:
        assert first.survivors >= 1


@given(
    strength=st.floats(min_value=0.5, max_value=1e9, allow_nan=False),
    attackers=st.integers(min_value=1, max_value=10_000),
    defenders=st.integers(min_value=1, max_value=10_000),
)
def test_equal_strength_always_annihilates(strength, attackers, defenders):
    result = combat.resolve_engagement(strength, attackers, strength, defenders)
    assert result.outcome == BattleOutcome.MUTUAL_DESTRUCTION
    assert result.survivors == 0


@pytest.mark.parametrize(("troops", "supply"), [(1, 0), (10, 3), (25, 24), (40, 40)])
def test_effective_strength_between_half_and_full(troops, supply):
    strength = combat.effective_strength(troops, supply)
    assert troops / 2 <= strength <= troops


def test_owner_moves_join_the_defence():
    world = _world()
    world.territories[C].owner = N2
    _attack(world, C, 4, move_no=1)
    _attack(world, A, 10, move_no=2)

    updates, battles, reinforcements = combat.resolve_combat(world)

    # 5 supplied defenders + 4 unsupplied arrivals at half weight = 7.0
    (battle,) = battles
    assert battle.attacker_nation_id == N1
    assert battle.defender_troops == 9
    assert battle.defender_strength == 7.0
    assert battle.move_ids == ("move-2",)
    assert reinforcements == [combat.Reinforcement(B, 4, (dm.MoveID("move-1"),))]
    assert updates[B].owner == N1
    assert updates[B].troops == 3
