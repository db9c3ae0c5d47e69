"""Unit tests for the phase engine command surface."""

from __future__ import annotations

import copy
import logging

import pytest

from strategos.domain import commands as cmd
from strategos.domain import models as dm
from strategos.domain import phases
from strategos.domain.adjacency import AdjacencyError, AdjacencyGraph
from strategos.domain.engine import PhaseEngine, check_world, next_phase
from strategos.domain.enums import PHASE_SEQUENCE, BattleOutcome, CommandError, Phase

N1, N2 = dm.NationID("n1"), dm.NationID("n2")
A, B, C = dm.TerritoryID("A"), dm.TerritoryID("B"), dm.TerritoryID("C")


def _world() -> dm.World:
    nations = {
        N1: dm.Nation(id=N1, name="North", color="#111111", production=100, resources=100),
        N2: dm.Nation(id=N2, name="South", color="#222222", production=100, resources=100),
    }
    territories = {
        A: dm.Territory(
            id=A,
            name="Alpha",
            owner=N1,
            infrastructure=20,
            troops=20,
            has_resource_node=True,
        ),
        B: dm.Territory(id=B, name="Bravo", owner=N2, infrastructure=20, troops=5),
        C: dm.Territory(id=C, name="Charlie", owner=N1, infrastructure=10, troops=4),
    }
    return dm.World(active_nation_id=N1, nations=nations, territories=territories)


def _graph() -> AdjacencyGraph:
    return AdjacencyGraph.from_mapping({"A": ["B", "C"], "B": ["A"], "C": ["A"]})


@pytest.fixture
def engine() -> PhaseEngine:
    return PhaseEngine(_world, _graph())


def test_next_phase_wraps_around():
    assert next_phase(Phase.COMBAT_MOVE) == Phase.COMBAT
    assert next_phase(Phase.INFRASTRUCTURE_UPDATE) == Phase.COMBAT_MOVE


def test_initial_state(engine):
    assert engine.phase == Phase.COMBAT_MOVE
    assert engine.turn == 1
    assert engine.active_nation.id == N1
    assert engine.selected_territory is None
    assert engine.pending_moves == ()
    assert engine.last_report is None


def test_phase_cycle_advances_turn_after_eight_steps(engine):
    seen = []
    for _ in range(len(PHASE_SEQUENCE)):
        seen.append(engine.phase)
        transition = engine.advance_phase()

    assert seen == list(PHASE_SEQUENCE)
    assert transition.turn_advanced
    assert engine.phase == Phase.COMBAT_MOVE
    assert engine.turn == 2


def test_advance_turn_runs_remaining_phases(engine):
    engine.advance_phase()
    transitions = engine.advance_turn()

    assert len(transitions) == len(PHASE_SEQUENCE) - 1
    assert engine.turn == 2
    assert engine.last_report is transitions[-1].report


def test_combat_turn_captures_territory(engine):
    engine.distribute_supply(A, 20)
    engine.distribute_supply(B, 5)
    queued = engine.queue_move(A, B, 10)
    assert queued.ok
    assert queued.move is not None

    engine.advance_phase()
    transition = engine.advance_phase()

    assert transition.previous_phase == Phase.COMBAT
    assert transition.report.battles[0].outcome == BattleOutcome.CAPTURED
    assert engine.world.territories[B].owner == N1
    assert engine.world.territories[B].troops == 5
    assert engine.world.territories[A].troops == 10
    assert engine.pending_moves == ()


def test_production_phase_credits_resources(engine):
    while engine.phase != Phase.PRODUCTION:
        engine.advance_phase()
    transition = engine.advance_phase()

    assert transition.report.resource_gains[N1] == 10
    assert engine.world.nations[N1].resources == 110


def test_failing_phase_rule_leaves_world_untouched(engine, monkeypatch):
    engine.queue_move(A, B, 5)
    engine.advance_phase()
    before = engine.snapshot()

    def explode(world, rules):
        raise RuntimeError("rule failed")

    monkeypatch.setitem(phases.PHASE_RULES, Phase.COMBAT, explode)
    with pytest.raises(RuntimeError, match="rule failed"):
        engine.advance_phase()

    assert engine.world == before
    assert engine.phase == Phase.COMBAT


@pytest.mark.parametrize(
    ("call", "error"),
    [
        (lambda e: e.queue_move(A, C, 50), CommandError.INSUFFICIENT_TROOPS),
        (lambda e: e.queue_move(B, C, 1), CommandError.NOT_ADJACENT),
        (lambda e: e.cancel_move(dm.MoveID("move-42")), CommandError.UNKNOWN_MOVE),
        (lambda e: e.switch_active_nation(dm.NationID("n9")), CommandError.UNKNOWN_NATION),
        (lambda e: e.select_territory(dm.TerritoryID("Z")), CommandError.UNKNOWN_TERRITORY),
        (lambda e: e.distribute_supply(A, -1), CommandError.NEGATIVE_VALUE),
        (lambda e: e.distribute_supply(dm.TerritoryID("Z"), 5), CommandError.UNKNOWN_TERRITORY),
        (
            lambda e: e.update_territory(A, cmd.SetTroops(3), cmd.SetSupply(99)),
            CommandError.SUPPLY_EXCEEDS_INFRASTRUCTURE,
        ),
        (lambda e: e.update_territory(dm.TerritoryID("Z")), CommandError.UNKNOWN_TERRITORY),
        (lambda e: e.update_nation(N1, cmd.SetProduction(-5)), CommandError.NEGATIVE_VALUE),
        (lambda e: e.update_nation(dm.NationID("n9")), CommandError.UNKNOWN_NATION),
    ],
)
def test_rejected_commands_change_nothing(engine, call, error):
    engine.queue_move(A, B, 2)
    before = engine.snapshot()

    result = call(engine)

    assert not result.ok
    assert result.error == error
    assert result.detail
    assert engine.world == before


def test_switch_and_select(engine):
    assert engine.switch_active_nation(N2).ok
    assert engine.active_nation.name == "South"

    assert engine.select_territory(B).ok
    assert engine.selected_territory is engine.world.territories[B]
    assert engine.select_territory(None).ok
    assert engine.selected_territory is None


def test_distribute_supply_is_capped(engine):
    result = engine.distribute_supply(C, 25)
    assert result.ok
    assert engine.world.territories[C].supply == 10


def test_update_territory_applies_all_fields(engine):
    result = engine.update_territory(
        A, cmd.SetInfrastructure(40), cmd.SetSupply(35), cmd.SetOwner(N2)
    )

    assert result.ok
    territory = engine.world.territories[A]
    assert (territory.infrastructure, territory.supply, territory.owner) == (40, 35, N2)


def test_update_nation(engine):
    result = engine.update_nation(N2, cmd.SetNationName("Southland"), cmd.SetManpower(12))

    assert result.ok
    assert engine.world.nations[N2].name == "Southland"
    assert engine.world.nations[N2].manpower == 12


def test_cancel_and_clear_moves(engine):
    first = engine.queue_move(A, B, 3).move
    engine.queue_move(A, C, 4)

    assert engine.cancel_move(first.id).ok
    assert engine.world.territories[A].troops == 16

    cleared = engine.clear_moves()
    assert cleared.ok
    assert engine.pending_moves == ()
    assert engine.world.territories[A].troops == 20


def test_ledger_and_graph_queries(engine):
    engine.queue_move(A, B, 3)
    engine.queue_move(A, C, 2)

    assert engine.ledger.committed_from(A) == 5
    assert [move.destination for move in engine.ledger.moves_from(A)] == [B, C]
    assert engine.graph.neighbors_of(A) == frozenset({B, C})


def test_snapshot_is_detached(engine):
    snapshot = engine.snapshot()
    engine.queue_move(A, B, 3)
    assert snapshot.territories[A].troops == 20
    assert snapshot.pending_moves == []


def test_reset_restores_initial_state(engine):
    engine.queue_move(A, B, 10)
    engine.advance_turn()
    engine.switch_active_nation(N2)

    engine.reset_to_initial_state()

    assert engine.world == _world()
    assert engine.last_report is None


def test_infrastructure_budgets_query(engine):
    assert engine.infrastructure_budgets() == pytest.approx({N1: 21.0, N2: 21.0})


def test_check_world_rejects_broken_state():
    world = _world()
    world.territories[A].supply = 50
    with pytest.raises(ValueError, match="supply above its infrastructure"):
        check_world(world, _graph())

    world = _world()
    world.territories[B].owner = dm.NationID("ghost")
    with pytest.raises(ValueError, match="unknown nation ghost"):
        check_world(world, _graph())

    world = _world()
    world.active_nation_id = dm.NationID("ghost")
    with pytest.raises(ValueError, match="active nation"):
        check_world(world, _graph())


def test_engine_rejects_graph_with_unknown_territories():
    graph = AdjacencyGraph.from_mapping({"A": ["Z"], "Z": ["A"]})
    with pytest.raises(AdjacencyError):
        PhaseEngine(_world, graph)


def test_engine_state_is_independent_of_factory_output():
    world = _world()
    engine = PhaseEngine(lambda: copy.deepcopy(world), _graph())
    engine.queue_move(A, B, 5)
    assert world.territories[A].troops == 20


def test_phase_transition_is_logged_by_display_name(engine, caplog):
    with caplog.at_level(logging.INFO, logger="strategos.domain.engine"):
        engine.advance_phase()

    assert "turn 1: Combat Move -> Combat Resolution" in caplog.text
