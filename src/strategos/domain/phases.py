"""Phase-exit rules.

Each rule reads the world and returns a :class:`PhaseDelta` describing the
replacement records to install; none of them mutate their input.  The
:class:`~strategos.domain.engine.PhaseEngine` is the only caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from . import combat, economy, supply
from .enums import Phase
from .models import Nation, NationID, Territory, TerritoryID, TroopMove, World
from .rules_config import DEFAULT_RULES, RulesConfig

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PhaseReport:
    """What a phase-exit rule did, for display by the presentation layer."""

    phase: Phase
    turn: int
    battles: list[combat.BattleReport] = field(default_factory=list)
    reinforcements: list[combat.Reinforcement] = field(default_factory=list)
    resource_gains: dict[NationID, int] = field(default_factory=dict)
    attrition_losses: dict[TerritoryID, int] = field(default_factory=dict)
    infrastructure_budgets: dict[NationID, float] = field(default_factory=dict)


@dataclass(slots=True)
class PhaseDelta:
    """State changes produced by a phase-exit rule."""

    report: PhaseReport
    territories: dict[TerritoryID, Territory] = field(default_factory=dict)
    nations: dict[NationID, Nation] = field(default_factory=dict)
    clear_moves: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.territories or self.nations or self.clear_moves)


PhaseRule = Callable[[World, RulesConfig], PhaseDelta]


def _no_change(world: World, rules: RulesConfig) -> PhaseDelta:
    return PhaseDelta(report=PhaseReport(world.phase, world.turn))


def _resolve_combat(world: World, rules: RulesConfig) -> PhaseDelta:
    territories, battles, reinforcements = combat.resolve_combat(world, rules=rules)
    for battle in battles:
        logger.info(
            "battle at %s: %s (attack %.1f vs defence %.1f), %d survivor(s)",
            battle.territory_id,
            battle.outcome,
            battle.attacker_strength,
            battle.defender_strength,
            battle.survivors,
        )
    report = PhaseReport(
        world.phase, world.turn, battles=battles, reinforcements=reinforcements
    )
    return PhaseDelta(report=report, territories=territories, clear_moves=True)


def _execute_noncombat_moves(world: World, rules: RulesConfig) -> PhaseDelta:
    territories: dict[TerritoryID, Territory] = {}
    arrived: dict[TerritoryID, list[TroopMove]] = {}
    for move in world.pending_moves:
        arrived.setdefault(move.destination, []).append(move)

    reinforcements: list[combat.Reinforcement] = []
    for destination, moves in arrived.items():
        troops = sum(move.troops for move in moves)
        territory = world.territories[destination]
        territories[destination] = replace(territory, troops=territory.troops + troops)
        reinforcements.append(
            combat.Reinforcement(destination, troops, tuple(move.id for move in moves))
        )
        logger.info("%s reinforced with %d troop(s)", territory.name, troops)

    report = PhaseReport(world.phase, world.turn, reinforcements=reinforcements)
    return PhaseDelta(report=report, territories=territories, clear_moves=True)


def _collect_production(world: World, rules: RulesConfig) -> PhaseDelta:
    nations, gains = economy.collect_production(world, rules)
    for nation_id, gain in gains.items():
        nation = nations.get(nation_id, world.nations[nation_id])
        logger.info("%s: +%d resources (total: %d)", nation.name, gain, nation.resources)
    report = PhaseReport(world.phase, world.turn, resource_gains=gains)
    return PhaseDelta(report=report, nations=nations)


def _consume_supplies(world: World, rules: RulesConfig) -> PhaseDelta:
    territories, losses = supply.apply_attrition(world, rules)
    for territory_id, lost in losses.items():
        logger.info(
            "%s: %d troop(s) lost to attrition (%d remaining)",
            world.territories[territory_id].name,
            lost,
            territories[territory_id].troops,
        )
    report = PhaseReport(world.phase, world.turn, attrition_losses=losses)
    return PhaseDelta(report=report, territories=territories)


def _report_infrastructure(world: World, rules: RulesConfig) -> PhaseDelta:
    budgets = economy.infrastructure_budgets(world)
    for nation_id, budget in budgets.items():
        logger.info("%s infrastructure budget: %.1f", world.nations[nation_id].name, budget)
    report = PhaseReport(world.phase, world.turn, infrastructure_budgets=budgets)
    return PhaseDelta(report=report)


PHASE_RULES: dict[Phase, PhaseRule] = {
    Phase.COMBAT_MOVE: _no_change,
    Phase.COMBAT: _resolve_combat,
    Phase.NONCOMBAT_MOVE: _execute_noncombat_moves,
    Phase.PRODUCTION: _collect_production,
    Phase.ALLOCATION: _no_change,
    Phase.SUPPLY_DISTRIBUTION: _no_change,
    Phase.CONSUMPTION: _consume_supplies,
    Phase.INFRASTRUCTURE_UPDATE: _report_infrastructure,
}

_missing = set(Phase) - set(PHASE_RULES)
if _missing:  # pragma: no cover - guarded at import time
    raise RuntimeError(f"phases without an exit rule: {sorted(_missing)}")


def exit_rule_for(phase: Phase) -> PhaseRule:
    return PHASE_RULES[phase]


def compute_exit_delta(world: World, rules: RulesConfig = DEFAULT_RULES) -> PhaseDelta:
    """Run the exit rule for the phase ``world`` is currently in."""

    return exit_rule_for(world.phase)(world, rules)
