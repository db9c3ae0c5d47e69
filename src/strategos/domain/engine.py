"""Turn/phase state machine and the command surface of the simulation."""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass

from . import economy, phases
from .adjacency import AdjacencyGraph
from .commands import (
    CommandRejected,
    CommandResult,
    NationUpdate,
    TerritoryUpdate,
    apply_nation_updates,
    apply_territory_updates,
)
from .enums import PHASE_DISPLAY_NAMES, PHASE_SEQUENCE, CommandError, Phase
from .ledger import MoveLedger
from .models import MoveID, Nation, NationID, Territory, TerritoryID, TroopMove, World
from .rules_config import DEFAULT_RULES, RulesConfig
from .supply import cap_supply

logger = logging.getLogger(__name__)

WorldFactory = Callable[[], World]


def next_phase(phase: Phase) -> Phase:
    """Phase that follows ``phase`` in the turn cycle."""

    index = PHASE_SEQUENCE.index(phase)
    return PHASE_SEQUENCE[(index + 1) % len(PHASE_SEQUENCE)]


@dataclass(frozen=True, slots=True)
class PhaseTransition:
    """Result of :meth:`PhaseEngine.advance_phase`."""

    previous_phase: Phase
    phase: Phase
    turn: int
    report: phases.PhaseReport

    @property
    def turn_advanced(self) -> bool:
        return self.phase == PHASE_SEQUENCE[0]


class PhaseEngine:
    """Owns the world and is the only component allowed to change it.

    Every command runs to completion synchronously.  Failed commands return a
    :class:`CommandResult` with ``ok=False`` and leave the world untouched.
    """

    def __init__(
        self,
        world_factory: WorldFactory,
        graph: AdjacencyGraph,
        *,
        rules: RulesConfig = DEFAULT_RULES,
    ) -> None:
        self._world_factory = world_factory
        self._graph = graph
        self._rules = rules
        self._world = self._fresh_world()
        self._last_report: phases.PhaseReport | None = None

    # ------------------------------------------------------------------
    # Queries

    @property
    def world(self) -> World:
        """Live world state; callers must treat it as read-only."""

        return self._world

    def snapshot(self) -> World:
        """Deep copy of the world, safe to hold across commands."""

        return copy.deepcopy(self._world)

    @property
    def phase(self) -> Phase:
        return self._world.phase

    @property
    def turn(self) -> int:
        return self._world.turn

    @property
    def active_nation(self) -> Nation:
        return self._world.active_nation

    @property
    def selected_territory(self) -> Territory | None:
        selected = self._world.selected_territory_id
        return self._world.territories.get(selected) if selected is not None else None

    @property
    def pending_moves(self) -> tuple[TroopMove, ...]:
        return tuple(self._world.pending_moves)

    @property
    def graph(self) -> AdjacencyGraph:
        return self._graph

    @property
    def rules(self) -> RulesConfig:
        return self._rules

    @property
    def ledger(self) -> MoveLedger:
        return MoveLedger(self._world, self._graph)

    @property
    def last_report(self) -> phases.PhaseReport | None:
        """Report produced by the most recent phase exit."""

        return self._last_report

    def infrastructure_budgets(self) -> dict[NationID, float]:
        return economy.infrastructure_budgets(self._world)

    # ------------------------------------------------------------------
    # Commands

    def switch_active_nation(self, nation_id: NationID) -> CommandResult:
        if nation_id not in self._world.nations:
            return self._reject(CommandError.UNKNOWN_NATION, f"nation {nation_id} does not exist")
        self._world.active_nation_id = nation_id
        return CommandResult.success(f"now controlling {self._world.active_nation.name}")

    def select_territory(self, territory_id: TerritoryID | None) -> CommandResult:
        if territory_id is not None and territory_id not in self._world.territories:
            return self._reject(
                CommandError.UNKNOWN_TERRITORY, f"territory {territory_id} does not exist"
            )
        self._world.selected_territory_id = territory_id
        return CommandResult.success()

    def update_territory(
        self, territory_id: TerritoryID, *updates: TerritoryUpdate
    ) -> CommandResult:
        """Apply typed field updates to a territory, all or nothing."""

        territory = self._world.territories.get(territory_id)
        if territory is None:
            return self._reject(
                CommandError.UNKNOWN_TERRITORY, f"territory {territory_id} does not exist"
            )
        try:
            updated = apply_territory_updates(self._world, territory, updates)
        except CommandRejected as exc:
            return self._rejected(exc)
        self._world.territories[territory_id] = updated
        return CommandResult.success(f"updated {len(updates)} field(s) on {territory_id}")

    def update_nation(self, nation_id: NationID, *updates: NationUpdate) -> CommandResult:
        """Apply typed field updates to a nation, all or nothing."""

        nation = self._world.nations.get(nation_id)
        if nation is None:
            return self._reject(CommandError.UNKNOWN_NATION, f"nation {nation_id} does not exist")
        try:
            updated = apply_nation_updates(nation, updates)
        except CommandRejected as exc:
            return self._rejected(exc)
        self._world.nations[nation_id] = updated
        return CommandResult.success(f"updated {len(updates)} field(s) on {nation_id}")

    def distribute_supply(self, territory_id: TerritoryID, amount: int) -> CommandResult:
        """Set a territory's supply, capped by its infrastructure."""

        territory = self._world.territories.get(territory_id)
        if territory is None:
            return self._reject(
                CommandError.UNKNOWN_TERRITORY, f"territory {territory_id} does not exist"
            )
        if amount < 0:
            return self._reject(
                CommandError.NEGATIVE_VALUE, f"supply cannot be negative ({amount})"
            )
        territory.supply = cap_supply(territory, amount)
        return CommandResult.success(f"{territory_id} supplied with {territory.supply}")

    def queue_move(
        self, source: TerritoryID, destination: TerritoryID, troops: int
    ) -> CommandResult:
        try:
            move = self.ledger.queue_move(source, destination, troops)
        except CommandRejected as exc:
            return self._rejected(exc)
        return CommandResult.success(f"queued {move.id}", move=move)

    def cancel_move(self, move_id: MoveID) -> CommandResult:
        """Cancel a pending move.  An unknown id changes nothing."""

        try:
            move = self.ledger.cancel_move(move_id)
        except CommandRejected as exc:
            return self._rejected(exc)
        return CommandResult.success(f"cancelled {move.id}", move=move)

    def clear_moves(self) -> CommandResult:
        cancelled = self.ledger.clear_moves()
        return CommandResult.success(f"cancelled {len(cancelled)} move(s)")

    def advance_phase(self) -> PhaseTransition:
        """Run the exit rule for the current phase, then move to the next one.

        The rule only computes a delta; the delta and the phase/turn change are
        committed together afterwards, so an exception raised by a rule leaves
        the world exactly as it was.
        """

        world = self._world
        delta = phases.compute_exit_delta(world, self._rules)

        previous = world.phase
        upcoming = next_phase(previous)
        world.territories.update(delta.territories)
        world.nations.update(delta.nations)
        if delta.clear_moves:
            world.pending_moves.clear()
        world.phase = upcoming
        if upcoming == PHASE_SEQUENCE[0]:
            world.turn += 1

        self._last_report = delta.report
        logger.info(
            "turn %d: %s -> %s",
            world.turn,
            PHASE_DISPLAY_NAMES[previous],
            PHASE_DISPLAY_NAMES[upcoming],
        )
        return PhaseTransition(previous, upcoming, world.turn, delta.report)

    def advance_turn(self) -> list[PhaseTransition]:
        """Advance through the remainder of the current turn."""

        transitions = [self.advance_phase()]
        while not transitions[-1].turn_advanced:
            transitions.append(self.advance_phase())
        return transitions

    def reset_to_initial_state(self) -> None:
        self._world = self._fresh_world()
        self._last_report = None
        logger.info("world reset to initial state")

    # ------------------------------------------------------------------
    # Helpers

    def _fresh_world(self) -> World:
        world = self._world_factory()
        check_world(world, self._graph)
        return world

    @staticmethod
    def _reject(error: CommandError, detail: str) -> CommandResult:
        logger.debug("command rejected (%s): %s", error, detail)
        return CommandResult.failure(error, detail)

    @classmethod
    def _rejected(cls, exc: CommandRejected) -> CommandResult:
        return cls._reject(exc.error, exc.detail)


def check_world(world: World, graph: AdjacencyGraph) -> None:
    """Raise ``ValueError`` if ``world`` breaks a referential or supply invariant."""

    if world.active_nation_id not in world.nations:
        raise ValueError(f"active nation {world.active_nation_id} does not exist")
    for territory in world.territories.values():
        if territory.owner is not None and territory.owner not in world.nations:
            raise ValueError(f"territory {territory.id} owned by unknown nation {territory.owner}")
        if territory.supply > territory.infrastructure:
            raise ValueError(f"territory {territory.id} has supply above its infrastructure")
    graph.validate_against(world.territories)
