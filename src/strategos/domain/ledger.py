"""Pending troop movement ledger."""

from __future__ import annotations

import logging

from .adjacency import AdjacencyGraph
from .commands import CommandRejected
from .enums import CommandError, Phase
from .models import MoveID, TerritoryID, TroopMove, World

logger = logging.getLogger(__name__)


class MoveLedger:
    """View over ``World.pending_moves`` that keeps garrisons consistent.

    Queuing a move debits the source garrison immediately; cancelling credits it
    back.  The ledger owns no state of its own, so a fresh instance can be
    created at any time for the same world.
    """

    __slots__ = ("_world", "_graph")

    def __init__(self, world: World, graph: AdjacencyGraph) -> None:
        self._world = world
        self._graph = graph

    @property
    def moves(self) -> list[TroopMove]:
        return self._world.pending_moves

    def get(self, move_id: MoveID) -> TroopMove | None:
        return next((move for move in self.moves if move.id == move_id), None)

    def moves_from(self, source: TerritoryID) -> list[TroopMove]:
        return [move for move in self.moves if move.source == source]

    def moves_into(self, destination: TerritoryID) -> list[TroopMove]:
        return [move for move in self.moves if move.destination == destination]

    def committed_from(self, source: TerritoryID) -> int:
        """Total troops currently queued out of ``source``."""

        return sum(move.troops for move in self.moves_from(source))

    def validate_move(self, source: TerritoryID, destination: TerritoryID, troops: int) -> None:
        """Raise :class:`CommandRejected` if the move cannot be queued."""

        territories = self._world.territories
        if troops < 1:
            raise CommandRejected(
                CommandError.INVALID_TROOP_COUNT, f"troop count must be positive, got {troops}"
            )
        origin = territories.get(source)
        if origin is None:
            raise CommandRejected(CommandError.INVALID_SOURCE, f"territory {source} does not exist")
        if destination not in territories:
            raise CommandRejected(
                CommandError.UNKNOWN_TERRITORY, f"territory {destination} does not exist"
            )
        if troops > origin.troops:
            raise CommandRejected(
                CommandError.INSUFFICIENT_TROOPS,
                f"{source} has {origin.troops} troops available, {troops} requested",
            )
        if not self._graph.are_adjacent(source, destination):
            raise CommandRejected(
                CommandError.NOT_ADJACENT, f"{source} is not adjacent to {destination}"
            )
        holder = territories[destination].owner
        if self._world.phase == Phase.NONCOMBAT_MOVE and origin.owner != holder:
            raise CommandRejected(
                CommandError.HOSTILE_DESTINATION,
                f"non-combat moves cannot enter {destination}, held by {holder}",
            )
        if origin.owner == holder:
            return
        attackers = {move.nation_id for move in self.moves_into(destination)} - {holder}
        if attackers - {origin.owner}:
            raise CommandRejected(
                CommandError.MIXED_ATTACKERS,
                f"{destination} already has moves queued by another nation",
            )

    def queue_move(self, source: TerritoryID, destination: TerritoryID, troops: int) -> TroopMove:
        """Debit ``source`` and append a new pending move."""

        self.validate_move(source, destination, troops)

        origin = self._world.territories[source]
        self._world.move_sequence += 1
        move = TroopMove(
            id=MoveID(f"move-{self._world.move_sequence}"),
            source=source,
            destination=destination,
            troops=troops,
            nation_id=origin.owner,
        )
        origin.troops -= troops
        self.moves.append(move)
        logger.debug("queued %s: %d troops %s -> %s", move.id, troops, source, destination)
        return move

    def cancel_move(self, move_id: MoveID) -> TroopMove:
        """Remove a pending move and credit its troops back to the source."""

        move = self.get(move_id)
        if move is None:
            raise CommandRejected(CommandError.UNKNOWN_MOVE, f"move {move_id} is not pending")
        self.moves.remove(move)
        self._credit(move)
        logger.debug("cancelled %s; %d troops returned to %s", move.id, move.troops, move.source)
        return move

    def clear_moves(self) -> list[TroopMove]:
        """Cancel every pending move; returns the moves that were cancelled."""

        cancelled = list(self.moves)
        self.moves.clear()
        for move in cancelled:
            self._credit(move)
        if cancelled:
            logger.debug("cleared %d pending move(s)", len(cancelled))
        return cancelled

    def _credit(self, move: TroopMove) -> None:
        origin = self._world.territories.get(move.source)
        if origin is not None:
            origin.troops += move.troops
