"""Static territory adjacency graph."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from .models import TerritoryID

logger = logging.getLogger(__name__)


class AdjacencyError(ValueError):
    """Raised when adjacency data cannot form a valid symmetric graph."""


class AdjacencyGraph:
    """Symmetric, load-time-fixed neighbour relation between territories.

    The graph is always stored symmetrically: :meth:`from_mapping` either
    mirrors one-sided entries or rejects them when ``strict`` is set.
    """

    __slots__ = ("_neighbors",)

    def __init__(self, neighbors: Mapping[TerritoryID, frozenset[TerritoryID]]) -> None:
        self._neighbors: dict[TerritoryID, frozenset[TerritoryID]] = dict(neighbors)

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[str, Iterable[str]],
        *,
        strict: bool = False,
    ) -> AdjacencyGraph:
        """Build a graph from ``{territory: [neighbours, ...]}`` data."""

        declared: dict[TerritoryID, set[TerritoryID]] = {
            TerritoryID(key): {TerritoryID(other) for other in values}
            for key, values in mapping.items()
        }

        edges: dict[TerritoryID, set[TerritoryID]] = {key: set() for key in declared}
        missing: list[tuple[TerritoryID, TerritoryID]] = []
        for territory, others in declared.items():
            for other in others:
                if other == territory:
                    raise AdjacencyError(f"territory {territory} lists itself as a neighbour")
                if territory not in declared.get(other, set()):
                    missing.append((other, territory))
                edges[territory].add(other)
                edges.setdefault(other, set()).add(territory)

        if missing:
            if strict:
                pairs = ", ".join(f"{a}->{b}" for a, b in sorted(missing))
                raise AdjacencyError(f"asymmetric adjacency entries: {pairs}")
            for a, b in sorted(missing):
                logger.warning("adjacency %s->%s missing; mirrored from %s->%s", a, b, b, a)

        return cls({key: frozenset(values) for key, values in edges.items()})

    def are_adjacent(self, a: TerritoryID, b: TerritoryID) -> bool:
        return b in self._neighbors.get(a, frozenset())

    def neighbors_of(self, territory: TerritoryID) -> frozenset[TerritoryID]:
        return self._neighbors.get(territory, frozenset())

    def territories(self) -> frozenset[TerritoryID]:
        return frozenset(self._neighbors)

    def validate_against(self, territory_ids: Iterable[TerritoryID]) -> None:
        """Raise :class:`AdjacencyError` if an edge names an unknown territory."""

        known = set(territory_ids)
        unknown = sorted(self.territories() - known)
        if unknown:
            raise AdjacencyError(f"adjacency references unknown territories: {', '.join(unknown)}")

    def to_mapping(self) -> dict[str, list[str]]:
        """Return a JSON-friendly copy of the graph with sorted neighbour lists."""

        return {
            str(territory): sorted(str(other) for other in others)
            for territory, others in sorted(self._neighbors.items())
        }

    def __len__(self) -> int:
        return len(self._neighbors)

    def __contains__(self, territory: object) -> bool:
        return territory in self._neighbors
