"""Dataclasses describing the Strategos world.

Every record is a slotted dataclass so the rules layer can work on plain
in-memory objects.  Phase rules never mutate these records in place; they
build replacements with :func:`dataclasses.replace` and hand them back to the
engine inside a delta.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NewType

from .enums import Phase

# --- Strongly typed identifiers -------------------------------------------------

NationID = NewType("NationID", str)
TerritoryID = NewType("TerritoryID", str)
MoveID = NewType("MoveID", str)


# --- Core dataclasses -----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class WorkforceSplit:
    """Percentage of the workforce assigned to industry vs. the military."""

    industry: int = 70
    military: int = 30

    @property
    def total(self) -> int:
        return self.industry + self.military


@dataclass(frozen=True, slots=True)
class ProductionAllocation:
    """Percentage of production spent on supply, infrastructure and research."""

    supply: int = 50
    infrastructure: int = 30
    research: int = 20

    @property
    def total(self) -> int:
        return self.supply + self.infrastructure + self.research


@dataclass(slots=True)
class Nation:
    """Player-controlled country with economic stockpiles."""

    id: NationID
    name: str
    color: str
    production: int = 0
    resources: int = 0
    manpower: int = 0
    workforce_split: WorkforceSplit = field(default_factory=WorkforceSplit)
    production_allocation: ProductionAllocation = field(default_factory=ProductionAllocation)


@dataclass(slots=True)
class Territory:
    """Controllable region holding a garrison."""

    id: TerritoryID
    name: str
    owner: NationID | None
    infrastructure: int
    troops: int
    supply: int = 0
    has_resource_node: bool = False
    coordinates: tuple[float, float] | None = None


@dataclass(frozen=True, slots=True)
class TroopMove:
    """Committed but unresolved movement order."""

    id: MoveID
    source: TerritoryID
    destination: TerritoryID
    troops: int
    nation_id: NationID | None = None


@dataclass(slots=True)
class World:
    """Root aggregate holding the full simulation state."""

    active_nation_id: NationID
    nations: dict[NationID, Nation] = field(default_factory=dict)
    territories: dict[TerritoryID, Territory] = field(default_factory=dict)
    phase: Phase = Phase.COMBAT_MOVE
    turn: int = 1
    selected_territory_id: TerritoryID | None = None
    pending_moves: list[TroopMove] = field(default_factory=list)
    move_sequence: int = 0

    @property
    def active_nation(self) -> Nation:
        return self.nations[self.active_nation_id]

    def territories_owned_by(self, nation_id: NationID) -> list[Territory]:
        """Return every territory currently controlled by ``nation_id``."""

        return [
            territory for territory in self.territories.values() if territory.owner == nation_id
        ]
