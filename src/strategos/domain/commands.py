"""Typed edit commands and command outcomes.

Territory and nation edits are a closed set of single-field update variants.
Each variant is checked against the running copy of the record before the
engine installs it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any, ClassVar

from pydantic import TypeAdapter

from .enums import CommandError
from .models import (
    Nation,
    NationID,
    ProductionAllocation,
    Territory,
    TroopMove,
    World,
    WorkforceSplit,
)

PERCENT_TOTAL = 100


class CommandRejected(Exception):
    """Raised by validation helpers; converted to a failed result by the engine."""

    def __init__(self, error: CommandError, detail: str) -> None:
        super().__init__(detail)
        self.error = error
        self.detail = detail


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of a command issued against the engine."""

    ok: bool
    error: CommandError | None = None
    detail: str | None = None
    move: TroopMove | None = None

    @classmethod
    def success(cls, detail: str | None = None, *, move: TroopMove | None = None) -> CommandResult:
        return cls(ok=True, detail=detail, move=move)

    @classmethod
    def failure(cls, error: CommandError, detail: str) -> CommandResult:
        return cls(ok=False, error=error, detail=detail)

    @classmethod
    def from_rejection(cls, exc: CommandRejected) -> CommandResult:
        return cls.failure(exc.error, exc.detail)

    def __bool__(self) -> bool:
        return self.ok


# ---------------------------------------------------------------------------
# Territory updates


@dataclass(frozen=True, slots=True)
class SetTerritoryName:
    field: ClassVar[str] = "name"
    value: str


@dataclass(frozen=True, slots=True)
class SetOwner:
    field: ClassVar[str] = "owner"
    value: NationID | None


@dataclass(frozen=True, slots=True)
class SetInfrastructure:
    field: ClassVar[str] = "infrastructure"
    value: int


@dataclass(frozen=True, slots=True)
class SetTroops:
    field: ClassVar[str] = "troops"
    value: int


@dataclass(frozen=True, slots=True)
class SetSupply:
    field: ClassVar[str] = "supply"
    value: int


@dataclass(frozen=True, slots=True)
class SetResourceNode:
    field: ClassVar[str] = "has_resource_node"
    value: bool


TerritoryUpdate = (
    SetTerritoryName | SetOwner | SetInfrastructure | SetTroops | SetSupply | SetResourceNode
)


# ---------------------------------------------------------------------------
# Nation updates


@dataclass(frozen=True, slots=True)
class SetNationName:
    field: ClassVar[str] = "name"
    value: str


@dataclass(frozen=True, slots=True)
class SetColor:
    field: ClassVar[str] = "color"
    value: str


@dataclass(frozen=True, slots=True)
class SetProduction:
    field: ClassVar[str] = "production"
    value: int


@dataclass(frozen=True, slots=True)
class SetResources:
    field: ClassVar[str] = "resources"
    value: int


@dataclass(frozen=True, slots=True)
class SetManpower:
    field: ClassVar[str] = "manpower"
    value: int


@dataclass(frozen=True, slots=True)
class SetWorkforceSplit:
    field: ClassVar[str] = "workforce_split"
    value: WorkforceSplit


@dataclass(frozen=True, slots=True)
class SetProductionAllocation:
    field: ClassVar[str] = "production_allocation"
    value: ProductionAllocation


NationUpdate = (
    SetNationName
    | SetColor
    | SetProduction
    | SetResources
    | SetManpower
    | SetWorkforceSplit
    | SetProductionAllocation
)

_TERRITORY_VARIANTS: dict[str, type] = {
    variant.field: variant
    for variant in (
        SetTerritoryName,
        SetOwner,
        SetInfrastructure,
        SetTroops,
        SetSupply,
        SetResourceNode,
    )
}

_NATION_VARIANTS: dict[str, type] = {
    variant.field: variant
    for variant in (
        SetNationName,
        SetColor,
        SetProduction,
        SetResources,
        SetManpower,
        SetWorkforceSplit,
        SetProductionAllocation,
    )
}


def territory_updates_from_fields(fields: Mapping[str, Any]) -> list[TerritoryUpdate]:
    """Convert a partial field mapping into typed territory updates.

    Values are coerced with pydantic, so ``{"troops": "12"}`` becomes
    ``SetTroops(12)``.  Unknown field names raise ``ValueError`` and
    ill-typed values raise ``pydantic.ValidationError``.
    """

    return _updates_from_fields(fields, _TERRITORY_VARIANTS, "territory")


def nation_updates_from_fields(fields: Mapping[str, Any]) -> list[NationUpdate]:
    """Convert a partial field mapping into typed nation updates."""

    return _updates_from_fields(fields, _NATION_VARIANTS, "nation")


def _updates_from_fields(
    fields: Mapping[str, Any], variants: dict[str, type], kind: str
) -> list[Any]:
    updates: list[Any] = []
    for name, value in fields.items():
        variant = variants.get(name)
        if variant is None:
            raise ValueError(f"{kind} has no editable field {name!r}")
        updates.append(TypeAdapter(variant).validate_python({"value": value}))
    return updates


# ---------------------------------------------------------------------------
# Application


def apply_territory_updates(
    world: World, territory: Territory, updates: Iterable[TerritoryUpdate]
) -> Territory:
    """Return a copy of ``territory`` with every update applied.

    Updates are applied in order against the running copy, so
    ``[SetInfrastructure(50), SetSupply(40)]`` is valid even when the current
    infrastructure is lower than 40.  Lowering infrastructure below the
    current supply pulls supply down with it.
    """

    updated = replace(territory)
    for update in updates:
        if isinstance(update, SetTerritoryName):
            updated.name = update.value
        elif isinstance(update, SetOwner):
            if update.value is not None and update.value not in world.nations:
                raise CommandRejected(
                    CommandError.UNKNOWN_NATION, f"nation {update.value} does not exist"
                )
            updated.owner = update.value
        elif isinstance(update, SetInfrastructure):
            _require_non_negative("infrastructure", update.value)
            updated.infrastructure = update.value
            updated.supply = min(updated.supply, update.value)
        elif isinstance(update, SetTroops):
            _require_non_negative("troops", update.value)
            updated.troops = update.value
        elif isinstance(update, SetSupply):
            _require_non_negative("supply", update.value)
            if update.value > updated.infrastructure:
                raise CommandRejected(
                    CommandError.SUPPLY_EXCEEDS_INFRASTRUCTURE,
                    f"supply {update.value} exceeds infrastructure {updated.infrastructure}",
                )
            updated.supply = update.value
        elif isinstance(update, SetResourceNode):
            updated.has_resource_node = update.value
        else:
            raise TypeError(f"unsupported territory update: {update!r}")
    return updated


def apply_nation_updates(nation: Nation, updates: Iterable[NationUpdate]) -> Nation:
    """Return a copy of ``nation`` with every update applied."""

    updated = replace(nation)
    for update in updates:
        if isinstance(update, SetNationName):
            updated.name = update.value
        elif isinstance(update, SetColor):
            updated.color = update.value
        elif isinstance(update, SetProduction | SetResources | SetManpower):
            _require_non_negative(update.field, update.value)
            setattr(updated, update.field, update.value)
        elif isinstance(update, SetWorkforceSplit):
            _require_split(update.field, (update.value.industry, update.value.military))
            updated.workforce_split = update.value
        elif isinstance(update, SetProductionAllocation):
            allocation = update.value
            _require_split(
                update.field,
                (allocation.supply, allocation.infrastructure, allocation.research),
            )
            updated.production_allocation = allocation
        else:
            raise TypeError(f"unsupported nation update: {update!r}")
    return updated


def _require_non_negative(name: str, value: int) -> None:
    if value < 0:
        raise CommandRejected(CommandError.NEGATIVE_VALUE, f"{name} cannot be negative ({value})")


def _require_split(name: str, parts: tuple[int, ...]) -> None:
    if any(part < 0 for part in parts):
        raise CommandRejected(CommandError.INVALID_SPLIT, f"{name} has a negative share")
    if sum(parts) != PERCENT_TOTAL:
        raise CommandRejected(
            CommandError.INVALID_SPLIT,
            f"{name} must sum to {PERCENT_TOTAL}, got {sum(parts)}",
        )
