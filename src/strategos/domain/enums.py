"""Enumerations shared across the Strategos rules layer."""

from __future__ import annotations

from enum import StrEnum


class Phase(StrEnum):
    """The eight stages of a turn, in cycle order."""

    COMBAT_MOVE = "combat_move"
    COMBAT = "combat"
    NONCOMBAT_MOVE = "noncombat_move"
    PRODUCTION = "production"
    ALLOCATION = "allocation"
    SUPPLY_DISTRIBUTION = "supply_distribution"
    CONSUMPTION = "consumption"
    INFRASTRUCTURE_UPDATE = "infrastructure_update"


PHASE_SEQUENCE: tuple[Phase, ...] = tuple(Phase)

PHASE_DISPLAY_NAMES: dict[Phase, str] = {
    Phase.COMBAT_MOVE: "Combat Move",
    Phase.COMBAT: "Combat Resolution",
    Phase.NONCOMBAT_MOVE: "Non-Combat Move",
    Phase.PRODUCTION: "Production",
    Phase.ALLOCATION: "Allocation",
    Phase.SUPPLY_DISTRIBUTION: "Supply Distribution",
    Phase.CONSUMPTION: "Consumption",
    Phase.INFRASTRUCTURE_UPDATE: "Infrastructure Update",
}


class ConsumptionPolicy(StrEnum):
    """How undersupplied garrisons are penalised."""

    ATTRITION = "attrition"
    EFFECTIVENESS_PENALTY = "effectiveness_penalty"


class BattleOutcome(StrEnum):
    """Result of a single engagement."""

    CAPTURED = "captured"
    HELD = "held"
    MUTUAL_DESTRUCTION = "mutual_destruction"


class CommandError(StrEnum):
    """Reasons a command can be rejected."""

    INVALID_SOURCE = "invalid_source"
    UNKNOWN_TERRITORY = "unknown_territory"
    UNKNOWN_NATION = "unknown_nation"
    UNKNOWN_MOVE = "unknown_move"
    INSUFFICIENT_TROOPS = "insufficient_troops"
    NOT_ADJACENT = "not_adjacent"
    INVALID_TROOP_COUNT = "invalid_troop_count"
    MIXED_ATTACKERS = "mixed_attackers"
    HOSTILE_DESTINATION = "hostile_destination"
    NEGATIVE_VALUE = "negative_value"
    SUPPLY_EXCEEDS_INFRASTRUCTURE = "supply_exceeds_infrastructure"
    INVALID_SPLIT = "invalid_split"
