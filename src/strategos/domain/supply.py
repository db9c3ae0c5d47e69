"""Supply capping and consumption rules."""

from __future__ import annotations

from dataclasses import replace

from .enums import ConsumptionPolicy
from .models import Territory, TerritoryID, World
from .rules_config import DEFAULT_RULES, RulesConfig


def cap_supply(territory: Territory, amount: int) -> int:
    """Supply a territory can actually receive; never more than its infrastructure."""

    return min(amount, territory.infrastructure)


def unsupplied_troops(territory: Territory) -> int:
    return max(0, territory.troops - territory.supply)


def apply_attrition(
    world: World, rules: RulesConfig = DEFAULT_RULES
) -> tuple[dict[TerritoryID, Territory], dict[TerritoryID, int]]:
    """Remove unsupplied troops from every garrison.

    Only the attrition policy changes state; under the effectiveness-penalty
    policy undersupply is paid for at combat time instead, and this returns
    no changes.
    """

    if rules.logistics.consumption_policy != ConsumptionPolicy.ATTRITION:
        return {}, {}

    updates: dict[TerritoryID, Territory] = {}
    losses: dict[TerritoryID, int] = {}
    for territory_id, territory in world.territories.items():
        lost = unsupplied_troops(territory)
        if lost:
            updates[territory_id] = replace(territory, troops=max(0, territory.troops - lost))
            losses[territory_id] = lost
    return updates, losses
