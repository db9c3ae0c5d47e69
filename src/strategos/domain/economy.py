"""Production and infrastructure accounting rules."""

from __future__ import annotations

from dataclasses import replace

from .models import Nation, NationID, World
from .rules_config import DEFAULT_RULES, RulesConfig

PERCENT = 100


def resource_income(world: World, nation_id: NationID, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Flat resource income earned from resource nodes owned by ``nation_id``."""

    nodes = sum(
        1 for territory in world.territories_owned_by(nation_id) if territory.has_resource_node
    )
    return nodes * rules.economy.resource_node_yield


def collect_production(
    world: World, rules: RulesConfig = DEFAULT_RULES
) -> tuple[dict[NationID, Nation], dict[NationID, int]]:
    """Return updated nations with resource income added, plus the gains."""

    updates: dict[NationID, Nation] = {}
    gains: dict[NationID, int] = {}
    for nation_id, nation in world.nations.items():
        gain = resource_income(world, nation_id, rules)
        gains[nation_id] = gain
        if gain:
            updates[nation_id] = replace(nation, resources=nation.resources + gain)
    return updates, gains


def infrastructure_budget(nation: Nation) -> float:
    """Production available for infrastructure after workforce and allocation splits."""

    effective_production = nation.production * (nation.workforce_split.industry / PERCENT)
    return effective_production * (nation.production_allocation.infrastructure / PERCENT)


def infrastructure_budgets(world: World) -> dict[NationID, float]:
    return {nation_id: infrastructure_budget(nation) for nation_id, nation in world.nations.items()}
