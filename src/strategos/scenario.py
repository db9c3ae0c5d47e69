"""Starting scenarios and conversion into engine-ready state.

Scenarios are static configuration: the starting roster of nations, the
territories with their initial owners and garrisons, and the adjacency graph.
They are validated with :class:`~strategos.schemas.scenario.ScenarioConfig`
before anything is built from them.
"""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path

from pydantic import ValidationError

from strategos.domain import models as dm
from strategos.domain.adjacency import AdjacencyGraph
from strategos.domain.engine import PhaseEngine
from strategos.domain.enums import Phase
from strategos.domain.rules_config import DEFAULT_RULES, RulesConfig
from strategos.schemas.scenario import ScenarioConfig

logger = logging.getLogger(__name__)


class ScenarioError(ValueError):
    """Raised when a scenario file cannot be read or validated."""


def _nation(nation_id: str, name: str, color: str) -> dict[str, object]:
    return {
        "id": nation_id,
        "name": name,
        "color": color,
        "production": 100,
        "resources": 100,
        "manpower": 100,
        "workforce_split": {"industry": 70, "military": 30},
        "production_allocation": {"supply": 50, "infrastructure": 30, "research": 20},
    }


def _territory(
    territory_id: str,
    name: str,
    owner: str | None,
    infrastructure: int,
    troops: int,
    *,
    resource_node: bool = False,
) -> dict[str, object]:
    return {
        "id": territory_id,
        "name": name,
        "owner": owner,
        "infrastructure": infrastructure,
        "troops": troops,
        "supply": 0,
        "has_resource_node": resource_node,
    }


DEFAULT_SCENARIO_DATA: dict[str, object] = {
    "name": "World War Prototype",
    "description": "Four great powers and a ring of neutral territories.",
    "starting_nation": "usa",
    "nations": [
        _nation("usa", "United States", "#3b82f6"),
        _nation("germany", "Germany", "#ef4444"),
        _nation("ussr", "Soviet Union", "#dc2626"),
        _nation("uk", "United Kingdom", "#10b981"),
    ],
    "territories": [
        _territory("USA", "United States", "usa", 40, 20, resource_node=True),
        _territory("GBR", "Great Britain", "uk", 30, 15, resource_node=True),
        _territory("IND", "India", "uk", 20, 10),
        _territory("CAN", "Canada", "uk", 25, 10, resource_node=True),
        _territory("AUS", "Australia", "uk", 20, 10),
        _territory("DEU", "Germany", "germany", 35, 25, resource_node=True),
        _territory("FRA", "France", "germany", 30, 15, resource_node=True),
        _territory("POL", "Poland", "germany", 20, 10),
        _territory("ITA", "Italy", "germany", 25, 15),
        _territory("RUS", "Soviet Union", "ussr", 35, 30, resource_node=True),
        _territory("CHN", "China", None, 15, 5),
        _territory("JPN", "Japan", None, 30, 20, resource_node=True),
        _territory("BRA", "Brazil", None, 15, 5),
        _territory("MEX", "Mexico", None, 10, 5),
        _territory("ESP", "Spain", None, 15, 5),
        _territory("TUR", "Turkey", None, 15, 5),
        _territory("EGY", "Egypt", None, 10, 5),
        _territory("ZAF", "South Africa", None, 15, 5),
    ],
    "adjacency": {
        "USA": ["MEX", "CAN"],
        "CAN": ["USA", "GBR"],
        "MEX": ["USA", "BRA"],
        "BRA": ["MEX", "ZAF"],
        "GBR": ["CAN", "FRA", "ESP"],
        "FRA": ["GBR", "DEU", "ITA", "ESP"],
        "ESP": ["GBR", "FRA", "EGY"],
        "DEU": ["FRA", "POL", "ITA"],
        "POL": ["DEU", "RUS"],
        "ITA": ["FRA", "DEU", "EGY", "TUR"],
        "RUS": ["POL", "TUR", "CHN"],
        "TUR": ["ITA", "RUS", "EGY"],
        "EGY": ["ESP", "ITA", "TUR", "ZAF"],
        "ZAF": ["BRA", "EGY", "AUS"],
        "CHN": ["RUS", "JPN", "IND"],
        "JPN": ["CHN"],
        "IND": ["CHN", "AUS"],
        "AUS": ["IND", "ZAF"],
    },
}


def default_scenario() -> ScenarioConfig:
    """Return a freshly validated copy of the bundled scenario."""

    return ScenarioConfig.model_validate(DEFAULT_SCENARIO_DATA)


def load_scenario(path: Path | str) -> ScenarioConfig:
    """Read and validate a JSON scenario file."""

    scenario_path = Path(path)
    try:
        payload = scenario_path.read_bytes()
    except OSError as exc:
        raise ScenarioError(f"cannot read scenario {scenario_path}: {exc}") from exc
    try:
        scenario = ScenarioConfig.model_validate_json(payload)
    except ValidationError as exc:
        raise ScenarioError(f"invalid scenario {scenario_path}: {exc}") from exc
    logger.info("loaded scenario %r from %s", scenario.name, scenario_path)
    return scenario


def build_world(scenario: ScenarioConfig) -> dm.World:
    """Create the initial world described by ``scenario``."""

    nations = {
        dm.NationID(config.id): dm.Nation(
            id=dm.NationID(config.id),
            name=config.name,
            color=config.color,
            production=config.production,
            resources=config.resources,
            manpower=config.manpower,
            workforce_split=dm.WorkforceSplit(**config.workforce_split.model_dump()),
            production_allocation=dm.ProductionAllocation(
                **config.production_allocation.model_dump()
            ),
        )
        for config in scenario.nations
    }
    territories = {
        dm.TerritoryID(config.id): dm.Territory(
            id=dm.TerritoryID(config.id),
            name=config.name,
            owner=dm.NationID(config.owner) if config.owner is not None else None,
            infrastructure=config.infrastructure,
            troops=config.troops,
            supply=config.supply,
            has_resource_node=config.has_resource_node,
            coordinates=config.coordinates,
        )
        for config in scenario.territories
    }
    return dm.World(
        active_nation_id=dm.NationID(scenario.starting_nation),
        nations=nations,
        territories=territories,
        phase=Phase.COMBAT_MOVE,
        turn=1,
    )


def build_graph(scenario: ScenarioConfig, *, strict: bool = False) -> AdjacencyGraph:
    graph = AdjacencyGraph.from_mapping(scenario.adjacency, strict=strict)
    graph.validate_against(dm.TerritoryID(territory.id) for territory in scenario.territories)
    return graph


def build_engine(
    scenario: ScenarioConfig | None = None,
    *,
    rules: RulesConfig = DEFAULT_RULES,
    strict_adjacency: bool = False,
) -> PhaseEngine:
    """Wire a :class:`PhaseEngine` whose reset target is ``scenario``."""

    scenario = scenario or default_scenario()
    graph = build_graph(scenario, strict=strict_adjacency)
    return PhaseEngine(partial(build_world, scenario), graph, rules=rules)
