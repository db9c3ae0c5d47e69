from .scenario import (
    NationConfig,
    ProductionAllocationConfig,
    ScenarioConfig,
    TerritoryConfig,
    WorkforceSplitConfig,
)

__all__ = [
    "NationConfig",
    "ProductionAllocationConfig",
    "ScenarioConfig",
    "TerritoryConfig",
    "WorkforceSplitConfig",
]
