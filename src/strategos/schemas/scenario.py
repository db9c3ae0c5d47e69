from typing import Self

from pydantic import BaseModel, Field, model_validator


class WorkforceSplitConfig(BaseModel):
    industry: int = Field(default=70, ge=0, le=100, description="% of workforce in industry")
    military: int = Field(default=30, ge=0, le=100, description="% of workforce in the military")

    @model_validator(mode="after")
    def _sums_to_100(self) -> Self:
        if self.industry + self.military != 100:
            raise ValueError("workforce split must sum to 100")
        return self


class ProductionAllocationConfig(BaseModel):
    supply: int = Field(default=50, ge=0, le=100, description="% of production to supply")
    infrastructure: int = Field(
        default=30, ge=0, le=100, description="% of production to infrastructure"
    )
    research: int = Field(default=20, ge=0, le=100, description="% of production to research")

    @model_validator(mode="after")
    def _sums_to_100(self) -> Self:
        if self.supply + self.infrastructure + self.research != 100:
            raise ValueError("production allocation must sum to 100")
        return self


class NationConfig(BaseModel):
    id: str = Field(..., min_length=1, description="Unique nation identifier")
    name: str = Field(..., min_length=1, description="Display name")
    color: str = Field(..., description="Hex color code for map display")
    production: int = Field(default=100, ge=0, description="Output per turn")
    resources: int = Field(default=100, ge=0, description="Stockpile of materials")
    manpower: int = Field(default=100, ge=0, description="Available workers/soldiers")
    workforce_split: WorkforceSplitConfig = Field(default_factory=WorkforceSplitConfig)
    production_allocation: ProductionAllocationConfig = Field(
        default_factory=ProductionAllocationConfig
    )


class TerritoryConfig(BaseModel):
    id: str = Field(..., min_length=1, description="Unique territory identifier")
    name: str = Field(..., min_length=1, description="Display name")
    owner: str | None = Field(None, description="Owning nation id, or null when neutral")
    infrastructure: int = Field(..., ge=0, description="Supply throughput ceiling")
    troops: int = Field(default=0, ge=0, description="Garrison strength")
    supply: int = Field(default=0, ge=0, description="Supply received this turn")
    has_resource_node: bool = Field(default=False, description="Grants resources each turn")
    coordinates: tuple[float, float] | None = Field(None, description="Map display anchor")

    @model_validator(mode="after")
    def _supply_within_infrastructure(self) -> Self:
        if self.supply > self.infrastructure:
            raise ValueError(f"territory {self.id}: supply exceeds infrastructure")
        return self


class ScenarioConfig(BaseModel):
    name: str = Field(..., min_length=1, description="Scenario name")
    description: str | None = Field(None, description="Free-form scenario description")
    starting_nation: str = Field(..., description="Nation controlled when the game starts")
    nations: list[NationConfig] = Field(..., min_length=1)
    territories: list[TerritoryConfig] = Field(default_factory=list)
    adjacency: dict[str, list[str]] = Field(
        default_factory=dict, description="Territory id -> neighbouring territory ids"
    )

    @model_validator(mode="after")
    def _references_resolve(self) -> Self:
        nation_ids = [nation.id for nation in self.nations]
        territory_ids = [territory.id for territory in self.territories]
        if len(set(nation_ids)) != len(nation_ids):
            raise ValueError("duplicate nation ids")
        if len(set(territory_ids)) != len(territory_ids):
            raise ValueError("duplicate territory ids")
        if self.starting_nation not in nation_ids:
            raise ValueError(f"starting nation {self.starting_nation} is not defined")
        for territory in self.territories:
            if territory.owner is not None and territory.owner not in nation_ids:
                raise ValueError(f"territory {territory.id} owned by unknown nation")
        known = set(territory_ids)
        for key, neighbours in self.adjacency.items():
            unknown = ({key} | set(neighbours)) - known
            if unknown:
                names = ", ".join(sorted(unknown))
                raise ValueError(f"adjacency for {key} names unknown territories: {names}")
        return self
