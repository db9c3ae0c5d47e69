"""Lightweight configuration for the Strategos engine."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from strategos.domain.enums import ConsumptionPolicy
from strategos.domain.rules_config import CombatRules, EconomyRules, LogisticsRules, RulesConfig


class Settings(BaseSettings):
    """Minimal application settings."""

    model_config = SettingsConfigDict(
        env_prefix="STRATEGOS_", env_file=".env", env_file_encoding="utf-8"
    )

    scenario_path: Path | None = Field(
        default=None, description="JSON scenario to start from; the bundled one when unset"
    )
    consumption_policy: ConsumptionPolicy = Field(
        default=ConsumptionPolicy.EFFECTIVENESS_PENALTY,
        description="How undersupplied garrisons are penalised",
    )
    resource_node_yield: int = Field(
        default=10, ge=0, description="Resources granted per owned resource node each turn"
    )
    undersupplied_weight: float = Field(
        default=0.5,
        gt=0.0,
        le=1.0,
        description="Combat weight of troops beyond the supply available to them",
    )
    strict_adjacency: bool = Field(
        default=False,
        description="Reject one-sided adjacency entries instead of mirroring them",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()


def build_rules(settings: Settings) -> RulesConfig:
    """Translate settings into the rule configuration used by the engine."""

    return RulesConfig(
        economy=EconomyRules(resource_node_yield=settings.resource_node_yield),
        combat=CombatRules(undersupplied_weight=settings.undersupplied_weight),
        logistics=LogisticsRules(consumption_policy=settings.consumption_policy),
    )
