"""Declarative rule configuration for the phase rules."""

from __future__ import annotations

from dataclasses import dataclass

from .enums import ConsumptionPolicy


@dataclass(frozen=True, slots=True)
class EconomyRules:
    """Production-phase constants."""

    resource_node_yield: int = 10


@dataclass(frozen=True, slots=True)
class CombatRules:
    """Parameters for battle resolution."""

    undersupplied_weight: float = 0.5
    min_capture_survivors: int = 1


@dataclass(frozen=True, slots=True)
class LogisticsRules:
    """Supply and upkeep settings."""

    consumption_policy: ConsumptionPolicy = ConsumptionPolicy.EFFECTIVENESS_PENALTY


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container for all subsystems."""

    economy: EconomyRules = EconomyRules()
    combat: CombatRules = CombatRules()
    logistics: LogisticsRules = LogisticsRules()

    @property
    def combat_penalises_undersupply(self) -> bool:
        return self.logistics.consumption_policy == ConsumptionPolicy.EFFECTIVENESS_PENALTY


DEFAULT_RULES = RulesConfig()
