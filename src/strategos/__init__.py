"""Strategos: a turn-based grand-strategy simulation core.

The package is an in-process library.  Build an engine with
:func:`create_engine` (or :func:`strategos.scenario.build_engine` for full
control), then drive it through the commands on
:class:`~strategos.domain.engine.PhaseEngine`.
"""

from __future__ import annotations

from strategos.config import Settings, build_rules, get_settings
from strategos.domain.engine import PhaseEngine
from strategos.scenario import build_engine, default_scenario, load_scenario


def create_engine(settings: Settings | None = None) -> PhaseEngine:
    """Build an engine from settings (environment / ``.env`` by default)."""

    settings = settings or get_settings()
    scenario = (
        load_scenario(settings.scenario_path)
        if settings.scenario_path is not None
        else default_scenario()
    )
    return build_engine(
        scenario,
        rules=build_rules(settings),
        strict_adjacency=settings.strict_adjacency,
    )


__all__ = ["PhaseEngine", "Settings", "create_engine"]
