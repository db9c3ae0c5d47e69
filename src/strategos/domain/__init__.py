"""Domain model and rules for Strategos.

This package hosts every game rule.  It exposes:

* Dataclasses describing nations, territories and moves (see :mod:`models`).
* Enumerations and strongly-typed identifiers used across the rules layer.
* Rule configuration objects (see :mod:`rules_config`).
* Pure phase-exit rules (see :mod:`phases`, :mod:`combat`, :mod:`economy`,
  :mod:`supply`) and the :mod:`engine` that applies them.
"""

from . import (
    adjacency,
    combat,
    commands,
    economy,
    engine,
    enums,
    ledger,
    models,
    phases,
    rules_config,
    supply,
)

__all__ = [
    "adjacency",
    "combat",
    "commands",
    "economy",
    "engine",
    "enums",
    "ledger",
    "models",
    "phases",
    "rules_config",
    "supply",
]
