"""Battle resolution rules."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, replace

from .enums import BattleOutcome
from .models import MoveID, NationID, Territory, TerritoryID, TroopMove, World
from .rules_config import DEFAULT_RULES, RulesConfig


@dataclass(frozen=True, slots=True)
class EngagementResult:
    """Numeric outcome of one attacker-vs-defender engagement."""

    outcome: BattleOutcome
    survivors: int


@dataclass(frozen=True, slots=True)
class BattleReport:
    """Summary of the fighting at one destination."""

    territory_id: TerritoryID
    attacker_nation_id: NationID | None
    previous_owner: NationID | None
    new_owner: NationID | None
    attacker_troops: int
    defender_troops: int
    attacker_strength: float
    defender_strength: float
    outcome: BattleOutcome
    survivors: int
    move_ids: tuple[MoveID, ...]


@dataclass(frozen=True, slots=True)
class Reinforcement:
    """Troops that arrived at a territory without a fight."""

    territory_id: TerritoryID
    troops: int
    move_ids: tuple[MoveID, ...]


def effective_strength(
    troops: int,
    supply: int,
    *,
    undersupplied_weight: float = DEFAULT_RULES.combat.undersupplied_weight,
) -> float:
    """Combat power of ``troops`` given the supply available to them.

    Supplied troops fight at full weight; the shortfall fights at
    ``undersupplied_weight``.
    """

    if supply >= troops:
        return float(troops)
    shortfall = troops - supply
    return (troops - shortfall) + shortfall * undersupplied_weight


def resolve_engagement(
    attacker_strength: float,
    attacker_troops: int,
    defender_strength: float,
    defender_troops: int,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> EngagementResult:
    """Decide an engagement and the surviving garrison of the winner."""

    if attacker_strength > defender_strength:
        difference = attacker_strength - defender_strength
        survivors = math.floor(difference * (attacker_troops / attacker_strength))
        return EngagementResult(
            BattleOutcome.CAPTURED, max(rules.combat.min_capture_survivors, survivors)
        )
    if defender_strength > attacker_strength:
        difference = defender_strength - attacker_strength
        survivors = math.floor(difference * (defender_troops / defender_strength))
        return EngagementResult(BattleOutcome.HELD, max(0, survivors))
    return EngagementResult(BattleOutcome.MUTUAL_DESTRUCTION, 0)


def resolve_combat(
    world: World,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> tuple[dict[TerritoryID, Territory], list[BattleReport], list[Reinforcement]]:
    """Resolve every pending move as an attack on its destination.

    Moves are grouped by destination.  Moves by the destination's owner join
    the defending garrison before the battle; the remaining moves attack.
    Returns replacement territories plus one report per battle and per
    reinforcement; ``world`` is left untouched.
    """

    updates: dict[TerritoryID, Territory] = {}
    battles: list[BattleReport] = []
    reinforcements: list[Reinforcement] = []

    for destination, moves in _group_by_destination(world.pending_moves).items():
        territory = world.territories[destination]
        friendly = [move for move in moves if move.nation_id == territory.owner]
        hostile = [move for move in moves if move.nation_id != territory.owner]

        defender_troops = territory.troops
        defender_strength = _garrison_strength(territory, rules)
        if friendly:
            arriving = sum(move.troops for move in friendly)
            defender_troops += arriving
            defender_strength += sum(_move_strength(world, move, rules) for move in friendly)
            reinforcements.append(
                Reinforcement(destination, arriving, tuple(move.id for move in friendly))
            )
        if not hostile:
            updates[destination] = replace(territory, troops=defender_troops)
            continue

        attacker_nation = hostile[0].nation_id
        raw_attackers = sum(move.troops for move in hostile)
        move_ids = tuple(move.id for move in hostile)
        attacker_strength = sum(_move_strength(world, move, rules) for move in hostile)
        result = resolve_engagement(
            attacker_strength,
            raw_attackers,
            defender_strength,
            defender_troops,
            rules=rules,
        )

        new_owner = attacker_nation if result.outcome == BattleOutcome.CAPTURED else territory.owner
        updates[destination] = replace(territory, owner=new_owner, troops=result.survivors)
        battles.append(
            BattleReport(
                territory_id=destination,
                attacker_nation_id=attacker_nation,
                previous_owner=territory.owner,
                new_owner=new_owner,
                attacker_troops=raw_attackers,
                defender_troops=defender_troops,
                attacker_strength=attacker_strength,
                defender_strength=defender_strength,
                outcome=result.outcome,
                survivors=result.survivors,
                move_ids=move_ids,
            )
        )

    return updates, battles, reinforcements


def _group_by_destination(moves: Sequence[TroopMove]) -> dict[TerritoryID, list[TroopMove]]:
    grouped: dict[TerritoryID, list[TroopMove]] = {}
    for move in moves:
        grouped.setdefault(move.destination, []).append(move)
    return grouped


def _move_strength(world: World, move: TroopMove, rules: RulesConfig) -> float:
    if not rules.combat_penalises_undersupply:
        return float(move.troops)
    origin = world.territories.get(move.source)
    supply = origin.supply if origin is not None else 0
    return effective_strength(
        move.troops, supply, undersupplied_weight=rules.combat.undersupplied_weight
    )


def _garrison_strength(territory: Territory, rules: RulesConfig) -> float:
    if not rules.combat_penalises_undersupply:
        return float(territory.troops)
    return effective_strength(
        territory.troops,
        territory.supply,
        undersupplied_weight=rules.combat.undersupplied_weight,
    )
