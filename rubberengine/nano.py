"""Nano-automation: how allocated nanobots boost producers and replicate.

Boost nanobots are spent greedily over priority groups. A group gathers the
owned tiers (of the producer type an allocation feeds) that share the same
initial cost; the most expensive group is served first. A group's demand is
the sum of count * nanoswarm_threshold over its tiers, and every member gets
the same boost, covered / demand, in [0, 1].
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rubberengine._types import NANO_TARGET_TYPES, NanoTarget
from rubberengine.aggregator import owned_tiers

if TYPE_CHECKING:
    from rubberengine.catalog import Catalog
    from rubberengine.state import GameState

TierKey = tuple[str, int]


@dataclass(frozen=True)
class NanoGroup:
    cost: float
    members: tuple[TierKey, ...]
    demand: float


def priority_groups(
    catalog: Catalog, state: GameState, target: NanoTarget
) -> list[NanoGroup]:
    """Build the ordered (cost, candidate-tiers) groups for an allocation."""
    producer_type = NANO_TARGET_TYPES.get(target)
    if producer_type is None:
        return []

    by_cost: dict[float, tuple[list[TierKey], float]] = {}
    for family, index, tier, count in owned_tiers(catalog, state):
        if family.type != producer_type or not tier.nanoswarm_threshold:
            continue
        members, demand = by_cost.get(tier.initial_cost, ([], 0.0))
        members.append((family.id, index))
        by_cost[tier.initial_cost] = (members, demand + count * tier.nanoswarm_threshold)

    return [
        NanoGroup(cost=cost, members=tuple(members), demand=demand)
        for cost, (members, demand) in sorted(
            by_cost.items(), key=lambda item: item[0], reverse=True
        )
    ]


def allocate(groups: list[NanoGroup], available: float) -> dict[TierKey, float]:
    """Spend *available* nanobots over *groups* in order. Returns boost per tier."""
    boosts: dict[TierKey, float] = {}
    remaining = available
    for group in groups:
        if remaining <= 0:
            break
        if group.demand <= 0:
            continue
        covered = min(remaining, group.demand)
        efficiency = covered / group.demand
        for key in group.members:
            boosts[key] = efficiency
        remaining -= covered
    return boosts


def allocated_nanobots(state: GameState, target: NanoTarget) -> float:
    if state.nanobot_count <= 0:
        return 0.0
    return max(0.0, state.nanobot_count * state.nano_allocation.fraction(target))


def family_boosts(
    catalog: Catalog, state: GameState, target: NanoTarget
) -> dict[TierKey, float]:
    available = allocated_nanobots(state, target)
    if available <= 0:
        return {}
    return allocate(priority_groups(catalog, state, target), available)


def nanobot_production(catalog: Catalog, state: GameState) -> float:
    """Nanobots built by the factories this tick, before budget clamping."""
    c = catalog.constants
    factories = state.nanobot_factory_count
    denominator = factories * c.nanobot_factory_threshold

    efficiency = 0.0
    if denominator > 0:
        efficiency = allocated_nanobots(state, NanoTarget.NANOBOTS) / denominator

    return factories * c.nanobot_base_rate * (1 + efficiency)
