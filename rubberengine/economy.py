"""Read-only quantities derived from the current state and active effects."""
from __future__ import annotations

import math
import sys
from typing import TYPE_CHECKING, Iterable

from rubberengine._types import (
    LimitType,
    NanoTarget,
    ProducerType,
    ResourceType,
    floor_finite,
)
from rubberengine.aggregator import get_effects, owned_tiers
from rubberengine.cost_scaling import CostScaling
from rubberengine.effect import (
    DemandMarketing,
    EffectDef,
    EffectType,
    InputEfficiency,
    ProductionMultiplier,
    ProductionMultiplierAdditive,
    ResourceLimit,
    StorageCost,
)
from rubberengine.nano import family_boosts

if TYPE_CHECKING:
    from rubberengine.catalog import Catalog, ProducerFamily, Tier
    from rubberengine.state import GameState

# Finite stand-in for an unlimited resource budget so floor() stays defined.
UNLIMITED_RESOURCES = sys.float_info.max

_NANO_TARGET_BY_TYPE = {
    ProducerType.RUBBER_SOURCE: NanoTarget.RUBBER_MACHINES,
    ProducerType.MACHINE: NanoTarget.BANDER_MACHINES,
    ProducerType.PRODUCTION_LINE: NanoTarget.PRODUCTION_LINES,
}


# ── Multipliers ──────────────────────────────────────────────────────


def production_multiplier(
    family: ProducerFamily,
    multipliers: Iterable[EffectDef],
    additives: Iterable[EffectDef],
    base: float = 1.0,
) -> float:
    """Fold multiplicative effects first, then sum in additive addends."""
    multiplier = base
    for eff in multipliers:
        if isinstance(eff, ProductionMultiplier) and eff.target.matches(family):
            multiplier *= eff.multiplier
    for eff in additives:
        if isinstance(eff, ProductionMultiplierAdditive) and eff.target.matches(family):
            multiplier += eff.addend
    return multiplier


def input_ratio(catalog: Catalog, state: GameState, family: ProducerFamily) -> float:
    """Rubber consumed per rubberband for producers of *family*."""
    ratio = catalog.constants.default_input_ratio
    for eff in get_effects(catalog, state, EffectType.INPUT_EFFICIENCY):
        if isinstance(eff, InputEfficiency) and eff.target.matches(family):
            ratio *= eff.ratio_multiplier
    return ratio


def manual_input_ratio(catalog: Catalog, state: GameState) -> float:
    """Rubber per rubberband when banding by hand; only machine-wide effects apply."""
    ratio = catalog.constants.default_input_ratio
    for eff in get_effects(catalog, state, EffectType.INPUT_EFFICIENCY):
        if isinstance(eff, InputEfficiency) and eff.target.producer_type is ProducerType.MACHINE:
            ratio *= eff.ratio_multiplier
    return ratio


def space_cost_multiplier(catalog: Catalog, state: GameState) -> float:
    multiplier = 1.0
    for eff in get_effects(catalog, state, EffectType.STORAGE_COST):
        if isinstance(eff, StorageCost):
            multiplier *= eff.multiplier
    return multiplier


# ── Demand & marketing ───────────────────────────────────────────────


def calculate_demand(
    catalog: Catalog, state: GameState, price: float | None = None
) -> int | float:
    """Units the market absorbs per tick at *price* (default: current price)."""
    c = catalog.constants
    if price is None:
        price = state.rubberband_price

    base = c.demand_base
    sensitivity = 1.0
    demand_multiplier = 1.0
    for eff in get_effects(catalog, state, EffectType.DEMAND_MARKETING):
        if not isinstance(eff, DemandMarketing):
            continue
        if eff.marketing_effectiveness_multiplier is not None:
            base *= eff.marketing_effectiveness_multiplier
        if eff.price_sensitivity_multiplier is not None:
            sensitivity *= eff.price_sensitivity_multiplier
        if eff.demand_multiplier is not None:
            demand_multiplier *= eff.demand_multiplier

    return floor_finite(
        math.pow(state.marketing_level, base)
        * c.demand_scale
        * math.exp(-price / sensitivity)
        * demand_multiplier
    )


def marketing_decay_interval(catalog: Catalog, state: GameState) -> float:
    """Ticks between marketing decay steps; 0 means decay is disabled."""
    multiplier = 1.0
    for eff in get_effects(catalog, state, EffectType.DEMAND_MARKETING):
        if isinstance(eff, DemandMarketing) and eff.marketing_decay_multiplier is not None:
            multiplier *= eff.marketing_decay_multiplier
    if multiplier == 0:
        return 0
    return catalog.constants.marketing_decay_interval * state.marketing_level * multiplier


def marketing_cost(catalog: Catalog, state: GameState) -> float:
    c = catalog.constants
    return c.marketing_base_cost * math.pow(c.marketing_cost_factor, state.marketing_level)


# ── Limits ───────────────────────────────────────────────────────────


def limit_types(catalog: Catalog, state: GameState) -> set[LimitType]:
    return {
        LimitType(eff.limit_type)
        for eff in get_effects(catalog, state, EffectType.RESOURCE_LIMIT)
        if isinstance(eff, ResourceLimit)
    }


def active_limit(catalog: Catalog, state: GameState) -> LimitType:
    """Highest unlocked resource-limit tier: infinite > universe > earth > oil."""
    limits = limit_types(catalog, state)
    for limit in (LimitType.INFINITE, LimitType.UNIVERSE, LimitType.EARTH):
        if limit in limits:
            return limit
    return LimitType.OIL


def resource_limit(catalog: Catalog, state: GameState) -> float:
    c = catalog.constants
    return {
        LimitType.INFINITE: UNLIMITED_RESOURCES,
        LimitType.UNIVERSE: c.universe_resource_limit,
        LimitType.EARTH: c.earth_resource_limit,
        LimitType.OIL: c.oil_reserves_limit,
    }[active_limit(catalog, state)]


def remaining_resources(catalog: Catalog, state: GameState) -> float:
    return max(0.0, resource_limit(catalog, state) - state.consumed_resources)


def resource_unit_name(catalog: Catalog, state: GameState) -> str:
    limits = limit_types(catalog, state)
    if LimitType.UNIVERSE in limits:
        return "Universe Resources"
    if LimitType.EARTH in limits:
        return "Earth Resources"
    return "Oil (l)"


def storage_limit(catalog: Catalog, state: GameState) -> float:
    limit = active_limit(catalog, state)
    if limit is LimitType.INFINITE:
        return math.inf
    if limit is LimitType.UNIVERSE:
        return catalog.constants.galaxy_surface_limit
    return catalog.constants.land_surface_limit


def used_storage_space(catalog: Catalog, state: GameState) -> float:
    c = catalog.constants
    multiplier = space_cost_multiplier(catalog, state)
    space = (
        state.rubber * c.space_cost_rubber * multiplier
        + state.rubberbands * c.space_cost_rubberband * multiplier
    )
    for _family, _index, tier, count in owned_tiers(catalog, state):
        if tier.space_cost:
            space += count * tier.space_cost
    return space


def available_storage_space(catalog: Catalog, state: GameState) -> float:
    limit = storage_limit(catalog, state)
    if math.isinf(limit):
        return math.inf
    return max(0.0, limit - used_storage_space(catalog, state))


# ── Costs & income ───────────────────────────────────────────────────


def maintenance_cost(catalog: Catalog, state: GameState) -> float:
    cost = 0.0
    for _family, _index, tier, count in owned_tiers(catalog, state):
        if tier.maintenance_cost:
            cost += count * tier.maintenance_cost
    return cost


def inventory_cost(catalog: Catalog, state: GameState) -> float:
    """Convex holding cost on stock above the free inventory thresholds."""
    c = catalog.constants
    rubber_excess = max(0.0, state.rubber - c.inventory_limit_rubber)
    band_excess = max(0.0, state.rubberbands - c.inventory_limit_rubberbands)

    cost = 0.0
    if rubber_excess > 0:
        cost += 0.001 * math.pow(
            rubber_excess / c.inventory_cost_divisor_rubber, c.inventory_cost_exponent
        )
    if band_excess > 0:
        cost += 0.001 * math.pow(
            band_excess / c.inventory_cost_divisor_rubberbands, c.inventory_cost_exponent
        )

    return cost * space_cost_multiplier(catalog, state)


def income(catalog: Catalog, state: GameState) -> float:
    """Projected sales revenue per tick at the current price."""
    rubber_available = state.rubber + state.rubber_production_rate
    bands_produced = min(state.machine_production_rate, rubber_available)
    bands_available = state.rubberbands + bands_produced
    sold = min(bands_available, calculate_demand(catalog, state))
    return sold * state.rubberband_price


def profit(catalog: Catalog, state: GameState) -> float:
    return (
        income(catalog, state)
        - maintenance_cost(catalog, state)
        - inventory_cost(catalog, state)
    )


def nanobot_factory_cost(catalog: Catalog, state: GameState) -> int | float:
    c = catalog.constants
    curve = CostScaling(c.nanobot_factory_initial_cost, c.nanobot_factory_cost_factor)
    return curve.cost(1, state.nanobot_factory_count)


# ── Producer queries ─────────────────────────────────────────────────


def is_producer_visible(state: GameState, tier: Tier) -> bool:
    if tier.required_research:
        return all(state.has_research(r) for r in tier.required_research)
    if tier.precondition_research:
        return state.has_research(tier.precondition_research)
    return True


def is_producer_being_produced(
    catalog: Catalog, state: GameState, family_id: str, tier_index: int
) -> bool:
    """Whether an owned production line is currently building this tier."""
    for _family, _index, tier, _count in owned_tiers(catalog, state):
        out = tier.output
        if (
            out.resource is ResourceType.PRODUCER
            and out.family_id == family_id
            and out.tier_index == tier_index
        ):
            return True
    return False


def nano_boost(
    catalog: Catalog, state: GameState, family: ProducerFamily, tier_index: int
) -> float:
    target = _NANO_TARGET_BY_TYPE.get(family.type)
    if target is None:
        return 0.0
    return family_boosts(catalog, state, target).get((family.id, tier_index), 0.0)


def producer_output(
    catalog: Catalog, state: GameState, family_id: str, tier_index: int
) -> float:
    """Per-unit output of a tier with current multipliers and nano boost."""
    family = catalog.get_family(family_id)
    tier = catalog.get_tier(family_id, tier_index)
    if family is None or tier is None:
        return 0.0

    multiplier = production_multiplier(
        family,
        get_effects(catalog, state, EffectType.PRODUCTION_MULTIPLIER),
        get_effects(catalog, state, EffectType.PRODUCTION_MULTIPLIER_ADDITIVE),
    )
    return tier.output.amount * multiplier * (1 + nano_boost(catalog, state, family, tier_index))


def rubber_shortage(catalog: Catalog, state: GameState) -> bool:
    """True when the player can neither make, buy nor afford any rubber."""
    has_sources = any(
        family.type is ProducerType.RUBBER_SOURCE
        for family, _index, _tier, _count in owned_tiers(catalog, state)
    )
    return (
        state.rubber < 1
        and state.rubber_production_rate <= 0
        and state.money < 100 * state.rubber_price
        and not state.buyer_hired
        and not has_sources
    )
