"""Player-triggered mutations.

Every handler takes the catalog and the state it mutates and returns True on
success. A rejected action leaves the state untouched; nothing here raises
for gameplay reasons.
"""
from __future__ import annotations

import math
from typing import TYPE_CHECKING

from rubberengine import economy
from rubberengine._types import GlobalRule, LimitType, floor_finite
from rubberengine.aggregator import has_global_rule
from rubberengine.cost_scaling import get_cost
from rubberengine.state import NanoAllocation

if TYPE_CHECKING:
    from rubberengine.catalog import Catalog
    from rubberengine.state import GameState

_ALLOCATION_TOLERANCE = 1e-9


# ── Producers ────────────────────────────────────────────────────────


def producer_cost(
    catalog: Catalog,
    state: GameState,
    family_id: str,
    tier_index: int,
    amount: int = 1,
) -> int | float:
    """Price of *amount* more units, positioned by the purchased count."""
    tier = catalog.get_tier(family_id, tier_index)
    if tier is None:
        return math.inf
    return get_cost(tier, amount, state.purchased(family_id, tier_index))


def buy_producer(
    catalog: Catalog,
    state: GameState,
    family_id: str,
    tier_index: int,
    amount: int = 1,
) -> bool:
    if state.game_over or amount <= 0:
        return False
    tier = catalog.get_tier(family_id, tier_index)
    if tier is None:
        return False

    if economy.is_producer_being_produced(catalog, state, family_id, tier_index):
        return False
    if not tier.allow_manual_purchase:
        return False
    if not economy.is_producer_visible(state, tier):
        return False

    space_needed = tier.space_cost * amount
    if space_needed > 0 and (
        economy.used_storage_space(catalog, state) + space_needed
        > economy.storage_limit(catalog, state)
    ):
        return False

    cost = producer_cost(catalog, state, family_id, tier_index, amount)
    if state.money < cost:
        return False

    state.money -= cost
    state.add_producers(family_id, tier_index, amount, amount)
    return True


def sell_producer(
    catalog: Catalog,
    state: GameState,
    family_id: str,
    tier_index: int,
    amount: int = 1,
) -> bool:
    """Sell units, refunding half the marginal cost of the purchased ones."""
    if state.game_over or amount <= 0:
        return False
    tier = catalog.get_tier(family_id, tier_index)
    if tier is None:
        return False

    if economy.is_producer_being_produced(catalog, state, family_id, tier_index):
        return False

    owned = state.count(family_id, tier_index)
    if owned < amount:
        return False

    purchased = state.purchased(family_id, tier_index)
    from_purchased = min(amount, purchased)

    refund = 0
    if from_purchased > 0:
        refund = floor_finite(0.5 * get_cost(tier, from_purchased, purchased - from_purchased))
        state.purchased_producers[family_id][tier_index] = purchased - from_purchased

    state.producers[family_id][tier_index] = owned - amount
    state.money += refund
    return True


# ── Research ─────────────────────────────────────────────────────────


def buy_research(catalog: Catalog, state: GameState, research_id: str) -> bool:
    if state.game_over or state.has_research(research_id):
        return False
    node = catalog.get_research(research_id)
    if node is None:
        return False
    if node.precondition_research and not state.has_research(node.precondition_research):
        return False
    if state.money < node.cost:
        return False

    state.money -= node.cost
    state.researched.append(research_id)
    return True


# ── Market ───────────────────────────────────────────────────────────


def max_rubber(catalog: Catalog, state: GameState) -> float:
    """Stock ceiling for bought rubber: a fixed base plus last tick's raw output."""
    return catalog.constants.max_rubber_no_production + state.rubber_production_rate


def buy_rubber(
    catalog: Catalog,
    state: GameState,
    amount: float,
    price_multiplier: float = 1.0,
) -> bool:
    """Buy up to *amount* rubber; the purchase is clamped, never over-filled."""
    if state.game_over:
        return False

    limit = max_rubber(catalog, state)
    if state.rubber >= limit:
        return False
    to_buy = min(amount, limit - state.rubber)

    # Bought rubber draws on earth's reserves until interplanetary supply opens up.
    if LimitType.UNIVERSE not in economy.limit_types(catalog, state):
        remaining = max(
            0.0, catalog.constants.earth_resource_limit - state.total_rubber_produced
        )
        to_buy = min(to_buy, remaining)

    space_per_unit = catalog.constants.space_cost_rubber * economy.space_cost_multiplier(
        catalog, state
    )
    available = economy.available_storage_space(catalog, state)
    if space_per_unit > 0 and not math.isinf(available):
        to_buy = min(to_buy, available / space_per_unit)

    if to_buy <= 0:
        return False

    cost = to_buy * state.rubber_price * price_multiplier
    if state.money < cost:
        return False

    state.money -= cost
    state.rubber += to_buy
    state.total_rubber_produced += to_buy
    return True


def sell_rubberbands(catalog: Catalog, state: GameState, amount: float) -> bool:
    if state.game_over or amount <= 0 or state.rubberbands < amount:
        return False
    state.rubberbands -= amount
    state.money += amount * state.rubberband_price
    state.total_rubberbands_sold += amount
    return True


def make_rubberband(catalog: Catalog, state: GameState, amount: float = 1) -> bool:
    """Band rubber by hand."""
    if state.game_over or amount <= 0:
        return False
    needed = amount * economy.manual_input_ratio(catalog, state)
    if state.rubber < needed:
        return False
    state.rubber -= needed
    state.rubberbands += amount
    return True


def set_rubberband_price(catalog: Catalog, state: GameState, price: float) -> bool:
    if state.game_over or math.isnan(price):
        return False
    c = catalog.constants
    state.rubberband_price = min(max(price, c.min_rubberband_price), c.max_rubberband_price)
    return True


# ── Staff & marketing ────────────────────────────────────────────────


def hire_buyer(catalog: Catalog, state: GameState) -> bool:
    if state.game_over or state.buyer_hired:
        return False
    if not has_global_rule(catalog, state, GlobalRule.UNLOCK_BUYER):
        return False
    cost = catalog.constants.buyer_cost
    if state.money < cost:
        return False
    state.money -= cost
    state.buyer_hired = True
    return True


def set_buyer_threshold(catalog: Catalog, state: GameState, amount: float) -> bool:
    if state.game_over or amount < 0 or math.isnan(amount):
        return False
    state.buyer_threshold = amount
    return True


def buy_marketing(catalog: Catalog, state: GameState) -> bool:
    if state.game_over:
        return False
    if not has_global_rule(catalog, state, GlobalRule.UNLOCK_MARKETING):
        return False
    cost = economy.marketing_cost(catalog, state)
    if state.money < cost:
        return False
    state.money -= cost
    state.marketing_level += 1
    state.last_marketing_update_tick = state.tick_count
    return True


# ── Nanobots ─────────────────────────────────────────────────────────


def set_nano_allocation(
    catalog: Catalog, state: GameState, allocation: NanoAllocation
) -> bool:
    if state.game_over:
        return False
    if not allocation.is_valid(_ALLOCATION_TOLERANCE):
        return False
    state.nano_allocation = NanoAllocation(**allocation.as_dict())
    return True


def buy_nanobot_factory(catalog: Catalog, state: GameState) -> bool:
    if state.game_over:
        return False
    if not state.has_research(catalog.constants.nanobot_factory_research):
        return False
    cost = economy.nanobot_factory_cost(catalog, state)
    if state.money < cost:
        return False
    state.money -= cost
    state.nanobot_factory_count += 1
    return True
