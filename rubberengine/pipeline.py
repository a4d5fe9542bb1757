from __future__ import annotations

import logging
import math
import random
from typing import TYPE_CHECKING

from rubberengine import actions, economy
from rubberengine._types import NanoTarget, ResourceType, floor_finite
from rubberengine.aggregator import get_effects, owned_tiers
from rubberengine.effect import EffectType, ProductionOutputFlat
from rubberengine.nano import family_boosts, nanobot_production

if TYPE_CHECKING:
    from rubberengine.catalog import Catalog
    from rubberengine.state import GameState

logger = logging.getLogger(__name__)


class ProductionPipeline:
    """Advances the economy one tick through its ordered production phases."""

    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog

    def tick(self, state: GameState, rng: random.Random | None = None) -> None:
        """Run one full tick. No-op once the game is over."""
        if state.game_over:
            return

        c = self.catalog.constants
        if state.consumed_resources >= c.universe_resource_limit:
            state.game_over = True
            logger.info(
                "Game over at tick %d: %.3g resources consumed",
                state.tick_count,
                state.consumed_resources,
            )
            return

        state.tick_count += 1

        self.decay_marketing(state)
        self.update_market(state, rng or random.Random())

        state.rubber_production_rate = self.run_raw_materials(state)
        state.machine_production_rate = self.run_manufacturing(state)
        self.run_industry(state)
        self.run_nano(state)

        self.auto_buy(state)
        self.auto_sell(state)

        state.money -= economy.inventory_cost(self.catalog, state)
        state.money -= economy.maintenance_cost(self.catalog, state)

    # ── Market ───────────────────────────────────────────────────────

    def decay_marketing(self, state: GameState) -> None:
        interval = economy.marketing_decay_interval(self.catalog, state)
        if interval <= 0:
            return
        if state.tick_count - state.last_marketing_update_tick >= interval:
            if state.marketing_level > 1:
                state.marketing_level -= 1
            state.last_marketing_update_tick = state.tick_count

    def update_market(self, state: GameState, rng: random.Random) -> None:
        c = self.catalog.constants
        if state.tick_count % c.price_fluctuation_interval != 0:
            return
        spread = c.price_fluctuation_spread
        state.rubber_price *= (1 - spread) + rng.random() * 2 * spread
        state.rubber_price = min(max(state.rubber_price, c.min_rubber_price), c.max_rubber_price)

    # ── Production phases ────────────────────────────────────────────

    def run_raw_materials(self, state: GameState) -> float:
        """Rubber sources fill the stock. Returns rubber produced this tick."""
        catalog = self.catalog
        c = catalog.constants
        multipliers = get_effects(catalog, state, EffectType.PRODUCTION_MULTIPLIER)
        additives = get_effects(catalog, state, EffectType.PRODUCTION_MULTIPLIER_ADDITIVE)
        boosts = family_boosts(catalog, state, NanoTarget.RUBBER_MACHINES)
        limit = economy.resource_limit(catalog, state)
        space_per_rubber = c.space_cost_rubber * economy.space_cost_multiplier(catalog, state)

        produced = 0.0
        for family, index, tier, count in list(owned_tiers(catalog, state)):
            if tier.output.resource is not ResourceType.RUBBER:
                continue

            multiplier = economy.production_multiplier(family, multipliers, additives)
            amount = tier.output.amount * count * multiplier
            amount *= 1 + boosts.get((family.id, index), 0.0)
            if amount <= 0:
                continue

            if tier.resource_cost:
                remaining = max(0.0, limit - state.consumed_resources)
                amount = min(amount, floor_finite(remaining / tier.resource_cost))

            available = economy.available_storage_space(catalog, state)
            if not math.isinf(available) and space_per_rubber > 0:
                amount = min(amount, floor_finite(available / space_per_rubber))

            if amount <= 0:
                continue
            if tier.resource_cost:
                state.consumed_resources += amount * tier.resource_cost
            state.rubber += amount
            state.total_rubber_produced += amount
            produced += amount

        return produced

    def run_manufacturing(self, state: GameState) -> float:
        """Banders turn rubber into rubberbands. Returns rubberbands made."""
        catalog = self.catalog
        c = catalog.constants
        multipliers = get_effects(catalog, state, EffectType.PRODUCTION_MULTIPLIER)
        additives = get_effects(catalog, state, EffectType.PRODUCTION_MULTIPLIER_ADDITIVE)
        boosts = family_boosts(catalog, state, NanoTarget.BANDER_MACHINES)
        space_multiplier = economy.space_cost_multiplier(catalog, state)
        rubber_space = c.space_cost_rubber * space_multiplier
        band_space = c.space_cost_rubberband * space_multiplier
        finite_storage = not math.isinf(economy.storage_limit(catalog, state))

        # Output that will be sold this tick may exceed storage, once across all tiers.
        sell_allowance = economy.calculate_demand(catalog, state)

        state.theoretical_rubber_consumption_rate = 0
        produced = 0.0
        for family, index, tier, count in list(owned_tiers(catalog, state)):
            if tier.output.resource is not ResourceType.RUBBERBAND:
                continue

            multiplier = economy.production_multiplier(family, multipliers, additives)
            amount = tier.output.amount * count * multiplier
            amount *= 1 + boosts.get((family.id, index), 0.0)
            if amount <= 0:
                continue

            ratio = economy.input_ratio(catalog, state, family)
            space_per_unit = band_space - rubber_space * ratio
            room = math.inf
            if finite_storage and space_per_unit > 0:
                available = economy.available_storage_space(catalog, state)
                room = floor_finite(available / space_per_unit)
                amount = min(amount, room + sell_allowance)

            needed = amount * ratio
            state.theoretical_rubber_consumption_rate += needed
            if state.rubber >= needed:
                state.rubber -= needed
                made = amount
            else:
                made = state.rubber / ratio
                state.rubber = 0

            if made > room:
                sell_allowance = max(0, sell_allowance - (made - room))
            state.rubberbands += made
            produced += made

        return produced

    def run_industry(self, state: GameState) -> None:
        """Production lines build other producers, counted as purchased."""
        catalog = self.catalog
        c = catalog.constants
        multipliers = get_effects(catalog, state, EffectType.PRODUCTION_MULTIPLIER)
        additives = get_effects(catalog, state, EffectType.PRODUCTION_MULTIPLIER_ADDITIVE)
        flats = get_effects(catalog, state, EffectType.PRODUCTION_OUTPUT_FLAT)
        boosts = family_boosts(catalog, state, NanoTarget.PRODUCTION_LINES)
        limit = economy.resource_limit(catalog, state)

        for family, index, tier, count in list(owned_tiers(catalog, state)):
            out = tier.output
            if out.resource is not ResourceType.PRODUCER or not out.family_id:
                continue
            target = catalog.get_tier(out.family_id, out.tier_index)
            if target is None:
                continue

            multiplier = economy.production_multiplier(family, multipliers, additives)
            total = out.amount * count * multiplier
            for eff in flats:
                if isinstance(eff, ProductionOutputFlat) and eff.target.matches(family):
                    total += eff.amount * count
            total *= 1 + boosts.get((family.id, index), 0.0)
            total = floor_finite(total)

            unit_cost = (
                c.resource_cost_nano_swarm
                if out.family_id == c.nano_swarm_family_id
                else c.resource_cost_machine
            )
            remaining = max(0.0, limit - state.consumed_resources)
            total = min(total, floor_finite(remaining / unit_cost))

            if target.space_cost > 0:
                available = economy.available_storage_space(catalog, state)
                if not math.isinf(available):
                    total = min(total, floor_finite(available / target.space_cost))

            if total <= 0:
                continue
            state.consumed_resources += total * unit_cost
            state.add_producers(out.family_id, out.tier_index, total, total)

    def run_nano(self, state: GameState) -> None:
        catalog = self.catalog
        c = catalog.constants
        if not (
            state.nanobot_factory_count > 0
            or (
                state.nano_allocation.nanobots > 0
                and state.nanobot_count >= c.nanobot_factory_threshold
            )
        ):
            return

        possible = nanobot_production(catalog, state)
        remaining = economy.remaining_resources(catalog, state)
        possible = min(possible, floor_finite(remaining / c.resource_cost_nano_swarm))
        if possible <= 0:
            return
        state.consumed_resources += possible * c.resource_cost_nano_swarm
        state.nanobot_count += possible
        state.total_nanobots_produced += possible

    # ── Automation ───────────────────────────────────────────────────

    def auto_buy(self, state: GameState) -> None:
        if not state.buyer_hired or state.rubber >= state.buyer_threshold:
            return
        c = self.catalog.constants
        amount = min(state.buyer_threshold - state.rubber, c.max_rubber_no_production)
        if amount > 0:
            actions.buy_rubber(self.catalog, state, amount, c.auto_buy_markup)

    def auto_sell(self, state: GameState) -> None:
        amount = min(state.rubberbands, economy.calculate_demand(self.catalog, state))
        if amount > 0:
            actions.sell_rubberbands(self.catalog, state, amount)
