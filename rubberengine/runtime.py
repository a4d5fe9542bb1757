from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any

from rubberengine import actions, economy, persistence
from rubberengine._types import GlobalRule
from rubberengine.aggregator import has_global_rule
from rubberengine.catalog import Catalog
from rubberengine.cost_scaling import get_max_affordable
from rubberengine.parameters import default_catalog
from rubberengine.pipeline import ProductionPipeline
from rubberengine.state import GameState, NanoAllocation

MARKETING_ID = "marketing"
BUYER_ID = "buyer"
NANOBOT_FACTORY_ID = "nanobot_factory"


@dataclass(frozen=True)
class PurchaseOption:
    """Read-only view of one thing the player could buy right now."""

    id: str
    display_name: str
    kind: str
    cost: float
    affordable: bool
    count: int = 0


def producer_id(family_id: str, tier_index: int) -> str:
    return f"producer:{family_id}/{tier_index}"


def research_id(node_id: str) -> str:
    return f"research:{node_id}"


def _parse_producer_id(purchase_id: str) -> tuple[str, int] | None:
    body = purchase_id.removeprefix("producer:")
    family_id, _, index = body.rpartition("/")
    if not family_id or not index.isdigit():
        return None
    return family_id, int(index)


class GameRuntime:
    """Owns one economy: its catalog, state, pipeline and price RNG."""

    def __init__(self, catalog: Catalog | None = None, seed: int | None = None) -> None:
        catalog = catalog or default_catalog()
        errors = catalog.validate()
        if errors:
            raise ValueError(
                "Invalid Catalog:\n" + "\n".join(f"  - {e}" for e in errors)
            )

        self.catalog = catalog
        self.state = GameState(catalog)
        self.pipeline = ProductionPipeline(catalog)
        self.rng = random.Random(seed)

    # ── Core loop ────────────────────────────────────────────────────

    def tick(self, ticks: int = 1) -> None:
        """Advance the economy by *ticks* ticks."""
        for _ in range(ticks):
            if self.state.game_over:
                break
            self.pipeline.tick(self.state, self.rng)

    def reset(self) -> None:
        self.state.reset()

    # ── Player actions ───────────────────────────────────────────────

    def buy_producer(self, family_id: str, tier_index: int, amount: int = 1) -> bool:
        return actions.buy_producer(self.catalog, self.state, family_id, tier_index, amount)

    def sell_producer(self, family_id: str, tier_index: int, amount: int = 1) -> bool:
        return actions.sell_producer(self.catalog, self.state, family_id, tier_index, amount)

    def buy_research(self, node_id: str) -> bool:
        return actions.buy_research(self.catalog, self.state, node_id)

    def buy_rubber(self, amount: float) -> bool:
        return actions.buy_rubber(self.catalog, self.state, amount)

    def sell_rubberbands(self, amount: float) -> bool:
        return actions.sell_rubberbands(self.catalog, self.state, amount)

    def make_rubberband(self, amount: float = 1) -> bool:
        return actions.make_rubberband(self.catalog, self.state, amount)

    def hire_buyer(self) -> bool:
        return actions.hire_buyer(self.catalog, self.state)

    def buy_marketing(self) -> bool:
        return actions.buy_marketing(self.catalog, self.state)

    def set_rubberband_price(self, price: float) -> bool:
        return actions.set_rubberband_price(self.catalog, self.state, price)

    def set_buyer_threshold(self, amount: float) -> bool:
        return actions.set_buyer_threshold(self.catalog, self.state, amount)

    def set_nano_allocation(self, allocation: NanoAllocation) -> bool:
        return actions.set_nano_allocation(self.catalog, self.state, allocation)

    def buy_nanobot_factory(self) -> bool:
        return actions.buy_nanobot_factory(self.catalog, self.state)

    def try_purchase(self, purchase_id: str) -> bool:
        """Buy one unit of whatever *purchase_id* names. Returns True on success."""
        if purchase_id == MARKETING_ID:
            return self.buy_marketing()
        if purchase_id == BUYER_ID:
            return self.hire_buyer()
        if purchase_id == NANOBOT_FACTORY_ID:
            return self.buy_nanobot_factory()
        if purchase_id.startswith("research:"):
            return self.buy_research(purchase_id.removeprefix("research:"))
        if purchase_id.startswith("producer:"):
            parsed = _parse_producer_id(purchase_id)
            if parsed is None:
                return False
            return self.buy_producer(*parsed)
        return False

    # ── Queries ──────────────────────────────────────────────────────

    def get_state(self) -> GameState:
        """Return live reference to game state."""
        return self.state

    def demand(self, price: float | None = None) -> int | float:
        return economy.calculate_demand(self.catalog, self.state, price)

    def producer_cost(self, family_id: str, tier_index: int, amount: int = 1) -> int | float:
        return actions.producer_cost(self.catalog, self.state, family_id, tier_index, amount)

    def max_affordable(self, family_id: str, tier_index: int) -> int:
        tier = self.catalog.get_tier(family_id, tier_index)
        if tier is None:
            return 0
        return get_max_affordable(
            tier, self.state.money, self.state.purchased(family_id, tier_index)
        )

    def producer_output(self, family_id: str, tier_index: int) -> float:
        return economy.producer_output(self.catalog, self.state, family_id, tier_index)

    def stats(self) -> dict[str, float]:
        """Derived economy figures for the current state."""
        catalog, state = self.catalog, self.state
        return {
            "demand": economy.calculate_demand(catalog, state),
            "income": economy.income(catalog, state),
            "profit": economy.profit(catalog, state),
            "maintenance_cost": economy.maintenance_cost(catalog, state),
            "inventory_cost": economy.inventory_cost(catalog, state),
            "marketing_cost": economy.marketing_cost(catalog, state),
            "used_storage_space": economy.used_storage_space(catalog, state),
            "storage_limit": economy.storage_limit(catalog, state),
            "resource_limit": economy.resource_limit(catalog, state),
            "consumed_resources": state.consumed_resources,
            "rubber_production_rate": state.rubber_production_rate,
            "machine_production_rate": state.machine_production_rate,
        }

    def get_available_purchases(self) -> list[PurchaseOption]:
        """Everything whose gates are open, affordable or not."""
        catalog, state = self.catalog, self.state
        if state.game_over:
            return []
        money = state.money
        options: list[PurchaseOption] = []

        for family in catalog.families:
            for index, tier in enumerate(family.tiers):
                if not tier.allow_manual_purchase:
                    continue
                if not economy.is_producer_visible(state, tier):
                    continue
                if economy.is_producer_being_produced(catalog, state, family.id, index):
                    continue
                cost = self.producer_cost(family.id, index)
                options.append(
                    PurchaseOption(
                        id=producer_id(family.id, index),
                        display_name=tier.name,
                        kind="producer",
                        cost=cost,
                        affordable=money >= cost,
                        count=state.count(family.id, index),
                    )
                )

        for node in catalog.research:
            if state.has_research(node.id):
                continue
            if node.precondition_research and not state.has_research(node.precondition_research):
                continue
            options.append(
                PurchaseOption(
                    id=research_id(node.id),
                    display_name=node.name,
                    kind="research",
                    cost=node.cost,
                    affordable=money >= node.cost,
                )
            )

        if has_global_rule(catalog, state, GlobalRule.UNLOCK_MARKETING):
            cost = economy.marketing_cost(catalog, state)
            options.append(
                PurchaseOption(
                    MARKETING_ID, "Marketing", "marketing", cost, money >= cost,
                    count=state.marketing_level,
                )
            )
        if not state.buyer_hired and has_global_rule(catalog, state, GlobalRule.UNLOCK_BUYER):
            cost = catalog.constants.buyer_cost
            options.append(PurchaseOption(BUYER_ID, "Buyer", "buyer", cost, money >= cost))
        if state.has_research(catalog.constants.nanobot_factory_research):
            cost = economy.nanobot_factory_cost(catalog, state)
            options.append(
                PurchaseOption(
                    NANOBOT_FACTORY_ID, "Nanobot Factory", "nanobot_factory", cost,
                    money >= cost, count=state.nanobot_factory_count,
                )
            )
        return options

    def get_affordable_purchases(self) -> list[PurchaseOption]:
        return [p for p in self.get_available_purchases() if p.affordable]

    # ── Persistence ──────────────────────────────────────────────────

    def save(self) -> dict[str, Any]:
        return persistence.to_record(self.state)

    def save_json(self) -> str:
        return persistence.dumps(self.state)

    def load(self, data: dict[str, Any] | str) -> bool:
        """Restore from a save. A corrupt save resets the game and returns False."""
        return persistence.load_state(self.state, data)
