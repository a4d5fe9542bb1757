"""MCP server wrapping GameRuntime for interactive AI playtesting."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from mcp.server.fastmcp import FastMCP

from rubberengine import economy
from rubberengine.catalog import Catalog
from rubberengine.parameters import default_catalog
from rubberengine.runtime import GameRuntime, producer_id
from rubberengine.state import NanoAllocation

# Maximum ticks per wait() call (24 hours at one tick per second)
_MAX_WAIT = 86400
# Maximum rubberbands per make_rubberband() call
_MAX_HAND_BANDS = 1000


@dataclass
class _GameHolder:
    """Holds the active catalog and runtime."""

    catalog: Catalog
    runtime: GameRuntime


def _round(value: float, digits: int = 2) -> float | None:
    # JSON has no infinity
    if not math.isfinite(value):
        return None
    return round(value, digits)


# ── Tool logic functions (testable without MCP protocol) ────────────


def _tool_get_game_info(holder: _GameHolder) -> dict[str, Any]:
    catalog = holder.catalog
    return {
        "families": [
            {
                "id": f.id,
                "type": f.type.value,
                "tiers": [
                    {"index": i, "name": t.name, "description": t.description}
                    for i, t in enumerate(f.tiers)
                ],
            }
            for f in catalog.families
        ],
        "research": [
            {
                "id": r.id,
                "name": r.name,
                "cost": r.cost,
                "precondition": r.precondition_research,
            }
            for r in catalog.research
        ],
    }


def _tool_get_game_state(holder: _GameHolder) -> dict[str, Any]:
    runtime = holder.runtime
    state = runtime.get_state()
    stats = runtime.stats()
    producers = {}
    for family in holder.catalog.families:
        owned = {}
        for i, tier in enumerate(family.tiers):
            count = state.count(family.id, i)
            if count:
                owned[tier.name] = {
                    "count": count,
                    "purchased": state.purchased(family.id, i),
                }
        if owned:
            producers[family.id] = owned
    return {
        "tick": state.tick_count,
        "game_over": state.game_over,
        "money": _round(state.money),
        "rubber": _round(state.rubber),
        "rubberbands": _round(state.rubberbands),
        "rubber_price": _round(state.rubber_price, 4),
        "rubberband_price": _round(state.rubberband_price, 4),
        "marketing_level": state.marketing_level,
        "buyer_hired": state.buyer_hired,
        "buyer_threshold": state.buyer_threshold,
        "researched": list(state.researched),
        "nanobots": _round(state.nanobot_count),
        "nanobot_factories": state.nanobot_factory_count,
        "nano_allocation": state.nano_allocation.as_dict(),
        "producers": producers,
        "stats": {k: _round(v, 4) for k, v in stats.items()},
    }


def _tool_get_available_purchases(holder: _GameHolder) -> dict[str, Any]:
    purchases = holder.runtime.get_available_purchases()
    return {
        "purchases": [
            {
                "id": p.id,
                "display_name": p.display_name,
                "kind": p.kind,
                "count": p.count,
                "cost": _round(p.cost),
                "affordable": p.affordable,
            }
            for p in purchases
        ]
    }


def _tool_get_producer_info(
    holder: _GameHolder, family_id: str, tier_index: int
) -> dict[str, Any]:
    tier = holder.catalog.get_tier(family_id, tier_index)
    if tier is None:
        return {"error": f"Unknown producer: {family_id!r}/{tier_index}"}

    runtime = holder.runtime
    state = runtime.get_state()
    out = tier.output
    production: dict[str, Any] = {
        "output": out.resource.value,
        "amount": out.amount,
    }
    if out.family_id is not None:
        production["target"] = producer_id(out.family_id, out.tier_index)
    if tier.production.input is not None:
        production["input"] = tier.production.input.resource.value
        production["input_amount"] = tier.production.input.amount

    return {
        "id": producer_id(family_id, tier_index),
        "name": tier.name,
        "description": tier.description,
        "count": state.count(family_id, tier_index),
        "purchased": state.purchased(family_id, tier_index),
        "cost": _round(runtime.producer_cost(family_id, tier_index)),
        "max_affordable": runtime.max_affordable(family_id, tier_index),
        "output_per_tick": _round(runtime.producer_output(family_id, tier_index), 4),
        "maintenance_cost": tier.maintenance_cost,
        "space_cost": tier.space_cost,
        "visible": economy.is_producer_visible(state, tier),
        "being_produced": economy.is_producer_being_produced(
            holder.catalog, state, family_id, tier_index
        ),
        "production": production,
        "effects": [e.type.value for e in tier.effects],
    }


def _tool_purchase(holder: _GameHolder, purchase_id: str) -> dict[str, Any]:
    available = {p.id: p for p in holder.runtime.get_available_purchases()}
    option = available.get(purchase_id)
    if option is None:
        return {"success": False, "reason": f"Not available: {purchase_id!r}"}
    if not option.affordable:
        return {"success": False, "reason": "Cannot afford"}
    if not holder.runtime.try_purchase(purchase_id):
        return {"success": False, "reason": "Purchase rejected"}
    return {
        "success": True,
        "purchase_id": purchase_id,
        "money": _round(holder.runtime.state.money),
    }


def _tool_sell_producer(
    holder: _GameHolder, family_id: str, tier_index: int, amount: int = 1
) -> dict[str, Any]:
    if amount < 1:
        return {"error": "Amount must be at least 1"}
    if holder.catalog.get_tier(family_id, tier_index) is None:
        return {"error": f"Unknown producer: {family_id!r}/{tier_index}"}
    state = holder.runtime.state
    before = state.money
    if not holder.runtime.sell_producer(family_id, tier_index, amount):
        return {"success": False, "reason": "Not enough purchased units to sell"}
    return {
        "success": True,
        "refund": _round(state.money - before),
        "new_count": state.count(family_id, tier_index),
    }


def _tool_buy_rubber(holder: _GameHolder, amount: float) -> dict[str, Any]:
    if not amount > 0:
        return {"error": "Amount must be positive"}
    state = holder.runtime.state
    before = state.rubber
    if not holder.runtime.buy_rubber(amount):
        return {"success": False, "reason": "Cannot buy rubber now"}
    return {
        "success": True,
        "bought": _round(state.rubber - before),
        "rubber": _round(state.rubber),
        "money": _round(state.money),
    }


def _tool_make_rubberband(holder: _GameHolder, count: int = 1) -> dict[str, Any]:
    if count < 1:
        return {"error": "Count must be at least 1"}
    if count > _MAX_HAND_BANDS:
        return {"error": f"Count cannot exceed {_MAX_HAND_BANDS}"}
    state = holder.runtime.state
    if not holder.runtime.make_rubberband(count):
        return {"success": False, "reason": "Not enough rubber"}
    return {"success": True, "rubberbands": _round(state.rubberbands)}


def _tool_set_rubberband_price(holder: _GameHolder, price: float) -> dict[str, Any]:
    if not holder.runtime.set_rubberband_price(price):
        return {"success": False, "reason": "Invalid price"}
    return {
        "success": True,
        "rubberband_price": holder.runtime.state.rubberband_price,
        "demand": _round(holder.runtime.demand()),
    }


def _tool_set_buyer_threshold(holder: _GameHolder, amount: float) -> dict[str, Any]:
    if not holder.runtime.set_buyer_threshold(amount):
        return {"success": False, "reason": "Invalid threshold"}
    return {"success": True, "buyer_threshold": holder.runtime.state.buyer_threshold}


def _tool_set_nano_allocation(
    holder: _GameHolder,
    rubber_machines: float,
    bander_machines: float,
    production_lines: float,
    nanobots: float,
) -> dict[str, Any]:
    allocation = NanoAllocation(
        rubber_machines=rubber_machines,
        bander_machines=bander_machines,
        production_lines=production_lines,
        nanobots=nanobots,
    )
    if not holder.runtime.set_nano_allocation(allocation):
        return {
            "success": False,
            "reason": "Fractions must be non-negative and sum to at most 1",
        }
    return {"success": True, "nano_allocation": allocation.as_dict()}


def _tool_wait(holder: _GameHolder, ticks: int) -> dict[str, Any]:
    if ticks <= 0:
        return {"error": "Ticks must be positive"}
    if ticks > _MAX_WAIT:
        return {"error": f"Cannot wait more than {_MAX_WAIT} ticks per call"}

    state = holder.runtime.state
    money_before = state.money
    sold_before = state.total_rubberbands_sold
    holder.runtime.tick(ticks)

    result: dict[str, Any] = {
        "waited": ticks,
        "tick": state.tick_count,
        "money": _round(state.money),
        "money_change": _round(state.money - money_before),
        "rubberbands_sold": _round(state.total_rubberbands_sold - sold_before),
        "rubber": _round(state.rubber),
        "rubberbands": _round(state.rubberbands),
    }
    if state.game_over:
        result["game_over"] = True
    return result


def _tool_save_game(holder: _GameHolder) -> dict[str, Any]:
    return {"save": holder.runtime.save_json()}


def _tool_load_game(holder: _GameHolder, save: str) -> dict[str, Any]:
    if holder.runtime.load(save):
        return {"success": True, "tick": holder.runtime.state.tick_count}
    return {"success": False, "reason": "Save data was corrupt; game has been reset"}


def _tool_new_game(holder: _GameHolder) -> dict[str, Any]:
    holder.runtime = GameRuntime(holder.catalog)
    return {"success": True, "message": "Game reset to initial state"}


# ── Server factory ──────────────────────────────────────────────────


def create_server(catalog: Catalog | None = None) -> FastMCP:
    """Create an MCP server wrapping a GameRuntime for the given catalog."""
    catalog = catalog or default_catalog()
    holder = _GameHolder(catalog=catalog, runtime=GameRuntime(catalog))

    mcp = FastMCP(name="RubberEngine")

    @mcp.tool()
    def get_game_info() -> dict[str, Any]:
        """Get static economy overview: producer families, tiers, research."""
        return _tool_get_game_info(holder)

    @mcp.tool()
    def get_game_state() -> dict[str, Any]:
        """Get current state: stocks, prices, producers, research, derived stats."""
        return _tool_get_game_state(holder)

    @mcp.tool()
    def get_available_purchases() -> dict[str, Any]:
        """Get everything currently purchasable with its cost."""
        return _tool_get_available_purchases(holder)

    @mcp.tool()
    def get_producer_info(family_id: str, tier_index: int) -> dict[str, Any]:
        """Get detailed info for one producer tier: cost, output, production rule."""
        return _tool_get_producer_info(holder, family_id, tier_index)

    @mcp.tool()
    def purchase(purchase_id: str) -> dict[str, Any]:
        """Buy one unit of a purchase id from get_available_purchases."""
        return _tool_purchase(holder, purchase_id)

    @mcp.tool()
    def sell_producer(family_id: str, tier_index: int, amount: int = 1) -> dict[str, Any]:
        """Sell purchased producers back for half their cost."""
        return _tool_sell_producer(holder, family_id, tier_index, amount)

    @mcp.tool()
    def buy_rubber(amount: float) -> dict[str, Any]:
        """Buy rubber at the current market price."""
        return _tool_buy_rubber(holder, amount)

    @mcp.tool()
    def make_rubberband(count: int = 1) -> dict[str, Any]:
        """Make rubberbands by hand (max 1000)."""
        return _tool_make_rubberband(holder, count)

    @mcp.tool()
    def set_rubberband_price(price: float) -> dict[str, Any]:
        """Set the selling price of rubberbands."""
        return _tool_set_rubberband_price(holder, price)

    @mcp.tool()
    def set_buyer_threshold(amount: float) -> dict[str, Any]:
        """Set the rubber stock below which the buyer restocks."""
        return _tool_set_buyer_threshold(holder, amount)

    @mcp.tool()
    def set_nano_allocation(
        rubber_machines: float,
        bander_machines: float,
        production_lines: float,
        nanobots: float,
    ) -> dict[str, Any]:
        """Split the nanobot stock between automation targets."""
        return _tool_set_nano_allocation(
            holder, rubber_machines, bander_machines, production_lines, nanobots
        )

    @mcp.tool()
    def wait(ticks: int) -> dict[str, Any]:
        """Advance the economy by the given number of ticks (max 86400)."""
        return _tool_wait(holder, ticks)

    @mcp.tool()
    def save_game() -> dict[str, Any]:
        """Serialize the current game to a JSON save string."""
        return _tool_save_game(holder)

    @mcp.tool()
    def load_game(save: str) -> dict[str, Any]:
        """Restore the game from a JSON save string."""
        return _tool_load_game(holder, save)

    @mcp.tool()
    def new_game() -> dict[str, Any]:
        """Reset the game to initial state."""
        return _tool_new_game(holder)

    return mcp
