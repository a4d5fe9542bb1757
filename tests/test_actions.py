"""Tests for actions module."""
import math

import pytest

from rubberengine import actions
from rubberengine.catalog import GameConstants
from rubberengine.parameters import default_catalog
from rubberengine.state import GameState, NanoAllocation


def _make_state(**constants) -> GameState:
    return GameState(default_catalog(GameConstants(**constants)))


# ── Producers ────────────────────────────────────────────────────────


def test_buy_bander_twice():
    state = _make_state()
    state.researched = ["basic_manufacturing"]
    assert actions.buy_producer(state.catalog, state, "bander", 0)
    assert state.money == 2_900
    assert actions.buy_producer(state.catalog, state, "bander", 0)
    assert state.money == 2_790
    assert state.count("bander", 0) == 2
    assert state.purchased("bander", 0) == 2


def test_buy_several_at_once():
    state = _make_state()
    state.researched = ["basic_manufacturing"]
    assert actions.producer_cost(state.catalog, state, "bander", 0, 2) == 210
    assert actions.buy_producer(state.catalog, state, "bander", 0, 2)
    assert state.money == 2_790


def test_producer_cost_unknown_tier():
    state = _make_state()
    assert math.isinf(actions.producer_cost(state.catalog, state, "bander", 99))


def test_buy_requires_research():
    state = _make_state()
    assert not actions.buy_producer(state.catalog, state, "bander", 0)
    assert state.money == 3_000


def test_buy_rejects_unaffordable():
    state = _make_state()
    state.researched = ["basic_manufacturing"]
    state.money = 99
    assert not actions.buy_producer(state.catalog, state, "bander", 0)
    assert state.money == 99
    assert state.count("bander", 0) == 0


def test_buy_rejects_bad_input():
    state = _make_state()
    state.researched = ["basic_manufacturing"]
    assert not actions.buy_producer(state.catalog, state, "bander", 0, 0)
    assert not actions.buy_producer(state.catalog, state, "nope", 0)


def test_line_only_producer_not_for_sale():
    state = _make_state()
    state.researched = ["nanotechnology"]
    state.money = 1e15
    assert not actions.buy_producer(state.catalog, state, "nanoswarm", 0)


def test_producer_built_by_line_not_for_sale():
    state = _make_state()
    state.researched = ["robotics"]
    state.add_producers("bander", 2, 3, 3)
    state.add_producers("bander_line", 0, 1, 1)
    state.money = 1e12
    assert not actions.buy_producer(state.catalog, state, "bander", 2)
    assert not actions.sell_producer(state.catalog, state, "bander", 2)


def test_buy_rejects_without_space():
    state = _make_state(land_surface_limit=15)
    state.researched = ["basic_manufacturing"]
    assert actions.buy_producer(state.catalog, state, "bander", 0)
    assert not actions.buy_producer(state.catalog, state, "bander", 0)
    assert state.money == 2_900


def test_sell_refunds_half_of_last_unit():
    state = _make_state()
    state.researched = ["basic_manufacturing"]
    actions.buy_producer(state.catalog, state, "bander", 0, 2)
    assert actions.sell_producer(state.catalog, state, "bander", 0)
    assert state.money == 2_790 + 55
    assert state.count("bander", 0) == 1
    assert state.purchased("bander", 0) == 1


def test_sell_line_built_units_refunds_nothing():
    state = _make_state()
    state.add_producers("bander", 0, 3, 0)
    assert actions.sell_producer(state.catalog, state, "bander", 0, 3)
    assert state.money == 3_000
    assert state.count("bander", 0) == 0


def test_sell_more_than_owned():
    state = _make_state()
    state.add_producers("bander", 0, 1, 1)
    assert not actions.sell_producer(state.catalog, state, "bander", 0, 2)
    assert state.count("bander", 0) == 1


# ── Research ─────────────────────────────────────────────────────────


def test_buy_research():
    state = _make_state()
    assert actions.buy_research(state.catalog, state, "basic_manufacturing")
    assert state.money == 2_900
    assert state.researched == ["basic_manufacturing"]
    assert not actions.buy_research(state.catalog, state, "basic_manufacturing")
    assert state.money == 2_900


def test_research_precondition():
    state = _make_state()
    assert not actions.buy_research(state.catalog, state, "basic_marketing")
    assert not actions.buy_research(state.catalog, state, "nope")


def test_research_unaffordable():
    state = _make_state()
    state.researched = ["basic_manufacturing", "optimize_production"]
    assert not actions.buy_research(state.catalog, state, "robotics")


# ── Market ───────────────────────────────────────────────────────────


def test_buy_rubber():
    state = _make_state()
    assert actions.buy_rubber(state.catalog, state, 500)
    assert state.rubber == 500
    assert state.money == pytest.approx(2_950)
    assert state.total_rubber_produced == 500


def test_buy_rubber_clamped_to_stock_ceiling():
    state = _make_state()
    assert actions.buy_rubber(state.catalog, state, 2_000)
    assert state.rubber == 1_000
    assert not actions.buy_rubber(state.catalog, state, 1)


def test_stock_ceiling_follows_production():
    state = _make_state()
    state.rubber_production_rate = 500
    assert actions.max_rubber(state.catalog, state) == 1_500


def test_buy_rubber_bounded_by_earth():
    state = _make_state(earth_resource_limit=300)
    assert actions.buy_rubber(state.catalog, state, 500)
    assert state.rubber == 300
    assert not actions.buy_rubber(state.catalog, state, 100)


def test_universe_lifts_earth_bound():
    state = _make_state(earth_resource_limit=300)
    state.researched = ["interplanetary_logistics"]
    assert actions.buy_rubber(state.catalog, state, 500)
    assert state.rubber == 500


def test_buy_rubber_bounded_by_storage():
    state = _make_state(land_surface_limit=100, space_cost_rubber=0.5)
    assert actions.buy_rubber(state.catalog, state, 500)
    assert state.rubber == 200


def test_buy_rubber_unaffordable():
    state = _make_state()
    state.money = 10
    assert not actions.buy_rubber(state.catalog, state, 500)
    assert state.rubber == 0


def test_sell_rubberbands():
    state = _make_state()
    state.rubberbands = 20
    assert actions.sell_rubberbands(state.catalog, state, 10)
    assert state.money == 3_010
    assert state.total_rubberbands_sold == 10


def test_oversell_rejected():
    state = _make_state()
    state.rubberbands = 5
    assert not actions.sell_rubberbands(state.catalog, state, 10)
    assert state.rubberbands == 5
    assert state.money == 3_000


def test_make_rubberband():
    state = _make_state()
    state.rubber = 10
    assert actions.make_rubberband(state.catalog, state, 3)
    assert state.rubber == 4
    assert state.rubberbands == 3
    assert not actions.make_rubberband(state.catalog, state, 3)


def test_make_rubberband_uses_machine_efficiency():
    state = _make_state()
    state.researched = ["optimize_production"]
    state.rubber = 3
    assert actions.make_rubberband(state.catalog, state, 3)
    assert state.rubber == 0


def test_set_rubberband_price_clamped():
    state = _make_state()
    assert actions.set_rubberband_price(state.catalog, state, -5)
    assert state.rubberband_price == 0.01
    assert actions.set_rubberband_price(state.catalog, state, 1e9)
    assert state.rubberband_price == 1_000_000
    assert not actions.set_rubberband_price(state.catalog, state, math.nan)
    assert state.rubberband_price == 1_000_000


# ── Staff & marketing ────────────────────────────────────────────────


def test_hire_buyer():
    state = _make_state()
    assert not actions.hire_buyer(state.catalog, state)
    state.researched = ["sales_management"]
    assert actions.hire_buyer(state.catalog, state)
    assert state.buyer_hired
    assert state.money == 2_000
    assert not actions.hire_buyer(state.catalog, state)


def test_set_buyer_threshold():
    state = _make_state()
    assert not actions.set_buyer_threshold(state.catalog, state, -1)
    assert not actions.set_buyer_threshold(state.catalog, state, math.nan)
    assert actions.set_buyer_threshold(state.catalog, state, 500)
    assert state.buyer_threshold == 500


def test_buy_marketing():
    state = _make_state()
    assert not actions.buy_marketing(state.catalog, state)
    state.researched = ["basic_manufacturing", "basic_marketing"]
    state.tick_count = 42
    assert actions.buy_marketing(state.catalog, state)
    assert state.marketing_level == 2
    assert state.money == pytest.approx(2_880)
    assert state.last_marketing_update_tick == 42


# ── Nanobots ─────────────────────────────────────────────────────────


def test_set_nano_allocation():
    state = _make_state()
    allocation = NanoAllocation(0.5, 0.2, 0.2, 0.1)
    assert actions.set_nano_allocation(state.catalog, state, allocation)
    assert state.nano_allocation == allocation
    assert state.nano_allocation is not allocation


def test_set_nano_allocation_rejects_invalid():
    state = _make_state()
    for bad in (
        NanoAllocation(-0.1, 0.2, 0.2, 0.1),
        NanoAllocation(0.5, 0.5, 0.5, 0.0),
        NanoAllocation(math.nan, 0, 0, 0),
    ):
        assert not actions.set_nano_allocation(state.catalog, state, bad)
    assert state.nano_allocation == NanoAllocation.uniform(0.25)


def test_buy_nanobot_factory():
    state = _make_state()
    state.money = 3e9
    assert not actions.buy_nanobot_factory(state.catalog, state)
    state.researched = ["nanotechnology"]
    assert actions.buy_nanobot_factory(state.catalog, state)
    assert actions.buy_nanobot_factory(state.catalog, state)
    assert state.nanobot_factory_count == 2
    assert state.money == 0
    assert not actions.buy_nanobot_factory(state.catalog, state)


# ── Game over ────────────────────────────────────────────────────────


def test_every_action_rejected_after_game_over():
    state = _make_state()
    state.researched = [
        "basic_manufacturing",
        "basic_marketing",
        "sales_management",
        "nanotechnology",
    ]
    state.money = 1e12
    state.rubber = 100
    state.rubberbands = 100
    state.add_producers("bander", 0, 1, 1)
    state.game_over = True
    catalog = state.catalog

    assert not actions.buy_producer(catalog, state, "bander", 0)
    assert not actions.sell_producer(catalog, state, "bander", 0)
    assert not actions.buy_research(catalog, state, "optimize_production")
    assert not actions.buy_rubber(catalog, state, 10)
    assert not actions.sell_rubberbands(catalog, state, 10)
    assert not actions.make_rubberband(catalog, state)
    assert not actions.set_rubberband_price(catalog, state, 2)
    assert not actions.hire_buyer(catalog, state)
    assert not actions.set_buyer_threshold(catalog, state, 10)
    assert not actions.buy_marketing(catalog, state)
    assert not actions.set_nano_allocation(catalog, state, NanoAllocation.uniform(0.1))
    assert not actions.buy_nanobot_factory(catalog, state)
    assert state.money == 1e12
    assert state.rubber == 100
    assert state.rubberbands == 100
