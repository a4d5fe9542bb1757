"""Tests for economy module."""
import math

import pytest

from rubberengine import economy
from rubberengine._types import LimitType
from rubberengine.catalog import GameConstants
from rubberengine.parameters import default_catalog
from rubberengine.state import GameState


def _make_state(**constants) -> GameState:
    return GameState(default_catalog(GameConstants(**constants)))


def test_default_demand():
    state = _make_state()
    assert economy.calculate_demand(state.catalog, state) == 18


def test_demand_grows_with_marketing():
    state = _make_state()
    state.marketing_level = 2
    # 2^2 * 50 * e^-1
    assert economy.calculate_demand(state.catalog, state) == 73


def test_demand_at_explicit_price():
    state = _make_state()
    assert economy.calculate_demand(state.catalog, state, price=0) == 50
    assert state.rubberband_price == 1.0


def test_price_sensitivity_softens_price():
    state = _make_state()
    state.researched = ["nanotechnology"]  # sensitivity x2
    expected = math.floor(50 * math.exp(-0.5))
    assert economy.calculate_demand(state.catalog, state) == expected


def test_marketing_decay_interval():
    state = _make_state()
    state.marketing_level = 3
    assert economy.marketing_decay_interval(state.catalog, state) == 15
    state.researched = ["automated_ai_marketing"]
    assert economy.marketing_decay_interval(state.catalog, state) == 0


def test_marketing_cost():
    state = _make_state()
    assert economy.marketing_cost(state.catalog, state) == pytest.approx(120)


def test_limit_precedence():
    state = _make_state()
    catalog = state.catalog
    assert economy.active_limit(catalog, state) is LimitType.OIL
    assert economy.resource_limit(catalog, state) == catalog.constants.oil_reserves_limit
    assert economy.resource_unit_name(catalog, state) == "Oil (l)"

    state.researched = ["molecular_transformation"]
    assert economy.active_limit(catalog, state) is LimitType.EARTH
    assert economy.resource_unit_name(catalog, state) == "Earth Resources"

    state.researched.append("interplanetary_logistics")
    assert economy.active_limit(catalog, state) is LimitType.UNIVERSE
    assert economy.storage_limit(catalog, state) == catalog.constants.galaxy_surface_limit

    state.researched.append("singularity_theory")
    assert economy.active_limit(catalog, state) is LimitType.INFINITE
    assert economy.resource_limit(catalog, state) == economy.UNLIMITED_RESOURCES
    assert math.isinf(economy.storage_limit(catalog, state))
    assert math.isinf(economy.available_storage_space(catalog, state))


def test_remaining_resources_never_negative():
    state = _make_state(oil_reserves_limit=100)
    state.consumed_resources = 150
    assert economy.remaining_resources(state.catalog, state) == 0


def test_used_storage_space():
    state = _make_state()
    state.rubber = 1_000
    state.rubberbands = 100
    state.add_producers("bander", 0, 2, 2)
    assert economy.used_storage_space(state.catalog, state) == pytest.approx(20.2)


def test_storage_cost_effect_scales_goods_only():
    state = _make_state()
    state.rubber = 1_000
    state.add_producers("bander", 0, 2, 2)
    state.researched = ["singularity_theory"]
    assert economy.used_storage_space(state.catalog, state) == pytest.approx(20)


def test_inventory_cost_below_threshold_is_free():
    state = _make_state()
    state.rubber = 1_000_000
    state.rubberbands = 10_000
    assert economy.inventory_cost(state.catalog, state) == 0


def test_inventory_cost_convex():
    state = _make_state()
    state.rubber = 1_040_000
    assert economy.inventory_cost(state.catalog, state) == pytest.approx(0.008)


def test_maintenance_and_profit():
    state = _make_state()
    state.add_producers("bander", 0, 2, 2)
    state.rubberbands = 100
    assert economy.maintenance_cost(state.catalog, state) == 10
    assert economy.income(state.catalog, state) == pytest.approx(18)
    assert economy.profit(state.catalog, state) == pytest.approx(8)


def test_nanobot_factory_cost_doubles():
    state = _make_state()
    assert economy.nanobot_factory_cost(state.catalog, state) == 1_000_000_000
    state.nanobot_factory_count = 1
    assert economy.nanobot_factory_cost(state.catalog, state) == 2_000_000_000


def test_visibility():
    state = _make_state()
    bander = state.catalog.get_tier("bander", 0)
    quantum = state.catalog.get_tier("bander", 3)
    assert not economy.is_producer_visible(state, bander)
    state.researched = ["basic_manufacturing"]
    assert economy.is_producer_visible(state, bander)
    assert not economy.is_producer_visible(state, quantum)
    state.researched.append("quantum_mechanics")
    assert economy.is_producer_visible(state, quantum)


def test_being_produced():
    state = _make_state()
    assert not economy.is_producer_being_produced(state.catalog, state, "bander", 2)
    state.add_producers("bander_line", 0, 1, 1)
    assert economy.is_producer_being_produced(state.catalog, state, "bander", 2)
    assert not economy.is_producer_being_produced(state.catalog, state, "bander", 0)


def test_producer_output_applies_multipliers():
    state = _make_state()
    assert economy.producer_output(state.catalog, state, "bander", 0) == 100
    state.researched = ["robotics"]
    assert economy.producer_output(state.catalog, state, "bander", 0) == 200
    assert economy.producer_output(state.catalog, state, "nope", 0) == 0


def test_rubber_shortage():
    state = _make_state()
    assert not economy.rubber_shortage(state.catalog, state)
    state.money = 0
    assert economy.rubber_shortage(state.catalog, state)
    state.add_producers("rubber_sources", 0, 1, 1)
    assert not economy.rubber_shortage(state.catalog, state)
