"""Tests for MCP server tool functions."""
import json

import pytest

from rubberengine.parameters import default_catalog
from rubberengine.runtime import GameRuntime

from rubberengine.mcp.server import (
    _GameHolder,
    _tool_buy_rubber,
    _tool_get_available_purchases,
    _tool_get_game_info,
    _tool_get_game_state,
    _tool_get_producer_info,
    _tool_load_game,
    _tool_make_rubberband,
    _tool_new_game,
    _tool_purchase,
    _tool_save_game,
    _tool_sell_producer,
    _tool_set_buyer_threshold,
    _tool_set_nano_allocation,
    _tool_set_rubberband_price,
    _tool_wait,
    create_server,
)


@pytest.fixture
def holder() -> _GameHolder:
    catalog = default_catalog()
    return _GameHolder(catalog=catalog, runtime=GameRuntime(catalog, seed=1))


def test_game_info(holder):
    info = _tool_get_game_info(holder)
    assert [f["id"] for f in info["families"]] == [
        "bander",
        "rubber_sources",
        "nanoswarm",
        "rubber_factory_line",
        "bander_line",
    ]
    assert info["families"][0]["tiers"][0]["name"] == "Bander"
    assert any(r["id"] == "robotics" for r in info["research"])


def test_game_state(holder):
    state = _tool_get_game_state(holder)
    assert state["money"] == 3_000
    assert state["tick"] == 0
    assert state["producers"] == {}
    assert state["stats"]["demand"] == 18
    json.dumps(state)


def test_purchase_flow(holder):
    ids = [p["id"] for p in _tool_get_available_purchases(holder)["purchases"]]
    assert "research:basic_manufacturing" in ids

    result = _tool_purchase(holder, "research:basic_manufacturing")
    assert result["success"]
    assert result["money"] == 2_900

    result = _tool_purchase(holder, "producer:bander/0")
    assert result["success"]
    state = _tool_get_game_state(holder)
    assert state["producers"] == {"bander": {"Bander": {"count": 1, "purchased": 1}}}


def test_purchase_failures(holder):
    assert not _tool_purchase(holder, "producer:bander/0")["success"]
    holder.runtime.state.money = 0
    result = _tool_purchase(holder, "research:basic_manufacturing")
    assert result == {"success": False, "reason": "Cannot afford"}


def test_producer_info(holder):
    info = _tool_get_producer_info(holder, "bander", 0)
    assert info["name"] == "Bander"
    assert info["cost"] == 100
    assert info["production"]["input"] == "rubber"
    assert not info["visible"]

    line = _tool_get_producer_info(holder, "bander_line", 0)
    assert line["production"]["target"] == "producer:bander/2"

    assert "error" in _tool_get_producer_info(holder, "bander", 99)


def test_sell_producer(holder):
    holder.runtime.state.add_producers("bander", 0, 2, 2)
    result = _tool_sell_producer(holder, "bander", 0)
    assert result["success"]
    assert result["refund"] == 55
    assert result["new_count"] == 1
    assert not _tool_sell_producer(holder, "bander", 0, 5)["success"]
    assert "error" in _tool_sell_producer(holder, "bander", 0, 0)


def test_rubber_and_bands(holder):
    assert not _tool_make_rubberband(holder)["success"]
    result = _tool_buy_rubber(holder, 100)
    assert result["success"]
    assert result["bought"] == 100
    assert _tool_make_rubberband(holder, 5)["rubberbands"] == 5
    assert "error" in _tool_buy_rubber(holder, -1)
    assert "error" in _tool_make_rubberband(holder, 0)
    assert "error" in _tool_make_rubberband(holder, 5_000)


def test_settings(holder):
    result = _tool_set_rubberband_price(holder, 0)
    assert result["success"]
    assert result["rubberband_price"] == 0.01
    assert not _tool_set_buyer_threshold(holder, -5)["success"]
    assert _tool_set_buyer_threshold(holder, 300)["buyer_threshold"] == 300

    assert _tool_set_nano_allocation(holder, 0.5, 0.5, 0, 0)["success"]
    assert not _tool_set_nano_allocation(holder, 0.5, 0.5, 0.5, 0)["success"]
    assert holder.runtime.state.nano_allocation.rubber_machines == 0.5


def test_wait(holder):
    result = _tool_wait(holder, 10)
    assert result["waited"] == 10
    assert result["tick"] == 10
    assert "error" in _tool_wait(holder, 0)
    assert "error" in _tool_wait(holder, 100_000)


def test_wait_reports_game_over(holder):
    holder.runtime.state.consumed_resources = 1e56
    assert _tool_wait(holder, 5)["game_over"]


def test_save_load_new_game(holder):
    _tool_wait(holder, 7)
    save = _tool_save_game(holder)["save"]

    assert _tool_new_game(holder)["success"]
    assert holder.runtime.state.tick_count == 0

    assert _tool_load_game(holder, save) == {"success": True, "tick": 7}
    result = _tool_load_game(holder, "not a save")
    assert not result["success"]
    assert holder.runtime.state.tick_count == 0


# ── create_server ────────────────────────────────────────────────────


class TestCreateServer:
    def test_creates_server(self):
        assert create_server() is not None

    def test_accepts_catalog(self):
        assert create_server(default_catalog()) is not None
