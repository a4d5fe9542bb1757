"""Tests for simulation, strategy, terminal and report modules."""
import json
import logging

import pytest

from rubberengine.cli import main
from rubberengine.export import export_csv, export_json
from rubberengine.formatting import format_text_report
from rubberengine.metrics import MetricsCollector
from rubberengine.parameters import default_catalog
from rubberengine.report import build_report
from rubberengine.runtime import GameRuntime, PurchaseOption
from rubberengine.simulation import Simulation, SimulationConfig
from rubberengine.state import GameState
from rubberengine.strategy import (
    STRATEGY_REGISTRY,
    CustomStrategy,
    GreedyCheapest,
    OperatorProfile,
    PriorityList,
    SaveForBest,
)
from rubberengine.terminal import SimulationContext, Terminal


def _run(strategy, terminal, **config):
    sim = Simulation(
        catalog=default_catalog(),
        strategy=strategy,
        terminal=terminal,
        config=SimulationConfig(seed=1, **config),
    )
    return sim, sim.run()


def _option(id: str, kind: str, cost: float, count: int = 0) -> PurchaseOption:
    return PurchaseOption(id, id, kind, cost, True, count)


# ── Simulation ───────────────────────────────────────────────────────


def test_greedy_run():
    sim, report = _run(GreedyCheapest(), Terminal.ticks(50))
    assert report.total_ticks == 50
    assert report.outcome == "Terminal condition met"
    assert report.research_tick("basic_manufacturing") == 1
    assert report.purchases
    assert sim.runtime.state.count("bander", 0) > 0


def test_priority_list_run():
    strategy = PriorityList(
        [("research:basic_manufacturing", 1), ("producer:bander/0", 3)]
    )
    sim, _report = _run(strategy, Terminal.ticks(10))
    assert sim.runtime.state.count("bander", 0) == 3


def test_stall_terminal():
    _sim, report = _run(CustomStrategy(name="Idle"), Terminal.stall(10))
    assert report.total_ticks == 10
    assert report.outcome == "Terminal condition met"
    assert report.strategy_description == "Idle"


def test_max_ticks():
    _sim, report = _run(CustomStrategy(), Terminal.ticks(100), max_ticks=5)
    assert report.total_ticks == 5
    assert report.outcome == "Max ticks reached"


def test_snapshot_interval():
    _sim, report = _run(CustomStrategy(), Terminal.ticks(50), snapshot_interval=10)
    assert [s.tick for s in report.snapshots] == [1, 11, 21, 31, 41]


def test_game_over_ends_run():
    sim = Simulation(
        catalog=default_catalog(),
        strategy=GreedyCheapest(),
        terminal=Terminal.ticks(10),
        save={"consumedResources": 1e56},
    )
    report = sim.run()
    assert report.outcome == "Game over"
    assert report.game_over
    assert report.purchases == []


def test_bad_save_starts_fresh(caplog):
    with caplog.at_level(logging.WARNING):
        sim = Simulation(
            catalog=default_catalog(),
            strategy=CustomStrategy(),
            terminal=Terminal.ticks(1),
            save="garbage",
        )
    assert sim.runtime.state.money == 3_000
    assert "could not be loaded" in caplog.text


# ── Strategies ───────────────────────────────────────────────────────


def test_greedy_kind_weights():
    options = [_option("research:a", "research", 50), _option("producer:b/0", "producer", 100)]
    assert GreedyCheapest().decide_purchases(None, options)[0] == "research:a"
    weighted = GreedyCheapest(kind_weights={"research": 10})
    assert weighted.decide_purchases(None, options)[0] == "producer:b/0"


def test_save_for_best_waits():
    runtime = GameRuntime()
    runtime.state.money = 50
    strategy = SaveForBest(runtime=runtime)
    assert strategy.decide_purchases(runtime.state, []) == []

    runtime.state.money = 200
    affordable = runtime.get_affordable_purchases()
    assert strategy.decide_purchases(runtime.state, affordable) == [
        "research:basic_manufacturing"
    ]


def test_save_for_best_without_runtime():
    options = [_option("x", "research", 30), _option("y", "research", 10)]
    assert SaveForBest().decide_purchases(None, options) == ["y"]


def test_priority_list_falls_back():
    fallback = GreedyCheapest()
    strategy = PriorityList([("a", 1)], fallback=fallback)
    options = [_option("a", "producer", 5, count=1), _option("b", "producer", 7)]
    assert strategy.decide_purchases(None, options) == ["a", "b"]
    assert "ax1" in strategy.describe()


def test_operator_stocks_rubber_and_bands():
    runtime = GameRuntime()
    OperatorProfile(hand_bands_per_tick=10).operate(runtime)
    assert runtime.state.rubber == pytest.approx(980)
    assert runtime.state.rubberbands == 10


def test_operator_sets_buyer_threshold():
    runtime = GameRuntime()
    runtime.state.buyer_hired = True
    OperatorProfile(buyer_threshold=250).operate(runtime)
    assert runtime.state.buyer_threshold == 250
    assert runtime.state.rubber == 0


def test_custom_strategy_operate():
    seen = []
    strategy = CustomStrategy(operate_fn=seen.append)
    runtime = GameRuntime()
    strategy.operate(runtime)
    assert seen == [runtime]


def test_registry():
    assert STRATEGY_REGISTRY["greedy_cheapest"] is GreedyCheapest
    assert STRATEGY_REGISTRY["save_for_best"] is SaveForBest


# ── Terminal conditions ──────────────────────────────────────────────


def test_terminal_conditions():
    state = GameState(default_catalog())
    assert not Terminal.money(5_000).is_met(state)
    state.money = 5_000
    assert Terminal.money(5_000).is_met(state)

    assert not Terminal.research("robotics").is_met(state)
    state.researched.append("robotics")
    assert Terminal.research("robotics").is_met(state)

    assert not Terminal.stall(5).is_met(state)
    state.tick_count = 7
    assert Terminal.stall(5).is_met(state, SimulationContext(last_purchase_tick=2))

    both = Terminal.all(Terminal.money(1), Terminal.ticks(10))
    either = Terminal.any(Terminal.money(1), Terminal.ticks(10))
    assert not both.is_met(state)
    assert either.is_met(state)
    assert both.describe() == "money(1) AND ticks(10)"
    assert either.describe() == "money(1) OR ticks(10)"


# ── Reports ──────────────────────────────────────────────────────────


def test_report_gaps():
    state = GameState(default_catalog())
    collector = MetricsCollector(state.catalog)
    for tick, pid in ((3, "research:basic_manufacturing"), (5, "producer:bander/0"), (10, "buyer")):
        state.tick_count = tick
        collector.record_purchase(state, pid, 1.0)
    report = build_report(collector, "s", "t", "done", total_ticks=20)
    assert report.purchase_gaps == [3, 2, 5]
    assert report.max_purchase_gap == 5
    assert report.mean_purchase_gap == pytest.approx(10 / 3)
    assert report.purchases_per_100_ticks == pytest.approx(15)
    assert report.research_ticks == {"basic_manufacturing": 3}


def test_text_report():
    _sim, report = _run(GreedyCheapest(), Terminal.ticks(20))
    text = format_text_report(report)
    assert "Rubberband Simulation Report" in text
    assert "RESEARCH:" in text
    assert "FINAL ECONOMY:" in text


def test_exports(tmp_path):
    _sim, report = _run(GreedyCheapest(), Terminal.ticks(20))
    export_csv(report, tmp_path / "run")
    header = (tmp_path / "run_economy.csv").read_text().splitlines()[0]
    assert header.startswith("tick,money,rubber")
    assert (tmp_path / "run_purchases.csv").exists()
    assert "basic_manufacturing" in (tmp_path / "run_research.csv").read_text()

    export_json(report, tmp_path / "run.json")
    data = json.loads((tmp_path / "run.json").read_text())
    assert data["total_ticks"] == 20
    assert data["final_snapshot"]["tick"] == 20


def test_plot(tmp_path):
    matplotlib = pytest.importorskip("matplotlib")
    matplotlib.use("Agg")
    from rubberengine.visualization import plot_simulation

    _sim, report = _run(GreedyCheapest(), Terminal.ticks(20))
    plot_simulation(report, str(tmp_path / "plot.png"))
    assert (tmp_path / "plot.png").exists()


# ── CLI ──────────────────────────────────────────────────────────────


def test_cli_simulate(capsys, tmp_path):
    save = tmp_path / "save.json"
    main(["simulate", "--ticks", "20", "--seed", "1", "--save", str(save)])
    out = capsys.readouterr().out
    assert "Rubberband Simulation Report" in out
    assert json.loads(save.read_text())["tickCount"] == 20

    main(["simulate", "--ticks", "30", "--load", str(save), "--strategy", "save_for_best"])
    assert "at tick 30" in capsys.readouterr().out


def test_cli_monte_carlo(capsys):
    main(["simulate", "--ticks", "10", "--seed", "1", "--monte-carlo", "2"])
    assert "Monte Carlo: 2 runs" in capsys.readouterr().out


def test_cli_without_command():
    with pytest.raises(SystemExit):
        main([])
