from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

from rubberengine.catalog import Catalog
from rubberengine.formatting import format_text_report
from rubberengine.parameters import default_catalog
from rubberengine.simulation import Simulation, SimulationConfig
from rubberengine.strategy import (
    GreedyCheapest,
    OperatorProfile,
    SaveForBest,
    Strategy,
)
from rubberengine.terminal import Terminal, TerminalCondition


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rubberengine",
        description="Rubberband economy simulation CLI",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command")

    sim = sub.add_parser("simulate", help="Run a simulation")
    sim.add_argument(
        "--catalog",
        default=None,
        help="Python module with define_catalog() (default: built-in economy)",
    )
    sim.add_argument(
        "--strategy",
        default="greedy_cheapest",
        choices=["greedy_cheapest", "save_for_best"],
        help="Strategy to use (default: greedy_cheapest)",
    )
    sim.add_argument(
        "--hand-bands", type=float, default=0.0, help="Rubberbands made by hand per tick"
    )
    sim.add_argument("--ticks", type=int, default=3600, help="Ticks to simulate")
    sim.add_argument("--seed", type=int, default=None, help="Random seed")
    sim.add_argument(
        "--snapshot-interval", type=int, default=1, help="Ticks between metric snapshots"
    )
    sim.add_argument("--load", default=None, help="Save file to start from")
    sim.add_argument("--save", default=None, help="Write the final state to this file")
    sim.add_argument("--export-csv", default=None, help="CSV export path prefix")
    sim.add_argument("--export-json", default=None, help="JSON export path")
    sim.add_argument("--plot", default=None, help="Plot output path (PNG)")
    sim.add_argument(
        "--monte-carlo",
        type=int,
        default=None,
        help="Number of Monte Carlo runs",
    )

    return parser


def load_catalog(module_path: str | None) -> Catalog:
    """Import module and call define_catalog(); the built-in economy when None."""
    if module_path is None:
        return default_catalog()
    mod = importlib.import_module(module_path)
    if not hasattr(mod, "define_catalog"):
        print(f"Error: module {module_path!r} has no define_catalog() function")
        sys.exit(1)
    return mod.define_catalog()


def build_strategy(name: str, hand_bands: float) -> Strategy:
    operator = OperatorProfile(hand_bands_per_tick=hand_bands)
    if name == "save_for_best":
        return SaveForBest(operator=operator)
    return GreedyCheapest(operator=operator)


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "simulate":
        catalog = load_catalog(args.catalog)
        terminal: TerminalCondition = Terminal.any(
            Terminal.ticks(args.ticks), Terminal.game_over()
        )
        save = Path(args.load).read_text() if args.load else None

        if args.monte_carlo and args.monte_carlo > 1:
            _run_monte_carlo(catalog, terminal, args, save)
            return

        strategy = build_strategy(args.strategy, args.hand_bands)
        sim = Simulation(
            catalog=catalog,
            strategy=strategy,
            terminal=terminal,
            config=SimulationConfig(
                seed=args.seed, snapshot_interval=args.snapshot_interval
            ),
            save=save,
        )

        # SaveForBest looks ahead at unaffordable options
        if isinstance(strategy, SaveForBest) and strategy.runtime is None:
            strategy.runtime = sim.runtime

        report = sim.run()
        print(format_text_report(report))

        if args.save:
            Path(args.save).write_text(sim.runtime.save_json())
            print(f"\nState saved to {args.save}")

        if args.export_csv:
            from rubberengine.export import export_csv
            export_csv(report, args.export_csv)
            print(f"\nCSV exported to {args.export_csv}_*.csv")

        if args.export_json:
            from rubberengine.export import export_json
            export_json(report, args.export_json)
            print(f"\nJSON exported to {args.export_json}")

        if args.plot:
            from rubberengine.visualization import plot_simulation
            plot_simulation(report, args.plot)
            print(f"\nPlot saved to {args.plot}")


def _run_monte_carlo(
    catalog: Catalog,
    terminal: TerminalCondition,
    args: argparse.Namespace,
    save: str | None,
) -> None:
    """Run multiple simulations and report aggregate results."""
    n = args.monte_carlo
    research_ticks: dict[str, list[int]] = {}
    final_money: list[float] = []
    game_overs = 0

    for i in range(n):
        strategy = build_strategy(args.strategy, args.hand_bands)
        sim = Simulation(
            catalog=catalog,
            strategy=strategy,
            terminal=terminal,
            config=SimulationConfig(
                seed=(args.seed + i) if args.seed is not None else None,
                snapshot_interval=args.snapshot_interval,
            ),
            save=save,
        )
        if isinstance(strategy, SaveForBest):
            strategy.runtime = sim.runtime

        report = sim.run()
        final_money.append(report.final_money)
        if report.game_over:
            game_overs += 1
        for rid, t in report.research_ticks.items():
            research_ticks.setdefault(rid, []).append(t)

    print(f"Monte Carlo: {n} runs")
    print(f"Final money: mean={sum(final_money)/n:,.2f}, "
          f"min={min(final_money):,.2f}, max={max(final_money):,.2f}")
    print(f"Game over rate: {game_overs}/{n}")
    if research_ticks:
        print("Research ticks (mean / min / max):")
        for rid, ticks in sorted(research_ticks.items()):
            mean = sum(ticks) / len(ticks)
            print(f"  {rid}: {mean:.1f} / {min(ticks)} / {max(ticks)}")
