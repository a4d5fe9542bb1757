from __future__ import annotations

import csv
import json
from dataclasses import asdict, fields
from pathlib import Path

from rubberengine.metrics import EconomySnapshot
from rubberengine.report import SimulationReport


def export_csv(report: SimulationReport, path: str | Path) -> None:
    """Export simulation data as CSV files.

    Creates three files:
      - {path}_economy.csv
      - {path}_purchases.csv
      - {path}_research.csv
    """
    base = str(path)

    with open(f"{base}_economy.csv", "w", newline="") as f:
        writer = csv.writer(f)
        columns = [fld.name for fld in fields(EconomySnapshot)]
        writer.writerow(columns)
        for s in report.snapshots:
            writer.writerow([getattr(s, c) for c in columns])

    with open(f"{base}_purchases.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["tick", "purchase_id", "cost_paid", "money_after"])
        for p in report.purchases:
            writer.writerow([p.tick, p.purchase_id, p.cost_paid, p.money_after])

    with open(f"{base}_research.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["tick", "research_id"])
        for r in report.research:
            writer.writerow([r.tick, r.research_id])


def export_json(report: SimulationReport, path: str | Path) -> None:
    """Export full simulation report as JSON."""
    data = {
        "strategy": report.strategy_description,
        "terminal": report.terminal_description,
        "outcome": report.outcome,
        "total_ticks": report.total_ticks,
        "final_money": report.final_money,
        "total_rubberbands_sold": report.total_rubberbands_sold,
        "game_over": report.game_over,
        "research_ticks": report.research_ticks,
        "purchase_count": len(report.purchases),
        "purchases_per_100_ticks": report.purchases_per_100_ticks,
        "max_purchase_gap": report.max_purchase_gap,
        "mean_purchase_gap": report.mean_purchase_gap,
        "purchases": [asdict(p) for p in report.purchases],
        "final_snapshot": asdict(report.snapshots[-1]) if report.snapshots else None,
    }
    with open(str(path), "w") as f:
        json.dump(data, f, indent=2)
