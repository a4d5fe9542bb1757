from __future__ import annotations

from rubberengine.report import SimulationReport


def format_text_report(report: SimulationReport) -> str:
    """Format a simulation report for console output."""
    lines: list[str] = []

    lines.append("=" * 40 + " Rubberband Simulation Report " + "=" * 40)
    lines.append(f"Strategy: {report.strategy_description}")
    lines.append(f"Terminal: {report.terminal_description}")
    lines.append(f"Result: {report.outcome} at tick {report.total_ticks}")
    lines.append(f"Money: {report.final_money:,.2f}")
    lines.append(f"Rubberbands sold: {report.total_rubberbands_sold:,.0f}")
    lines.append("")

    if report.research:
        lines.append("RESEARCH:")
        for r in report.research:
            lines.append(f"  * {r.research_id:.<30s} tick {r.tick}")
        lines.append("")

    lines.append("PURCHASES:")
    lines.append(f"  Total: {len(report.purchases)}")
    lines.append(f"  Rate: {report.purchases_per_100_ticks:.1f}/100 ticks")
    lines.append(f"  Max gap: {report.max_purchase_gap} ticks")
    lines.append(f"  Mean gap: {report.mean_purchase_gap:.1f} ticks")

    if report.snapshots:
        last = report.snapshots[-1]
        lines.append("")
        lines.append("FINAL ECONOMY:")
        lines.append(f"  Rubber: {last.rubber:,.0f} (+{last.rubber_rate:,.0f}/tick)")
        lines.append(f"  Rubberbands: {last.rubberbands:,.0f} (+{last.rubberband_rate:,.0f}/tick)")
        lines.append(f"  Demand: {last.demand:,.0f}/tick")
        lines.append(f"  Profit: {last.profit:,.2f}/tick")
        lines.append(f"  Marketing level: {last.marketing_level}")
        lines.append(f"  Producers owned: {last.producers_owned}")

    return "\n".join(lines)
