from __future__ import annotations

from rubberengine.report import SimulationReport


def plot_simulation(
    report: SimulationReport,
    output_path: str | None = None,
) -> None:
    """Generate a 4-panel matplotlib visualization of simulation results.

    Requires matplotlib (optional dependency).
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError(
            "matplotlib is required for visualization. "
            "Install with: pip install rubberengine[viz]"
        )

    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    fig.suptitle(f"Rubberband Simulation: {report.strategy_description}", fontsize=14)

    # 1. Stocks over time (log scale)
    ax1 = axes[0][0]
    for attribute in ("money", "rubber", "rubberbands"):
        series = report.series(attribute)
        if series:
            ticks, values = zip(*series)
            ax1.plot(ticks, [max(v, 1e-10) for v in values], label=attribute)
    ax1.set_yscale("log")
    ax1.set_xlabel("Tick")
    ax1.set_ylabel("Amount")
    ax1.set_title("Stocks")
    ax1.legend(fontsize=8)
    ax1.grid(True, alpha=0.3)

    # 2. Production rates against demand
    ax2 = axes[0][1]
    for attribute in ("rubber_rate", "rubberband_rate", "demand"):
        series = report.series(attribute)
        if series:
            ticks, values = zip(*series)
            if any(v > 0 for v in values):
                ax2.plot(ticks, values, label=attribute)
    ax2.set_xlabel("Tick")
    ax2.set_ylabel("Units / tick")
    ax2.set_title("Production vs Demand")
    ax2.legend(fontsize=8)
    ax2.grid(True, alpha=0.3)

    # 3. Purchase timeline
    ax3 = axes[1][0]
    if report.purchases:
        ticks = [p.tick for p in report.purchases]
        ids = [p.purchase_id for p in report.purchases]
        kinds = sorted(set(ids))
        y_map = {k: i for i, k in enumerate(kinds)}
        ax3.scatter(ticks, [y_map[i] for i in ids], s=10, alpha=0.6)
        ax3.set_yticks(range(len(kinds)))
        ax3.set_yticklabels(kinds, fontsize=7)
        ax3.set_xlabel("Tick")
        ax3.set_title("Purchase Timeline")
        ax3.grid(True, alpha=0.3)

    # 4. Profit per tick
    ax4 = axes[1][1]
    series = report.series("profit")
    if series:
        ticks, values = zip(*series)
        ax4.plot(ticks, values, color="green")
        ax4.axhline(0, color="red", linestyle="--", linewidth=0.8)
        ax4.set_xlabel("Tick")
        ax4.set_ylabel("Money / tick")
        ax4.set_title("Projected Profit")
        ax4.grid(True, alpha=0.3)

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=150)
    else:
        plt.show()
