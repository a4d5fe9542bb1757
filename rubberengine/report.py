from __future__ import annotations

from dataclasses import dataclass, field

from rubberengine.metrics import (
    EconomySnapshot,
    MetricsCollector,
    PurchaseEvent,
    ResearchEvent,
)


@dataclass
class SimulationReport:
    """Container for simulation results and derived metrics."""

    strategy_description: str = ""
    terminal_description: str = ""
    outcome: str = ""
    total_ticks: int = 0
    final_money: float = 0.0
    total_rubberbands_sold: float = 0.0
    game_over: bool = False

    # Raw metrics
    snapshots: list[EconomySnapshot] = field(default_factory=list)
    purchases: list[PurchaseEvent] = field(default_factory=list)
    research: list[ResearchEvent] = field(default_factory=list)

    # Derived metrics
    research_ticks: dict[str, int] = field(default_factory=dict)
    purchase_gaps: list[int] = field(default_factory=list)
    max_purchase_gap: int = 0
    mean_purchase_gap: float = 0.0
    purchases_per_100_ticks: float = 0.0

    def research_tick(self, research_id: str) -> int | None:
        return self.research_ticks.get(research_id)

    def series(self, attribute: str) -> list[tuple[int, float]]:
        """Return (tick, value) pairs for one snapshot attribute."""
        return [(s.tick, getattr(s, attribute)) for s in self.snapshots]


def build_report(
    collector: MetricsCollector,
    strategy_description: str,
    terminal_description: str,
    outcome: str,
    total_ticks: int,
    final_money: float = 0.0,
    total_rubberbands_sold: float = 0.0,
    game_over: bool = False,
) -> SimulationReport:
    """Build a SimulationReport from collected metrics."""
    research_ticks: dict[str, int] = {}
    for r in collector.research:
        research_ticks.setdefault(r.research_id, r.tick)

    purchase_gaps: list[int] = []
    purchase_ticks = sorted(p.tick for p in collector.purchases)
    if purchase_ticks:
        purchase_gaps.append(purchase_ticks[0])  # gap from tick 0 to first purchase
        for i in range(1, len(purchase_ticks)):
            purchase_gaps.append(purchase_ticks[i] - purchase_ticks[i - 1])

    max_gap = max(purchase_gaps) if purchase_gaps else 0
    mean_gap = (sum(purchase_gaps) / len(purchase_gaps)) if purchase_gaps else 0.0
    rate = (len(collector.purchases) / total_ticks * 100.0) if total_ticks > 0 else 0.0

    return SimulationReport(
        strategy_description=strategy_description,
        terminal_description=terminal_description,
        outcome=outcome,
        total_ticks=total_ticks,
        final_money=final_money,
        total_rubberbands_sold=total_rubberbands_sold,
        game_over=game_over,
        snapshots=collector.snapshots,
        purchases=collector.purchases,
        research=collector.research,
        research_ticks=research_ticks,
        purchase_gaps=purchase_gaps,
        max_purchase_gap=max_gap,
        mean_purchase_gap=mean_gap,
        purchases_per_100_ticks=rate,
    )
