from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rubberengine import economy

if TYPE_CHECKING:
    from rubberengine.catalog import Catalog
    from rubberengine.state import GameState


@dataclass
class EconomySnapshot:
    tick: int
    money: float
    rubber: float
    rubberbands: float
    rubber_rate: float
    rubberband_rate: float
    demand: float
    profit: float
    marketing_level: int
    consumed_resources: float
    producers_owned: int
    nanobots: float


@dataclass
class PurchaseEvent:
    tick: int
    purchase_id: str
    cost_paid: float
    money_after: float


@dataclass
class ResearchEvent:
    tick: int
    research_id: str


class MetricsCollector:
    """Collects simulation metrics every *snapshot_interval* ticks."""

    def __init__(self, catalog: Catalog, snapshot_interval: int = 1) -> None:
        self.catalog = catalog
        self.snapshot_interval = max(1, snapshot_interval)
        self._last_snapshot_tick: int | None = None

        self.snapshots: list[EconomySnapshot] = []
        self.purchases: list[PurchaseEvent] = []
        self.research: list[ResearchEvent] = []

    def record_tick(self, state: GameState) -> None:
        """Record a snapshot if enough ticks have passed."""
        last = self._last_snapshot_tick
        if last is None or state.tick_count - last >= self.snapshot_interval:
            self._take_snapshot(state)
            self._last_snapshot_tick = state.tick_count

    def record_purchase(self, state: GameState, purchase_id: str, cost_paid: float) -> None:
        self.purchases.append(
            PurchaseEvent(
                tick=state.tick_count,
                purchase_id=purchase_id,
                cost_paid=cost_paid,
                money_after=state.money,
            )
        )
        if purchase_id.startswith("research:"):
            self.research.append(
                ResearchEvent(state.tick_count, purchase_id.removeprefix("research:"))
            )

    def _take_snapshot(self, state: GameState) -> None:
        self.snapshots.append(
            EconomySnapshot(
                tick=state.tick_count,
                money=state.money,
                rubber=state.rubber,
                rubberbands=state.rubberbands,
                rubber_rate=state.rubber_production_rate,
                rubberband_rate=state.machine_production_rate,
                demand=economy.calculate_demand(self.catalog, state),
                profit=economy.profit(self.catalog, state),
                marketing_level=state.marketing_level,
                consumed_resources=state.consumed_resources,
                producers_owned=sum(sum(row) for row in state.producers.values()),
                nanobots=state.nanobot_count,
            )
        )
