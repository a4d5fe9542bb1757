from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from rubberengine.catalog import Catalog
from rubberengine.metrics import MetricsCollector
from rubberengine.report import SimulationReport, build_report
from rubberengine.runtime import GameRuntime
from rubberengine.strategy import Strategy
from rubberengine.terminal import SimulationContext, TerminalCondition

logger = logging.getLogger(__name__)

MAX_TICKS = 10_000_000


@dataclass(frozen=True)
class SimulationConfig:
    seed: int | None = None
    snapshot_interval: int = 1
    progress_interval: int = 1_000
    max_ticks: int = MAX_TICKS


class Simulation:
    """Orchestrates a headless run of the economy under a strategy."""

    def __init__(
        self,
        catalog: Catalog,
        strategy: Strategy,
        terminal: TerminalCondition,
        config: SimulationConfig | None = None,
        save: dict[str, Any] | str | None = None,
    ) -> None:
        self.catalog = catalog
        self.strategy = strategy
        self.terminal = terminal
        self.config = config or SimulationConfig()

        self.runtime = GameRuntime(catalog, seed=self.config.seed)
        if save is not None and not self.runtime.load(save):
            logger.warning("Save could not be loaded; simulating a fresh game")
        self.collector = MetricsCollector(
            catalog, snapshot_interval=self.config.snapshot_interval
        )
        self.context = SimulationContext(last_purchase_tick=self.runtime.state.tick_count)

    def run(self) -> SimulationReport:
        runtime = self.runtime
        state = runtime.state
        ticks_run = 0

        while not self.terminal.is_met(state, self.context):
            if state.game_over:
                break
            ticks_run += 1
            if ticks_run > self.config.max_ticks:
                break

            # 1. Advance the economy
            runtime.tick()

            # 2. Routine handling
            self.strategy.operate(runtime)

            # 3. Evaluate purchases
            options = {p.id: p for p in runtime.get_affordable_purchases()}
            to_buy = self.strategy.decide_purchases(state, list(options.values()))
            for purchase_id in to_buy:
                option = options.get(purchase_id)
                money_before = state.money
                if runtime.try_purchase(purchase_id):
                    cost = option.cost if option else money_before - state.money
                    self.collector.record_purchase(state, purchase_id, cost)
                    self.context.last_purchase_tick = state.tick_count
                    self.context.total_purchases += 1
                    # Re-price since state changed
                    options = {p.id: p for p in runtime.get_affordable_purchases()}

            # 4. Record metrics
            self.collector.record_tick(state)

            if self.config.progress_interval and state.tick_count % self.config.progress_interval == 0:
                logger.debug(
                    "tick %d: money=%.2f rubberbands=%.0f purchases=%d",
                    state.tick_count,
                    state.money,
                    state.rubberbands,
                    self.context.total_purchases,
                )

            if math.isnan(state.money) or math.isinf(state.money):
                return self._build_report("Aborted: NaN/Inf detected")

        if state.game_over:
            outcome = "Game over"
        elif self.terminal.is_met(state, self.context):
            outcome = "Terminal condition met"
        else:
            outcome = "Max ticks reached"
        return self._build_report(outcome)

    def _build_report(self, outcome: str) -> SimulationReport:
        state = self.runtime.state
        return build_report(
            collector=self.collector,
            strategy_description=self.strategy.describe(),
            terminal_description=self.terminal.describe(),
            outcome=outcome,
            total_ticks=state.tick_count,
            final_money=state.money,
            total_rubberbands_sold=state.total_rubberbands_sold,
            game_over=state.game_over,
        )
