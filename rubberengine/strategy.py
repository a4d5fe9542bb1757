from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from rubberengine.runtime import PurchaseOption

if TYPE_CHECKING:
    from rubberengine.runtime import GameRuntime
    from rubberengine.state import GameState


@dataclass
class OperatorProfile:
    """Day-to-day handling a strategy applies between purchases."""

    hand_bands_per_tick: float = 0.0
    keep_rubber_stocked: bool = True
    buyer_threshold: float | None = None

    def operate(self, runtime: GameRuntime) -> None:
        state = runtime.state
        if state.game_over:
            return
        if state.buyer_hired:
            threshold = self.buyer_threshold
            if threshold is None:
                threshold = runtime.catalog.constants.max_rubber_no_production
            if state.buyer_threshold != threshold:
                runtime.set_buyer_threshold(threshold)
        elif self.keep_rubber_stocked:
            missing = runtime.catalog.constants.max_rubber_no_production - state.rubber
            if missing > 0:
                runtime.buy_rubber(missing)
        if self.hand_bands_per_tick > 0:
            runtime.make_rubberband(self.hand_bands_per_tick)


class Strategy(ABC):
    """Base class for simulation strategies."""

    operator: OperatorProfile | None = None

    @abstractmethod
    def decide_purchases(
        self, state: GameState, affordable: list[PurchaseOption]
    ) -> list[str]:
        """Return ordered list of purchase IDs to buy."""
        ...

    def operate(self, runtime: GameRuntime) -> None:
        """Non-purchase upkeep once per tick: stocking rubber, hand banding."""
        if self.operator is not None:
            self.operator.operate(runtime)

    @abstractmethod
    def describe(self) -> str: ...


class GreedyCheapest(Strategy):
    """Buy the cheapest affordable option first."""

    def __init__(
        self,
        operator: OperatorProfile | None = None,
        kind_weights: dict[str, float] | None = None,
    ) -> None:
        self.operator = operator if operator is not None else OperatorProfile()
        self.kind_weights = kind_weights or {}

    def _weighted_cost(self, option: PurchaseOption) -> float:
        return option.cost * self.kind_weights.get(option.kind, 1.0)

    def decide_purchases(
        self, state: GameState, affordable: list[PurchaseOption]
    ) -> list[str]:
        if not affordable:
            return []
        return [p.id for p in sorted(affordable, key=self._weighted_cost)]

    def describe(self) -> str:
        parts = ["GreedyCheapest"]
        if self.operator and self.operator.hand_bands_per_tick:
            parts.append(f"({self.operator.hand_bands_per_tick:g} hand bands/tick)")
        return " ".join(parts)


class SaveForBest(Strategy):
    """Save up for the cheapest option that is not yet affordable."""

    def __init__(
        self,
        runtime: GameRuntime | None = None,
        operator: OperatorProfile | None = None,
    ) -> None:
        self.runtime = runtime
        self.operator = operator if operator is not None else OperatorProfile()
        self._saving_for: str | None = None

    def decide_purchases(
        self, state: GameState, affordable: list[PurchaseOption]
    ) -> list[str]:
        if self._saving_for:
            for option in affordable:
                if option.id == self._saving_for:
                    self._saving_for = None
                    return [option.id]
            if self.runtime is None or any(
                p.id == self._saving_for for p in self.runtime.get_available_purchases()
            ):
                return []
            # The target vanished (e.g. a line now builds it); pick again.
            self._saving_for = None

        if self.runtime:
            pending = [p for p in self.runtime.get_available_purchases() if not p.affordable]
            if pending:
                self._saving_for = min(pending, key=lambda p: p.cost).id
                return []

        if affordable:
            return [min(affordable, key=lambda p: p.cost).id]
        return []

    def describe(self) -> str:
        return "SaveForBest"


class PriorityList(Strategy):
    """Follow a designer-specified purchase order."""

    def __init__(
        self,
        priorities: list[tuple[str, int]],
        fallback: Strategy | None = None,
        operator: OperatorProfile | None = None,
    ) -> None:
        self.priorities = priorities  # (purchase_id, target_count)
        self.fallback = fallback
        self.operator = operator if operator is not None else OperatorProfile()

    def decide_purchases(
        self, state: GameState, affordable: list[PurchaseOption]
    ) -> list[str]:
        by_id = {p.id: p for p in affordable}
        for purchase_id, target_count in self.priorities:
            option = by_id.get(purchase_id)
            if option is not None and option.count < target_count:
                return [purchase_id]

        if self.fallback:
            return self.fallback.decide_purchases(state, affordable)
        return []

    def describe(self) -> str:
        items = ", ".join(f"{pid}x{cnt}" for pid, cnt in self.priorities)
        return f"PriorityList([{items}])"


class CustomStrategy(Strategy):
    """Strategy defined by callables."""

    def __init__(
        self,
        decide_fn: Callable[
            [GameState, list[PurchaseOption]], list[str]
        ] | None = None,
        operate_fn: Callable[[GameRuntime], None] | None = None,
        name: str = "Custom",
    ) -> None:
        self._decide_fn = decide_fn
        self._operate_fn = operate_fn
        self._name = name

    def decide_purchases(
        self, state: GameState, affordable: list[PurchaseOption]
    ) -> list[str]:
        if self._decide_fn:
            return self._decide_fn(state, affordable)
        return []

    def operate(self, runtime: GameRuntime) -> None:
        if self._operate_fn:
            self._operate_fn(runtime)

    def describe(self) -> str:
        return self._name


STRATEGY_REGISTRY: dict[str, type[Strategy]] = {
    "greedy_cheapest": GreedyCheapest,
    "save_for_best": SaveForBest,
    "priority_list": PriorityList,
    "custom": CustomStrategy,
}
