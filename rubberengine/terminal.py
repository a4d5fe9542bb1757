from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rubberengine.state import GameState


@dataclass
class SimulationContext:
    """Extra context available to terminal conditions during simulation."""

    last_purchase_tick: int = 0
    total_purchases: int = 0


class TerminalCondition(ABC):
    """Base class for simulation stopping conditions."""

    @abstractmethod
    def is_met(self, state: GameState, context: SimulationContext | None = None) -> bool: ...

    @abstractmethod
    def describe(self) -> str: ...


class _TicksTerminal(TerminalCondition):
    def __init__(self, ticks: int) -> None:
        self.ticks = ticks

    def is_met(self, state: GameState, context: SimulationContext | None = None) -> bool:
        return state.tick_count >= self.ticks

    def describe(self) -> str:
        return f"ticks({self.ticks})"


class _GameOverTerminal(TerminalCondition):
    def is_met(self, state: GameState, context: SimulationContext | None = None) -> bool:
        return state.game_over

    def describe(self) -> str:
        return "game_over"


class _MoneyTerminal(TerminalCondition):
    def __init__(self, amount: float) -> None:
        self.amount = amount

    def is_met(self, state: GameState, context: SimulationContext | None = None) -> bool:
        return state.money >= self.amount

    def describe(self) -> str:
        return f"money({self.amount:g})"


class _ResearchTerminal(TerminalCondition):
    def __init__(self, research_id: str) -> None:
        self.research_id = research_id

    def is_met(self, state: GameState, context: SimulationContext | None = None) -> bool:
        return state.has_research(self.research_id)

    def describe(self) -> str:
        return f'research("{self.research_id}")'


class _StallTerminal(TerminalCondition):
    def __init__(self, max_idle_ticks: int) -> None:
        self.max_idle_ticks = max_idle_ticks

    def is_met(self, state: GameState, context: SimulationContext | None = None) -> bool:
        if context is None:
            return False
        return state.tick_count - context.last_purchase_tick >= self.max_idle_ticks

    def describe(self) -> str:
        return f"stall({self.max_idle_ticks})"


class _AnyTerminal(TerminalCondition):
    def __init__(self, conditions: list[TerminalCondition]) -> None:
        self.conditions = conditions

    def is_met(self, state: GameState, context: SimulationContext | None = None) -> bool:
        return any(c.is_met(state, context) for c in self.conditions)

    def describe(self) -> str:
        return " OR ".join(c.describe() for c in self.conditions)


class _AllTerminal(TerminalCondition):
    def __init__(self, conditions: list[TerminalCondition]) -> None:
        self.conditions = conditions

    def is_met(self, state: GameState, context: SimulationContext | None = None) -> bool:
        return all(c.is_met(state, context) for c in self.conditions)

    def describe(self) -> str:
        return " AND ".join(c.describe() for c in self.conditions)


class Terminal:
    """Factory for built-in terminal conditions."""

    @staticmethod
    def ticks(ticks: int) -> TerminalCondition:
        return _TicksTerminal(ticks)

    @staticmethod
    def game_over() -> TerminalCondition:
        return _GameOverTerminal()

    @staticmethod
    def money(amount: float) -> TerminalCondition:
        return _MoneyTerminal(amount)

    @staticmethod
    def research(research_id: str) -> TerminalCondition:
        return _ResearchTerminal(research_id)

    @staticmethod
    def stall(max_idle_ticks: int = 600) -> TerminalCondition:
        return _StallTerminal(max_idle_ticks)

    @staticmethod
    def any(*conditions: TerminalCondition) -> TerminalCondition:
        return _AnyTerminal(list(conditions))

    @staticmethod
    def all(*conditions: TerminalCondition) -> TerminalCondition:
        return _AllTerminal(list(conditions))
