from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

from rubberengine._types import floor_finite


class PricedItem(Protocol):
    initial_cost: float
    cost_factor: float


@dataclass(frozen=True)
class CostScaling:
    """Geometric price curve: unit *n* costs floor(initial_cost * factor^n)."""

    initial_cost: float
    cost_factor: float

    def cost(self, amount: int, current_count: int) -> int | float:
        return get_cost(self, amount, current_count)

    def max_affordable(self, money: float, current_count: int) -> int:
        return get_max_affordable(self, money, current_count)


def _pow(base: float, exp: float) -> float:
    try:
        return float(base) ** exp
    except OverflowError:
        return math.inf


def _base_price(item: PricedItem, current_count: int) -> int | float:
    return floor_finite(item.initial_cost * _pow(item.cost_factor, current_count))


def get_cost(item: PricedItem, amount: int, current_count: int) -> int | float:
    """Cost of buying *amount* more units when *current_count* were already bought.

    Closed form of the geometric series starting at the current unit price.
    Returns ``math.inf`` once the curve leaves float range.
    """
    if amount <= 0:
        return 0
    r = item.cost_factor
    a = _base_price(item, current_count)

    if r == 1:
        return a * amount

    return floor_finite(a * (_pow(r, amount) - 1) / (r - 1))


def get_max_affordable(item: PricedItem, money: float, current_count: int) -> int:
    """Largest n with get_cost(item, n, current_count) <= money."""
    r = item.cost_factor
    a = _base_price(item, current_count)

    if not math.isfinite(a) or a <= 0 or money < a:
        return 0

    if r == 1:
        return math.floor(money / a)

    n = math.floor(math.log(1 + money * (r - 1) / a) / math.log(r))

    # The log inversion can land one unit off either way after flooring.
    while n > 0 and get_cost(item, n, current_count) > money:
        n -= 1
    while get_cost(item, n + 1, current_count) <= money:
        n += 1
    return n
