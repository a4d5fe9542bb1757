from __future__ import annotations

import math
import time
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING

from rubberengine._types import NanoTarget

if TYPE_CHECKING:
    from rubberengine.catalog import Catalog


@dataclass
class NanoAllocation:
    """Fractions of the nanobot stock assigned to each automation target."""

    rubber_machines: float = 0.25
    bander_machines: float = 0.25
    production_lines: float = 0.25
    nanobots: float = 0.25

    def fraction(self, target: NanoTarget) -> float:
        return getattr(self, target.value)

    def total(self) -> float:
        return sum(getattr(self, f.name) for f in fields(self))

    def as_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def is_valid(self, tolerance: float = 1e-9) -> bool:
        """Every fraction non-negative and the total at most one."""
        values = self.as_dict().values()
        if any(math.isnan(v) or v < 0 for v in values):
            return False
        return self.total() <= 1 + tolerance

    @classmethod
    def uniform(cls, fraction: float) -> NanoAllocation:
        return cls(fraction, fraction, fraction, fraction)


class GameState:
    """Mutable runtime container holding all game state."""

    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog
        self.reset()

    def reset(self) -> None:
        """Reinitialize every field to a fresh game."""
        c = self.catalog.constants
        producers = {f.id: [0] * len(f.tiers) for f in self.catalog.families}

        self.money: float = c.initial_money
        self.rubberbands: float = 0
        self.rubber: float = 0
        self.producers: dict[str, list[int]] = producers
        self.purchased_producers: dict[str, list[int]] = {
            fid: list(counts) for fid, counts in producers.items()
        }
        self.total_rubberbands_sold: float = 0
        self.buyer_hired: bool = False
        self.buyer_threshold: float = 0
        self.rubber_price: float = c.initial_rubber_price
        self.rubberband_price: float = c.initial_rubberband_price
        self.tick_count: int = 0
        self.marketing_level: int = c.initial_marketing_level
        self.last_marketing_update_tick: int = 0
        self.researched: list[str] = []
        self.game_over: bool = False
        self.game_start_time: float = time.time()
        self.total_rubber_produced: float = 0
        self.total_nanobots_produced: float = 0
        self.consumed_resources: float = 0
        self.nanobot_count: float = 0
        self.nanobot_factory_count: int = 0
        self.nano_allocation = NanoAllocation.uniform(c.default_nano_fraction)

        # Per-tick statistics, recomputed by the pipeline and never persisted
        self.rubber_production_rate: float = 0
        self.machine_production_rate: float = 0
        self.theoretical_rubber_consumption_rate: float = 0

    def count(self, family_id: str, tier_index: int) -> int:
        counts = self.producers.get(family_id)
        if counts is None or tier_index >= len(counts):
            return 0
        return counts[tier_index]

    def purchased(self, family_id: str, tier_index: int) -> int:
        counts = self.purchased_producers.get(family_id)
        if counts is None or tier_index >= len(counts):
            return 0
        return counts[tier_index]

    def add_producers(
        self, family_id: str, tier_index: int, amount: int, purchased: int
    ) -> None:
        """Add *amount* owned units, *purchased* of which count as bought."""
        self.producers[family_id][tier_index] += amount
        self.purchased_producers[family_id][tier_index] += purchased

    def has_research(self, research_id: str) -> bool:
        return research_id in self.researched
