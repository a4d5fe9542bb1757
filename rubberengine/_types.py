from __future__ import annotations

import math
from enum import Enum


class ProducerType(str, Enum):
    MACHINE = "machine"
    PRODUCTION_LINE = "production_line"
    RUBBER_SOURCE = "rubber_source"


class ResourceType(str, Enum):
    RUBBER = "rubber"
    RUBBERBAND = "rubberband"
    PRODUCER = "producer"
    MONEY = "money"


class LimitType(str, Enum):
    """Resource-limit tiers, lowest to highest priority."""

    OIL = "oil"
    EARTH = "earth"
    UNIVERSE = "universe"
    INFINITE = "infinite"


class GlobalRule(str, Enum):
    UNLOCK_BUYER = "unlock_buyer"
    UNLOCK_MARKETING = "unlock_marketing"


class NanoTarget(str, Enum):
    """Keys of the nano-automation allocation."""

    RUBBER_MACHINES = "rubber_machines"
    BANDER_MACHINES = "bander_machines"
    PRODUCTION_LINES = "production_lines"
    NANOBOTS = "nanobots"


# Which producer type each boost allocation feeds.
NANO_TARGET_TYPES: dict[NanoTarget, ProducerType] = {
    NanoTarget.RUBBER_MACHINES: ProducerType.RUBBER_SOURCE,
    NanoTarget.BANDER_MACHINES: ProducerType.MACHINE,
    NanoTarget.PRODUCTION_LINES: ProducerType.PRODUCTION_LINE,
}


def floor_finite(value: float) -> int | float:
    """math.floor that passes infinities through instead of raising."""
    if math.isfinite(value):
        return math.floor(value)
    return value
