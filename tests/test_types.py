"""Tests for _types module."""
import math

from rubberengine._types import (
    NANO_TARGET_TYPES,
    LimitType,
    NanoTarget,
    ProducerType,
    floor_finite,
)


def test_floor_finite_floors():
    assert floor_finite(2.9) == 2
    assert isinstance(floor_finite(2.9), int)


def test_floor_finite_passes_infinity():
    assert floor_finite(math.inf) == math.inf


def test_enums_compare_by_value():
    assert ProducerType("machine") is ProducerType.MACHINE
    assert LimitType.UNIVERSE == "universe"


def test_nanobot_target_feeds_no_producer_type():
    assert NanoTarget.NANOBOTS not in NANO_TARGET_TYPES
    assert NANO_TARGET_TYPES[NanoTarget.BANDER_MACHINES] is ProducerType.MACHINE
