"""Save records: flat camelCase documents, with migrations for older layouts.

Loading runs the raw document through ``MIGRATIONS`` in order, validates the
result into a ``SaveRecord`` and only then touches the live state, so a
corrupt save never leaves a half-applied game behind.
"""
from __future__ import annotations

import json
import logging
import math
from typing import TYPE_CHECKING, Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from rubberengine._types import ResourceType
from rubberengine.state import NanoAllocation

if TYPE_CHECKING:
    from rubberengine.catalog import Catalog
    from rubberengine.state import GameState

logger = logging.getLogger(__name__)

Record = dict[str, Any]
Migration = Callable[[Record, "Catalog"], Record]


class SaveFormatError(ValueError):
    """Raised when a save document has the wrong shape to migrate."""


# ── Migrations ───────────────────────────────────────────────────────

# Display names older saves used for tiers that were renamed since.
TIER_NAME_ALIASES = {
    "Rubbertree Plantaion": "Rubbertree Plantation",
    "Bander 100": "Bander",
    "Bander 100 Line": "MEGA-Bander Line",
}

_NAME_KEYED_MAPS = ("machines", "plantations", "machineProductionLines")
_FLAT_ALLOCATION_KEYS = {
    "rubberMachineAllocation": "rubber_machines",
    "banderMachineAllocation": "bander_machines",
    "productionLineAllocation": "production_lines",
    "nanobotAllocation": "nanobots",
}


def _name_map(record: Record, key: str) -> dict[str, Any]:
    value = record.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SaveFormatError(f"{key!r} must be an object, got {type(value).__name__}")
    return dict(value)


def rename_entities(record: Record, catalog: Catalog) -> Record:
    """``entities`` became ``producers``."""
    record = dict(record)
    for old, new in (("entities", "producers"), ("purchasedEntities", "purchasedProducers")):
        if old in record:
            value = record.pop(old)
            record.setdefault(new, value)
    return record


def line_count_to_named_line(record: Record, catalog: Catalog) -> Record:
    """The single production-line counter predates named lines."""
    if "machineProductionLineCount" not in record:
        return record
    record = dict(record)
    count = record.pop("machineProductionLineCount")
    lines = _name_map(record, "machineProductionLines")
    if count and not lines.get("Bander 100 Line"):
        lines["Bander 100 Line"] = count
    record["machineProductionLines"] = lines
    return record


def fix_tier_names(record: Record, catalog: Catalog) -> Record:
    """Map typo'd and renamed tier names onto current ones.

    Production lines were once keyed by the machine they build; those keys
    are rewritten to the name of the line tier building that machine.
    """
    record = dict(record)
    built_by: dict[str, str] = {}
    for family in catalog.families:
        for tier in family.tiers:
            out = tier.output
            if out.resource is ResourceType.PRODUCER and out.family_id:
                target = catalog.get_tier(out.family_id, out.tier_index)
                if target is not None:
                    built_by.setdefault(target.name, tier.name)

    for key in _NAME_KEYED_MAPS:
        if key not in record:
            continue
        renamed: dict[str, Any] = {}
        for name, count in _name_map(record, key).items():
            name = TIER_NAME_ALIASES.get(name, name)
            if key == "machineProductionLines":
                name = built_by.get(name, name)
            renamed[name] = renamed.get(name, 0) + (count or 0)
        record[key] = renamed
    return record


def fold_named_producers(record: Record, catalog: Catalog) -> Record:
    """Move name-keyed counts into the per-family arrays, as purchased units."""
    if not any(key in record for key in _NAME_KEYED_MAPS):
        return record
    record = dict(record)
    producers = {k: list(v) for k, v in _name_map(record, "producers").items()}
    purchased = {k: list(v) for k, v in _name_map(record, "purchasedProducers").items()}

    for key in _NAME_KEYED_MAPS:
        for name, count in _name_map(record, key).items():
            location = catalog.find_tier(name)
            if location is None:
                logger.warning("Dropping unknown legacy producer %r from save", name)
                continue
            if not count:
                continue
            family_id, index = location
            size = len(catalog.get_family(family_id).tiers)
            for counts in (producers, purchased):
                row = counts.setdefault(family_id, [0] * size)
                row.extend([0] * (size - len(row)))
                row[index] += count
        record.pop(key, None)

    record["producers"] = producers
    record["purchasedProducers"] = purchased
    return record


def consolidate_allocation(record: Record, catalog: Catalog) -> Record:
    """Flat ``*Allocation`` keys became the ``nanoAllocation`` object."""
    if not any(key in record for key in _FLAT_ALLOCATION_KEYS):
        return record
    record = dict(record)
    allocation = _name_map(record, "nanoAllocation")
    for old, new in _FLAT_ALLOCATION_KEYS.items():
        if old in record:
            allocation.setdefault(new, record.pop(old))
    record["nanoAllocation"] = allocation
    return record


def nanobot_slot_to_factories(record: Record, catalog: Catalog) -> Record:
    """Nanobot factories used to live at ``producers["nanobots"][0]``."""
    producers = _name_map(record, "producers")
    legacy = producers.get("nanobots")
    if legacy is not None and not isinstance(legacy, list):
        raise SaveFormatError(
            f"'producers.nanobots' must be an array, got {type(legacy).__name__}"
        )
    if not legacy or not legacy[0]:
        return record
    record = dict(record)
    if not record.get("nanobotFactoryCount"):
        record["nanobotFactoryCount"] = legacy[0]
    producers["nanobots"] = [0] + list(legacy[1:])
    record["producers"] = producers
    return record


MIGRATIONS: list[Migration] = [
    rename_entities,
    line_count_to_named_line,
    fix_tier_names,
    fold_named_producers,
    consolidate_allocation,
    nanobot_slot_to_factories,
]


def migrate(record: Record, catalog: Catalog) -> Record:
    for step in MIGRATIONS:
        record = step(record, catalog)
    return record


# ── Typed record ─────────────────────────────────────────────────────


def _floor_count(value: Any) -> Any:
    if isinstance(value, float) and math.isfinite(value):
        return math.floor(value)
    return value


class SaveRecord(BaseModel):
    """Validated save document. ``None`` means the field was never saved."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    money: Optional[float] = None
    rubberbands: Optional[float] = None
    rubber: Optional[float] = None
    producers: Optional[dict[str, list[int]]] = None
    purchased_producers: Optional[dict[str, list[int]]] = None
    total_rubberbands_sold: Optional[float] = None
    buyer_hired: Optional[bool] = None
    buyer_threshold: Optional[float] = None
    rubber_price: Optional[float] = None
    rubberband_price: Optional[float] = None
    tick_count: Optional[int] = None
    marketing_level: Optional[int] = None
    last_marketing_update_tick: Optional[int] = None
    researched: Optional[list[str]] = None
    game_over: Optional[bool] = None
    game_start_time: Optional[float] = None
    total_rubber_produced: Optional[float] = None
    total_nanobots_produced: Optional[float] = None
    consumed_resources: Optional[float] = None
    nanobot_count: Optional[float] = None
    nanobot_factory_count: Optional[int] = None
    nano_allocation: Optional[dict[str, float]] = None

    @field_validator("producers", "purchased_producers", mode="before")
    @classmethod
    def _floor_counts(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {
                k: [_floor_count(c) for c in v] if isinstance(v, list) else v
                for k, v in value.items()
            }
        return value

    @field_validator("nanobot_factory_count", "tick_count", "marketing_level",
                     "last_marketing_update_tick", mode="before")
    @classmethod
    def _floor_scalar(cls, value: Any) -> Any:
        return _floor_count(value)


def to_record(state: GameState) -> Record:
    """Snapshot every persisted field as a camelCase document."""
    record = SaveRecord(
        money=state.money,
        rubberbands=state.rubberbands,
        rubber=state.rubber,
        producers={k: list(v) for k, v in state.producers.items()},
        purchased_producers={k: list(v) for k, v in state.purchased_producers.items()},
        total_rubberbands_sold=state.total_rubberbands_sold,
        buyer_hired=state.buyer_hired,
        buyer_threshold=state.buyer_threshold,
        rubber_price=state.rubber_price,
        rubberband_price=state.rubberband_price,
        tick_count=state.tick_count,
        marketing_level=state.marketing_level,
        last_marketing_update_tick=state.last_marketing_update_tick,
        researched=list(state.researched),
        game_over=state.game_over,
        game_start_time=state.game_start_time,
        total_rubber_produced=state.total_rubber_produced,
        total_nanobots_produced=state.total_nanobots_produced,
        consumed_resources=state.consumed_resources,
        nanobot_count=state.nanobot_count,
        nanobot_factory_count=state.nanobot_factory_count,
        nano_allocation=state.nano_allocation.as_dict(),
    )
    return record.model_dump(by_alias=True)


def dumps(state: GameState) -> str:
    return json.dumps(to_record(state))


# ── Loading ──────────────────────────────────────────────────────────


def _padded(
    catalog: Catalog, counts: dict[str, list[int]] | None
) -> dict[str, list[int]]:
    """Every catalog family, right-padded to its tier count. Unknown ids survive."""
    result = {k: list(v) for k, v in (counts or {}).items()}
    for family in catalog.families:
        row = result.setdefault(family.id, [])
        row.extend([0] * (len(family.tiers) - len(row)))
    return result


def _apply(state: GameState, record: SaveRecord) -> None:
    catalog = state.catalog
    c = catalog.constants
    state.reset()

    scalars = (
        "money", "rubberbands", "rubber", "total_rubberbands_sold", "buyer_hired",
        "buyer_threshold", "rubber_price", "rubberband_price", "tick_count",
        "marketing_level", "last_marketing_update_tick", "game_over",
        "game_start_time", "total_rubber_produced", "total_nanobots_produced",
        "consumed_resources", "nanobot_count", "nanobot_factory_count",
    )
    for name in scalars:
        value = getattr(record, name)
        if value is not None:
            setattr(state, name, value)

    if record.researched is not None:
        state.researched = list(dict.fromkeys(record.researched))

    producers = _padded(catalog, record.producers)
    purchased = _padded(catalog, record.purchased_producers)
    for family_id, row in purchased.items():
        owned = producers.setdefault(family_id, [0] * len(row))
        owned.extend([0] * (len(row) - len(owned)))
        for i, bought in enumerate(row):
            # Never more purchased than owned.
            row[i] = min(bought, owned[i])
    state.producers = producers
    state.purchased_producers = purchased

    if record.nano_allocation is not None:
        allocation = NanoAllocation.uniform(c.default_nano_fraction).as_dict()
        allocation.update(
            (k, v) for k, v in record.nano_allocation.items() if k in allocation
        )
        loaded = NanoAllocation(**allocation)
        if loaded.is_valid():
            state.nano_allocation = loaded
        else:
            logger.warning("Ignoring invalid nano allocation in save: %s", allocation)

    state.rubber_price = min(max(state.rubber_price, c.min_rubber_price), c.max_rubber_price)
    state.rubberband_price = min(
        max(state.rubberband_price, c.min_rubberband_price), c.max_rubberband_price
    )
    state.marketing_level = max(state.marketing_level, 1)


def parse(data: Record | str | bytes, catalog: Catalog) -> SaveRecord:
    """Decode, migrate and validate a save. Raises ValueError subclasses."""
    if isinstance(data, (str, bytes)):
        data = json.loads(data)
    if not isinstance(data, dict):
        raise SaveFormatError(f"Save must be an object, got {type(data).__name__}")
    return SaveRecord.model_validate(migrate(data, catalog))


def load_state(state: GameState, data: Record | str | bytes) -> bool:
    """Restore *state* from a save. On any malformed input, reset and return False."""
    try:
        record = parse(data, state.catalog)
    except (ValueError, TypeError) as exc:
        # json.JSONDecodeError and pydantic.ValidationError are ValueErrors.
        logger.error("Failed to load save game, starting fresh: %s", exc)
        state.reset()
        return False
    _apply(state, record)
    return True


__all__ = [
    "MIGRATIONS",
    "SaveFormatError",
    "SaveRecord",
    "dumps",
    "load_state",
    "migrate",
    "parse",
    "to_record",
]
