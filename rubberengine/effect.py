from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Union

from rubberengine._types import GlobalRule, LimitType, ProducerType

if TYPE_CHECKING:
    from rubberengine.catalog import ProducerFamily


class EffectType(Enum):
    PRODUCTION_MULTIPLIER = "production_multiplier"
    PRODUCTION_MULTIPLIER_ADDITIVE = "production_multiplier_additive"
    PRODUCTION_OUTPUT_FLAT = "production_output_flat"
    INPUT_EFFICIENCY = "input_efficiency"
    DEMAND_MARKETING = "demand_marketing"
    GLOBAL_RULE = "global_rule"
    RESOURCE_LIMIT = "resource_limit"
    STORAGE_COST = "storage_cost"


@dataclass(frozen=True)
class EffectTarget:
    """Scopes an effect to a producer type, a single family, or both."""

    producer_type: ProducerType | None = None
    family_id: str | None = None

    def matches(self, family: ProducerFamily) -> bool:
        if self.producer_type is not None and self.producer_type == family.type:
            return True
        return self.family_id is not None and self.family_id == family.id


class _Effect:
    type: ClassVar[EffectType]

    def scaled(self, count: int) -> EffectDef:
        """Return this effect as contributed by *count* owned producers.

        Ratios are never scaled; only additive fields grow with count.
        """
        return self  # type: ignore[return-value]


@dataclass(frozen=True)
class ProductionMultiplier(_Effect):
    target: EffectTarget
    multiplier: float
    type: ClassVar[EffectType] = EffectType.PRODUCTION_MULTIPLIER


@dataclass(frozen=True)
class ProductionMultiplierAdditive(_Effect):
    target: EffectTarget
    addend: float
    type: ClassVar[EffectType] = EffectType.PRODUCTION_MULTIPLIER_ADDITIVE

    def scaled(self, count: int) -> ProductionMultiplierAdditive:
        return replace(self, addend=self.addend * count)


@dataclass(frozen=True)
class ProductionOutputFlat(_Effect):
    target: EffectTarget
    amount: float
    type: ClassVar[EffectType] = EffectType.PRODUCTION_OUTPUT_FLAT

    def scaled(self, count: int) -> ProductionOutputFlat:
        return replace(self, amount=self.amount * count)


@dataclass(frozen=True)
class InputEfficiency(_Effect):
    target: EffectTarget
    ratio_multiplier: float
    type: ClassVar[EffectType] = EffectType.INPUT_EFFICIENCY


@dataclass(frozen=True)
class DemandMarketing(_Effect):
    """Demand modifiers. A field left as None does not touch its accumulator."""

    marketing_effectiveness_multiplier: float | None = None
    price_sensitivity_multiplier: float | None = None
    marketing_decay_multiplier: float | None = None
    demand_multiplier: float | None = None
    type: ClassVar[EffectType] = EffectType.DEMAND_MARKETING


@dataclass(frozen=True)
class GlobalRuleEffect(_Effect):
    rule: GlobalRule
    type: ClassVar[EffectType] = EffectType.GLOBAL_RULE


@dataclass(frozen=True)
class ResourceLimit(_Effect):
    limit_type: LimitType
    type: ClassVar[EffectType] = EffectType.RESOURCE_LIMIT


@dataclass(frozen=True)
class StorageCost(_Effect):
    multiplier: float
    type: ClassVar[EffectType] = EffectType.STORAGE_COST


EffectDef = Union[
    ProductionMultiplier,
    ProductionMultiplierAdditive,
    ProductionOutputFlat,
    InputEfficiency,
    DemandMarketing,
    GlobalRuleEffect,
    ResourceLimit,
    StorageCost,
]


def _target(producer_type: ProducerType | None, family_id: str | None) -> EffectTarget:
    if producer_type is None and family_id is None:
        raise ValueError("Effect target needs a producer_type or a family_id")
    return EffectTarget(producer_type=producer_type, family_id=family_id)


class Effect:
    """Convenience constructors for catalog definitions."""

    @staticmethod
    def multiplier(
        value: float,
        producer_type: ProducerType | None = None,
        family_id: str | None = None,
    ) -> ProductionMultiplier:
        return ProductionMultiplier(_target(producer_type, family_id), value)

    @staticmethod
    def additive(
        addend: float,
        producer_type: ProducerType | None = None,
        family_id: str | None = None,
    ) -> ProductionMultiplierAdditive:
        return ProductionMultiplierAdditive(_target(producer_type, family_id), addend)

    @staticmethod
    def flat(
        amount: float,
        producer_type: ProducerType | None = None,
        family_id: str | None = None,
    ) -> ProductionOutputFlat:
        return ProductionOutputFlat(_target(producer_type, family_id), amount)

    @staticmethod
    def input_efficiency(
        ratio_multiplier: float,
        producer_type: ProducerType | None = None,
        family_id: str | None = None,
    ) -> InputEfficiency:
        return InputEfficiency(_target(producer_type, family_id), ratio_multiplier)

    @staticmethod
    def marketing(
        effectiveness: float | None = None,
        price_sensitivity: float | None = None,
        decay: float | None = None,
        demand: float | None = None,
    ) -> DemandMarketing:
        return DemandMarketing(
            marketing_effectiveness_multiplier=effectiveness,
            price_sensitivity_multiplier=price_sensitivity,
            marketing_decay_multiplier=decay,
            demand_multiplier=demand,
        )

    @staticmethod
    def rule(rule: GlobalRule) -> GlobalRuleEffect:
        return GlobalRuleEffect(rule)

    @staticmethod
    def resource_limit(limit_type: LimitType) -> ResourceLimit:
        return ResourceLimit(limit_type)

    @staticmethod
    def storage_cost(multiplier: float) -> StorageCost:
        return StorageCost(multiplier)
