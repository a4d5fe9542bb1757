from __future__ import annotations

from dataclasses import dataclass, field

from rubberengine._types import ProducerType, ResourceType
from rubberengine.effect import EffectDef


@dataclass(frozen=True)
class GameConstants:
    """Numeric tuning shared by every component of the engine."""

    initial_money: float = 3_000
    initial_rubber_price: float = 0.1
    initial_rubberband_price: float = 1.0
    initial_marketing_level: int = 1
    buyer_cost: float = 1_000
    marketing_base_cost: float = 100
    marketing_cost_factor: float = 1.2
    price_fluctuation_interval: int = 10
    price_fluctuation_spread: float = 0.05
    min_rubber_price: float = 0.01
    max_rubber_price: float = 10.0
    min_rubberband_price: float = 0.01
    max_rubberband_price: float = 1_000_000.0
    max_rubber_no_production: float = 1_000
    auto_buy_markup: float = 1.1

    inventory_limit_rubber: float = 1_000_000
    inventory_limit_rubberbands: float = 10_000
    inventory_cost_exponent: float = 1.5
    inventory_cost_divisor_rubber: float = 10_000
    inventory_cost_divisor_rubberbands: float = 1_000

    marketing_decay_interval: int = 5
    demand_scale: float = 50
    demand_base: float = 2
    default_input_ratio: float = 2

    oil_reserves_limit: float = 270_300_000_000_000
    earth_resource_limit: float = 5.972e27
    universe_resource_limit: float = 1e56
    land_surface_limit: float = 1.49e14
    galaxy_surface_limit: float = 1e25
    space_cost_rubber: float = 0.0001
    space_cost_rubberband: float = 0.001

    resource_cost_machine: float = 10
    resource_cost_nano_swarm: float = 100
    nano_swarm_family_id: str = "nanoswarm"

    nanobot_factory_initial_cost: float = 1_000_000_000
    nanobot_factory_cost_factor: float = 2.0
    nanobot_factory_research: str = "nanotechnology"
    nanobot_factory_threshold: float = 10
    nanobot_base_rate: float = 1.0
    default_nano_fraction: float = 0.25


@dataclass(frozen=True)
class ProductionOutput:
    resource: ResourceType
    amount: float
    family_id: str | None = None
    tier_index: int = 0


@dataclass(frozen=True)
class ProductionInput:
    resource: ResourceType
    amount: float


@dataclass(frozen=True)
class ProductionRule:
    output: ProductionOutput
    input: ProductionInput | None = None


@dataclass
class Tier:
    """One purchasable producer within a family."""

    name: str
    initial_cost: float
    cost_factor: float
    production: ProductionRule
    description: str = ""
    maintenance_cost: float = 0.0
    space_cost: float = 0.0
    precondition_research: str | None = None
    required_research: list[str] = field(default_factory=list)
    allow_manual_purchase: bool = True
    effects: list[EffectDef] = field(default_factory=list)
    # Budget consumed per unit of raw output (synthetic rubber and friends).
    resource_cost: float | None = None
    nanoswarm_threshold: float | None = None

    @property
    def output(self) -> ProductionOutput:
        return self.production.output


@dataclass
class ProducerFamily:
    id: str
    type: ProducerType
    tiers: list[Tier] = field(default_factory=list)


@dataclass
class ResearchNode:
    id: str
    cost: float
    name: str = ""
    description: str = ""
    precondition_research: str | None = None
    effects: list[EffectDef] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.id


@dataclass
class Catalog:
    """Complete static definition of the economy."""

    families: list[ProducerFamily] = field(default_factory=list)
    research: list[ResearchNode] = field(default_factory=list)
    constants: GameConstants = field(default_factory=GameConstants)

    _families_by_id: dict[str, ProducerFamily] = field(
        default_factory=dict, init=False, repr=False
    )
    _research_by_id: dict[str, ResearchNode] = field(
        default_factory=dict, init=False, repr=False
    )
    _tiers_by_name: dict[str, tuple[str, int]] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self._families_by_id = {f.id: f for f in self.families}
        self._research_by_id = {r.id: r for r in self.research}
        self._tiers_by_name = {}
        for f in self.families:
            for i, tier in enumerate(f.tiers):
                self._tiers_by_name.setdefault(tier.name, (f.id, i))

    def get_family(self, id: str) -> ProducerFamily | None:
        return self._families_by_id.get(id)

    def get_tier(self, family_id: str, tier_index: int) -> Tier | None:
        family = self._families_by_id.get(family_id)
        if family is None or not 0 <= tier_index < len(family.tiers):
            return None
        return family.tiers[tier_index]

    def get_research(self, id: str) -> ResearchNode | None:
        return self._research_by_id.get(id)

    def find_tier(self, name: str) -> tuple[str, int] | None:
        """Locate a tier by display name as (family_id, tier_index)."""
        return self._tiers_by_name.get(name)

    def validate(self) -> list[str]:
        """Check for common definition errors. Returns list of error messages."""
        errors: list[str] = []
        research_ids = {r.id for r in self.research}

        seen_f: set[str] = set()
        for f in self.families:
            if f.id in seen_f:
                errors.append(f"Duplicate family ID: {f.id!r}")
            seen_f.add(f.id)
            if not f.tiers:
                errors.append(f"Family {f.id!r} has no tiers")

        seen_r: set[str] = set()
        for r in self.research:
            if r.id in seen_r:
                errors.append(f"Duplicate research ID: {r.id!r}")
            seen_r.add(r.id)
            if r.precondition_research and r.precondition_research not in research_ids:
                errors.append(
                    f"Research {r.id!r} requires unknown research {r.precondition_research!r}"
                )

        for f in self.families:
            for tier in f.tiers:
                label = f"{f.id}/{tier.name}"
                if tier.cost_factor < 1:
                    errors.append(f"Tier {label!r} has cost_factor below 1")
                refs = list(tier.required_research)
                if tier.precondition_research:
                    refs.append(tier.precondition_research)
                for rid in refs:
                    if rid not in research_ids:
                        errors.append(f"Tier {label!r} references unknown research {rid!r}")
                out = tier.output
                if out.resource is ResourceType.PRODUCER:
                    target = self.get_family(out.family_id) if out.family_id else None
                    if target is None:
                        errors.append(
                            f"Tier {label!r} produces unknown family {out.family_id!r}"
                        )
                    elif not 0 <= out.tier_index < len(target.tiers):
                        errors.append(
                            f"Tier {label!r} produces unknown tier index {out.tier_index}"
                            f" of {out.family_id!r}"
                        )

        return errors
