"""Fast-start economy: more seed money, cheaper machines and an extra research node.

Run with: rubberengine simulate --catalog examples.fast_start --ticks 1800
"""
from __future__ import annotations

from dataclasses import replace

from rubberengine._types import ProducerType
from rubberengine.catalog import Catalog, GameConstants, ResearchNode
from rubberengine.effect import Effect
from rubberengine.parameters import producer_families, research_list


def define_catalog() -> Catalog:
    constants = GameConstants(
        initial_money=25_000,
        buyer_cost=250,
        marketing_base_cost=50,
    )

    families = producer_families()
    for family in families:
        if family.type is ProducerType.MACHINE:
            family.tiers = [
                replace(t, initial_cost=t.initial_cost / 2) for t in family.tiers
            ]

    research = research_list()
    research.append(
        ResearchNode(
            "overclocking",
            cost=2_500,
            name="Overclocking",
            description="Machines run 50% faster.",
            precondition_research="basic_manufacturing",
            effects=[Effect.multiplier(1.5, producer_type=ProducerType.MACHINE)],
        )
    )

    return Catalog(families=families, research=research, constants=constants)
