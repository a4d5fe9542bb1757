"""Default rubberband economy: research tree, producer families, constants."""
from __future__ import annotations

from rubberengine._types import GlobalRule, LimitType, ProducerType, ResourceType
from rubberengine.catalog import (
    Catalog,
    GameConstants,
    ProducerFamily,
    ProductionInput,
    ProductionOutput,
    ProductionRule,
    ResearchNode,
    Tier,
)
from rubberengine.effect import Effect


def _bander_rule(amount: float) -> ProductionRule:
    return ProductionRule(
        input=ProductionInput(ResourceType.RUBBER, amount),
        output=ProductionOutput(ResourceType.RUBBERBAND, amount),
    )


def _rubber_rule(amount: float) -> ProductionRule:
    return ProductionRule(output=ProductionOutput(ResourceType.RUBBER, amount))


def _line_rule(family_id: str, tier_index: int) -> ProductionRule:
    return ProductionRule(
        output=ProductionOutput(
            ResourceType.PRODUCER, 1, family_id=family_id, tier_index=tier_index
        )
    )


def research_list() -> list[ResearchNode]:
    return [
        ResearchNode(
            "basic_manufacturing",
            cost=100,
            name="Basic Manufacturing",
            description="Unlocks the ability to purchase machines.",
        ),
        ResearchNode(
            "basic_marketing",
            cost=500,
            name="Basic Marketing",
            description="Unlocks marketing campaigns.",
            precondition_research="basic_manufacturing",
            effects=[Effect.rule(GlobalRule.UNLOCK_MARKETING)],
        ),
        ResearchNode(
            "optimize_production",
            cost=1_000,
            name="Optimize Production",
            description="Machines need half the rubber per rubberband.",
            precondition_research="basic_manufacturing",
            effects=[Effect.input_efficiency(0.5, producer_type=ProducerType.MACHINE)],
        ),
        ResearchNode(
            "sales_management",
            cost=5_000,
            name="Sales Management",
            description="Unlocks the ability to hire an auto-buyer.",
            precondition_research="basic_marketing",
            effects=[Effect.rule(GlobalRule.UNLOCK_BUYER)],
        ),
        ResearchNode(
            "online_marketing",
            cost=5_000,
            name="Online Marketing",
            description="Increases the effectivity of marketing significantly.",
            precondition_research="basic_marketing",
            effects=[Effect.marketing(effectiveness=1.5)],
        ),
        ResearchNode(
            "hyperpersonalisation",
            cost=50_000,
            name="Hyperpersonalisation",
            description="Increases the effectivity of marketing significantly.",
            precondition_research="online_marketing",
            effects=[Effect.marketing(effectiveness=1.2, price_sensitivity=3)],
        ),
        ResearchNode(
            "rubber_recycling",
            cost=100_000,
            name="Rubber Recycling",
            description="Doubles the output of every rubber source.",
            precondition_research="optimize_production",
            effects=[Effect.multiplier(2.0, producer_type=ProducerType.RUBBER_SOURCE)],
        ),
        ResearchNode(
            "synthetic_rubber",
            cost=2_500_000,
            name="Synthetic Rubber",
            description="Makes synthetic rubber factories available.",
            precondition_research="rubber_recycling",
        ),
        ResearchNode(
            "automated_ai_marketing",
            cost=1_000_000,
            name="Automated AI-Marketing",
            description="Eliminates the marketing decay.",
            precondition_research="hyperpersonalisation",
            effects=[Effect.marketing(decay=0, price_sensitivity=1.0, effectiveness=1.2)],
        ),
        ResearchNode(
            "robotics",
            cost=5_000_000,
            name="Robotics",
            description="Doubles machine output and enables production lines.",
            precondition_research="optimize_production",
            effects=[Effect.multiplier(2.0, producer_type=ProducerType.MACHINE)],
        ),
        ResearchNode(
            "hypnosis",
            cost=1_000_000_000,
            name="Hypnosis",
            description="Uses mass hypnosis to compel customers to buy rubberbands.",
            precondition_research="automated_ai_marketing",
            effects=[Effect.marketing(price_sensitivity=2, demand=10)],
        ),
        ResearchNode(
            "nanotechnology",
            cost=10_000_000_000,
            name="Nanotechnology",
            description="Unlocks self-replicating nanobots for manufacturing.",
            precondition_research="robotics",
            effects=[Effect.marketing(price_sensitivity=2)],
        ),
        ResearchNode(
            "molecular_transformation",
            cost=500_000_000_000_000,
            name="Molecular Transformation",
            description="Synthetic rubber from any earth matter, bypassing oil limits.",
            precondition_research="quantum_mechanics",
            effects=[Effect.resource_limit(LimitType.EARTH)],
        ),
        ResearchNode(
            "quantum_mechanics",
            cost=100_000_000_000,
            name="Quantum Mechanics",
            description="Probabilistic manufacturing at the quantum scale.",
            precondition_research="nanotechnology",
            effects=[Effect.marketing(price_sensitivity=2, demand=1e9)],
        ),
        ResearchNode(
            "singularity_theory",
            cost=100_000_000_000,
            name="Singularity Theory",
            description="Black hole extrusion. Eliminates all storage limits and costs.",
            precondition_research="molecular_transformation",
            effects=[
                Effect.marketing(demand=1e24),
                Effect.storage_cost(0),
                Effect.resource_limit(LimitType.INFINITE),
            ],
        ),
        ResearchNode(
            "mind_control",
            cost=1_000_000_000_000_000,
            name="Mind Control",
            description="Uses mind control to compel customers to buy rubberbands.",
            precondition_research="hypnosis",
            effects=[Effect.marketing(price_sensitivity=1_000_000.0, demand=1e30)],
        ),
        ResearchNode(
            "interplanetary_logistics",
            cost=100_000_000_000,
            name="Interplanetary Logistics",
            description="Nano swarms travel to other planets to gather resources.",
            precondition_research="molecular_transformation",
            effects=[
                Effect.resource_limit(LimitType.UNIVERSE),
                Effect.storage_cost(0.0001),
                Effect.marketing(demand=1e12),
            ],
        ),
        ResearchNode(
            "time_travel",
            cost=10_000_000_000_000,
            name="Time Travel",
            description="Why make it now when you can have already made it?",
            precondition_research="singularity_theory",
            effects=[Effect.marketing(demand=1e48)],
        ),
    ]


def producer_families() -> list[ProducerFamily]:
    bander = ProducerFamily(
        "bander",
        ProducerType.MACHINE,
        tiers=[
            Tier(
                "Bander",
                initial_cost=100,
                cost_factor=1.1,
                production=_bander_rule(100),
                precondition_research="basic_manufacturing",
                maintenance_cost=5,
                space_cost=10,
                nanoswarm_threshold=1,
            ),
            Tier(
                "MAX-Bander",
                initial_cost=750,
                cost_factor=1.25,
                production=_bander_rule(1_000),
                precondition_research="optimize_production",
                maintenance_cost=20,
                space_cost=15,
                nanoswarm_threshold=5,
            ),
            Tier(
                "MEGA-Bander",
                initial_cost=50_000,
                cost_factor=1.5,
                production=_bander_rule(100_000),
                precondition_research="robotics",
                maintenance_cost=100,
                space_cost=20,
                nanoswarm_threshold=25,
            ),
            Tier(
                "Quantum Bander",
                initial_cost=500_000_000,
                cost_factor=1.7,
                production=_bander_rule(1e10),
                precondition_research="quantum_mechanics",
                required_research=["quantum_mechanics"],
                maintenance_cost=500_000,
                space_cost=50,
                nanoswarm_threshold=250,
                # Entangled banders pull rubber sources along, 1% per unit.
                effects=[Effect.additive(0.01, producer_type=ProducerType.RUBBER_SOURCE)],
            ),
            Tier(
                "Temporal Press",
                initial_cost=1e48,
                cost_factor=2.5,
                production=_bander_rule(1e45),
                precondition_research="time_travel",
                required_research=["time_travel"],
                maintenance_cost=10_000_000_000,
                nanoswarm_threshold=2_500,
            ),
        ],
    )

    rubber_sources = ProducerFamily(
        "rubber_sources",
        ProducerType.RUBBER_SOURCE,
        tiers=[
            Tier(
                "Rubbertree Plantation",
                initial_cost=10_000,
                cost_factor=1.2,
                production=_rubber_rule(1_000),
                precondition_research="optimize_production",
                maintenance_cost=50,
                space_cost=10_000,
                nanoswarm_threshold=10,
            ),
            Tier(
                "Synthetic Rubber Mixer",
                initial_cost=1_000_000,
                cost_factor=1.1,
                production=_rubber_rule(100_000),
                required_research=["synthetic_rubber"],
                maintenance_cost=5_000,
                space_cost=200,
                resource_cost=1.0,
                nanoswarm_threshold=100,
            ),
            Tier(
                "Black Hole Extruder",
                initial_cost=1e55,
                cost_factor=2.0,
                production=_rubber_rule(1e52),
                required_research=[
                    "singularity_theory",
                    "interplanetary_logistics",
                    "quantum_mechanics",
                ],
                maintenance_cost=200_000_000,
                space_cost=5_000,
                resource_cost=1.0,
            ),
        ],
    )

    nanoswarm = ProducerFamily(
        "nanoswarm",
        ProducerType.RUBBER_SOURCE,
        tiers=[
            Tier(
                "Nano Harvester Swarm",
                initial_cost=1e12,
                cost_factor=1.5,
                production=_rubber_rule(10_000_000),
                required_research=["nanotechnology"],
                allow_manual_purchase=False,
                maintenance_cost=1_000_000,
                nanoswarm_threshold=50,
            ),
        ],
    )

    rubber_factory_line = ProducerFamily(
        "rubber_factory_line",
        ProducerType.PRODUCTION_LINE,
        tiers=[
            Tier(
                "Synthetic Rubber Mixer Line",
                initial_cost=100_000_000,
                cost_factor=1.5,
                production=_line_rule("rubber_sources", 1),
                precondition_research="synthetic_rubber",
                required_research=["synthetic_rubber", "robotics"],
                space_cost=500,
                nanoswarm_threshold=500,
            ),
            Tier(
                "Black Hole Extruder Line",
                initial_cost=100_000_000_000,
                cost_factor=2.0,
                production=_line_rule("rubber_sources", 2),
                precondition_research="singularity_theory",
                required_research=["singularity_theory"],
                space_cost=1_000,
                nanoswarm_threshold=5_000,
            ),
            Tier(
                "Nano Harvester Line",
                initial_cost=5_000_000_000_000,
                cost_factor=2.0,
                production=_line_rule("nanoswarm", 0),
                precondition_research="nanotechnology",
                required_research=["nanotechnology", "robotics"],
                space_cost=500,
                nanoswarm_threshold=1_000,
            ),
        ],
    )

    bander_line = ProducerFamily(
        "bander_line",
        ProducerType.PRODUCTION_LINE,
        tiers=[
            Tier(
                "MEGA-Bander Line",
                initial_cost=100_000_000,
                cost_factor=1.3,
                production=_line_rule("bander", 2),
                precondition_research="robotics",
                required_research=["robotics"],
                space_cost=500,
                nanoswarm_threshold=500,
            ),
            Tier(
                "Quantum Bander Line",
                initial_cost=10_000_000_000,
                cost_factor=1.7,
                production=_line_rule("bander", 3),
                precondition_research="quantum_mechanics",
                required_research=["quantum_mechanics"],
                space_cost=1_000,
                nanoswarm_threshold=2_000,
            ),
            Tier(
                "Temporal Press Line",
                initial_cost=1_000_000_000_000,
                cost_factor=2.5,
                production=_line_rule("bander", 4),
                precondition_research="time_travel",
                required_research=["time_travel"],
                space_cost=2_000,
                nanoswarm_threshold=10_000,
            ),
        ],
    )

    return [bander, rubber_sources, nanoswarm, rubber_factory_line, bander_line]


def default_catalog(constants: GameConstants | None = None) -> Catalog:
    return Catalog(
        families=producer_families(),
        research=research_list(),
        constants=constants or GameConstants(),
    )
