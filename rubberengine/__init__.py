# rubberengine: rubberband factory economy engine & automated balance simulation

from rubberengine._types import (
    GlobalRule,
    LimitType,
    NanoTarget,
    ProducerType,
    ResourceType,
)
from rubberengine.cost_scaling import CostScaling, get_cost, get_max_affordable
from rubberengine.effect import Effect, EffectDef, EffectTarget, EffectType
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
from rubberengine.parameters import default_catalog
from rubberengine.state import GameState, NanoAllocation
from rubberengine.pipeline import ProductionPipeline
from rubberengine.runtime import GameRuntime, PurchaseOption
from rubberengine.persistence import SaveFormatError, SaveRecord
from rubberengine.terminal import TerminalCondition, Terminal, SimulationContext
from rubberengine.strategy import (
    Strategy,
    OperatorProfile,
    GreedyCheapest,
    SaveForBest,
    PriorityList,
    CustomStrategy,
)
from rubberengine.metrics import MetricsCollector
from rubberengine.simulation import Simulation, SimulationConfig
from rubberengine.report import SimulationReport, build_report
from rubberengine.formatting import format_text_report

__all__ = [
    # Types
    "GlobalRule",
    "LimitType",
    "NanoTarget",
    "ProducerType",
    "ResourceType",
    # Cost
    "CostScaling",
    "get_cost",
    "get_max_affordable",
    # Effects
    "Effect",
    "EffectDef",
    "EffectTarget",
    "EffectType",
    # Catalog
    "Catalog",
    "GameConstants",
    "ProducerFamily",
    "ProductionInput",
    "ProductionOutput",
    "ProductionRule",
    "ResearchNode",
    "Tier",
    "default_catalog",
    # State
    "GameState",
    "NanoAllocation",
    # Pipeline
    "ProductionPipeline",
    # Runtime
    "GameRuntime",
    "PurchaseOption",
    # Persistence
    "SaveFormatError",
    "SaveRecord",
    # Terminal
    "TerminalCondition",
    "Terminal",
    "SimulationContext",
    # Strategy
    "Strategy",
    "OperatorProfile",
    "GreedyCheapest",
    "SaveForBest",
    "PriorityList",
    "CustomStrategy",
    # Simulation
    "MetricsCollector",
    "Simulation",
    "SimulationConfig",
    "SimulationReport",
    "build_report",
    # Formatting
    "format_text_report",
]
