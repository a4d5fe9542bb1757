from __future__ import annotations

from typing import TYPE_CHECKING, Iterator

from rubberengine._types import GlobalRule
from rubberengine.effect import EffectDef, EffectType, GlobalRuleEffect

if TYPE_CHECKING:
    from rubberengine.catalog import Catalog, ProducerFamily, Tier
    from rubberengine.state import GameState


def owned_tiers(
    catalog: Catalog, state: GameState
) -> Iterator[tuple[ProducerFamily, int, Tier, int]]:
    """Yield (family, tier_index, tier, count) for every tier with count > 0."""
    for family in catalog.families:
        counts = state.producers.get(family.id)
        if not counts:
            continue
        for index, tier in enumerate(family.tiers):
            if index >= len(counts):
                break
            count = counts[index]
            if count > 0:
                yield family, index, tier, count


def get_effects(
    catalog: Catalog, state: GameState, effect_type: EffectType
) -> list[EffectDef]:
    """Collect active effects of one kind.

    Research effects come first, verbatim, in research order. Producer effects
    follow in catalog order with additive fields scaled by the owned count.
    """
    effects: list[EffectDef] = []

    for research_id in state.researched:
        node = catalog.get_research(research_id)
        if node is None:
            continue
        for eff in node.effects:
            if eff.type is effect_type:
                effects.append(eff)

    for _family, _index, tier, count in owned_tiers(catalog, state):
        for eff in tier.effects:
            if eff.type is effect_type:
                effects.append(eff.scaled(count))

    return effects


def has_global_rule(catalog: Catalog, state: GameState, rule: GlobalRule) -> bool:
    rules = get_effects(catalog, state, EffectType.GLOBAL_RULE)
    return any(isinstance(r, GlobalRuleEffect) and r.rule == rule for r in rules)
