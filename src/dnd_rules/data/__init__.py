"""Static rules tables: class progression and enemy templates."""

from __future__ import annotations

from dnd_rules.data.classes import (
    FULL_CASTERS,
    HALF_CASTERS,
    HIT_DICE,
    PREPARED_CASTERS,
    SPELLCASTING_ABILITIES,
    hit_die_for,
    pact_slots_for,
    rage_uses_for,
    spell_slots_for,
    spellcasting_ability_for,
)
from dnd_rules.data.enemies import ENEMY_TEMPLATES


__all__ = [
    "HIT_DICE",
    "SPELLCASTING_ABILITIES",
    "FULL_CASTERS",
    "HALF_CASTERS",
    "PREPARED_CASTERS",
    "hit_die_for",
    "spell_slots_for",
    "pact_slots_for",
    "rage_uses_for",
    "spellcasting_ability_for",
    "ENEMY_TEMPLATES",
]
