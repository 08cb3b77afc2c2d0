"""Class progression tables.

Hit dice, spell slot progression, pact magic and per-class resource
tables used when building characters and when resting.
"""

from __future__ import annotations

import math

from dnd_rules.core.constants import MAX_LEVEL, MIN_LEVEL
from dnd_rules.models.enums import Ability, CharacterClass


HIT_DICE: dict[CharacterClass, int] = {
    CharacterClass.BARBARIAN: 12,
    CharacterClass.FIGHTER: 10,
    CharacterClass.PALADIN: 10,
    CharacterClass.RANGER: 10,
    CharacterClass.BARD: 8,
    CharacterClass.CLERIC: 8,
    CharacterClass.DRUID: 8,
    CharacterClass.MONK: 8,
    CharacterClass.ROGUE: 8,
    CharacterClass.WARLOCK: 8,
    CharacterClass.SORCERER: 6,
    CharacterClass.WIZARD: 6,
}
"""Hit die faces by class."""

SPELLCASTING_ABILITIES: dict[CharacterClass, Ability] = {
    CharacterClass.BARD: Ability.CHA,
    CharacterClass.CLERIC: Ability.WIS,
    CharacterClass.DRUID: Ability.WIS,
    CharacterClass.PALADIN: Ability.CHA,
    CharacterClass.RANGER: Ability.WIS,
    CharacterClass.SORCERER: Ability.CHA,
    CharacterClass.WARLOCK: Ability.CHA,
    CharacterClass.WIZARD: Ability.INT,
}
"""Casting ability of every spellcasting class."""

FULL_CASTERS = frozenset(
    {
        CharacterClass.BARD,
        CharacterClass.CLERIC,
        CharacterClass.DRUID,
        CharacterClass.SORCERER,
        CharacterClass.WIZARD,
    }
)

HALF_CASTERS = frozenset({CharacterClass.PALADIN, CharacterClass.RANGER})

PREPARED_CASTERS = frozenset(
    {
        CharacterClass.WIZARD,
        CharacterClass.CLERIC,
        CharacterClass.DRUID,
        CharacterClass.PALADIN,
    }
)
"""Classes that choose their prepared spells after a long rest."""

# Slots per spell level (index 0 is 1st level) for full casters.
_FULL_CASTER_SLOTS: dict[int, tuple[int, ...]] = {
    1: (2,),
    2: (3,),
    3: (4, 2),
    4: (4, 3),
    5: (4, 3, 2),
    6: (4, 3, 3),
    7: (4, 3, 3, 1),
    8: (4, 3, 3, 2),
    9: (4, 3, 3, 3, 1),
    10: (4, 3, 3, 3, 2),
    11: (4, 3, 3, 3, 2, 1),
    12: (4, 3, 3, 3, 2, 1),
    13: (4, 3, 3, 3, 2, 1, 1),
    14: (4, 3, 3, 3, 2, 1, 1),
    15: (4, 3, 3, 3, 2, 1, 1, 1),
    16: (4, 3, 3, 3, 2, 1, 1, 1),
    17: (4, 3, 3, 3, 2, 1, 1, 1, 1),
    18: (4, 3, 3, 3, 3, 1, 1, 1, 1),
    19: (4, 3, 3, 3, 3, 2, 1, 1, 1),
    20: (4, 3, 3, 3, 3, 2, 2, 1, 1),
}

_RAGE_USES: tuple[tuple[int, int], ...] = (
    (17, 6),
    (12, 5),
    (6, 4),
    (3, 3),
    (1, 2),
)


def _check_level(level: int) -> None:
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValueError(f"Level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {level}")


def hit_die_for(character_class: CharacterClass) -> int:
    """Get the hit die faces for a class."""
    return HIT_DICE[character_class]


def spell_slots_for(character_class: CharacterClass, level: int) -> dict[int, int]:
    """Get the maximum spell slots for a class at a level.

    Pact magic is not included; see pact_slots_for.

    Args:
        character_class: The character's class.
        level: Character level (1-20).

    Returns:
        Mapping of spell level to slot count. Empty for non-casters.
    """
    _check_level(level)
    if character_class in FULL_CASTERS:
        slots = _FULL_CASTER_SLOTS[level]
    elif character_class in HALF_CASTERS and level >= 2:
        slots = _FULL_CASTER_SLOTS[math.ceil(level / 2)]
    else:
        return {}
    return {spell_level: count for spell_level, count in enumerate(slots, start=1)}


def pact_slots_for(character_class: CharacterClass, level: int) -> tuple[int, int]:
    """Get warlock pact magic slots.

    Returns:
        Tuple of (slot count, slot level). (0, 0) for other classes.
    """
    _check_level(level)
    if character_class != CharacterClass.WARLOCK:
        return (0, 0)
    if level >= 17:
        count = 4
    elif level >= 11:
        count = 3
    elif level >= 2:
        count = 2
    else:
        count = 1
    return (count, min(5, math.ceil(level / 2)))


def rage_uses_for(level: int) -> int:
    """Get the barbarian's daily rage uses at a level."""
    _check_level(level)
    for threshold, uses in _RAGE_USES:
        if level >= threshold:
            return uses
    return 0


def spellcasting_ability_for(character_class: CharacterClass) -> Ability | None:
    """Get the casting ability of a class, or None for non-casters."""
    return SPELLCASTING_ABILITIES.get(character_class)


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
]
