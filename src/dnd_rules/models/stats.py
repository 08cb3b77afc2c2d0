"""Ability scores and the derived-stat calculator.

Everything in this module is pure: scores go in, modifiers and bonuses
come out. Final scores are the sum of the base scores and every bonus
layer (racial, item, temporary, improvement); the sum is not clamped to
the 1-30 range that base scores must respect.

Example:
    >>> ability_modifier(16)
    3
    >>> proficiency_bonus(5)
    3
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Annotated

from pydantic import BaseModel, ConfigDict, Field

from dnd_rules.core.constants import (
    ABILITY_SCORE_BASELINE,
    BASE_ARMOR_CLASS,
    MAX_ABILITY_SCORE,
    MAX_LEVEL,
    MIN_ABILITY_SCORE,
    MIN_LEVEL,
)
from dnd_rules.models.enums import Ability, Skill


if TYPE_CHECKING:
    from dnd_rules.models.entities import Entity


AbilityScore = Annotated[int, Field(ge=MIN_ABILITY_SCORE, le=MAX_ABILITY_SCORE)]
Level = Annotated[int, Field(ge=MIN_LEVEL, le=MAX_LEVEL)]


# =============================================================================
# Models
# =============================================================================


class AbilityScores(BaseModel):
    """The six ability scores of a creature."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    strength: AbilityScore = Field(default=10, description="Physical power")
    dexterity: AbilityScore = Field(default=10, description="Agility and reflexes")
    constitution: AbilityScore = Field(default=10, description="Health and stamina")
    intelligence: AbilityScore = Field(default=10, description="Reasoning and memory")
    wisdom: AbilityScore = Field(default=10, description="Perception and insight")
    charisma: AbilityScore = Field(default=10, description="Force of personality")

    def get(self, ability: Ability | str) -> int:
        """Get the score for an ability."""
        return getattr(self, Ability(ability).value)

    def modifier(self, ability: Ability | str) -> int:
        """Get the modifier for an ability."""
        return ability_modifier(self.get(ability))

    def as_dict(self) -> dict[Ability, int]:
        return {ability: self.get(ability) for ability in Ability}


class FinalAbilityScores(AbilityScores):
    """Ability scores after every bonus layer.

    The sum of base scores and bonuses is not clamped, so a score may
    fall below 1 or rise above 30 and its modifier follows the usual
    formula.
    """

    strength: int = Field(default=10, description="Physical power")
    dexterity: int = Field(default=10, description="Agility and reflexes")
    constitution: int = Field(default=10, description="Health and stamina")
    intelligence: int = Field(default=10, description="Reasoning and memory")
    wisdom: int = Field(default=10, description="Perception and insight")
    charisma: int = Field(default=10, description="Force of personality")


class AbilityBonuses(BaseModel):
    """Bonus layers stacked on top of base ability scores.

    Each layer maps an ability to a (possibly negative) adjustment.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    racial: dict[Ability, int] = Field(default_factory=dict)
    item: dict[Ability, int] = Field(default_factory=dict)
    temporary: dict[Ability, int] = Field(default_factory=dict)
    improvement: dict[Ability, int] = Field(default_factory=dict)

    def layers(self) -> list[dict[Ability, int]]:
        """Return the layers in application order."""
        return [self.racial, self.item, self.temporary, self.improvement]


class SkillEntry(BaseModel):
    """A creature's standing in one skill.

    Attributes:
        proficient: Adds the proficiency bonus.
        expertise: Doubles the proficiency bonus (requires proficient).
        bonus: Flat skill-specific bonus.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    proficient: bool = False
    expertise: bool = False
    bonus: int = 0


class DerivedStats(BaseModel):
    """Computed character-sheet block."""

    model_config = ConfigDict(frozen=True)

    ability_modifiers: dict[Ability, int]
    proficiency_bonus: int
    skill_bonuses: dict[Skill, int]
    armor_class: int
    initiative: int
    passive_perception: int


# =============================================================================
# Calculator
# =============================================================================


def ability_modifier(score: int) -> int:
    """Calculate the modifier for an ability score.

    Uses floor division so odd scores below 10 round down
    (9 gives -1, 1 gives -5).

    Args:
        score: The ability score.

    Returns:
        The ability modifier.
    """
    return (score - ABILITY_SCORE_BASELINE) // 2


def proficiency_bonus(level: int) -> int:
    """Calculate the proficiency bonus for a character level.

    Args:
        level: Character level (1-20).

    Returns:
        +2 at levels 1-4, rising by one every four levels to +6 at 17-20.

    Raises:
        ValueError: If the level is outside 1-20.
    """
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValueError(f"Level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {level}")
    return math.ceil(level / 4) + 1


def final_scores(base: AbilityScores, *layers: Mapping[Ability, int]) -> FinalAbilityScores:
    """Sum base scores and bonus layers into final scores.

    Args:
        base: Base ability scores.
        *layers: Bonus layers (racial, item, temporary, improvement).

    Returns:
        The final ability scores, unclamped.
    """
    totals = base.as_dict()
    for layer in layers:
        for ability, bonus in layer.items():
            totals[Ability(ability)] += bonus
    return FinalAbilityScores(**{ability.value: score for ability, score in totals.items()})


def ability_modifiers(scores: AbilityScores) -> dict[Ability, int]:
    """Get the modifier of every ability."""
    return {ability: ability_modifier(score) for ability, score in scores.as_dict().items()}


def skill_bonus(modifier: int, entry: SkillEntry, proficiency: int) -> int:
    """Calculate a skill bonus.

    Args:
        modifier: Modifier of the skill's governing ability.
        entry: The creature's skill entry.
        proficiency: The creature's proficiency bonus.

    Returns:
        modifier + proficiency (doubled with expertise) + flat bonus.
    """
    total = modifier + entry.bonus
    if entry.proficient:
        total += proficiency * (2 if entry.expertise else 1)
    return total


def armor_class(
    dexterity_modifier: int,
    *,
    armor_bonus: int = 0,
    shield_bonus: int = 0,
    max_dex_bonus: int | None = None,
) -> int:
    """Calculate armor class.

    Args:
        dexterity_modifier: The creature's DEX modifier.
        armor_bonus: AC granted by worn armor.
        shield_bonus: AC granted by a shield.
        max_dex_bonus: Cap on the DEX contribution (medium/heavy armor).

    Returns:
        The armor class.
    """
    dex = dexterity_modifier if max_dex_bonus is None else min(dexterity_modifier, max_dex_bonus)
    return BASE_ARMOR_CLASS + dex + armor_bonus + shield_bonus


def initiative_modifier(scores: AbilityScores) -> int:
    """Initiative modifier is the DEX modifier."""
    return scores.modifier(Ability.DEX)


def derive_stats(entity: Entity) -> DerivedStats:
    """Compute the derived-stat block for an entity.

    Args:
        entity: A player character or enemy.

    Returns:
        Derived modifiers and bonuses.
    """
    scores = entity.ability_scores
    proficiency = entity.proficiency_bonus
    skills = {
        skill: skill_bonus(scores.modifier(skill.ability), entity.skill_entry(skill), proficiency)
        for skill in Skill
    }
    return DerivedStats(
        ability_modifiers=ability_modifiers(scores),
        proficiency_bonus=proficiency,
        skill_bonuses=skills,
        armor_class=entity.combat_stats.armor_class,
        initiative=initiative_modifier(scores),
        passive_perception=10 + skills[Skill.PERCEPTION],
    )


__all__ = [
    "AbilityScore",
    "Level",
    "AbilityScores",
    "FinalAbilityScores",
    "AbilityBonuses",
    "SkillEntry",
    "DerivedStats",
    "ability_modifier",
    "proficiency_bonus",
    "final_scores",
    "ability_modifiers",
    "skill_bonus",
    "armor_class",
    "initiative_modifier",
    "derive_stats",
]
