"""Enumeration types for the rules-resolution core.

This module defines the enumerations used throughout the rules core:
abilities and skills, classes, conditions, rest vocabulary, combat
phases and the scene/choice vocabulary. They are string enums so that
snapshots serialize to readable JSON.
"""

from __future__ import annotations

from enum import StrEnum


# =============================================================================
# Abilities and Skills
# =============================================================================


class Ability(StrEnum):
    """The six core abilities."""

    STR = "strength"
    DEX = "dexterity"
    CON = "constitution"
    INT = "intelligence"
    WIS = "wisdom"
    CHA = "charisma"

    @property
    def full_name(self) -> str:
        """Get the full name of the ability.

        Returns:
            Full ability name (e.g., 'Strength' for STR).
        """
        return self.value.capitalize()

    @property
    def abbreviation(self) -> str:
        """Get the three-letter abbreviation.

        Returns:
            Three-letter abbreviation (e.g., 'STR').
        """
        return self.name


class Skill(StrEnum):
    """Skills and their associated abilities.

    Each skill is linked to a primary ability score used
    for skill checks.
    """

    # Strength skills
    ATHLETICS = "athletics"

    # Dexterity skills
    ACROBATICS = "acrobatics"
    SLEIGHT_OF_HAND = "sleight_of_hand"
    STEALTH = "stealth"

    # Intelligence skills
    ARCANA = "arcana"
    HISTORY = "history"
    INVESTIGATION = "investigation"
    NATURE = "nature"
    RELIGION = "religion"

    # Wisdom skills
    ANIMAL_HANDLING = "animal_handling"
    INSIGHT = "insight"
    MEDICINE = "medicine"
    PERCEPTION = "perception"
    SURVIVAL = "survival"

    # Charisma skills
    DECEPTION = "deception"
    INTIMIDATION = "intimidation"
    PERFORMANCE = "performance"
    PERSUASION = "persuasion"

    @property
    def ability(self) -> Ability:
        """Get the primary ability score for this skill.

        Returns:
            The Ability enum value associated with this skill.
        """
        return _SKILL_ABILITIES[self]


_SKILL_ABILITIES: dict[Skill, Ability] = {
    Skill.ATHLETICS: Ability.STR,
    Skill.ACROBATICS: Ability.DEX,
    Skill.SLEIGHT_OF_HAND: Ability.DEX,
    Skill.STEALTH: Ability.DEX,
    Skill.ARCANA: Ability.INT,
    Skill.HISTORY: Ability.INT,
    Skill.INVESTIGATION: Ability.INT,
    Skill.NATURE: Ability.INT,
    Skill.RELIGION: Ability.INT,
    Skill.ANIMAL_HANDLING: Ability.WIS,
    Skill.INSIGHT: Ability.WIS,
    Skill.MEDICINE: Ability.WIS,
    Skill.PERCEPTION: Ability.WIS,
    Skill.SURVIVAL: Ability.WIS,
    Skill.DECEPTION: Ability.CHA,
    Skill.INTIMIDATION: Ability.CHA,
    Skill.PERFORMANCE: Ability.CHA,
    Skill.PERSUASION: Ability.CHA,
}


class CharacterClass(StrEnum):
    """Playable character classes."""

    BARBARIAN = "barbarian"
    BARD = "bard"
    CLERIC = "cleric"
    DRUID = "druid"
    FIGHTER = "fighter"
    MONK = "monk"
    PALADIN = "paladin"
    RANGER = "ranger"
    ROGUE = "rogue"
    SORCERER = "sorcerer"
    WARLOCK = "warlock"
    WIZARD = "wizard"


# =============================================================================
# Creatures
# =============================================================================


class CreatureSize(StrEnum):
    """Creature size categories."""

    TINY = "tiny"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    HUGE = "huge"
    GARGANTUAN = "gargantuan"


class CreatureType(StrEnum):
    """Creature type categories."""

    ABERRATION = "aberration"
    BEAST = "beast"
    CONSTRUCT = "construct"
    DRAGON = "dragon"
    ELEMENTAL = "elemental"
    FEY = "fey"
    FIEND = "fiend"
    GIANT = "giant"
    HUMANOID = "humanoid"
    MONSTROSITY = "monstrosity"
    UNDEAD = "undead"


# =============================================================================
# Conditions and Damage
# =============================================================================


class Condition(StrEnum):
    """Status conditions that can affect a creature."""

    BLINDED = "blinded"
    CHARMED = "charmed"
    DEAFENED = "deafened"
    FRIGHTENED = "frightened"
    GRAPPLED = "grappled"
    INCAPACITATED = "incapacitated"
    INVISIBLE = "invisible"
    PARALYZED = "paralyzed"
    PETRIFIED = "petrified"
    POISONED = "poisoned"
    PRONE = "prone"
    RESTRAINED = "restrained"
    STUNNED = "stunned"
    UNCONSCIOUS = "unconscious"


class DamageType(StrEnum):
    """Damage types used for resistances and immunities."""

    ACID = "acid"
    BLUDGEONING = "bludgeoning"
    COLD = "cold"
    FIRE = "fire"
    FORCE = "force"
    LIGHTNING = "lightning"
    NECROTIC = "necrotic"
    PIERCING = "piercing"
    POISON = "poison"
    PSYCHIC = "psychic"
    RADIANT = "radiant"
    SLASHING = "slashing"
    THUNDER = "thunder"


# =============================================================================
# Dice
# =============================================================================


class RollType(StrEnum):
    """How a d20 is rolled."""

    NORMAL = "normal"
    ADVANTAGE = "advantage"
    DISADVANTAGE = "disadvantage"


# =============================================================================
# Combat
# =============================================================================


class ParticipantKind(StrEnum):
    """Discriminant of the combat participant variant."""

    PLAYER = "player"
    ENEMY = "enemy"


class CombatPhase(StrEnum):
    """Lifecycle phase of a combat encounter."""

    INITIATIVE_ROLLED = "initiative_rolled"
    PLAYER_TURN = "player_turn"
    ENEMY_TURN = "enemy_turn"
    COMBAT_OVER = "combat_over"


class CombatResult(StrEnum):
    """Outcome of a combat encounter."""

    ONGOING = "ongoing"
    VICTORY = "victory"
    DEFEAT = "defeat"


# =============================================================================
# Rest
# =============================================================================


class RestType(StrEnum):
    """Kinds of rest."""

    SHORT = "short"
    LONG = "long"


class LocationType(StrEnum):
    """Rest location categories, each with its own interruption odds."""

    SAFE_INDOOR = "safe_indoor"
    SAFE_OUTDOOR = "safe_outdoor"
    UNSAFE_OUTDOOR = "unsafe_outdoor"
    DANGEROUS = "dangerous"
    MAGICAL = "magical"


class RestDanger(StrEnum):
    """Hazards a rest location can expose the party to."""

    RANDOM_ENCOUNTER = "random_encounter"
    WEATHER = "weather"
    THEFT = "theft"
    DISEASE = "disease"
    MAGICAL_DISTURBANCE = "magical_disturbance"
    EXHAUSTION = "exhaustion"


class RestAmenity(StrEnum):
    """Comforts and protections available at a rest location."""

    BEDROLL = "bedroll"
    CAMPFIRE = "campfire"
    SHELTER = "shelter"
    WATER = "water"
    FOOD = "food"
    GUARD = "guard"
    HEALING_HERBS = "healing_herbs"
    MAGICAL_WARD = "magical_ward"


class InterruptionType(StrEnum):
    """What broke the rest."""

    COMBAT = "combat"
    ENVIRONMENTAL = "environmental"
    SOCIAL = "social"
    MAGICAL = "magical"
    THEFT = "theft"
    DISCOVERY = "discovery"
    NIGHTMARE = "nightmare"


class InterruptionSeverity(StrEnum):
    """How badly an interruption disturbs the rest."""

    MINOR = "minor"
    MAJOR = "major"
    CATASTROPHIC = "catastrophic"


class RestQuality(StrEnum):
    """Annotation describing how restful a long rest was."""

    POOR = "poor"
    NORMAL = "normal"
    GOOD = "good"
    EXCELLENT = "excellent"


# =============================================================================
# Scenes and Choices
# =============================================================================


class SceneType(StrEnum):
    """Discriminant of the scene variant."""

    NARRATIVE = "narrative"
    COMBAT = "combat"


class RewardKind(StrEnum):
    """Kinds of reward a choice or combat can grant."""

    XP = "xp"
    GOLD = "gold"
    ITEM = "item"
    FLAG = "flag"
    COMPANION = "companion"
    RELATIONSHIP = "relationship"


class RequirementType(StrEnum):
    """What a choice requirement inspects."""

    LEVEL = "level"
    CLASS = "class"
    ABILITY = "ability"
    SKILL = "skill"
    ITEM = "item"
    COMPANION = "companion"
    FLAG = "flag"


class Comparison(StrEnum):
    """How a requirement value is compared."""

    EQUAL = "equal"
    GREATER = "greater"
    LESS = "less"
    HAS = "has"
    NOT_HAS = "not_has"


__all__ = [
    "Ability",
    "Skill",
    "CharacterClass",
    "CreatureSize",
    "CreatureType",
    "Condition",
    "DamageType",
    "RollType",
    "ParticipantKind",
    "CombatPhase",
    "CombatResult",
    "RestType",
    "LocationType",
    "RestDanger",
    "RestAmenity",
    "InterruptionType",
    "InterruptionSeverity",
    "RestQuality",
    "SceneType",
    "RewardKind",
    "RequirementType",
    "Comparison",
]
