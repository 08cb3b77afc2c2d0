"""Pydantic V2 schemas for the rules-resolution core.

Submodules:
    enums: Enumeration types (Ability, Skill, CharacterClass, Condition, ...)
    stats: Ability scores and the derived-stat calculator.
    entities: Player characters, enemies and class resources.
    rest: Rest locations, interruptions and rest records.
    scenes: Scenes, choices, skill check requests and rewards.
    progress: Campaign progress (gold, inventory, flags, companions).

Example:
    >>> from dnd_rules.models import create_player_character, CharacterClass
    >>> hero = create_player_character("Aria", CharacterClass.FIGHTER, level=3)
    >>> hero.proficiency_bonus
    2
"""

from __future__ import annotations

# =============================================================================
# Enumerations
# =============================================================================
from dnd_rules.models.enums import (
    Ability,
    CharacterClass,
    CombatPhase,
    CombatResult,
    Comparison,
    Condition,
    CreatureSize,
    CreatureType,
    DamageType,
    InterruptionSeverity,
    InterruptionType,
    LocationType,
    ParticipantKind,
    RequirementType,
    RestAmenity,
    RestDanger,
    RestQuality,
    RestType,
    RewardKind,
    RollType,
    SceneType,
    Skill,
)

# =============================================================================
# Stats
# =============================================================================
from dnd_rules.models.stats import (
    AbilityBonuses,
    AbilityScores,
    DerivedStats,
    FinalAbilityScores,
    SkillEntry,
    ability_modifier,
    ability_modifiers,
    armor_class,
    derive_stats,
    final_scores,
    initiative_modifier,
    proficiency_bonus,
    skill_bonus,
)

# =============================================================================
# Entities
# =============================================================================
from dnd_rules.models.entities import (
    ClassResources,
    CombatStats,
    Enemy,
    Entity,
    HitDicePool,
    Participant,
    PlayerCharacter,
    SlotPool,
    build_class_resources,
    create_player_character,
)

# =============================================================================
# Rest
# =============================================================================
from dnd_rules.models.rest import (
    ArcaneRecovery,
    ClassAbilityRecovery,
    HitDiceRoll,
    Interruption,
    LongRestRecord,
    LongRestRecovery,
    RestChoice,
    RestConsequence,
    RestFinalState,
    RestLocation,
    RestResult,
    ShortRestRecord,
    SpellPreparation,
)

# =============================================================================
# Scenes and Progress
# =============================================================================
from dnd_rules.models.scenes import (
    Choice,
    ChoiceRequirement,
    CombatReward,
    CombatScene,
    Consequence,
    EnemyGroup,
    NarrativeScene,
    Reward,
    Scene,
    SkillCheck,
    SkillCheckConsequences,
)
from dnd_rules.models.progress import PlayerProgress


__all__ = [
    # Enumerations
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
    # Stats
    "AbilityScores",
    "FinalAbilityScores",
    "AbilityBonuses",
    "SkillEntry",
    "DerivedStats",
    "ability_modifier",
    "ability_modifiers",
    "proficiency_bonus",
    "final_scores",
    "skill_bonus",
    "armor_class",
    "initiative_modifier",
    "derive_stats",
    # Entities
    "CombatStats",
    "SlotPool",
    "HitDicePool",
    "ClassResources",
    "build_class_resources",
    "Entity",
    "PlayerCharacter",
    "Enemy",
    "Participant",
    "create_player_character",
    # Rest
    "RestLocation",
    "RestConsequence",
    "RestChoice",
    "Interruption",
    "HitDiceRoll",
    "ArcaneRecovery",
    "ClassAbilityRecovery",
    "ShortRestRecord",
    "LongRestRecovery",
    "SpellPreparation",
    "LongRestRecord",
    "RestFinalState",
    "RestResult",
    # Scenes
    "Reward",
    "Consequence",
    "SkillCheckConsequences",
    "SkillCheck",
    "ChoiceRequirement",
    "Choice",
    "NarrativeScene",
    "EnemyGroup",
    "CombatReward",
    "CombatScene",
    "Scene",
    # Progress
    "PlayerProgress",
]
