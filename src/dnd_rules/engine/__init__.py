"""Rules engine for the tabletop rules-resolution core.

This module provides the rules components and the session that ties
them together. All randomness flows through one DiceRoller, so a session
built from a seed replays identically.

Submodules:
    dice: Dice rolling with an injectable random source (d20 notation)
    skill_check: Skill check resolution
    combat: Initiative, attacks and turn order for one encounter
    enemies: Enemy instantiation from templates
    rest: Short and long rests with interruptions
    rewards: Reward application to character and progress
    scenes: Scene repository and choice processing
    session: Game session owning player, progress, scene and encounter

Example:
    >>> from dnd_rules.engine import CombatEncounter, DiceRoller
    >>>
    >>> encounter = CombatEncounter(hero, [bandit], dice=DiceRoller(seed=1))
    >>> result = encounter.perform_attack(hero, bandit)
    >>> encounter.combat_log[-1].startswith("Aria attacks Bandit")
    True
"""

from __future__ import annotations

# =============================================================================
# Dice Rolling
# =============================================================================
from dnd_rules.engine.dice import (
    D20Roll,
    DiceRoller,
    DiceSpec,
    DiceTotal,
    RollType,
    parse_dice_notation,
)

# =============================================================================
# Skill Checks
# =============================================================================
from dnd_rules.engine.skill_check import (
    SkillCheckResolver,
    SkillCheckResult,
    roll_type_for,
)

# =============================================================================
# Combat
# =============================================================================
from dnd_rules.engine.combat import (
    AttackResult,
    CombatantStatus,
    CombatEncounter,
    EncounterSnapshot,
    EncounterSummary,
    InitiativeEntry,
)
from dnd_rules.engine.enemies import EnemyFactory

# =============================================================================
# Rest
# =============================================================================
from dnd_rules.engine.rest import (
    RestSystem,
    interruption_severity,
    interruption_type,
    rest_quality,
)

# =============================================================================
# Scenes and Rewards
# =============================================================================
from dnd_rules.engine.rewards import ProgressRewardApplier, RewardApplier
from dnd_rules.engine.scenes import (
    SceneOrchestrator,
    SceneRepository,
    SceneTransitionResult,
    requirement_met,
)

# =============================================================================
# Session
# =============================================================================
from dnd_rules.engine.session import CombatOutcome, GameSession, SessionSnapshot


__all__ = [
    # Dice
    "D20Roll",
    "DiceRoller",
    "DiceSpec",
    "DiceTotal",
    "RollType",
    "parse_dice_notation",
    # Skill checks
    "SkillCheckResolver",
    "SkillCheckResult",
    "roll_type_for",
    # Combat
    "AttackResult",
    "CombatantStatus",
    "CombatEncounter",
    "EncounterSnapshot",
    "EncounterSummary",
    "InitiativeEntry",
    "EnemyFactory",
    # Rest
    "RestSystem",
    "interruption_severity",
    "interruption_type",
    "rest_quality",
    # Scenes and rewards
    "RewardApplier",
    "ProgressRewardApplier",
    "SceneOrchestrator",
    "SceneRepository",
    "SceneTransitionResult",
    "requirement_met",
    # Session
    "CombatOutcome",
    "GameSession",
    "SessionSnapshot",
]
