"""dnd_rules - Tabletop RPG Rules-Resolution Core.

Deterministic rules for a single-player fantasy RPG: ability and derived
stats, dice, skill checks, turn-based combat, short and long rests, and
scene/choice progression.

DESIGN:
- One injected random source per session, so every outcome is replayable
- Combat participants are a closed tagged variant (player | enemy)
- All mutable state lives in an explicit GameSession, never in globals
- Every stateful object snapshots to a plain pydantic record

Example:
    >>> from dnd_rules import GameSession, SceneRepository, create_player_character
    >>>
    >>> hero = create_player_character("Aria", "fighter", base_scores={"strength": 16})
    >>> scenes = SceneRepository.from_json_file("scenes.json")
    >>> session = GameSession.create(hero, scenes, seed=42, start_scene="tavern")
    >>> result = session.choose("leave_quietly")
    >>> result.next_scene_id
    'village_road'

Modules:
    core: Configuration, logging, exceptions and constants.
    models: Pydantic V2 schemas for entities, scenes and rest records.
    data: Class progression tables and enemy templates.
    engine: Dice, skill checks, combat, rests, scenes and the session.
"""

from __future__ import annotations

# Core
from dnd_rules.core.config import Settings, get_settings
from dnd_rules.core.exceptions import DndRulesError
from dnd_rules.core.logging import configure_logging, get_logger

# Models
from dnd_rules.models import (
    Ability,
    CharacterClass,
    Enemy,
    PlayerCharacter,
    PlayerProgress,
    RestLocation,
    Skill,
    create_player_character,
)

# Engine
from dnd_rules.engine import (
    CombatEncounter,
    DiceRoller,
    EnemyFactory,
    GameSession,
    RestSystem,
    SceneOrchestrator,
    SceneRepository,
    SkillCheckResolver,
)


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "DndRulesError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Ability",
    "Skill",
    "CharacterClass",
    "PlayerCharacter",
    "Enemy",
    "PlayerProgress",
    "RestLocation",
    "create_player_character",
    # Engine
    "DiceRoller",
    "SkillCheckResolver",
    "CombatEncounter",
    "EnemyFactory",
    "RestSystem",
    "SceneRepository",
    "SceneOrchestrator",
    "GameSession",
]
