"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        DndRulesError: Base exception for all rules-core errors.
        NotFoundError, InvalidStateError, MissingActorError,
        ValidationFailure: The four error kinds surfaced to callers.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from dnd_rules.core.config import (
    CombatSettings,
    DiceSettings,
    RestSettings,
    Settings,
    SkillCheckSettings,
    clear_settings_cache,
    get_settings,
)
from dnd_rules.core.exceptions import (
    ChoiceNotFoundError,
    CombatError,
    ConfigurationError,
    DiceRollError,
    DndRulesError,
    GameEngineError,
    InvalidStateError,
    MissingActorError,
    MissingTargetSceneError,
    NoConsequenceDefinedError,
    NotFoundError,
    RequirementNotMetError,
    RestRequestError,
    SceneNotFoundError,
    TemplateNotFoundError,
    ValidationFailure,
)
from dnd_rules.core.logging import (
    bind_context,
    clear_context,
    configure_from_settings,
    configure_logging,
    get_logger,
)


__all__ = [
    # Base exception
    "DndRulesError",
    # Lookup exceptions
    "NotFoundError",
    "SceneNotFoundError",
    "ChoiceNotFoundError",
    "TemplateNotFoundError",
    # State exceptions
    "InvalidStateError",
    "MissingActorError",
    # Validation exceptions
    "ValidationFailure",
    "NoConsequenceDefinedError",
    "MissingTargetSceneError",
    "RequirementNotMetError",
    "RestRequestError",
    # Game engine exceptions
    "GameEngineError",
    "CombatError",
    "DiceRollError",
    # Configuration
    "ConfigurationError",
    "Settings",
    "DiceSettings",
    "CombatSettings",
    "SkillCheckSettings",
    "RestSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
]
