"""Custom exception hierarchy for the tabletop rules-resolution core.

This module defines the exception hierarchy shared by every component of
the rules core. All exceptions inherit from DndRulesError, enabling unified
error handling at the integration boundary while preserving the context
of the failing operation (scene id, choice id, combatant, expression).

The hierarchy follows four broad kinds of failure:

- NotFoundError: a referenced scene, choice or template does not exist.
- InvalidStateError: an operation was attempted in the wrong phase.
- MissingActorError: an entity is required but none was supplied.
- ValidationFailure: content or a request is malformed.

Example:
    >>> from dnd_rules.core.exceptions import SceneNotFoundError
    >>> raise SceneNotFoundError("Scene not found", scene_id="tavern_exit")
"""

from __future__ import annotations

from typing import Any


class DndRulesError(Exception):
    """Base exception for all rules-core errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception.

        Returns:
            String representation suitable for debugging.
        """
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Lookup Exceptions
# =============================================================================


class NotFoundError(DndRulesError):
    """Raised when a referenced resource does not exist."""


class SceneNotFoundError(NotFoundError):
    """Raised when a scene id cannot be resolved by the scene repository."""

    def __init__(
        self,
        message: str,
        *,
        scene_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize scene lookup error with scene context.

        Args:
            message: Human-readable error description.
            scene_id: The scene id that could not be found.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if scene_id:
            combined_details["scene_id"] = scene_id
        super().__init__(message, details=combined_details)


class ChoiceNotFoundError(NotFoundError):
    """Raised when a choice id is not among a scene's choices."""

    def __init__(
        self,
        message: str,
        *,
        choice_id: str | None = None,
        scene_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize choice lookup error with scene context.

        Args:
            message: Human-readable error description.
            choice_id: The choice id that could not be found.
            scene_id: The scene that was searched.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if choice_id:
            combined_details["choice_id"] = choice_id
        if scene_id:
            combined_details["scene_id"] = scene_id
        super().__init__(message, details=combined_details)


class TemplateNotFoundError(NotFoundError):
    """Raised when an enemy template id is unknown."""

    def __init__(
        self,
        message: str,
        *,
        template_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize template lookup error.

        Args:
            message: Human-readable error description.
            template_id: The template id that could not be found.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if template_id:
            combined_details["template_id"] = template_id
        super().__init__(message, details=combined_details)


# =============================================================================
# State Exceptions
# =============================================================================


class InvalidStateError(DndRulesError):
    """Raised when an operation is attempted in the wrong lifecycle phase.

    Typical causes are attacking after a combat has ended, resting while
    an encounter is active, or finishing a combat that is still ongoing.
    """

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid state error with state context.

        Args:
            message: Human-readable error description.
            current_state: The current state identifier.
            expected_states: List of states the operation requires.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if current_state:
            combined_details["current_state"] = current_state
        if expected_states:
            combined_details["expected_states"] = expected_states
        super().__init__(message, details=combined_details)


class MissingActorError(DndRulesError):
    """Raised when an operation requires an entity but none was supplied."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize missing actor error.

        Args:
            message: Human-readable error description.
            operation: The operation that needed an actor.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if operation:
            combined_details["operation"] = operation
        super().__init__(message, details=combined_details)


# =============================================================================
# Validation Exceptions
# =============================================================================


class ValidationFailure(DndRulesError):
    """Raised when content or a request is malformed.

    This covers scene content without a usable consequence, consequences
    missing a target scene, unmet choice requirements and malformed rest
    requests.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation failure with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


class NoConsequenceDefinedError(ValidationFailure):
    """Raised when a choice resolves to an empty consequence list."""


class MissingTargetSceneError(ValidationFailure):
    """Raised when the selected consequence has no target scene."""


class RequirementNotMetError(ValidationFailure):
    """Raised when the actor does not satisfy a choice requirement."""


class RestRequestError(ValidationFailure):
    """Raised when a rest request cannot be honoured as written."""


# =============================================================================
# Game Engine Exceptions
# =============================================================================


class GameEngineError(DndRulesError):
    """Base exception for rules engine failures."""


class CombatError(GameEngineError):
    """Raised when a combat encounter cannot be built or resolved.

    This includes empty enemy lists, duplicate participants and
    attacks involving entities outside the encounter.
    """

    def __init__(
        self,
        message: str,
        *,
        combatant_id: str | None = None,
        round_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize combat error with combat context.

        Args:
            message: Human-readable error description.
            combatant_id: Identifier of the combatant involved.
            round_number: Current combat round when error occurred.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if combatant_id:
            combined_details["combatant_id"] = combatant_id
        if round_number is not None:
            combined_details["round_number"] = round_number
        super().__init__(message, details=combined_details)


class DiceRollError(GameEngineError):
    """Raised when dice notation or dice parameters are invalid."""

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize dice roll error with expression context.

        Args:
            message: Human-readable error description.
            expression: The dice expression that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if expression:
            combined_details["expression"] = expression
        super().__init__(message, details=combined_details)


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(DndRulesError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


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
    # Configuration exceptions
    "ConfigurationError",
]
