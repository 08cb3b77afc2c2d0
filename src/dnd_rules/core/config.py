"""Configuration management for the rules-resolution core.

This module provides centralized configuration using pydantic-settings,
supporting environment variables, .env files and runtime overrides.
The rules constants that a table may want to house-rule (attack
proficiency, rest durations, interruption odds) live here rather than
being scattered through the engine.

Example:
    >>> from dnd_rules.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.rest.short_rest_minutes
    60

Environment Variables:
    DND_RULES_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    DND_RULES_DICE_SEED: Seed for the default random source
    DND_RULES_COMBAT_ATTACK_PROFICIENCY_BONUS: Flat proficiency added to attacks
    DND_RULES_REST_HIT_DICE_RECOVERY_RATE: Fraction of hit dice a long rest restores
    DND_RULES_CHECK_NATURAL_TWENTY_SUCCEEDS: Whether a natural 20 always passes a check
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dnd_rules.core.exceptions import ConfigurationError
from dnd_rules.models.enums import LocationType


DEFAULT_INTERRUPTION_CHANCES: dict[str, int] = {
    LocationType.SAFE_INDOOR.value: 5,
    LocationType.SAFE_OUTDOOR.value: 15,
    LocationType.UNSAFE_OUTDOOR.value: 35,
    LocationType.DANGEROUS.value: 60,
    LocationType.MAGICAL.value: 25,
}


class DiceSettings(BaseSettings):
    """Configuration for the default random source.

    Attributes:
        seed: Seed for reproducible sessions; None draws from OS entropy.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_RULES_DICE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    seed: int | None = Field(
        default=None,
        description="Seed for the default random source",
    )


class CombatSettings(BaseSettings):
    """Configuration for the simplified combat model.

    Attributes:
        attack_proficiency_bonus: Flat proficiency added to every attack roll.
        default_weapon_dice: Damage dice used when a participant has none.
        minimum_damage: Floor applied to the damage of a successful hit.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_RULES_COMBAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    attack_proficiency_bonus: int = Field(
        default=2,
        ge=0,
        le=6,
        description="Flat proficiency bonus added to attack rolls",
    )
    default_weapon_dice: str = Field(
        default="1d8",
        description="Default damage dice notation",
    )
    minimum_damage: int = Field(
        default=1,
        ge=0,
        description="Minimum damage dealt by a hit",
    )

    @field_validator("default_weapon_dice", mode="after")
    @classmethod
    def validate_weapon_dice(cls, value: str) -> str:
        """Ensure the default weapon dice are valid notation.

        Args:
            value: The dice notation to validate.

        Returns:
            The validated notation.

        Raises:
            ConfigurationError: If the notation cannot be parsed.
        """
        from dnd_rules.core.exceptions import DiceRollError
        from dnd_rules.engine.dice import parse_dice_notation

        try:
            parse_dice_notation(value)
        except DiceRollError as exc:
            raise ConfigurationError(
                f"Invalid default weapon dice: {value}",
                config_key="default_weapon_dice",
            ) from exc
        return value


class SkillCheckSettings(BaseSettings):
    """Configuration for skill check resolution.

    Attributes:
        natural_twenty_succeeds: When True a natural 20 passes any DC.
            The default keeps success purely arithmetic and reports the
            natural 20 only through the critical flag.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_RULES_CHECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    natural_twenty_succeeds: bool = Field(
        default=False,
        description="Whether a natural 20 always succeeds a skill check",
    )


class RestSettings(BaseSettings):
    """Configuration for short and long rests.

    Attributes:
        short_rest_minutes: Duration of a short rest.
        long_rest_minutes: Duration of a long rest.
        long_rest_interruption_checks: Interruption checks during a long rest.
        hit_dice_recovery_rate: Fraction of total hit dice a long rest restores.
        interruption_chances: Percent chance of interruption per location type.
        max_disruptive_interruptions: Non-minor interruptions a long rest tolerates.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_RULES_REST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    short_rest_minutes: int = Field(default=60, ge=1, description="Short rest duration")
    long_rest_minutes: int = Field(default=480, ge=1, description="Long rest duration")
    long_rest_interruption_checks: int = Field(
        default=3,
        ge=1,
        le=8,
        description="Number of interruption checks during a long rest",
    )
    hit_dice_recovery_rate: float = Field(
        default=0.5,
        description="Fraction of hit dice restored by a long rest",
    )
    interruption_chances: dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_INTERRUPTION_CHANCES),
        description="Interruption chance (percent) by location type",
    )
    max_disruptive_interruptions: int = Field(
        default=1,
        ge=0,
        description="Non-minor interruptions tolerated before a long rest fails",
    )

    @model_validator(mode="after")
    def validate_rest_tables(self) -> RestSettings:
        """Ensure the recovery rate and interruption table are usable.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If a value lies outside its legal range.
        """
        if not 0 < self.hit_dice_recovery_rate <= 1:
            raise ConfigurationError(
                f"hit_dice_recovery_rate ({self.hit_dice_recovery_rate}) must be in (0, 1]",
                config_key="hit_dice_recovery_rate",
            )
        missing = [loc.value for loc in LocationType if loc.value not in self.interruption_chances]
        if missing:
            raise ConfigurationError(
                "interruption_chances is missing location types",
                config_key="interruption_chances",
                details={"missing": missing},
            )
        for location, chance in self.interruption_chances.items():
            if not 0 <= chance <= 100:
                raise ConfigurationError(
                    f"Interruption chance for {location} must be between 0 and 100",
                    config_key="interruption_chances",
                    details={"location": location, "chance": chance},
                )
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        json_logs: Emit logs as JSON.
        log_file: Optional file that receives a copy of the logs.
        dice: Random source settings.
        combat: Combat settings.
        checks: Skill check settings.
        rest: Rest settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_RULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    # Application metadata
    app_name: str = Field(
        default="Tabletop Rules Core",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=False,
        description="Emit structured logs as JSON",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path",
    )

    dice: DiceSettings = Field(default_factory=DiceSettings)
    combat: CombatSettings = Field(default_factory=CombatSettings)
    checks: SkillCheckSettings = Field(default_factory=SkillCheckSettings)
    rest: RestSettings = Field(default_factory=RestSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode.

        Returns:
            True if not in debug mode.
        """
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access.

    Example:
        >>> clear_settings_cache()
        >>> settings = get_settings()  # Reloads from environment
    """
    get_settings.cache_clear()


__all__ = [
    "DEFAULT_INTERRUPTION_CHANCES",
    "DiceSettings",
    "CombatSettings",
    "SkillCheckSettings",
    "RestSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
