"""Tests for configuration management."""

from __future__ import annotations

import pytest

from dnd_rules.core.config import (
    CombatSettings,
    RestSettings,
    Settings,
    SkillCheckSettings,
    clear_settings_cache,
    get_settings,
)
from dnd_rules.core.exceptions import ConfigurationError


class TestCombatSettings:
    """Tests for CombatSettings configuration."""

    def test_default_values(self) -> None:
        """Test default combat settings."""
        settings = CombatSettings()

        assert settings.attack_proficiency_bonus == 2
        assert settings.default_weapon_dice == "1d8"
        assert settings.minimum_damage == 1

    def test_invalid_weapon_dice(self) -> None:
        """Test that the default weapon dice must be valid notation."""
        with pytest.raises(ConfigurationError) as exc_info:
            CombatSettings(default_weapon_dice="a sword")

        assert exc_info.value.details["config_key"] == "default_weapon_dice"


class TestSkillCheckSettings:
    """Tests for SkillCheckSettings configuration."""

    def test_natural_twenty_off_by_default(self) -> None:
        """Test a natural 20 does not auto-succeed by default."""
        assert SkillCheckSettings().natural_twenty_succeeds is False


class TestRestSettings:
    """Tests for RestSettings configuration."""

    def test_default_values(self) -> None:
        """Test default rest settings."""
        settings = RestSettings()

        assert settings.short_rest_minutes == 60
        assert settings.long_rest_minutes == 480
        assert settings.long_rest_interruption_checks == 3
        assert settings.hit_dice_recovery_rate == 0.5
        assert settings.max_disruptive_interruptions == 1

    def test_default_interruption_chances(self) -> None:
        """Test the interruption table covers every location type."""
        chances = RestSettings().interruption_chances

        assert chances == {
            "safe_indoor": 5,
            "safe_outdoor": 15,
            "unsafe_outdoor": 35,
            "dangerous": 60,
            "magical": 25,
        }

    @pytest.mark.parametrize("rate", [0, -0.5, 1.5])
    def test_recovery_rate_validation(self, rate: float) -> None:
        """Test that the hit dice recovery rate must be in (0, 1]."""
        with pytest.raises(ConfigurationError) as exc_info:
            RestSettings(hit_dice_recovery_rate=rate)

        assert "hit_dice_recovery_rate" in str(exc_info.value)

    def test_missing_location_type(self) -> None:
        """Test that every location type needs an interruption chance."""
        with pytest.raises(ConfigurationError) as exc_info:
            RestSettings(interruption_chances={"safe_indoor": 5})

        assert "dangerous" in exc_info.value.details["missing"]

    def test_chance_out_of_range(self) -> None:
        """Test that interruption chances are percentages."""
        chances = dict(RestSettings().interruption_chances, dangerous=150)

        with pytest.raises(ConfigurationError):
            RestSettings(interruption_chances=chances)


class TestSettings:
    """Tests for main Settings configuration."""

    def test_default_settings(self) -> None:
        """Test default settings initialization."""
        settings = Settings()

        assert settings.app_name == "Tabletop Rules Core"
        assert settings.debug is False
        assert settings.is_production is True
        assert settings.dice.seed is None
        assert settings.rest.short_rest_minutes == 60

    def test_settings_from_env(self, mock_env_vars: dict[str, str]) -> None:
        """Test settings load from environment variables."""
        settings = Settings()

        assert settings.debug is True
        assert settings.log_level == "DEBUG"
        assert settings.dice.seed == 1234
        assert settings.combat.attack_proficiency_bonus == 3
        assert settings.rest.hit_dice_recovery_rate == 0.25

    def test_get_settings_cached(self) -> None:
        """Test get_settings returns the cached instance."""
        assert get_settings() is get_settings()

    def test_clear_settings_cache(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test clearing the cache reloads from the environment."""
        first = get_settings()
        monkeypatch.setenv("DND_RULES_DICE_SEED", "99")
        clear_settings_cache()

        second = get_settings()

        assert second is not first
        assert second.dice.seed == 99

    def test_invalid_env_raises_configuration_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test invalid environment values surface as ConfigurationError."""
        monkeypatch.setenv("DND_RULES_REST_HIT_DICE_RECOVERY_RATE", "3")

        with pytest.raises(ConfigurationError):
            get_settings()
