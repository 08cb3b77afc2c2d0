"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the rules-core test suite. Dice outcomes are forced through
ScriptedRandom, a random source whose ``randint`` hands out queued
values in order.
"""

from __future__ import annotations

import random
from collections import deque
from typing import TYPE_CHECKING, Any

import pytest


if TYPE_CHECKING:
    from collections.abc import Generator


class ScriptedRandom(random.Random):
    """Random source that returns queued values from ``randint``.

    Each value must lie in the requested range, and running out of
    values fails the test, so a test states exactly which dice it expects
    to be rolled.
    """

    def __init__(self) -> None:
        super().__init__(0)
        self._queue: deque[int] = deque()

    def push(self, *values: int) -> ScriptedRandom:
        self._queue.extend(values)
        return self

    @property
    def remaining(self) -> int:
        return len(self._queue)

    def randint(self, a: int, b: int) -> int:
        if not self._queue:
            raise AssertionError(f"Unexpected roll: randint({a}, {b}) with no scripted values left")
        value = self._queue.popleft()
        if not a <= value <= b:
            raise AssertionError(f"Scripted value {value} outside randint({a}, {b})")
        return value


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from dnd_rules.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "DND_RULES_DEBUG": "true",
        "DND_RULES_LOG_LEVEL": "DEBUG",
        "DND_RULES_DICE_SEED": "1234",
        "DND_RULES_COMBAT_ATTACK_PROFICIENCY_BONUS": "3",
        "DND_RULES_REST_HIT_DICE_RECOVERY_RATE": "0.25",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def scripted_rng() -> ScriptedRandom:
    """Random source with no values queued yet."""
    return ScriptedRandom()


@pytest.fixture
def scripted_dice(scripted_rng: ScriptedRandom) -> Any:
    """DiceRoller drawing every roll from ``scripted_rng``."""
    from dnd_rules.engine.dice import DiceRoller

    return DiceRoller(rng=scripted_rng)


@pytest.fixture
def dice_roller() -> Any:
    """Create a DiceRoller with a fixed seed for reproducible tests.

    Returns:
        DiceRoller instance with fixed seed.
    """
    from dnd_rules.engine.dice import DiceRoller

    return DiceRoller(seed=42)


# =============================================================================
# Entity Fixtures
# =============================================================================


@pytest.fixture
def sample_ability_scores() -> dict[str, int]:
    """Provide sample base ability scores.

    Returns:
        Dictionary of ability scores.
    """
    return {
        "strength": 16,
        "dexterity": 14,
        "constitution": 14,
        "intelligence": 10,
        "wisdom": 12,
        "charisma": 8,
    }


@pytest.fixture
def fighter(sample_ability_scores: dict[str, int]) -> Any:
    """Level 2 fighter: 20 HP, STR +3, AC 16, two d10 hit dice."""
    from dnd_rules.models import create_player_character

    return create_player_character(
        "Aria",
        "fighter",
        level=2,
        base_scores=sample_ability_scores,
        skill_proficiencies=["athletics", "perception"],
        armor_bonus=2,
        shield_bonus=2,
    )


@pytest.fixture
def wizard() -> Any:
    """Level 3 wizard with INT 16 and CON 12."""
    from dnd_rules.models import create_player_character

    return create_player_character(
        "Merric",
        "wizard",
        level=3,
        base_scores={
            "strength": 8,
            "dexterity": 14,
            "constitution": 12,
            "intelligence": 16,
            "wisdom": 12,
            "charisma": 10,
        },
        skill_proficiencies=["arcana", "history"],
    )


@pytest.fixture
def enemy_factory() -> Any:
    from dnd_rules.engine.enemies import EnemyFactory

    return EnemyFactory()


@pytest.fixture
def bandit(enemy_factory: Any) -> Any:
    """Bandit: AC 12, 11 HP, STR 11, DEX 12."""
    return enemy_factory.create("bandit")


# =============================================================================
# Rest Fixtures
# =============================================================================


@pytest.fixture
def inn() -> Any:
    """Comfortable, safe indoor location (5% interruption chance)."""
    from dnd_rules.models import RestLocation

    return RestLocation(
        type="safe_indoor",
        name="The Prancing Pony",
        safety_level=90,
        comfort_level=85,
        amenities=["bedroll", "food", "water", "shelter"],
    )


@pytest.fixture
def wilderness() -> Any:
    """Dangerous camp (60% interruption chance) with two dangers."""
    from dnd_rules.models import RestLocation

    return RestLocation(
        type="dangerous",
        name="Troll Fens",
        safety_level=10,
        comfort_level=40,
        amenities=["campfire"],
        dangers=["random_encounter", "weather"],
    )


# =============================================================================
# Scene Fixtures
# =============================================================================


@pytest.fixture
def scene_records() -> list[dict[str, Any]]:
    """A small adventure: tavern, road, ambush and their outcomes."""
    return [
        {
            "id": "tavern",
            "title": "The Sleeping Dragon",
            "text": "The tavern is warm and loud.",
            "choices": [
                {
                    "id": "leave",
                    "text": "Head out onto the road",
                    "consequences": [{"target_scene": "road"}],
                    "rewards": [{"type": "flag", "flag_name": "left_tavern", "flag_value": True}],
                },
                {
                    "id": "persuade_innkeeper",
                    "text": "Ask the innkeeper for a discount",
                    "skill_check": {
                        "ability": "charisma",
                        "skill": "persuasion",
                        "difficulty_class": 12,
                        "consequences": {
                            "success": [{"target_scene": "road", "effects": ["discount"]}],
                            "failure": [{"target_scene": "tavern_brawl"}],
                        },
                    },
                    "rewards": [{"type": "xp", "amount": 25, "description": "Haggling"}],
                },
                {
                    "id": "veterans_door",
                    "text": "Take the veterans' back door",
                    "requirements": [{"type": "level", "value": 3}],
                    "consequences": [{"target_scene": "road"}],
                },
                {
                    "id": "dead_end",
                    "text": "Stare at the wall",
                    "consequences": [],
                },
                {
                    "id": "nowhere",
                    "text": "Walk into the fog",
                    "consequences": [{"type": "scene_transition"}],
                },
            ],
        },
        {
            "id": "tavern_brawl",
            "title": "Brawl!",
            "text": "Chairs fly.",
            "choices": [
                {"id": "escape", "text": "Slip out", "consequences": [{"target_scene": "road"}]}
            ],
        },
        {
            "id": "road",
            "title": "The King's Road",
            "entry_rewards": [{"type": "gold", "amount": 5, "description": "Coins in the dust"}],
            "choices": [
                {
                    "id": "investigate",
                    "text": "Investigate the overturned cart",
                    "consequences": [{"target_scene": "ambush"}],
                    "rewards": [{"type": "item", "item_id": "rusty_key"}],
                }
            ],
        },
        {
            "id": "ambush",
            "type": "combat",
            "title": "Ambush!",
            "enemies": [{"template_id": "bandit", "count": 1}],
            "rewards": {"experience": 50, "gold": 10},
            "victory_scene": "victory",
            "defeat_scene": "defeat",
        },
        {"id": "victory", "title": "Victory", "text": "The road is clear."},
        {"id": "defeat", "title": "Defeat", "text": "Darkness."},
    ]


@pytest.fixture
def scene_repository(scene_records: list[dict[str, Any]]) -> Any:
    from dnd_rules.engine.scenes import SceneRepository

    return SceneRepository.from_records(scene_records)
