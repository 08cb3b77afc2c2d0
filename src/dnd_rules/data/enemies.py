"""Enemy stat block templates.

Templates are plain records; the enemy factory validates them into
Enemy models and assigns each instance a fresh identifier.
"""

from __future__ import annotations

from typing import Any


def _combat_stats(
    *,
    max_hit_points: int,
    armor_class: int,
    initiative: int,
    speed: int = 30,
    damage_immunities: list[str] | None = None,
    condition_immunities: list[str] | None = None,
) -> dict[str, Any]:
    return {
        "current_hit_points": max_hit_points,
        "max_hit_points": max_hit_points,
        "temporary_hit_points": 0,
        "armor_class": armor_class,
        "initiative": initiative,
        "speed": speed,
        "conditions": [],
        "damage_resistances": [],
        "damage_immunities": damage_immunities or [],
        "condition_immunities": condition_immunities or [],
    }


ENEMY_TEMPLATES: dict[str, dict[str, Any]] = {
    # Humanoids
    "bandit_leader": {
        "template_id": "bandit_leader",
        "name": "Chef Bandit",
        "size": "medium",
        "creature_type": "humanoid",
        "ability_scores": {
            "strength": 14,
            "dexterity": 14,
            "constitution": 12,
            "intelligence": 10,
            "wisdom": 10,
            "charisma": 12,
        },
        "combat_stats": _combat_stats(max_hit_points=22, armor_class=14, initiative=2),
    },
    "bandit": {
        "template_id": "bandit",
        "name": "Bandit",
        "size": "medium",
        "creature_type": "humanoid",
        "ability_scores": {
            "strength": 11,
            "dexterity": 12,
            "constitution": 12,
            "intelligence": 10,
            "wisdom": 10,
            "charisma": 10,
        },
        "combat_stats": _combat_stats(max_hit_points=11, armor_class=12, initiative=1),
    },
    # Beasts
    "wolf": {
        "template_id": "wolf",
        "name": "Loup",
        "size": "medium",
        "creature_type": "beast",
        "ability_scores": {
            "strength": 12,
            "dexterity": 15,
            "constitution": 12,
            "intelligence": 3,
            "wisdom": 12,
            "charisma": 6,
        },
        "combat_stats": _combat_stats(
            max_hit_points=11, armor_class=13, initiative=2, speed=40
        ),
    },
    # Undead
    "skeleton": {
        "template_id": "skeleton",
        "name": "Squelette",
        "size": "medium",
        "creature_type": "undead",
        "ability_scores": {
            "strength": 10,
            "dexterity": 14,
            "constitution": 15,
            "intelligence": 6,
            "wisdom": 8,
            "charisma": 5,
        },
        "combat_stats": _combat_stats(
            max_hit_points=13,
            armor_class=13,
            initiative=2,
            damage_immunities=["poison"],
            condition_immunities=["poisoned"],
        ),
    },
}
"""Enemy templates keyed by template id."""


__all__ = ["ENEMY_TEMPLATES"]
