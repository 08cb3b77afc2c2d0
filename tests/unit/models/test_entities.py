"""Tests for player characters, enemies and class resources."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import TypeAdapter, ValidationError

from dnd_rules.models import (
    Ability,
    AbilityBonuses,
    CharacterClass,
    CombatStats,
    Enemy,
    Participant,
    PlayerCharacter,
    Skill,
    SlotPool,
    create_player_character,
    derive_stats,
)


class TestCreatePlayerCharacter:
    """Tests for the player character factory."""

    def test_fighter_stats(self, fighter: Any) -> None:
        """Test hit points, AC and hit dice of the sample fighter."""
        assert fighter.combat_stats.max_hit_points == 20
        assert fighter.current_hit_points == 20
        assert fighter.combat_stats.armor_class == 16
        assert fighter.combat_stats.initiative == 2
        assert fighter.resources.hit_dice.die == 10
        assert fighter.resources.hit_dice.current == 2
        assert fighter.proficiency_bonus == 2

    def test_first_level_hit_points(self) -> None:
        """Test first level takes the full hit die plus CON."""
        wizard = create_player_character("Elm", "wizard", base_scores={"constitution": 14})

        assert wizard.combat_stats.max_hit_points == 8

    def test_hit_points_never_below_one_per_level(self) -> None:
        """Test a CON penalty cannot drop a level's hit points below 1."""
        frail = create_player_character("Pip", "wizard", level=3, base_scores={"constitution": 1})

        assert frail.combat_stats.max_hit_points == 3

    def test_fighter_resources(self, fighter: Any) -> None:
        """Test fighters start with second wind and, at level 2, action surge."""
        assert fighter.resources.second_wind_available is True
        assert fighter.resources.action_surge_available is True
        assert fighter.resources.spell_slots == {}

    def test_wizard_resources(self, wizard: Any) -> None:
        """Test a level 3 wizard's slots and arcane recovery."""
        assert wizard.resources.spell_slot_snapshot() == {1: 4, 2: 2}
        assert wizard.resources.arcane_recovery_available is True
        assert wizard.resources.hit_dice.die == 6

    def test_warlock_pact_slots(self) -> None:
        """Test warlocks get pact slots instead of spell slots."""
        warlock = create_player_character("Hex", CharacterClass.WARLOCK, level=5)

        assert warlock.resources.spell_slots == {}
        assert warlock.resources.pact_slots.maximum == 2
        assert warlock.resources.pact_slot_level == 3

    def test_bard_inspiration_minimum_one(self) -> None:
        """Test bardic inspiration is at least one use."""
        bard = create_player_character("Lute", "bard", base_scores={"charisma": 8})

        assert bard.resources.bardic_inspiration.maximum == 1

    def test_skills_and_expertise(self) -> None:
        """Test proficiencies and expertise are recorded."""
        rogue = create_player_character(
            "Vex",
            "rogue",
            base_scores={"dexterity": 16},
            skill_proficiencies=["acrobatics"],
            expertise=["stealth"],
        )

        assert rogue.skill_entry("acrobatics").proficient is True
        assert rogue.skill_entry(Skill.STEALTH).expertise is True
        assert rogue.skill_entry(Skill.STEALTH).proficient is True
        assert derive_stats(rogue).skill_bonuses[Skill.STEALTH] == 7

    def test_bonus_layers_feed_final_scores(self) -> None:
        """Test final scores include the bonus layers."""
        hero = create_player_character(
            "Bryn",
            "barbarian",
            base_scores={"strength": 15},
            bonuses=AbilityBonuses(racial={Ability.STR: 2}),
        )

        assert hero.ability_scores.strength == 17
        assert hero.ability_modifier(Ability.STR) == 3

    def test_item_bonus_changes_modifier_immediately(self, fighter: Any) -> None:
        """Test changing a bonus layer updates the derived modifier."""
        fighter.bonuses.item = {Ability.STR: 2}

        assert fighter.ability_modifier("strength") == 4

    def test_penalty_below_one_is_not_clamped(self, fighter: Any) -> None:
        """Test a heavy penalty drives the score below 1 without failing."""
        fighter.bonuses.temporary = {Ability.STR: -20}

        assert fighter.ability_scores.strength == -4
        assert fighter.ability_modifier(Ability.STR) == -7
        assert fighter.model_dump()["ability_scores"]["strength"] == -4


class TestDamageAndHealing:
    """Tests for hit point changes."""

    def test_damage_reduces_hit_points(self, fighter: Any) -> None:
        """Test damage is subtracted and reported."""
        lost = fighter.apply_damage(7)

        assert lost == 7
        assert fighter.current_hit_points == 13
        assert fighter.is_alive is True

    def test_damage_clamps_at_zero(self, fighter: Any) -> None:
        """Test overkill clamps hit points at zero and drops the entity."""
        lost = fighter.apply_damage(50)

        assert lost == 20
        assert fighter.current_hit_points == 0
        assert fighter.is_alive is False
        assert fighter.is_conscious is False
        assert fighter.can_act is False

    def test_temporary_hit_points_absorb_first(self, fighter: Any) -> None:
        """Test temporary hit points drain before real ones."""
        fighter.combat_stats.temporary_hit_points = 5

        lost = fighter.apply_damage(8)

        assert fighter.combat_stats.temporary_hit_points == 0
        assert lost == 3
        assert fighter.current_hit_points == 17

    def test_healing_capped_at_max(self, fighter: Any) -> None:
        """Test healing cannot exceed maximum hit points."""
        fighter.apply_damage(4)

        healed = fighter.apply_healing(10)

        assert healed == 4
        assert fighter.current_hit_points == 20

    def test_healing_revives(self, bandit: Any) -> None:
        """Test healing from zero restores the vital-status triple."""
        bandit.apply_damage(11)
        bandit.apply_healing(1)

        assert bandit.is_alive and bandit.is_conscious and bandit.can_act

    def test_negative_amounts_rejected(self, fighter: Any) -> None:
        """Test negative damage and healing are errors."""
        with pytest.raises(ValueError):
            fighter.apply_damage(-1)
        with pytest.raises(ValueError):
            fighter.apply_healing(-1)


class TestValidation:
    """Tests for model invariants."""

    def test_current_above_max_rejected(self) -> None:
        """Test current hit points cannot exceed the maximum."""
        with pytest.raises(ValidationError):
            CombatStats(current_hit_points=12, max_hit_points=10, armor_class=10)

    def test_slot_pool_bounds(self) -> None:
        """Test a pool cannot hold more than its maximum."""
        with pytest.raises(ValidationError):
            SlotPool(current=3, maximum=2)

    def test_slot_pool_expend_and_restore(self) -> None:
        """Test spending and restoring a pool."""
        pool = SlotPool(current=2, maximum=3)

        assert pool.expend(3) is False
        assert pool.expend() is True
        assert pool.expended == 2
        assert pool.restore() == 2
        assert pool.current == 3

    def test_vital_status_synced_on_load(self, fighter: Any) -> None:
        """Test a record loaded at zero hit points is down."""
        data = fighter.model_dump()
        data["combat_stats"]["current_hit_points"] = 0
        data["is_alive"] = True

        loaded = PlayerCharacter.model_validate(data)

        assert loaded.is_alive is False


class TestParticipantVariant:
    """Tests for the player/enemy tagged variant."""

    def test_round_trip_by_kind(self, fighter: Any, bandit: Any) -> None:
        """Test dumped participants come back as the right variant."""
        adapter = TypeAdapter(list[Participant])

        restored = adapter.validate_python(adapter.dump_python([fighter, bandit]))

        assert isinstance(restored[0], PlayerCharacter)
        assert isinstance(restored[1], Enemy)
        assert restored[0].uid == fighter.uid
        assert restored[0].ability_scores == fighter.ability_scores

    def test_enemy_skill_bonus(self) -> None:
        """Test enemy stat block skill bonuses are used as-is."""
        scout = Enemy(
            name="Scout",
            combat_stats=CombatStats(current_hit_points=16, max_hit_points=16, armor_class=13),
            skill_bonuses={Skill.PERCEPTION: 5},
        )

        assert derive_stats(scout).skill_bonuses[Skill.PERCEPTION] == 5
        assert derive_stats(scout).passive_perception == 15
