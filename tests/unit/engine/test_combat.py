"""Tests for the combat encounter engine.

Rolls are scripted: initiative consumes one d20 per participant (player
first), an attack consumes one d20 and, on a hit, the damage dice.
"""

from __future__ import annotations

from typing import Any

import pytest

from dnd_rules.core.config import CombatSettings
from dnd_rules.core.exceptions import CombatError, InvalidStateError, MissingActorError
from dnd_rules.engine.combat import CombatEncounter, EncounterSnapshot, InitiativeEntry
from dnd_rules.models import AbilityScores, CombatStats, Enemy
from dnd_rules.models.enums import CombatPhase, CombatResult, ParticipantKind


def start_encounter(
    fighter: Any,
    enemies: list[Any],
    scripted_rng: Any,
    scripted_dice: Any,
    *initiative: int,
) -> CombatEncounter:
    scripted_rng.push(*initiative)
    return CombatEncounter(fighter, enemies, dice=scripted_dice, settings=CombatSettings())


# =============================================================================
# Construction and initiative
# =============================================================================


class TestEncounterSetup:
    """Tests for building an encounter."""

    def test_initiative_order(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test participants are sorted by d20 + DEX, highest first."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 5, 18)

        order = encounter.turn_order

        assert [entry.name for entry in order] == ["Bandit", "Aria"]
        assert [entry.initiative for entry in order] == [19, 7]
        assert order[0].kind == ParticipantKind.ENEMY
        assert encounter.is_enemy_turn() is True

    def test_ties_keep_insertion_order(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test equal initiatives keep the player before the enemies."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 10, 11)

        assert [entry.initiative for entry in encounter.turn_order] == [12, 12]
        assert encounter.turn_order[0].name == "Aria"

    def test_initial_state(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test a new encounter starts at round 1 with initiative logged."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 15, 10)

        assert encounter.round_number == 1
        assert encounter.current_turn_index == 0
        assert encounter.phase == CombatPhase.INITIATIVE_ROLLED
        assert encounter.get_combat_result() == CombatResult.ONGOING
        assert encounter.combat_log == [
            "=== COMBAT INITIATED ===",
            "Aria: Initiative 17",
            "Bandit: Initiative 11",
        ]

    def test_requires_player(self, bandit: Any, scripted_dice: Any) -> None:
        """Test an encounter needs a player character."""
        with pytest.raises(MissingActorError):
            CombatEncounter(None, [bandit], dice=scripted_dice)

    def test_requires_enemies(self, fighter: Any, scripted_dice: Any) -> None:
        """Test an encounter needs at least one enemy."""
        with pytest.raises(CombatError):
            CombatEncounter(fighter, [], dice=scripted_dice)

    def test_rejects_duplicates(self, fighter: Any, bandit: Any, scripted_dice: Any) -> None:
        """Test the same enemy cannot appear twice."""
        with pytest.raises(CombatError):
            CombatEncounter(fighter, [bandit, bandit], dice=scripted_dice)


# =============================================================================
# Attacks
# =============================================================================


class TestPerformAttack:
    """Tests for attack resolution."""

    def test_hit(self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any) -> None:
        """Test a hit deals weapon dice plus STR."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 15, 10)
        scripted_rng.push(15, 5)

        result = encounter.perform_attack(fighter, bandit)

        assert result.hits is True
        assert result.to_hit == 5
        assert result.attack_roll == 20
        assert result.damage == 8
        assert result.damage_rolls == (5,)
        assert bandit.current_hit_points == 3
        assert encounter.combat_log[-1] == "Aria attacks Bandit: 15+5=20 vs AC 12 - HIT for 8 damage"

    def test_roll_equal_to_ac_hits(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test meeting the AC is a hit."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 15, 10)
        scripted_rng.push(7, 1)

        result = encounter.perform_attack(fighter, bandit)

        assert result.attack_roll == 12
        assert result.hits is True

    def test_miss_rolls_no_damage(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test a miss deals nothing and rolls no damage dice."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 15, 10)
        scripted_rng.push(3)

        result = encounter.perform_attack(fighter, bandit)

        assert result.hits is False
        assert result.damage == 0
        assert bandit.current_hit_points == 11
        assert scripted_rng.remaining == 0
        assert encounter.combat_log[-1] == "Aria attacks Bandit: 3+5=8 vs AC 12 - MISS"

    def test_critical_doubles_dice(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test a natural 20 hit rolls the damage dice twice."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 15, 10)
        scripted_rng.push(20, 3, 4)

        result = encounter.perform_attack(fighter, bandit)

        assert result.is_critical is True
        assert result.natural_twenty is True
        assert result.damage_rolls == (3, 4)
        assert result.damage == 10
        assert encounter.combat_log[-1].endswith("HIT for 10 damage (CRITICAL!)")

    def test_natural_twenty_miss_is_not_critical(
        self, fighter: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test a natural 20 that misses is flagged but deals no critical damage."""
        golem = Enemy(
            name="Iron Golem",
            combat_stats=CombatStats(current_hit_points=50, max_hit_points=50, armor_class=30),
        )
        encounter = start_encounter(fighter, [golem], scripted_rng, scripted_dice, 15, 10)
        scripted_rng.push(20)

        result = encounter.perform_attack(fighter, golem)

        assert result.hits is False
        assert result.is_critical is False
        assert result.natural_twenty is True
        assert result.damage == 0

    def test_minimum_damage(self, fighter: Any, scripted_rng: Any, scripted_dice: Any) -> None:
        """Test a hit always deals at least the minimum damage."""
        rat = Enemy(
            name="Giant Rat",
            ability_scores=AbilityScores(strength=2),
            combat_stats=CombatStats(current_hit_points=7, max_hit_points=7, armor_class=12),
        )
        encounter = start_encounter(fighter, [rat], scripted_rng, scripted_dice, 15, 10)
        scripted_rng.push(19, 1)

        result = encounter.perform_attack(rat, fighter)

        assert result.hits is True
        assert result.damage == 1
        assert fighter.current_hit_points == 19

    def test_weapon_dice(
        self,
        sample_ability_scores: dict[str, int],
        bandit: Any,
        scripted_rng: Any,
        scripted_dice: Any,
    ) -> None:
        """Test an attacker's own weapon dice replace the default."""
        from dnd_rules.models import create_player_character

        hero = create_player_character(
            "Bryn", "barbarian", base_scores=sample_ability_scores, weapon_dice="2d6"
        )
        encounter = start_encounter(hero, [bandit], scripted_rng, scripted_dice, 15, 10)
        scripted_rng.push(15, 2, 3)

        result = encounter.perform_attack(hero, bandit)

        assert result.damage_rolls == (2, 3)
        assert result.damage == 8

    def test_defeat_logged(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test bringing a target to 0 logs its defeat and ends combat."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 15, 10)
        scripted_rng.push(15, 8)

        result = encounter.perform_attack(fighter, bandit)

        assert result.target_defeated is True
        assert bandit.is_alive is False
        assert encounter.combat_log[-1] == "Bandit is defeated!"
        assert encounter.is_combat_over() is True
        assert encounter.get_combat_result() == CombatResult.VICTORY
        assert encounter.phase == CombatPhase.COMBAT_OVER

    def test_attack_after_combat_over(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test no attacks are possible once combat is over."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 15, 10)
        scripted_rng.push(15, 8)
        encounter.perform_attack(fighter, bandit)

        with pytest.raises(InvalidStateError):
            encounter.perform_attack(fighter, bandit)
        with pytest.raises(InvalidStateError):
            encounter.next_turn()

    def test_target_outside_encounter(
        self, fighter: Any, bandit: Any, enemy_factory: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test attacking an entity outside the encounter is rejected."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 15, 10)
        stranger = enemy_factory.create("wolf")

        with pytest.raises(CombatError):
            encounter.perform_attack(fighter, stranger)

    def test_dead_attacker_cannot_act(
        self, fighter: Any, enemy_factory: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test a defeated participant cannot attack."""
        first, second = enemy_factory.create_many("bandit", 2)
        encounter = start_encounter(fighter, [first, second], scripted_rng, scripted_dice, 15, 10, 5)
        scripted_rng.push(15, 8)
        encounter.perform_attack(fighter, first)

        with pytest.raises(CombatError):
            encounter.perform_attack(first, fighter)
        with pytest.raises(CombatError):
            encounter.perform_attack(fighter, first)


# =============================================================================
# Turns
# =============================================================================


class TestTurns:
    """Tests for turn order and turn resolution."""

    def test_next_turn_wraps_and_counts_rounds(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test the cursor wraps and a new round starts."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 15, 10)

        assert encounter.next_turn() is bandit
        assert encounter.round_number == 1
        assert encounter.phase == CombatPhase.ENEMY_TURN
        assert encounter.next_turn() is fighter
        assert encounter.round_number == 2
        assert encounter.phase == CombatPhase.PLAYER_TURN
        assert encounter.combat_log[-2:] == ["--- Bandit's turn ---", "--- Aria's turn ---"]

    def test_resolve_turn_needs_target_on_player_turn(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test the player's turn needs a target."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 15, 10)

        with pytest.raises(MissingActorError):
            encounter.resolve_turn()

    def test_resolve_turn_advances(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test resolving the player's turn moves to the next participant."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 15, 10)
        scripted_rng.push(3)

        encounter.resolve_turn(bandit.uid)

        assert encounter.get_current_turn() is bandit

    def test_enemy_attacks_player(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test enemy turns attack the player and hand the turn back."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 5, 18)
        scripted_rng.push(14, 6)

        results = encounter.resolve_enemy_turns()

        assert len(results) == 1
        assert results[0].attack_roll == 16
        assert results[0].damage == 6
        assert fighter.current_hit_points == 14
        assert encounter.phase == CombatPhase.PLAYER_TURN

    def test_dead_enemies_are_skipped(
        self, fighter: Any, enemy_factory: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test a dead enemy's turn passes without an attack."""
        first, second = enemy_factory.create_many("bandit", 2)
        encounter = start_encounter(fighter, [first, second], scripted_rng, scripted_dice, 15, 10, 5)
        scripted_rng.push(15, 8)
        encounter.resolve_turn(first.uid)

        assert encounter.process_enemy_turn(first) is None

        scripted_rng.push(3)
        results = encounter.resolve_enemy_turns()

        assert [result.attacker for result in results] == ["Bandit 2"]
        assert encounter.get_current_turn() is fighter
        assert encounter.round_number == 2

    def test_player_defeat(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test the player dropping to 0 is a defeat."""
        fighter.apply_damage(15)
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 5, 18)
        scripted_rng.push(14, 6)

        encounter.resolve_enemy_turns()

        assert fighter.current_hit_points == 0
        assert encounter.get_combat_result() == CombatResult.DEFEAT
        assert encounter.get_current_turn() is bandit

    def test_everyone_down_is_defeat(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test player death is checked before enemy death."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 15, 10)
        fighter.apply_damage(20)
        bandit.apply_damage(11)

        assert encounter.get_combat_result() == CombatResult.DEFEAT


# =============================================================================
# Status and persistence
# =============================================================================


class TestStatusAndSnapshots:
    """Tests for summaries and snapshots."""

    def test_summary(self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any) -> None:
        """Test the status block reflects the encounter."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 15, 10)

        summary = encounter.summary()

        assert summary.current_turn == "Aria"
        assert summary.is_player_turn is True
        assert summary.result == CombatResult.ONGOING
        assert [c.name for c in summary.combatants] == ["Aria", "Bandit"]
        assert summary.combatants[0].is_current is True
        assert encounter.get_alive_enemies() == [bandit]

    def test_snapshot_restores_without_rolling(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test restoring keeps the turn order and consumes no dice."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 15, 10)
        scripted_rng.push(15, 5)
        encounter.resolve_turn(bandit.uid)

        data = encounter.to_snapshot().model_dump_json()
        restored = CombatEncounter.from_snapshot(
            EncounterSnapshot.model_validate_json(data), dice=scripted_dice
        )

        assert scripted_rng.remaining == 0
        assert restored.turn_order == encounter.turn_order
        assert restored.current_turn_index == 1
        assert restored.round_number == 1
        assert restored.phase == CombatPhase.ENEMY_TURN
        assert restored.combat_log == encounter.combat_log
        assert restored.get_participant(bandit.uid).current_hit_points == 3
        assert restored.get_participant(bandit.uid) is not bandit

    def test_snapshot_needs_player(self, bandit: Any, enemy_factory: Any, scripted_dice: Any) -> None:
        """Test a snapshot without a player cannot be restored."""
        other = enemy_factory.create("wolf")
        snapshot = EncounterSnapshot(
            participants=[bandit, other],
            turn_order=[
                InitiativeEntry(enemy.uid, ParticipantKind.ENEMY, enemy.name, 10)
                for enemy in (bandit, other)
            ],
            current_turn_index=0,
            round_number=1,
        )

        with pytest.raises(MissingActorError):
            CombatEncounter.from_snapshot(snapshot, dice=scripted_dice)

    def test_snapshot_rejects_unsorted_turn_order(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test a turn order that is not highest first is refused."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 15, 10)
        snapshot = encounter.to_snapshot()
        snapshot.turn_order = list(reversed(snapshot.turn_order))

        with pytest.raises(CombatError, match="not sorted"):
            CombatEncounter.from_snapshot(snapshot, dice=scripted_dice)

    def test_snapshot_rejects_wrong_kind(
        self, fighter: Any, bandit: Any, scripted_rng: Any, scripted_dice: Any
    ) -> None:
        """Test the player cannot be listed as an enemy in the turn order."""
        encounter = start_encounter(fighter, [bandit], scripted_rng, scripted_dice, 15, 10)
        snapshot = encounter.to_snapshot()
        snapshot.turn_order = [
            InitiativeEntry(entry.participant_uid, ParticipantKind.ENEMY, entry.name, entry.initiative)
            for entry in snapshot.turn_order
        ]

        with pytest.raises(CombatError, match="Aria as enemy"):
            CombatEncounter.from_snapshot(snapshot, dice=scripted_dice)
