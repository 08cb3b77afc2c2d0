"""Combat encounter engine.

An encounter is built from one player character and a roster of enemies.
Initiative is rolled once at construction (d20 + DEX modifier) and the
roster is sorted highest first. Equal initiatives keep insertion order
(player, then enemies in the order given), and the order never changes
for the life of the encounter.

The encounter exclusively owns its participants' hit points while it is
active. Callers drive it one step at a time, either through the low-level
operations (``perform_attack``, ``next_turn``) or through ``resolve_turn``
and ``resolve_enemy_turns``.

Besides structured logging the encounter keeps a human-readable combat
log, one line per event, which is the canonical audit trail of a fight.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from dnd_rules.core.config import CombatSettings, get_settings
from dnd_rules.core.exceptions import CombatError, InvalidStateError, MissingActorError
from dnd_rules.core.logging import get_logger
from dnd_rules.engine.dice import DiceRoller, parse_dice_notation
from dnd_rules.models.entities import Enemy, Entity, Participant, PlayerCharacter
from dnd_rules.models.enums import Ability, CombatPhase, CombatResult, ParticipantKind, RollType


logger = get_logger(__name__)


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class InitiativeEntry:
    """A participant's place in the turn order.

    Attributes:
        participant_uid: Identifier of the participant.
        kind: Player or enemy.
        name: Display name.
        initiative: Rolled initiative (d20 + DEX modifier).
    """

    participant_uid: UUID
    kind: ParticipantKind
    name: str
    initiative: int


@dataclass(frozen=True)
class AttackResult:
    """Outcome of a single attack.

    Attributes:
        attacker: Attacker name.
        target: Target name.
        natural: The d20 as rolled.
        to_hit: Bonus added to the d20 (STR modifier + proficiency).
        attack_roll: natural + to_hit.
        target_armor_class: AC the roll was compared against.
        hits: Whether the attack hit.
        damage: Damage dealt (0 on a miss).
        damage_rolls: Damage dice as rolled.
        natural_twenty: The d20 came up 20, hit or miss.
        is_critical: Natural 20 on a hit; the damage dice were doubled.
        target_defeated: The attack brought the target to 0 hit points.
    """

    attacker: str
    target: str
    natural: int
    to_hit: int
    attack_roll: int
    target_armor_class: int
    hits: bool
    damage: int
    damage_rolls: tuple[int, ...]
    natural_twenty: bool
    is_critical: bool
    target_defeated: bool


class CombatantStatus(BaseModel):
    """One row of the encounter status block."""

    model_config = ConfigDict(frozen=True)

    uid: UUID
    name: str
    kind: ParticipantKind
    current_hit_points: int
    max_hit_points: int
    is_alive: bool
    is_current: bool


class EncounterSummary(BaseModel):
    """Read-only view of an encounter for a presentation layer."""

    model_config = ConfigDict(frozen=True)

    combatants: list[CombatantStatus]
    current_turn: str
    turn_index: int
    round_number: int
    phase: CombatPhase
    is_player_turn: bool
    combat_over: bool
    result: CombatResult
    log: list[str]


class EncounterSnapshot(BaseModel):
    """Plain record of an encounter's full state.

    Participants are stored in insertion order, player first.
    """

    participants: list[Participant] = Field(min_length=2)
    turn_order: list[InitiativeEntry]
    current_turn_index: int = Field(ge=0)
    round_number: int = Field(ge=1)
    started: bool = False
    combat_log: list[str] = Field(default_factory=list)


# =============================================================================
# Encounter
# =============================================================================


class CombatEncounter:
    """A turn-based fight between the player and a group of enemies.

    Example:
        >>> encounter = CombatEncounter(hero, [bandit], dice=DiceRoller(seed=3))
        >>> encounter.phase
        <CombatPhase.INITIATIVE_ROLLED: 'initiative_rolled'>
    """

    def __init__(
        self,
        player: PlayerCharacter | None,
        enemies: Sequence[Enemy],
        *,
        dice: DiceRoller,
        settings: CombatSettings | None = None,
        initiative: Sequence[InitiativeEntry] | None = None,
    ) -> None:
        """Build the encounter and roll initiative.

        Args:
            player: The player character.
            enemies: Enemies in the encounter.
            dice: Source of every roll.
            settings: Combat settings; defaults to the global settings.
            initiative: Previously rolled turn order. When given no
                initiative is rolled and nothing is logged.

        Raises:
            MissingActorError: If no player is supplied.
            CombatError: If there are no enemies, a participant appears
                twice, or a supplied turn order does not match the roster,
                is not sorted by initiative or gives a participant the
                wrong kind.
        """
        if player is None:
            raise MissingActorError("Combat requires a player character", operation="combat")
        if not enemies:
            raise CombatError("Combat requires at least one enemy")

        self._dice = dice
        self._settings = settings or get_settings().combat
        self._player = player
        self._enemies = list(enemies)
        self._participants: dict[UUID, PlayerCharacter | Enemy] = {}
        for participant in (player, *self._enemies):
            if participant.uid in self._participants:
                raise CombatError(
                    f"{participant.name} appears more than once in the encounter",
                    combatant_id=str(participant.uid),
                )
            self._participants[participant.uid] = participant

        self._current_index = 0
        self._round = 1
        self._started = False
        self._log: list[str] = []

        if initiative is None:
            self._turn_order = self._roll_initiative()
        else:
            self._turn_order = self._check_turn_order(initiative)

    def _roll_initiative(self) -> list[InitiativeEntry]:
        entries = [
            InitiativeEntry(
                participant_uid=participant.uid,
                kind=ParticipantKind(participant.kind),
                name=participant.name,
                initiative=self._dice.roll_initiative(participant.ability_modifier(Ability.DEX)),
            )
            for participant in self._participants.values()
        ]
        # sorted() is stable, so ties keep insertion order
        order = sorted(entries, key=lambda entry: entry.initiative, reverse=True)

        self._write_log("=== COMBAT INITIATED ===")
        for entry in order:
            self._write_log(f"{entry.name}: Initiative {entry.initiative}")
            logger.info("Initiative rolled", combatant=entry.name, initiative=entry.initiative)
        return order

    def _check_turn_order(self, initiative: Sequence[InitiativeEntry]) -> list[InitiativeEntry]:
        order = list(initiative)
        if sorted(str(entry.participant_uid) for entry in order) != sorted(
            str(uid) for uid in self._participants
        ):
            raise CombatError("Turn order does not match the encounter roster")
        for entry in order:
            participant = self._participants[entry.participant_uid]
            if ParticipantKind(entry.kind) != ParticipantKind(participant.kind):
                raise CombatError(
                    f"Turn order lists {participant.name} as {entry.kind}",
                    combatant_id=str(participant.uid),
                )
        for earlier, later in zip(order, order[1:]):
            if earlier.initiative < later.initiative:
                raise CombatError(
                    f"Turn order is not sorted: {earlier.name} ({earlier.initiative}) "
                    f"before {later.name} ({later.initiative})",
                    combatant_id=str(later.participant_uid),
                )
        return order

    # -------------------------------------------------------------------------
    # Turn order
    # -------------------------------------------------------------------------

    @property
    def turn_order(self) -> list[InitiativeEntry]:
        """Participants in initiative order, highest first."""
        return list(self._turn_order)

    @property
    def current_turn_index(self) -> int:
        return self._current_index

    @property
    def round_number(self) -> int:
        return self._round

    @property
    def phase(self) -> CombatPhase:
        """Current lifecycle phase of the encounter."""
        if self.is_combat_over():
            return CombatPhase.COMBAT_OVER
        if not self._started:
            return CombatPhase.INITIATIVE_ROLLED
        return CombatPhase.ENEMY_TURN if self.is_enemy_turn() else CombatPhase.PLAYER_TURN

    @property
    def combat_log(self) -> list[str]:
        """Copy of the human-readable combat log."""
        return list(self._log)

    def get_participant(self, uid: UUID) -> PlayerCharacter | Enemy:
        """Look up a participant by identifier.

        Raises:
            CombatError: If the identifier is not in this encounter.
        """
        try:
            return self._participants[uid]
        except KeyError:
            raise CombatError(
                "Participant is not part of this encounter",
                combatant_id=str(uid),
                round_number=self._round,
            ) from None

    def get_current_turn(self) -> PlayerCharacter | Enemy:
        """Get the participant whose turn it is."""
        return self._participants[self._turn_order[self._current_index].participant_uid]

    def is_enemy_turn(self) -> bool:
        return self._turn_order[self._current_index].kind == ParticipantKind.ENEMY

    def next_turn(self) -> PlayerCharacter | Enemy:
        """Advance the cursor to the next participant.

        The cursor wraps around the turn order, starting a new round. It
        does not check that the outgoing participant acted.

        Returns:
            The participant whose turn it now is.

        Raises:
            InvalidStateError: If the combat is over.
        """
        self._ensure_active("next_turn")
        self._started = True
        self._current_index = (self._current_index + 1) % len(self._turn_order)
        if self._current_index == 0:
            self._round += 1
            logger.info("New round started", round=self._round)

        current = self.get_current_turn()
        self._write_log(f"--- {current.name}'s turn ---")
        return current

    # -------------------------------------------------------------------------
    # Attacks
    # -------------------------------------------------------------------------

    def perform_attack(self, attacker: Entity, target: Entity) -> AttackResult:
        """Resolve a melee attack.

        The attack roll is d20 + STR modifier + the flat attack
        proficiency. It hits when the roll meets or beats the target's
        AC. Damage is the attacker's weapon dice plus STR modifier, with
        the dice doubled on a natural 20, and never less than the
        configured minimum.

        Args:
            attacker: Participant making the attack.
            target: Participant being attacked.

        Returns:
            The AttackResult.

        Raises:
            InvalidStateError: If the combat is over.
            CombatError: If either entity is not in this encounter, the
                attacker cannot act, or the target is already down.
        """
        self._ensure_active("perform_attack")
        attacker = self.get_participant(attacker.uid)
        target = self.get_participant(target.uid)
        if not attacker.can_act:
            raise CombatError(
                f"{attacker.name} cannot act",
                combatant_id=str(attacker.uid),
                round_number=self._round,
            )
        if not target.is_alive:
            raise CombatError(
                f"{target.name} is already defeated",
                combatant_id=str(target.uid),
                round_number=self._round,
            )
        self._started = True

        strength_mod = attacker.ability_modifier(Ability.STR)
        to_hit = strength_mod + self._settings.attack_proficiency_bonus
        roll = self._dice.roll_d20(RollType.NORMAL)
        attack_roll = roll.natural + to_hit
        armor_class = target.combat_stats.armor_class
        hits = attack_roll >= armor_class
        is_critical = hits and roll.is_critical

        damage = 0
        damage_rolls: tuple[int, ...] = ()
        defeated = False
        line = f"{attacker.name} attacks {target.name}: {roll.natural}{to_hit:+d}={attack_roll} vs AC {armor_class}"
        if hits:
            spec = parse_dice_notation(attacker.weapon_dice or self._settings.default_weapon_dice)
            rolled = self._dice.roll_spec(spec, critical=is_critical)
            damage_rolls = rolled.rolls
            damage = max(self._settings.minimum_damage, rolled.total + strength_mod)
            target.apply_damage(damage)
            defeated = not target.is_alive

            line += f" - HIT for {damage} damage"
            if is_critical:
                line += " (CRITICAL!)"
            self._write_log(line)
            if defeated:
                self._write_log(f"{target.name} is defeated!")
        else:
            self._write_log(f"{line} - MISS")

        logger.info(
            "Attack resolved",
            attacker=attacker.name,
            target=target.name,
            natural=roll.natural,
            attack_roll=attack_roll,
            armor_class=armor_class,
            hits=hits,
            damage=damage,
            critical=is_critical,
            target_hp=target.current_hit_points,
        )
        return AttackResult(
            attacker=attacker.name,
            target=target.name,
            natural=roll.natural,
            to_hit=to_hit,
            attack_roll=attack_roll,
            target_armor_class=armor_class,
            hits=hits,
            damage=damage,
            damage_rolls=damage_rolls,
            natural_twenty=roll.is_critical,
            is_critical=is_critical,
            target_defeated=defeated,
        )

    def process_enemy_turn(self, enemy: Enemy) -> AttackResult | None:
        """Run an enemy's turn: it always attacks the player.

        Returns:
            The AttackResult, or None if the enemy is dead.
        """
        enemy = self.get_participant(enemy.uid)  # type: ignore[assignment]
        if not enemy.is_alive:
            return None
        return self.perform_attack(enemy, self._player)

    def resolve_turn(self, target_uid: UUID | None = None) -> AttackResult | None:
        """Resolve the current participant's turn and advance.

        On the player's turn the player attacks ``target_uid``. On an
        enemy's turn the enemy acts automatically. The cursor moves on
        unless the combat ended during the turn.

        Args:
            target_uid: Enemy the player attacks; ignored on enemy turns.

        Returns:
            The AttackResult, or None if the acting enemy is dead.

        Raises:
            InvalidStateError: If the combat is over.
            MissingActorError: If it is the player's turn and no target
                was given.
        """
        self._ensure_active("resolve_turn")
        current = self.get_current_turn()
        if isinstance(current, Enemy):
            result = self.process_enemy_turn(current)
        else:
            if target_uid is None:
                raise MissingActorError("The player's attack needs a target", operation="resolve_turn")
            result = self.perform_attack(current, self.get_participant(target_uid))

        if not self.is_combat_over():
            self.next_turn()
        return result

    def resolve_enemy_turns(self) -> list[AttackResult]:
        """Resolve enemy turns until it is the player's turn or combat ends.

        Returns:
            Attacks made, in order. Turns of dead enemies are skipped.
        """
        self._ensure_active("resolve_enemy_turns")
        results = []
        while not self.is_combat_over() and self.is_enemy_turn():
            result = self.resolve_turn()
            if result is not None:
                results.append(result)
        return results

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def get_player_character(self) -> PlayerCharacter:
        return self._player

    def get_alive_enemies(self) -> list[Enemy]:
        return [enemy for enemy in self._enemies if enemy.is_alive]

    def is_combat_over(self) -> bool:
        """True when the player is down or every enemy is dead."""
        return self._player.current_hit_points <= 0 or not self.get_alive_enemies()

    def get_combat_result(self) -> CombatResult:
        """Map the encounter state to ongoing, victory or defeat.

        Player death is checked first, so a fight in which everyone
        falls is a defeat.
        """
        if not self.is_combat_over():
            return CombatResult.ONGOING
        if self._player.current_hit_points <= 0:
            return CombatResult.DEFEAT
        return CombatResult.VICTORY

    def summary(self) -> EncounterSummary:
        """Build a status block for display."""
        current = self.get_current_turn()
        return EncounterSummary(
            combatants=[
                CombatantStatus(
                    uid=participant.uid,
                    name=participant.name,
                    kind=ParticipantKind(participant.kind),
                    current_hit_points=participant.current_hit_points,
                    max_hit_points=participant.combat_stats.max_hit_points,
                    is_alive=participant.is_alive,
                    is_current=participant.uid == current.uid,
                )
                for participant in self._participants.values()
            ],
            current_turn=current.name,
            turn_index=self._current_index,
            round_number=self._round,
            phase=self.phase,
            is_player_turn=not self.is_enemy_turn(),
            combat_over=self.is_combat_over(),
            result=self.get_combat_result(),
            log=self.combat_log,
        )

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_snapshot(self) -> EncounterSnapshot:
        """Capture the encounter as a plain record."""
        return EncounterSnapshot(
            participants=[participant.model_copy(deep=True) for participant in self._participants.values()],
            turn_order=list(self._turn_order),
            current_turn_index=self._current_index,
            round_number=self._round,
            started=self._started,
            combat_log=list(self._log),
        )

    @classmethod
    def from_snapshot(
        cls,
        snapshot: EncounterSnapshot,
        *,
        dice: DiceRoller,
        settings: CombatSettings | None = None,
    ) -> CombatEncounter:
        """Rebuild an encounter without re-rolling initiative.

        Raises:
            MissingActorError: If the snapshot has no player.
            CombatError: If the snapshot is inconsistent.
        """
        players = [p for p in snapshot.participants if isinstance(p, PlayerCharacter)]
        enemies = [p for p in snapshot.participants if isinstance(p, Enemy)]
        if len(players) > 1:
            raise CombatError("Snapshot contains more than one player character")
        if snapshot.current_turn_index >= len(snapshot.turn_order):
            raise CombatError("Snapshot turn index is out of range")

        encounter = cls(
            players[0].model_copy(deep=True) if players else None,
            [enemy.model_copy(deep=True) for enemy in enemies],
            dice=dice,
            settings=settings,
            initiative=snapshot.turn_order,
        )
        encounter._current_index = snapshot.current_turn_index
        encounter._round = snapshot.round_number
        encounter._started = snapshot.started
        encounter._log = list(snapshot.combat_log)
        logger.info(
            "Encounter restored",
            round=encounter._round,
            turn_index=encounter._current_index,
        )
        return encounter

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _ensure_active(self, operation: str) -> None:
        if self.is_combat_over():
            raise InvalidStateError(
                f"Cannot {operation}: combat is over",
                current_state=CombatPhase.COMBAT_OVER.value,
                expected_states=[CombatPhase.PLAYER_TURN.value, CombatPhase.ENEMY_TURN.value],
            )

    def _write_log(self, message: str) -> None:
        self._log.append(message)
        logger.debug("Combat log", message=message)


__all__ = [
    "InitiativeEntry",
    "AttackResult",
    "CombatantStatus",
    "EncounterSummary",
    "EncounterSnapshot",
    "CombatEncounter",
]
