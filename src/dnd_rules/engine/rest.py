"""Short and long rests.

Both procedures roll for interruptions first, then either fail without
touching the character or apply their recovery in one step:

- A short rest spends hit dice to heal and refreshes per-short-rest class
  features. A catastrophic interruption voids it.
- A long rest restores hit points, spell slots, half the hit dice and the
  once-per-day features, clears short-lived conditions and removes one
  level of exhaustion. It is rolled in several watches; more than the
  tolerated number of major or catastrophic interruptions voids the whole
  rest.

A void rest is reported as ``RestResult(success=False)`` with the
interruptions attached. It is an expected outcome and is never raised.

The caller must make sure the character is not in an active combat while
resting.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from dnd_rules.core.config import RestSettings, get_settings
from dnd_rules.core.constants import (
    CATASTROPHIC_SEVERITY_THRESHOLD,
    MAJOR_SEVERITY_THRESHOLD,
    SEVERITY_DANGER_SHIFT,
    SEVERITY_PROTECTION_REDUCTION,
    SEVERITY_SAFETY_DIVISOR,
)
from dnd_rules.core.exceptions import MissingActorError, RestRequestError
from dnd_rules.core.logging import get_logger
from dnd_rules.data.classes import PREPARED_CASTERS, spellcasting_ability_for
from dnd_rules.engine.dice import DiceRoller
from dnd_rules.models.entities import PlayerCharacter, SlotPool
from dnd_rules.models.enums import (
    Ability,
    CharacterClass,
    Condition,
    InterruptionSeverity,
    InterruptionType,
    RestAmenity,
    RestDanger,
    RestQuality,
)
from dnd_rules.models.rest import (
    ArcaneRecovery,
    ClassAbilityRecovery,
    HitDiceRoll,
    Interruption,
    LongRestRecord,
    LongRestRecovery,
    RestChoice,
    RestConsequence,
    RestFinalState,
    RestLocation,
    RestResult,
    ShortRestRecord,
    SpellPreparation,
)


logger = get_logger(__name__)


LONG_REST_CONDITIONS: frozenset[Condition] = frozenset({Condition.CHARMED, Condition.FRIGHTENED})
"""Short-lived conditions a long rest clears."""

SEVERITY_PENALTIES: dict[InterruptionSeverity, int] = {
    InterruptionSeverity.MINOR: 10,
    InterruptionSeverity.MAJOR: 25,
    InterruptionSeverity.CATASTROPHIC: 50,
}
"""Rest quality lost per interruption, by severity."""

_QUALITY_THRESHOLDS: tuple[tuple[int, RestQuality], ...] = (
    (80, RestQuality.EXCELLENT),
    (60, RestQuality.GOOD),
    (30, RestQuality.NORMAL),
)

# Most pressing danger first
_DANGER_INTERRUPTIONS: tuple[tuple[RestDanger, InterruptionType], ...] = (
    (RestDanger.RANDOM_ENCOUNTER, InterruptionType.COMBAT),
    (RestDanger.THEFT, InterruptionType.THEFT),
    (RestDanger.MAGICAL_DISTURBANCE, InterruptionType.MAGICAL),
    (RestDanger.WEATHER, InterruptionType.ENVIRONMENTAL),
    (RestDanger.DISEASE, InterruptionType.ENVIRONMENTAL),
    (RestDanger.EXHAUSTION, InterruptionType.NIGHTMARE),
)

_INTERRUPTION_TEXT: dict[InterruptionType, tuple[str, str]] = {
    InterruptionType.COMBAT: ("Ambush", "Something hostile stumbles onto the camp."),
    InterruptionType.THEFT: ("Light fingers", "Someone is creeping through your belongings."),
    InterruptionType.MAGICAL: ("Arcane surge", "The air crackles with stray magic."),
    InterruptionType.ENVIRONMENTAL: ("Strange noises", "You hear odd sounds in the night..."),
    InterruptionType.NIGHTMARE: ("Restless sleep", "Dark dreams keep dragging you awake."),
}

_ARCANE_RECOVERY_MAX_SLOT = 5

_PROTECTIVE_AMENITIES = frozenset({RestAmenity.GUARD, RestAmenity.MAGICAL_WARD})


# =============================================================================
# Pure helpers
# =============================================================================


def interruption_severity(location: RestLocation, roll: int) -> InterruptionSeverity:
    """Grade an interruption from a d100 roll and the location.

    Every danger makes things worse; safety and a guard or ward make
    them better.
    """
    score = roll + SEVERITY_DANGER_SHIFT * len(location.dangers)
    score -= location.safety_level // SEVERITY_SAFETY_DIVISOR
    if _PROTECTIVE_AMENITIES.intersection(location.amenities):
        score -= SEVERITY_PROTECTION_REDUCTION
    if score > CATASTROPHIC_SEVERITY_THRESHOLD:
        return InterruptionSeverity.CATASTROPHIC
    if score > MAJOR_SEVERITY_THRESHOLD:
        return InterruptionSeverity.MAJOR
    return InterruptionSeverity.MINOR


def interruption_type(location: RestLocation) -> InterruptionType:
    """Pick the interruption type from the location's worst danger."""
    for danger, kind in _DANGER_INTERRUPTIONS:
        if danger in location.dangers:
            return kind
    return InterruptionType.ENVIRONMENTAL


def rest_quality(location: RestLocation, interruptions: Sequence[Interruption]) -> RestQuality:
    """Comfort minus a penalty per interruption, bucketed.

    Quality only annotates the record; it does not scale recovery.
    """
    score = location.comfort_level - sum(SEVERITY_PENALTIES[i.severity] for i in interruptions)
    for threshold, quality in _QUALITY_THRESHOLDS:
        if score >= threshold:
            return quality
    return RestQuality.POOR


def final_state(character: PlayerCharacter) -> RestFinalState:
    """Snapshot the resources a rest can change."""
    resources = character.resources
    return RestFinalState(
        hit_points=character.current_hit_points,
        hit_dice_remaining=resources.hit_dice.current,
        spell_slots=resources.spell_slot_snapshot(),
        pact_slots=resources.pact_slots.current,
        conditions=list(character.combat_stats.conditions),
        exhaustion_level=resources.exhaustion_level,
    )


# =============================================================================
# Rest System
# =============================================================================


class RestSystem:
    """Resolves short and long rests for a player character.

    Example:
        >>> rests = RestSystem(DiceRoller(seed=11))
        >>> result = rests.long_rest(hero, inn)
        >>> result.success
        True
    """

    def __init__(self, dice: DiceRoller, settings: RestSettings | None = None) -> None:
        self._dice = dice
        self._settings = settings or get_settings().rest

    # -------------------------------------------------------------------------
    # Interruptions
    # -------------------------------------------------------------------------

    def roll_interruption(
        self,
        location: RestLocation,
        *,
        window_start: int,
        window_minutes: int,
        rest_minutes: int,
    ) -> Interruption | None:
        """Check one watch of a rest for an interruption.

        Rolls a d100 against the location's interruption chance, then
        (if interrupted) a d100 for severity and the minute it happens.

        Args:
            location: Where the rest takes place.
            window_start: Minute the watch starts.
            window_minutes: Length of the watch.
            rest_minutes: Length of the whole rest.

        Returns:
            The Interruption, or None if the watch passed quietly.
        """
        chance = self._settings.interruption_chances[location.type.value]
        if self._dice.roll_percentile() > chance:
            return None

        severity = interruption_severity(location, self._dice.roll_percentile())
        minute = window_start + self._dice.roll_dice(1, window_minutes).total
        kind = interruption_type(location)
        title, description = _INTERRUPTION_TEXT[kind]

        consequences = []
        if severity == InterruptionSeverity.MAJOR:
            consequences.append(
                RestConsequence(
                    type="time_loss",
                    value=window_minutes // 2,
                    description="The disturbance costs you part of your rest",
                    avoidable_by=["investigate"],
                )
            )
        elif severity == InterruptionSeverity.CATASTROPHIC:
            consequences.append(
                RestConsequence(
                    type="time_loss",
                    value=max(0, rest_minutes - minute),
                    description="There is no more rest to be had",
                )
            )

        interruption = Interruption(
            type=kind,
            severity=severity,
            time_occurred=minute,
            title=title,
            description=description,
            consequences=consequences,
            choices=[
                RestChoice(id="investigate", text="Investigate"),
                RestChoice(id="ignore", text="Ignore it and keep resting"),
            ],
        )
        logger.info(
            "Rest interrupted",
            location=location.name,
            type=kind,
            severity=severity,
            minute=minute,
        )
        return interruption

    # -------------------------------------------------------------------------
    # Short rest
    # -------------------------------------------------------------------------

    def short_rest(
        self,
        character: PlayerCharacter | None,
        location: RestLocation,
        hit_dice: Sequence[int] = (),
    ) -> RestResult:
        """Take a short rest.

        Args:
            character: The resting character.
            location: Where the rest takes place.
            hit_dice: Hit dice to spend, as die faces (e.g. ``[10, 10]``).

        Returns:
            RestResult; ``success`` is False after a catastrophic
            interruption, in which case nothing was recovered.

        Raises:
            MissingActorError: If no character is supplied.
            RestRequestError: If a requested die is not the character's
                hit die or more dice are requested than remain.
        """
        if character is None:
            raise MissingActorError("No character to rest", operation="short_rest")
        self._check_hit_dice_request(character, hit_dice)

        duration = self._settings.short_rest_minutes
        record = ShortRestRecord(duration=duration, location=location)
        record.interruption = self.roll_interruption(
            location, window_start=0, window_minutes=duration, rest_minutes=duration
        )
        if record.interruption and record.interruption.severity == InterruptionSeverity.CATASTROPHIC:
            logger.warning("Short rest failed", character=character.name, location=location.name)
            return RestResult(success=False, rest=record, final_state=final_state(character))

        rolls = self._roll_hit_dice(character, len(hit_dice))
        record.hit_dice_used = rolls
        record.hit_points_restored = character.apply_healing(sum(r.total_healing for r in rolls))
        character.resources.hit_dice.current -= len(rolls)
        record.class_abilities_recovered = [self._recover_short_rest_abilities(character)]
        record.completed = True

        logger.info(
            "Short rest completed",
            character=character.name,
            hit_dice_used=len(rolls),
            healed=record.hit_points_restored,
        )
        return RestResult(success=True, rest=record, final_state=final_state(character))

    def _check_hit_dice_request(self, character: PlayerCharacter, hit_dice: Sequence[int]) -> None:
        pool = character.resources.hit_dice
        wrong = [faces for faces in hit_dice if faces != pool.die]
        if wrong:
            raise RestRequestError(
                f"{character.name} can only spend d{pool.die} hit dice",
                field_name="hit_dice",
                invalid_value=wrong,
            )
        if len(hit_dice) > pool.current:
            raise RestRequestError(
                f"{character.name} has only {pool.current} hit dice left",
                field_name="hit_dice",
                invalid_value=len(hit_dice),
            )

    def _roll_hit_dice(self, character: PlayerCharacter, count: int) -> list[HitDiceRoll]:
        die = character.resources.hit_dice.die
        con_mod = character.ability_modifier(Ability.CON)
        rolls = []
        for _ in range(count):
            rolled = self._dice.roll_die(die)
            rolls.append(
                HitDiceRoll(
                    hit_die=die,
                    rolled=rolled,
                    constitution_bonus=con_mod,
                    total_healing=max(1, rolled + con_mod),
                )
            )
        return rolls

    def _recover_short_rest_abilities(self, character: PlayerCharacter) -> ClassAbilityRecovery:
        resources = character.resources
        character_class = character.character_class
        recovery = ClassAbilityRecovery(character_class=character_class)
        if character_class == CharacterClass.FIGHTER:
            resources.second_wind_available = True
            recovery = recovery.model_copy(update={"second_wind": True})
        elif character_class == CharacterClass.WIZARD and resources.arcane_recovery_available:
            recovery = recovery.model_copy(
                update={"arcane_recovery": self._arcane_recovery(character)}
            )
        elif character_class == CharacterClass.WARLOCK:
            resources.pact_slots.restore()
            recovery = recovery.model_copy(update={"pact_magic_slots": resources.pact_slots.current})
        elif character_class == CharacterClass.MONK:
            resources.ki_points = SlotPool(current=character.level, maximum=character.level)
            recovery = recovery.model_copy(update={"ki_points": character.level})
        elif character_class == CharacterClass.BARD:
            uses = max(1, character.ability_modifier(Ability.CHA))
            resources.bardic_inspiration = SlotPool(current=uses, maximum=uses)
            recovery = recovery.model_copy(update={"bardic_inspiration": uses})
        return recovery

    def _arcane_recovery(self, character: PlayerCharacter) -> ArcaneRecovery:
        """Regain expended slots worth up to half the wizard level, lowest first.

        The feature is spent only if at least one slot came back.
        """
        allowance = math.ceil(character.level / 2)
        budget = allowance
        slots: dict[int, int] = {}
        for spell_level in range(1, _ARCANE_RECOVERY_MAX_SLOT + 1):
            pool = character.resources.spell_slots.get(spell_level)
            while pool is not None and pool.expended and budget >= spell_level:
                pool.restore(1)
                budget -= spell_level
                slots[spell_level] = slots.get(spell_level, 0) + 1
        if slots:
            character.resources.arcane_recovery_available = False
        return ArcaneRecovery(slots_recovered=slots, total_levels=allowance)

    # -------------------------------------------------------------------------
    # Long rest
    # -------------------------------------------------------------------------

    def long_rest(
        self,
        character: PlayerCharacter | None,
        location: RestLocation,
        spells_to_prepare: Sequence[str] | None = None,
        *,
        available_spells: Sequence[str] | None = None,
    ) -> RestResult:
        """Take a long rest.

        Args:
            character: The resting character.
            location: Where the rest takes place.
            spells_to_prepare: Spells to prepare for the day. Ignored for
                classes that do not prepare spells.
            available_spells: Spells the character may choose from. When
                omitted any spell name is accepted.

        Returns:
            RestResult; ``success`` is False when too many disruptive
            interruptions occurred, in which case nothing changed.

        Raises:
            MissingActorError: If no character is supplied.
        """
        if character is None:
            raise MissingActorError("No character to rest", operation="long_rest")

        settings = self._settings
        duration = settings.long_rest_minutes
        window = duration // settings.long_rest_interruption_checks
        interruptions = []
        for watch in range(settings.long_rest_interruption_checks):
            interruption = self.roll_interruption(
                location,
                window_start=watch * window,
                window_minutes=window,
                rest_minutes=duration,
            )
            if interruption is not None:
                interruptions.append(interruption)

        record = LongRestRecord(
            duration=duration,
            location=location,
            interruptions=interruptions,
            quality=rest_quality(location, interruptions),
        )
        disruptive = sum(1 for i in interruptions if i.is_disruptive)
        if disruptive > settings.max_disruptive_interruptions:
            logger.warning(
                "Long rest failed",
                character=character.name,
                location=location.name,
                disruptive_interruptions=disruptive,
            )
            return RestResult(success=False, rest=record, final_state=final_state(character))

        record.recovery = self._apply_long_rest_recovery(character)
        if spells_to_prepare is not None and character.character_class in PREPARED_CASTERS:
            preparation = self.prepare_spells(character, spells_to_prepare, available_spells)
            if preparation.is_valid:
                character.prepared_spells = list(preparation.prepared_spells)
            record.spell_preparation = preparation
        record.completed = True

        logger.info(
            "Long rest completed",
            character=character.name,
            quality=record.quality,
            interruptions=len(interruptions),
        )
        return RestResult(success=True, rest=record, final_state=final_state(character))

    def _apply_long_rest_recovery(self, character: PlayerCharacter) -> LongRestRecovery:
        resources = character.resources
        healed = character.apply_healing(
            character.combat_stats.max_hit_points - character.current_hit_points
        )

        slots_restored = {}
        for spell_level, pool in sorted(resources.spell_slots.items()):
            restored = pool.restore()
            if restored:
                slots_restored[spell_level] = restored
        pact_restored = resources.pact_slots.restore()

        pool = resources.hit_dice
        dice_restored = min(
            math.ceil(pool.total * self._settings.hit_dice_recovery_rate),
            pool.total - pool.current,
        )
        pool.current += dice_restored

        daily = []
        if character.character_class == CharacterClass.WIZARD:
            resources.arcane_recovery_available = True
            daily.append("arcane_recovery")
        elif character.character_class == CharacterClass.FIGHTER and character.level >= 2:
            resources.action_surge_available = True
            daily.append("action_surge")
        elif character.character_class == CharacterClass.BARBARIAN:
            resources.rage_uses.restore()
            daily.append("rage_uses")

        conditions = character.combat_stats.conditions
        removed = [c for c in conditions if c in LONG_REST_CONDITIONS]
        if removed:
            character.combat_stats.conditions = [c for c in conditions if c not in LONG_REST_CONDITIONS]

        exhaustion_reduced = resources.exhaustion_level > 0
        if exhaustion_reduced:
            resources.exhaustion_level -= 1

        return LongRestRecovery(
            hit_points_restored=healed,
            hit_dice_restored=dice_restored,
            spell_slots_restored=slots_restored,
            pact_slots_restored=pact_restored,
            daily_abilities_reset=daily,
            conditions_removed=removed,
            exhaustion_reduced=exhaustion_reduced,
        )

    def prepare_spells(
        self,
        character: PlayerCharacter,
        spells: Sequence[str],
        available_spells: Sequence[str] | None = None,
    ) -> SpellPreparation:
        """Validate a day's spell preparation.

        The limit is the character's level plus their casting modifier,
        at least one.
        """
        ability = spellcasting_ability_for(character.character_class)
        casting_mod = character.ability_modifier(ability) if ability is not None else 0
        max_prepared = max(1, character.level + casting_mod)

        errors = []
        if len(spells) > max_prepared:
            errors.append(f"Too many spells prepared ({len(spells)}/{max_prepared})")
        if len(set(spells)) != len(spells):
            errors.append("A spell is prepared more than once")
        if available_spells is not None:
            unknown = [spell for spell in spells if spell not in available_spells]
            if unknown:
                errors.append(f"Not available to prepare: {', '.join(unknown)}")

        return SpellPreparation(
            character_uid=character.uid,
            character_class=character.character_class,
            available_spells=list(available_spells or []),
            prepared_spells=list(spells),
            max_prepared=max_prepared,
            is_valid=not errors,
            errors=errors,
        )


__all__ = [
    "LONG_REST_CONDITIONS",
    "SEVERITY_PENALTIES",
    "interruption_severity",
    "interruption_type",
    "rest_quality",
    "final_state",
    "RestSystem",
]
