"""Skill check resolution.

A check rolls a d20, adds the actor's modifier for the requested ability,
and compares the total against the difficulty class. When a skill is
named the actor's skill-specific bonus is added, along with the
proficiency bonus if the actor is proficient in it.

A natural 20 or natural 1 is reported through the critical flags. By
default neither changes success, which stays purely ``total >= DC``.
"""

from __future__ import annotations

from dataclasses import dataclass

from dnd_rules.core.config import SkillCheckSettings, get_settings
from dnd_rules.core.exceptions import MissingActorError
from dnd_rules.core.logging import get_logger
from dnd_rules.engine.dice import DiceRoller
from dnd_rules.models.entities import Entity
from dnd_rules.models.enums import RollType
from dnd_rules.models.scenes import SkillCheck
from dnd_rules.models.stats import skill_bonus


logger = get_logger(__name__)


@dataclass(frozen=True)
class SkillCheckResult:
    """Outcome of a resolved skill check.

    Attributes:
        check: The request that was resolved.
        natural: The kept d20.
        rolls: Every d20 rolled.
        roll_type: How the d20 was rolled.
        total_modifier: Ability modifier plus skill bonuses.
        total: natural + total_modifier.
        success: Whether the check met the DC.
        critical_success: The kept d20 was a 20.
        critical_failure: The kept d20 was a 1.
        margin: total - DC (negative on failure).
    """

    check: SkillCheck
    natural: int
    rolls: tuple[int, ...]
    roll_type: RollType
    total_modifier: int
    total: int
    success: bool
    critical_success: bool
    critical_failure: bool
    margin: int

    def describe(self) -> str:
        """One-line summary for logs and narration."""
        label = (self.check.skill or self.check.ability).replace("_", " ").title()
        verdict = "SUCCESS" if self.success else "FAILURE"
        flags = ""
        if self.critical_success:
            flags = " (natural 20)"
        elif self.critical_failure:
            flags = " (natural 1)"
        return (
            f"{label} check: {self.natural}{self.total_modifier:+d}={self.total}"
            f" vs DC {self.check.difficulty_class} - {verdict}{flags}"
        )


def roll_type_for(check: SkillCheck) -> RollType:
    """Pick the roll type for a check. Advantage wins when both are set."""
    if check.advantage:
        return RollType.ADVANTAGE
    if check.disadvantage:
        return RollType.DISADVANTAGE
    return RollType.NORMAL


class SkillCheckResolver:
    """Resolves skill checks against an acting entity."""

    def __init__(self, dice: DiceRoller, settings: SkillCheckSettings | None = None) -> None:
        self._dice = dice
        self._settings = settings or get_settings().checks

    def total_modifier(self, check: SkillCheck, actor: Entity) -> int:
        """Compute the modifier the actor adds to a check."""
        modifier = actor.ability_modifier(check.ability)
        if check.skill is None:
            return modifier
        return skill_bonus(modifier, actor.skill_entry(check.skill), actor.proficiency_bonus)

    def resolve(self, check: SkillCheck, actor: Entity | None) -> SkillCheckResult:
        """Roll a skill check.

        Args:
            check: The check to resolve.
            actor: The entity making the check.

        Returns:
            The SkillCheckResult.

        Raises:
            MissingActorError: If no actor is supplied.
        """
        if actor is None:
            raise MissingActorError("No active character for skill check", operation="skill_check")

        modifier = self.total_modifier(check, actor)
        roll = self._dice.roll_d20(roll_type_for(check))
        total = roll.natural + modifier
        success = total >= check.difficulty_class
        if self._settings.natural_twenty_succeeds and roll.is_critical:
            success = True

        result = SkillCheckResult(
            check=check,
            natural=roll.natural,
            rolls=roll.rolls,
            roll_type=roll.roll_type,
            total_modifier=modifier,
            total=total,
            success=success,
            critical_success=roll.is_critical,
            critical_failure=roll.is_fumble,
            margin=total - check.difficulty_class,
        )
        logger.info(
            "Skill check resolved",
            actor=actor.name,
            ability=check.ability,
            skill=check.skill,
            dc=check.difficulty_class,
            natural=roll.natural,
            total=total,
            success=success,
        )
        return result


__all__ = [
    "SkillCheckResult",
    "SkillCheckResolver",
    "roll_type_for",
]
