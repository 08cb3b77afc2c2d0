"""Dice rolling for the rules core.

Every roll goes through one injected ``random.Random`` instance so that a
session can be replayed from a seed, and tests can script exact results
by passing a generator whose ``randint`` returns chosen values.

Dice notation (``"1d8"``, ``"2d6+1"``) is validated with the d20 library's
parser before it is broken into count, faces and modifier.

Example:
    >>> roller = DiceRoller(seed=7)
    >>> roll = roller.roll_d20(RollType.ADVANTAGE)
    >>> roll.natural == max(roll.rolls)
    True
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass

import d20

from dnd_rules.core.constants import D20_FACES, NATURAL_CRITICAL, NATURAL_FUMBLE, PERCENTILE_FACES
from dnd_rules.core.exceptions import DiceRollError
from dnd_rules.core.logging import get_logger
from dnd_rules.models.enums import RollType


logger = get_logger(__name__)

_SIMPLE_DICE = re.compile(r"(\d*)d(\d+)([+-]\d+)?")


@dataclass(frozen=True)
class D20Roll:
    """A single d20 roll, possibly with advantage or disadvantage.

    Attributes:
        natural: The kept die.
        rolls: Every die rolled (two with advantage or disadvantage).
        roll_type: How the die was rolled.
    """

    natural: int
    rolls: tuple[int, ...]
    roll_type: RollType

    @property
    def is_critical(self) -> bool:
        return self.natural == NATURAL_CRITICAL

    @property
    def is_fumble(self) -> bool:
        return self.natural == NATURAL_FUMBLE


@dataclass(frozen=True)
class DiceSpec:
    """Parsed ``NdM+K`` notation."""

    count: int
    faces: int
    modifier: int = 0

    @property
    def notation(self) -> str:
        suffix = f"{self.modifier:+d}" if self.modifier else ""
        return f"{self.count}d{self.faces}{suffix}"

    def doubled(self) -> DiceSpec:
        """Double the dice (not the modifier), as on a critical hit."""
        return DiceSpec(count=self.count * 2, faces=self.faces, modifier=self.modifier)


@dataclass(frozen=True)
class DiceTotal:
    """The result of rolling several identical dice."""

    count: int
    faces: int
    rolls: tuple[int, ...]
    modifier: int = 0

    @property
    def total(self) -> int:
        return sum(self.rolls) + self.modifier


def parse_dice_notation(expression: str) -> DiceSpec:
    """Parse simple dice notation.

    Args:
        expression: Notation such as '1d8', 'd6' or '2d6+3'.

    Returns:
        The parsed DiceSpec.

    Raises:
        DiceRollError: If the expression is empty, unparseable, or not a
            single group of identical dice with an optional modifier.
    """
    if not expression or not expression.strip():
        raise DiceRollError("Empty dice expression", expression=expression)

    normalized = expression.replace(" ", "").lower()
    try:
        d20.parse(normalized)
    except d20.RollError as exc:
        raise DiceRollError(f"Invalid dice expression: {exc}", expression=expression) from exc

    match = _SIMPLE_DICE.fullmatch(normalized)
    if match is None:
        raise DiceRollError(
            "Dice expression must have the form NdM or NdM+K",
            expression=expression,
        )
    count = int(match.group(1) or 1)
    faces = int(match.group(2))
    if count < 1 or faces < 1:
        raise DiceRollError("Dice count and faces must be positive", expression=expression)
    return DiceSpec(count=count, faces=faces, modifier=int(match.group(3) or 0))


class DiceRoller:
    """Dice rolling backed by an injectable random source.

    Example:
        >>> roller = DiceRoller(seed=42)
        >>> roller.roll_dice(2, 6).total in range(2, 13)
        True
    """

    def __init__(self, *, seed: int | None = None, rng: random.Random | None = None) -> None:
        """Initialize the dice roller.

        Args:
            seed: Seed for a new generator; ignored when ``rng`` is given.
            rng: Generator to draw every roll from.
        """
        self._seed = seed
        self._rng = rng if rng is not None else random.Random(seed)
        logger.info("DiceRoller initialized", seed=seed, injected=rng is not None)

    @property
    def seed(self) -> int | None:
        return self._seed

    def roll_die(self, faces: int) -> int:
        """Roll one die.

        Raises:
            DiceRollError: If faces is less than 1.
        """
        if faces < 1:
            raise DiceRollError(f"A die needs at least one face, got {faces}")
        return self._rng.randint(1, faces)

    def roll_d20(self, roll_type: RollType = RollType.NORMAL) -> D20Roll:
        """Roll a d20.

        Args:
            roll_type: Normal, advantage (keep higher of two) or
                disadvantage (keep lower of two).

        Returns:
            The D20Roll.
        """
        first = self.roll_die(D20_FACES)
        if roll_type == RollType.NORMAL:
            result = D20Roll(natural=first, rolls=(first,), roll_type=roll_type)
        else:
            second = self.roll_die(D20_FACES)
            keep = max if roll_type == RollType.ADVANTAGE else min
            result = D20Roll(natural=keep(first, second), rolls=(first, second), roll_type=roll_type)
        logger.debug("d20 rolled", natural=result.natural, rolls=result.rolls, roll_type=roll_type)
        return result

    def roll_dice(self, count: int, faces: int, modifier: int = 0) -> DiceTotal:
        """Roll ``count`` dice with ``faces`` faces and sum them.

        Raises:
            DiceRollError: If count is negative or faces is less than 1.
        """
        if count < 0:
            raise DiceRollError(f"Cannot roll a negative number of dice, got {count}")
        if faces < 1:
            raise DiceRollError(f"A die needs at least one face, got {faces}")
        rolls = tuple(self.roll_die(faces) for _ in range(count))
        result = DiceTotal(count=count, faces=faces, rolls=rolls, modifier=modifier)
        logger.debug("Dice rolled", count=count, faces=faces, rolls=rolls, total=result.total)
        return result

    def roll_spec(self, spec: DiceSpec, *, critical: bool = False) -> DiceTotal:
        """Roll parsed notation, doubling the dice on a critical."""
        if critical:
            spec = spec.doubled()
        return self.roll_dice(spec.count, spec.faces, spec.modifier)

    def roll(self, expression: str, *, critical: bool = False) -> DiceTotal:
        """Roll dice notation such as '2d6+3'."""
        return self.roll_spec(parse_dice_notation(expression), critical=critical)

    def roll_percentile(self) -> int:
        """Roll 1-100."""
        return self.roll_die(PERCENTILE_FACES)

    def roll_initiative(self, dexterity_modifier: int) -> int:
        """Roll initiative: a normal d20 plus the DEX modifier."""
        return self.roll_d20(RollType.NORMAL).natural + dexterity_modifier


__all__ = [
    "RollType",
    "D20Roll",
    "DiceSpec",
    "DiceTotal",
    "DiceRoller",
    "parse_dice_notation",
]
