"""Rules constants shared across the rules-resolution core.

House-rulable values live in the settings; the numbers here are fixed by
the core rules and by the shape of the data model.
"""

from __future__ import annotations

# =============================================================================
# Ability Scores and Levels
# =============================================================================

MIN_ABILITY_SCORE = 1
"""Minimum ability score (1 is barely functioning)."""

MAX_ABILITY_SCORE = 30
"""Maximum ability score representable by the data model."""

ABILITY_SCORE_BASELINE = 10
"""Score whose modifier is exactly zero."""

MIN_LEVEL = 1
"""Lowest character level."""

MAX_LEVEL = 20
"""Highest character level."""

BASE_ARMOR_CLASS = 10
"""Armor class of an unarmored creature before its DEX modifier."""

# =============================================================================
# Dice
# =============================================================================

D20_FACES = 20
"""Faces on the die used for checks, attacks and initiative."""

NATURAL_CRITICAL = 20
"""Natural d20 result that marks a critical success."""

NATURAL_FUMBLE = 1
"""Natural d20 result that marks a critical failure."""

PERCENTILE_FACES = 100
"""Faces on the percentile die used for interruption checks."""

# =============================================================================
# Rest Rules
# =============================================================================

SEVERITY_DANGER_SHIFT = 10
"""Added to the severity roll for every danger present at a rest location."""

SEVERITY_SAFETY_DIVISOR = 5
"""Safety level is divided by this and subtracted from the severity roll."""

SEVERITY_PROTECTION_REDUCTION = 15
"""Subtracted from the severity roll when the camp is guarded or warded."""

CATASTROPHIC_SEVERITY_THRESHOLD = 95
"""Severity scores above this are catastrophic."""

MAJOR_SEVERITY_THRESHOLD = 70
"""Severity scores above this (and not catastrophic) are major."""

MAX_EXHAUSTION_LEVEL = 6
"""Exhaustion level at which a creature dies."""


__all__ = [
    "MIN_ABILITY_SCORE",
    "MAX_ABILITY_SCORE",
    "ABILITY_SCORE_BASELINE",
    "MIN_LEVEL",
    "MAX_LEVEL",
    "BASE_ARMOR_CLASS",
    "D20_FACES",
    "NATURAL_CRITICAL",
    "NATURAL_FUMBLE",
    "PERCENTILE_FACES",
    "SEVERITY_DANGER_SHIFT",
    "SEVERITY_SAFETY_DIVISOR",
    "SEVERITY_PROTECTION_REDUCTION",
    "CATASTROPHIC_SEVERITY_THRESHOLD",
    "MAJOR_SEVERITY_THRESHOLD",
    "MAX_EXHAUSTION_LEVEL",
]
