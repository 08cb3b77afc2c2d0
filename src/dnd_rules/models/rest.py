"""Rest models: locations, interruptions and rest records.

A rest produces a record describing what happened (hit dice rolled,
resources recovered, interruptions met) together with the character's
final state. Interruptions are data; resolving their choices is left to
the caller.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from dnd_rules.models.enums import (
    CharacterClass,
    Condition,
    InterruptionSeverity,
    InterruptionType,
    LocationType,
    RestAmenity,
    RestDanger,
    RestQuality,
)


Percentage = Annotated[int, Field(ge=0, le=100)]


class RestLocation(BaseModel):
    """Where the party rests."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: LocationType
    name: str
    description: str = ""
    safety_level: Percentage = Field(default=50, description="How secure the spot is")
    comfort_level: Percentage = Field(default=50, description="Feeds long rest quality")
    amenities: list[RestAmenity] = Field(default_factory=list)
    dangers: list[RestDanger] = Field(default_factory=list)


# =============================================================================
# Interruptions
# =============================================================================


class RestConsequence(BaseModel):
    """A potential cost of an interruption."""

    model_config = ConfigDict(frozen=True)

    type: Literal["hp_loss", "exhaustion", "item_loss", "time_loss", "spell_slot_loss"]
    value: int
    description: str
    avoidable_by: list[str] = Field(default_factory=list)


class RestChoice(BaseModel):
    """An option offered to the player when an interruption occurs."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    consequences: list[RestConsequence] = Field(default_factory=list)


class Interruption(BaseModel):
    """Something that disturbed a rest."""

    model_config = ConfigDict(extra="forbid")

    id: UUID = Field(default_factory=uuid4)
    type: InterruptionType
    severity: InterruptionSeverity
    time_occurred: int = Field(ge=0, description="Minutes after the rest began")
    title: str
    description: str
    consequences: list[RestConsequence] = Field(default_factory=list)
    choices: list[RestChoice] = Field(default_factory=list)
    resolved: bool = False

    @property
    def is_disruptive(self) -> bool:
        """Major and catastrophic interruptions count against a long rest."""
        return self.severity != InterruptionSeverity.MINOR


# =============================================================================
# Short Rest
# =============================================================================


class HitDiceRoll(BaseModel):
    """One hit die spent during a short rest."""

    model_config = ConfigDict(frozen=True)

    hit_die: int = Field(description="Faces of the die rolled")
    rolled: int
    constitution_bonus: int
    total_healing: int = Field(ge=1, description="rolled + CON, at least 1")


class ArcaneRecovery(BaseModel):
    """Spell slots regained through Arcane Recovery."""

    model_config = ConfigDict(frozen=True)

    slots_recovered: dict[int, int] = Field(default_factory=dict)
    total_levels: int = Field(ge=0, description="Slot levels the feature allowed")


class ClassAbilityRecovery(BaseModel):
    """Class features refreshed by a short rest.

    Pool fields hold the uses available once the rest is over; None means
    the class has no such feature or it was not refreshed.
    """

    model_config = ConfigDict(frozen=True)

    character_class: CharacterClass
    second_wind: bool | None = None
    arcane_recovery: ArcaneRecovery | None = None
    pact_magic_slots: int | None = None
    ki_points: int | None = None
    bardic_inspiration: int | None = None


class ShortRestRecord(BaseModel):
    """What happened during a short rest."""

    type: Literal["short"] = "short"
    duration: int = Field(description="Minutes")
    location: RestLocation
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    hit_dice_used: list[HitDiceRoll] = Field(default_factory=list)
    hit_points_restored: int = 0
    class_abilities_recovered: list[ClassAbilityRecovery] = Field(default_factory=list)
    interruption: Interruption | None = None
    completed: bool = False


# =============================================================================
# Long Rest
# =============================================================================


class LongRestRecovery(BaseModel):
    """Everything a completed long rest restored."""

    model_config = ConfigDict(frozen=True)

    hit_points_restored: int
    hit_dice_restored: int
    spell_slots_restored: dict[int, int] = Field(default_factory=dict)
    pact_slots_restored: int = 0
    daily_abilities_reset: list[str] = Field(default_factory=list)
    conditions_removed: list[Condition] = Field(default_factory=list)
    exhaustion_reduced: bool = False


class SpellPreparation(BaseModel):
    """Spells chosen for the day after a long rest."""

    model_config = ConfigDict(frozen=True)

    character_uid: UUID
    character_class: CharacterClass
    available_spells: list[str] = Field(default_factory=list)
    prepared_spells: list[str] = Field(default_factory=list)
    max_prepared: int = Field(ge=1)
    is_valid: bool
    errors: list[str] = Field(default_factory=list)


class LongRestRecord(BaseModel):
    """What happened during a long rest."""

    type: Literal["long"] = "long"
    duration: int = Field(description="Minutes")
    location: RestLocation
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    recovery: LongRestRecovery | None = None
    interruptions: list[Interruption] = Field(default_factory=list)
    spell_preparation: SpellPreparation | None = None
    completed: bool = False
    quality: RestQuality = RestQuality.NORMAL


# =============================================================================
# Result
# =============================================================================


class RestFinalState(BaseModel):
    """Character state once the rest is over."""

    model_config = ConfigDict(frozen=True)

    hit_points: int
    hit_dice_remaining: int
    spell_slots: dict[int, int] = Field(default_factory=dict)
    pact_slots: int = 0
    conditions: list[Condition] = Field(default_factory=list)
    exhaustion_level: int = 0


class RestResult(BaseModel):
    """Outcome of a short or long rest.

    A rest that fails (catastrophic short-rest interruption, too many
    disruptive long-rest interruptions) is reported here with
    ``success=False``; it is never raised.
    """

    success: bool
    rest: Annotated[ShortRestRecord | LongRestRecord, Field(discriminator="type")]
    final_state: RestFinalState


__all__ = [
    "RestLocation",
    "RestConsequence",
    "RestChoice",
    "Interruption",
    "HitDiceRoll",
    "ArcaneRecovery",
    "ClassAbilityRecovery",
    "ShortRestRecord",
    "LongRestRecovery",
    "SpellPreparation",
    "LongRestRecord",
    "RestFinalState",
    "RestResult",
]
