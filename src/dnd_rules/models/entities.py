"""Entity models: player characters and enemies.

Combat participants form a closed tagged variant discriminated on the
``kind`` field, so code that needs to tell a player from an enemy checks
the tag instead of probing for class-specific fields. Both variants share
the same combat statistics and vital-status triple (is_alive,
is_conscious, can_act), which always tracks current hit points: all three
are false exactly when hit points are zero.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Annotated, Literal
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    model_validator,
)

from dnd_rules.core.constants import MAX_EXHAUSTION_LEVEL
from dnd_rules.data.classes import (
    hit_die_for,
    pact_slots_for,
    rage_uses_for,
    spell_slots_for,
)
from dnd_rules.models.enums import (
    Ability,
    CharacterClass,
    Condition,
    CreatureSize,
    CreatureType,
    DamageType,
    Skill,
)
from dnd_rules.models.stats import (
    AbilityBonuses,
    AbilityScores,
    FinalAbilityScores,
    Level,
    SkillEntry,
    ability_modifier,
    armor_class,
    final_scores,
    proficiency_bonus,
)


# =============================================================================
# Combat Statistics
# =============================================================================


class CombatStats(BaseModel):
    """Hit points, defenses and active conditions."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    current_hit_points: int = Field(ge=0, description="Current hit points")
    max_hit_points: int = Field(ge=1, description="Maximum hit points")
    temporary_hit_points: int = Field(default=0, ge=0, description="Temporary hit points")
    armor_class: int = Field(ge=0, description="Armor class")
    initiative: int = Field(default=0, description="Initiative modifier")
    speed: int = Field(default=30, ge=0, description="Walking speed in feet")

    conditions: list[Condition] = Field(default_factory=list)
    damage_resistances: list[DamageType] = Field(default_factory=list)
    damage_immunities: list[DamageType] = Field(default_factory=list)
    condition_immunities: list[Condition] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_hit_points(self) -> CombatStats:
        """Current hit points never exceed the maximum."""
        if self.current_hit_points > self.max_hit_points:
            raise ValueError(
                f"current_hit_points ({self.current_hit_points}) exceeds "
                f"max_hit_points ({self.max_hit_points})"
            )
        return self


# =============================================================================
# Class Resources
# =============================================================================


class SlotPool(BaseModel):
    """A resource with a current and maximum value."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    current: int = Field(default=0, ge=0)
    maximum: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_bounds(self) -> SlotPool:
        if self.current > self.maximum:
            raise ValueError(f"current ({self.current}) exceeds maximum ({self.maximum})")
        return self

    @property
    def expended(self) -> int:
        return self.maximum - self.current

    def expend(self, amount: int = 1) -> bool:
        """Spend from the pool. Returns False if not enough remains."""
        if amount > self.current:
            return False
        self.current -= amount
        return True

    def restore(self, amount: int | None = None) -> int:
        """Restore the pool, fully when amount is None.

        Returns:
            The amount actually restored.
        """
        before = self.current
        target = self.maximum if amount is None else min(self.maximum, self.current + amount)
        self.current = target
        return self.current - before


class HitDicePool(BaseModel):
    """Hit dice available for short-rest healing."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    die: int = Field(ge=4, le=12, description="Faces of the hit die")
    current: int = Field(ge=0, description="Hit dice remaining")
    total: int = Field(ge=1, description="Hit dice at full (character level)")

    @model_validator(mode="after")
    def check_bounds(self) -> HitDicePool:
        if self.current > self.total:
            raise ValueError(f"current ({self.current}) exceeds total ({self.total})")
        return self


class ClassResources(BaseModel):
    """Expendable class resources tracked between rests."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    hit_dice: HitDicePool
    spell_slots: dict[int, SlotPool] = Field(default_factory=dict)
    pact_slots: SlotPool = Field(default_factory=SlotPool)
    pact_slot_level: int = Field(default=0, ge=0, le=5)
    ki_points: SlotPool = Field(default_factory=SlotPool)
    bardic_inspiration: SlotPool = Field(default_factory=SlotPool)
    rage_uses: SlotPool = Field(default_factory=SlotPool)

    second_wind_available: bool = False
    action_surge_available: bool = False
    arcane_recovery_available: bool = False

    exhaustion_level: int = Field(default=0, ge=0, le=MAX_EXHAUSTION_LEVEL)

    def spell_slot_snapshot(self) -> dict[int, int]:
        """Current slots per spell level."""
        return {level: pool.current for level, pool in sorted(self.spell_slots.items())}


def build_class_resources(
    character_class: CharacterClass,
    level: int,
    scores: AbilityScores,
) -> ClassResources:
    """Build fully-rested class resources.

    Args:
        character_class: The character's class.
        level: Character level.
        scores: Final ability scores.

    Returns:
        ClassResources with every pool at its maximum.
    """
    pact_count, pact_level = pact_slots_for(character_class, level)
    resources = ClassResources(
        hit_dice=HitDicePool(die=hit_die_for(character_class), current=level, total=level),
        spell_slots={
            spell_level: SlotPool(current=count, maximum=count)
            for spell_level, count in spell_slots_for(character_class, level).items()
        },
        pact_slots=SlotPool(current=pact_count, maximum=pact_count),
        pact_slot_level=pact_level,
    )
    if character_class == CharacterClass.MONK:
        resources.ki_points = SlotPool(current=level, maximum=level)
    elif character_class == CharacterClass.BARD:
        uses = max(1, scores.modifier(Ability.CHA))
        resources.bardic_inspiration = SlotPool(current=uses, maximum=uses)
    elif character_class == CharacterClass.BARBARIAN:
        uses = rage_uses_for(level)
        resources.rage_uses = SlotPool(current=uses, maximum=uses)
    elif character_class == CharacterClass.FIGHTER:
        resources.second_wind_available = True
        resources.action_surge_available = level >= 2
    elif character_class == CharacterClass.WIZARD:
        resources.arcane_recovery_available = True
    return resources


# =============================================================================
# Entities
# =============================================================================


class Entity(BaseModel):
    """Fields and behaviour shared by every combat participant.

    Subclasses provide ``ability_scores``, ``proficiency_bonus`` and
    ``skill_entry``.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="ignore",  # Ignore computed fields when deserializing
    )

    uid: UUID = Field(default_factory=uuid4, description="Unique identifier")
    name: str = Field(min_length=1, description="Display name")
    combat_stats: CombatStats
    weapon_dice: str | None = Field(
        default=None,
        description="Damage dice of the primary attack; None uses the configured default",
    )

    is_alive: bool = True
    is_conscious: bool = True
    can_act: bool = True

    @model_validator(mode="after")
    def sync_vital_status(self) -> Entity:
        """Keep the vital-status triple consistent with hit points."""
        self._refresh_vital_status()
        return self

    def _refresh_vital_status(self) -> None:
        up = self.combat_stats.current_hit_points > 0
        # Compare first so validate_assignment does not recurse
        for flag in ("is_alive", "is_conscious", "can_act"):
            if getattr(self, flag) != up:
                object.__setattr__(self, flag, up)

    @property
    def current_hit_points(self) -> int:
        return self.combat_stats.current_hit_points

    def ability_modifier(self, ability: Ability | str) -> int:
        """Get this entity's modifier for an ability."""
        return ability_modifier(self.ability_scores.get(ability))  # type: ignore[attr-defined]

    def apply_damage(self, amount: int) -> int:
        """Apply damage, draining temporary hit points first.

        Current hit points are clamped at zero. At zero the entity is
        no longer alive, conscious or able to act.

        Args:
            amount: Damage to apply (non-negative).

        Returns:
            Hit points actually lost (excluding temporary hit points).
        """
        if amount < 0:
            raise ValueError(f"Damage must be non-negative, got {amount}")
        stats = self.combat_stats
        remaining = amount
        if stats.temporary_hit_points > 0:
            absorbed = min(stats.temporary_hit_points, remaining)
            stats.temporary_hit_points -= absorbed
            remaining -= absorbed

        before = stats.current_hit_points
        stats.current_hit_points = max(0, before - remaining)
        self._refresh_vital_status()
        return before - stats.current_hit_points

    def apply_healing(self, amount: int) -> int:
        """Heal up to the maximum.

        Returns:
            Hit points actually restored.
        """
        if amount < 0:
            raise ValueError(f"Healing must be non-negative, got {amount}")
        stats = self.combat_stats
        before = stats.current_hit_points
        stats.current_hit_points = min(stats.max_hit_points, before + amount)
        self._refresh_vital_status()
        return stats.current_hit_points - before


class PlayerCharacter(Entity):
    """The player's character.

    Final ability scores are always derived from the base scores and the
    bonus layers, so changing an item bonus immediately changes every
    modifier that depends on it.
    """

    kind: Literal["player"] = "player"

    character_class: CharacterClass
    level: Level = 1
    experience: int = Field(default=0, ge=0)

    base_scores: AbilityScores = Field(default_factory=AbilityScores)
    bonuses: AbilityBonuses = Field(default_factory=AbilityBonuses)
    skills: dict[Skill, SkillEntry] = Field(default_factory=dict)

    resources: ClassResources
    prepared_spells: list[str] = Field(default_factory=list)

    @computed_field(description="Final ability scores")  # type: ignore[prop-decorator]
    @property
    def ability_scores(self) -> FinalAbilityScores:
        return final_scores(self.base_scores, *self.bonuses.layers())

    @property
    def proficiency_bonus(self) -> int:
        return proficiency_bonus(self.level)

    def skill_entry(self, skill: Skill | str) -> SkillEntry:
        return self.skills.get(Skill(skill), SkillEntry())


class Enemy(Entity):
    """A hostile creature built from a stat block template."""

    kind: Literal["enemy"] = "enemy"

    template_id: str | None = None
    size: CreatureSize = CreatureSize.MEDIUM
    creature_type: CreatureType = CreatureType.HUMANOID

    ability_scores: AbilityScores = Field(default_factory=AbilityScores)
    skill_bonuses: dict[Skill, int] = Field(default_factory=dict)
    saving_throw_bonuses: dict[Ability, int] = Field(default_factory=dict)
    proficiency: int = Field(default=2, ge=0, description="Proficiency bonus from the stat block")

    @property
    def proficiency_bonus(self) -> int:
        return self.proficiency

    def skill_entry(self, skill: Skill | str) -> SkillEntry:
        # Stat block skill bonuses already include proficiency
        return SkillEntry(bonus=self.skill_bonuses.get(Skill(skill), 0))


Participant = Annotated[PlayerCharacter | Enemy, Field(discriminator="kind")]
"""A combat participant: player or enemy, resolved by ``kind``."""


# =============================================================================
# Factories
# =============================================================================


def create_player_character(
    name: str,
    character_class: CharacterClass | str,
    *,
    level: int = 1,
    base_scores: AbilityScores | dict[str, int] | None = None,
    bonuses: AbilityBonuses | None = None,
    skill_proficiencies: Iterable[Skill | str] = (),
    expertise: Iterable[Skill | str] = (),
    armor_bonus: int = 0,
    shield_bonus: int = 0,
    max_dex_bonus: int | None = None,
    weapon_dice: str | None = None,
    prepared_spells: Iterable[str] = (),
) -> PlayerCharacter:
    """Create a fully-rested player character.

    Hit points use the full hit die at first level and the rounded-up
    average for every level after, each adding the CON modifier.

    Args:
        name: Character name.
        character_class: The character's class.
        level: Character level (1-20).
        base_scores: Base ability scores before bonuses.
        bonuses: Racial, item, temporary and improvement bonus layers.
        skill_proficiencies: Skills the character is proficient in.
        expertise: Skills with expertise (implies proficiency).
        armor_bonus: AC from worn armor.
        shield_bonus: AC from a shield.
        max_dex_bonus: Cap on DEX contribution to AC.
        weapon_dice: Damage dice of the primary attack.
        prepared_spells: Initially prepared spells.

    Returns:
        A new PlayerCharacter.
    """
    character_class = CharacterClass(character_class)
    if base_scores is None:
        base_scores = AbilityScores()
    elif isinstance(base_scores, dict):
        base_scores = AbilityScores(**base_scores)
    bonuses = bonuses or AbilityBonuses()

    scores = final_scores(base_scores, *bonuses.layers())
    con_mod = scores.modifier(Ability.CON)
    die = hit_die_for(character_class)
    max_hp = max(1, die + con_mod) + sum(
        max(1, die // 2 + 1 + con_mod) for _ in range(level - 1)
    )
    dex_mod = scores.modifier(Ability.DEX)

    expert = {Skill(skill) for skill in expertise}
    proficient = {Skill(skill) for skill in skill_proficiencies} | expert
    skills = {
        skill: SkillEntry(proficient=skill in proficient, expertise=skill in expert)
        for skill in Skill
    }

    return PlayerCharacter(
        name=name,
        character_class=character_class,
        level=level,
        base_scores=base_scores,
        bonuses=bonuses,
        skills=skills,
        combat_stats=CombatStats(
            current_hit_points=max_hp,
            max_hit_points=max_hp,
            armor_class=armor_class(
                dex_mod,
                armor_bonus=armor_bonus,
                shield_bonus=shield_bonus,
                max_dex_bonus=max_dex_bonus,
            ),
            initiative=dex_mod,
        ),
        weapon_dice=weapon_dice,
        resources=build_class_resources(character_class, level, scores),
        prepared_spells=list(prepared_spells),
    )


__all__ = [
    "CombatStats",
    "SlotPool",
    "HitDicePool",
    "ClassResources",
    "build_class_resources",
    "Entity",
    "PlayerCharacter",
    "Enemy",
    "Participant",
    "create_player_character",
]
