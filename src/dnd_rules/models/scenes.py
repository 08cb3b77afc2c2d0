"""Scene and choice content models.

Scenes are static content loaded by id. A narrative scene offers choices;
each choice leads, directly or through a skill check, to a consequence
naming the next scene. A combat scene names the enemies to fight and
where to go on victory or defeat.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from dnd_rules.models.enums import (
    Ability,
    Comparison,
    RequirementType,
    RewardKind,
    Skill,
)


class ContentModel(BaseModel):
    """Base for immutable scene content."""

    model_config = ConfigDict(frozen=True, extra="forbid")


# =============================================================================
# Rewards and Consequences
# =============================================================================


class Reward(ContentModel):
    """Something granted to the player by a choice, scene or combat."""

    type: RewardKind
    description: str = ""
    amount: int | None = None
    item_id: str | None = None
    companion_id: str | None = None
    flag_name: str | None = None
    flag_value: bool | int | str | None = None
    relationship_change: int | None = None

    @model_validator(mode="after")
    def check_payload(self) -> Reward:
        """Each reward kind carries the field it needs."""
        required = {
            RewardKind.XP: "amount",
            RewardKind.GOLD: "amount",
            RewardKind.ITEM: "item_id",
            RewardKind.COMPANION: "companion_id",
            RewardKind.FLAG: "flag_name",
            RewardKind.RELATIONSHIP: "companion_id",
        }[self.type]
        if getattr(self, required) is None:
            raise ValueError(f"{self.type} reward requires {required}")
        if self.type == RewardKind.RELATIONSHIP and self.relationship_change is None:
            raise ValueError("relationship reward requires relationship_change")
        return self


class Consequence(ContentModel):
    """Where a choice leads."""

    type: str = "scene_transition"
    target_scene: str | None = None
    effects: list[Any] = Field(default_factory=list)


class SkillCheckConsequences(ContentModel):
    success: list[Consequence] = Field(default_factory=list)
    failure: list[Consequence] = Field(default_factory=list)


class SkillCheck(ContentModel):
    """A check a choice asks for before routing to a consequence.

    Attributes:
        ability: Ability whose modifier applies.
        skill: Optional skill adding proficiency and skill bonuses.
        difficulty_class: Total needed to succeed.
        advantage: Roll two d20s and keep the higher.
        disadvantage: Roll two d20s and keep the lower.
        consequences: Where success and failure lead.
    """

    ability: Ability
    skill: Skill | None = None
    difficulty_class: int = Field(ge=1)
    advantage: bool = False
    disadvantage: bool = False
    consequences: SkillCheckConsequences = Field(default_factory=SkillCheckConsequences)


class ChoiceRequirement(ContentModel):
    """A gate on a choice.

    ``value`` is compared with ``comparison``: a level as a number, a
    class name (or list of names), an ability as ``"strength:13"``, a
    skill name, an item id, a companion id, or a flag value (with ``flag_name`` naming the
    flag). Greater and less are inclusive. When ``comparison`` is omitted
    levels and abilities mean "at least", flags compare equal when a value
    is given, and everything else means "has".
    """

    type: RequirementType
    value: Any = None
    comparison: Comparison | None = None
    flag_name: str | None = None


class Choice(ContentModel):
    """An option offered by a narrative scene."""

    id: str
    text: str
    requirements: list[ChoiceRequirement] = Field(default_factory=list)
    consequences: list[Consequence] = Field(default_factory=list)
    rewards: list[Reward] = Field(default_factory=list)
    skill_check: SkillCheck | None = None


# =============================================================================
# Scenes
# =============================================================================


class BaseScene(ContentModel):
    id: str
    title: str
    description: str = ""
    entry_rewards: list[Reward] = Field(default_factory=list)
    choices: list[Choice] = Field(default_factory=list)

    def get_choice(self, choice_id: str) -> Choice | None:
        return next((choice for choice in self.choices if choice.id == choice_id), None)


class NarrativeScene(BaseScene):
    """A scene of text and choices."""

    type: Literal["narrative"] = "narrative"
    text: str = ""
    speaker: str | None = None


class EnemyGroup(ContentModel):
    template_id: str
    count: int = Field(default=1, ge=1)


class CombatReward(ContentModel):
    experience: int = Field(default=0, ge=0)
    gold: int = Field(default=0, ge=0)

    def as_rewards(self) -> list[Reward]:
        """Express the combat reward as ordered scene rewards."""
        rewards = []
        if self.experience:
            rewards.append(Reward(type=RewardKind.XP, amount=self.experience, description="Combat victory"))
        if self.gold:
            rewards.append(Reward(type=RewardKind.GOLD, amount=self.gold, description="Spoils of battle"))
        return rewards


class CombatScene(BaseScene):
    """A scene that starts a combat encounter."""

    type: Literal["combat"] = "combat"
    enemies: list[EnemyGroup] = Field(min_length=1)
    rewards: CombatReward = Field(default_factory=CombatReward)
    victory_scene: str | None = None
    defeat_scene: str | None = None


Scene = Annotated[NarrativeScene | CombatScene, Field(discriminator="type")]
"""Any scene, resolved by ``type``."""


__all__ = [
    "Reward",
    "Consequence",
    "SkillCheckConsequences",
    "SkillCheck",
    "ChoiceRequirement",
    "Choice",
    "BaseScene",
    "NarrativeScene",
    "EnemyGroup",
    "CombatReward",
    "CombatScene",
    "Scene",
]
