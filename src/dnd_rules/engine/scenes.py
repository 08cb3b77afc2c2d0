"""Scene loading and choice processing.

A choice is processed in a fixed order: look the choice up, check its
requirements, roll its skill check if it has one, pick the consequence,
apply the rewards, and hand back where to go next. Every check that can
fail runs before the rewards are applied, so a failed choice changes
nothing.

A choice without a skill check always takes its first consequence. A
choice with one takes the first entry of the check's success or failure
list. An empty list or a consequence without a target scene is a content
defect and raises.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from dnd_rules.core.exceptions import (
    ChoiceNotFoundError,
    MissingActorError,
    MissingTargetSceneError,
    NoConsequenceDefinedError,
    RequirementNotMetError,
    SceneNotFoundError,
    ValidationFailure,
)
from dnd_rules.core.logging import get_logger
from dnd_rules.engine.rewards import RewardApplier
from dnd_rules.engine.skill_check import SkillCheckResolver, SkillCheckResult
from dnd_rules.models.entities import Entity, PlayerCharacter
from dnd_rules.models.enums import Ability, CharacterClass, Comparison, RequirementType, Skill
from dnd_rules.models.progress import PlayerProgress
from dnd_rules.models.scenes import BaseScene, Choice, ChoiceRequirement, Consequence, Reward, Scene


logger = get_logger(__name__)

T = TypeVar("T")

_scene_adapter: TypeAdapter[Scene] = TypeAdapter(Scene)


# =============================================================================
# Repository
# =============================================================================


class SceneRepository:
    """In-memory store of scenes keyed by id.

    Example:
        >>> repo = SceneRepository.from_records([{"id": "start", "title": "Start"}])
        >>> repo.load_scene("start").title
        'Start'
    """

    def __init__(self, scenes: Iterable[Scene] = ()) -> None:
        self._scenes: dict[str, Scene] = {}
        for scene in scenes:
            self.register(scene)

    def register(self, scene: Scene) -> None:
        """Add a scene.

        Raises:
            ValidationFailure: If a scene with the same id is registered.
        """
        if scene.id in self._scenes:
            raise ValidationFailure(
                f"Duplicate scene id: {scene.id}",
                field_name="id",
                invalid_value=scene.id,
            )
        self._scenes[scene.id] = scene

    def load_scene(self, scene_id: str) -> Scene:
        """Get a scene by id.

        Raises:
            SceneNotFoundError: If no scene has the id.
        """
        try:
            return self._scenes[scene_id]
        except KeyError:
            raise SceneNotFoundError(f"Scene not found: {scene_id}", scene_id=scene_id) from None

    def scene_ids(self) -> list[str]:
        return list(self._scenes)

    def dangling_targets(self) -> dict[str, list[str]]:
        """Find transitions pointing at scenes that do not exist.

        Returns:
            Mapping of scene id to the missing target ids it references.
        """
        dangling: dict[str, list[str]] = {}
        for scene in self._scenes.values():
            missing = [
                target
                for target in _scene_targets(scene)
                if target not in self._scenes
            ]
            if missing:
                dangling[scene.id] = missing
        return dangling

    def __contains__(self, scene_id: object) -> bool:
        return scene_id in self._scenes

    def __len__(self) -> int:
        return len(self._scenes)

    def __iter__(self) -> Iterator[Scene]:
        return iter(self._scenes.values())

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> SceneRepository:
        """Build a repository from plain scene records.

        Records without a ``type`` are narrative scenes.

        Raises:
            ValidationFailure: If a record is not a valid scene.
        """
        scenes = []
        for record in records:
            data = {"type": "narrative", **record}
            try:
                scenes.append(_scene_adapter.validate_python(data))
            except ValidationError as exc:
                raise ValidationFailure(
                    f"Invalid scene record: {data.get('id', '<no id>')}",
                    field_name="scene",
                    details={"errors": exc.errors(include_url=False)},
                ) from exc
        return cls(scenes)

    @classmethod
    def from_json_file(cls, path: str | Path) -> SceneRepository:
        """Load scenes from a JSON file.

        The file holds either a list of scene records or an object with a
        ``scenes`` list.
        """
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        records = payload["scenes"] if isinstance(payload, dict) else payload
        repository = cls.from_records(records)
        logger.info("Scenes loaded", path=str(path), count=len(repository))
        return repository


def _scene_targets(scene: BaseScene) -> list[str]:
    targets = []
    for choice in scene.choices:
        consequences = list(choice.consequences)
        if choice.skill_check is not None:
            consequences += choice.skill_check.consequences.success
            consequences += choice.skill_check.consequences.failure
        targets.extend(c.target_scene for c in consequences if c.target_scene)
    for target in (getattr(scene, "victory_scene", None), getattr(scene, "defeat_scene", None)):
        if target:
            targets.append(target)
    return targets


# =============================================================================
# Requirements
# =============================================================================


def _compare(actual: Any, expected: Any, comparison: Comparison) -> bool:
    if comparison == Comparison.GREATER:
        return actual >= expected
    if comparison == Comparison.LESS:
        return actual <= expected
    if comparison == Comparison.NOT_HAS:
        return not actual
    if comparison == Comparison.HAS:
        return bool(actual)
    return actual == expected


def _parse_ability_value(value: Any) -> tuple[Ability, int]:
    """Split ``"strength:13"`` into the ability and the score."""
    try:
        name, _, score = str(value).partition(":")
        return Ability(name.strip().lower()), int(score)
    except ValueError as exc:
        raise ValidationFailure(
            "Ability requirement must look like 'strength:13'",
            field_name="value",
            invalid_value=value,
        ) from exc


def _parse_value(parse: Callable[[Any], T], value: Any, kind: RequirementType) -> T:
    try:
        return parse(value)
    except (TypeError, ValueError) as exc:
        raise ValidationFailure(
            f"Invalid {kind.value} requirement value: {value!r}",
            field_name="value",
            invalid_value=value,
        ) from exc


def requirement_met(
    requirement: ChoiceRequirement,
    actor: Entity | None,
    progress: PlayerProgress,
) -> bool:
    """Check one requirement.

    Raises:
        MissingActorError: If the requirement inspects the character and
            none was supplied.
        ValidationFailure: If the requirement value is malformed.
    """
    kind = requirement.type
    comparison = requirement.comparison

    if kind in (RequirementType.ITEM, RequirementType.COMPANION):
        value = str(requirement.value)
        has = progress.has_item(value) if kind == RequirementType.ITEM else progress.has_companion(value)
        return not has if comparison == Comparison.NOT_HAS else has

    if kind == RequirementType.FLAG:
        if not requirement.flag_name:
            raise ValidationFailure("Flag requirement needs flag_name", field_name="flag_name")
        flag = progress.get_flag(requirement.flag_name)
        if comparison is None:
            comparison = Comparison.HAS if requirement.value is None else Comparison.EQUAL
        if comparison in (Comparison.GREATER, Comparison.LESS) and not isinstance(flag, int):
            return False
        return _compare(flag, requirement.value, comparison)

    if actor is None:
        raise MissingActorError("No active character to check requirements", operation="requirements")

    if kind == RequirementType.ABILITY:
        ability, score = _parse_ability_value(requirement.value)
        return _compare(actor.ability_scores.get(ability), score, comparison or Comparison.GREATER)  # type: ignore[attr-defined]

    if kind == RequirementType.SKILL:
        skill = _parse_value(Skill, requirement.value, kind)
        proficient = actor.skill_entry(skill).proficient  # type: ignore[attr-defined]
        return not proficient if comparison == Comparison.NOT_HAS else proficient

    if not isinstance(actor, PlayerCharacter):
        return False

    if kind == RequirementType.LEVEL:
        level = _parse_value(int, requirement.value, kind)
        return _compare(actor.level, level, comparison or Comparison.GREATER)

    # Class
    values = requirement.value if isinstance(requirement.value, list) else [requirement.value]
    allowed = {_parse_value(CharacterClass, v, kind) for v in values}
    member = actor.character_class in allowed
    return not member if comparison == Comparison.NOT_HAS else member


# =============================================================================
# Orchestrator
# =============================================================================


@dataclass(frozen=True)
class SceneTransitionResult:
    """Where a processed choice leads.

    Attributes:
        next_scene_id: Scene to move to.
        rewards: Rewards the choice grants, in order.
        effects: Effects carried by the chosen consequence.
        skill_check_result: The check rolled, if the choice had one.
    """

    next_scene_id: str
    rewards: list[Reward] = field(default_factory=list)
    effects: list[Any] = field(default_factory=list)
    skill_check_result: SkillCheckResult | None = None


class SceneOrchestrator:
    """Processes scene choices.

    Args:
        repository: Scenes to load from and validate targets against.
        resolver: Rolls embedded skill checks.
        reward_applier: Receives the rewards of a resolved choice.
    """

    def __init__(
        self,
        repository: SceneRepository,
        resolver: SkillCheckResolver,
        reward_applier: RewardApplier,
    ) -> None:
        self.repository = repository
        self.resolver = resolver
        self.reward_applier = reward_applier

    def load_scene(self, scene_id: str) -> Scene:
        return self.repository.load_scene(scene_id)

    def available_choices(
        self,
        scene: BaseScene,
        actor: Entity | None,
        progress: PlayerProgress | None = None,
    ) -> list[Choice]:
        """Choices whose requirements the actor meets."""
        progress = progress or PlayerProgress()
        return [
            choice
            for choice in scene.choices
            if all(requirement_met(req, actor, progress) for req in choice.requirements)
        ]

    def check_requirements(
        self,
        choice: Choice,
        actor: Entity | None,
        progress: PlayerProgress | None = None,
    ) -> None:
        """Ensure every requirement of a choice is met.

        Raises:
            RequirementNotMetError: On the first unmet requirement.
        """
        progress = progress or PlayerProgress()
        for requirement in choice.requirements:
            if not requirement_met(requirement, actor, progress):
                raise RequirementNotMetError(
                    f"Requirement not met for choice {choice.id}: {requirement.type}",
                    field_name=requirement.type.value,
                    invalid_value=requirement.value,
                )

    def resolve_choice(
        self,
        scene: BaseScene,
        choice_id: str,
        actor: Entity | None,
        progress: PlayerProgress | None = None,
    ) -> SceneTransitionResult:
        """Resolve a choice without applying its rewards.

        Runs every check of ``process_choice`` and rolls the skill check.
        The returned rewards are the ones the choice would grant; callers
        that need to prepare the next scene first apply them themselves.

        Raises:
            The same errors as ``process_choice``.
        """
        choice = scene.get_choice(choice_id)
        if choice is None:
            raise ChoiceNotFoundError(
                f"Choice not found: {choice_id}",
                choice_id=choice_id,
                scene_id=scene.id,
            )

        self.check_requirements(choice, actor, progress)

        check_result = None
        consequences: list[Consequence] = choice.consequences
        if choice.skill_check is not None:
            check_result = self.resolver.resolve(choice.skill_check, actor)
            outcomes = choice.skill_check.consequences
            consequences = outcomes.success if check_result.success else outcomes.failure

        if not consequences:
            raise NoConsequenceDefinedError(
                f"No consequences defined for choice: {choice_id}",
                field_name="consequences",
                details={"scene_id": scene.id, "choice_id": choice_id},
            )
        consequence = consequences[0]
        if not consequence.target_scene:
            raise MissingTargetSceneError(
                f"Consequence of choice {choice_id} has no target scene",
                field_name="target_scene",
                details={"scene_id": scene.id, "choice_id": choice_id},
            )
        if consequence.target_scene not in self.repository:
            raise SceneNotFoundError(
                f"Scene not found: {consequence.target_scene}",
                scene_id=consequence.target_scene,
            )

        logger.debug(
            "Choice resolved",
            scene_id=scene.id,
            choice_id=choice_id,
            next_scene_id=consequence.target_scene,
            skill_check=check_result.success if check_result else None,
        )
        return SceneTransitionResult(
            next_scene_id=consequence.target_scene,
            rewards=list(choice.rewards),
            effects=list(consequence.effects),
            skill_check_result=check_result,
        )

    def process_choice(
        self,
        scene: BaseScene,
        choice_id: str,
        actor: Entity | None,
        progress: PlayerProgress | None = None,
    ) -> SceneTransitionResult:
        """Resolve a choice and apply its rewards.

        Args:
            scene: Scene the choice belongs to.
            choice_id: Id of the selected choice.
            actor: Character making the choice (and any skill check).
            progress: Progress consulted by item, companion and flag
                requirements.

        Returns:
            The SceneTransitionResult.

        Raises:
            ChoiceNotFoundError: If the scene has no such choice.
            RequirementNotMetError: If a requirement is unmet.
            MissingActorError: If a requirement or skill check needs an
                actor and none was supplied.
            NoConsequenceDefinedError: If the selected consequence list
                is empty.
            MissingTargetSceneError: If the consequence has no target.
            SceneNotFoundError: If the target scene does not exist.
        """
        result = self.resolve_choice(scene, choice_id, actor, progress)
        if result.rewards:
            self.reward_applier.apply_rewards(result.rewards)

        logger.info(
            "Choice processed",
            scene_id=scene.id,
            choice_id=choice_id,
            next_scene_id=result.next_scene_id,
            rewards=len(result.rewards),
        )
        return result


__all__ = [
    "SceneRepository",
    "SceneTransitionResult",
    "SceneOrchestrator",
    "requirement_met",
]
