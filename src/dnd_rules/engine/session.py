"""Game session context.

A GameSession is the one object a caller holds for a playthrough. It
owns the player character, their progress, the active scene id and the
active combat encounter, and wires the rules components together around
a single dice roller. Every operation goes through the session, so there
is no ambient global state:

    create -> enter_scene / choose / attack / rest ... -> snapshot or discard

While an encounter is attached (from entering a combat scene until
``finish_combat``) the encounter owns the player's hit points, and
choices and rests are refused.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from dnd_rules.core.config import Settings, get_settings
from dnd_rules.core.exceptions import InvalidStateError
from dnd_rules.core.logging import bind_context, get_logger
from dnd_rules.engine.combat import AttackResult, CombatEncounter, EncounterSnapshot
from dnd_rules.engine.dice import DiceRoller
from dnd_rules.engine.enemies import EnemyFactory
from dnd_rules.engine.rest import RestSystem
from dnd_rules.engine.rewards import ProgressRewardApplier
from dnd_rules.engine.scenes import SceneOrchestrator, SceneRepository, SceneTransitionResult
from dnd_rules.engine.skill_check import SkillCheckResolver
from dnd_rules.models.entities import PlayerCharacter
from dnd_rules.models.enums import CombatResult
from dnd_rules.models.progress import PlayerProgress
from dnd_rules.models.rest import RestLocation, RestResult
from dnd_rules.models.scenes import CombatScene, Reward, Scene


logger = get_logger(__name__)


@dataclass(frozen=True)
class CombatOutcome:
    """How a finished encounter was wrapped up.

    Attributes:
        result: Victory or defeat.
        rewards: Rewards applied (empty on defeat).
        next_scene_id: Scene entered afterwards, if the combat scene set one.
        combat_log: The encounter's combat log.
    """

    result: CombatResult
    rewards: list[Reward] = field(default_factory=list)
    next_scene_id: str | None = None
    combat_log: list[str] = field(default_factory=list)


class SessionSnapshot(BaseModel):
    """Plain record of a whole session."""

    session_id: UUID
    player: PlayerCharacter
    progress: PlayerProgress = Field(default_factory=PlayerProgress)
    current_scene_id: str | None = None
    encounter: EncounterSnapshot | None = None


class GameSession:
    """A playthrough: one player, their progress and where they are."""

    def __init__(
        self,
        player: PlayerCharacter,
        *,
        repository: SceneRepository,
        dice: DiceRoller,
        progress: PlayerProgress | None = None,
        settings: Settings | None = None,
        session_id: UUID | None = None,
    ) -> None:
        """Wire up a session.

        Args:
            player: The player character.
            repository: Scene content.
            dice: Source of every roll in the session.
            progress: Existing progress; a fresh record by default.
            settings: Application settings; the global settings by default.
            session_id: Identifier to resume under.
        """
        self.session_id = session_id or uuid4()
        self._settings = settings or get_settings()
        self.player = player
        self.progress = progress or PlayerProgress()
        self.repository = repository
        self.dice = dice

        self.resolver = SkillCheckResolver(dice, self._settings.checks)
        self.reward_applier = ProgressRewardApplier(player, self.progress)
        self.orchestrator = SceneOrchestrator(repository, self.resolver, self.reward_applier)
        self.rest_system = RestSystem(dice, self._settings.rest)
        self.enemy_factory = EnemyFactory()

        self.current_scene_id: str | None = None
        self.encounter: CombatEncounter | None = None

        bind_context(session_id=str(self.session_id))
        logger.info("Session created", player=player.name)

    @classmethod
    def create(
        cls,
        player: PlayerCharacter,
        repository: SceneRepository,
        *,
        seed: int | None = None,
        start_scene: str | None = None,
        settings: Settings | None = None,
    ) -> GameSession:
        """Start a new session, optionally entering a first scene.

        Args:
            player: The player character.
            repository: Scene content.
            seed: Dice seed; falls back to the configured seed.
            start_scene: Scene to enter straight away.
            settings: Application settings.
        """
        settings = settings or get_settings()
        dice = DiceRoller(seed=seed if seed is not None else settings.dice.seed)
        session = cls(player, repository=repository, dice=dice, settings=settings)
        if start_scene is not None:
            session.enter_scene(start_scene)
        return session

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def current_scene(self) -> Scene | None:
        if self.current_scene_id is None:
            return None
        return self.repository.load_scene(self.current_scene_id)

    @property
    def in_combat(self) -> bool:
        """True while an encounter is attached and not yet over."""
        return self.encounter is not None and not self.encounter.is_combat_over()

    def _ensure_no_encounter(self, operation: str) -> None:
        if self.encounter is not None:
            state = "combat_active" if self.in_combat else "combat_unfinished"
            raise InvalidStateError(
                f"Cannot {operation} while an encounter is attached",
                current_state=state,
                expected_states=["exploring"],
            )

    def _require_encounter(self, operation: str) -> CombatEncounter:
        if self.encounter is None:
            raise InvalidStateError(
                f"Cannot {operation}: no active encounter",
                current_state="exploring",
                expected_states=["combat_active"],
            )
        return self.encounter

    # -------------------------------------------------------------------------
    # Scenes
    # -------------------------------------------------------------------------

    def _prepare_scene(self, scene_id: str) -> tuple[Scene, CombatEncounter | None]:
        """Load a scene and build its encounter without changing the session."""
        scene = self.repository.load_scene(scene_id)
        if not isinstance(scene, CombatScene):
            return scene, None
        enemies = [
            enemy
            for group in scene.enemies
            for enemy in self.enemy_factory.create_many(group.template_id, group.count)
        ]
        encounter = CombatEncounter(
            self.player,
            enemies,
            dice=self.dice,
            settings=self._settings.combat,
        )
        return scene, encounter

    def _commit_scene(self, scene: Scene, encounter: CombatEncounter | None) -> None:
        if scene.entry_rewards:
            self.reward_applier.apply_rewards(scene.entry_rewards)
        self.current_scene_id = scene.id
        self.encounter = encounter
        logger.info("Scene entered", scene_id=scene.id, combat=encounter is not None)

    def enter_scene(self, scene_id: str) -> Scene:
        """Move to a scene.

        Entry rewards are applied. Entering a combat scene spawns its
        enemies and starts an encounter.

        Raises:
            InvalidStateError: If an encounter is attached.
            SceneNotFoundError: If the scene does not exist.
            TemplateNotFoundError: If a combat scene names an unknown enemy.
        """
        self._ensure_no_encounter("change scene")
        scene, encounter = self._prepare_scene(scene_id)
        self._commit_scene(scene, encounter)
        return scene

    def choose(self, choice_id: str) -> SceneTransitionResult:
        """Pick a choice in the current scene and move to where it leads.

        The next scene, and its encounter if it has one, is built before
        the choice's rewards are applied, so a choice that fails leaves
        the session as it was.

        Raises:
            InvalidStateError: If there is no current scene or an
                encounter is attached.
            TemplateNotFoundError: If the next scene names an unknown enemy.
        """
        self._ensure_no_encounter("choose")
        scene = self.current_scene
        if scene is None:
            raise InvalidStateError("Cannot choose: no current scene", current_state="no_scene")

        result = self.orchestrator.resolve_choice(scene, choice_id, self.player, self.progress)
        next_scene, encounter = self._prepare_scene(result.next_scene_id)
        if result.rewards:
            self.reward_applier.apply_rewards(result.rewards)
        logger.info(
            "Choice processed",
            scene_id=scene.id,
            choice_id=choice_id,
            next_scene_id=result.next_scene_id,
            rewards=len(result.rewards),
        )
        self._commit_scene(next_scene, encounter)
        return result

    # -------------------------------------------------------------------------
    # Combat
    # -------------------------------------------------------------------------

    def attack(self, target_uid: UUID) -> AttackResult:
        """Have the player attack an enemy and end the player's turn.

        Raises:
            InvalidStateError: If there is no encounter, it is over, or it
                is not the player's turn.
        """
        encounter = self._require_encounter("attack")
        if encounter.is_enemy_turn():
            raise InvalidStateError(
                "Cannot attack: it is not the player's turn",
                current_state=encounter.phase.value,
                expected_states=["player_turn"],
            )
        result = encounter.perform_attack(self.player, encounter.get_participant(target_uid))
        if not encounter.is_combat_over():
            encounter.next_turn()
        return result

    def resolve_enemy_turns(self) -> list[AttackResult]:
        """Let the enemies act until it is the player's turn again."""
        return self._require_encounter("resolve enemy turns").resolve_enemy_turns()

    def finish_combat(self) -> CombatOutcome:
        """Wrap up a finished encounter.

        On victory the combat scene's rewards are applied. The session
        then moves to the victory or defeat scene when one is set.

        Raises:
            InvalidStateError: If there is no encounter or it is ongoing.
            SceneNotFoundError: If the follow-up scene does not exist.
            TemplateNotFoundError: If the follow-up scene names an unknown
                enemy.
        """
        encounter = self._require_encounter("finish combat")
        if not encounter.is_combat_over():
            raise InvalidStateError(
                "Cannot finish combat: it is still in progress",
                current_state=encounter.phase.value,
                expected_states=["combat_over"],
            )

        result = encounter.get_combat_result()
        scene = self.current_scene
        rewards: list[Reward] = []
        next_scene_id = None
        if isinstance(scene, CombatScene):
            if result == CombatResult.VICTORY:
                rewards = scene.rewards.as_rewards()
                next_scene_id = scene.victory_scene
            else:
                next_scene_id = scene.defeat_scene
        # Fail before anything is applied
        prepared = self._prepare_scene(next_scene_id) if next_scene_id is not None else None

        if rewards:
            self.reward_applier.apply_rewards(rewards)
        outcome = CombatOutcome(
            result=result,
            rewards=rewards,
            next_scene_id=next_scene_id,
            combat_log=encounter.combat_log,
        )
        self.encounter = None
        logger.info("Combat finished", result=result, next_scene_id=next_scene_id)

        if prepared is not None:
            self._commit_scene(*prepared)
        return outcome

    # -------------------------------------------------------------------------
    # Rest
    # -------------------------------------------------------------------------

    def short_rest(self, location: RestLocation, hit_dice: Sequence[int] = ()) -> RestResult:
        """Take a short rest.

        Raises:
            InvalidStateError: If an encounter is attached.
        """
        self._ensure_no_encounter("rest")
        return self.rest_system.short_rest(self.player, location, hit_dice)

    def long_rest(
        self,
        location: RestLocation,
        spells_to_prepare: Sequence[str] | None = None,
        *,
        available_spells: Sequence[str] | None = None,
    ) -> RestResult:
        """Take a long rest.

        Raises:
            InvalidStateError: If an encounter is attached.
        """
        self._ensure_no_encounter("rest")
        return self.rest_system.long_rest(
            self.player,
            location,
            spells_to_prepare,
            available_spells=available_spells,
        )

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        """Capture the whole session as a plain record."""
        return SessionSnapshot(
            session_id=self.session_id,
            player=self.player.model_copy(deep=True),
            progress=self.progress.model_copy(deep=True),
            current_scene_id=self.current_scene_id,
            encounter=self.encounter.to_snapshot() if self.encounter else None,
        )

    @classmethod
    def restore(
        cls,
        snapshot: SessionSnapshot,
        *,
        repository: SceneRepository,
        dice: DiceRoller,
        settings: Settings | None = None,
    ) -> GameSession:
        """Resume a session from a snapshot.

        When an encounter was attached its participants are restored as
        they were, and the player is the encounter's player.

        Raises:
            SceneNotFoundError: If the current scene is not in the repository.
        """
        settings = settings or get_settings()
        if snapshot.current_scene_id is not None:
            repository.load_scene(snapshot.current_scene_id)

        encounter = None
        player = snapshot.player.model_copy(deep=True)
        if snapshot.encounter is not None:
            encounter = CombatEncounter.from_snapshot(
                snapshot.encounter, dice=dice, settings=settings.combat
            )
            player = encounter.get_player_character()

        session = cls(
            player,
            repository=repository,
            dice=dice,
            progress=snapshot.progress.model_copy(deep=True),
            settings=settings,
            session_id=snapshot.session_id,
        )
        session.current_scene_id = snapshot.current_scene_id
        session.encounter = encounter
        logger.info("Session restored", scene_id=snapshot.current_scene_id, combat=encounter is not None)
        return session


__all__ = [
    "CombatOutcome",
    "SessionSnapshot",
    "GameSession",
]
