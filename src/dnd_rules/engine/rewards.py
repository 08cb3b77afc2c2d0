"""Reward application.

The scene orchestrator hands the rewards of a resolved choice to a
collaborator as an ordered list. Anything with an ``apply_rewards``
method can play that role; ``ProgressRewardApplier`` is the default and
writes to the character (experience) and to PlayerProgress (everything
else).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from dnd_rules.core.logging import get_logger
from dnd_rules.models.entities import PlayerCharacter
from dnd_rules.models.enums import RewardKind
from dnd_rules.models.progress import PlayerProgress
from dnd_rules.models.scenes import Reward


logger = get_logger(__name__)


@runtime_checkable
class RewardApplier(Protocol):
    """Receives the ordered rewards of a resolved choice or combat."""

    def apply_rewards(self, rewards: Sequence[Reward]) -> None: ...


class ProgressRewardApplier:
    """Applies rewards to a player character and their progress.

    Attributes:
        player: Character receiving experience.
        progress: Record receiving gold, items, flags, companions and
            relationship changes.
    """

    def __init__(self, player: PlayerCharacter, progress: PlayerProgress) -> None:
        self.player = player
        self.progress = progress

    def apply_rewards(self, rewards: Sequence[Reward]) -> None:
        """Apply rewards in the order given."""
        for reward in rewards:
            self.apply_reward(reward)

    def apply_reward(self, reward: Reward) -> None:
        progress = self.progress
        if reward.type == RewardKind.XP:
            self.player.experience += reward.amount or 0
        elif reward.type == RewardKind.GOLD:
            progress.gold = max(0, progress.gold + (reward.amount or 0))
        elif reward.type == RewardKind.ITEM:
            progress.inventory = [*progress.inventory, reward.item_id]
        elif reward.type == RewardKind.FLAG:
            value = True if reward.flag_value is None else reward.flag_value
            progress.flags = {**progress.flags, reward.flag_name: value}
        elif reward.type == RewardKind.COMPANION:
            if reward.companion_id not in progress.companions:
                progress.companions = [*progress.companions, reward.companion_id]
        elif reward.type == RewardKind.RELATIONSHIP:
            current = progress.relationships.get(reward.companion_id, 0)
            progress.relationships = {
                **progress.relationships,
                reward.companion_id: current + (reward.relationship_change or 0),
            }

        logger.info(
            "Reward applied",
            type=reward.type,
            amount=reward.amount,
            item_id=reward.item_id,
            flag=reward.flag_name,
            companion=reward.companion_id,
            description=reward.description,
        )


__all__ = ["RewardApplier", "ProgressRewardApplier"]
