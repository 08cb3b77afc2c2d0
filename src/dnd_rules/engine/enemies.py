"""Enemy instantiation from stat block templates."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from dnd_rules.core.exceptions import TemplateNotFoundError
from dnd_rules.core.logging import get_logger
from dnd_rules.data.enemies import ENEMY_TEMPLATES
from dnd_rules.models.entities import Enemy


logger = get_logger(__name__)


class EnemyFactory:
    """Creates fresh Enemy instances from templates.

    Every instance gets its own identifier and full hit points. The
    factory counts the instances it has created so that spawned groups
    can be told apart in logs.
    """

    def __init__(self, templates: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._templates = templates if templates is not None else ENEMY_TEMPLATES
        self._created = 0

    @property
    def instances_created(self) -> int:
        return self._created

    def template_ids(self) -> list[str]:
        return sorted(self._templates)

    def create(self, template_id: str, *, name: str | None = None) -> Enemy:
        """Create one enemy.

        Args:
            template_id: Key of the stat block template.
            name: Display name overriding the template's.

        Returns:
            A new Enemy at full hit points.

        Raises:
            TemplateNotFoundError: If the template id is unknown.
        """
        template = self._templates.get(template_id)
        if template is None:
            raise TemplateNotFoundError(
                f"Unknown enemy template: {template_id}",
                template_id=template_id,
            )

        record = copy.deepcopy(dict(template))
        if name is not None:
            record["name"] = name
        stats = record["combat_stats"]
        stats["current_hit_points"] = stats["max_hit_points"]
        enemy = Enemy.model_validate(record)

        self._created += 1
        logger.debug("Enemy created", template_id=template_id, name=enemy.name, uid=str(enemy.uid))
        return enemy

    def create_many(self, template_id: str, count: int) -> list[Enemy]:
        """Create a group of enemies from one template.

        Members of a group of more than one are numbered ("Bandit 1",
        "Bandit 2").

        Raises:
            TemplateNotFoundError: If the template id is unknown.
            ValueError: If count is less than 1.
        """
        if count < 1:
            raise ValueError(f"count must be at least 1, got {count}")
        if count == 1:
            return [self.create(template_id)]
        base_name = self._templates.get(template_id, {}).get("name", template_id)
        return [self.create(template_id, name=f"{base_name} {i}") for i in range(1, count + 1)]

    def reset_counter(self) -> None:
        self._created = 0


__all__ = ["EnemyFactory"]
