"""Campaign progress outside the character sheet.

Gold, inventory, story flags, companions and relationships accumulate
here as rewards are applied. Experience lives on the character.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


FlagValue = bool | int | str


class PlayerProgress(BaseModel):
    """Everything the player has earned besides experience."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    gold: int = Field(default=0, ge=0)
    inventory: list[str] = Field(default_factory=list)
    flags: dict[str, FlagValue] = Field(default_factory=dict)
    companions: list[str] = Field(default_factory=list)
    relationships: dict[str, int] = Field(default_factory=dict)

    def has_item(self, item_id: str) -> bool:
        return item_id in self.inventory

    def has_companion(self, companion_id: str) -> bool:
        return companion_id in self.companions

    def get_flag(self, name: str) -> FlagValue | None:
        return self.flags.get(name)


__all__ = ["FlagValue", "PlayerProgress"]
