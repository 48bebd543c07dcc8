from __future__ import annotations

from abc import ABC, abstractmethod
from typing import FrozenSet

from moderator.core.game_config import RuleConfig
from moderator.core.models import ActionKind, GameState, NightAction, Role


class SkillStrategy(ABC):
    role: Role
    allowed_kinds: FrozenSet[ActionKind]
    default_kind: ActionKind

    @abstractmethod
    def validate(self, state: GameState, action: NightAction, rules: RuleConfig) -> None:
        pass

    def apply(self, state: GameState, action: NightAction) -> None:
        """Bookkeeping once the action is accepted into the night batch."""
