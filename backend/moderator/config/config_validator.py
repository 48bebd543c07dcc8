from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Sequence

from moderator.core.errors import ValidationError
from moderator.core.models import Role
from moderator.roles.catalog import is_werewolf_team, parse_role


@dataclass(slots=True)
class ValidationResult:
    ok: bool
    warnings: List[str]


class ConfigValidator:
    MIN_PLAYER_COUNT = 1

    @staticmethod
    def normalize_roles(roles: Sequence[Any]) -> List[Role]:
        return [parse_role(r) for r in roles]

    @classmethod
    def validate_template(cls, player_count: int, roles: Sequence[Any]) -> ValidationResult:
        if player_count < cls.MIN_PLAYER_COUNT:
            raise ValidationError(f"player_count must be >= {cls.MIN_PLAYER_COUNT}")

        normalized = cls.normalize_roles(roles)
        if len(normalized) != player_count:
            raise ValidationError(f"role sum mismatch: expected {player_count}, got {len(normalized)}")

        wolves = sum(1 for r in normalized if is_werewolf_team(r))
        if wolves < 1:
            raise ValidationError("werewolf count must be >= 1")

        warnings: List[str] = []
        if wolves >= player_count - wolves:
            warnings.append(f"{player_count} players: werewolves start at parity; game ends immediately")
        elif wolves / player_count > 0.40:
            warnings.append(f"{player_count} players: werewolf ratio above 40% heavily favors werewolves")
        if Role.SEER not in normalized:
            warnings.append(f"{player_count} players: no seer in template")

        return ValidationResult(ok=True, warnings=warnings)

    @staticmethod
    def validate_timer(name: str, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValidationError(f"{name} must be a positive number of seconds")
        return value
