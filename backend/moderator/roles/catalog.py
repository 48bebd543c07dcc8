from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from moderator.core.errors import ValidationError
from moderator.core.models import Role, Team


@dataclass(frozen=True, slots=True)
class RoleDefinition:
    name: str
    description: str
    team: Team
    night_action: Optional[str] = None
    night_priority: Optional[int] = None


# Iteration order matters: it breaks night-priority ties.
ROLE_CATALOG: Dict[Role, RoleDefinition] = {
    Role.WEREWOLF: RoleDefinition(
        name="Werewolf",
        description="Each night, choose a player to eliminate. Win when werewolves equal or outnumber villagers.",
        team=Team.WEREWOLVES,
        night_action="Choose a player to eliminate",
        night_priority=2,
    ),
    Role.VILLAGER: RoleDefinition(
        name="Villager",
        description="You have no special abilities, but must use deduction to identify the werewolves.",
        team=Team.VILLAGE,
    ),
    Role.SEER: RoleDefinition(
        name="Seer",
        description="Each night, you may look at one player's card to learn their role.",
        team=Team.VILLAGE,
        night_action="Choose a player to identify",
        night_priority=1,
    ),
    Role.DOCTOR: RoleDefinition(
        name="Doctor",
        description="Each night, choose one player (including yourself) to protect from elimination.",
        team=Team.VILLAGE,
        night_action="Choose a player to protect",
        night_priority=3,
    ),
    Role.BODYGUARD: RoleDefinition(
        name="Bodyguard",
        description="Each night, choose one player (excluding yourself) to protect from elimination.",
        team=Team.VILLAGE,
        night_action="Choose a player to protect",
        night_priority=3,
    ),
    Role.HUNTER: RoleDefinition(
        name="Hunter",
        description="If you are eliminated, you may immediately eliminate another player.",
        team=Team.VILLAGE,
    ),
    Role.WITCH: RoleDefinition(
        name="Witch",
        description=(
            "You have two potions: one to save a player targeted by werewolves, and one to "
            "eliminate a player. Each can be used once per game."
        ),
        team=Team.VILLAGE,
        night_action="Use save potion or poison potion",
        night_priority=4,
    ),
    Role.WOLF_CUB: RoleDefinition(
        name="Wolf Cub",
        description="Part of the werewolf team. If eliminated, the werewolves get two kills the following night.",
        team=Team.WEREWOLVES,
        night_priority=2,
    ),
    Role.SPELLCASTER: RoleDefinition(
        name="Spellcaster",
        description=(
            "Each night, choose one player to silence during the next day. "
            "They cannot vote or participate in discussions."
        ),
        team=Team.VILLAGE,
        night_action="Choose a player to silence",
        night_priority=5,
    ),
}


def all_role_ids() -> List[Role]:
    return list(ROLE_CATALOG)


def get_role(role: Role) -> RoleDefinition:
    return ROLE_CATALOG[role]


def role_team(role: Role) -> Team:
    return ROLE_CATALOG[role].team


def night_priority(role: Role) -> Optional[int]:
    return ROLE_CATALOG[role].night_priority


def is_werewolf_team(role: Optional[Role]) -> bool:
    return role is not None and ROLE_CATALOG[role].team == Team.WEREWOLVES


def parse_role(value: Union[Role, str]) -> Role:
    if isinstance(value, Role):
        return value
    normalized = str(value).strip().lower().replace("_", "-")
    try:
        return Role(normalized)
    except ValueError as exc:
        raise ValidationError(f"unknown role: {value}") from exc
