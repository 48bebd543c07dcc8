from __future__ import annotations

from typing import Iterable, Optional, Tuple

from moderator.core.models import Player, Team, Winner
from moderator.roles.catalog import role_team


def team_counts(players: Iterable[Player]) -> Tuple[int, int]:
    wolves = 0
    others = 0
    for player in players:
        if not player.alive or player.role is None:
            continue
        if role_team(player.role) == Team.WEREWOLVES:
            wolves += 1
        else:
            others += 1
    return wolves, others


def check_win_condition(players: Iterable[Player]) -> Optional[Winner]:
    wolves, others = team_counts(players)
    # parity is enough for the werewolves
    if wolves >= others:
        return Winner.WEREWOLVES
    if wolves == 0:
        return Winner.VILLAGERS
    return None
