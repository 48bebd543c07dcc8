from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from moderator.core.models import Player, Role
from moderator.roles.catalog import all_role_ids, night_priority


def get_night_action_order(present_role_ids: Iterable[Role]) -> List[Role]:
    present = set(present_role_ids)
    acting = [role for role in all_role_ids() if night_priority(role) is not None and role in present]
    # sorted() is stable, so equal priorities keep catalog order
    return sorted(acting, key=night_priority)


@dataclass(slots=True)
class PhaseOrchestrator:
    players: Sequence[Player]
    wolf_bonus_kills: int = 0

    def present_roles(self) -> List[Role]:
        return [p.role for p in self.players if p.alive and p.role is not None]

    def generate_night_queue(self) -> List[Role]:
        queue = get_night_action_order(self.present_roles())
        if self.wolf_bonus_kills > 0 and Role.WEREWOLF in queue:
            idx = queue.index(Role.WEREWOLF)
            queue[idx + 1:idx + 1] = [Role.WEREWOLF] * self.wolf_bonus_kills
        return queue
