from __future__ import annotations

import copy
import random
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from moderator.config.config_loader import load_role_templates
from moderator.core.errors import RoleCountMismatch
from moderator.core.models import Player, Role
from moderator.roles.catalog import all_role_ids


def _fit_to_count(roles: List[Role], player_count: int) -> List[Role]:
    fitted = list(roles)
    while len(fitted) > player_count:
        if Role.VILLAGER in fitted:
            fitted.remove(Role.VILLAGER)
        else:
            fitted.pop()
    while len(fitted) < player_count:
        fitted.append(Role.VILLAGER)
    return fitted


def recommend_roles(
    player_count: int,
    table: Optional[Mapping[int, Sequence[Role]]] = None,
) -> List[Role]:
    """Balanced role set whose length is always ``player_count``.

    Curated counts come from the role balance table; any other count gets
    one werewolf per three players plus special roles unlocked by size.
    """
    if player_count <= 0:
        return []
    templates = load_role_templates() if table is None else table
    curated = templates.get(player_count)
    if curated is not None:
        return _fit_to_count(list(curated), player_count)

    werewolf_count = max(1, player_count // 3)
    specials: List[Role] = [Role.SEER]
    if player_count > 6:
        specials.append(Role.DOCTOR)
    if player_count > 10:
        specials.append(Role.WITCH)
    if player_count > 12:
        specials.append(Role.BODYGUARD)
    if player_count > 14:
        specials.append(Role.SPELLCASTER)

    villager_count = max(0, player_count - werewolf_count - len(specials))
    roles = [Role.WEREWOLF] * werewolf_count + [Role.VILLAGER] * villager_count + specials
    return _fit_to_count(roles, player_count)


def assign_roles(
    players: Sequence[Player],
    roles: Sequence[Role],
    rng: Optional[random.Random] = None,
) -> List[Player]:
    if len(roles) != len(players):
        raise RoleCountMismatch(expected=len(players), got=len(roles))

    tokens = list(roles)
    (rng or random.Random()).shuffle(tokens)
    assigned = copy.deepcopy(list(players))
    for player, role in zip(assigned, tokens):
        player.role = role
    return assigned


def count_roles(roles: Sequence[Role]) -> Dict[Role, int]:
    counts: Dict[Role, int] = {}
    for role in all_role_ids():
        n = sum(1 for r in roles if r == role)
        if n:
            counts[role] = n
    return counts


@dataclass(slots=True)
class RoleSelection:
    """Custom role list being edited against a fixed player count."""

    capacity: int
    roles: List[Role] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.roles)

    @property
    def is_complete(self) -> bool:
        return self.total == self.capacity

    def counts(self) -> Dict[Role, int]:
        return count_roles(self.roles)

    def add(self, role: Role) -> None:
        if self.total >= self.capacity:
            if Role.VILLAGER in self.roles:
                self.roles.remove(Role.VILLAGER)
            elif self.roles:
                self.roles.pop(0)
        self.roles.append(role)

    def remove(self, role: Role) -> bool:
        if role not in self.roles:
            return False
        self.roles.remove(role)
        if self.total < self.capacity:
            self.roles.append(Role.VILLAGER)
        return True

    def reconciled(self) -> List[Role]:
        return _fit_to_count(self.roles, self.capacity)
