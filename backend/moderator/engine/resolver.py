"""Night resolution.

Turns one night's batch of submitted actions into eliminations. The passes
run in a fixed order: protection first, then werewolf kills (blocked by
protection), then witch poison (never blocked), then silences. Inputs are
never mutated, so resolving the same batch twice gives the same outcome.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from moderator.core.models import ActionKind, DeathCause, NightAction, Player, PlayerStatus, Role

logger = logging.getLogger(__name__)

PROTECTION_PASS = 0
KILL_PASS = 1
POISON_PASS = 2
EFFECT_PASS = 3


@dataclass(slots=True)
class NightOutcome:
    players: List[Player]
    eliminated_ids: List[str] = field(default_factory=list)
    causes: Dict[str, DeathCause] = field(default_factory=dict)


def _pass_for(kind: ActionKind) -> int:
    if kind in (ActionKind.PROTECT, ActionKind.HEAL):
        return PROTECTION_PASS
    if kind == ActionKind.KILL:
        return KILL_PASS
    if kind == ActionKind.POISON:
        return POISON_PASS
    if kind in (ActionKind.SILENCE, ActionKind.VIEW):
        return EFFECT_PASS
    raise ValueError(f"unhandled action kind: {kind!r}")


def _eliminate(outcome: NightOutcome, player_id: str, cause: DeathCause) -> None:
    if player_id not in outcome.causes:
        outcome.eliminated_ids.append(player_id)
        outcome.causes[player_id] = cause


def resolve_night(players: Sequence[Player], actions: Sequence[NightAction]) -> NightOutcome:
    resolved = copy.deepcopy(list(players))
    by_id = {p.player_id: p for p in resolved}
    outcome = NightOutcome(players=resolved)

    for player in resolved:
        if player.alive:
            player.protected = False
            player.poisoned = False
            player.targeted_by = []

    passes: Dict[int, List[NightAction]] = {PROTECTION_PASS: [], KILL_PASS: [], POISON_PASS: [], EFFECT_PASS: []}
    for action in actions:
        passes[_pass_for(action.kind)].append(action)

    def _target(action: NightAction):
        if action.target_id is None:
            return None
        target = by_id.get(action.target_id)
        if target is None:
            logger.debug("night action %s targets unknown player %s", action.role_id, action.target_id)
            return None
        if not target.alive:
            return None
        return target

    for action in passes[PROTECTION_PASS]:
        target = _target(action)
        if target is not None:
            target.protected = True

    for action in passes[KILL_PASS]:
        target = _target(action)
        if target is None or action.role_id != Role.WEREWOLF:
            continue
        target.targeted_by.append(action.role_id.value)
        if not target.protected:
            _eliminate(outcome, target.player_id, DeathCause.WEREWOLF)

    for action in passes[POISON_PASS]:
        target = _target(action)
        if target is None or action.role_id != Role.WITCH:
            continue
        target.poisoned = True
        _eliminate(outcome, target.player_id, DeathCause.POISON)

    for action in passes[EFFECT_PASS]:
        target = _target(action)
        if target is None:
            continue
        if action.kind == ActionKind.SILENCE and action.role_id == Role.SPELLCASTER:
            target.silenced = True

    for player_id in outcome.eliminated_ids:
        by_id[player_id].status = PlayerStatus.DEAD

    return outcome
