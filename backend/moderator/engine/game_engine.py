from __future__ import annotations

import functools
import logging
import random
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from moderator.config.config_validator import ConfigValidator
from moderator.core.errors import LookupMiss, RoleCountMismatch, ValidationError
from moderator.core.game_config import GameConfig, TimerSettings, default_game_config
from moderator.core.models import (
    ActionKind,
    DeathCause,
    GameMode,
    GameState,
    NightAction,
    Notice,
    NoticeLevel,
    Phase,
    Player,
    PlayerStatus,
    Role,
    RoundContext,
    TimerPhase,
    Winner,
)
from moderator.engine import timers
from moderator.engine.phase_orchestrator import PhaseOrchestrator
from moderator.engine.resolver import resolve_night
from moderator.engine.role_assignment import RoleSelection, assign_roles, count_roles, recommend_roles
from moderator.engine.states import STATE_REGISTRY
from moderator.engine.win_condition import check_win_condition, team_counts
from moderator.roles.catalog import get_role, parse_role
from moderator.roles.skills import SKILL_REGISTRY, build_night_action

logger = logging.getLogger(__name__)

MAX_NOTICES = 200


def _reported(default: Any = False) -> Callable:
    """Turn expected failures into notices instead of exceptions.

    ValidationError becomes an error notice; LookupMiss is dropped silently.
    Either way the caller gets ``default`` back.
    """

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(self: "ModeratorEngine", *args: Any, **kwargs: Any) -> Any:
            try:
                return fn(self, *args, **kwargs)
            except ValidationError as exc:
                logger.info("%s rejected: %s", fn.__name__, exc)
                self._notify(NoticeLevel.ERROR, str(exc))
                return default
            except LookupMiss as exc:
                logger.debug("%s ignored stale reference: %s", fn.__name__, exc)
                return default

        return wrapper

    return decorator


class ModeratorEngine:
    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or default_game_config()
        self.rng = rng or random.Random()
        self.timer_settings = TimerSettings(day=self.config.timers.day, night=self.config.timers.night)
        self.state = GameState(timers=timers.new_timers(self.timer_settings))
        self.role_selection: Optional[RoleSelection] = None
        self.notices: List[Notice] = []
        self._notice_counter = 0
        self.hooks: Dict[str, List[Callable[[Any], None]]] = {
            "on_phase_start": [],
            "on_player_death": [],
            "on_notice": [],
        }

    def register_hook(self, hook_name: str, callback: Callable[[Any], None]) -> None:
        if hook_name not in self.hooks:
            self.hooks[hook_name] = []
        self.hooks[hook_name].append(callback)

    def _trigger_hook(self, hook_name: str, payload: Any) -> None:
        for callback in self.hooks.get(hook_name, []):
            callback(payload)

    # ------------------------------------------------------------------
    # queries

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def players(self) -> List[Player]:
        return self.state.players

    @property
    def winner(self) -> Optional[Winner]:
        return self.state.winner

    @property
    def eliminated_last_night(self) -> List[str]:
        return list(self.state.round_context.eliminated_last_night)

    @property
    def night_actions(self) -> List[NightAction]:
        return list(self.state.round_context.night_actions)

    @property
    def night_queue(self) -> List[Role]:
        return list(self.state.round_context.night_queue)

    @property
    def current_night_role(self) -> Optional[Role]:
        ctx = self.state.round_context
        if self.state.phase != Phase.NIGHT or ctx.night_cursor >= len(ctx.night_queue):
            return None
        return ctx.night_queue[ctx.night_cursor]

    @property
    def night_progress(self) -> Tuple[int, int]:
        ctx = self.state.round_context
        return min(ctx.night_cursor, len(ctx.night_queue)), len(ctx.night_queue)

    @property
    def selected_roles(self) -> List[Role]:
        if self.state.custom_roles is not None:
            return list(self.state.custom_roles)
        return recommend_roles(len(self.state.players), self.config.role_templates or None)

    @property
    def selected_role_total(self) -> int:
        return len(self.selected_roles)

    @property
    def all_roles_revealed(self) -> bool:
        players = self.state.players
        return bool(players) and all(p.player_id in self.state.revealed_player_ids for p in players)

    def available_cards(self) -> List[Role]:
        remaining = list(self.state.card_pool)
        for player in self.state.players:
            if player.player_id in self.state.revealed_player_ids and player.role in remaining:
                remaining.remove(player.role)
        return remaining

    def recommend_roles(self, count: Optional[int] = None) -> List[Role]:
        n = len(self.state.players) if count is None else count
        return recommend_roles(n, self.config.role_templates or None)

    def notices_since(self, notice_id: int) -> List[Notice]:
        return [n for n in self.notices if n.notice_id > notice_id]

    @property
    def last_notice_id(self) -> int:
        return self._notice_counter

    # ------------------------------------------------------------------
    # setup

    @_reported()
    def add_player(self, name: str) -> bool:
        self._require_phase(Phase.SETUP, "players can only be added during setup")
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Player name cannot be empty")
        if any(p.name.lower() == cleaned.lower() for p in self.state.players):
            raise ValidationError(f'Player "{cleaned}" already exists')

        player = Player(player_id=uuid.uuid4().hex, name=cleaned)
        self.state.players.append(player)
        self._audit("add_player", player.player_id, {"name": cleaned})
        self._notify(NoticeLevel.SUCCESS, f"Added player: {cleaned}")
        return True

    @_reported()
    def remove_player(self, player_id: str) -> bool:
        self._require_phase(Phase.SETUP, "players can only be removed during setup")
        player = self._must_get_player(player_id)
        self.state.players.remove(player)
        self.state.revealed_player_ids.discard(player_id)
        self._audit("remove_player", player_id, {"name": player.name})
        self._notify(NoticeLevel.INFO, f"Removed player: {player.name}")
        return True

    @_reported()
    def set_game_mode(self, mode: Union[GameMode, str]) -> bool:
        self._require_phase(Phase.SETUP, "the game mode can only change during setup")
        try:
            parsed = GameMode(mode)
        except ValueError as exc:
            raise ValidationError(f"unknown game mode: {mode}") from exc
        self.state.mode = parsed
        self._audit("set_game_mode", "moderator", {"mode": parsed.value})
        return True

    @_reported()
    def set_custom_roles(self, roles: Sequence[Union[Role, str]]) -> bool:
        self._require_phase(Phase.SETUP, "roles can only be configured during setup")
        self._store_custom_roles([parse_role(r) for r in roles])
        return True

    @_reported()
    def clear_custom_roles(self) -> bool:
        self._require_phase(Phase.SETUP, "roles can only be configured during setup")
        self.state.custom_roles = None
        self._audit("clear_custom_roles", "moderator", {})
        return True

    @_reported()
    def begin_role_customization(self) -> bool:
        self._require_phase(Phase.SETUP, "roles can only be configured during setup")
        self.role_selection = RoleSelection(capacity=len(self.state.players), roles=self.selected_roles)
        return True

    @_reported()
    def add_selected_role(self, role: Union[Role, str]) -> bool:
        selection = self._must_get_selection()
        selection.add(parse_role(role))
        return True

    @_reported()
    def remove_selected_role(self, role: Union[Role, str]) -> bool:
        selection = self._must_get_selection()
        parsed = parse_role(role)
        if not selection.remove(parsed):
            raise ValidationError(f"{get_role(parsed).name} is not in the selection")
        return True

    @_reported()
    def apply_role_selection(self) -> bool:
        selection = self._must_get_selection()
        selection.capacity = len(self.state.players)
        self._store_custom_roles(selection.reconciled())
        self.role_selection = None
        return True

    @_reported()
    def cancel_role_customization(self) -> bool:
        self._must_get_selection()
        self.role_selection = None
        return True

    @_reported()
    def assign_roles_and_start(self) -> bool:
        self._require_phase(Phase.SETUP, "the game has already started")
        player_count = len(self.state.players)
        if player_count < self.config.min_players:
            raise ValidationError(f"You need at least {self.config.min_players} players to start the game")
        roles = self.selected_roles
        if len(roles) != player_count:
            raise RoleCountMismatch(expected=player_count, got=len(roles))
        self._require_transition(Phase.ROLE_REVEAL)

        if self.state.mode == GameMode.SYSTEM:
            self.state.players = assign_roles(self.state.players, roles, self.rng)
            self.state.card_pool = []
        else:
            for player in self.state.players:
                player.role = None
            self.state.card_pool = list(roles)

        self.state.revealed_player_ids = set()
        self.state.round_context = RoundContext()
        self.state.winner = None
        self.state.witch_heal_used = False
        self.state.witch_poison_used = False
        self.role_selection = None
        self._audit("start_game", "moderator", {"mode": self.state.mode.value, "roles": [r.value for r in roles]})
        self._goto_phase(Phase.ROLE_REVEAL)
        self._notify(NoticeLevel.INFO, "Time to reveal roles to players")
        return True

    # ------------------------------------------------------------------
    # role reveal

    @_reported(default=None)
    def view_role(self, player_id: str) -> Optional[Role]:
        self._require_phase(Phase.ROLE_REVEAL, "roles are only revealed before the first night")
        if self.state.mode != GameMode.SYSTEM:
            raise ValidationError("in cards mode each player selects the role on their card")
        player = self._must_get_player(player_id)
        if player.player_id in self.state.revealed_player_ids:
            raise ValidationError("You've already viewed this role")
        if player.role is None:
            raise ValidationError("Role not found")
        self.state.revealed_player_ids.add(player.player_id)
        self._audit("view_role", player.player_id, {})
        return player.role

    @_reported()
    def update_player_role(self, player_id: str, role: Union[Role, str]) -> bool:
        self._require_phase(
            (Phase.SETUP, Phase.ROLE_REVEAL),
            "roles are fixed once the night begins",
        )
        player = self._must_get_player(player_id)
        parsed = parse_role(role)

        if self.state.phase == Phase.ROLE_REVEAL and self.state.mode == GameMode.CARDS:
            if player.player_id in self.state.revealed_player_ids:
                raise ValidationError(f"{player.name} has already selected a role")
            if parsed not in self.available_cards():
                raise ValidationError(f"No {get_role(parsed).name} card left in the pool")
            player.role = parsed
            self.state.revealed_player_ids.add(player.player_id)
            self._notify(NoticeLevel.SUCCESS, "Role has been set")
        else:
            player.role = parsed

        self._audit("update_player_role", player.player_id, {"role": parsed.value})
        return True

    # ------------------------------------------------------------------
    # night

    @_reported()
    def start_night_phase(self) -> bool:
        self._require_transition(Phase.NIGHT)
        if self.state.phase == Phase.ROLE_REVEAL:
            if not self.all_roles_revealed:
                raise ValidationError("Every player must see their role before night falls")
            if any(p.role is None for p in self.state.players):
                raise ValidationError("Every player needs a role before night falls")

        for player in self.state.players:
            player.silenced = False

        ctx = self.state.round_context
        ctx.night_no += 1
        ctx.night_actions = []
        ctx.night_cursor = 0
        ctx.eliminated_today = None
        ctx.deaths_this_round = {}
        ctx.pending_hunter_id = None
        ctx.night_queue = PhaseOrchestrator(
            players=self.state.players,
            wolf_bonus_kills=ctx.wolf_bonus_kills,
        ).generate_night_queue()
        ctx.wolf_bonus_kills = 0

        day_timer = self.state.timers[TimerPhase.DAY]
        night_timer = self.state.timers[TimerPhase.NIGHT]
        timers.stop(day_timer)
        timers.reset(night_timer, self.timer_settings.night)

        self._goto_phase(Phase.NIGHT)
        self._notify(NoticeLevel.INFO, "Night falls on the village...")

        if not ctx.night_queue:
            self._resolve_night()
        else:
            timers.start(night_timer)
        return True

    @_reported()
    def perform_night_action(self, action: NightAction) -> bool:
        self._require_phase(Phase.NIGHT, "night actions are only accepted at night")
        current = self.current_night_role
        if current is None:
            raise ValidationError("No role is waiting to act")
        if action.role_id != current:
            raise ValidationError(
                f"It is the {get_role(current).name}'s turn, not the {get_role(action.role_id).name}'s"
            )
        skill = SKILL_REGISTRY[current]
        skill.validate(self.state, action, self.config.rules)

        record = NightAction(
            role_id=action.role_id,
            role_name=action.role_name or get_role(action.role_id).name,
            target_id=action.target_id or None,
            kind=action.kind,
        )
        skill.apply(self.state, record)
        ctx = self.state.round_context
        ctx.night_actions.append(record)
        ctx.night_cursor += 1
        self._audit(
            "night_action",
            record.role_id.value,
            {"kind": record.kind.value, "target": record.target_id, "night": ctx.night_no},
        )
        self._notify(NoticeLevel.INFO, f"{record.role_name} action completed")

        if ctx.night_cursor >= len(ctx.night_queue):
            self._resolve_night()
        return True

    @_reported(default=None)
    def build_night_action(
        self,
        role: Union[Role, str],
        target_id: Optional[str],
        kind: Optional[Union[ActionKind, str]] = None,
    ) -> Optional[NightAction]:
        parsed_kind = None
        if kind is not None:
            try:
                parsed_kind = ActionKind(kind)
            except ValueError as exc:
                raise ValidationError(f"unknown action kind: {kind}") from exc
        return build_night_action(parse_role(role), target_id, parsed_kind)

    @_reported()
    def skip_night_role(self) -> bool:
        self._require_phase(Phase.NIGHT, "night actions are only accepted at night")
        current = self.current_night_role
        if current is None:
            raise ValidationError("No role is waiting to act")
        ctx = self.state.round_context
        ctx.night_cursor += 1
        self._audit("night_skip", current.value, {"night": ctx.night_no})

        if ctx.night_cursor >= len(ctx.night_queue):
            self._resolve_night()
        return True

    @_reported()
    def complete_night_phase(self) -> bool:
        self._require_phase(Phase.NIGHT, "There is no night to resolve")
        self._resolve_night()
        return True

    def _resolve_night(self) -> None:
        ctx = self.state.round_context
        outcome = resolve_night(self.state.players, ctx.night_actions)
        self.state.players = outcome.players
        ctx.night_cursor = len(ctx.night_queue)
        ctx.eliminated_last_night = list(outcome.eliminated_ids)
        ctx.deaths_this_round = dict(outcome.causes)
        timers.stop(self.state.timers[TimerPhase.NIGHT])

        for player_id in outcome.eliminated_ids:
            self._handle_death(self._must_get_player(player_id), outcome.causes[player_id])

        if self._check_and_finalize_winner():
            return
        self._goto_phase(Phase.DAY)
        self._notify(NoticeLevel.INFO, "Night phase is complete. The village awakens...")

    # ------------------------------------------------------------------
    # day

    @_reported()
    def start_day_phase(self) -> bool:
        self._require_phase(Phase.DAY, "the day has not begun")
        timers.stop(self.state.timers[TimerPhase.NIGHT])
        timers.start(self.state.timers[TimerPhase.DAY])
        self._audit("start_day", "moderator", {"night": self.state.round_context.night_no})
        return True

    @_reported()
    def eliminate_player(self, player_id: str) -> bool:
        self._require_phase(Phase.DAY, "players can only be voted out during the day")
        player = self._must_get_player(player_id)
        if not player.alive:
            raise ValidationError(f"{player.name} is already dead")
        ctx = self.state.round_context
        if self.config.rules.one_elimination_per_day and ctx.eliminated_today:
            raise ValidationError("The village has already eliminated someone today")

        player.status = PlayerStatus.DEAD
        ctx.eliminated_today = player.player_id
        self._notify(NoticeLevel.WARNING, f"{player.name} has been eliminated by the village")
        self._handle_death(player, DeathCause.VOTE)
        self._check_and_finalize_winner()
        return True

    @_reported()
    def hunter_shoot(self, target_id: str) -> bool:
        self._require_phase(Phase.DAY, "the hunter can only shoot during the day")
        ctx = self.state.round_context
        if ctx.pending_hunter_id is None:
            raise ValidationError("No hunter is waiting to shoot")
        target = self._must_get_player(target_id)
        if not target.alive:
            raise ValidationError(f"{target.name} is already dead")

        hunter_id = ctx.pending_hunter_id
        ctx.pending_hunter_id = None
        target.status = PlayerStatus.DEAD
        self._audit("hunter_shot", hunter_id, {"target": target.player_id})
        self._notify(NoticeLevel.WARNING, f"{target.name} has been shot by the Hunter")
        self._handle_death(target, DeathCause.HUNTER)
        self._check_and_finalize_winner()
        return True

    # ------------------------------------------------------------------
    # result / reset

    @_reported()
    def reset_game(self) -> bool:
        players = [Player(player_id=p.player_id, name=p.name) for p in self.state.players]
        self.state = GameState(players=players, timers=timers.new_timers(self.timer_settings))
        self.role_selection = None
        self._audit("reset_game", "moderator", {})
        logger.info("game reset with %d players", len(players))
        self._trigger_hook("on_phase_start", self.state)
        self._notify(NoticeLevel.INFO, "Game has been reset")
        return True

    # ------------------------------------------------------------------
    # timers

    @_reported()
    def start_timer(self, phase: Union[TimerPhase, str]) -> bool:
        which = self._parse_timer_phase(phase)
        other = TimerPhase.NIGHT if which == TimerPhase.DAY else TimerPhase.DAY
        timers.stop(self.state.timers[other])
        timers.start(self.state.timers[which])
        return True

    @_reported()
    def stop_timer(self, phase: Union[TimerPhase, str]) -> bool:
        timers.stop(self.state.timers[self._parse_timer_phase(phase)])
        return True

    @_reported()
    def reset_timer(self, phase: Union[TimerPhase, str]) -> bool:
        which = self._parse_timer_phase(phase)
        timers.reset(self.state.timers[which], self._timer_setting(which))
        return True

    @_reported()
    def update_timer_settings(self, day: Optional[int] = None, night: Optional[int] = None) -> bool:
        updates: Dict[TimerPhase, int] = {}
        if day is not None:
            updates[TimerPhase.DAY] = ConfigValidator.validate_timer("day", day)
        if night is not None:
            updates[TimerPhase.NIGHT] = ConfigValidator.validate_timer("night", night)

        for which, seconds in updates.items():
            if which == TimerPhase.DAY:
                self.timer_settings.day = seconds
            else:
                self.timer_settings.night = seconds
            timer = self.state.timers[which]
            timer.duration = seconds
            if not timer.active:
                timer.remaining = seconds
        return True

    def tick(self) -> bool:
        """Advance whichever timer is running by one second."""
        ticked = False
        for which, timer in self.state.timers.items():
            if not timer.active:
                continue
            ticked = True
            if timers.tick(timer):
                label = "Day" if which == TimerPhase.DAY else "Night"
                self._notify(NoticeLevel.WARNING, f"{label} phase time is up!")
        return ticked

    def _timer_setting(self, which: TimerPhase) -> int:
        return self.timer_settings.day if which == TimerPhase.DAY else self.timer_settings.night

    @staticmethod
    def _parse_timer_phase(phase: Union[TimerPhase, str]) -> TimerPhase:
        try:
            return TimerPhase(phase)
        except ValueError as exc:
            raise ValidationError(f"unknown timer: {phase}") from exc

    # ------------------------------------------------------------------
    # internals

    def _store_custom_roles(self, roles: List[Role]) -> None:
        if len(roles) != len(self.state.players):
            raise RoleCountMismatch(expected=len(self.state.players), got=len(roles))
        self.state.custom_roles = roles
        self._audit("set_custom_roles", "moderator", {"roles": [r.value for r in roles]})
        self._notify(NoticeLevel.SUCCESS, "Custom roles have been set")

    def _must_get_selection(self) -> RoleSelection:
        self._require_phase(Phase.SETUP, "roles can only be configured during setup")
        if self.role_selection is None:
            raise ValidationError("role customization has not been started")
        return self.role_selection

    def _handle_death(self, player: Player, cause: DeathCause) -> None:
        ctx = self.state.round_context
        logger.info("player %s (%s) died: %s", player.name, player.role.value if player.role else None, cause.value)
        self._audit("death", "system", {"player_id": player.player_id, "cause": cause.value})
        self._trigger_hook("on_player_death", player)

        if player.role == Role.WOLF_CUB:
            ctx.wolf_bonus_kills += 1
            self._notify(NoticeLevel.INFO, "The Wolf Cub has fallen: the werewolves get two kills next night")
        elif player.role == Role.HUNTER:
            if cause == DeathCause.POISON and self.config.rules.hunter_cannot_shoot_if_poisoned:
                return
            ctx.pending_hunter_id = player.player_id
            self._notify(NoticeLevel.INFO, "The Hunter can eliminate one more player before dying")

    def _check_and_finalize_winner(self) -> Optional[Winner]:
        winner = check_win_condition(self.state.players)
        if winner is None:
            return None
        self.state.winner = winner
        self.state.round_context.pending_hunter_id = None
        for timer in self.state.timers.values():
            timers.stop(timer)
        self._goto_phase(Phase.RESULT)
        self._notify(NoticeLevel.SUCCESS, f"The {winner.value} win!")
        return winner

    def _require_phase(self, phases: Union[Phase, Sequence[Phase]], message: str) -> None:
        allowed = (phases,) if isinstance(phases, Phase) else tuple(phases)
        if self.state.phase not in allowed:
            raise ValidationError(message)

    def _require_transition(self, target: Phase) -> None:
        if not STATE_REGISTRY[self.state.phase].can_transition_to(target):
            raise ValidationError(f"cannot move from {self.state.phase.value} to {target.value}")

    def _goto_phase(self, phase: Phase) -> None:
        self._require_transition(phase)
        self.state.phase = phase
        logger.info("phase -> %s", phase.value)
        self._audit("phase_change", "system", {"phase": phase.value})
        self._trigger_hook("on_phase_start", self.state)

    def _notify(self, level: NoticeLevel, message: str) -> Notice:
        self._notice_counter += 1
        notice = Notice(notice_id=self._notice_counter, level=level, message=message)
        self.notices.append(notice)
        if len(self.notices) > MAX_NOTICES:
            del self.notices[:-MAX_NOTICES]
        self._trigger_hook("on_notice", notice)
        return notice

    def _audit(self, event_type: str, actor_id: str, payload: dict) -> None:
        self.state.action_audit_log.append(
            {
                "ts": datetime.utcnow().isoformat(),
                "event_type": event_type,
                "actor_id": actor_id,
                "payload": payload,
            }
        )

    def _must_get_player(self, player_id: Optional[str]) -> Player:
        player = self.state.get_player(player_id)
        if not player:
            raise LookupMiss(f"player not found: {player_id}")
        return player

    def public_state(self, view: str = "moderator") -> dict:
        moderator_view = view == "moderator"
        ctx = self.state.round_context
        wolves, others = team_counts(self.state.players)

        def _role(player: Player) -> Optional[str]:
            if player.role is None:
                return None
            if moderator_view or not player.alive or self.state.phase == Phase.RESULT:
                return player.role.value
            return None

        players = []
        for p in self.state.players:
            row = {
                "player_id": p.player_id,
                "name": p.name,
                "role": _role(p),
                "status": p.status.value,
                "alive": p.alive,
                "silenced": p.silenced,
                "revealed": p.player_id in self.state.revealed_player_ids,
            }
            if moderator_view:
                row.update(
                    {
                        "protected": p.protected,
                        "poisoned": p.poisoned,
                        "targeted_by": list(p.targeted_by),
                    }
                )
            players.append(row)

        state = {
            "phase": self.state.phase.value,
            "mode": self.state.mode.value,
            "winner": self.state.winner.value if self.state.winner else None,
            "night_no": ctx.night_no,
            "players": players,
            "eliminated_last_night": list(ctx.eliminated_last_night),
            "eliminated_today": ctx.eliminated_today,
            "pending_hunter_id": ctx.pending_hunter_id,
            "current_night_role": self.current_night_role.value if self.current_night_role else None,
            "night_progress": {"step": ctx.night_cursor, "total": len(ctx.night_queue)},
            "all_roles_revealed": self.all_roles_revealed,
            "timers": {
                which.value: {"duration": t.duration, "remaining": t.remaining, "active": t.active}
                for which, t in self.state.timers.items()
            },
        }
        if moderator_view:
            selection = self.role_selection
            state.update(
                {
                    "night_queue": [r.value for r in ctx.night_queue],
                    "night_actions": [
                        {
                            "role_id": a.role_id.value,
                            "role_name": a.role_name,
                            "target_id": a.target_id,
                            "kind": a.kind.value,
                        }
                        for a in ctx.night_actions
                    ],
                    "deaths_this_round": {pid: cause.value for pid, cause in ctx.deaths_this_round.items()},
                    "team_counts": {"werewolves": wolves, "village": others},
                    "witch": {"heal_used": self.state.witch_heal_used, "poison_used": self.state.witch_poison_used},
                    "roles": {
                        "custom": self.state.custom_roles is not None,
                        "selected": [r.value for r in self.selected_roles],
                        "total": self.selected_role_total,
                        "player_count": len(self.state.players),
                        "selection": None
                        if selection is None
                        else {
                            "roles": [r.value for r in selection.roles],
                            "counts": {r.value: c for r, c in selection.counts().items()},
                            "total": selection.total,
                            "capacity": selection.capacity,
                        },
                    },
                    "card_pool": {r.value: c for r, c in count_roles(self.state.card_pool).items()},
                    "available_cards": [r.value for r in self.available_cards()],
                    "warnings": list(self.config.warnings),
                }
            )
        return state
