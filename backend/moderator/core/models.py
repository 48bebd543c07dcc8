from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set


class Role(str, Enum):
    WEREWOLF = "werewolf"
    VILLAGER = "villager"
    SEER = "seer"
    DOCTOR = "doctor"
    BODYGUARD = "bodyguard"
    HUNTER = "hunter"
    WITCH = "witch"
    WOLF_CUB = "wolf-cub"
    SPELLCASTER = "spellcaster"


class Team(str, Enum):
    VILLAGE = "village"
    WEREWOLVES = "werewolves"


class Phase(str, Enum):
    SETUP = "setup"
    ROLE_REVEAL = "role-reveal"
    NIGHT = "night"
    DAY = "day"
    RESULT = "result"


class GameMode(str, Enum):
    SYSTEM = "system"
    CARDS = "cards"


class PlayerStatus(str, Enum):
    ALIVE = "alive"
    DEAD = "dead"


class ActionKind(str, Enum):
    KILL = "kill"
    PROTECT = "protect"
    HEAL = "heal"
    POISON = "poison"
    SILENCE = "silence"
    VIEW = "view"


class Winner(str, Enum):
    WEREWOLVES = "werewolves"
    VILLAGERS = "villagers"


class DeathCause(str, Enum):
    WEREWOLF = "werewolf"
    POISON = "poison"
    VOTE = "vote"
    HUNTER = "hunter"


class TimerPhase(str, Enum):
    DAY = "day"
    NIGHT = "night"


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(slots=True)
class Player:
    player_id: str
    name: str
    role: Optional[Role] = None
    status: PlayerStatus = PlayerStatus.ALIVE
    protected: bool = False
    poisoned: bool = False
    silenced: bool = False
    targeted_by: List[str] = field(default_factory=list)

    @property
    def alive(self) -> bool:
        return self.status == PlayerStatus.ALIVE


@dataclass(slots=True)
class NightAction:
    """One submitted night choice. A ``None`` target means the role passed."""

    role_id: Role
    role_name: str
    target_id: Optional[str]
    kind: ActionKind


@dataclass(slots=True)
class PhaseTimer:
    duration: int
    remaining: int
    active: bool = False


@dataclass(slots=True)
class Notice:
    notice_id: int
    level: NoticeLevel
    message: str
    ts: datetime = field(default_factory=datetime.utcnow)


@dataclass(slots=True)
class RoundContext:
    night_no: int = 0
    night_queue: List[Role] = field(default_factory=list)
    night_cursor: int = 0
    night_actions: List[NightAction] = field(default_factory=list)
    eliminated_last_night: List[str] = field(default_factory=list)
    eliminated_today: Optional[str] = None
    deaths_this_round: Dict[str, DeathCause] = field(default_factory=dict)
    pending_hunter_id: Optional[str] = None
    wolf_bonus_kills: int = 0


@dataclass(slots=True)
class GameState:
    players: List[Player] = field(default_factory=list)
    phase: Phase = Phase.SETUP
    mode: GameMode = GameMode.SYSTEM
    winner: Optional[Winner] = None
    custom_roles: Optional[List[Role]] = None
    card_pool: List[Role] = field(default_factory=list)
    revealed_player_ids: Set[str] = field(default_factory=set)
    witch_heal_used: bool = False
    witch_poison_used: bool = False
    round_context: RoundContext = field(default_factory=RoundContext)
    timers: Dict[TimerPhase, PhaseTimer] = field(default_factory=dict)
    action_audit_log: List[Dict[str, Any]] = field(default_factory=list)

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        if not player_id:
            return None
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def alive_players(self) -> List[Player]:
        return [p for p in self.players if p.alive]
