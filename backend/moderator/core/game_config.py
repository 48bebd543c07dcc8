import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from moderator.config.config_loader import load_role_balance
from moderator.config.config_validator import ConfigValidator
from moderator.core.models import Role

DAY_SECONDS_ENV = "MODERATOR_DAY_SECONDS"
NIGHT_SECONDS_ENV = "MODERATOR_NIGHT_SECONDS"


@dataclass(slots=True)
class TimerSettings:
    day: int = 300
    night: int = 60


@dataclass(slots=True)
class RuleConfig:
    witch_potions_once_per_game: bool = True
    bodyguard_cannot_protect_self: bool = True
    hunter_cannot_shoot_if_poisoned: bool = True
    one_elimination_per_day: bool = True


@dataclass(slots=True)
class GameConfig:
    min_players: int = 5
    role_templates: Dict[int, List[Role]] = field(default_factory=dict)
    timers: TimerSettings = field(default_factory=TimerSettings)
    rules: RuleConfig = field(default_factory=RuleConfig)
    warnings: List[str] = field(default_factory=list)


def _env_seconds(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return ConfigValidator.validate_timer(name, int(raw))


def default_game_config(path: Optional[Path] = None) -> GameConfig:
    loaded = load_role_balance(path)
    rules = RuleConfig()
    for key, value in loaded["rules"].items():
        if hasattr(rules, key):
            setattr(rules, key, value)
    return GameConfig(
        min_players=loaded["min_players"],
        role_templates=loaded["role_templates"],
        timers=TimerSettings(
            day=_env_seconds(DAY_SECONDS_ENV, loaded["timers"]["day_seconds"]),
            night=_env_seconds(NIGHT_SECONDS_ENV, loaded["timers"]["night_seconds"]),
        ),
        rules=rules,
        warnings=loaded["warnings"],
    )
