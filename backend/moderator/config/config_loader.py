from __future__ import annotations

import copy
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from moderator.config.config_validator import ConfigValidator
from moderator.core.errors import ValidationError
from moderator.core.models import Role

ROLE_BALANCE_PATH_ENV = "MODERATOR_ROLE_BALANCE_PATH"
DEFAULT_ROLE_BALANCE_PATH = Path(__file__).resolve().parent / "role_balance.yaml"


def role_balance_path() -> Path:
    override = os.getenv(ROLE_BALANCE_PATH_ENV)
    return Path(override) if override else DEFAULT_ROLE_BALANCE_PATH


@lru_cache(maxsize=8)
def _read_yaml(path: str) -> Dict[str, Any]:
    raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValidationError(f"role balance file {path} must contain a mapping")
    return raw


def load_role_balance(path: Optional[Path] = None) -> Dict[str, Any]:
    raw = copy.deepcopy(_read_yaml(str(path or role_balance_path())))

    templates: Dict[int, List[Role]] = {}
    warnings: List[str] = []
    for count, roles in (raw.get("role_templates") or {}).items():
        player_count = int(count)
        result = ConfigValidator.validate_template(player_count=player_count, roles=roles or [])
        templates[player_count] = ConfigValidator.normalize_roles(roles)
        warnings.extend(result.warnings)

    timers = raw.get("timers") or {}
    return {
        "min_players": int(raw.get("min_players", 5)),
        "role_templates": templates,
        "timers": {
            "day_seconds": ConfigValidator.validate_timer("day_seconds", timers.get("day_seconds", 300)),
            "night_seconds": ConfigValidator.validate_timer("night_seconds", timers.get("night_seconds", 60)),
        },
        "rules": {str(k): bool(v) for k, v in (raw.get("rules") or {}).items()},
        "warnings": warnings,
    }


def load_role_templates(path: Optional[Path] = None) -> Dict[int, List[Role]]:
    return load_role_balance(path)["role_templates"]
