from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from moderator.core.models import ActionKind, GameMode, Role


class AddPlayerRequest(BaseModel):
    name: str = Field(min_length=1, max_length=30)


class SetModeRequest(BaseModel):
    mode: GameMode


class CustomRolesRequest(BaseModel):
    roles: List[Role]


class RoleRequest(BaseModel):
    role: Role


class NightActionRequest(BaseModel):
    role_id: Role
    target_id: Optional[str] = None
    kind: Optional[ActionKind] = None


class TargetRequest(BaseModel):
    target_id: str


class TimerSettingsRequest(BaseModel):
    day: Optional[int] = Field(default=None, gt=0)
    night: Optional[int] = Field(default=None, gt=0)


class NoticeView(BaseModel):
    notice_id: int
    level: str
    message: str
    ts: str


class OperationResponse(BaseModel):
    ok: bool
    notices: List[NoticeView]
    state: Dict[str, Any]


class RoleDefinitionView(BaseModel):
    id: str
    name: str
    description: str
    team: str
    night_action: Optional[str] = None
    night_priority: Optional[int] = None
