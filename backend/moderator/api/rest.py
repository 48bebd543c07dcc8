from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query

from moderator.api.deps import engine, engine_lock
from moderator.core.models import NoticeLevel, TimerPhase
from moderator.engine.game_engine import ModeratorEngine
from moderator.roles.catalog import ROLE_CATALOG
from moderator.schemas import (
    AddPlayerRequest,
    CustomRolesRequest,
    NightActionRequest,
    NoticeView,
    OperationResponse,
    RoleDefinitionView,
    RoleRequest,
    SetModeRequest,
    TargetRequest,
    TimerSettingsRequest,
)

router = APIRouter(prefix="/api", tags=["moderator"])


def _notice_views(engine_: ModeratorEngine, since: int) -> List[NoticeView]:
    return [
        NoticeView(notice_id=n.notice_id, level=n.level.value, message=n.message, ts=n.ts.isoformat())
        for n in engine_.notices_since(since)
    ]


def _run(operation: Callable[[ModeratorEngine], Any]) -> OperationResponse:
    with engine_lock:
        since = engine.last_notice_id
        result = operation(engine)
        if result is None or result is False:
            errors = [n for n in engine.notices_since(since) if n.level == NoticeLevel.ERROR]
            if errors:
                raise HTTPException(status_code=400, detail=errors[-1].message)
            raise HTTPException(status_code=404, detail="player not found")
        return OperationResponse(ok=True, notices=_notice_views(engine, since), state=engine.public_state())


@router.get("/state", response_model=dict)
def get_state(view: str = Query(default="moderator", pattern="^(moderator|public)$")) -> dict:
    with engine_lock:
        return engine.public_state(view=view)


@router.post("/players", response_model=OperationResponse)
def add_player(req: AddPlayerRequest) -> OperationResponse:
    return _run(lambda e: e.add_player(req.name))


@router.delete("/players/{player_id}", response_model=OperationResponse)
def remove_player(player_id: str) -> OperationResponse:
    return _run(lambda e: e.remove_player(player_id))


@router.put("/mode", response_model=OperationResponse)
def set_mode(req: SetModeRequest) -> OperationResponse:
    return _run(lambda e: e.set_game_mode(req.mode))


@router.get("/roles/catalog", response_model=List[RoleDefinitionView])
def role_catalog() -> List[RoleDefinitionView]:
    return [
        RoleDefinitionView(
            id=role.value,
            name=definition.name,
            description=definition.description,
            team=definition.team.value,
            night_action=definition.night_action,
            night_priority=definition.night_priority,
        )
        for role, definition in ROLE_CATALOG.items()
    ]


@router.get("/roles/recommended", response_model=dict)
def recommended_roles(count: Optional[int] = Query(default=None, ge=0)) -> dict:
    with engine_lock:
        roles = engine.recommend_roles(count)
        return {"count": len(roles), "roles": [r.value for r in roles]}


@router.put("/roles/custom", response_model=OperationResponse)
def set_custom_roles(req: CustomRolesRequest) -> OperationResponse:
    return _run(lambda e: e.set_custom_roles(req.roles))


@router.delete("/roles/custom", response_model=OperationResponse)
def clear_custom_roles() -> OperationResponse:
    return _run(lambda e: e.clear_custom_roles())


@router.get("/roles/selection", response_model=dict)
def role_selection() -> dict:
    with engine_lock:
        return engine.public_state()["roles"]


@router.post("/roles/selection/begin", response_model=OperationResponse)
def begin_role_selection() -> OperationResponse:
    return _run(lambda e: e.begin_role_customization())


@router.post("/roles/selection/add", response_model=OperationResponse)
def add_selected_role(req: RoleRequest) -> OperationResponse:
    return _run(lambda e: e.add_selected_role(req.role))


@router.post("/roles/selection/remove", response_model=OperationResponse)
def remove_selected_role(req: RoleRequest) -> OperationResponse:
    return _run(lambda e: e.remove_selected_role(req.role))


@router.post("/roles/selection/apply", response_model=OperationResponse)
def apply_role_selection() -> OperationResponse:
    return _run(lambda e: e.apply_role_selection())


@router.post("/roles/selection/cancel", response_model=OperationResponse)
def cancel_role_selection() -> OperationResponse:
    return _run(lambda e: e.cancel_role_customization())


@router.post("/game/start", response_model=OperationResponse)
def start_game() -> OperationResponse:
    return _run(lambda e: e.assign_roles_and_start())


@router.post("/players/{player_id}/view-role", response_model=Dict[str, Any])
def view_role(player_id: str) -> Dict[str, Any]:
    seen: Dict[str, Any] = {}

    def _view(e: ModeratorEngine) -> Any:
        seen["role"] = e.view_role(player_id)
        return seen["role"]

    response = _run(_view)
    body = response.model_dump()
    body["role"] = seen["role"].value
    return body


@router.put("/players/{player_id}/role", response_model=OperationResponse)
def update_player_role(player_id: str, req: RoleRequest) -> OperationResponse:
    return _run(lambda e: e.update_player_role(player_id, req.role))


@router.post("/night/start", response_model=OperationResponse)
def start_night() -> OperationResponse:
    return _run(lambda e: e.start_night_phase())


@router.post("/night/actions", response_model=OperationResponse)
def night_action(req: NightActionRequest) -> OperationResponse:
    def _perform(e: ModeratorEngine) -> bool:
        action = e.build_night_action(req.role_id, req.target_id, req.kind)
        if action is None:
            return False
        return e.perform_night_action(action)

    return _run(_perform)


@router.post("/night/skip", response_model=OperationResponse)
def skip_night_role() -> OperationResponse:
    return _run(lambda e: e.skip_night_role())


@router.post("/night/complete", response_model=OperationResponse)
def complete_night() -> OperationResponse:
    return _run(lambda e: e.complete_night_phase())


@router.post("/day/start", response_model=OperationResponse)
def start_day() -> OperationResponse:
    return _run(lambda e: e.start_day_phase())


@router.post("/day/eliminate", response_model=OperationResponse)
def eliminate(req: TargetRequest) -> OperationResponse:
    return _run(lambda e: e.eliminate_player(req.target_id))


@router.post("/day/hunter-shot", response_model=OperationResponse)
def hunter_shot(req: TargetRequest) -> OperationResponse:
    return _run(lambda e: e.hunter_shoot(req.target_id))


@router.post("/game/reset", response_model=OperationResponse)
def reset_game() -> OperationResponse:
    return _run(lambda e: e.reset_game())


@router.post("/timers/{phase}/start", response_model=OperationResponse)
def start_timer(phase: TimerPhase) -> OperationResponse:
    return _run(lambda e: e.start_timer(phase))


@router.post("/timers/{phase}/stop", response_model=OperationResponse)
def stop_timer(phase: TimerPhase) -> OperationResponse:
    return _run(lambda e: e.stop_timer(phase))


@router.post("/timers/{phase}/reset", response_model=OperationResponse)
def reset_timer(phase: TimerPhase) -> OperationResponse:
    return _run(lambda e: e.reset_timer(phase))


@router.patch("/timers/settings", response_model=OperationResponse)
def update_timer_settings(req: TimerSettingsRequest) -> OperationResponse:
    return _run(lambda e: e.update_timer_settings(day=req.day, night=req.night))
