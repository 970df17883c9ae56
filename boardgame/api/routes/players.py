"""
boardgame.api.routes.players — Profile, role choice & leaderboard
==================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from boardgame.api.deps import get_current_player, get_engine, service_errors
from boardgame.api.serializers import player_dict
from boardgame.services import player_service

router = APIRouter(prefix="/players", tags=["players"])


class RoleChoice(BaseModel):
    role_id: str


@router.get("/me")
def get_my_profile(
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        profile = player_service.get_profile(engine, player["player_id"])
    p = profile["player"]
    return {
        **player_dict(p),
        "email": p.email,
        "progress": p.progress or {},
        "badges": [b.badge for b in profile["badges"]],
        "completed_scenarios": [
            {
                "scenario_id": c.scenario_id,
                "role_id": c.role_id,
                "score": c.score,
                "completed_at": c.completed_at.isoformat() if c.completed_at else None,
            }
            for c in profile["completed"]
        ],
    }


@router.put("/me/role")
def choose_role(
    body: RoleChoice,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        p = player_service.update_player_role(engine, player["player_id"], body.role_id)
    return player_dict(p)


@router.get("/leaderboard")
def get_leaderboard(
    limit: int = Query(20, ge=1, le=100),
    engine=Depends(get_engine),
):
    rows = player_service.leaderboard(engine, limit)
    return {
        "players": [
            {"rank": i, **player_dict(p)} for i, p in enumerate(rows, start=1)
        ],
    }
