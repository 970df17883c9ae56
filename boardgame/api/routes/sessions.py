"""
boardgame.api.routes.sessions — Game sessions, joining, donations, results
===========================================================================
"""

from __future__ import annotations

import random

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from boardgame.api.deps import get_current_player, get_engine, service_errors
from boardgame.api.serializers import (
    donation_dict,
    participant_dict,
    role_budget_dict,
    session_dict,
)
from boardgame.services import session_service

router = APIRouter(prefix="/sessions", tags=["sessions"])

_rng = random.SystemRandom()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class SessionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)


class JoinRequest(BaseModel):
    role_id: str


class DonationRequest(BaseModel):
    amount: float = Field(gt=0, allow_inf_nan=False)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _state_dict(state: dict, player_id: int) -> dict:
    mine = next(
        (p for p in state["participants"] if p.player_id == player_id), None
    )
    my_donation = round(
        sum(d.amount for d in state["donations"] if d.player_id == player_id), 2
    )
    return {
        "session": session_dict(state["session"]),
        "participants": [
            participant_dict(p, state["player_names"].get(p.player_id))
            for p in state["participants"]
        ],
        "donations": [donation_dict(d) for d in state["donations"]],
        "role_budgets": [role_budget_dict(b) for b in state["role_budgets"]],
        "budget": state["split"].to_dict(),
        "my_role": mine.role_id if mine else None,
        "my_donation": my_donation,
    }


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@router.post("", status_code=201)
def create_session(
    body: SessionCreate,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        game = session_service.create_game_session(engine, body.name, player["player_id"])
    return session_dict(game)


@router.get("/current")
def get_current_session(
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    game = session_service.get_current_session(engine)
    if game is None:
        return {"session": None}
    with service_errors():
        state = session_service.get_session_state(engine, game.id)
    return _state_dict(state, player["player_id"])


@router.get("/{session_id}")
def get_session_state(
    session_id: int,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        state = session_service.get_session_state(engine, session_id)
    return _state_dict(state, player["player_id"])


@router.post("/{session_id}/join")
def join_session(
    session_id: int,
    body: JoinRequest,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        p = session_service.join_session(engine, session_id, player["player_id"], body.role_id)
    return participant_dict(p, player.get("name"))


@router.post("/{session_id}/join/random")
def join_random_role(
    session_id: int,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        p = session_service.assign_random_role(
            engine, session_id, player["player_id"], rng=_rng,
        )
    return participant_dict(p, player.get("name"))


@router.post("/{session_id}/start-donations")
def start_donations(
    session_id: int,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        game = session_service.start_donation_phase(engine, session_id, player["player_id"])
    return session_dict(game)


@router.post("/{session_id}/start-meeting")
def start_meeting(
    session_id: int,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        game = session_service.start_meeting(engine, session_id, player["player_id"])
    return session_dict(game)


@router.post("/{session_id}/donations", status_code=201)
def donate(
    session_id: int,
    body: DonationRequest,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        donation, split = session_service.make_donation(
            engine, session_id, player["player_id"], body.amount,
        )
    return {"donation": donation_dict(donation), "budget": split.to_dict()}


@router.get("/{session_id}/results")
def get_results(
    session_id: int,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        data = session_service.session_results(engine, session_id)
    return {"session": session_dict(data["session"]), "results": data["results"]}
