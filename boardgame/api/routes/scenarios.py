"""
boardgame.api.routes.scenarios — Practice scenario responses & peer votes
==========================================================================
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from boardgame.api.deps import get_current_player, get_engine, service_errors
from boardgame.api.serializers import peer_vote_dict, scenario_response_dict
from boardgame.services import scenario_service

router = APIRouter(tags=["scenarios"])


class ScenarioResponseBody(BaseModel):
    responses: dict[str, Any]


class PeerVoteBody(BaseModel):
    scores: dict[str, int]
    feedback: str | None = None


@router.post("/scenarios/{scenario_id}/responses", status_code=201)
def submit_response(
    scenario_id: str,
    body: ScenarioResponseBody,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        response = scenario_service.submit_scenario_response(
            engine, player["player_id"], scenario_id, body.responses,
        )
    return scenario_response_dict(response)


@router.get("/scenario-responses/mine")
def my_responses(
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    rows = scenario_service.get_my_responses(engine, player["player_id"])
    return {"responses": [scenario_response_dict(r) for r in rows]}


@router.get("/scenario-responses/pending")
def pending_responses(
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    """Responses waiting for this player's vote."""
    rows = scenario_service.get_responses_needing_votes(engine, player["player_id"])
    return {"responses": [scenario_response_dict(r) for r in rows]}


@router.post("/scenario-responses/{response_id}/votes", status_code=201)
def vote_response(
    response_id: int,
    body: PeerVoteBody,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        result = scenario_service.submit_peer_vote(
            engine, response_id, player["player_id"], body.scores, body.feedback,
        )
    return {
        "vote": peer_vote_dict(result["vote"]),
        "response": scenario_response_dict(result["response"]),
        "vote_count": result["vote_count"],
        "required_votes": result["required_votes"],
    }
