"""
boardgame.api.routes.meeting — Agenda flow, minutes, motions, open forum
=========================================================================
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from boardgame.api.deps import get_current_player, get_engine, service_errors
from boardgame.api.serializers import (
    answer_dict,
    answer_vote_dict,
    financial_summary_dict,
    meeting_response_dict,
    minutes_dict,
    motion_dict,
    next_agenda_dict,
    question_row_dict,
    session_dict,
    tally_dict,
)
from boardgame.catalog import get_meeting_questions
from boardgame.constants import AGENDA_TITLES
from boardgame.services import answer_service, meeting_service, session_service

router = APIRouter(tags=["meeting"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class AgendaResponses(BaseModel):
    responses: dict[str, Any]


class MinutesBody(BaseModel):
    previous_minutes: str = ""
    current_minutes: str = ""


class BallotVote(BaseModel):
    vote: str


class ChallengeBody(BaseModel):
    challenge: str = Field(min_length=1, max_length=1000)


class MotionBody(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    motion_type: str


class NextAgendaBody(BaseModel):
    items: list[str]


class AnswerBody(BaseModel):
    question_id: int
    answer_text: str = Field(min_length=1)
    budget_used: float = Field(default=0.0, allow_inf_nan=False)


class AnswerVoteBody(BaseModel):
    coins: int
    feedback: str | None = None
    scores: dict[str, int] | None = None


# ---------------------------------------------------------------------------
# Meeting state & agenda
# ---------------------------------------------------------------------------
@router.get("/sessions/{session_id}/meeting")
def get_meeting(
    session_id: int,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        state = meeting_service.get_meeting_state(engine, session_id)
        mine = session_service.get_user_participation(engine, session_id, player["player_id"])

    item = state["current_item"]
    role_id = mine.role_id if mine else None
    return {
        "session": session_dict(state["session"]),
        "current_item": item,
        "current_title": AGENDA_TITLES[item][0] if item else None,
        "index": state["index"],
        "total_items": state["total_items"],
        "my_role": role_id,
        "questions": (
            [q.to_dict() for q in get_meeting_questions(item, role_id)] if item else []
        ),
        "minutes": minutes_dict(state["minutes"]),
        "minutes_tally": tally_dict(state["minutes_tally"]),
        "financial_summary": financial_summary_dict(state["financial_summary"]),
        "motions": [motion_dict(m, t) for m, t in state["motions"]],
        "next_agenda": next_agenda_dict(state["next_agenda"]),
    }


@router.post("/sessions/{session_id}/meeting/advance")
def advance(
    session_id: int,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        game = meeting_service.advance_agenda(engine, session_id, player["player_id"])
    return session_dict(game)


@router.post("/sessions/{session_id}/meeting/responses")
def submit_responses(
    session_id: int,
    body: AgendaResponses,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        row = meeting_service.submit_agenda_response(
            engine, session_id, player["player_id"], body.responses,
        )
    return meeting_response_dict(row)


# ---------------------------------------------------------------------------
# Minutes
# ---------------------------------------------------------------------------
@router.put("/sessions/{session_id}/minutes")
def put_minutes(
    session_id: int,
    body: MinutesBody,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        minutes = meeting_service.submit_minutes(
            engine, session_id, player["player_id"],
            previous_minutes=body.previous_minutes,
            current_minutes=body.current_minutes,
        )
    return minutes_dict(minutes)


@router.post("/sessions/{session_id}/minutes/votes")
def vote_minutes(
    session_id: int,
    body: BallotVote,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        result = meeting_service.vote_on_minutes(engine, session_id, player["player_id"], body.vote)
    return {"minutes": minutes_dict(result["minutes"]), "tally": tally_dict(result["tally"])}


# ---------------------------------------------------------------------------
# Financial summary
# ---------------------------------------------------------------------------
@router.put("/sessions/{session_id}/financial-summary")
def put_financial_summary(
    session_id: int,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        summary = meeting_service.submit_financial_summary(engine, session_id, player["player_id"])
    return financial_summary_dict(summary)


@router.post("/sessions/{session_id}/financial-summary/challenges", status_code=201)
def post_challenge(
    session_id: int,
    body: ChallengeBody,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        summary = meeting_service.challenge_budget(
            engine, session_id, player["player_id"], body.challenge,
        )
    return financial_summary_dict(summary)


# ---------------------------------------------------------------------------
# Motions & next agenda
# ---------------------------------------------------------------------------
@router.post("/sessions/{session_id}/motions", status_code=201)
def post_motion(
    session_id: int,
    body: MotionBody,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        motion = meeting_service.propose_motion(
            engine, session_id, player["player_id"],
            title=body.title, description=body.description, motion_type=body.motion_type,
        )
    return motion_dict(motion)


@router.post("/motions/{motion_id}/votes")
def vote_motion(
    motion_id: int,
    body: BallotVote,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        result = meeting_service.vote_on_motion(engine, motion_id, player["player_id"], body.vote)
    return motion_dict(result["motion"], result["tally"])


@router.put("/sessions/{session_id}/next-agenda")
def put_next_agenda(
    session_id: int,
    body: NextAgendaBody,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        agenda = meeting_service.update_next_agenda(
            engine, session_id, player["player_id"], body.items,
        )
    return next_agenda_dict(agenda)


# ---------------------------------------------------------------------------
# Open forum: scenario answers & coin votes
# ---------------------------------------------------------------------------
@router.get("/sessions/{session_id}/questions")
def get_my_questions(
    session_id: int,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        rows = answer_service.get_session_questions(engine, session_id, player["player_id"])
    return {"questions": [question_row_dict(q) for q in rows]}


@router.post("/sessions/{session_id}/answers", status_code=201)
def post_answer(
    session_id: int,
    body: AnswerBody,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        answer = answer_service.submit_scenario_answer(
            engine, session_id, player["player_id"],
            body.question_id, body.answer_text, body.budget_used,
        )
    return answer_dict(answer)


@router.get("/sessions/{session_id}/answers/for-voting")
def answers_for_voting(
    session_id: int,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        rows = answer_service.get_answers_for_voting(engine, session_id, player["player_id"])
    return {
        "answers": [
            {
                **answer_dict(r["answer"]),
                "question": question_row_dict(r["question"]) if r["question"] else None,
            }
            for r in rows
        ],
    }


@router.post("/answers/{answer_id}/votes", status_code=201)
def vote_answer(
    answer_id: int,
    body: AnswerVoteBody,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        result = answer_service.vote_on_answer(
            engine, answer_id, player["player_id"],
            body.coins, feedback=body.feedback, scores=body.scores,
        )
    return {
        "vote": answer_vote_dict(result["vote"]),
        "answer": answer_dict(result["answer"]),
        "vote_count": result["vote_count"],
        "required_votes": result["required_votes"],
    }
