"""
boardgame.api.routes.board_meetings — Standalone meetings & reflections
========================================================================
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from boardgame.api.deps import get_current_player, get_engine, service_errors
from boardgame.api.serializers import board_meeting_dict, reflection_dict
from boardgame.services import board_meeting_service

router = APIRouter(prefix="/board-meetings", tags=["board-meetings"])


class BoardMeetingCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    agenda: list[Any] = Field(default_factory=list)


class MinutesUpdate(BaseModel):
    minutes: dict[str, Any]


class ReflectionBody(BaseModel):
    reflection_text: str = Field(min_length=1)


@router.get("")
def list_meetings(
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    meetings = board_meeting_service.list_board_meetings(engine)
    current = board_meeting_service.current_board_meeting(meetings)
    return {
        "meetings": [board_meeting_dict(m) for m in meetings],
        "current": board_meeting_dict(current) if current else None,
    }


@router.post("", status_code=201)
def create_meeting(
    body: BoardMeetingCreate,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        meeting = board_meeting_service.create_board_meeting(engine, body.title, body.agenda)
    return board_meeting_dict(meeting)


@router.put("/{meeting_id}/minutes")
def put_minutes(
    meeting_id: int,
    body: MinutesUpdate,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        meeting = board_meeting_service.update_meeting_minutes(engine, meeting_id, body.minutes)
    return board_meeting_dict(meeting)


@router.post("/{meeting_id}/complete")
def complete_meeting(
    meeting_id: int,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        meeting = board_meeting_service.complete_board_meeting(engine, meeting_id)
    return board_meeting_dict(meeting)


@router.put("/{meeting_id}/reflection")
def put_reflection(
    meeting_id: int,
    body: ReflectionBody,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        reflection = board_meeting_service.submit_reflection(
            engine, meeting_id, player["player_id"], body.reflection_text,
        )
    return reflection_dict(reflection)


@router.get("/{meeting_id}/reflection")
def get_reflection(
    meeting_id: int,
    player: dict = Depends(get_current_player),
    engine=Depends(get_engine),
):
    with service_errors():
        reflection = board_meeting_service.get_user_reflection(
            engine, meeting_id, player["player_id"],
        )
    return {"reflection": reflection_dict(reflection)}
