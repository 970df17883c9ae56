"""
boardgame.services.board_meeting_service — Standalone Meetings & Reflections
=============================================================================

Lightweight meeting records kept outside of game sessions: a title, an
agenda, free-form minutes, and one reflection per player per meeting.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from boardgame.database.engine import get_session
from boardgame.database.models import BoardMeeting, BoardMeetingStatus, MeetingReflection
from boardgame.services.player_service import load_player

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def _load(session, meeting_id: int) -> BoardMeeting:
    meeting = session.get(BoardMeeting, meeting_id)
    if meeting is None:
        raise LookupError("Board meeting not found")
    return meeting


def create_board_meeting(engine: Engine, title: str, agenda: list | None = None) -> BoardMeeting:
    title = title.strip()
    if not title:
        raise ValueError("Meeting title is required")
    with get_session(engine) as session:
        meeting = BoardMeeting(
            title=title,
            agenda=list(agenda or []),
            minutes={},
            status=BoardMeetingStatus.ACTIVE.value,
        )
        session.add(meeting)
        session.flush()
    logger.info("Board meeting %d created", meeting.id)
    return meeting


def list_board_meetings(engine: Engine) -> list[BoardMeeting]:
    """All meetings, newest first."""
    with get_session(engine) as session:
        return list(session.scalars(
            select(BoardMeeting).order_by(BoardMeeting.created_at.desc(), BoardMeeting.id.desc())
        ).all())


def current_board_meeting(meetings: list[BoardMeeting]) -> BoardMeeting | None:
    """Most recent active meeting from a newest-first list."""
    return next((m for m in meetings if m.status == BoardMeetingStatus.ACTIVE.value), None)


def update_meeting_minutes(engine: Engine, meeting_id: int, minutes: dict) -> BoardMeeting:
    if not isinstance(minutes, dict):
        raise ValueError("Minutes must be an object")
    with get_session(engine) as session:
        meeting = _load(session, meeting_id)
        if meeting.status == BoardMeetingStatus.COMPLETED.value:
            raise ValueError("Minutes of a completed meeting can't be changed")
        meeting.minutes = dict(minutes)
        session.flush()
    return meeting


def complete_board_meeting(engine: Engine, meeting_id: int) -> BoardMeeting:
    with get_session(engine) as session:
        meeting = _load(session, meeting_id)
        meeting.status = BoardMeetingStatus.COMPLETED.value
        session.flush()
    logger.info("Board meeting %d completed", meeting_id)
    return meeting


def submit_reflection(engine: Engine, meeting_id: int, player_id: int, text: str) -> MeetingReflection:
    """Create or replace *player_id*'s reflection on a meeting."""
    text = text.strip()
    if not text:
        raise ValueError("Reflection text is required")
    try:
        with get_session(engine) as session:
            _load(session, meeting_id)
            load_player(session, player_id)
            reflection = session.scalar(
                select(MeetingReflection).where(
                    MeetingReflection.meeting_id == meeting_id,
                    MeetingReflection.player_id == player_id,
                )
            )
            if reflection is None:
                reflection = MeetingReflection(
                    meeting_id=meeting_id, player_id=player_id, reflection_text=text,
                )
                session.add(reflection)
            else:
                reflection.reflection_text = text
            session.flush()
    except IntegrityError:
        raise ValueError("Reflection was saved concurrently; retry") from None
    return reflection


def get_user_reflection(engine: Engine, meeting_id: int, player_id: int) -> MeetingReflection | None:
    with get_session(engine) as session:
        _load(session, meeting_id)
        return session.scalar(
            select(MeetingReflection).where(
                MeetingReflection.meeting_id == meeting_id,
                MeetingReflection.player_id == player_id,
            )
        )
