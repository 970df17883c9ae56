"""
boardgame.services.meeting_service — Agenda Flow, Minutes & Motions
====================================================================

Everything that happens once a session's meeting has started:

* advancing the agenda (Executive Director, or the creator when nobody
  holds that role), with adjournment completing the session;
* per-item agenda responses that earn meeting points;
* the Secretary's minutes and their approval ballot;
* the Treasurer's financial summary and budget challenges;
* old/new business motions and their ballots;
* the agenda planned for the next meeting.

Stage and role gates come from :mod:`boardgame.engine.agenda`; ballots
are tallied with :func:`boardgame.engine.scoring.tally_ballot`.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from boardgame.catalog import get_meeting_questions, validate_answer
from boardgame.constants import (
    AGENDA_ITEMS,
    BADGE_PRIZE_WINNER,
    EXECUTIVE_DIRECTOR,
    MINUTES_CHOICES,
    MOTION_CHOICES,
    MOTION_TYPES,
)
from boardgame.database.engine import get_session
from boardgame.database.models import (
    FinancialSummary,
    GameSession,
    MeetingMinutes,
    MeetingResponse,
    Motion,
    NextAgenda,
    SessionStatus,
)
from boardgame.engine.agenda import (
    agenda_index,
    can_advance,
    next_agenda_item,
    require_role,
    require_stage,
)
from boardgame.engine.budget import can_spend
from boardgame.engine.scoring import motion_status, tally_ballot
from boardgame.services.player_service import add_badge, add_score, load_player
from boardgame.services.session_service import (
    compute_results,
    current_split,
    find_role_budget,
    list_participants,
    load_game_session,
    require_participant,
)

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _load_meeting(session: Session, session_id: int) -> GameSession:
    game = load_game_session(session, session_id)
    if game.status != SessionStatus.MEETING.value:
        raise ValueError("The meeting is not in progress")
    return game


def _electorate(session: Session, session_id: int) -> int:
    return len(list_participants(session, session_id))


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


# ---------------------------------------------------------------------------
# Agenda
# ---------------------------------------------------------------------------

def advance_agenda(engine: Engine, session_id: int, player_id: int) -> GameSession:
    """Move to the next agenda item; at adjournment, complete the session.

    Completion fixes ``completed_at``, picks the winner from the results
    table (only when somebody scored), awards them ``prize_winner`` and
    attributes the prize pool to them.
    """
    with get_session(engine) as session:
        game = _load_meeting(session, session_id)
        participant = require_participant(session, session_id, player_id)
        participants = list_participants(session, session_id)
        has_ed = any(p.role_id == EXECUTIVE_DIRECTOR for p in participants)
        if not can_advance(participant.role_id, game.created_by == player_id, has_ed):
            logger.warning("Player %d tried to advance session %d", player_id, session_id)
            raise PermissionError("Only the Executive Director can advance the agenda")

        nxt = next_agenda_item(game.current_agenda_item)
        if nxt is not None:
            game.current_agenda_item = nxt
            logger.info("Session %d agenda → %s", session_id, nxt)
            return game

        results = compute_results(session, session_id)
        game.status = SessionStatus.COMPLETED.value
        game.completed_at = datetime.now(UTC)
        if results and results[0]["total"] > 0:
            winner_id = results[0]["player_id"]
            game.winner_id = winner_id
            add_badge(session, winner_id, BADGE_PRIZE_WINNER)
            winner = load_player(session, winner_id)
            progress = dict(winner.progress or {})
            progress["prize_winnings"] = round(
                float(progress.get("prize_winnings", 0.0)) + (game.prize_pool or 0.0), 2
            )
            winner.progress = progress
            logger.info(
                "Session %d completed; player %d wins prize pool %.2f",
                session_id, winner_id, game.prize_pool or 0.0,
            )
        else:
            logger.info("Session %d completed with no winner", session_id)
    return game


def submit_agenda_response(
    engine: Engine,
    session_id: int,
    player_id: int,
    responses: dict,
) -> MeetingResponse:
    """Answer the current agenda item's questions.

    Earns one point per answered question.  Resubmitting replaces the
    earlier answers and adjusts the player's score by the difference.
    """
    if not isinstance(responses, dict):
        raise ValueError("Responses must be an object keyed by question id")
    with get_session(engine) as session:
        game = _load_meeting(session, session_id)
        item = game.current_agenda_item
        require_stage("agenda_response", item)
        participant = require_participant(session, session_id, player_id)

        questions = {q.id: q for q in get_meeting_questions(item, participant.role_id)}
        unknown = set(responses) - set(questions)
        if unknown:
            raise ValueError(f"Unknown questions for {item}: {', '.join(sorted(unknown))}")

        clean: dict = {}
        for qid, value in responses.items():
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            question = questions[qid]
            validate_answer(question, value)
            if question.type == "budget":
                # Checked against what's left, not deducted.
                budget = find_role_budget(session, session_id, participant.role_id)
                allocated = budget.allocated_budget if budget else 0.0
                spent = budget.spent if budget else 0.0
                if not can_spend(allocated, spent, float(value)):
                    raise ValueError(f"{qid} exceeds the remaining role budget")
            clean[qid] = value

        points = len(clean)
        row = session.scalar(
            select(MeetingResponse).where(
                MeetingResponse.session_id == session_id,
                MeetingResponse.player_id == player_id,
                MeetingResponse.agenda_item == item,
            )
        )
        if row is None:
            row = MeetingResponse(
                session_id=session_id, player_id=player_id, agenda_item=item,
                responses=clean, points_earned=points,
            )
            session.add(row)
            delta = points
        else:
            delta = points - (row.points_earned or 0)
            row.responses = clean
            row.points_earned = points
        if delta:
            add_score(session, player_id, delta)
        session.flush()
    return row


# ---------------------------------------------------------------------------
# Minutes
# ---------------------------------------------------------------------------

def submit_minutes(
    engine: Engine,
    session_id: int,
    player_id: int,
    *,
    previous_minutes: str,
    current_minutes: str,
) -> MeetingMinutes:
    """Secretary writes the minutes; any earlier approval votes are cleared."""
    with get_session(engine) as session:
        game = _load_meeting(session, session_id)
        require_stage("submit_minutes", game.current_agenda_item)
        participant = require_participant(session, session_id, player_id)
        require_role("submit_minutes", participant.role_id)

        minutes = session.scalar(
            select(MeetingMinutes).where(MeetingMinutes.session_id == session_id)
        )
        if minutes is None:
            minutes = MeetingMinutes(session_id=session_id, secretary_id=player_id)
            session.add(minutes)
        minutes.secretary_id = player_id
        minutes.previous_minutes = previous_minutes
        minutes.current_minutes = current_minutes
        minutes.approval_votes = {}
        session.flush()
    logger.info("Minutes submitted for session %d", session_id)
    return minutes


def vote_on_minutes(engine: Engine, session_id: int, player_id: int, vote: str) -> dict:
    if vote not in MINUTES_CHOICES:
        raise ValueError(f"Vote must be one of: {', '.join(MINUTES_CHOICES)}")
    with get_session(engine) as session:
        game = _load_meeting(session, session_id)
        require_stage("vote_minutes", game.current_agenda_item)
        require_participant(session, session_id, player_id)
        minutes = session.scalar(
            select(MeetingMinutes).where(MeetingMinutes.session_id == session_id)
        )
        if minutes is None:
            raise LookupError("No minutes have been submitted")
        votes = dict(minutes.approval_votes or {})
        votes[str(player_id)] = vote
        minutes.approval_votes = votes
        tally = tally_ballot(votes, _electorate(session, session_id), MINUTES_CHOICES)
    return {"minutes": minutes, "tally": tally}


# ---------------------------------------------------------------------------
# Financial summary
# ---------------------------------------------------------------------------

def submit_financial_summary(engine: Engine, session_id: int, player_id: int) -> FinancialSummary:
    """Treasurer publishes the report; figures come from stored donations."""
    with get_session(engine) as session:
        game = _load_meeting(session, session_id)
        require_stage("submit_financial_summary", game.current_agenda_item)
        participant = require_participant(session, session_id, player_id)
        require_role("submit_financial_summary", participant.role_id)

        split = current_split(session, game)
        summary = session.scalar(
            select(FinancialSummary).where(FinancialSummary.session_id == session_id)
        )
        if summary is None:
            summary = FinancialSummary(session_id=session_id, treasurer_id=player_id,
                                       budget_challenges=[])
            session.add(summary)
        summary.treasurer_id = player_id
        summary.total_donations = split.total
        summary.prize_pool = split.prize_pool
        summary.budget_per_player = split.per_player
        summary.budget_per_role = split.per_role
        session.flush()
    logger.info("Financial summary published for session %d", session_id)
    return summary


def challenge_budget(engine: Engine, session_id: int, player_id: int, challenge: str) -> FinancialSummary:
    challenge = challenge.strip()
    if not challenge:
        raise ValueError("Challenge text is required")
    with get_session(engine) as session:
        game = _load_meeting(session, session_id)
        require_stage("challenge_budget", game.current_agenda_item)
        require_participant(session, session_id, player_id)
        summary = session.scalar(
            select(FinancialSummary).where(FinancialSummary.session_id == session_id)
        )
        if summary is None:
            raise LookupError("No financial summary has been published")
        summary.budget_challenges = [
            *(summary.budget_challenges or []),
            {"player_id": player_id, "challenge": challenge, "timestamp": _now_iso()},
        ]
    return summary


# ---------------------------------------------------------------------------
# Motions
# ---------------------------------------------------------------------------

def propose_motion(
    engine: Engine,
    session_id: int,
    player_id: int,
    *,
    title: str,
    description: str,
    motion_type: str,
) -> Motion:
    if motion_type not in MOTION_TYPES:
        raise ValueError(f"Motion type must be one of: {', '.join(MOTION_TYPES)}")
    title, description = title.strip(), description.strip()
    if not title or not description:
        raise ValueError("Motion title and description are required")
    with get_session(engine) as session:
        game = _load_meeting(session, session_id)
        require_stage(f"propose_{motion_type}", game.current_agenda_item)
        require_participant(session, session_id, player_id)
        motion = Motion(
            session_id=session_id,
            proposed_by=player_id,
            title=title,
            description=description,
            motion_type=motion_type,
            votes={},
            status="open",
        )
        session.add(motion)
        session.flush()
    logger.info("Motion %d proposed in session %d", motion.id, session_id)
    return motion


def vote_on_motion(engine: Engine, motion_id: int, player_id: int, vote: str) -> dict:
    if vote not in MOTION_CHOICES:
        raise ValueError(f"Vote must be one of: {', '.join(MOTION_CHOICES)}")
    with get_session(engine) as session:
        motion = session.get(Motion, motion_id)
        if motion is None:
            raise LookupError("Motion not found")
        game = _load_meeting(session, motion.session_id)
        require_stage("vote_motion", game.current_agenda_item)
        require_participant(session, motion.session_id, player_id)
        if motion.status != "open":
            raise ValueError("Voting on this motion has closed")

        votes = dict(motion.votes or {})
        votes[str(player_id)] = vote
        motion.votes = votes
        tally = tally_ballot(votes, _electorate(session, motion.session_id), MOTION_CHOICES)
        motion.status = motion_status(tally.outcome)
    if motion.status != "open":
        logger.info("Motion %d %s", motion_id, motion.status)
    return {"motion": motion, "tally": tally}


# ---------------------------------------------------------------------------
# Next agenda
# ---------------------------------------------------------------------------

def update_next_agenda(engine: Engine, session_id: int, player_id: int, items: list) -> NextAgenda:
    clean = []
    for item in items:
        if not isinstance(item, str) or not item.strip():
            raise ValueError("Agenda items must be non-empty text")
        clean.append(item.strip())
    try:
        with get_session(engine) as session:
            game = _load_meeting(session, session_id)
            require_stage("set_next_agenda", game.current_agenda_item)
            require_participant(session, session_id, player_id)
            agenda = session.scalar(
                select(NextAgenda).where(NextAgenda.session_id == session_id)
            )
            if agenda is None:
                agenda = NextAgenda(session_id=session_id, updated_by=player_id)
                session.add(agenda)
            agenda.agenda_items = clean
            agenda.updated_by = player_id
            session.flush()
    except IntegrityError:
        raise ValueError("Next agenda was updated concurrently; retry") from None
    return agenda


# ---------------------------------------------------------------------------
# Read model
# ---------------------------------------------------------------------------

def get_meeting_state(engine: Engine, session_id: int) -> dict:
    with get_session(engine) as session:
        game = load_game_session(session, session_id)
        electorate = _electorate(session, session_id)
        item = game.current_agenda_item

        minutes = session.scalar(
            select(MeetingMinutes).where(MeetingMinutes.session_id == session_id)
        )
        summary = session.scalar(
            select(FinancialSummary).where(FinancialSummary.session_id == session_id)
        )
        motions = session.scalars(
            select(Motion).where(Motion.session_id == session_id).order_by(Motion.id)
        ).all()
        next_agenda = session.scalar(
            select(NextAgenda).where(NextAgenda.session_id == session_id)
        )

        return {
            "session": game,
            "current_item": item,
            "index": agenda_index(item) if item else None,
            "total_items": len(AGENDA_ITEMS),
            "minutes": minutes,
            "minutes_tally": (
                tally_ballot(minutes.approval_votes or {}, electorate, MINUTES_CHOICES)
                if minutes else None
            ),
            "financial_summary": summary,
            "motions": [
                (m, tally_ballot(m.votes or {}, electorate, MOTION_CHOICES))
                for m in motions
            ],
            "next_agenda": next_agenda,
        }
