"""
boardgame.api.serializers — ORM rows → JSON-ready dicts
========================================================

Shared by several route modules.  Timestamps are ISO-8601 strings or
``None``.
"""

from __future__ import annotations

from datetime import datetime

from boardgame.catalog import Role, Scenario
from boardgame.database.models import (
    AnswerVote,
    BoardMeeting,
    Donation,
    FinancialSummary,
    GameSession,
    MeetingMinutes,
    MeetingReflection,
    MeetingResponse,
    Motion,
    NextAgenda,
    PeerVote,
    Player,
    RoleBudget,
    ScenarioAnswer,
    ScenarioQuestion,
    ScenarioResponse,
    SessionParticipant,
)
from boardgame.engine.scoring import BallotTally


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
def role_dict(r: Role) -> dict:
    return {
        "id": r.id,
        "title": r.title,
        "description": r.description,
        "responsibilities": list(r.responsibilities),
        "difficulty": r.difficulty,
    }


def scenario_dict(s: Scenario) -> dict:
    return {
        "id": s.id,
        "role_id": s.role_id,
        "title": s.title,
        "description": s.description,
        "type": s.type,
        "difficulty": s.difficulty,
        "time_required": s.time_required,
    }


# ---------------------------------------------------------------------------
# Players
# ---------------------------------------------------------------------------
def player_dict(p: Player) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "role": p.role,
        "score": p.score or 0,
        "experience": p.experience or 0,
        "level": p.level or 1,
    }


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------
def session_dict(g: GameSession) -> dict:
    return {
        "id": g.id,
        "name": g.name,
        "created_by": g.created_by,
        "status": g.status,
        "total_donations": g.total_donations or 0.0,
        "prize_pool": g.prize_pool or 0.0,
        "current_agenda_item": g.current_agenda_item,
        "winner_id": g.winner_id,
        "started_at": _iso(g.started_at),
        "completed_at": _iso(g.completed_at),
        "created_at": _iso(g.created_at),
    }


def participant_dict(p: SessionParticipant, name: str | None = None) -> dict:
    return {
        "player_id": p.player_id,
        "name": name,
        "role_id": p.role_id,
        "joined_at": _iso(p.joined_at),
    }


def donation_dict(d: Donation) -> dict:
    return {
        "id": d.id,
        "player_id": d.player_id,
        "amount": d.amount,
        "created_at": _iso(d.created_at),
    }


def role_budget_dict(b: RoleBudget) -> dict:
    return {
        "role_id": b.role_id,
        "allocated_budget": b.allocated_budget or 0.0,
        "spent": b.spent or 0.0,
        "remaining": b.remaining,
    }


# ---------------------------------------------------------------------------
# Meeting
# ---------------------------------------------------------------------------
def tally_dict(t: BallotTally | None) -> dict | None:
    if t is None:
        return None
    return {"counts": t.counts, "cast": t.cast, "outcome": t.outcome}


def meeting_response_dict(r: MeetingResponse) -> dict:
    return {
        "agenda_item": r.agenda_item,
        "responses": r.responses or {},
        "points_earned": r.points_earned or 0,
    }


def minutes_dict(m: MeetingMinutes | None) -> dict | None:
    if m is None:
        return None
    return {
        "secretary_id": m.secretary_id,
        "previous_minutes": m.previous_minutes,
        "current_minutes": m.current_minutes,
        "approval_votes": m.approval_votes or {},
    }


def financial_summary_dict(f: FinancialSummary | None) -> dict | None:
    if f is None:
        return None
    return {
        "treasurer_id": f.treasurer_id,
        "total_donations": f.total_donations,
        "prize_pool": f.prize_pool,
        "budget_per_player": f.budget_per_player,
        "budget_per_role": f.budget_per_role,
        "budget_challenges": f.budget_challenges or [],
    }


def motion_dict(m: Motion, tally: BallotTally | None = None) -> dict:
    return {
        "id": m.id,
        "proposed_by": m.proposed_by,
        "title": m.title,
        "description": m.description,
        "motion_type": m.motion_type,
        "votes": m.votes or {},
        "status": m.status,
        "tally": tally_dict(tally),
    }


def next_agenda_dict(a: NextAgenda | None) -> dict | None:
    if a is None:
        return None
    return {"agenda_items": a.agenda_items or [], "updated_by": a.updated_by}


# ---------------------------------------------------------------------------
# Answers & votes
# ---------------------------------------------------------------------------
def question_row_dict(q: ScenarioQuestion) -> dict:
    return {
        "id": q.id,
        "role_id": q.role_id,
        "scenario_id": q.scenario_id,
        "question_key": q.question_key,
        "question_text": q.question_text,
        "question_type": q.question_type,
        "options": q.options or [],
    }


def answer_dict(a: ScenarioAnswer) -> dict:
    return {
        "id": a.id,
        "player_id": a.player_id,
        "question_id": a.question_id,
        "answer_text": a.answer_text,
        "budget_used": a.budget_used or 0.0,
        "status": a.status,
        "final_score": a.final_score,
        "total_coins": a.total_coins or 0,
        "created_at": _iso(a.created_at),
    }


def answer_vote_dict(v: AnswerVote) -> dict:
    return {
        "id": v.id,
        "answer_id": v.answer_id,
        "voter_id": v.voter_id,
        "coins_awarded": v.coins_awarded,
        "scores": v.scores,
        "feedback": v.feedback,
    }


def scenario_response_dict(r: ScenarioResponse) -> dict:
    return {
        "id": r.id,
        "player_id": r.player_id,
        "scenario_id": r.scenario_id,
        "role_id": r.role_id,
        "responses": r.responses or {},
        "status": r.status,
        "final_score": r.final_score,
        "submitted_at": _iso(r.submitted_at),
    }


def peer_vote_dict(v: PeerVote) -> dict:
    return {
        "id": v.id,
        "response_id": v.response_id,
        "voter_id": v.voter_id,
        "scores": v.scores,
        "score": v.score,
        "feedback": v.feedback,
    }


# ---------------------------------------------------------------------------
# Board meetings
# ---------------------------------------------------------------------------
def board_meeting_dict(m: BoardMeeting) -> dict:
    return {
        "id": m.id,
        "title": m.title,
        "agenda": m.agenda or [],
        "minutes": m.minutes or {},
        "status": m.status,
        "created_at": _iso(m.created_at),
    }


def reflection_dict(r: MeetingReflection | None) -> dict | None:
    if r is None:
        return None
    return {
        "meeting_id": r.meeting_id,
        "player_id": r.player_id,
        "reflection_text": r.reflection_text,
        "created_at": _iso(r.created_at),
    }
