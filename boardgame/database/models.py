"""
boardgame.database.models — SQLAlchemy 2.0 Data Models
=======================================================

Tables:
- players              — Authenticated accounts with role, score, XP
- player_badges        — Earned badges (one row per badge per player)
- completed_scenarios  — Practice scenarios a player has been scored on
- game_sessions        — Shared games: phase, totals, agenda position
- session_participants — Who plays which role in a session
- donations            — Money pledged into a session
- role_budgets         — Per-role operating budget inside a session
- meeting_responses    — Answers to agenda-item questions
- meeting_minutes      — Secretary's minutes + approval ballot
- financial_summaries  — Treasurer's report + budget challenges
- motions              — Old/new business motions + ballots
- next_agendas         — Items planned for the next meeting
- scenario_questions   — Question bank for open-forum answers
- scenario_answers     — Open-forum answers awaiting peer votes
- answer_votes         — Coin votes on open-forum answers
- scenario_responses   — Practice-scenario submissions
- peer_votes           — Criteria votes on practice submissions
- board_meetings       — Standalone meeting records
- meeting_reflections  — Per-player reflections on a board meeting
- settings             — Gameplay tuning key/value store
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    JSON,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# JSONB on PostgreSQL, plain JSON everywhere else (SQLite in tests).
JSONType = JSON().with_variant(JSONB(), "postgresql")


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Board Game ORM models."""

    # Load server-generated timestamps at flush so rows stay readable
    # after their session has closed.
    __mapper_args__ = {"eager_defaults": True}


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class SessionStatus(enum.StrEnum):
    """Lifecycle of a game session."""
    SETUP = "setup"
    DONATIONS = "donations"
    MEETING = "meeting"
    COMPLETED = "completed"


class AnswerStatus(enum.StrEnum):
    """Peer-review state of an answer or practice response."""
    PENDING = "pending"
    SCORED = "scored"


class BoardMeetingStatus(enum.StrEnum):
    ACTIVE = "active"
    COMPLETED = "completed"


# ---------------------------------------------------------------------------
# Players
# ---------------------------------------------------------------------------
class Player(Base):
    __tablename__ = "players"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str | None] = mapped_column(String(50), default=None)
    score: Mapped[int] = mapped_column(Integer, default=0)
    experience: Mapped[int] = mapped_column(Integer, default=0)
    level: Mapped[int] = mapped_column(Integer, default=1)
    progress: Mapped[dict] = mapped_column(JSONType, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_players_score_desc", "score"),
    )

    def __repr__(self) -> str:
        return f"<Player id={self.id} name={self.name!r} role={self.role!r}>"


class PlayerBadge(Base):
    __tablename__ = "player_badges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    badge: Mapped[str] = mapped_column(String(50), nullable=False)
    awarded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("player_id", "badge", name="uq_player_badges_player_badge"),
    )


class CompletedScenario(Base):
    __tablename__ = "completed_scenarios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    scenario_id: Mapped[str] = mapped_column(String(80), nullable=False)
    role_id: Mapped[str] = mapped_column(String(50), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_completed_scenarios_player", "player_id"),
    )


# ---------------------------------------------------------------------------
# Game sessions
# ---------------------------------------------------------------------------
class GameSession(Base):
    """One shared game: setup → donations → meeting → completed."""
    __tablename__ = "game_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    created_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SessionStatus.SETUP.value
    )
    total_donations: Mapped[float] = mapped_column(Float, default=0.0)
    prize_pool: Mapped[float] = mapped_column(Float, default=0.0)
    current_agenda_item: Mapped[str | None] = mapped_column(String(40), default=None)
    winner_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="SET NULL"), default=None
    )
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_game_sessions_status_created", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<GameSession id={self.id} name={self.name!r} status={self.status!r}>"


class SessionParticipant(Base):
    __tablename__ = "session_participants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("game_sessions.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    role_id: Mapped[str] = mapped_column(String(50), nullable=False)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("session_id", "player_id", name="uq_participants_session_player"),
        UniqueConstraint("session_id", "role_id", name="uq_participants_session_role"),
    )


class Donation(Base):
    __tablename__ = "donations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("game_sessions.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_donations_session", "session_id"),
    )


class RoleBudget(Base):
    __tablename__ = "role_budgets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("game_sessions.id", ondelete="CASCADE"), nullable=False
    )
    role_id: Mapped[str] = mapped_column(String(50), nullable=False)
    allocated_budget: Mapped[float] = mapped_column(Float, default=0.0)
    spent: Mapped[float] = mapped_column(Float, default=0.0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("session_id", "role_id", name="uq_role_budgets_session_role"),
    )

    @property
    def remaining(self) -> float:
        return round((self.allocated_budget or 0.0) - (self.spent or 0.0), 2)


# ---------------------------------------------------------------------------
# Meeting artefacts
# ---------------------------------------------------------------------------
class MeetingResponse(Base):
    __tablename__ = "meeting_responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("game_sessions.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    agenda_item: Mapped[str] = mapped_column(String(40), nullable=False)
    responses: Mapped[dict] = mapped_column(JSONType, default=dict)
    points_earned: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint(
            "session_id", "player_id", "agenda_item",
            name="uq_meeting_responses_session_player_item",
        ),
    )


class MeetingMinutes(Base):
    __tablename__ = "meeting_minutes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("game_sessions.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    secretary_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    previous_minutes: Mapped[str] = mapped_column(Text, default="")
    current_minutes: Mapped[str] = mapped_column(Text, default="")
    # {"<player_id>": "approve" | "reject" | "amend"}
    approval_votes: Mapped[dict] = mapped_column(JSONType, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class FinancialSummary(Base):
    __tablename__ = "financial_summaries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("game_sessions.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    treasurer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    total_donations: Mapped[float] = mapped_column(Float, default=0.0)
    prize_pool: Mapped[float] = mapped_column(Float, default=0.0)
    budget_per_player: Mapped[float] = mapped_column(Float, default=0.0)
    budget_per_role: Mapped[float] = mapped_column(Float, default=0.0)
    # [{"player_id": 3, "challenge": "...", "timestamp": "..."}]
    budget_challenges: Mapped[list] = mapped_column(JSONType, default=list)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class Motion(Base):
    __tablename__ = "motions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("game_sessions.id", ondelete="CASCADE"), nullable=False
    )
    proposed_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    motion_type: Mapped[str] = mapped_column(String(20), nullable=False)
    # {"<player_id>": "approve" | "reject" | "abstain"}
    votes: Mapped[dict] = mapped_column(JSONType, default=dict)
    status: Mapped[str] = mapped_column(String(20), default="open")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_motions_session", "session_id"),
    )


class NextAgenda(Base):
    __tablename__ = "next_agendas"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("game_sessions.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    agenda_items: Mapped[list] = mapped_column(JSONType, default=list)
    updated_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


# ---------------------------------------------------------------------------
# Open-forum scenario answers
# ---------------------------------------------------------------------------
class ScenarioQuestion(Base):
    """Seeded from :mod:`boardgame.catalog`; one row per scenario question."""
    __tablename__ = "scenario_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role_id: Mapped[str] = mapped_column(String(50), nullable=False)
    scenario_id: Mapped[str] = mapped_column(String(80), nullable=False)
    question_key: Mapped[str] = mapped_column(String(80), nullable=False)
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    question_type: Mapped[str] = mapped_column(String(30), nullable=False)
    options: Mapped[list] = mapped_column(JSONType, default=list)

    __table_args__ = (
        UniqueConstraint("scenario_id", "question_key", name="uq_scenario_questions_key"),
        Index("ix_scenario_questions_role", "role_id"),
    )


class ScenarioAnswer(Base):
    __tablename__ = "scenario_answers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("game_sessions.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("scenario_questions.id", ondelete="CASCADE"), nullable=False
    )
    answer_text: Mapped[str] = mapped_column(Text, nullable=False)
    budget_used: Mapped[float] = mapped_column(Float, default=0.0)
    status: Mapped[str] = mapped_column(String(20), default=AnswerStatus.PENDING.value)
    final_score: Mapped[float | None] = mapped_column(Float, default=None)
    total_coins: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint(
            "session_id", "player_id", "question_id",
            name="uq_scenario_answers_session_player_question",
        ),
    )


class AnswerVote(Base):
    __tablename__ = "answer_votes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    answer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("scenario_answers.id", ondelete="CASCADE"), nullable=False
    )
    voter_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    coins_awarded: Mapped[int] = mapped_column(Integer, default=0)
    scores: Mapped[dict | None] = mapped_column(JSONType, default=None)
    feedback: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("answer_id", "voter_id", name="uq_answer_votes_answer_voter"),
    )


# ---------------------------------------------------------------------------
# Practice scenarios (outside a session)
# ---------------------------------------------------------------------------
class ScenarioResponse(Base):
    __tablename__ = "scenario_responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    scenario_id: Mapped[str] = mapped_column(String(80), nullable=False)
    role_id: Mapped[str] = mapped_column(String(50), nullable=False)
    responses: Mapped[dict] = mapped_column(JSONType, default=dict)
    status: Mapped[str] = mapped_column(String(20), default=AnswerStatus.PENDING.value)
    final_score: Mapped[float | None] = mapped_column(Float, default=None)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_scenario_responses_status", "status"),
    )


class PeerVote(Base):
    __tablename__ = "peer_votes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    response_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("scenario_responses.id", ondelete="CASCADE"), nullable=False
    )
    voter_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    scores: Mapped[dict] = mapped_column(JSONType, nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    feedback: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("response_id", "voter_id", name="uq_peer_votes_response_voter"),
    )


# ---------------------------------------------------------------------------
# Standalone board meetings
# ---------------------------------------------------------------------------
class BoardMeeting(Base):
    __tablename__ = "board_meetings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    agenda: Mapped[list] = mapped_column(JSONType, default=list)
    minutes: Mapped[dict] = mapped_column(JSONType, default=dict)
    status: Mapped[str] = mapped_column(
        String(20), default=BoardMeetingStatus.ACTIVE.value
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class MeetingReflection(Base):
    __tablename__ = "meeting_reflections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    player_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    meeting_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("board_meetings.id", ondelete="CASCADE"), nullable=False
    )
    reflection_text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("player_id", "meeting_id", name="uq_reflections_player_meeting"),
    )


# ---------------------------------------------------------------------------
# Settings — gameplay tuning
# ---------------------------------------------------------------------------
class Setting(Base):
    """Key-value configuration store.

    Gameplay knobs (prize-pool ratio, vote quorum, coin cap, XP curve) live
    here so admins can adjust them without redeploying.  Values are stored
    as JSON strings.
    """
    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value_json: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="general")
    description: Mapped[str | None] = mapped_column(Text, default=None)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_settings_category", "category"),
    )

    def __repr__(self) -> str:
        return f"<Setting key={self.key!r} category={self.category!r}>"
