"""Initial Board Game schema

Revision ID: 4c2e9b7a1f03
Revises:
Create Date: 2026-10-19 10:12:41.118204

"""
from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '4c2e9b7a1f03'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now())


def _player_fk(name: str, *, nullable: bool = False, ondelete: str = "CASCADE") -> sa.Column:
    return sa.Column(
        name, sa.Integer, sa.ForeignKey("players.id", ondelete=ondelete), nullable=nullable
    )


def _session_fk() -> sa.Column:
    return sa.Column(
        "session_id", sa.Integer,
        sa.ForeignKey("game_sessions.id", ondelete="CASCADE"), nullable=False,
    )


def upgrade() -> None:
    """Create every table used by the game."""

    # --- players ---
    op.create_table(
        "players",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(50), nullable=True),
        sa.Column("score", sa.Integer, nullable=False, server_default="0"),
        sa.Column("experience", sa.Integer, nullable=False, server_default="0"),
        sa.Column("level", sa.Integer, nullable=False, server_default="1"),
        sa.Column("progress", JSON, nullable=True),
        _created_at(),
        _created_at("updated_at"),
    )
    op.create_index("ix_players_score_desc", "players", ["score"])

    op.create_table(
        "player_badges",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        _player_fk("player_id"),
        sa.Column("badge", sa.String(50), nullable=False),
        _created_at("awarded_at"),
        sa.UniqueConstraint("player_id", "badge", name="uq_player_badges_player_badge"),
    )

    op.create_table(
        "completed_scenarios",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        _player_fk("player_id"),
        sa.Column("scenario_id", sa.String(80), nullable=False),
        sa.Column("role_id", sa.String(50), nullable=False),
        sa.Column("score", sa.Float, nullable=False),
        _created_at("completed_at"),
    )
    op.create_index("ix_completed_scenarios_player", "completed_scenarios", ["player_id"])

    # --- sessions ---
    op.create_table(
        "game_sessions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        _player_fk("created_by"),
        sa.Column("status", sa.String(20), nullable=False, server_default="setup"),
        sa.Column("total_donations", sa.Float, server_default="0"),
        sa.Column("prize_pool", sa.Float, server_default="0"),
        sa.Column("current_agenda_item", sa.String(40), nullable=True),
        _player_fk("winner_id", nullable=True, ondelete="SET NULL"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index(
        "ix_game_sessions_status_created", "game_sessions", ["status", "created_at"]
    )

    op.create_table(
        "session_participants",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        _session_fk(),
        _player_fk("player_id"),
        sa.Column("role_id", sa.String(50), nullable=False),
        _created_at("joined_at"),
        sa.UniqueConstraint("session_id", "player_id", name="uq_participants_session_player"),
        sa.UniqueConstraint("session_id", "role_id", name="uq_participants_session_role"),
    )

    op.create_table(
        "donations",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        _session_fk(),
        _player_fk("player_id"),
        sa.Column("amount", sa.Float, nullable=False),
        _created_at(),
    )
    op.create_index("ix_donations_session", "donations", ["session_id"])

    op.create_table(
        "role_budgets",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        _session_fk(),
        sa.Column("role_id", sa.String(50), nullable=False),
        sa.Column("allocated_budget", sa.Float, server_default="0"),
        sa.Column("spent", sa.Float, server_default="0"),
        _created_at("updated_at"),
        sa.UniqueConstraint("session_id", "role_id", name="uq_role_budgets_session_role"),
    )

    # --- meeting artefacts ---
    op.create_table(
        "meeting_responses",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        _session_fk(),
        _player_fk("player_id"),
        sa.Column("agenda_item", sa.String(40), nullable=False),
        sa.Column("responses", JSON, nullable=True),
        sa.Column("points_earned", sa.Integer, server_default="0"),
        _created_at(),
        sa.UniqueConstraint(
            "session_id", "player_id", "agenda_item",
            name="uq_meeting_responses_session_player_item",
        ),
    )

    op.create_table(
        "meeting_minutes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "session_id", sa.Integer,
            sa.ForeignKey("game_sessions.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        _player_fk("secretary_id"),
        sa.Column("previous_minutes", sa.Text, nullable=True),
        sa.Column("current_minutes", sa.Text, nullable=True),
        sa.Column("approval_votes", JSON, nullable=True),
        _created_at("updated_at"),
    )

    op.create_table(
        "financial_summaries",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "session_id", sa.Integer,
            sa.ForeignKey("game_sessions.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        _player_fk("treasurer_id"),
        sa.Column("total_donations", sa.Float, server_default="0"),
        sa.Column("prize_pool", sa.Float, server_default="0"),
        sa.Column("budget_per_player", sa.Float, server_default="0"),
        sa.Column("budget_per_role", sa.Float, server_default="0"),
        sa.Column("budget_challenges", JSON, nullable=True),
        _created_at("updated_at"),
    )

    op.create_table(
        "motions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        _session_fk(),
        _player_fk("proposed_by"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("motion_type", sa.String(20), nullable=False),
        sa.Column("votes", JSON, nullable=True),
        sa.Column("status", sa.String(20), server_default="open"),
        _created_at(),
    )
    op.create_index("ix_motions_session", "motions", ["session_id"])

    op.create_table(
        "next_agendas",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "session_id", sa.Integer,
            sa.ForeignKey("game_sessions.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        sa.Column("agenda_items", JSON, nullable=True),
        _player_fk("updated_by"),
        _created_at("updated_at"),
    )

    # --- open-forum answers ---
    op.create_table(
        "scenario_questions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("role_id", sa.String(50), nullable=False),
        sa.Column("scenario_id", sa.String(80), nullable=False),
        sa.Column("question_key", sa.String(80), nullable=False),
        sa.Column("question_text", sa.Text, nullable=False),
        sa.Column("question_type", sa.String(30), nullable=False),
        sa.Column("options", JSON, nullable=True),
        sa.UniqueConstraint("scenario_id", "question_key", name="uq_scenario_questions_key"),
    )
    op.create_index("ix_scenario_questions_role", "scenario_questions", ["role_id"])

    op.create_table(
        "scenario_answers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        _session_fk(),
        _player_fk("player_id"),
        sa.Column(
            "question_id", sa.Integer,
            sa.ForeignKey("scenario_questions.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("answer_text", sa.Text, nullable=False),
        sa.Column("budget_used", sa.Float, server_default="0"),
        sa.Column("status", sa.String(20), server_default="pending"),
        sa.Column("final_score", sa.Float, nullable=True),
        sa.Column("total_coins", sa.Integer, server_default="0"),
        _created_at(),
        sa.UniqueConstraint(
            "session_id", "player_id", "question_id",
            name="uq_scenario_answers_session_player_question",
        ),
    )

    op.create_table(
        "answer_votes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "answer_id", sa.Integer,
            sa.ForeignKey("scenario_answers.id", ondelete="CASCADE"), nullable=False,
        ),
        _player_fk("voter_id"),
        sa.Column("coins_awarded", sa.Integer, server_default="0"),
        sa.Column("scores", JSON, nullable=True),
        sa.Column("feedback", sa.Text, nullable=True),
        _created_at(),
        sa.UniqueConstraint("answer_id", "voter_id", name="uq_answer_votes_answer_voter"),
    )

    # --- practice scenarios ---
    op.create_table(
        "scenario_responses",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        _player_fk("player_id"),
        sa.Column("scenario_id", sa.String(80), nullable=False),
        sa.Column("role_id", sa.String(50), nullable=False),
        sa.Column("responses", JSON, nullable=True),
        sa.Column("status", sa.String(20), server_default="pending"),
        sa.Column("final_score", sa.Float, nullable=True),
        _created_at("submitted_at"),
    )
    op.create_index("ix_scenario_responses_status", "scenario_responses", ["status"])

    op.create_table(
        "peer_votes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "response_id", sa.Integer,
            sa.ForeignKey("scenario_responses.id", ondelete="CASCADE"), nullable=False,
        ),
        _player_fk("voter_id"),
        sa.Column("scores", JSON, nullable=False),
        sa.Column("score", sa.Float, nullable=False),
        sa.Column("feedback", sa.Text, nullable=True),
        _created_at(),
        sa.UniqueConstraint("response_id", "voter_id", name="uq_peer_votes_response_voter"),
    )

    # --- board meetings ---
    op.create_table(
        "board_meetings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("agenda", JSON, nullable=True),
        sa.Column("minutes", JSON, nullable=True),
        sa.Column("status", sa.String(20), server_default="active"),
        _created_at(),
        _created_at("updated_at"),
    )

    op.create_table(
        "meeting_reflections",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        _player_fk("player_id"),
        sa.Column(
            "meeting_id", sa.Integer,
            sa.ForeignKey("board_meetings.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("reflection_text", sa.Text, nullable=False),
        _created_at(),
        sa.UniqueConstraint("player_id", "meeting_id", name="uq_reflections_player_meeting"),
    )

    # --- settings ---
    op.create_table(
        "settings",
        sa.Column("key", sa.String(100), primary_key=True),
        sa.Column("value_json", sa.Text, nullable=False),
        sa.Column("category", sa.String(50), nullable=False, server_default="general"),
        sa.Column("description", sa.Text, nullable=True),
        _created_at("updated_at"),
    )
    op.create_index("ix_settings_category", "settings", ["category"])


def downgrade() -> None:
    """Drop every table, children first."""
    for table in (
        "settings",
        "meeting_reflections",
        "board_meetings",
        "peer_votes",
        "scenario_responses",
        "answer_votes",
        "scenario_answers",
        "scenario_questions",
        "next_agendas",
        "motions",
        "financial_summaries",
        "meeting_minutes",
        "meeting_responses",
        "role_budgets",
        "donations",
        "session_participants",
        "game_sessions",
        "completed_scenarios",
        "player_badges",
        "players",
    ):
        op.drop_table(table)
