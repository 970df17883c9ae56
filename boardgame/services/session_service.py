"""
boardgame.services.session_service — Sessions, Participants & Donations
========================================================================

A game session moves through ``setup → donations → meeting → completed``.
This module owns everything up to the start of the meeting: creating a
session, joining with a role (chosen or dealt at random), the donation
phase with its prize-pool and role-budget bookkeeping, and the final
results table read at adjournment.
"""

from __future__ import annotations

import logging
import math
import random
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from boardgame.catalog import ROLE_IDS, get_role
from boardgame.constants import BADGE_DONOR
from boardgame.database.engine import get_session
from boardgame.database.models import (
    AnswerStatus,
    Donation,
    GameSession,
    MeetingResponse,
    Player,
    RoleBudget,
    ScenarioAnswer,
    SessionParticipant,
    SessionStatus,
)
from boardgame.engine.budget import BudgetSplit, split_donations
from boardgame.services.player_service import add_badge, load_player
from boardgame.services.settings_service import gameplay_value

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (
    SessionStatus.SETUP.value,
    SessionStatus.DONATIONS.value,
    SessionStatus.MEETING.value,
)


# ---------------------------------------------------------------------------
# Session-scoped helpers (shared with the meeting and answer services)
# ---------------------------------------------------------------------------

def load_game_session(session: Session, session_id: int) -> GameSession:
    game = session.get(GameSession, session_id)
    if game is None:
        raise LookupError("Session not found")
    return game


def list_participants(session: Session, session_id: int) -> list[SessionParticipant]:
    return list(session.scalars(
        select(SessionParticipant)
        .where(SessionParticipant.session_id == session_id)
        .order_by(SessionParticipant.joined_at, SessionParticipant.id)
    ).all())


def find_participant(
    session: Session, session_id: int, player_id: int
) -> SessionParticipant | None:
    return session.scalar(
        select(SessionParticipant).where(
            SessionParticipant.session_id == session_id,
            SessionParticipant.player_id == player_id,
        )
    )


def require_participant(
    session: Session, session_id: int, player_id: int
) -> SessionParticipant:
    participant = find_participant(session, session_id, player_id)
    if participant is None:
        raise PermissionError("You are not a participant in this session")
    return participant


def find_role_budget(session: Session, session_id: int, role_id: str) -> RoleBudget | None:
    return session.scalar(
        select(RoleBudget).where(
            RoleBudget.session_id == session_id, RoleBudget.role_id == role_id
        )
    )


def current_split(session: Session, game: GameSession) -> BudgetSplit:
    """Recompute the donation split from stored donations."""
    amounts = session.scalars(
        select(Donation.amount).where(Donation.session_id == game.id)
    ).all()
    participant_count = session.scalar(
        select(func.count(SessionParticipant.id))
        .where(SessionParticipant.session_id == game.id)
    ) or 0
    ratio = float(gameplay_value(session, "economy.prize_pool_ratio"))
    return split_donations(amounts, participant_count, ratio=ratio)


def compute_results(session: Session, session_id: int) -> list[dict]:
    """Per-participant points, highest first; ties keep join order."""
    participants = list_participants(session, session_id)

    points = dict(session.execute(
        select(MeetingResponse.player_id, func.sum(MeetingResponse.points_earned))
        .where(MeetingResponse.session_id == session_id)
        .group_by(MeetingResponse.player_id)
    ).all())
    coins = dict(session.execute(
        select(ScenarioAnswer.player_id, func.sum(ScenarioAnswer.total_coins))
        .where(
            ScenarioAnswer.session_id == session_id,
            ScenarioAnswer.status == AnswerStatus.SCORED.value,
        )
        .group_by(ScenarioAnswer.player_id)
    ).all())
    names = dict(session.execute(
        select(Player.id, Player.name)
        .where(Player.id.in_([p.player_id for p in participants]))
    ).all())

    rows = []
    for p in participants:
        meeting_points = int(points.get(p.player_id) or 0)
        coin_total = int(coins.get(p.player_id) or 0)
        rows.append({
            "player_id": p.player_id,
            "name": names.get(p.player_id),
            "role_id": p.role_id,
            "meeting_points": meeting_points,
            "coins": coin_total,
            "total": meeting_points + coin_total,
        })
    rows.sort(key=lambda r: r["total"], reverse=True)
    return rows


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

def create_game_session(engine: Engine, name: str, creator_id: int) -> GameSession:
    name = name.strip()
    if not name:
        raise ValueError("Session name is required")
    with get_session(engine) as session:
        load_player(session, creator_id)
        game = GameSession(
            name=name,
            created_by=creator_id,
            status=SessionStatus.SETUP.value,
            total_donations=0.0,
            prize_pool=0.0,
        )
        session.add(game)
        session.flush()
    logger.info("Session %d created by player %d", game.id, creator_id)
    return game


def get_game_session(engine: Engine, session_id: int) -> GameSession:
    with get_session(engine) as session:
        return load_game_session(session, session_id)


def get_current_session(engine: Engine) -> GameSession | None:
    """Most recent session that hasn't completed."""
    with get_session(engine) as session:
        return session.scalar(
            select(GameSession)
            .where(GameSession.status.in_(ACTIVE_STATUSES))
            .order_by(GameSession.created_at.desc(), GameSession.id.desc())
            .limit(1)
        )


def get_session_state(engine: Engine, session_id: int) -> dict:
    """Session plus participants, donations, role budgets and the split."""
    with get_session(engine) as session:
        game = load_game_session(session, session_id)
        participants = list_participants(session, session_id)
        donations = session.scalars(
            select(Donation)
            .where(Donation.session_id == session_id)
            .order_by(Donation.created_at, Donation.id)
        ).all()
        budgets = session.scalars(
            select(RoleBudget)
            .where(RoleBudget.session_id == session_id)
            .order_by(RoleBudget.role_id)
        ).all()
        names = dict(session.execute(
            select(Player.id, Player.name)
            .where(Player.id.in_([p.player_id for p in participants]))
        ).all())
        return {
            "session": game,
            "participants": participants,
            "player_names": names,
            "donations": list(donations),
            "role_budgets": list(budgets),
            "split": current_split(session, game),
        }


# ---------------------------------------------------------------------------
# Joining
# ---------------------------------------------------------------------------

def join_session(engine: Engine, session_id: int, player_id: int, role_id: str) -> SessionParticipant:
    """Join *session_id* as *role_id*; the player's profile role follows.

    Raises
    ------
    LookupError
        Unknown session or player.
    ValueError
        Unknown role, completed session, already joined, or role taken.
    """
    if get_role(role_id) is None:
        raise ValueError(f"Unknown role: {role_id}")
    try:
        with get_session(engine) as session:
            game = load_game_session(session, session_id)
            if game.status == SessionStatus.COMPLETED.value:
                raise ValueError("Session has already completed")
            player = load_player(session, player_id)
            if find_participant(session, session_id, player_id) is not None:
                raise ValueError("You have already joined this session")
            taken = session.scalar(
                select(SessionParticipant.id).where(
                    SessionParticipant.session_id == session_id,
                    SessionParticipant.role_id == role_id,
                )
            )
            if taken is not None:
                raise ValueError(f"Role {role_id} is already taken in this session")

            participant = SessionParticipant(
                session_id=session_id, player_id=player_id, role_id=role_id,
            )
            session.add(participant)
            player.role = role_id
            session.flush()
    except IntegrityError:
        logger.warning("Join race on session %d role %s", session_id, role_id)
        raise ValueError("Role already taken or player already joined") from None

    logger.info("Player %d joined session %d as %s", player_id, session_id, role_id)
    return participant


def available_roles(engine: Engine, session_id: int) -> list[str]:
    with get_session(engine) as session:
        load_game_session(session, session_id)
        taken = set(session.scalars(
            select(SessionParticipant.role_id)
            .where(SessionParticipant.session_id == session_id)
        ).all())
    return [r for r in ROLE_IDS if r not in taken]


def assign_random_role(
    engine: Engine,
    session_id: int,
    player_id: int,
    rng: random.Random | None = None,
) -> SessionParticipant:
    """Join *session_id* with a role drawn from those still free."""
    free = available_roles(engine, session_id)
    if not free:
        raise ValueError("All roles in this session are taken")
    role_id = (rng or random).choice(free)
    return join_session(engine, session_id, player_id, role_id)


def get_user_participation(engine: Engine, session_id: int, player_id: int) -> SessionParticipant | None:
    with get_session(engine) as session:
        return find_participant(session, session_id, player_id)


# ---------------------------------------------------------------------------
# Phase transitions
# ---------------------------------------------------------------------------

def _require_creator(game: GameSession, player_id: int) -> None:
    if game.created_by != player_id:
        raise PermissionError("Only the session creator can do that")


def start_donation_phase(engine: Engine, session_id: int, player_id: int) -> GameSession:
    with get_session(engine) as session:
        game = load_game_session(session, session_id)
        _require_creator(game, player_id)
        if game.status != SessionStatus.SETUP.value:
            raise ValueError("Donations can only start from setup")
        game.status = SessionStatus.DONATIONS.value
        game.started_at = datetime.now(UTC)
    logger.info("Session %d entered donations", session_id)
    return game


def start_meeting(engine: Engine, session_id: int, player_id: int) -> GameSession:
    with get_session(engine) as session:
        game = load_game_session(session, session_id)
        _require_creator(game, player_id)
        if game.status not in (SessionStatus.SETUP.value, SessionStatus.DONATIONS.value):
            raise ValueError("The meeting can only start from setup or donations")
        if not list_participants(session, session_id):
            raise ValueError("At least one participant is needed to start the meeting")
        game.status = SessionStatus.MEETING.value
        game.current_agenda_item = "call_to_order"
        if game.started_at is None:
            game.started_at = datetime.now(UTC)
    logger.info("Session %d meeting started", session_id)
    return game


# ---------------------------------------------------------------------------
# Donations
# ---------------------------------------------------------------------------

def make_donation(engine: Engine, session_id: int, player_id: int, amount: float) -> tuple[Donation, BudgetSplit]:
    """Record a donation and refresh the session's totals and role budgets.

    Totals are always re-summed from the stored donations.  Each role's
    ``allocated_budget`` is set to the new per-role share; amounts already
    spent are kept.
    """
    with get_session(engine) as session:
        game = load_game_session(session, session_id)
        if game.status not in (SessionStatus.SETUP.value, SessionStatus.DONATIONS.value):
            raise ValueError("Donations are closed for this session")
        require_participant(session, session_id, player_id)

        min_amount = float(gameplay_value(session, "donations.min_amount"))
        amount = float(amount)
        if not math.isfinite(amount):
            raise ValueError("Donation amount must be a finite number")
        amount = round(amount, 2)
        if amount < min_amount:
            raise ValueError(f"Minimum donation is {min_amount:.2f}")

        first = session.scalar(
            select(Donation.id).where(Donation.player_id == player_id).limit(1)
        ) is None

        donation = Donation(session_id=session_id, player_id=player_id, amount=amount)
        session.add(donation)
        session.flush()

        split = current_split(session, game)
        game.total_donations = split.total
        game.prize_pool = split.prize_pool

        for role_id in ROLE_IDS:
            budget = find_role_budget(session, session_id, role_id)
            if budget is None:
                session.add(RoleBudget(
                    session_id=session_id,
                    role_id=role_id,
                    allocated_budget=split.per_role,
                    spent=0.0,
                ))
            else:
                budget.allocated_budget = split.per_role

        if first:
            add_badge(session, player_id, BADGE_DONOR)

    logger.info(
        "Player %d donated %.2f to session %d (total %.2f, pool %.2f)",
        player_id, amount, session_id, split.total, split.prize_pool,
    )
    return donation, split


def get_user_donation(engine: Engine, session_id: int, player_id: int) -> float:
    """Total donated by *player_id* in *session_id*."""
    with get_session(engine) as session:
        total = session.scalar(
            select(func.coalesce(func.sum(Donation.amount), 0.0)).where(
                Donation.session_id == session_id, Donation.player_id == player_id,
            )
        )
    return round(float(total or 0.0), 2)


def get_role_budget(engine: Engine, session_id: int, role_id: str) -> RoleBudget | None:
    with get_session(engine) as session:
        return find_role_budget(session, session_id, role_id)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

def session_results(engine: Engine, session_id: int) -> dict:
    with get_session(engine) as session:
        game = load_game_session(session, session_id)
        return {"session": game, "results": compute_results(session, session_id)}
