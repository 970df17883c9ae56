"""
boardgame.services.player_service — Profiles, Badges & Progression
===================================================================

Account rows, the player's chosen role, score, XP/level, earned badges
and completed practice scenarios.  Session-scoped helpers take an open
:class:`Session` so other services can compose them inside one
transaction; engine-level wrappers open their own.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from boardgame.catalog import get_role
from boardgame.database.engine import get_session
from boardgame.database.models import CompletedScenario, Player, PlayerBadge
from boardgame.engine.scoring import level_for_xp, xp_for_score
from boardgame.services.settings_service import gameplay_value

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


# ---------------------------------------------------------------------------
# Session-scoped helpers
# ---------------------------------------------------------------------------

def load_player(session: Session, player_id: int) -> Player:
    player = session.get(Player, player_id)
    if player is None:
        raise LookupError("Player not found")
    return player


def add_badge(session: Session, player_id: int, badge: str) -> bool:
    """Add *badge* unless the player already holds it.  Returns True if new."""
    exists = session.scalar(
        select(PlayerBadge.id).where(
            PlayerBadge.player_id == player_id, PlayerBadge.badge == badge
        )
    )
    if exists is not None:
        return False
    session.add(PlayerBadge(player_id=player_id, badge=badge))
    session.flush()
    logger.info("Player %d earned badge %s", player_id, badge)
    return True


def add_score(session: Session, player_id: int, delta: int) -> Player:
    player = load_player(session, player_id)
    player.score = (player.score or 0) + delta
    return player


def record_completion(
    session: Session,
    player_id: int,
    scenario_id: str,
    role_id: str,
    score: float,
) -> CompletedScenario:
    """Store a scored scenario and grant XP; level is recomputed."""
    player = load_player(session, player_id)
    xp = xp_for_score(score, int(gameplay_value(session, "progression.xp_per_score_point")))
    per_level = int(gameplay_value(session, "progression.xp_per_level"))

    completion = CompletedScenario(
        player_id=player_id, scenario_id=scenario_id, role_id=role_id, score=score,
    )
    session.add(completion)

    old_level = player.level
    player.experience = (player.experience or 0) + xp
    player.level = level_for_xp(player.experience, per_level)

    progress = dict(player.progress or {})
    completed = list(progress.get("completed_scenarios", []))
    if scenario_id not in completed:
        completed.append(scenario_id)
    progress["completed_scenarios"] = completed
    player.progress = progress

    session.flush()
    if player.level > old_level:
        logger.info("Player %d reached level %d", player_id, player.level)
    return completion


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

def create_player(engine: Engine, *, email: str, name: str, password_hash: str) -> Player:
    """Register a new account.

    Raises
    ------
    ValueError
        If the email is already registered or the name is blank.
    """
    email = _normalize_email(email)
    name = name.strip()
    if not name:
        raise ValueError("Name is required")
    try:
        with get_session(engine) as session:
            if session.scalar(select(Player.id).where(Player.email == email)) is not None:
                raise ValueError("Email already registered")
            player = Player(email=email, name=name, password_hash=password_hash, progress={})
            session.add(player)
            session.flush()
    except IntegrityError:
        raise ValueError("Email already registered") from None
    logger.info("Registered player %d (%s)", player.id, email)
    return player


def get_or_create_player(engine: Engine, *, email: str, name: str, password_hash: str) -> Player:
    existing = get_player_by_email(engine, email)
    if existing is not None:
        return existing
    return create_player(engine, email=email, name=name, password_hash=password_hash)


def get_player(engine: Engine, player_id: int) -> Player | None:
    with get_session(engine) as session:
        return session.get(Player, player_id)


def get_player_by_email(engine: Engine, email: str) -> Player | None:
    with get_session(engine) as session:
        return session.scalar(select(Player).where(Player.email == _normalize_email(email)))


def get_profile(engine: Engine, player_id: int) -> dict:
    """Player plus badges and completed scenarios."""
    with get_session(engine) as session:
        player = load_player(session, player_id)
        badges = session.scalars(
            select(PlayerBadge)
            .where(PlayerBadge.player_id == player_id)
            .order_by(PlayerBadge.awarded_at, PlayerBadge.id)
        ).all()
        completed = session.scalars(
            select(CompletedScenario)
            .where(CompletedScenario.player_id == player_id)
            .order_by(CompletedScenario.completed_at, CompletedScenario.id)
        ).all()
        return {"player": player, "badges": list(badges), "completed": list(completed)}


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

def update_player_role(engine: Engine, player_id: int, role_id: str) -> Player:
    if get_role(role_id) is None:
        raise ValueError(f"Unknown role: {role_id}")
    with get_session(engine) as session:
        player = load_player(session, player_id)
        player.role = role_id
    logger.info("Player %d chose role %s", player_id, role_id)
    return player


def update_player_score(engine: Engine, player_id: int, delta: int) -> Player:
    with get_session(engine) as session:
        return add_score(session, player_id, delta)


def award_badge(engine: Engine, player_id: int, badge: str) -> bool:
    with get_session(engine) as session:
        load_player(session, player_id)
        return add_badge(session, player_id, badge)


def complete_scenario(
    engine: Engine,
    player_id: int,
    scenario_id: str,
    role_id: str,
    score: float,
) -> CompletedScenario:
    with get_session(engine) as session:
        return record_completion(session, player_id, scenario_id, role_id, score)


def leaderboard(engine: Engine, limit: int = 20) -> list[Player]:
    with get_session(engine) as session:
        rows = session.scalars(
            select(Player).order_by(Player.score.desc(), Player.id).limit(limit)
        ).all()
        return list(rows)
