"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of boardgame.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from boardgame.config import BoardGameConfig  # noqa: E402
from boardgame.database.engine import init_db  # noqa: E402
from boardgame.services import player_service, session_service  # noqa: E402

ADMIN_EMAIL = "admin@example.org"


@pytest.fixture
def db_engine() -> Engine:
    """In-memory SQLite engine with all tables, default settings and the
    scenario question bank.

    Uses StaticPool so every thread (TestClient runs sync routes in a
    worker thread) shares the same in-memory database.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return engine


@pytest.fixture
def test_config() -> BoardGameConfig:
    return BoardGameConfig(
        game_name="The Board Game",
        tagline="Test tagline",
        dashboard_port=8000,
        admin_emails=frozenset({ADMIN_EMAIL}),
        token_ttl_hours=1,
    )


@pytest.fixture
def client(db_engine, test_config):
    """FastAPI TestClient wired to the test engine and config.

    No ``with`` block, so the lifespan (which would build the real engine)
    never runs.
    """
    from fastapi.testclient import TestClient

    from boardgame.api.deps import get_config, get_engine
    from boardgame.api.main import app

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_config] = lambda: test_config
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
def make_player(engine: Engine, name: str, email: str | None = None, role: str | None = None):
    """Insert a player directly (no password hashing)."""
    player = player_service.create_player(
        engine,
        email=email or f"{name.lower().replace(' ', '.')}@example.org",
        name=name,
        password_hash="not-a-real-hash",
    )
    if role is not None:
        player = player_service.update_player_role(engine, player.id, role)
    return player


def make_token(player_id: int, *, name: str = "Player", is_admin: bool = False) -> str:
    """Create a player JWT.  Usable from any test module."""
    from datetime import UTC, datetime, timedelta

    import jwt

    from boardgame.api.deps import JWT_ALGORITHM, JWT_SECRET

    return jwt.encode(
        {
            "sub": str(player_id),
            "name": name,
            "is_admin": is_admin,
            "exp": datetime.now(UTC) + timedelta(hours=1),
        },
        JWT_SECRET,
        algorithm=JWT_ALGORITHM,
    )


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def seat_players(engine: Engine, roles: list[str]):
    """Create a session whose first player is the creator; one player per role.

    Returns ``(game, players)`` with ``players`` in the order of *roles*.
    """
    players = [make_player(engine, f"Player {i}") for i in range(len(roles))]
    game = session_service.create_game_session(engine, "Spring Board Meeting", players[0].id)
    for player, role in zip(players, roles, strict=True):
        session_service.join_session(engine, game.id, player.id, role)
    return game, players
