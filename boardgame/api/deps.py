"""
boardgame.api.deps — FastAPI dependency injection
==================================================
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache
from typing import Annotated

import jwt
from fastapi import Depends, Header, HTTPException, status
from jwt.exceptions import InvalidTokenError
from sqlalchemy import Engine

from boardgame.config import BoardGameConfig, load_config
from boardgame.database.engine import create_db_engine

_WEAK_SECRETS = frozenset({
    "boardgame-dev-secret-change-me",
    "change-me",
    "secret",
    "dev",
    "",
})

_MIN_SECRET_LENGTH = 32

JWT_ALGORITHM = "HS256"


def _load_jwt_secret() -> str:
    """Load and validate JWT_SECRET from the environment.

    Raises RuntimeError at import time if the secret is missing, blank,
    too short (< 32 chars), or a known weak default.
    """
    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is not set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(64))\""
        )
    if secret in _WEAK_SECRETS:
        raise RuntimeError(
            f"JWT_SECRET is set to a known weak default ('{secret}'). "
            "Please set a strong, unique secret."
        )
    if len(secret) < _MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET is too short ({len(secret)} chars). "
            f"Minimum length is {_MIN_SECRET_LENGTH} characters."
        )
    return secret


JWT_SECRET: str = _load_jwt_secret()


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> BoardGameConfig:
    return load_config()


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------
def _decode_bearer(authorization: str | None) -> dict:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except InvalidTokenError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")


def get_current_player(
    authorization: Annotated[str | None, Header()] = None,
) -> dict:
    """Validate JWT and return the player payload. Raises 401 if invalid.

    ``payload["player_id"]`` carries the ``sub`` claim as an int.
    """
    payload = _decode_bearer(authorization)
    try:
        payload["player_id"] = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    return payload


def get_current_admin(
    player: dict = Depends(get_current_player),
) -> dict:
    """Like :func:`get_current_player` but 403s for non-admins."""
    if not player.get("is_admin"):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Not admin")
    return player


# ---------------------------------------------------------------------------
# Service errors → HTTP
# ---------------------------------------------------------------------------
@contextmanager
def service_errors() -> Iterator[None]:
    """Translate service exceptions into HTTP responses.

    ``LookupError`` → 404, ``PermissionError`` → 403, ``ValueError`` → 400.
    """
    try:
        yield
    except KeyError:
        # KeyError is a LookupError but signals a bug, not a missing row.
        raise
    except LookupError as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, str(exc)) from exc
    except PermissionError as exc:
        raise HTTPException(status.HTTP_403_FORBIDDEN, str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(exc)) from exc
