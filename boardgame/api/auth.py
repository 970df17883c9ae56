"""
boardgame.api.auth — Email/password accounts + JWT issuance
============================================================
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import jwt
from fastapi import APIRouter, Depends, HTTPException
from passlib.context import CryptContext
from pydantic import BaseModel, Field

from boardgame.api.deps import (
    JWT_ALGORITHM,
    JWT_SECRET,
    get_config,
    get_current_player,
    get_engine,
)
from boardgame.config import BoardGameConfig
from boardgame.database.engine import run_db
from boardgame.database.models import Player
from boardgame.services import player_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class RegisterRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=8, max_length=128)
    name: str = Field(min_length=1, max_length=100)


class LoginRequest(BaseModel):
    email: str
    password: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def issue_token(player: Player, cfg: BoardGameConfig) -> str:
    payload = {
        "sub": str(player.id),
        "name": player.name,
        "email": player.email,
        "is_admin": cfg.is_admin_email(player.email),
        "exp": datetime.now(UTC) + timedelta(hours=cfg.token_ttl_hours),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def _token_response(player: Player, cfg: BoardGameConfig) -> dict:
    return {
        "access_token": issue_token(player, cfg),
        "token_type": "bearer",
        "player": {
            "id": player.id,
            "name": player.name,
            "email": player.email,
            "role": player.role,
            "is_admin": cfg.is_admin_email(player.email),
        },
    }


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    cfg: BoardGameConfig = Depends(get_config),
    engine=Depends(get_engine),
):
    """Create an account and return a JWT."""
    try:
        player = await run_db(
            player_service.create_player,
            engine,
            email=body.email,
            name=body.name,
            password_hash=hash_password(body.password),
        )
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    return _token_response(player, cfg)


@router.post("/login")
async def login(
    body: LoginRequest,
    cfg: BoardGameConfig = Depends(get_config),
    engine=Depends(get_engine),
):
    """Exchange email + password for a JWT."""
    player = await run_db(player_service.get_player_by_email, engine, body.email)
    if player is None or not verify_password(body.password, player.password_hash):
        logger.warning("Failed login for %s", body.email.strip().lower())
        raise HTTPException(401, "Invalid email or password")
    return _token_response(player, cfg)


@router.get("/me")
async def me(player: dict = Depends(get_current_player)):
    """Return the current authenticated player's claims."""
    return {
        "id": player["player_id"],
        "name": player.get("name"),
        "email": player.get("email"),
        "is_admin": bool(player.get("is_admin")),
    }
