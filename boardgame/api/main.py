"""
boardgame.api.main — FastAPI application entry point
=====================================================

Run with::

    uvicorn boardgame.api.main:app --reload --port 8000

or ``python -m boardgame``, which also creates tables and seeds defaults.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from boardgame import __version__  # noqa: E402
from boardgame.api.auth import router as auth_router  # noqa: E402
from boardgame.api.deps import get_config, get_engine  # noqa: E402
from boardgame.api.routes.admin import router as admin_router  # noqa: E402
from boardgame.api.routes.board_meetings import router as board_meetings_router  # noqa: E402
from boardgame.api.routes.catalog import router as catalog_router  # noqa: E402
from boardgame.api.routes.meeting import router as meeting_router  # noqa: E402
from boardgame.api.routes.players import router as players_router  # noqa: E402
from boardgame.api.routes.scenarios import router as scenarios_router  # noqa: E402
from boardgame.api.routes.sessions import router as sessions_router  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — warm the DB engine and config."""
    engine = get_engine()
    cfg = get_config()
    logger.info("%s API started — engine ready (%s)", cfg.game_name, engine.url.database)
    yield
    logger.info("%s API shutting down", cfg.game_name)


app = FastAPI(
    title="The Board Game API",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(auth_router, prefix="/api")
app.include_router(catalog_router, prefix="/api")
app.include_router(players_router, prefix="/api")
app.include_router(sessions_router, prefix="/api")
app.include_router(meeting_router, prefix="/api")
app.include_router(scenarios_router, prefix="/api")
app.include_router(board_meetings_router, prefix="/api")
app.include_router(admin_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
