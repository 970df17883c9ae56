"""
boardgame.database.engine — Database Connection & Async Helper
===============================================================

SQLAlchemy + psycopg2 is synchronous.  The FastAPI auth routes are
``async def``, so any DB work they do is shipped to a thread pool via
:func:`run_db` to keep the event loop free.  Plain ``def`` routes are
already run in a worker thread by Starlette and call services directly.

Usage::

    from boardgame.database.engine import create_db_engine, init_db, run_db

    engine = create_db_engine()          # reads DATABASE_URL from .env
    init_db(engine)                      # CREATE TABLE IF NOT EXISTS …

    # Inside an async route:
    player = await run_db(get_player_by_email, engine, email)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session

from boardgame.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_db_engine(url: str | None = None) -> Engine:
    """Build a SQLAlchemy :class:`Engine` from *url* or ``DATABASE_URL``.

    The pool is sized for a classroom-scale deployment: five persistent
    connections, up to ten overflow, stale connections re-checked with
    ``pool_pre_ping`` and recycled hourly.

    Raises
    ------
    RuntimeError
        If neither *url* nor ``DATABASE_URL`` is set.
    """
    url = url or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example → .env and set a valid PostgreSQL URL."
        )

    if url.startswith("sqlite"):
        # SQLite has no connection pool sizing; keep it simple for local dev.
        engine = create_engine(url, echo=False)
    else:
        engine = create_engine(
            url,
            echo=False,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_timeout=10,
            pool_recycle=3600,
        )
    logger.info("Database engine created → %s", engine.url.host or engine.url.database)
    return engine


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine) -> None:
    """Create all tables, then seed default settings and the question bank.

    Safe to call on every startup.  In production the schema is owned by
    Alembic (``alembic upgrade head``); ``create_all`` covers dev and test
    databases where migrations have not run.
    """
    Base.metadata.create_all(engine)
    logger.info("Database tables verified / created.")

    from boardgame.database.seed import seed_default_settings, seed_question_bank

    seed_default_settings(engine)
    seed_question_bank(engine)


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine) -> Iterator[Session]:
    """Yield a :class:`Session` that commits on success and rolls back on
    exception.

    Objects stay readable after the block exits (``expire_on_commit=False``)
    so services can return ORM rows to the routes that serialize them.
    """
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run a synchronous database function on a background thread.

    ::

        result = await run_db(my_sync_db_function, engine, player_id)
    """
    return await asyncio.to_thread(func, *args, **kwargs)
