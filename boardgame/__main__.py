"""
boardgame.__main__ — Entry point for ``python -m boardgame``
=============================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (identity, port, admin accounts).
3. Create the SQLAlchemy engine, ensure tables exist, seed defaults.
4. Serve the API with uvicorn (blocking).
"""

from __future__ import annotations

import logging

import uvicorn
from dotenv import load_dotenv

from boardgame.config import load_config
from boardgame.database.engine import create_db_engine, init_db

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("boardgame")


def main() -> None:
    """Bootstrap the database and run the API server."""
    load_dotenv()

    cfg = load_config()
    logger.info("Config loaded — %s: %s", cfg.game_name, cfg.tagline)

    engine = create_db_engine()
    init_db(engine)
    engine.dispose()

    uvicorn.run(
        "boardgame.api.main:app",
        host="0.0.0.0",
        port=cfg.dashboard_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
