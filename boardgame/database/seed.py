"""
boardgame.database.seed — Default Settings & Question Bank Seeder
==================================================================

Baseline gameplay settings and the scenario question bank, written on
first startup so a fresh database is immediately playable.

Idempotent — only inserts rows that don't already exist.  Admin edits
to settings are never overwritten.
"""

from __future__ import annotations

import json
import logging

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from boardgame.catalog import SCENARIOS, get_questions_for_scenario
from boardgame.database.models import ScenarioQuestion, Setting

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Default settings catalogue
# ---------------------------------------------------------------------------
DEFAULT_SETTINGS: dict[str, tuple[object, str, str]] = {
    "economy.prize_pool_ratio": (
        0.5, "economy", "Share of donations reserved for the prize pool (0-1)",
    ),
    "donations.min_amount": (1.0, "economy", "Smallest donation accepted"),
    "voting.quorum": (
        3, "voting", "Peer votes needed before an answer or response is scored",
    ),
    "voting.max_coins_per_vote": (5, "voting", "Most coins one voter may award"),
    "progression.xp_per_score_point": (
        20, "progression", "XP granted per point of a scored practice scenario",
    ),
    "progression.xp_per_level": (500, "progression", "XP needed per level"),
}
"""Each entry maps ``key`` → ``(default_value, category, description)``."""


# ---------------------------------------------------------------------------
# Seeders
# ---------------------------------------------------------------------------
def seed_default_settings(engine: Engine) -> None:
    """Insert default settings that don't yet exist."""
    session = Session(engine)
    inserted = 0
    try:
        for key, (value, category, desc) in DEFAULT_SETTINGS.items():
            if session.get(Setting, key) is None:
                session.add(Setting(
                    key=key,
                    value_json=json.dumps(value),
                    category=category,
                    description=desc,
                ))
                inserted += 1
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    if inserted:
        logger.info("Seeded %d default settings.", inserted)


def seed_question_bank(engine: Engine) -> None:
    """Write every catalog scenario question into ``scenario_questions``.

    Open-forum answers reference these rows by id, so the bank must exist
    before a meeting reaches committee reports.
    """
    session = Session(engine)
    inserted = 0
    try:
        existing = {
            (scenario_id, key)
            for scenario_id, key in session.execute(
                select(ScenarioQuestion.scenario_id, ScenarioQuestion.question_key)
            )
        }
        for scenario in SCENARIOS:
            for q in get_questions_for_scenario(scenario.id):
                if (scenario.id, q.id) in existing:
                    continue
                session.add(ScenarioQuestion(
                    role_id=scenario.role_id,
                    scenario_id=scenario.id,
                    question_key=q.id,
                    question_text=q.text,
                    question_type=q.type,
                    options=list(q.options),
                ))
                inserted += 1
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    if inserted:
        logger.info("Seeded %d scenario questions.", inserted)
