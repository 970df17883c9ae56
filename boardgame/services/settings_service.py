"""
boardgame.services.settings_service — Settings CRUD
====================================================

Typed read/write access to the ``settings`` table.  Gameplay code reads
values through :func:`gameplay_value`, which falls back to the seeded
default when an admin has deleted or corrupted a row.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from boardgame.database.engine import get_session
from boardgame.database.models import Setting
from boardgame.database.seed import DEFAULT_SETTINGS

logger = logging.getLogger(__name__)

# Bounds enforced on admin edits of known gameplay keys: key → (min, max)
_NUMERIC_BOUNDS: dict[str, tuple[float, float | None]] = {
    "economy.prize_pool_ratio": (0.0, 1.0),
    "donations.min_amount": (0.01, None),
    "voting.quorum": (1, None),
    "voting.max_coins_per_vote": (0, None),
    "progression.xp_per_score_point": (0, None),
    "progression.xp_per_level": (1, None),
}
_INTEGER_KEYS = frozenset({
    "voting.quorum",
    "voting.max_coins_per_vote",
    "progression.xp_per_score_point",
    "progression.xp_per_level",
})


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def get_setting_value(session: Session, key: str, default=None):
    """Read a single setting's parsed value from an existing session.

    Returns *default* when the key does not exist, and the raw string when
    the stored JSON is invalid.
    """
    row = session.get(Setting, key)
    if row is None:
        return default
    try:
        return json.loads(row.value_json)
    except (json.JSONDecodeError, TypeError):
        return row.value_json


def gameplay_value(session: Session, key: str):
    """Read a seeded gameplay setting, falling back to its default.

    Non-numeric values (a hand-edited row, say) also fall back, so the
    rules engine always receives a number.
    """
    default = DEFAULT_SETTINGS[key][0]
    value = get_setting_value(session, key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        logger.warning("Setting %s has non-numeric value %r; using default", key, value)
        return default
    return value


def get_all_settings(engine) -> list[Setting]:
    """Fetch every setting row, ordered by category then key."""
    with Session(engine) as session:
        rows = session.scalars(
            select(Setting).order_by(Setting.category, Setting.key)
        ).all()
        for r in rows:
            session.expunge(r)
        return list(rows)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def validate_setting(key: str, value: Any) -> None:
    """Raise :class:`ValueError` if *value* is out of range for a known key."""
    bounds = _NUMERIC_BOUNDS.get(key)
    if bounds is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    if not math.isfinite(value):
        raise ValueError(f"{key} must be a finite number")
    if key in _INTEGER_KEYS and not float(value).is_integer():
        raise ValueError(f"{key} must be a whole number")
    low, high = bounds
    if value < low or (high is not None and value > high):
        limit = f"between {low} and {high}" if high is not None else f"at least {low}"
        raise ValueError(f"{key} must be {limit}")


def upsert_setting(
    engine,
    *,
    key: str,
    value: Any,
    category: str = "general",
    description: str | None = None,
) -> Setting:
    """Insert or update a single setting."""
    validate_setting(key, value)
    value_json = json.dumps(value)
    with get_session(engine) as session:
        existing = session.get(Setting, key)
        if existing:
            existing.value_json = value_json
            if category:
                existing.category = category
            if description is not None:
                existing.description = description
        else:
            existing = Setting(
                key=key,
                value_json=value_json,
                category=category,
                description=description,
            )
            session.add(existing)
    logger.info("Setting %s updated", key)
    return existing


def bulk_upsert(engine, settings: list[dict], *, actor_id: int | None = None) -> int:
    """Upsert many settings at once.

    Each dict should have at least ``key`` and ``value``.
    Optional: ``category``, ``description``.  Every value is validated
    before anything is written, so one bad entry rejects the whole batch.

    Returns the number of rows touched.
    """
    for item in settings:
        validate_setting(item["key"], item["value"])

    count = 0
    with get_session(engine) as session:
        for item in settings:
            key = item["key"]
            value_json = json.dumps(item["value"])
            existing = session.get(Setting, key)
            if existing:
                existing.value_json = value_json
                if "category" in item:
                    existing.category = item["category"]
                if "description" in item:
                    existing.description = item["description"]
            else:
                default = DEFAULT_SETTINGS.get(key)
                session.add(Setting(
                    key=key,
                    value_json=value_json,
                    category=item.get("category", default[1] if default else "general"),
                    description=item.get("description", default[2] if default else None),
                ))
            count += 1

    logger.info("Admin %s updated %d settings", actor_id, count)
    return count
