"""
boardgame.config — YAML Configuration Loader
=============================================

Reads ``config.yaml`` for **infrastructure-only** settings (game identity,
dashboard port, admin accounts, token lifetime).  Gameplay tuning values
(prize-pool ratio, vote quorum, coin caps, XP curve) live in the
``settings`` database table and are edited from the admin API.

Usage::

    from boardgame.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.game_name)         # "The Board Game"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


# ---------------------------------------------------------------------------
# Typed settings object — infrastructure/identity only.
# Gameplay tuning lives in the DB ``settings`` table.
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class BoardGameConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    game_name: str
    tagline: str

    # Dashboard
    dashboard_port: int

    # Accounts whose tokens carry ``is_admin``
    admin_emails: frozenset[str] = field(default_factory=frozenset)

    # JWT lifetime
    token_ttl_hours: int = 12

    def is_admin_email(self, email: str) -> bool:
        return email.strip().lower() in self.admin_emails


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> BoardGameConfig:
    """Read *path* and return a :class:`BoardGameConfig` instance.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return BoardGameConfig(
        game_name=raw["game_name"],
        tagline=raw["tagline"],
        dashboard_port=int(raw["dashboard_port"]),
        admin_emails=frozenset(
            str(e).strip().lower() for e in (raw.get("admin_emails") or [])
        ),
        token_ttl_hours=int(raw.get("token_ttl_hours", 12)),
    )
