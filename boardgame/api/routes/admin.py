"""
boardgame.api.routes.admin — Gameplay settings (admin only)
============================================================
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from boardgame.api.deps import get_current_admin, get_engine, service_errors
from boardgame.services import settings_service

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


class SettingUpdate(BaseModel):
    key: str
    value: Any
    category: str | None = None
    description: str | None = None


def _value(raw: str | None):
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return raw


@router.get("/settings")
def get_all_settings(
    admin: dict = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    rows = settings_service.get_all_settings(engine)
    return {
        "settings": [
            {
                "key": r.key,
                "value": _value(r.value_json),
                "category": r.category,
                "description": r.description,
                "updated_at": r.updated_at.isoformat() if r.updated_at else None,
            }
            for r in rows
        ],
    }


@router.put("/settings")
def update_settings(
    body: list[SettingUpdate],
    admin: dict = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    items = [
        {
            "key": s.key,
            "value": s.value,
            **({"category": s.category} if s.category else {}),
            **({"description": s.description} if s.description else {}),
        }
        for s in body
    ]
    with service_errors():
        count = settings_service.bulk_upsert(engine, items, actor_id=admin["player_id"])
    return {"updated": count}
