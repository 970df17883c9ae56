"""
boardgame.api.routes.catalog — Read-only game content
======================================================
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from boardgame import catalog
from boardgame.api.serializers import role_dict, scenario_dict
from boardgame.constants import AGENDA_ITEMS, AGENDA_TITLES, VOTING_CRITERIA

router = APIRouter(tags=["catalog"])


@router.get("/roles")
def list_roles():
    return {"roles": [role_dict(r) for r in catalog.ROLES]}


@router.get("/roles/{role_id}")
def get_role(role_id: str):
    role = catalog.get_role(role_id)
    if role is None:
        raise HTTPException(404, "Role not found")
    return role_dict(role)


@router.get("/roles/{role_id}/scenarios")
def list_role_scenarios(role_id: str):
    if catalog.get_role(role_id) is None:
        raise HTTPException(404, "Role not found")
    return {"scenarios": [scenario_dict(s) for s in catalog.get_scenarios_for_role(role_id)]}


@router.get("/scenarios/{scenario_id}/questions")
def list_scenario_questions(scenario_id: str):
    scenario = catalog.get_scenario(scenario_id)
    if scenario is None:
        raise HTTPException(404, "Scenario not found")
    return {
        "scenario": scenario_dict(scenario),
        "questions": [q.to_dict() for q in catalog.get_questions_for_scenario(scenario_id)],
        "criteria": VOTING_CRITERIA,
    }


@router.get("/agenda")
def get_agenda():
    """The fixed meeting agenda, in order."""
    return {
        "items": [
            {
                "id": item,
                "index": i,
                "title": AGENDA_TITLES[item][0],
                "description": AGENDA_TITLES[item][1],
            }
            for i, item in enumerate(AGENDA_ITEMS)
        ],
    }


@router.get("/agenda/{item}/questions")
def get_agenda_questions(item: str, role_id: str | None = None):
    if item not in AGENDA_ITEMS:
        raise HTTPException(404, "Agenda item not found")
    return {
        "agenda_item": item,
        "questions": [q.to_dict() for q in catalog.get_meeting_questions(item, role_id)],
    }
