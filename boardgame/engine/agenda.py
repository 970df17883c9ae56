"""
boardgame.engine.agenda — Meeting State Machine
================================================

The meeting walks the fixed agenda in :data:`~boardgame.constants.AGENDA_ITEMS`
one item at a time.  Each in-meeting action is only allowed at certain
agenda items, and some are reserved for a role (the Secretary owns the
minutes, the Treasurer owns the financial summary).

Pure logic — callers pass in the session's current item and the acting
player's role.
"""

from __future__ import annotations

from boardgame.constants import AGENDA_ITEMS, EXECUTIVE_DIRECTOR, SECRETARY, TREASURER

_ALL_ITEMS = frozenset(AGENDA_ITEMS)

# action → agenda items where it is allowed
ACTION_STAGES: dict[str, frozenset[str]] = {
    "agenda_response": _ALL_ITEMS,
    "submit_minutes": frozenset({"secretary_report"}),
    "vote_minutes": frozenset({"secretary_report"}),
    "submit_financial_summary": frozenset({"treasurer_report"}),
    "challenge_budget": frozenset({"treasurer_report"}),
    "propose_old_business": frozenset({"old_business"}),
    "propose_new_business": frozenset({"new_business"}),
    "vote_motion": frozenset({"old_business", "new_business"}),
    "submit_answer": frozenset({"committee_reports", "open_forum"}),
    "vote_answer": frozenset({"open_forum"}),
    "set_next_agenda": frozenset({"next_agenda"}),
}

# action → role that must perform it
ACTION_ROLES: dict[str, str] = {
    "submit_minutes": SECRETARY,
    "submit_financial_summary": TREASURER,
}


def agenda_index(item: str) -> int:
    try:
        return AGENDA_ITEMS.index(item)
    except ValueError:
        raise ValueError(f"Unknown agenda item: {item}") from None


def next_agenda_item(current: str) -> str | None:
    """Item after *current*, or ``None`` when *current* is adjournment."""
    idx = agenda_index(current)
    if idx + 1 >= len(AGENDA_ITEMS):
        return None
    return AGENDA_ITEMS[idx + 1]


def can_advance(role_id: str | None, is_creator: bool, has_executive_director: bool) -> bool:
    """Only the Executive Director moves the agenda forward.

    A session without an Executive Director would stall, so in that case
    the session creator may advance instead.
    """
    if role_id == EXECUTIVE_DIRECTOR:
        return True
    return is_creator and not has_executive_director


def require_stage(action: str, current: str | None) -> None:
    """Raise :class:`ValueError` unless *action* is allowed at *current*."""
    allowed = ACTION_STAGES.get(action)
    if allowed is None:
        raise ValueError(f"Unknown meeting action: {action}")
    if current not in allowed:
        stages = ", ".join(i for i in AGENDA_ITEMS if i in allowed)
        raise ValueError(
            f"Action '{action}' is only allowed during: {stages} "
            f"(current: {current or 'none'})"
        )


def require_role(action: str, role_id: str | None) -> None:
    """Raise :class:`PermissionError` if *action* is reserved for another role."""
    needed = ACTION_ROLES.get(action)
    if needed is not None and role_id != needed:
        raise PermissionError(f"Only the {needed} can perform '{action}'")
