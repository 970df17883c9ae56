"""
boardgame.constants — Shared Constants
=======================================

Single source of truth for the agenda order, phase names, voting criteria,
ballot choices, and badge identifiers.  Import from here instead of
duplicating string literals in services and routes.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Board-meeting agenda (in order)
# ---------------------------------------------------------------------------
AGENDA_ITEMS: tuple[str, ...] = (
    "call_to_order",
    "secretary_report",
    "treasurer_report",
    "committee_reports",
    "old_business",
    "new_business",
    "open_forum",
    "next_agenda",
    "adjournment",
)

AGENDA_TITLES: dict[str, tuple[str, str]] = {
    "call_to_order": ("Call to Order", "Executive Director opens the meeting"),
    "secretary_report": ("Secretary Report", "Review and approve previous minutes"),
    "treasurer_report": ("Treasurer Report", "Financial summary and budget allocation"),
    "committee_reports": ("Committee/Role Reports", "Each role presents their scenario questions"),
    "old_business": ("Old Business", "Follow up on previous motions"),
    "new_business": ("New Business", "New motions and proposals"),
    "open_forum": ("Open Forum / Scenarios", "Present scenario answers for voting"),
    "next_agenda": ("Next Agenda", "Plan items for next meeting"),
    "adjournment": ("Adjournment", "Executive Director closes meeting"),
}

# ---------------------------------------------------------------------------
# Role identifiers with special powers in the meeting
# ---------------------------------------------------------------------------
EXECUTIVE_DIRECTOR = "executive-director"
TREASURER = "treasurer"
SECRETARY = "secretary"

# ---------------------------------------------------------------------------
# Peer voting
# ---------------------------------------------------------------------------
VOTING_CRITERIA: dict[str, str] = {
    "leadership": "Demonstrates strong leadership qualities and vision",
    "communication": "Communicates clearly and effectively with stakeholders",
    "decision_making": "Makes well-reasoned decisions considering multiple factors",
    "collaboration": "Works effectively with others and builds consensus",
}
MIN_CRITERION_SCORE = 1
MAX_CRITERION_SCORE = 5

FEEDBACK_MAX_LENGTH = 500

MINUTES_CHOICES: tuple[str, ...] = ("approve", "reject", "amend")
MOTION_CHOICES: tuple[str, ...] = ("approve", "reject", "abstain")
MOTION_TYPES: tuple[str, ...] = ("old_business", "new_business")

# ---------------------------------------------------------------------------
# Badges
# ---------------------------------------------------------------------------
BADGE_DONOR = "donor"
BADGE_PEER_REVIEWER = "peer_reviewer"
BADGE_SCENARIO_VETERAN = "scenario_veteran"
BADGE_PRIZE_WINNER = "prize_winner"
