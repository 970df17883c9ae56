"""
boardgame.catalog — Roles, Scenarios & Question Banks
======================================================

Static game content.  The nine governance roles, the scenarios each role
can practise, the question sets attached to those scenarios, and the
questions asked at each stage of the board meeting.

The scenario question bank is also written to the ``scenario_questions``
table by :mod:`boardgame.database.seed` so open-forum answers can reference
a stable row id.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Role:
    id: str
    title: str
    description: str
    responsibilities: tuple[str, ...]
    difficulty: str  # Beginner | Intermediate | Advanced


@dataclass(frozen=True, slots=True)
class Scenario:
    id: str
    role_id: str
    title: str
    description: str
    type: str  # decision | meeting | crisis | planning
    difficulty: int  # 1–5
    time_required: str


@dataclass(frozen=True, slots=True)
class Question:
    """One question in a scenario set or on the meeting agenda.

    ``type`` is ``multiple_choice``, ``text``, ``scale`` (1–5) or ``budget``
    (a dollar amount drawn from the role's operating budget).
    """

    id: str
    text: str
    type: str
    options: tuple[str, ...] = ()
    max_length: int | None = None
    role_specific: tuple[str, ...] = field(default=())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "type": self.type,
            "options": list(self.options),
            "max_length": self.max_length,
            "role_specific": list(self.role_specific),
        }


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------
ROLES: tuple[Role, ...] = (
    Role(
        "executive-director", "Executive Director",
        "Lead the organization's strategic vision and overall operations",
        (
            "Strategic planning and organizational leadership",
            "Board meeting facilitation and governance",
            "Stakeholder relationship management",
            "Organizational policy development and implementation",
        ),
        "Advanced",
    ),
    Role(
        "treasurer", "Treasurer",
        "Manage financial resources, budgets, and fiscal planning",
        (
            "Budget planning and oversight",
            "Financial reporting to the board",
            "Expense approval workflows",
            "Revenue tracking and forecasting",
        ),
        "Advanced",
    ),
    Role(
        "secretary", "Secretary",
        "Document meetings, manage communications, and maintain records",
        (
            "Meeting documentation and minutes",
            "Board communications coordination",
            "Record keeping and archiving",
            "Compliance and governance tracking",
        ),
        "Intermediate",
    ),
    Role(
        "program-director", "Program Director",
        "Oversee program development, implementation, and evaluation",
        (
            "Program strategy and curriculum development",
            "Quality assurance and program evaluation",
            "Participant engagement and outcomes tracking",
            "Cross-program coordination and integration",
        ),
        "Advanced",
    ),
    Role(
        "project-director", "Project Director",
        "Manage specific projects from conception to completion",
        (
            "Project planning and timeline management",
            "Resource allocation and team coordination",
            "Risk assessment and mitigation strategies",
            "Project delivery and stakeholder reporting",
        ),
        "Intermediate",
    ),
    Role(
        "fundraising-director", "Fundraising Director",
        "Develop and execute fundraising strategies and donor relations",
        (
            "Fundraising campaign development and execution",
            "Donor relationship management and stewardship",
            "Corporate partnership and sponsorship development",
            "Fundraising event planning and coordination",
        ),
        "Advanced",
    ),
    Role(
        "grant-writer", "Grant Writer",
        "Research, write, and manage grant applications and reporting",
        (
            "Grant opportunity research and assessment",
            "Proposal writing and application submission",
            "Grant compliance and reporting management",
            "Funder relationship development and maintenance",
        ),
        "Intermediate",
    ),
    Role(
        "marketing-communications", "Marketing/Communications",
        "Manage brand messaging, marketing campaigns, and public relations",
        (
            "Brand strategy and messaging development",
            "Digital marketing and social media management",
            "Public relations and media outreach",
            "Content creation and campaign execution",
        ),
        "Intermediate",
    ),
    Role(
        "app-developer", "App Developer",
        "Design, develop, and maintain organizational technology solutions",
        (
            "Application development and maintenance",
            "Technical architecture and system design",
            "User experience optimization and testing",
            "Technology integration and automation",
        ),
        "Advanced",
    ),
)

ROLE_IDS: tuple[str, ...] = tuple(r.id for r in ROLES)
_ROLES_BY_ID: dict[str, Role] = {r.id: r for r in ROLES}


# ---------------------------------------------------------------------------
# Scenarios per role
# ---------------------------------------------------------------------------
def _s(role_id, sid, title, description, type_, difficulty, time_required):
    return Scenario(sid, role_id, title, description, type_, difficulty, time_required)


SCENARIOS: tuple[Scenario, ...] = (
    # Executive Director
    _s("executive-director", "board-meeting-facilitation", "Monthly Board Meeting Crisis",
       "Two board members are in heated disagreement about budget allocation. Facilitate "
       "resolution while keeping the meeting productive and maintaining board unity.",
       "meeting", 4, "45 minutes"),
    _s("executive-director", "strategic-pivot", "Strategic Direction Pivot",
       "Market conditions have changed dramatically. Lead the board through evaluating "
       "whether to pivot the organization's core mission or double down on current programs.",
       "planning", 5, "90 minutes"),
    _s("executive-director", "stakeholder-crisis", "Major Donor Withdrawal",
       "Your largest donor is threatening to withdraw funding due to concerns about "
       "organizational direction. Navigate this while preserving relationships.",
       "crisis", 5, "60 minutes"),
    # Treasurer
    _s("treasurer", "budget-shortfall", "Quarterly Budget Shortfall",
       "Revenue is 30% below projections. Present options to the board: cut programs, "
       "seek emergency funding, or restructure operations.",
       "crisis", 4, "60 minutes"),
    _s("treasurer", "annual-budget", "Annual Budget Planning",
       "Create next year's budget with input from all departments. Balance ambitious "
       "program goals with financial reality.",
       "planning", 3, "75 minutes"),
    _s("treasurer", "audit-preparation", "External Audit Preparation",
       "Prepare financial records and coordinate with auditors. Address discrepancies "
       "found in expense reporting from two departments.",
       "decision", 4, "90 minutes"),
    # Secretary
    _s("secretary", "governance-compliance", "Governance Compliance Review",
       "The state has updated nonprofit compliance requirements. Review current practices "
       "and implement necessary changes to maintain legal standing.",
       "decision", 3, "45 minutes"),
    _s("secretary", "meeting-minutes-dispute", "Meeting Minutes Dispute",
       "A board member disputes the accuracy of last month's minutes regarding a key vote. "
       "Navigate this diplomatically while maintaining accurate records.",
       "crisis", 3, "30 minutes"),
    _s("secretary", "policy-development", "New Policy Development",
       "Draft a new conflict of interest policy after a potential issue was raised. Ensure "
       "it is comprehensive yet practical for board implementation.",
       "planning", 4, "60 minutes"),
    # Program Director
    _s("program-director", "program-evaluation", "Program Impact Assessment",
       "Evaluate the effectiveness of three core programs. One is underperforming; recommend "
       "whether to modify, replace, or discontinue it.",
       "decision", 4, "75 minutes"),
    _s("program-director", "curriculum-crisis", "Curriculum Content Challenge",
       "Community members have raised concerns about program content being outdated. Assess "
       "and propose curriculum updates while managing stakeholder expectations.",
       "crisis", 4, "60 minutes"),
    _s("program-director", "new-program-launch", "New Program Development",
       "Design and launch a new community program based on identified needs. Coordinate "
       "with other departments and establish success metrics.",
       "planning", 5, "90 minutes"),
    # Project Director
    _s("project-director", "project-timeline-crisis", "Critical Project Delay",
       "A major project is 3 weeks behind schedule due to vendor issues. Develop a recovery "
       "plan while managing client expectations and team morale.",
       "crisis", 4, "45 minutes"),
    _s("project-director", "resource-allocation", "Multi-Project Resource Conflict",
       "Three projects need the same specialist team member simultaneously. Negotiate "
       "priorities and find creative solutions to avoid delays.",
       "decision", 3, "30 minutes"),
    _s("project-director", "scope-expansion", "Project Scope Expansion Request",
       "A client wants to significantly expand project scope mid-way through. Evaluate "
       "feasibility, costs, and impact on other commitments.",
       "decision", 4, "60 minutes"),
    # Fundraising Director
    _s("fundraising-director", "donor-stewardship-crisis", "Major Donor Relationship Crisis",
       "A major donor feels neglected and is considering redirecting their annual gift. "
       "Develop a stewardship recovery plan and rebuild the relationship.",
       "crisis", 4, "60 minutes"),
    _s("fundraising-director", "campaign-strategy", "Annual Fundraising Campaign",
       "Plan and launch the annual fundraising campaign. Set targets, develop messaging, "
       "and coordinate with marketing for maximum impact.",
       "planning", 4, "75 minutes"),
    _s("fundraising-director", "corporate-partnership", "Corporate Partnership Negotiation",
       "A major corporation wants to partner with the organization. Negotiate terms that "
       "align with mission while maximizing financial benefit.",
       "decision", 5, "90 minutes"),
    # Grant Writer
    _s("grant-writer", "urgent-grant-deadline", "Last-Minute Grant Opportunity",
       "A perfect-fit $200K grant has a submission deadline in 48 hours. Coordinate a rapid "
       "response while ensuring a quality application.",
       "crisis", 5, "90 minutes"),
    _s("grant-writer", "grant-rejection-analysis", "Grant Rejection Response",
       "Three major grant applications were rejected. Analyze feedback, identify improvement "
       "areas, and develop a strategy for resubmission.",
       "decision", 3, "45 minutes"),
    _s("grant-writer", "funder-relationship", "Funder Relationship Development",
       "Build relationships with five new potential funders. Research their priorities and "
       "develop tailored engagement strategies.",
       "planning", 4, "60 minutes"),
    # Marketing / Communications
    _s("marketing-communications", "brand-crisis", "Social Media Crisis Management",
       "Negative comments about the organization are trending on social media. Develop a "
       "response strategy while protecting brand reputation.",
       "crisis", 4, "30 minutes"),
    _s("marketing-communications", "campaign-launch", "Major Campaign Launch",
       "Launch a comprehensive marketing campaign for a new program. Coordinate messaging "
       "across all channels and measure initial impact.",
       "planning", 4, "75 minutes"),
    _s("marketing-communications", "media-opportunity", "Media Interview Opportunity",
       "A major news outlet wants to interview the Executive Director about organizational "
       "impact. Prepare talking points and manage the opportunity.",
       "decision", 3, "45 minutes"),
    # App Developer
    _s("app-developer", "system-outage", "Critical System Outage",
       "The main organizational database is down during a crucial fundraising event. "
       "Implement emergency solutions while planning permanent fixes.",
       "crisis", 5, "60 minutes"),
    _s("app-developer", "feature-prioritization", "Feature Development Prioritization",
       "Multiple departments want new features developed simultaneously. Evaluate requests, "
       "assess technical feasibility, and create a development roadmap.",
       "decision", 4, "45 minutes"),
    _s("app-developer", "integration-project", "Third-Party Integration Project",
       "Integrate the organization's systems with a new partner platform. Plan the technical "
       "architecture while ensuring data security and user experience.",
       "planning", 5, "90 minutes"),
)

_SCENARIOS_BY_ID: dict[str, Scenario] = {s.id: s for s in SCENARIOS}


# ---------------------------------------------------------------------------
# Scenario question sets
# ---------------------------------------------------------------------------
SCENARIO_QUESTIONS: dict[str, tuple[Question, ...]] = {
    "board-meeting-facilitation": (
        Question(
            "conflict_approach",
            "Two board members are in heated disagreement about budget allocation. "
            "What is your immediate approach to de-escalate the situation?",
            "multiple_choice",
            options=(
                "Call for a 10-minute break to let emotions cool down",
                "Redirect the conversation to focus on shared organizational goals",
                "Ask each member to present their position without interruption",
                "Table the discussion for the next meeting",
                "Facilitate a structured debate with time limits for each speaker",
            ),
        ),
        Question(
            "resolution_strategy",
            "Describe your strategy for finding common ground between the conflicting "
            "positions while maintaining board unity.",
            "text", max_length=500,
        ),
        Question(
            "meeting_productivity",
            "How important is it to resolve this conflict within the current meeting "
            "versus ensuring overall meeting productivity?",
            "scale",
        ),
        Question(
            "follow_up_plan",
            "What follow-up actions would you take after the meeting to ensure the "
            "relationship between the board members remains professional?",
            "text", max_length=300,
        ),
    ),
    "strategic-pivot": (
        Question(
            "assessment_approach",
            "Market conditions have changed dramatically. What is your first step in "
            "evaluating whether to pivot the organization's mission?",
            "multiple_choice",
            options=(
                "Conduct a comprehensive stakeholder survey",
                "Analyze financial projections for both scenarios",
                "Review competitor responses to market changes",
                "Consult with program staff about operational feasibility",
                "Schedule emergency board retreat for strategic planning",
            ),
        ),
        Question(
            "stakeholder_communication",
            "How would you communicate this potential strategic change to key "
            "stakeholders while the decision is still being evaluated?",
            "text", max_length=400,
        ),
        Question(
            "risk_tolerance",
            "How comfortable are you with making significant organizational changes "
            "based on market pressures?",
            "scale",
        ),
        Question(
            "decision_timeline",
            "Outline your proposed timeline and decision-making process for this "
            "strategic evaluation.",
            "text", max_length=350,
        ),
    ),
    "stakeholder-crisis": (
        Question(
            "immediate_response",
            "Your largest donor is threatening to withdraw funding. What is your "
            "immediate response strategy?",
            "multiple_choice",
            options=(
                "Schedule an urgent in-person meeting with the donor",
                "Prepare a detailed report addressing their specific concerns",
                "Involve other board members in the conversation",
                "Offer to modify organizational practices to address concerns",
                "Seek to understand the root cause of their dissatisfaction",
            ),
        ),
        Question(
            "relationship_preservation",
            "Describe how you would work to preserve the relationship while staying "
            "true to organizational values.",
            "text", max_length=450,
        ),
        Question(
            "compromise_willingness",
            "How willing are you to compromise organizational direction to maintain "
            "this major funding source?",
            "scale",
        ),
        Question(
            "contingency_planning",
            "What contingency plans would you develop in case the donor relationship "
            "cannot be salvaged?",
            "text", max_length=300,
        ),
    ),
    "budget-shortfall": (
        Question(
            "immediate_action",
            "Revenue is 30% below projections. What is your immediate recommendation "
            "to the board?",
            "multiple_choice",
            options=(
                "Implement across-the-board budget cuts of 30%",
                "Prioritize programs and cut the lowest-performing ones",
                "Launch an emergency fundraising campaign",
                "Seek bridge funding or loans to maintain operations",
                "Combine cost-cutting with revenue enhancement strategies",
            ),
        ),
        Question(
            "program_prioritization",
            "Explain your methodology for determining which programs to maintain, "
            "modify, or eliminate.",
            "text", max_length=400,
        ),
        Question(
            "transparency_level",
            "How transparent should the organization be with staff and stakeholders "
            "about the financial challenges?",
            "scale",
        ),
        Question(
            "recovery_timeline",
            "Outline your proposed timeline and milestones for financial recovery.",
            "text", max_length=350,
        ),
    ),
    "annual-budget": (
        Question(
            "budget_philosophy",
            "When creating the annual budget, what is your primary guiding principle?",
            "multiple_choice",
            options=(
                "Conservative projections with built-in contingencies",
                "Ambitious goals that stretch the organization",
                "Maintaining current service levels with modest growth",
                "Data-driven decisions based on historical performance",
                "Stakeholder input-driven priorities and allocations",
            ),
        ),
        Question(
            "department_conflicts",
            "How would you handle competing budget requests from different departments "
            "when resources are limited?",
            "text", max_length=400,
        ),
        Question(
            "growth_vs_stability",
            "How do you balance organizational growth ambitions with financial stability?",
            "scale",
        ),
        Question(
            "monitoring_system",
            "Describe the monitoring and adjustment system you would implement for the "
            "annual budget.",
            "text", max_length=300,
        ),
    ),
}


def _generic_questions(scenario: Scenario) -> tuple[Question, ...]:
    return (
        Question(
            "approach",
            f"{scenario.description} Describe how you would handle this situation.",
            "text", max_length=500,
        ),
        Question(
            "confidence",
            "How confident are you in your approach?",
            "scale",
        ),
    )


# ---------------------------------------------------------------------------
# Meeting questions per agenda item
# ---------------------------------------------------------------------------
MEETING_QUESTIONS: dict[str, tuple[Question, ...]] = {
    "call_to_order": (
        Question(
            "attendance_check",
            "As we call this meeting to order, how do you ensure all necessary parties "
            "are present and accounted for?",
            "multiple_choice",
            options=(
                "Take verbal roll call of all board members",
                "Check against the official member roster",
                "Verify quorum requirements are met",
                "Confirm all committee chairs are present",
                "All of the above",
            ),
        ),
    ),
    "secretary_report": (
        Question(
            "minutes_accuracy",
            "The Secretary presents the previous meeting minutes. What is your primary "
            "responsibility in reviewing them?",
            "multiple_choice",
            options=(
                "Verify accuracy of recorded decisions and votes",
                "Check that action items were properly documented",
                "Ensure your contributions were accurately captured",
                "Confirm attendance records are correct",
                "Review for any confidential information that should be redacted",
            ),
            role_specific=("secretary",),
        ),
        Question(
            "minutes_concerns",
            "If you notice an inaccuracy in the minutes, what is the appropriate course "
            "of action?",
            "multiple_choice",
            options=(
                "Raise the concern immediately during review",
                "Contact the Secretary privately after the meeting",
                "Submit written corrections before the next meeting",
                "Move to amend the minutes with specific corrections",
                "Wait until the next meeting to address it",
            ),
        ),
    ),
    "treasurer_report": (
        Question(
            "financial_report",
            "As Treasurer, present your financial report. What key metrics do you highlight?",
            "multiple_choice",
            options=(
                "Current cash position and monthly burn rate",
                "Budget vs. actual performance by department",
                "Outstanding receivables and payables",
                "Investment performance and reserve funds",
                "All financial metrics with trend analysis",
            ),
            role_specific=("treasurer",),
        ),
        Question(
            "budget_allocation",
            "Based on the reports, how would you allocate your role's budget for maximum "
            "organizational impact?",
            "budget",
            role_specific=(
                "executive-director", "treasurer", "program-director",
                "project-director", "fundraising-director",
            ),
        ),
    ),
    "committee_reports": (
        Question(
            "program_outcomes",
            "Program Director, report on this quarter's program effectiveness. What data "
            "do you present?",
            "multiple_choice",
            options=(
                "Participant enrollment and completion rates",
                "Program outcome measurements and impact data",
                "Cost per participant and program efficiency",
                "Stakeholder feedback and satisfaction scores",
                "Comprehensive dashboard with all key performance indicators",
            ),
            role_specific=("program-director",),
        ),
    ),
    "old_business": (
        Question(
            "action_items_review",
            "Reviewing action items from the previous meeting, how do you assess "
            "completion and accountability?",
            "multiple_choice",
            options=(
                "Go through each item systematically with responsible parties",
                "Focus only on overdue or incomplete items",
                "Request written status reports before the meeting",
                "Use a tracking system to monitor progress between meetings",
                "Implement a formal accountability framework",
            ),
        ),
        Question(
            "unfinished_business",
            "There's an unresolved policy issue from last meeting. How do you move it forward?",
            "text", max_length=300,
        ),
    ),
    "new_business": (
        Question(
            "new_initiative_proposal",
            "A new program initiative is proposed requiring significant resources. "
            "What's your evaluation approach?",
            "multiple_choice",
            options=(
                "Request detailed financial projections and ROI analysis",
                "Assess alignment with organizational mission and strategic plan",
                "Evaluate staff capacity and operational feasibility",
                "Consider market demand and competitive landscape",
                "Comprehensive evaluation including all factors above",
            ),
        ),
        Question(
            "resource_allocation",
            "How would you propose allocating resources for this new initiative from "
            "your role's perspective?",
            "text", max_length=400,
        ),
        Question(
            "budget_commitment",
            "What portion of your allocated budget would you commit to this new initiative?",
            "budget",
        ),
    ),
    "open_forum": (),
    "next_agenda": (),
    "adjournment": (
        Question(
            "meeting_effectiveness",
            "As we prepare to adjourn, how do you rate the effectiveness of this meeting?",
            "scale",
        ),
        Question(
            "action_items_clarity",
            "Are the action items and next steps clearly defined and assigned?",
            "multiple_choice",
            options=(
                "Yes, all items have clear owners and deadlines",
                "Mostly clear, but some items need clarification",
                "Several items lack specific assignments",
                "Action items are vague and need better definition",
                "No clear action items were established",
            ),
        ),
        Question(
            "next_meeting_preparation",
            "What preparation will you do before the next meeting to ensure continued progress?",
            "text", max_length=250,
        ),
    ),
}


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
def get_role(role_id: str) -> Role | None:
    return _ROLES_BY_ID.get(role_id)


def get_scenarios_for_role(role_id: str) -> list[Scenario]:
    return [s for s in SCENARIOS if s.role_id == role_id]


def get_scenario(scenario_id: str) -> Scenario | None:
    return _SCENARIOS_BY_ID.get(scenario_id)


def get_questions_for_scenario(scenario_id: str) -> list[Question]:
    """Question set for *scenario_id*; generic set when none is authored."""
    scenario = _SCENARIOS_BY_ID.get(scenario_id)
    if scenario is None:
        return []
    return list(SCENARIO_QUESTIONS.get(scenario_id) or _generic_questions(scenario))


def get_meeting_questions(agenda_item: str, role_id: str | None = None) -> list[Question]:
    """Questions asked at *agenda_item*.

    With a role, returns unrestricted questions plus those restricted to that
    role.  Without one, only the unrestricted questions.
    """
    questions = MEETING_QUESTIONS.get(agenda_item, ())
    if role_id:
        return [q for q in questions if not q.role_specific or role_id in q.role_specific]
    return [q for q in questions if not q.role_specific]


def validate_answer(question: Question, value: object) -> None:
    """Raise :class:`ValueError` if *value* isn't a valid answer to *question*.

    ``budget`` answers are only checked for being numeric here; whether the
    role can afford them depends on session state.
    """
    if question.type == "multiple_choice":
        if value not in question.options:
            raise ValueError(f"{question.id} must be one of the listed options")
    elif question.type == "text":
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{question.id} must be non-empty text")
        if question.max_length and len(value) > question.max_length:
            raise ValueError(f"{question.id} exceeds {question.max_length} characters")
    elif question.type == "scale":
        if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 5:
            raise ValueError(f"{question.id} must be a whole number from 1 to 5")
    elif question.type == "budget":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{question.id} must be a number")
        if not math.isfinite(value):
            raise ValueError(f"{question.id} must be a finite number")
