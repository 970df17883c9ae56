"""
tests/test_scenario_service.py — Practice Scenarios & Peer Votes
=================================================================
"""

from __future__ import annotations

import pytest

from boardgame.constants import BADGE_PEER_REVIEWER, BADGE_SCENARIO_VETERAN
from boardgame.database.models import AnswerStatus
from boardgame.services import player_service, scenario_service, settings_service
from conftest import make_player

ANNUAL_BUDGET = {
    "budget_philosophy": "Data-driven decisions based on historical performance",
    "department_conflicts": "Rank requests against the strategic plan.",
    "growth_vs_stability": 3,
    "monitoring_system": "Monthly variance review with the finance committee.",
}
GOOD = {"leadership": 4, "communication": 5, "decision_making": 3, "collaboration": 4}
GREAT = {"leadership": 5, "communication": 5, "decision_making": 5, "collaboration": 5}


@pytest.fixture
def trio(db_engine):
    """Treasurer author plus two reviewers."""
    author = make_player(db_engine, "Author", role="treasurer")
    first = make_player(db_engine, "Reviewer One", role="secretary")
    second = make_player(db_engine, "Reviewer Two", role="grant-writer")
    return author, first, second


class TestSubmitResponse:
    def test_submit(self, db_engine, trio):
        author, _, _ = trio
        response = scenario_service.submit_scenario_response(
            db_engine, author.id, "annual-budget", ANNUAL_BUDGET,
        )
        assert response.status == AnswerStatus.PENDING.value
        assert response.role_id == "treasurer"
        assert response.responses == ANNUAL_BUDGET

    def test_every_question_must_be_answered(self, db_engine, trio):
        author, _, _ = trio
        partial = {**ANNUAL_BUDGET, "monitoring_system": ""}
        with pytest.raises(ValueError, match="missing: monitoring_system"):
            scenario_service.submit_scenario_response(db_engine, author.id, "annual-budget", partial)

    def test_unknown_question(self, db_engine, trio):
        author, _, _ = trio
        with pytest.raises(ValueError, match="Unknown questions"):
            scenario_service.submit_scenario_response(
                db_engine, author.id, "annual-budget", {**ANNUAL_BUDGET, "bonus": "x"},
            )

    def test_answers_are_validated(self, db_engine, trio):
        author, _, _ = trio
        with pytest.raises(ValueError, match="growth_vs_stability"):
            scenario_service.submit_scenario_response(
                db_engine, author.id, "annual-budget", {**ANNUAL_BUDGET, "growth_vs_stability": 9},
            )

    def test_other_roles_scenario(self, db_engine, trio):
        _, reviewer, _ = trio
        with pytest.raises(PermissionError):
            scenario_service.submit_scenario_response(
                db_engine, reviewer.id, "annual-budget", ANNUAL_BUDGET,
            )

    def test_unknown_scenario(self, db_engine, trio):
        author, _, _ = trio
        with pytest.raises(LookupError):
            scenario_service.submit_scenario_response(db_engine, author.id, "nope", {})

    def test_generic_question_set(self, db_engine, trio):
        author, _, _ = trio
        response = scenario_service.submit_scenario_response(
            db_engine, author.id, "audit-preparation",
            {"approach": "Reconcile both ledgers first.", "confidence": 4},
        )
        assert response.scenario_id == "audit-preparation"


class TestPeerVotes:
    @pytest.fixture
    def response(self, db_engine, trio):
        author, _, _ = trio
        return scenario_service.submit_scenario_response(
            db_engine, author.id, "annual-budget", ANNUAL_BUDGET,
        )

    def test_quorum_scores_and_completes(self, db_engine, trio, response):
        author, first, second = trio

        pending = scenario_service.submit_peer_vote(db_engine, response.id, first.id, GOOD)
        assert pending["response"].status == AnswerStatus.PENDING.value
        assert pending["required_votes"] == 2

        done = scenario_service.submit_peer_vote(
            db_engine, response.id, second.id, GREAT, feedback="Clear plan",
        )
        assert done["response"].status == AnswerStatus.SCORED.value
        assert done["response"].final_score == 4.5

        profile = player_service.get_profile(db_engine, author.id)
        assert profile["player"].experience == 90
        assert [c.scenario_id for c in profile["completed"]] == ["annual-budget"]
        assert BADGE_SCENARIO_VETERAN in [b.badge for b in profile["badges"]]

    def test_late_vote_is_recorded_without_rescoring(self, db_engine, trio, response):
        author, first, second = trio
        settings_service.upsert_setting(db_engine, key="voting.quorum", value=1)

        scored = scenario_service.submit_peer_vote(db_engine, response.id, first.id, GOOD)
        assert scored["response"].status == AnswerStatus.SCORED.value
        assert scored["response"].final_score == 4.0

        late = scenario_service.submit_peer_vote(db_engine, response.id, second.id, GREAT)
        assert late["vote"].id is not None
        assert late["vote_count"] == 2
        assert late["response"].final_score == 4.0

        profile = player_service.get_profile(db_engine, author.id)
        assert profile["player"].experience == 80
        assert len(profile["completed"]) == 1

    def test_voter_earns_reviewer_badge(self, db_engine, trio, response):
        _, first, _ = trio
        scenario_service.submit_peer_vote(db_engine, response.id, first.id, GOOD)
        profile = player_service.get_profile(db_engine, first.id)
        assert [b.badge for b in profile["badges"]] == [BADGE_PEER_REVIEWER]

    def test_self_vote(self, db_engine, trio, response):
        author, _, _ = trio
        with pytest.raises(PermissionError):
            scenario_service.submit_peer_vote(db_engine, response.id, author.id, GOOD)

    def test_duplicate_vote(self, db_engine, trio, response):
        _, first, _ = trio
        scenario_service.submit_peer_vote(db_engine, response.id, first.id, GOOD)
        with pytest.raises(ValueError, match="already voted"):
            scenario_service.submit_peer_vote(db_engine, response.id, first.id, GREAT)

    def test_criteria_required(self, db_engine, trio, response):
        _, first, _ = trio
        with pytest.raises(ValueError, match="Missing criteria"):
            scenario_service.submit_peer_vote(db_engine, response.id, first.id, {})

    def test_unknown_response(self, db_engine, trio):
        _, first, _ = trio
        with pytest.raises(LookupError):
            scenario_service.submit_peer_vote(db_engine, 999, first.id, GOOD)

    def test_queues(self, db_engine, trio, response):
        author, first, second = trio

        assert [r.id for r in scenario_service.get_responses_needing_votes(db_engine, first.id)] == [response.id]
        assert scenario_service.get_responses_needing_votes(db_engine, author.id) == []

        scenario_service.submit_peer_vote(db_engine, response.id, first.id, GOOD)
        assert scenario_service.get_responses_needing_votes(db_engine, first.id) == []
        assert len(scenario_service.get_responses_needing_votes(db_engine, second.id)) == 1

        mine = scenario_service.get_my_responses(db_engine, author.id)
        assert [r.id for r in mine] == [response.id]
