"""
tests/test_answer_service.py — Open-Forum Answers & Coin Votes
===============================================================
"""

from __future__ import annotations

import pytest

from boardgame.constants import BADGE_PEER_REVIEWER
from boardgame.database.models import AnswerStatus
from boardgame.services import (
    answer_service,
    meeting_service,
    player_service,
    session_service,
    settings_service,
)
from conftest import seat_players

TRIO = ["executive-director", "treasurer", "secretary"]
SCORES = {"leadership": 4, "communication": 5, "decision_making": 3, "collaboration": 4}


def _advance(engine, game, chair, times):
    for _ in range(times):
        meeting_service.advance_agenda(engine, game.id, chair.id)


@pytest.fixture
def forum(db_engine):
    """Funded trio at committee reports (5.00 per role).

    Returns ``(game, ed, treasurer, secretary)``.
    """
    game, players = seat_players(db_engine, TRIO)
    session_service.make_donation(db_engine, game.id, players[0].id, 90)
    session_service.start_meeting(db_engine, game.id, players[0].id)
    _advance(db_engine, game, players[0], 3)  # → committee_reports
    return (game, *players)


def _first_question(engine, game, player):
    return answer_service.get_session_questions(engine, game.id, player.id)[0]


class TestQuestionBank:
    def test_questions_follow_session_role(self, db_engine, forum):
        game, _, treasurer, _ = forum
        questions = answer_service.get_session_questions(db_engine, game.id, treasurer.id)
        assert questions
        assert {q.role_id for q in questions} == {"treasurer"}

    def test_non_participant(self, db_engine, forum):
        game, *_ = forum
        with pytest.raises(PermissionError):
            answer_service.get_session_questions(db_engine, game.id, 999)


class TestSubmitAnswer:
    def test_spends_from_role_budget(self, db_engine, forum):
        game, _, treasurer, _ = forum
        question = _first_question(db_engine, game, treasurer)

        answer = answer_service.submit_scenario_answer(
            db_engine, game.id, treasurer.id, question.id, "Cut travel first.", budget_used=2,
        )

        assert answer.status == AnswerStatus.PENDING.value
        assert answer.budget_used == 2.0
        budget = session_service.get_role_budget(db_engine, game.id, "treasurer")
        assert budget.spent == 2.0
        assert budget.remaining == 3.0

    def test_over_budget(self, db_engine, forum):
        game, _, treasurer, _ = forum
        questions = answer_service.get_session_questions(db_engine, game.id, treasurer.id)
        answer_service.submit_scenario_answer(
            db_engine, game.id, treasurer.id, questions[0].id, "First", budget_used=2,
        )
        with pytest.raises(ValueError, match="remaining role budget"):
            answer_service.submit_scenario_answer(
                db_engine, game.id, treasurer.id, questions[1].id, "Second", budget_used=4,
            )

    def test_one_answer_per_question(self, db_engine, forum):
        game, _, treasurer, _ = forum
        question = _first_question(db_engine, game, treasurer)
        answer_service.submit_scenario_answer(db_engine, game.id, treasurer.id, question.id, "A")
        with pytest.raises(ValueError, match="already answered"):
            answer_service.submit_scenario_answer(db_engine, game.id, treasurer.id, question.id, "B")

    def test_other_roles_question(self, db_engine, forum):
        game, _, treasurer, secretary = forum
        question = _first_question(db_engine, game, secretary)
        with pytest.raises(PermissionError, match="another role"):
            answer_service.submit_scenario_answer(db_engine, game.id, treasurer.id, question.id, "A")

    def test_blank_answer(self, db_engine, forum):
        game, _, treasurer, _ = forum
        question = _first_question(db_engine, game, treasurer)
        with pytest.raises(ValueError, match="required"):
            answer_service.submit_scenario_answer(db_engine, game.id, treasurer.id, question.id, "  ")

    def test_unknown_question(self, db_engine, forum):
        game, _, treasurer, _ = forum
        with pytest.raises(LookupError):
            answer_service.submit_scenario_answer(db_engine, game.id, treasurer.id, 99999, "A")

    @pytest.mark.parametrize("budget_used", [float("inf"), float("nan")])
    def test_non_finite_budget_rejected(self, db_engine, forum, budget_used):
        game, _, treasurer, _ = forum
        question = _first_question(db_engine, game, treasurer)
        with pytest.raises(ValueError, match="finite"):
            answer_service.submit_scenario_answer(
                db_engine, game.id, treasurer.id, question.id, "A", budget_used=budget_used,
            )
        assert session_service.get_role_budget(db_engine, game.id, "treasurer").spent == 0.0

    def test_multiple_choice_question_takes_free_text(self, db_engine, forum):
        game, _, treasurer, _ = forum
        questions = answer_service.get_session_questions(db_engine, game.id, treasurer.id)
        question = next(q for q in questions if q.question_type == "multiple_choice")
        assert question.options

        answer = answer_service.submit_scenario_answer(
            db_engine, game.id, treasurer.id, question.id,
            "Mix modest cuts with a targeted appeal to major donors.",
        )
        assert answer.answer_text not in question.options

    def test_wrong_stage(self, db_engine, forum):
        game, ed, treasurer, _ = forum
        _advance(db_engine, game, ed, 1)  # → old_business
        question = _first_question(db_engine, game, treasurer)
        with pytest.raises(ValueError, match="committee_reports, open_forum"):
            answer_service.submit_scenario_answer(db_engine, game.id, treasurer.id, question.id, "A")


class TestVoting:
    @pytest.fixture
    def answered(self, db_engine, forum):
        """Treasurer has answered; agenda moved on to the open forum."""
        game, ed, treasurer, secretary = forum
        question = _first_question(db_engine, game, treasurer)
        answer = answer_service.submit_scenario_answer(
            db_engine, game.id, treasurer.id, question.id, "Freeze hiring.",
        )
        _advance(db_engine, game, ed, 3)  # → open_forum
        return game, ed, treasurer, secretary, answer

    def test_quorum_scores_answer_and_pays_author(self, db_engine, answered):
        _, ed, treasurer, secretary, answer = answered

        first = answer_service.vote_on_answer(db_engine, answer.id, ed.id, 3, scores=SCORES)
        assert first["answer"].status == AnswerStatus.PENDING.value
        assert first["vote_count"] == 1
        assert first["required_votes"] == 2

        second = answer_service.vote_on_answer(db_engine, answer.id, secretary.id, 5, feedback="Bold")
        scored = second["answer"]
        assert scored.status == AnswerStatus.SCORED.value
        assert scored.total_coins == 8
        assert scored.final_score == 4.0
        assert player_service.get_player(db_engine, treasurer.id).score == 8

    def test_late_vote_is_recorded_without_rescoring(self, db_engine, answered):
        _, ed, treasurer, secretary, answer = answered
        settings_service.upsert_setting(db_engine, key="voting.quorum", value=1)

        scored = answer_service.vote_on_answer(db_engine, answer.id, ed.id, 3, scores=SCORES)
        assert scored["answer"].status == AnswerStatus.SCORED.value
        assert scored["answer"].total_coins == 3

        late = answer_service.vote_on_answer(
            db_engine, answer.id, secretary.id, 5,
            scores={c: 1 for c in SCORES},
        )
        assert late["vote"].id is not None
        assert late["vote"].coins_awarded == 5
        assert late["vote_count"] == 2
        assert late["answer"].status == AnswerStatus.SCORED.value
        assert late["answer"].total_coins == 3
        assert late["answer"].final_score == 4.0
        assert player_service.get_player(db_engine, treasurer.id).score == 3

    def test_scored_without_criteria_has_no_final_score(self, db_engine, answered):
        _, ed, _, secretary, answer = answered
        answer_service.vote_on_answer(db_engine, answer.id, ed.id, 1)
        result = answer_service.vote_on_answer(db_engine, answer.id, secretary.id, 0)
        assert result["answer"].status == AnswerStatus.SCORED.value
        assert result["answer"].final_score is None
        assert result["answer"].total_coins == 1

    def test_self_vote(self, db_engine, answered):
        _, _, treasurer, _, answer = answered
        with pytest.raises(PermissionError, match="own answer"):
            answer_service.vote_on_answer(db_engine, answer.id, treasurer.id, 1)

    def test_duplicate_vote(self, db_engine, answered):
        _, ed, _, _, answer = answered
        answer_service.vote_on_answer(db_engine, answer.id, ed.id, 1)
        with pytest.raises(ValueError, match="already voted"):
            answer_service.vote_on_answer(db_engine, answer.id, ed.id, 2)

    @pytest.mark.parametrize("coins", [-1, 6, 2.5, True])
    def test_coin_range(self, db_engine, answered, coins):
        _, ed, _, _, answer = answered
        with pytest.raises(ValueError, match="Coins"):
            answer_service.vote_on_answer(db_engine, answer.id, ed.id, coins)

    def test_bad_criteria(self, db_engine, answered):
        _, ed, _, _, answer = answered
        with pytest.raises(ValueError, match="Missing criteria"):
            answer_service.vote_on_answer(db_engine, answer.id, ed.id, 1, scores={"leadership": 3})

    def test_first_vote_awards_badge(self, db_engine, answered):
        _, ed, _, _, answer = answered
        answer_service.vote_on_answer(db_engine, answer.id, ed.id, 1)
        profile = player_service.get_profile(db_engine, ed.id)
        assert BADGE_PEER_REVIEWER in [b.badge for b in profile["badges"]]

    def test_answers_for_voting(self, db_engine, answered):
        game, ed, treasurer, _, answer = answered

        pending = answer_service.get_answers_for_voting(db_engine, game.id, ed.id)
        assert [p["answer"].id for p in pending] == [answer.id]
        assert pending[0]["question"].role_id == "treasurer"

        assert answer_service.get_answers_for_voting(db_engine, game.id, treasurer.id) == []

        answer_service.vote_on_answer(db_engine, answer.id, ed.id, 2)
        assert answer_service.get_answers_for_voting(db_engine, game.id, ed.id) == []

    def test_voting_closed_before_open_forum(self, db_engine, forum):
        game, ed, treasurer, _ = forum
        question = _first_question(db_engine, game, treasurer)
        answer = answer_service.submit_scenario_answer(
            db_engine, game.id, treasurer.id, question.id, "Early",
        )
        with pytest.raises(ValueError, match="open_forum"):
            answer_service.vote_on_answer(db_engine, answer.id, ed.id, 1)
