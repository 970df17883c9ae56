"""
tests/test_meeting_service.py — Agenda Flow, Minutes & Motions
===============================================================

Drives a three-person board (Executive Director, Treasurer, Secretary)
through the meeting agenda.  The Executive Director is also the session
creator and the only one allowed to advance.
"""

from __future__ import annotations

import pytest

from boardgame.constants import AGENDA_ITEMS, BADGE_PRIZE_WINNER
from boardgame.database.models import SessionStatus
from boardgame.services import meeting_service, player_service, session_service
from conftest import seat_players

TRIO = ["executive-director", "treasurer", "secretary"]


@pytest.fixture
def board(db_engine):
    """Seated trio with the meeting started.  Returns ``(game, ed, treasurer, secretary)``."""
    game, players = seat_players(db_engine, TRIO)
    session_service.start_meeting(db_engine, game.id, players[0].id)
    return (game, *players)


@pytest.fixture
def funded_board(db_engine):
    """Like ``board`` but with 90 donated first (pool 45, 5 per role)."""
    game, players = seat_players(db_engine, TRIO)
    session_service.make_donation(db_engine, game.id, players[1].id, 90)
    session_service.start_meeting(db_engine, game.id, players[0].id)
    return (game, *players)


def advance_to(engine, game, chair, item):
    """Advance from call_to_order until *item* is current."""
    for _ in range(AGENDA_ITEMS.index(item)):
        meeting_service.advance_agenda(engine, game.id, chair.id)


class TestAdvance:
    def test_walks_agenda_then_completes(self, db_engine, board):
        game, ed, _, _ = board
        for expected in AGENDA_ITEMS[1:]:
            current = meeting_service.advance_agenda(db_engine, game.id, ed.id)
            assert current.current_agenda_item == expected

        done = meeting_service.advance_agenda(db_engine, game.id, ed.id)
        assert done.status == SessionStatus.COMPLETED.value
        assert done.completed_at is not None
        assert done.winner_id is None

    def test_only_executive_director_advances(self, db_engine, board):
        game, _, treasurer, _ = board
        with pytest.raises(PermissionError, match="Executive Director"):
            meeting_service.advance_agenda(db_engine, game.id, treasurer.id)

    def test_creator_advances_without_director(self, db_engine):
        game, players = seat_players(db_engine, ["treasurer", "secretary"])
        session_service.start_meeting(db_engine, game.id, players[0].id)

        current = meeting_service.advance_agenda(db_engine, game.id, players[0].id)
        assert current.current_agenda_item == "secretary_report"
        with pytest.raises(PermissionError):
            meeting_service.advance_agenda(db_engine, game.id, players[1].id)

    def test_not_before_meeting_starts(self, db_engine):
        game, players = seat_players(db_engine, TRIO)
        with pytest.raises(ValueError, match="not in progress"):
            meeting_service.advance_agenda(db_engine, game.id, players[0].id)

    def test_completed_session_cannot_advance(self, db_engine, board):
        game, ed, _, _ = board
        for _ in AGENDA_ITEMS:
            meeting_service.advance_agenda(db_engine, game.id, ed.id)
        with pytest.raises(ValueError):
            meeting_service.advance_agenda(db_engine, game.id, ed.id)

    def test_top_scorer_wins_prize_pool(self, db_engine, funded_board):
        game, ed, treasurer, _ = funded_board
        meeting_service.submit_agenda_response(
            db_engine, game.id, treasurer.id, {"attendance_check": "All of the above"},
        )
        for _ in AGENDA_ITEMS:
            meeting_service.advance_agenda(db_engine, game.id, ed.id)

        done = session_service.get_game_session(db_engine, game.id)
        assert done.winner_id == treasurer.id

        profile = player_service.get_profile(db_engine, treasurer.id)
        assert BADGE_PRIZE_WINNER in [b.badge for b in profile["badges"]]
        assert profile["player"].progress["prize_winnings"] == 45.0


class TestAgendaResponses:
    def test_points_per_answered_question(self, db_engine, board):
        game, ed, _, secretary = board
        advance_to(db_engine, game, ed, "old_business")

        row = meeting_service.submit_agenda_response(db_engine, game.id, secretary.id, {
            "action_items_review": "Focus only on overdue or incomplete items",
            "unfinished_business": "Assign an owner and a date.",
        })

        assert row.points_earned == 2
        assert player_service.get_player(db_engine, secretary.id).score == 2

    def test_resubmission_adjusts_score(self, db_engine, board):
        game, ed, _, secretary = board
        advance_to(db_engine, game, ed, "old_business")
        meeting_service.submit_agenda_response(db_engine, game.id, secretary.id, {
            "action_items_review": "Focus only on overdue or incomplete items",
            "unfinished_business": "Assign an owner and a date.",
        })
        row = meeting_service.submit_agenda_response(db_engine, game.id, secretary.id, {
            "action_items_review": "Focus only on overdue or incomplete items",
            "unfinished_business": "",
        })

        assert row.points_earned == 1
        assert player_service.get_player(db_engine, secretary.id).score == 1

    def test_unknown_question(self, db_engine, board):
        game, _, treasurer, _ = board
        with pytest.raises(ValueError, match="Unknown questions"):
            meeting_service.submit_agenda_response(
                db_engine, game.id, treasurer.id, {"minutes_accuracy": "x"},
            )

    def test_role_specific_question_hidden_from_other_roles(self, db_engine, board):
        game, ed, treasurer, _ = board
        advance_to(db_engine, game, ed, "secretary_report")
        with pytest.raises(ValueError, match="minutes_accuracy"):
            meeting_service.submit_agenda_response(db_engine, game.id, treasurer.id, {
                "minutes_accuracy": "Confirm attendance records are correct",
            })

    def test_invalid_option(self, db_engine, board):
        game, _, treasurer, _ = board
        with pytest.raises(ValueError, match="listed options"):
            meeting_service.submit_agenda_response(
                db_engine, game.id, treasurer.id, {"attendance_check": "Shout loudly"},
            )

    def test_budget_answer_within_role_budget(self, db_engine, funded_board):
        game, ed, treasurer, _ = funded_board
        advance_to(db_engine, game, ed, "treasurer_report")

        row = meeting_service.submit_agenda_response(
            db_engine, game.id, treasurer.id, {"budget_allocation": 5.0},
        )
        assert row.points_earned == 1
        # validated, not deducted
        budget = session_service.get_role_budget(db_engine, game.id, "treasurer")
        assert budget.spent == 0.0

    def test_budget_answer_over_role_budget(self, db_engine, funded_board):
        game, ed, treasurer, _ = funded_board
        advance_to(db_engine, game, ed, "treasurer_report")
        with pytest.raises(ValueError, match="remaining role budget"):
            meeting_service.submit_agenda_response(
                db_engine, game.id, treasurer.id, {"budget_allocation": 6},
            )


class TestMinutes:
    def test_secretary_submits_and_board_approves(self, db_engine, board):
        game, ed, treasurer, secretary = board
        advance_to(db_engine, game, ed, "secretary_report")
        meeting_service.submit_minutes(
            db_engine, game.id, secretary.id,
            previous_minutes="Approved the budget.", current_minutes="Opened at 7pm.",
        )

        first = meeting_service.vote_on_minutes(db_engine, game.id, ed.id, "approve")
        assert first["tally"].outcome == "open"
        second = meeting_service.vote_on_minutes(db_engine, game.id, treasurer.id, "approve")
        assert second["tally"].outcome == "approve"
        assert second["tally"].counts["approve"] == 2

    def test_only_secretary_submits(self, db_engine, board):
        game, ed, treasurer, _ = board
        advance_to(db_engine, game, ed, "secretary_report")
        with pytest.raises(PermissionError):
            meeting_service.submit_minutes(
                db_engine, game.id, treasurer.id, previous_minutes="", current_minutes="",
            )

    def test_wrong_stage(self, db_engine, board):
        game, _, _, secretary = board
        with pytest.raises(ValueError, match="secretary_report"):
            meeting_service.submit_minutes(
                db_engine, game.id, secretary.id, previous_minutes="", current_minutes="",
            )

    def test_resubmission_clears_votes(self, db_engine, board):
        game, ed, _, secretary = board
        advance_to(db_engine, game, ed, "secretary_report")
        kwargs = {"previous_minutes": "a", "current_minutes": "b"}
        meeting_service.submit_minutes(db_engine, game.id, secretary.id, **kwargs)
        meeting_service.vote_on_minutes(db_engine, game.id, ed.id, "amend")

        minutes = meeting_service.submit_minutes(db_engine, game.id, secretary.id, **kwargs)
        assert minutes.approval_votes == {}

    def test_vote_without_minutes(self, db_engine, board):
        game, ed, _, _ = board
        advance_to(db_engine, game, ed, "secretary_report")
        with pytest.raises(LookupError):
            meeting_service.vote_on_minutes(db_engine, game.id, ed.id, "approve")

    def test_invalid_vote(self, db_engine, board):
        game, ed, _, _ = board
        with pytest.raises(ValueError, match="Vote must be one of"):
            meeting_service.vote_on_minutes(db_engine, game.id, ed.id, "maybe")


class TestFinancialSummary:
    def test_figures_come_from_donations(self, db_engine, funded_board):
        game, ed, treasurer, _ = funded_board
        advance_to(db_engine, game, ed, "treasurer_report")

        summary = meeting_service.submit_financial_summary(db_engine, game.id, treasurer.id)

        assert summary.total_donations == 90.0
        assert summary.prize_pool == 45.0
        assert summary.budget_per_role == 5.0
        assert summary.budget_per_player == 15.0

    def test_only_treasurer(self, db_engine, funded_board):
        game, ed, _, _ = funded_board
        advance_to(db_engine, game, ed, "treasurer_report")
        with pytest.raises(PermissionError):
            meeting_service.submit_financial_summary(db_engine, game.id, ed.id)

    def test_challenges_append(self, db_engine, funded_board):
        game, ed, treasurer, secretary = funded_board
        advance_to(db_engine, game, ed, "treasurer_report")
        with pytest.raises(LookupError):
            meeting_service.challenge_budget(db_engine, game.id, secretary.id, "Why so low?")

        meeting_service.submit_financial_summary(db_engine, game.id, treasurer.id)
        summary = meeting_service.challenge_budget(db_engine, game.id, secretary.id, "Why so low?")

        assert len(summary.budget_challenges) == 1
        assert summary.budget_challenges[0]["player_id"] == secretary.id
        assert summary.budget_challenges[0]["challenge"] == "Why so low?"

    def test_blank_challenge(self, db_engine, funded_board):
        game, _, _, secretary = funded_board
        with pytest.raises(ValueError, match="required"):
            meeting_service.challenge_budget(db_engine, game.id, secretary.id, "  ")


def propose(engine, game, player, motion_type="old_business"):
    return meeting_service.propose_motion(
        engine, game.id, player.id,
        title="Adopt the policy", description="Adopt the draft policy as written.",
        motion_type=motion_type,
    )


class TestMotions:
    def test_majority_approval_passes(self, db_engine, board):
        game, ed, treasurer, secretary = board
        advance_to(db_engine, game, ed, "old_business")
        motion = propose(db_engine, game, secretary)
        assert motion.status == "open"

        meeting_service.vote_on_motion(db_engine, motion.id, ed.id, "approve")
        result = meeting_service.vote_on_motion(db_engine, motion.id, treasurer.id, "approve")

        assert result["motion"].status == "passed"
        with pytest.raises(ValueError, match="closed"):
            meeting_service.vote_on_motion(db_engine, motion.id, secretary.id, "reject")

    def test_majority_rejection_fails(self, db_engine, board):
        game, ed, treasurer, secretary = board
        advance_to(db_engine, game, ed, "new_business")
        motion = propose(db_engine, game, secretary, "new_business")

        meeting_service.vote_on_motion(db_engine, motion.id, ed.id, "reject")
        result = meeting_service.vote_on_motion(db_engine, motion.id, treasurer.id, "reject")

        assert result["motion"].status == "failed"

    def test_type_must_match_stage(self, db_engine, board):
        game, ed, _, secretary = board
        advance_to(db_engine, game, ed, "old_business")
        with pytest.raises(ValueError, match="new_business"):
            propose(db_engine, game, secretary, "new_business")

    def test_unknown_type(self, db_engine, board):
        game, _, _, secretary = board
        with pytest.raises(ValueError, match="Motion type"):
            propose(db_engine, game, secretary, "any_business")

    def test_unknown_motion(self, db_engine, board):
        _, ed, _, _ = board
        with pytest.raises(LookupError):
            meeting_service.vote_on_motion(db_engine, 999, ed.id, "approve")


class TestNextAgendaAndState:
    def test_set_next_agenda(self, db_engine, board):
        game, ed, treasurer, _ = board
        advance_to(db_engine, game, ed, "next_agenda")

        agenda = meeting_service.update_next_agenda(
            db_engine, game.id, treasurer.id, ["Budget review", "  Hiring  "],
        )
        assert agenda.agenda_items == ["Budget review", "Hiring"]
        assert agenda.updated_by == treasurer.id

    def test_blank_item_rejected(self, db_engine, board):
        game, ed, treasurer, _ = board
        advance_to(db_engine, game, ed, "next_agenda")
        with pytest.raises(ValueError):
            meeting_service.update_next_agenda(db_engine, game.id, treasurer.id, ["ok", " "])

    def test_meeting_state(self, db_engine, board):
        game, ed, _, secretary = board
        advance_to(db_engine, game, ed, "old_business")
        motion = propose(db_engine, game, secretary)
        meeting_service.vote_on_motion(db_engine, motion.id, ed.id, "abstain")

        state = meeting_service.get_meeting_state(db_engine, game.id)

        assert state["current_item"] == "old_business"
        assert state["index"] == AGENDA_ITEMS.index("old_business")
        assert state["total_items"] == 9
        assert state["minutes"] is None
        assert state["minutes_tally"] is None
        [(row, tally)] = state["motions"]
        assert row.id == motion.id
        assert tally.counts["abstain"] == 1
