"""
tests/test_scoring.py — Peer Vote & Ballot Tests
=================================================
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from boardgame.constants import MINUTES_CHOICES, MOTION_CHOICES
from boardgame.engine.scoring import (
    answers_awaiting_vote,
    average_score,
    has_quorum,
    level_for_xp,
    motion_status,
    required_votes,
    tally_ballot,
    validate_criteria_scores,
    vote_score,
    xp_for_score,
)

FULL = {"leadership": 4, "communication": 5, "decision_making": 3, "collaboration": 4}


class TestCriteriaValidation:
    def test_accepts_complete_scores(self):
        assert validate_criteria_scores(FULL) == FULL

    def test_rejects_missing_criterion(self):
        scores = dict(FULL)
        del scores["collaboration"]
        with pytest.raises(ValueError, match="Missing criteria: collaboration"):
            validate_criteria_scores(scores)

    def test_rejects_unknown_criterion(self):
        with pytest.raises(ValueError, match="Unknown criteria"):
            validate_criteria_scores({**FULL, "charisma": 5})

    @pytest.mark.parametrize("bad", [0, 6, 2.5, "4", True])
    def test_rejects_out_of_range_or_wrong_type(self, bad):
        with pytest.raises(ValueError):
            validate_criteria_scores({**FULL, "leadership": bad})


class TestAggregation:
    def test_vote_score_is_mean(self):
        assert vote_score(FULL) == 4.0

    def test_average_rounds_to_two_places(self):
        assert average_score([4.0, 3.25, 5.0]) == 4.08

    def test_average_of_nothing_is_none(self):
        assert average_score([]) is None


class TestQuorum:
    def test_quorum_capped_by_eligible_voters(self):
        assert required_votes(eligible_voters=2, quorum=3) == 2

    def test_quorum_never_below_one(self):
        assert required_votes(eligible_voters=0, quorum=3) == 1

    def test_full_quorum_when_enough_voters(self):
        assert required_votes(eligible_voters=8, quorum=3) == 3

    def test_has_quorum(self):
        assert has_quorum(3, 8, 3) is True
        assert has_quorum(2, 8, 3) is False


class TestBallots:
    def test_open_until_majority_has_voted(self):
        tally = tally_ballot({"1": "approve", "2": "approve"}, electorate=4, choices=MINUTES_CHOICES)
        assert tally.cast == 2
        assert tally.outcome == "open"

    def test_plurality_wins_after_majority(self):
        votes = {"1": "approve", "2": "approve", "3": "reject"}
        tally = tally_ballot(votes, electorate=4, choices=MINUTES_CHOICES)
        assert tally.counts == {"approve": 2, "reject": 1, "amend": 0}
        assert tally.outcome == "approve"

    def test_tie_stays_open(self):
        votes = {"1": "approve", "2": "reject", "3": "abstain", "4": "abstain", "5": "approve"}
        tally = tally_ballot(votes, electorate=5, choices=MOTION_CHOICES)
        assert tally.outcome == "open"

    def test_invalid_choices_are_ignored(self):
        tally = tally_ballot({"1": "maybe"}, electorate=1, choices=MOTION_CHOICES)
        assert tally.cast == 0
        assert tally.outcome == "open"

    @pytest.mark.parametrize(
        ("outcome", "status"),
        [("approve", "passed"), ("reject", "failed"), ("abstain", "open"), ("open", "open")],
    )
    def test_motion_status(self, outcome, status):
        assert motion_status(outcome) == status


class TestProgression:
    def test_xp_for_score(self):
        assert xp_for_score(4.25, 20) == 85

    def test_level_for_xp(self):
        assert level_for_xp(0, 500) == 1
        assert level_for_xp(499, 500) == 1
        assert level_for_xp(500, 500) == 2
        assert level_for_xp(1250, 500) == 3


class TestAnswersAwaitingVote:
    def test_excludes_own_and_already_voted(self):
        answers = [
            SimpleNamespace(id=1, player_id=10),
            SimpleNamespace(id=2, player_id=20),
            SimpleNamespace(id=3, player_id=30),
        ]
        pending = answers_awaiting_vote(answers, voted_answer_ids={3}, voter_id=10)
        assert [a.id for a in pending] == [2]
