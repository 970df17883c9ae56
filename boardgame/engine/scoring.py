"""
boardgame.engine.scoring — Peer Votes, Quorum & Ballots
========================================================

Pure calculation — no database I/O.

* Criteria votes: each voter scores an answer 1–5 on every criterion in
  :data:`~boardgame.constants.VOTING_CRITERIA`; an answer's score is the
  mean over voters of each voter's mean.
* Quorum: an answer is scored once ``min(quorum, eligible voters)`` votes
  are in (never fewer than one).
* Ballots: minutes and motions are decided by plurality once more than
  half the electorate has voted.
* Progression: XP from scored practice scenarios, levels from XP.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from boardgame.constants import MAX_CRITERION_SCORE, MIN_CRITERION_SCORE, VOTING_CRITERIA


# ---------------------------------------------------------------------------
# Criteria scores
# ---------------------------------------------------------------------------
def validate_criteria_scores(scores: Mapping[str, object]) -> dict[str, int]:
    """Return a clean copy of *scores* or raise :class:`ValueError`.

    Every criterion must be present, every value must be an integer in
    ``[MIN_CRITERION_SCORE, MAX_CRITERION_SCORE]``, and no unknown keys
    are allowed.
    """
    unknown = set(scores) - set(VOTING_CRITERIA)
    if unknown:
        raise ValueError(f"Unknown criteria: {', '.join(sorted(unknown))}")
    missing = [c for c in VOTING_CRITERIA if c not in scores]
    if missing:
        raise ValueError(f"Missing criteria: {', '.join(missing)}")

    clean: dict[str, int] = {}
    for criterion in VOTING_CRITERIA:
        value = scores[criterion]
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Score for {criterion} must be an integer")
        if not MIN_CRITERION_SCORE <= value <= MAX_CRITERION_SCORE:
            raise ValueError(
                f"Score for {criterion} must be between "
                f"{MIN_CRITERION_SCORE} and {MAX_CRITERION_SCORE}"
            )
        clean[criterion] = value
    return clean


def vote_score(scores: Mapping[str, int]) -> float:
    """Mean of one voter's criterion scores."""
    if not scores:
        raise ValueError("Cannot score an empty vote")
    return sum(scores.values()) / len(scores)


def average_score(vote_scores: Iterable[float]) -> float | None:
    """Mean of per-vote scores rounded to two places, ``None`` when empty."""
    values = list(vote_scores)
    if not values:
        return None
    return round(sum(values) / len(values), 2)


# ---------------------------------------------------------------------------
# Quorum
# ---------------------------------------------------------------------------
def required_votes(eligible_voters: int, quorum: int) -> int:
    """Votes needed before an item is scored.

    Small groups can't reach a fixed quorum, so it is capped at the number
    of eligible voters, with a floor of one vote.
    """
    return max(1, min(quorum, eligible_voters))


def has_quorum(vote_count: int, eligible_voters: int, quorum: int) -> bool:
    return vote_count >= required_votes(eligible_voters, quorum)


# ---------------------------------------------------------------------------
# Ballots (minutes approval, motions)
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class BallotTally:
    counts: dict[str, int]
    cast: int
    outcome: str  # one of the choices, or "open"


def tally_ballot(
    votes: Mapping[str, str],
    electorate: int,
    choices: Sequence[str],
) -> BallotTally:
    """Count *votes* (voter → choice) and decide the outcome.

    The ballot stays ``"open"`` until a strict majority of *electorate*
    has voted.  After that the plurality choice wins; a tie for first
    place keeps the ballot open.
    """
    counter = Counter(v for v in votes.values() if v in choices)
    counts = {choice: counter.get(choice, 0) for choice in choices}
    cast = sum(counts.values())

    outcome = "open"
    if electorate > 0 and cast * 2 > electorate:
        ranked = counter.most_common()
        top_choice, top_count = ranked[0]
        if len(ranked) == 1 or ranked[1][1] < top_count:
            outcome = top_choice

    return BallotTally(counts=counts, cast=cast, outcome=outcome)


def motion_status(outcome: str) -> str:
    """Map a motion ballot outcome to the motion's status."""
    if outcome == "approve":
        return "passed"
    if outcome == "reject":
        return "failed"
    return "open"


# ---------------------------------------------------------------------------
# Progression
# ---------------------------------------------------------------------------
def xp_for_score(score: float, xp_per_point: int) -> int:
    return max(0, int(round(score * xp_per_point)))


def level_for_xp(experience: int, xp_per_level: int) -> int:
    if xp_per_level <= 0:
        return 1
    return 1 + max(0, experience) // xp_per_level


def answers_awaiting_vote(
    answers: Iterable,
    voted_answer_ids: set[int],
    voter_id: int,
) -> list:
    """Answers *voter_id* can still vote on: not their own, not yet voted."""
    return [
        a for a in answers
        if a.player_id != voter_id and a.id not in voted_answer_ids
    ]
