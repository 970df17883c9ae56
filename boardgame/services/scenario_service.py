"""
boardgame.services.scenario_service — Practice Scenarios & Peer Votes
======================================================================

Outside of a game session players practise their role's scenarios.  A
submitted response waits for criteria votes from other players; once the
quorum is reached it is scored and the scenario counts as completed for
its author (XP, level, and the ``scenario_veteran`` badge the first time).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from boardgame.catalog import get_questions_for_scenario, get_scenario, validate_answer
from boardgame.constants import BADGE_PEER_REVIEWER, BADGE_SCENARIO_VETERAN, FEEDBACK_MAX_LENGTH
from boardgame.database.engine import get_session
from boardgame.database.models import AnswerStatus, PeerVote, Player, ScenarioResponse
from boardgame.engine.scoring import (
    average_score,
    required_votes,
    validate_criteria_scores,
    vote_score,
)
from boardgame.services.player_service import add_badge, load_player, record_completion
from boardgame.services.settings_service import gameplay_value

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def submit_scenario_response(
    engine: Engine,
    player_id: int,
    scenario_id: str,
    responses: dict,
) -> ScenarioResponse:
    """Submit answers to every question of one of your role's scenarios."""
    scenario = get_scenario(scenario_id)
    if scenario is None:
        raise LookupError("Scenario not found")
    if not isinstance(responses, dict):
        raise ValueError("Responses must be an object keyed by question id")

    questions = get_questions_for_scenario(scenario_id)
    known = {q.id for q in questions}
    unknown = set(responses) - known
    if unknown:
        raise ValueError(f"Unknown questions: {', '.join(sorted(unknown))}")
    missing = [q.id for q in questions if responses.get(q.id) in (None, "")]
    if missing:
        raise ValueError(f"Please answer every question (missing: {', '.join(missing)})")
    for q in questions:
        validate_answer(q, responses[q.id])

    with get_session(engine) as session:
        player = load_player(session, player_id)
        if player.role != scenario.role_id:
            raise PermissionError("That scenario belongs to another role")
        response = ScenarioResponse(
            player_id=player_id,
            scenario_id=scenario_id,
            role_id=scenario.role_id,
            responses=dict(responses),
            status=AnswerStatus.PENDING.value,
        )
        session.add(response)
        session.flush()
    logger.info("Player %d submitted scenario %s", player_id, scenario_id)
    return response


def submit_peer_vote(
    engine: Engine,
    response_id: int,
    voter_id: int,
    scores: dict,
    feedback: str | None = None,
) -> dict:
    """Score a practice response on every criterion.

    Eligible voters are all players except the author, so the quorum in a
    small group shrinks to fit.
    """
    clean = validate_criteria_scores(scores or {})
    if feedback is not None:
        feedback = feedback.strip()
        if len(feedback) > FEEDBACK_MAX_LENGTH:
            raise ValueError(f"Feedback is limited to {FEEDBACK_MAX_LENGTH} characters")

    try:
        with get_session(engine) as session:
            load_player(session, voter_id)
            response = session.get(ScenarioResponse, response_id)
            if response is None:
                raise LookupError("Response not found")
            if response.player_id == voter_id:
                raise PermissionError("You cannot vote on your own response")
            already = session.scalar(
                select(PeerVote.id).where(
                    PeerVote.response_id == response_id, PeerVote.voter_id == voter_id
                )
            )
            if already is not None:
                raise ValueError("You have already voted on this response")

            vote = PeerVote(
                response_id=response_id,
                voter_id=voter_id,
                scores=clean,
                score=vote_score(clean),
                feedback=feedback or None,
            )
            session.add(vote)
            session.flush()
            add_badge(session, voter_id, BADGE_PEER_REVIEWER)

            votes = session.scalars(
                select(PeerVote).where(PeerVote.response_id == response_id)
            ).all()
            eligible = (session.scalar(select(func.count(Player.id))) or 1) - 1
            needed = required_votes(eligible, int(gameplay_value(session, "voting.quorum")))

            if response.status == AnswerStatus.PENDING.value and len(votes) >= needed:
                final = average_score(v.score for v in votes)
                response.status = AnswerStatus.SCORED.value
                response.final_score = final
                record_completion(
                    session, response.player_id, response.scenario_id,
                    response.role_id, final,
                )
                add_badge(session, response.player_id, BADGE_SCENARIO_VETERAN)
                logger.info("Response %d scored %.2f", response_id, final)
            vote_count = len(votes)
    except IntegrityError:
        raise ValueError("You have already voted on this response") from None

    return {"vote": vote, "response": response, "vote_count": vote_count, "required_votes": needed}


def get_responses_needing_votes(engine: Engine, voter_id: int) -> list[ScenarioResponse]:
    """Pending responses by other players that *voter_id* hasn't scored."""
    with get_session(engine) as session:
        voted = select(PeerVote.response_id).where(PeerVote.voter_id == voter_id)
        return list(session.scalars(
            select(ScenarioResponse)
            .where(
                ScenarioResponse.status == AnswerStatus.PENDING.value,
                ScenarioResponse.player_id != voter_id,
                ScenarioResponse.id.not_in(voted),
            )
            .order_by(ScenarioResponse.submitted_at, ScenarioResponse.id)
        ).all())


def get_my_responses(engine: Engine, player_id: int) -> list[ScenarioResponse]:
    with get_session(engine) as session:
        return list(session.scalars(
            select(ScenarioResponse)
            .where(ScenarioResponse.player_id == player_id)
            .order_by(ScenarioResponse.submitted_at.desc(), ScenarioResponse.id.desc())
        ).all())
