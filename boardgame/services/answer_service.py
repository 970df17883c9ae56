"""
boardgame.services.answer_service — Open-Forum Answers & Coin Votes
====================================================================

During committee reports and the open forum each participant answers
their role's scenario questions, optionally spending part of the role's
budget.  Other participants then award coins (and, optionally, criteria
scores) to each answer.  Once enough votes are in, the answer is scored
and its coins are added to the author's score.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from boardgame.constants import BADGE_PEER_REVIEWER, FEEDBACK_MAX_LENGTH
from boardgame.database.engine import get_session
from boardgame.database.models import (
    AnswerStatus,
    AnswerVote,
    RoleBudget,
    ScenarioAnswer,
    ScenarioQuestion,
    SessionStatus,
)
from boardgame.engine.agenda import require_stage
from boardgame.engine.budget import can_spend
from boardgame.engine.scoring import (
    answers_awaiting_vote,
    average_score,
    required_votes,
    validate_criteria_scores,
    vote_score,
)
from boardgame.services.player_service import add_badge, add_score
from boardgame.services.session_service import (
    find_role_budget,
    list_participants,
    load_game_session,
    require_participant,
)
from boardgame.services.settings_service import gameplay_value

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def _clean_feedback(feedback: str | None) -> str | None:
    if feedback is None:
        return None
    feedback = feedback.strip()
    if len(feedback) > FEEDBACK_MAX_LENGTH:
        raise ValueError(f"Feedback is limited to {FEEDBACK_MAX_LENGTH} characters")
    return feedback or None


# ---------------------------------------------------------------------------
# Question bank
# ---------------------------------------------------------------------------

def get_questions_for_role(engine: Engine, role_id: str) -> list[ScenarioQuestion]:
    with get_session(engine) as session:
        return list(session.scalars(
            select(ScenarioQuestion)
            .where(ScenarioQuestion.role_id == role_id)
            .order_by(ScenarioQuestion.id)
        ).all())


def get_session_questions(engine: Engine, session_id: int, player_id: int) -> list[ScenarioQuestion]:
    """Questions for the role *player_id* plays in *session_id*."""
    with get_session(engine) as session:
        load_game_session(session, session_id)
        participant = require_participant(session, session_id, player_id)
        role_id = participant.role_id
    return get_questions_for_role(engine, role_id)


# ---------------------------------------------------------------------------
# Answers
# ---------------------------------------------------------------------------

def submit_scenario_answer(
    engine: Engine,
    session_id: int,
    player_id: int,
    question_id: int,
    answer_text: str,
    budget_used: float = 0.0,
) -> ScenarioAnswer:
    """Answer one of your role's questions, spending from the role budget.

    Open-forum answers are free-text discussion whatever the bank row's
    ``question_type``; the listed ``options`` are prompts, not a closed set.

    Raises
    ------
    LookupError
        Unknown session or question.
    PermissionError
        Not a participant, or the question belongs to another role.
    ValueError
        Wrong stage, blank answer, already answered, or over budget.
    """
    answer_text = answer_text.strip()
    if not answer_text:
        raise ValueError("Answer text is required")
    budget_used = float(budget_used or 0.0)
    if not math.isfinite(budget_used):
        raise ValueError("Budget used must be a finite number")
    budget_used = round(budget_used, 2)
    if budget_used < 0:
        raise ValueError("Budget used cannot be negative")

    try:
        with get_session(engine) as session:
            game = load_game_session(session, session_id)
            if game.status != SessionStatus.MEETING.value:
                raise ValueError("The meeting is not in progress")
            require_stage("submit_answer", game.current_agenda_item)
            participant = require_participant(session, session_id, player_id)

            question = session.get(ScenarioQuestion, question_id)
            if question is None:
                raise LookupError("Question not found")
            if question.role_id != participant.role_id:
                raise PermissionError("That question belongs to another role")

            existing = session.scalar(
                select(ScenarioAnswer.id).where(
                    ScenarioAnswer.session_id == session_id,
                    ScenarioAnswer.player_id == player_id,
                    ScenarioAnswer.question_id == question_id,
                )
            )
            if existing is not None:
                raise ValueError("You have already answered this question")

            if budget_used > 0:
                budget: RoleBudget | None = find_role_budget(
                    session, session_id, participant.role_id
                )
                if budget is None or not can_spend(
                    budget.allocated_budget, budget.spent, budget_used
                ):
                    raise ValueError("Budget used exceeds the remaining role budget")
                budget.spent = round((budget.spent or 0.0) + budget_used, 2)

            answer = ScenarioAnswer(
                session_id=session_id,
                player_id=player_id,
                question_id=question_id,
                answer_text=answer_text,
                budget_used=budget_used,
                status=AnswerStatus.PENDING.value,
                total_coins=0,
            )
            session.add(answer)
            session.flush()
    except IntegrityError:
        raise ValueError("You have already answered this question") from None

    logger.info("Player %d answered question %d in session %d", player_id, question_id, session_id)
    return answer


# ---------------------------------------------------------------------------
# Voting
# ---------------------------------------------------------------------------

def vote_on_answer(
    engine: Engine,
    answer_id: int,
    voter_id: int,
    coins: int,
    feedback: str | None = None,
    scores: dict | None = None,
) -> dict:
    """Award *coins* (and optional criteria *scores*) to an answer.

    When the vote count reaches the quorum for the session, the answer is
    scored and its author's score goes up by the coins received.  Votes
    that arrive after that are stored but change nothing.
    """
    feedback = _clean_feedback(feedback)
    clean_scores = validate_criteria_scores(scores) if scores else None

    try:
        with get_session(engine) as session:
            answer = session.get(ScenarioAnswer, answer_id)
            if answer is None:
                raise LookupError("Answer not found")
            game = load_game_session(session, answer.session_id)
            if game.status != SessionStatus.MEETING.value:
                raise ValueError("The meeting is not in progress")
            require_stage("vote_answer", game.current_agenda_item)
            require_participant(session, answer.session_id, voter_id)
            if answer.player_id == voter_id:
                raise PermissionError("You cannot vote on your own answer")

            max_coins = int(gameplay_value(session, "voting.max_coins_per_vote"))
            if isinstance(coins, bool) or not isinstance(coins, int) or not 0 <= coins <= max_coins:
                raise ValueError(f"Coins must be a whole number from 0 to {max_coins}")

            already = session.scalar(
                select(AnswerVote.id).where(
                    AnswerVote.answer_id == answer_id, AnswerVote.voter_id == voter_id
                )
            )
            if already is not None:
                raise ValueError("You have already voted on this answer")

            first_vote = session.scalar(
                select(AnswerVote.id).where(AnswerVote.voter_id == voter_id).limit(1)
            ) is None

            vote = AnswerVote(
                answer_id=answer_id,
                voter_id=voter_id,
                coins_awarded=coins,
                scores=clean_scores,
                feedback=feedback,
            )
            session.add(vote)
            session.flush()

            if first_vote:
                add_badge(session, voter_id, BADGE_PEER_REVIEWER)

            votes = session.scalars(
                select(AnswerVote).where(AnswerVote.answer_id == answer_id)
            ).all()
            eligible = len(list_participants(session, answer.session_id)) - 1
            quorum = int(gameplay_value(session, "voting.quorum"))
            needed = required_votes(eligible, quorum)

            if answer.status == AnswerStatus.PENDING.value and len(votes) >= needed:
                total_coins = sum(v.coins_awarded or 0 for v in votes)
                answer.status = AnswerStatus.SCORED.value
                answer.total_coins = total_coins
                answer.final_score = average_score(
                    vote_score(v.scores) for v in votes if v.scores
                )
                if total_coins:
                    add_score(session, answer.player_id, total_coins)
                logger.info(
                    "Answer %d scored: %d coins from %d votes",
                    answer_id, total_coins, len(votes),
                )
            vote_count = len(votes)
    except IntegrityError:
        raise ValueError("You have already voted on this answer") from None

    return {"vote": vote, "answer": answer, "vote_count": vote_count, "required_votes": needed}


def get_answers_for_voting(engine: Engine, session_id: int, voter_id: int) -> list[dict]:
    """Answers in *session_id* that *voter_id* hasn't voted on and didn't write."""
    with get_session(engine) as session:
        load_game_session(session, session_id)
        answers = session.scalars(
            select(ScenarioAnswer)
            .where(ScenarioAnswer.session_id == session_id)
            .order_by(ScenarioAnswer.created_at, ScenarioAnswer.id)
        ).all()
        voted = set(session.scalars(
            select(AnswerVote.answer_id).where(AnswerVote.voter_id == voter_id)
        ).all())
        pending = answers_awaiting_vote(answers, voted, voter_id)
        questions = {
            q.id: q for q in session.scalars(
                select(ScenarioQuestion)
                .where(ScenarioQuestion.id.in_([a.question_id for a in pending]))
            ).all()
        }
        return [{"answer": a, "question": questions.get(a.question_id)} for a in pending]
