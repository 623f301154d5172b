"""
Answer scorer facade.

Dispatches each question to the strategy registered for its type. Scoring
never raises: a failing strategy is logged and the answer earns zero credit.
"""

from __future__ import annotations

from loguru import logger

from src.exercise.models import Question, QuestionType

from . import strategies  # noqa: F401  (registers strategies)
from .base import ScoreResult, ScoringStrategy, StrategyRegistry
from .essay import EssayRubric
from .feedback import FALLBACK_FEEDBACK, Outcome, feedback_for

_missing = StrategyRegistry.missing()
if _missing:
    raise RuntimeError(
        "No scoring strategy registered for: " + ", ".join(t.value for t in _missing)
    )


class AnswerScorer:
    """
    Score submitted answers against questions.

    Example:
        scorer = AnswerScorer()
        result = scorer.score(question, "a,c")
        result.points_earned  # 10.0
    """

    def __init__(self, essay_rubric: EssayRubric | None = None):
        self._strategies: dict[QuestionType, ScoringStrategy] = {}
        for question_type in QuestionType:
            strategy_class = StrategyRegistry.get(question_type)
            if question_type is QuestionType.ESSAY:
                self._strategies[question_type] = strategy_class(essay_rubric)
            else:
                self._strategies[question_type] = strategy_class()

    def strategy_for(self, question_type: QuestionType) -> ScoringStrategy:
        return self._strategies[question_type]

    def score(self, question: Question, answer: str | None) -> ScoreResult:
        """Score one raw answer. Always returns a result with 0 <= points <= question.points."""
        try:
            return self._strategies[question.type].score(question, answer)
        except Exception as e:
            logger.warning(f"Scoring failed for question {question.id} ({question.type!r}): {e}")
            if isinstance(question.type, QuestionType):
                feedback = feedback_for(question.type, Outcome.INCORRECT)
            else:
                feedback = FALLBACK_FEEDBACK
            return ScoreResult(
                is_correct=False,
                points_earned=0.0,
                feedback=feedback,
                outcome=Outcome.INCORRECT,
                details={"error": str(e), "fraction": 0.0},
            )
