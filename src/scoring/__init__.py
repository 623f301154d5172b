"""
Answer scoring for the seven question types.

Strategies are registered per QuestionType; AnswerScorer dispatches to them
and guarantees 0 <= points_earned <= question.points.
"""

from .base import ScoreResult, ScoringStrategy, StrategyRegistry
from .essay import EssayRubric, HeuristicEssayRubric
from .feedback import Outcome, feedback_for
from .scorer import AnswerScorer
from .similarity import levenshtein, similarity
from .strategies import (
    EssayStrategy,
    FillInTheBlankStrategy,
    FuzzyTextStrategy,
    MatchingStrategy,
    MultipleChoiceStrategy,
    OrderingStrategy,
    TrueFalseStrategy,
)

__all__ = [
    "AnswerScorer",
    "ScoreResult",
    "ScoringStrategy",
    "StrategyRegistry",
    "EssayRubric",
    "HeuristicEssayRubric",
    "Outcome",
    "feedback_for",
    "levenshtein",
    "similarity",
    "EssayStrategy",
    "FillInTheBlankStrategy",
    "FuzzyTextStrategy",
    "MatchingStrategy",
    "MultipleChoiceStrategy",
    "OrderingStrategy",
    "TrueFalseStrategy",
]
