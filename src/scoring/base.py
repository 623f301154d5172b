"""
Base Scoring Strategy.

Provides the abstract base for per-question-type scoring strategies and
a registry for strategy discovery and instantiation.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar

from loguru import logger

from src.exercise.models import Question, QuestionType
from src.reading.turkish import turkish_lower

from .feedback import Outcome, feedback_for


def clamp_fraction(value: float) -> float:
    """Clamp to [0, 1]; NaN and infinities count as no credit."""
    value = float(value)
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(1.0, value))


# =============================================================================
# Score Result
# =============================================================================


@dataclass
class ScoreResult:
    """
    Result of scoring one submitted answer.

    points_earned is always within [0, question.points].
    """

    is_correct: bool
    points_earned: float
    feedback: str
    outcome: Outcome = Outcome.INCORRECT

    # Diagnostic
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def partial_score(self) -> float:
        """Fraction of the question's points earned, recorded by the strategy."""
        return self.details.get("fraction", 1.0 if self.is_correct else 0.0)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "is_correct": self.is_correct,
            "points_earned": self.points_earned,
            "feedback": self.feedback,
            "outcome": self.outcome.value,
            "details": self.details,
        }


# =============================================================================
# Strategy Registry
# =============================================================================


class StrategyRegistry:
    """
    Registry for scoring strategies.

    Example:
        @StrategyRegistry.register(QuestionType.ORDERING)
        class OrderingStrategy(ScoringStrategy):
            ...

        strategy_class = StrategyRegistry.get(QuestionType.ORDERING)
    """

    _strategies: ClassVar[dict[QuestionType, type[ScoringStrategy]]] = {}

    @classmethod
    def register(cls, question_type: QuestionType):
        """
        Decorator to register a scoring strategy.

        Args:
            question_type: QuestionType this strategy handles
        """

        def decorator(strategy_class: type[ScoringStrategy]):
            cls._strategies[question_type] = strategy_class
            strategy_class.question_type = question_type
            logger.debug(f"Registered strategy: {question_type.value} -> {strategy_class.__name__}")
            return strategy_class

        return decorator

    @classmethod
    def get(cls, question_type: QuestionType) -> type[ScoringStrategy]:
        """Get strategy class by question type."""
        if question_type not in cls._strategies:
            raise KeyError(f"No strategy registered for question type: {question_type.value}")
        return cls._strategies[question_type]

    @classmethod
    def missing(cls) -> list[QuestionType]:
        """Question types with no registered strategy."""
        return [t for t in QuestionType if t not in cls._strategies]

    @classmethod
    def list_strategies(cls) -> dict[str, type[ScoringStrategy]]:
        """List all registered strategies."""
        return {t.value: cls._strategies[t] for t in cls._strategies}


# =============================================================================
# Base Scoring Strategy
# =============================================================================


class ScoringStrategy(ABC):
    """
    Abstract base class for scoring strategies.

    Each strategy knows how to:
    1. Parse the raw answer text for its question type
    2. Compare against the question's correct options
    3. Calculate partial credit
    4. Pick the matching feedback message

    Subclasses implement score_fraction(); the base class turns the
    fraction into points and feedback.
    """

    question_type: ClassVar[QuestionType] = QuestionType.MULTIPLE_CHOICE
    name: ClassVar[str] = "base_strategy"

    def score(self, question: Question, answer: str | None) -> ScoreResult:
        """Score a submitted raw answer against a question."""
        if not self._has_response(answer):
            return self._result(question, 0.0, exact=False, outcome=Outcome.UNANSWERED)

        fraction, exact, details = self.score_fraction(question, answer)
        fraction = clamp_fraction(fraction)

        if exact and fraction >= 1.0:
            outcome = Outcome.CORRECT
        elif fraction > 0.0:
            outcome = Outcome.PARTIAL
        else:
            outcome = Outcome.INCORRECT

        return self._result(question, fraction, exact=outcome is Outcome.CORRECT, outcome=outcome, details=details)

    @abstractmethod
    def score_fraction(self, question: Question, answer: str) -> tuple[float, bool, dict[str, Any]]:
        """
        Score a non-blank answer.

        Returns:
            (fraction of points in [0, 1], exact full-credit match, details)
        """
        ...

    def _has_response(self, answer: str | None) -> bool:
        return answer is not None and bool(answer.strip())

    def _normalize(self, text: str) -> str:
        """Normalize text for comparison."""
        if not isinstance(text, str):
            text = str(text)
        return turkish_lower(text.strip())

    def _split_ids(self, answer: str) -> list[str]:
        """Split a comma-separated id list, dropping empty items."""
        return [part.strip() for part in answer.split(",") if part.strip()]

    def _result(
        self,
        question: Question,
        fraction: float,
        *,
        exact: bool,
        outcome: Outcome,
        details: dict[str, Any] | None = None,
    ) -> ScoreResult:
        points_earned = question.points * fraction
        result_details = dict(details or {})
        result_details["fraction"] = fraction
        return ScoreResult(
            is_correct=exact,
            points_earned=min(float(question.points), max(0.0, points_earned)),
            feedback=feedback_for(question.type, outcome),
            outcome=outcome,
            details=result_details,
        )
