"""
Scoring Strategy Implementations.

One strategy per QuestionType. Each parses the raw answer text in its own
wire shape and returns the fraction of points earned.
"""

from __future__ import annotations

from typing import Any

from src.exercise.models import Question, QuestionType

from .base import ScoringStrategy, StrategyRegistry, clamp_fraction
from .essay import EssayRubric, HeuristicEssayRubric
from .similarity import similarity

# =============================================================================
# MULTIPLE_CHOICE Strategy
# =============================================================================


@StrategyRegistry.register(QuestionType.MULTIPLE_CHOICE)
class MultipleChoiceStrategy(ScoringStrategy):
    """
    Grade single- and multi-select questions by option id sets.

    Partial credit only applies when more than one option is correct:
    points * max(0, correct - incorrect) / correct_total
    """

    name = "multiple_choice"

    def score_fraction(self, question: Question, answer: str) -> tuple[float, bool, dict[str, Any]]:
        submitted = {self._normalize(i) for i in self._split_ids(answer)}
        correct = {self._normalize(o.id) for o in question.correct_options}

        if not correct:
            return 0.0, False, {"reason": "no_correct_options"}
        if submitted == correct:
            return 1.0, True, {}
        if len(correct) == 1:
            return 0.0, False, {}

        hits = len(submitted & correct)
        misses = len(submitted - correct)
        fraction = max(0, hits - misses) / len(correct)
        return fraction, False, {"correct_selected": hits, "incorrect_selected": misses}


# =============================================================================
# TRUE_FALSE Strategy
# =============================================================================


@StrategyRegistry.register(QuestionType.TRUE_FALSE)
class TrueFalseStrategy(ScoringStrategy):
    """Binary match of a single option id, case-insensitive."""

    name = "true_false"

    def score_fraction(self, question: Question, answer: str) -> tuple[float, bool, dict[str, Any]]:
        correct = question.correct_options
        if not correct:
            return 0.0, False, {"reason": "no_correct_options"}

        is_correct = self._normalize(answer) == self._normalize(correct[0].id)
        return (1.0 if is_correct else 0.0), is_correct, {}


# =============================================================================
# SHORT_ANSWER / FILL_IN_THE_BLANK Strategies
# =============================================================================


@StrategyRegistry.register(QuestionType.SHORT_ANSWER)
class FuzzyTextStrategy(ScoringStrategy):
    """
    Grade free text against the correct option texts.

    Exact (Turkish case-insensitive) match earns full credit. Otherwise the
    best Levenshtein similarity above SIMILARITY_THRESHOLD earns that
    fraction of the points.
    """

    name = "short_answer"

    SIMILARITY_THRESHOLD = 0.8

    def score_fraction(self, question: Question, answer: str) -> tuple[float, bool, dict[str, Any]]:
        response = self._normalize(answer)
        accepted = [self._normalize(o.text) for o in question.correct_options]
        if not accepted:
            return 0.0, False, {"reason": "no_correct_options"}

        if response in accepted:
            return 1.0, True, {"similarity": 1.0}

        best = max(similarity(response, text) for text in accepted)
        if best > self.SIMILARITY_THRESHOLD:
            return best, False, {"similarity": best}
        return 0.0, False, {"similarity": best}


@StrategyRegistry.register(QuestionType.FILL_IN_THE_BLANK)
class FillInTheBlankStrategy(FuzzyTextStrategy):
    name = "fill_in_the_blank"


# =============================================================================
# ESSAY Strategy
# =============================================================================


@StrategyRegistry.register(QuestionType.ESSAY)
class EssayStrategy(ScoringStrategy):
    """Delegate to an EssayRubric; full marks only for a composite of 1.0."""

    name = "essay"

    def __init__(self, rubric: EssayRubric | None = None):
        self.rubric = rubric or HeuristicEssayRubric()

    def score_fraction(self, question: Question, answer: str) -> tuple[float, bool, dict[str, Any]]:
        composite = clamp_fraction(self.rubric.evaluate(question, answer))
        return composite, composite >= 1.0, {"composite": composite}


# =============================================================================
# MATCHING Strategy
# =============================================================================


@StrategyRegistry.register(QuestionType.MATCHING)
class MatchingStrategy(ScoringStrategy):
    """
    Grade "optionId:value" pairs against each correct option's matching value.

    A pair without ':' or a repeated option id makes the whole answer
    unparsable, which scores zero.
    """

    name = "matching"

    def parse_pairs(self, answer: str) -> dict[str, str] | None:
        pairs: dict[str, str] = {}
        for item in answer.split(","):
            if not item.strip():
                continue
            if ":" not in item:
                return None
            key, value = item.split(":", 1)
            key = self._normalize(key)
            if not key or key in pairs:
                return None
            pairs[key] = self._normalize(value)
        return pairs

    def score_fraction(self, question: Question, answer: str) -> tuple[float, bool, dict[str, Any]]:
        submitted = self.parse_pairs(answer)
        if submitted is None:
            return 0.0, False, {"reason": "unparsable"}

        expected = {
            self._normalize(o.id): self._normalize(o.matching_value or "")
            for o in question.correct_options
        }
        if not expected:
            return 0.0, False, {"reason": "no_correct_options"}

        matched = sum(1 for key, value in submitted.items() if expected.get(key) == value)
        fraction = matched / len(expected)
        exact = matched == len(expected) and len(submitted) == len(expected)
        return fraction, exact, {"matched_pairs": matched, "expected_pairs": len(expected)}


# =============================================================================
# ORDERING Strategy
# =============================================================================


@StrategyRegistry.register(QuestionType.ORDERING)
class OrderingStrategy(ScoringStrategy):
    """
    Grade a submitted sequence of option ids.

    Exact sequence earns full credit. Otherwise credit is the share of the
    N-1 correct adjacent pairs (x, y) where y immediately follows x in the
    submitted order. Swapping two neighbours can therefore break every pair.
    """

    name = "ordering"

    def score_fraction(self, question: Question, answer: str) -> tuple[float, bool, dict[str, Any]]:
        expected = [self._normalize(o.id) for o in sorted(question.options, key=lambda o: o.order_index)]
        submitted = [self._normalize(i) for i in self._split_ids(answer)]

        if not expected:
            return 0.0, False, {"reason": "no_items"}
        if submitted == expected:
            return 1.0, True, {}

        total = len(expected) - 1
        if total == 0:
            return 0.0, False, {}

        position: dict[str, int] = {}
        for index, item in enumerate(submitted):
            position.setdefault(item, index)

        preserved = 0
        for first, second in zip(expected, expected[1:]):
            if first in position and second in position and position[second] == position[first] + 1:
                preserved += 1

        return preserved / total, False, {"preserved_pairs": preserved, "total_pairs": total}
