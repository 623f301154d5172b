"""
Essay rubrics.

The scorer delegates essay grading to an EssayRubric so deployments can swap
the heuristic for a model-backed grader without touching the other strategies.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from src.exercise.models import Question
from src.reading.turkish import ESSAY_STOP_WORDS, turkish_lower

_KEYWORD_STRIP = ".,;:!?\"'()[]«»"


@runtime_checkable
class EssayRubric(Protocol):
    """Protocol for essay graders."""

    def evaluate(self, question: Question, answer: str) -> float:
        """Return a composite score in [0, 1]."""
        ...


def essay_keywords(text: str) -> list[str]:
    """Distinct lower-cased words longer than three letters, stop words removed."""
    keywords: list[str] = []
    for token in text.split():
        word = turkish_lower(token.strip(_KEYWORD_STRIP))
        if len(word) > 3 and word not in ESSAY_STOP_WORDS and word not in keywords:
            keywords.append(word)
    return keywords


class HeuristicEssayRubric:
    """
    Length, structure and keyword-coverage heuristic.

    score = 0.3 * min(1, words / 100)
          + 0.3 * min(1, sentences / 3)
          + 0.4 * keyword coverage

    Coverage counts keywords from the question text and the correct options
    that appear anywhere in the lower-cased answer.
    """

    LENGTH_WEIGHT = 0.3
    STRUCTURE_WEIGHT = 0.3
    KEYWORD_WEIGHT = 0.4

    EXPECTED_WORDS = 100
    EXPECTED_SENTENCES = 3

    def evaluate(self, question: Question, answer: str) -> float:
        word_count = len(answer.split())
        sentence_count = len([s for s in answer.split(".") if s.strip()])

        length_score = min(1.0, word_count / self.EXPECTED_WORDS)
        structure_score = min(1.0, sentence_count / self.EXPECTED_SENTENCES)
        keyword_score = self.keyword_coverage(question, answer)

        return (
            length_score * self.LENGTH_WEIGHT
            + structure_score * self.STRUCTURE_WEIGHT
            + keyword_score * self.KEYWORD_WEIGHT
        )

    def keywords(self, question: Question) -> list[str]:
        keywords = essay_keywords(question.text)
        for option in question.correct_options:
            for word in essay_keywords(option.text):
                if word not in keywords:
                    keywords.append(word)
        return keywords

    def keyword_coverage(self, question: Question, answer: str) -> float:
        keywords = self.keywords(question)
        if not keywords:
            return 0.0
        lowered = turkish_lower(answer)
        present = sum(1 for keyword in keywords if keyword in lowered)
        return present / len(keywords)
