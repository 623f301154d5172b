"""
Text analysis data models.

Produced once per reading text at authoring time and attached to exercises.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class TextDifficulty(str, Enum):
    """Six ordered difficulty levels, easiest first."""

    VERY_EASY = "very_easy"
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    VERY_HARD = "very_hard"
    EXPERT = "expert"

    @property
    def rank(self) -> int:
        """1-based position in the difficulty ordering."""
        return list(TextDifficulty).index(self) + 1


class EducationCategory(str, Enum):
    """Target reader education level."""

    ELEMENTARY = "elementary"
    MIDDLE_SCHOOL = "middle_school"
    HIGH_SCHOOL = "high_school"
    UNIVERSITY = "university"
    GRADUATE = "graduate"
    ADULT = "adult"


@dataclass(frozen=True)
class TextStatistics:
    """Surface statistics of a block of text."""

    word_count: int = 0
    sentence_count: int = 0
    paragraph_count: int = 0
    character_count: int = 0
    character_count_no_spaces: int = 0
    unique_word_count: int = 0
    syllable_count: int = 0

    average_words_per_sentence: float = 0.0
    average_word_length: float = 0.0  # characters
    average_syllables_per_word: float = 0.0
    lexical_diversity: float = 0.0  # unique / total words

    readability_score: float = 100.0  # 0-100, higher is easier
    estimated_reading_time_minutes: int = 0

    @property
    def average_sentence_length(self) -> float:
        """Average sentence length in words."""
        return self.average_words_per_sentence

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TextStatistics:
        return cls(**data)


@dataclass(frozen=True)
class TextAnalysisResult:
    """Full analysis output for one reading text."""

    statistics: TextStatistics
    difficulty: TextDifficulty
    target_education_level: EducationCategory

    readability_score: float = 100.0
    difficulty_score: float = 0.0  # 0-100
    keywords: tuple[str, ...] = ()
    summary: str = ""
    topic: str = ""
    important_sentences: tuple[str, ...] = ()

    complex_word_count: int = 0
    complex_word_percentage: float = 0.0
    suffix_complexity: float = 0.0
    verb_density: float = 0.0
    noun_density: float = 0.0
    adjective_density: float = 0.0

    word_frequency: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        data = asdict(self)
        data["difficulty"] = self.difficulty.value
        data["target_education_level"] = self.target_education_level.value
        data["keywords"] = list(self.keywords)
        data["important_sentences"] = list(self.important_sentences)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TextAnalysisResult:
        """Create from a dictionary produced by to_dict()."""
        payload = dict(data)
        payload["statistics"] = TextStatistics.from_dict(payload["statistics"])
        payload["difficulty"] = TextDifficulty(payload["difficulty"])
        payload["target_education_level"] = EducationCategory(payload["target_education_level"])
        payload["keywords"] = tuple(payload.get("keywords", ()))
        payload["important_sentences"] = tuple(payload.get("important_sentences", ()))
        return cls(**payload)
