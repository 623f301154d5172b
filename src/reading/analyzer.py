"""
Turkish Text Difficulty Analyzer.

Computes, once per reading text at authoring time:
- Tokenization (words, sentences, paragraphs)
- Syllable counts (vowel-run heuristic)
- Readability index (Ateşman formula for Turkish)
- Six-level difficulty classification
- Keywords, summary, topic and suffix-based density heuristics

Pure and side-effect free; a single instance can be shared across threads.
"""

from __future__ import annotations

import math
from collections import Counter

from loguru import logger

from .models import EducationCategory, TextAnalysisResult, TextDifficulty, TextStatistics
from .turkish import (
    ADJECTIVE_ENDINGS,
    NOUN_ENDINGS,
    STOP_WORDS,
    VERB_ENDINGS,
    count_syllables,
    is_complex_word,
    tokenize_paragraphs,
    tokenize_sentences,
    tokenize_words,
    turkish_lower,
    word_root,
)

# Ateşman readability coefficients
READABILITY_BASE = 198.825
READABILITY_SENTENCE_WEIGHT = 40.175
READABILITY_SYLLABLE_WEIGHT = 2.610

READING_SPEED_WPM = 200  # for estimated reading time

# Band upper bounds (exclusive); values past the last bound score 6
SENTENCE_LENGTH_BANDS: tuple[float, ...] = (10, 15, 20, 25, 30)
WORD_LENGTH_BANDS: tuple[float, ...] = (4, 5, 6, 7, 8)
LEXICAL_DIVERSITY_BANDS: tuple[float, ...] = (0.3, 0.4, 0.5, 0.6, 0.7)

# Averaged band score -> difficulty level
DIFFICULTY_CUTS: tuple[tuple[float, TextDifficulty], ...] = (
    (1.5, TextDifficulty.VERY_EASY),
    (2.5, TextDifficulty.EASY),
    (3.5, TextDifficulty.MEDIUM),
    (4.5, TextDifficulty.HARD),
    (5.5, TextDifficulty.VERY_HARD),
)

EDUCATION_BY_DIFFICULTY: dict[TextDifficulty, EducationCategory] = {
    TextDifficulty.VERY_EASY: EducationCategory.ELEMENTARY,
    TextDifficulty.EASY: EducationCategory.ELEMENTARY,
    TextDifficulty.MEDIUM: EducationCategory.MIDDLE_SCHOOL,
    TextDifficulty.HARD: EducationCategory.HIGH_SCHOOL,
    TextDifficulty.VERY_HARD: EducationCategory.UNIVERSITY,
    TextDifficulty.EXPERT: EducationCategory.GRADUATE,
}

DEFAULT_TOPIC = "Genel Konu"


def band_score(value: float, bands: tuple[float, ...]) -> int:
    """Map a value to 1..len(bands)+1 using exclusive upper bounds."""
    for score, upper in enumerate(bands, start=1):
        if value < upper:
            return score
    return len(bands) + 1


class TextDifficultyAnalyzer:
    """
    Analyzer for Turkish reading texts.

    Example:
        analyzer = TextDifficultyAnalyzer()
        result = analyzer.analyze(content)
        result.difficulty  # TextDifficulty.MEDIUM
    """

    def __init__(self, keyword_count: int = 10, summary_max_length: int = 200):
        self.keyword_count = keyword_count
        self.summary_max_length = summary_max_length

    # =========================================================================
    # Full Analysis
    # =========================================================================

    def analyze(self, text: str) -> TextAnalysisResult:
        """Run the complete pipeline over a block of text."""
        if not text or not text.strip():
            return TextAnalysisResult(
                statistics=TextStatistics(),
                difficulty=TextDifficulty.EASY,
                target_education_level=EducationCategory.ELEMENTARY,
            )

        statistics = self.calculate_statistics(text)
        words = tokenize_words(text)

        complex_count = sum(1 for w in words if is_complex_word(w))
        complex_percentage = complex_count / len(words) * 100 if words else 0.0

        difficulty = self.classify_difficulty(statistics)
        keywords = self.extract_keywords(text, self.keyword_count)
        verb_density, noun_density, adjective_density = self.part_of_speech_density(words)

        result = TextAnalysisResult(
            statistics=statistics,
            difficulty=difficulty,
            target_education_level=self.target_education_level(difficulty),
            readability_score=statistics.readability_score,
            difficulty_score=self.difficulty_score(statistics, complex_percentage),
            keywords=tuple(keywords),
            summary=self.summarize(text, self.summary_max_length),
            topic=", ".join(keywords[:3]) if keywords else DEFAULT_TOPIC,
            important_sentences=tuple(self.important_sentences(text, keywords)),
            complex_word_count=complex_count,
            complex_word_percentage=complex_percentage,
            suffix_complexity=self.suffix_complexity(words),
            verb_density=verb_density,
            noun_density=noun_density,
            adjective_density=adjective_density,
            word_frequency=self.word_frequency(words),
        )

        logger.debug(
            "Analyzed text: {} words, {} sentences, difficulty={}, readability={:.1f}",
            statistics.word_count,
            statistics.sentence_count,
            difficulty.value,
            statistics.readability_score,
        )
        return result

    def calculate_statistics(self, text: str) -> TextStatistics:
        """Compute surface statistics for a block of text."""
        words = tokenize_words(text)
        sentences = tokenize_sentences(text)
        paragraphs = tokenize_paragraphs(text)

        if not words:
            return TextStatistics(
                sentence_count=len(sentences),
                paragraph_count=len(paragraphs),
                character_count=len(text),
                character_count_no_spaces=sum(1 for c in text if not c.isspace()),
                readability_score=self.readability_index(text),
            )

        syllables = sum(count_syllables(w) for w in words)
        unique_words = len({turkish_lower(w) for w in words})

        return TextStatistics(
            word_count=len(words),
            sentence_count=len(sentences),
            paragraph_count=len(paragraphs),
            character_count=len(text),
            character_count_no_spaces=sum(1 for c in text if not c.isspace()),
            unique_word_count=unique_words,
            syllable_count=syllables,
            average_words_per_sentence=len(words) / len(sentences) if sentences else 0.0,
            average_word_length=sum(len(w) for w in words) / len(words),
            average_syllables_per_word=syllables / len(words),
            lexical_diversity=unique_words / len(words),
            readability_score=self.readability_index(text),
            estimated_reading_time_minutes=max(1, math.ceil(len(words) / READING_SPEED_WPM)),
        )

    # =========================================================================
    # Readability & Difficulty
    # =========================================================================

    def readability_index(self, text: str) -> float:
        """
        Ateşman readability index, clamped to [0, 100].

        R = 198.825 - 40.175 * (words / sentence) - 2.610 * (syllables / word)

        Blank text, or text with no words or sentences, reads as 100.
        """
        if not text or not text.strip():
            return 100.0

        words = tokenize_words(text)
        sentences = tokenize_sentences(text)
        if not words or not sentences:
            return 100.0

        words_per_sentence = len(words) / len(sentences)
        syllables_per_word = sum(count_syllables(w) for w in words) / len(words)

        index = (
            READABILITY_BASE
            - READABILITY_SENTENCE_WEIGHT * words_per_sentence
            - READABILITY_SYLLABLE_WEIGHT * syllables_per_word
        )
        return max(0.0, min(100.0, index))

    def classify_difficulty(self, statistics: TextStatistics) -> TextDifficulty:
        """Average three 1-6 bands and map the result to a difficulty level."""
        score = (
            band_score(statistics.average_sentence_length, SENTENCE_LENGTH_BANDS)
            + band_score(statistics.average_word_length, WORD_LENGTH_BANDS)
            + band_score(statistics.lexical_diversity, LEXICAL_DIVERSITY_BANDS)
        )
        average = score / 3

        for upper, level in DIFFICULTY_CUTS:
            if average < upper:
                return level
        return TextDifficulty.EXPERT

    def target_education_level(self, difficulty: TextDifficulty) -> EducationCategory:
        return EDUCATION_BY_DIFFICULTY.get(difficulty, EducationCategory.ADULT)

    def difficulty_score(self, statistics: TextStatistics, complex_word_percentage: float) -> float:
        """0-100 numeric difficulty from word length, sentence length and complex words."""
        word_length_score = min(statistics.average_word_length * 10, 30)
        sentence_length_score = min(statistics.average_sentence_length * 2, 30)
        complexity_score = min(complex_word_percentage, 40)
        return min(word_length_score + sentence_length_score + complexity_score, 100.0)

    # =========================================================================
    # Keywords & Summaries
    # =========================================================================

    def word_frequency(self, words: list[str]) -> dict[str, int]:
        """Lower-cased frequencies in first-occurrence order."""
        return dict(Counter(turkish_lower(w) for w in words if w.strip()))

    def extract_keywords(self, text: str, max_keywords: int = 10) -> list[str]:
        """
        Top words by frequency, excluding stop words and words of two letters or fewer.

        Ties keep first-occurrence order.
        """
        frequency = Counter(
            w for w in (turkish_lower(t) for t in tokenize_words(text))
            if w not in STOP_WORDS and len(w) > 2
        )
        # most_common is a stable sort over insertion (first-occurrence) order
        return [word for word, _ in frequency.most_common(max_keywords)]

    def summarize(self, text: str, max_length: int = 200) -> str:
        """Extractive summary: leading sentences up to max_length characters."""
        parts: list[str] = []
        length = 0
        for sentence in tokenize_sentences(text):
            if length + len(sentence) > max_length:
                break
            parts.append(sentence)
            length += len(sentence) + 1

        summary = " ".join(parts).strip()
        if len(summary) > max_length:
            summary = summary[: max_length - 3] + "..."
        return summary

    def important_sentences(self, text: str, keywords: list[str] | None = None, limit: int = 3) -> list[str]:
        """Sentences that open or close the text or mention two or more keywords."""
        sentences = tokenize_sentences(text)
        if keywords is None:
            keywords = self.extract_keywords(text, self.keyword_count)

        important = []
        last_index = len(sentences) - 1
        for index, sentence in enumerate(sentences):
            lowered = turkish_lower(sentence)
            hits = sum(1 for k in keywords if k in lowered)
            if hits >= 2 or index == 0 or index == last_index:
                important.append(sentence)
        return important[:limit]

    # =========================================================================
    # Morphology Heuristics
    # =========================================================================

    def part_of_speech_density(self, words: list[str]) -> tuple[float, float, float]:
        """Verb, noun and adjective densities from suffix tables."""
        verbs = nouns = adjectives = 0
        for word in words:
            lowered = turkish_lower(word)
            if lowered.endswith(VERB_ENDINGS):
                verbs += 1
            elif lowered.endswith(NOUN_ENDINGS):
                nouns += 1
            elif lowered.endswith(ADJECTIVE_ENDINGS):
                adjectives += 1

        total = len(words) or 1
        return verbs / total, nouns / total, adjectives / total

    def suffix_complexity(self, words: list[str]) -> float:
        """Rough average suffix count per word."""
        if not words:
            return 0.0

        total_suffixes = 0
        for word in words:
            root = word_root(word)
            if len(root) < len(word):
                total_suffixes += (len(word) - len(root)) // 2
        return total_suffixes / len(words)
