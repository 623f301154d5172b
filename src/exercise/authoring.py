"""
Exercise authoring helpers.

Reading texts are analyzed once here; exercises built here carry a time
limit derived from that analysis unless one is supplied explicitly.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from loguru import logger

from config import get_settings
from src.reading import EducationCategory, TextDifficultyAnalyzer

from .errors import ValidationError
from .models import Exercise, Question, QuestionType, ReadingText, new_id

# Target reading speed per education level (words per minute)
TARGET_WPM_BY_LEVEL: dict[EducationCategory, int] = {
    EducationCategory.ELEMENTARY: 150,
    EducationCategory.MIDDLE_SCHOOL: 200,
    EducationCategory.HIGH_SCHOOL: 250,
    EducationCategory.UNIVERSITY: 300,
    EducationCategory.GRADUATE: 350,
}
DEFAULT_TARGET_WPM = 200

MIN_TIME_LIMIT_MINUTES = 3
QUESTION_BUFFER_MINUTES = 2

# Question kinds that need at least one option marked correct
_NEEDS_CORRECT_OPTION = frozenset({
    QuestionType.MULTIPLE_CHOICE,
    QuestionType.TRUE_FALSE,
    QuestionType.SHORT_ANSWER,
    QuestionType.FILL_IN_THE_BLANK,
})


def derive_time_limit(word_count: int, education_level: EducationCategory | None) -> int:
    """Minutes needed to read the text at the level's target speed, plus question time."""
    wpm = TARGET_WPM_BY_LEVEL.get(education_level, DEFAULT_TARGET_WPM)
    reading_minutes = math.ceil(word_count / wpm) if word_count > 0 else 0
    return max(MIN_TIME_LIMIT_MINUTES, reading_minutes + QUESTION_BUFFER_MINUTES)


def create_reading_text(
    title: str,
    content: str,
    analyzer: TextDifficultyAnalyzer | None = None,
) -> ReadingText:
    """Analyze content once and wrap it as a ReadingText."""
    if not title or not title.strip():
        raise ValidationError("Reading text title is required")
    if not content or not content.strip():
        raise ValidationError("Reading text content is required")

    if analyzer is None:
        settings = get_settings()
        analyzer = TextDifficultyAnalyzer(
            keyword_count=settings.keyword_count,
            summary_max_length=settings.summary_max_length,
        )

    analysis = analyzer.analyze(content)
    logger.info(
        "Created reading text '{}' ({} words, {})",
        title,
        analysis.statistics.word_count,
        analysis.difficulty.value,
    )
    return ReadingText(id=new_id(), title=title.strip(), content=content, analysis=analysis)


def validate_question(question: Question) -> None:
    if question.points <= 0:
        raise ValidationError(f"Question {question.id} must be worth a positive number of points")
    if not question.text or not question.text.strip():
        raise ValidationError(f"Question {question.id} has no text")

    if question.type in _NEEDS_CORRECT_OPTION and not question.correct_options:
        raise ValidationError(f"Question {question.id} has no correct option")
    if question.type == QuestionType.MATCHING and not any(o.matching_value for o in question.correct_options):
        raise ValidationError(f"Matching question {question.id} has no correct pairs")
    if question.type == QuestionType.ORDERING and not question.options:
        raise ValidationError(f"Ordering question {question.id} has no items")


def build_exercise(
    title: str,
    questions: Iterable[Question],
    *,
    reading_text: ReadingText | None = None,
    time_limit_minutes: int | None = None,
    passing_score: int | None = None,
    allow_retry: bool = True,
    max_retries: int | None = None,
    is_time_limited: bool = True,
    is_active: bool = True,
    exercise_id: str | None = None,
) -> Exercise:
    """
    Validate settings and assemble an immutable Exercise.

    Unset settings fall back to the configured defaults. When no time limit
    is given and a reading text is attached, the limit is derived from the
    text's word count and target education level.

    Raises:
        ValidationError: On empty titles, invalid thresholds or malformed questions.
    """
    settings = get_settings()

    if not title or not title.strip():
        raise ValidationError("Exercise title is required")

    question_list = sorted(questions, key=lambda q: q.order_index)
    if not question_list:
        raise ValidationError("Exercise needs at least one question")

    seen: set[str] = set()
    for question in question_list:
        if question.id in seen:
            raise ValidationError(f"Duplicate question id: {question.id}")
        seen.add(question.id)
        validate_question(question)

    if time_limit_minutes is None:
        if reading_text is not None:
            analysis = reading_text.analysis
            time_limit_minutes = derive_time_limit(
                analysis.statistics.word_count, analysis.target_education_level
            )
        else:
            time_limit_minutes = settings.default_time_limit_minutes
    if time_limit_minutes <= 0:
        raise ValidationError("Time limit must be positive")

    if passing_score is None:
        passing_score = settings.default_passing_score
    if not 0 <= passing_score <= 100:
        raise ValidationError("Passing score must be between 0 and 100")

    if max_retries is None:
        max_retries = settings.default_max_retries
    if max_retries < 0:
        raise ValidationError("Max retries cannot be negative")

    exercise = Exercise(
        id=exercise_id or new_id(),
        title=title.strip(),
        questions=tuple(question_list),
        time_limit_minutes=time_limit_minutes,
        passing_score=passing_score,
        allow_retry=allow_retry,
        max_retries=max_retries,
        is_time_limited=is_time_limited,
        is_active=is_active,
        reading_text=reading_text,
    )
    logger.debug(
        "Built exercise {} with {} questions, {} min limit",
        exercise.id,
        len(exercise.questions),
        exercise.time_limit_minutes,
    )
    return exercise
