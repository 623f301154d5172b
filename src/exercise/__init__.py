"""
Exercise definitions, attempt state records and the engine error taxonomy.
"""

from .authoring import build_exercise, create_reading_text, derive_time_limit, validate_question
from .errors import (
    AlreadyActive,
    EngineError,
    Expired,
    NotFoundError,
    NotInProgress,
    RetryExhausted,
    StateConflict,
    ValidationError,
)
from .models import (
    Answer,
    Attempt,
    AttemptStatus,
    Exercise,
    Option,
    Question,
    QuestionCategory,
    QuestionType,
    ReadingText,
)

__all__ = [
    # Authoring
    "build_exercise",
    "create_reading_text",
    "derive_time_limit",
    "validate_question",
    # Errors
    "AlreadyActive",
    "EngineError",
    "Expired",
    "NotFoundError",
    "NotInProgress",
    "RetryExhausted",
    "StateConflict",
    "ValidationError",
    # Models
    "Answer",
    "Attempt",
    "AttemptStatus",
    "Exercise",
    "Option",
    "Question",
    "QuestionCategory",
    "QuestionType",
    "ReadingText",
]
