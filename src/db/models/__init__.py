# SQLAlchemy models
from .attempts import AttemptRecord
from .base import Base
from .exercises import ExerciseRecord

__all__ = [
    # Base
    "Base",
    # Exercises
    "ExerciseRecord",
    # Attempts
    "AttemptRecord",
]
