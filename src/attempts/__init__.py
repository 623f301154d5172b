"""
Exercise attempt lifecycle.

AttemptStateMachine owns start/submit/complete/abandon/time-out and the
periodic sweep; BackgroundSweeper runs the sweep on a timer.
"""

from .comprehension import ComprehensionScorer
from .projections import (
    AnswerInfo,
    AttemptInfo,
    AttemptStatistics,
    CanAttemptResult,
    CategoryScore,
    ComprehensionScoreBreakdown,
    ExerciseTimeAnalysis,
    ReadingSpeedAnalysis,
    ReadingSpeedLevel,
)
from .sweeper import BackgroundSweeper, SweepStatus
from .tracker import AttemptStateMachine

__all__ = [
    "AttemptStateMachine",
    "BackgroundSweeper",
    "SweepStatus",
    "ComprehensionScorer",
    "AnswerInfo",
    "AttemptInfo",
    "AttemptStatistics",
    "CanAttemptResult",
    "CategoryScore",
    "ComprehensionScoreBreakdown",
    "ExerciseTimeAnalysis",
    "ReadingSpeedAnalysis",
    "ReadingSpeedLevel",
]
