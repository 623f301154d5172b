"""
Turkish reading-text analysis.

Computes statistics, readability, difficulty and keywords for a text once,
at authoring time. Exercises carry the result; attempts only read it.
"""

from .analyzer import TextDifficultyAnalyzer
from .models import EducationCategory, TextAnalysisResult, TextDifficulty, TextStatistics
from .turkish import count_syllables, remove_diacritics, turkish_lower

__all__ = [
    "TextDifficultyAnalyzer",
    "EducationCategory",
    "TextAnalysisResult",
    "TextDifficulty",
    "TextStatistics",
    "count_syllables",
    "remove_diacritics",
    "turkish_lower",
]
