"""
Turkish language tables and tokenization primitives.

All tables are immutable module-level constants shared by the analyzer and
the answer scorer.
"""

from __future__ import annotations

import re

# =============================================================================
# Fixed Tables
# =============================================================================

TURKISH_VOWELS: frozenset[str] = frozenset("aeıioöuü")

# Common function words excluded from keyword extraction
STOP_WORDS: frozenset[str] = frozenset({
    "ve", "bir", "bu", "da", "de", "için", "ile", "olan", "olarak", "daha",
    "var", "çok", "en", "gibi", "sonra", "kadar", "her", "ne", "ya", "ki",
    "ama", "veya", "ancak", "şu", "o", "ben", "sen", "biz", "siz", "onlar",
})

# Stop words used by essay keyword coverage
ESSAY_STOP_WORDS: frozenset[str] = frozenset({
    "bir", "bu", "da", "de", "en", "ile", "için", "ve", "var", "olan",
    "olarak", "ancak", "fakat", "lakin", "ama", "daha", "çok",
})

# Suffixes stripped by the naive root finder, longest first
ROOT_SUFFIXES: tuple[str, ...] = ("ler", "lar", "den", "dan", "de", "da", "in", "ın", "un", "ün")

VERB_ENDINGS: tuple[str, ...] = ("mak", "mek", "yor", "dı", "di", "du", "dü", "tı", "ti", "tu", "tü")
NOUN_ENDINGS: tuple[str, ...] = ("lık", "lik", "luk", "lük", "cı", "ci", "cu", "cü")
ADJECTIVE_ENDINGS: tuple[str, ...] = ("lı", "li", "lu", "lü", "sız", "siz", "suz", "süz")

_DIACRITIC_FOLD = str.maketrans("ıİğĞüÜşŞöÖçÇ", "iIgGuUsSoOcC")
_TURKISH_LOWER = str.maketrans({"I": "ı", "İ": "i"})

WORD_PATTERN = re.compile(r"\b[\w']+\b")
SENTENCE_PATTERN = re.compile(r"[.!?]+\s*")
PARAGRAPH_PATTERN = re.compile(r"\n\s*\n")


# =============================================================================
# Normalization
# =============================================================================


def turkish_lower(text: str) -> str:
    """Lower-case with Turkish dotted/dotless I rules."""
    return text.translate(_TURKISH_LOWER).lower()


def remove_diacritics(text: str) -> str:
    """Fold Turkish-specific letters to their ASCII counterparts."""
    if not text:
        return text
    return text.translate(_DIACRITIC_FOLD)


# =============================================================================
# Tokenization
# =============================================================================


def tokenize_words(text: str) -> list[str]:
    if not text or not text.strip():
        return []
    return [w for w in WORD_PATTERN.findall(text) if w.strip()]


def tokenize_sentences(text: str) -> list[str]:
    if not text or not text.strip():
        return []
    return [s.strip() for s in SENTENCE_PATTERN.split(text) if s.strip()]


def tokenize_paragraphs(text: str) -> list[str]:
    if not text or not text.strip():
        return []
    return [p.strip() for p in PARAGRAPH_PATTERN.split(text) if p.strip()]


# =============================================================================
# Morphology Heuristics
# =============================================================================


def count_syllables(word: str) -> int:
    """
    Count syllables as the number of vowel runs.

    A maximal run of consecutive Turkish vowels is one syllable. Every
    non-empty word has at least one.
    """
    if not word:
        return 0

    count = 0
    previous_was_vowel = False
    for char in turkish_lower(word):
        is_vowel = char in TURKISH_VOWELS
        if is_vowel and not previous_was_vowel:
            count += 1
        previous_was_vowel = is_vowel

    return max(1, count)


def is_complex_word(word: str) -> bool:
    return count_syllables(word) >= 3


def word_root(word: str) -> str:
    """Strip one common suffix, keeping at least three root letters."""
    if not word:
        return word

    lowered = turkish_lower(word)
    for suffix in sorted(ROOT_SUFFIXES, key=len, reverse=True):
        if lowered.endswith(suffix) and len(lowered) > len(suffix) + 2:
            return lowered[: -len(suffix)]
    return lowered
