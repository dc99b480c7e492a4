"""Text normalization and tokenization for product relevance scoring.

Handles:
- Unicode-aware lowercasing (any script)
- German diacritics (ä→ae, ö→oe, ü→ue, ß→ss), applied after lowercasing
- Punctuation and symbols collapsed to single spaces
- Stopword removal for German and English function words
"""

from __future__ import annotations

import re
import unicodedata

# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

_UMLAUTS = str.maketrans({"ä": "ae", "ö": "oe", "ü": "ue", "ß": "ss"})

_WHITESPACE_RE = re.compile(r"\s+")


def _is_word_char(ch: str) -> bool:
    """True for Unicode letters (L*) and numbers (N*)."""
    category = unicodedata.category(ch)
    return category[0] in ("L", "N")


def normalize(text: str) -> str:
    """Canonicalize raw text: lowercase, fold umlauts, strip punctuation.

    Example: "Kopfhörer (Over-Ear) – Größe L" → "kopfhoerer over ear groesse l"
    """
    if not text:
        return ""
    # Precomposed forms so "u" + combining diaeresis folds like "ü"
    text = unicodedata.normalize("NFC", text).lower()
    text = text.translate(_UMLAUTS)
    text = "".join(ch if _is_word_char(ch) else " " for ch in text)
    return _WHITESPACE_RE.sub(" ", text).strip()


# ---------------------------------------------------------------------------
# Stopwords (stored in normalized form: "für" → "fuer")
# ---------------------------------------------------------------------------

GERMAN_STOPWORDS = frozenset({
    # Articles
    "der", "die", "das", "den", "dem", "des",
    "ein", "eine", "einer", "eines", "einem", "einen",
    # Demonstratives
    "dieser", "diese", "dieses", "diesen", "diesem",
    # Conjunctions
    "und", "oder", "aber", "sowie", "dass", "wenn", "weil",
    # Prepositions
    "mit", "von", "vom", "zu", "zum", "zur", "fuer", "auf", "in", "im",
    "an", "am", "aus", "bei", "nach", "vor", "ueber", "unter", "ohne", "bis",
    # Verbs
    "ist", "sind", "war", "wird", "werden", "hat", "haben", "kann",
    # Pronouns / particles
    "es", "er", "sie", "wir", "ihr", "ich", "du", "man", "sich",
    "nicht", "auch", "als", "wie", "so", "noch", "nur", "sehr",
})

ENGLISH_STOPWORDS = frozenset({
    # Articles / determiners
    "a", "an", "the", "this", "that", "these", "those",
    # Conjunctions
    "and", "or", "but", "if", "so",
    # Prepositions
    "of", "to", "in", "on", "at", "by", "for", "with", "from", "into",
    "about", "over", "under", "up", "out",
    # Verbs
    "is", "are", "was", "were", "be", "been", "has", "have", "had",
    "do", "does", "can", "will",
    # Pronouns / particles
    "it", "its", "as", "not", "no", "you", "your", "we", "our", "they",
    "all", "any",
})

DEFAULT_STOPWORDS = GERMAN_STOPWORDS | ENGLISH_STOPWORDS

MIN_TOKEN_LENGTH = 2


# ---------------------------------------------------------------------------
# Tokenization
# ---------------------------------------------------------------------------


def tokenize(
    normalized_text: str,
    stopwords: frozenset[str] | set[str] = DEFAULT_STOPWORDS,
) -> list[str]:
    """Split normalized text into significant words.

    Order and duplicates are preserved; short tokens and stopwords are dropped.
    """
    if not normalized_text:
        return []
    return [
        token
        for token in normalized_text.split(" ")
        if len(token) >= MIN_TOKEN_LENGTH and token not in stopwords
    ]
