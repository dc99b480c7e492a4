"""Pairwise text similarity between two normalized strings.

Blend of four independent measures, averaged by count:
  Word match             → ×1.5 (token exact / prefix / substring hits)
  similar_text ratio     → recursive longest-common-substring percentage
  Bigram Jaccard         → character 2-gram set overlap
  Levenshtein ratio      → only for short strings (search ≤ 20, target ≤ 50)

Short-circuits:
  Exact match            → 1.0
  Phrase containment     → 0.95 (target contains search)

The word-match term is scaled by 1.5 but still divided by the number of
terms, so the raw average can exceed 1.0; the final clamp absorbs it.
"""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein

from .text import DEFAULT_STOPWORDS, tokenize

EXACT_MATCH_SCORE = 1.0
CONTAINMENT_SCORE = 0.95

WORD_MATCH_FACTOR = 1.5
PREFIX_HIT = 0.7
SUBSTRING_HIT = 0.4

LEVENSHTEIN_MAX_SEARCH = 20
LEVENSHTEIN_MAX_TARGET = 50
LEVENSHTEIN_MAX_CHARS = 255


# ---------------------------------------------------------------------------
# Word match
# ---------------------------------------------------------------------------


def word_match_score(
    search: str,
    target: str,
    stopwords: frozenset[str] | set[str] = DEFAULT_STOPWORDS,
) -> float:
    """Fraction of search tokens found in target (exact 1.0, prefix 0.7, substring 0.4)."""
    search_tokens = tokenize(search, stopwords)
    target_tokens = tokenize(target, stopwords)
    if not search_tokens or not target_tokens:
        return 0.0

    target_set = set(target_tokens)
    total = 0.0
    for s_tok in search_tokens:
        if s_tok in target_set:
            total += 1.0
            continue
        for t_tok in target_tokens:
            if t_tok.startswith(s_tok) or s_tok.startswith(t_tok):
                total += PREFIX_HIT
                break
            if s_tok in t_tok or t_tok in s_tok:
                total += SUBSTRING_HIT
                break

    return total / len(search_tokens)


# ---------------------------------------------------------------------------
# similar_text (recursive longest common substring)
# ---------------------------------------------------------------------------


def _longest_common_substring(
    a: str, a_lo: int, a_hi: int, b: str, b_lo: int, b_hi: int,
) -> tuple[int, int, int]:
    """Return (pos_a, pos_b, length) of the first longest common run.

    Ties resolve to the leftmost position in ``a``, then in ``b``.
    Cells are visited bottom-right to top-left, so ``>=`` lets the
    leftmost of equally long runs win.
    """
    best_a = best_b = best_len = 0
    width = b_hi - b_lo
    below = [0] * (width + 1)  # run lengths starting at row i + 1
    for i in range(a_hi - 1, a_lo - 1, -1):
        row = [0] * (width + 1)
        ch = a[i]
        for j in range(b_hi - 1, b_lo - 1, -1):
            if b[j] != ch:
                continue
            k = below[j - b_lo + 1] + 1
            row[j - b_lo] = k
            if k >= best_len:
                best_a, best_b, best_len = i, j, k
        below = row
    return best_a, best_b, best_len


def similar_text(a: str, b: str) -> int:
    """Total number of characters matched by recursive longest-common-substring.

    After the longest common run is found, the pieces left of it and right
    of it are matched the same way. An explicit stack replaces recursion so
    long descriptions cannot hit the interpreter's recursion limit.
    """
    total = 0
    stack = [(0, len(a), 0, len(b))]
    while stack:
        a_lo, a_hi, b_lo, b_hi = stack.pop()
        if a_lo >= a_hi or b_lo >= b_hi:
            continue
        pos_a, pos_b, length = _longest_common_substring(a, a_lo, a_hi, b, b_lo, b_hi)
        if not length:
            continue
        total += length
        stack.append((a_lo, pos_a, b_lo, pos_b))
        stack.append((pos_a + length, a_hi, pos_b + length, b_hi))
    return total


def similar_text_ratio(a: str, b: str) -> float:
    """similar_text as a ratio in [0, 1]: matched * 2 / (len(a) + len(b))."""
    size = len(a) + len(b)
    if not size:
        return 0.0
    percent = similar_text(a, b) * 2 / size * 100
    return percent / 100


# ---------------------------------------------------------------------------
# Bigram Jaccard
# ---------------------------------------------------------------------------


def _bigrams(text: str) -> set[str]:
    text = "".join(text.split())
    if len(text) < 2:
        return {text} if text else set()
    return {text[i:i + 2] for i in range(len(text) - 1)}


def bigram_jaccard(a: str, b: str) -> float:
    """Jaccard overlap of whitespace-free character bigram sets."""
    bg_a = _bigrams(a)
    bg_b = _bigrams(b)
    union = bg_a | bg_b
    if not union:
        return 0.0
    return len(bg_a & bg_b) / len(union)


# ---------------------------------------------------------------------------
# Levenshtein
# ---------------------------------------------------------------------------


def levenshtein_ratio(a: str, b: str) -> float:
    """1 - edit distance / longer length (inputs capped at 255 characters)."""
    longest = max(len(a), len(b))
    if not longest:
        return 0.0
    distance = Levenshtein.distance(a[:LEVENSHTEIN_MAX_CHARS], b[:LEVENSHTEIN_MAX_CHARS])
    return 1 - distance / longest


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def similarity(
    search: str,
    target: str,
    stopwords: frozenset[str] | set[str] = DEFAULT_STOPWORDS,
) -> float:
    """Similarity of two normalized strings, between 0.0 and 1.0."""
    if not search or not target:
        return 0.0
    if search == target:
        return EXACT_MATCH_SCORE
    if search in target:
        return CONTAINMENT_SCORE

    scores = [
        word_match_score(search, target, stopwords) * WORD_MATCH_FACTOR,
        similar_text_ratio(search, target),
        bigram_jaccard(search, target),
    ]
    if len(search) <= LEVENSHTEIN_MAX_SEARCH and len(target) <= LEVENSHTEIN_MAX_TARGET:
        scores.append(levenshtein_ratio(search, target))

    return max(0.0, min(1.0, sum(scores) / len(scores)))
