"""Weighted multi-field relevance score of one product for one keyword.

Per field similarity (0.0 – 1.0) × normalized field weight, summed and
scaled to 0 – 100:
  title, description, merchant → similarity(keyword, field text)
  category                     → best of: exact 1.0 / contains 0.9 /
                                 shared token 0.8 / similarity × 0.7
  keywords (tags)              → exact tag 1.0, else share of tags found
                                 in the keyword's tokens

Fields missing on the product are left out of ``field_matches`` and add 0.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .config import MatchConfig
from .schemas import ProductRecord
from .similarity import similarity
from .text import DEFAULT_STOPWORDS, normalize, tokenize

CATEGORY_CONTAINS_SCORE = 0.9
CATEGORY_TOKEN_SCORE = 0.8
CATEGORY_FALLBACK_FACTOR = 0.7


@dataclass
class MatchResult:
    """Score of one candidate product against a keyword."""

    index: int                  # Position of the candidate in the input list
    product: ProductRecord
    score: float                # 0.0 – 100.0, rounded to 2 decimals
    field_matches: dict[str, float] = field(default_factory=dict)  # raw 0.0 – 1.0 per field

    def as_dict(self) -> dict[str, Any]:
        """Product fields plus ``_fuzzy_score`` / ``_fuzzy_matches`` for renderers."""
        data = self.product.model_dump()
        data["_fuzzy_score"] = self.score
        data["_fuzzy_matches"] = dict(self.field_matches)
        return data


# ---------------------------------------------------------------------------
# Specialized field similarities
# ---------------------------------------------------------------------------


def category_similarity(
    keyword: str,
    categories: list[str],
    stopwords: frozenset[str] | set[str] = DEFAULT_STOPWORDS,
) -> float:
    """Best category score; an exact category match returns 1.0 immediately."""
    norm_kw = normalize(keyword)
    kw_tokens = set(tokenize(norm_kw, stopwords))
    best = 0.0

    for category in categories:
        norm_cat = normalize(category)
        if norm_cat == norm_kw:
            return 1.0
        if norm_kw in norm_cat:
            candidate = CATEGORY_CONTAINS_SCORE
        elif kw_tokens & set(tokenize(norm_cat, stopwords)):
            candidate = CATEGORY_TOKEN_SCORE
        else:
            candidate = similarity(norm_kw, norm_cat, stopwords) * CATEGORY_FALLBACK_FACTOR
        best = max(best, candidate)

    return best


def keywords_similarity(
    keyword: str,
    tags: list[str],
    stopwords: frozenset[str] | set[str] = DEFAULT_STOPWORDS,
) -> float:
    """Share of tags that appear in the keyword's tokens; an exact tag returns 1.0."""
    norm_kw = normalize(keyword)
    kw_tokens = tokenize(norm_kw, stopwords)
    # Tags that normalize to "" (e.g. "---") are not counted in the denominator
    norm_tags = [t for t in (normalize(tag) for tag in tags) if t]
    if not norm_tags:
        return 0.0

    matched = 0
    for tag in norm_tags:
        if tag == norm_kw:
            return 1.0
        # "equals" is covered by "contained in"
        if any(tag in token for token in kw_tokens):
            matched += 1

    return matched / len(norm_tags)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _field_similarity(
    field_name: str, norm_kw: str, product: ProductRecord, config: MatchConfig,
) -> float | None:
    """Raw similarity for one field, or None when the product lacks it."""
    stopwords = config.stopwords
    if field_name == "category":
        if not product.categories:
            return None
        return category_similarity(norm_kw, product.categories, stopwords)
    if field_name == "keywords":
        if not product.keywords:
            return None
        return keywords_similarity(norm_kw, product.keywords, stopwords)

    text = product.merchant_name if field_name == "merchant" else getattr(product, field_name)
    if not text:
        return None
    return similarity(norm_kw, normalize(text), stopwords)


def calculate_score(
    keyword: str,
    product: ProductRecord,
    config: MatchConfig,
    index: int = 0,
) -> MatchResult:
    """Score ``product`` against ``keyword`` using the weights in ``config``."""
    norm_kw = normalize(keyword)
    if not norm_kw:
        return MatchResult(index=index, product=product, score=0.0)

    field_matches: dict[str, float] = {}
    total = 0.0
    for field_name, weight in config.weights.items():
        value = _field_similarity(field_name, norm_kw, product, config)
        if value is None:
            continue
        field_matches[field_name] = value
        total += value * weight

    return MatchResult(
        index=index,
        product=product,
        score=round(total * 100, 2),
        field_matches=field_matches,
    )
