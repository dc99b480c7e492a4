"""Rank catalog candidates by relevance to a search keyword.

Pure functions over (keyword, candidates, config): nothing is mutated or
stored. Ties keep input order, so catalog priority breaks equal scores.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from .config import MatchConfig
from .schemas import ProductRecord
from .scorer import MatchResult, calculate_score

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 10
SIMILAR_PRODUCTS_LIMIT = 3
SIMILAR_PRODUCTS_THRESHOLD = 25


def meets_threshold(score: float, config: MatchConfig) -> bool:
    return score >= config.threshold


def rank(
    keyword: str,
    candidates: Sequence[ProductRecord],
    config: MatchConfig,
    max_workers: int = 1,
) -> list[MatchResult]:
    """Score every candidate, drop those below the threshold, sort by score.

    With ``max_workers > 1`` candidates are scored in a thread pool; the
    result is identical to the sequential run.
    """
    if max_workers > 1 and len(candidates) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(
                lambda pair: calculate_score(keyword, pair[1], config, index=pair[0]),
                enumerate(candidates),
            ))
    else:
        results = [
            calculate_score(keyword, product, config, index=i)
            for i, product in enumerate(candidates)
        ]

    kept = [r for r in results if meets_threshold(r.score, config)]
    # sorted() is stable: equal scores stay in input order
    kept = sorted(kept, key=lambda r: r.score, reverse=True)
    logger.debug(
        "Ranked %d candidates for %r: %d at or above threshold %d",
        len(results), keyword, len(kept), config.threshold,
    )
    return kept


def search(
    keyword: str,
    candidates: Sequence[ProductRecord],
    config: MatchConfig,
    limit: int = DEFAULT_SEARCH_LIMIT,
    max_workers: int = 1,
) -> list[MatchResult]:
    """Top ``limit`` ranked candidates; a blank keyword returns nothing."""
    keyword = keyword.strip()
    if not keyword or not candidates:
        return []
    return rank(keyword, candidates, config, max_workers=max_workers)[:limit]


def find_similar(
    title: str,
    candidates: Sequence[ProductRecord],
    config: MatchConfig,
    limit: int = SIMILAR_PRODUCTS_LIMIT,
    threshold: int = SIMILAR_PRODUCTS_THRESHOLD,
    max_workers: int = 1,
) -> list[MatchResult]:
    """Candidates resembling an external product, matched on its title.

    Uses a lower threshold than keyword search since titles are long.
    """
    if not title or not title.strip():
        return []
    return search(
        title, candidates, config.with_threshold(threshold),
        limit=limit, max_workers=max_workers,
    )


def matches_keyword(
    keyword: str, product: ProductRecord, config: MatchConfig,
) -> tuple[bool, float]:
    """(passes threshold, score) for a single product."""
    result = calculate_score(keyword, product, config)
    return meets_threshold(result.score, config), result.score
