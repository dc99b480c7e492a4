"""Fuzzy search over a store's own product catalog.

The repository supplies candidates; this module only adapts records and
delegates scoring to the matcher. Repository errors propagate.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Protocol

from .config import MatchConfig, Settings, settings as default_settings
from .matcher import find_similar, matches_keyword, search
from .schemas import ProductRecord
from .scorer import MatchResult

logger = logging.getLogger(__name__)


class ProductRepository(Protocol):
    def get_all_products(self) -> list[ProductRecord]: ...

    def get_products_by_ids(self, ids: Iterable[str | int]) -> list[ProductRecord]: ...


def product_from_dict(raw: Mapping[str, Any]) -> ProductRecord:
    """Build a ProductRecord from a storefront product dict.

    Accepts ``merchant`` as ``{"name": ...}`` or a plain string, or a
    top-level ``merchant_name``. ``keywords`` may be a comma-separated string.
    """
    merchant = raw.get("merchant_name")
    if merchant is None:
        merchant = raw.get("merchant")
        if isinstance(merchant, Mapping):
            merchant = merchant.get("name")
    return ProductRecord(
        id=raw.get("id"),
        title=raw.get("title") or None,
        description=raw.get("description") or None,
        merchant_name=merchant or None,
        categories=raw.get("categories"),
        keywords=raw.get("keywords"),
    )


class CatalogSearch:
    """Keyword and similar-product search backed by a ProductRepository."""

    def __init__(
        self,
        repository: ProductRepository,
        config: MatchConfig | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._repository = repository
        self._settings = settings or default_settings
        self._config = config or MatchConfig.from_settings(self._settings)

    @property
    def config(self) -> MatchConfig:
        return self._config

    def search_products_fuzzy(
        self,
        keyword: str,
        limit: int | None = None,
        threshold: int | None = None,
    ) -> list[MatchResult]:
        """Catalog products matching ``keyword``, best first.

        ``threshold`` overrides the configured one for this call only.
        """
        if not self._settings.enable_fuzzy_search:
            logger.info("Fuzzy search disabled; skipping search for %r", keyword)
            return []
        keyword = keyword.strip()
        if not keyword:
            return []

        products = self._repository.get_all_products()
        if not products:
            return []

        config = self._config if threshold is None else self._config.with_threshold(threshold)
        results = search(
            keyword,
            products,
            config,
            limit=limit or self._settings.fuzzy_search_limit,
            max_workers=self._settings.fuzzy_max_workers,
        )
        logger.debug("Fuzzy search %r: %d of %d products", keyword, len(results), len(products))
        return results

    def find_similar_own_products(
        self,
        external_product: Mapping[str, Any],
        limit: int | None = None,
    ) -> list[MatchResult]:
        """Own products resembling an external (e.g. Amazon) product, by title."""
        if not self._settings.enable_fuzzy_search:
            logger.info(
                "Fuzzy search disabled; skipping similar products for %r",
                external_product.get("title"),
            )
            return []
        title = external_product.get("title") or ""
        if not title:
            return []
        products = self._repository.get_all_products()
        return find_similar(
            title,
            products,
            self._config,
            limit=limit or self._settings.fuzzy_similar_limit,
            threshold=self._settings.fuzzy_similar_threshold,
            max_workers=self._settings.fuzzy_max_workers,
        )

    def product_matches_keyword(self, product_id: str | int, keyword: str) -> tuple[bool, float]:
        products = self._repository.get_products_by_ids([product_id])
        if not products:
            return False, 0.0
        return matches_keyword(keyword, products[0], self._config)
