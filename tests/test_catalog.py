"""Tests for catalog search over a product repository."""

import logging

import pytest
from pydantic import ValidationError

import affimatch.catalog
from affimatch.catalog import CatalogSearch, product_from_dict
from affimatch.config import MatchConfig, Settings
from affimatch.schemas import ProductRecord, split_keywords


class FakeRepository:
    def __init__(self, products):
        self.products = list(products)
        self.calls = 0

    def get_all_products(self):
        self.calls += 1
        return list(self.products)

    def get_products_by_ids(self, ids):
        wanted = set(ids)
        return [p for p in self.products if p.id in wanted]


class BrokenRepository(FakeRepository):
    def get_all_products(self):
        raise RuntimeError("database unavailable")


@pytest.fixture()
def repo(catalog):
    return FakeRepository(catalog)


class TestSplitKeywords:
    def test_string(self):
        assert split_keywords("Kopfhörer, Headphones ,, Over-Ear ") == [
            "Kopfhörer", "Headphones", "Over-Ear",
        ]

    def test_list(self):
        assert split_keywords([" a ", "", "b"]) == ["a", "b"]

    def test_none(self):
        assert split_keywords(None) == []


class TestProductRecord:
    def test_keywords_string_split(self):
        product = ProductRecord(keywords="laptop, notebook")
        assert product.keywords == ["laptop", "notebook"]

    def test_categories_string_split(self):
        assert ProductRecord(categories="Audio, Zubehör").categories == ["Audio", "Zubehör"]

    def test_all_optional(self):
        product = ProductRecord()
        assert product.title is None
        assert product.keywords is None

    def test_non_string_keyword_rejected(self):
        with pytest.raises(ValidationError):
            ProductRecord(keywords=["laptop", 5])

    def test_scalar_categories_rejected(self):
        with pytest.raises(ValidationError):
            ProductRecord(categories=42)

    def test_bad_keywords_from_dict(self):
        with pytest.raises(ValidationError):
            product_from_dict({"title": "Laptop", "keywords": 42})


class TestProductFromDict:
    def test_storefront_shape(self):
        raw = {
            "id": "custom_12",
            "title": "Bluetooth Lautsprecher",
            "description": "",
            "merchant": {"name": "Audio Welt"},
            "categories": ["Audio"],
            "keywords": "speaker, lautsprecher",
            "price": {"amount": "29.99", "currency": "EUR"},
        }
        product = product_from_dict(raw)
        assert product.id == "custom_12"
        assert product.merchant_name == "Audio Welt"
        assert product.description is None
        assert product.keywords == ["speaker", "lautsprecher"]

    def test_flat_merchant(self):
        assert product_from_dict({"merchant_name": "Shop"}).merchant_name == "Shop"
        assert product_from_dict({"merchant": "Shop"}).merchant_name == "Shop"

    def test_missing_everything(self):
        assert product_from_dict({}) == ProductRecord()


class TestSearchProductsFuzzy:
    def test_finds_best(self, repo):
        results = CatalogSearch(repo).search_products_fuzzy("laptop")
        assert results[0].product.id == 1

    def test_limit(self, repo):
        config = MatchConfig(threshold=0)
        results = CatalogSearch(repo, config=config).search_products_fuzzy("laptop", limit=2)
        assert len(results) == 2

    def test_threshold_override(self, repo):
        search = CatalogSearch(repo)
        assert search.search_products_fuzzy("laptop", threshold=100) == []
        assert search.config.threshold == 30

    def test_blank_keyword(self, repo):
        assert CatalogSearch(repo).search_products_fuzzy("  ") == []
        assert repo.calls == 0

    def test_empty_catalog(self):
        assert CatalogSearch(FakeRepository([])).search_products_fuzzy("laptop") == []

    def test_disabled(self, repo):
        search = CatalogSearch(repo, settings=Settings(enable_fuzzy_search=False))
        assert search.search_products_fuzzy("laptop") == []
        assert repo.calls == 0

    def test_parallel_setting(self, repo):
        sequential = CatalogSearch(repo).search_products_fuzzy("laptop")
        parallel = CatalogSearch(repo, settings=Settings(fuzzy_max_workers=3)).search_products_fuzzy("laptop")
        assert [r.index for r in parallel] == [r.index for r in sequential]

    def test_config_from_settings(self, repo):
        search = CatalogSearch(repo, settings=Settings(fuzzy_threshold=70))
        assert search.config.threshold == 70

    def test_repository_errors_propagate(self, catalog):
        with pytest.raises(RuntimeError, match="database unavailable"):
            CatalogSearch(BrokenRepository(catalog)).search_products_fuzzy("laptop")


class TestFindSimilarOwnProducts:
    def test_by_external_title(self, repo):
        external = {"title": "Gartenschlauch 20m", "source": "amazon"}
        results = CatalogSearch(repo).find_similar_own_products(external)
        assert results[0].product.id == 3

    def test_missing_title(self, repo):
        assert CatalogSearch(repo).find_similar_own_products({"title": ""}) == []
        assert CatalogSearch(repo).find_similar_own_products({}) == []

    def test_uses_configured_workers(self, repo, monkeypatch):
        seen = {}
        real_find_similar = affimatch.catalog.find_similar

        def spy(*args, **kwargs):
            seen.update(kwargs)
            return real_find_similar(*args, **kwargs)

        monkeypatch.setattr(affimatch.catalog, "find_similar", spy)
        search = CatalogSearch(repo, settings=Settings(fuzzy_max_workers=3))
        results = search.find_similar_own_products({"title": "Gartenschlauch 20m"})
        assert seen["max_workers"] == 3
        assert results[0].product.id == 3

    def test_parallel_matches_sequential(self, repo):
        external = {"title": "Laptop ist super"}
        sequential = CatalogSearch(repo).find_similar_own_products(external)
        parallel = CatalogSearch(
            repo, settings=Settings(fuzzy_max_workers=4)
        ).find_similar_own_products(external)
        assert [(r.product.id, r.score) for r in parallel] == [
            (r.product.id, r.score) for r in sequential
        ]

    def test_disabled(self, repo, caplog):
        search = CatalogSearch(repo, settings=Settings(enable_fuzzy_search=False))
        with caplog.at_level(logging.INFO, logger="affimatch.catalog"):
            assert search.find_similar_own_products({"title": "Gartenschlauch 20m"}) == []
        assert "Fuzzy search disabled" in caplog.text
        assert repo.calls == 0


class TestProductMatchesKeyword:
    def test_match(self, repo):
        matched, score = CatalogSearch(repo).product_matches_keyword(1, "laptop")
        assert matched is True
        assert score >= 30

    def test_unknown_product(self, repo):
        assert CatalogSearch(repo).product_matches_keyword(99, "laptop") == (False, 0.0)
