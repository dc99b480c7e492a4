from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Iterable, Mapping

from pydantic import field_validator
from pydantic_settings import BaseSettings

from .text import DEFAULT_STOPWORDS, normalize

logger = logging.getLogger(__name__)

FIELDS = ("title", "description", "category", "merchant", "keywords")

DEFAULT_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "title": 0.40,
    "description": 0.25,
    "category": 0.20,
    "merchant": 0.10,
    "keywords": 0.05,
})

DEFAULT_THRESHOLD = 30


class ConfigError(ValueError):
    """Raised when a MatchConfig cannot be built (unknown field, bad weight)."""


class Settings(BaseSettings):
    # Scoring
    fuzzy_threshold: int = DEFAULT_THRESHOLD   # 0-100
    fuzzy_weight_title: float = 0.40
    fuzzy_weight_description: float = 0.25
    fuzzy_weight_category: float = 0.20
    fuzzy_weight_merchant: float = 0.10
    fuzzy_weight_keywords: float = 0.05
    fuzzy_extra_stopwords: list[str] = []

    # Catalog search
    enable_fuzzy_search: bool = True
    fuzzy_search_limit: int = 10
    fuzzy_similar_threshold: int = 25          # lower bar for "similar products"
    fuzzy_similar_limit: int = 3
    fuzzy_max_workers: int = 1                 # >1 scores candidates in a thread pool

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator(
        "fuzzy_weight_title",
        "fuzzy_weight_description",
        "fuzzy_weight_category",
        "fuzzy_weight_merchant",
        "fuzzy_weight_keywords",
    )
    @classmethod
    def clamp_weight(cls, v: float) -> float:
        return max(0.0, min(1.0, v))

    @field_validator("fuzzy_threshold", "fuzzy_similar_threshold")
    @classmethod
    def clamp_threshold(cls, v: int) -> int:
        return max(0, min(100, v))

    @field_validator("fuzzy_search_limit", "fuzzy_similar_limit", "fuzzy_max_workers")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("limits and worker counts must be >= 1")
        return v

    @property
    def fuzzy_weights(self) -> dict[str, float]:
        return {name: getattr(self, f"fuzzy_weight_{name}") for name in FIELDS}


settings = Settings()


def _normalize_weights(overrides: Mapping[str, float] | None) -> dict[str, float]:
    weights = dict(DEFAULT_WEIGHTS)
    for name, value in (overrides or {}).items():
        if name not in DEFAULT_WEIGHTS:
            raise ConfigError(f"Unknown field {name!r}; expected one of {', '.join(FIELDS)}")
        value = float(value)
        if not math.isfinite(value) or value < 0:
            raise ConfigError(f"Weight for {name!r} must be a non-negative number, got {value}")
        weights[name] = value

    total = sum(weights.values())
    if total == 0:
        logger.warning("All field weights are zero; every candidate will score 0")
    elif not math.isclose(total, 1.0, rel_tol=1e-12):
        weights = {name: value / total for name, value in weights.items()}
    return weights


def _clamp_threshold(threshold: float) -> int:
    return int(max(0, min(100, round(threshold))))


@dataclass(frozen=True)
class MatchConfig:
    """Immutable scoring configuration shared by every scoring call.

    ``weights`` are merged over DEFAULT_WEIGHTS and rescaled to sum to 1.0
    (unless they sum to 0). ``threshold`` is clamped to 0-100.
    ``stopwords`` is the built-in German + English set plus any extras.
    """

    weights: Mapping[str, float] = field(default_factory=lambda: DEFAULT_WEIGHTS)
    threshold: int = DEFAULT_THRESHOLD
    stopwords: frozenset[str] = DEFAULT_STOPWORDS
    extra_stopwords: Iterable[str] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "weights", MappingProxyType(_normalize_weights(self.weights)))
        object.__setattr__(self, "threshold", _clamp_threshold(self.threshold))
        extra = frozenset(w for w in (normalize(s) for s in self.extra_stopwords) if w)
        object.__setattr__(self, "stopwords", frozenset(self.stopwords) | extra)
        object.__setattr__(self, "extra_stopwords", ())

    @classmethod
    def from_settings(cls, s: Settings | None = None) -> MatchConfig:
        s = s or settings
        return cls(
            weights=s.fuzzy_weights,
            threshold=s.fuzzy_threshold,
            extra_stopwords=s.fuzzy_extra_stopwords,
        )

    def with_threshold(self, threshold: float) -> MatchConfig:
        """Copy of this config with a different threshold."""
        return replace(self, threshold=threshold, stopwords=self.stopwords)

    def __hash__(self) -> int:
        return hash((tuple(self.weights.items()), self.threshold, self.stopwords))

    def weight(self, field_name: str) -> float:
        return self.weights[field_name]
