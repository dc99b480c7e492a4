"""Test fixtures: default config and a small sample catalog."""

import pytest

from affimatch.config import MatchConfig
from affimatch.schemas import ProductRecord


@pytest.fixture()
def config() -> MatchConfig:
    return MatchConfig()


@pytest.fixture()
def catalog() -> list[ProductRecord]:
    return [
        ProductRecord(
            id=1,
            title="Dieser Laptop ist super",
            description="Leichtes Notebook mit 16 GB RAM",
            merchant_name="Elektro Shop",
            categories=["Computer", "Notebooks"],
            keywords="laptop, notebook",
        ),
        ProductRecord(
            id=2,
            title="Bluetooth Kopfhörer Over-Ear",
            description="Kabellose Kopfhörer mit Noise Cancelling",
            merchant_name="Audio Welt",
            categories=["Audio"],
            keywords=["kopfhoerer", "headphones"],
        ),
        ProductRecord(
            id=3,
            title="Gartenschlauch 20m",
            description="Flexibler Schlauch für den Garten",
            categories=["Garten"],
        ),
    ]
