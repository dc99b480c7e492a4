from __future__ import annotations

from pydantic import BaseModel, field_validator


def split_keywords(value: str | list[str] | tuple[str, ...] | None) -> list[str]:
    """Split a comma-separated keyword string into trimmed, non-empty items.

    Lists are trimmed item by item; None becomes an empty list.
    """
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else value
    return [item.strip() for item in items if item and item.strip()]


# --- ProductRecord ---

class ProductRecord(BaseModel):
    """A catalog product as seen by the scoring engine. Every field is optional."""

    id: str | int | None = None
    title: str | None = None
    description: str | None = None
    merchant_name: str | None = None
    categories: list[str] | None = None
    keywords: list[str] | None = None

    model_config = {"frozen": True}

    @field_validator("categories", "keywords", mode="before")
    @classmethod
    def split_delimited(cls, v):
        # Anything else is left for the list[str] check to reject
        if isinstance(v, str):
            return split_keywords(v)
        if isinstance(v, (list, tuple)) and all(isinstance(item, str) for item in v):
            return split_keywords(v)
        return v
