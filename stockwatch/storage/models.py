from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class CacheNamespace(StrEnum):
    market_snapshot = "market_snapshot"
    stock_quote = "stock_quote"
    fundamentals = "fundamentals"
    watchlists = "watchlists_data"
    theme = "theme_preference"


class CacheEntry(BaseModel, Generic[T]):
    value: T
    timestamp: float
    expires_at: float | None = None  # None never expires

    def is_valid(self, now: float) -> bool:
        return self.expires_at is None or now < self.expires_at


def cache_key(namespace: CacheNamespace, suffix: str | None = None) -> str:
    if suffix is None:
        return namespace.value
    return f"{namespace.value}_{suffix.upper()}"
