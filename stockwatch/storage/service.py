import time
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, TypeAdapter

from stockwatch.exceptions import StorageError
from stockwatch.market.schemas import CompanyFundamentals, MarketMovers, MarketSnapshot, Quote
from stockwatch.state.models import Theme, Watchlist
from stockwatch.storage.backend import KeyValueBackend
from stockwatch.storage.models import CacheEntry, CacheNamespace, cache_key

logger = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)
_WATCHLISTS = TypeAdapter(list[Watchlist])


class PersistentCacheStore:
    """Best-effort durable cache over a key/value backend.

    Every operation is total: backend or serialization failures are logged and
    surface as "no cached value" on read or a dropped write. Expired entries are
    removed lazily when read.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        market_snapshot_ttl: float = 300.0,
        quote_ttl: float = 1800.0,
        fundamentals_ttl: float = 3600.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._backend = backend
        self._market_snapshot_ttl = market_snapshot_ttl
        self._quote_ttl = quote_ttl
        self._fundamentals_ttl = fundamentals_ttl
        self._clock = clock

    async def save_market_snapshot(self, movers: MarketMovers) -> None:
        snapshot = MarketSnapshot(
            gainers=movers.gainers,
            losers=movers.losers,
            last_updated=datetime.now(UTC).isoformat(),
        )
        await self._write(
            cache_key(CacheNamespace.market_snapshot),
            snapshot.model_dump(mode="json"),
            ttl=self._market_snapshot_ttl,
        )

    async def get_market_snapshot(self) -> MarketSnapshot | None:
        return await self._read_as(cache_key(CacheNamespace.market_snapshot), MarketSnapshot)

    async def clear_market_snapshot(self) -> None:
        await self._remove(cache_key(CacheNamespace.market_snapshot))

    async def save_quote(self, quote: Quote) -> None:
        await self._write(
            cache_key(CacheNamespace.stock_quote, quote.symbol),
            quote.model_dump(mode="json"),
            ttl=self._quote_ttl,
        )

    async def get_quote(self, symbol: str) -> Quote | None:
        return await self._read_as(cache_key(CacheNamespace.stock_quote, symbol), Quote)

    async def save_fundamentals(self, fundamentals: CompanyFundamentals) -> None:
        await self._write(
            cache_key(CacheNamespace.fundamentals, fundamentals.symbol),
            fundamentals.model_dump(mode="json"),
            ttl=self._fundamentals_ttl,
        )

    async def get_fundamentals(self, symbol: str) -> CompanyFundamentals | None:
        return await self._read_as(
            cache_key(CacheNamespace.fundamentals, symbol), CompanyFundamentals
        )

    async def save_watchlists(self, watchlists: Sequence[Watchlist]) -> None:
        await self._write(
            cache_key(CacheNamespace.watchlists),
            _WATCHLISTS.dump_python(list(watchlists), mode="json"),
            ttl=None,
        )

    async def get_watchlists(self) -> list[Watchlist] | None:
        entry = await self._read(cache_key(CacheNamespace.watchlists))
        if entry is None:
            return None
        try:
            return _WATCHLISTS.validate_python(entry.value)
        except ValueError as exc:
            logger.warning("persistent_cache_corrupt", key="watchlists", error=str(exc))
            return None

    async def save_theme(self, theme: Theme) -> None:
        await self._write(cache_key(CacheNamespace.theme), theme.value, ttl=None)

    async def get_theme(self) -> Theme | None:
        entry = await self._read(cache_key(CacheNamespace.theme))
        if entry is None:
            return None
        try:
            return Theme(entry.value)
        except ValueError:
            logger.warning("persistent_cache_corrupt", key="theme", value=entry.value)
            return None

    async def _write(self, key: str, value: Any, ttl: float | None) -> None:
        now = self._clock()
        entry = CacheEntry[Any](
            value=value,
            timestamp=now,
            expires_at=now + ttl if ttl is not None else None,
        )
        try:
            await self._backend.set_item(key, entry.model_dump_json())
        except (StorageError, TypeError, ValueError) as exc:
            logger.warning("persistent_cache_write_dropped", key=key, error=str(exc))

    async def _read(self, key: str) -> CacheEntry[Any] | None:
        try:
            raw = await self._backend.get_item(key)
        except StorageError as exc:
            logger.warning("persistent_cache_read_failed", key=key, error=str(exc))
            return None
        if raw is None:
            return None

        try:
            entry = CacheEntry[Any].model_validate_json(raw)
        except ValueError as exc:
            logger.warning("persistent_cache_corrupt", key=key, error=str(exc))
            return None

        if not entry.is_valid(self._clock()):
            logger.debug("persistent_cache_expired", key=key)
            await self._remove(key)
            return None
        return entry

    async def _read_as(self, key: str, model: type[M]) -> M | None:
        entry = await self._read(key)
        if entry is None:
            return None
        try:
            return model.model_validate(entry.value)
        except ValueError as exc:
            logger.warning("persistent_cache_corrupt", key=key, error=str(exc))
            return None

    async def _remove(self, key: str) -> None:
        try:
            await self._backend.remove_item(key)
        except StorageError as exc:
            logger.warning("persistent_cache_remove_failed", key=key, error=str(exc))
