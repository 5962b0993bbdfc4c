from collections.abc import Callable, Mapping
from typing import Any, TypeVar

import structlog

from stockwatch.exceptions import UpstreamError
from stockwatch.market import parsers
from stockwatch.market.memory_cache import MemoryCache, request_key
from stockwatch.market.mock import MockDataSynthesizer
from stockwatch.market.providers.base import MarketDataProvider
from stockwatch.market.schemas import (
    CompanyFundamentals,
    FetchResult,
    MarketMovers,
    Provenance,
    Quote,
    SearchResult,
    TimeSeriesPoint,
)
from stockwatch.market.throttle import RequestThrottle
from stockwatch.storage.service import PersistentCacheStore

logger = structlog.get_logger()

T = TypeVar("T")

TOP_GAINERS_LOSERS = "TOP_GAINERS_LOSERS"
GLOBAL_QUOTE = "GLOBAL_QUOTE"
TIME_SERIES_DAILY = "TIME_SERIES_DAILY"
SYMBOL_SEARCH = "SYMBOL_SEARCH"
OVERVIEW = "OVERVIEW"


class MarketDataService:
    """Resolves market resources through cache, throttle, upstream and fallback.

    Order per resource: valid cache hit, then a throttled upstream call whose
    parsed result is written through to the caches. Any upstream, transport or
    payload failure degrades to the last cached value for the same request
    (even if expired) and finally to synthetic data, so callers always receive
    a renderable value tagged with its provenance.
    """

    def __init__(
        self,
        provider: MarketDataProvider,
        throttle: RequestThrottle,
        memory_cache: MemoryCache,
        persistent_cache: PersistentCacheStore,
        mock: MockDataSynthesizer | None = None,
        movers_limit: int = 20,
        search_limit: int = 10,
        time_series_limit: int = 30,
        fundamentals_ttl: float = 3600.0,
    ) -> None:
        self._provider = provider
        self._throttle = throttle
        self._memory = memory_cache
        self._persistent = persistent_cache
        self._mock = mock or MockDataSynthesizer()
        self._movers_limit = movers_limit
        self._search_limit = search_limit
        self._time_series_limit = time_series_limit
        self._fundamentals_ttl = fundamentals_ttl

    async def get_market_movers(self) -> FetchResult[MarketMovers]:
        key = request_key(TOP_GAINERS_LOSERS)
        cached = self._memory.get(key)
        if cached is not None:
            logger.debug("market_movers_cache_hit")
            return FetchResult[MarketMovers](value=cached, provenance=Provenance.live)

        try:
            movers = await self._fetch_live(
                TOP_GAINERS_LOSERS,
                {},
                lambda data: parsers.parse_market_movers(data, self._movers_limit),
            )
        except UpstreamError as exc:
            return await self._market_movers_fallback(key, exc)

        self._memory.put(key, movers)
        await self._persistent.save_market_snapshot(movers)
        logger.info(
            "market_movers_loaded",
            gainers=len(movers.gainers),
            losers=len(movers.losers),
        )
        return FetchResult[MarketMovers](value=movers, provenance=Provenance.live)

    async def get_quote(self, symbol: str) -> FetchResult[Quote]:
        symbol = symbol.upper().strip()
        key = request_key(GLOBAL_QUOTE, {"symbol": symbol})

        persisted = await self._persistent.get_quote(symbol)
        if persisted is not None:
            logger.debug("quote_persistent_hit", symbol=symbol)
            return FetchResult[Quote](value=persisted, provenance=Provenance.live)

        cached = self._memory.get(key)
        if cached is not None:
            logger.debug("quote_memory_hit", symbol=symbol)
            return FetchResult[Quote](value=cached, provenance=Provenance.live)

        try:
            quote = await self._fetch_live(GLOBAL_QUOTE, {"symbol": symbol}, parsers.parse_quote)
        except UpstreamError as exc:
            return self._fallback(key, exc, lambda: self._mock.quote(symbol), symbol=symbol)

        self._memory.put(key, quote)
        await self._persistent.save_quote(quote)
        return FetchResult[Quote](value=quote, provenance=Provenance.live)

    async def get_time_series(self, symbol: str) -> FetchResult[tuple[TimeSeriesPoint, ...]]:
        symbol = symbol.upper().strip()
        key = request_key(TIME_SERIES_DAILY, {"symbol": symbol})

        cached = self._memory.get(key)
        if cached is not None:
            return FetchResult[tuple[TimeSeriesPoint, ...]](value=cached, provenance=Provenance.live)

        try:
            points = await self._fetch_live(
                TIME_SERIES_DAILY,
                {"symbol": symbol},
                lambda data: parsers.parse_time_series(data, self._time_series_limit),
            )
        except UpstreamError as exc:
            return self._fallback(
                key,
                exc,
                lambda: self._mock.time_series(self._time_series_limit),
                symbol=symbol,
            )

        self._memory.put(key, points)
        return FetchResult[tuple[TimeSeriesPoint, ...]](value=points, provenance=Provenance.live)

    async def search(self, query: str) -> FetchResult[tuple[SearchResult, ...]]:
        query = query.strip()
        if not query:
            return FetchResult[tuple[SearchResult, ...]](value=(), provenance=Provenance.live)

        key = request_key(SYMBOL_SEARCH, {"keywords": query})
        cached = self._memory.get(key)
        if cached is not None:
            return FetchResult[tuple[SearchResult, ...]](value=cached, provenance=Provenance.live)

        try:
            results = await self._fetch_live(
                SYMBOL_SEARCH,
                {"keywords": query},
                lambda data: parsers.parse_search(data, self._search_limit),
            )
        except UpstreamError as exc:
            return self._fallback(key, exc, lambda: self._mock.search(query), query=query)

        self._memory.put(key, results)
        return FetchResult[tuple[SearchResult, ...]](value=results, provenance=Provenance.live)

    async def get_company_overview(self, symbol: str) -> FetchResult[CompanyFundamentals]:
        symbol = symbol.upper().strip()
        key = request_key(OVERVIEW, {"symbol": symbol})

        cached = self._memory.get(key)
        if cached is not None:
            return FetchResult[CompanyFundamentals](value=cached, provenance=Provenance.live)

        persisted = await self._persistent.get_fundamentals(symbol)
        if persisted is not None:
            self._memory.put(key, persisted, ttl=self._fundamentals_ttl)
            return FetchResult[CompanyFundamentals](value=persisted, provenance=Provenance.live)

        try:
            fundamentals = await self._fetch_live(OVERVIEW, {"symbol": symbol}, parsers.parse_overview)
        except UpstreamError as exc:
            return self._fallback(key, exc, lambda: self._mock.fundamentals(symbol), symbol=symbol)

        self._memory.put(key, fundamentals, ttl=self._fundamentals_ttl)
        await self._persistent.save_fundamentals(fundamentals)
        return FetchResult[CompanyFundamentals](value=fundamentals, provenance=Provenance.live)

    def clear_cache(self) -> None:
        """Drop in-memory entries only; persisted data stays for other sessions."""
        self._memory.clear()

    async def _fetch_live(
        self,
        function: str,
        params: Mapping[str, str],
        parse: Callable[[dict[str, Any]], T],
    ) -> T:
        await self._throttle.acquire()
        data = await self._provider.query(function, params)
        return parse(data)

    def _fallback(
        self,
        key: str,
        exc: UpstreamError,
        synthesize: Callable[[], T],
        **context: str,
    ) -> FetchResult[T]:
        stale = self._memory.get_stale(key)
        if stale is not None:
            logger.warning("serving_stale_cache", key=key, error=exc.message, **context)
            return FetchResult(value=stale, provenance=Provenance.stale_cache, error=exc.message)

        logger.warning("serving_synthetic_data", key=key, error=exc.message, **context)
        return FetchResult(value=synthesize(), provenance=Provenance.synthetic, error=exc.message)

    async def _market_movers_fallback(
        self, key: str, exc: UpstreamError
    ) -> FetchResult[MarketMovers]:
        stale = self._memory.get_stale(key)
        if stale is not None:
            logger.warning("serving_stale_cache", key=key, error=exc.message)
            return FetchResult[MarketMovers](
                value=stale, provenance=Provenance.stale_cache, error=exc.message
            )

        snapshot = await self._persistent.get_market_snapshot()
        if snapshot is not None:
            logger.warning("serving_market_snapshot", last_updated=snapshot.last_updated)
            return FetchResult[MarketMovers](
                value=MarketMovers(gainers=snapshot.gainers, losers=snapshot.losers),
                provenance=Provenance.stale_cache,
                error=exc.message,
            )

        logger.warning("serving_synthetic_data", key=key, error=exc.message)
        return FetchResult[MarketMovers](
            value=self._mock.market_movers(),
            provenance=Provenance.synthetic,
            error=exc.message,
        )
