from dataclasses import dataclass
from typing import Annotated

import structlog
from fastapi import Depends

from stockwatch.config import settings
from stockwatch.market.memory_cache import MemoryCache
from stockwatch.market.providers.alpha_vantage import AlphaVantageProvider
from stockwatch.market.providers.base import MarketDataProvider
from stockwatch.market.service import MarketDataService
from stockwatch.market.throttle import RequestThrottle, get_throttle
from stockwatch.state.store import AppStore
from stockwatch.state.watchlists import WatchlistService
from stockwatch.storage.backend import KeyValueBackend
from stockwatch.storage.service import PersistentCacheStore

logger = structlog.get_logger()


@dataclass
class Services:
    provider: MarketDataProvider
    throttle: RequestThrottle
    memory_cache: MemoryCache
    persistent_cache: PersistentCacheStore
    market: MarketDataService
    store: AppStore
    watchlists: WatchlistService


_services: Services | None = None


def build_services(
    backend: KeyValueBackend,
    provider: MarketDataProvider | None = None,
    throttle: RequestThrottle | None = None,
) -> Services:
    provider = provider or AlphaVantageProvider(
        api_key=settings.alpha_vantage_api_key,
        base_url=settings.alpha_vantage_base_url,
        timeout=settings.http_timeout,
    )
    throttle = throttle or get_throttle()
    memory_cache = MemoryCache(
        default_ttl=settings.memory_cache_ttl,
        max_entries=settings.memory_cache_max_entries,
    )
    persistent_cache = PersistentCacheStore(
        backend,
        market_snapshot_ttl=settings.market_snapshot_ttl,
        quote_ttl=settings.quote_ttl,
        fundamentals_ttl=settings.fundamentals_ttl,
    )
    market = MarketDataService(
        provider,
        throttle,
        memory_cache,
        persistent_cache,
        movers_limit=settings.movers_limit,
        search_limit=settings.search_limit,
        time_series_limit=settings.time_series_limit,
        fundamentals_ttl=settings.fundamentals_ttl,
    )
    store = AppStore(persistent_cache, default_watchlist_name=settings.default_watchlist_name)
    return Services(
        provider=provider,
        throttle=throttle,
        memory_cache=memory_cache,
        persistent_cache=persistent_cache,
        market=market,
        store=store,
        watchlists=WatchlistService(store),
    )


async def init_services(
    backend: KeyValueBackend,
    provider: MarketDataProvider | None = None,
    throttle: RequestThrottle | None = None,
) -> Services:
    global _services
    services = build_services(backend, provider=provider, throttle=throttle)
    await services.store.hydrate()
    _services = services
    logger.info("services_initialized")
    return services


async def close_services() -> None:
    global _services
    if _services is not None:
        await _services.provider.aclose()
        _services = None
        logger.info("services_closed")


def get_services() -> Services:
    if _services is None:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    return _services


def get_market_service() -> MarketDataService:
    return get_services().market


def get_store() -> AppStore:
    return get_services().store


def get_persistent_cache() -> PersistentCacheStore:
    return get_services().persistent_cache


def get_watchlist_service() -> WatchlistService:
    return get_services().watchlists


MarketServiceDep = Annotated[MarketDataService, Depends(get_market_service)]
StoreDep = Annotated[AppStore, Depends(get_store)]
PersistentCacheDep = Annotated[PersistentCacheStore, Depends(get_persistent_cache)]
WatchlistServiceDep = Annotated[WatchlistService, Depends(get_watchlist_service)]
