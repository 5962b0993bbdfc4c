"""View-triggered loads that feed fetched data into the store.

A ``ViewScope`` stands for a mounted view. Results that arrive after the
scope was closed are dropped instead of being applied to the store.
"""

import asyncio
from dataclasses import dataclass

import structlog

from stockwatch.market.schemas import (
    CompanyFundamentals,
    FetchResult,
    MarketMovers,
    Provenance,
    Quote,
    Stock,
    TimeSeriesPoint,
)
from stockwatch.market.service import MarketDataService
from stockwatch.state import actions
from stockwatch.state.models import MoverSide, ResourceSlice, Watchlist
from stockwatch.state.store import AppStore
from stockwatch.storage.service import PersistentCacheStore

logger = structlog.get_logger()


class ViewScope:
    def __init__(self, name: str = "view") -> None:
        self.name = name
        self._alive = True

    @property
    def alive(self) -> bool:
        return self._alive

    def close(self) -> None:
        self._alive = False

    async def __aenter__(self) -> "ViewScope":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()


@dataclass(frozen=True)
class StockDetails:
    symbol: str
    quote: FetchResult[Quote] | None
    time_series: FetchResult[tuple[TimeSeriesPoint, ...]] | None
    fundamentals: FetchResult[CompanyFundamentals] | None

    @property
    def failed(self) -> bool:
        return self.quote is None and self.time_series is None and self.fundamentals is None


def _discarded(scope: ViewScope, what: str) -> bool:
    if scope.alive:
        return False
    logger.debug("result_discarded", scope=scope.name, resource=what)
    return True


async def load_market_movers(
    store: AppStore, market: MarketDataService, scope: ViewScope
) -> FetchResult[MarketMovers] | None:
    if not scope.alive:
        return None

    for side in MoverSide:
        current = store.state.slice_for(side)
        await store.dispatch(
            actions.set_movers(side, ResourceSlice(data=current.data, loading=True))
        )

    result = await market.get_market_movers()
    if _discarded(scope, "market_movers"):
        return None

    # Only the synthetic tier means nothing cached existed; surface it.
    error = result.error if result.provenance == Provenance.synthetic else None
    fetched = {MoverSide.gainers: result.value.gainers, MoverSide.losers: result.value.losers}
    for side, stocks in fetched.items():
        await store.dispatch(actions.set_movers(side, ResourceSlice(data=stocks, error=error)))
    logger.debug("market_movers_applied", provenance=result.provenance, live=result.is_live)
    return result


async def refresh_market_movers(
    store: AppStore, market: MarketDataService, scope: ViewScope
) -> FetchResult[MarketMovers] | None:
    market.clear_cache()
    return await load_market_movers(store, market, scope)


async def load_watchlist_quotes(
    market: MarketDataService, watchlist: Watchlist, scope: ViewScope
) -> list[Stock] | None:
    if not watchlist.symbols:
        return []
    results = await asyncio.gather(*(market.get_quote(symbol) for symbol in watchlist.symbols))
    if _discarded(scope, "watchlist_quotes"):
        return None
    return [result.value.to_stock() for result in results]


async def load_stock_details(
    market: MarketDataService, symbol: str, scope: ViewScope
) -> StockDetails | None:
    quote, series, fundamentals = await asyncio.gather(
        market.get_quote(symbol),
        market.get_time_series(symbol),
        market.get_company_overview(symbol),
        return_exceptions=True,
    )
    if _discarded(scope, "stock_details"):
        return None

    def settled(outcome: object, resource: str) -> FetchResult | None:
        if isinstance(outcome, BaseException):
            logger.error("stock_details_failed", symbol=symbol, resource=resource, error=str(outcome))
            return None
        return outcome

    return StockDetails(
        symbol=symbol.upper(),
        quote=settled(quote, "quote"),
        time_series=settled(series, "time_series"),
        fundamentals=settled(fundamentals, "fundamentals"),
    )


async def select_stock(store: AppStore, stock: Stock | None) -> None:
    await store.dispatch(actions.set_selected_stock(stock))


async def select_symbol(
    store: AppStore, market: MarketDataService, symbol: str, scope: ViewScope
) -> Stock | None:
    result = await market.get_quote(symbol)
    if _discarded(scope, "select_symbol"):
        return None
    stock = result.value.to_stock()
    await store.dispatch(actions.set_selected_stock(stock))
    return stock


async def set_connectivity(
    store: AppStore, persistent_cache: PersistentCacheStore, is_online: bool
) -> None:
    await store.dispatch(actions.set_offline_status(not is_online))
    if is_online:
        return

    watchlists = await persistent_cache.get_watchlists()
    if watchlists:
        await store.dispatch(actions.set_watchlists(watchlists))

    snapshot = await persistent_cache.get_market_snapshot()
    if snapshot is None:
        logger.info("offline_without_snapshot")
        return
    await store.dispatch(
        actions.set_movers(MoverSide.gainers, ResourceSlice(data=snapshot.gainers))
    )
    await store.dispatch(actions.set_movers(MoverSide.losers, ResourceSlice(data=snapshot.losers)))
