from fastapi import APIRouter, Query

from stockwatch.dependencies import MarketServiceDep, StoreDep
from stockwatch.market.schemas import (
    CompanyFundamentals,
    FetchResult,
    MarketMovers,
    Quote,
    SearchResult,
    TimeSeriesPoint,
)
from stockwatch.state.loaders import ViewScope, load_market_movers, refresh_market_movers

router = APIRouter()


@router.get("/movers", response_model=FetchResult[MarketMovers])
async def get_movers(service: MarketServiceDep, store: StoreDep) -> FetchResult[MarketMovers]:
    async with ViewScope("movers") as scope:
        return await load_market_movers(store, service, scope)


@router.post("/movers/refresh", response_model=FetchResult[MarketMovers])
async def refresh_movers(service: MarketServiceDep, store: StoreDep) -> FetchResult[MarketMovers]:
    async with ViewScope("movers_refresh") as scope:
        return await refresh_market_movers(store, service, scope)


@router.get("/quote/{symbol}", response_model=FetchResult[Quote])
async def get_quote(symbol: str, service: MarketServiceDep) -> FetchResult[Quote]:
    return await service.get_quote(symbol)


@router.get("/time-series/{symbol}", response_model=FetchResult[tuple[TimeSeriesPoint, ...]])
async def get_time_series(
    symbol: str, service: MarketServiceDep
) -> FetchResult[tuple[TimeSeriesPoint, ...]]:
    return await service.get_time_series(symbol)


@router.get("/search", response_model=FetchResult[tuple[SearchResult, ...]])
async def search(
    service: MarketServiceDep,
    q: str = Query(default="", max_length=64),
) -> FetchResult[tuple[SearchResult, ...]]:
    return await service.search(q)


@router.get("/overview/{symbol}", response_model=FetchResult[CompanyFundamentals])
async def get_overview(symbol: str, service: MarketServiceDep) -> FetchResult[CompanyFundamentals]:
    return await service.get_company_overview(symbol)
