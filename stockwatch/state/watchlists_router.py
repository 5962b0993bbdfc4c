from fastapi import APIRouter

from stockwatch.dependencies import WatchlistServiceDep
from stockwatch.state.models import Watchlist
from stockwatch.state.schemas import (
    SymbolRemoval,
    WatchlistCreate,
    WatchlistSymbolAdd,
    WatchlistUpdate,
)

router = APIRouter()


@router.get("/", response_model=list[Watchlist])
async def list_watchlists(service: WatchlistServiceDep) -> list[Watchlist]:
    return service.list_all()


@router.post("/", status_code=201, response_model=Watchlist)
async def create_watchlist(data: WatchlistCreate, service: WatchlistServiceDep) -> Watchlist:
    return await service.create(data.name, symbol=data.symbol)


@router.put("/{watchlist_id}", response_model=Watchlist)
async def rename_watchlist(
    watchlist_id: str,
    data: WatchlistUpdate,
    service: WatchlistServiceDep,
) -> Watchlist:
    return await service.rename(watchlist_id, data.name)


@router.delete("/{watchlist_id}", status_code=204)
async def delete_watchlist(watchlist_id: str, service: WatchlistServiceDep) -> None:
    await service.delete(watchlist_id)


@router.post("/{watchlist_id}/symbols", status_code=201, response_model=Watchlist)
async def add_symbol(
    watchlist_id: str,
    data: WatchlistSymbolAdd,
    service: WatchlistServiceDep,
) -> Watchlist:
    return await service.add_symbol(watchlist_id, data.symbol)


@router.delete("/{watchlist_id}/symbols/{symbol}", response_model=Watchlist)
async def remove_symbol(watchlist_id: str, symbol: str, service: WatchlistServiceDep) -> Watchlist:
    return await service.remove_symbol(watchlist_id, symbol)


@router.delete("/symbols/{symbol}", response_model=SymbolRemoval)
async def remove_symbol_everywhere(symbol: str, service: WatchlistServiceDep) -> SymbolRemoval:
    removed = await service.remove_symbol_everywhere(symbol)
    return SymbolRemoval(symbol=symbol.strip().upper(), removed_from=removed)
