from fastapi import APIRouter

from stockwatch.dependencies import MarketServiceDep, PersistentCacheDep, StoreDep
from stockwatch.state import actions
from stockwatch.state.actions import Action
from stockwatch.state.loaders import ViewScope, select_stock, select_symbol, set_connectivity
from stockwatch.state.models import AppState
from stockwatch.state.schemas import ActionRequest, OfflineRequest, SelectedStockRequest

router = APIRouter()


@router.get("/", response_model=AppState)
async def get_state(store: StoreDep) -> AppState:
    return store.state


@router.post("/actions", response_model=AppState)
async def dispatch_action(data: ActionRequest, store: StoreDep) -> AppState:
    return await store.dispatch(Action.from_wire(data.type, data.payload))


@router.post("/theme/toggle", response_model=AppState)
async def toggle_theme(store: StoreDep) -> AppState:
    return await store.dispatch(actions.toggle_theme())


@router.put("/selected", response_model=AppState)
async def set_selected(
    data: SelectedStockRequest,
    store: StoreDep,
    service: MarketServiceDep,
) -> AppState:
    if data.symbol and data.symbol.strip():
        async with ViewScope("selected") as scope:
            await select_symbol(store, service, data.symbol, scope)
    else:
        await select_stock(store, None)
    return store.state


@router.put("/offline", response_model=AppState)
async def set_offline(
    data: OfflineRequest,
    store: StoreDep,
    persistent_cache: PersistentCacheDep,
) -> AppState:
    await set_connectivity(store, persistent_cache, is_online=not data.is_offline)
    return store.state
