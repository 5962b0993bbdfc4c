"""Pure state transitions.

``reduce`` never performs I/O. Transitions that must be made durable return
the persistence work as effects, which the store runs in dispatch order.
No-op transitions return the original state object and no effects.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from stockwatch.state.actions import (
    Action,
    ActionType,
    OfflinePayload,
    SelectedStockPayload,
    ThemePayload,
    WatchlistIdPayload,
    WatchlistsPayload,
    WatchlistSymbolPayload,
)
from stockwatch.state.effects import Effect, PersistTheme, PersistWatchlists
from stockwatch.state.models import AppState, ResourceSlice, Watchlist


@dataclass(frozen=True)
class Transition:
    state: AppState
    effects: tuple[Effect, ...] = ()


def reduce(state: AppState, action: Action) -> Transition:
    handler = _HANDLERS.get(action.type)
    if handler is None:
        return Transition(state)
    return handler(state, action.payload)


def _with_watchlists(state: AppState, watchlists: tuple[Watchlist, ...]) -> Transition:
    return Transition(
        state.model_copy(update={"watchlists": watchlists}),
        (PersistWatchlists(watchlists),),
    )


def _replace_watchlist(
    state: AppState,
    watchlist_id: str,
    change: Callable[[Watchlist], Watchlist | None],
) -> Transition:
    target = state.get_watchlist(watchlist_id)
    if target is None:
        return Transition(state)
    updated = change(target)
    if updated is None or updated == target:
        return Transition(state)
    return _with_watchlists(
        state,
        tuple(updated if w.id == watchlist_id else w for w in state.watchlists),
    )


def _set_gainers(state: AppState, payload: ResourceSlice) -> Transition:
    return Transition(state.model_copy(update={"gainers": payload}))


def _set_losers(state: AppState, payload: ResourceSlice) -> Transition:
    return Transition(state.model_copy(update={"losers": payload}))


def _set_watchlists(state: AppState, payload: WatchlistsPayload) -> Transition:
    if not payload.watchlists:
        return Transition(state)
    return _with_watchlists(state, payload.watchlists)


def _add_watchlist(state: AppState, payload: Watchlist) -> Transition:
    if state.get_watchlist(payload.id) is not None:
        return Transition(state)
    return _with_watchlists(state, (*state.watchlists, payload))


def _update_watchlist(state: AppState, payload: Watchlist) -> Transition:
    return _replace_watchlist(state, payload.id, lambda _: payload)


def _delete_watchlist(state: AppState, payload: WatchlistIdPayload) -> Transition:
    remaining = tuple(w for w in state.watchlists if w.id != payload.watchlist_id)
    # The last watchlist is never removed, whatever reached the store.
    if len(remaining) == len(state.watchlists) or not remaining:
        return Transition(state)
    return _with_watchlists(state, remaining)


def _add_to_watchlist(state: AppState, payload: WatchlistSymbolPayload) -> Transition:
    def add(watchlist: Watchlist) -> Watchlist | None:
        if payload.symbol in watchlist.symbols:
            return None
        return watchlist.model_copy(update={"symbols": (*watchlist.symbols, payload.symbol)})

    return _replace_watchlist(state, payload.watchlist_id, add)


def _remove_from_watchlist(state: AppState, payload: WatchlistSymbolPayload) -> Transition:
    def remove(watchlist: Watchlist) -> Watchlist | None:
        if payload.symbol not in watchlist.symbols:
            return None
        return watchlist.model_copy(
            update={"symbols": tuple(s for s in watchlist.symbols if s != payload.symbol)}
        )

    return _replace_watchlist(state, payload.watchlist_id, remove)


def _set_selected_stock(state: AppState, payload: SelectedStockPayload) -> Transition:
    return Transition(state.model_copy(update={"selected_stock": payload.stock}))


def _toggle_theme(state: AppState, payload: Any) -> Transition:
    theme = state.theme.toggled()
    return Transition(state.model_copy(update={"theme": theme}), (PersistTheme(theme),))


def _set_theme(state: AppState, payload: ThemePayload) -> Transition:
    if payload.theme == state.theme:
        return Transition(state)
    return Transition(state.model_copy(update={"theme": payload.theme}))


def _set_offline_status(state: AppState, payload: OfflinePayload) -> Transition:
    if payload.is_offline == state.is_offline:
        return Transition(state)
    return Transition(state.model_copy(update={"is_offline": payload.is_offline}))


_HANDLERS: dict[ActionType, Callable[[AppState, Any], Transition]] = {
    ActionType.set_top_gainers: _set_gainers,
    ActionType.set_top_losers: _set_losers,
    ActionType.set_watchlists: _set_watchlists,
    ActionType.add_watchlist: _add_watchlist,
    ActionType.update_watchlist: _update_watchlist,
    ActionType.delete_watchlist: _delete_watchlist,
    ActionType.add_to_watchlist: _add_to_watchlist,
    ActionType.remove_from_watchlist: _remove_from_watchlist,
    ActionType.set_selected_stock: _set_selected_stock,
    ActionType.toggle_theme: _toggle_theme,
    ActionType.set_theme: _set_theme,
    ActionType.set_offline_status: _set_offline_status,
}
