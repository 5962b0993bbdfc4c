from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from stockwatch.exceptions import ValidationError
from stockwatch.market.schemas import Stock
from stockwatch.state.models import (
    MoverSide,
    ResourceSlice,
    Theme,
    Watchlist,
    normalize_symbol,
)


class ActionType(StrEnum):
    set_top_gainers = "set_top_gainers"
    set_top_losers = "set_top_losers"
    set_watchlists = "set_watchlists"
    add_watchlist = "add_watchlist"
    update_watchlist = "update_watchlist"
    delete_watchlist = "delete_watchlist"
    add_to_watchlist = "add_to_watchlist"
    remove_from_watchlist = "remove_from_watchlist"
    set_selected_stock = "set_selected_stock"
    toggle_theme = "toggle_theme"
    set_theme = "set_theme"
    set_offline_status = "set_offline_status"


class WatchlistsPayload(BaseModel):
    watchlists: tuple[Watchlist, ...] = Field(min_length=1)


class WatchlistIdPayload(BaseModel):
    watchlist_id: str


class WatchlistSymbolPayload(BaseModel):
    watchlist_id: str
    symbol: str

    @field_validator("symbol")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_symbol(value)


class SelectedStockPayload(BaseModel):
    stock: Stock | None = None


class ThemePayload(BaseModel):
    theme: Theme


class OfflinePayload(BaseModel):
    is_offline: bool


PAYLOAD_MODELS: dict[ActionType, type[BaseModel] | None] = {
    ActionType.set_top_gainers: ResourceSlice,
    ActionType.set_top_losers: ResourceSlice,
    ActionType.set_watchlists: WatchlistsPayload,
    ActionType.add_watchlist: Watchlist,
    ActionType.update_watchlist: Watchlist,
    ActionType.delete_watchlist: WatchlistIdPayload,
    ActionType.add_to_watchlist: WatchlistSymbolPayload,
    ActionType.remove_from_watchlist: WatchlistSymbolPayload,
    ActionType.set_selected_stock: SelectedStockPayload,
    ActionType.toggle_theme: None,
    ActionType.set_theme: ThemePayload,
    ActionType.set_offline_status: OfflinePayload,
}


@dataclass(frozen=True)
class Action:
    type: ActionType
    payload: BaseModel | None = None

    @classmethod
    def from_wire(cls, name: str, payload: dict[str, Any] | None = None) -> "Action":
        """Build an action from its name and a JSON payload."""
        try:
            action_type = ActionType(name)
        except ValueError as exc:
            raise ValidationError(f"Unknown action '{name}'") from exc

        model = PAYLOAD_MODELS[action_type]
        if model is None:
            return cls(type=action_type)
        try:
            return cls(type=action_type, payload=model.model_validate(payload or {}))
        except ValueError as exc:
            raise ValidationError(f"Invalid payload for '{name}': {exc}") from exc


def set_movers(side: MoverSide, slice_: ResourceSlice) -> Action:
    action_type = ActionType.set_top_gainers if side == MoverSide.gainers else ActionType.set_top_losers
    return Action(action_type, slice_)


def set_watchlists(watchlists: tuple[Watchlist, ...] | list[Watchlist]) -> Action:
    return Action(ActionType.set_watchlists, WatchlistsPayload(watchlists=tuple(watchlists)))


def add_watchlist(watchlist: Watchlist) -> Action:
    return Action(ActionType.add_watchlist, watchlist)


def update_watchlist(watchlist: Watchlist) -> Action:
    return Action(ActionType.update_watchlist, watchlist)


def delete_watchlist(watchlist_id: str) -> Action:
    return Action(ActionType.delete_watchlist, WatchlistIdPayload(watchlist_id=watchlist_id))


def add_to_watchlist(watchlist_id: str, symbol: str) -> Action:
    return Action(
        ActionType.add_to_watchlist,
        WatchlistSymbolPayload(watchlist_id=watchlist_id, symbol=symbol),
    )


def remove_from_watchlist(watchlist_id: str, symbol: str) -> Action:
    return Action(
        ActionType.remove_from_watchlist,
        WatchlistSymbolPayload(watchlist_id=watchlist_id, symbol=symbol),
    )


def set_selected_stock(stock: Stock | None) -> Action:
    return Action(ActionType.set_selected_stock, SelectedStockPayload(stock=stock))


def toggle_theme() -> Action:
    return Action(ActionType.toggle_theme)


def set_theme(theme: Theme) -> Action:
    return Action(ActionType.set_theme, ThemePayload(theme=theme))


def set_offline_status(is_offline: bool) -> Action:
    return Action(ActionType.set_offline_status, OfflinePayload(is_offline=is_offline))
