from datetime import UTC, datetime
from enum import StrEnum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockwatch.market.schemas import Stock

DEFAULT_WATCHLIST_ID = "default"


class Theme(StrEnum):
    light = "light"
    dark = "dark"

    def toggled(self) -> "Theme":
        return Theme.dark if self == Theme.light else Theme.light


class MoverSide(StrEnum):
    gainers = "gainers"
    losers = "losers"


def normalize_symbol(symbol: str) -> str:
    return symbol.strip().upper()


class Watchlist(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    symbols: tuple[str, ...] = ()
    created_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())

    @field_validator("name")
    @classmethod
    def _clean_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Watchlist name must not be blank")
        return value

    @field_validator("symbols")
    @classmethod
    def _clean_symbols(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        # Order of first appearance wins.
        return tuple(dict.fromkeys(s for s in map(normalize_symbol, value) if s))


class ResourceSlice(BaseModel):
    model_config = ConfigDict(frozen=True)

    data: tuple[Stock, ...] = ()
    loading: bool = False
    error: str | None = None


class AppState(BaseModel):
    model_config = ConfigDict(frozen=True)

    gainers: ResourceSlice = ResourceSlice()
    losers: ResourceSlice = ResourceSlice()
    watchlists: tuple[Watchlist, ...] = ()
    selected_stock: Stock | None = None
    theme: Theme = Theme.light
    is_offline: bool = False

    def slice_for(self, side: MoverSide) -> ResourceSlice:
        return self.gainers if side == MoverSide.gainers else self.losers

    def get_watchlist(self, watchlist_id: str) -> Watchlist | None:
        return next((w for w in self.watchlists if w.id == watchlist_id), None)


def initial_state(default_watchlist_name: str) -> AppState:
    return AppState(
        watchlists=(Watchlist(id=DEFAULT_WATCHLIST_ID, name=default_watchlist_name),),
    )
