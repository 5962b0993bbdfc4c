from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class Provenance(StrEnum):
    live = "live"
    stale_cache = "stale_cache"
    synthetic = "synthetic"


class Stock(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str
    price: float
    change: float
    change_percent: float
    volume: int
    market_cap: float | None = None
    pe: float | None = None
    week_52_high: float | None = None
    week_52_low: float | None = None


class MarketMovers(BaseModel):
    model_config = ConfigDict(frozen=True)

    gainers: tuple[Stock, ...] = ()
    losers: tuple[Stock, ...] = ()


class MarketSnapshot(MarketMovers):
    last_updated: str


class Quote(BaseModel):
    model_config = ConfigDict(frozen=True)

    # day_low <= price <= day_high is not guaranteed by upstream or mock data.
    symbol: str
    price: float
    change: float
    change_percent: float
    volume: int
    previous_close: float
    open: float
    day_high: float
    day_low: float

    def to_stock(self, name: str | None = None) -> Stock:
        return Stock(
            symbol=self.symbol,
            name=name or self.symbol,
            price=self.price,
            change=self.change,
            change_percent=self.change_percent,
            volume=self.volume,
        )


class TimeSeriesPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: str  # ISO calendar date, YYYY-MM-DD
    open: float
    high: float
    low: float
    close: float
    volume: int


class SearchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str
    type: str
    region: str


class CompanyFundamentals(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str | None = None
    description: str | None = None
    sector: str | None = None
    industry: str | None = None
    market_cap: float | None = None
    pe_ratio: float | None = None
    peg_ratio: float | None = None
    book_value: float | None = None
    dividend_yield: float | None = None
    eps: float | None = None
    beta: float | None = None
    week_52_high: float | None = None
    week_52_low: float | None = None
    moving_average_50: float | None = None
    moving_average_200: float | None = None
    shares_outstanding: float | None = None
    revenue: float | None = None
    gross_profit: float | None = None
    operating_income: float | None = None
    net_income: float | None = None
    total_debt: float | None = None
    total_cash: float | None = None


class FetchResult(BaseModel, Generic[T]):
    value: T
    provenance: Provenance
    error: str | None = None

    @property
    def is_live(self) -> bool:
        return self.provenance == Provenance.live
