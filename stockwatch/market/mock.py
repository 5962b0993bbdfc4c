"""Synthetic market data served when neither upstream nor cache can answer.

Values are range-plausible, not real. Quotes keep ``change`` and
``change_percent`` on the same side of zero and prices positive.
"""

import random
from datetime import UTC, datetime, timedelta

from stockwatch.market.schemas import (
    CompanyFundamentals,
    MarketMovers,
    Quote,
    SearchResult,
    Stock,
    TimeSeriesPoint,
)

MOCK_GAINERS: tuple[Stock, ...] = (
    Stock(symbol="AAPL", name="Apple Inc.", price=150.25, change=5.75, change_percent=3.98, volume=45623000),
    Stock(symbol="GOOGL", name="Alphabet Inc.", price=2750.80, change=85.30, change_percent=3.20, volume=1234000),
    Stock(symbol="MSFT", name="Microsoft Corp.", price=305.15, change=8.90, change_percent=3.01, volume=23456000),
    Stock(symbol="TSLA", name="Tesla Inc.", price=850.45, change=22.10, change_percent=2.67, volume=18934000),
    Stock(symbol="AMZN", name="Amazon.com Inc.", price=3200.75, change=65.25, change_percent=2.08, volume=3456000),
    Stock(symbol="NFLX", name="Netflix Inc.", price=425.60, change=8.15, change_percent=1.95, volume=5678000),
    Stock(symbol="META", name="Meta Platforms", price=320.90, change=12.50, change_percent=4.06, volume=15678000),
    Stock(symbol="NVDA", name="NVIDIA Corp.", price=520.30, change=18.75, change_percent=3.74, volume=25789000),
    Stock(symbol="AMD", name="Advanced Micro Devices", price=105.45, change=3.80, change_percent=3.74, volume=45123000),
    Stock(symbol="CRM", name="Salesforce Inc.", price=195.75, change=6.25, change_percent=3.30, volume=8901000),
)

MOCK_LOSERS: tuple[Stock, ...] = (
    Stock(symbol="INTC", name="Intel Corp.", price=45.20, change=-1.65, change_percent=-3.52, volume=67890000),
    Stock(symbol="UBER", name="Uber Technologies", price=32.10, change=-1.05, change_percent=-3.17, volume=23456000),
    Stock(symbol="SNAP", name="Snap Inc.", price=12.45, change=-0.40, change_percent=-3.11, volume=89012000),
    Stock(symbol="PINS", name="Pinterest Inc.", price=38.90, change=-1.20, change_percent=-2.99, volume=34567000),
    Stock(symbol="ROKU", name="Roku Inc.", price=65.30, change=-1.85, change_percent=-2.75, volume=12345000),
    Stock(symbol="ZM", name="Zoom Video", price=78.20, change=-2.10, change_percent=-2.61, volume=56789000),
    Stock(symbol="SHOP", name="Shopify Inc.", price=45.80, change=-1.15, change_percent=-2.45, volume=78901000),
    Stock(symbol="SQ", name="Block Inc.", price=67.40, change=-1.60, change_percent=-2.32, volume=23456000),
    Stock(symbol="PYPL", name="PayPal Holdings", price=89.50, change=-2.00, change_percent=-2.19, volume=45678000),
    Stock(symbol="SPOT", name="Spotify Technology", price=123.70, change=-2.70, change_percent=-2.14, volume=34567000),
)

MOCK_CATALOG: tuple[SearchResult, ...] = (
    SearchResult(symbol="AAPL", name="Apple Inc.", type="Equity", region="United States"),
    SearchResult(symbol="GOOGL", name="Alphabet Inc.", type="Equity", region="United States"),
    SearchResult(symbol="MSFT", name="Microsoft Corporation", type="Equity", region="United States"),
    SearchResult(symbol="TSLA", name="Tesla Inc.", type="Equity", region="United States"),
    SearchResult(symbol="AMZN", name="Amazon.com Inc.", type="Equity", region="United States"),
    SearchResult(symbol="META", name="Meta Platforms Inc.", type="Equity", region="United States"),
    SearchResult(symbol="NVDA", name="NVIDIA Corporation", type="Equity", region="United States"),
    SearchResult(symbol="NFLX", name="Netflix Inc.", type="Equity", region="United States"),
)

_PROFILES: dict[str, dict[str, str]] = {
    "AAPL": {
        "name": "Apple Inc.",
        "sector": "Technology",
        "industry": "Consumer Electronics",
        "description": (
            "Apple Inc. designs, manufactures, and markets smartphones, personal computers, "
            "tablets, wearables, and accessories worldwide."
        ),
    },
    "GOOGL": {
        "name": "Alphabet Inc.",
        "sector": "Communication Services",
        "industry": "Internet Content & Information",
        "description": (
            "Alphabet Inc. provides online advertising services in the United States, Europe, "
            "the Middle East, Africa, the Asia-Pacific, Canada, and Latin America."
        ),
    },
    "MSFT": {
        "name": "Microsoft Corporation",
        "sector": "Technology",
        "industry": "Software - Infrastructure",
        "description": (
            "Microsoft Corporation develops, licenses, and supports software, services, "
            "devices, and solutions worldwide."
        ),
    },
}


class MockDataSynthesizer:
    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def market_movers(self) -> MarketMovers:
        return MarketMovers(gainers=MOCK_GAINERS, losers=MOCK_LOSERS)

    def quote(self, symbol: str) -> Quote:
        rng = self._rng
        price = round(100 + rng.random() * 400, 2)
        change = round((rng.random() - 0.5) * 20, 2)
        previous_close = round(price - change, 2)
        change_percent = round(change / previous_close * 100, 4)
        return Quote(
            symbol=symbol.upper(),
            price=price,
            change=change,
            change_percent=change_percent,
            volume=rng.randint(1_000_000, 51_000_000),
            previous_close=previous_close,
            open=round(previous_close + (rng.random() - 0.5) * 5, 2),
            day_high=round(price + rng.random() * 10, 2),
            day_low=round(price - rng.random() * 10, 2),
        )

    def time_series(self, days: int = 30, end: datetime | None = None) -> tuple[TimeSeriesPoint, ...]:
        rng = self._rng
        last_day = (end or datetime.now(UTC)).date()
        close = 150.0
        points: list[TimeSeriesPoint] = []
        for offset in range(days - 1, -1, -1):
            open_ = close
            close = max(1.0, open_ * (1 + (rng.random() - 0.5) * 0.04))
            points.append(
                TimeSeriesPoint(
                    timestamp=(last_day - timedelta(days=offset)).isoformat(),
                    open=round(open_, 2),
                    high=round(max(open_, close) * (1 + rng.random() * 0.01), 2),
                    low=round(min(open_, close) * (1 - rng.random() * 0.01), 2),
                    close=round(close, 2),
                    volume=rng.randint(10_000_000, 40_000_000),
                )
            )
        return tuple(points)

    def search(self, query: str) -> tuple[SearchResult, ...]:
        needle = query.strip().lower()
        return tuple(
            match
            for match in MOCK_CATALOG
            if needle in match.symbol.lower() or needle in match.name.lower()
        )

    def fundamentals(self, symbol: str) -> CompanyFundamentals:
        rng = self._rng
        symbol = symbol.upper()
        profile = _PROFILES.get(
            symbol,
            {
                "name": f"{symbol} Company",
                "sector": "Technology",
                "industry": "Software",
                "description": (
                    f"{symbol} is a leading technology company focused on innovative "
                    "solutions and digital transformation."
                ),
            },
        )
        week_52_low = 100 + rng.random() * 50
        return CompanyFundamentals(
            symbol=symbol,
            **profile,
            market_cap=2.5e12 + rng.random() * 1e12,
            pe_ratio=15 + rng.random() * 20,
            peg_ratio=0.5 + rng.random() * 2,
            book_value=10 + rng.random() * 50,
            dividend_yield=rng.random() * 5,
            eps=5 + rng.random() * 15,
            beta=0.5 + rng.random() * 1.5,
            week_52_high=200 + rng.random() * 100,
            week_52_low=week_52_low,
            moving_average_50=150 + rng.random() * 50,
            moving_average_200=140 + rng.random() * 60,
            shares_outstanding=1e9 + rng.random() * 5e9,
            revenue=1e11 + rng.random() * 2e11,
            gross_profit=5e10 + rng.random() * 1e11,
            operating_income=2.5e10 + rng.random() * 5e10,
            net_income=1.5e10 + rng.random() * 3e10,
            total_debt=1e10 + rng.random() * 5e10,
            total_cash=2e10 + rng.random() * 1e11,
        )
