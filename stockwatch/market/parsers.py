"""Strict parsers from provider payloads to domain types.

Each parser either returns fully-populated domain objects or raises
``PayloadError``; a missing top-level key, a non-numeric price or a NaN never
reaches a cache.
"""

import math
from datetime import date
from typing import Any

from stockwatch.exceptions import PayloadError
from stockwatch.market.schemas import (
    CompanyFundamentals,
    MarketMovers,
    Quote,
    SearchResult,
    Stock,
    TimeSeriesPoint,
)

_MISSING = {"", "none", "-", "n/a", "null"}


def _strip_numbering(raw: dict[str, Any]) -> dict[str, Any]:
    """Normalize keys like ``"05. price"`` to ``"price"``."""
    return {(k.split(". ", 1)[1] if ". " in k else k): v for k, v in raw.items()}


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data or data[key] in (None, {}, ""):
        raise PayloadError(f"Missing '{key}' in response: keys={list(data.keys())}")
    return data[key]


def to_float(value: Any, field: str) -> float:
    if isinstance(value, bool) or value is None:
        raise PayloadError(f"Field '{field}' is not numeric: {value!r}")
    text = str(value).strip().replace("%", "").replace(",", "")
    try:
        number = float(text)
    except ValueError as exc:
        raise PayloadError(f"Field '{field}' is not numeric: {value!r}") from exc
    if math.isnan(number) or math.isinf(number):
        raise PayloadError(f"Field '{field}' is not finite: {value!r}")
    return number


def to_int(value: Any, field: str) -> int:
    text = str(value).strip().replace(",", "")
    try:
        return int(text)
    except ValueError:
        return int(to_float(text, field))


def optional_float(value: Any) -> float | None:
    if value is None or str(value).strip().lower() in _MISSING:
        return None
    try:
        return to_float(value, "optional")
    except PayloadError:
        return None


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return None if text.lower() in _MISSING else text


def _parse_mover(item: Any) -> Stock:
    if not isinstance(item, dict):
        raise PayloadError(f"Mover entry is not an object: {item!r}")
    symbol = str(_require(item, "ticker")).strip().upper()
    return Stock(
        symbol=symbol,
        name=symbol,
        price=to_float(_require(item, "price"), "price"),
        change=to_float(_require(item, "change_amount"), "change_amount"),
        change_percent=to_float(_require(item, "change_percentage"), "change_percentage"),
        volume=to_int(_require(item, "volume"), "volume"),
    )


def parse_market_movers(data: dict[str, Any], limit: int = 20) -> MarketMovers:
    gainers = data.get("top_gainers")
    losers = data.get("top_losers")
    if not isinstance(gainers, list) or not isinstance(losers, list):
        raise PayloadError(f"Missing top_gainers/top_losers: keys={list(data.keys())}")
    return MarketMovers(
        gainers=tuple(_parse_mover(item) for item in gainers[:limit]),
        losers=tuple(_parse_mover(item) for item in losers[:limit]),
    )


def parse_quote(data: dict[str, Any]) -> Quote:
    raw = _require(data, "Global Quote")
    if not isinstance(raw, dict):
        raise PayloadError("'Global Quote' is not an object")
    quote = _strip_numbering(raw)
    return Quote(
        symbol=str(_require(quote, "symbol")).strip().upper(),
        price=to_float(_require(quote, "price"), "price"),
        change=to_float(_require(quote, "change"), "change"),
        change_percent=to_float(_require(quote, "change percent"), "change percent"),
        volume=to_int(_require(quote, "volume"), "volume"),
        previous_close=to_float(_require(quote, "previous close"), "previous close"),
        open=to_float(_require(quote, "open"), "open"),
        day_high=to_float(_require(quote, "high"), "high"),
        day_low=to_float(_require(quote, "low"), "low"),
    )


def parse_time_series(data: dict[str, Any], limit: int = 30) -> tuple[TimeSeriesPoint, ...]:
    """Daily bars, oldest first, keeping only the most recent ``limit`` days."""
    series = _require(data, "Time Series (Daily)")
    if not isinstance(series, dict):
        raise PayloadError("'Time Series (Daily)' is not an object")

    dated: list[tuple[date, dict[str, Any]]] = []
    for day, values in series.items():
        try:
            parsed_day = date.fromisoformat(day)
        except (TypeError, ValueError) as exc:
            raise PayloadError(f"Invalid series date: {day!r}") from exc
        if not isinstance(values, dict):
            raise PayloadError(f"Series entry for {day} is not an object")
        dated.append((parsed_day, _strip_numbering(values)))

    dated.sort(key=lambda pair: pair[0])
    return tuple(
        TimeSeriesPoint(
            timestamp=day.isoformat(),
            open=to_float(_require(bar, "open"), "open"),
            high=to_float(_require(bar, "high"), "high"),
            low=to_float(_require(bar, "low"), "low"),
            close=to_float(_require(bar, "close"), "close"),
            volume=to_int(_require(bar, "volume"), "volume"),
        )
        for day, bar in dated[-limit:]
    )


def parse_search(data: dict[str, Any], limit: int = 10) -> tuple[SearchResult, ...]:
    matches = data.get("bestMatches")
    if not isinstance(matches, list):
        raise PayloadError(f"Missing 'bestMatches': keys={list(data.keys())}")

    results: list[SearchResult] = []
    for match in matches[:limit]:
        if not isinstance(match, dict):
            raise PayloadError(f"Search match is not an object: {match!r}")
        clean = _strip_numbering(match)
        results.append(
            SearchResult(
                symbol=str(_require(clean, "symbol")).strip(),
                name=str(_require(clean, "name")).strip(),
                type=str(clean.get("type") or ""),
                region=str(clean.get("region") or ""),
            )
        )
    return tuple(results)


def parse_overview(data: dict[str, Any]) -> CompanyFundamentals:
    symbol = str(_require(data, "Symbol")).strip().upper()
    return CompanyFundamentals(
        symbol=symbol,
        name=_optional_text(data.get("Name")),
        description=_optional_text(data.get("Description")),
        sector=_optional_text(data.get("Sector")),
        industry=_optional_text(data.get("Industry")),
        market_cap=optional_float(data.get("MarketCapitalization")),
        pe_ratio=optional_float(data.get("PERatio")),
        peg_ratio=optional_float(data.get("PEGRatio")),
        book_value=optional_float(data.get("BookValue")),
        dividend_yield=optional_float(data.get("DividendYield")),
        eps=optional_float(data.get("EPS")),
        beta=optional_float(data.get("Beta")),
        week_52_high=optional_float(data.get("52WeekHigh")),
        week_52_low=optional_float(data.get("52WeekLow")),
        moving_average_50=optional_float(data.get("50DayMovingAverage")),
        moving_average_200=optional_float(data.get("200DayMovingAverage")),
        shares_outstanding=optional_float(data.get("SharesOutstanding")),
        revenue=optional_float(data.get("RevenueTTM")),
        gross_profit=optional_float(data.get("GrossProfitTTM")),
        operating_income=optional_float(data.get("OperatingIncomeTTM")),
        net_income=optional_float(data.get("NetIncomeTTM")),
        total_debt=optional_float(data.get("TotalDebt")),
        total_cash=optional_float(data.get("TotalCash")),
    )
