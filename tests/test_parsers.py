import pytest
from payloads import (
    movers_payload,
    overview_payload,
    quote_payload,
    search_payload,
    time_series_payload,
)

from stockwatch.exceptions import PayloadError
from stockwatch.market import parsers


def test_parse_quote_strips_numbered_keys():
    quote = parsers.parse_quote(quote_payload())

    assert quote.symbol == "AAPL"
    assert quote.price == 189.84
    assert quote.change == 2.14
    assert quote.change_percent == pytest.approx(1.1401)
    assert quote.volume == 48231000
    assert quote.previous_close == 187.7
    assert quote.day_high == 190.32
    assert quote.day_low == 187.51


@pytest.mark.parametrize("body", [{}, {"Global Quote": {}}])
def test_parse_quote_rejects_empty_quote(body):
    with pytest.raises(PayloadError):
        parsers.parse_quote(body)


@pytest.mark.parametrize("price", ["abc", "NaN", "inf"])
def test_parse_quote_rejects_non_finite_price(price):
    with pytest.raises(PayloadError):
        parsers.parse_quote(quote_payload(price=price))


def test_parse_market_movers_caps_and_strips_percent():
    movers = parsers.parse_market_movers(movers_payload(gainers=25, losers=2), limit=20)

    assert len(movers.gainers) == 20
    assert len(movers.losers) == 2
    first = movers.gainers[0]
    assert first.symbol == "UP0"
    assert first.name == "UP0"
    assert first.change_percent == 12.5
    assert movers.losers[0].change == -1.1


def test_parse_market_movers_requires_both_lists():
    with pytest.raises(PayloadError):
        parsers.parse_market_movers({"top_gainers": []})


def test_parse_time_series_orders_ascending_and_keeps_latest():
    points = parsers.parse_time_series(time_series_payload(days=40), limit=30)

    assert len(points) == 30
    timestamps = [p.timestamp for p in points]
    assert timestamps == sorted(timestamps)
    assert timestamps[-1] == "2024-05-10"
    assert timestamps[0] == "2024-04-11"


def test_parse_time_series_short_history():
    points = parsers.parse_time_series(time_series_payload(days=5), limit=30)

    assert len(points) == 5


def test_parse_time_series_rejects_bad_date():
    body = {"Time Series (Daily)": {"yesterday": {"1. open": "1"}}}

    with pytest.raises(PayloadError):
        parsers.parse_time_series(body)


def test_parse_search():
    results = parsers.parse_search(search_payload(), limit=10)

    assert [r.symbol for r in results] == ["TSCO.LON", "TSCDF"]
    assert results[0].name == "Tesco PLC"
    assert results[0].region == "United Kingdom"


def test_parse_search_respects_limit():
    assert len(parsers.parse_search(search_payload(), limit=1)) == 1


def test_parse_overview_maps_missing_markers_to_none():
    fundamentals = parsers.parse_overview(overview_payload())

    assert fundamentals.symbol == "IBM"
    assert fundamentals.market_cap == 153375318000
    assert fundamentals.pe_ratio == 18.9
    assert fundamentals.peg_ratio is None
    assert fundamentals.net_income is None
    assert fundamentals.week_52_high == 199.18


def test_parse_overview_requires_symbol():
    with pytest.raises(PayloadError):
        parsers.parse_overview({})
