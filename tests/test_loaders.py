from payloads import movers_payload, quote_payload, time_series_payload

from stockwatch.market.schemas import MarketMovers, Provenance, Stock
from stockwatch.market.service import GLOBAL_QUOTE, OVERVIEW, TIME_SERIES_DAILY, TOP_GAINERS_LOSERS
from stockwatch.state import actions
from stockwatch.state.loaders import (
    ViewScope,
    load_market_movers,
    load_stock_details,
    load_watchlist_quotes,
    refresh_market_movers,
    select_stock,
    select_symbol,
    set_connectivity,
)
from stockwatch.state.models import MoverSide, ResourceSlice, Watchlist

STOCK = Stock(symbol="OLD", name="OLD", price=1.0, change=0.1, change_percent=10.0, volume=1)


async def test_load_market_movers_fills_both_slices(store, market, provider):
    provider.responses[TOP_GAINERS_LOSERS] = movers_payload()
    loading_flags: list[bool] = []
    store.subscribe(lambda state: loading_flags.append(state.gainers.loading))

    result = await load_market_movers(store, market, ViewScope())

    assert result.provenance == Provenance.live
    assert [s.symbol for s in store.state.gainers.data] == ["UP0", "UP1", "UP2"]
    assert [s.symbol for s in store.state.losers.data] == ["DN0", "DN1", "DN2"]
    assert store.state.gainers.loading is False
    assert store.state.gainers.error is None
    assert loading_flags[0] is True


async def test_loading_keeps_previous_data(store, market, provider):
    await store.dispatch(actions.set_movers(MoverSide.gainers, ResourceSlice(data=(STOCK,))))
    observed: list[tuple] = []
    store.subscribe(lambda state: observed.append(state.gainers.data))
    provider.responses[TOP_GAINERS_LOSERS] = movers_payload()

    await load_market_movers(store, market, ViewScope())

    assert observed[0] == (STOCK,)


async def test_synthetic_movers_surface_an_error(store, market):
    await load_market_movers(store, market, ViewScope())

    assert store.state.gainers.error
    assert store.state.losers.error
    assert store.state.gainers.data


async def test_cached_fallback_has_no_error(store, market, provider, persistent):
    await persistent.save_market_snapshot(
        MarketMovers(gainers=[STOCK], losers=[STOCK])
    )

    result = await load_market_movers(store, market, ViewScope())

    assert result.provenance == Provenance.stale_cache
    assert store.state.gainers.error is None
    assert store.state.gainers.data == (STOCK,)


async def test_result_discarded_when_view_closed_mid_flight(store, market, provider):
    scope = ViewScope("home")

    def close_then_answer(params):
        scope.close()
        return movers_payload()

    provider.responses[TOP_GAINERS_LOSERS] = close_then_answer

    result = await load_market_movers(store, market, scope)

    assert result is None
    assert store.state.gainers.data == ()


async def test_closed_scope_does_nothing(store, market, provider):
    async with ViewScope() as scope:
        pass

    assert await load_market_movers(store, market, scope) is None
    assert provider.calls == []


async def test_refresh_bypasses_memory_cache(store, market, provider):
    provider.responses[TOP_GAINERS_LOSERS] = movers_payload()
    await load_market_movers(store, market, ViewScope())

    await refresh_market_movers(store, market, ViewScope())

    assert provider.functions() == [TOP_GAINERS_LOSERS, TOP_GAINERS_LOSERS]


async def test_load_watchlist_quotes_in_order(market, provider):
    provider.responses[GLOBAL_QUOTE] = lambda params: quote_payload(symbol=params["symbol"])
    watchlist = Watchlist(id="w", name="W", symbols=("MSFT", "AAPL"))

    stocks = await load_watchlist_quotes(market, watchlist, ViewScope())

    assert [s.symbol for s in stocks] == ["MSFT", "AAPL"]
    assert await load_watchlist_quotes(market, Watchlist(name="Empty"), ViewScope()) == []


async def test_stock_details_survive_one_failure(market, provider):
    provider.responses[GLOBAL_QUOTE] = quote_payload()
    provider.responses[TIME_SERIES_DAILY] = time_series_payload()
    provider.responses[OVERVIEW] = RuntimeError("boom")

    details = await load_stock_details(market, "aapl", ViewScope())

    assert details.symbol == "AAPL"
    assert details.quote.value.price == 189.84
    assert len(details.time_series.value) == 30
    assert details.fundamentals is None
    assert not details.failed


async def test_select_symbol_and_clear(store, market, provider):
    provider.responses[GLOBAL_QUOTE] = quote_payload()

    stock = await select_symbol(store, market, "AAPL", ViewScope())
    assert store.state.selected_stock == stock
    assert stock.price == 189.84

    await select_stock(store, None)
    assert store.state.selected_stock is None


async def test_going_offline_reapplies_cached_snapshot(store, persistent):
    await persistent.save_market_snapshot(MarketMovers(gainers=[STOCK], losers=[]))

    await set_connectivity(store, persistent, is_online=False)
    assert store.state.is_offline is True
    assert store.state.gainers.data == (STOCK,)

    await set_connectivity(store, persistent, is_online=True)
    assert store.state.is_offline is False
