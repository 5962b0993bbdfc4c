import pytest

from stockwatch.exceptions import ConflictError, NotFoundError, ValidationError
from stockwatch.state.models import DEFAULT_WATCHLIST_ID
from stockwatch.state.watchlists import WatchlistService


@pytest.fixture
def watchlists(store) -> WatchlistService:
    return WatchlistService(store)


async def test_create_trims_name_and_normalizes_symbol(watchlists, persistent):
    created = await watchlists.create("  Tech  ", symbol="nvda")

    assert created.name == "Tech"
    assert created.symbols == ("NVDA",)
    assert [w.id for w in await persistent.get_watchlists()] == [DEFAULT_WATCHLIST_ID, created.id]


@pytest.mark.parametrize("name", ["", "   "])
async def test_create_rejects_blank_name(watchlists, name):
    with pytest.raises(ValidationError):
        await watchlists.create(name)


async def test_rename(watchlists):
    renamed = await watchlists.rename(DEFAULT_WATCHLIST_ID, " Core ")

    assert renamed.name == "Core"


async def test_cannot_delete_last_watchlist(watchlists):
    with pytest.raises(ValidationError, match="at least one watchlist"):
        await watchlists.delete(DEFAULT_WATCHLIST_ID)


async def test_delete_unknown_watchlist(watchlists):
    with pytest.raises(NotFoundError):
        await watchlists.delete("missing")


async def test_delete_second_watchlist(watchlists):
    extra = await watchlists.create("Extra")

    await watchlists.delete(extra.id)

    assert [w.id for w in watchlists.list_all()] == [DEFAULT_WATCHLIST_ID]


async def test_duplicate_symbol_is_rejected_case_insensitively(watchlists):
    await watchlists.add_symbol(DEFAULT_WATCHLIST_ID, "AAPL")

    with pytest.raises(ConflictError):
        await watchlists.add_symbol(DEFAULT_WATCHLIST_ID, "aapl")

    assert watchlists.get(DEFAULT_WATCHLIST_ID).symbols == ("AAPL",)


async def test_remove_symbol(watchlists):
    await watchlists.add_symbol(DEFAULT_WATCHLIST_ID, "AAPL")

    updated = await watchlists.remove_symbol(DEFAULT_WATCHLIST_ID, "aapl")

    assert updated.symbols == ()
    assert not watchlists.contains("AAPL")


async def test_remove_symbol_everywhere(watchlists):
    extra = await watchlists.create("Extra", symbol="TSLA")
    await watchlists.add_symbol(DEFAULT_WATCHLIST_ID, "TSLA")
    await watchlists.add_symbol(DEFAULT_WATCHLIST_ID, "AMD")

    removed = await watchlists.remove_symbol_everywhere("tsla")

    assert removed == 2
    assert watchlists.get(extra.id).symbols == ()
    assert watchlists.get(DEFAULT_WATCHLIST_ID).symbols == ("AMD",)


async def test_blank_symbol_rejected(watchlists):
    with pytest.raises(ValidationError):
        await watchlists.add_symbol(DEFAULT_WATCHLIST_ID, "  ")
