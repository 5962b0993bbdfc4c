import httpx
import pytest
from conftest import FakeProvider
from payloads import movers_payload, quote_payload, search_payload

from stockwatch.database import close_database, init_database
from stockwatch.dependencies import close_services, init_services
from stockwatch.main import app
from stockwatch.market.service import GLOBAL_QUOTE, SYMBOL_SEARCH, TOP_GAINERS_LOSERS
from stockwatch.market.throttle import RequestThrottle
from stockwatch.state.models import DEFAULT_WATCHLIST_ID
from stockwatch.storage.backend import SQLiteKeyValueBackend


@pytest.fixture
async def api_provider():
    return FakeProvider(
        {
            TOP_GAINERS_LOSERS: movers_payload(),
            GLOBAL_QUOTE: lambda params: quote_payload(symbol=params["symbol"]),
            SYMBOL_SEARCH: search_payload(),
        }
    )


@pytest.fixture
async def client(api_provider):
    db = await init_database(":memory:")
    await init_services(
        SQLiteKeyValueBackend(db),
        provider=api_provider,
        throttle=RequestThrottle(min_interval=0),
    )
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await close_services()
    await close_database()


async def test_health(client):
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["cached_keys"] >= 0


async def test_movers_route_updates_state(client):
    response = await client.get("/api/v1/market/movers")

    assert response.status_code == 200
    body = response.json()
    assert body["provenance"] == "live"
    assert body["value"]["gainers"][0]["symbol"] == "UP0"

    state = (await client.get("/api/v1/state/")).json()
    assert state["gainers"]["data"][0]["symbol"] == "UP0"
    assert state["gainers"]["loading"] is False


async def test_refresh_movers(client, api_provider):
    await client.get("/api/v1/market/movers")
    response = await client.post("/api/v1/market/movers/refresh")

    assert response.status_code == 200
    assert api_provider.functions().count(TOP_GAINERS_LOSERS) == 2


async def test_quote_and_fallback_routes(client):
    quote = (await client.get("/api/v1/market/quote/msft")).json()
    assert quote["value"]["symbol"] == "MSFT"
    assert quote["provenance"] == "live"

    overview = (await client.get("/api/v1/market/overview/AAPL")).json()
    assert overview["provenance"] == "synthetic"
    assert overview["error"]

    series = (await client.get("/api/v1/market/time-series/AAPL")).json()
    assert len(series["value"]) == 30


async def test_search_route(client):
    response = await client.get("/api/v1/market/search", params={"q": "tesco"})
    assert [r["symbol"] for r in response.json()["value"]] == ["TSCO.LON", "TSCDF"]

    empty = await client.get("/api/v1/market/search")
    assert empty.json()["value"] == []


async def test_watchlist_lifecycle(client):
    created = await client.post("/api/v1/watchlists/", json={"name": " Tech ", "symbol": "nvda"})
    assert created.status_code == 201
    watchlist = created.json()
    assert watchlist["name"] == "Tech"
    assert watchlist["symbols"] == ["NVDA"]

    added = await client.post(
        f"/api/v1/watchlists/{watchlist['id']}/symbols", json={"symbol": "amd"}
    )
    assert added.json()["symbols"] == ["NVDA", "AMD"]

    duplicate = await client.post(
        f"/api/v1/watchlists/{watchlist['id']}/symbols", json={"symbol": "AMD"}
    )
    assert duplicate.status_code == 409

    renamed = await client.put(f"/api/v1/watchlists/{watchlist['id']}", json={"name": "Chips"})
    assert renamed.json()["name"] == "Chips"

    removed = await client.delete(f"/api/v1/watchlists/{watchlist['id']}/symbols/NVDA")
    assert removed.json()["symbols"] == ["AMD"]

    deleted = await client.delete(f"/api/v1/watchlists/{watchlist['id']}")
    assert deleted.status_code == 204

    listed = (await client.get("/api/v1/watchlists/")).json()
    assert [w["id"] for w in listed] == [DEFAULT_WATCHLIST_ID]


async def test_last_watchlist_delete_rejected(client):
    response = await client.delete(f"/api/v1/watchlists/{DEFAULT_WATCHLIST_ID}")

    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_unknown_watchlist_is_404(client):
    response = await client.put("/api/v1/watchlists/missing", json={"name": "X"})

    assert response.status_code == 404


async def test_remove_symbol_everywhere(client):
    await client.post(f"/api/v1/watchlists/{DEFAULT_WATCHLIST_ID}/symbols", json={"symbol": "TSLA"})
    await client.post("/api/v1/watchlists/", json={"name": "Cars", "symbol": "TSLA"})

    response = await client.delete("/api/v1/watchlists/symbols/tsla")

    assert response.json() == {"symbol": "TSLA", "removed_from": 2}


async def test_state_actions(client):
    toggled = await client.post("/api/v1/state/theme/toggle")
    assert toggled.json()["theme"] == "dark"

    dispatched = await client.post(
        "/api/v1/state/actions",
        json={"type": "add_to_watchlist", "payload": {"watchlist_id": "default", "symbol": "ibm"}},
    )
    assert dispatched.json()["watchlists"][0]["symbols"] == ["IBM"]

    unknown = await client.post("/api/v1/state/actions", json={"type": "explode"})
    assert unknown.status_code == 422


async def test_state_actions_reject_invalid_watchlists(client):
    emptied = await client.post(
        "/api/v1/state/actions", json={"type": "set_watchlists", "payload": {"watchlists": []}}
    )
    assert emptied.status_code == 422

    blank = await client.post(
        "/api/v1/state/actions",
        json={"type": "update_watchlist", "payload": {"id": DEFAULT_WATCHLIST_ID, "name": "  "}},
    )
    assert blank.status_code == 422

    listed = (await client.get("/api/v1/watchlists/")).json()
    assert [w["id"] for w in listed] == [DEFAULT_WATCHLIST_ID]
    assert listed[0]["name"].strip()


async def test_selected_and_offline(client):
    selected = (await client.put("/api/v1/state/selected", json={"symbol": "AAPL"})).json()
    assert selected["selected_stock"]["symbol"] == "AAPL"

    cleared = (await client.put("/api/v1/state/selected", json={"symbol": None})).json()
    assert cleared["selected_stock"] is None

    offline = (await client.put("/api/v1/state/offline", json={"is_offline": True})).json()
    assert offline["is_offline"] is True
