from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockwatch.config import settings
from stockwatch.database import check_health, close_database, init_database
from stockwatch.dependencies import close_services, init_services
from stockwatch.exception_handlers import register_exception_handlers
from stockwatch.logging_config import setup_logging
from stockwatch.market.router import router as market_router
from stockwatch.state.router import router as state_router
from stockwatch.state.watchlists_router import router as watchlists_router
from stockwatch.storage.backend import SQLiteKeyValueBackend


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    db = await init_database()
    await init_services(SQLiteKeyValueBackend(db))
    yield
    await close_services()
    await close_database()


app = FastAPI(
    title="Stockwatch",
    description="Market data acquisition, caching and watchlist state",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(market_router, prefix="/api/v1/market", tags=["market"])
app.include_router(state_router, prefix="/api/v1/state", tags=["state"])
app.include_router(watchlists_router, prefix="/api/v1/watchlists", tags=["watchlists"])


@app.get("/api/v1/health")
async def health():
    cached_keys = await check_health()
    return {"status": "healthy", "cached_keys": cached_keys}
