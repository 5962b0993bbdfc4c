from datetime import UTC, datetime
from uuid import uuid4

import structlog

from stockwatch.exceptions import ConflictError, NotFoundError, ValidationError
from stockwatch.state import actions
from stockwatch.state.models import Watchlist, normalize_symbol
from stockwatch.state.store import AppStore

logger = structlog.get_logger()


class WatchlistService:
    """Validated watchlist commands; rule violations raise before dispatch."""

    def __init__(self, store: AppStore) -> None:
        self._store = store

    def list_all(self) -> list[Watchlist]:
        return list(self._store.state.watchlists)

    def get(self, watchlist_id: str) -> Watchlist:
        watchlist = self._store.state.get_watchlist(watchlist_id)
        if watchlist is None:
            raise NotFoundError("Watchlist", watchlist_id)
        return watchlist

    def contains(self, symbol: str) -> bool:
        symbol = normalize_symbol(symbol)
        return any(symbol in w.symbols for w in self._store.state.watchlists)

    async def create(self, name: str, symbol: str | None = None) -> Watchlist:
        clean_name = self._clean_name(name)
        symbols = (normalize_symbol(symbol),) if symbol and symbol.strip() else ()
        watchlist = Watchlist(
            id=str(uuid4()),
            name=clean_name,
            symbols=symbols,
            created_at=datetime.now(UTC).isoformat(),
        )
        await self._store.dispatch(actions.add_watchlist(watchlist))
        logger.info("watchlist_created", watchlist_id=watchlist.id, name=clean_name)
        return watchlist

    async def rename(self, watchlist_id: str, name: str) -> Watchlist:
        existing = self.get(watchlist_id)
        clean_name = self._clean_name(name)
        updated = existing.model_copy(update={"name": clean_name})
        await self._store.dispatch(actions.update_watchlist(updated))
        logger.info("watchlist_renamed", watchlist_id=watchlist_id, name=clean_name)
        return self.get(watchlist_id)

    async def delete(self, watchlist_id: str) -> None:
        self.get(watchlist_id)
        if len(self._store.state.watchlists) <= 1:
            raise ValidationError("You must have at least one watchlist")

        await self._store.dispatch(actions.delete_watchlist(watchlist_id))
        logger.info("watchlist_deleted", watchlist_id=watchlist_id)

    async def add_symbol(self, watchlist_id: str, symbol: str) -> Watchlist:
        watchlist = self.get(watchlist_id)
        symbol = self._clean_symbol(symbol)
        if symbol in watchlist.symbols:
            raise ConflictError(f"{symbol} is already in watchlist '{watchlist.name}'")

        await self._store.dispatch(actions.add_to_watchlist(watchlist_id, symbol))
        logger.info("watchlist_symbol_added", watchlist_id=watchlist_id, symbol=symbol)
        return self.get(watchlist_id)

    async def remove_symbol(self, watchlist_id: str, symbol: str) -> Watchlist:
        self.get(watchlist_id)
        symbol = self._clean_symbol(symbol)
        await self._store.dispatch(actions.remove_from_watchlist(watchlist_id, symbol))
        logger.info("watchlist_symbol_removed", watchlist_id=watchlist_id, symbol=symbol)
        return self.get(watchlist_id)

    async def remove_symbol_everywhere(self, symbol: str) -> int:
        symbol = self._clean_symbol(symbol)
        holders = [w.id for w in self._store.state.watchlists if symbol in w.symbols]
        for watchlist_id in holders:
            await self._store.dispatch(actions.remove_from_watchlist(watchlist_id, symbol))
        logger.info("symbol_removed_from_watchlists", symbol=symbol, count=len(holders))
        return len(holders)

    @staticmethod
    def _clean_name(name: str) -> str:
        clean = name.strip()
        if not clean:
            raise ValidationError("Please enter a watchlist name")
        return clean

    @staticmethod
    def _clean_symbol(symbol: str) -> str:
        clean = normalize_symbol(symbol)
        if not clean:
            raise ValidationError("Symbol must not be empty")
        return clean
