from dataclasses import dataclass

import structlog

from stockwatch.state.models import Theme, Watchlist
from stockwatch.storage.service import PersistentCacheStore

logger = structlog.get_logger()


@dataclass(frozen=True)
class PersistWatchlists:
    watchlists: tuple[Watchlist, ...]


@dataclass(frozen=True)
class PersistTheme:
    theme: Theme


Effect = PersistWatchlists | PersistTheme


class EffectRunner:
    def __init__(self, persistent_cache: PersistentCacheStore) -> None:
        self._persistent = persistent_cache

    async def run(self, effect: Effect) -> None:
        match effect:
            case PersistWatchlists(watchlists=watchlists):
                await self._persistent.save_watchlists(watchlists)
                logger.debug("watchlists_persisted", count=len(watchlists))
            case PersistTheme(theme=theme):
                await self._persistent.save_theme(theme)
                logger.debug("theme_persisted", theme=theme)
            case _:
                raise TypeError(f"Unknown effect: {effect!r}")
