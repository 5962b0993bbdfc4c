import asyncio
from collections.abc import Callable
from typing import TypeVar

import structlog

from stockwatch.state import actions
from stockwatch.state.actions import Action
from stockwatch.state.effects import EffectRunner
from stockwatch.state.models import AppState, MoverSide, ResourceSlice, initial_state
from stockwatch.state.reducer import reduce
from stockwatch.storage.service import PersistentCacheStore

logger = structlog.get_logger()

R = TypeVar("R")

Listener = Callable[[AppState], None]


class AppStore:
    """Single owner of ``AppState``.

    Dispatches are serialized: each action is reduced against the state left by
    the previous one, and its persistence effects complete before the next
    action is reduced. Subscribers are notified after the effects ran.
    """

    def __init__(
        self,
        persistent_cache: PersistentCacheStore,
        default_watchlist_name: str = "My Watchlist",
        state: AppState | None = None,
    ) -> None:
        self._persistent = persistent_cache
        self._effects = EffectRunner(persistent_cache)
        self._state = state or initial_state(default_watchlist_name)
        self._lock = asyncio.Lock()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def select(self, selector: Callable[[AppState], R]) -> R:
        return selector(self._state)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def dispatch(self, action: Action) -> AppState:
        async with self._lock:
            transition = reduce(self._state, action)
            if transition.state is self._state and not transition.effects:
                logger.debug("action_noop", action=action.type)
                return self._state

            self._state = transition.state
            for effect in transition.effects:
                await self._effects.run(effect)
            logger.debug("action_applied", action=action.type, effects=len(transition.effects))

            for listener in list(self._listeners):
                listener(self._state)
            return self._state

    async def hydrate(self) -> None:
        """Load theme, then watchlists, then the market snapshot from storage."""
        theme = await self._persistent.get_theme()
        if theme is not None:
            await self.dispatch(actions.set_theme(theme))

        watchlists = await self._persistent.get_watchlists()
        if watchlists:
            await self.dispatch(actions.set_watchlists(watchlists))

        snapshot = await self._persistent.get_market_snapshot()
        if snapshot is not None:
            if snapshot.gainers:
                await self.dispatch(
                    actions.set_movers(MoverSide.gainers, ResourceSlice(data=snapshot.gainers))
                )
            if snapshot.losers:
                await self.dispatch(
                    actions.set_movers(MoverSide.losers, ResourceSlice(data=snapshot.losers))
                )

        logger.info(
            "store_hydrated",
            theme=self._state.theme,
            watchlists=len(self._state.watchlists),
            has_snapshot=snapshot is not None,
        )
