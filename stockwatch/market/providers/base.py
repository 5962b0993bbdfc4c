from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any


class MarketDataProvider(ABC):
    @abstractmethod
    async def query(self, function: str, params: Mapping[str, str]) -> dict[str, Any]: ...

    async def aclose(self) -> None:
        return None
