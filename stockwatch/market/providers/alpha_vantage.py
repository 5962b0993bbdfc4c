from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from stockwatch.exceptions import PayloadError, SignalKind, TransportError, UpstreamSignalError
from stockwatch.market.providers.base import MarketDataProvider

logger = structlog.get_logger()

# Error shapes the provider embeds in an otherwise successful 200 response.
_SIGNAL_KEYS: dict[str, SignalKind] = {
    "Error Message": SignalKind.error_message,
    "Note": SignalKind.rate_limit_note,
    "Information": SignalKind.information,
}

_HEADERS = {
    "Accept": "application/json",
    "Cache-Control": "no-cache",
    "User-Agent": "stockwatch/0.1",
}


def check_signals(data: dict[str, Any]) -> None:
    for key, kind in _SIGNAL_KEYS.items():
        if data.get(key):
            raise UpstreamSignalError(kind, str(data[key]))


class AlphaVantageProvider(MarketDataProvider):
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://www.alphavantage.co/query",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._client = client or httpx.AsyncClient(timeout=timeout, headers=_HEADERS)

    async def query(self, function: str, params: Mapping[str, str]) -> dict[str, Any]:
        request_params = {**params, "function": function, "apikey": self._api_key}
        logger.info("alpha_vantage_request", function=function, **dict(params))

        try:
            response = await self._client.get(self._base_url, params=request_params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "alpha_vantage_http_error",
                function=function,
                status=exc.response.status_code,
            )
            raise TransportError(
                f"{function} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("alpha_vantage_transport_error", function=function, error=str(exc))
            raise TransportError(f"{function} request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise PayloadError(f"{function} returned a non-JSON body") from exc
        if not isinstance(data, dict):
            raise PayloadError(f"{function} returned {type(data).__name__}, expected object")

        try:
            check_signals(data)
        except UpstreamSignalError as exc:
            logger.warning("alpha_vantage_signal", function=function, kind=exc.kind)
            raise

        return data

    async def aclose(self) -> None:
        await self._client.aclose()
