from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

import aiohttp

from .config_manager import RelayMapSettings
from .exceptions import UpstreamUnavailableError
from .logging_utils import get_logger


class UpstreamClient:
    """JSON-over-HTTP access to an upstream service with timeout and bounded retry.

    When no ``client`` session is injected, a short-lived
    :class:`aiohttp.ClientSession` is opened per call so that the client can
    be used from any event loop.
    """

    def __init__(
        self,
        settings: RelayMapSettings,
        client: Optional[aiohttp.ClientSession] = None,
        logger_name: str = "upstream",
    ) -> None:
        self._settings = settings
        self._client = client
        self._logger = get_logger(logger_name)

    async def _fetch_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        attempts = self._settings.upstream_retries + 1
        last_error: Optional[BaseException] = None
        for attempt in range(1, attempts + 1):
            try:
                return await asyncio.wait_for(
                    self._get_json(url, params), timeout=self._settings.upstream_timeout_seconds
                )
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as error:
                last_error = error
                if isinstance(error, aiohttp.ClientResponseError) and error.status < 500:
                    # no retry on 4xx
                    break
                if attempt < attempts:
                    self._logger.warning(
                        "Request to %s failed (attempt %d/%d): %r", url, attempt, attempts, error
                    )
                    await asyncio.sleep(self._settings.upstream_retry_delay_seconds)
        raise UpstreamUnavailableError(
            f"{url} unavailable after {attempt} attempt(s): {last_error!r}"
        ) from last_error

    async def _get_json(self, url: str, params: Optional[Dict[str, str]]) -> Any:
        if self._client is not None:
            return await self._request(self._client, url, params)
        timeout = aiohttp.ClientTimeout(total=self._settings.upstream_timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            return await self._request(session, url, params)

    @staticmethod
    async def _request(session: aiohttp.ClientSession, url: str, params: Optional[Dict[str, str]]) -> Any:
        async with session.get(url, params=params) as response:
            response.raise_for_status()
            return await response.json()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
