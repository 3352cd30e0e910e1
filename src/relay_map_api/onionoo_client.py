from __future__ import annotations

from typing import List, Optional

import aiohttp

from .config_manager import RelayMapSettings
from .exceptions import RelayNotFoundError, UpstreamUnavailableError
from .models import RelayRecord
from .upstream import UpstreamClient


class OnionooClient(UpstreamClient):
    """Retrieve relay details from an Onionoo-compatible directory."""

    def __init__(self, settings: RelayMapSettings, client: Optional[aiohttp.ClientSession] = None) -> None:
        super().__init__(settings, client, logger_name="onionoo")
        self._details_url = f"{settings.onionoo_url}/details"

    async def details(self) -> List[RelayRecord]:
        payload = await self._fetch_json(self._details_url)
        relays = payload.get("relays") if isinstance(payload, dict) else None
        if not isinstance(relays, list):
            raise UpstreamUnavailableError(f"Malformed Onionoo response from {self._details_url}")
        try:
            records = [RelayRecord.from_dict(relay) for relay in relays]
        except (AttributeError, TypeError, ValueError) as error:
            raise UpstreamUnavailableError(f"Malformed relay entry from {self._details_url}") from error
        self._logger.debug("Fetched %d relays from %s", len(records), self._details_url)
        return records

    async def find_relay(self, fingerprint: str) -> RelayRecord:
        for relay in await self.details():
            if relay.fingerprint == fingerprint:
                return relay
        raise RelayNotFoundError(f"Relay {fingerprint} not found")
