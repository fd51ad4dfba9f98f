"""Async NextDNS API client for the profile denylist."""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from nextblock.errors import RemoteRequestFailed
from nextblock.models import DenylistEntry, DenylistResponse

logger = logging.getLogger(__name__)

NEXTDNS_API_URL = "https://api.nextdns.io"


@dataclass
class NextDNSConfig:
    """Configuration for the NextDNS client."""
    base_url: str = NEXTDNS_API_URL
    timeout: float = 10.0


class NextDNSClient:
    """Pushes denylist entries to a NextDNS profile."""

    def __init__(
        self,
        config: Optional[NextDNSConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or NextDNSConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    def denylist_path(self, profile_id: str) -> str:
        return f"/profiles/{profile_id}/denylist"

    async def send_denylist(
        self,
        method: str,
        profile_id: str,
        api_key: str,
        entries: list[DenylistEntry],
    ) -> DenylistResponse:
        """Send all entries in one request.

        Args:
            method: "POST" to add/activate, "PATCH" to update in place
            profile_id: NextDNS profile ID
            api_key: NextDNS API key
            entries: Desired denylist entries

        Returns:
            DenylistResponse for a 2xx reply

        Raises:
            RemoteRequestFailed: On transport errors or non-2xx status
        """
        client = await self._get_client()
        payload = {"denylist": [entry.to_dict() for entry in entries]}
        headers = {"X-Api-Key": api_key, "Content-Type": "application/json"}

        try:
            resp = await client.request(
                method,
                self.denylist_path(profile_id),
                json=payload,
                headers=headers,
            )
        except httpx.TimeoutException:
            raise RemoteRequestFailed(method, body="request timed out") from None
        except httpx.HTTPError as e:
            raise RemoteRequestFailed(method, body=str(e)) from e

        if not resp.is_success:
            raise RemoteRequestFailed(method, resp.status_code, resp.text)

        return DenylistResponse(
            method=method,
            status_code=resp.status_code,
            body=resp.text,
            entries=tuple(entries),
        )
