from __future__ import annotations

import asyncio
import logging

import httpx

logger = logging.getLogger(__name__)


class SelfPinger:
    """Requests the service's own public URL so the host does not idle it out."""

    def __init__(
        self,
        url: str,
        interval: float = 300.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = url
        self._interval = interval
        self._client = httpx.AsyncClient(timeout=10.0, transport=transport)

    async def ping(self) -> None:
        try:
            response = await self._client.get(self._url)
            logger.debug("Self-ping %s -> %s", self._url, response.status_code)
        except httpx.HTTPError as exc:
            logger.debug("Self-ping %s failed: %s", self._url, exc)

    async def run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.ping()

    async def aclose(self) -> None:
        await self._client.aclose()
