from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from .config import HUBTEL_SEND_URL
from .schemas import SendMessageRequest

logger = logging.getLogger(__name__)


@dataclass
class SmsResult:
    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class SmsClient(Protocol):
    async def send_message(self, to: str, content: str) -> SmsResult: ...

    async def aclose(self) -> None: ...


class SmsGatewayError(Exception):
    """Raised when the SMS gateway cannot be reached."""


class HubtelSmsClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        sender: str = "Hubtel",
        url: str = HUBTEL_SEND_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = url
        self._sender = sender
        self._client = httpx.AsyncClient(
            timeout=10.0,
            auth=httpx.BasicAuth(client_id, client_secret),
            transport=transport,
        )

    async def send_message(self, to: str, content: str) -> SmsResult:
        payload = SendMessageRequest(sender=self._sender, to=to, content=content)
        try:
            response = await self._client.post(
                self._url,
                json=payload.model_dump(by_alias=True),
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise SmsGatewayError(f"Hubtel not reachable: {exc}") from exc

        result = SmsResult(status_code=response.status_code, body=response.text)
        if result.ok:
            logger.info("Hubtel response: %s %s", result.status_code, result.body)
        else:
            logger.error("Hubtel rejected message to %s (%s): %s", to, result.status_code, result.body)
        return result

    async def aclose(self) -> None:
        await self._client.aclose()


class MockSmsClient:
    """Logs messages instead of sending them, for local runs without gateway credentials."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    async def send_message(self, to: str, content: str) -> SmsResult:
        self.sent.append((to, content))
        logger.info("Mock SMS to %s:\n%s", to, content)
        return SmsResult(status_code=200, body="mock")

    async def aclose(self) -> None:
        return None
