from __future__ import annotations

import asyncio
import logging
from typing import Any

from .formatting import project_order, render_message
from .repository import OrderRepository
from .sms_client import SmsClient, SmsGatewayError, SmsResult

logger = logging.getLogger(__name__)


class OrderNotifier:
    """Sends the alert for one order and flags it as notified.

    Delivery is best effort: gateway failures are logged and the order is
    flagged anyway. Only a failing flag update propagates, which leaves the
    order unflagged for the next subscription to pick up.
    """

    def __init__(
        self,
        repository: OrderRepository,
        sms_client: SmsClient,
        alert_number: str | None,
        currency: str = "GHC",
    ):
        self._repo = repository
        self._sms = sms_client
        self._alert_number = alert_number
        self._currency = currency

    async def process(self, order_id: str, order: dict[str, Any]) -> None:
        logger.info("New pending order: %s", order_id)
        message = render_message(project_order(order_id, order), self._currency)

        if self._alert_number:
            await self._send(order_id, message)
        else:
            logger.warning("HUBTEL_ALERT_NUMBER not set; no SMS for order %s", order_id)

        await asyncio.to_thread(self._repo.mark_notified, order_id)
        logger.info("SMS sent and marked for order %s", order_id)

    async def _send(self, order_id: str, message: str) -> SmsResult | None:
        try:
            return await self._sms.send_message(self._alert_number, message)
        except SmsGatewayError:
            logger.exception("SMS delivery failed for order %s", order_id)
            return None
