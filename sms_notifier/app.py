from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from .config import Settings, load_settings
from .database import get_firestore_client
from .keepalive import SelfPinger
from .listener import OrderListener
from .repository import OrderRepository
from .service import OrderNotifier
from .sms_client import HubtelSmsClient, MockSmsClient, SmsClient

logger = logging.getLogger(__name__)

LIVENESS_TEXT = "🔥 Chawp SMS Server (Hubtel) running..."


def build_sms_client(settings: Settings) -> SmsClient:
    if settings.sms_mode == "mock":
        return MockSmsClient()
    if settings.sms_mode != "hubtel":
        raise RuntimeError(f"Unknown SMS_MODE {settings.sms_mode!r}; use 'hubtel' or 'mock'")
    if not (settings.hubtel_client_id and settings.hubtel_client_secret):
        logger.warning("HUBTEL_CLIENT_ID/HUBTEL_CLIENT_SECRET not set; Hubtel will reject messages")
    return HubtelSmsClient(
        settings.hubtel_client_id,
        settings.hubtel_client_secret,
        sender=settings.hubtel_sender,
        url=settings.hubtel_api_url,
    )


def build_listener(settings: Settings, sms_client: SmsClient) -> OrderListener:
    repo = OrderRepository(get_firestore_client(settings), settings.orders_collection)
    notifier = OrderNotifier(repo, sms_client, settings.alert_number, settings.currency)
    return OrderListener(
        repo,
        notifier,
        error_delay=settings.error_delay,
        setup_error_delay=settings.setup_error_delay,
        restart_interval=settings.restart_interval,
    )


def build_pinger(settings: Settings) -> SelfPinger | None:
    if not settings.self_ping_url:
        logger.info("SELF_PING_URL not set; keep-alive disabled")
        return None
    return SelfPinger(settings.self_ping_url, settings.self_ping_interval)


def _log_crash(task: asyncio.Task) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error("Background task %s crashed", task.get_name(), exc_info=task.exception())


def create_app(
    settings: Settings | None = None,
    *,
    listener: OrderListener | None = None,
    pinger: SelfPinger | None = None,
    sms_client: SmsClient | None = None,
) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if listener is None:
            client = sms_client or build_sms_client(settings)
            order_listener = build_listener(settings, client)
        else:
            client, order_listener = sms_client, listener
        keepalive = pinger if pinger is not None else build_pinger(settings)

        runners = [("order-listener", order_listener.run())]
        if keepalive is not None:
            runners.append(("self-ping", keepalive.run()))
        tasks = []
        for name, coro in runners:
            task = asyncio.create_task(coro, name=name)
            task.add_done_callback(_log_crash)
            tasks.append(task)

        try:
            yield
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            order_listener.stop()
            if keepalive is not None:
                await keepalive.aclose()
            if client is not None:
                await client.aclose()

    app = FastAPI(
        title="SMS Notifier",
        version="0.1.0",
        description="Texts the restaurant operator for every new pending order.",
        lifespan=lifespan,
    )

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return LIVENESS_TEXT

    return app
