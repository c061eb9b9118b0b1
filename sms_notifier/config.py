from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

HUBTEL_SEND_URL = "https://smsc.hubtel.com/v1/messages/send"


@dataclass(frozen=True)
class Settings:
    service_account_b64: str | None = None
    service_account_path: str | None = None
    hubtel_client_id: str = ""
    hubtel_client_secret: str = ""
    hubtel_sender: str = "Hubtel"
    hubtel_api_url: str = HUBTEL_SEND_URL
    alert_number: str | None = None
    sms_mode: str = "hubtel"
    currency: str = "GHC"
    orders_collection: str = "orders"
    self_ping_url: str | None = None
    self_ping_interval: float = 300.0
    error_delay: float = 15.0
    setup_error_delay: float = 30.0
    restart_interval: float = 3600.0
    port: int = 3001
    log_level: str = "INFO"


def _self_ping_url(env: Mapping[str, str]) -> str | None:
    if url := env.get("SELF_PING_URL"):
        return url
    # Railway exposes the public hostname without a scheme
    if domain := env.get("RAILWAY_PUBLIC_DOMAIN"):
        return f"https://{domain}/"
    return None


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if env is None else env
    return Settings(
        service_account_b64=env.get("FIREBASE_SERVICE_ACCOUNT_BASE64") or None,
        service_account_path=(
            env.get("FIREBASE_SERVICE_ACCOUNT_PATH")
            or env.get("GOOGLE_APPLICATION_CREDENTIALS")
            or None
        ),
        hubtel_client_id=env.get("HUBTEL_CLIENT_ID", ""),
        hubtel_client_secret=env.get("HUBTEL_CLIENT_SECRET", ""),
        hubtel_sender=env.get("HUBTEL_SENDER", "Hubtel"),
        hubtel_api_url=env.get("HUBTEL_API_URL", HUBTEL_SEND_URL),
        alert_number=env.get("HUBTEL_ALERT_NUMBER") or None,
        sms_mode=env.get("SMS_MODE", "hubtel").lower(),
        currency=env.get("CURRENCY_SYMBOL", "GHC"),
        orders_collection=env.get("ORDERS_COLLECTION", "orders"),
        self_ping_url=_self_ping_url(env),
        self_ping_interval=float(env.get("SELF_PING_INTERVAL", "300")),
        error_delay=float(env.get("LISTENER_ERROR_DELAY", "15")),
        setup_error_delay=float(env.get("LISTENER_SETUP_DELAY", "30")),
        restart_interval=float(env.get("LISTENER_RESTART_INTERVAL", "3600")),
        port=int(env.get("PORT", "3001")),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
