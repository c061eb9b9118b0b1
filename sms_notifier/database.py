from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore

from .config import Settings

logger = logging.getLogger(__name__)


class CredentialsError(Exception):
    """Raised when no usable Firebase service account is configured."""


def load_service_account(settings: Settings) -> dict[str, Any] | str:
    """Return the decoded service-account JSON, or a path to it.

    The base64 variable wins over the file path when both are set.
    """
    if settings.service_account_b64:
        try:
            raw = base64.b64decode(settings.service_account_b64, validate=True)
            return json.loads(raw.decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
            raise CredentialsError(
                "FIREBASE_SERVICE_ACCOUNT_BASE64 is not base64-encoded JSON"
            ) from exc
    if settings.service_account_path:
        return settings.service_account_path
    raise CredentialsError(
        "Set FIREBASE_SERVICE_ACCOUNT_BASE64 or FIREBASE_SERVICE_ACCOUNT_PATH"
    )


def init_firebase(settings: Settings) -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass
    cert = credentials.Certificate(load_service_account(settings))
    app = firebase_admin.initialize_app(cert)
    logger.info("Firebase Admin SDK initialized for project %s", cert.project_id)
    return app


def get_firestore_client(settings: Settings):
    return firestore.client(app=init_firebase(settings))
