from __future__ import annotations

from typing import Any, Callable, Protocol

from google.cloud.firestore_v1.base_query import FieldFilter

PENDING_STATUS = "pending"
NOTIFIED_FIELD = "smsSent"

SnapshotCallback = Callable[[list, list, Any], None]


class Subscription(Protocol):
    """Handle of a live query, as returned by ``Query.on_snapshot``."""

    @property
    def is_active(self) -> bool: ...

    def unsubscribe(self) -> None: ...


def needs_notification(order: dict[str, Any]) -> bool:
    return order.get("status") == PENDING_STATUS and order.get(NOTIFIED_FIELD) is False


class OrderRepository:
    """Firestore access for orders awaiting an SMS alert."""

    def __init__(self, client, collection: str = "orders"):
        self._client = client
        self._collection = collection

    def pending_query(self):
        return (
            self._client.collection(self._collection)
            .where(filter=FieldFilter("status", "==", PENDING_STATUS))
            .where(filter=FieldFilter(NOTIFIED_FIELD, "==", False))
        )

    def watch_pending(self, callback: SnapshotCallback) -> Subscription:
        return self.pending_query().on_snapshot(callback)

    def mark_notified(self, order_id: str) -> None:
        self._client.collection(self._collection).document(order_id).update(
            {NOTIFIED_FIELD: True}
        )
