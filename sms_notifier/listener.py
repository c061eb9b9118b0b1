"""Live listener for pending, not yet notified orders.

The listener owns exactly one Firestore subscription at a time. Every
``subscribe()`` releases the previous handle before opening a new one, so a
restart can be triggered from anywhere without leaking watches.

Firestore delivers snapshots on its own thread. They are handed to the event
loop with ``call_soon_threadsafe`` and every added order becomes its own task;
tasks are never awaited by the listener, so orders of one batch are processed
concurrently and in no particular order.
"""

from __future__ import annotations

import asyncio
import enum
import functools
import logging
from typing import Any

from .repository import OrderRepository, Subscription, needs_notification
from .service import OrderNotifier

logger = logging.getLogger(__name__)


class ListenerState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    SUBSCRIBED = "subscribed"
    RESTART_PENDING = "restart_pending"


class SubscriptionClosed(Exception):
    """The live query stopped without being released by the listener."""


class OrderListener:
    def __init__(
        self,
        repository: OrderRepository,
        notifier: OrderNotifier,
        *,
        error_delay: float = 15.0,
        setup_error_delay: float = 30.0,
        restart_interval: float = 3600.0,
        check_interval: float = 10.0,
    ):
        self._repo = repository
        self._notifier = notifier
        self._error_delay = error_delay
        self._setup_error_delay = setup_error_delay
        self._restart_interval = restart_interval
        self._check_interval = check_interval

        self._loop: asyncio.AbstractEventLoop | None = None
        self._state = ListenerState.UNINITIALIZED
        self._subscription: Subscription | None = None
        self._generation = 0
        self._restart_handle: asyncio.TimerHandle | None = None
        self._tasks: dict[str, asyncio.Task] = {}

    @property
    def state(self) -> ListenerState:
        return self._state

    @property
    def subscription(self) -> Subscription | None:
        return self._subscription

    @property
    def pending_tasks(self) -> frozenset[asyncio.Task]:
        return frozenset(self._tasks.values())

    async def run(self) -> None:
        """Subscribe, then watch the subscription and restart it every interval."""
        loop = asyncio.get_running_loop()
        self._loop = loop
        self.subscribe()
        next_restart = loop.time() + self._restart_interval
        while True:
            await asyncio.sleep(self._check_interval)
            if loop.time() >= next_restart:
                logger.info("Scheduled restart of order listener")
                self.subscribe()
                next_restart = loop.time() + self._restart_interval
            elif self._state is ListenerState.SUBSCRIBED and not self._subscription.is_active:
                self.handle_error(SubscriptionClosed("order query is no longer active"))

    def subscribe(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._cancel_restart()
        self._release()

        self._generation += 1
        callback = functools.partial(self._on_snapshot, self._generation)
        try:
            self._subscription = self._repo.watch_pending(callback)
        except Exception:
            logger.exception(
                "Could not start order listener; retrying in %.0fs", self._setup_error_delay
            )
            self._schedule_restart(self._setup_error_delay)
            return

        self._state = ListenerState.SUBSCRIBED
        logger.info("Firestore order listener started")

    def handle_error(self, exc: BaseException) -> None:
        if self._state is ListenerState.RESTART_PENDING:
            return
        logger.error(
            "Firestore listener error; restarting in %.0fs", self._error_delay, exc_info=exc
        )
        self._schedule_restart(self._error_delay)

    def stop(self) -> None:
        self._cancel_restart()
        self._release()
        self._generation += 1
        for task in list(self._tasks.values()):
            task.cancel()
        self._state = ListenerState.UNINITIALIZED
        logger.info("Firestore order listener stopped")

    def _release(self) -> None:
        if self._subscription is None:
            return
        subscription, self._subscription = self._subscription, None
        try:
            subscription.unsubscribe()
        except Exception:
            logger.warning("Releasing previous order subscription failed", exc_info=True)

    def _schedule_restart(self, delay: float) -> None:
        self._state = ListenerState.RESTART_PENDING
        self._restart_handle = self._loop.call_later(delay, self._restart)

    def _cancel_restart(self) -> None:
        if self._restart_handle is not None:
            self._restart_handle.cancel()
            self._restart_handle = None

    def _restart(self) -> None:
        self._restart_handle = None
        self.subscribe()

    def _on_snapshot(self, generation: int, docs: list, changes: list, read_time: Any) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._dispatch, generation, changes)

    def _dispatch(self, generation: int, changes: list) -> None:
        if generation != self._generation or self._state is not ListenerState.SUBSCRIBED:
            logger.debug("Ignoring snapshot from a released subscription")
            return
        try:
            for change in changes:
                if change.type.name != "ADDED":
                    continue
                document = change.document
                order = document.to_dict() or {}
                if not needs_notification(order):
                    logger.debug("Order %s already handled; skipping", document.id)
                    continue
                if document.id in self._tasks:
                    logger.debug("Order %s is still being processed; skipping", document.id)
                    continue
                self._spawn(document.id, order)
        except Exception as exc:
            self.handle_error(exc)

    def _spawn(self, order_id: str, order: dict[str, Any]) -> None:
        task = self._loop.create_task(
            self._notifier.process(order_id, order), name=f"notify-{order_id}"
        )
        self._tasks[order_id] = task
        task.add_done_callback(functools.partial(self._on_task_done, order_id))

    def _on_task_done(self, order_id: str, task: asyncio.Task) -> None:
        if self._tasks.get(order_id) is task:
            del self._tasks[order_id]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("%s failed; order stays unflagged", task.get_name(), exc_info=exc)
