"""Process-wide publish/subscribe channel with wildcard topics."""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from typing import Any, Callable

from modloader.errors import InvalidInputError
from modloader.utils.pattern import match_pattern

logger = logging.getLogger(__name__)

__all__ = ["EventChannel", "get_default_channel", "set_default_channel"]

Subscriber = Callable[[Any], Any]


class EventChannel:
    """Topic-keyed fan-out of payloads to subscriber callbacks.

    Subscriptions may name an exact topic or a wildcard pattern such as
    ``"module_loader.*"``. Delivery is always asynchronous: ``publish()``
    schedules one task per matching subscriber on the running event loop and
    returns before any subscriber runs. Subscribers attached after a publish
    never see that payload.
    """

    def __init__(self, name: str = "default") -> None:
        self.name = name
        self._subscribers: dict[str, list[Subscriber]] = {}
        self._lock = threading.RLock()
        self._pending: set[asyncio.Task[Any]] = set()

    def subscribe(self, topic: str, callback: Subscriber) -> None:
        """Attach a callback (plain or coroutine function) to a topic or pattern.

        Raises:
            InvalidInputError: If topic is empty or callback is not callable.
        """
        if not topic:
            raise InvalidInputError(message="topic must be a non-empty string")
        if not callable(callback):
            raise InvalidInputError(message=f"Subscriber for '{topic}' is not callable")
        with self._lock:
            self._subscribers.setdefault(topic, []).append(callback)

    def unsubscribe(self, topic: str, callback: Subscriber) -> bool:
        """Detach a callback. Returns False if it was not subscribed to topic."""
        with self._lock:
            callbacks = self._subscribers.get(topic)
            if not callbacks or callback not in callbacks:
                return False
            callbacks.remove(callback)
            if not callbacks:
                del self._subscribers[topic]
            return True

    def subscriber_count(self, topic: str | None = None) -> int:
        """Number of subscriptions, or of subscriptions matching a concrete topic."""
        with self._lock:
            if topic is None:
                return sum(len(cbs) for cbs in self._subscribers.values())
            return len(self._matching(topic))

    def _matching(self, topic: str) -> list[Subscriber]:
        matched: list[Subscriber] = []
        for pattern, callbacks in self._subscribers.items():
            if match_pattern(pattern, topic):
                matched.extend(callbacks)
        return matched

    def publish(self, topic: str, payload: Any) -> int:
        """Schedule delivery of payload to every subscriber matching topic.

        Must be called from a running event loop.

        Returns:
            Number of deliveries scheduled.
        """
        loop = asyncio.get_running_loop()
        with self._lock:
            callbacks = self._matching(topic)

        if not callbacks:
            logger.debug("No subscribers for topic '%s'", topic)
        for callback in callbacks:
            self.track(loop.create_task(self._deliver(topic, callback, payload)))
        return len(callbacks)

    def track(self, task: asyncio.Task[Any]) -> None:
        """Keep a reference to a scheduled task until it finishes."""
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, topic: str, callback: Subscriber, payload: Any) -> None:
        try:
            result = callback(payload)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error("Subscriber error for topic '%s': %s", topic, e, exc_info=True)

    async def join(self) -> None:
        """Wait until every scheduled publish and delivery has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


_default_channel: EventChannel | None = None
_default_lock = threading.Lock()


def get_default_channel() -> EventChannel:
    """Return the process-wide channel, creating it on first use."""
    global _default_channel
    with _default_lock:
        if _default_channel is None:
            _default_channel = EventChannel()
        return _default_channel


def set_default_channel(channel: EventChannel | None) -> None:
    """Replace the process-wide channel. ``None`` resets it."""
    global _default_channel
    with _default_lock:
        _default_channel = channel
