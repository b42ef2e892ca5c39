"""Lifecycle notifier: one deferred success/failure event per loader batch."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from modloader.types import LifecycleEvent, LoadBatch

if TYPE_CHECKING:
    from modloader.events import EventChannel

logger = logging.getLogger(__name__)

__all__ = ["TOPIC_PREFIX", "WILDCARD_TOPIC", "LifecycleNotifier", "topic_for"]

TOPIC_PREFIX = "module_loader."
WILDCARD_TOPIC = TOPIC_PREFIX + "*"


def topic_for(batch_name: str, prefix: str = TOPIC_PREFIX) -> str:
    """Topic on which the lifecycle event of a batch is published."""
    return prefix + batch_name


class LifecycleNotifier:
    """Publishes batch outcomes on an event channel after the caller yields.

    The publish is wrapped in a task on the running loop, so it happens on a
    later loop iteration than the code that requested it. Anything the caller
    subscribes before its next ``await`` is attached in time.
    """

    def __init__(self, channel: EventChannel, topic_prefix: str = TOPIC_PREFIX) -> None:
        self._channel = channel
        self._topic_prefix = topic_prefix

    @property
    def channel(self) -> EventChannel:
        return self._channel

    def notify_success(self, batch: LoadBatch) -> LifecycleEvent:
        return self.schedule(LifecycleEvent.success(batch))

    def notify_failure(self, batch_name: str, error: BaseException | str) -> LifecycleEvent:
        return self.schedule(LifecycleEvent.failure(batch_name, error))

    def schedule(self, event: LifecycleEvent) -> LifecycleEvent:
        """Schedule one publish of event. Returns the event."""
        topic = topic_for(event.batch_name, self._topic_prefix)
        loop = asyncio.get_running_loop()
        self._channel.track(loop.create_task(self._publish(topic, event)))
        return event

    async def _publish(self, topic: str, event: LifecycleEvent) -> None:
        delivered = self._channel.publish(topic, event)
        logger.debug(
            "Published %s event on '%s' to %d subscriber(s)",
            "success" if event.ok else "failure",
            topic,
            delivered,
        )
