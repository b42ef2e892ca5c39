"""LoggingObserver: reports lifecycle events through the logging module."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from modloader.notifier import WILDCARD_TOPIC

if TYPE_CHECKING:
    from modloader.events import EventChannel
    from modloader.types import LifecycleEvent

__all__ = ["LoggingObserver"]


class LoggingObserver:
    """Logs every batch outcome it receives.

    Successes are logged at ``level`` with the discovered component names;
    failures at ERROR with the error description.
    """

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self._logger = logger or logging.getLogger("modloader.observers")
        self._level = level

    def attach(self, channel: EventChannel, topic: str = WILDCARD_TOPIC) -> LoggingObserver:
        """Subscribe to topic (all batches by default). Returns self."""
        channel.subscribe(topic, self)
        return self

    def __call__(self, event: LifecycleEvent) -> None:
        if event.ok:
            names = event.component_names or []
            self._logger.log(
                self._level,
                f"Modules loaded: {event.batch_name} => ({', '.join(names)})",
                extra={
                    "batch_name": event.batch_name,
                    "component_names": names,
                },
            )
        else:
            self._logger.error(
                f"Modules load ERROR: {event.batch_name}: {event.error}",
                extra={
                    "batch_name": event.batch_name,
                    "error": event.error,
                },
            )
