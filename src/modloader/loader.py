"""Loader orchestrator: resolve, load, extract, and publish one batch per request."""

from __future__ import annotations

import asyncio
import logging
import threading
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

from modloader.errors import LoadError, LoaderError
from modloader.events import EventChannel, get_default_channel
from modloader.extractor import DEFAULT_MARKER, extract_components
from modloader.notifier import TOPIC_PREFIX, LifecycleNotifier
from modloader.resolver import resolve_files
from modloader.types import ComponentHandle, LoadBatch
from modloader.unit_loader import load_unit

if TYPE_CHECKING:
    from modloader.config import Config, LoaderConfig

logger = logging.getLogger(__name__)

__all__ = ["LoadState", "ModuleLoader", "register"]


class LoadState(str, Enum):
    """Stages a single register() call moves through."""

    IDLE = "idle"
    RESOLVING = "resolving"
    LOADING = "loading"
    EXTRACTING = "extracting"
    COMPLETED = "completed"
    FAILED = "failed"


class ModuleLoader:
    """Discovers unit files, loads them, and collects their components.

    Each ``register()`` call is independent: it resolves the configured
    patterns, loads every matched file concurrently, extracts components in
    discovery order, and schedules exactly one lifecycle event describing the
    outcome. A single failing file fails the whole batch.
    """

    def __init__(
        self,
        channel: EventChannel | None = None,
        config: Config | None = None,
        marker: str | None = None,
        notify: bool = True,
    ) -> None:
        """Initialize the ModuleLoader.

        Args:
            channel: Event channel for lifecycle events. Defaults to the
                process-wide channel.
            config: Optional Config providing ``loader.marker`` and
                ``loader.topic_prefix``.
            marker: Substring identifying component exports. Overrides config.
            notify: Publish lifecycle events. Disable for dry runs.
        """
        self._channel = channel if channel is not None else get_default_channel()
        self._config = config

        if marker is None:
            marker = config.get("loader.marker", DEFAULT_MARKER) if config is not None else DEFAULT_MARKER
        self._marker = marker

        topic_prefix = config.get("loader.topic_prefix", TOPIC_PREFIX) if config is not None else TOPIC_PREFIX
        self._notifier = LifecycleNotifier(self._channel, topic_prefix=topic_prefix) if notify else None

        self._batches: dict[str, LoadBatch] = {}
        self._states: dict[str, LoadState] = {}
        self._lock = threading.RLock()

    @property
    def channel(self) -> EventChannel:
        return self._channel

    @property
    def marker(self) -> str:
        return self._marker

    # ----- Registration -----

    async def register(self, config: LoaderConfig) -> LoadBatch:
        """Discover, load, and extract the components described by config.

        Returns:
            The LoadBatch for config.name. Empty when no file matches.

        Raises:
            ResolutionError: If the base path or a pattern is invalid.
            LoadError: If any matched file fails to load.
            ExtractionError: If a unit declares malformed components.
        """
        self._set_state(config.name, LoadState.IDLE)
        try:
            batch = await self._run(config)
        except Exception as exc:
            self._set_state(config.name, LoadState.FAILED)
            error = exc if isinstance(exc, LoaderError) else LoadError(
                path=str(config.base_path), reason=f"{type(exc).__name__}: {exc}", cause=exc
            )
            logger.error("Module batch '%s' failed: %s", config.name, error)
            if self._notifier is not None:
                self._notifier.notify_failure(config.name, error)
            if error is exc:
                raise
            raise error from exc

        with self._lock:
            self._batches[config.name] = batch
        self._set_state(config.name, LoadState.COMPLETED)
        logger.info("Module batch '%s' loaded %d component(s)", config.name, len(batch))
        if self._notifier is not None:
            self._notifier.notify_success(batch)
        return batch

    async def _run(self, config: LoaderConfig) -> LoadBatch:
        self._set_state(config.name, LoadState.RESOLVING)
        files = await asyncio.to_thread(
            resolve_files,
            config.base_path,
            config.file_specs,
            config.ignore_specs,
            config.depth,
        )
        if not files:
            logger.info("No unit files matched for batch '%s'", config.name)
            return LoadBatch(request_name=config.name)

        self._set_state(config.name, LoadState.LOADING)
        units = await self._load_all(files)

        self._set_state(config.name, LoadState.EXTRACTING)
        components: list[ComponentHandle] = []
        for file_path, unit in zip(files, units):
            components.extend(extract_components(unit, marker=self._marker, source=file_path))
        return LoadBatch(request_name=config.name, components=tuple(components))

    async def _load_all(self, files: list[Path]) -> list[dict[str, Any]]:
        """Load every file concurrently; results follow the order of files."""
        tasks = [asyncio.ensure_future(load_unit(path)) for path in files]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def register_many(self, configs: Iterable[LoaderConfig]) -> list[LoadBatch | LoaderError]:
        """Run several independent register() calls concurrently.

        Returns:
            One entry per config, in input order: the LoadBatch, or the
            LoaderError that batch failed with.
        """
        results = await asyncio.gather(*(self.register(c) for c in configs), return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, LoaderError):
                raise result
        return list(results)

    # ----- Query Methods -----

    def get_batch(self, name: str) -> LoadBatch | None:
        """Return the last completed batch registered under name."""
        with self._lock:
            return self._batches.get(name)

    def state(self, name: str) -> LoadState:
        """Current stage of the most recent register() call for name."""
        with self._lock:
            return self._states.get(name, LoadState.IDLE)

    @property
    def batch_names(self) -> list[str]:
        """Sorted names of completed batches."""
        with self._lock:
            return sorted(self._batches.keys())

    def _set_state(self, name: str, state: LoadState) -> None:
        with self._lock:
            self._states[name] = state
        logger.debug("Module batch '%s' -> %s", name, state.value)


async def register(config: LoaderConfig, channel: EventChannel | None = None) -> LoadBatch:
    """Register one batch with a fresh ModuleLoader on channel."""
    return await ModuleLoader(channel=channel).register(config)
