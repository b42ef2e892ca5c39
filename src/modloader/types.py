"""Loader types: ComponentHandle, LoadBatch, LifecycleEvent."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

__all__ = [
    "ComponentHandle",
    "LoadBatch",
    "LifecycleEvent",
]


@dataclass(frozen=True)
class ComponentHandle:
    """A named component extracted from a loaded unit. The value is opaque."""

    name: str
    value: Any
    source: Path | None = None


@dataclass(frozen=True)
class LoadBatch:
    """All components discovered under one loader configuration."""

    request_name: str
    components: tuple[ComponentHandle, ...] = ()

    @property
    def component_names(self) -> list[str]:
        return [c.name for c in self.components]

    def __len__(self) -> int:
        return len(self.components)

    def __iter__(self) -> Iterator[ComponentHandle]:
        return iter(self.components)


@dataclass
class LifecycleEvent:
    """Outcome of one register() call, as published to subscribers.

    Exactly one of ``component_names`` and ``error`` is set.
    """

    batch_name: str
    component_names: list[str] | None = None
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, batch: LoadBatch) -> LifecycleEvent:
        return cls(batch_name=batch.request_name, component_names=batch.component_names)

    @classmethod
    def failure(cls, batch_name: str, error: BaseException | str) -> LifecycleEvent:
        details: dict[str, Any] = {}
        if isinstance(error, BaseException):
            details = dict(getattr(error, "details", {}) or {})
            details["error_type"] = type(error).__name__
        return cls(batch_name=batch_name, error=str(error), details=details)
