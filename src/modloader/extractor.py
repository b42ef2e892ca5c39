"""Component extraction from a loaded unit's exported symbols."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Callable, NamedTuple

from modloader.errors import ExtractionError
from modloader.types import ComponentHandle

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_MARKER",
    "ENTRY_POINT_NAME",
    "ComponentSpec",
    "component",
    "extract_components",
    "is_component_name",
]

DEFAULT_MARKER = "Module"
ENTRY_POINT_NAME = "register_components"
_COMPONENT_ATTR = "__modloader_component__"


class ComponentSpec(NamedTuple):
    """Registration record a unit returns from ``register_components()``."""

    name: str
    factory: Any


def component(obj: Any = None, *, name: str | None = None) -> Any:
    """Mark a class or function as a loadable component.

    Usable bare (``@component``) or with an explicit registration name
    (``@component(name="billing")``). Marked exports qualify as components
    whatever they are called.
    """

    def decorator(target: Any) -> Any:
        setattr(target, _COMPONENT_ATTR, name or target.__name__)
        return target

    if obj is not None:
        return decorator(obj)
    return decorator


def is_component_name(name: str, marker: str = DEFAULT_MARKER) -> bool:
    """Check whether an exported name follows the component naming convention."""
    return marker in name


def _declared_name(value: Any) -> str | None:
    # Subclasses of a marked class are not marked themselves
    if isinstance(value, type):
        declared = vars(value).get(_COMPONENT_ATTR)
    else:
        declared = getattr(value, _COMPONENT_ATTR, None)
    return declared if isinstance(declared, str) else None


def _from_entry_point(entry_point: Callable[[], Any], source: Path | None) -> list[ComponentHandle]:
    where = str(source) if source is not None else "<unit>"
    try:
        declared = entry_point()
    except Exception as exc:
        raise ExtractionError(
            path=where, reason=f"{ENTRY_POINT_NAME}() raised {type(exc).__name__}: {exc}", cause=exc
        ) from exc

    if isinstance(declared, Mapping):
        records: Iterable[Any] = declared.items()
    elif isinstance(declared, Iterable) and not isinstance(declared, (str, bytes)):
        records = declared
    else:
        raise ExtractionError(
            path=where,
            reason=f"{ENTRY_POINT_NAME}() must return a mapping or an iterable, got {type(declared).__name__}",
        )

    handles: list[ComponentHandle] = []
    for record in records:
        try:
            name, value = record
        except (TypeError, ValueError) as exc:
            raise ExtractionError(path=where, reason=f"malformed component record {record!r}", cause=exc) from exc
        if not isinstance(name, str) or not name:
            raise ExtractionError(path=where, reason=f"component name must be a non-empty string, got {name!r}")
        handles.append(ComponentHandle(name=name, value=value, source=source))
    return handles


def extract_components(
    unit: Mapping[str, Any],
    marker: str = DEFAULT_MARKER,
    source: Path | None = None,
) -> list[ComponentHandle]:
    """Select the components among a unit's exported symbols.

    A unit exporting a callable ``register_components`` declares its
    components explicitly and nothing else is inspected. Otherwise every
    export marked with :func:`component` or whose name contains ``marker``
    qualifies, in export order. A unit with no qualifying export yields an
    empty list.

    Raises:
        ExtractionError: If ``register_components`` fails or returns
            malformed records.
    """
    entry_point = unit.get(ENTRY_POINT_NAME)
    if callable(entry_point):
        return _from_entry_point(entry_point, source)

    handles: list[ComponentHandle] = []
    for name, value in unit.items():
        declared = _declared_name(value)
        if declared is not None:
            handles.append(ComponentHandle(name=declared, value=value, source=source))
        elif is_component_name(name, marker):
            handles.append(ComponentHandle(name=name, value=value, source=source))

    if not handles:
        logger.debug("No components found in %s", source or "<unit>")
    return handles
