"""Unit loader: import a discovered file and return its exported symbols."""

from __future__ import annotations

import asyncio
import hashlib
import inspect
import logging
from pathlib import Path
from types import ModuleType
from typing import Any

from modloader.errors import LoadError

logger = logging.getLogger(__name__)

__all__ = ["import_unit", "exported_symbols", "load_unit"]


def _unit_module_name(file_path: Path) -> str:
    digest = hashlib.sha1(str(file_path).encode("utf-8")).hexdigest()[:12]
    stem = file_path.name.split(".")[0] or "unit"
    return f"modloader_unit_{stem}_{digest}"


def import_unit(file_path: str | Path) -> ModuleType:
    """Import a file as Python source, whatever its suffix.

    The module is executed under a synthetic name and is not added to
    sys.modules, so every call re-executes the file. Source is compiled in
    memory; no bytecode cache is written next to the unit.

    Raises:
        LoadError: If the file is missing or raises while executing.
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise LoadError(path=str(file_path), reason="file does not exist")

    mod = ModuleType(_unit_module_name(file_path))
    mod.__file__ = str(file_path)
    try:
        code = compile(file_path.read_bytes(), str(file_path), "exec", dont_inherit=True)
        exec(code, vars(mod))
    except Exception as exc:
        raise LoadError(
            path=str(file_path),
            reason=f"{type(exc).__name__}: {exc}",
            cause=exc,
        ) from exc
    return mod


def _defined_here(mod: ModuleType, value: Any) -> bool:
    if not (inspect.isclass(value) or inspect.isroutine(value)):
        return True
    return getattr(value, "__module__", None) == mod.__name__


def exported_symbols(mod: ModuleType) -> dict[str, Any]:
    """Return the public symbol table of a loaded module.

    Honours ``__all__`` when present; otherwise every non-underscore name in
    definition order, skipping imported modules and classes or functions
    defined elsewhere.
    """
    namespace = vars(mod)
    declared = namespace.get("__all__")
    if declared is not None:
        return {name: namespace[name] for name in declared if name in namespace}
    return {
        name: value
        for name, value in namespace.items()
        if not name.startswith("_") and not inspect.ismodule(value) and _defined_here(mod, value)
    }


async def load_unit(file_path: str | Path) -> dict[str, Any]:
    """Load one unit file in a worker thread and return its exported symbols."""
    file_path = Path(file_path)
    logger.debug("Loading unit %s", file_path)
    mod = await asyncio.to_thread(import_unit, file_path)
    return exported_symbols(mod)
