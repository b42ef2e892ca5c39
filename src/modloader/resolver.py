"""Pattern resolver: turn a base path and glob patterns into unit file paths."""

from __future__ import annotations

import fnmatch
import logging
import os
import re
from pathlib import Path
from typing import Iterable

from modloader.errors import ResolutionError

logger = logging.getLogger(__name__)

__all__ = ["UNBOUNDED_DEPTH", "GlobPattern", "resolve_files"]

UNBOUNDED_DEPTH = -1

_SKIP_DIR_NAMES = {"__pycache__"}
_MAGIC_CHARS = frozenset("*?[")
_GLOBSTAR = "**"


class _Segment:
    """One path component of a glob pattern."""

    def __init__(self, text: str, literal: bool = False) -> None:
        self.text = text
        self.is_magic = not literal and any(c in _MAGIC_CHARS for c in text)
        self._regex = re.compile(fnmatch.translate(text)) if self.is_magic else None

    def matches(self, name: str) -> bool:
        if self._regex is None:
            return name == self.text
        # Wildcards never match hidden entries implicitly
        if name.startswith(".") and not self.text.startswith("."):
            return False
        return self._regex.match(name) is not None


class GlobPattern:
    """A glob pattern anchored at a base directory.

    ``**`` matches zero or more directory levels; every other component is
    matched with shell-style wildcards against exactly one path component.
    """

    def __init__(self, base: Path, spec: str) -> None:
        if not spec or not spec.strip():
            raise ResolutionError(base_path=str(base), reason="empty file pattern")
        if "\x00" in spec:
            raise ResolutionError(base_path=str(base), reason=f"malformed file pattern {spec!r}")

        self.spec = spec
        joined = Path(os.path.normpath(base / spec))
        # Components shared with base are literal directory names
        shared = 0
        for ours, theirs in zip(joined.parts, base.parts):
            if ours != theirs:
                break
            shared += 1
        try:
            self._segments: list[_Segment | None] = [
                _Segment(part, literal=True) for part in joined.parts[:shared]
            ]
            self._segments.extend(
                None if part == _GLOBSTAR else _Segment(part) for part in joined.parts[shared:]
            )
        except re.error as e:
            raise ResolutionError(
                base_path=str(base), reason=f"malformed file pattern {spec!r}: {e}", cause=e
            ) from e
        self.absolute = joined.as_posix()

    def matches(self, path: Path) -> bool:
        return self._match(path.parts, 0, 0)

    def _match(self, parts: tuple[str, ...], i: int, j: int) -> bool:
        segments = self._segments
        if i == len(segments):
            return j == len(parts)

        segment = segments[i]
        if segment is None:
            for k in range(j, len(parts) + 1):
                if k > j and parts[k - 1].startswith("."):
                    break
                if self._match(parts, i + 1, k):
                    return True
            return False

        if j == len(parts) or not segment.matches(parts[j]):
            return False
        return self._match(parts, i + 1, j + 1)

    def __repr__(self) -> str:
        return f"GlobPattern({self.absolute!r})"


def _as_list(specs: str | Iterable[str] | None) -> list[str]:
    if specs is None:
        return []
    if isinstance(specs, str):
        return [specs]
    return list(specs)


def resolve_files(
    base_path: str | Path,
    file_specs: str | Iterable[str],
    ignore_specs: str | Iterable[str] | None = None,
    depth: int = 0,
) -> list[Path]:
    """Find the regular files under base_path matching any of file_specs.

    Args:
        base_path: Directory the patterns are anchored at. Must exist.
        file_specs: One or more glob patterns, relative to base_path.
        ignore_specs: Glob patterns whose matches are dropped from the result.
        depth: Directory levels below base_path to traverse. 0 restricts the
            search to base_path itself; UNBOUNDED_DEPTH removes the limit.

    Returns:
        Absolute file paths in traversal order (directory entries visited by
        name, depth first), each listed once.

    Raises:
        ResolutionError: If base_path is missing or unreadable, or a pattern
            is malformed.
    """
    includes_raw = _as_list(file_specs)
    ignores_raw = _as_list(ignore_specs)
    if not includes_raw:
        raise ResolutionError(base_path=str(base_path), reason="no file patterns given")
    if depth < 0 and depth != UNBOUNDED_DEPTH:
        raise ResolutionError(base_path=str(base_path), reason=f"invalid depth {depth}")

    root = Path(base_path)
    if not root.exists():
        raise ResolutionError(base_path=str(root), reason="base path does not exist")
    if not root.is_dir():
        raise ResolutionError(base_path=str(root), reason="base path is not a directory")
    root = root.resolve()

    includes = [GlobPattern(root, spec) for spec in includes_raw]
    ignores = [GlobPattern(root, spec) for spec in ignores_raw]
    logger.info(
        "Module loader file specs: %s (ignore: %s, depth: %s)",
        [p.absolute for p in includes],
        [p.absolute for p in ignores],
        "unbounded" if depth == UNBOUNDED_DEPTH else depth,
    )

    results: list[Path] = []

    def _scan_dir(dir_path: Path, level: int) -> None:
        try:
            entries = sorted(os.scandir(dir_path), key=lambda e: e.name)
        except OSError as e:
            if level == 0:
                raise ResolutionError(
                    base_path=str(root), reason=f"cannot read directory: {e}", cause=e
                ) from e
            logger.error("Cannot read directory %s, skipping: %s", dir_path, e)
            return

        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file()
            except OSError as e:
                logger.error("OS error accessing %s: %s", entry.path, e)
                continue

            if is_dir:
                if entry.name in _SKIP_DIR_NAMES:
                    continue
                if depth == UNBOUNDED_DEPTH or level < depth:
                    _scan_dir(Path(entry.path), level + 1)
            elif is_file:
                entry_path = Path(entry.path)
                if not any(p.matches(entry_path) for p in includes):
                    continue
                if any(p.matches(entry_path) for p in ignores):
                    logger.debug("Ignoring %s", entry_path)
                    continue
                results.append(entry_path)

    _scan_dir(root, 0)
    logger.debug("Resolved %d file(s) under %s", len(results), root)
    return results
