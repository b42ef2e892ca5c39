"""Wildcard pattern matching for event topics."""

from __future__ import annotations

import fnmatch

__all__ = ["match_pattern"]


def match_pattern(pattern: str, topic: str) -> bool:
    """Match a topic against a shell-style subscription pattern.

    ``*`` spans dots, so ``"module_loader.*"`` matches every batch topic.
    Matching is case-sensitive on every platform.
    """
    if pattern == topic:
        return True
    return fnmatch.fnmatchcase(topic, pattern)
