"""modloader - glob-driven component discovery with lifecycle events."""

from __future__ import annotations

# Core
from modloader.loader import LoadState, ModuleLoader, register
from modloader.types import ComponentHandle, LifecycleEvent, LoadBatch

# Discovery stages
from modloader.resolver import UNBOUNDED_DEPTH, resolve_files
from modloader.unit_loader import load_unit
from modloader.extractor import ComponentSpec, component, extract_components

# Events
from modloader.events import EventChannel, get_default_channel, set_default_channel
from modloader.notifier import TOPIC_PREFIX, WILDCARD_TOPIC, LifecycleNotifier
from modloader.observers import LoggingObserver

# Config
from modloader.config import Config, LoaderConfig, load_loader_configs

# Errors
from modloader.errors import (
    ConfigError,
    ConfigNotFoundError,
    ErrorCodes,
    ExtractionError,
    InvalidInputError,
    LoadError,
    LoaderError,
    ResolutionError,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "ModuleLoader",
    "LoadState",
    "register",
    "ComponentHandle",
    "LoadBatch",
    "LifecycleEvent",
    # Discovery stages
    "UNBOUNDED_DEPTH",
    "resolve_files",
    "load_unit",
    "extract_components",
    "component",
    "ComponentSpec",
    # Events
    "EventChannel",
    "get_default_channel",
    "set_default_channel",
    "LifecycleNotifier",
    "LoggingObserver",
    "TOPIC_PREFIX",
    "WILDCARD_TOPIC",
    # Config
    "Config",
    "LoaderConfig",
    "load_loader_configs",
    # Errors
    "ErrorCodes",
    "LoaderError",
    "ResolutionError",
    "LoadError",
    "ExtractionError",
    "ConfigError",
    "ConfigNotFoundError",
    "InvalidInputError",
]
