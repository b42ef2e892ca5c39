"""Shared test fixtures for the loader test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from modloader.config import LoaderConfig
from modloader.events import EventChannel, set_default_channel


# === Unit file templates ===

FOO_UNIT = """\
class FooModule:
    description = "Foo"
"""

BAR_UNIT = """\
class BarModule:
    description = "Bar"


class BazThing:
    description = "Not a component"
"""

class RecordingSubscriber:
    """Subscriber that records every payload it receives."""

    def __init__(self) -> None:
        self.events: list[Any] = []

    def __call__(self, payload: Any) -> None:
        self.events.append(payload)


# === Fixtures ===


@pytest.fixture(autouse=True)
def _reset_default_channel():
    """Give every test a fresh process-wide channel."""
    set_default_channel(None)
    yield
    set_default_channel(None)


@pytest.fixture
def channel() -> EventChannel:
    """An isolated event channel."""
    return EventChannel(name="test")


@pytest.fixture
def recorder() -> RecordingSubscriber:
    return RecordingSubscriber()


@pytest.fixture
def write_unit(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a unit file below tmp_path and returning its path."""

    def factory(relative: str, source: str = "") -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source)
        return path

    return factory


@pytest.fixture
def units_dir(tmp_path: Path) -> Path:
    """Directory with a.unit (FooModule), b.unit (BarModule, BazThing) and c.txt."""
    units = tmp_path / "units"
    units.mkdir()
    (units / "a.unit").write_text(FOO_UNIT)
    (units / "b.unit").write_text(BAR_UNIT)
    (units / "c.txt").write_text("class IgnoredModule:\n    pass\n")
    return units


@pytest.fixture
def units_config(units_dir: Path) -> LoaderConfig:
    return LoaderConfig(name="units", base_path=units_dir, file_specs=["**/*.unit"])
