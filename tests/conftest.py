"""Pytest configuration and fixtures for infra-sense tests."""
from __future__ import annotations

import logging
from typing import Any

import pytest
import structlog
from rich.logging import RichHandler

from infra_sense.config import DetectionSettings
from infra_sense.detection import detector as detector_module
from infra_sense.detection.base import SignalReader


class FakeSignalReader(SignalReader):
    """In-memory signal reader."""

    def __init__(
        self,
        env: dict[str, str] | None = None,
        paths: set[str] | None = None,
        files: dict[str, str] | None = None,
        dns: dict[str, list[str]] | None = None,
        unreadable: set[str] | None = None,
        settings: DetectionSettings | None = None,
    ) -> None:
        super().__init__(settings)
        self.env = env or {}
        self.files = files or {}
        self.paths = (paths or set()) | set(self.files)
        self.dns = dns or {}
        self.unreadable = unreadable or set()
        self.dns_queries: list[str] = []

    def read_env(self, name: str) -> str | None:
        return self.env.get(name)

    def path_exists(self, path: str) -> bool:
        return path in self.paths

    def read_text(self, path: str) -> str:
        if path in self.unreadable:
            raise PermissionError(f"Permission denied: '{path}'")
        if path not in self.files:
            raise FileNotFoundError(f"No such file or directory: '{path}'")
        return self.files[path]

    async def resolve_dns(self, hostname: str) -> list[str]:
        self.dns_queries.append(hostname)
        if hostname not in self.dns:
            raise OSError(f"Name or service not known: {hostname}")
        return self.dns[hostname]


class RecordingLogger:
    """Logger that keeps every event for assertions."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def _record(self, level: str, event: str, **kw: Any) -> None:
        self.events.append((level, event, kw))

    def debug(self, event: str, **kw: Any) -> None:
        self._record("debug", event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._record("info", event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._record("warning", event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._record("error", event, **kw)

    def at(self, level: str) -> list[tuple[str, dict[str, Any]]]:
        return [(event, kw) for lvl, event, kw in self.events if lvl == level]


@pytest.fixture
def logger():
    """A recording logger."""
    return RecordingLogger()


@pytest.fixture
def make_signals():
    """Factory for fake signal readers."""
    return FakeSignalReader


@pytest.fixture
def signals():
    """A signal reader with no evidence at all."""
    return FakeSignalReader()


@pytest.fixture(autouse=True)
def reset_global_state():
    """Isolate the process-wide detector and logging configuration."""
    detector_module._default_detector = None
    yield
    detector_module._default_detector = None
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, (RichHandler, logging.FileHandler)) or type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
            handler.close()
