"""Diagnostic events for vocabulary dropped while strictifying a schema.

Sinks are injected per call rather than held globally, so concurrent
conversions of different schemas never interleave their reports.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol

__all__ = [
    "DiagnosticCollector",
    "DiagnosticSink",
    "DroppedKey",
    "LoggingSink",
    "default_sink",
    "discard",
]


@dataclass(frozen=True)
class DroppedKey:
    """One keyword removed from the schema node at ``path``."""

    path: str
    key: str

    def __str__(self) -> str:
        return f"{self.path}: {self.key}"


class DiagnosticSink(Protocol):
    def __call__(self, event: DroppedKey) -> None: ...


class DiagnosticCollector:
    """Append-only sink that keeps every event for later inspection."""

    def __init__(self) -> None:
        self.events: list[DroppedKey] = []

    def __call__(self, event: DroppedKey) -> None:
        self.events.append(event)

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self) -> Iterator[DroppedKey]:
        return iter(self.events)

    def __bool__(self) -> bool:
        return bool(self.events)

    def keys_at(self, path: str) -> list[str]:
        """Keys dropped at exactly ``path``, in the order they were reported."""
        return [event.key for event in self.events if event.path == path]

    def paths(self) -> list[str]:
        seen: dict[str, None] = {}
        for event in self.events:
            seen.setdefault(event.path, None)
        return list(seen)


class LoggingSink:
    """Sink that logs each dropped key as a warning."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.WARNING) -> None:
        self.logger = logger or logging.getLogger("strictify.schema.strict")
        self.level = level

    def __call__(self, event: DroppedKey) -> None:
        self.logger.log(self.level, "Sanitizing JSON dropped key at %s: %s", event.path, event.key)


def discard(event: DroppedKey) -> None:
    """Sink that ignores every event."""


def default_sink() -> DiagnosticSink:
    """Sink used when the caller does not inject one."""
    from strictify.settings import settings

    if settings.warn_dropped_keys:
        return LoggingSink()
    return discard
