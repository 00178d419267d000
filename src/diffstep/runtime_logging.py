"""Structured JSONL runtime logging for diffstep.

Every record is one JSON object per line with a dotted ``event`` name such as
``diff.computed`` or ``navigator.step``. ``DIFFSTEP_LOG_LEVEL`` and
``DIFFSTEP_LOG_FILE`` are used when no explicit level or file is configured.
"""

from __future__ import annotations

import json
import os
import threading
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Iterator, Literal

from diffstep.paths import log_path

LogLevel = Literal["off", "error", "warning", "info", "debug"]

_LEVEL_VALUES: dict[str, int] = {
    "off": 100,
    "error": 40,
    "warning": 30,
    "info": 20,
    "debug": 10,
}

_LEVEL_ALIASES = {
    "warn": "warning",
    "none": "off",
    "disabled": "off",
    "0": "off",
}

_runtime_logger: "RuntimeLogger | None" = None


def parse_level(value: str | None, default: LogLevel = "warning") -> LogLevel:
    if not value:
        return default
    normalized = value.strip().lower()
    normalized = _LEVEL_ALIASES.get(normalized, normalized)
    if normalized not in _LEVEL_VALUES:
        return default
    return normalized  # type: ignore[return-value]


def resolve_log_file(path: str | Path | None) -> Path:
    if path is None:
        return log_path()
    return Path(path).expanduser().resolve()


class _EventMethods(ABC):
    __slots__ = ()

    @abstractmethod
    def log(self, level: str, event: str, **fields: Any) -> None: ...

    def debug(self, event: str, **fields: Any) -> None:
        self.log("debug", event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        self.log("info", event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self.log("warning", event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self.log("error", event, **fields)

    @contextmanager
    def timed(self, event: str, level: str = "debug", **fields: Any) -> Iterator[dict[str, Any]]:
        """Log ``event`` with ``elapsed_ms`` once the block finishes.

        The yielded dict collects fields only known after the work is done.
        Nothing is logged when the block raises.
        """
        extra: dict[str, Any] = {}
        started = time.perf_counter()
        yield extra
        elapsed_ms = round((time.perf_counter() - started) * 1000, 3)
        self.log(level, event, **{**fields, **extra, "elapsed_ms": elapsed_ms})

    def bind(self, **fields: Any) -> BoundLogger:
        return BoundLogger(parent=self, fields=fields)


@dataclass(slots=True)
class RuntimeLogger(_EventMethods):
    level: LogLevel
    sink_path: Path
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def enabled(self, level: str) -> bool:
        current = _LEVEL_VALUES.get(self.level, _LEVEL_VALUES["warning"])
        incoming = _LEVEL_VALUES.get(level, _LEVEL_VALUES["debug"])
        return incoming >= current and current < _LEVEL_VALUES["off"]

    def log(self, level: str, event: str, **fields: Any) -> None:
        if not self.enabled(level):
            return
        payload = {
            "ts": datetime.now(UTC).isoformat(),
            "level": level,
            "event": event,
            "pid": os.getpid(),
            **fields,
        }
        line = json.dumps(payload, sort_keys=True, default=str)
        with self._lock:
            self.sink_path.parent.mkdir(parents=True, exist_ok=True)
            with self.sink_path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")


@dataclass(slots=True)
class BoundLogger(_EventMethods):
    """Adds fixed context fields to every event of a parent logger."""

    parent: _EventMethods
    fields: dict[str, Any]

    def log(self, level: str, event: str, **fields: Any) -> None:
        self.parent.log(level, event, **{**self.fields, **fields})


class _DisabledLogger(RuntimeLogger):
    def __init__(self) -> None:
        super().__init__(level="off", sink_path=Path(os.devnull))

    def log(self, level: str, event: str, **fields: Any) -> None:  # noqa: ARG002
        return


def configure_runtime_logging(
    *,
    level: str | None = None,
    log_file: str | Path | None = None,
) -> RuntimeLogger:
    global _runtime_logger

    effective_level = parse_level(level or os.getenv("DIFFSTEP_LOG_LEVEL"), default="warning")
    if effective_level == "off":
        _runtime_logger = _DisabledLogger()
        return _runtime_logger

    effective_file = resolve_log_file(log_file or os.getenv("DIFFSTEP_LOG_FILE"))
    _runtime_logger = RuntimeLogger(level=effective_level, sink_path=effective_file)
    _runtime_logger.info(
        "logging.configured",
        configured_level=effective_level,
        sink_path=str(effective_file),
    )
    return _runtime_logger


def get_runtime_logger() -> RuntimeLogger:
    global _runtime_logger
    if _runtime_logger is None:
        _runtime_logger = configure_runtime_logging()
    return _runtime_logger


def read_events(
    path: str | Path,
    *,
    limit: int | None = None,
    prefix: str | None = None,
) -> list[dict[str, Any]]:
    """Parse a JSONL log, keeping the last ``limit`` events whose name starts with ``prefix``.

    Lines that are not JSON objects are skipped.
    """
    events: list[dict[str, Any]] = []
    text = Path(path).read_text(encoding="utf-8", errors="replace")
    for line in text.splitlines():
        try:
            payload = json.loads(line)
        except json.JSONDecodeError:
            continue
        if not isinstance(payload, dict):
            continue
        if prefix and not str(payload.get("event", "")).startswith(prefix):
            continue
        events.append(payload)
    if limit is not None:
        events = events[-limit:] if limit > 0 else []
    return events
