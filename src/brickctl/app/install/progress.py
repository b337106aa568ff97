"""Progress reporting hooks for brick installation."""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from typing import IO, Iterator, Optional

from brickctl.settings import RuntimeSettings
from brickctl.utils.telemetry import record_structured_event


class ProgressReporter:
    """Silent reporter; subclasses observe start/success/failure of each step."""

    @contextmanager
    def step(self, message: str, *, done: Optional[str] = None) -> Iterator[None]:
        self.started(message)
        start = time.perf_counter()
        try:
            yield
        except BaseException as exc:
            self.failed(message, exc, (time.perf_counter() - start) * 1000)
            raise
        self.completed(done or message, (time.perf_counter() - start) * 1000)

    def started(self, message: str) -> None:
        pass

    def completed(self, message: str, duration_ms: float) -> None:
        pass

    def failed(self, message: str, error: BaseException, duration_ms: float) -> None:
        pass


class ConsoleProgressReporter(ProgressReporter):
    """Print progress markers and mirror them as telemetry events."""

    def __init__(self, settings: RuntimeSettings, *, stream: IO[str] | None = None) -> None:
        self._settings = settings
        self._stream = stream or sys.stderr

    def started(self, message: str) -> None:
        print(f"{message}...", file=self._stream)
        record_structured_event(
            self._settings,
            "install.step",
            status="start",
            component="install",
            payload={"message": message},
        )

    def completed(self, message: str, duration_ms: float) -> None:
        print(f"✓ {message} ({duration_ms:.0f}ms)", file=self._stream)
        record_structured_event(
            self._settings,
            "install.step",
            status="success",
            component="install",
            duration_ms=duration_ms,
            payload={"message": message},
        )

    def failed(self, message: str, error: BaseException, duration_ms: float) -> None:
        print(f"✗ {message}", file=self._stream)
        record_structured_event(
            self._settings,
            "install.step",
            status="error",
            level="error",
            component="install",
            duration_ms=duration_ms,
            payload={"message": message, "error": str(error)},
        )
