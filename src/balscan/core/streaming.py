"""Progress sinks for user-facing scan output.

Components that report progress (configuration loading, artifact downloads,
report generation) receive a StreamHandler explicitly instead of writing to
a global stream:
- CLI: print status lines to the console
- Callback: forward events to another system (tests, embedding tools)
- Null: discard everything
"""

from __future__ import annotations

import sys
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TextIO


class StreamType(str, Enum):
    """Type of progress output."""

    STATUS = "status"
    WARNING = "warning"


@dataclass
class StreamEvent:
    """A progress event emitted by one scan stage."""

    stage: str
    stream_type: StreamType
    content: str


class StreamHandler(ABC):
    """Abstract base class for progress sinks.

    Implementations must be thread-safe as providers may run concurrently.
    """

    @abstractmethod
    def emit(self, event: StreamEvent) -> None:
        """Emit a progress event.

        Args:
            event: The event to emit.
        """

    def status(self, stage: str, content: str) -> None:
        """Convenience wrapper emitting a STATUS event."""
        self.emit(StreamEvent(stage=stage, stream_type=StreamType.STATUS, content=content))

    def warning(self, stage: str, content: str) -> None:
        """Convenience wrapper emitting a WARNING event."""
        self.emit(StreamEvent(stage=stage, stream_type=StreamType.WARNING, content=content))


class NullStreamHandler(StreamHandler):
    """No-op handler used when progress output is not wanted."""

    def emit(self, event: StreamEvent) -> None:
        """No-op emit."""
        pass


class CLIStreamHandler(StreamHandler):
    """Thread-safe console handler.

    Status lines are printed as-is; warnings get a ``WARNING:`` prefix.
    """

    def __init__(self, output: TextIO = sys.stderr):
        """Initialize CLIStreamHandler.

        Args:
            output: Output stream to write to (default: stderr).
        """
        self._output = output
        self._lock = threading.Lock()

    def emit(self, event: StreamEvent) -> None:
        with self._lock:
            if event.stream_type == StreamType.WARNING:
                print(f"WARNING: {event.content}", file=self._output, flush=True)
            else:
                print(event.content, file=self._output, flush=True)


class CallbackStreamHandler(StreamHandler):
    """Handler that invokes a callback for every event."""

    def __init__(self, on_event: Optional[Callable[[StreamEvent], None]] = None):
        self._on_event = on_event
        self._lock = threading.Lock()

    def emit(self, event: StreamEvent) -> None:
        if self._on_event:
            with self._lock:
                self._on_event(event)
