"""
Diagnostic broadcaster - fans each message out to observers, console and log file.
"""
from __future__ import annotations

import itertools
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, TextIO
import logging

from .app import APP_NAME, LOG_FILE_NAME, app_data_dir

logger = logging.getLogger(__name__)

Observer = Callable[[str], None]


class Severity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"
    VERBOSE = "verbose"


@dataclass(frozen=True)
class DiagnosticLine:
    severity: Severity
    text: str
    timestamp: datetime


class ObserverSink:
    """Callbacks registered per severity, identified by an integer token."""

    def __init__(self):
        self._observers: Dict[Severity, Dict[int, Observer]] = {severity: {} for severity in Severity}
        self._severity_by_token: Dict[int, Severity] = {}
        self._tokens = itertools.count(1)

    def register(self, severity: Severity, callback: Observer) -> int:
        token = next(self._tokens)
        self._observers[severity][token] = callback
        self._severity_by_token[token] = severity
        return token

    def unregister(self, token: int) -> bool:
        severity = self._severity_by_token.pop(token, None)
        if severity is None:
            return False
        del self._observers[severity][token]
        return True

    def count(self, severity: Severity) -> int:
        return len(self._observers[severity])

    def write(self, line: DiagnosticLine):
        # Snapshot so callbacks may unregister themselves mid-delivery
        callbacks = list(self._observers[line.severity].values())
        first_error: Optional[Exception] = None
        for callback in callbacks:
            try:
                callback(line.text)
            except Exception as e:
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error


class ConsoleSink:
    """Writes lines to a text stream (stdout unless one is injected)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    def write(self, line: DiagnosticLine):
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(line.text)
        stream.flush()


class LogFileSink:
    """Append-only transcript; the file is opened and closed on every write."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def truncate(self):
        self.path.write_text("", encoding="utf-8")

    def write(self, line: DiagnosticLine):
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line.text)


class DiagnosticBroadcaster:
    """Deliver one message to every sink with a single call.

    Sinks are invoked in a fixed order: observers registered for the
    message's severity, then the console, then the log file (once
    ``initialize_log`` has run). Verbose messages are dropped entirely
    unless ``verbose_enabled`` is true at the moment of the call.

    A failing sink does not stop delivery to the remaining sinks; the
    first error is re-raised after all of them have been tried.
    """

    def __init__(
        self,
        console: Optional[ConsoleSink] = None,
        observers: Optional[ObserverSink] = None,
        log_file: Optional[LogFileSink] = None,
        verbose: bool = False,
    ):
        self.observers = observers if observers is not None else ObserverSink()
        self.console = console if console is not None else ConsoleSink()
        self.log_file = log_file
        self.verbose_enabled = verbose

    @property
    def log_path(self) -> Optional[Path]:
        return self.log_file.path if self.log_file is not None else None

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def register(self, severity: Severity, callback: Observer) -> int:
        return self.observers.register(severity, callback)

    def unregister(self, token: int) -> bool:
        return self.observers.unregister(token)

    # ------------------------------------------------------------------
    # Emitting
    # ------------------------------------------------------------------

    def emit(self, severity: Severity, text: str) -> Optional[DiagnosticLine]:
        """Broadcast ``text`` (newline appended) to every sink.

        Returns the delivered line, or None when a verbose message was
        suppressed.
        """
        if severity is Severity.VERBOSE and not self.verbose_enabled:
            return None

        line = DiagnosticLine(severity=severity, text=text + "\n", timestamp=datetime.now())

        first_error: Optional[Exception] = None
        for sink in self._sinks():
            try:
                sink.write(line)
            except Exception as e:
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error
        return line

    def info(self, fmt: str = "", *args) -> Optional[DiagnosticLine]:
        return self.emit(Severity.INFO, _format(fmt, args))

    def warning(self, fmt: str, *args) -> Optional[DiagnosticLine]:
        return self.emit(Severity.WARNING, _format(fmt, args))

    def error(self, fmt: str, *args) -> Optional[DiagnosticLine]:
        return self.emit(Severity.ERROR, _format(fmt, args))

    def success(self, fmt: str, *args) -> Optional[DiagnosticLine]:
        return self.emit(Severity.SUCCESS, _format(fmt, args))

    def verbose(self, fmt: str, *args) -> Optional[DiagnosticLine]:
        return self.emit(Severity.VERBOSE, _format(fmt, args))

    # ------------------------------------------------------------------
    # Log file
    # ------------------------------------------------------------------

    def initialize_log(self, args: Sequence[str], directory: Optional[Path] = None) -> Path:
        """Create the log directory, truncate the log and write its header.

        Must run once, before any other message of the process. Errors
        creating the directory or the file propagate to the caller.
        """
        if self.log_file is not None:
            raise RuntimeError(f"Log already initialized at {self.log_file.path}")

        log_dir = Path(directory) if directory is not None else app_data_dir()
        log_dir.mkdir(parents=True, exist_ok=True)

        sink = LogFileSink(log_dir / LOG_FILE_NAME)
        sink.truncate()
        self.log_file = sink
        logger.info(f"Logging to {sink.path}")

        self.info(datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
        self.info("{0} {1}", APP_NAME, " ".join(args))
        self.info("Log path: {0}", sink.path)
        return sink.path

    def _sinks(self) -> List:
        sinks = [self.observers, self.console]
        if self.log_file is not None:
            sinks.append(self.log_file)
        return sinks


def _format(fmt: str, args: tuple) -> str:
    return fmt.format(*args) if args else fmt
