"""Append-only diagnostic log shared by the core components.

Recoverable problems (unreadable files, unenumerable directories, binary
content) never abort a traversal. They are recorded here instead, and every
entry is mirrored to the standard logging hierarchy so that command-line
users see the same messages on stderr.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostic:
    """A single diagnostic entry.

    Attributes:
        level: A logging level such as logging.WARNING.
        message: Human-readable description.
        path: Path the diagnostic is about, if any.
        timestamp: When the entry was recorded.
    """

    level: int
    message: str
    path: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self) -> str:
        """Render the entry as a single log line.

        Example:
            >>> entry = Diagnostic(logging.INFO, "Token calculation complete.", timestamp=datetime(2025, 7, 5, 9, 3))
            >>> entry.format()
            '[09:03:00] Token calculation complete.'
        """
        return f"[{self.timestamp:%H:%M:%S}] {self.message}"


class DiagnosticLog:
    """Thread-safe, append-only collection of diagnostics.

    Entries can only be appended or read; clearing is not supported so that a
    log handed to several components always shows the full history of a session.

    Example:
        >>> log = DiagnosticLog()
        >>> log.warning("Could not read notes.txt", path="notes.txt")
        >>> len(log)
        1
        >>> log.entries[0].path
        'notes.txt'
    """

    def __init__(self, logger_name: Optional[str] = None) -> None:
        self._entries: List[Diagnostic] = []
        self._lock = threading.Lock()
        self._logger = logging.getLogger(logger_name) if logger_name else logger

    def record(self, level: int, message: str, path: Optional[str] = None) -> Diagnostic:
        """Append an entry and forward it to the logger.

        Args:
            level: Logging level of the entry.
            message: Human-readable description.
            path: Path the entry is about, if any.

        Returns:
            The recorded entry.
        """
        entry = Diagnostic(level, message, path)
        with self._lock:
            self._entries.append(entry)
        self._logger.log(level, message)
        return entry

    def debug(self, message: str, path: Optional[str] = None) -> None:
        self.record(logging.DEBUG, message, path)

    def info(self, message: str, path: Optional[str] = None) -> None:
        self.record(logging.INFO, message, path)

    def warning(self, message: str, path: Optional[str] = None) -> None:
        self.record(logging.WARNING, message, path)

    def error(self, message: str, path: Optional[str] = None) -> None:
        self.record(logging.ERROR, message, path)

    @property
    def entries(self) -> List[Diagnostic]:
        """A copy of all entries, oldest first."""
        with self._lock:
            return list(self._entries)

    def at_least(self, level: int) -> List[Diagnostic]:
        """Return the entries at or above the given level."""
        return [entry for entry in self.entries if entry.level >= level]

    def render(self) -> str:
        """Render the whole log, one formatted line per entry."""
        return "".join(entry.format() + "\n" for entry in self.entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)
