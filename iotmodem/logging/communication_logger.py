"""Communication logger: the sink for transaction transcripts.

CommunicationLogger fans LogEntry records out to the console (stderr), an
optional size-rotated file, and an in-memory ring buffer of recent entries.
CommandInterface writes transcripts through it; SerialHandler writes port
events and errors.
"""

from datetime import datetime
from collections import deque
from threading import Lock
from typing import Optional, List, Dict, Any, Sequence
import sys

from iotmodem.logging.log_models import LogEntry
from iotmodem.logging.file_handler import FileHandler
from iotmodem.config.config_models import LogLevel


class CommunicationLogger:
    """Central coordinator for communication logging.

    Attributes:
        log_level: Current log level name (DEBUG, INFO, WARNING, ERROR)
        enable_file: Whether file logging is enabled
        enable_console: Whether console logging is enabled
        log_file_path: Path to log file (if file logging enabled)

    Example:
        >>> logger = CommunicationLogger(log_level=LogLevel.INFO, enable_console=True)
        >>> logger.log_transcript(
        ...     port="/dev/ttyUSB0",
        ...     command="AT+CIMI",
        ...     transcript=["[ 0]  > AT+CIMI", "[ 1]  < ERROR"],
        ...     status="error",
        ...     level="ERROR",
        ... )
        >>> logger.close()
    """

    _LEVEL_PRIORITY = {
        "DEBUG": 0,
        "INFO": 1,
        "WARNING": 2,
        "ERROR": 3
    }

    def __init__(
        self,
        log_level: LogLevel = LogLevel.INFO,
        enable_file: bool = False,
        enable_console: bool = True,
        log_file_path: Optional[str] = None,
        max_file_size_mb: int = 10,
        backup_count: int = 5,
        buffer_size: int = 1000
    ):
        """Initialize CommunicationLogger with output destinations and log level.

        Raises:
            ValueError: If enable_file=True but log_file_path is None
        """
        self.log_level = log_level.value if isinstance(log_level, LogLevel) else log_level
        self.enable_file = enable_file
        self.enable_console = enable_console
        self.log_file_path = log_file_path

        self._lock = Lock()
        self._buffer: deque = deque(maxlen=buffer_size)

        self._file_handler: Optional[FileHandler] = None
        if self.enable_file:
            if not log_file_path:
                raise ValueError("log_file_path required when enable_file=True")
            try:
                self._file_handler = FileHandler(
                    log_file_path=log_file_path,
                    max_size_mb=max_file_size_mb,
                    backup_count=backup_count
                )
            except OSError as e:
                print(f"WARNING: Failed to initialize file logging: {e}", file=sys.stderr)

    def log(self, entry: LogEntry) -> None:
        """Write an entry to every enabled destination, after level filtering."""
        if not self._should_log(entry.level):
            return

        with self._lock:
            self._buffer.append(entry)
            if self._file_handler:
                self._file_handler.write(entry)
            if self.enable_console:
                print(entry.to_string(), file=sys.stderr)

    def _should_log(self, entry_level: str) -> bool:
        entry_priority = self._LEVEL_PRIORITY.get(entry_level, 0)
        current_priority = self._LEVEL_PRIORITY.get(self.log_level, 0)
        return entry_priority >= current_priority

    def log_transcript(
        self,
        port: str,
        command: str,
        transcript: Sequence[str],
        status: str,
        level: str = "INFO",
        execution_time: Optional[float] = None,
        error: Optional[str] = None
    ) -> None:
        """Log every line of a transaction transcript as its own entry.

        Args:
            port: Serial port name
            command: Command that opened the transaction
            transcript: Numbered, tagged lines (see Transcript.format())
            status: Transaction outcome (success, error, timeout, aborted)
            level: Log level for all lines of this transcript
            execution_time: Transaction duration in seconds (optional)
            error: Error description for failed transactions (optional)
        """
        for line in transcript:
            self.log(LogEntry(
                timestamp=datetime.now(),
                level=level,
                source="CommandInterface",
                message=line,
                port=port,
                command=command,
                status=status,
                execution_time=execution_time,
                error=error
            ))

    def log_consumed(self, port: str, line: str) -> None:
        """Log a line consumed outside of the caller's callback."""
        self.log(LogEntry(
            timestamp=datetime.now(),
            level="INFO",
            source="CommandInterface",
            message=f"CONSUME '{line}'",
            port=port
        ))

    def log_port_event(
        self,
        event: str,
        port: str,
        details: Optional[Dict[str, Any]] = None,
        level: str = "INFO"
    ) -> None:
        """Log a serial port event such as 'Port opened' or 'Port closed'."""
        self.log(LogEntry(
            timestamp=datetime.now(),
            level=level,
            source="SerialHandler",
            message=event,
            port=port,
            details=details
        ))

    def log_error(
        self,
        source: str,
        error: str,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        self.log(LogEntry(
            timestamp=datetime.now(),
            level="ERROR",
            source=source,
            message="Error occurred",
            error=error,
            details=details
        ))

    def set_level(self, level: LogLevel) -> None:
        self.log_level = level.value if isinstance(level, LogLevel) else level

    def get_entries(self, limit: Optional[int] = None) -> List[LogEntry]:
        """Return buffered entries, oldest first; at most the last `limit`."""
        with self._lock:
            entries = list(self._buffer)
            if limit:
                entries = entries[-limit:]
            return entries

    def clear_buffer(self) -> None:
        with self._lock:
            self._buffer.clear()

    def flush(self) -> None:
        if self._file_handler:
            self._file_handler.flush()

    def close(self) -> None:
        """Close the file handler, flushing pending writes."""
        if self._file_handler:
            self._file_handler.close()
            self._file_handler = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
