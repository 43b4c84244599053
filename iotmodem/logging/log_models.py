"""Log data model for communication logging.

Defines the immutable LogEntry written by CommunicationLogger for
transaction transcripts, port events and worker errors.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, Any, Optional
import json


@dataclass(frozen=True)
class LogEntry:
    """Immutable log entry.

    Attributes:
        timestamp: When the event occurred
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        source: Component name (CommandInterface, SerialHandler, ...)
        message: Human-readable message; one transcript line per entry
        details: Additional structured data (optional)
        port: Serial port name (optional)
        command: Command of the transaction the entry belongs to (optional)
        status: Transaction outcome (success, error, timeout, aborted) (optional)
        execution_time: Transaction duration in seconds (optional)
        error: Error message if applicable (optional)

    Example:
        >>> entry = LogEntry(
        ...     timestamp=datetime(2025, 1, 12, 10, 30, 15, 234000),
        ...     level="ERROR",
        ...     source="CommandInterface",
        ...     message="[ 1]  < ERROR",
        ...     command="AT+CIMI",
        ...     status="error",
        ... )
        >>> entry.to_string()
        '2025-01-12 10:30:15.234 | ERROR   | CommandInterface | [ 1]  < ERROR | CMD: AT+CIMI | STATUS: error'
    """

    timestamp: datetime
    level: str
    source: str
    message: str
    details: Optional[Dict[str, Any]] = None
    port: Optional[str] = None
    command: Optional[str] = None
    status: Optional[str] = None
    execution_time: Optional[float] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data

    def to_string(self) -> str:
        """Format as 'YYYY-MM-DD HH:MM:SS.mmm | LEVEL | SOURCE | MESSAGE [| extras]'."""
        timestamp_str = self.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        base = f"{timestamp_str} | {self.level:7} | {self.source:15} | {self.message}"

        if self.command:
            base += f" | CMD: {self.command}"
        if self.status:
            base += f" | STATUS: {self.status}"
        if self.execution_time is not None:
            base += f" | TIME: {self.execution_time:.3f}s"
        if self.error:
            base += f" | ERROR: {self.error}"

        return base

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LogEntry':
        """Create LogEntry from a dictionary produced by to_dict()."""
        timestamp = data['timestamp']
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)

        return cls(
            timestamp=timestamp,
            level=data['level'],
            source=data['source'],
            message=data['message'],
            details=data.get('details'),
            port=data.get('port'),
            command=data.get('command'),
            status=data.get('status'),
            execution_time=data.get('execution_time'),
            error=data.get('error')
        )

    @classmethod
    def from_json(cls, json_str: str) -> 'LogEntry':
        return cls.from_dict(json.loads(json_str))
