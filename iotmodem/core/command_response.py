"""Transaction result and transcript models.

This module defines the ResponseStatus enum, the mutable Transcript that
accumulates a transaction's exchanged lines, and the immutable
CommandResponse returned by a successful transaction.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple
import time


class ResponseStatus(Enum):
    """Outcome of a transaction.

    - SUCCESS: a success token ended the transaction
    - ERROR: an error token ended the transaction
    - TIMEOUT: no line arrived within the line timeout
    - ABORTED: the per-line callback raised
    """
    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"
    ABORTED = "aborted"


class Transcript:
    """Ordered record of the lines sent and received in one transaction.

    Example:
        >>> transcript = Transcript()
        >>> transcript.sent("AT+CIMI")
        >>> transcript.received("204080813324647")
        >>> transcript.received("OK")
        >>> transcript.format()
        ['[ 0]  > AT+CIMI', '[ 1]  < 204080813324647', '[ 2]  < OK']
    """

    SENT = ">"
    RECEIVED = "<"

    def __init__(self):
        self._entries: List[Tuple[str, str]] = []

    def sent(self, line: str) -> None:
        self._entries.append((self.SENT, line))

    def received(self, line: str) -> None:
        self._entries.append((self.RECEIVED, line))

    @property
    def entries(self) -> List[Tuple[str, str]]:
        """(direction, line) pairs in exchange order."""
        return list(self._entries)

    def lines(self) -> List[str]:
        """Tagged lines without numbering, e.g. ' > AT' and ' < OK'."""
        return [f" {direction} {line}" for direction, line in self._entries]

    def format(self) -> List[str]:
        """Numbered tagged lines, ready for the log sink."""
        return [f"[{n:2d}] {line}" for n, line in enumerate(self.lines())]

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class CommandResponse:
    """Immutable result of a successful transaction.

    Attributes:
        command: Command string sent (e.g., "AT+CIMI")
        lines: Non-terminal lines received, in arrival order
        terminator: Success token that ended the transaction (e.g., "OK")
        execution_time: Seconds from send to terminal token
        timestamp: Unix timestamp when the response was created
    """

    command: str
    lines: List[str]
    terminator: str
    execution_time: float
    status: ResponseStatus = ResponseStatus.SUCCESS
    timestamp: float = field(default_factory=time.time)

    def get_response_text(self) -> str:
        """Join non-terminal lines into a single string.

        Example:
            >>> response = CommandResponse(
            ...     command="AT+CGMI",
            ...     lines=["Quectel"],
            ...     terminator="OK",
            ...     execution_time=0.15
            ... )
            >>> response.get_response_text()
            'Quectel'
        """
        return '\n'.join(self.lines)

    def is_successful(self) -> bool:
        return self.status == ResponseStatus.SUCCESS

    def __str__(self) -> str:
        return (f"[{self.status.value}] {self.command} -> {len(self.lines)} lines, "
                f"{self.terminator} ({self.execution_time:.3f}s)")
