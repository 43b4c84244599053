"""Request/response transaction engine for line-based AT command modules.

CommandInterface owns one serial connection. A framer thread turns the
incoming byte stream into lines on a bounded output queue; a writer thread
drains a bounded outgoing queue onto the port. transact() sends one command
and reads lines until a success token, an error token or a timeout.
"""

from typing import Callable, List, Optional, Tuple
import queue
import threading
import time

from iotmodem.config.config_models import LogLevel
from iotmodem.core.command_response import CommandResponse, ResponseStatus, Transcript
from iotmodem.core.exceptions import (
    ATCommandError,
    ConfigurationError,
    ResponseTimeoutError,
    SerialPortError,
    TransactionInProgressError,
    TransportError,
)
from iotmodem.core.framer import CRLF, FramerWorker, LineFramer
from iotmodem.core.serial_handler import SerialHandler
from iotmodem.core.writer import WriterWorker
from iotmodem.logging.communication_logger import CommunicationLogger

DEFAULT_LINE_TIMEOUT = 5.0
DEFAULT_QUEUE_SIZE = 10

OK = "OK"
ERROR = "ERROR"

LineCallback = Callable[[str], None]


def _ignore_line(line: str) -> None:
    return None


class CommandInterface:
    """Transaction engine for one physical connection to a module.

    The success tokens, error tokens and delimiters start as {"OK"},
    {"ERROR"} and {"\\r\\n"}. Device adapters may widen them before
    start(); they can never be narrowed, and changing them once started
    raises ConfigurationError.

    At most one transaction runs at a time. Calls from several threads are
    serialized; calling transact() from inside a line callback raises
    TransactionInProgressError.

    Example:
        >>> cmd = CommandInterface('/dev/ttyUSB0', baud_rate=115200)
        >>> cmd.add_success_token("SEND OK")
        >>> cmd.start()
        >>> imsi = []
        >>> cmd.transact("AT+CIMI", imsi.append)
        >>> imsi
        ['204080813324647']
        >>> cmd.close()
    """

    def __init__(self,
                 port: str,
                 baud_rate: int = 115200,
                 line_timeout: float = DEFAULT_LINE_TIMEOUT,
                 queue_size: int = DEFAULT_QUEUE_SIZE,
                 read_timeout: float = 0.1,
                 logger: Optional[CommunicationLogger] = None,
                 transport: Optional[SerialHandler] = None):
        """Initialize the interface; nothing is opened until start().

        Args:
            port: Serial port device path
            baud_rate: Baud rate (default 115200)
            line_timeout: Seconds to wait for each response line (default 5.0)
            queue_size: Capacity of the output and outgoing queues (default 10)
            read_timeout: Seconds a single transport read may block (default 0.1)
            logger: Transcript sink (default: console CommunicationLogger)
            transport: Pre-built transport; a SerialHandler is created if omitted
        """
        if line_timeout <= 0:
            raise ConfigurationError(f"line_timeout must be positive, got {line_timeout}")
        if queue_size < 1:
            raise ConfigurationError(f"queue_size must be at least 1, got {queue_size}")

        self.port = port
        self.baud_rate = baud_rate
        self.line_timeout = line_timeout
        self.logger = logger or CommunicationLogger(log_level=LogLevel.INFO)
        self.transport = transport or SerialHandler(
            port, baud_rate=baud_rate, timeout=read_timeout, logger=self.logger
        )

        self._successes: List[str] = [OK]
        self._errors: List[str] = [ERROR]
        self._delimiters: List[str] = [CRLF]
        self._debug = False

        self._output: 'queue.Queue[str]' = queue.Queue(maxsize=queue_size)
        self._outgoing: 'queue.Queue[str]' = queue.Queue(maxsize=queue_size)
        self._framer_worker: Optional[FramerWorker] = None
        self._writer_worker: Optional[WriterWorker] = None

        self._state_lock = threading.Lock()
        self._started = False
        self._closed = False
        self._fatal_error: Optional[SerialPortError] = None

        self._transact_lock = threading.Lock()
        self._transact_owner: Optional[int] = None

    # Classification and framing configuration

    def add_success_token(self, token: str) -> None:
        """Recognize an extra line (e.g. "SEND OK") as successful completion."""
        self._extend(self._successes, token, "success token")

    def add_error_token(self, token: str) -> None:
        """Recognize an extra line (e.g. "SEND FAIL") as a device error."""
        self._extend(self._errors, token, "error token")

    def add_delimiter(self, delimiter: str) -> None:
        """Split lines on an extra sequence, e.g. the ">" payload prompt."""
        self._extend(self._delimiters, delimiter, "delimiter")

    def _extend(self, target: List[str], value: str, kind: str) -> None:
        with self._state_lock:
            if self._started:
                raise ConfigurationError(f"cannot add {kind} {value!r} after start()")
            if not value:
                raise ConfigurationError(f"{kind} must not be empty")
            if value not in target:
                target.append(value)

    @property
    def success_tokens(self) -> Tuple[str, ...]:
        return tuple(self._successes)

    @property
    def error_tokens(self) -> Tuple[str, ...]:
        return tuple(self._errors)

    @property
    def delimiters(self) -> Tuple[str, ...]:
        return tuple(self._delimiters)

    def set_debug(self, enabled: bool) -> None:
        """Log every transcript, not only the ones ending in an error token."""
        self._debug = bool(enabled)

    @property
    def debug(self) -> bool:
        return self._debug

    # Lifecycle

    def start(self) -> None:
        """Open the transport and launch the framer and writer threads.

        Raises:
            SerialPortError: The port could not be opened
            TransportError: The interface was already closed
        """
        with self._state_lock:
            if self._closed:
                raise TransportError("Cannot restart a closed interface", self.port)
            if self._started:
                return

            self.transport.open()

            framer = LineFramer(self._delimiters)
            self._framer_worker = FramerWorker(self.transport, framer, self._output, self._on_fatal)
            self._writer_worker = WriterWorker(self.transport, self._outgoing, self._on_fatal)
            self._framer_worker.start()
            self._writer_worker.start()
            self._started = True

    def close(self, join_timeout: float = 1.0) -> None:
        """Stop both threads and release the transport. Idempotent.

        A transaction in flight is not interrupted; it fails on its next
        read with a timeout or transport error.
        """
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
            workers = [w for w in (self._framer_worker, self._writer_worker) if w is not None]

        for worker in workers:
            worker.stop()
        self.transport.close()
        for worker in workers:
            if worker is not threading.current_thread():
                worker.join(timeout=join_timeout)

    @property
    def is_running(self) -> bool:
        return self._started and not self._closed and self._fatal_error is None

    @property
    def fatal_error(self) -> Optional[SerialPortError]:
        """Transport failure that terminated a background thread, if any."""
        return self._fatal_error

    def _on_fatal(self, error: Exception) -> None:
        with self._state_lock:
            if self._fatal_error is None:
                self._fatal_error = error if isinstance(error, SerialPortError) else \
                    SerialPortError(str(error), self.port, error)
        self.logger.log_error(
            source="CommandInterface",
            error=f"{threading.current_thread().name} terminated: {error}",
            details={"port": self.port, "error_type": type(error).__name__}
        )

    def _ensure_running(self) -> None:
        if self._fatal_error is not None:
            raise TransportError(
                "Transport failed, no further commands possible", self.port, self._fatal_error
            )
        if not self._started:
            raise TransportError("Interface not started", self.port)
        if self._closed:
            raise TransportError("Interface is closed", self.port)

    # Sending and transactions

    def send_raw(self, line: str) -> None:
        """Queue a line (CRLF appended) without waiting for any response.

        Used for payload continuation after a prompt delimiter.

        Raises:
            TransportError: Interface not running, or the writer is stalled
        """
        self._ensure_running()
        try:
            self._outgoing.put(line + CRLF, timeout=self.line_timeout)
        except queue.Full:
            raise TransportError(
                f"Outgoing queue full for {self.line_timeout:.1f}s", self.port
            ) from None

    def consume_output(self, line: str) -> None:
        """Hook seen by every line that is not a terminal token.

        Drained lines and lines passed to the caller's callback both go
        through here; unsolicited result codes can be handled by overriding it.
        """
        if self._debug:
            self.logger.log_consumed(self.port, line)

    def drain_output(self) -> int:
        """Discard every stale line; returns how many were dropped.

        Covers lines the framer thread has already framed but could not yet
        queue because the output queue was full.
        """
        drained = 0
        while True:
            try:
                line = self._output.get_nowait()
            except queue.Empty:
                if not self._framer_holds_lines():
                    return drained
                try:
                    line = self._output.get(timeout=0.01)
                except queue.Empty:
                    continue
            self.consume_output(line)
            drained += 1

    def _framer_holds_lines(self) -> bool:
        worker = self._framer_worker
        return worker is not None and worker.is_alive() and worker.held_lines > 0

    def transact(self,
                 command: str,
                 on_line: Optional[LineCallback] = None,
                 timeout: Optional[float] = None) -> CommandResponse:
        """Send a command and read its response up to the terminal token.

        Stale queued lines are drained first. Every line that is neither a
        success nor an error token is passed to on_line; if on_line raises,
        the transaction is aborted and the exception propagates unchanged.

        Args:
            command: Command text, without line terminator
            on_line: Callback for each non-terminal line (optional)
            timeout: Per-line timeout override in seconds (optional)

        Returns:
            CommandResponse with the non-terminal lines and the success token

        Raises:
            ATCommandError: An error token ended the transaction
            ResponseTimeoutError: No line arrived within the timeout
            ConfigurationError: timeout is not positive
            TransportError: Interface not running
            TransactionInProgressError: Called from inside a running transaction
        """
        if timeout is not None and timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {timeout}")

        me = threading.get_ident()
        if self._transact_owner == me:
            raise TransactionInProgressError(
                f"transact({command!r}) called while a transaction is in flight on {self.port}"
            )

        with self._transact_lock:
            self._transact_owner = me
            try:
                return self._run_transaction(
                    command,
                    on_line or _ignore_line,
                    self.line_timeout if timeout is None else timeout
                )
            finally:
                self._transact_owner = None

    def _run_transaction(self, command: str, on_line: LineCallback, timeout: float) -> CommandResponse:
        self._ensure_running()
        self.drain_output()

        transcript = Transcript()
        lines: List[str] = []
        start_time = time.monotonic()

        self.send_raw(command)
        transcript.sent(command)

        while True:
            try:
                line = self._output.get(timeout=timeout)
            except queue.Empty:
                elapsed = time.monotonic() - start_time
                if self._fatal_error is not None:
                    self._emit(command, transcript, ResponseStatus.ERROR, "ERROR", elapsed,
                               str(self._fatal_error))
                    self._ensure_running()
                if self._debug:
                    self._emit(command, transcript, ResponseStatus.TIMEOUT, "WARNING", elapsed)
                raise ResponseTimeoutError("Read timed out", command, timeout) from None

            transcript.received(line)

            if line in self._errors:
                elapsed = time.monotonic() - start_time
                self._emit(command, transcript, ResponseStatus.ERROR, "ERROR", elapsed)
                raise ATCommandError(f"Device returned {line}", command, line, transcript.lines())

            if line in self._successes:
                elapsed = time.monotonic() - start_time
                if self._debug:
                    self._emit(command, transcript, ResponseStatus.SUCCESS, "INFO", elapsed)
                return CommandResponse(
                    command=command,
                    lines=lines,
                    terminator=line,
                    execution_time=elapsed
                )

            self.consume_output(line)
            try:
                on_line(line)
            except Exception as e:
                if self._debug:
                    self._emit(command, transcript, ResponseStatus.ABORTED, "WARNING",
                               time.monotonic() - start_time, str(e))
                raise
            lines.append(line)

    def _emit(self, command: str, transcript: Transcript, status: ResponseStatus,
              level: str, elapsed: float, error: Optional[str] = None) -> None:
        self.logger.log_transcript(
            port=self.port,
            command=command,
            transcript=transcript.format(),
            status=status.value,
            level=level,
            execution_time=elapsed,
            error=error
        )

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        status = "running" if self.is_running else ("closed" if self._closed else "idle")
        return (f"CommandInterface(port='{self.port}', baud={self.baud_rate}, "
                f"timeout={self.line_timeout}s, status={status})")
