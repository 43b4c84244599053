"""Custom exception hierarchy for iotmodem.

This module defines the errors raised by the transaction engine and the
device adapters built on top of it. Every error carries enough context
(port, command, transcript) to diagnose a failed exchange with a module.
"""

from typing import List, Optional


class IoTModemError(Exception):
    """Base exception for all iotmodem errors.

    All custom exceptions inherit from this base class to allow
    catching all library errors with a single except clause.
    """
    pass


class SerialPortError(IoTModemError):
    """Serial port communication error.

    Raised when the physical link fails (open, read, write). Errors of this
    family are fatal to the owning CommandInterface; there is no automatic
    reconnection.

    Attributes:
        port: Serial port identifier (e.g., '/dev/ttyUSB0', 'COM3')
        os_error: Original exception from pyserial or OS (if available)
    """

    def __init__(self, message: str, port: str, os_error: Optional[Exception] = None):
        """Initialize SerialPortError.

        Args:
            message: Human-readable error description
            port: Serial port identifier
            os_error: Original exception from pyserial/OS
        """
        super().__init__(message)
        self.port = port
        self.os_error = os_error

    def __str__(self) -> str:
        """Format error message with port context."""
        base_msg = super().__str__()
        if self.os_error:
            return f"{base_msg} (port: {self.port}, cause: {self.os_error})"
        return f"{base_msg} (port: {self.port})"


class SerialPortBusyError(SerialPortError):
    """Port is already in use by another process."""
    pass


class ConnectionTimeoutError(SerialPortError):
    """Opening the serial port timed out."""
    pass


class TransportError(SerialPortError):
    """The reader or writer task of a CommandInterface is not usable.

    Raised when a background task died on a transport failure, or when a
    command is issued before start() or after close().
    """
    pass


class ATCommandError(IoTModemError):
    """The module answered a command with a recognized error token.

    Attributes:
        command: Command string that was rejected
        token: Error token that terminated the transaction (e.g. 'ERROR')
        transcript: Tagged lines exchanged during the transaction
    """

    def __init__(self, message: str, command: str, token: str,
                 transcript: Optional[List[str]] = None):
        super().__init__(message)
        self.command = command
        self.token = token
        self.transcript = list(transcript or [])

    def __str__(self) -> str:
        """Format error message with command context."""
        base_msg = super().__str__()
        return f"{base_msg} (command: {self.command}, token: {self.token})"


class ResponseTimeoutError(IoTModemError):
    """No terminal token arrived within the line timeout.

    Kept distinct from ATCommandError so callers can decide to retry.

    Attributes:
        command: Command string that timed out
        timeout: Line timeout in seconds that elapsed
    """

    def __init__(self, message: str, command: str, timeout: float):
        super().__init__(message)
        self.command = command
        self.timeout = timeout

    def __str__(self) -> str:
        base_msg = super().__str__()
        return f"{base_msg} (command: {self.command}, timeout: {self.timeout:.3f}s)"


class ResponseParseError(IoTModemError):
    """A response line could not be parsed by a per-line callback.

    Attributes:
        line: Offending response line (if available)
    """

    def __init__(self, message: str, line: Optional[str] = None):
        super().__init__(message)
        self.line = line

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.line is not None:
            return f"{base_msg} (line: {self.line!r})"
        return base_msg


class TransactionInProgressError(IoTModemError):
    """transact() was re-entered while a transaction is still in flight."""
    pass


class ConfigurationError(IoTModemError):
    """Invalid configuration, or configuration changed after start().

    Attributes:
        errors: List of individual validation messages
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []

    def __str__(self) -> str:
        base_msg = super().__str__()
        if not self.errors:
            return base_msg
        error_list = '\n  - '.join(self.errors)
        return f"{base_msg}\n  - {error_list}"


class UnsupportedOperationError(IoTModemError):
    """The device adapter does not implement the requested capability.

    Attributes:
        operation: Name of the capability
        device: Name of the device adapter
    """

    def __init__(self, operation: str, device: str):
        super().__init__(f"{operation} is not supported by {device}")
        self.operation = operation
        self.device = device
