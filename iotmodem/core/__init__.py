"""Core transaction engine components.

This package provides the serial transport, the line framer, the writer
thread and the CommandInterface transaction engine built on them.
"""

from iotmodem.core.command_response import CommandResponse, ResponseStatus, Transcript
from iotmodem.core.exceptions import (
    IoTModemError,
    SerialPortError,
    SerialPortBusyError,
    ConnectionTimeoutError,
    TransportError,
    ATCommandError,
    ResponseTimeoutError,
    ResponseParseError,
    TransactionInProgressError,
    ConfigurationError,
    UnsupportedOperationError,
)
from iotmodem.core.serial_handler import SerialHandler
from iotmodem.core.framer import CRLF, Frame, LineFramer, FramerWorker
from iotmodem.core.writer import WriterWorker
from iotmodem.core.command_interface import (
    CommandInterface,
    DEFAULT_LINE_TIMEOUT,
    OK,
    ERROR,
)

__all__ = [
    'CommandResponse',
    'ResponseStatus',
    'Transcript',
    'SerialHandler',
    'CRLF',
    'Frame',
    'LineFramer',
    'FramerWorker',
    'WriterWorker',
    'CommandInterface',
    'DEFAULT_LINE_TIMEOUT',
    'OK',
    'ERROR',
    'IoTModemError',
    'SerialPortError',
    'SerialPortBusyError',
    'ConnectionTimeoutError',
    'TransportError',
    'ATCommandError',
    'ResponseTimeoutError',
    'ResponseParseError',
    'TransactionInProgressError',
    'ConfigurationError',
    'UnsupportedOperationError',
]
