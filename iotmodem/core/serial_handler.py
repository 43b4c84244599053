"""Serial port transport for the transaction engine.

This module wraps pyserial with the error translation and port event
logging used by CommandInterface. Reads return whatever bytes are
available; framing happens elsewhere.
"""

from typing import Optional, TYPE_CHECKING
import threading
import time

import serial

from iotmodem.core.exceptions import (
    SerialPortError,
    SerialPortBusyError,
    ConnectionTimeoutError,
)

# Avoid circular import for type hints
if TYPE_CHECKING:
    from iotmodem.logging.communication_logger import CommunicationLogger


class SerialHandler:
    """Owns one pyserial connection and its raw byte I/O.

    port may be a device path or any pyserial URL (e.g. "loop://",
    "socket://host:port").

    read() and write() may be called concurrently from the framer and
    writer threads. Opening and closing are serialized by a lock.

    Example:
        >>> handler = SerialHandler('/dev/ttyUSB0', baud_rate=115200)
        >>> handler.open()
        >>> handler.write('AT\\r\\n')
        >>> handler.read()
        b'\\r\\nOK\\r\\n'
        >>> handler.close()
    """

    def __init__(self,
                 port: str,
                 baud_rate: int = 115200,
                 timeout: float = 0.1,
                 logger: Optional['CommunicationLogger'] = None,
                 **kwargs):
        """Initialize handler with port configuration.

        Args:
            port: Serial port device path
            baud_rate: Baud rate (default 115200)
            timeout: Read timeout in seconds; bounds how long read() blocks
            logger: Optional CommunicationLogger for port events
            **kwargs: Additional arguments passed to serial.serial_for_url
        """
        self.port = port
        self.baud_rate = baud_rate
        self.timeout = timeout
        self.logger = logger
        self.kwargs = kwargs
        self._serial: Optional[serial.Serial] = None
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._open_time: Optional[float] = None

    def open(self) -> None:
        """Open serial port and configure settings.

        Raises:
            SerialPortError: Port doesn't exist or permission denied
            SerialPortBusyError: Port already in use
            ConnectionTimeoutError: Open timeout exceeded
        """
        with self._lock:
            if self._serial is not None and self._serial.is_open:
                return

            try:
                self._serial = serial.serial_for_url(
                    self.port,
                    baudrate=self.baud_rate,
                    timeout=self.timeout,
                    **self.kwargs
                )
                self._open_time = time.time()
            except (serial.SerialException, ValueError) as e:
                self._log_error(f"Failed to open port: {e}", e)
                raise self._translate_open_error(e)

            if self.logger:
                self.logger.log_port_event(
                    event="Port opened",
                    port=self.port,
                    details={"baud_rate": self.baud_rate, "timeout": self.timeout, **self.kwargs},
                )

    def _translate_open_error(self, e: Exception) -> SerialPortError:
        error_msg = str(e).lower()
        if 'permission denied' in error_msg or 'access denied' in error_msg:
            return SerialPortError(f"Permission denied accessing port {self.port}", self.port, e)
        if 'busy' in error_msg or 'in use' in error_msg:
            return SerialPortBusyError(f"Port {self.port} is already in use", self.port, e)
        if 'timeout' in error_msg:
            return ConnectionTimeoutError(f"Timeout opening port {self.port}", self.port, e)
        return SerialPortError(f"Failed to open port {self.port}: {e}", self.port, e)

    def close(self) -> None:
        """Close serial port and release resources.

        Safe to call multiple times; does nothing if port is already closed.
        """
        with self._lock:
            if self._serial is None or not self._serial.is_open:
                return
            try:
                self._serial.close()
            except (serial.SerialException, OSError) as e:
                self._log_error(f"Error closing port: {e}", e)
            finally:
                if self.logger:
                    details = None
                    if self._open_time:
                        details = {"session_duration_seconds": time.time() - self._open_time}
                    self.logger.log_port_event(event="Port closed", port=self.port, details=details)
                self._open_time = None

    def write(self, data: str) -> int:
        """Write a string to the port verbatim.

        Args:
            data: Text to send, including any line terminator

        Returns:
            Number of bytes written

        Raises:
            SerialPortError: Port not open or write failed
        """
        connection = self._require_open("write to")
        with self._write_lock:
            try:
                written = connection.write(data.encode('utf-8'))
                connection.flush()
                return written
            except (serial.SerialException, OSError, TypeError) as e:
                raise SerialPortError(f"Failed to write to port {self.port}: {e}", self.port, e)

    def read(self, size: Optional[int] = None) -> bytes:
        """Read the bytes currently available.

        Blocks for at most the read timeout waiting for the first byte, then
        returns everything already buffered by the driver.

        Args:
            size: Maximum bytes to return (default: all waiting bytes)

        Returns:
            Bytes read; empty if the timeout elapsed with no data

        Raises:
            SerialPortError: Port not open or read failed
        """
        connection = self._require_open("read from")
        try:
            if size is None:
                size = max(1, connection.in_waiting)
            return connection.read(size)
        except (serial.SerialException, OSError, TypeError, AttributeError) as e:
            raise SerialPortError(f"Failed to read from port {self.port}: {e}", self.port, e)

    def _require_open(self, action: str) -> serial.Serial:
        connection = self._serial
        if connection is None or not connection.is_open:
            raise SerialPortError(f"Cannot {action} closed port", self.port, None)
        return connection

    def _log_error(self, message: str, e: Exception) -> None:
        if self.logger:
            self.logger.log_error(
                source="SerialHandler",
                error=message,
                details={"port": self.port, "error_type": type(e).__name__}
            )

    def is_connected(self) -> bool:
        """Check if port is currently open."""
        with self._lock:
            return self._serial is not None and self._serial.is_open

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        status = "open" if self.is_connected() else "closed"
        return f"SerialHandler(port='{self.port}', baud={self.baud_rate}, status={status})"
