"""Unit tests for the iotmodem exception hierarchy."""

import pytest

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


class TestHierarchy:
    """Test inheritance between exception types."""

    @pytest.mark.parametrize("exc_type", [
        SerialPortError,
        ATCommandError,
        ResponseTimeoutError,
        ResponseParseError,
        TransactionInProgressError,
        ConfigurationError,
        UnsupportedOperationError,
    ])
    def test_all_derive_from_base(self, exc_type):
        assert issubclass(exc_type, IoTModemError)

    @pytest.mark.parametrize("exc_type", [SerialPortBusyError, ConnectionTimeoutError, TransportError])
    def test_transport_family(self, exc_type):
        assert issubclass(exc_type, SerialPortError)

    def test_timeout_is_not_a_device_error(self):
        assert not issubclass(ResponseTimeoutError, ATCommandError)
        assert not issubclass(ATCommandError, ResponseTimeoutError)


class TestSerialPortError:
    """Test SerialPortError formatting."""

    def test_str_with_port(self):
        error = SerialPortError("Failed to read", "/dev/ttyUSB0")
        assert str(error) == "Failed to read (port: /dev/ttyUSB0)"
        assert error.os_error is None

    def test_str_with_cause(self):
        cause = OSError("device disconnected")
        error = TransportError("Transport failed", "/dev/ttyUSB0", cause)
        assert str(error) == "Transport failed (port: /dev/ttyUSB0, cause: device disconnected)"
        assert error.os_error is cause


class TestATCommandError:
    """Test ATCommandError attributes."""

    def test_attributes(self):
        error = ATCommandError("Device returned ERROR", "AT+CIMI", "ERROR", [" > AT+CIMI", " < ERROR"])
        assert error.command == "AT+CIMI"
        assert error.token == "ERROR"
        assert error.transcript == [" > AT+CIMI", " < ERROR"]
        assert str(error) == "Device returned ERROR (command: AT+CIMI, token: ERROR)"

    def test_transcript_defaults_to_empty(self):
        assert ATCommandError("failed", "AT", "ERROR").transcript == []


class TestOtherErrors:
    """Test remaining exception formatting."""

    def test_response_timeout(self):
        error = ResponseTimeoutError("Read timed out", "AT+CIMI", 0.1)
        assert str(error) == "Read timed out (command: AT+CIMI, timeout: 0.100s)"

    def test_parse_error_with_line(self):
        error = ResponseParseError("invalid socket", "+QIOPEN: x")
        assert str(error) == "invalid socket (line: '+QIOPEN: x')"

    def test_parse_error_without_line(self):
        assert str(ResponseParseError("no data")) == "no data"

    def test_configuration_error_lists_errors(self):
        error = ConfigurationError("Configuration validation failed", ["serial.baud_rate: bad", "x: y"])
        assert str(error) == "Configuration validation failed\n  - serial.baud_rate: bad\n  - x: y"

    def test_configuration_error_without_errors(self):
        assert str(ConfigurationError("bad")) == "bad"

    def test_unsupported_operation(self):
        error = UnsupportedOperationError("reboot", "nrf91")
        assert error.operation == "reboot"
        assert error.device == "nrf91"
        assert str(error) == "reboot is not supported by nrf91"
