"""iotmodem - AT command transaction engine for cellular IoT modules.

This package provides:
- A half-duplex request/response engine over a serial byte stream
- Configurable line framing and success/error vocabularies
- Transcript logging of every exchange with a module
- Adapters for Quectel BG95, u-blox SARA N211 and Nordic nRF91 modules
"""

# Core transaction engine (imported first; the other packages build on it)
from iotmodem.core import (
    CommandInterface,
    CommandResponse,
    ResponseStatus,
    SerialHandler,
    LineFramer,
    IoTModemError,
    SerialPortError,
    TransportError,
    ATCommandError,
    ResponseTimeoutError,
    ResponseParseError,
    TransactionInProgressError,
    ConfigurationError,
    UnsupportedOperationError,
)
from iotmodem.config import Config, ConfigManager
from iotmodem.logging import CommunicationLogger
from iotmodem.devices import (
    Device,
    DefaultDevice,
    BG95Device,
    N211Device,
    NRF91Device,
    open_device,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "CommandInterface",
    "CommandResponse",
    "ResponseStatus",
    "SerialHandler",
    "LineFramer",
    # Configuration and logging
    "Config",
    "ConfigManager",
    "CommunicationLogger",
    # Devices
    "Device",
    "DefaultDevice",
    "BG95Device",
    "N211Device",
    "NRF91Device",
    "open_device",
    # Exceptions
    "IoTModemError",
    "SerialPortError",
    "TransportError",
    "ATCommandError",
    "ResponseTimeoutError",
    "ResponseParseError",
    "TransactionInProgressError",
    "ConfigurationError",
    "UnsupportedOperationError",
]
