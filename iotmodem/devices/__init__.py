"""Device adapters layered on the CommandInterface transaction engine."""

from iotmodem.devices.device import APN, Device, ReceivedData, Stats
from iotmodem.devices.default import DefaultDevice
from iotmodem.devices.bg95 import BG95Device
from iotmodem.devices.n211 import N211Device
from iotmodem.devices.nrf91 import NRF91Device
from iotmodem.devices.parsing import trim_quotes
from iotmodem.devices.factory import create_device, create_logger, open_device

__all__ = [
    "APN",
    "Device",
    "ReceivedData",
    "Stats",
    "DefaultDevice",
    "BG95Device",
    "N211Device",
    "NRF91Device",
    "trim_quotes",
    "create_device",
    "create_logger",
    "open_device",
]
