"""Capability interface shared by all device adapters.

Each adapter owns one CommandInterface and expresses the operations below
in its module's command dialect. Capabilities a module does not offer
raise UnsupportedOperationError.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass
class APN:
    """PDP context definition. Optional fields of AT+CGDCONT are skipped."""
    context_identifier: int = 0
    pdp_type: str = ""
    name: str = ""
    address: str = ""


@dataclass
class Stats:
    """Radio operational statistics (AT+NUESTATS on N211).

    Power and SNR/RSRQ values are in tenths of dBm/dB, times in milliseconds
    since the last power-on.
    """
    signal_power: int = 0
    total_power: int = 0
    tx_power: int = 0
    tx_time: int = 0
    rx_time: int = 0
    cell_id: int = 0
    ecl: int = 0
    snr: int = 0
    earfcn: int = 0
    pci: int = 0
    rsrq: int = 0


@dataclass
class ReceivedData:
    """Datagram read from a UDP socket."""
    socket: int = 0
    ip: str = ""
    port: int = 0
    length: int = 0
    data: bytes = b""
    remaining: int = 0


class Device(ABC):
    """Operations every cellular module adapter provides.

    Example:
        >>> device = BG95Device('/dev/ttyUSB0')
        >>> device.start()
        >>> device.get_imsi()
        '204080813324647'
        >>> device.close()
    """

    @abstractmethod
    def start(self) -> None:
        """Open the connection and bring the module into a known state."""

    @abstractmethod
    def close(self) -> None:
        pass

    @abstractmethod
    def set_debug(self, debug: bool) -> None:
        pass

    @abstractmethod
    def at(self) -> None:
        """Check the module answers with OK."""

    @abstractmethod
    def reboot(self) -> None:
        pass

    @abstractmethod
    def send_crlf(self, line: str) -> None:
        """Send a line without waiting for a response."""

    @abstractmethod
    def get_imsi(self) -> str:
        pass

    @abstractmethod
    def get_imei(self) -> str:
        pass

    @abstractmethod
    def get_ccid(self) -> str:
        pass

    @abstractmethod
    def set_autoconnect_off(self) -> None:
        pass

    @abstractmethod
    def set_autoconnect_on(self) -> None:
        pass

    @abstractmethod
    def set_apn(self, apn: str) -> None:
        pass

    @abstractmethod
    def get_apn(self) -> APN:
        pass

    @abstractmethod
    def get_addr(self) -> Tuple[int, str]:
        """Return (context identifier, address) of the active PDP context."""

    @abstractmethod
    def set_radio(self, on: bool) -> None:
        pass

    @abstractmethod
    def get_stats(self) -> Stats:
        pass

    @abstractmethod
    def create_udp_socket(self, port: int = 0) -> int:
        """Create a UDP socket, bound to port if non-zero; returns its id."""

    @abstractmethod
    def send_udp(self, socket: int, address: str, remote_port: int, data: bytes) -> int:
        """Send one datagram; returns the number of bytes accepted."""

    @abstractmethod
    def receive_udp(self, socket: int, length: int) -> Optional[ReceivedData]:
        pass

    @abstractmethod
    def close_udp_socket(self, socket: int) -> None:
        pass
