"""u-blox SARA N211 adapter.

NB-IoT module with a proprietary socket command set (AT+NSO*) carrying
payloads as hex strings, and radio statistics via AT+NUESTATS.
"""

import logging
from typing import Dict, Optional

from iotmodem.core.exceptions import ResponseParseError
from iotmodem.devices.default import DefaultDevice
from iotmodem.devices.device import ReceivedData, Stats
from iotmodem.devices.parsing import IMSI_REGEX, IMEI_REGEX, split_fields, trim_quotes

logger = logging.getLogger(__name__)

# Reserved by the module firmware (section 16.24.3 of the AT manual)
RESERVED_PORT = 5683

# AT+NUESTATS label -> Stats attribute
_STATS_FIELDS: Dict[str, str] = {
    '"Signal power"': "signal_power",
    '"Total power"': "total_power",
    '"TX power"': "tx_power",
    '"TX time"': "tx_time",
    '"RX time"': "rx_time",
    '"Cell ID"': "cell_id",
    '"ECL"': "ecl",
    '"SNR"': "snr",
    '"EARFCN"': "earfcn",
    '"PCI"': "pci",
    '"RSRQ"': "rsrq",
}


class N211Device(DefaultDevice):
    """Adapter for u-blox SARA N211 modules."""

    name = "n211"
    default_baud_rate = 9600

    def get_imei(self) -> str:
        imei = ""

        def on_line(line: str) -> None:
            nonlocal imei
            match = IMEI_REGEX.search(line) or IMSI_REGEX.search(line)
            if match:
                imei = match.group(1)

        self.cmd.transact("AT+CGSN=1", on_line)
        return imei

    def get_ccid(self) -> str:
        ccid = ""

        def on_line(line: str) -> None:
            nonlocal ccid
            match = IMSI_REGEX.search(line)
            if match:
                ccid = match.group(1)

        self.cmd.transact("AT+CCID", on_line)
        return ccid

    def set_autoconnect_off(self) -> None:
        self.cmd.transact('AT+NCONFIG="AUTOCONNECT","FALSE"')

    def set_autoconnect_on(self) -> None:
        self.cmd.transact('AT+NCONFIG="AUTOCONNECT","TRUE"')

    def reboot(self, timeout: Optional[float] = None) -> None:
        self.cmd.transact("AT+NRB", timeout=timeout)

    def set_apn(self, apn: str) -> None:
        """Set the APN. The module only accepts this with autoconnect off,
        so this reboots the module twice.
        """
        self.set_autoconnect_off()
        self.reboot()
        self.cmd.transact(f'AT+CGDCONT=0,"IP","{apn}"')
        self.set_autoconnect_on()
        self.reboot()

    def get_stats(self) -> Stats:
        """Read the most recent AT+NUESTATS values. Unparseable values are skipped."""
        stats = Stats()

        def on_line(line: str) -> None:
            parts = line.split(",")
            if len(parts) < 2:
                return
            attr = _STATS_FIELDS.get(parts[0])
            if attr is None:
                return
            try:
                setattr(stats, attr, int(parts[1]))
            except ValueError:
                logger.debug(f"Ignoring non-numeric NUESTATS value: {line}")

        self.cmd.transact("AT+NUESTATS", on_line)
        return stats

    def create_udp_socket(self, port: int = 0) -> int:
        """Create a UDP socket. A non-zero port enables receiving; +NSONMI
        URCs then announce arriving datagrams.
        """
        if port == RESERVED_PORT:
            raise ValueError(f"Port {RESERVED_PORT} is reserved")

        command = 'AT+NSOCR="DGRAM",17'
        if port != 0:
            command = f'AT+NSOCR="DGRAM",17,{port},1'

        socket = 0

        def on_line(line: str) -> None:
            nonlocal socket
            try:
                socket = int(line)
            except ValueError:
                return

        self.cmd.transact(command, on_line)
        return socket

    def send_udp(self, socket: int, address: str, remote_port: int, data: bytes) -> int:
        length_sent = 0

        def on_line(line: str) -> None:
            nonlocal length_sent
            parts = line.split(",")
            if len(parts) != 2:
                return
            try:
                socket_returned = int(parts[0])
                length_sent = int(parts[1])
            except ValueError:
                raise ResponseParseError("invalid AT+NSOST response", line) from None
            if socket_returned != socket:
                logger.warning("Inconsistency: socket in response did not match socket in request")

        command = f'AT+NSOST={socket},"{address}",{remote_port},{len(data)},"{data.hex()}"'
        self.cmd.transact(command, on_line)
        return length_sent

    def receive_udp(self, socket: int, length: int) -> Optional[ReceivedData]:
        """Read up to length bytes of the next datagram on socket.

        If the datagram is longer than length, `remaining` tells how much is
        left; a new +NSONMI URC follows once a datagram is fully read.
        """
        received = ReceivedData()

        def on_line(line: str) -> None:
            parts = split_fields(line)
            if len(parts) < 6:
                return
            try:
                received.socket = int(parts[0])
                received.ip = trim_quotes(parts[1])
                received.port = int(parts[2])
                received.length = int(parts[3])
                received.data = bytes.fromhex(trim_quotes(parts[4]))
                received.remaining = int(parts[5])
            except ValueError:
                raise ResponseParseError("invalid AT+NSORF response", line) from None

        self.cmd.transact(f"AT+NSORF={socket},{length}", on_line)
        return received

    def close_udp_socket(self, socket: int) -> None:
        """Close socket, dropping unread datagrams. Closing an unknown socket
        is answered with ERROR.
        """
        self.cmd.transact(f"AT+NSOCL={socket}")
