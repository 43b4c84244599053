"""Nordic nRF91 adapter (Serial LTE Modem firmware).

The SLM application exposes a single socket through its AT# commands.
"""

import logging
from typing import Optional

from iotmodem.core.exceptions import ResponseParseError
from iotmodem.devices.default import DefaultDevice
from iotmodem.devices.device import ReceivedData
from iotmodem.devices.parsing import split_fields, strip_prefix, trim_quotes

logger = logging.getLogger(__name__)

SOCKET_ID = 1
RECEIVE_TIMEOUT = 10


class NRF91Device(DefaultDevice):
    """Adapter for Nordic nRF9160/nRF91x1 modules."""

    name = "nrf91"

    def get_ccid(self) -> str:
        ccid = ""

        def on_line(line: str) -> None:
            nonlocal ccid
            if not line.strip():
                return
            parts = line.split(":")
            if len(parts) != 2:
                logger.warning(f"Unable to parse response to AT%XICCID: {line}")
                raise ResponseParseError("unable to parse AT%XICCID response", line)
            ccid = parts[1].strip()

        self.cmd.transact("AT%XICCID", on_line)
        return ccid

    def create_udp_socket(self, port: int = 0) -> int:
        """Open the module's only socket as an IPv4 UDP client, bound to
        port when it is non-zero. Always returns socket id 1.
        """
        # AT#XSOCKET=<op>,<type>,<role>: 1=open IPv4, 2=UDP, 0=client
        self.cmd.transact("AT#XSOCKET=1,2,0")
        if port != 0:
            self.cmd.transact(f"AT#XBIND={port}")
        return SOCKET_ID

    def send_udp(self, socket: int, address: str, remote_port: int, data: bytes) -> int:
        if socket != SOCKET_ID:
            raise ValueError(f"unknown socket ID {socket}")

        bytes_sent = 0

        def on_line(line: str) -> None:
            nonlocal bytes_sent
            if not line.strip():
                return
            parts = line.split(":")
            if len(parts) != 2:
                logger.warning(f"Could not parse response from modem: {line}")
                raise ResponseParseError("unknown response", line)
            try:
                bytes_sent = int(parts[1].strip())
            except ValueError:
                logger.warning(f"Could not parse byte count from {parts[1]}")
                raise ResponseParseError("could not parse number of bytes", line) from None

        self.cmd.transact(
            f'AT#XSENDTO="{address}",{remote_port},0,"{data.hex()}"',
            on_line
        )
        return bytes_sent

    def receive_udp(self, socket: int, length: int) -> Optional[ReceivedData]:
        """Wait up to ten seconds for a datagram.

        The module answers with the payload line followed by
        '#XRECVFROM: <size>,"<ip>"'. length is not used by this module.
        """
        received = ReceivedData()

        def on_line(line: str) -> None:
            rest = strip_prefix(line, "#XRECVFROM:")
            if rest is None:
                if line:
                    received.data = line.encode('utf-8')
                    received.socket = SOCKET_ID
                return
            size_addr = split_fields(rest)
            if len(size_addr) != 2:
                raise ResponseParseError("could not parse size and address in #XRECVFROM", line)
            try:
                received.length = int(size_addr[0])
            except ValueError:
                raise ResponseParseError("invalid size in #XRECVFROM", line) from None
            received.ip = trim_quotes(size_addr[1])

        self.cmd.transact(
            f"AT#XRECVFROM={RECEIVE_TIMEOUT}",
            on_line,
            timeout=self.cmd.line_timeout + RECEIVE_TIMEOUT
        )
        return received

    def close_udp_socket(self, socket: int) -> None:
        self.cmd.transact("AT#XSOCKET=0")
