"""Quectel BG95/BG96 adapter.

The BG95 ends socket sends with "SEND OK"/"SEND FAIL" instead of OK/ERROR
and prompts for payload with a bare ">" that is not followed by CRLF.
"""

import logging
from typing import Any

from iotmodem.core.command_interface import CommandInterface
from iotmodem.core.exceptions import ATCommandError, IoTModemError, ResponseParseError
from iotmodem.devices.default import DefaultDevice
from iotmodem.devices.parsing import split_fields, strip_prefix

logger = logging.getLogger(__name__)

MAX_SOCKETS = 11


class BG95Device(DefaultDevice):
    """Adapter for Quectel BG95 (and BG96) modules.

    Socket ids are allocated per instance, so two modules driven from one
    process never share a counter.
    """

    name = "bg95"

    def __init__(self, *args: Any, **kwargs: Any):
        self._socket_no = 0
        super().__init__(*args, **kwargs)

    def configure(self, cmd: CommandInterface) -> None:
        cmd.add_error_token("SEND FAIL")
        cmd.add_delimiter(">")
        cmd.add_success_token("SEND OK")

    def start(self) -> None:
        """Open the port and turn off command echo, which is on by default."""
        super().start()
        self.cmd.transact("ATE0")

    def get_ccid(self) -> str:
        ccid = ""

        def on_line(line: str) -> None:
            nonlocal ccid
            if not line.strip():
                return
            parts = line.split(":")
            if len(parts) != 2:
                logger.warning(f"Unable to parse response to AT+CCID: {line}")
                raise ResponseParseError("unable to parse AT+CCID response", line)
            ccid = parts[1].strip()

        self.cmd.transact("AT+CCID", on_line)
        return ccid

    def create_udp_socket(self, port: int = 0) -> int:
        """Open a UDP service socket; port 0 leaves it unbound.

        Raises:
            IoTModemError: All socket ids of this module are in use
            ResponseParseError: +QIOPEN reported an error or was malformed
        """
        if self._socket_no >= MAX_SOCKETS:
            raise IoTModemError("sockets exhausted")
        self._socket_no += 1
        socket = self._socket_no

        def on_line(line: str) -> None:
            nonlocal socket
            rest = strip_prefix(line, "+QIOPEN:")
            if rest is None:
                return
            fields = split_fields(rest)
            if len(fields) != 2:
                logger.warning(f"Expected 2 fields from AT+QIOPEN, got {len(fields)}: {line}")
                raise ResponseParseError("could not parse response fields from AT+QIOPEN", line)
            try:
                conn_id = int(fields[0])
            except ValueError:
                raise ResponseParseError("could not parse connection ID", line) from None
            if fields[1] != "0":
                logger.warning(f"Error response from AT+QIOPEN: {line}")
                raise ResponseParseError("error code returned from module", line)
            socket = conn_id

        self.cmd.transact(f'AT+QIOPEN=1,{socket},"UDP SERVICE","0.0.0.0",{port},1', on_line)
        self._socket_no = socket
        return socket

    def send_udp(self, socket: int, address: str, remote_port: int, data: bytes) -> int:
        """Send a text payload after the module's ">" prompt.

        Payload must be UTF-8 text; the prompt arrives as an empty line.
        """
        try:
            payload = data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ValueError(f"BG95 payload must be UTF-8 text: {e.reason} at byte {e.start}") from None
        sent = False

        def on_line(line: str) -> None:
            nonlocal sent
            if line == "SEND ERROR":
                raise ATCommandError("send error", f"AT+QISEND={socket}", line)
            if not sent and line == "":
                self.cmd.send_raw(payload)
                sent = True

        self.cmd.transact(f'AT+QISEND={socket},{len(data)},"{address}",{remote_port}', on_line)
        return len(data)

    def close_udp_socket(self, socket: int) -> None:
        self.cmd.transact(f"AT+QICLOSE={socket}")
