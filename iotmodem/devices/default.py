"""Generic 3GPP TS 27.007 adapter.

DefaultDevice implements the operations whose command text is common to
most modules. Vendor adapters subclass it and override what differs.
"""

from typing import Any, Optional, Tuple

from iotmodem.core.command_interface import CommandInterface
from iotmodem.core.exceptions import ResponseParseError, UnsupportedOperationError
from iotmodem.devices.device import APN, Device, ReceivedData, Stats
from iotmodem.devices.parsing import (
    CCID_REGEX,
    IMSI_REGEX,
    split_fields,
    strip_prefix,
    trim_quotes,
)


class DefaultDevice(Device):
    """Adapter for modules that only need standard AT commands.

    Args:
        port: Serial port device path
        baud_rate: Baud rate (default: the adapter's default_baud_rate)
        cmd: Pre-built CommandInterface; created from port/baud_rate if omitted
        **kwargs: Passed to CommandInterface (line_timeout, logger, ...)
    """

    name = "generic"
    default_baud_rate = 115200

    def __init__(self,
                 port: str,
                 baud_rate: Optional[int] = None,
                 cmd: Optional[CommandInterface] = None,
                 **kwargs: Any):
        self.cmd = cmd or CommandInterface(
            port, baud_rate=baud_rate or self.default_baud_rate, **kwargs
        )
        self.configure(self.cmd)

    def configure(self, cmd: CommandInterface) -> None:
        """Widen the interface's vocabulary before it is started."""

    def _unsupported(self, operation: str) -> UnsupportedOperationError:
        return UnsupportedOperationError(operation, self.name)

    def start(self) -> None:
        self.cmd.start()

    def close(self) -> None:
        self.cmd.close()

    def set_debug(self, debug: bool) -> None:
        self.cmd.set_debug(debug)

    def at(self) -> None:
        self.cmd.transact("AT")

    def reboot(self) -> None:
        raise self._unsupported("reboot")

    def send_crlf(self, line: str) -> None:
        self.cmd.send_raw(line)

    def get_imsi(self) -> str:
        imsi = ""

        def on_line(line: str) -> None:
            nonlocal imsi
            match = IMSI_REGEX.search(line)
            if match:
                imsi = match.group(1)

        self.cmd.transact("AT+CIMI", on_line)
        return imsi

    def get_imei(self) -> str:
        imei = ""

        def on_line(line: str) -> None:
            nonlocal imei
            if line.strip():
                imei = line.strip()

        self.cmd.transact("AT+CGSN", on_line)
        return imei

    def get_ccid(self) -> str:
        ccid = ""

        def on_line(line: str) -> None:
            nonlocal ccid
            match = CCID_REGEX.search(line)
            if match:
                ccid = match.group(1)

        self.cmd.transact("AT+CCID", on_line)
        return ccid

    def set_autoconnect_off(self) -> None:
        raise self._unsupported("set_autoconnect_off")

    def set_autoconnect_on(self) -> None:
        raise self._unsupported("set_autoconnect_on")

    def set_apn(self, apn: str) -> None:
        self.cmd.transact(f'AT+CGDCONT=1,"IP","{apn}"')
        self.cmd.transact("AT+CGACT=1,1")

    def get_apn(self) -> APN:
        apn = APN()

        def on_line(line: str) -> None:
            rest = strip_prefix(line, "+CGDCONT: ")
            if rest is None:
                return
            parts = split_fields(rest)
            if len(parts) < 4:
                raise ResponseParseError("missing fields in +CGDCONT response", line)
            try:
                apn.context_identifier = int(parts[0])
            except ValueError:
                raise ResponseParseError("invalid CID", line) from None
            apn.pdp_type = trim_quotes(parts[1])
            apn.name = trim_quotes(parts[2])
            apn.address = trim_quotes(parts[3])

        self.cmd.transact("AT+CGDCONT?", on_line)
        return apn

    def get_addr(self) -> Tuple[int, str]:
        cid = 0
        addr = ""

        def on_line(line: str) -> None:
            nonlocal cid, addr
            rest = strip_prefix(line, "+CGPADDR: ")
            if rest is None:
                return
            parts = split_fields(rest)
            if len(parts) < 2:
                raise ResponseParseError("missing field in +CGPADDR response", line)
            try:
                cid = int(parts[0])
            except ValueError:
                raise ResponseParseError("invalid CID", line) from None
            addr = trim_quotes(parts[1])

        self.cmd.transact("AT+CGPADDR", on_line)
        return cid, addr

    def set_radio(self, on: bool) -> None:
        self.cmd.transact(f"AT+CFUN={1 if on else 0}")

    def get_stats(self) -> Stats:
        raise self._unsupported("get_stats")

    def create_udp_socket(self, port: int = 0) -> int:
        raise self._unsupported("create_udp_socket")

    def send_udp(self, socket: int, address: str, remote_port: int, data: bytes) -> int:
        raise self._unsupported("send_udp")

    def receive_udp(self, socket: int, length: int) -> Optional[ReceivedData]:
        raise self._unsupported("receive_udp")

    def close_udp_socket(self, socket: int) -> None:
        raise self._unsupported("close_udp_socket")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.cmd!r})"
