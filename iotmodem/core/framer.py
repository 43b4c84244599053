"""Byte stream framing.

LineFramer splits a raw byte stream into line tokens on a configurable set
of delimiters. FramerWorker runs a LineFramer over a transport in a
background thread and pushes decoded tokens onto the output queue.
"""

from typing import Callable, List, NamedTuple, Optional, Sequence, TYPE_CHECKING
import queue
import threading

from iotmodem.core.exceptions import SerialPortError

if TYPE_CHECKING:
    from iotmodem.core.serial_handler import SerialHandler

CRLF = "\r\n"


class Frame(NamedTuple):
    """One framed token and the delimiter that ended it."""
    payload: bytes
    delimiter: bytes

    @property
    def text(self) -> str:
        return self.payload.decode('utf-8', errors='replace')


class LineFramer:
    """Splits buffered bytes on the leftmost occurring delimiter.

    Delimiters are kept in configuration order. When two delimiters start at
    the same offset the one configured first wins. Bytes that do not yet
    contain a delimiter stay buffered until more data arrives.

    Example:
        >>> framer = LineFramer(["\\r\\n", ">"])
        >>> [f.text for f in framer.feed(b"204080813324647\\r\\nOK\\r\\n")]
        ['204080813324647', 'OK']
        >>> [f.text for f in framer.feed(b"\\r\\n> ")]
        ['', '']
        >>> framer.pending
        b' '
    """

    def __init__(self, delimiters: Sequence[str] = (CRLF,)):
        if not delimiters:
            raise ValueError("at least one delimiter is required")
        self._delimiters = [d.encode('utf-8') for d in delimiters]
        if any(not d for d in self._delimiters):
            raise ValueError("delimiters must not be empty")
        self._buffer = bytearray()

    @property
    def pending(self) -> bytes:
        """Unconsumed bytes waiting for a delimiter."""
        return bytes(self._buffer)

    def feed(self, data: bytes) -> List[Frame]:
        """Append data to the buffer and return every complete frame."""
        self._buffer.extend(data)
        frames = []
        while True:
            frame = self._next_frame()
            if frame is None:
                return frames
            frames.append(frame)

    def _next_frame(self) -> Optional[Frame]:
        best_pos = -1
        best_delim = b""
        for delim in self._delimiters:
            pos = self._buffer.find(delim)
            if pos >= 0 and (best_pos < 0 or pos < best_pos):
                best_pos = pos
                best_delim = delim
        if best_pos < 0:
            return None

        payload = bytes(self._buffer[:best_pos])
        del self._buffer[:best_pos + len(best_delim)]
        return Frame(payload, best_delim)


class FramerWorker(threading.Thread):
    """Thread that reads the transport and feeds framed lines to a queue.

    The thread runs until stop() is called. A read failure ends the thread;
    the exception is handed to on_fatal so the owner can surface it.
    """

    def __init__(self,
                 transport: 'SerialHandler',
                 framer: LineFramer,
                 output: 'queue.Queue[str]',
                 on_fatal: Callable[[Exception], None],
                 put_interval: float = 0.1):
        super().__init__(name=f"framer-{transport.port}", daemon=True)
        self.transport = transport
        self.framer = framer
        self.output = output
        self.on_fatal = on_fatal
        self.put_interval = put_interval
        self._stop_event = threading.Event()
        self._held = 0

    @property
    def held_lines(self) -> int:
        """Framed lines not yet accepted by the output queue."""
        return self._held

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                data = self.transport.read()
            except SerialPortError as e:
                if not self._stop_event.is_set():
                    self.on_fatal(e)
                return

            if not data:
                continue

            frames = self.framer.feed(data)
            self._held = len(frames)
            for frame in frames:
                if not self._put(frame.text):
                    return
                self._held -= 1

    def _put(self, line: str) -> bool:
        # Full queue blocks the reader; lines are never dropped.
        while not self._stop_event.is_set():
            try:
                self.output.put(line, timeout=self.put_interval)
                return True
            except queue.Full:
                continue
        return False

    def stop(self) -> None:
        self._stop_event.set()
