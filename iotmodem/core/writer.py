"""Background writer for outgoing command lines."""

from typing import Callable, TYPE_CHECKING
import queue
import threading

from iotmodem.core.exceptions import SerialPortError

if TYPE_CHECKING:
    from iotmodem.core.serial_handler import SerialHandler


class WriterWorker(threading.Thread):
    """Thread that drains the outgoing queue onto the transport.

    Lines are written verbatim, in the order they were queued; callers are
    responsible for the line terminator. A write failure ends the thread and
    is handed to on_fatal.
    """

    def __init__(self,
                 transport: 'SerialHandler',
                 outgoing: 'queue.Queue[str]',
                 on_fatal: Callable[[Exception], None],
                 poll_interval: float = 0.1):
        super().__init__(name=f"writer-{transport.port}", daemon=True)
        self.transport = transport
        self.outgoing = outgoing
        self.on_fatal = on_fatal
        self.poll_interval = poll_interval
        self._stop_event = threading.Event()

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                line = self.outgoing.get(timeout=self.poll_interval)
            except queue.Empty:
                continue

            try:
                self.transport.write(line)
            except SerialPortError as e:
                if not self._stop_event.is_set():
                    self.on_fatal(e)
                return
            finally:
                self.outgoing.task_done()

    def stop(self) -> None:
        self._stop_event.set()
