"""Size-rotated log file output for CommunicationLogger."""

from pathlib import Path
from threading import Lock
from typing import Optional, TextIO
import sys

from iotmodem.logging.log_models import LogEntry


class FileHandler:
    """Appends formatted LogEntry lines to a file, rotating by size.

    When the file reaches max_size_mb it is renamed to '<name>.1', older
    backups shift up by one, and anything beyond backup_count is removed.

    Example:
        >>> handler = FileHandler("~/.iotmodem/logs/transcript.log", max_size_mb=10)
        >>> handler.write(entry)
        >>> handler.close()
    """

    def __init__(self, log_file_path: str, max_size_mb: int = 10, backup_count: int = 5):
        """Create the log directory and open the file for appending.

        Raises:
            OSError: If the log directory cannot be created or the file opened
        """
        self.log_file_path = Path(log_file_path).expanduser().resolve()
        self.max_size_bytes = max_size_mb * 1024 * 1024
        self.backup_count = backup_count
        self._lock = Lock()

        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file: Optional[TextIO] = open(self.log_file_path, mode='a', encoding='utf-8')

    @property
    def is_closed(self) -> bool:
        return self._file is None

    def write(self, entry: LogEntry) -> bool:
        """Write one entry; returns False if the handler is closed or the write failed."""
        with self._lock:
            if self._file is None:
                return False
            try:
                self._rotate_if_needed()
                self._file.write(entry.to_string() + '\n')
                self._file.flush()
                return True
            except OSError as e:
                print(f"ERROR: Failed to write log entry: {e}", file=sys.stderr)
                return False

    def _backup_path(self, index: int) -> Path:
        return Path(f"{self.log_file_path}.{index}")

    def _rotate_if_needed(self) -> None:
        # Caller holds self._lock.
        if self._file is None or self._file.tell() < self.max_size_bytes:
            return

        self._file.close()
        oldest = self._backup_path(self.backup_count)
        if oldest.exists():
            oldest.unlink()
        for i in range(self.backup_count - 1, 0, -1):
            if self._backup_path(i).exists():
                self._backup_path(i).rename(self._backup_path(i + 1))
        if self.backup_count > 0:
            self.log_file_path.rename(self._backup_path(1))
        else:
            self.log_file_path.unlink()
        self._file = open(self.log_file_path, mode='a', encoding='utf-8')

    def flush(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.flush()

    def close(self) -> None:
        """Flush and close the file. Idempotent."""
        with self._lock:
            if self._file is None:
                return
            try:
                self._file.flush()
                self._file.close()
            except OSError as e:
                print(f"ERROR: Failed to close log file: {e}", file=sys.stderr)
            finally:
                self._file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
