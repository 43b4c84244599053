"""Unit tests for the rotating FileHandler."""

from datetime import datetime

from iotmodem.logging.file_handler import FileHandler
from iotmodem.logging.log_models import LogEntry


def entry(message):
    return LogEntry(
        timestamp=datetime(2025, 1, 12, 10, 30, 15),
        level="INFO",
        source="CommandInterface",
        message=message
    )


class TestFileHandler:
    """Test writing, rotation and closing."""

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "logs" / "nested" / "transcript.log"
        with FileHandler(str(path)) as handler:
            assert handler.write(entry("[ 0]  > AT"))

        assert path.read_text(encoding="utf-8").endswith("| [ 0]  > AT\n")

    def test_appends_to_existing_file(self, tmp_path):
        path = tmp_path / "transcript.log"
        path.write_text("previous\n", encoding="utf-8")

        with FileHandler(str(path)) as handler:
            handler.write(entry("next"))

        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "previous"
        assert lines[1].endswith("| next")

    def test_rotation(self, tmp_path):
        path = tmp_path / "transcript.log"
        handler = FileHandler(str(path), max_size_mb=0, backup_count=2)
        for message in ("first", "second", "third"):
            handler.write(entry(message))
        handler.close()

        assert path.read_text(encoding="utf-8").strip().endswith("third")
        assert (tmp_path / "transcript.log.1").read_text(encoding="utf-8").strip().endswith("second")
        assert (tmp_path / "transcript.log.2").read_text(encoding="utf-8").strip().endswith("first")
        assert not (tmp_path / "transcript.log.3").exists()

    def test_write_after_close(self, tmp_path):
        handler = FileHandler(str(tmp_path / "transcript.log"))
        handler.close()

        assert handler.is_closed
        assert handler.write(entry("dropped")) is False

    def test_close_idempotent(self, tmp_path):
        handler = FileHandler(str(tmp_path / "transcript.log"))
        handler.close()
        handler.close()
        assert handler.is_closed
