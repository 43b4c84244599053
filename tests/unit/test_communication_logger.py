"""Unit tests for CommunicationLogger."""

import pytest

from iotmodem.config.config_models import LogLevel
from iotmodem.logging.communication_logger import CommunicationLogger


@pytest.fixture
def logger():
    comm_logger = CommunicationLogger(log_level=LogLevel.DEBUG, enable_console=False)
    yield comm_logger
    comm_logger.close()


class TestCommunicationLoggerInit:
    """Test construction."""

    def test_file_logging_requires_path(self):
        with pytest.raises(ValueError, match="log_file_path"):
            CommunicationLogger(enable_file=True)

    def test_accepts_level_name(self):
        comm_logger = CommunicationLogger(log_level="WARNING", enable_console=False)
        assert comm_logger.log_level == "WARNING"


class TestTranscriptLogging:
    """Test log_transcript()."""

    def test_one_entry_per_line(self, logger):
        logger.log_transcript(
            port="/dev/ttyUSB0",
            command="AT+CIMI",
            transcript=["[ 0]  > AT+CIMI", "[ 1]  < ERROR"],
            status="error",
            level="ERROR",
            execution_time=0.05
        )

        entries = logger.get_entries()
        assert [e.message for e in entries] == ["[ 0]  > AT+CIMI", "[ 1]  < ERROR"]
        for e in entries:
            assert e.level == "ERROR"
            assert e.source == "CommandInterface"
            assert e.port == "/dev/ttyUSB0"
            assert e.command == "AT+CIMI"
            assert e.status == "error"
            assert e.execution_time == 0.05

    def test_console_output(self, capsys):
        comm_logger = CommunicationLogger(log_level=LogLevel.INFO, enable_console=True)
        comm_logger.log_transcript("/dev/ttyUSB0", "AT", ["[ 0]  > AT"], "timeout", level="WARNING")

        err = capsys.readouterr().err
        assert "| WARNING | CommandInterface | [ 0]  > AT | CMD: AT | STATUS: timeout" in err

    def test_file_output(self, tmp_path):
        path = tmp_path / "logs" / "transcript.log"
        with CommunicationLogger(enable_file=True, enable_console=False,
                                 log_file_path=str(path)) as comm_logger:
            comm_logger.log_transcript("/dev/ttyUSB0", "AT+CIMI", ["[ 0]  > AT+CIMI"], "error",
                                       level="ERROR")

        assert "[ 0]  > AT+CIMI" in path.read_text(encoding="utf-8")


class TestLevelFiltering:
    """Test level thresholds."""

    def test_lower_levels_dropped(self):
        comm_logger = CommunicationLogger(log_level=LogLevel.ERROR, enable_console=False)
        comm_logger.log_transcript("/dev/ttyUSB0", "AT", ["[ 0]  > AT", "[ 1]  < OK"], "success")
        comm_logger.log_error(source="CommandInterface", error="framer terminated")

        entries = comm_logger.get_entries()
        assert len(entries) == 1
        assert entries[0].error == "framer terminated"

    def test_set_level(self, logger):
        logger.set_level(LogLevel.WARNING)
        logger.log_consumed("/dev/ttyUSB0", "RDY")
        assert logger.get_entries() == []


class TestOtherEvents:
    """Test consumed lines, port events and buffer access."""

    def test_log_consumed(self, logger):
        logger.log_consumed("/dev/ttyUSB0", "+CEREG: 5")
        assert logger.get_entries()[0].message == "CONSUME '+CEREG: 5'"

    def test_log_port_event(self, logger):
        logger.log_port_event("Port opened", "/dev/ttyUSB0", {"baud_rate": 115200})

        entry = logger.get_entries()[0]
        assert entry.source == "SerialHandler"
        assert entry.message == "Port opened"
        assert entry.details == {"baud_rate": 115200}

    def test_get_entries_limit(self, logger):
        for i in range(5):
            logger.log_consumed("/dev/ttyUSB0", str(i))

        assert [e.message for e in logger.get_entries(limit=2)] == ["CONSUME '3'", "CONSUME '4'"]

    def test_buffer_size(self):
        comm_logger = CommunicationLogger(enable_console=False, buffer_size=3)
        for i in range(5):
            comm_logger.log_consumed("/dev/ttyUSB0", str(i))
        assert len(comm_logger.get_entries()) == 3

    def test_clear_buffer(self, logger):
        logger.log_consumed("/dev/ttyUSB0", "RDY")
        logger.clear_buffer()
        assert logger.get_entries() == []
