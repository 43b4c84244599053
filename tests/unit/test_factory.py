"""Unit tests for building devices from configuration."""

from unittest.mock import patch

import pytest

from iotmodem.config.config_models import (
    Config,
    DeviceConfig,
    DeviceModel,
    LoggingConfig,
    LogLevel,
    SerialConfig,
)
from iotmodem.core.exceptions import ConfigurationError
from iotmodem.devices import BG95Device, DefaultDevice, create_device, create_logger, open_device


def make_config(**device):
    return Config(
        serial=SerialConfig(port="/dev/ttyUSB0", line_timeout=2.0, queue_size=4),
        device=DeviceConfig(**device),
        logging=LoggingConfig(log_to_console=False)
    )


class TestCreateDevice:
    """Test create_device()."""

    def test_requires_port(self):
        with pytest.raises(ConfigurationError, match="No serial port"):
            create_device(Config())

    def test_generic_device(self, comm_logger):
        device = create_device(make_config(), comm_logger)

        assert type(device) is DefaultDevice
        assert device.cmd.port == "/dev/ttyUSB0"
        assert device.cmd.line_timeout == 2.0
        assert device.cmd.logger is comm_logger
        assert not device.cmd.is_running

    def test_model_and_extras(self, comm_logger):
        device = create_device(
            make_config(
                model=DeviceModel.BG95,
                debug=True,
                extra_success_tokens=["CONNECT"],
                extra_error_tokens=["NO CARRIER"],
                extra_delimiters=["@"]
            ),
            comm_logger
        )

        assert isinstance(device, BG95Device)
        assert device.cmd.debug is True
        assert device.cmd.success_tokens == ("OK", "CONNECT", "SEND OK")
        assert device.cmd.error_tokens == ("ERROR", "NO CARRIER", "SEND FAIL")
        assert device.cmd.delimiters == ("\r\n", "@", ">")


class TestOpenDevice:
    """Test open_device()."""

    def test_closes_on_start_failure(self, comm_logger):
        with patch.object(DefaultDevice, "start", side_effect=ConfigurationError("boom")), \
                patch.object(DefaultDevice, "close") as mock_close:
            with pytest.raises(ConfigurationError, match="boom"):
                open_device(make_config(), comm_logger)

        mock_close.assert_called_once()


class TestCreateLogger:
    """Test create_logger()."""

    def test_console_only(self):
        logger = create_logger(Config(logging=LoggingConfig(level=LogLevel.WARNING)))
        assert logger.log_level == "WARNING"
        assert logger.enable_console is True
        assert logger.enable_file is False

    def test_file_logging(self, tmp_path):
        path = tmp_path / "logs" / "transcript.log"
        config = Config(logging=LoggingConfig(
            log_to_console=False, log_to_file=True, log_file_path=str(path)
        ))

        logger = create_logger(config)
        logger.log_consumed("/dev/ttyUSB0", "RDY")
        logger.close()

        assert "CONSUME 'RDY'" in path.read_text(encoding="utf-8")
