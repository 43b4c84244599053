"""Build a configured device adapter from a Config."""

from pathlib import Path
from typing import Dict, Optional, Type

from iotmodem.config.config_models import Config, DeviceModel
from iotmodem.core.command_interface import CommandInterface
from iotmodem.core.exceptions import ConfigurationError
from iotmodem.devices.bg95 import BG95Device
from iotmodem.devices.default import DefaultDevice
from iotmodem.devices.n211 import N211Device
from iotmodem.devices.nrf91 import NRF91Device
from iotmodem.logging.communication_logger import CommunicationLogger

DEVICE_TYPES: Dict[DeviceModel, Type[DefaultDevice]] = {
    DeviceModel.GENERIC: DefaultDevice,
    DeviceModel.BG95: BG95Device,
    DeviceModel.N211: N211Device,
    DeviceModel.NRF91: NRF91Device,
}

DEFAULT_LOG_FILE = Path.home() / ".iotmodem" / "logs" / "transcript.log"


def create_logger(config: Config) -> CommunicationLogger:
    """Create the transcript sink described by the logging section."""
    log_config = config.logging
    log_file_path = None
    if log_config.log_to_file:
        log_file_path = log_config.log_file_path or str(DEFAULT_LOG_FILE)
    return CommunicationLogger(
        log_level=log_config.level,
        enable_file=log_config.log_to_file,
        enable_console=log_config.log_to_console,
        log_file_path=log_file_path,
        max_file_size_mb=log_config.max_file_size_mb,
        backup_count=log_config.backup_count
    )


def create_device(config: Config,
                  logger: Optional[CommunicationLogger] = None) -> DefaultDevice:
    """Create an unstarted adapter for config.device.model.

    Extra tokens and delimiters from the device section are added on top of
    the adapter's own vocabulary.

    Raises:
        ConfigurationError: No serial port configured
    """
    if not config.serial.port:
        raise ConfigurationError("No serial port configured (serial.port / IOTMODEM_SERIAL_PORT)")

    cmd = CommandInterface(
        config.serial.port,
        baud_rate=config.serial.baud_rate,
        line_timeout=config.serial.line_timeout,
        queue_size=config.serial.queue_size,
        read_timeout=config.serial.read_timeout,
        logger=logger or create_logger(config)
    )
    for token in config.device.extra_success_tokens:
        cmd.add_success_token(token)
    for token in config.device.extra_error_tokens:
        cmd.add_error_token(token)
    for delimiter in config.device.extra_delimiters:
        cmd.add_delimiter(delimiter)
    cmd.set_debug(config.device.debug)

    device_type = DEVICE_TYPES[config.device.model]
    return device_type(config.serial.port, cmd=cmd)


def open_device(config: Config,
                logger: Optional[CommunicationLogger] = None) -> DefaultDevice:
    """Create the adapter for config and start it; closes it again if start fails."""
    device = create_device(config, logger)
    try:
        device.start()
    except Exception:
        device.close()
        raise
    return device
