"""Default configuration values for zero-config operation."""

from iotmodem.config.config_models import (
    Config,
    SerialConfig,
    DeviceConfig,
    LoggingConfig,
    DeviceModel,
    LogLevel
)


def get_default_config() -> Config:
    """Get default configuration.

    Default Values:
        - Serial: no port, 115200 baud, 5s line timeout, queues of 10 lines
        - Device: generic 3GPP dialect, debug transcripts off
        - Logging: INFO level to console, no file output
    """
    return Config(
        serial=SerialConfig(
            port=None,  # Must come from file or IOTMODEM_SERIAL_PORT
            baud_rate=115200,
            line_timeout=5.0,
            read_timeout=0.1,
            queue_size=10
        ),
        device=DeviceConfig(
            model=DeviceModel.GENERIC,
            debug=False,
            extra_success_tokens=[],
            extra_error_tokens=[],
            extra_delimiters=[]
        ),
        logging=LoggingConfig(
            level=LogLevel.INFO,
            log_to_console=True,
            log_to_file=False,
            log_file_path=None,  # ~/.iotmodem/logs/transcript.log when file logging is on
            max_file_size_mb=10,
            backup_count=5
        )
    )
