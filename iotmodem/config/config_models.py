"""Configuration data models for iotmodem.

Immutable dataclasses with defaults that work without any config file.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List, Optional, Dict, Any


class LogLevel(Enum):
    """Logging level."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class DeviceModel(Enum):
    """Supported device dialects."""
    GENERIC = "generic"
    BG95 = "bg95"
    N211 = "n211"
    NRF91 = "nrf91"


@dataclass(frozen=True)
class SerialConfig:
    """Serial transport and transaction timing."""
    port: Optional[str] = None
    baud_rate: int = 115200
    line_timeout: float = 5.0  # seconds per response line
    read_timeout: float = 0.1  # seconds a single port read may block
    queue_size: int = 10


@dataclass(frozen=True)
class DeviceConfig:
    """Device dialect and vocabulary extensions."""
    model: DeviceModel = DeviceModel.GENERIC
    debug: bool = False
    extra_success_tokens: List[str] = field(default_factory=list)
    extra_error_tokens: List[str] = field(default_factory=list)
    extra_delimiters: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class LoggingConfig:
    """Transcript log sink configuration."""
    level: LogLevel = LogLevel.INFO
    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: Optional[str] = None
    max_file_size_mb: int = 10
    backup_count: int = 5


@dataclass(frozen=True)
class Config:
    """Complete configuration object with all sections."""
    serial: SerialConfig = field(default_factory=SerialConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a plain dictionary (enums as values)."""
        def convert_value(obj: Any) -> Any:
            if isinstance(obj, Enum):
                return obj.value
            elif isinstance(obj, list):
                return [convert_value(item) for item in obj]
            elif isinstance(obj, dict):
                return {k: convert_value(v) for k, v in obj.items()}
            return obj

        return convert_value(asdict(self))
