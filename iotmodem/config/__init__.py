"""Configuration management package.

Provides defaults, YAML file loading, environment variable overrides and
schema validation.
"""

from iotmodem.config.config_models import (
    Config,
    SerialConfig,
    DeviceConfig,
    LoggingConfig,
    DeviceModel,
    LogLevel
)
from iotmodem.config.config_manager import ConfigManager
from iotmodem.config.config_schema import ConfigSchema
from iotmodem.config.defaults import get_default_config

__all__ = [
    'ConfigManager',
    'ConfigSchema',
    'Config',
    'SerialConfig',
    'DeviceConfig',
    'LoggingConfig',
    'DeviceModel',
    'LogLevel',
    'get_default_config',
]
