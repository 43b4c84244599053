"""Configuration loading for iotmodem.

Configuration is layered: built-in defaults, then a YAML file, then
IOTMODEM_<SECTION>_<KEY> environment variables. The merged result is
validated against a JSON schema before it is turned into a frozen Config.
"""

from pathlib import Path
from typing import Optional, Dict, Any, List
from copy import deepcopy
import os

import yaml

from iotmodem.config.config_models import (
    Config,
    SerialConfig,
    DeviceConfig,
    LoggingConfig,
    DeviceModel,
    LogLevel
)
from iotmodem.config.defaults import get_default_config
from iotmodem.config.config_schema import ConfigSchema
from iotmodem.core.exceptions import ConfigurationError


class ConfigManager:
    """Loads and validates configuration, remembering where each value came from.

    Example:
        >>> manager = ConfigManager(Path("iotmodem.yaml"))
        >>> config = manager.load()
        >>> config.serial.baud_rate
        115200
        >>> manager.get_source("serial.baud_rate")
        'default'
    """

    ENV_PREFIX = "IOTMODEM_"

    def __init__(self, config_path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None):
        """Create a manager.

        Args:
            config_path: YAML file to load. If None, standard locations are searched.
            environ: Environment mapping to read overrides from (default: os.environ)
        """
        self.config_path = config_path
        self.environ = os.environ if environ is None else environ
        self._config: Optional[Config] = None
        self._config_source: Dict[str, str] = {}

    @property
    def config(self) -> Config:
        """The loaded configuration; loads on first access."""
        if self._config is None:
            return self.load()
        return self._config

    def load(self) -> Config:
        """Run the defaults -> file -> environment -> validate pipeline.

        Raises:
            ConfigurationError: File unreadable, or merged configuration invalid
        """
        self._config_source = {}

        config_dict = get_default_config().to_dict()
        self._mark_source(config_dict, "default")

        path = self.config_path or self._search_config_paths()
        if path is not None:
            if not path.exists():
                raise ConfigurationError(f"Config file not found: {path}")
            try:
                file_config = self._load_from_file(path)
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Failed to load config from {path}: {e}") from e
            if not isinstance(file_config, dict):
                raise ConfigurationError(f"Config file {path} must contain a mapping")
            config_dict = self._merge_configs(config_dict, file_config)
            self._mark_source(file_config, "file")
            self.config_path = path

        env_overrides = self._apply_env_overrides()
        if env_overrides:
            config_dict = self._merge_configs(config_dict, env_overrides)
            self._mark_source(env_overrides, "env")

        is_valid, errors = ConfigSchema.validate_config(config_dict)
        if not is_valid:
            raise ConfigurationError("Configuration validation failed", errors)

        self._config = self._dict_to_config(config_dict)
        return self._config

    def get_source(self, key: str) -> Optional[str]:
        """Where 'section.key' was last set: 'default', 'file' or 'env'."""
        return self._config_source.get(key)

    @staticmethod
    def _search_config_paths() -> Optional[Path]:
        """Search ./iotmodem.yaml, then ~/.iotmodem/config.yaml."""
        search_paths = [
            Path("./iotmodem.yaml"),
            Path.home() / ".iotmodem" / "config.yaml"
        ]
        for path in search_paths:
            if path.exists() and path.is_file():
                return path
        return None

    @staticmethod
    def _load_from_file(path: Path) -> Dict[str, Any]:
        with open(path, 'r', encoding='utf-8') as f:
            config_dict = yaml.safe_load(f)
        return config_dict if config_dict is not None else {}

    def _apply_env_overrides(self) -> Dict[str, Any]:
        """Collect IOTMODEM_<SECTION>_<KEY> overrides.

        Examples:
            IOTMODEM_SERIAL_PORT=/dev/ttyUSB0
            IOTMODEM_SERIAL_LINE_TIMEOUT=2.5
            IOTMODEM_DEVICE_EXTRA_SUCCESS_TOKENS=SEND OK,CONNECT
        """
        overrides: Dict[str, Any] = {}

        for env_name, env_value in self.environ.items():
            if not env_name.startswith(self.ENV_PREFIX):
                continue

            parts = env_name[len(self.ENV_PREFIX):].lower().split('_', 1)
            if len(parts) != 2:
                continue

            section, key = parts
            if key.startswith('extra_'):
                # Token lists stay text; "0" is the ATV0 form of OK.
                value: Any = [v.strip() for v in env_value.split(',')]
            else:
                value = self._parse_env_value(env_value)
            overrides.setdefault(section, {})[key] = value

        return overrides

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """Parse an environment value to bool, int, float, list or str."""
        if value.lower() in ('true', 'yes', 'on'):
            return True
        if value.lower() in ('false', 'no', 'off'):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        if ',' in value:
            return [v.strip() for v in value.split(',')]

        return value

    @staticmethod
    def _merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        merged = deepcopy(base)

        for section, section_values in override.items():
            if isinstance(section_values, dict) and isinstance(merged.get(section), dict):
                merged[section].update(section_values)
            else:
                merged[section] = section_values

        return merged

    def _mark_source(self, config: Dict[str, Any], source: str) -> None:
        for section, section_values in config.items():
            if isinstance(section_values, dict):
                for key in section_values.keys():
                    self._config_source[f"{section}.{key}"] = source

    @staticmethod
    def _dict_to_config(config_dict: Dict[str, Any]) -> Config:
        def as_list(value: Any) -> List[str]:
            if value is None:
                return []
            if isinstance(value, str):
                return [value]
            return list(value)

        serial_dict = config_dict.get('serial', {})
        serial = SerialConfig(
            port=serial_dict.get('port'),
            baud_rate=serial_dict.get('baud_rate', 115200),
            line_timeout=float(serial_dict.get('line_timeout', 5.0)),
            read_timeout=float(serial_dict.get('read_timeout', 0.1)),
            queue_size=serial_dict.get('queue_size', 10)
        )

        device_dict = config_dict.get('device', {})
        device = DeviceConfig(
            model=DeviceModel(device_dict.get('model', 'generic')),
            debug=device_dict.get('debug', False),
            extra_success_tokens=as_list(device_dict.get('extra_success_tokens')),
            extra_error_tokens=as_list(device_dict.get('extra_error_tokens')),
            extra_delimiters=as_list(device_dict.get('extra_delimiters'))
        )

        logging_dict = config_dict.get('logging', {})
        logging = LoggingConfig(
            level=LogLevel(logging_dict.get('level', 'INFO')),
            log_to_console=logging_dict.get('log_to_console', True),
            log_to_file=logging_dict.get('log_to_file', False),
            log_file_path=logging_dict.get('log_file_path'),
            max_file_size_mb=logging_dict.get('max_file_size_mb', 10),
            backup_count=logging_dict.get('backup_count', 5)
        )

        return Config(serial=serial, device=device, logging=logging)
