"""JSON Schema validation for iotmodem configuration."""

from typing import List, Tuple, Dict, Any

from jsonschema import Draft7Validator


class ConfigSchema:
    """Configuration schema validator using JSON Schema Draft 7.

    Example:
        >>> is_valid, errors = ConfigSchema.validate_config(config_dict)
        >>> if not is_valid:
        ...     for error in errors:
        ...         print(error)
    """

    VALID_BAUD_RATES = [9600, 19200, 38400, 57600, 115200, 230400, 460800, 921600]

    @staticmethod
    def get_schema() -> Dict[str, Any]:
        """Get the JSON Schema Draft 7 describing every configuration section."""
        token_list = {
            "type": "array",
            "items": {"type": "string", "minLength": 1}
        }
        return {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "title": "iotmodem configuration",
            "type": "object",
            "properties": {
                "serial": {
                    "type": "object",
                    "properties": {
                        "port": {"type": ["string", "null"], "minLength": 1},
                        "baud_rate": {"type": "integer", "enum": ConfigSchema.VALID_BAUD_RATES},
                        "line_timeout": {"type": "number", "exclusiveMinimum": 0, "maximum": 600},
                        "read_timeout": {"type": "number", "exclusiveMinimum": 0, "maximum": 10},
                        "queue_size": {"type": "integer", "minimum": 1, "maximum": 10000}
                    },
                    "additionalProperties": False
                },
                "device": {
                    "type": "object",
                    "properties": {
                        "model": {"type": "string", "enum": ["generic", "bg95", "n211", "nrf91"]},
                        "debug": {"type": "boolean"},
                        "extra_success_tokens": token_list,
                        "extra_error_tokens": token_list,
                        "extra_delimiters": token_list
                    },
                    "additionalProperties": False
                },
                "logging": {
                    "type": "object",
                    "properties": {
                        "level": {"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR"]},
                        "log_to_console": {"type": "boolean"},
                        "log_to_file": {"type": "boolean"},
                        "log_file_path": {"type": ["string", "null"]},
                        "max_file_size_mb": {"type": "integer", "minimum": 1, "maximum": 1000},
                        "backup_count": {"type": "integer", "minimum": 0, "maximum": 100}
                    },
                    "additionalProperties": False
                }
            },
            "additionalProperties": False
        }

    @staticmethod
    def validate_config(config_dict: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """Validate a configuration dictionary.

        Returns:
            (is_valid, errors) where each error reads 'section.key: message'
        """
        validator = Draft7Validator(ConfigSchema.get_schema())
        errors = []
        for error in sorted(validator.iter_errors(config_dict), key=lambda e: list(e.path)):
            location = ".".join(str(p) for p in error.path) or "<root>"
            errors.append(f"{location}: {error.message}")
        return not errors, errors
