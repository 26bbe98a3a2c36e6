"""
MyShell Configuration Loader

Configuration management for the shell:
- JSON configuration file loading
- Default value handling
- Type-safe access through dataclasses
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from myshell.exceptions import InvalidArgumentError
from myshell.logger import LogLevel


class ConfigValidationError(InvalidArgumentError):
    """Raised when a configuration file cannot be loaded or is invalid."""
    pass


@dataclass
class LimitsConfig:
    """Fixed-capacity bounds enforced by the pipeline."""
    max_input_size: int = 1024
    max_args: int = 64
    max_path_size: int = 1024
    max_allocation_size: int = 10 * 1024 * 1024  # 10 MB


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    enabled: bool = True
    level: str = "INFO"
    log_file: str = "~/.myshell.log"
    console_output: bool = False


@dataclass
class MemoryConfig:
    """Allocation registry settings."""
    tracking_enabled: bool = True
    report_stats_on_exit: bool = False


@dataclass
class ShellConfig:
    """Shell configuration settings."""
    banner: str = "MyShell v1.0 - Linux Shell Interpreter"
    truncate_excess_tokens: bool = False
    default_home: str = "/tmp"
    default_path: str = "/bin:/usr/bin:/usr/local/bin"
    fallback_dir: str = "/tmp"


@dataclass
class Config:
    """
    Main configuration container.

    Holds all configuration settings for the shell.
    """
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)


class ConfigLoader:
    """
    Configuration loader.

    Loads configuration from JSON files. Sections and keys absent from
    the file keep their defaults.

    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load('myshell.json')
        >>> config.limits.max_input_size
        1024
    """

    def __init__(self):
        self._config = Config()

    def load(self, config_path: str) -> Config:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Config object with loaded settings

        Raises:
            ConfigValidationError: If the file cannot be loaded or parsed
        """
        path = Path(config_path).expanduser()

        if not path.exists():
            raise ConfigValidationError(
                f"Configuration file not found: {config_path}",
                context="load_config"
            )

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(
                f"Invalid JSON in configuration file: {e}",
                context="load_config"
            )
        except OSError as e:
            raise ConfigValidationError(
                f"Cannot read configuration file: {e}",
                context="load_config",
                os_error=e
            )

        if not isinstance(data, dict):
            raise ConfigValidationError(
                "Configuration root must be an object",
                context="load_config"
            )

        self._config = self._parse_config(data)
        return self._config

    def _parse_config(self, data: dict[str, Any]) -> Config:
        """Parse configuration data into a Config object."""
        config = Config()

        for section in fields(Config):
            section_data = data.get(section.name)
            if section_data is None:
                continue
            if not isinstance(section_data, dict):
                raise ConfigValidationError(
                    f"Section '{section.name}' must be an object",
                    context="load_config"
                )

            current = getattr(config, section.name)
            known = {f.name: f for f in fields(current)}
            for key, value in section_data.items():
                if key not in known:
                    raise ConfigValidationError(
                        f"Unknown configuration key: {section.name}.{key}",
                        context="load_config"
                    )
                default = getattr(current, key)
                if type(value) is not type(default):
                    raise ConfigValidationError(
                        f"Invalid type for {section.name}.{key}: "
                        f"expected {type(default).__name__}",
                        context="load_config"
                    )
                setattr(current, key, value)

        self._validate(config)
        return config

    @staticmethod
    def _validate(config: Config) -> None:
        limits = config.limits
        for name in ('max_input_size', 'max_args', 'max_path_size', 'max_allocation_size'):
            if getattr(limits, name) <= 0:
                raise ConfigValidationError(
                    f"limits.{name} must be positive",
                    context="load_config"
                )

        if config.logging.level.upper() not in LogLevel.__members__:
            raise ConfigValidationError(
                f"logging.level must be one of {', '.join(LogLevel.__members__)}",
                context="load_config"
            )

    @property
    def config(self) -> Config:
        """Get the current configuration."""
        return self._config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        def dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, '__dataclass_fields__'):
                return {
                    k: dataclass_to_dict(v)
                    for k, v in obj.__dict__.items()
                }
            return obj

        return dataclass_to_dict(self._config)
