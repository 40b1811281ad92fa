"""Configuration management with environment variable and file support."""

import os
import json
import yaml
from dataclasses import dataclass, field
from typing import Dict, Optional, Any
from pathlib import Path
from enum import Enum
import logging


class LogLevel(Enum):
    """Supported log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(Enum):
    """Supported log formats."""
    JSON = "json"
    TEXT = "text"


def _parse_bool(value: str) -> bool:
    return value.lower() in ('true', '1', 'yes', 'on')


def _parse_optional_int(value: str) -> Optional[int]:
    return int(value) if value.strip() else None


@dataclass
class RiskConfig:
    """Configuration for portfolio risk analysis."""
    risk_free_rate_annual: float = 0.02
    market_return_annual: float = 0.08
    trailing_months: int = 12
    var_confidence: float = 0.05
    benchmark_noise: float = 0.02  # Full width of the uniform benchmark perturbation
    benchmark_seed: Optional[int] = None
    rebalance_threshold: float = 0.05
    allocation_tolerance: float = 1e-6
    var_normalization: float = 1_000_000.0
    parallel_execution: bool = True

    def __post_init__(self):
        """Validate risk configuration after initialization."""
        if not 0 <= self.risk_free_rate_annual <= 0.2:
            raise ValueError("risk_free_rate_annual must be between 0 and 0.2")
        if not -1 < self.market_return_annual <= 1:
            raise ValueError("market_return_annual must be between -1 and 1")
        if self.trailing_months < 2:
            raise ValueError("trailing_months must be at least 2")
        if not 0 < self.var_confidence < 0.5:
            raise ValueError("var_confidence must be between 0 and 0.5")
        if self.benchmark_noise < 0:
            raise ValueError("benchmark_noise must be non-negative")
        if not 0 < self.rebalance_threshold < 1:
            raise ValueError("rebalance_threshold must be between 0 and 1")
        if not 0 < self.allocation_tolerance < 0.1:
            raise ValueError("allocation_tolerance must be between 0 and 0.1")
        if self.var_normalization <= 0:
            raise ValueError("var_normalization must be positive")


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = LogLevel.INFO.value
    format: str = LogFormat.TEXT.value
    file_path: Optional[str] = None

    def __post_init__(self):
        """Validate logging configuration after initialization."""
        try:
            LogLevel(self.level.upper())
        except ValueError:
            raise ValueError(f"Invalid log level: {self.level}")
        self.level = self.level.upper()
        try:
            LogFormat(self.format.lower())
        except ValueError:
            raise ValueError(f"Invalid log format: {self.format}")
        self.format = self.format.lower()


@dataclass
class Config:
    """Main configuration combining all subsystem configs."""
    risk: RiskConfig = field(default_factory=RiskConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            section: {
                nested_field: getattr(getattr(self, section), nested_field)
                for nested_field in getattr(self, section).__dataclass_fields__
            }
            for section in self.__dataclass_fields__
        }


class ConfigurationError(Exception):
    """Custom exception for configuration errors."""
    pass


class ConfigManager:
    """Manages configuration loading from environment variables and files."""

    ENV_MAPPING = {
        'risk.risk_free_rate_annual': ('RISK_FREE_RATE', float),
        'risk.market_return_annual': ('MARKET_RETURN', float),
        'risk.trailing_months': ('TRAILING_MONTHS', int),
        'risk.var_confidence': ('VAR_CONFIDENCE', float),
        'risk.benchmark_noise': ('BENCHMARK_NOISE', float),
        'risk.benchmark_seed': ('BENCHMARK_SEED', _parse_optional_int),
        'risk.rebalance_threshold': ('REBALANCE_THRESHOLD', float),
        'risk.allocation_tolerance': ('ALLOCATION_TOLERANCE', float),
        'risk.var_normalization': ('VAR_NORMALIZATION', float),
        'risk.parallel_execution': ('PARALLEL_EXECUTION', _parse_bool),

        'logging.level': ('LOG_LEVEL', str),
        'logging.format': ('LOG_FORMAT', str),
        'logging.file_path': ('LOG_FILE_PATH', str),
    }

    SECTIONS = {
        'risk': RiskConfig,
        'logging': LoggingConfig,
    }

    def __init__(self, config_file: Optional[str] = None, auto_discover: bool = True):
        """
        Initialize ConfigManager.

        Args:
            config_file: Path to a JSON or YAML configuration file
            auto_discover: If True, look for a config file in common locations
        """
        self.config_file = config_file
        self.auto_discover = auto_discover
        self._config = None
        self._logger = logging.getLogger(__name__)

    def load_config(self) -> Config:
        """Load configuration from defaults, optional file, then environment."""
        if self._config is not None:
            return self._config

        try:
            values: Dict[str, Any] = {section: {} for section in self.SECTIONS}

            if not self.config_file and self.auto_discover:
                self.config_file = self._discover_config_file()

            if self.config_file:
                self._merge(values, self._load_from_file())
                self._logger.info(f"Loaded configuration from file: {self.config_file}")

            self._merge(values, self._load_from_env())

            # Dataclass __post_init__ validates the merged values
            config = Config(
                risk=RiskConfig(**values.pop('risk')),
                logging=LoggingConfig(**values.pop('logging')),
            )
            self._config = config
            self._logger.debug("Configuration loaded successfully")
            return config

        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def _discover_config_file(self) -> Optional[str]:
        """Auto-discover a configuration file in common locations."""
        search_paths = [
            "realty_risk.json",
            "realty_risk.yaml",
            "realty_risk.yml",
            ".config/realty_risk.json",
            ".config/realty_risk.yaml",
            os.path.expanduser("~/.realty_risk.json"),
            os.path.expanduser("~/.realty_risk.yaml"),
        ]

        for path in search_paths:
            if Path(path).exists():
                self._logger.info(f"Auto-discovered config file: {path}")
                return path

        return None

    def _load_from_file(self) -> Dict[str, Any]:
        """Load configuration values from a JSON or YAML file."""
        file_path = Path(self.config_file)

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                if file_path.suffix.lower() in ['.yaml', '.yml']:
                    file_config = yaml.safe_load(f)
                else:
                    file_config = json.load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"Config file not found: {self.config_file}")
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Error parsing config file {self.config_file}: {e}")

        if not isinstance(file_config, dict):
            raise ConfigurationError("Configuration file must contain a JSON object or YAML mapping")

        unknown = [key for key in file_config if key not in self.SECTIONS]
        if unknown:
            raise ConfigurationError(f"Unknown configuration sections: {', '.join(sorted(unknown))}")

        return file_config

    def _load_from_env(self) -> Dict[str, Any]:
        """Collect configuration values from environment variables."""
        values: Dict[str, Any] = {}
        for config_path, (env_var, converter) in self.ENV_MAPPING.items():
            env_value = os.getenv(env_var)
            if env_value is None:
                continue
            try:
                if converter == str and env_value == '':
                    converted_value = None
                else:
                    converted_value = converter(env_value)
            except (ValueError, TypeError) as e:
                self._logger.warning(
                    f"Failed to convert environment variable {env_var}='{env_value}': {e}"
                )
                continue

            parts = config_path.split('.')
            target = values
            for part in parts[:-1]:
                target = target.setdefault(part, {})
            target[parts[-1]] = converted_value

        return values

    @staticmethod
    def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> None:
        """Merge override values into base, one level deep for sections."""
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                base[key].update(value)
            else:
                base[key] = value

    def reload_config(self) -> Config:
        """Reload configuration from sources."""
        self._config = None
        return self.load_config()

    def save_config(self, config: Config, file_path: str, format: str = 'json') -> None:
        """Save configuration to file."""
        config_dict = config.to_dict()

        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                if format.lower() == 'yaml':
                    yaml.safe_dump(config_dict, f, default_flow_style=False, indent=2)
                else:
                    json.dump(config_dict, f, indent=2, default=str)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration to {file_path}: {e}") from e

        self._logger.info(f"Configuration saved to {file_path}")


# Global config manager instance
config_manager = ConfigManager()


def get_config() -> Config:
    """Get the global configuration instance."""
    return config_manager.load_config()
