"""Configuration management module for propmatch."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError, format_pydantic_errors
from .loader import load_app_config, load_config, validate_config_file
from .models import AppConfig, LogFormat, LoggingConfig, LogLevel, MatchingConfig

__all__ = [
    # Loader functions
    "load_config",
    "load_app_config",
    "validate_config_file",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "MatchingConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
    "format_pydantic_errors",
]
