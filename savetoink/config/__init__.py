"""Configuration management for savetoink."""

from .loader import Config, load_config, save_config
from .models import (
    ConfigModel,
    EmailConfig,
    ExtractorConfig,
    LoggingConfig,
    PaginationConfig,
    PostgresConfig,
    StorageConfig,
)

__all__ = [
    "Config",
    "ConfigModel",
    "EmailConfig",
    "ExtractorConfig",
    "LoggingConfig",
    "PaginationConfig",
    "PostgresConfig",
    "StorageConfig",
    "load_config",
    "save_config",
]
