"""Configuration module for idekit.

This module provides YAML configuration parsing and validation for idekit.yaml.
"""

from idekit.config.parser import (
    CONFIG_FILE_NAME,
    IdeConfig,
    RuntimeConfig,
    PluginRepositoryConfig,
    RepositoriesConfig,
    UntilBuildConfig,
    IdekitConfig,
    ConfigError,
    parse_config,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "IdeConfig",
    "RuntimeConfig",
    "PluginRepositoryConfig",
    "RepositoriesConfig",
    "UntilBuildConfig",
    "IdekitConfig",
    "ConfigError",
    "parse_config",
]
