"""YAML configuration parser for idekit.

This module provides parsing and validation for idekit.yaml configuration files.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List
import yaml

from idekit.constants import (
    DEFAULT_IDEA_VERSION,
    DEFAULT_INTELLIJ_REPOSITORY,
    DEFAULT_PRODUCT_CODE,
)
from idekit.core.exceptions import ConfigError, ParseError
from idekit.plugins.notation import PluginNotation
from idekit.runtime.toolchains import ToolchainSpec
from idekit.versioning.ide_version import IDE_TYPES

CONFIG_FILE_NAME = "idekit.yaml"

VALID_PLUGIN_REPOSITORY_TYPES = ["marketplace", "maven", "custom"]
VALID_JBR_VARIANTS = ["sdk", "jcef", "fd", "dcevm", "nomod"]


@dataclass
class IdeConfig:
    """Target IDE."""

    type: str = DEFAULT_PRODUCT_CODE
    version: str = DEFAULT_IDEA_VERSION
    local_path: Optional[str] = None

    @property
    def notation(self) -> str:
        return f"{self.type}-{self.version}"


@dataclass
class RuntimeConfig:
    """Java runtime selection."""

    dir: Optional[str] = None
    version: Optional[str] = None
    variant: Optional[str] = None  # 'sdk', 'jcef', 'fd', 'dcevm', 'nomod'
    arch: Optional[str] = None
    toolchain: Optional[ToolchainSpec] = None


@dataclass
class PluginRepositoryConfig:
    """A plugin repository entry."""

    type: str  # 'marketplace', 'maven', 'custom'
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = None


@dataclass
class RepositoriesConfig:
    """Repository locations."""

    intellij: str = DEFAULT_INTELLIJ_REPOSITORY
    jbr: Optional[str] = None
    plugins: List[PluginRepositoryConfig] = field(default_factory=list)


@dataclass
class UntilBuildConfig:
    """until-build derivation."""

    value: Optional[str] = None
    same_since_until: bool = False


@dataclass
class IdekitConfig:
    """Complete idekit configuration."""

    version: int
    ide: IdeConfig = field(default_factory=IdeConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    plugins: List[PluginNotation] = field(default_factory=list)
    repositories: RepositoriesConfig = field(default_factory=RepositoriesConfig)
    since_build: Optional[str] = None
    until_build: UntilBuildConfig = field(default_factory=UntilBuildConfig)
    cache_dir: Optional[str] = None


def parse_config(config_path: Path) -> IdekitConfig:
    """
    Parse idekit.yaml configuration file.

    Args:
        config_path: Path to idekit.yaml

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        raise ConfigError("Configuration file is empty")

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    return _parse_and_validate(data)


def _parse_and_validate(data: dict) -> IdekitConfig:
    """Parse and validate configuration data."""
    if "version" not in data:
        raise ConfigError("Missing required field: version")

    if data["version"] != 1:
        raise ConfigError(f"Unsupported version: {data['version']} (expected 1)")

    return IdekitConfig(
        version=data["version"],
        ide=_parse_ide(_section(data, "ide")),
        runtime=_parse_runtime(_section(data, "runtime")),
        plugins=_parse_plugins(data.get("plugins") or []),
        repositories=_parse_repositories(_section(data, "repositories")),
        since_build=_optional_str(data.get("since_build")),
        until_build=_parse_until_build(data.get("until_build")),
        cache_dir=_optional_str(data.get("cache_dir")),
    )


def _section(data: dict, name: str) -> dict:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"{name} must be a dictionary")
    return value


def _optional_str(value) -> Optional[str]:
    # YAML reads 213.1234 as a float
    return None if value is None else str(value)


def _parse_ide(data: dict) -> IdeConfig:
    """Parse IDE configuration."""
    ide_type = str(data.get("type", DEFAULT_PRODUCT_CODE)).upper()
    if ide_type not in IDE_TYPES:
        raise ConfigError(
            f"Invalid IDE type: {ide_type} (expected one of {sorted(IDE_TYPES)})"
        )

    return IdeConfig(
        type=ide_type,
        version=str(data.get("version", DEFAULT_IDEA_VERSION)),
        local_path=_optional_str(data.get("local_path")),
    )


def _parse_runtime(data: dict) -> RuntimeConfig:
    """Parse runtime configuration."""
    variant = data.get("variant")
    if variant is not None and variant not in VALID_JBR_VARIANTS:
        raise ConfigError(
            f"Invalid runtime variant: {variant} (expected one of {VALID_JBR_VARIANTS})"
        )

    toolchain = None
    toolchain_data = data.get("toolchain")
    if toolchain_data is not None:
        if not isinstance(toolchain_data, dict):
            raise ConfigError("runtime.toolchain must be a dictionary")
        language_version = toolchain_data.get("language_version")
        if language_version is not None and not isinstance(language_version, int):
            raise ConfigError(
                f"runtime.toolchain.language_version must be an integer: {language_version}"
            )
        toolchain = ToolchainSpec(
            language_version=language_version,
            vendor=toolchain_data.get("vendor"),
        )

    return RuntimeConfig(
        dir=_optional_str(data.get("dir")),
        version=_optional_str(data.get("version")),
        variant=variant,
        arch=data.get("arch"),
        toolchain=toolchain,
    )


def _parse_plugins(data: list) -> List[PluginNotation]:
    """Parse plugin notations."""
    if not isinstance(data, list):
        raise ConfigError("plugins must be a list")

    plugins = []
    for entry in data:
        try:
            plugins.append(PluginNotation.parse(str(entry)))
        except ParseError as e:
            raise ConfigError(f"Invalid plugin notation: {e}")
    return plugins


def _parse_repositories(data: dict) -> RepositoriesConfig:
    """Parse repository configuration."""
    plugins = []
    for entry in data.get("plugins") or []:
        if not isinstance(entry, dict):
            raise ConfigError("repositories.plugins entries must be dictionaries")

        repo_type = entry.get("type", "maven")
        if repo_type not in VALID_PLUGIN_REPOSITORY_TYPES:
            raise ConfigError(
                f"Invalid plugin repository type: {repo_type} "
                f"(expected one of {VALID_PLUGIN_REPOSITORY_TYPES})"
            )
        if repo_type != "marketplace" and not entry.get("url"):
            raise ConfigError(
                f"Plugin repository of type '{repo_type}' missing required field: url"
            )

        if entry.get("token") and entry.get("username"):
            raise ConfigError("Plugin repository takes either token or username, not both")
        if entry.get("password") and not entry.get("username"):
            raise ConfigError("Plugin repository password given without username")

        plugins.append(
            PluginRepositoryConfig(
                type=repo_type,
                url=entry.get("url"),
                username=_optional_str(entry.get("username")),
                password=_optional_str(entry.get("password")),
                token=_optional_str(entry.get("token")),
            )
        )

    return RepositoriesConfig(
        intellij=data.get("intellij", DEFAULT_INTELLIJ_REPOSITORY),
        jbr=data.get("jbr"),
        plugins=plugins,
    )


def _parse_until_build(data) -> UntilBuildConfig:
    """Parse until_build, given either as a value or as a section."""
    if data is None:
        return UntilBuildConfig()
    if not isinstance(data, dict):
        return UntilBuildConfig(value=str(data))

    same_since_until = data.get("same_since_until", False)
    if not isinstance(same_since_until, bool):
        raise ConfigError("until_build.same_since_until must be a boolean")

    return UntilBuildConfig(
        value=_optional_str(data.get("value")),
        same_since_until=same_since_until,
    )
