"""
Plugin dependencies.

- notation: ``id[:version][@channel]`` parsing
- descriptor: META-INF/plugin.xml reading
- repositories: Marketplace, Maven and custom XML repositories
- resolver: bundled lookup, repository fallback and compatibility checks
"""

from .notation import PluginNotation
from .descriptor import PluginDescriptor, read_descriptor
from .repositories import (
    CustomPluginRepository,
    MarketplaceRepository,
    MavenPluginRepository,
    PluginRepository,
    plugin_repositories_from_config,
)
from .resolver import PluginDependency, PluginDependencyResolver

__all__ = [
    "PluginNotation",
    "PluginDescriptor",
    "read_descriptor",
    "CustomPluginRepository",
    "MarketplaceRepository",
    "MavenPluginRepository",
    "PluginRepository",
    "plugin_repositories_from_config",
    "PluginDependency",
    "PluginDependencyResolver",
]
