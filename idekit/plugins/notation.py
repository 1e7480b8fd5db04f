"""
Plugin dependency notation: ``id[:version][@channel]``.
"""

from dataclasses import dataclass
from typing import Optional

from idekit.core.exceptions import InvalidNotationError


@dataclass(frozen=True)
class PluginNotation:
    """
    A requested plugin dependency.

    Attributes:
        id: Plugin id, e.g. 'org.intellij.plugins.markdown'
        version: Requested version, or None for the latest compatible one
        channel: Marketplace channel, or None for the default channel
    """

    id: str
    version: Optional[str] = None
    channel: Optional[str] = None

    @classmethod
    def parse(cls, value: str) -> "PluginNotation":
        """
        Parse a compact notation.

        Raises:
            InvalidNotationError: If the id is empty

        Example:
            >>> PluginNotation.parse("com.example.plugin:1.2.3@eap")
            PluginNotation(id='com.example.plugin', version='1.2.3', channel='eap')
        """
        text = (value or "").strip()
        id_version, _, channel = text.partition("@")
        plugin_id, _, version = id_version.partition(":")

        plugin_id = plugin_id.strip()
        if not plugin_id:
            raise InvalidNotationError(value or "", "plugin id is empty")

        return cls(
            id=plugin_id,
            version=version.strip() or None,
            channel=channel.strip() or None,
        )

    def with_version(self, version: str) -> "PluginNotation":
        return PluginNotation(self.id, version, self.channel)

    def __str__(self) -> str:
        text = self.id
        if self.version:
            text += f":{self.version}"
        if self.channel:
            text += f"@{self.channel}"
        return text


__all__ = ["PluginNotation"]
