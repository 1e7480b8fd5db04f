"""
Plugin descriptors (META-INF/plugin.xml).

A descriptor is read from an unpacked plugin directory (directly or from one
of its ``lib/*.jar`` files), from a plugin jar, or from a plugin zip that
holds ``{plugin}/lib/*.jar``.
"""

import io
import logging
import xml.etree.ElementTree as ET
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from idekit.core.exceptions import ParseError
from idekit.versioning.build_number import BuildNumber, compare, parse

logger = logging.getLogger(__name__)

PLUGIN_XML = "META-INF/plugin.xml"


@dataclass(frozen=True)
class PluginDescriptor:
    """
    Identity and compatibility range of a plugin.

    Attributes:
        id: Plugin id (falls back to the name when the descriptor has no id)
        name: Display name
        version: Plugin version
        since_build: Lowest compatible build, or None when unbounded
        until_build: Highest compatible build, or None when unbounded
    """

    id: str
    name: Optional[str] = None
    version: Optional[str] = None
    since_build: Optional[str] = None
    until_build: Optional[str] = None

    @property
    def range(self) -> str:
        return f"[{self.since_build or '*'}, {self.until_build or '*'}]"

    def contains(self, build: Union[str, BuildNumber]) -> bool:
        """
        Check whether build is inside [since_build, until_build].

        Raises:
            ParseError: If a bound or build is malformed
        """
        if self.since_build and compare(build, parse(self.since_build)) < 0:
            return False
        if self.until_build and compare(build, parse(self.until_build)) > 0:
            return False
        return True


def parse_plugin_xml(text: Union[str, bytes]) -> PluginDescriptor:
    """
    Parse plugin.xml content.

    Raises:
        ParseError: If the document is malformed or names no plugin
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ParseError(PLUGIN_XML, str(e)) from e

    def text_of(tag: str) -> Optional[str]:
        value = root.findtext(tag)
        return value.strip() if value and value.strip() else None

    name = text_of("name")
    plugin_id = text_of("id") or name
    if not plugin_id:
        raise ParseError(PLUGIN_XML, "descriptor has neither id nor name")

    idea_version = root.find("idea-version")
    since = until = None
    if idea_version is not None:
        since = idea_version.get("since-build") or None
        until = idea_version.get("until-build") or None

    return PluginDescriptor(
        id=plugin_id,
        name=name,
        version=text_of("version"),
        since_build=since,
        until_build=until,
    )


def _from_zip(source) -> Optional[PluginDescriptor]:
    with zipfile.ZipFile(source) as archive:
        names = archive.namelist()
        if PLUGIN_XML in names:
            return parse_plugin_xml(archive.read(PLUGIN_XML))

        # Plugin distribution zip: <plugin>/lib/*.jar
        for name in sorted(names):
            parts = name.split("/")
            if len(parts) == 3 and parts[1] == "lib" and parts[2].endswith(".jar"):
                descriptor = _from_zip(io.BytesIO(archive.read(name)))
                if descriptor is not None:
                    return descriptor
    return None


def read_descriptor(path: Union[str, Path]) -> Optional[PluginDescriptor]:
    """
    Read the descriptor of a plugin directory, jar or zip.

    Returns:
        The descriptor, or None if the plugin has no META-INF/plugin.xml

    Raises:
        ParseError: If plugin.xml is malformed
    """
    path = Path(path)

    if path.is_dir():
        direct = path / PLUGIN_XML
        if direct.is_file():
            return parse_plugin_xml(direct.read_bytes())
        lib = path / "lib"
        if lib.is_dir():
            for jar in sorted(lib.glob("*.jar")):
                try:
                    descriptor = _from_zip(jar)
                except zipfile.BadZipFile:
                    logger.debug(f"Skipping unreadable jar {jar}")
                    continue
                if descriptor is not None:
                    return descriptor
        return None

    if path.is_file() and path.suffix in (".jar", ".zip"):
        try:
            return _from_zip(path)
        except zipfile.BadZipFile as e:
            raise ParseError(str(path), f"not a valid archive: {e}") from e

    return None


__all__ = ["PLUGIN_XML", "PluginDescriptor", "parse_plugin_xml", "read_descriptor"]
