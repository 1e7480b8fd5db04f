"""
Unit tests for plugin dependency resolution.
"""

from pathlib import Path
from unittest.mock import Mock

import pytest

from idekit.core.exceptions import (
    DownloadError,
    ExtractionError,
    IncompatibleVersionError,
    InvalidNotationError,
    ParseError,
    PluginNotFoundError,
)
from idekit.plugins.notation import PluginNotation
from idekit.plugins.repositories import PluginRepository
from idekit.plugins.resolver import PluginDependencyResolver, _plugin_root
from idekit.repository.downloader import MirroredDownloader


class StubRepository(PluginRepository):
    """Repository serving fixed archives, or failing."""

    def __init__(self, url, archives=None, error=None):
        self.url = url
        self.archives = archives or {}
        self.error = error
        self.calls = []

    def resolve(self, notation, target_build, downloader):
        self.calls.append((notation, target_build))
        if self.error is not None:
            raise self.error
        return self.archives.get(notation.id)


@pytest.fixture
def downloader(temp_dir):
    return MirroredDownloader(cache_dir=temp_dir / "maven")


@pytest.fixture
def plugin_zip(temp_dir, archive_builders):
    """Distribution zip for org.example 1.0 compatible with 213 builds."""
    jar = archive_builders.zip_bytes(
        {"META-INF/plugin.xml": archive_builders.plugin_xml("org.example", "1.0", "213", "213.*")}
    )
    return archive_builders.zip(temp_dir / "repo" / "org.example-1.0.zip", {"example/lib/example.jar": jar})


class TestBuiltinPlugins:
    """Test plugins bundled with the target IDE."""

    def test_by_descriptor_id(self, fake_ide, downloader):
        """Test a bundled plugin is found by its descriptor id."""
        repository = StubRepository("https://repo")
        resolver = PluginDependencyResolver([repository], downloader, ide_dir=fake_ide)

        dependency = resolver.resolve("org.intellij.plugins.markdown")

        assert dependency.builtin
        assert dependency.artifact_path == fake_ide / "plugins" / "markdown"
        assert dependency.version == "213.6777.52"
        assert repository.calls == []

    def test_by_directory_name(self, fake_ide, downloader):
        """Test a bundled plugin is found by its directory name."""
        resolver = PluginDependencyResolver([], downloader, ide_dir=fake_ide)
        assert resolver.resolve("markdown").artifact_path == fake_ide / "plugins" / "markdown"

    def test_listed_in_product_info(self, fake_ide, downloader):
        """Test a plugin listed only in product-info.json resolves to the IDE."""
        resolver = PluginDependencyResolver([], downloader, ide_dir=fake_ide)

        dependency = resolver.resolve("com.intellij.java")

        assert dependency.builtin
        assert dependency.artifact_path == fake_ide
        assert dependency.version == "213.6777.52"

    def test_no_ide(self, downloader):
        """Test nothing is bundled without a target IDE."""
        resolver = PluginDependencyResolver([], downloader)
        assert resolver.find_builtin("com.intellij.java") is None
        assert resolver.target_build() is None

    def test_broken_unrelated_plugin_skipped(self, fake_ide, downloader):
        """Test a malformed plugin.xml elsewhere does not break lookups."""
        broken = fake_ide / "plugins" / "aaa-broken" / "META-INF"
        broken.mkdir(parents=True)
        (broken / "plugin.xml").write_text("<idea-plugin><id>x</id>")
        resolver = PluginDependencyResolver([], downloader, ide_dir=fake_ide)

        markdown = resolver.resolve("org.intellij.plugins.markdown")

        assert markdown.artifact_path == fake_ide / "plugins" / "markdown"
        assert resolver.resolve("com.intellij.java").artifact_path == fake_ide

    def test_broken_requested_plugin_reported(self, fake_ide, downloader):
        """Test a malformed plugin.xml of the requested directory is an error."""
        broken = fake_ide / "plugins" / "broken" / "META-INF"
        broken.mkdir(parents=True)
        (broken / "plugin.xml").write_text("<idea-plugin><id>x</id>")
        resolver = PluginDependencyResolver([], downloader, ide_dir=fake_ide)

        with pytest.raises(ParseError):
            resolver.resolve("broken")


class TestRepositoryResolution:
    """Test resolution through repositories."""

    def test_target_build_from_ide(self, fake_ide, downloader):
        """Test the target build defaults to the IDE build with product code."""
        resolver = PluginDependencyResolver([], downloader, ide_dir=fake_ide)
        assert resolver.target_build() == "IC-213.6777.52"

    def test_extracts_distribution(self, fake_ide, downloader, plugin_zip):
        """Test a downloaded zip is extracted to its plugin directory."""
        repository = StubRepository("https://repo", {"org.example": plugin_zip})
        resolver = PluginDependencyResolver([repository], downloader, ide_dir=fake_ide)

        dependency = resolver.resolve("org.example")

        assert not dependency.builtin
        assert dependency.artifact_path == plugin_zip.parent / "org.example-1.0" / "example"
        assert dependency.version == "1.0"
        assert repository.calls == [(PluginNotation("org.example"), "IC-213.6777.52")]

    def test_latest_placeholder_version_from_descriptor(self, downloader, plugin_zip):
        """Test a 'latest' request reports the version the plugin declares."""
        repository = StubRepository("https://repo", {"org.example": plugin_zip})
        resolver = PluginDependencyResolver([repository], downloader)

        dependency = resolver.resolve("org.example:latest", target_build="213.1")

        assert dependency.version == "1.0"

    def test_jar_used_as_is(self, temp_dir, downloader, archive_builders):
        """Test a plugin jar is not extracted."""
        jar = archive_builders.zip(
            temp_dir / "org.example-2.0.jar",
            {"META-INF/plugin.xml": archive_builders.plugin_xml("org.example", "2.0")},
        )
        resolver = PluginDependencyResolver([StubRepository("r", {"org.example": jar})], downloader)

        dependency = resolver.resolve("org.example:2.0@eap")

        assert dependency.artifact_path == jar
        assert dependency.channel == "eap"

    def test_corrupt_distribution_discarded(self, temp_dir, downloader):
        """Test a zip that does not extract is removed so it is fetched again."""
        archive = temp_dir / "repo" / "org.example-1.0.zip"
        archive.parent.mkdir()
        archive.write_bytes(b"<html>proxy error</html>")
        repository = StubRepository("r", {"org.example": archive})
        resolver = PluginDependencyResolver([repository], downloader)

        with pytest.raises(ExtractionError):
            resolver.resolve("org.example:1.0", target_build="213.1")

        assert not archive.exists()

    def test_failing_repository_falls_through(self, downloader, plugin_zip):
        """Test a failing repository moves on to the next one."""
        first = StubRepository("https://first", error=DownloadError("boom"))
        second = StubRepository("https://second", {"org.example": plugin_zip})
        resolver = PluginDependencyResolver([first, second], downloader)

        dependency = resolver.resolve("org.example:1.0", target_build="213.1")

        assert dependency.version == "1.0"
        assert len(first.calls) == 1

    def test_not_found_lists_repositories(self, downloader):
        """Test the error names every repository that was tried."""
        first = StubRepository("https://first", error=OSError("offline"))
        second = StubRepository("https://second")
        resolver = PluginDependencyResolver([first, second], downloader)

        with pytest.raises(PluginNotFoundError) as exc_info:
            resolver.resolve("org.missing")

        assert exc_info.value.attempted == [
            "StubRepository(https://first)",
            "StubRepository(https://second)",
        ]

    def test_incompatible_plugin(self, downloader, plugin_zip):
        """Test a plugin outside the target build range is rejected."""
        fallback = StubRepository("https://second", {"org.example": plugin_zip})
        resolver = PluginDependencyResolver(
            [StubRepository("https://first", {"org.example": plugin_zip}), fallback], downloader
        )

        with pytest.raises(IncompatibleVersionError, match="221.3427.89"):
            resolver.resolve("org.example", target_build="221.3427.89")
        assert fallback.calls == []

    def test_invalid_notation(self, downloader):
        """Test an empty plugin id is rejected."""
        resolver = PluginDependencyResolver([], downloader)
        with pytest.raises(InvalidNotationError):
            resolver.resolve(":1.0")

    def test_resolve_all(self, fake_ide, downloader):
        """Test several notations resolve in order."""
        resolver = PluginDependencyResolver([], downloader, ide_dir=fake_ide)

        dependencies = resolver.resolve_all(["com.intellij.java", "org.intellij.plugins.markdown"])

        assert [d.id for d in dependencies] == ["com.intellij.java", "org.intellij.plugins.markdown"]

    def test_mock_repository(self, downloader, plugin_zip):
        """Test any PluginRepository implementation is accepted."""
        repository = Mock(spec=PluginRepository)
        repository.resolve.return_value = plugin_zip
        resolver = PluginDependencyResolver([repository], downloader)

        resolver.resolve("org.example", target_build="213.5744.223")

        repository.resolve.assert_called_once_with(
            PluginNotation("org.example"), "213.5744.223", downloader
        )


class TestPluginRoot:
    """Test locating the plugin inside an extracted zip."""

    def test_single_directory(self, temp_dir):
        """Test a single top-level directory is the plugin."""
        (temp_dir / "plugin" / "lib").mkdir(parents=True)
        assert _plugin_root(temp_dir) == temp_dir / "plugin"

    def test_lib_at_top(self, temp_dir):
        """Test an archive with lib/ at the top is the plugin itself."""
        (temp_dir / "lib").mkdir()
        assert _plugin_root(temp_dir) == temp_dir

    def test_several_directories(self, temp_dir):
        """Test several top-level directories keep the extraction root."""
        (temp_dir / "a").mkdir()
        (temp_dir / "b").mkdir()
        assert _plugin_root(Path(temp_dir)) == temp_dir
