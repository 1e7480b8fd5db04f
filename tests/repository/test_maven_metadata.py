"""
Unit tests for maven-metadata.xml handling.
"""

import pytest
import responses

from idekit.core.exceptions import ArtifactNotFoundError, DownloadError
from idekit.repository.maven_metadata import (
    MavenMetadata,
    closest_version,
    fetch_metadata,
    is_latest,
    parse_metadata,
    resolve_latest_version,
)

METADATA = """<?xml version="1.0" encoding="UTF-8"?>
<metadata>
  <groupId>com.jetbrains.intellij.java</groupId>
  <artifactId>java-compiler-ant-tasks</artifactId>
  <versioning>
    <latest>213.6777.52</latest>
    <release>213.6461.79</release>
    <versions>
      <version>211.7628.21</version>
      <version>212.5457.46</version>
      <version>213.6461.79</version>
      <version>213.6777.52</version>
    </versions>
  </versioning>
</metadata>
"""


class TestParseMetadata:
    """Test parse_metadata."""

    def test_parse(self):
        """Test versions, latest and release are read."""
        metadata = parse_metadata(METADATA)
        assert metadata.versions == ["211.7628.21", "212.5457.46", "213.6461.79", "213.6777.52"]
        assert metadata.latest == "213.6777.52"
        assert metadata.release == "213.6461.79"

    def test_no_versioning(self):
        """Test a document without versioning is empty."""
        assert parse_metadata("<metadata/>") == MavenMetadata()

    def test_newest_prefers_release(self):
        """Test newest falls back from release to latest to the last version."""
        assert MavenMetadata(["1", "2"], latest="2", release="1").newest == "1"
        assert MavenMetadata(["1", "2"], latest="2").newest == "2"
        assert MavenMetadata(["1", "2"]).newest == "2"
        assert MavenMetadata().newest is None


class TestFetchMetadata:
    """Test fetch_metadata."""

    @responses.activate
    def test_fetch(self):
        """Test fetching metadata."""
        responses.add(responses.GET, "https://repo/maven-metadata.xml", body=METADATA)
        assert fetch_metadata("https://repo/maven-metadata.xml").latest == "213.6777.52"

    @responses.activate
    def test_malformed(self):
        """Test malformed XML raises DownloadError."""
        responses.add(responses.GET, "https://repo/maven-metadata.xml", body="<metadata>")
        with pytest.raises(DownloadError, match="Malformed Maven metadata"):
            fetch_metadata("https://repo/maven-metadata.xml")

    @responses.activate
    def test_missing(self):
        """Test a missing document raises DownloadError."""
        responses.add(responses.GET, "https://repo/maven-metadata.xml", status=404)
        with pytest.raises(DownloadError):
            fetch_metadata("https://repo/maven-metadata.xml")


class TestClosestVersion:
    """Test closest_version."""

    def test_closest_lower(self):
        """Test the greatest version not above the target is chosen."""
        versions = parse_metadata(METADATA).versions
        assert closest_version(versions, "213.6500") == "213.6461.79"

    def test_exact(self):
        """Test an exact match is returned."""
        assert closest_version(["211.1", "212.5", "213.9"], "212.5") == "212.5"

    def test_none_eligible(self):
        """Test ArtifactNotFoundError when every version is greater."""
        with pytest.raises(ArtifactNotFoundError):
            closest_version(["221.1"], "213.1")


class TestLatestVersion:
    """Test latest version resolution."""

    @responses.activate
    def test_resolve_latest_version(self):
        """Test the release version of the metadata is the latest one."""
        responses.add(responses.GET, "https://repo/maven-metadata.xml", body=METADATA)
        assert resolve_latest_version("https://repo/maven-metadata.xml") == "213.6461.79"

    @responses.activate
    def test_resolve_latest_sends_headers(self):
        """Test credentials reach the metadata request."""
        responses.add(responses.GET, "https://repo/maven-metadata.xml", body=METADATA)

        resolve_latest_version(
            "https://repo/maven-metadata.xml", headers={"Authorization": "Bearer t"}
        )

        assert responses.calls[0].request.headers["Authorization"] == "Bearer t"

    @responses.activate
    def test_resolve_latest_without_versions(self):
        """Test ArtifactNotFoundError when the metadata lists nothing."""
        responses.add(responses.GET, "https://repo/maven-metadata.xml", body="<metadata/>")
        with pytest.raises(ArtifactNotFoundError):
            resolve_latest_version("https://repo/maven-metadata.xml")

    @pytest.mark.parametrize("version", [None, "", "latest", "LATEST", "Latest"])
    def test_is_latest(self, version):
        """Test absent and placeholder versions ask for the latest one."""
        assert is_latest(version)

    @pytest.mark.parametrize("version", ["1.0", "latest-1.0", "LATEST-EAP-SNAPSHOT"])
    def test_is_not_latest(self, version):
        """Test concrete versions are taken as given."""
        assert not is_latest(version)
