"""
Unit tests for the IDE release catalog.
"""

import pytest
import responses

from idekit.core.exceptions import ParseError
from idekit.ide.releases import (
    AndroidStudioReleaseFeed,
    Channel,
    JetBrainsReleaseFeed,
    ReleaseCatalog,
)

JETBRAINS_URL = "https://feeds.example.com/updates.xml"
ANDROID_URL = "https://feeds.example.com/android-studio.xml"

UPDATES_XML = """<?xml version="1.0" encoding="UTF-8"?>
<products>
  <product name="IntelliJ IDEA">
    <code>IC</code>
    <code>IU</code>
    <channel id="IC-IU-RELEASE-licensing-RELEASE" status="release">
      <build number="213.6777.52" version="2021.3.2"/>
      <build number="213.6461.79" version="2021.3.1"/>
      <build number="212.5457.46" version="2021.2.3"/>
    </channel>
    <channel id="IC-IU-EAP-licensing-EAP" status="eap">
      <build number="221.3427.89" version="2022.1"/>
    </channel>
    <channel id="IC-IU-UNKNOWN" status="internal">
      <build number="999.1" version="9999.1"/>
    </channel>
  </product>
  <product name="PhpStorm">
    <code>PS</code>
    <channel id="PS-RELEASE" status="release">
      <build number="213.6777.58" version="2021.3.2"/>
      <build number="bogus" version="0.0"/>
    </channel>
  </product>
</products>
"""

ANDROID_XML = """<?xml version="1.0" encoding="UTF-8"?>
<content>
  <item>
    <name>Android Studio Bumblebee</name>
    <version>2021.1.1.21</version>
    <channel>Release</channel>
    <platformBuild>211.7628.21</platformBuild>
    <download>
      <link>https://dl.example.com/android-studio-2021.1.1.21-windows.zip</link>
      <link>https://dl.example.com/android-studio-2021.1.1.21-linux.tar.gz</link>
    </download>
  </item>
  <item>
    <version>2021.1.1.20</version>
    <channel>Patch</channel>
    <platformBuild>211.7628.20</platformBuild>
  </item>
  <item>
    <version>2021.2.1.8</version>
    <channel>Canary</channel>
    <platformBuild>212.5457.46</platformBuild>
  </item>
</content>
"""


@pytest.fixture
def catalog():
    return ReleaseCatalog(
        [JetBrainsReleaseFeed(JETBRAINS_URL), AndroidStudioReleaseFeed(ANDROID_URL)]
    )


@pytest.fixture
def feeds():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        mock.add(responses.GET, JETBRAINS_URL, body=UPDATES_XML)
        mock.add(responses.GET, ANDROID_URL, body=ANDROID_XML)
        yield mock


def notations(query):
    return [(r.notation, r.build.as_string_without_product_code()) for r in query]


class TestChannel:
    """Test channel mapping."""

    @pytest.mark.parametrize(
        "status,expected",
        [
            ("release", Channel.RELEASE),
            ("Release", Channel.RELEASE),
            ("Patch", Channel.RELEASE),
            ("eap", Channel.EAP),
            ("Canary", Channel.CANARY),
            ("internal", None),
            (None, None),
        ],
    )
    def test_from_status(self, status, expected):
        """Test feed statuses map to channels."""
        assert Channel.from_status(status) is expected


class TestFeeds:
    """Test feed parsing."""

    def test_jetbrains_feed(self):
        """Test every product code gets a record per build."""
        records = JetBrainsReleaseFeed(JETBRAINS_URL).parse(UPDATES_XML)
        ic = [r for r in records if r.product_code == "IC"]

        assert len(ic) == 4
        assert {r.channel for r in ic} == {Channel.RELEASE, Channel.EAP}
        assert not any(r.version == "0.0" for r in records)

    def test_android_studio_feed(self):
        """Test Android Studio items and their Linux download link."""
        records = AndroidStudioReleaseFeed(ANDROID_URL).parse(ANDROID_XML)

        assert [r.version for r in records] == ["2021.1.1.21", "2021.1.1.20", "2021.2.1.8"]
        assert records[0].product_code == "AI"
        assert records[0].download_url.endswith("-linux.tar.gz")
        assert records[1].channel is Channel.RELEASE
        assert records[1].download_url is None

    def test_feed_fetched_once(self, feeds):
        """Test records are kept after the first fetch."""
        feed = JetBrainsReleaseFeed(JETBRAINS_URL)
        list(feed)
        list(feed)
        assert len(feeds.calls) == 1


class TestReleaseCatalog:
    """Test catalog queries."""

    def test_newest_first(self, feeds, catalog):
        """Test releases are ordered by build, newest first."""
        builds = [r.build for r in catalog.list_releases()]
        assert builds == sorted(builds, reverse=True)

    def test_filter_range_and_channel(self, feeds, catalog):
        """Test since/until bounds and channel filtering."""
        query = catalog.list_releases(since="213", until="213.*", channels=["release"])

        assert notations(query) == [
            ("PS-2021.3.2", "213.6777.58"),
            ("IC-2021.3.2", "213.6777.52"),
            ("IU-2021.3.2", "213.6777.52"),
            ("IC-2021.3.1", "213.6461.79"),
            ("IU-2021.3.1", "213.6461.79"),
        ]

    def test_filter_products(self, feeds, catalog):
        """Test product filtering is case-insensitive."""
        query = catalog.list_releases(products=["ai"], channels=[Channel.RELEASE])
        assert [r.version for r in query] == ["2021.1.1.21", "2021.1.1.20"]

    def test_channel_filter_eap(self, feeds, catalog):
        """Test only the requested channel is listed."""
        query = catalog.list_releases(channels=["eap"], products=["IC"])
        assert notations(query) == [("IC-2022.1", "221.3427.89")]

    def test_restartable(self, feeds, catalog):
        """Test a query can be iterated again from the start."""
        query = catalog.list_releases(products=["IC"])
        first = query.first()
        assert first == next(iter(query))
        assert len(list(query)) == 4

    def test_unknown_channel(self, catalog):
        """Test an unknown channel raises ParseError."""
        with pytest.raises(ParseError):
            catalog.list_releases(channels=["nightly-ish"])

    def test_malformed_bound(self, catalog):
        """Test a malformed bound raises ParseError."""
        with pytest.raises(ParseError):
            catalog.list_releases(since="abc")

    def test_failing_feed_is_skipped(self, catalog):
        """Test one failing feed leaves the others listed."""
        with responses.RequestsMock() as mock:
            mock.add(responses.GET, JETBRAINS_URL, status=503)
            mock.add(responses.GET, ANDROID_URL, body=ANDROID_XML)

            records = list(catalog.list_releases())

        assert records
        assert {r.product_code for r in records} == {"AI"}

    def test_malformed_feed_is_skipped(self, catalog):
        """Test malformed XML counts as an unavailable feed."""
        with responses.RequestsMock() as mock:
            mock.add(responses.GET, JETBRAINS_URL, body="<products>")
            mock.add(responses.GET, ANDROID_URL, body=ANDROID_XML)

            records = list(catalog.list_releases(channels=["canary"]))

        assert [r.version for r in records] == ["2021.2.1.8"]
