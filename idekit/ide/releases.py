"""
Catalog of published IDE releases.

Releases are read from remote XML feeds, one per product family:

- JetBrains products: ``updates.xml``
  (``products/product/code``, ``channel@status``, ``build@number``,
  ``build@version``)
- Android Studio: the releases list
  (``content/item`` with ``platformBuild``, ``version``, ``channel`` and
  ``download/link``)

Feeds are fetched lazily. A feed that cannot be fetched or parsed is logged
and contributes nothing; the other feeds are still listed.
"""

import enum
import functools
import heapq
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Set, Union

import requests

from idekit.constants import (
    ANDROID_STUDIO_PRODUCTS_RELEASES_URL,
    ANDROID_STUDIO_TYPE,
    IDEA_PRODUCTS_RELEASES_URL,
)
from idekit.core.download import fetch_text
from idekit.core.exceptions import DownloadError, ParseError
from idekit.versioning.build_number import BuildNumber, compare, parse

logger = logging.getLogger(__name__)


class Channel(enum.Enum):
    RELEASE = "release"
    EAP = "eap"
    RC = "rc"
    BETA = "beta"
    CANARY = "canary"
    MILESTONE = "milestone"

    @classmethod
    def from_status(cls, status: Optional[str]) -> Optional["Channel"]:
        """
        Map a feed status to a channel.

        Android Studio publishes patch releases on a 'Patch' channel; those
        count as releases. Unknown statuses map to None.
        """
        if not status:
            return None
        status = status.strip().lower()
        if status == "patch":
            return cls.RELEASE
        try:
            return cls(status)
        except ValueError:
            return None


@dataclass(frozen=True)
class ReleaseRecord:
    """
    One published IDE build.

    Attributes:
        product_code: Product code ('IC', 'IU', 'AI', ...)
        version: Marketing version, e.g. '2021.3.2'
        build: Platform build number
        channel: Release channel
        download_url: Linux download link, where the feed provides one
    """

    product_code: str
    version: str
    build: BuildNumber
    channel: Channel
    download_url: Optional[str] = None

    @property
    def notation(self) -> str:
        """IDE version notation usable with IdeVersion.parse ('IC-2021.3.2')."""
        return f"{self.product_code}-{self.version}"


def release_order(a: ReleaseRecord, b: ReleaseRecord) -> int:
    """Build number descending, then product code ascending."""
    result = compare(b.build, a.build)
    if result:
        return result
    if a.product_code == b.product_code:
        return 0
    return -1 if a.product_code < b.product_code else 1


release_sort_key = functools.cmp_to_key(release_order)


# ============================================================================
# Feeds
# ============================================================================


class ReleaseFeed:
    """
    A remote release feed.

    Subclasses implement ``parse``. Parsed records are kept after the first
    successful fetch and iterated in catalog order.
    """

    def __init__(self, url: str, session: Optional[requests.Session] = None):
        self.url = url
        self.session = session
        self._records: Optional[List[ReleaseRecord]] = None

    def parse(self, text: str) -> List[ReleaseRecord]:
        raise NotImplementedError

    def records(self) -> List[ReleaseRecord]:
        """Fetch and parse the feed; an unavailable feed yields no records."""
        if self._records is not None:
            return self._records

        try:
            records = self.parse(fetch_text(self.url, session=self.session))
        except (DownloadError, ET.ParseError) as e:
            logger.warning(f"Release feed {self.url} is unavailable: {e}")
            return []

        self._records = sorted(records, key=release_sort_key)
        logger.debug(f"Loaded {len(self._records)} releases from {self.url}")
        return self._records

    def __iter__(self) -> Iterator[ReleaseRecord]:
        return iter(self.records())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.url!r})"


def _build(value: Optional[str], product_code: str) -> Optional[BuildNumber]:
    if not value:
        return None
    try:
        return parse(value, product_code)
    except ParseError as e:
        logger.debug(f"Skipping release with malformed build: {e}")
        return None


class JetBrainsReleaseFeed(ReleaseFeed):
    """Releases of JetBrains IDEs from updates.xml."""

    def __init__(
        self,
        url: str = IDEA_PRODUCTS_RELEASES_URL,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(url, session)

    def parse(self, text: str) -> List[ReleaseRecord]:
        root = ET.fromstring(text)
        records = []
        for product in root.iter("product"):
            codes = [c.text.strip() for c in product.findall("code") if c.text]
            for channel_elem in product.findall("channel"):
                channel = Channel.from_status(channel_elem.get("status"))
                if channel is None:
                    continue
                for build_elem in channel_elem.findall("build"):
                    version = build_elem.get("version")
                    for code in codes:
                        build = _build(build_elem.get("number"), code)
                        if build is None or not version:
                            continue
                        records.append(ReleaseRecord(code, version, build, channel))
        return records


class AndroidStudioReleaseFeed(ReleaseFeed):
    """Android Studio releases."""

    def __init__(
        self,
        url: str = ANDROID_STUDIO_PRODUCTS_RELEASES_URL,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(url, session)

    def parse(self, text: str) -> List[ReleaseRecord]:
        root = ET.fromstring(text)
        records = []
        for item in root.iter("item"):
            channel = Channel.from_status(item.findtext("channel"))
            version = (item.findtext("version") or "").strip()
            build = _build(item.findtext("platformBuild"), ANDROID_STUDIO_TYPE)
            if channel is None or build is None or not version:
                continue

            links = [
                link.text.strip()
                for link in item.findall("download/link")
                if link.text
            ]
            linux = [link for link in links if "linux" in link]
            download_url = (linux or links or [None])[0]

            records.append(
                ReleaseRecord(ANDROID_STUDIO_TYPE, version, build, channel, download_url)
            )
        return records


def default_feeds(session: Optional[requests.Session] = None) -> List[ReleaseFeed]:
    return [JetBrainsReleaseFeed(session=session), AndroidStudioReleaseFeed(session=session)]


# ============================================================================
# Catalog
# ============================================================================


def _channel(value: Union[str, Channel]) -> Channel:
    if isinstance(value, Channel):
        return value
    channel = Channel.from_status(value)
    if channel is None:
        raise ParseError(value, f"unknown channel, expected one of {[c.value for c in Channel]}")
    return channel


class ReleaseQuery:
    """
    Restartable, lazily evaluated view over the catalog.

    Each iteration merges the feeds again, so a consumer may stop early and
    iterate from the start later.
    """

    def __init__(self, feeds: List[ReleaseFeed], accept: Callable[[ReleaseRecord], bool]):
        self._feeds = feeds
        self._accept = accept

    def __iter__(self) -> Iterator[ReleaseRecord]:
        seen = set()
        for record in heapq.merge(*self._feeds, key=release_sort_key):
            identity = (record.product_code, record.build)
            if identity in seen or not self._accept(record):
                continue
            seen.add(identity)
            yield record

    def first(self) -> Optional[ReleaseRecord]:
        return next(iter(self), None)


class ReleaseCatalog:
    """
    Queryable list of IDE releases across feeds.

    Example:
        >>> catalog = ReleaseCatalog()
        >>> for release in catalog.list_releases(since="213", until="213.*", channels={"release"}):
        ...     print(release.notation)
    """

    def __init__(self, feeds: Optional[Iterable[ReleaseFeed]] = None):
        self.feeds = list(feeds) if feeds is not None else default_feeds()

    def list_releases(
        self,
        since: Optional[Union[str, BuildNumber]] = None,
        until: Optional[Union[str, BuildNumber]] = None,
        channels: Optional[Iterable[Union[str, Channel]]] = None,
        products: Optional[Iterable[str]] = None,
    ) -> ReleaseQuery:
        """
        List releases, newest build first.

        Args:
            since: Lowest build, inclusive
            until: Highest build, inclusive; '213.*' covers every 213 build
            channels: Channels to keep (all when omitted)
            products: Product codes to keep (all when omitted)

        Raises:
            ParseError: If a bound or channel is malformed
        """
        since_build = parse(since) if isinstance(since, str) else since
        until_build = parse(until) if isinstance(until, str) else until
        channel_set: Optional[Set[Channel]] = (
            {_channel(c) for c in channels} if channels is not None else None
        )
        product_set = {p.upper() for p in products} if products is not None else None

        def accept(record: ReleaseRecord) -> bool:
            if channel_set is not None and record.channel not in channel_set:
                return False
            if product_set is not None and record.product_code not in product_set:
                return False
            if since_build is not None and compare(record.build, since_build) < 0:
                return False
            if until_build is not None and compare(record.build, until_build) > 0:
                return False
            return True

        return ReleaseQuery(self.feeds, accept)


__all__ = [
    "Channel",
    "ReleaseRecord",
    "ReleaseFeed",
    "JetBrainsReleaseFeed",
    "AndroidStudioReleaseFeed",
    "ReleaseQuery",
    "ReleaseCatalog",
    "default_feeds",
    "release_order",
]
