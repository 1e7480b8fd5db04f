"""
Network download primitives with progress tracking and atomic placement.

This module provides:
- Streaming HTTP/HTTPS downloads placed atomically (temp file + rename)
- Progress reporting (bytes, percentage, speed, ETA)
- Small text fetches for metadata documents
- Redirect probing without following the redirect

There is no retry loop here: fallback happens across mirrors and tiers in
the repository layer, and a failed attempt surfaces immediately as
DownloadError.
"""

import logging
import os
import tempfile
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional

import requests
from requests.exceptions import RequestException

from idekit.core.exceptions import DownloadError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
CHUNK_SIZE = 64 * 1024

REDIRECT_STATUS_CODES = (301, 302, 303, 307, 308)


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


ProgressCallback = Callable[[DownloadProgress], None]


@contextmanager
def _session(session: Optional[requests.Session]) -> Iterator[requests.Session]:
    """The given session, or a new one that is closed on exit."""
    if session is not None:
        yield session
        return
    with requests.Session() as owned:
        yield owned


def download_file(
    url: str,
    destination: Path,
    session: Optional[requests.Session] = None,
    headers: Optional[Dict[str, str]] = None,
    progress_callback: Optional[ProgressCallback] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> Path:
    """
    Download a URL to destination.

    The body is streamed into a temporary file next to the destination and
    renamed into place only once complete, so the destination path either
    does not exist or holds the whole file.

    Args:
        url: URL to download from
        destination: Local path to save file
        session: requests session to use (a fresh one if omitted)
        headers: Extra request headers (e.g. Authorization)
        progress_callback: Optional callback for progress updates
        timeout: Request timeout in seconds

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If the request fails or returns an error status
        ValueError: If URL or destination is invalid

    Example:
        >>> url = "https://cache-redirector.jetbrains.com/intellij-jbr/jbr.tar.gz"
        >>> download_file(url, Path("cache/jbr.tar.gz"))
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    logger.info(f"Downloading from {url}")

    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=destination.parent, prefix=f".{destination.name}.", suffix=".part"
    )
    temp_path = Path(temp_path_str)

    try:
        with open(temp_fd, "wb") as f, _session(session) as http, http.get(
            url,
            headers=headers or {},
            stream=True,
            timeout=timeout,
            allow_redirects=True,
        ) as response:
            response.raise_for_status()
            _stream_to_file(response, f, progress_callback)

        os.replace(temp_path, destination)

    except RequestException as e:
        temp_path.unlink(missing_ok=True)
        raise DownloadError(f"Download of {url} failed: {e}") from e
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise

    logger.info(f"Download complete: {destination}")
    return destination


def _stream_to_file(response, f, progress_callback: Optional[ProgressCallback]) -> int:
    """Write response body to an open file, reporting progress."""
    content_length = response.headers.get("content-length")
    total_size = int(content_length) if content_length else 0

    downloaded = 0
    start_time = time.time()
    last_progress_time = start_time

    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
        if not chunk:
            continue
        f.write(chunk)
        downloaded += len(chunk)

        # Report progress (max once per 0.5 seconds to avoid spam)
        current_time = time.time()
        if progress_callback and (
            current_time - last_progress_time >= 0.5 or downloaded == total_size
        ):
            elapsed = current_time - start_time
            speed = downloaded / elapsed if elapsed > 0 else 0
            remaining = total_size - downloaded if total_size > 0 else 0
            progress_callback(
                DownloadProgress(
                    bytes_downloaded=downloaded,
                    total_bytes=total_size if total_size > 0 else downloaded,
                    percentage=(downloaded / total_size * 100) if total_size > 0 else 0,
                    speed_bps=speed,
                    eta_seconds=remaining / speed if speed > 0 else 0,
                )
            )
            last_progress_time = current_time

    return downloaded


def fetch_text(
    url: str,
    session: Optional[requests.Session] = None,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, str]] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> str:
    """
    Fetch a small text document (XML metadata, JSON API responses).

    Raises:
        DownloadError: If the request fails or returns an error status
    """
    logger.debug(f"Fetching {url}")
    try:
        with _session(session) as http:
            response = http.get(url, headers=headers or {}, params=params, timeout=timeout)
        response.raise_for_status()
    except RequestException as e:
        raise DownloadError(f"Request to {url} failed: {e}") from e
    return response.text


def resolve_redirect(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> Optional[str]:
    """
    Request url without following redirects.

    Returns:
        The Location header of a redirect response, or None if the server
        answered directly with a success status

    Raises:
        DownloadError: If the request fails or returns an error status
    """
    try:
        with _session(session) as http, http.get(
            url, allow_redirects=False, stream=True, timeout=timeout
        ) as response:
            if response.status_code in REDIRECT_STATUS_CODES:
                return response.headers.get("Location")
            response.raise_for_status()
    except RequestException as e:
        raise DownloadError(f"Request to {url} failed: {e}") from e
    return None


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.total_bytes > 0 and progress.percentage > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    # Unknown total size
    return f"{mb_downloaded:.1f} MB at {speed_mbps:.1f} MB/s"


__all__ = [
    "DownloadProgress",
    "ProgressCallback",
    "download_file",
    "fetch_text",
    "resolve_redirect",
    "format_progress",
]
