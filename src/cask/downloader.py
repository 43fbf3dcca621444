"""Streamed HTTP download of package resources.

The response body is consumed chunk by chunk off the event loop, so the
install coroutine suspends at the request and at every chunk read.
"""

import asyncio
import logging
from collections.abc import Iterator
from pathlib import Path

import requests
import urllib3

from .exceptions import CaskIOError
from .exceptions import ChecksumMismatchError
from .exceptions import DownloadError
from .exceptions import NoContentLengthError
from .protocols import ProgressReporterProtocol
from .utils import CHUNK_SIZE
from .utils import file_sha256

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 60


def verify_checksum(path: Path, expected: str) -> str:
    """
    Compare a file's SHA-256 with an expected hex digest (case-insensitive).

    Returns:
        The actual digest

    Raises:
        ChecksumMismatchError: If the digests differ
    """
    try:
        actual = file_sha256(path)
    except OSError as e:
        raise CaskIOError(f"Cannot calculate checksum of {path}: {e}", context={"path": str(path)}) from e

    if actual != expected.strip().lower():
        raise ChecksumMismatchError(
            f"Checksum mismatch for {path.name}: expected {expected}, got {actual}",
            context={"path": str(path), "expected": expected, "actual": actual},
        )
    return actual


def _content_length(response: requests.Response) -> int | None:
    value = response.headers.get("Content-Length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


async def _stream_to_file(
    url: str,
    chunks: Iterator[bytes],
    destination: Path,
    total: int,
    progress: ProgressReporterProtocol,
) -> None:
    downloaded = 0
    try:
        with open(destination, "wb") as f:
            while True:
                try:
                    chunk = await asyncio.to_thread(next, chunks, None)
                except (requests.RequestException, urllib3.exceptions.HTTPError) as e:
                    raise DownloadError(f"Error while downloading {url}: {e}", context={"url": url}) from e
                if chunk is None:
                    break
                f.write(chunk)
                downloaded = min(downloaded + len(chunk), total)
                progress.update(downloaded)
    except OSError as e:
        raise DownloadError(
            f"Error while writing {destination}: {e}",
            context={"url": url, "path": str(destination)},
        ) from e


async def download(
    url: str,
    destination: Path,
    checksum: str | None = None,
    session: requests.Session | None = None,
    progress: ProgressReporterProtocol | None = None,
) -> Path:
    """
    Download url to destination, overwriting it.

    Args:
        url: Resource url (redirects are followed)
        destination: File to write
        checksum: Optional expected SHA-256 hex digest
        session: HTTP session (a new one per call by default)
        progress: Progress reporter (rich progress bar by default)

    Returns:
        destination

    Raises:
        DownloadError: On request, status, read or write failures
        NoContentLengthError: If the response has no Content-Length
        ChecksumMismatchError: If the content does not match checksum; the file is kept
    """
    if progress is None:
        from .progress import RichProgressReporter

        progress = RichProgressReporter()

    owns_session = session is None
    session = session or requests.Session()

    try:
        logger.info(f"Downloading {url}")
        try:
            response = await asyncio.to_thread(
                session.get, url, stream=True, allow_redirects=True, timeout=REQUEST_TIMEOUT
            )
        except requests.RequestException as e:
            raise DownloadError(f"Failed to request {url}: {e}", context={"url": url}) from e

        with response:
            if response.status_code != 200:
                raise DownloadError(
                    f"Failed to download {url}: HTTP {response.status_code}",
                    context={"url": url, "status": response.status_code},
                )

            total = _content_length(response)
            if total is None:
                raise NoContentLengthError(f"Failed to get content length from {url}", context={"url": url})

            progress.start(f"Downloading {url}", total)
            # Body bytes as sent; a Content-Encoding is not undone
            chunks = response.raw.stream(CHUNK_SIZE, decode_content=False)

            try:
                await _stream_to_file(url, chunks, destination, total, progress)
            except DownloadError:
                progress.finish(f"Failed to download {url}")
                raise

        progress.finish(f"Downloaded {url} to {destination}")
    finally:
        if owns_session:
            session.close()

    if checksum:
        verify_checksum(destination, checksum)
        logger.debug(f"Checksum verified for {destination}")

    return destination
