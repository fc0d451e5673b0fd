"""Concurrent image downloading and file naming."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from pathlib import Path
from typing import List, Optional, Sequence
from urllib.parse import urlparse

from filetype import guess

from .fetcher import AbortSignal, FetchAborted, FetchError, describe_status, fetch
from .models import DownloadOutcome
from .reporting import Reporter
from .utils import is_local_reference, to_web_path

logger = logging.getLogger("visit_website")

DEFAULT_EXTENSION = "jpg"
ABORTED = "aborted"
CONTENT_TYPE_PATTERN = re.compile(r"image/([\w.+-]+)", re.IGNORECASE)
URL_EXTENSION_PATTERN = re.compile(r"\.(\w+)$")


def _normalize_extension(ext: str) -> str:
    ext = ext.lower().split("+", 1)[0]
    if ext == "jpeg":
        return "jpg"
    return ext


def extension_from_content_type(content_type: Optional[str]) -> Optional[str]:
    """Read ``image/<ext>`` from a Content-Type header."""
    if not content_type:
        return None
    match = CONTENT_TYPE_PATTERN.search(content_type)
    if not match:
        return None
    return _normalize_extension(match.group(1))


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        return _normalize_extension(kind.extension)
    return None


def extension_from_url(url: str) -> Optional[str]:
    match = URL_EXTENSION_PATTERN.search(urlparse(url).path)
    if match:
        return _normalize_extension(match.group(1))
    return None


def infer_image_extension(content_type: Optional[str], data: bytes, url: str) -> str:
    """Pick a file extension from the header, the file signature, then the URL."""
    return (
        extension_from_content_type(content_type)
        or detect_image_format(data)
        or extension_from_url(url)
        or DEFAULT_EXTENSION
    )


async def download_image(
    url: str,
    position: int,
    timestamp: int,
    working_directory: Path,
    reporter: Reporter,
    signal: Optional[AbortSignal] = None,
    timeout: float = 30.0,
) -> DownloadOutcome:
    """Download one image into ``{timestamp}-{position}.{ext}``.

    Failures are reported and returned as an outcome rather than raised.
    """
    if is_local_reference(url, working_directory):
        return DownloadOutcome(source_url=url, skipped=True)

    try:
        response = await fetch(url, signal, timeout)
    except FetchAborted:
        return DownloadOutcome(source_url=url, error=ABORTED)
    except FetchError as exc:
        reporter.warn(f"Error fetching image {position}: {exc}")
        return DownloadOutcome(source_url=url, error=str(exc))

    if not response.ok:
        message = f"Failed to fetch image {position}: {describe_status(response)}"
        reporter.warn(message)
        return DownloadOutcome(source_url=url, error=message)

    data = response.content
    if not data:
        message = f"Image {position} is empty: {url}"
        reporter.warn(message)
        return DownloadOutcome(source_url=url, error=message)

    extension = infer_image_extension(response.headers.get("Content-Type"), data, url)
    destination = working_directory / f"{timestamp}-{position}.{extension}"
    try:
        await asyncio.to_thread(destination.write_bytes, data)
    except OSError as exc:
        message = f"Error writing image {position}: {exc}"
        reporter.warn(message)
        return DownloadOutcome(source_url=url, error=message)

    logger.debug("Saved %s to %s", url, destination)
    return DownloadOutcome(source_url=url, local_path=to_web_path(destination))


async def download_images(
    urls: Sequence[str],
    working_directory: Path,
    reporter: Reporter,
    signal: Optional[AbortSignal] = None,
    timeout: float = 30.0,
) -> List[DownloadOutcome]:
    """Download every URL concurrently; outcomes keep the input order."""
    if not urls:
        return []
    working_directory.mkdir(parents=True, exist_ok=True)
    timestamp = int(time.time() * 1000)
    return await asyncio.gather(
        *(
            download_image(
                url,
                position,
                timestamp,
                working_directory,
                reporter,
                signal,
                timeout,
            )
            for position, url in enumerate(urls, start=1)
        )
    )
