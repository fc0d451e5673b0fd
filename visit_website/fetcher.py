"""HTTP access with spoofed browser headers and cooperative cancellation."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Callable, Dict, Optional, TypeVar
from urllib.parse import urlparse

import requests

from .content import section_page
from .models import FetchResult
from .reporting import Reporter

logger = logging.getLogger("visit_website")

T = TypeVar("T")

DEFAULT_TIMEOUT = 30.0

SPOOFED_USER_AGENTS = (
    "Mozilla/5.0 (Linux; Android 10; SM-M515F) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/87.0.4280.141 Mobile Safari/537.36",
    "Mozilla/5.0 (Linux; Android 6.0; E5533) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/83.0.4103.101 Mobile Safari/537.36",
    "Mozilla/5.0 (Linux; Android 8.1.0; AX1082) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/83.0.4103.83 Mobile Safari/537.36",
    "Mozilla/5.0 (Linux; Android 9; POT-LX1) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/96.0.4664.45 Mobile Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/98.0.4758.80 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/18.3.1 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:97.0) Gecko/20100101 Firefox/97.0",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/134.0.0.0 Safari/537.36 Edg/134.0.0.0",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/98.0.4758.80 Safari/537.36",
    "Mozilla/5.0 (X11; CrOS x86_64 14541.0.0) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/134.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/97.0.4692.71 Safari/537.36",
    "Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:97.0) Gecko/20100101 Firefox/97.0",
)


class FetchError(RuntimeError):
    """Raised when a page or image cannot be retrieved."""


class FetchAborted(FetchError):
    """Raised when a request is interrupted through its abort signal."""


class AbortSignal:
    """Cooperative cancellation handle shared by every request of one call."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    def abort(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


def spoof_headers(url: str) -> Dict[str, str]:
    """Build a browser-like header set with a random user agent."""
    domain = urlparse(url).hostname or ""
    return {
        "User-Agent": random.choice(SPOOFED_USER_AGENTS),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,image/apng,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Accept-Encoding": "gzip, deflate",
        "Referer": f"https://{domain}/",
        "Origin": f"https://{domain}",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "none",
        "Sec-Fetch-User": "?1",
        "Cache-Control": "max-age=0",
    }


async def _run_abortable(call: Callable[[], T], signal: Optional[AbortSignal]) -> T:
    """Run a blocking call in a worker thread, giving up as soon as the signal fires."""
    if signal is not None and signal.aborted:
        raise FetchAborted("Request aborted")
    request = asyncio.ensure_future(asyncio.to_thread(call))
    if signal is None:
        return await request

    waiter = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait(
            {request, waiter}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        waiter.cancel()
        if not request.done():
            request.cancel()
    if request in done:
        return request.result()
    raise FetchAborted("Request aborted")


def describe_status(response: requests.Response) -> str:
    reason = response.reason or ""
    return f"{response.status_code} {reason}".strip()


def decode_html(response: requests.Response) -> str:
    """Decode a page body, assuming UTF-8 when the server names no charset."""
    content_type = response.headers.get("Content-Type") or ""
    if "charset" not in content_type.lower():
        response.encoding = "utf-8"
    return response.text


async def fetch(
    url: str,
    signal: Optional[AbortSignal] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> requests.Response:
    """Issue a single GET with spoofed headers. No retries are attempted."""
    headers = spoof_headers(url)
    try:
        return await _run_abortable(
            lambda: requests.get(url, headers=headers, timeout=timeout),
            signal,
        )
    except requests.RequestException as exc:
        raise FetchError(str(exc)) from exc


async def fetch_page(
    url: str,
    reporter: Reporter,
    signal: Optional[AbortSignal] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> FetchResult:
    """Fetch a web page and split it into head and body."""
    response = await fetch(url, signal, timeout)
    if not response.ok:
        message = f"Failed to fetch website: {describe_status(response)}"
        reporter.warn(message)
        raise FetchError(message)
    logger.debug("Fetched %s (%d bytes)", url, len(response.content or b""))
    return section_page(decode_html(response))
