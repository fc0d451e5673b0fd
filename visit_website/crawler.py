"""High-level orchestration for visiting pages and viewing their images."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from .config import VisitConfig
from .content import extract_headings, extract_text, select_content
from .fetcher import AbortSignal, FetchAborted, FetchError, fetch_page
from .images import download_images
from .markdown import render_outcomes
from .models import VisitResult
from .ranking import get_profile, rank_images, rank_links
from .reporting import LoggingReporter, Reporter

logger = logging.getLogger("visit_website")

VISIT_ABORTED = "Website visit aborted by user."
DOWNLOAD_ABORTED = "Image download aborted by user."


async def collect_visit(
    url: str,
    search_terms: Optional[Sequence[str]],
    max_links: int,
    max_images: int,
    content_limit: int,
    config: VisitConfig,
    reporter: Reporter,
    signal: Optional[AbortSignal] = None,
) -> VisitResult:
    """Fetch a page and assemble its bounded summary. Fetch errors propagate."""
    profile = get_profile(config.profile)
    page = await fetch_page(url, reporter, signal, config.request_timeout)
    reporter.status("Website visited successfully.")

    title, h1, h2, h3 = extract_headings(page)
    links = rank_links(page.body, url, max_links, search_terms, profile)

    images = []
    images_to_fetch = rank_images(page.body, url, max_images, search_terms, profile)
    if images_to_fetch:
        reporter.status("Downloading images...")
        outcomes = await download_images(
            [image_url for _, image_url in images_to_fetch],
            config.working_directory,
            reporter,
            signal,
            config.request_timeout,
        )
        rendered = render_outcomes(outcomes)
        images = [(alt, markdown) for (alt, _), markdown in zip(images_to_fetch, rendered)]
        succeeded = sum(1 for outcome in outcomes if outcome.ok)
        reporter.status(f"Downloaded {succeeded} of {len(outcomes)} images.")

    content = ""
    if content_limit > 0:
        content = select_content(
            extract_text(page.body),
            content_limit,
            search_terms,
            strip_trailing=profile.strip_trailing_whitespace,
        )

    return VisitResult(
        url=url,
        title=title,
        h1=h1,
        h2=h2,
        h3=h3,
        links=links,
        images=images,
        content=content,
    )


async def visit_website(
    url: str,
    find_in_page: Optional[Sequence[str]] = None,
    max_links: Optional[int] = None,
    max_images: Optional[int] = None,
    content_limit: Optional[int] = None,
    *,
    config: Optional[VisitConfig] = None,
    reporter: Optional[Reporter] = None,
    signal: Optional[AbortSignal] = None,
) -> Union[Dict[str, Any], str]:
    """Visit a website and return its title, headings, links, images and text.

    Never raises: failures come back as a descriptive string.
    """
    config = config or VisitConfig()
    reporter = reporter or LoggingReporter()
    reporter.status("Visiting website...")
    try:
        result = await collect_visit(
            url,
            find_in_page,
            config.links_budget(max_links),
            config.images_budget(max_images),
            config.content_budget(content_limit),
            config,
            reporter,
            signal,
        )
    except FetchAborted:
        return VISIT_ABORTED
    except FetchError as exc:
        reporter.warn(f"Error during website visit: {exc}")
        return f"Error: {exc}"
    except Exception:  # pylint: disable=broad-except
        logger.exception("Unexpected error visiting %s", url)
        reporter.warn("Unexpected error during website visit")
        return "Error: Unexpected error during website visit"
    return result.to_dict()


async def view_images(
    image_urls: Optional[Sequence[str]] = None,
    website_url: Optional[str] = None,
    max_images: Optional[int] = None,
    *,
    config: Optional[VisitConfig] = None,
    reporter: Optional[Reporter] = None,
    signal: Optional[AbortSignal] = None,
) -> Union[List[str], str]:
    """Download images from a website and/or a list of URLs.

    Returns one Markdown reference (or inline error) per image, in input order.
    """
    config = config or VisitConfig()
    reporter = reporter or LoggingReporter()
    urls = list(image_urls or [])
    try:
        if website_url:
            reporter.status("Fetching image URLs from website...")
            page = await fetch_page(website_url, reporter, signal, config.request_timeout)
            ranked = rank_images(
                page.body,
                website_url,
                config.images_budget(max_images),
                profile=get_profile(config.profile),
            )
            urls.extend(image_url for _, image_url in ranked)

        if not urls:
            reporter.warn("Error fetching images")
            return urls

        reporter.status("Downloading images...")
        outcomes = await download_images(
            urls,
            config.working_directory,
            reporter,
            signal,
            config.request_timeout,
        )
    except FetchAborted:
        return DOWNLOAD_ABORTED
    except FetchError as exc:
        reporter.warn(f"Error during image download: {exc}")
        return f"Error: {exc}"
    except Exception:  # pylint: disable=broad-except
        logger.exception("Unexpected error downloading images")
        reporter.warn("Unexpected error during image download")
        return "Error: Unexpected error during image download"

    reporter.status(f"Downloaded {len(outcomes)} images.")
    return render_outcomes(outcomes)
