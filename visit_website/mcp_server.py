"""MCP server exposing the visit-website tools."""

from __future__ import annotations

import logging
from typing import Annotated, Any, Dict, List, Optional, Union

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from .config import VisitConfig
from .crawler import view_images as run_view_images
from .crawler import visit_website as run_visit_website
from .reporting import LoggingReporter

logger = logging.getLogger("visit_website.mcp")

mcp = FastMCP(name="visit-website")


@mcp.tool(name="visit_website")
async def visit_website_tool(
    url: Annotated[str, Field(description="The URL of the website to visit")],
    find_in_page: Annotated[
        Optional[List[str]],
        Field(
            description=(
                "Highly recommended! Optional search terms to prioritize which links, "
                "images, and content to return."
            )
        ),
    ] = None,
    max_links: Annotated[
        Optional[int],
        Field(ge=0, le=200, description="Maximum number of links to extract from the page."),
    ] = None,
    max_images: Annotated[
        Optional[int],
        Field(ge=0, le=200, description="Maximum number of images to extract from the page."),
    ] = None,
    content_limit: Annotated[
        Optional[int],
        Field(ge=0, le=10_000, description="Maximum text content length to extract from the page."),
    ] = None,
) -> Union[Dict[str, Any], str]:
    """Visit a website and return its title, headings, links, images, and text content.

    Images are automatically downloaded and viewable.
    """
    return await run_visit_website(
        url,
        find_in_page,
        max_links,
        max_images,
        content_limit,
        config=VisitConfig.from_env(),
        reporter=LoggingReporter(logger),
    )


@mcp.tool(name="view_images")
async def view_images_tool(
    image_urls: Annotated[
        Optional[List[str]],
        Field(description="List of image URLs to view that were not obtained via visit_website."),
    ] = None,
    website_url: Annotated[
        Optional[str],
        Field(description="The URL of the website, whose images to view."),
    ] = None,
    max_images: Annotated[
        Optional[int],
        Field(
            ge=1,
            le=200,
            description="Maximum number of images to view when website_url is provided.",
        ),
    ] = None,
) -> Union[List[str], str]:
    """Download images from a website or a list of image URLs to make them viewable."""
    return await run_view_images(
        image_urls,
        website_url,
        max_images,
        config=VisitConfig.from_env(),
        reporter=LoggingReporter(logger),
    )


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
