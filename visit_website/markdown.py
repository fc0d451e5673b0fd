"""Markdown helpers for image references and visit summaries."""

from __future__ import annotations

import datetime as dt
from typing import List, Sequence

from .models import DownloadOutcome, VisitResult

IMAGE_ERROR_PREFIX = "Error fetching image from URL: "


def image_reference(position: int, path: str) -> str:
    return f"![Image {position}]({path})"


def render_outcomes(outcomes: Sequence[DownloadOutcome]) -> List[str]:
    """Turn download outcomes into Markdown image references or error strings."""
    rendered = []
    for position, outcome in enumerate(outcomes, start=1):
        reference = outcome.reference
        if reference:
            rendered.append(image_reference(position, reference))
        else:
            rendered.append(IMAGE_ERROR_PREFIX + outcome.source_url)
    return rendered


def compose_markdown(result: VisitResult) -> str:
    """Render a visit result as Markdown with a front matter block."""
    timestamp = (
        dt.datetime.now(dt.timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )
    front_matter_lines = ["---"]
    if result.title:
        front_matter_lines.append(f"title: {result.title}")
    front_matter_lines.append(f"source_url: {result.url}")
    front_matter_lines.append(f"retrieved_at: {timestamp}")
    front_matter_lines.append("---\n")

    sections = []
    for level, heading in enumerate((result.h1, result.h2, result.h3), start=1):
        if heading:
            sections.append(f"{'#' * level} {heading}")
    if result.content:
        sections.append(result.content)
    if result.images:
        sections.append(
            "\n".join(
                f"- {alt or 'image'}: {markdown}" for alt, markdown in result.images
            )
        )
    if result.links:
        sections.append("\n".join(f"- [{label}]({url})" for label, url in result.links))

    return "\n".join(front_matter_lines) + "\n\n".join(sections).strip() + "\n"
