"""Page sectioning, text cleanup and search-term windowing."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import ContentWindow, FetchResult

BODY_OPEN_PATTERN = re.compile(r"<body[^>]*>")
TITLE_PATTERN = re.compile(r"<title>([^<]*)</title>")
HEADING_PATTERNS = {
    level: re.compile(rf"<{level}[^>]*>([^<]*)</{level}>")
    for level in ("h1", "h2", "h3")
}
SCRIPT_PATTERN = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
STYLE_PATTERN = re.compile(r"<style[^>]*>.*?</style>", re.IGNORECASE | re.DOTALL)
TAG_PATTERN = re.compile(r"<[^>]+>")
WHITESPACE_PATTERN = re.compile(r"\s+")


def section_page(html: str) -> FetchResult:
    """Split raw HTML into its head and body substrings.

    The body runs from the first ``<body ...>`` tag to the last ``</body>`` so
    duplicated closing tags on malformed pages are tolerated. A page without a
    body tag is passed through from offset 0.
    """
    head = ""
    head_start = html.find("<head>")
    head_end = html.find("</head>")
    if head_start != -1 and head_end != -1 and head_end >= head_start:
        head = html[head_start : head_end + len("</head>")]

    body_match = BODY_OPEN_PATTERN.search(html)
    body_start = body_match.start() if body_match else 0
    body_end = html.rfind("</body>")
    if body_end < body_start:
        body_end = len(html)
    return FetchResult(raw_html=html, head=head, body=html[body_start:body_end])


def _first_group(pattern: re.Pattern, text: str) -> str:
    match = pattern.search(text)
    return match.group(1).strip() if match else ""


def extract_headings(page: FetchResult) -> Tuple[str, str, str, str]:
    """Return the first title, h1, h2 and h3 texts (empty when missing)."""
    title = _first_group(TITLE_PATTERN, page.head)
    h1, h2, h3 = (
        _first_group(HEADING_PATTERNS[level], page.body) for level in ("h1", "h2", "h3")
    )
    return title, h1, h2, h3


def extract_text(body: str) -> str:
    """Drop scripts, styles and tags, then collapse whitespace."""
    text = SCRIPT_PATTERN.sub("", body)
    text = STYLE_PATTERN.sub("", text)
    text = TAG_PATTERN.sub("", text)
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def find_windows(text: str, terms: Sequence[str], limit: int) -> List[ContentWindow]:
    """Locate one padded window per term, as ``.{0,padding}TERM.{0,padding}`` would.

    The window starts up to ``padding`` characters before the first match; its
    leading pad stretches to the last match beginning within ``padding`` of
    that start. Terms that do not occur contribute no window. Windows come
    back sorted by their start offset.
    """
    if not terms:
        return []
    padding = limit // (len(terms) * 2)
    windows: List[ContentWindow] = []
    for term in terms:
        pattern = re.compile(re.escape(term), re.IGNORECASE)
        match = pattern.search(text)
        if not match:
            continue
        start = max(0, match.start() - padding)
        anchor = match
        later = pattern.search(text, anchor.start() + 1)
        while later and later.start() <= start + padding:
            anchor = later
            later = pattern.search(text, anchor.start() + 1)
        end = min(len(text), anchor.end() + padding)
        windows.append(ContentWindow(start, end - start, text[start:end]))
    windows.sort(key=lambda window: window.start_offset)
    return windows


def merge_windows(windows: Iterable[ContentWindow]) -> str:
    """Concatenate sorted windows without repeating any overlapping text."""
    parts: List[str] = []
    next_min_index = 0
    for window in windows:
        if window.start_offset >= next_min_index:
            parts.append(window.text)
        elif window.end_offset > next_min_index:
            parts.append(window.text[next_min_index - window.start_offset :])
        else:
            continue
        next_min_index = window.end_offset
    return "".join(parts)


def select_content(
    text: str,
    limit: int,
    search_terms: Optional[Sequence[str]] = None,
    strip_trailing: bool = False,
) -> str:
    """Reduce cleaned page text to ``limit`` characters, favouring search terms."""
    if limit <= 0:
        return ""
    terms = [term for term in (search_terms or []) if term.strip()]
    if terms and limit < len(text):
        windows = find_windows(text, terms, limit)
        if windows:
            return merge_windows(windows)
    truncated = text[:limit]
    return truncated.rstrip() if strip_trailing else truncated
