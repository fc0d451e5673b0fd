"""Data models used throughout the visit pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class FetchResult:
    """Fetched page split into its head and body sections."""

    raw_html: str
    head: str
    body: str


@dataclass
class LinkCandidate:
    """Anchor discovered in the page body, before ranking."""

    original_index: int
    label: str
    url: str
    relevance_score: float = 0.0


@dataclass
class ImageCandidate:
    """Image reference discovered in the page body, before ranking."""

    original_index: int
    alt_text: str
    url: str
    relevance_score: float = 0.0


@dataclass(frozen=True)
class ContentWindow:
    """Span of the cleaned page text surrounding a search-term match."""

    start_offset: int
    length: int
    text: str

    @property
    def end_offset(self) -> int:
        return self.start_offset + self.length


@dataclass
class DownloadOutcome:
    """Result of acquiring a single image."""

    source_url: str
    local_path: Optional[str] = None
    error: Optional[str] = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.local_path is not None or self.skipped

    @property
    def reference(self) -> Optional[str]:
        """Path usable as an image reference, or None when acquisition failed."""
        if self.skipped:
            return self.source_url
        return self.local_path


@dataclass
class VisitResult:
    """Bounded summary of a visited page."""

    url: str
    title: str = ""
    h1: str = ""
    h2: str = ""
    h3: str = ""
    links: List[Tuple[str, str]] = field(default_factory=list)
    images: List[Tuple[str, str]] = field(default_factory=list)
    content: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the result, leaving out empty optional fields."""
        data: Dict[str, Any] = {
            "url": self.url,
            "title": self.title,
            "h1": self.h1,
            "h2": self.h2,
            "h3": self.h3,
        }
        if self.links:
            data["links"] = [list(link) for link in self.links]
        if self.images:
            data["images"] = [list(image) for image in self.images]
        if self.content:
            data["content"] = self.content
        return data
