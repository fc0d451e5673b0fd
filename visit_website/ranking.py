"""Link and image candidate extraction with pluggable relevance scoring."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import ImageCandidate, LinkCandidate
from .utils import resolve_href

LINK_PATTERN = re.compile(r'<a\s+[^>]*?href="([^"]+)"[^>]*>(.*?)</a>', re.DOTALL)
LABEL_NOISE_PATTERN = re.compile(r'(?:\\[ntr]|\s|<(?:[^>"]|"[^"]*")+>)+')
IMAGE_TAG_PATTERN = re.compile(r"<img(\s+[^>]*)")
ALT_PATTERN = re.compile(r'\salt="([^"]+)"')
SRC_PATTERN = re.compile(r'\ssrc="([^"]+)"')
DIGIT_PATTERN = re.compile(r"[0-9]")
WORD_SPLIT_PATTERN = re.compile(r"\s+")

SEARCH_TERM_BONUS = 1000.0

FULL_IMAGE_EXTENSIONS = ("svg", "png", "webp", "gif", "jpg", "jpeg")
SIMPLE_IMAGE_EXTENSIONS = ("svg", "png", "gif", "jpg", "jpeg")


def image_url_pattern(extensions: Iterable[str]) -> re.Pattern:
    """Match URLs ending in one of the extensions, optionally followed by a query."""
    alternatives = "|".join(re.escape(ext) for ext in extensions)
    return re.compile(rf"\.({alternatives})(\?.*)?$", re.IGNORECASE)


def normalize_terms(search_terms: Optional[Sequence[str]]) -> Tuple[str, ...]:
    return tuple(term for term in (search_terms or ()) if term and term.strip())


def search_term_bonus(text: str, search_terms: Sequence[str]) -> float:
    """Add a dominating bonus for every term found in the text."""
    lowered = text.lower()
    return sum(SEARCH_TERM_BONUS for term in search_terms if term.lower() in lowered)


@dataclass(frozen=True)
class RankingContext:
    """Information shared by every candidate scored in one ranking call."""

    search_terms: Tuple[str, ...] = ()
    total: int = 0


class LinkScorer:
    """Scoring policy for link candidates; higher scores rank first."""

    def score(self, candidate: LinkCandidate, context: RankingContext) -> float:
        raise NotImplementedError


class LabelLengthScorer(LinkScorer):
    """Prefer long labels, which tend to be content links rather than navigation."""

    def score(self, candidate: LinkCandidate, context: RankingContext) -> float:
        return float(len(candidate.label))


class NavigationAwareScorer(LinkScorer):
    """Blend a digit-density heuristic with search-term matches.

    URLs without digits score higher when label and URL are short and the
    anchor appears early in the page. Digit-heavy URLs lean on the number of
    words in their label instead.
    """

    def score(self, candidate: LinkCandidate, context: RankingContext) -> float:
        digits = len(DIGIT_PATTERN.findall(candidate.url))
        ratio = 1 / max(1, digits)
        position = 20 * candidate.original_index / context.total if context.total else 0.0
        words = len(WORD_SPLIT_PATTERN.split(candidate.label))
        base = (
            ratio * (100 - (len(candidate.label) + len(candidate.url) + position))
            + (1 - ratio) * words
        )
        return base + search_term_bonus(candidate.label, context.search_terms)


class ImageScorer:
    """Scoring policy for image candidates; higher scores rank first."""

    def score(self, candidate: ImageCandidate, context: RankingContext) -> float:
        raise NotImplementedError


class AltTextScorer(ImageScorer):
    """Longer alt text and search-term matches rank first."""

    def score(self, candidate: ImageCandidate, context: RankingContext) -> float:
        return len(candidate.alt_text) + search_term_bonus(
            candidate.alt_text, context.search_terms
        )


@dataclass(frozen=True)
class ExtractionProfile:
    """Named set of thresholds, scorers and ordering rules."""

    name: str
    link_scorer: LinkScorer
    image_scorer: ImageScorer
    image_extensions: Tuple[str, ...]
    min_label_length: int = 0
    dedupe_links: bool = True
    restore_link_order: bool = False
    strip_trailing_whitespace: bool = False

    @property
    def image_pattern(self) -> re.Pattern:
        return image_url_pattern(self.image_extensions)


SIMPLE_PROFILE = ExtractionProfile(
    name="simple",
    link_scorer=LabelLengthScorer(),
    image_scorer=AltTextScorer(),
    image_extensions=SIMPLE_IMAGE_EXTENSIONS,
    min_label_length=5,
    dedupe_links=False,
    restore_link_order=True,
    strip_trailing_whitespace=True,
)

FULL_PROFILE = ExtractionProfile(
    name="full",
    link_scorer=NavigationAwareScorer(),
    image_scorer=AltTextScorer(),
    image_extensions=FULL_IMAGE_EXTENSIONS,
)

PROFILES = {profile.name: profile for profile in (SIMPLE_PROFILE, FULL_PROFILE)}


def get_profile(name: str) -> ExtractionProfile:
    try:
        return PROFILES[name]
    except KeyError:
        raise ValueError(f"Unknown extraction profile: {name}") from None


def clean_label(raw: str) -> str:
    """Collapse escape sequences, whitespace and nested tags into single spaces."""
    return LABEL_NOISE_PATTERN.sub(" ", raw).strip()


def extract_link_candidates(body: str, page_url: str) -> List[LinkCandidate]:
    """Find every anchor with an ``href`` in document order."""
    return [
        LinkCandidate(
            original_index=index,
            label=clean_label(match.group(2) or ""),
            url=resolve_href(match.group(1), page_url),
        )
        for index, match in enumerate(LINK_PATTERN.finditer(body))
    ]


def rank_links(
    body: str,
    page_url: str,
    max_links: int,
    search_terms: Optional[Sequence[str]] = None,
    profile: ExtractionProfile = FULL_PROFILE,
) -> List[Tuple[str, str]]:
    """Return up to ``max_links`` (label, url) pairs ordered by the profile."""
    if max_links <= 0:
        return []
    extracted = extract_link_candidates(body, page_url)
    context = RankingContext(normalize_terms(search_terms), len(extracted))
    candidates = [
        candidate
        for candidate in extracted
        if candidate.url.startswith("http")
        and len(candidate.label) >= profile.min_label_length
    ]
    for candidate in candidates:
        candidate.relevance_score = profile.link_scorer.score(candidate, context)
    ranked = sorted(candidates, key=lambda candidate: -candidate.relevance_score)

    if profile.dedupe_links:
        seen = set()
        unique: List[LinkCandidate] = []
        for candidate in ranked:
            if candidate.url in seen:
                continue
            seen.add(candidate.url)
            unique.append(candidate)
        ranked = unique

    selected = ranked[:max_links]
    if profile.restore_link_order:
        selected.sort(key=lambda candidate: candidate.original_index)
    return [(candidate.label, candidate.url) for candidate in selected]


def extract_image_candidates(body: str, page_url: str) -> List[ImageCandidate]:
    """Find every ``<img>`` tag and read its ``alt`` and ``src`` attributes."""
    candidates: List[ImageCandidate] = []
    for index, match in enumerate(IMAGE_TAG_PATTERN.finditer(body)):
        attributes = match.group(1)
        alt_match = ALT_PATTERN.search(attributes)
        src_match = SRC_PATTERN.search(attributes)
        candidates.append(
            ImageCandidate(
                original_index=index,
                alt_text=alt_match.group(1) if alt_match else "",
                url=resolve_href(src_match.group(1), page_url) if src_match else "",
            )
        )
    return candidates


def rank_images(
    body: str,
    page_url: str,
    max_images: int,
    search_terms: Optional[Sequence[str]] = None,
    profile: ExtractionProfile = FULL_PROFILE,
) -> List[Tuple[str, str]]:
    """Return up to ``max_images`` (alt text, url) pairs in document order."""
    if max_images <= 0:
        return []
    extracted = extract_image_candidates(body, page_url)
    context = RankingContext(normalize_terms(search_terms), len(extracted))
    pattern = profile.image_pattern
    candidates = [
        candidate
        for candidate in extracted
        if candidate.url.startswith("http") and pattern.search(candidate.url)
    ]
    for candidate in candidates:
        candidate.relevance_score = profile.image_scorer.score(candidate, context)
    ranked = sorted(candidates, key=lambda candidate: -candidate.relevance_score)
    selected = sorted(ranked[:max_images], key=lambda candidate: candidate.original_index)
    return [(candidate.alt_text, candidate.url) for candidate in selected]
