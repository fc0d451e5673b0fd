"""Fetch web pages and return small, relevance-ranked summaries of them."""

from .config import AUTO, VisitConfig
from .crawler import view_images, visit_website

__version__ = "0.1.0"
__all__ = [
    "AUTO",
    "VisitConfig",
    "view_images",
    "visit_website",
]
