"""Utility helpers for URL resolution and path handling."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Union
from urllib.parse import urljoin

DRIVE_PREFIX_PATTERN = re.compile(r"^[A-Za-z]:")


def resolve_href(value: str, page_url: str) -> str:
    """Resolve root-relative references against the page URL; keep others as-is."""
    if value.startswith("/"):
        return urljoin(page_url, value)
    return value


def to_web_path(path: Union[str, Path]) -> str:
    """Normalize a filesystem path into a forward-slash, drive-less reference."""
    normalized = str(path).replace("\\", "/")
    return DRIVE_PREFIX_PATTERN.sub("", normalized, count=1)


def is_local_reference(value: str, working_directory: Union[str, Path]) -> bool:
    """Return True when the value already points inside the working directory."""
    root = str(working_directory)
    return value.startswith(root) or value.startswith(to_web_path(root))
