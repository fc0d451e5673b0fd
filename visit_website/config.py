"""Configuration objects and constants for website visits."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger("visit_website")

AUTO = -1

DEFAULT_MAX_LINKS = 40
DEFAULT_MAX_IMAGES = 10
DEFAULT_CONTENT_LIMIT = 2000
DEFAULT_PROFILE = "full"
PROFILE_NAMES = ("simple", "full")

_ENV_PREFIX = "VISIT_WEBSITE_"


def resolve_budget(
    requested: Optional[int],
    configured: Optional[int],
    default: int,
) -> int:
    """Pick the effective budget: call argument, then configuration, then default.

    A configured value of ``AUTO`` (or ``None``) defers to the default.
    """
    if requested is not None:
        return requested
    if configured is not None and configured != AUTO:
        return configured
    return default


@dataclass
class VisitConfig:
    """Settings shared by every visit and image download."""

    working_directory: Path = field(default_factory=Path.cwd)
    max_links: int = AUTO
    max_images: int = AUTO
    content_limit: int = AUTO
    profile: str = DEFAULT_PROFILE
    request_timeout: float = 30.0

    def __post_init__(self) -> None:
        self.working_directory = Path(self.working_directory).expanduser().resolve()
        for name in ("max_links", "max_images", "content_limit"):
            value = getattr(self, name)
            if value < AUTO:
                raise ValueError(f"{name} must be >= {AUTO} (got {value})")
        if self.profile not in PROFILE_NAMES:
            raise ValueError(
                f"Unknown extraction profile {self.profile!r}; "
                f"expected one of {', '.join(PROFILE_NAMES)}"
            )

    def links_budget(self, requested: Optional[int] = None) -> int:
        return resolve_budget(requested, self.max_links, DEFAULT_MAX_LINKS)

    def images_budget(self, requested: Optional[int] = None) -> int:
        return resolve_budget(requested, self.max_images, DEFAULT_MAX_IMAGES)

    def content_budget(self, requested: Optional[int] = None) -> int:
        return resolve_budget(requested, self.content_limit, DEFAULT_CONTENT_LIMIT)

    @classmethod
    def from_env(cls, **overrides) -> "VisitConfig":
        """Build a config from ``VISIT_WEBSITE_*`` environment variables."""
        values = {}
        for name in ("max_links", "max_images", "content_limit"):
            env_var = _ENV_PREFIX + name.upper()
            raw = os.getenv(env_var)
            if not raw:
                continue
            try:
                value = int(raw)
            except ValueError:
                logger.warning("Ignoring %s=%r: not an integer", env_var, raw)
                continue
            if value < AUTO:
                logger.warning("Ignoring %s=%r: must be >= %d", env_var, raw, AUTO)
                continue
            values[name] = value
        profile = os.getenv(_ENV_PREFIX + "PROFILE")
        if profile:
            if profile in PROFILE_NAMES:
                values["profile"] = profile
            else:
                logger.warning("Ignoring unknown profile %r from the environment", profile)
        workdir = os.getenv(_ENV_PREFIX + "WORKDIR")
        if workdir:
            values["working_directory"] = Path(workdir)
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
