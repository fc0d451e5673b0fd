"""Status and warning sinks handed to the visit pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List


class Reporter:
    """One-way progress and warning notifications."""

    def status(self, message: str) -> None:
        raise NotImplementedError

    def warn(self, message: str) -> None:
        raise NotImplementedError


class LoggingReporter(Reporter):
    """Forward notifications to a logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("visit_website")

    def status(self, message: str) -> None:
        self.logger.info("%s", message)

    def warn(self, message: str) -> None:
        self.logger.warning("%s", message)


@dataclass
class CollectingReporter(Reporter):
    """Keep notifications in memory, e.g. to return them alongside a result."""

    statuses: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def status(self, message: str) -> None:
        self.statuses.append(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)
