"""Offset pagination arithmetic shared by listing endpoints."""
from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PageWindow:
    """A validated page request translated into offset/limit terms."""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def describe(self, total: int, returned: int) -> dict[str, int | bool]:
        """Return pagination metadata for a page holding ``returned`` rows.

        Args:
            total: Number of rows matching the filters across all pages.
            returned: Number of rows actually returned for this page.
        """
        return {
            "current_page": self.page,
            "total_pages": math.ceil(total / self.limit),
            "has_next": self.offset + returned < total,
            "has_prev": self.page > 1,
        }
