"""URL slug generation for post titles."""
from __future__ import annotations

import re

_NON_SLUG_RUN = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """Derive a lowercase, hyphen-delimited slug from ``title``.

    Every maximal run of characters outside ``[a-z0-9]`` (after lowercasing)
    becomes a single ``-`` and leading/trailing hyphens are stripped, so the
    function is idempotent: ``slugify(slugify(t)) == slugify(t)``.
    """
    return _NON_SLUG_RUN.sub("-", title.lower()).strip("-")
