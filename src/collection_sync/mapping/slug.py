"""Slug generation for collection items."""

from __future__ import annotations

import re

_NON_WORD = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[\s_-]+")


def slugify(text: str) -> str:
    """Turn arbitrary text into a URL-safe slug.

    Lower-cases, drops anything that is not a word character, whitespace
    or dash, and collapses runs of separators into a single ``-``.

    >>> slugify("  Hello, World!  ")
    'hello-world'
    """
    cleaned = _NON_WORD.sub("", text.strip().lower())
    return _SEPARATORS.sub("-", cleaned).strip("-")
