from __future__ import annotations

import re

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_]")

PLACEHOLDER_NAME = "unnamed"
PLACEHOLDER_FILENAME = "page"
MAX_FILENAME_LENGTH = 50


def sanitize(name: str) -> str:
    """Map a display name to a string usable as a JS identifier fragment and path component."""
    cleaned = _UNSAFE_CHARS.sub("_", str(name))
    return cleaned or PLACEHOLDER_NAME


def sanitize_filename(title: str) -> str:
    """File stem for a page title: sanitized, lowercased and capped at 50 characters.

    Use this when writing links to pages of a collection by hand, so the link
    targets match the files that get written.
    """
    cleaned = _UNSAFE_CHARS.sub("_", str(title)).lower()[:MAX_FILENAME_LENGTH]
    return cleaned or PLACEHOLDER_FILENAME


class IdAllocator:
    """Hands out collision-free chart identifiers for a single page build."""

    def __init__(self) -> None:
        self._taken: set[str] = set()

    def allocate(self, base: str) -> str:
        candidate = sanitize(base)
        if candidate not in self._taken:
            self._taken.add(candidate)
            return candidate
        suffix = 2
        while f"{candidate}_{suffix}" in self._taken:
            suffix += 1
        allocated = f"{candidate}_{suffix}"
        self._taken.add(allocated)
        return allocated

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._taken
