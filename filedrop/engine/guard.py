"""Recursion guard: detects filenames that already carry the processed marker.

A marker is a leading timestamp of the form ``2026-02-22T10:30:00.000Z-``.
Only the last path segment is inspected, so directories whose names look
like timestamps never trip the guard.
"""

from __future__ import annotations

import re

# Must stay in lockstep with the prefix built by keys.compute_new_key.
MARKER_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z-",
    re.ASCII,
)


def basename(key: str) -> str:
    """Last '/'-delimited segment of ``key`` (empty for keys ending in '/')."""
    return key.rsplit("/", 1)[-1]


def is_marked(filename: str) -> bool:
    """
    Check if a bare filename already carries the processed marker.

    Args:
        filename: Last path segment only, never the full key

    Returns:
        True if the filename starts with a conforming timestamp and '-'
    """
    return MARKER_PATTERN.match(filename) is not None
