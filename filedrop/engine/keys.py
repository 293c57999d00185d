"""Key decoding and the marker rename transition."""

from __future__ import annotations

from urllib.parse import unquote_plus

from filedrop.engine.guard import is_marked


def decode_key(raw_key: str) -> str:
    """Decode a notification key: percent-escapes resolved, '+' read as space."""
    return unquote_plus(raw_key)


def split_relative(intake_path: str, key: str) -> tuple[str, str]:
    """
    Split a key under ``intake_path`` into nested sub-path and filename.

    Args:
        intake_path: Matched intake path (no trailing slash)
        key: Decoded key starting with ``intake_path + "/"``

    Returns:
        Tuple of (nested_path, filename); nested_path is "" at the top level
    """
    relative = key[len(intake_path) + 1:]
    nested_path, _, filename = relative.rpartition("/")
    return nested_path, filename


def compute_new_key(
    intake_path: str,
    nested_path: str,
    filename: str,
    timestamp: str,
) -> str:
    """
    Build the marked key ``intake_path/[nested_path/]timestamp-filename``.

    The filename is kept verbatim as a suffix.

    Raises:
        ValueError: If ``timestamp`` would not produce a marked filename,
            which would let the renamed object be processed again
    """
    marked_name = f"{timestamp}-{filename}"
    if not is_marked(marked_name):
        raise ValueError(f"Timestamp {timestamp!r} does not form a processed marker")

    if nested_path:
        return f"{intake_path}/{nested_path}/{marked_name}"
    return f"{intake_path}/{marked_name}"
