"""Canonical article identifier extraction."""

import re
from typing import Any

UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)


def extract_uuid(value: Any) -> str | None:
    """Find the first UUID embedded in a value such as a GUID URL.

    Args:
        value: Any value; only strings can yield an identifier.

    Returns:
        The lower-cased UUID, or None when no identifier is present.
    """
    if not isinstance(value, str):
        return None

    match = UUID_PATTERN.search(value)
    if match is None:
        return None
    return match.group(0).lower()
