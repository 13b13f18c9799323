"""Free-text normalisation applied to request fields before validation."""
import re
from typing import Any

_TAG_RE = re.compile(r"<[^>]*>")


def normalize_text(value: Any) -> Any:
    """Strip HTML tags and surrounding whitespace from a string.

    Non-string values are returned unchanged so schema validation can
    reject them.

    Example:
        >>> normalize_text("  <b>Ana</b> ")
        'Ana'
    """
    if not isinstance(value, str):
        return value
    stripped = _TAG_RE.sub("", value)
    return stripped.strip()
