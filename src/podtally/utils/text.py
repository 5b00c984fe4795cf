"""Text helpers."""

import re
import unicodedata


def slugify(value: str, max_length: int = 40) -> str:
    """Turn a display name into a lowercase ASCII identifier.

    Examples:
        >>> slugify("Zé Carioca")
        'ze-carioca'
        >>> slugify("watch.tm")
        'watch-tm'
    """
    normalized = unicodedata.normalize("NFKD", value)
    ascii_only = normalized.encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_only.lower()).strip("-")
    slug = slug[:max_length].rstrip("-")
    return slug or "show"


def truncate_text(text: str, max_length: int) -> str:
    """Truncate text for table display, adding an ellipsis when cut."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"
