"""Input sanitization for free-text profile fields (XSS prevention)."""

import nh3


def strip_markup(value: str | None) -> str | None:
    """Remove all HTML from value with nh3; blank results become None.

    Args:
        value: Raw text that may contain HTML (e.g. a display name).

    Returns:
        Plain text safe for HTML display, or None.
    """
    if value is None:
        return None
    cleaned = nh3.clean(value, tags=set(), attributes={}).strip()
    return cleaned or None
