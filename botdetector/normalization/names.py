"""Player name sanitising and matching helpers."""

import re

from botdetector.constants import MAX_PLAYER_NAME_LENGTH
from botdetector.exceptions import InvalidPlayerNameError

_NBSP = "\u00a0"
_SEPARATORS_RE = re.compile(r"[\s_-]+")


def sanitize_player_name(name: str) -> str:
    """Replace non-breaking spaces (as sent by the game client) and trim."""
    if not name:
        return ""
    return name.replace(_NBSP, " ").strip()


def validate_player_name(name: str) -> str:
    """Sanitised name, or InvalidPlayerNameError if it cannot be a display name."""
    sanitized = sanitize_player_name(name)
    if not sanitized:
        raise InvalidPlayerNameError(name, "name is empty")
    if len(sanitized) > MAX_PLAYER_NAME_LENGTH:
        raise InvalidPlayerNameError(
            name,
            f"longer than {MAX_PLAYER_NAME_LENGTH} characters",
        )
    return sanitized


def normalize_name_for_matching(name: str) -> str:
    # Spaces, underscores and hyphens are interchangeable in display names
    if not name:
        return ""
    return _SEPARATORS_RE.sub(" ", sanitize_player_name(name)).strip().lower()
