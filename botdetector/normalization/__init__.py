"""Player name normalization."""

from botdetector.normalization.names import (
    normalize_name_for_matching,
    sanitize_player_name,
    validate_player_name,
)

__all__ = ["normalize_name_for_matching", "sanitize_player_name", "validate_player_name"]
