"""
Constants for the Bot Detector API client.

Provides the default API host, the version fallback word, wire content
type and the fixed set of API endpoints.
"""

from enum import Enum


# =============================================================================
# API
# =============================================================================

DEFAULT_API_BASE_URL = "https://www.osrsbotdetector.com/api"

# Used in place of the plugin version when none has been set
API_VERSION_FALLBACK_WORD = "latest"

JSON_CONTENT_TYPE = "application/json; charset=utf-8"

DEFAULT_USER_AGENT = "botdetector-client"

# Seconds
DEFAULT_CONNECT_TIMEOUT = 30.0
DEFAULT_READ_TIMEOUT = 30.0


class ApiPath(Enum):
    """API endpoints, relative to ``<base>/<version>/``."""

    DETECTION = ("plugin/detect/", "POST")
    PLAYER_STATS = ("stats/contributions/", "GET")
    PREDICTION = ("site/prediction/", "GET")
    FEEDBACK = ("plugin/predictionfeedback/", "POST")
    VERIFY_DISCORD = ("site/discord_user/", "POST")

    def __init__(self, path: str, method: str):
        self.path = path
        self.method = method

    @property
    def metric_key(self) -> str:
        return self.name.lower()


# =============================================================================
# PLAYERS
# =============================================================================

# In-game display names are at most 12 characters
MAX_PLAYER_NAME_LENGTH = 12

# Feedback votes
VOTE_AGREE = 1
VOTE_DISAGREE = -1


# =============================================================================
# SIGHTING FLUSH SCHEDULE
# =============================================================================

TICKS_PER_SEND_INTERVAL_UNIT = 100
MIN_TICKS_BETWEEN_SENDS = 500
DEFAULT_SEND_INTERVAL = 5
