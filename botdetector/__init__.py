"""Bot Detector API client package."""

from botdetector.config import Config
from botdetector.exceptions import (
    ApiError,
    BotDetectorError,
    ParseError,
    TransportError,
    UnauthorizedTokenError,
)
from botdetector.http.client import BotDetectorClient
from botdetector.http.completion import CallState, CompletionHandle
from botdetector.models import PlayerSighting, PlayerStats, Prediction

__all__ = [
    "ApiError",
    "BotDetectorClient",
    "BotDetectorError",
    "CallState",
    "CompletionHandle",
    "Config",
    "ParseError",
    "PlayerSighting",
    "PlayerStats",
    "Prediction",
    "TransportError",
    "UnauthorizedTokenError",
]

__version__ = "1.0.0"
