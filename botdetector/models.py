"""Value records exchanged with the Bot Detector API."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional

from botdetector.constants import VOTE_AGREE, VOTE_DISAGREE


@dataclass(frozen=True)
class PlayerSighting:
    """A single observation of a player by the local client."""
    player_name: str
    region_id: int
    world_number: int
    x: int
    y: int
    plane: int
    on_members_world: bool = False
    on_pvp_world: bool = False
    manual_detect: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class SightingReport:
    """A sighting tagged with the reporting player; sent flattened."""
    reporter: str
    sighting: PlayerSighting


@dataclass(frozen=True)
class Prediction:
    player_id: int
    player_name: str
    prediction_label: str
    confidence: float
    predictions_breakdown: Optional[Dict[str, float]] = None


@dataclass(frozen=True)
class PlayerStats:
    names_uploaded: int
    reports: int
    confirmed_bans: int
    accuracy: Optional[float] = None


@dataclass(frozen=True)
class PredictionFeedback:
    """
    A vote on a prediction.

    Holds a copy of the prediction's label, confidence and id as they were
    when the vote was cast.
    """
    player_name: str
    vote: int
    prediction_label: str
    prediction_confidence: float
    target_id: int

    @classmethod
    def from_prediction(cls, prediction: Prediction, reporter_name: str, agree: bool) -> "PredictionFeedback":
        return cls(
            player_name=reporter_name,
            vote=VOTE_AGREE if agree else VOTE_DISAGREE,
            prediction_label=prediction.prediction_label,
            prediction_confidence=prediction.confidence,
            target_id=prediction.player_id,
        )


@dataclass(frozen=True)
class DiscordVerification:
    name_to_verify: str
    code: str
