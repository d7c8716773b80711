"""
Pytest configuration and shared fixtures for Bot Detector client tests.
"""

from datetime import datetime, timezone

import pytest

from botdetector.models import PlayerSighting, Prediction


@pytest.fixture
def sample_sighting():
    """A sighting of one player at a fixed time."""
    return PlayerSighting(
        player_name="Bot Farmer",
        region_id=12850,
        world_number=302,
        x=3222,
        y=3218,
        plane=0,
        on_members_world=True,
        on_pvp_world=False,
        manual_detect=False,
        timestamp=datetime(2021, 6, 1, 12, 30, 15, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_prediction():
    """Prediction the caller currently holds."""
    return Prediction(
        player_id=1337,
        player_name="Zezima",
        prediction_label="Mining_bot",
        confidence=0.92,
    )
