"""Sighting accumulation and tick-driven flush scheduling.

The host application reports each player it sees to a ``SightingBuffer``
and calls ``FlushSchedule.tick()`` from its own game-tick loop. When the
schedule fires, the buffer is flushed to the API in one batch.

Usage:
    buffer = SightingBuffer()
    schedule = FlushSchedule.from_config(config)

    def on_player_seen(sighting):
        buffer.add(sighting)

    def on_game_tick():
        if schedule.tick():
            buffer.flush(client, reporter="Reporter")
"""

import logging
from typing import Dict, List, Optional

from botdetector.config import Config
from botdetector.constants import (
    DEFAULT_SEND_INTERVAL,
    MIN_TICKS_BETWEEN_SENDS,
    TICKS_PER_SEND_INTERVAL_UNIT,
)
from botdetector.http.client import BotDetectorClient
from botdetector.http.codec import encode_timestamp
from botdetector.http.completion import CompletionHandle
from botdetector.models import PlayerSighting
from botdetector.normalization.names import normalize_name_for_matching

logger = logging.getLogger(__name__)


class SightingBuffer:
    """
    Sightings waiting to be uploaded, one per player.

    A later sighting of the same player replaces the earlier one. The buffer
    is not locked; it belongs to the loop that feeds it.
    """

    def __init__(self) -> None:
        self._sightings: Dict[str, PlayerSighting] = {}

    def add(self, sighting: PlayerSighting) -> None:
        key = normalize_name_for_matching(sighting.player_name)
        if not key:
            logger.debug("Ignoring sighting with empty player name")
            return
        self._sightings[key] = sighting

    def __len__(self) -> int:
        return len(self._sightings)

    def __contains__(self, player_name: str) -> bool:
        return normalize_name_for_matching(player_name) in self._sightings

    def drain(self) -> List[PlayerSighting]:
        """Remove and return every buffered sighting, oldest first."""
        sightings = sorted(self._sightings.values(), key=lambda s: encode_timestamp(s.timestamp))
        self._sightings = {}
        return sightings

    def flush(
        self,
        client: BotDetectorClient,
        reporter: str,
        manual: bool = False,
    ) -> Optional[CompletionHandle[bool]]:
        """
        Send all buffered sightings as one batch.

        The buffer is emptied before the call completes; sightings from a
        failed upload are not re-queued.

        Returns:
            The upload's completion handle, or None if nothing was buffered
        """
        sightings = self.drain()
        if not sightings:
            return None
        logger.info("Flushing %d sightings for %s", len(sightings), reporter)
        return client.submit_sightings(sightings, reporter, manual)


class FlushSchedule:
    """Counts game ticks and says when buffered sightings should be sent."""

    def __init__(self, send_interval: int = DEFAULT_SEND_INTERVAL, enabled: bool = True):
        self.enabled = enabled
        self.ticks_between_sends = max(send_interval * TICKS_PER_SEND_INTERVAL_UNIT, MIN_TICKS_BETWEEN_SENDS)
        self._ticks = 0

    @classmethod
    def from_config(cls, config: Config) -> "FlushSchedule":
        return cls(send_interval=config.send_interval, enabled=config.send_automatic)

    def tick(self) -> bool:
        if not self.enabled:
            return False
        self._ticks += 1
        # Fires on the tick after the interval is reached
        if self._ticks > self.ticks_between_sends:
            self._ticks = 0
            return True
        return False

    def reset(self) -> None:
        self._ticks = 0
