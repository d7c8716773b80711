"""Shared HTTP transport with connection pooling and fixed timeouts.

One ``HttpTransport`` is created at startup and shared by every call. Its
session and timeouts are never changed after ``open()``; per-call state
lives only in the request itself. There is no retry layer: each call goes
out once.
"""

import logging
from typing import Optional

import aiohttp
from yarl import URL

from botdetector.config import Config
from botdetector.constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_READ_TIMEOUT,
    DEFAULT_USER_AGENT,
    JSON_CONTENT_TYPE,
)

logger = logging.getLogger(__name__)


class HttpTransport:
    """Owns the aiohttp session used for all API calls."""

    POOL_SIZE = 10

    def __init__(
        self,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.user_agent = user_agent
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls, config: Config) -> "HttpTransport":
        return cls(
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
            user_agent=config.user_agent,
        )

    @property
    def timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(
            total=None,
            sock_connect=self.connect_timeout,
            sock_read=self.read_timeout,
        )

    @property
    def is_open(self) -> bool:
        return self._session is not None and not self._session.closed

    @property
    def session(self) -> aiohttp.ClientSession:
        if not self.is_open:
            raise RuntimeError("HttpTransport is not open; use 'async with BotDetectorClient(...)'")
        return self._session

    async def open(self) -> "HttpTransport":
        """Create the session; an owned session closed earlier is replaced."""
        if self._session is None or (self._owns_session and self._session.closed):
            connector = aiohttp.TCPConnector(limit=self.POOL_SIZE)
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            )
            logger.debug(
                "Opened HTTP session (connect=%.1fs, read=%.1fs)",
                self.connect_timeout,
                self.read_timeout,
            )
        return self

    def request(self, method: str, url: URL, body: Optional[str] = None):
        """Start a request; use as ``async with transport.request(...) as response``."""
        headers = {"Content-Type": JSON_CONTENT_TYPE} if body is not None else None
        data = body.encode("utf-8") if body is not None else None
        return self.session.request(method, url, data=data, headers=headers)

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            logger.debug("Closed HTTP session")
