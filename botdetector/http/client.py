"""Asynchronous client for the Bot Detector API.

Every operation returns a ``CompletionHandle`` immediately and runs the
HTTP exchange as a task on the running event loop. Responses are
classified the same way for every endpoint:

- transport failure (refused, timeout, DNS, cancellation) -> ``TransportError``
- 404 on a lookup -> ``None`` (no data for that player, not an error)
- 401 on token verification -> ``UnauthorizedTokenError``
- other 4xx -> ``ApiError`` carrying the server's ``error`` message
- 5xx and anything else non-2xx -> ``ApiError("Error <code> from API")``
- 2xx lookup body that does not decode -> ``ParseError``

Nothing is retried; a failed call is reported once through its handle.

Usage:
    async with BotDetectorClient(Config.from_env()) as client:
        client.plugin_version = "1.2.3"
        prediction = await client.fetch_prediction("Zezima")
        if prediction is None:
            print("No data for Zezima")
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Iterable, Optional, Set, Type, TypeVar

import aiohttp

from botdetector.config import Config
from botdetector.constants import ApiPath
from botdetector.exceptions import (
    ApiError,
    BotDetectorError,
    ParseError,
    TransportError,
    UnauthorizedTokenError,
)
from botdetector.http.codec import DEFAULT_CODEC, JsonCodec, parse_error_message
from botdetector.http.completion import CallState, CompletionHandle, state_for_error
from botdetector.http.transport import HttpTransport
from botdetector.http.urls import PreparedRequest, build_request
from botdetector.models import (
    DiscordVerification,
    PlayerSighting,
    PlayerStats,
    Prediction,
    PredictionFeedback,
    SightingReport,
)
from botdetector.normalization.names import sanitize_player_name
from botdetector.ops.metrics import MetricsRecorder, get_metrics_recorder

logger = logging.getLogger(__name__)

T = TypeVar("T")

ResponseHandler = Callable[[aiohttp.ClientResponse], Awaitable[Any]]


def _is_successful(status: int) -> bool:
    return 200 <= status < 300


async def _read_text(response: aiohttp.ClientResponse) -> str:
    body = await response.read()
    try:
        return body.decode(response.charset or "utf-8")
    except (UnicodeDecodeError, LookupError) as exc:
        raise ParseError("Error parsing API response body", exc) from exc


async def _status_error(response: aiohttp.ClientResponse) -> ApiError:
    """Build the failure for a non-2xx response."""
    code = response.status
    if 400 <= code < 500:
        try:
            body = await _read_text(response)
        except (ParseError, aiohttp.ClientError):
            return ApiError(code, f"Error {code} with no error info")
        return ApiError(code, parse_error_message(code, body))
    return ApiError(code, f"Error {code} from API")


class BotDetectorClient:
    """
    Non-blocking client for the Bot Detector API.

    The transport, codec and config are shared by all calls and are not
    changed after construction. Only ``plugin_version`` may be set later;
    it is read once per call when the URL is built.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        transport: Optional[HttpTransport] = None,
        codec: JsonCodec = DEFAULT_CODEC,
        metrics: Optional[MetricsRecorder] = None,
    ):
        self.config = config or Config.from_env()
        self._transport = transport or HttpTransport.from_config(self.config)
        self._codec = codec
        self._metrics = metrics or get_metrics_recorder()
        self._plugin_version = self.config.plugin_version
        self._pending: Set[asyncio.Task] = set()

    @property
    def plugin_version(self) -> str:
        return self._plugin_version

    @plugin_version.setter
    def plugin_version(self, value: Optional[str]) -> None:
        self._plugin_version = value or ""

    async def __aenter__(self) -> "BotDetectorClient":
        await self._transport.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Cancel in-flight calls (their handles fail with TransportError) and close the transport."""
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        await self._transport.close()

    # =========================================================================
    # Operations
    # =========================================================================

    def submit_sighting(self, sighting: PlayerSighting, reporter: str, manual: bool) -> CompletionHandle[bool]:
        return self.submit_sightings([sighting], reporter, manual)

    def submit_sightings(
        self,
        sightings: Iterable[PlayerSighting],
        reporter: str,
        manual: bool,
    ) -> CompletionHandle[bool]:
        """Upload a batch of sightings made by ``reporter``. Resolves True on any 2xx."""
        reports = [SightingReport(reporter, sighting) for sighting in sightings]
        request = self._build(ApiPath.DETECTION, 1 if manual else 0, payload=reports)
        return self._dispatch(request, "Error sending player sighting data", self._expect_ack)

    def verify_discord_token(self, token: str, name_to_verify: str, code: str) -> CompletionHandle[bool]:
        """Link ``name_to_verify`` to a Discord account using a one-time ``code``."""
        request = self._build(
            ApiPath.VERIFY_DISCORD,
            token,
            payload=DiscordVerification(name_to_verify, code),
        )
        return self._dispatch(request, "Error verifying discord user", self._expect_verified)

    def submit_feedback(self, prediction: Prediction, reporter_name: str, agree: bool) -> CompletionHandle[bool]:
        """Vote on ``prediction`` as it is now; later changes to it are not sent."""
        feedback = PredictionFeedback.from_prediction(prediction, reporter_name, agree)
        request = self._build(ApiPath.FEEDBACK, payload=feedback)
        return self._dispatch(request, "Error sending prediction feedback", self._expect_ack)

    def fetch_prediction(self, player_name: str) -> CompletionHandle[Optional[Prediction]]:
        request = self._build(ApiPath.PREDICTION, sanitize_player_name(player_name))
        return self._dispatch(
            request,
            "Error obtaining player prediction data",
            self._expect_record(Prediction),
        )

    def fetch_player_stats(self, player_name: str) -> CompletionHandle[Optional[PlayerStats]]:
        request = self._build(ApiPath.PLAYER_STATS, sanitize_player_name(player_name))
        return self._dispatch(
            request,
            "Error obtaining player stats data",
            self._expect_record(PlayerStats),
        )

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _build(self, endpoint: ApiPath, *segments: Any, payload: Any = None) -> PreparedRequest:
        return build_request(
            endpoint,
            self._plugin_version,
            *segments,
            payload=payload,
            base_url=self.config.api_base_url,
            codec=self._codec,
        )

    def _dispatch(
        self,
        request: PreparedRequest,
        description: str,
        handle_response: ResponseHandler,
    ) -> CompletionHandle:
        if not self._transport.is_open:
            raise RuntimeError("BotDetectorClient is not open; use 'async with BotDetectorClient(...)'")
        handle: CompletionHandle = CompletionHandle(request.endpoint.metric_key)
        task = asyncio.ensure_future(self._exchange(request, description, handle_response, handle))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        handle.attach(task)
        return handle

    async def _exchange(
        self,
        request: PreparedRequest,
        description: str,
        handle_response: ResponseHandler,
        handle: CompletionHandle,
    ) -> None:
        started = time.perf_counter()
        logger.debug("%s %s", request.method, request.url)
        try:
            async with self._transport.request(request.method, request.url, request.body) as response:
                value = await handle_response(response)
        except asyncio.CancelledError as exc:
            self._complete(handle, request, description, started, error=TransportError("Call cancelled", exc))
            raise
        except BotDetectorError as exc:
            self._complete(handle, request, description, started, error=exc)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            self._complete(handle, request, description, started, error=TransportError("Request failed", exc))
        else:
            self._complete(handle, request, description, started, value=value)

    def _complete(
        self,
        handle: CompletionHandle,
        request: PreparedRequest,
        description: str,
        started: float,
        value: Any = None,
        error: Optional[BaseException] = None,
    ) -> None:
        elapsed_ms = (time.perf_counter() - started) * 1000
        if error is not None:
            logger.warning("%s: %s", description, error)
            outcome = state_for_error(error).value
        elif value is None:
            logger.debug("No data at %s", request.url)
            outcome = "not_found"
        else:
            outcome = CallState.SUCCEEDED.value
        self._metrics.record_call(request.endpoint.metric_key, outcome, elapsed_ms)

        if error is not None:
            handle.fail(error)
        else:
            handle.resolve(value)

    # =========================================================================
    # Response handlers
    # =========================================================================

    async def _expect_ack(self, response: aiohttp.ClientResponse) -> bool:
        if not _is_successful(response.status):
            raise await _status_error(response)
        return True

    async def _expect_verified(self, response: aiohttp.ClientResponse) -> bool:
        # TODO: tell a bad token apart from a failed verification once the API reports them differently
        if response.status == 401:
            raise UnauthorizedTokenError()
        return await self._expect_ack(response)

    def _expect_record(self, cls: Type[T]) -> ResponseHandler:
        async def handle(response: aiohttp.ClientResponse) -> Optional[T]:
            if not _is_successful(response.status):
                if response.status == 404:
                    return None
                raise await _status_error(response)
            return self._codec.loads(cls, await _read_text(response))

        return handle
