"""HTTP layer: wire codec, request building and the async client."""

from botdetector.http.client import BotDetectorClient
from botdetector.http.codec import DEFAULT_CODEC, JsonCodec
from botdetector.http.completion import CallState, CompletionHandle
from botdetector.http.transport import HttpTransport
from botdetector.http.urls import PreparedRequest, build_request, build_url

__all__ = [
    "BotDetectorClient",
    "CallState",
    "CompletionHandle",
    "DEFAULT_CODEC",
    "HttpTransport",
    "JsonCodec",
    "PreparedRequest",
    "build_request",
    "build_url",
]
