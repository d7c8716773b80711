"""Mock implementations for testing the Bot Detector client."""

import asyncio
import json
import socket
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from aiohttp import web
from aiohttp.test_utils import TestServer

from botdetector.config import Config


@dataclass
class RecordedRequest:
    method: str
    raw_path: str
    path: str
    content_type: str
    body: str

    @property
    def json(self) -> Any:
        return json.loads(self.body) if self.body else None


@dataclass
class StubResponse:
    status: int = 200
    body: str = ""
    delay: float = 0.0


class FakeBotDetectorApi:
    """
    In-process HTTP server standing in for the Bot Detector API.

    Responses are registered per (method, path); the path may be given
    decoded or percent-encoded. Unregistered requests get a 500.

    Usage:
        async with FakeBotDetectorApi() as api:
            api.respond("GET", "/api/latest/site/prediction/Zezima", json_body={...})
            async with BotDetectorClient(api.config()) as client:
                ...
    """

    API_ROOT = "/api"

    def __init__(self) -> None:
        self.requests: List[RecordedRequest] = []
        self._stubs: Dict[Tuple[str, str], StubResponse] = {}
        self._server: Optional[TestServer] = None

    async def __aenter__(self) -> "FakeBotDetectorApi":
        app = web.Application()
        app.router.add_route("*", "/{tail:.*}", self._handle)
        self._server = TestServer(app)
        await self._server.start_server()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self._server.close()

    @property
    def base_url(self) -> str:
        return str(self._server.make_url(self.API_ROOT))

    def config(self, **overrides) -> Config:
        return Config(api_base_url=self.base_url, **overrides)

    def respond(
        self,
        method: str,
        path: str,
        status: int = 200,
        body: str = "",
        json_body: Any = None,
        delay: float = 0.0,
    ) -> None:
        if json_body is not None:
            body = json.dumps(json_body)
        self._stubs[(method.upper(), path)] = StubResponse(status=status, body=body, delay=delay)

    def requests_to(self, path: str) -> List[RecordedRequest]:
        return [r for r in self.requests if path in (r.path, r.raw_path)]

    async def _handle(self, request: web.Request) -> web.Response:
        body = (await request.read()).decode("utf-8")
        self.requests.append(
            RecordedRequest(
                method=request.method,
                raw_path=request.raw_path,
                path=request.path,
                content_type=request.headers.get("Content-Type", ""),
                body=body,
            )
        )
        stub = self._stubs.get((request.method, request.raw_path)) or self._stubs.get(
            (request.method, request.path)
        )
        if stub is None:
            return web.Response(status=500, text=f"no stub for {request.method} {request.raw_path}")
        if stub.delay:
            await asyncio.sleep(stub.delay)
        return web.Response(status=stub.status, text=stub.body, content_type="application/json")


def unused_port() -> int:
    """A local port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class StubClient:
    """Records submit_sightings calls instead of sending them."""

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []

    def submit_sightings(self, sightings, reporter, manual):
        self.calls.append({"sightings": list(sightings), "reporter": reporter, "manual": manual})
        return "handle"
