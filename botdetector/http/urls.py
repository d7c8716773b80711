"""Request construction for API endpoints."""

from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

from yarl import URL

from botdetector.constants import API_VERSION_FALLBACK_WORD, DEFAULT_API_BASE_URL, ApiPath
from botdetector.http.codec import DEFAULT_CODEC, JsonCodec


@dataclass(frozen=True)
class PreparedRequest:
    endpoint: ApiPath
    method: str
    url: URL
    body: Optional[str] = None


def resolve_version(version: Optional[str]) -> str:
    return version if version else API_VERSION_FALLBACK_WORD


def _segment(value: Any) -> str:
    # No safe characters: a '/' in a name or token must not start a new segment
    return quote(str(value), safe="")


def build_url(
    endpoint: ApiPath,
    version: Optional[str],
    *segments: Any,
    base_url: str = DEFAULT_API_BASE_URL,
) -> URL:
    """
    Build ``<base>/<version>/<endpoint path>[/<segment>...]``.

    Args:
        endpoint: API endpoint
        version: Client version string; empty or None means "latest"
        *segments: Extra path segments, each percent-encoded as a unit
        base_url: API root

    Returns:
        Already-encoded ``yarl.URL``
    """
    path = endpoint.path
    if segments:
        path = path.rstrip("/") + "/" + "/".join(_segment(s) for s in segments)
    raw = f"{base_url.rstrip('/')}/{_segment(resolve_version(version))}/{path}"
    return URL(raw, encoded=True)


def build_request(
    endpoint: ApiPath,
    version: Optional[str],
    *segments: Any,
    payload: Any = None,
    base_url: str = DEFAULT_API_BASE_URL,
    codec: JsonCodec = DEFAULT_CODEC,
) -> PreparedRequest:
    body = codec.dumps(payload) if payload is not None else None
    if endpoint.method == "POST" and body is None:
        raise ValueError(f"{endpoint.name} requires a request body")
    return PreparedRequest(
        endpoint=endpoint,
        method=endpoint.method,
        url=build_url(endpoint, version, *segments, base_url=base_url),
        body=body,
    )
