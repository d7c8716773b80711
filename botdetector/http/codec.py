"""JSON transcoding between client records and the API wire format.

The wire format differs from a plain field-by-field dump of the records:

- several fields are renamed (``player_name`` is sent as ``reported`` in a
  sighting, ``confidence`` as ``prediction_confidence`` in a prediction ...)
- booleans are sent as the integers ``1``/``0``
- timestamps are sent as integer epoch seconds
- a ``SightingReport`` is sent as the sighting's own object with an extra
  ``reporter`` key rather than as a nested object

Each record type has an explicit encoder and/or decoder registered on a
``JsonCodec``. ``DEFAULT_CODEC`` is built once at import and only read
afterwards.

Usage:
    from botdetector.http.codec import DEFAULT_CODEC

    body = DEFAULT_CODEC.dumps([SightingReport("Reporter", sighting)])
    prediction = DEFAULT_CODEC.loads(Prediction, response_text)
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from botdetector.exceptions import ParseError
from botdetector.models import (
    DiscordVerification,
    PlayerSighting,
    PlayerStats,
    Prediction,
    PredictionFeedback,
    SightingReport,
)

T = TypeVar("T")

Encoder = Callable[[Any, "JsonCodec"], Any]
Decoder = Callable[[Dict[str, Any], "JsonCodec"], Any]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_SECOND = timedelta(seconds=1)


# =============================================================================
# SCALAR CONVERSIONS
# =============================================================================

def encode_timestamp(value: datetime) -> int:
    """Whole epoch seconds, rounded down. Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // _ONE_SECOND


def decode_timestamp(value: Any) -> datetime:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ParseError(f"Expected epoch seconds, got {type(value).__name__}")
    try:
        return _EPOCH + timedelta(seconds=value)
    except OverflowError as exc:
        raise ParseError(f"Epoch seconds out of range: {value}", exc) from exc


def _required(data: Dict[str, Any], key: str) -> Any:
    if data.get(key) is None:
        raise ParseError(f"Missing field '{key}'")
    return data[key]


def _int_field(data: Dict[str, Any], key: str) -> int:
    value = _required(data, key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ParseError(f"Field '{key}' should be an integer, got {type(value).__name__}")
    return value


def _float_field(data: Dict[str, Any], key: str, required: bool = True) -> Optional[float]:
    if not required and data.get(key) is None:
        return None
    value = _required(data, key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ParseError(f"Field '{key}' should be a number, got {type(value).__name__}")
    return float(value)


def _str_field(data: Dict[str, Any], key: str) -> str:
    value = _required(data, key)
    if not isinstance(value, str):
        raise ParseError(f"Field '{key}' should be a string, got {type(value).__name__}")
    return value


def _flag_field(data: Dict[str, Any], key: str) -> bool:
    value = data.get(key, 0)
    if value in (0, 1):
        return bool(value)
    raise ParseError(f"Field '{key}' should be 0 or 1, got {value!r}")


# =============================================================================
# CODEC
# =============================================================================

class JsonCodec:
    """Registry of per-type encoders and decoders."""

    def __init__(self) -> None:
        self._encoders: Dict[type, Encoder] = {}
        self._decoders: Dict[type, Decoder] = {}

    def register(
        self,
        cls: type,
        encoder: Optional[Encoder] = None,
        decoder: Optional[Decoder] = None,
    ) -> "JsonCodec":
        if encoder is not None:
            self._encoders[cls] = encoder
        if decoder is not None:
            self._decoders[cls] = decoder
        return self

    def encode(self, obj: Any) -> Any:
        """Convert ``obj`` to a JSON-compatible tree with wire coercions applied."""
        encoder = self._encoders.get(type(obj))
        if encoder is not None:
            return self.encode(encoder(obj, self))
        # bool before int: bool is an int subclass
        if isinstance(obj, bool):
            return 1 if obj else 0
        if isinstance(obj, datetime):
            return encode_timestamp(obj)
        if isinstance(obj, dict):
            return {str(key): self.encode(value) for key, value in obj.items()}
        if isinstance(obj, (list, tuple)):
            return [self.encode(item) for item in obj]
        if obj is None or isinstance(obj, (str, int, float)):
            return obj
        raise TypeError(f"No encoder registered for {type(obj).__name__}")

    def dumps(self, obj: Any) -> str:
        return json.dumps(self.encode(obj), separators=(",", ":"))

    def decode(self, cls: Type[T], data: Any) -> T:
        decoder = self._decoders.get(cls)
        if decoder is None:
            raise TypeError(f"No decoder registered for {cls.__name__}")
        if not isinstance(data, dict):
            raise ParseError(f"Expected a JSON object for {cls.__name__}, got {type(data).__name__}")
        try:
            return decoder(data, self)
        except ParseError:
            raise
        except (TypeError, ValueError, KeyError) as exc:
            raise ParseError(f"Error decoding {cls.__name__}: {exc}", exc) from exc

    def loads(self, cls: Type[T], text: str) -> T:
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise ParseError("Error parsing API response body", exc) from exc
        return self.decode(cls, data)


def parse_error_message(status_code: int, body: str) -> str:
    """Message carried by a 4xx error envelope (``{"error": "..."}``)."""
    try:
        payload = json.loads(body)
    except ValueError:
        return f"Error {status_code} with no error info"
    if not isinstance(payload, dict):
        return f"Error {status_code} with no error info"
    message = payload.get("error")
    if message is None:
        return f"Unknown {status_code} error from API"
    if isinstance(message, (dict, list)):
        return f"Error {status_code} with no error info"
    return str(message)


# =============================================================================
# RECORD ENCODERS / DECODERS
# =============================================================================

def _encode_sighting(sighting: PlayerSighting, codec: JsonCodec) -> Dict[str, Any]:
    return {
        "reported": sighting.player_name,
        "region_id": sighting.region_id,
        "world_number": sighting.world_number,
        "x": sighting.x,
        "y": sighting.y,
        "z": sighting.plane,
        "on_members_world": sighting.on_members_world,
        "on_pvp_world": sighting.on_pvp_world,
        "manual_detect": sighting.manual_detect,
        "ts": sighting.timestamp,
    }


def _decode_sighting(data: Dict[str, Any], codec: JsonCodec) -> PlayerSighting:
    return PlayerSighting(
        player_name=_str_field(data, "reported"),
        region_id=_int_field(data, "region_id"),
        world_number=_int_field(data, "world_number"),
        x=_int_field(data, "x"),
        y=_int_field(data, "y"),
        plane=_int_field(data, "z"),
        on_members_world=_flag_field(data, "on_members_world"),
        on_pvp_world=_flag_field(data, "on_pvp_world"),
        manual_detect=_flag_field(data, "manual_detect"),
        timestamp=decode_timestamp(_required(data, "ts")),
    )


def _encode_sighting_report(report: SightingReport, codec: JsonCodec) -> Dict[str, Any]:
    data = codec.encode(report.sighting)
    data["reporter"] = report.reporter
    return data


def _encode_prediction(prediction: Prediction, codec: JsonCodec) -> Dict[str, Any]:
    data = {
        "player_id": prediction.player_id,
        "player_name": prediction.player_name,
        "prediction_label": prediction.prediction_label,
        "prediction_confidence": prediction.confidence,
    }
    if prediction.predictions_breakdown is not None:
        data["predictions_breakdown"] = dict(prediction.predictions_breakdown)
    return data


def _decode_prediction(data: Dict[str, Any], codec: JsonCodec) -> Prediction:
    breakdown = data.get("predictions_breakdown")
    if breakdown is not None:
        if not isinstance(breakdown, dict):
            raise ParseError("Field 'predictions_breakdown' should be an object")
        breakdown = {str(label): _float_field(breakdown, label) for label in breakdown}
    return Prediction(
        player_id=_int_field(data, "player_id"),
        player_name=_str_field(data, "player_name"),
        prediction_label=_str_field(data, "prediction_label"),
        confidence=_float_field(data, "prediction_confidence"),
        predictions_breakdown=breakdown,
    )


def _encode_player_stats(stats: PlayerStats, codec: JsonCodec) -> Dict[str, Any]:
    return {
        "names_uploaded": stats.names_uploaded,
        "reports": stats.reports,
        "bans": stats.confirmed_bans,
        "accuracy": stats.accuracy,
    }


def _decode_player_stats(data: Dict[str, Any], codec: JsonCodec) -> PlayerStats:
    return PlayerStats(
        names_uploaded=_int_field(data, "names_uploaded"),
        reports=_int_field(data, "reports"),
        confirmed_bans=_int_field(data, "bans"),
        accuracy=_float_field(data, "accuracy", required=False),
    )


def _encode_feedback(feedback: PredictionFeedback, codec: JsonCodec) -> Dict[str, Any]:
    return {
        "player_name": feedback.player_name,
        "vote": feedback.vote,
        "prediction": feedback.prediction_label,
        "confidence": feedback.prediction_confidence,
        "subject_id": feedback.target_id,
    }


def _encode_discord_verification(verification: DiscordVerification, codec: JsonCodec) -> Dict[str, Any]:
    return {
        "player_name": verification.name_to_verify,
        "code": verification.code,
    }


def build_default_codec() -> JsonCodec:
    return (
        JsonCodec()
        .register(PlayerSighting, _encode_sighting, _decode_sighting)
        .register(SightingReport, _encode_sighting_report)
        .register(Prediction, _encode_prediction, _decode_prediction)
        .register(PlayerStats, _encode_player_stats, _decode_player_stats)
        .register(PredictionFeedback, _encode_feedback)
        .register(DiscordVerification, _encode_discord_verification)
    )


DEFAULT_CODEC = build_default_codec()
