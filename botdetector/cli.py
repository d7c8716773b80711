"""Command line entry points for querying the Bot Detector API."""

from typing import Any, Awaitable, Callable, Optional, Sequence
import argparse
import asyncio
import json
import logging
import sys

from botdetector.config import Config
from botdetector.exceptions import (
    BotDetectorError,
    ConfigurationError,
    InvalidPlayerNameError,
    UnauthorizedTokenError,
)
from botdetector.http.client import BotDetectorClient
from botdetector.http.codec import DEFAULT_CODEC
from botdetector.normalization.names import validate_player_name
from botdetector.ops.logging import configure_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NO_DATA = 3


def _print_json(payload: Any) -> None:
    print(json.dumps(DEFAULT_CODEC.encode(payload), indent=2, sort_keys=True))


async def _lookup(client: BotDetectorClient, kind: str, player_name: str) -> int:
    if kind == "prediction":
        result = await client.fetch_prediction(player_name)
    else:
        result = await client.fetch_player_stats(player_name)
    if result is None:
        print(f"No data for {player_name}", file=sys.stderr)
        return EXIT_NO_DATA
    _print_json(result)
    return EXIT_OK


async def _verify_discord(client: BotDetectorClient, token: str, player_name: str, code: str) -> int:
    try:
        await client.verify_discord_token(token, player_name, code)
    except UnauthorizedTokenError:
        print("Invalid token", file=sys.stderr)
        return EXIT_FAILED
    print(f"Verified {player_name}")
    return EXIT_OK


async def _feedback(client: BotDetectorClient, player_name: str, reporter: str, agree: bool) -> int:
    prediction = await client.fetch_prediction(player_name)
    if prediction is None:
        print(f"No prediction for {player_name} to give feedback on", file=sys.stderr)
        return EXIT_NO_DATA
    await client.submit_feedback(prediction, reporter, agree)
    vote = "agreed with" if agree else "disagreed with"
    print(f"{reporter} {vote} '{prediction.prediction_label}' for {prediction.player_name}")
    return EXIT_OK


async def _with_client(config: Config, action: Callable[[BotDetectorClient], Awaitable[int]]) -> int:
    async with BotDetectorClient(config) as client:
        return await action(client)


def run_command(config: Config, action: Callable[[BotDetectorClient], Awaitable[int]]) -> int:
    try:
        return asyncio.run(_with_client(config, action))
    except BotDetectorError as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILED


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="botdetector", description="Bot Detector API client")
    parser.add_argument("--config", dest="config_path", help="Path to .env or JSON config file")
    parser.add_argument("--version-string", dest="version_string", help="Plugin version used in API URLs")
    parser.add_argument("--api-path", dest="api_path", help="Override the API base URL")
    parser.add_argument("--log-level", dest="log_level", help="Logging level (DEBUG, INFO, ...)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    prediction = subparsers.add_parser("prediction", help="Show the bot prediction for a player")
    prediction.add_argument("player_name")

    stats = subparsers.add_parser("stats", help="Show contribution statistics for a player")
    stats.add_argument("player_name")

    verify = subparsers.add_parser("verify-discord", help="Link a player to a Discord account")
    verify.add_argument("token")
    verify.add_argument("player_name")
    verify.add_argument("code")

    feedback = subparsers.add_parser("feedback", help="Vote on a player's current prediction")
    feedback.add_argument("player_name")
    feedback.add_argument("--reporter", required=True, help="Name of the player giving feedback")
    vote = feedback.add_mutually_exclusive_group(required=True)
    vote.add_argument("--agree", dest="agree", action="store_true")
    vote.add_argument("--disagree", dest="agree", action="store_false")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = Config.load(args.config_path).with_overrides(
            plugin_version=args.version_string,
            api_base_url=args.api_path,
            log_level=args.log_level,
        )
        player_name = validate_player_name(args.player_name)
    except (ConfigurationError, InvalidPlayerNameError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILED
    configure_logging(config.log_level)

    if args.command in ("prediction", "stats"):
        return run_command(config, lambda client: _lookup(client, args.command, player_name))
    if args.command == "verify-discord":
        return run_command(config, lambda client: _verify_discord(client, args.token, player_name, args.code))
    if args.command == "feedback":
        return run_command(config, lambda client: _feedback(client, player_name, args.reporter, args.agree))

    parser.print_help()
    return EXIT_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
