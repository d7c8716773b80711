"""Unit tests for the botdetector command line."""

import json

import pytest

from botdetector import cli
from botdetector.http.client import BotDetectorClient
from tests.fixtures.sample_api_responses import get_sample_player_stats, get_sample_prediction
from tests.mocks import FakeBotDetectorApi, unused_port


class TestParser:
    def test_lookup_command(self):
        args = cli._build_parser().parse_args(["--version-string", "1.2.3", "stats", "Zezima"])

        assert args.command == "stats"
        assert args.player_name == "Zezima"
        assert args.version_string == "1.2.3"

    def test_feedback_vote(self):
        parser = cli._build_parser()

        assert parser.parse_args(["feedback", "Zezima", "--reporter", "Me", "--agree"]).agree is True
        assert parser.parse_args(["feedback", "Zezima", "--reporter", "Me", "--disagree"]).agree is False

    def test_feedback_requires_vote(self):
        with pytest.raises(SystemExit):
            cli._build_parser().parse_args(["feedback", "Zezima", "--reporter", "Me"])


class TestMain:
    def test_invalid_player_name(self, capsys):
        assert cli.main(["prediction", "ThisNameIsTooLong"]) == cli.EXIT_FAILED
        assert "Invalid player name" in capsys.readouterr().err

    def test_bad_api_path(self, capsys):
        assert cli.main(["--api-path", "not-a-url", "stats", "Zezima"]) == cli.EXIT_FAILED
        assert "api_base_url" in capsys.readouterr().err

    def test_unreachable_api(self, capsys):
        api_path = f"http://127.0.0.1:{unused_port()}/api"

        code = cli.main(["--api-path", api_path, "--log-level", "CRITICAL", "prediction", "Zezima"])

        assert code == cli.EXIT_FAILED
        assert "Error:" in capsys.readouterr().err


class TestCommands:
    @pytest.mark.asyncio
    async def test_lookup_prints_record(self, capsys):
        async with FakeBotDetectorApi() as api:
            api.respond("GET", "/api/latest/stats/contributions/Zezima", json_body=get_sample_player_stats())
            async with BotDetectorClient(api.config()) as client:
                code = await cli._lookup(client, "stats", "Zezima")

        assert code == cli.EXIT_OK
        printed = json.loads(capsys.readouterr().out)
        assert printed["bans"] == 7

    @pytest.mark.asyncio
    async def test_lookup_without_data(self, capsys):
        async with FakeBotDetectorApi() as api:
            api.respond("GET", "/api/latest/site/prediction/Zezima", status=404)
            async with BotDetectorClient(api.config()) as client:
                code = await cli._lookup(client, "prediction", "Zezima")

        assert code == cli.EXIT_NO_DATA
        assert "No data for Zezima" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_verify_invalid_token(self, capsys):
        async with FakeBotDetectorApi() as api:
            api.respond("POST", "/api/latest/site/discord_user/bad", status=401)
            async with BotDetectorClient(api.config()) as client:
                code = await cli._verify_discord(client, "bad", "Zezima", "8472")

        assert code == cli.EXIT_FAILED
        assert "Invalid token" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_feedback_on_current_prediction(self, capsys):
        async with FakeBotDetectorApi() as api:
            api.respond("GET", "/api/latest/site/prediction/Zezima", json_body=get_sample_prediction())
            api.respond("POST", "/api/latest/plugin/predictionfeedback/", status=200)
            async with BotDetectorClient(api.config()) as client:
                code = await cli._feedback(client, "Zezima", "Me", agree=False)

        assert code == cli.EXIT_OK
        feedback = api.requests_to("/api/latest/plugin/predictionfeedback/")[0].json
        assert feedback["vote"] == -1
        assert feedback["subject_id"] == 1337
        assert "disagreed with 'Real_Player'" in capsys.readouterr().out
