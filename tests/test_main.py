import json
from pathlib import Path
from unittest import TestCase, mock

from league_room import config
from league_room.errors import UpstreamFetchError
from league_room.main import parse_arguments, run_live_scores, run_server


class ParseArgumentsTest(TestCase):
    def test_defaults_come_from_config(self):
        args = parse_arguments([])
        self.assertEqual(args.host, config.API_HOST)
        self.assertEqual(args.port, config.API_PORT)
        self.assertEqual(args.data_dir, config.DATA_DIR)
        self.assertFalse(args.live_scores)

    def test_overrides(self):
        args = parse_arguments(["--port", "9000", "--data-dir", "/tmp/room", "--live-scores", "--verbose"])
        self.assertEqual(args.port, 9000)
        self.assertEqual(args.data_dir, "/tmp/room")
        self.assertTrue(args.live_scores)
        self.assertTrue(args.verbose)


class RunLiveScoresTest(TestCase):
    def test_prints_payload(self):
        payload = {"success": True, "players": {}, "gamesCount": 0, "allGamesFinal": False, "games": []}
        with mock.patch("league_room.live_scores.build_live_scores", return_value=payload), \
                mock.patch("builtins.print") as printed:
            exit_code = run_live_scores(parse_arguments(["--live-scores"]))

        self.assertEqual(exit_code, 0)
        self.assertEqual(json.loads(printed.call_args[0][0]), payload)

    def test_upstream_failure_exits_nonzero(self):
        with mock.patch("league_room.live_scores.build_live_scores", side_effect=UpstreamFetchError("down")), \
                mock.patch("builtins.print") as printed:
            exit_code = run_live_scores(parse_arguments(["--live-scores"]))

        self.assertEqual(exit_code, 1)
        self.assertEqual(json.loads(printed.call_args[0][0]), {"success": False, "error": "down"})


class RunServerTest(TestCase):
    def test_serves_app_built_from_arguments(self):
        args = parse_arguments(["--port", "9000", "--data-dir", "/tmp/room"])
        with mock.patch("league_room.room.api_server.create_app") as create_app, \
                mock.patch("uvicorn.run") as run:
            run_server(args)

        create_app.assert_called_once_with(data_dir=Path("/tmp/room"), static_dir=Path(config.STATIC_DIR))
        run.assert_called_once_with(create_app.return_value, host=config.API_HOST, port=9000, log_level="info")

    def test_importing_server_module_builds_no_app(self):
        from league_room.room import api_server

        self.assertFalse(hasattr(api_server, "app"))
