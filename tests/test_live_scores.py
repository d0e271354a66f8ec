from unittest import TestCase, mock

import requests

from espn_fixtures import KC_BUF_SUMMARY, make_event, make_summary, team_block
from league_room.errors import PerGameParseError, UpstreamFetchError
from league_room.espn_client import EspnClient
from league_room.live_scores import build_live_scores, filter_tracked_games


def _client(events, summaries):
    client = mock.Mock(spec=EspnClient)
    client.fetch_scoreboard.return_value = events

    def fetch_boxscore(event_id):
        result = summaries[event_id]
        if isinstance(result, Exception):
            raise result
        return result

    client.fetch_boxscore.side_effect = fetch_boxscore
    return client


class FilterTrackedGamesTest(TestCase):
    def test_keeps_games_with_a_tracked_team(self):
        events = [
            make_event("1", "KC", "BUF", "in", "Q3 5:12"),
            make_event("2", "NYJ", "NE", "in", "Q1 2:00"),
            make_event("3", "DET", "GB", "pre", "Sun 1:00 PM"),
        ]
        games = filter_tracked_games(events, ["kc", "DET"])
        self.assertEqual([g["id"] for g in games], ["1", "3"])


class BuildLiveScoresTest(TestCase):
    def test_scores_players_from_in_progress_games(self):
        client = _client([make_event("401", "KC", "BUF", "in", "Q4 2:00")], {"401": KC_BUF_SUMMARY})

        payload = build_live_scores(client, tracked_teams=["KC", "BUF"])

        self.assertTrue(payload["success"])
        self.assertEqual(payload["gamesCount"], 1)
        self.assertFalse(payload["allGamesFinal"])
        self.assertEqual(payload["games"], [{"name": "KC at BUF", "status": "Q4 2:00"}])

        mahomes = payload["players"]["Patrick Mahomes|KC"]
        # 320*0.04 + 2*4 - 1 + 3 bonus + 18*0.1 - 2 fumble lost
        self.assertEqual(mahomes["points"], 22.6)
        self.assertEqual(mahomes["stats"]["passing_yards"], 320)
        self.assertEqual(payload["players"]["Travis Kelce|KC"]["points"], 21.5)
        self.assertEqual(payload["players"]["James Cook|BUF"]["points"], 19.4)

    def test_untracked_team_players_are_left_out(self):
        client = _client([make_event("401", "KC", "BUF", "post", "Final")], {"401": KC_BUF_SUMMARY})

        payload = build_live_scores(client, tracked_teams=["KC"])

        self.assertNotIn("James Cook|BUF", payload["players"])
        self.assertTrue(payload["allGamesFinal"])

    def test_scheduled_games_are_listed_but_not_fetched(self):
        client = _client([make_event("500", "DET", "GB", "pre", "Sun 1:00 PM")], {})

        payload = build_live_scores(client, tracked_teams=["DET"])

        client.fetch_boxscore.assert_not_called()
        self.assertEqual(payload["players"], {})
        self.assertEqual(payload["gamesCount"], 1)
        self.assertFalse(payload["allGamesFinal"])

    def test_failing_game_is_omitted(self):
        events = [
            make_event("401", "KC", "BUF", "post", "Final"),
            make_event("402", "PHI", "DAL", "in", "Q2 8:00"),
        ]
        client = _client(events, {"401": KC_BUF_SUMMARY, "402": PerGameParseError("402", "fetch failed")})

        payload = build_live_scores(client, tracked_teams=["KC", "BUF", "PHI", "DAL"])

        self.assertTrue(payload["success"])
        self.assertEqual(payload["gamesCount"], 2)
        self.assertIn("Travis Kelce|KC", payload["players"])

    def test_no_tracked_games_is_not_all_final(self):
        payload = build_live_scores(_client([], {}), tracked_teams=["KC"])
        self.assertEqual(payload["gamesCount"], 0)
        self.assertFalse(payload["allGamesFinal"])

    def test_scoreboard_failure_propagates(self):
        client = mock.Mock(spec=EspnClient)
        client.fetch_scoreboard.side_effect = UpstreamFetchError("Failed to fetch scoreboard: boom")

        with self.assertRaises(UpstreamFetchError):
            build_live_scores(client, tracked_teams=["KC"])


class EspnClientTest(TestCase):
    def test_scoreboard_request_error_becomes_upstream_error(self):
        client = EspnClient()
        with mock.patch.object(client.session, "get", side_effect=requests.ConnectionError("down")):
            with self.assertRaises(UpstreamFetchError):
                client.fetch_scoreboard()

    def test_scoreboard_without_events_is_malformed(self):
        client = EspnClient()
        response = mock.Mock()
        response.json.return_value = {"leagues": []}
        with mock.patch.object(client.session, "get", return_value=response):
            with self.assertRaises(UpstreamFetchError):
                client.fetch_scoreboard()

    def test_boxscore_request_error_becomes_per_game_error(self):
        client = EspnClient()
        with mock.patch.object(client.session, "get", side_effect=requests.Timeout("slow")):
            with self.assertRaises(PerGameParseError):
                client.fetch_boxscore("401")

    def test_boxscore_passes_event_id(self):
        client = EspnClient(summary_url="https://example.com/summary")
        response = mock.Mock()
        response.json.return_value = KC_BUF_SUMMARY
        with mock.patch.object(client.session, "get", return_value=response) as get:
            self.assertEqual(client.fetch_boxscore("401"), KC_BUF_SUMMARY)
        get.assert_called_once_with("https://example.com/summary", params={"event": "401"}, timeout=client.timeout)


class MalformedBoxscoreTest(TestCase):
    def test_team_block_with_non_object_team_is_skipped(self):
        summary = make_summary([
            {**team_block("KC", {"receiving": [("Travis Kelce", ["5", "100", "20.0", "1", "41", "7"])]}), "team": "KC"},
            team_block("BUF", {"rushing": [("James Cook", ["18", "104", "5.8", "1", "22"])]}),
        ])
        client = _client([make_event("401", "KC", "BUF", "post", "Final")], {"401": summary})

        payload = build_live_scores(client, tracked_teams=["KC", "BUF"])

        self.assertEqual(list(payload["players"]), ["James Cook|BUF"])

    def test_athlete_without_string_name_is_skipped(self):
        summary = make_summary([
            team_block("KC", {
                "passing": [(None, ["24/35", "320", "9.1", "2", "1"])],
                "receiving": [("Travis Kelce", ["5", "100", "20.0", "1", "41", "7"])],
            }),
        ])
        client = _client([make_event("401", "KC", "BUF", "in", "Q2 1:00")], {"401": summary})

        payload = build_live_scores(client, tracked_teams=["KC"])

        self.assertEqual(list(payload["players"]), ["Travis Kelce|KC"])

    def test_unparseable_game_is_omitted(self):
        broken = make_summary([{"team": {"abbreviation": "PHI"}, "statistics": 5}])
        events = [
            make_event("401", "KC", "BUF", "post", "Final"),
            make_event("402", "PHI", "DAL", "in", "Q2 8:00"),
        ]
        client = _client(events, {"401": KC_BUF_SUMMARY, "402": broken})

        payload = build_live_scores(client, tracked_teams=["KC", "BUF", "PHI", "DAL"])

        self.assertEqual(payload["gamesCount"], 2)
        self.assertIn("Travis Kelce|KC", payload["players"])
