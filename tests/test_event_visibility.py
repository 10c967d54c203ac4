"""Tests for the event_visibility helpers."""

from gamenight.events.event_visibility import public_players, redact_player_fields


def make_state():
    return {
        "name": "High Roll",
        "players": [
            {"id": "p1", "ready": True, "score": 12, "rolls": [5, 7]},
            {"id": "p2", "ready": True, "score": 3, "rolls": [3]},
        ],
    }


class TestPublicPlayers:
    """Tests for public_players."""

    def test_viewer_keeps_own_fields(self):
        players = public_players(make_state()["players"], "p1", ["score"])
        assert players[0]["score"] == 12
        assert players[1]["score"] is None
        assert players[1]["rolls"] == [3]

    def test_input_not_modified(self):
        state = make_state()
        public_players(state["players"], "p1", ("score", "rolls"))
        assert state["players"][1]["score"] == 3

    def test_missing_field_not_added(self):
        players = public_players([{"id": "p2"}], "p1", ["score"])
        assert players == [{"id": "p2"}]

    def test_spectator_sees_nothing_private(self):
        players = public_players(make_state()["players"], "watcher", ["score"])
        assert [p["score"] for p in players] == [None, None]


class TestRedactPlayerFields:
    """Tests for redact_player_fields."""

    def test_redacts_other_players(self):
        view = redact_player_fields(make_state(), "p2", ("score", "rolls"))
        assert view["players"][0]["score"] is None
        assert view["players"][0]["rolls"] is None
        assert view["players"][1]["rolls"] == [3]
        assert view["name"] == "High Roll"

    def test_deep_copy(self):
        state = make_state()
        view = redact_player_fields(state, "p1", ("score",))
        view["players"][0]["rolls"].append(1)
        assert state["players"][0]["rolls"] == [5, 7]

    def test_no_players_key(self):
        assert redact_player_fields({"name": "x"}, "p1", ("score",)) == {"name": "x", "players": []}
