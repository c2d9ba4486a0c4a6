"""Tests for API routes."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from trickmatch.api.routes import add_exception_handlers, router
from trickmatch.api.websocket import websocket_manager
from trickmatch.repositories.memory_repository import MemoryMatchRepository
from trickmatch.services.match_service import MatchService

RING = ("A", "C", "B", "D")


@pytest.fixture
def test_app():
    """Create a test FastAPI app without lifespan dependencies."""
    app = FastAPI()
    app.include_router(router)
    add_exception_handlers(app)
    app.state.match_service = MatchService(MemoryMatchRepository(), notifiers=[websocket_manager])
    websocket_manager.set_match_service(app.state.match_service)
    return app


@pytest.fixture
def client(test_app):
    """Create a test client."""
    websocket_manager.subscriptions.clear()
    with TestClient(test_app, raise_server_exceptions=False) as client:
        yield client
    websocket_manager.set_match_service(None)


@pytest.fixture
def match_id(client):
    """Id of a match with team1={A,B} and team2={C,D}."""
    response = client.post(
        "/v1/match/create",
        json={
            "team1": {"player1": "A", "player2": "B"},
            "team2": {"player1": "C", "player2": "D"},
        },
    )
    assert response.status_code == 200
    return response.json()["match_id"]


def play(client, match_id, player, value, suit="hearts"):
    """Submit a play through the JSON endpoint."""
    return client.post(
        f"/v1/match/{match_id}/plays",
        json={"player_id": player, "card": {"value": value, "suit": suit}},
    )


def play_round(client, match_id, values):
    """Submit one card per seat in ring order."""
    for player, value in zip(RING, values, strict=True):
        assert play(client, match_id, player, value).status_code == 200


class TestCreateMatch:
    """Tests for POST /v1/match/create."""

    def test_create_match(self, client):
        """A new match opens with team1.player1 to play."""
        response = client.post(
            "/v1/match/create",
            json={
                "team1": {"player1": "ann", "player2": "bob"},
                "team2": {"player1": "cat", "player2": "dan"},
            },
        )
        assert response.status_code == 200

        data = response.json()
        assert data["match_id"]
        assert data["team1"] == {"player1": "ann", "player2": "bob"}
        assert data["summary"]["current_turn"] == "ann"
        assert data["summary"]["current_round"] == "round1"
        assert data["summary"]["is_complete"] is False
        assert data["rounds"] == {"round1": [], "round2": [], "round3": []}

    def test_duplicate_player(self, client):
        """A roster with a repeated identity is rejected."""
        response = client.post(
            "/v1/match/create",
            json={
                "team1": {"player1": "A", "player2": "B"},
                "team2": {"player1": "B", "player2": "D"},
            },
        )
        assert response.status_code == 400
        assert response.json()["error"] == "error.invalidRoster"

    def test_missing_team(self, client):
        """Request bodies are schema-checked."""
        response = client.post("/v1/match/create", json={"team1": {"player1": "A"}})
        assert response.status_code == 422


class TestGetMatch:
    """Tests for GET /v1/match/{match_id}."""

    def test_get_match(self, client, match_id):
        """The stored state is returned."""
        response = client.get(f"/v1/match/{match_id}")
        assert response.status_code == 200
        assert response.json()["match_id"] == match_id

    def test_unknown_match(self, client):
        """Unknown ids are 404."""
        response = client.get("/v1/match/nope")
        assert response.status_code == 404
        assert response.json()["error"] == "error.matchNotFound"


class TestSubmitPlay:
    """Tests for POST /v1/match/{match_id}/plays."""

    def test_first_play(self, client, match_id):
        """The play is recorded and the turn moves on."""
        response = play(client, match_id, "A", 10, "spades")
        assert response.status_code == 200

        data = response.json()
        assert data["summary"]["current_turn"] == "C"
        recorded = data["rounds"]["round1"][0]
        assert recorded["player_id"] == "A"
        assert recorded["card"] == {"value": 10, "suit": "spades"}
        assert isinstance(recorded["timestamp"], int)

    def test_round_resolution(self, client, match_id):
        """Scenario A over HTTP."""
        play(client, match_id, "A", 10, "spades")
        play(client, match_id, "C", 3, "hearts")
        play(client, match_id, "B", 7, "diamonds")
        response = play(client, match_id, "D", 2, "clubs")

        summary = response.json()["summary"]
        assert summary["round_winners"]["round1"] == "team1"
        assert summary["current_round"] == "round2"
        assert summary["current_turn"] == "A"

    def test_not_your_turn(self, client, match_id):
        """Out-of-turn plays are 409 and change nothing."""
        response = play(client, match_id, "B", 5)
        assert response.status_code == 409
        assert response.json() == {"error": "error.notYourTurn", "detail": "not your turn"}

        state = client.get(f"/v1/match/{match_id}").json()
        assert state["summary"]["current_turn"] == "A"
        assert state["rounds"]["round1"] == []

    @pytest.mark.parametrize(
        "card",
        [
            {"value": 14, "suit": "hearts"},
            {"value": 0, "suit": "hearts"},
            {"value": 5, "suit": "stars"},
            {"value": "ten", "suit": "hearts"},
            {"suit": "hearts"},
        ],
    )
    def test_invalid_card(self, client, match_id, card):
        """Bad cards are 400."""
        response = client.post(
            f"/v1/match/{match_id}/plays", json={"player_id": "A", "card": card}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "error.invalidCard"

    def test_unknown_match(self, client):
        """Playing into an unknown match is 404, even with a bad card."""
        response = play(client, "nope", "A", 99)
        assert response.status_code == 404

    def test_completed_match(self, client, match_id):
        """Scenario B: after a sweep every play is 409."""
        play_round(client, match_id, [12, 5, 3, 4])
        play_round(client, match_id, [2, 5, 12, 4])

        state = client.get(f"/v1/match/{match_id}").json()
        assert state["summary"]["game_winner"] == "team1"
        assert state["summary"]["is_complete"] is True
        assert state["summary"]["current_turn"] is None

        response = play(client, match_id, "A", 13)
        assert response.status_code == 409
        assert response.json()["error"] == "error.matchComplete"


class TestPathPlay:
    """Tests for GET /v1/{match_id}/{user_id}/{card_value}/{suit}."""

    def test_path_play(self, client, match_id):
        """The path form commits like the JSON form."""
        response = client.get(f"/v1/{match_id}/A/12/diamonds")
        assert response.status_code == 200
        data = response.json()
        assert data["rounds"]["round1"][0]["card"] == {"value": 12, "suit": "diamonds"}
        assert data["summary"]["current_turn"] == "C"

    def test_path_invalid_value(self, client, match_id):
        """Non-numeric values are a card error, not a routing error."""
        response = client.get(f"/v1/{match_id}/A/queen/hearts")
        assert response.status_code == 400

    @pytest.mark.parametrize("value", ["1_0", "+5", "%2010"])
    def test_path_value_must_be_plain_digits(self, client, match_id, value):
        """Digit separators, signs and spaces are not card values."""
        response = client.get(f"/v1/{match_id}/A/{value}/hearts")
        assert response.status_code == 400
        assert client.get(f"/v1/match/{match_id}").json()["rounds"]["round1"] == []

    def test_path_unknown_match(self, client):
        """Unknown ids are 404."""
        assert client.get("/v1/nope/A/5/hearts").status_code == 404


class TestListings:
    """Tests for the read-only listings."""

    def test_get_plays(self, client, match_id):
        """Plays come back grouped per round."""
        play_round(client, match_id, [1, 2, 3, 4])
        play(client, match_id, "A", 9)

        data = client.get(f"/v1/match/{match_id}/plays").json()
        assert data["match_id"] == match_id
        assert [p["player_id"] for p in data["plays"]["round1"]] == list(RING)
        assert len(data["plays"]["round2"]) == 1
        assert data["plays"]["round3"] == []

    def test_get_plays_unknown_match(self, client):
        """Unknown ids are 404."""
        assert client.get("/v1/match/nope/plays").status_code == 404

    def test_active_matches(self, client, match_id):
        """In-progress matches are listed."""
        data = client.get("/v1/matches/active").json()
        assert data["count"] == 1
        assert data["matches"][0]["match_id"] == match_id

    def test_active_matches_excludes_completed(self, client, match_id):
        """Completed matches are not listed."""
        play_round(client, match_id, [12, 5, 3, 4])
        play_round(client, match_id, [12, 5, 3, 4])
        assert client.get("/v1/matches/active").json()["count"] == 0

    def test_active_matches_limit_validation(self, client):
        """The limit must be positive."""
        assert client.get("/v1/matches/active?limit=0").status_code == 422


class TestSubscribe:
    """Tests for the WebSocket subscription."""

    def test_receives_state_then_updates(self, client, match_id):
        """Subscribers get the state on connect and each commit afterwards."""
        with client.websocket_connect(f"/v1/match/{match_id}/subscribe?subscriber_id=s1") as ws:
            first = ws.receive_json()
            assert first["command"] == "MATCH_STATE"
            assert first["match_id"] == match_id
            assert first["content"]["summary"]["current_turn"] == "A"

            assert play(client, match_id, "A", 10).status_code == 200

            update = ws.receive_json()
            assert update["command"] == "MATCH_UPDATED"
            assert update["content"]["summary"]["current_turn"] == "C"

    def test_rejections_are_not_pushed(self, client, match_id):
        """Only committed plays are pushed."""
        with client.websocket_connect(f"/v1/match/{match_id}/subscribe?subscriber_id=s1") as ws:
            ws.receive_json()
            assert play(client, match_id, "B", 10).status_code == 409
            assert play(client, match_id, "A", 10).status_code == 200

            update = ws.receive_json()
            assert update["content"]["rounds"]["round1"][0]["player_id"] == "A"

    def test_ping_and_sync(self, client, match_id):
        """Subscribers may ping and ask for a fresh state."""
        with client.websocket_connect(f"/v1/match/{match_id}/subscribe") as ws:
            ws.receive_json()
            ws.send_json({"command": "PING"})
            assert ws.receive_json() == {"command": "PONG"}
            ws.send_json({"command": "SYNC_STATE"})
            assert ws.receive_json()["command"] == "MATCH_STATE"

    def test_unknown_match_reports_error(self, client):
        """Subscribing to an unknown match reports the error."""
        with client.websocket_connect("/v1/match/nope/subscribe") as ws:
            message = ws.receive_json()
            assert message["command"] == "REPORT_ERROR"
            assert message["content"]["code"] == "error.matchNotFound"
