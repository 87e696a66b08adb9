"""Tests for votes API endpoints."""

import pytest

from boardvote.api.routes.votes import choice_to_value, value_to_choice
from boardvote.models.domain import VoteValue

EXPORT = "objectid,objectname,itemtype\n13,Catan,standalone\n822,Carcassonne,standalone\n"


@pytest.fixture
def code(client):
    response = client.post("/api/collections/import", json={"owner": "alice", "csv_text": EXPORT})
    return response.json()["collection_code"]


class TestChoiceMapping:
    """API choices map onto vote values."""

    def test_round_trip(self):
        for choice in ("like", "neutral", "dislike", "not_played"):
            assert value_to_choice(choice_to_value(choice)) == choice

    def test_none_is_no_opinion(self):
        assert choice_to_value(None) is VoteValue.NO_OPINION
        assert value_to_choice(VoteValue.NO_OPINION) is None


class TestPutVote:
    """Tests for PUT .../votes/{username}."""

    def test_cast_vote(self, client, code):
        response = client.put(f"/api/collections/{code}/games/13/votes/bob", json={"vote": "like"})

        assert response.status_code == 200
        assert response.json() == {
            "collection_code": code,
            "objectid": "13",
            "username": "bob",
            "vote": "like",
            "favorite": False,
        }

    def test_change_vote(self, client, code):
        url = f"/api/collections/{code}/games/13/votes/bob"
        client.put(url, json={"vote": "like"})

        response = client.put(url, json={"vote": "not_played"})

        assert response.json()["vote"] == "not_played"

    def test_clear_vote(self, client, code):
        url = f"/api/collections/{code}/games/13/votes/bob"
        client.put(url, json={"vote": "like"})

        response = client.put(url, json={"vote": None})

        assert response.status_code == 200
        assert response.json()["vote"] is None

    def test_invalid_choice_returns_422(self, client, code):
        response = client.put(
            f"/api/collections/{code}/games/13/votes/bob", json={"vote": "love"}
        )

        assert response.status_code == 422

    def test_unknown_game_returns_404(self, client, code):
        response = client.put(
            f"/api/collections/{code}/games/999/votes/bob", json={"vote": "like"}
        )

        assert response.status_code == 404

    def test_unknown_collection_returns_404(self, client):
        response = client.put("/api/collections/ZZZZZ/games/13/votes/bob", json={"vote": "like"})

        assert response.status_code == 404

    def test_blank_username_returns_422(self, client, code):
        response = client.put(
            f"/api/collections/{code}/games/13/votes/%20", json={"vote": "like"}
        )

        assert response.status_code == 422


class TestPutFavorite:
    """Tests for PUT .../votes/{username}/favorite."""

    def test_star_keeps_vote(self, client, code):
        base = f"/api/collections/{code}/games/13/votes/bob"
        client.put(base, json={"vote": "dislike"})

        response = client.put(f"{base}/favorite", json={"favorite": True})

        assert response.status_code == 200
        data = response.json()
        assert data["favorite"] is True
        assert data["vote"] == "dislike"

    def test_vote_keeps_star(self, client, code):
        base = f"/api/collections/{code}/games/13/votes/bob"
        client.put(f"{base}/favorite", json={"favorite": True})

        response = client.put(base, json={"vote": "neutral"})

        assert response.json()["favorite"] is True

    def test_star_without_vote(self, client, code):
        response = client.put(
            f"/api/collections/{code}/games/822/votes/carol/favorite", json={"favorite": True}
        )

        assert response.json()["vote"] is None
        assert response.json()["favorite"] is True

    def test_unknown_game_returns_404(self, client, code):
        response = client.put(
            f"/api/collections/{code}/games/999/votes/bob/favorite", json={"favorite": True}
        )

        assert response.status_code == 404
