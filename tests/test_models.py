"""Tests for domain and API models."""

import pytest
from pydantic import ValidationError

from boardvote.models.domain import GameEntity, GameView, VoteValue
from boardvote.models.types import FavoriteSubmission, ImportRequest, VoteSubmission


class TestVoteValue:
    """Tests for stored vote mapping."""

    def test_stored_values(self):
        assert VoteValue.LIKE.to_stored() == 1
        assert VoteValue.NEUTRAL.to_stored() == 0
        assert VoteValue.DISLIKE.to_stored() == -1
        assert VoteValue.NOT_PLAYED.to_stored() == -2
        assert VoteValue.NO_OPINION.to_stored() is None

    def test_from_stored(self):
        for value in VoteValue:
            assert VoteValue.from_stored(value.to_stored()) is value

    def test_null_is_no_opinion(self):
        assert VoteValue.from_stored(None) is VoteValue.NO_OPINION

    def test_neutral_distinct_from_no_opinion(self):
        assert VoteValue.from_stored(0) is VoteValue.NEUTRAL

    def test_unknown_stored_value(self):
        assert VoteValue.from_stored(7) is VoteValue.NO_OPINION


class TestGameEntity:
    """Tests for GameEntity."""

    def make(self, itemtype):
        return GameEntity(
            collection_code="ABCDE",
            objectid="1",
            objectname="Game",
            itemtype=itemtype,
            slug="game",
            link="https://boardgamegeek.com/boardgame/1/game",
            image_url="x",
        )

    def test_is_expansion(self):
        assert self.make("expansion for base-game").is_expansion
        assert not self.make("standalone").is_expansion
        assert not self.make("").is_expansion

    def test_total_opinions(self):
        view = GameView(game=self.make(""), likes=2, dislikes=1, neutrals=1, not_played=3)

        assert view.total_opinions == 7


class TestRequestModels:
    """Tests for API request validation."""

    def test_import_request(self):
        request = ImportRequest(owner="alice", csv_text="objectid,objectname\n")

        assert request.owner == "alice"

    def test_import_request_requires_owner(self):
        with pytest.raises(ValidationError):
            ImportRequest(owner="", csv_text="")

    def test_vote_submission_choices(self):
        assert VoteSubmission(vote="not_played").vote == "not_played"
        assert VoteSubmission(vote=None).vote is None

        with pytest.raises(ValidationError):
            VoteSubmission(vote="meh")

    def test_favorite_submission(self):
        assert FavoriteSubmission(favorite=True).favorite is True
