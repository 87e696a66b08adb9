"""Tests for collection reconciliation.

Invariants:
1. to_delete = stored ids - imported ids
2. to_insert = imported rows not already stored, in import order
3. Reconciliation is idempotent for the same inputs
4. Every valid imported id ends up stored after applying the plan
5. Malformed and duplicate rows are skipped, never fatal
"""

from boardvote.core.identity import DEFAULT_IMAGE_URL
from boardvote.models.domain import RawRow
from boardvote.sync.reconcile import pending_ids, reconcile


def row(objectid, objectname="Game", itemtype="boardgame", **kwargs) -> RawRow:
    return RawRow(objectid=objectid, objectname=objectname, itemtype=itemtype, **kwargs)


class TestScenarios:
    """Reference scenarios."""

    def test_first_import_inserts_everything(self):
        """Empty store: every row inserted, nothing deleted."""
        plan = reconcile("ABCDE", set(), [row("1", "Catan", "boardgame")])

        assert plan.to_delete == set()
        assert len(plan.to_insert) == 1
        game = plan.to_insert[0]
        assert game.objectid == "1"
        assert game.objectname == "Catan"
        assert not game.is_expansion
        assert game.collection_code == "ABCDE"

    def test_removed_game_is_deleted(self):
        """Stored game missing from the import is deleted."""
        plan = reconcile("ABCDE", {"1", "2"}, [row("1", "Catan")])

        assert plan.to_delete == {"2"}
        assert plan.to_insert == []

    def test_survivors_untouched(self):
        """Rows already stored are neither inserted nor deleted."""
        plan = reconcile("ABCDE", {"1"}, [row("1", "Catan (new name)"), row("2", "Azul")])

        assert plan.insert_ids == ["2"]
        assert plan.to_delete == set()

    def test_noop_when_up_to_date(self):
        plan = reconcile("ABCDE", {"1", "2"}, [row("2"), row("1")])

        assert plan.is_noop

    def test_not_noop_with_changes(self):
        assert not reconcile("ABCDE", set(), [row("1")]).is_noop
        assert not reconcile("ABCDE", {"1"}, []).is_noop


class TestProperties:
    """Idempotence and coverage."""

    def test_idempotent(self):
        """Same inputs produce the same plan."""
        existing = {"1", "3", "9"}
        rows = [row("1"), row("2"), row("4"), row("3")]

        first = reconcile("ABCDE", existing, rows)
        second = reconcile("ABCDE", existing, rows)

        assert first.insert_ids == second.insert_ids
        assert first.to_delete == second.to_delete
        assert first.to_insert == second.to_insert

    def test_coverage(self):
        """Every imported id is inserted or already stored."""
        existing = {"1", "7"}
        rows = [row("1"), row("2"), row("3")]

        plan = reconcile("ABCDE", existing, rows)

        for r in rows:
            assert r.objectid in set(plan.insert_ids) | existing

    def test_insert_order_follows_import(self):
        plan = reconcile("ABCDE", set(), [row("30"), row("10"), row("20")])

        assert plan.insert_ids == ["30", "10", "20"]

    def test_applying_plan_twice_is_noop(self):
        """After applying a plan, reconciling again changes nothing."""
        existing = {"1", "2"}
        rows = [row("2"), row("3")]

        plan = reconcile("ABCDE", existing, rows)
        applied = (existing - plan.to_delete) | set(plan.insert_ids)

        assert reconcile("ABCDE", applied, rows).is_noop

    def test_ids_compared_as_stripped_strings(self):
        plan = reconcile("ABCDE", {"13"}, [row(" 13 ")])

        assert plan.is_noop


class TestDerivedFields:
    """Slug, link, type and image derivation."""

    def test_slug_prefers_original_name(self):
        plan = reconcile(
            "ABCDE", set(), [row("822", "Carcassonne (ES)", originalname="Carcassonne")]
        )

        game = plan.to_insert[0]
        assert game.slug == "carcassonne"
        assert game.link == "https://boardgamegeek.com/boardgame/822/carcassonne"

    def test_slug_falls_back_to_objectname(self):
        plan = reconcile("ABCDE", set(), [row("14996", "Ticket to Ride: Europe")])

        assert plan.to_insert[0].slug == "ticket-to-ride-europe"

    def test_expansion_link(self):
        plan = reconcile(
            "ABCDE", set(), [row("325", "Catan: Seafarers", "expansion for base-game")]
        )

        game = plan.to_insert[0]
        assert game.is_expansion
        assert game.itemtype == "expansion for base-game"
        assert game.link == "https://boardgamegeek.com/boardgameexpansion/325/catan-seafarers"

    def test_custom_catalog_host(self):
        plan = reconcile("ABCDE", set(), [row("13", "Catan")], catalog_host="catalog.test")

        assert plan.to_insert[0].link == "https://catalog.test/boardgame/13/catan"

    def test_image_urls_used_when_resolved(self):
        plan = reconcile(
            "ABCDE",
            set(),
            [row("13", "Catan"), row("822", "Carcassonne")],
            image_urls={"13": "https://img.test/13.jpg"},
        )

        images = {g.objectid: g.image_url for g in plan.to_insert}
        assert images["13"] == "https://img.test/13.jpg"
        assert images["822"] == DEFAULT_IMAGE_URL

    def test_comment_and_original_name_carried(self):
        plan = reconcile(
            "ABCDE", set(), [row("13", "Catan", originalname="  ", comment="Family classic")]
        )

        game = plan.to_insert[0]
        assert game.originalname is None
        assert game.comment == "Family classic"


class TestMalformedRows:
    """Skip-with-warning policy for bad rows."""

    def test_missing_objectid_skipped(self):
        plan = reconcile("ABCDE", set(), [row(None, "Ghost"), row("1", "Catan")])

        assert plan.insert_ids == ["1"]
        assert len(plan.skipped) == 1
        assert plan.skipped[0].position == 0
        assert plan.skipped[0].reason == "missing objectid"

    def test_missing_objectname_skipped(self):
        plan = reconcile("ABCDE", set(), [row("5", "  ")])

        assert plan.to_insert == []
        assert plan.skipped[0].objectid == "5"
        assert plan.skipped[0].reason == "missing objectname"

    def test_malformed_row_keeps_stored_game(self):
        """A stored game whose row lacks a name is kept, not deleted."""
        plan = reconcile("ABCDE", {"5"}, [row("5", "  ")])

        assert plan.to_delete == set()
        assert plan.to_insert == []
        assert plan.skipped[0].reason == "missing objectname"

    def test_duplicate_row_keeps_stored_game(self):
        plan = reconcile("ABCDE", {"5", "6"}, [row("6"), row(" 5 ", None), row("6")])

        assert plan.to_delete == set()
        assert plan.is_noop

    def test_row_without_objectid_protects_nothing(self):
        plan = reconcile("ABCDE", {"5"}, [row(None, "Catan")])

        assert plan.to_delete == {"5"}

    def test_duplicate_objectid_first_wins(self):
        plan = reconcile("ABCDE", set(), [row("1", "First"), row("1", "Second")])

        assert [g.objectname for g in plan.to_insert] == ["First"]
        assert plan.skipped[0].reason == "duplicate objectid"
        assert plan.skipped[0].position == 1

    def test_skipped_rows_logged(self, caplog):
        with caplog.at_level("WARNING"):
            reconcile("ABCDE", set(), [row("", "Nameless")])

        assert "missing objectid" in caplog.text


class TestPendingIds:
    """Ids a plan would insert, for image prefetch."""

    def test_matches_plan_inserts(self):
        existing = {"1"}
        rows = [row("1"), row("2"), row(None), row("3"), row("2")]

        assert pending_ids(existing, rows) == reconcile("ABCDE", existing, rows).insert_ids

    def test_does_not_log(self, caplog):
        with caplog.at_level("WARNING"):
            pending_ids(set(), [row(None)])

        assert caplog.text == ""
