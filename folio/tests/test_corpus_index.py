"""Tests for the in-memory corpus index."""

import threading
from dataclasses import replace
from datetime import date

import pytest

from folio.domain.document import Document
from folio.errors import IndexIntegrityError
from folio.storage.corpus_index import CorpusIndex


def _doc(doc_id, published, categories=(), title=None, checksum="x"):
    return Document(
        id=doc_id,
        path=f"{doc_id}.md",
        title=title or doc_id.title(),
        published_at=date.fromisoformat(published),
        source_checksum=checksum,
        categories=tuple(categories),
    )


@pytest.fixture
def index():
    return CorpusIndex()


class TestTimeline:
    """Test chronological ordering."""

    def test_newest_first(self, index):
        index.upsert(_doc("a", "2015-02-18"))
        index.upsert(_doc("b", "2014-12-26"))
        index.upsert(_doc("c", "2015-02-01"))

        assert index.timeline() == ("a", "c", "b")

    def test_ties_broken_by_ascending_id(self, index):
        for doc_id in ["zeta", "alpha", "mid"]:
            index.upsert(_doc(doc_id, "2015-01-01"))
        index.upsert(_doc("newer", "2015-01-02"))

        assert index.timeline() == ("newer", "alpha", "mid", "zeta")

    def test_replacement_moves_entry(self, index):
        index.upsert(_doc("a", "2015-01-01"))
        index.upsert(_doc("b", "2015-01-02"))

        index.upsert(_doc("a", "2015-01-03", checksum="y"))

        assert index.timeline() == ("a", "b")
        assert len(index) == 2

    def test_no_duplicate_ids(self, index):
        for checksum in ["1", "2", "3"]:
            index.upsert(_doc("a", "2015-01-01", checksum=checksum))

        assert index.timeline() == ("a",)
        assert index.get("a").source_checksum == "3"


class TestCategories:
    """Test category membership."""

    def test_membership_is_case_insensitive(self, index):
        index.upsert(_doc("a", "2015-01-01", categories=["Go"]))

        assert index.by_category("go") == ("a",)
        assert index.by_category("GO") == ("a",)
        assert index.categories() == {"go": "Go"}

    def test_category_change_moves_document(self, index):
        index.upsert(_doc("a", "2015-01-01", categories=["go"], checksum="1"))

        index.upsert(_doc("a", "2015-01-01", categories=["python"], checksum="2"))

        assert index.by_category("go") == ()
        assert index.by_category("python") == ("a",)
        assert "go" not in index.categories()

    def test_shared_category_reordered_on_date_change(self, index):
        index.upsert(_doc("a", "2015-01-01", categories=["go"]))
        index.upsert(_doc("b", "2015-01-02", categories=["go"]))

        index.upsert(_doc("a", "2015-01-03", categories=["go", "perf"], checksum="2"))

        assert index.by_category("go") == ("a", "b")
        assert index.by_category("perf") == ("a",)

    def test_unknown_category_is_empty(self, index):
        assert index.by_category("nothing") == ()

    def test_membership_matches_documents(self, index):
        docs = [
            _doc("a", "2015-01-01", categories=["go", "perf"]),
            _doc("b", "2015-01-05", categories=["Python"]),
            _doc("c", "2015-01-03", categories=["GO"]),
            _doc("d", "2015-01-04"),
        ]
        for doc in docs:
            index.upsert(doc)

        snapshot = index.snapshot()
        for key in snapshot.categories:
            members = {doc.id for doc in docs if key in doc.category_keys}
            assert set(snapshot.categories[key]) == members
        assert snapshot.by_category("go") == ("c", "a")


class TestRemove:
    """Test removal."""

    def test_remove_prunes_every_index(self, index):
        index.upsert(_doc("a", "2015-01-01", categories=["go"]))
        index.upsert(_doc("b", "2015-01-02", categories=["go"]))

        assert index.remove("a") is True

        assert "a" not in index
        assert index.timeline() == ("b",)
        assert index.by_category("go") == ("b",)

    def test_remove_is_idempotent(self, index):
        index.upsert(_doc("a", "2015-01-01", categories=["go"]))

        assert index.remove("a") is True
        assert index.remove("a") is False
        assert index.remove("never-there") is False
        assert index.categories() == {}


class TestSnapshots:
    """Test that views are immutable snapshots."""

    def test_views_do_not_change_after_mutation(self, index):
        index.upsert(_doc("a", "2015-01-01", categories=["go"]))
        timeline = index.timeline()
        go = index.by_category("go")
        snapshot = index.snapshot()

        index.upsert(_doc("b", "2015-01-02", categories=["go"]))
        index.remove("a")

        assert timeline == ("a",)
        assert go == ("a",)
        assert snapshot.timeline == ("a",)
        assert list(snapshot.documents) == ["a"]

    def test_snapshot_is_read_only(self, index):
        index.upsert(_doc("a", "2015-01-01"))
        snapshot = index.snapshot()

        with pytest.raises(TypeError):
            snapshot.documents["b"] = _doc("b", "2015-01-01")

    def test_snapshot_reused_until_mutation(self, index):
        index.upsert(_doc("a", "2015-01-01"))

        first = index.snapshot()
        assert index.snapshot() is first

        index.upsert(_doc("b", "2015-01-01"))
        assert index.snapshot() is not first

    def test_snapshot_documents_cannot_be_edited(self, index):
        index.upsert(replace(_doc("a", "2015-01-01"), extra={"tags": ["go"]}))
        document = index.snapshot().documents["a"]

        with pytest.raises(TypeError):
            document.extra["tags"] = ["python"]
        with pytest.raises(AttributeError):
            document.extra["tags"].append("python")

        assert index.get("a").extra == {"tags": ("go",)}

    def test_iter_timeline_yields_documents(self, index):
        index.upsert(_doc("a", "2015-01-01"))
        index.upsert(_doc("b", "2015-02-01"))

        assert [doc.id for doc in index.snapshot().iter_timeline()] == ["b", "a"]


class TestIntegrity:
    """Test contract violations."""

    def test_equal_upsert_is_a_no_op(self, index):
        doc = _doc("a", "2015-01-01")

        assert index.upsert(doc) is True
        snapshot = index.snapshot()
        assert index.upsert(replace(doc)) is False
        assert index.snapshot() is snapshot

    def test_path_change_for_existing_id(self, index):
        index.upsert(_doc("a", "2015-01-01", categories=["go"]))

        with pytest.raises(IndexIntegrityError):
            index.upsert(replace(_doc("a", "2016-01-01"), path="other/a.md"))

        assert index.get("a").published_at == date(2015, 1, 1)
        assert index.by_category("go") == ("a",)

    @pytest.mark.parametrize(
        "changes",
        [{"id": ""}, {"title": "  "}, {"published_at": "2015-01-01"}, {"categories": ("",)}],
    )
    def test_invalid_document(self, index, changes):
        with pytest.raises(IndexIntegrityError):
            index.upsert(replace(_doc("a", "2015-01-01"), **changes))

        assert len(index) == 0

    def test_clear(self, index):
        index.upsert(_doc("a", "2015-01-01", categories=["go"]))

        index.clear()

        assert index.timeline() == ()
        assert index.categories() == {}


def test_concurrent_upserts_keep_orderings_consistent(index):
    days = [f"2015-01-{day:02d}" for day in range(1, 29)]

    def worker(offset):
        for position, day in enumerate(days):
            doc_id = f"w{offset}-{position:02d}"
            index.upsert(_doc(doc_id, day, categories=["all", f"w{offset}"]))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    snapshot = index.snapshot()
    assert len(snapshot.timeline) == 4 * len(days)
    assert snapshot.by_category("all") == snapshot.timeline
    keys = [
        (-snapshot.documents[doc_id].published_at.toordinal(), doc_id)
        for doc_id in snapshot.timeline
    ]
    assert keys == sorted(keys)
