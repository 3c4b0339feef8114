# pyright: reportPrivateUsage=false

"""Tests for the RecordStore."""

from helpers.catalog import make_item
from pydantic import ValidationError
import pytest

from mediafeed.record_store import RecordStore


@pytest.fixture
def store() -> RecordStore:
    """Store holding three items; "c" is the newest insert."""
    store = RecordStore()
    for item_id in ("a", "b", "c"):
        store.upsert(make_item(item_id))
    return store


@pytest.mark.unit
def test_upsert_prepends_new_items(store: RecordStore):
    """New items go to the front of the store order."""
    assert [i.id for i in store.get()] == ["c", "b", "a"]


@pytest.mark.unit
def test_repeated_upsert_keeps_one_record(store: RecordStore):
    """Upserting the same id again leaves exactly one record."""
    assert store.upsert(make_item("a")) is False
    assert store.upsert(make_item("a")) is False

    ids = [i.id for i in store.get()]
    assert ids.count("a") == 1
    assert len(store) == 3


@pytest.mark.unit
def test_upsert_existing_keeps_local_fields():
    """An upsert for a present id never overwrites like or comment counts."""
    store = RecordStore()
    store.upsert(make_item("a", like_count=4, is_liked=True, comment_count=2))

    store.upsert(make_item("a", like_count=0, is_liked=False, comment_count=0))

    item = store.get_item("a")
    assert item is not None
    assert (item.like_count, item.is_liked, item.comment_count) == (4, True, 2)


@pytest.mark.unit
def test_patch_views_only_touches_views():
    """Patching views leaves like count, comment count and liked flag alone."""
    store = RecordStore([make_item("a", views=5, like_count=3, comment_count=7)])

    patched = store.patch("a", {"views": 42})

    assert patched is not None
    assert patched.views == 42
    assert (patched.like_count, patched.comment_count, patched.is_liked) == (
        3,
        7,
        False,
    )


@pytest.mark.unit
def test_patch_unknown_id_is_noop(store: RecordStore):
    assert store.patch("missing", {"views": 1}) is None
    assert "missing" not in store


@pytest.mark.unit
def test_patch_rejects_negative_count_and_keeps_item():
    store = RecordStore([make_item("a", views=5)])

    with pytest.raises(ValidationError):
        store.patch("a", {"views": -1})

    item = store.get_item("a")
    assert item is not None
    assert item.views == 5


@pytest.mark.unit
def test_patch_rejects_unknown_field():
    store = RecordStore([make_item("a")])

    with pytest.raises(ValueError, match="Unknown catalog item fields"):
        store.patch("a", {"rating": 5})


@pytest.mark.unit
def test_patch_keeps_store_order(store: RecordStore):
    store.patch("a", {"views": 10})
    assert [i.id for i in store.get()] == ["c", "b", "a"]


@pytest.mark.unit
def test_remove(store: RecordStore):
    assert store.remove("b") is True
    assert store.remove("b") is False
    assert [i.id for i in store.get()] == ["c", "a"]


@pytest.mark.unit
def test_replace_all_keeps_order_and_first_duplicate():
    store = RecordStore([make_item("old")])

    store.replace_all(
        [make_item("x", views=1), make_item("y"), make_item("x", views=99)]
    )

    assert [i.id for i in store.get()] == ["x", "y"]
    first = store.get_item("x")
    assert first is not None
    assert first.views == 1
    assert "old" not in store


@pytest.mark.unit
def test_get_returns_snapshot(store: RecordStore):
    """Later mutations do not change an earlier snapshot."""
    snapshot = store.get()
    store.upsert(make_item("d"))
    store.remove("a")

    assert [i.id for i in snapshot] == ["c", "b", "a"]


@pytest.mark.unit
def test_total_views():
    store = RecordStore([make_item("a", views=3), make_item("b", views=4)])
    assert store.total_views() == 7
