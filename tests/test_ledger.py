"""
Unit tests for the ledger store: CRUD, status changes and selection.
"""
import itertools

import pytest

from wifibill.errors import InvalidAmount, InvalidCoordinates, InvalidName, InvalidStatus, LedgerError, NotFound
from wifibill.schemas.bills import BillStatus
from wifibill.services.ledger import LedgerStore


def _seed(ledger, n=3, amount=100000):
    return [ledger.add({"name": f"Customer {i+1}", "amount": amount}) for i in range(n)]


# ---------- add / read ----------

def test_add_then_read_returns_the_record(ledger):
    rec = ledger.add({"name": "Budi", "amount": 50000, "phone_number": "0812"})

    assert ledger.records() == (rec,)
    assert ledger.get(rec.id) == rec
    assert rec.id in ledger
    assert len(ledger) == 1


def test_ids_are_unique(ledger):
    recs = _seed(ledger, 20)
    assert len({r.id for r in recs}) == 20


def test_ids_of_deleted_records_are_not_reused():
    ids = itertools.cycle(["a", "b"])
    ledger = LedgerStore(id_factory=lambda: next(ids))
    first = ledger.add({"name": "One", "amount": 1})
    ledger.remove(first.id)

    second = ledger.add({"name": "Two", "amount": 2})
    assert second.id == "b"
    with pytest.raises(LedgerError):
        ledger.add({"name": "Three", "amount": 3})


def test_failed_add_leaves_store_unchanged(ledger):
    _seed(ledger, 1)
    before = ledger.records()
    with pytest.raises(InvalidAmount):
        ledger.add({"name": "A", "amount": -1})
    with pytest.raises(InvalidName):
        ledger.add({"name": " ", "amount": 1})
    assert ledger.records() == before


def test_add_ignores_caller_supplied_id_and_created_at(ledger):
    rec = ledger.add({"name": "A", "amount": 1, "id": "mine", "created_at": "2000-01-01"})
    assert rec.id != "mine"
    assert rec.created_at.year != 2000


def test_insertion_order_is_kept(ledger):
    recs = _seed(ledger, 3)
    ledger.update(recs[0].id, {"name": "First again"})
    assert [r.id for r in ledger.records()] == [r.id for r in recs]


def test_search_is_case_insensitive(ledger):
    ledger.add({"name": "Budi Santoso", "amount": 1})
    ledger.add({"name": "Sari", "amount": 1})
    assert [r.name for r in ledger.search("budi")] == ["Budi Santoso"]
    assert len(ledger.search("")) == 2


# ---------- update ----------

def test_update_changes_only_the_given_field(ledger):
    rec = ledger.add({"name": "Budi", "amount": 50000, "address": "Jl. Mawar 1"})
    updated = ledger.update(rec.id, {"name": "X"})

    assert updated.name == "X"
    assert updated.model_dump(exclude={"name"}) == rec.model_dump(exclude={"name"})
    assert ledger.get(rec.id) == updated


def test_update_keeps_id_and_created_at(ledger):
    rec = ledger.add({"name": "Budi", "amount": 1})
    updated = ledger.update(rec.id, {"id": "other", "created_at": "2000-01-01", "amount": 5})
    assert updated.id == rec.id
    assert updated.created_at == rec.created_at
    assert updated.amount == 5


def test_update_revalidates(ledger):
    rec = ledger.add({"name": "Budi", "amount": 1, "latitude": 1.0, "longitude": 2.0})
    with pytest.raises(InvalidAmount):
        ledger.update(rec.id, {"amount": -10})
    with pytest.raises(InvalidCoordinates):
        ledger.update(rec.id, {"latitude": None})
    assert ledger.get(rec.id) == rec

    moved = ledger.update(rec.id, {"latitude": 3.0})
    assert (moved.latitude, moved.longitude) == (3.0, 2.0)


def test_update_status_goes_through_transition_policy(ledger):
    rec = ledger.add({"name": "Budi", "amount": 1})
    assert ledger.update(rec.id, {"status": "paid"}).status == BillStatus.PAID
    with pytest.raises(InvalidStatus):
        ledger.update(rec.id, {"status": "cancelled"})
    assert ledger.get(rec.id).status == BillStatus.PAID


def test_missing_ids_raise_not_found(ledger):
    with pytest.raises(NotFound):
        ledger.get("nope")
    with pytest.raises(NotFound):
        ledger.update("nope", {"name": "X"})
    with pytest.raises(NotFound):
        ledger.remove("nope")
    with pytest.raises(NotFound):
        ledger.set_status("nope", "paid")


# ---------- status ----------

def test_set_status_is_idempotent(ledger):
    rec = ledger.add({"name": "Budi", "amount": 1})
    once = ledger.set_status(rec.id, "paid")
    twice = ledger.set_status(rec.id, "paid")
    assert once == twice
    assert ledger.get(rec.id).status == BillStatus.PAID

    assert ledger.mark_pending(rec.id).status == BillStatus.PENDING
    assert ledger.mark_pending(rec.id).status == BillStatus.PENDING


def test_set_status_rejects_unknown_states(ledger):
    rec = ledger.add({"name": "Budi", "amount": 1})
    for bad in ("overdue", None, ""):
        with pytest.raises(InvalidStatus):
            ledger.set_status(rec.id, bad)
    assert ledger.get(rec.id).status == BillStatus.PENDING


# ---------- delete & selection ----------

def test_remove_drops_id_from_selection(ledger):
    a, b, _ = _seed(ledger)
    ledger.select(a.id)
    ledger.select(b.id)
    ledger.remove(a.id)
    assert ledger.selected_ids == (b.id,)


def test_remove_many_is_best_effort(ledger):
    a, b, c = _seed(ledger)
    ledger.select_all([a.id, b.id, c.id])

    removed = ledger.remove_many([a.id, c.id, "ghost", a.id])

    assert removed == 2
    assert [r.id for r in ledger.records()] == [b.id]
    assert ledger.selected_ids == (b.id,)
    assert set(ledger.selected_ids) <= {r.id for r in ledger.records()}


def test_remove_selected(ledger):
    a, b, c = _seed(ledger)
    ledger.select(a.id)
    ledger.select(c.id)
    assert ledger.remove_selected() == 2
    assert [r.id for r in ledger.records()] == [b.id]
    assert ledger.selected_ids == ()


def test_selection_only_holds_existing_ids(ledger):
    a, b, _ = _seed(ledger)
    with pytest.raises(NotFound):
        ledger.select("ghost")

    assert ledger.select_all([b.id, "ghost", a.id]) == (a.id, b.id)
    ledger.deselect(a.id)
    ledger.deselect("ghost")
    assert ledger.selected_ids == (b.id,)

    ledger.clear_selection()
    assert ledger.selected_ids == ()


def test_select_all_from_search(ledger):
    budi = ledger.add({"name": "Budi", "amount": 1})
    ledger.add({"name": "Sari", "amount": 1})
    ledger.select_all(r.id for r in ledger.search("bud"))
    assert ledger.selected_ids == (budi.id,)


def test_add_many_skips_invalid_candidates(ledger):
    added, failed = ledger.add_many([
        {"name": "A", "amount": 1},
        {"name": "B", "amount": -1},
        {"name": "", "amount": 1},
        {"name": "C", "amount": "3"},
    ])
    assert [r.name for r in added] == ["A", "C"]
    assert failed == 2
    assert len(ledger) == 2


def test_from_records_rejects_duplicates(ledger):
    rec = ledger.add({"name": "A", "amount": 1})
    with pytest.raises(LedgerError):
        LedgerStore.from_records([rec, rec])

    restored = LedgerStore.from_records([rec])
    assert restored.get(rec.id) == rec


def test_restore_rolls_back_records_and_selection(ledger):
    a, b, _ = _seed(ledger)
    ledger.select(a.id)
    state = ledger.snapshot()

    ledger.update(a.id, {"name": "Changed"})
    ledger.remove(b.id)
    ledger.add({"name": "Extra", "amount": 1})
    ledger.clear_selection()
    ledger.restore(state)

    assert ledger.records() == tuple(state[0].values())
    assert ledger.get(a.id).name == "Customer 1"
    assert ledger.selected_ids == (a.id,)
