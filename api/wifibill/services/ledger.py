# api/wifibill/services/ledger.py
"""
In-memory ledger of customer bills plus the bulk-operation selection.

LedgerStore owns the records and the selection set; every read and write goes
through it. Operations either apply fully or raise and leave the store as it
was. Records keep insertion order, which is the display order.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from ..errors import LedgerError, NotFound, ValidationFailed
from ..schemas.bills import BillRecord, BillStatus
from .records import PROTECTED_FIELDS, candidate_fields, new_record_id, validate_candidate
from .transitions import transition

log = logging.getLogger(__name__)

MAX_ID_ATTEMPTS = 5


class LedgerStore:
    def __init__(self, id_factory: Callable[[], str] = new_record_id):
        self._id_factory = id_factory
        self._records: Dict[str, BillRecord] = {}
        self._selection: Set[str] = set()
        # every id ever handed out, so deleted ids are never reused
        self._issued: Set[str] = set()

    @classmethod
    def from_records(cls, records: Iterable[BillRecord], **kwargs) -> "LedgerStore":
        """Rebuild a store from already-validated records (e.g. loaded from storage)."""
        store = cls(**kwargs)
        for rec in records:
            if rec.id in store._records:
                raise LedgerError(f"Duplicate bill id {rec.id}", {"id": rec.id})
            store._records[rec.id] = rec
            store._issued.add(rec.id)
        return store

    # ---------- reads ----------

    def records(self) -> Tuple[BillRecord, ...]:
        return tuple(self._records.values())

    def get(self, record_id: str) -> BillRecord:
        rec = self._records.get(record_id)
        if rec is None:
            raise NotFound(record_id)
        return rec

    def search(self, term: Optional[str]) -> List[BillRecord]:
        """Case-insensitive name filter, in ledger order."""
        needle = (term or "").strip().casefold()
        if not needle:
            return list(self._records.values())
        return [r for r in self._records.values() if needle in r.name.casefold()]

    def __iter__(self):
        return iter(self.records())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    # ---------- snapshots ----------

    def snapshot(self) -> Tuple[Dict[str, BillRecord], Set[str]]:
        """Copy of records and selection. Records are frozen, so a shallow copy is enough."""
        return dict(self._records), set(self._selection)

    def restore(self, state: Tuple[Dict[str, BillRecord], Set[str]]) -> None:
        # issued ids are kept; an id handed out once is never reused
        records, selection = state
        self._records = dict(records)
        self._selection = set(selection)

    # ---------- create ----------

    def _next_id(self) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            rid = self._id_factory()
            if rid not in self._issued:
                return rid
        raise LedgerError("Could not allocate a unique bill id")

    def add(self, candidate: Any) -> BillRecord:
        data = candidate_fields(candidate)
        for key in PROTECTED_FIELDS:
            data.pop(key, None)
        rec = validate_candidate(data, record_id=self._next_id())
        self._issued.add(rec.id)
        self._records[rec.id] = rec
        log.info("Added bill %s for %r (%s)", rec.id, rec.name, rec.amount)
        return rec

    def add_many(self, candidates: Iterable[Any]) -> Tuple[List[BillRecord], int]:
        """Add each candidate; ones failing validation are skipped and counted."""
        added: List[BillRecord] = []
        failed = 0
        for i, cand in enumerate(candidates, start=1):
            try:
                added.append(self.add(cand))
            except ValidationFailed as e:
                failed += 1
                log.debug("Candidate %s refused: %s", i, e.message)
        return added, failed

    # ---------- update ----------

    def update(self, record_id: str, fields: Any) -> BillRecord:
        current = self.get(record_id)
        data = candidate_fields(fields)
        for key in PROTECTED_FIELDS:
            data.pop(key, None)
        target_status = data.pop("status", None)

        merged = current.model_dump()
        merged.update(data)
        rec = validate_candidate(merged, record_id=current.id, created_at=current.created_at)
        if target_status is not None:
            rec = transition(rec, target_status)

        self._records[record_id] = rec
        log.info("Updated bill %s", record_id)
        return rec

    def set_status(self, record_id: str, status: Any) -> BillRecord:
        current = self.get(record_id)
        rec = transition(current, status)
        if rec is not current:
            self._records[record_id] = rec
            log.info("Bill %s marked %s", record_id, rec.status.value)
        return rec

    def mark_paid(self, record_id: str) -> BillRecord:
        return self.set_status(record_id, BillStatus.PAID)

    def mark_pending(self, record_id: str) -> BillRecord:
        return self.set_status(record_id, BillStatus.PENDING)

    # ---------- delete ----------

    def remove(self, record_id: str) -> BillRecord:
        rec = self.get(record_id)
        del self._records[record_id]
        self._selection.discard(record_id)
        log.info("Removed bill %s", record_id)
        return rec

    def remove_many(self, record_ids: Iterable[str]) -> int:
        """Best-effort bulk delete; unknown ids are ignored."""
        removed = 0
        for rid in set(record_ids):
            if self._records.pop(rid, None) is not None:
                removed += 1
            self._selection.discard(rid)
        self._prune_selection()
        log.info("Bulk removed %s bill(s)", removed)
        return removed

    def remove_selected(self) -> int:
        return self.remove_many(list(self._selection))

    # ---------- selection ----------

    @property
    def selected_ids(self) -> Tuple[str, ...]:
        return tuple(rid for rid in self._records if rid in self._selection)

    def select(self, record_id: str) -> None:
        if record_id not in self._records:
            raise NotFound(record_id)
        self._selection.add(record_id)

    def deselect(self, record_id: str) -> None:
        self._selection.discard(record_id)

    def select_all(self, matching_ids: Iterable[str]) -> Tuple[str, ...]:
        """Replace the selection with the given ids that exist in the ledger."""
        self._selection = {rid for rid in matching_ids if rid in self._records}
        return self.selected_ids

    def clear_selection(self) -> None:
        self._selection.clear()

    def _prune_selection(self) -> None:
        self._selection &= self._records.keys()
