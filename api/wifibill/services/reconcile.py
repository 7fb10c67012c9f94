# api/wifibill/services/reconcile.py
"""
Spreadsheet import reconciliation.

Customer sheets come from many hands, so header names vary ("Nama",
"nama", "Nama Pelanggan", ...). FIELD_ALIASES lists, per ledger field, the
accepted headers in priority order; the first alias holding a non-empty value
wins. New spellings are added to the table, not to the code.

Rows without a name or a numeric amount are rejected and counted. Accepted
rows become plain candidates that still go through LedgerStore.add, so import
never bypasses record validation.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from ..errors import ImportBatchEmpty, ImportRowRejected, InvalidAmount
from ..schemas.bills import BillStatus, ImportOut
from .ledger import LedgerStore
from .records import parse_amount

log = logging.getLogger(__name__)

FIELD_ALIASES: Dict[str, List[str]] = {
    "name":         ["Nama", "nama", "Nama Pelanggan", "Name", "Customer"],
    "amount":       ["Nominal", "nominal", "Amount", "Tagihan"],
    "notes":        ["Catatan", "catatan", "Notes"],
    "phone_number": ["No HP", "Nomor WhatsApp", "WhatsApp", "Phone"],
    "address":      ["Alamat", "Address"],
    "package_name": ["Paket", "Paket Internet", "Package"],
}

OPTIONAL_FIELDS = ("phone_number", "address", "package_name")


class ReconcileResult(BaseModel):
    accepted: List[Dict[str, Any]] = []
    rejected_count: int = 0
    errors: List[str] = []


def _blank(v: Any) -> bool:
    return v is None or (isinstance(v, str) and not v.strip())


def _cell_text(v: Any) -> str:
    # spreadsheets hand back phone numbers and codes as floats
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    return str(v).strip()


def resolve_field(row: Mapping[Any, Any], aliases: Sequence[str]) -> Optional[Any]:
    """First non-empty value among the aliases; exact header match beats a loose one."""
    for alias in aliases:
        if alias in row and not _blank(row[alias]):
            return row[alias]

    loose: Dict[str, Any] = {}
    for key, val in row.items():
        k = str(key).strip().casefold()
        if k not in loose and not _blank(val):
            loose[k] = val
    for alias in aliases:
        val = loose.get(alias.strip().casefold())
        if val is not None:
            return val
    return None


def _admit_row(row: Mapping[Any, Any], row_number: int) -> Dict[str, Any]:
    name = resolve_field(row, FIELD_ALIASES["name"])
    if name is None:
        raise ImportRowRejected("missing name", row_number)

    amount_raw = resolve_field(row, FIELD_ALIASES["amount"])
    if amount_raw is None:
        raise ImportRowRejected("missing amount", row_number)
    try:
        amount = parse_amount(amount_raw)
    except InvalidAmount:
        raise ImportRowRejected(f"invalid amount '{amount_raw}'", row_number)

    notes = resolve_field(row, FIELD_ALIASES["notes"])
    candidate: Dict[str, Any] = {
        "name": _cell_text(name),
        # negatives pass through untruncated so LedgerStore.add refuses them
        "amount": int(amount) if amount >= 0 else amount,
        "status": BillStatus.PENDING.value,
        "notes": "" if notes is None else _cell_text(notes),
    }
    for field in OPTIONAL_FIELDS:
        val = resolve_field(row, FIELD_ALIASES[field])
        if val is not None:
            candidate[field] = _cell_text(val)
    return candidate


def reconcile(rows: Iterable[Mapping[Any, Any]]) -> ReconcileResult:
    accepted: List[Dict[str, Any]] = []
    errors: List[str] = []
    rejected = 0

    for r_idx, row in enumerate(rows, start=1):
        try:
            accepted.append(_admit_row(row, r_idx))
        except ImportRowRejected as e:
            rejected += 1
            errors.append(f"Row {r_idx}: {e.message}")
            log.debug("Import row %s rejected: %s", r_idx, e.message)

    return ReconcileResult(accepted=accepted, rejected_count=rejected, errors=errors)


def import_rows(ledger: LedgerStore, rows: Iterable[Mapping[Any, Any]]) -> ImportOut:
    """Reconcile rows and add the accepted ones to the ledger."""
    result = reconcile(rows)
    if not result.accepted:
        log.info("Import found no valid rows (%s rejected)", result.rejected_count)
        raise ImportBatchEmpty(result.rejected_count)

    added, refused = ledger.add_many(result.accepted)
    rejected = result.rejected_count + refused
    if not added:
        raise ImportBatchEmpty(rejected)

    log.info("Imported %s bill(s), %s row(s) rejected", len(added), rejected)
    return ImportOut(ok=True, imported=len(added), rejected=rejected)
