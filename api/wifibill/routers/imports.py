# api/wifibill/routers/imports.py
import logging

from fastapi import UploadFile, File

from ..shared import APIRouter, Depends, Session, get_ledger, ledger_transaction
from ..database import get_db
from ..schemas.bills import ImportOut
from ..services.ledger import LedgerStore
from ..services.reconcile import import_rows
from ..services.spreadsheet import rows_from_upload

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/imports", tags=["imports"])


@router.post("/bills", response_model=ImportOut)
async def import_bills(
    upload: UploadFile = File(..., description="CSV or Excel file with Nama / Nominal columns"),
    db: Session = Depends(get_db),
    ledger: LedgerStore = Depends(get_ledger),
):
    raw = await upload.read()
    rows = rows_from_upload(upload.filename or "", raw)
    log.info("Import %r: %s data row(s)", upload.filename, len(rows))

    with ledger_transaction(db, ledger):
        result = import_rows(ledger, rows)
    return result
