# api/wifibill/shared.py
import logging
from contextlib import contextmanager

# FastAPI / Starlette bits you commonly use
from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Request,
)

# Pydantic
from pydantic import BaseModel, Field

# SQLAlchemy session type
from sqlalchemy.orm import Session

from .errors import StorageFailed
from .services.ledger import LedgerStore
from .services.storage import save_ledger

log = logging.getLogger("wifibill.shared")


def get_ledger(request: Request) -> LedgerStore:
    """The single ledger owned by the running app."""
    return request.app.state.ledger


@contextmanager
def ledger_transaction(db: Session, ledger: LedgerStore):
    """
    Run ledger mutations and persist them as one unit.

    Any failure, in the mutation or in the save, puts the ledger back to its
    state on entry and rolls the session back. Save errors surface as
    StorageFailed.
    """
    state = ledger.snapshot()
    try:
        yield ledger
    except Exception:
        ledger.restore(state)
        raise

    try:
        save_ledger(db, ledger)
    except Exception as e:
        db.rollback()
        ledger.restore(state)
        log.exception("Ledger save failed; in-memory changes reverted")
        raise StorageFailed(type(e).__name__) from e


# Re-export for convenience
__all__ = [
    "APIRouter",
    "Depends",
    "HTTPException",
    "Query",
    "Request",
    "BaseModel",
    "Field",
    "Session",
    "get_ledger",
    "ledger_transaction",
]
