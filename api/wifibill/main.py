import logging

from fastapi import FastAPI

from .routers.bills import router as bills_router
from .routers.selection import router as selection_router
from .routers.dashboard import router as dashboard_router
from .routers.imports import router as imports_router
from .routers.reminders import router as reminders_router

from .database import Base, SessionLocal, engine
from .errors import LedgerError, ledger_error_handler
from .services.ledger import LedgerStore
from .services.storage import load_ledger

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [wifibill] %(levelname)s %(name)s: %(message)s"
)
log = logging.getLogger("wifibill")

app = FastAPI(title="WiFi Billing ledger API")

# the ledger is replaced by the stored snapshot on startup
app.state.ledger = LedgerStore()

# --- Include API routers ---
app.include_router(bills_router)
app.include_router(selection_router)
app.include_router(dashboard_router)
app.include_router(imports_router)
app.include_router(reminders_router)

app.add_exception_handler(LedgerError, ledger_error_handler)


@app.on_event("startup")
def ensure_tables_and_load():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        app.state.ledger = load_ledger(db)
    finally:
        db.close()

@app.get("/health")
def health():
    return {"status": "ok", "bills": len(app.state.ledger)}
