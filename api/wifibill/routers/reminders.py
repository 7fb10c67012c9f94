# api/wifibill/routers/reminders.py
from ..shared import APIRouter, Depends, HTTPException, get_ledger
from ..notifier import (
    compose_reminder_text,
    reminder_recipient,
    send_whatsapp,
    twilio_configured,
    whatsapp_link,
)
from ..schemas.bills import ReminderOut
from ..services.ledger import LedgerStore

router = APIRouter(prefix="/api/bills", tags=["reminders"])


@router.get("/{bill_id}/reminder", response_model=ReminderOut)
def reminder_link(bill_id: str, ledger: LedgerStore = Depends(get_ledger)):
    rec = ledger.get(bill_id)
    return ReminderOut(
        id=rec.id,
        phone=reminder_recipient(rec),
        text=compose_reminder_text(rec),
        url=whatsapp_link(rec),
    )

@router.post("/{bill_id}/reminder/send")
def send_reminder(bill_id: str, ledger: LedgerStore = Depends(get_ledger)):
    rec = ledger.get(bill_id)
    reminder_recipient(rec)
    if not twilio_configured():
        raise HTTPException(503, "WhatsApp delivery is not configured; use the reminder link instead")
    res = send_whatsapp(rec)
    if not res.ok:
        raise HTTPException(502, res.error or "WhatsApp delivery failed")
    return {"ok": True, "message_id": res.message_id}
