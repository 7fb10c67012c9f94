# api/wifibill/notifier.py
import logging
import re
from typing import Optional
from urllib.parse import quote

import requests

from . import config
from .errors import NotificationUnavailable
from .schemas.bills import BillRecord, BillStatus

log = logging.getLogger("notifier")

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"
WHATSAPP_LINK = "https://wa.me/{phone}?text={text}"


class SendResult:
    def __init__(self, ok: bool, message_id: Optional[str] = None,
                 error: Optional[str] = None, code: Optional[int] = None):
        self.ok = ok
        self.message_id = message_id
        self.error = error
        self.code = code
    def __repr__(self) -> str:
        return f"SendResult(ok={self.ok}, id={self.message_id!r}, code={self.code!r}, error={self.error!r})"

# ---------------------------
# Recipient
# ---------------------------

def normalize_phone(raw: str, country_code: Optional[str] = None) -> str:
    """Digits only, local 0-prefix replaced by the country code (0812.. -> 62812..)."""
    cc = country_code or config.PHONE_COUNTRY_CODE
    digits = re.sub(r"\D", "", raw or "")
    if not digits:
        return ""
    if digits.startswith("0"):
        return cc + digits[1:]
    if not digits.startswith(cc):
        return cc + digits
    return digits

def reminder_recipient(record: BillRecord) -> str:
    phone = normalize_phone(record.phone_number or "")
    if not phone:
        raise NotificationUnavailable(record.id)
    return phone

# ---------------------------
# Reminder composition
# ---------------------------

def _format_amount(amount: int) -> str:
    return "Rp " + f"{amount:,}".replace(",", ".")

def compose_reminder_text(record: BillRecord) -> str:
    due = record.due_date.strftime("%d/%m/%Y")
    lines = [
        f"Internet bill - {config.PLATFORM_NAME}",
        f"Name: {record.name}",
        f"Package: {record.package_name or 'Internet package'}",
        f"Amount: {_format_amount(record.amount)}",
        f"Due date: {due}",
    ]
    if record.status == BillStatus.PENDING:
        lines.append(f"Status: UNPAID. Please pay before {due} to avoid interruption.")
    else:
        lines.append("Status: PAID. Thank you, your payment has been received.")
    return "\n".join(lines)

def whatsapp_link(record: BillRecord) -> str:
    phone = reminder_recipient(record)
    return WHATSAPP_LINK.format(phone=phone, text=quote(compose_reminder_text(record)))

# ---------------------------
# Delivery
# ---------------------------

def twilio_configured() -> bool:
    return bool(config.TWILIO_ACCOUNT_SID and config.TWILIO_AUTH_TOKEN and config.TWILIO_WHATSAPP_FROM)

def send_whatsapp(record: BillRecord) -> SendResult:
    phone = reminder_recipient(record)
    if not twilio_configured():
        return SendResult(False, error="WhatsApp delivery is not configured")

    payload = {
        "From": f"whatsapp:{config.TWILIO_WHATSAPP_FROM}",
        "To": f"whatsapp:+{phone}",
        "Body": compose_reminder_text(record),
    }
    try:
        r = requests.post(
            TWILIO_MESSAGES_URL.format(sid=config.TWILIO_ACCOUNT_SID),
            data=payload,
            auth=(config.TWILIO_ACCOUNT_SID, config.TWILIO_AUTH_TOKEN),
            timeout=10,
        )
    except requests.RequestException as e:
        log.warning("WhatsApp send to bill %s failed: %s", record.id, e)
        return SendResult(False, error=str(e))

    if r.status_code in (200, 201):
        try:
            data = r.json()
        except ValueError:
            log.warning("WhatsApp send to bill %s: unreadable provider reply", record.id)
            return SendResult(False, error=f"{r.status_code}: unreadable response")
        log.info("WhatsApp reminder queued for bill %s (%s)", record.id, data.get("sid"))
        return SendResult(True, message_id=data.get("sid"))

    code = None
    msg_text = r.text
    try:
        jd = r.json()
        code = jd.get("code")
        msg_text = jd.get("message") or msg_text
    except ValueError:
        pass
    log.warning("WhatsApp send to bill %s rejected: %s %s", record.id, r.status_code, msg_text)
    return SendResult(False, error=f"{r.status_code}: {msg_text}", code=code)
