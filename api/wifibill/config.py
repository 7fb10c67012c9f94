# api/wifibill/config.py
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

env_path = Path(__file__).resolve().parents[2] / "config" / ".env"
if env_path.exists():
    load_dotenv(env_path.as_posix(), override=True, encoding="utf-8-sig")


def _int_env(name: str) -> Optional[int]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


DB_URL = os.getenv("DB_URL") or "sqlite:///./wifibill.db"

# payment terms applied to new bills (see calculate_due_date)
BILL_TERMS_TYPE = os.getenv("BILL_TERMS_TYPE", "net_30")
BILL_TERMS_DAYS = _int_env("BILL_TERMS_DAYS")

PHONE_COUNTRY_CODE = os.getenv("PHONE_COUNTRY_CODE", "62")
PLATFORM_NAME = os.getenv("PLATFORM_NAME", "WiFi Billing")

# WhatsApp delivery through Twilio is optional; unset means link-only reminders
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_WHATSAPP_FROM = os.getenv("TWILIO_WHATSAPP_FROM")
