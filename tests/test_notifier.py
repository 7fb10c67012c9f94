"""
Tests for WhatsApp reminder composition and delivery.
"""
from urllib.parse import unquote

import pytest
import requests

from wifibill import config, notifier
from wifibill.errors import NotificationUnavailable
from wifibill.notifier import (
    compose_reminder_text,
    normalize_phone,
    reminder_recipient,
    send_whatsapp,
    whatsapp_link,
)


@pytest.fixture
def twilio(monkeypatch):
    monkeypatch.setattr(config, "TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setattr(config, "TWILIO_AUTH_TOKEN", "secret")
    monkeypatch.setattr(config, "TWILIO_WHATSAPP_FROM", "+14155238886")


class FakeResponse:
    def __init__(self, status_code, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


@pytest.mark.parametrize("raw, expected", [
    ("0812-3456-789", "628123456789"),
    ("+62 812 3456 789", "628123456789"),
    ("8123456789", "628123456789"),
    ("", ""),
    ("n/a", ""),
])
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw, "62") == expected


def test_missing_phone_blocks_reminders(ledger):
    rec = ledger.add({"name": "Budi", "amount": 50000})
    with pytest.raises(NotificationUnavailable):
        reminder_recipient(rec)
    with pytest.raises(NotificationUnavailable):
        whatsapp_link(rec)


def test_reminder_text_follows_status(ledger):
    rec = ledger.add({
        "name": "Budi",
        "amount": 150000,
        "phone_number": "0812 3456 789",
        "package_name": "10 Mbps",
        "due_date": "2026-04-10",
    })
    text = compose_reminder_text(rec)
    assert "Name: Budi" in text
    assert "Package: 10 Mbps" in text
    assert "Amount: Rp 150.000" in text
    assert "Due date: 10/04/2026" in text
    assert "UNPAID" in text

    paid = ledger.mark_paid(rec.id)
    assert "Status: PAID" in compose_reminder_text(paid)


def test_whatsapp_link(ledger):
    rec = ledger.add({"name": "Sari", "amount": 75000, "phone_number": "0812 3456 789"})
    url = whatsapp_link(rec)
    assert url.startswith("https://wa.me/628123456789?text=")
    assert unquote(url.split("text=", 1)[1]) == compose_reminder_text(rec)


def test_send_without_configuration(ledger, monkeypatch):
    monkeypatch.setattr(config, "TWILIO_ACCOUNT_SID", None)
    rec = ledger.add({"name": "Sari", "amount": 1, "phone_number": "0812"})
    res = send_whatsapp(rec)
    assert not res.ok
    assert "not configured" in res.error


def test_send_posts_to_twilio(ledger, twilio, monkeypatch):
    calls = {}

    def fake_post(url, data=None, auth=None, timeout=None):
        calls.update(url=url, data=data, auth=auth, timeout=timeout)
        return FakeResponse(201, {"sid": "SM42"})

    monkeypatch.setattr(notifier.requests, "post", fake_post)
    rec = ledger.add({"name": "Sari", "amount": 75000, "phone_number": "0812 3456 789"})

    res = send_whatsapp(rec)

    assert res.ok and res.message_id == "SM42"
    assert calls["url"].endswith("/Accounts/AC123/Messages.json")
    assert calls["auth"] == ("AC123", "secret")
    assert calls["data"]["To"] == "whatsapp:+628123456789"
    assert calls["data"]["From"] == "whatsapp:+14155238886"
    assert calls["data"]["Body"] == compose_reminder_text(rec)


def test_send_reports_provider_errors(ledger, twilio, monkeypatch):
    monkeypatch.setattr(
        notifier.requests, "post",
        lambda *a, **kw: FakeResponse(400, {"code": 21211, "message": "Invalid 'To' Phone Number"}),
    )
    rec = ledger.add({"name": "Sari", "amount": 1, "phone_number": "0812"})

    res = send_whatsapp(rec)
    assert not res.ok
    assert res.code == 21211
    assert "Invalid 'To'" in res.error


def test_send_survives_network_errors(ledger, twilio, monkeypatch):
    def boom(*a, **kw):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(notifier.requests, "post", boom)
    rec = ledger.add({"name": "Sari", "amount": 1, "phone_number": "0812"})

    res = send_whatsapp(rec)
    assert not res.ok
    assert "connection refused" in res.error


def test_send_with_unreadable_success_reply(ledger, twilio, monkeypatch):
    monkeypatch.setattr(notifier.requests, "post", lambda *a, **kw: FakeResponse(201, None, "<html>"))
    rec = ledger.add({"name": "Sari", "amount": 1, "phone_number": "0812"})

    res = send_whatsapp(rec)
    assert not res.ok
    assert "unreadable" in res.error
