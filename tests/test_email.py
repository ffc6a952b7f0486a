import asyncio
from datetime import date

import pytest

from bloodconnect import email_service
from bloodconnect.email_service import send_email as deliver
from bloodconnect.email_templates import (
    appointment_confirmation_template,
    donor_match_template,
    volunteer_notification_template,
)


def test_donor_match_template_mentions_request():
    mjml = donor_match_template(
        donor_name="Asha", donor_blood_type="O-", needed_blood_type="AB+", hospital="KEM Hospital", urgency="critical"
    )

    assert mjml.lstrip().startswith("<mjml>")
    assert "Asha" in mjml
    assert "KEM Hospital" in mjml
    assert "critical" in mjml.lower()


def test_templates_escape_user_text():
    link = '<a href="https://evil.example">Click</a>, Mumbai'
    mjml = donor_match_template(
        donor_name="<b>Asha</b>", donor_blood_type="O-", needed_blood_type="AB+", hospital=link, urgency="high"
    )

    assert "evil.example\">Click" not in mjml
    assert "&lt;a href=&quot;https://evil.example&quot;&gt;Click&lt;/a&gt;, Mumbai" in mjml
    assert "Hello &lt;b&gt;Asha&lt;/b&gt;," in mjml

    mjml = volunteer_notification_template(
        requester_name="Ravi", donor_name="<script>x</script>", donor_blood_type="O-", patient_name="P & Q"
    )
    assert "<script>" not in mjml
    assert "P &amp; Q" in mjml


def test_appointment_template():
    mjml = appointment_confirmation_template(
        user_name="Ravi",
        center_name="City Blood Bank",
        center_address="123 Main Street, Mumbai",
        date=date(2026, 3, 2).strftime("%A, %d %b %Y"),
        time_slot="09:00",
    )

    assert "Monday, 02 Mar 2026" in mjml
    assert "09:00" in mjml


@pytest.fixture
def plain_html(monkeypatch):
    monkeypatch.setattr(email_service, "compile_mjml_to_html", lambda mjml: f"<html>{mjml}</html>")
    monkeypatch.setattr(email_service, "smtp_configured", lambda: False)


def test_send_email_without_any_transport_fails(plain_html, monkeypatch):
    monkeypatch.setattr(email_service, "RESEND_API_KEY", None)

    with pytest.raises(email_service.EmailDeliveryError, match="not configured"):
        asyncio.run(deliver("donor@example.com", "Hi", "<mjml></mjml>"))


def test_send_email_uses_resend(plain_html, monkeypatch):
    sent = []
    monkeypatch.setattr(email_service, "RESEND_API_KEY", "re_test")
    monkeypatch.setattr(email_service.resend.Emails, "send", lambda params: sent.append(params) or {"id": "1"})

    result = asyncio.run(deliver("donor@example.com", "Hi", "<mjml></mjml>"))

    assert result == {"id": "1"}
    assert sent[0]["to"] == ["donor@example.com"]
    assert sent[0]["html"] == "<html><mjml></mjml></html>"


def test_send_email_prefers_smtp(plain_html, monkeypatch):
    calls = []
    monkeypatch.setattr(email_service, "smtp_configured", lambda: True)
    monkeypatch.setattr(
        email_service,
        "send_via_smtp",
        lambda to, subject, html, sender: calls.append((to, subject)) or {"id": "smtp-1", "success": True},
    )

    result = asyncio.run(deliver("donor@example.com", "Hi", "<mjml></mjml>"))

    assert result["id"] == "smtp-1"
    assert calls == [(["donor@example.com"], "Hi")]
