"""Tests for email delivery transports."""

import asyncio
import threading

import pytest

from autologic import email_service
from autologic.email_service import dispatch_email, send_email


@pytest.fixture
def plain_html(monkeypatch):
    monkeypatch.setattr(email_service, "compile_mjml_to_html", lambda content: f"<html>{content}</html>")


class TestSendEmail:
    def test_smtp_runs_off_the_event_loop_thread(self, monkeypatch, plain_html):
        calls = []

        def fake_smtp(to, subject, html_content, from_address):
            calls.append({"to": to, "html": html_content, "thread": threading.get_ident()})
            return {"id": None, "success": True, "provider": "smtp"}

        monkeypatch.setattr(email_service, "SMTP_HOST", "smtp.example.com")
        monkeypatch.setattr(email_service, "send_via_smtp", fake_smtp)

        async def send():
            result = await send_email("sara@example.com", "Hello", "<mjml/>")
            return result, threading.get_ident()

        result, loop_thread = asyncio.run(send())
        assert result["provider"] == "smtp"
        assert calls[0]["to"] == ["sara@example.com"]
        assert calls[0]["html"] == "<html><mjml/></html>"
        assert calls[0]["thread"] != loop_thread

    def test_resend_fallback_runs_off_the_event_loop_thread(self, monkeypatch, plain_html):
        threads = []

        def fake_resend_send(params):
            threads.append(threading.get_ident())
            return {"id": "re_1"}

        monkeypatch.setattr(email_service, "SMTP_HOST", None)
        monkeypatch.setattr(email_service, "RESEND_API_KEY", "re_test")
        monkeypatch.setattr(email_service.resend.Emails, "send", fake_resend_send)

        async def send():
            result = await send_email(["a@example.com"], "Hi", "<mjml/>")
            return result, threading.get_ident()

        result, loop_thread = asyncio.run(send())
        assert result == {"id": "re_1"}
        assert threads and threads[0] != loop_thread

    def test_unconfigured_transport_is_swallowed_by_dispatch(self, monkeypatch, plain_html):
        monkeypatch.setattr(email_service, "SMTP_HOST", None)
        monkeypatch.setattr(email_service, "RESEND_API_KEY", None)
        monkeypatch.setattr(email_service, "send_email", send_email)

        with pytest.raises(Exception, match="Email service not configured"):
            asyncio.run(send_email("a@example.com", "Hi", "<mjml/>"))
        assert asyncio.run(dispatch_email("a@example.com", "Hi", "<mjml/>")) is None
