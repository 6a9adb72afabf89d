"""Email delivery through the Resend HTTP API.

Uses stdlib urllib, no extra dependencies required.
Default API URL: https://api.resend.com (override via FORMGUARD_RESEND_URL).
"""

from __future__ import annotations

import html
import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Optional, Protocol

from formguard.config import DEFAULT_RESEND_URL, Settings
from formguard.exceptions import ConfigurationError
from formguard.models import Submission

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryResult:
    """Provider outcome: an ``id`` on success, an ``error`` message otherwise."""
    id: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class EmailContent:
    from_display: str
    to: list[str]
    cc: list[str]
    reply_to: str
    subject: str
    html: str
    text: str


class DeliveryGateway(Protocol):
    def send(
        self,
        from_display: str,
        to: list[str],
        cc: list[str],
        reply_to: str,
        subject: str,
        html: str,
        text: str,
    ) -> DeliveryResult:
        ...


def build_email(submission: Submission, settings: Settings) -> EmailContent:
    """Render subject and bodies for an accepted submission.

    The HTML body escapes every field and turns message newlines into <br>.
    The text body is the labeled raw fields.
    """
    name = html.escape(submission.name)
    email = html.escape(submission.email)
    message = html.escape(submission.message).replace("\n", "<br>")

    html_body = (
        "<h2>New Contact Form Submission</h2>\n"
        f"<p><strong>Name:</strong> {name}</p>\n"
        f"<p><strong>Email:</strong> {email}</p>\n"
        "<p><strong>Message:</strong></p>\n"
        f"<p>{message}</p>\n"
    )
    text_body = (
        "New Contact Form Submission\n\n"
        f"Name: {submission.name}\n"
        f"Email: {submission.email}\n"
        f"Message: {submission.message}\n"
    )
    return EmailContent(
        from_display=settings.mail_from,
        to=list(settings.mail_to),
        cc=list(settings.mail_cc),
        reply_to=submission.email,
        subject=f"New Contact Form Submission from {submission.name}",
        html=html_body,
        text=text_body,
    )


def send_email(gateway: DeliveryGateway, content: EmailContent) -> DeliveryResult:
    return gateway.send(
        from_display=content.from_display,
        to=content.to,
        cc=content.cc,
        reply_to=content.reply_to,
        subject=content.subject,
        html=content.html,
        text=content.text,
    )


class ResendGateway:
    """Minimal client for Resend's ``POST /emails`` endpoint."""

    def __init__(self, api_key: str, base_url: str = DEFAULT_RESEND_URL, timeout: float = 30):
        if not api_key:
            raise ConfigurationError("Resend API key is required")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def send(
        self,
        from_display: str,
        to: list[str],
        cc: list[str],
        reply_to: str,
        subject: str,
        html: str,
        text: str,
    ) -> DeliveryResult:
        body = {
            "from": from_display,
            "to": to,
            "reply_to": reply_to,
            "subject": subject,
            "html": html,
            "text": text,
        }
        if cc:
            body["cc"] = cc

        req = urllib.request.Request(
            f"{self.base_url}/emails",
            data=json.dumps(body).encode("utf-8"),
            method="POST",
        )
        req.add_header("Accept", "application/json")
        req.add_header("Content-Type", "application/json")
        req.add_header("Authorization", f"Bearer {self.api_key}")

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                payload = json.loads(resp.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            try:
                error_body = json.loads(e.read().decode("utf-8"))
                msg = (
                    error_body.get("message")
                    or error_body.get("error")
                    or json.dumps(error_body)
                )
            except Exception:
                msg = str(e.reason)
            logger.error("Resend API error (HTTP %s): %s", e.code, msg)
            return DeliveryResult(error=msg)
        except urllib.error.URLError as e:
            logger.error("Resend connection failed: %s", e.reason)
            return DeliveryResult(error=f"Connection failed: {e.reason}")

        email_id = payload.get("id")
        if not email_id:
            return DeliveryResult(error=f"Unexpected response: {json.dumps(payload)}")
        return DeliveryResult(id=email_id)


def gateway_from_settings(settings: Settings) -> Optional[ResendGateway]:
    """ResendGateway when an API key and recipients are set, else None (delivery disabled)."""
    if not settings.delivery_configured:
        logger.error(
            "RESEND_API_KEY or FORMGUARD_MAIL_TO is not set; contact form delivery is disabled"
        )
        return None
    return ResendGateway(settings.resend_api_key, base_url=settings.resend_url)
