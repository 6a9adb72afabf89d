"""Pydantic models for contact-form submissions and verdicts.

A Submission is built once per request and never mutated. A Verdict is the
single accept/reject decision returned for it; nothing here is persisted.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


# --- Enums ---

class ReasonCode(str, Enum):
    ACCEPTED = "accepted"
    RATE_LIMITED = "rate_limited"
    BOT_DETECTED = "bot_detected"
    TOO_FAST = "too_fast"
    MISSING_FIELDS = "missing_fields"
    INVALID_EMAIL = "invalid_email"
    SPAM_CONTENT = "spam_content"
    TOO_LONG = "too_long"
    TOO_MANY_LINKS = "too_many_links"
    NOT_CONFIGURED = "not_configured"
    DELIVERY_FAILED = "delivery_failed"


# Transport status for each reason
_STATUS_CODES = {
    ReasonCode.ACCEPTED: 200,
    ReasonCode.RATE_LIMITED: 429,
    ReasonCode.BOT_DETECTED: 400,
    ReasonCode.TOO_FAST: 400,
    ReasonCode.MISSING_FIELDS: 400,
    ReasonCode.INVALID_EMAIL: 400,
    ReasonCode.SPAM_CONTENT: 400,
    ReasonCode.TOO_LONG: 400,
    ReasonCode.TOO_MANY_LINKS: 400,
    ReasonCode.NOT_CONFIGURED: 500,
    ReasonCode.DELIVERY_FAILED: 500,
}

_USER_MESSAGES = {
    ReasonCode.ACCEPTED: "Email sent successfully",
    ReasonCode.RATE_LIMITED: "Too many submissions. Please try again later.",
    ReasonCode.BOT_DETECTED: "Spam detected",
    ReasonCode.TOO_FAST: "Please take your time filling out the form.",
    ReasonCode.MISSING_FIELDS: "All fields are required",
    ReasonCode.INVALID_EMAIL: "Invalid email address",
    ReasonCode.SPAM_CONTENT: (
        "Your message contains content that appears to be spam. "
        "Please revise and try again."
    ),
    ReasonCode.TOO_LONG: "Message is too long. Please keep it under 5000 characters.",
    ReasonCode.TOO_MANY_LINKS: (
        "Message contains too many links. Please reduce the number of links."
    ),
    ReasonCode.NOT_CONFIGURED: (
        "Email service is not configured. Please contact the administrator."
    ),
    ReasonCode.DELIVERY_FAILED: "Failed to send email",
}


# --- Data Models ---

class Submission(BaseModel):
    """One contact-form submission. ``website`` is the honeypot field."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    email: str = ""
    message: str = ""
    website: str = ""
    time_since_load: Optional[float] = None
    client_id: str = "unknown"

    @field_validator("name", "email", "message", "website", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        if v is None:
            return ""
        return v


class Verdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    allowed: bool
    reason: ReasonCode
    remaining: Optional[int] = None
    delivery_id: Optional[str] = None
    detail: Optional[str] = None

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self.reason]

    @property
    def user_message(self) -> str:
        if self.reason == ReasonCode.DELIVERY_FAILED and self.detail:
            return f"Failed to send email: {self.detail}"
        return _USER_MESSAGES[self.reason]

    @classmethod
    def reject(cls, reason: ReasonCode, remaining: Optional[int] = None,
               detail: Optional[str] = None) -> Verdict:
        return cls(allowed=False, reason=reason, remaining=remaining, detail=detail)
