"""Contact form endpoint.

POST /api/contact: rate limit, spam checks, then email via the delivery gateway
"""

from __future__ import annotations

import math
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field, field_validator

from formguard.api.deps import get_policy
from formguard.exceptions import ConfigurationError, DeliveryError, RejectionError
from formguard.models import ReasonCode, Submission
from formguard.policy import SubmissionPolicy

router = APIRouter(prefix="/api", tags=["contact"])


class ContactRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None
    website: Optional[str] = None
    time_since_load: Optional[float] = Field(default=None, alias="timeSinceLoad")

    @field_validator("name", "email", "message", "website", mode="before")
    @classmethod
    def coerce_text(cls, v):
        if v is None or isinstance(v, str):
            return v
        # Non-string junk from a bot is checked as text, not rejected by schema
        return str(v)

    def to_submission(self, client_id: str) -> Submission:
        # Fractions stay present (0.5 is too fast); inf and NaN are treated as missing
        elapsed = self.time_since_load
        return Submission(
            name=self.name,
            email=self.email,
            message=self.message,
            website=self.website,
            time_since_load=elapsed if elapsed is not None and math.isfinite(elapsed) else None,
            client_id=client_id,
        )


def get_client_ip(request: Request) -> str:
    """Client IP from proxy headers, first match wins."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    cf_ip = request.headers.get("cf-connecting-ip")  # Cloudflare
    if cf_ip:
        return cf_ip
    return request.client.host if request.client else "unknown"


@router.post("/contact")
async def submit_contact(
    body: ContactRequest,
    request: Request,
    policy: SubmissionPolicy = Depends(get_policy),
):
    """Filter a contact submission and forward it by email if accepted."""
    client_ip = get_client_ip(request)
    submission = body.to_submission(client_ip)

    # Delivery blocks on HTTP, keep it off the event loop
    verdict = await run_in_threadpool(policy.submit, submission, client_ip)

    if verdict.reason == ReasonCode.NOT_CONFIGURED:
        raise ConfigurationError("Delivery gateway is not configured")
    if verdict.reason == ReasonCode.DELIVERY_FAILED:
        raise DeliveryError(verdict.detail or "Unknown error")
    if not verdict.allowed:
        raise RejectionError(verdict)

    return {
        "success": True,
        "message": verdict.user_message,
        "emailId": verdict.delivery_id,
    }
