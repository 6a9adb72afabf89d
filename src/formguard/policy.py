"""Submission policy: rate limit plus spam heuristics, then delivery.

Order is fixed: the rate limit is consulted (and a slot consumed) first,
then each heuristic in priority order. The first failure is the verdict.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from formguard.config import Settings
from formguard.delivery import DeliveryGateway, build_email, send_email
from formguard.exceptions import DeliveryError, RejectionError
from formguard.heuristics import HeuristicsConfig, run_checks
from formguard.models import ReasonCode, Submission, Verdict
from formguard.rate_limit import RateLimitStore

logger = logging.getLogger(__name__)

RejectHook = Callable[[str, Verdict], None]


class SubmissionPolicy:
    """Decide accept/reject for submissions and hand accepted ones to delivery."""

    def __init__(
        self,
        store: RateLimitStore,
        config: Optional[HeuristicsConfig] = None,
        gateway: Optional[DeliveryGateway] = None,
        settings: Optional[Settings] = None,
        consume_on_reject: bool = True,
        on_reject: Optional[RejectHook] = None,
    ):
        self.store = store
        self.config = config or HeuristicsConfig()
        self.gateway = gateway
        self.settings = settings or Settings()
        self.consume_on_reject = consume_on_reject
        self.on_reject = on_reject

    def _rejected(self, client_id: str, verdict: Verdict) -> Verdict:
        logger.warning(
            "Contact submission rejected: client=%s reason=%s",
            client_id, verdict.reason.value,
        )
        if self.on_reject is not None:
            self.on_reject(client_id, verdict)
        return verdict

    def evaluate(
        self,
        submission: Submission,
        client_id: Optional[str] = None,
        now: Optional[float] = None,
    ) -> Verdict:
        """Produce the verdict for one submission. Consumes rate-limit quota."""
        client_id = client_id or submission.client_id

        decision = self.store.check_and_consume(client_id, now)
        if not decision.allowed:
            return self._rejected(
                client_id, Verdict.reject(ReasonCode.RATE_LIMITED, remaining=0),
            )

        reason = run_checks(submission, self.config)
        if reason is not None:
            remaining = decision.remaining
            if not self.consume_on_reject:
                self.store.release(client_id, now)
                remaining += 1
            return self._rejected(client_id, Verdict.reject(reason, remaining=remaining))

        return Verdict(allowed=True, reason=ReasonCode.ACCEPTED, remaining=decision.remaining)

    def enforce(
        self,
        submission: Submission,
        client_id: Optional[str] = None,
        now: Optional[float] = None,
    ) -> Verdict:
        """Like evaluate(), but raise RejectionError instead of returning a rejection."""
        verdict = self.evaluate(submission, client_id, now)
        if not verdict.allowed:
            raise RejectionError(verdict)
        return verdict

    def submit(
        self,
        submission: Submission,
        client_id: Optional[str] = None,
        now: Optional[float] = None,
    ) -> Verdict:
        """Evaluate and, if accepted, send the email. Delivery is not retried."""
        client_id = client_id or submission.client_id
        if self.gateway is None:
            logger.error("Delivery gateway is not configured")
            return Verdict.reject(ReasonCode.NOT_CONFIGURED)

        verdict = self.evaluate(submission, client_id, now)
        if not verdict.allowed:
            return verdict

        content = build_email(submission, self.settings)
        try:
            result = send_email(self.gateway, content)
        except DeliveryError as e:
            logger.error("Delivery failed for client=%s: %s", client_id, e)
            return Verdict.reject(
                ReasonCode.DELIVERY_FAILED, remaining=verdict.remaining, detail=str(e),
            )

        if not result.ok:
            logger.error("Delivery failed for client=%s: %s", client_id, result.error)
            return Verdict.reject(
                ReasonCode.DELIVERY_FAILED, remaining=verdict.remaining, detail=result.error,
            )

        logger.info("Contact email sent: client=%s id=%s", client_id, result.id)
        return Verdict(
            allowed=True,
            reason=ReasonCode.ACCEPTED,
            remaining=verdict.remaining,
            delivery_id=result.id,
        )
