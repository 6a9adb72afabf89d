"""Shared dependencies for the Formguard API."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from formguard.config import Settings, load_settings
from formguard.delivery import DeliveryGateway, gateway_from_settings
from formguard.policy import SubmissionPolicy
from formguard.rate_limit import RateLimitStore

logger = logging.getLogger(__name__)

# Module-level policy, initialized in app lifespan
_policy: Optional[SubmissionPolicy] = None


def get_policy() -> SubmissionPolicy:
    """FastAPI dependency: return the shared SubmissionPolicy instance."""
    if _policy is None:
        raise RuntimeError("Policy not initialized; app lifespan not started")
    return _policy


def init_policy(
    settings: Optional[Settings] = None,
    gateway: Optional[DeliveryGateway] = None,
    clock: Callable[[], float] = time.monotonic,
) -> SubmissionPolicy:
    """Initialize the shared policy and its rate limit store.

    Reads settings from the environment if none are given. Without an explicit
    gateway, a Resend gateway is built when RESEND_API_KEY is set.
    """
    global _policy
    if settings is None:
        settings = load_settings()
    if gateway is None:
        gateway = gateway_from_settings(settings)
    store = RateLimitStore(
        limit=settings.rate_limit_max,
        window_seconds=settings.rate_limit_window_seconds,
        clock=clock,
    )
    _policy = SubmissionPolicy(
        store=store,
        config=settings.heuristics_config(),
        gateway=gateway,
        settings=settings,
        consume_on_reject=settings.consume_on_reject,
    )
    return _policy


def close_policy() -> None:
    """Drop the shared policy. Called from app lifespan."""
    global _policy
    if _policy is not None:
        _policy.store.clear()
        _policy = None


async def sweep_periodically(store: RateLimitStore, interval_seconds: float) -> None:
    """Remove expired rate limit entries every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = store.sweep()
        if removed:
            logger.debug("Swept %d expired rate limit entries", removed)
