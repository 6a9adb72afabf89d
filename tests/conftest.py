"""Shared fixtures for Formguard tests."""

from __future__ import annotations

import pytest

from formguard.config import Settings
from formguard.delivery import DeliveryResult
from formguard.heuristics import HeuristicsConfig
from formguard.keywords import invalidate_cache as _invalidate_keyword_cache
from formguard.models import Submission
from formguard.policy import SubmissionPolicy
from formguard.rate_limit import RateLimitStore


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeGateway:
    """Records send() calls and returns a canned result (or raises)."""

    def __init__(self, result: DeliveryResult | None = None, exc: Exception | None = None):
        self.result = result or DeliveryResult(id="email-123")
        self.exc = exc
        self.calls: list[dict] = []

    def send(self, **kwargs) -> DeliveryResult:
        self.calls.append(kwargs)
        if self.exc is not None:
            raise self.exc
        return self.result


@pytest.fixture(autouse=True)
def _fresh_keyword_cache():
    _invalidate_keyword_cache()
    yield
    _invalidate_keyword_cache()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    """Fresh RateLimitStore (3 per hour) on the fake clock."""
    return RateLimitStore(limit=3, window_seconds=3600, clock=clock)


@pytest.fixture
def config():
    return HeuristicsConfig()


@pytest.fixture
def settings():
    return Settings(
        resend_api_key="re_test",
        mail_from="Contact Form <noreply@example.com>",
        mail_to=["inbox@example.com"],
        mail_cc=["copy@example.com"],
    )


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def policy(store, config, gateway, settings):
    return SubmissionPolicy(store=store, config=config, gateway=gateway, settings=settings)


@pytest.fixture
def good_submission():
    """A submission that passes every heuristic."""
    return Submission(
        name="Jane",
        email="jane@example.com",
        message="Hello, I'd like a quote.",
        website="",
        time_since_load=5000,
        client_id="203.0.113.7",
    )


def make_submission(**overrides) -> Submission:
    fields = {
        "name": "Jane",
        "email": "jane@example.com",
        "message": "Hello, I'd like a quote.",
        "website": "",
        "time_since_load": 5000,
        "client_id": "203.0.113.7",
    }
    fields.update(overrides)
    return Submission(**fields)


@pytest.fixture
def submission_factory():
    return make_submission
