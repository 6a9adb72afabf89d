"""Spam heuristics: pure checks over a single submission.

Applied in priority order; the first failing check names the rejection:
- Honeypot: hidden ``website`` field filled in
- Timing: submitted sooner than a human could type
- Required fields: name, email, message all present
- Email shape: something@something.something (not RFC validation)
- Keywords: configured spam terms in name/email/message
- Length: message over the character ceiling
- Links: too many http(s):// occurrences in the message
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from formguard.keywords import get_default_keywords, normalize_keywords
from formguard.models import ReasonCode, Submission

DEFAULT_MIN_FORM_TIME_MS = 3000
DEFAULT_MAX_MESSAGE_LENGTH = 5000
DEFAULT_MAX_LINKS = 5

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_LINK_RE = re.compile(r"https?://")


@dataclass(frozen=True)
class HeuristicsConfig:
    """Static thresholds and keyword list the checks run against."""
    min_form_time_ms: int = DEFAULT_MIN_FORM_TIME_MS
    max_message_length: int = DEFAULT_MAX_MESSAGE_LENGTH
    max_links: int = DEFAULT_MAX_LINKS
    keywords: frozenset[str] = field(default_factory=get_default_keywords)

    def with_keywords(self, terms) -> HeuristicsConfig:
        return HeuristicsConfig(
            min_form_time_ms=self.min_form_time_ms,
            max_message_length=self.max_message_length,
            max_links=self.max_links,
            keywords=normalize_keywords(terms),
        )


def check_honeypot(submission: Submission, config: HeuristicsConfig) -> Optional[ReasonCode]:
    if submission.website.strip():
        return ReasonCode.BOT_DETECTED
    return None


def check_timing(submission: Submission, config: HeuristicsConfig) -> Optional[ReasonCode]:
    """Too-fast submissions fail. Missing timing (None or 0) passes."""
    elapsed = submission.time_since_load
    if elapsed and elapsed < config.min_form_time_ms:
        return ReasonCode.TOO_FAST
    return None


def check_required_fields(submission: Submission, config: HeuristicsConfig) -> Optional[ReasonCode]:
    if not submission.name or not submission.email or not submission.message:
        return ReasonCode.MISSING_FIELDS
    return None


def is_plausible_email(email: str) -> bool:
    return _EMAIL_RE.fullmatch(email) is not None


def check_email_shape(submission: Submission, config: HeuristicsConfig) -> Optional[ReasonCode]:
    if not is_plausible_email(submission.email):
        return ReasonCode.INVALID_EMAIL
    return None


def find_spam_keyword(text: str, keywords: frozenset[str]) -> Optional[str]:
    """First configured keyword found in ``text`` (case-insensitive), if any."""
    lowered = text.lower()
    # Sorted so the reported term is stable across runs
    for keyword in sorted(keywords):
        if keyword in lowered:
            return keyword
    return None


def check_keywords(submission: Submission, config: HeuristicsConfig) -> Optional[ReasonCode]:
    content = f"{submission.name} {submission.email} {submission.message}"
    if find_spam_keyword(content, config.keywords) is not None:
        return ReasonCode.SPAM_CONTENT
    return None


def check_length(submission: Submission, config: HeuristicsConfig) -> Optional[ReasonCode]:
    if len(submission.message) > config.max_message_length:
        return ReasonCode.TOO_LONG
    return None


def count_links(text: str) -> int:
    return len(_LINK_RE.findall(text))


def check_link_count(submission: Submission, config: HeuristicsConfig) -> Optional[ReasonCode]:
    if count_links(submission.message) > config.max_links:
        return ReasonCode.TOO_MANY_LINKS
    return None


Check = Callable[[Submission, HeuristicsConfig], Optional[ReasonCode]]

# Order decides which reason wins when several checks would fire.
CHECKS: tuple[Check, ...] = (
    check_honeypot,
    check_timing,
    check_required_fields,
    check_email_shape,
    check_keywords,
    check_length,
    check_link_count,
)


def run_checks(submission: Submission, config: HeuristicsConfig) -> Optional[ReasonCode]:
    """Run every check in order, stopping at the first failure."""
    for check in CHECKS:
        reason = check(submission, config)
        if reason is not None:
            return reason
    return None
