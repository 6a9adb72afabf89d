"""Environment-driven settings for the contact endpoint."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from formguard.exceptions import ConfigurationError
from formguard.heuristics import (
    DEFAULT_MAX_LINKS,
    DEFAULT_MAX_MESSAGE_LENGTH,
    DEFAULT_MIN_FORM_TIME_MS,
    HeuristicsConfig,
)
from formguard.keywords import EXTEND, get_keywords
from formguard.rate_limit import DEFAULT_LIMIT, DEFAULT_WINDOW_SECONDS

DEFAULT_RESEND_URL = "https://api.resend.com"
DEFAULT_MAIL_FROM = "Contact Form <noreply@example.com>"
DEFAULT_CORS_ORIGINS = ["http://localhost:3000"]


def parse_csv_env(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    parts = [part.strip() for part in value.split(",") if part.strip()]
    return parts or default


def env_truthy(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    resend_api_key: Optional[str] = None
    resend_url: str = DEFAULT_RESEND_URL
    mail_from: str = DEFAULT_MAIL_FROM
    mail_to: list[str] = field(default_factory=list)
    mail_cc: list[str] = field(default_factory=list)
    rate_limit_max: int = DEFAULT_LIMIT
    rate_limit_window_seconds: int = DEFAULT_WINDOW_SECONDS
    sweep_interval_seconds: int = DEFAULT_WINDOW_SECONDS
    min_form_time_ms: int = DEFAULT_MIN_FORM_TIME_MS
    max_message_length: int = DEFAULT_MAX_MESSAGE_LENGTH
    max_links: int = DEFAULT_MAX_LINKS
    keywords_file: Optional[str] = None
    keywords_mode: str = EXTEND
    consume_on_reject: bool = True
    cors_allow_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    @property
    def delivery_configured(self) -> bool:
        return bool(self.resend_api_key) and bool(self.mail_to)

    def heuristics_config(self) -> HeuristicsConfig:
        return HeuristicsConfig(
            min_form_time_ms=self.min_form_time_ms,
            max_message_length=self.max_message_length,
            max_links=self.max_links,
            keywords=get_keywords(self.keywords_file, self.keywords_mode),
        )


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from environment variables.

    Raises ConfigurationError on malformed numeric values.
    """
    env = os.environ if environ is None else environ
    return Settings(
        resend_api_key=env.get("RESEND_API_KEY") or None,
        resend_url=env.get("FORMGUARD_RESEND_URL", DEFAULT_RESEND_URL).rstrip("/"),
        mail_from=env.get("FORMGUARD_MAIL_FROM", DEFAULT_MAIL_FROM),
        mail_to=parse_csv_env(env.get("FORMGUARD_MAIL_TO"), []),
        mail_cc=parse_csv_env(env.get("FORMGUARD_MAIL_CC"), []),
        rate_limit_max=_env_int(env, "FORMGUARD_RATE_LIMIT_MAX", DEFAULT_LIMIT, minimum=1),
        rate_limit_window_seconds=_env_int(
            env, "FORMGUARD_RATE_LIMIT_WINDOW_SECONDS", DEFAULT_WINDOW_SECONDS, minimum=1,
        ),
        sweep_interval_seconds=_env_int(
            env, "FORMGUARD_SWEEP_INTERVAL_SECONDS", DEFAULT_WINDOW_SECONDS, minimum=1,
        ),
        min_form_time_ms=_env_int(env, "FORMGUARD_MIN_FORM_TIME_MS", DEFAULT_MIN_FORM_TIME_MS),
        max_message_length=_env_int(
            env, "FORMGUARD_MAX_MESSAGE_LENGTH", DEFAULT_MAX_MESSAGE_LENGTH, minimum=1,
        ),
        max_links=_env_int(env, "FORMGUARD_MAX_LINKS", DEFAULT_MAX_LINKS),
        keywords_file=env.get("FORMGUARD_SPAM_KEYWORDS_FILE") or None,
        keywords_mode=env.get("FORMGUARD_SPAM_KEYWORDS_MODE", EXTEND).strip().lower(),
        consume_on_reject=env_truthy(env.get("FORMGUARD_CONSUME_ON_REJECT"), default=True),
        cors_allow_origins=parse_csv_env(
            env.get("FORMGUARD_CORS_ALLOW_ORIGINS"), list(DEFAULT_CORS_ORIGINS),
        ),
    )
