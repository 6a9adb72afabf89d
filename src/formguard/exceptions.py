"""Formguard error hierarchy."""


class FormguardError(Exception):
    """Base exception for all Formguard errors."""


class ConfigurationError(FormguardError):
    """Delivery gateway or settings are missing or invalid."""


class RejectionError(FormguardError):
    """Submission was rejected by the rate limit or a spam heuristic."""

    def __init__(self, verdict):
        self.verdict = verdict
        super().__init__(f"{verdict.reason.value}: {verdict.user_message}")


class DeliveryError(FormguardError):
    """Email provider refused or failed to send the message."""


class KeywordConfigError(ConfigurationError):
    """Spam keyword list could not be loaded."""
