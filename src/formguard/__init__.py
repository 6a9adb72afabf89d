"""Formguard: spam-filtering contact form endpoint."""

from pathlib import Path

_VERSION_FILE = Path(__file__).resolve().parent.parent.parent / "VERSION"
__version__ = _VERSION_FILE.read_text().strip() if _VERSION_FILE.exists() else "0.0.0"

from formguard.exceptions import (
    FormguardError,
    ConfigurationError,
    RejectionError,
    DeliveryError,
    KeywordConfigError,
)

__all__ = [
    "__version__",
    "FormguardError",
    "ConfigurationError",
    "RejectionError",
    "DeliveryError",
    "KeywordConfigError",
]
