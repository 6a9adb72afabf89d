"""Spam keyword list: load bundled defaults and optional operator overrides."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Iterable, Optional

from formguard.exceptions import KeywordConfigError

EXTEND = "extend"
REPLACE = "replace"


def invalidate_cache() -> None:
    """Clear cached keyword files. Call after an override file changes."""
    _load_bundled_keywords.cache_clear()
    _load_keyword_file.cache_clear()


def normalize_keywords(terms: Iterable[str]) -> frozenset[str]:
    """Lower-case and strip terms, dropping blanks."""
    return frozenset(t.strip().lower() for t in terms if t and t.strip())


@lru_cache(maxsize=1)
def _load_bundled_keywords() -> frozenset[str]:
    """Load the default keyword list from package data."""
    try:
        ref = resources.files("formguard.data").joinpath("spam_keywords.json")
        data = json.loads(ref.read_text(encoding="utf-8"))
        terms = data["keywords"]
    except (OSError, ValueError, KeyError) as e:
        raise KeywordConfigError(f"Failed to load bundled keywords: {e}") from e
    return normalize_keywords(terms)


@lru_cache(maxsize=8)
def _load_keyword_file(path: str) -> frozenset[str]:
    """Load keywords from a JSON or plain-text file.

    JSON may be a bare list or an object with a ``keywords`` list. Text files
    hold one term per line; blank lines and ``#`` comments are skipped.
    """
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as e:
        raise KeywordConfigError(f"Cannot read keyword file {path}: {e}") from e

    if p.suffix.lower() == ".json":
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise KeywordConfigError(f"Invalid JSON in keyword file {path}: {e}") from e
        terms = data.get("keywords") if isinstance(data, dict) else data
        if not isinstance(terms, list) or not all(isinstance(t, str) for t in terms):
            raise KeywordConfigError(
                f"Keyword file {path} must contain a list of strings"
            )
        return normalize_keywords(terms)

    lines = (line.split("#", 1)[0] for line in raw.splitlines())
    return normalize_keywords(lines)


def get_default_keywords() -> frozenset[str]:
    return _load_bundled_keywords()


def get_keywords(path: Optional[str] = None, mode: str = EXTEND) -> frozenset[str]:
    """Active keyword set: bundled defaults, extended or replaced by ``path``."""
    if mode not in (EXTEND, REPLACE):
        raise KeywordConfigError(f"Unknown keyword mode: {mode!r}")
    if not path:
        return _load_bundled_keywords()
    custom = _load_keyword_file(path)
    if mode == REPLACE:
        return custom
    return _load_bundled_keywords() | custom
