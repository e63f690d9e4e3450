from __future__ import annotations

from .config import env_str

DEFAULT_TIMEOUT_SECONDS = 15.0


def http_timeout_seconds() -> float:
    """Per-request timeout handed to ``requests``; QDRANT_TIMEOUT overrides."""
    try:
        value = float(env_str("QDRANT_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS)))
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS
    return value if value > 0 else DEFAULT_TIMEOUT_SECONDS
