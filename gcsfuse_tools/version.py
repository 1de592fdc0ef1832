"""Version string reported by the gcsfuse tools."""

from __future__ import annotations

import platform

_UNKNOWN = "unknown"


def get_version(version: str | None = None) -> str:
    """Return a human-readable version, falling back to "unknown" when unset."""
    name = version or _UNKNOWN
    return f"{name} (Python version {platform.python_version()})"