"""Core utility functions."""
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Mapping, Optional


def utcnow() -> datetime:
    """Get current UTC datetime with timezone info. Always use this instead of datetime.now()."""
    return datetime.now(timezone.utc)


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds, for timing external calls."""
    return time.perf_counter() * 1000


def first_param(*candidates: tuple[Mapping[str, Any], str]) -> Optional[str]:
    """
    Return the first non-empty value among (mapping, key) candidates.

    Mirrors the `a.x || a.y || b.y || b.x` lookup used by the webhook
    endpoints: empty strings and None are skipped, other values are
    stringified and stripped.

    Args:
        *candidates: (mapping, key) pairs in precedence order.

    Returns:
        The first usable value, or None.
    """
    for source, key in candidates:
        value = source.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None
