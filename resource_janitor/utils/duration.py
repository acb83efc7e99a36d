# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""Parsing of duration strings such as ``24h`` or ``1h30m``.

The accepted grammar is a sequence of decimal numbers, each with a unit
suffix (``h``, ``m``, ``s``, ``ms``, ``us``/``µs``, ``ns``). A bare ``0``
is also accepted.
"""

import re
from datetime import timedelta

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|h|m|s)")

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(text: str) -> timedelta:
    """
    Parse a duration string into a timedelta.

    Args:
        text: e.g. "24h", "90m", "1h30m", "1.5h", "0"

    Returns:
        The parsed duration

    Raises:
        ValueError: If the string is empty, negative, malformed or out of range
    """
    value = (text or "").strip()
    if not value:
        raise ValueError("Duration must not be empty")
    if value.startswith("-"):
        raise ValueError(f"Duration must not be negative: {text!r}")
    value = value.lstrip("+")
    if value == "0":
        return timedelta(0)

    total = 0.0
    pos = 0
    while pos < len(value):
        match = _COMPONENT.match(value, pos)
        if not match:
            raise ValueError(f"Invalid duration {text!r}")
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()

    try:
        return timedelta(seconds=total)
    except OverflowError as e:
        raise ValueError(f"Duration out of range: {text!r}") from e


def format_duration(duration: timedelta) -> str:
    """Render a timedelta in the same ``1h2m3s`` style parse_duration accepts."""
    seconds = int(duration.total_seconds())
    if seconds <= 0:
        return "0s"

    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs:
        parts.append(f"{secs}s")
    return "".join(parts)
