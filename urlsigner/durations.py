"""Relative durations, expiry timestamps and the UTC clock."""

import re
from datetime import datetime, timedelta, timezone
from typing import Callable

from urlsigner.errors import InvalidDurationError

Clock = Callable[[], int]
Validity = str | int | timedelta

UNIT_SECONDS = {
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
    "w": 604800,
    "week": 604800,
    "weeks": 604800,
    "fortnight": 1209600,
    "fortnights": 1209600,
}

MAX_DURATION_SECONDS = 3650 * 86400

_TERM = re.compile(r"\s*(\d{1,12})\s*([a-z]+)\s*", re.IGNORECASE)
_BARE_SECONDS = re.compile(r"\s*\+?\s*(\d{1,12})\s*")


def utc_now() -> int:
    return int(datetime.now(timezone.utc).timestamp())


def parse_duration(value: Validity) -> int:
    """Return ``value`` as a positive number of seconds.

    Strings take the form ``"5 HOURS"``, ``"+3 days"`` or
    ``"1 hour 30 minutes"``; a bare number means seconds.
    """
    if isinstance(value, bool):
        raise InvalidDurationError(f"invalid duration: {value!r}")
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds())
    elif isinstance(value, int):
        seconds = value
    elif isinstance(value, str):
        seconds = _parse_duration_string(value)
    else:
        raise InvalidDurationError(f"invalid duration: {value!r}")

    if seconds <= 0:
        raise InvalidDurationError(f"duration must be positive: {value!r}")
    if seconds > MAX_DURATION_SECONDS:
        raise InvalidDurationError(f"duration exceeds {MAX_DURATION_SECONDS} seconds: {value!r}")
    return seconds


def _parse_duration_string(text: str) -> int:
    bare = _BARE_SECONDS.fullmatch(text)
    if bare:
        return int(bare.group(1))

    remainder = text.strip()
    if remainder.startswith("+"):
        remainder = remainder[1:]

    total = 0
    position = 0
    while position < len(remainder):
        match = _TERM.match(remainder, position)
        if not match:
            raise InvalidDurationError(f"invalid duration: {text!r}")
        amount, unit = match.groups()
        factor = UNIT_SECONDS.get(unit.lower())
        if factor is None:
            raise InvalidDurationError(f"unknown duration unit {unit!r} in {text!r}")
        total += int(amount) * factor
        position = match.end()

    if position == 0:
        raise InvalidDurationError(f"invalid duration: {text!r}")
    return total


def resolve_expiry(validity: Validity, now: int) -> int:
    return int(now) + parse_duration(validity)


def format_expiry(expires: int, utc_offset_hours: float = 0) -> str:
    # display only; never feeds back into signing
    tz = timezone(timedelta(hours=utc_offset_hours))
    return datetime.fromtimestamp(expires, tz=tz).isoformat()
