from datetime import timedelta

import pytest

from urlsigner.durations import MAX_DURATION_SECONDS, format_expiry, parse_duration, resolve_expiry
from urlsigner.errors import InvalidDurationError


@pytest.mark.parametrize(
    "value, seconds",
    [
        ("5 HOURS", 18000),
        ("1 SECOND", 1),
        ("+3 days", 259200),
        ("1 hour 30 minutes", 5400),
        ("2 weeks", 1209600),
        ("1 fortnight", 1209600),
        ("10min", 600),
        ("90", 90),
        (45, 45),
        (timedelta(minutes=2), 120),
    ],
)
def test_parse_duration(value, seconds):
    assert parse_duration(value) == seconds


@pytest.mark.parametrize(
    "value",
    [
        "",
        "soon",
        "5 parsecs",
        "-1 hour",
        "5 hours later",
        "0 seconds",
        0,
        -10,
        True,
        1.5,
        timedelta(0),
        "9" * 5000,
        "9" * 5000 + " hours",
        "99999999999 days",
        "3651 days",
        10**12,
        timedelta(days=4000),
    ],
)
def test_parse_duration_rejects_malformed_values(value):
    with pytest.raises(InvalidDurationError):
        parse_duration(value)


def test_resolve_expiry_is_absolute_unix_seconds():
    assert resolve_expiry("1 HOUR", 1000000000) == 1000003600


def test_format_expiry_offset_is_display_only():
    assert format_expiry(1000003600) == "2001-09-09T02:46:40+00:00"
    assert format_expiry(1000003600, -5) == "2001-09-08T21:46:40-05:00"


def test_parse_duration_accepts_upper_bound():
    assert parse_duration("3650 days") == MAX_DURATION_SECONDS
