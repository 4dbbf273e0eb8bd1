"""
Column codecs between SQLite INTEGER columns and Python temporal types.

  - timestamps  <-> seconds since 1970-01-01T00:00:00Z
  - time of day <-> seconds since midnight, 0..86399

Sub-second parts are truncated, never rounded, so whatever the DB returns is
what an epoch-second column can actually hold. Naive datetimes are refused
rather than guessed at.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone
from typing import Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
SECONDS_PER_DAY = 86_400
_ONE_SECOND = timedelta(seconds=1)


def encode_timestamp(value: datetime) -> int:
    """
    Aware datetimes only, converted to UTC. Decoding always yields aware UTC,
    so a naive value could never read back equal to itself.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"naive datetime cannot be stored: {value!r}")
    # floor division so pre-epoch fractions still truncate towards the past
    return (value - EPOCH) // _ONE_SECOND


def decode_timestamp(seconds: int) -> datetime:
    return EPOCH + timedelta(seconds=int(seconds))


def encode_time_of_day(value: time) -> int:
    return value.hour * 3600 + value.minute * 60 + value.second


def decode_time_of_day(seconds: int) -> time:
    seconds = int(seconds)
    if not 0 <= seconds < SECONDS_PER_DAY:
        raise ValueError(f"seconds of day out of range: {seconds}")
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return time(hours, minutes, secs)


# ── Nullable column helpers ─────────────────────────────────────────────────

def encode_optional_timestamp(value: Optional[datetime]) -> Optional[int]:
    return encode_timestamp(value) if value is not None else None


def decode_optional_timestamp(seconds: Optional[int]) -> Optional[datetime]:
    return decode_timestamp(seconds) if seconds is not None else None


def encode_optional_time(value: Optional[time]) -> Optional[int]:
    return encode_time_of_day(value) if value is not None else None


def decode_optional_time(seconds: Optional[int]) -> Optional[time]:
    return decode_time_of_day(seconds) if seconds is not None else None


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Converts between Python dates/times and the plain INTEGER columns the
#   SQLite schema uses.
#
# Key pieces:
#   - encode/decode_timestamp: whole seconds since the Unix epoch, UTC.
#   - encode/decode_time_of_day: seconds since midnight for routine start and
#     end times.
#   - *_optional_* helpers: pass None straight through for nullable columns.
#
# Interviewer-friendly talking points:
#   1. Integers sort and compare correctly in SQL, unlike formatted strings.
#   2. Truncation uses floor division, so 23:59:59.5 on 1969-12-31 becomes
#      -1 and not 0.
#   3. A naive datetime raises ValueError. Reading back always gives aware
#      UTC, and a naive value would silently stop comparing equal.
