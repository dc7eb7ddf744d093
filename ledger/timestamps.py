"""
Timestamp normalization for device submissions.

Devices send the event time as epoch seconds, epoch milliseconds or a
date/time string, and sometimes not at all. The raw value is classified into
one of four variants and resolved to integer epoch milliseconds:

- numbers below SECONDS_THRESHOLD are epoch seconds, anything else epoch
  milliseconds (there is no unit field on the wire)
- strings are parsed as ISO-8601, RFC 2822 or a few common layouts; naive
  values are local time, a bare ``YYYY-MM-DD`` date is UTC midnight
- unparseable, missing, out of range or unsupported values fall back to the
  current instant
"""
import logging
import math
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional, Union

logger = logging.getLogger(__name__)

# Numbers below this are seconds since the epoch (year ~2286)
SECONDS_THRESHOLD = 10_000_000_000

# Instants datetime can represent in any local zone
MIN_EPOCH_MS = int(datetime(1, 1, 2, tzinfo=timezone.utc).timestamp() * 1000)
MAX_EPOCH_MS = int(datetime(9999, 12, 31, tzinfo=timezone.utc).timestamp() * 1000)

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y",
    "%d %b %Y %H:%M:%S",
    "%b %d, %Y %H:%M:%S",
    "%B %d, %Y %H:%M:%S",
    "%b %d, %Y",
    "%B %d, %Y",
)


@dataclass(frozen=True)
class SecondsEpoch:
    value: float


@dataclass(frozen=True)
class MillisEpoch:
    value: float


@dataclass(frozen=True)
class DateString:
    value: str


@dataclass(frozen=True)
class Absent:
    pass


TimestampInput = Union[SecondsEpoch, MillisEpoch, DateString, Absent]


def current_millis() -> int:
    """Current instant in epoch milliseconds."""
    return int(time.time() * 1000)


def classify_timestamp(raw) -> TimestampInput:
    """Classify a raw wire value into one of the timestamp variants."""
    if raw is None or isinstance(raw, bool):
        return Absent()

    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and not math.isfinite(raw):
            return Absent()
        if raw < SECONDS_THRESHOLD:
            return SecondsEpoch(raw)
        return MillisEpoch(raw)

    if isinstance(raw, str):
        return DateString(raw)

    return Absent()


def parse_date_string(text: str) -> Optional[int]:
    """Parse a date/time string to epoch milliseconds, or None if unparseable."""
    text = text.strip()
    if not text:
        return None

    parsed = None
    try:
        parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
        if _DATE_ONLY.match(text):
            parsed = parsed.replace(tzinfo=timezone.utc)
    except ValueError:
        pass

    if parsed is None:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            parsed = None

    if parsed is None:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None

    try:
        # Naive datetimes are taken as local time
        return int(round(parsed.timestamp() * 1000))
    except (OverflowError, OSError, ValueError):
        return None


def resolve_timestamp(value: TimestampInput, now_ms: Optional[int] = None) -> int:
    """Resolve a classified timestamp to epoch milliseconds."""
    if now_ms is None:
        now_ms = current_millis()

    if isinstance(value, SecondsEpoch):
        resolved = int(round(value.value * 1000))
    elif isinstance(value, MillisEpoch):
        resolved = int(round(value.value))
    elif isinstance(value, DateString):
        resolved = parse_date_string(value.value)
        if resolved is None:
            logger.debug(f"Unparseable timestamp {value.value!r}, using current time")
            return now_ms
    else:
        return now_ms

    if not MIN_EPOCH_MS <= resolved <= MAX_EPOCH_MS:
        logger.debug(f"Timestamp {resolved} out of range, using current time")
        return now_ms
    return resolved


def normalize_timestamp(raw, now_ms: Optional[int] = None) -> int:
    """Normalize any supported timestamp representation to epoch milliseconds."""
    return resolve_timestamp(classify_timestamp(raw), now_ms)
