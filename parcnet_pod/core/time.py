"""
parcnet_pod/core/time.py

Date values as integer milliseconds since the Unix epoch, UTC.

Wire format: YYYY-MM-DDTHH:MM:SS.mmmZ
             (milliseconds, explicit Z, no +00:00)
Years outside 0000..9999 use the six-digit signed form (+275760, -271821)
so the full POD date range round-trips. datetime cannot represent that
range, so conversion runs on proleptic Gregorian day counts.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Tuple

from parcnet_pod.core.exceptions import ValueFormatError, ValueRangeError

MS_PER_DAY = 86_400_000
EPOCH      = datetime(1970, 1, 1, tzinfo=timezone.utc)

_ISO_RE = re.compile(
    r"(?P<year>[+-]\d{6}|\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d+))?Z",
    re.ASCII,
)


def days_from_civil(year: int, month: int, day: int) -> int:
    year -= month <= 2
    era   = year // 400
    yoe   = year - era * 400
    doy   = (153 * ((month + 9) % 12) + 2) // 5 + day - 1
    doe   = yoe * 365 + yoe // 4 - yoe // 100 + doy
    return era * 146097 + doe - 719468


def civil_from_days(days: int) -> Tuple[int, int, int]:
    days += 719468
    era   = days // 146097
    doe   = days - era * 146097
    yoe   = (doe - doe // 1460 + doe // 36524 - doe // 146096) // 365
    doy   = doe - (365 * yoe + yoe // 4 - yoe // 100)
    mp    = (5 * doy + 2) // 153
    day   = doy - (153 * mp + 2) // 5 + 1
    month = mp + 3 if mp < 10 else mp - 9
    return yoe + era * 400 + (month <= 2), month, day


def format_date_ms(ms: int) -> str:
    """Render epoch milliseconds in wire format."""
    days, rem    = divmod(ms, MS_PER_DAY)
    year, month, day = civil_from_days(days)
    seconds, millis = divmod(rem, 1000)
    minutes, second = divmod(seconds, 60)
    hour, minute    = divmod(minutes, 60)
    if 0 <= year <= 9999:
        year_text = f"{year:04d}"
    else:
        year_text = ("+" if year > 0 else "-") + f"{abs(year):06d}"
    return (
        f"{year_text}-{month:02d}-{day:02d}"
        f"T{hour:02d}:{minute:02d}:{second:02d}.{millis:03d}Z"
    )


def parse_date_ms(text: str) -> int:
    """
    Parse a wire-format date to epoch milliseconds.

    The fractional part may carry any number of digits; anything finer
    than a millisecond is truncated. Only the Z offset is accepted.
    """
    if not isinstance(text, str):
        raise ValueFormatError("Date must be a string", {"type": type(text).__name__})
    match = _ISO_RE.fullmatch(text)
    if not match:
        raise ValueFormatError("Date must be RFC 3339 UTC ending in Z", {"value": text})

    year   = int(match.group("year"))
    month  = int(match.group("month"))
    day    = int(match.group("day"))
    hour   = int(match.group("hour"))
    minute = int(match.group("minute"))
    second = int(match.group("second"))
    fraction = match.group("fraction") or ""
    millis = int(fraction[:3].ljust(3, "0"))

    days = days_from_civil(year, month, day)
    if not 1 <= month <= 12 or civil_from_days(days) != (year, month, day):
        raise ValueFormatError("Date has no such calendar day", {"value": text})
    if hour > 23 or minute > 59 or second > 59:
        raise ValueFormatError("Date has an invalid time of day", {"value": text})

    return (
        days * MS_PER_DAY
        + hour * 3_600_000
        + minute * 60_000
        + second * 1000
        + millis
    )


def datetime_to_ms(value: datetime) -> int:
    """Epoch milliseconds of an aware datetime, truncated toward the past."""
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueFormatError("Date must be timezone-aware", {"value": value.isoformat()})
    return (value - EPOCH) // timedelta(milliseconds=1)


def ms_to_datetime(ms: int) -> datetime:
    """Aware UTC datetime for epoch milliseconds, where datetime can hold it."""
    try:
        return EPOCH + timedelta(milliseconds=ms)
    except OverflowError as exc:
        raise ValueRangeError(
            "Date is outside the range datetime can represent",
            {"ms": ms},
        ) from exc
