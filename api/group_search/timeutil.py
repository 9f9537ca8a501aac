"""Timestamp normalisation and relative-time display for search results.

`created_at` values arrive from the hosted store in more than one shape:
ISO strings with an explicit offset, and naive ``YYYY-MM-DD HH:MM:SS``
strings that the store means as local wall-clock time. Everything is reduced
to integer milliseconds since the epoch so results can be sorted; anything
unreadable becomes ``UNPARSEABLE`` (negative infinity), which sorts after
every real instant in a descending sort.
"""

import math
import re
import time
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime

from .settings import settings

UNPARSEABLE = float("-inf")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)

MINUTE_MS = 60_000
HOUR_MS = 3_600_000
DAY_MS = 24 * HOUR_MS

_TZ_SUFFIX = re.compile(r"(Z|[+-]\d{2}:\d{2}|[+-]\d{4}|[+-]\d{2})$")
_NAIVE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})[ T](\d{2}):(\d{2}):(\d{2})(?:\.\d+)?$")
# fromisoformat before 3.11 only takes 3 or 6 fractional digits
_FRACTION = re.compile(r"\.(\d+)$")

_PARSE_ERRORS = (ValueError, TypeError, OverflowError, OSError)

LABELS = {
    "en": {
        "just_now": "just now",
        "minutes": lambda n: f"{n} minute ago" if n == 1 else f"{n} minutes ago",
        "hours": lambda n: f"{n} hour ago" if n == 1 else f"{n} hours ago",
    },
    "ko": {
        "just_now": "방금 전",
        "minutes": lambda n: f"{n}분 전",
        "hours": lambda n: f"{n}시간 전",
    },
}


def _to_ms(dt: datetime) -> int:
    if dt.tzinfo is None:
        # naive datetimes are local wall-clock time
        dt = dt.astimezone(timezone.utc)
    return (dt - _EPOCH) // _ONE_MS


def _canonical_offset(s: str, suffix: str) -> str:
    if suffix == "Z":
        offset = "+00:00"
    elif len(suffix) == 3:
        offset = suffix + ":00"
    elif len(suffix) == 5:
        offset = f"{suffix[:3]}:{suffix[3:]}"
    else:
        offset = suffix
    body = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), s[: len(s) - len(suffix)], count=1)
    return body + offset


def _parse_with_offset(s: str, suffix: str) -> datetime | None:
    for candidate in (s, _canonical_offset(s, suffix)):
        try:
            dt = datetime.fromisoformat(candidate)
        except ValueError:
            continue
        if dt.tzinfo is None:
            # e.g. a bare "2024-01-01": the trailing "-01" looked like an offset
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    return None


def _parse_loose(s: str) -> datetime | None:
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        pass
    try:
        dt = parsedate_to_datetime(s)
    except _PARSE_ERRORS:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def normalize(raw: str | None) -> int | float:
    """Return ``raw`` as epoch milliseconds, or ``UNPARSEABLE``.

    Never raises.
    """
    if not raw or not isinstance(raw, str):
        return UNPARSEABLE
    s = raw.strip()
    if not s:
        return UNPARSEABLE

    try:
        tz = _TZ_SUFFIX.search(s)
        if tz:
            dt = _parse_with_offset(s, tz.group(0))
            return UNPARSEABLE if dt is None else _to_ms(dt)

        m = _NAIVE.match(s)
        if m:
            year, month, day, hour, minute, second = (int(g) for g in m.groups())
            return _to_ms(datetime(year, month, day, hour, minute, second))

        dt = _parse_loose(s)
        return UNPARSEABLE if dt is None else _to_ms(dt)
    except _PARSE_ERRORS:
        return UNPARSEABLE


def is_valid_instant(instant) -> bool:
    return isinstance(instant, (int, float)) and math.isfinite(instant)


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def format_relative(instant, now: int | None = None, locale: str | None = None) -> str:
    """Render an instant as "just now" / "N minutes ago" / "N hours ago",
    falling back to the local calendar date (``YYYY. M. D.``) after a day.

    Instants in the future are shown as "just now".
    """
    if not is_valid_instant(instant):
        return ""
    labels = LABELS.get(locale or settings.DISPLAY_LOCALE, LABELS["en"])

    elapsed = (now_ms() if now is None else now) - instant
    if elapsed < 0:
        # TODO: confirm with product whether clock-skewed rows should show "just now"
        elapsed = 0

    if elapsed < DAY_MS:
        if elapsed < MINUTE_MS:
            return labels["just_now"]
        if elapsed < HOUR_MS:
            return labels["minutes"](int(elapsed // MINUTE_MS))
        return labels["hours"](int(elapsed // HOUR_MS))

    try:
        d = datetime.fromtimestamp(instant / 1000)
    except _PARSE_ERRORS:
        # local date falls outside what datetime can represent
        return ""
    return f"{d.year}. {d.month}. {d.day}."
