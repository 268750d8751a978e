"""Date parsing helpers for the ``date``, ``after`` and ``before`` filters.

Formats are written with moment-style tokens (``YYYY-MM-DD``, ``D/M/YYYY``,
``Do MMMM YYYY h:mm a``) or directly as strptime directives (anything
containing ``%``). Supported tokens:

    YYYY YY  MMMM MMM MM M  Do DD D  dddd ddd
    HH H hh h  mm m  ss s  A a  ZZ Z

Padded tokens (``MM``) need exactly two digits, unpadded ones (``M``) take
one or two. Text inside square brackets is literal, as are characters that
cannot start a token (``-``, ``/``, ``T``). Any other token letter is
rejected when the format is compiled.

Moment-style parsing is strict: the whole value must match the format and
the parts must name a real point in time, so ``2020-02-30`` is rejected.
A format without a year parses into the year 2000.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from functools import lru_cache
from re import Pattern
from typing import Any

from .values import Timestamp

MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
DEFAULT_YEAR = 2000

_NUMERIC_TOKENS = {
    "YYYY": r"\d{4}",
    "YY": r"\d{2}",
    "MM": r"\d{2}",
    "M": r"\d{1,2}",
    "Do": r"\d{1,2}(?:st|nd|rd|th)",
    "DD": r"\d{2}",
    "D": r"\d{1,2}",
    "HH": r"\d{2}",
    "H": r"\d{1,2}",
    "hh": r"\d{2}",
    "h": r"\d{1,2}",
    "mm": r"\d{2}",
    "m": r"\d{1,2}",
    "ss": r"\d{2}",
    "s": r"\d{1,2}",
    "ZZ": r"[+-]\d{4}",
    "Z": r"[+-]\d{2}:\d{2}",
}

_NAMED_TOKENS = {
    "MMMM": MONTHS,
    "MMM": tuple(name[:3] for name in MONTHS),
    "dddd": WEEKDAYS,
    "ddd": tuple(name[:3] for name in WEEKDAYS),
    "A": ("AM", "PM"),
    "a": ("am", "pm"),
}

_TOKEN_PATTERN = re.compile(
    r"\[[^\]]*\]|"
    + "|".join(sorted({*_NUMERIC_TOKENS, *_NAMED_TOKENS}, key=len, reverse=True))
)

# Letters moment reads as (parts of) tokens
_TOKEN_LETTERS = frozenset("MDdYyQWwEegGHhkmsSAaZzXxNo")


def _ordinal(day: int) -> str:
    suffix = "th"
    if not 11 <= day % 100 <= 13:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def _literal(text: str, fmt: str) -> str:
    unsupported = sorted(set(text) & _TOKEN_LETTERS)
    if unsupported:
        raise ValueError(
            f"Unsupported date format token {''.join(unsupported)!r} in {fmt!r}"
        )
    return re.escape(text)


def _offset(raw: str) -> timezone:
    digits = raw[1:].replace(":", "")
    hours, minutes = int(digits[:2]), int(digits[2:])
    if minutes > 59:
        raise ValueError(f"Invalid UTC offset: {raw}")
    delta = timedelta(hours=hours, minutes=minutes)
    return timezone(-delta if raw[0] == "-" else delta)


@dataclass(frozen=True)
class DateFormat:
    """A compiled moment-style format.

    Attributes:
        source: The format as written
        regex: Pattern the whole value must match
        tokens: Token of each capture group, in order
    """

    source: str
    regex: Pattern[str]
    tokens: tuple[str, ...]

    def parse(self, value: str) -> datetime | None:
        """Parse ``value``, or return None if it doesn't match or isn't a real date."""
        match = self.regex.fullmatch(value)
        if match is None:
            return None
        try:
            return self._build(dict(zip(self.tokens, match.groups())))
        except ValueError:
            return None

    @staticmethod
    def _build(parts: dict[str, str]) -> datetime:
        year = DEFAULT_YEAR
        if "YYYY" in parts:
            year = int(parts["YYYY"])
        elif "YY" in parts:
            short = int(parts["YY"])
            year = short + (2000 if short < 69 else 1900)

        month = 1
        if "MMMM" in parts:
            month = MONTHS.index(parts["MMMM"]) + 1
        elif "MMM" in parts:
            month = _NAMED_TOKENS["MMM"].index(parts["MMM"]) + 1
        elif "MM" in parts or "M" in parts:
            month = int(parts.get("MM") or parts["M"])

        day = 1
        if "Do" in parts:
            day = int(parts["Do"][:-2])
            if _ordinal(day) != parts["Do"]:
                raise ValueError(f"Wrong ordinal suffix: {parts['Do']}")
        elif "DD" in parts or "D" in parts:
            day = int(parts.get("DD") or parts["D"])

        hour = 0
        if "HH" in parts or "H" in parts:
            hour = int(parts.get("HH") or parts["H"])
        elif "hh" in parts or "h" in parts:
            hour = int(parts.get("hh") or parts["h"])
            if not 1 <= hour <= 12:
                raise ValueError(f"12-hour clock hour out of range: {hour}")
            meridiem = (parts.get("A") or parts.get("a") or "am").lower()
            hour = hour % 12 + (12 if meridiem == "pm" else 0)

        minute = int(parts.get("mm") or parts.get("m") or 0)
        second = int(parts.get("ss") or parts.get("s") or 0)

        offset = parts.get("ZZ") or parts.get("Z")
        tzinfo = _offset(offset) if offset else None

        result = datetime(year, month, day, hour, minute, second, tzinfo=tzinfo)

        weekday = parts.get("dddd") or parts.get("ddd")
        if weekday and weekday[:3] != WEEKDAYS[result.weekday()][:3]:
            raise ValueError(f"{weekday} does not fall on {result.date()}")
        return result


@lru_cache(maxsize=128)
def compile_format(fmt: str) -> DateFormat:
    """Compile a moment-style format.

    Example:
        >>> compile_format("D/M/YYYY").parse("5/3/2020")
        datetime.datetime(2020, 3, 5, 0, 0)

    Raises:
        ValueError: If the format holds a token letter outside a supported token
    """
    pieces = []
    tokens = []
    position = 0
    for match in _TOKEN_PATTERN.finditer(fmt):
        pieces.append(_literal(fmt[position:match.start()], fmt))
        token = match.group(0)
        if token.startswith("["):
            pieces.append(re.escape(token[1:-1]))
        else:
            tokens.append(token)
            if token in _NAMED_TOKENS:
                pieces.append("(" + "|".join(_NAMED_TOKENS[token]) + ")")
            else:
                pieces.append(f"({_NUMERIC_TOKENS[token]})")
        position = match.end()
    pieces.append(_literal(fmt[position:], fmt))
    return DateFormat(fmt, re.compile("".join(pieces)), tuple(tokens))


def parse_strict(value: Any, fmt: str) -> datetime | None:
    """Parse ``value`` strictly with ``fmt``; None when it doesn't parse.

    strptime formats (containing ``%``) must also format back to exactly
    ``value``, which rejects differently padded input.

    Raises:
        ValueError: If a moment-style ``fmt`` holds an unsupported token
    """
    if not isinstance(value, str):
        return None
    if "%" not in fmt:
        return compile_format(fmt).parse(value)
    try:
        parsed = datetime.strptime(value, fmt)
    except ValueError:
        return None
    if parsed.strftime(fmt) != value:
        return None
    return parsed


def parse_iso(value: Any) -> datetime | None:
    """Parse an ISO-8601 string; dates and datetimes are passed through."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def to_aware_datetime(value: Any) -> datetime | None:
    """Coerce a comparable date-like value to an aware UTC datetime.

    Accepts ``datetime``, ``date``, ``Timestamp`` and ISO-8601 strings.
    Naive values are taken to be UTC.
    """
    if isinstance(value, Timestamp):
        return value.to_datetime()
    parsed = parse_iso(value)
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed
