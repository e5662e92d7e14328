"""Parsing of ``/status`` commands left in issue comments.

Supported forms (case-insensitive)::

    /status cancel
    /status {status} on {YYYY-MM-DD}
    /status {status} in {number} day(s)|week(s)|month(s)

The status name is everything between ``/status`` and the date suffix.
Suffixes are recognised from the end of the comment, so a status name may
itself contain the words "on" or "in".
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

COMMAND_WORD = "/status"
CANCEL_WORD = "cancel"

DATE_FORMAT = "%Y-%m-%d"
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# Plain decimal notation only; float() also takes "1_0", "nan" and "inf"
_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$", re.ASCII)

# Fixed-length units: a month is always 30 days
_DAY = timedelta(days=1)
UNITS: dict[str, timedelta] = {
    "day": _DAY,
    "days": _DAY,
    "week": 7 * _DAY,
    "weeks": 7 * _DAY,
    "month": 30 * _DAY,
    "months": 30 * _DAY,
}

USAGE = (
    "you must specify a command in one of the following formats:\n"
    f"- `{COMMAND_WORD} {{status}} on {{date}}`\n"
    f"- `{COMMAND_WORD} {{status}} in {{number}} [day(s)|week(s)|month(s)]`\n"
    f"- `{COMMAND_WORD} {CANCEL_WORD}`"
)


@dataclass(frozen=True)
class Cancel:
    """Remove any pending move for the item."""


@dataclass(frozen=True)
class Schedule:
    """Move the item to ``status_name`` on ``date``.

    ``status_name`` is lowercase; it is matched against the project's
    options case-insensitively later.
    """

    status_name: str
    date: date


@dataclass(frozen=True)
class ParseError:
    """The comment was a command but could not be understood."""

    reason: str


Command = Cancel | Schedule | ParseError


def tokenize(body: str) -> list[str]:
    """Lowercase a comment body and split it into words."""
    return body.lower().split()


def parse_command(body: str, now: datetime | None = None) -> Command | None:
    """Parse a raw comment body.  Returns None if it is not a ``/status`` command."""
    return parse_words(tokenize(body), now=now)


def parse_words(words: list[str], now: datetime | None = None) -> Command | None:
    """Parse lowercase comment words into a command.

    ``now`` anchors relative ("in ...") dates; it defaults to the current
    UTC time.
    """
    if not words or words[0] != COMMAND_WORD:
        return None

    remaining = words[1:]

    if remaining == [CANCEL_WORD]:
        return Cancel()

    if len(remaining) < 3:
        return ParseError(USAGE)

    if remaining[-2] == "on":
        return _parse_on(remaining[:-2], remaining[-1])

    if remaining[-3] == "in":
        return _parse_in(remaining[:-3], remaining[-2], remaining[-1], now or datetime.now(UTC))

    return ParseError(USAGE)


def _parse_on(status_words: list[str], date_string: str) -> Command:
    target = parse_date(date_string)
    if target is None:
        return ParseError(
            f"`{date_string}` could not be parsed as a date in `YYYY-MM-DD` format - please try again."
        )
    return _schedule(status_words, target)


def _parse_in(status_words: list[str], value_string: str, unit: str, now: datetime) -> Command:
    value = float(value_string) if _NUMBER_RE.match(value_string) else math.nan
    if math.isnan(value) or math.isinf(value):
        return ParseError(f"`{value_string}` could not be parsed as a number - please try again.")

    if value <= 0:
        return ParseError(f"`{value_string}` must be greater than zero - please try again.")

    step = UNITS.get(unit)
    if step is None:
        return ParseError(
            f"`{unit}` must be one of `day`/`days`, `week`/`weeks`, or `month`/`months` - please try again."
        )

    try:
        target = (now + value * step).date()
    except OverflowError:
        return ParseError(f"`{value_string} {unit}` is too far in the future - please try again.")

    return _schedule(status_words, target)


def _schedule(status_words: list[str], target: date) -> Command:
    if not status_words:
        return ParseError(USAGE)
    return Schedule(status_name=" ".join(status_words), date=target)


def parse_date(value: str) -> date | None:
    """Parse a strict ``YYYY-MM-DD`` calendar date."""
    if not _DATE_RE.match(value):
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        return None
