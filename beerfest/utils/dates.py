"""Datetime helpers."""

from __future__ import annotations

import os
from datetime import date, datetime

import pendulum

DEFAULT_TZ = "Europe/London"


def timezone_name() -> str:
    return os.environ.get("TIMEZONE", DEFAULT_TZ)


def now_in_tz() -> pendulum.DateTime:
    tz = pendulum.timezone(timezone_name())
    return pendulum.now(tz)


def parse_date(value: str | date | None) -> datetime | None:
    """Parse a festival date in the configured timezone.

    Accepts ISO strings and the ``date``/``datetime`` objects YAML produces.
    """
    if value is None or value == "":
        return None
    tz = pendulum.timezone(timezone_name())
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return pendulum.instance(value, tz=tz)
        return pendulum.instance(value)
    if isinstance(value, date):
        return pendulum.datetime(value.year, value.month, value.day, tz=tz)
    return pendulum.parse(str(value), tz=tz)


def parse_timestamp(value: str) -> datetime:
    parsed = pendulum.parse(value)
    if not isinstance(parsed, datetime):
        raise ValueError(f"Not a timestamp: {value!r}")
    return parsed


def format_timestamp(value: datetime) -> str:
    return value.isoformat()


def epoch_millis(value: datetime) -> int:
    return int(round(value.timestamp() * 1000))
