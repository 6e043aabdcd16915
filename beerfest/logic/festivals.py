"""Festival ordering by date."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from beerfest.ingest.models import Festival, FestivalStatus

_PRIORITY = {FestivalStatus.LIVE: 0, FestivalStatus.UPCOMING: 1, FestivalStatus.PAST: 2}


def sort_festivals_by_date(festivals: Sequence[Festival], now: datetime) -> list[Festival]:
    """Live first, then upcoming soonest first, then past most recent first.

    Festivals without dates sort last within their group.
    """

    def sort_key(festival: Festival) -> tuple:
        status = festival.basic_status(now)
        if status is FestivalStatus.UPCOMING:
            start = festival.start_date
            return (_PRIORITY[status], start is None, start.timestamp() if start else 0.0)
        if status is FestivalStatus.PAST:
            end = festival.end_date or festival.start_date
            return (_PRIORITY[status], end is None, -end.timestamp() if end else 0.0)
        return (_PRIORITY[status], False, 0.0)

    return sorted(festivals, key=sort_key)


def status_in_context(festival: Festival, sorted_festivals: Sequence[Festival], now: datetime) -> FestivalStatus:
    """Like ``basic_status``, but the first past festival in the list is the most recent one."""
    status = festival.basic_status(now)
    if status is not FestivalStatus.PAST:
        return status
    for other in sorted_festivals:
        if other.basic_status(now) is FestivalStatus.PAST:
            return FestivalStatus.MOST_RECENT if other.id == festival.id else FestivalStatus.PAST
    return FestivalStatus.PAST
