"""Drink filtering predicates."""

from __future__ import annotations

from typing import Iterable, Sequence

from beerfest.ingest.models import AvailabilityStatus, Drink

UNAVAILABLE = {AvailabilityStatus.OUT, AvailabilityStatus.NOT_YET_AVAILABLE}


def filter_by_category(drinks: Sequence[Drink], category: str | None) -> list[Drink]:
    if category is None:
        return list(drinks)
    return [d for d in drinks if d.category == category]


def filter_by_styles(drinks: Sequence[Drink], styles: Iterable[str] | None) -> list[Drink]:
    selected = set(styles or ())
    if not selected:
        return list(drinks)
    return [d for d in drinks if d.style is not None and d.style in selected]


def filter_by_favorites(drinks: Sequence[Drink], favorites_only: bool) -> list[Drink]:
    if not favorites_only:
        return list(drinks)
    return [d for d in drinks if d.is_favorite]


def is_available(drink: Drink) -> bool:
    return drink.availability_status not in UNAVAILABLE


def filter_by_availability(drinks: Sequence[Drink], hide_unavailable: bool) -> list[Drink]:
    if not hide_unavailable:
        return list(drinks)
    return [d for d in drinks if is_available(d)]


def matches_search(drink: Drink, query: str) -> bool:
    needle = query.lower()
    haystack = (drink.name, drink.brewery_name, drink.style or "", drink.notes or "")
    return any(needle in field.lower() for field in haystack)


def filter_by_search(drinks: Sequence[Drink], query: str) -> list[Drink]:
    if not query:
        return list(drinks)
    return [d for d in drinks if matches_search(d, query)]


def apply_all_filters(
    drinks: Sequence[Drink],
    *,
    category: str | None = None,
    styles: Iterable[str] | None = None,
    favorites_only: bool = False,
    hide_unavailable: bool = False,
    search_query: str = "",
) -> list[Drink]:
    """Apply category, style, favorites, availability and search filters in that order."""
    selected = set(styles or ())
    needle = search_query.lower()
    result: list[Drink] = []
    for drink in drinks:
        if category is not None and drink.category != category:
            continue
        if selected and (drink.style is None or drink.style not in selected):
            continue
        if favorites_only and not drink.is_favorite:
            continue
        if hide_unavailable and not is_available(drink):
            continue
        if needle and not matches_search(drink, needle):
            continue
        result.append(drink)
    return result
