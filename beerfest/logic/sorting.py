"""Drink sort orders."""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from beerfest.ingest.models import Drink


class DrinkSort(str, Enum):
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    ABV_HIGH = "abv_high"
    ABV_LOW = "abv_low"
    BREWERY = "brewery"
    STYLE = "style"


def sort_drinks(drinks: Sequence[Drink], sort_by: DrinkSort) -> list[Drink]:
    """Return a new, stably sorted list; equal keys keep their input order."""
    if sort_by is DrinkSort.NAME_ASC:
        return sorted(drinks, key=lambda d: d.name)
    if sort_by is DrinkSort.NAME_DESC:
        return sorted(drinks, key=lambda d: d.name, reverse=True)
    if sort_by is DrinkSort.ABV_HIGH:
        return sorted(drinks, key=lambda d: d.abv, reverse=True)
    if sort_by is DrinkSort.ABV_LOW:
        return sorted(drinks, key=lambda d: d.abv)
    if sort_by is DrinkSort.BREWERY:
        return sorted(drinks, key=lambda d: d.brewery_name)
    if sort_by is DrinkSort.STYLE:
        return sorted(drinks, key=lambda d: d.style or "")
    raise ValueError(f"Unknown sort: {sort_by!r}")
