"""Derived views over a festival's drink list."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from beerfest.ingest.models import Drink
from beerfest.logic.filters import filter_by_category

SAME_BREWERY = "Same brewery"
SAME_STYLE = "Same style, similar strength"
SIMILAR_ABV_WINDOW = 0.5


@dataclass(slots=True)
class SimilarDrink:
    drink: Drink
    reason: str


def available_categories(drinks: Sequence[Drink]) -> list[str]:
    return sorted({d.category for d in drinks})


def category_counts(drinks: Sequence[Drink]) -> dict[str, int]:
    return dict(Counter(d.category for d in drinks))


def available_styles(drinks: Sequence[Drink], category: str | None = None) -> list[str]:
    """Styles reachable once the category filter (and only that) is applied."""
    return sorted({d.style for d in filter_by_category(drinks, category) if d.style})


def style_counts(drinks: Sequence[Drink], category: str | None = None) -> dict[str, int]:
    return dict(Counter(d.style for d in filter_by_category(drinks, category) if d.style))


def favorite_drinks(drinks: Sequence[Drink]) -> list[Drink]:
    return [d for d in drinks if d.is_favorite]


def find_drink(drinks: Sequence[Drink], drink_id: str) -> Drink | None:
    return next((d for d in drinks if d.id == drink_id), None)


def similar_drinks(drink: Drink, all_drinks: Sequence[Drink], limit: int | None = None) -> list[SimilarDrink]:
    """Other drinks from the same brewery, or of the same style within 0.5% ABV.

    Brewery matches come first, then style matches; within each group the
    closest ABV wins and ties keep catalog order.
    """
    brewery: list[tuple[float, int, Drink]] = []
    style: list[tuple[float, int, Drink]] = []
    for position, candidate in enumerate(all_drinks):
        if candidate.id == drink.id:
            continue
        # feed ABVs carry one decimal place; round away float noise before the window check
        distance = round(abs(candidate.abv - drink.abv), 6)
        if candidate.producer.id == drink.producer.id:
            brewery.append((distance, position, candidate))
        elif drink.style is not None and candidate.style == drink.style and distance <= SIMILAR_ABV_WINDOW:
            style.append((distance, position, candidate))
    ranked = [SimilarDrink(d, SAME_BREWERY) for _, _, d in sorted(brewery, key=lambda item: item[:2])]
    ranked += [SimilarDrink(d, SAME_STYLE) for _, _, d in sorted(style, key=lambda item: item[:2])]
    if limit is not None:
        return ranked[:limit]
    return ranked
