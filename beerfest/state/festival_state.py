"""Application state for browsing a festival's drinks.

``FestivalState`` holds the current festival, its drinks, the active filter and
sort selections, and loading/error flags. All mutation goes through its
methods, each of which notifies subscribers once the state is consistent.
Fetch and storage failures never escape a load: they are turned into a
user-facing message on ``error`` / ``festivals_error``.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import os
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any, Sequence

from beerfest.errors import user_friendly_message
from beerfest.ingest import load_default_festivals
from beerfest.ingest.catalog import CatalogClient
from beerfest.ingest.festivals import FestivalClient
from beerfest.ingest.models import Drink, FavoriteItem, Festival
from beerfest.logic import aggregates
from beerfest.logic.aggregates import SimilarDrink
from beerfest.logic.festivals import sort_festivals_by_date
from beerfest.logic.filters import apply_all_filters
from beerfest.logic.sorting import DrinkSort, sort_drinks
from beerfest.store import (
    FavoritesStore,
    FestivalSelectionStore,
    KeyValueStore,
    RatingsStore,
    SettingsStore,
    ThemeMode,
)
from beerfest.utils.dates import now_in_tz

logger = logging.getLogger(__name__)

DRINKS_STALE_AFTER = timedelta(seconds=int(os.environ.get("DRINKS_STALE_SECONDS", 60 * 60)))
FESTIVALS_STALE_AFTER = timedelta(seconds=int(os.environ.get("FESTIVALS_STALE_SECONDS", 60 * 60 * 24)))
SIMILAR_DRINKS_LIMIT = 10

Listener = Callable[["FestivalState"], None]


class FestivalState:
    def __init__(
        self,
        kv: KeyValueStore,
        *,
        catalog: CatalogClient | None = None,
        festival_client: FestivalClient | None = None,
        default_festivals: Sequence[Festival] | None = None,
        clock: Callable[[], datetime] = now_in_tz,
        drinks_stale_after: timedelta = DRINKS_STALE_AFTER,
        festivals_stale_after: timedelta = FESTIVALS_STALE_AFTER,
    ) -> None:
        self.catalog = catalog or CatalogClient()
        self.festival_client = festival_client or FestivalClient()
        self.favorites = FavoritesStore(kv, clock=clock)
        self.ratings = RatingsStore(kv)
        self.selection = FestivalSelectionStore(kv)
        self.settings = SettingsStore(kv)
        self.default_festivals = list(default_festivals) if default_festivals is not None else load_default_festivals()
        self.clock = clock
        self.drinks_stale_after = drinks_stale_after
        self.festivals_stale_after = festivals_stale_after

        self._listeners: list[Listener] = []
        self._all_drinks: list[Drink] = []
        self._filtered_drinks: list[Drink] = []
        self._festivals: list[Festival] = []
        self._current_festival: Festival | None = None

        self.is_loading = False
        self.is_festivals_loading = False
        self.is_initialized = False
        self.error: str | None = None
        self.festivals_error: str | None = None
        self.selected_category: str | None = None
        self.selected_styles: frozenset[str] = frozenset()
        self.current_sort = DrinkSort.NAME_ASC
        self.search_query = ""
        self.show_favorites_only = False
        self.hide_unavailable = False
        self.theme_mode = ThemeMode.SYSTEM
        self.last_drinks_refresh: datetime | None = None
        self.last_festivals_refresh: datetime | None = None

    # subscriptions

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    async def _run(self, func: Callable[..., Any], *args: Any) -> Any:
        return await asyncio.get_running_loop().run_in_executor(None, functools.partial(func, *args))

    async def close(self) -> None:
        await self.catalog.close()
        await self.festival_client.close()

    # read-only views

    @property
    def drinks(self) -> list[Drink]:
        return self._filtered_drinks

    @property
    def all_drinks(self) -> list[Drink]:
        return self._all_drinks

    @property
    def festivals(self) -> list[Festival]:
        return self._festivals

    @property
    def has_festivals(self) -> bool:
        return bool(self._festivals)

    @property
    def sorted_festivals(self) -> list[Festival]:
        return sort_festivals_by_date(self._festivals, self.clock())

    @property
    def current_festival(self) -> Festival:
        if self._current_festival is not None:
            return self._current_festival
        return self.default_festivals[0]

    @property
    def available_categories(self) -> list[str]:
        return aggregates.available_categories(self._all_drinks)

    @property
    def category_counts(self) -> dict[str, int]:
        return aggregates.category_counts(self._all_drinks)

    @property
    def available_styles(self) -> list[str]:
        return aggregates.available_styles(self._all_drinks, self.selected_category)

    @property
    def style_counts(self) -> dict[str, int]:
        return aggregates.style_counts(self._all_drinks, self.selected_category)

    @property
    def favorite_drinks(self) -> list[Drink]:
        return aggregates.favorite_drinks(self._all_drinks)

    def similar_drinks(self, drink: Drink) -> list[SimilarDrink]:
        return aggregates.similar_drinks(drink, self._all_drinks, limit=SIMILAR_DRINKS_LIMIT)

    def get_drink_by_id(self, drink_id: str) -> Drink | None:
        return aggregates.find_drink(self._all_drinks, drink_id)

    def get_festival_by_id(self, festival_id: str) -> Festival | None:
        return next((f for f in self._festivals if f.id == festival_id), None)

    def is_valid_festival_id(self, festival_id: str | None) -> bool:
        return bool(festival_id) and self.get_festival_by_id(festival_id) is not None

    @property
    def is_drinks_data_stale(self) -> bool:
        if self.last_drinks_refresh is None:
            return True
        return self.clock() - self.last_drinks_refresh > self.drinks_stale_after

    @property
    def is_festivals_data_stale(self) -> bool:
        if self.last_festivals_refresh is None:
            return True
        return self.clock() - self.last_festivals_refresh > self.festivals_stale_after

    # loading

    async def initialize(self) -> None:
        self.hide_unavailable = await self._run(self.settings.get_hide_unavailable)
        self.theme_mode = await self._run(self.settings.get_theme_mode)
        await self.load_festivals()
        saved_id = await self._run(self.selection.get_selected_festival_id)
        if saved_id is not None:
            saved = self.get_festival_by_id(saved_id)
            if saved is not None:
                self._current_festival = saved
        self.is_initialized = True
        self._notify()

    async def load_festivals(self) -> None:
        self.is_festivals_loading = True
        self.festivals_error = None
        self._notify()
        try:
            registry = await self.festival_client.fetch_festivals()
            self._festivals = registry.festivals
            if self._current_festival is None and registry.default_festival is not None:
                self._current_festival = registry.default_festival
            self.last_festivals_refresh = self.clock()
        except Exception as exc:
            logger.warning("Festival registry load failed: %s", exc)
            self.last_festivals_refresh = None
            self.festivals_error = user_friendly_message(exc)
            self._festivals = []
        finally:
            self.is_festivals_loading = False
            self._notify()

    async def load_drinks(self) -> None:
        if self._current_festival is None:
            if not self._festivals:
                await self.load_festivals()
            if self._current_festival is None:
                self._current_festival = self.default_festivals[0]
        self.is_loading = True
        self.error = None
        self._notify()
        await self._load_drinks_internal()

    async def _load_drinks_internal(self) -> None:
        festival = self.current_festival
        try:
            drinks = await self.catalog.fetch_all_drinks(festival)
            await self._run(self._attach_user_state, festival.id, drinks)
            self._all_drinks = drinks
            self._apply_filters_and_sort()
            self.error = None
            self.last_drinks_refresh = self.clock()
        except Exception as exc:
            logger.warning("Drink load failed for %s: %s", festival.id, exc)
            self.last_drinks_refresh = None
            self.error = user_friendly_message(exc)
            self._all_drinks = []
            self._filtered_drinks = []
        finally:
            self.is_loading = False
            self._notify()

    def _attach_user_state(self, festival_id: str, drinks: list[Drink]) -> None:
        favorites = self.favorites.get_favorites(festival_id)
        ratings = self.ratings.get_ratings(festival_id)
        for drink in drinks:
            _project_favorite(drink, favorites.get(drink.id))
            drink.rating = ratings.get(drink.id)

    async def set_festival(self, festival: Festival, *, persist: bool = True) -> None:
        if self._current_festival is not None and self._current_festival.id == festival.id:
            return
        self._current_festival = festival
        self.selected_category = None
        self.selected_styles = frozenset()
        self.search_query = ""
        self._all_drinks = []
        self._filtered_drinks = []
        self.is_loading = True
        self.error = None
        self._notify()
        if persist:
            await self._run(self.selection.set_selected_festival_id, festival.id)
        await self._load_drinks_internal()

    async def refresh_if_stale(self) -> None:
        if self.is_loading or self.is_festivals_loading:
            return
        if self.is_festivals_data_stale:
            await self.load_festivals()
        if self.is_drinks_data_stale:
            await self.load_drinks()

    # filter and sort selections

    def set_category(self, category: str | None) -> None:
        self.selected_category = category
        # style options depend on the category
        self.selected_styles = frozenset()
        self._apply_filters_and_sort()
        self._notify()

    def toggle_style(self, style: str) -> None:
        if style in self.selected_styles:
            self.selected_styles = self.selected_styles - {style}
        else:
            self.selected_styles = self.selected_styles | {style}
        self._apply_filters_and_sort()
        self._notify()

    def clear_styles(self) -> None:
        self.selected_styles = frozenset()
        self._apply_filters_and_sort()
        self._notify()

    def set_sort(self, sort: DrinkSort) -> None:
        self.current_sort = DrinkSort(sort)
        self._apply_filters_and_sort()
        self._notify()

    def set_search_query(self, query: str) -> None:
        self.search_query = query
        self._apply_filters_and_sort()
        self._notify()

    def set_show_favorites_only(self, value: bool) -> None:
        self.show_favorites_only = value
        self._apply_filters_and_sort()
        self._notify()

    async def set_hide_unavailable(self, value: bool) -> None:
        self.hide_unavailable = value
        self._apply_filters_and_sort()
        self._notify()
        await self._run(self.settings.set_hide_unavailable, value)

    async def set_theme_mode(self, mode: ThemeMode) -> None:
        self.theme_mode = ThemeMode(mode)
        self._notify()
        await self._run(self.settings.set_theme_mode, self.theme_mode)

    def _apply_filters_and_sort(self) -> None:
        filtered = apply_all_filters(
            self._all_drinks,
            category=self.selected_category,
            styles=self.selected_styles,
            favorites_only=self.show_favorites_only,
            hide_unavailable=self.hide_unavailable,
            search_query=self.search_query,
        )
        self._filtered_drinks = sort_drinks(filtered, self.current_sort)

    # per-drink user state

    async def toggle_favorite(self, drink: Drink) -> bool:
        is_favorite = await self._run(self.favorites.toggle_favorite, drink.festival_id, drink.id)
        item = await self._run(self.favorites.get_favorite_item, drink.festival_id, drink.id)
        _project_favorite(drink, item)
        self._after_favorites_change()
        return is_favorite

    async def mark_as_tasted(self, drink: Drink) -> None:
        item = await self._run(self.favorites.mark_as_tasted, drink.festival_id, drink.id)
        _project_favorite(drink, item)
        self._after_favorites_change()

    async def delete_try(self, drink: Drink, timestamp: datetime) -> None:
        await self._run(self.favorites.delete_try, drink.festival_id, drink.id, timestamp)
        item = await self._run(self.favorites.get_favorite_item, drink.festival_id, drink.id)
        _project_favorite(drink, item)
        self._after_favorites_change()

    async def update_notes(self, drink: Drink, notes: str | None) -> None:
        await self._run(self.favorites.update_notes, drink.festival_id, drink.id, notes)
        self._notify()

    async def set_rating(self, drink: Drink, rating: int | None) -> None:
        """Rate a drink 1-5, or clear its rating with ``None``.

        Raises:
            ValueError: If the rating is outside 1-5; nothing is changed.
        """
        if rating is None:
            await self._run(self.ratings.remove_rating, drink.festival_id, drink.id)
        else:
            await self._run(self.ratings.set_rating, drink.festival_id, drink.id, rating)
        drink.rating = rating
        self._notify()

    def _after_favorites_change(self) -> None:
        if self.show_favorites_only:
            self._apply_filters_and_sort()
        self._notify()


def _project_favorite(drink: Drink, item: FavoriteItem | None) -> None:
    drink.is_favorite = item is not None
    drink.favorite_status = item.status if item is not None else None
    drink.try_count = len(item.tries) if item is not None else 0
