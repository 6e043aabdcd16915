"""Per-festival favorites, ratings and app settings."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from enum import Enum

from beerfest.ingest.models import FavoriteItem, FavoriteStatus
from beerfest.store.kv import KeyValueStore
from beerfest.utils.dates import epoch_millis, now_in_tz

logger = logging.getLogger(__name__)

FAVORITES_KEY = "favorites"
RATINGS_KEY = "ratings"
SELECTED_FESTIVAL_KEY = "selected_festival_id"
HIDE_UNAVAILABLE_KEY = "hideUnavailable"
THEME_MODE_KEY = "themeMode"

MIN_RATING = 1
MAX_RATING = 5

Clock = Callable[[], datetime]


class ThemeMode(str, Enum):
    SYSTEM = "system"
    LIGHT = "light"
    DARK = "dark"


def _load_json_map(kv: KeyValueStore, key: str) -> dict | None:
    data = kv.get_string(key)
    if not data:
        return None
    try:
        parsed = json.loads(data)
    except ValueError:
        logger.warning("Corrupt JSON under %s; ignoring", key)
        return None
    if not isinstance(parsed, dict):
        logger.warning("Unexpected payload under %s; ignoring", key)
        return None
    return parsed


class FavoritesStore:
    """The festival log: drinks a user wants to try or has tasted."""

    def __init__(self, kv: KeyValueStore, *, clock: Clock = now_in_tz) -> None:
        self.kv = kv
        self.clock = clock

    @staticmethod
    def _key(festival_id: str) -> str:
        return f"{FAVORITES_KEY}_{festival_id}"

    def get_favorites(self, festival_id: str) -> dict[str, FavoriteItem]:
        raw = _load_json_map(self.kv, self._key(festival_id))
        if raw is None:
            return {}
        try:
            return {drink_id: FavoriteItem.from_json(item) for drink_id, item in raw.items()}
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Corrupt favorites for %s: %s", festival_id, exc)
            return {}

    def save_favorites(self, festival_id: str, favorites: dict[str, FavoriteItem]) -> None:
        payload = {drink_id: item.to_json() for drink_id, item in favorites.items()}
        self.kv.set_string(self._key(festival_id), json.dumps(payload))

    def _new_item(self, drink_id: str, status: FavoriteStatus, tries: list[datetime]) -> FavoriteItem:
        now = self.clock()
        return FavoriteItem(id=drink_id, status=status, tries=tries, created_at=now, updated_at=now)

    def add_favorite(self, festival_id: str, drink_id: str) -> None:
        favorites = self.get_favorites(festival_id)
        favorites[drink_id] = self._new_item(drink_id, FavoriteStatus.WANT_TO_TRY, [])
        self.save_favorites(festival_id, favorites)

    def remove_favorite(self, festival_id: str, drink_id: str) -> None:
        favorites = self.get_favorites(festival_id)
        favorites.pop(drink_id, None)
        self.save_favorites(festival_id, favorites)

    def toggle_favorite(self, festival_id: str, drink_id: str) -> bool:
        """Flip membership in the log and return the new state."""
        favorites = self.get_favorites(festival_id)
        was_favorite = drink_id in favorites
        if was_favorite:
            del favorites[drink_id]
        else:
            favorites[drink_id] = self._new_item(drink_id, FavoriteStatus.WANT_TO_TRY, [])
        self.save_favorites(festival_id, favorites)
        return not was_favorite

    def is_favorite(self, festival_id: str, drink_id: str) -> bool:
        return drink_id in self.get_favorites(festival_id)

    def get_favorite_item(self, festival_id: str, drink_id: str) -> FavoriteItem | None:
        return self.get_favorites(festival_id).get(drink_id)

    def mark_as_tasted(self, festival_id: str, drink_id: str) -> FavoriteItem:
        favorites = self.get_favorites(festival_id)
        existing = favorites.get(drink_id)
        now = self.clock()
        if existing is None:
            item = self._new_item(drink_id, FavoriteStatus.TASTED, [now])
        else:
            item = replace(existing, status=FavoriteStatus.TASTED, tries=[*existing.tries, now], updated_at=now)
        favorites[drink_id] = item
        self.save_favorites(festival_id, favorites)
        return item

    def delete_try(self, festival_id: str, drink_id: str, timestamp: datetime) -> None:
        favorites = self.get_favorites(festival_id)
        existing = favorites.get(drink_id)
        if existing is None:
            return
        target = epoch_millis(timestamp)
        remaining = [ts for ts in existing.tries if epoch_millis(ts) != target]
        status = existing.status if remaining else FavoriteStatus.WANT_TO_TRY
        favorites[drink_id] = replace(existing, status=status, tries=remaining, updated_at=self.clock())
        self.save_favorites(festival_id, favorites)

    def update_notes(self, festival_id: str, drink_id: str, notes: str | None) -> None:
        favorites = self.get_favorites(festival_id)
        existing = favorites.get(drink_id)
        if existing is None:
            return
        favorites[drink_id] = replace(existing, notes=notes, updated_at=self.clock())
        self.save_favorites(festival_id, favorites)

    def get_try_count(self, festival_id: str, drink_id: str) -> int:
        item = self.get_favorite_item(festival_id, drink_id)
        return len(item.tries) if item else 0


class RatingsStore:
    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    @staticmethod
    def _key(festival_id: str) -> str:
        return f"{RATINGS_KEY}_{festival_id}"

    def get_ratings(self, festival_id: str) -> dict[str, int]:
        raw = _load_json_map(self.kv, self._key(festival_id)) or {}
        return {
            str(drink_id): value
            for drink_id, value in raw.items()
            if isinstance(value, int) and not isinstance(value, bool) and MIN_RATING <= value <= MAX_RATING
        }

    def get_rating(self, festival_id: str, drink_id: str) -> int | None:
        return self.get_ratings(festival_id).get(drink_id)

    def set_rating(self, festival_id: str, drink_id: str, rating: int) -> None:
        if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
            raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING} inclusive, got {rating!r}")
        ratings = self.get_ratings(festival_id)
        ratings[drink_id] = rating
        self.kv.set_string(self._key(festival_id), json.dumps(ratings))

    def remove_rating(self, festival_id: str, drink_id: str) -> None:
        ratings = self.get_ratings(festival_id)
        if ratings.pop(drink_id, None) is not None:
            self.kv.set_string(self._key(festival_id), json.dumps(ratings))


class FestivalSelectionStore:
    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    def get_selected_festival_id(self) -> str | None:
        return self.kv.get_string(SELECTED_FESTIVAL_KEY)

    def set_selected_festival_id(self, festival_id: str) -> None:
        self.kv.set_string(SELECTED_FESTIVAL_KEY, festival_id)

    def clear_selected_festival(self) -> None:
        self.kv.remove(SELECTED_FESTIVAL_KEY)


class SettingsStore:
    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    def get_hide_unavailable(self) -> bool:
        return bool(self.kv.get_bool(HIDE_UNAVAILABLE_KEY))

    def set_hide_unavailable(self, value: bool) -> None:
        self.kv.set_bool(HIDE_UNAVAILABLE_KEY, value)

    def get_theme_mode(self) -> ThemeMode:
        value = self.kv.get_string(THEME_MODE_KEY)
        try:
            return ThemeMode(value)
        except ValueError:
            return ThemeMode.SYSTEM

    def set_theme_mode(self, mode: ThemeMode) -> None:
        self.kv.set_string(THEME_MODE_KEY, ThemeMode(mode).value)
