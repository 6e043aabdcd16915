"""Local preference storage."""

from beerfest.store.kv import KeyValueStore
from beerfest.store.preferences import (
    FavoritesStore,
    FestivalSelectionStore,
    RatingsStore,
    SettingsStore,
    ThemeMode,
)

__all__ = [
    "KeyValueStore",
    "FavoritesStore",
    "RatingsStore",
    "FestivalSelectionStore",
    "SettingsStore",
    "ThemeMode",
]
