"""Catalog data models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

from beerfest.utils.dates import format_timestamp, parse_date, parse_timestamp

DEFAULT_CATEGORY = "beer"
DEFAULT_DISPENSE = "cask"


class AvailabilityStatus(str, Enum):
    PLENTY = "plenty"
    LOW = "low"
    OUT = "out"
    NOT_YET_AVAILABLE = "not_yet_available"


class FavoriteStatus(str, Enum):
    WANT_TO_TRY = "want_to_try"
    TASTED = "tasted"

    @classmethod
    def from_value(cls, value: Any) -> "FavoriteStatus":
        for status in cls:
            if status.value == value:
                return status
        return cls.WANT_TO_TRY


class FestivalStatus(str, Enum):
    LIVE = "live"
    UPCOMING = "upcoming"
    MOST_RECENT = "most_recent"
    PAST = "past"


def coerce_abv(value: Any) -> float:
    """Return a finite, non-negative ABV; anything unusable becomes 0.0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        parsed = float(value)
    elif isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(parsed) or parsed < 0:
        return 0.0
    return parsed


def coerce_year(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def coerce_bar(value: Any) -> str | None:
    # booleans show up in some feeds as "no bar assigned"
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    return None


def coerce_allergens(value: Any) -> dict[str, int]:
    if not isinstance(value, Mapping):
        return {}
    allergens: dict[str, int] = {}
    for key, flag in value.items():
        if isinstance(flag, bool):
            allergens[str(key)] = 1 if flag else 0
        elif isinstance(flag, int):
            allergens[str(key)] = flag
        elif isinstance(flag, float) and math.isfinite(flag):
            allergens[str(key)] = int(flag)
    return allergens


def coerce_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def classify_availability(status_text: str | None) -> AvailabilityStatus | None:
    if status_text is None:
        return None
    lower = status_text.lower()
    if "sold out" in lower:
        return AvailabilityStatus.OUT
    if "not yet" in lower or "coming soon" in lower:
        return AvailabilityStatus.NOT_YET_AVAILABLE
    if "little" in lower or "nearly" in lower or "low" in lower:
        return AvailabilityStatus.LOW
    return AvailabilityStatus.PLENTY


@dataclass(slots=True)
class Product:
    id: str
    name: str
    category: str = DEFAULT_CATEGORY
    style: str | None = None
    dispense: str = DEFAULT_DISPENSE
    abv: float = 0.0
    notes: str | None = None
    status_text: str | None = None
    bar: str | None = None
    allergens: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Product":
        category = data.get("category")
        dispense = data.get("dispense")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            category=str(category) if category is not None else DEFAULT_CATEGORY,
            style=coerce_optional_str(data.get("style")),
            dispense=str(dispense) if dispense is not None else DEFAULT_DISPENSE,
            abv=coerce_abv(data.get("abv")),
            notes=coerce_optional_str(data.get("notes")),
            status_text=coerce_optional_str(data.get("status_text")),
            bar=coerce_bar(data.get("bar")),
            allergens=coerce_allergens(data.get("allergens")),
        )

    @property
    def availability_status(self) -> AvailabilityStatus | None:
        return classify_availability(self.status_text)

    @property
    def allergen_text(self) -> str | None:
        names = [key[0].upper() + key[1:] for key, flag in self.allergens.items() if flag == 1 and key]
        if not names:
            return None
        return ", ".join(names)


@dataclass(slots=True)
class Producer:
    id: str
    name: str
    location: str = ""
    year_founded: int | None = None
    notes: str | None = None
    products: list[Product] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Producer":
        products = data.get("products") or []
        location = data.get("location")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            location=str(location) if location is not None else "",
            year_founded=coerce_year(data.get("year_founded")),
            notes=coerce_optional_str(data.get("notes")),
            products=[Product.from_json(item) for item in products],
        )


@dataclass(slots=True)
class Drink:
    """A product bound to its producer and festival, plus per-user state."""

    product: Product
    producer: Producer
    festival_id: str
    is_favorite: bool = False
    rating: int | None = None
    favorite_status: FavoriteStatus | None = None
    try_count: int = 0

    @property
    def key(self) -> tuple[str, str]:
        return (self.festival_id, self.product.id)

    @property
    def id(self) -> str:
        return self.product.id

    @property
    def name(self) -> str:
        return self.product.name

    @property
    def brewery_name(self) -> str:
        return self.producer.name

    @property
    def brewery_location(self) -> str:
        return self.producer.location

    @property
    def category(self) -> str:
        return self.product.category

    @property
    def style(self) -> str | None:
        return self.product.style

    @property
    def dispense(self) -> str:
        return self.product.dispense

    @property
    def abv(self) -> float:
        return self.product.abv

    @property
    def notes(self) -> str | None:
        return self.product.notes

    @property
    def status_text(self) -> str | None:
        return self.product.status_text

    @property
    def bar(self) -> str | None:
        return self.product.bar

    @property
    def allergens(self) -> dict[str, int]:
        return self.product.allergens

    @property
    def availability_status(self) -> AvailabilityStatus | None:
        return self.product.availability_status

    @property
    def allergen_text(self) -> str | None:
        return self.product.allergen_text


@dataclass(slots=True)
class FavoriteItem:
    id: str
    status: FavoriteStatus
    tries: list[datetime]
    created_at: datetime
    updated_at: datetime
    notes: str | None = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "FavoriteItem":
        return cls(
            id=str(data["id"]),
            status=FavoriteStatus.from_value(data.get("status") or FavoriteStatus.WANT_TO_TRY.value),
            tries=[parse_timestamp(value) for value in data.get("tries") or []],
            notes=data.get("notes"),
            created_at=parse_timestamp(data["createdAt"]),
            updated_at=parse_timestamp(data["updatedAt"]),
        )

    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "status": self.status.value,
            "tries": [format_timestamp(ts) for ts in self.tries],
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }
        if self.notes is not None:
            payload["notes"] = self.notes
        return payload


@dataclass(slots=True)
class Festival:
    id: str
    name: str
    data_base_url: str
    hashtag: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    location: str | None = None
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    description: str | None = None
    website_url: str | None = None
    hours: dict[str, str] | None = None
    available_beverage_types: list[str] = field(default_factory=lambda: [DEFAULT_CATEGORY])
    is_active: bool = False

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Festival":
        hours = data.get("hours")
        latitude = data.get("latitude")
        longitude = data.get("longitude")
        beverage_types = data.get("available_beverage_types")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            data_base_url=str(data["data_base_url"]).rstrip("/"),
            hashtag=data.get("hashtag"),
            start_date=parse_date(data.get("start_date")),
            end_date=parse_date(data.get("end_date")),
            location=data.get("location"),
            address=data.get("address"),
            latitude=float(latitude) if latitude is not None else None,
            longitude=float(longitude) if longitude is not None else None,
            description=data.get("description"),
            website_url=data.get("website_url"),
            hours={str(k): str(v) for k, v in hours.items()} if isinstance(hours, Mapping) else None,
            available_beverage_types=[str(t) for t in beverage_types] if beverage_types else [DEFAULT_CATEGORY],
            is_active=bool(data.get("is_active", False)),
        )

    def beverage_url(self, category: str) -> str:
        return f"{self.data_base_url}/{category}.json"

    @property
    def formatted_dates(self) -> str:
        if self.start_date is None:
            return ""
        start = self.start_date
        end = self.end_date
        if end is None:
            return f"{start.strftime('%b')} {start.day}, {start.year}"
        if start.month == end.month and start.year == end.year:
            return f"{start.strftime('%b')} {start.day}-{end.day}, {start.year}"
        return f"{start.strftime('%b')} {start.day} - {end.strftime('%b')} {end.day}, {start.year}"

    def _first_day(self) -> datetime | None:
        if self.start_date is None:
            return None
        return self.start_date.replace(hour=0, minute=0, second=0, microsecond=0)

    def _last_moment(self) -> datetime | None:
        last = self.end_date or self.start_date
        if last is None:
            return None
        return last.replace(hour=23, minute=59, second=59, microsecond=0)

    def is_live(self, now: datetime) -> bool:
        start, end = self._first_day(), self._last_moment()
        if start is None or end is None:
            return False
        return start <= now <= end

    def is_upcoming(self, now: datetime) -> bool:
        start = self._first_day()
        return start is not None and now < start

    def has_ended(self, now: datetime) -> bool:
        end = self._last_moment()
        return end is not None and now > end

    def basic_status(self, now: datetime) -> FestivalStatus:
        if self.is_live(now):
            return FestivalStatus.LIVE
        if self.is_upcoming(now):
            return FestivalStatus.UPCOMING
        return FestivalStatus.PAST


@dataclass(slots=True)
class FestivalsResponse:
    festivals: list[Festival]
    default_festival_id: str
    version: str = "1.0.0"
    last_updated: datetime | None = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "FestivalsResponse":
        last_updated = data.get("last_updated")
        try:
            updated = parse_timestamp(last_updated) if last_updated else None
        except ValueError:
            updated = None
        return cls(
            festivals=[Festival.from_json(item) for item in data.get("festivals") or []],
            default_festival_id=str(data.get("default_festival_id", "")),
            version=str(data.get("version") or "1.0.0"),
            last_updated=updated,
        )

    @property
    def default_festival(self) -> Festival | None:
        if not self.festivals:
            return None
        for festival in self.festivals:
            if festival.id == self.default_festival_id:
                return festival
        return self.festivals[0]

    @property
    def active_festivals(self) -> list[Festival]:
        return [festival for festival in self.festivals if festival.is_active]
