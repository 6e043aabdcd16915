"""Festival drink catalog client."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any

import httpx

from beerfest.errors import CatalogError
from beerfest.ingest.models import Drink, Festival, Producer

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = float(os.environ.get("CATALOG_TIMEOUT", 30.0))


def parse_drinks(data: dict[str, Any], festival_id: str) -> list[Drink]:
    producers = data.get("producers") or []
    drinks: list[Drink] = []
    for item in producers:
        producer = Producer.from_json(item)
        for product in producer.products:
            drinks.append(Drink(product=product, producer=producer, festival_id=festival_id))
    return drinks


class CatalogClient:
    def __init__(self, *, session: httpx.AsyncClient | None = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout
        self.session = session or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self.session.aclose()

    async def fetch_drinks(self, festival: Festival, category: str) -> list[Drink]:
        url = festival.beverage_url(category)
        logger.info("Fetching %s for %s", category, festival.id)
        response = await self.session.get(url, timeout=self.timeout)
        if response.status_code == 404:
            logger.info("No %s list for %s", category, festival.id)
            return []
        if response.status_code != 200:
            raise CatalogError(f"Failed to fetch {category}: {response.status_code}", response.status_code)
        # the feed does not always declare a charset, so never trust response.text
        data = json.loads(response.content.decode("utf-8"))
        return parse_drinks(data, festival.id)

    async def fetch_all_drinks(self, festival: Festival) -> list[Drink]:
        categories = list(festival.available_beverage_types)
        results = await asyncio.gather(
            *(self.fetch_drinks(festival, category) for category in categories),
            return_exceptions=True,
        )
        drinks: list[Drink] = []
        errors: dict[str, Exception] = {}
        for category, result in zip(categories, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning("Dropping %s for %s: %s", category, festival.id, result)
                errors[category] = result
                continue
            drinks.extend(result)
        if not drinks and errors:
            raise _aggregate_error(errors)
        logger.info("Loaded %s drinks for %s", len(drinks), festival.id)
        return drinks


def _aggregate_error(errors: dict[str, Exception]) -> Exception:
    failures = list(errors.values())
    kinds = {type(exc) for exc in failures}
    # one shared non-HTTP cause (e.g. every request timed out) is re-raised as is
    if len(failures) == 1 or (len(kinds) == 1 and not issubclass(next(iter(kinds)), CatalogError)):
        return failures[0]
    statuses = {getattr(exc, "status_code", None) for exc in failures}
    status_code = statuses.pop() if len(statuses) == 1 else None
    details = "\n".join(f"{category}: {str(exc) or type(exc).__name__}" for category, exc in errors.items())
    return CatalogError(f"Failed to load any drinks.\n\nDetails:\n{details}", status_code)
