"""Festival registry client."""

from __future__ import annotations

import json
import logging
import os

import httpx

from beerfest.errors import FestivalServiceError
from beerfest.ingest.catalog import DEFAULT_TIMEOUT
from beerfest.ingest.models import FestivalsResponse

logger = logging.getLogger(__name__)

FESTIVALS_URL = os.environ.get(
    "FESTIVALS_URL", "https://cbf-data-proxy.richard-alcock.workers.dev/festivals.json"
)


class FestivalClient:
    def __init__(
        self,
        *,
        session: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        url: str = FESTIVALS_URL,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self.session.aclose()

    async def fetch_festivals(self) -> FestivalsResponse:
        logger.info("Fetching festival registry from %s", self.url)
        response = await self.session.get(self.url, timeout=self.timeout)
        if response.status_code != 200:
            raise FestivalServiceError(
                f"Failed to fetch festivals: {response.status_code}", response.status_code
            )
        data = json.loads(response.content.decode("utf-8"))
        registry = FestivalsResponse.from_json(data)
        logger.info("Registry lists %s festivals", len(registry.festivals))
        return registry
