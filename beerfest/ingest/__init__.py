"""Ingestion helpers."""

from __future__ import annotations

import pathlib

import yaml

from beerfest.ingest.models import Festival

FESTIVALS_PATH = pathlib.Path(__file__).with_name("festivals.yml")


def load_default_festivals(limit: int | None = None) -> list[Festival]:
    data = yaml.safe_load(FESTIVALS_PATH.read_text(encoding="utf-8"))
    festivals = [Festival.from_json(item) for item in data]
    if limit:
        return festivals[:limit]
    return festivals
