"""Preference table definition."""

from __future__ import annotations

from sqlalchemy import Column, MetaData, Table, Text
from sqlalchemy.engine import Engine

metadata = MetaData()

preferences = Table(
    "preferences",
    metadata,
    Column("key", Text, primary_key=True),
    Column("value", Text, nullable=False),
)


def create_schema(engine: Engine) -> None:
    metadata.create_all(engine)
