"""Key/value persistence on top of the preferences table."""

from __future__ import annotations

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Engine

from beerfest.db.schema import create_schema, preferences


class KeyValueStore:
    """String-valued settings keyed by name, in the spirit of a mobile prefs store."""

    def __init__(self, engine: Engine, *, create: bool = True) -> None:
        self.engine = engine
        if create:
            create_schema(engine)

    def get_string(self, key: str) -> str | None:
        with self.engine.connect() as conn:
            return conn.execute(
                select(preferences.c.value).where(preferences.c.key == key)
            ).scalar_one_or_none()

    def set_string(self, key: str, value: str) -> None:
        with self.engine.begin() as conn:
            result = conn.execute(
                update(preferences).where(preferences.c.key == key).values(value=value)
            )
            if result.rowcount == 0:
                conn.execute(insert(preferences).values(key=key, value=value))

    def get_int(self, key: str) -> int | None:
        value = self.get_string(key)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    def set_int(self, key: str, value: int) -> None:
        self.set_string(key, str(int(value)))

    def get_bool(self, key: str) -> bool | None:
        value = self.get_string(key)
        if value == "true":
            return True
        if value == "false":
            return False
        return None

    def set_bool(self, key: str, value: bool) -> None:
        self.set_string(key, "true" if value else "false")

    def contains(self, key: str) -> bool:
        return self.get_string(key) is not None

    def remove(self, key: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(preferences).where(preferences.c.key == key))

    def keys(self, prefix: str = "") -> list[str]:
        query = select(preferences.c.key).order_by(preferences.c.key)
        if prefix:
            query = query.where(preferences.c.key.startswith(prefix, autoescape=True))
        with self.engine.connect() as conn:
            return list(conn.execute(query).scalars())
