"""Print category and style counts for a festival's catalog."""

from __future__ import annotations

import asyncio
import logging
import sys

from dotenv import load_dotenv

from beerfest.db.session import create_engine_from_env
from beerfest.state import FestivalState
from beerfest.store import KeyValueStore


async def main(festival_id: str | None = None) -> None:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    state = FestivalState(KeyValueStore(create_engine_from_env()))
    try:
        await state.initialize()
        if state.festivals_error:
            print("Registry unavailable:", state.festivals_error)
        if festival_id:
            festival = state.get_festival_by_id(festival_id)
            if festival is None:
                raise SystemExit(f"Unknown festival {festival_id}")
            await state.set_festival(festival, persist=False)
        else:
            await state.load_drinks()
        if state.error:
            raise SystemExit(state.error)
        print(f"{state.current_festival.name}: {len(state.all_drinks)} drinks")
        for category, count in sorted(state.category_counts.items()):
            print(f"  {category}: {count}")
        favorites = state.favorite_drinks
        if favorites:
            print(f"{len(favorites)} in your festival log")
    finally:
        await state.close()


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))
