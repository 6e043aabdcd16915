"""Create the local preferences table."""

from __future__ import annotations

import sys

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from beerfest.db.schema import create_schema
from beerfest.db.session import create_engine_from_env


def main() -> None:
    load_dotenv()
    engine = create_engine_from_env()
    try:
        create_schema(engine)
    except SQLAlchemyError as exc:
        print(f"Schema creation failed: {exc}", file=sys.stderr)
        sys.exit(2)
    print("Preferences table ready")


if __name__ == "__main__":
    main()
