from datetime import datetime

import pendulum
import pytest

from beerfest.db.session import create_engine_for_url
from beerfest.ingest.models import Drink, Festival, Producer, Product
from beerfest.store import KeyValueStore

BASE_URL = "https://data.example.com/cbf2025"
FESTIVALS_URL = "https://data.example.com/festivals.json"


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now.add(**kwargs)


@pytest.fixture()
def engine(tmp_path):
    engine = create_engine_for_url(f"sqlite:///{tmp_path / 'prefs.db'}")
    yield engine
    engine.dispose()


@pytest.fixture()
def kv(engine):
    return KeyValueStore(engine)


@pytest.fixture()
def clock():
    return FakeClock(pendulum.datetime(2025, 5, 20, 12, 0, tz="Europe/London"))


@pytest.fixture()
def festival():
    return Festival(
        id="cbf2025",
        name="Cambridge Beer Festival 2025",
        data_base_url=BASE_URL,
        start_date=pendulum.datetime(2025, 5, 19, tz="Europe/London"),
        end_date=pendulum.datetime(2025, 5, 24, tz="Europe/London"),
        available_beverage_types=["beer", "cider"],
        is_active=True,
    )


def make_drink(
    drink_id,
    name=None,
    *,
    brewery_id="b1",
    brewery="Oakham",
    category="beer",
    style=None,
    abv=4.0,
    notes=None,
    status_text=None,
    is_favorite=False,
    festival_id="cbf2025",
):
    product = Product(
        id=drink_id,
        name=name or f"Drink {drink_id}",
        category=category,
        style=style,
        abv=abv,
        notes=notes,
        status_text=status_text,
    )
    producer = Producer(id=brewery_id, name=brewery, location="Peterborough", products=[product])
    return Drink(product=product, producer=producer, festival_id=festival_id, is_favorite=is_favorite)


@pytest.fixture()
def drinks():
    return [
        make_drink("1", "Citra", brewery_id="b1", brewery="Oakham", style="Pale Ale", abv=4.2, notes="Grapefruit and lychee"),
        make_drink("2", "Jeffrey Hudson Bitter", brewery_id="b1", brewery="Oakham", style="Bitter", abv=3.8, status_text="Sold out"),
        make_drink("3", "Old Peculier", brewery_id="b2", brewery="Theakston", style="Old Ale", abv=5.6, status_text="Plenty left", is_favorite=True),
        make_drink("4", "Dry Cider", brewery_id="b3", brewery="Cromwell", category="cider", style="Dry", abv=6.0, status_text="Not yet available"),
        make_drink("5", "Perry Good", brewery_id="b3", brewery="Cromwell", category="cider", style=None, abv=5.0, status_text="A little remaining"),
        make_drink("6", "Landlord", brewery_id="b4", brewery="Timothy Taylor", style="Bitter", abv=4.3, is_favorite=True),
    ]


def catalog_payload(*producers):
    return {"producers": list(producers)}


def producer_payload(producer_id, name, *products, **extra):
    return {"id": producer_id, "name": name, "location": "Cambridge", "products": list(products), **extra}
