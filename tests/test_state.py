import httpx
import pytest
import respx

from beerfest.errors import FESTIVALS_NOT_FOUND_MESSAGE, SERVER_ERROR_MESSAGE
from beerfest.ingest.catalog import CatalogClient
from beerfest.ingest.festivals import FestivalClient
from beerfest.ingest.models import FavoriteStatus
from beerfest.logic.sorting import DrinkSort
from beerfest.state import FestivalState
from beerfest.store import FavoritesStore, RatingsStore, ThemeMode

from conftest import BASE_URL, FESTIVALS_URL, catalog_payload, producer_payload

OTHER_URL = "https://data.example.com/cbf2024"

REGISTRY = {
    "festivals": [
        {
            "id": "cbf2025",
            "name": "Cambridge Beer Festival 2025",
            "data_base_url": BASE_URL,
            "start_date": "2025-05-19",
            "end_date": "2025-05-24",
            "available_beverage_types": ["beer", "cider"],
            "is_active": True,
        },
        {
            "id": "cbf2024",
            "name": "Cambridge Beer Festival 2024",
            "data_base_url": OTHER_URL,
            "start_date": "2024-05-20",
            "end_date": "2024-05-25",
            "available_beverage_types": ["beer"],
        },
    ],
    "default_festival_id": "cbf2025",
}

BEERS = catalog_payload(
    producer_payload(
        "b1",
        "Oakham",
        {"id": "1", "name": "Citra", "style": "Pale Ale", "abv": 4.2},
        {"id": "2", "name": "Bishops Farewell", "style": "Bitter", "abv": 4.6, "status_text": "Sold out"},
    ),
    producer_payload("b2", "Milton", {"id": "3", "name": "Pegasus", "style": "Bitter", "abv": 4.3}),
)
CIDERS = catalog_payload(producer_payload("c1", "Cromwell", {"id": "10", "name": "Scrumpy", "category": "cider", "abv": 6}))
OLD_BEERS = catalog_payload(producer_payload("b9", "Elgood's", {"id": "1", "name": "Black Dog", "style": "Mild", "abv": 3.6}))


def build_state(kv, clock, session):
    return FestivalState(
        kv,
        catalog=CatalogClient(session=session),
        festival_client=FestivalClient(session=session, url=FESTIVALS_URL),
        clock=clock,
    )


def mock_feeds(router, beer_status=200):
    routes = {
        "registry": router.get(FESTIVALS_URL).mock(return_value=httpx.Response(200, json=REGISTRY)),
        "beer": router.get(f"{BASE_URL}/beer.json").mock(
            return_value=httpx.Response(beer_status, json=BEERS if beer_status == 200 else None)
        ),
        "cider": router.get(f"{BASE_URL}/cider.json").mock(return_value=httpx.Response(200, json=CIDERS)),
        "old_beer": router.get(f"{OTHER_URL}/beer.json").mock(return_value=httpx.Response(200, json=OLD_BEERS)),
    }
    return routes


@pytest.mark.asyncio
async def test_initialize_and_load(kv, clock):
    async with respx.mock(assert_all_called=False) as router:
        mock_feeds(router)
        async with httpx.AsyncClient() as session:
            state = build_state(kv, clock, session)
            await state.initialize()
            await state.load_drinks()

    assert state.is_initialized
    assert state.current_festival.id == "cbf2025"
    assert [f.id for f in state.festivals] == ["cbf2025", "cbf2024"]
    assert state.error is None
    assert [d.name for d in state.drinks] == ["Bishops Farewell", "Citra", "Pegasus", "Scrumpy"]
    assert state.available_categories == ["beer", "cider"]
    assert state.category_counts == {"beer": 3, "cider": 1}
    assert not state.is_drinks_data_stale


@pytest.mark.asyncio
async def test_user_state_is_reattached_after_refetch(kv, clock):
    FavoritesStore(kv, clock=clock).mark_as_tasted("cbf2025", "3")
    RatingsStore(kv).set_rating("cbf2025", "1", 5)

    async with respx.mock(assert_all_called=False) as router:
        mock_feeds(router)
        async with httpx.AsyncClient() as session:
            state = build_state(kv, clock, session)
            await state.initialize()
            await state.load_drinks()
            await state.toggle_favorite(state.get_drink_by_id("1"))
            await state.load_drinks()

    citra = state.get_drink_by_id("1")
    pegasus = state.get_drink_by_id("3")
    assert citra.rating == 5
    assert citra.is_favorite
    assert citra.favorite_status is FavoriteStatus.WANT_TO_TRY
    assert pegasus.is_favorite
    assert pegasus.favorite_status is FavoriteStatus.TASTED
    assert pegasus.try_count == 1
    assert [d.id for d in state.favorite_drinks] == ["1", "3"]


@pytest.mark.asyncio
async def test_filters_and_sort_drive_visible_drinks(kv, clock):
    async with respx.mock(assert_all_called=False) as router:
        mock_feeds(router)
        async with httpx.AsyncClient() as session:
            state = build_state(kv, clock, session)
            await state.initialize()
            await state.load_drinks()

            state.set_category("beer")
            assert state.available_styles == ["Bitter", "Pale Ale"]
            state.toggle_style("Bitter")
            assert [d.id for d in state.drinks] == ["2", "3"]

            await state.set_hide_unavailable(True)
            assert [d.id for d in state.drinks] == ["3"]

            state.set_category("cider")
            assert state.selected_styles == frozenset()
            assert [d.id for d in state.drinks] == ["10"]

            state.set_category(None)
            state.set_sort(DrinkSort.ABV_HIGH)
            assert [d.id for d in state.drinks] == ["10", "3", "1"]

            state.set_search_query("OAK")
            assert [d.id for d in state.drinks] == ["1"]

    assert state.settings.get_hide_unavailable() is True


@pytest.mark.asyncio
async def test_favorites_only_updates_when_favorites_change(kv, clock):
    async with respx.mock(assert_all_called=False) as router:
        mock_feeds(router)
        async with httpx.AsyncClient() as session:
            state = build_state(kv, clock, session)
            await state.initialize()
            await state.load_drinks()
            state.set_show_favorites_only(True)
            assert state.drinks == []

            assert await state.toggle_favorite(state.get_drink_by_id("10")) is True
            assert [d.id for d in state.drinks] == ["10"]
            assert await state.toggle_favorite(state.get_drink_by_id("10")) is False
            assert state.drinks == []


@pytest.mark.asyncio
async def test_server_error_sets_message(kv, clock):
    async with respx.mock(assert_all_called=False) as router:
        router.get(FESTIVALS_URL).mock(return_value=httpx.Response(200, json=REGISTRY))
        router.get(f"{BASE_URL}/beer.json").mock(return_value=httpx.Response(503))
        router.get(f"{BASE_URL}/cider.json").mock(return_value=httpx.Response(503))
        async with httpx.AsyncClient() as session:
            state = build_state(kv, clock, session)
            await state.initialize()
            await state.load_drinks()

    assert state.error == SERVER_ERROR_MESSAGE
    assert state.drinks == []
    assert not state.is_loading
    assert state.is_drinks_data_stale


@pytest.mark.asyncio
async def test_partial_failure_keeps_other_categories(kv, clock):
    async with respx.mock(assert_all_called=False) as router:
        mock_feeds(router, beer_status=500)
        async with httpx.AsyncClient() as session:
            state = build_state(kv, clock, session)
            await state.initialize()
            await state.load_drinks()

    assert state.error is None
    assert [d.id for d in state.drinks] == ["10"]


@pytest.mark.asyncio
async def test_registry_failure_falls_back_to_bundled_festival(kv, clock, festival):
    async with respx.mock(assert_all_called=False) as router:
        router.get(FESTIVALS_URL).mock(return_value=httpx.Response(404))
        router.get(f"{BASE_URL}/beer.json").mock(return_value=httpx.Response(200, json=BEERS))
        router.get(f"{BASE_URL}/cider.json").mock(return_value=httpx.Response(404))
        async with httpx.AsyncClient() as session:
            state = FestivalState(
                kv,
                catalog=CatalogClient(session=session),
                festival_client=FestivalClient(session=session, url=FESTIVALS_URL),
                default_festivals=[festival],
                clock=clock,
            )
            await state.initialize()
            await state.load_drinks()

    assert state.festivals_error == FESTIVALS_NOT_FOUND_MESSAGE
    assert not state.has_festivals
    assert state.current_festival.id == "cbf2025"
    assert len(state.all_drinks) == 3


@pytest.mark.asyncio
async def test_set_festival_persists_and_reloads(kv, clock):
    async with respx.mock(assert_all_called=False) as router:
        mock_feeds(router)
        async with httpx.AsyncClient() as session:
            state = build_state(kv, clock, session)
            await state.initialize()
            await state.load_drinks()
            state.set_category("beer")
            state.set_search_query("citra")

            await state.set_festival(state.get_festival_by_id("cbf2024"))

            assert state.selected_category is None
            assert state.search_query == ""
            assert [d.name for d in state.drinks] == ["Black Dog"]
            assert state.drinks[0].festival_id == "cbf2024"

            restarted = build_state(kv, clock, session)
            await restarted.initialize()
            assert restarted.current_festival.id == "cbf2024"


@pytest.mark.asyncio
async def test_refresh_if_stale(kv, clock):
    async with respx.mock(assert_all_called=False) as router:
        routes = mock_feeds(router)
        async with httpx.AsyncClient() as session:
            state = build_state(kv, clock, session)
            await state.initialize()
            await state.load_drinks()
            assert routes["beer"].call_count == 1

            await state.refresh_if_stale()
            assert routes["beer"].call_count == 1

            clock.advance(hours=2)
            await state.refresh_if_stale()
            assert routes["beer"].call_count == 2
            assert routes["registry"].call_count == 1

            clock.advance(days=1)
            state.is_loading = True
            await state.refresh_if_stale()
            assert routes["beer"].call_count == 2
            assert routes["registry"].call_count == 1


@pytest.mark.asyncio
async def test_failed_reload_marks_data_stale(kv, clock):
    async with respx.mock(assert_all_called=False) as router:
        routes = mock_feeds(router)
        async with httpx.AsyncClient() as session:
            state = build_state(kv, clock, session)
            await state.initialize()
            await state.load_drinks()
            assert not state.is_drinks_data_stale
            assert not state.is_festivals_data_stale

            routes["registry"].mock(return_value=httpx.Response(503))
            routes["beer"].mock(return_value=httpx.Response(503))
            routes["cider"].mock(return_value=httpx.Response(503))
            clock.advance(minutes=5)
            await state.load_festivals()
            await state.load_drinks()

            assert state.error == SERVER_ERROR_MESSAGE
            assert state.all_drinks == []
            assert state.is_drinks_data_stale
            assert state.is_festivals_data_stale

            routes["registry"].mock(return_value=httpx.Response(200, json=REGISTRY))
            routes["beer"].mock(return_value=httpx.Response(200, json=BEERS))
            routes["cider"].mock(return_value=httpx.Response(200, json=CIDERS))
            await state.refresh_if_stale()

            assert routes["beer"].call_count == 3
            assert routes["registry"].call_count == 3
            assert state.error is None
            assert len(state.all_drinks) == 4
            assert not state.is_drinks_data_stale


@pytest.mark.asyncio
async def test_subscribers_are_notified(kv, clock):
    seen = []
    async with respx.mock(assert_all_called=False) as router:
        mock_feeds(router)
        async with httpx.AsyncClient() as session:
            state = build_state(kv, clock, session)
            unsubscribe = state.subscribe(lambda s: seen.append((s.is_loading, len(s.drinks))))
            await state.initialize()
            await state.load_drinks()
            assert (True, 0) in seen
            assert seen[-1] == (False, 4)

            unsubscribe()
            count = len(seen)
            state.set_sort(DrinkSort.NAME_DESC)
            assert len(seen) == count


@pytest.mark.asyncio
async def test_ratings_and_theme(kv, clock):
    async with respx.mock(assert_all_called=False) as router:
        mock_feeds(router)
        async with httpx.AsyncClient() as session:
            state = build_state(kv, clock, session)
            await state.initialize()
            await state.load_drinks()
            citra = state.get_drink_by_id("1")

            await state.set_rating(citra, 4)
            with pytest.raises(ValueError):
                await state.set_rating(citra, 7)
            assert citra.rating == 4
            assert state.ratings.get_rating("cbf2025", "1") == 4

            await state.set_rating(citra, None)
            assert citra.rating is None
            assert state.ratings.get_ratings("cbf2025") == {}

            await state.set_theme_mode(ThemeMode.LIGHT)
            assert state.settings.get_theme_mode() is ThemeMode.LIGHT


@pytest.mark.asyncio
async def test_similar_drinks_and_not_found(kv, clock):
    async with respx.mock(assert_all_called=False) as router:
        router.get(FESTIVALS_URL).mock(return_value=httpx.Response(200, json=REGISTRY))
        router.get(f"{BASE_URL}/beer.json").mock(return_value=httpx.Response(200, json=BEERS))
        router.get(f"{BASE_URL}/cider.json").mock(return_value=httpx.Response(200, json=CIDERS))
        async with httpx.AsyncClient() as session:
            state = build_state(kv, clock, session)
            await state.initialize()
            await state.load_drinks()
            similar = state.similar_drinks(state.get_drink_by_id("2"))
            assert [(s.drink.id, s.reason) for s in similar] == [
                ("1", "Same brewery"),
                ("3", "Same style, similar strength"),
            ]

            router.get(f"{OTHER_URL}/beer.json").mock(return_value=httpx.Response(404))
            await state.set_festival(state.get_festival_by_id("cbf2024"))

    assert state.error is None
    assert state.all_drinks == []
