"""Integration tests for the trip endpoints."""

import inspect
import uuid
from collections.abc import Generator
from typing import Any

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from tripcalc.app.api.routes.trips import get_id_generator, get_trip_repository, router
from tripcalc.app.db.context import RequestContext
from tripcalc.app.db.inmemory import InMemoryTripRepository
from tripcalc.app.main import app
from tripcalc.app.planner.ids import SequentialIdGenerator

HOTEL: dict[str, Any] = {
    "id": "L1",
    "name": "Hotel Lutetia",
    "category": "ACCOMMODATION",
    "location": {"lat": 48.8512, "lon": 2.3265, "address": "45 Bd Raspail, Paris"},
    "isPrimary": True,
}

OTHER_HOTEL: dict[str, Any] = {
    "id": "L2",
    "name": "Hotel Regina",
    "category": "ACCOMMODATION",
    "location": {"lat": 48.8638, "lon": 2.3318, "address": "2 Pl. des Pyramides, Paris"},
}


@pytest.fixture
def client(repo: InMemoryTripRepository) -> Generator[TestClient, None, None]:
    """Test client wired to an in-memory repository and deterministic ids."""
    ids = SequentialIdGenerator("api")
    app.dependency_overrides[get_trip_repository] = lambda: repo
    app.dependency_overrides[get_id_generator] = lambda: ids
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create(client: TestClient, day_count: int = 3) -> str:
    response = client.post("/trips", json={"name": "Paris", "dayCount": day_count})
    assert response.status_code == 201
    return str(response.json()["tripId"])


def _trip(client: TestClient, trip_id: str) -> dict[str, Any]:
    response = client.get(f"/trips/{trip_id}")
    assert response.status_code == 200
    return dict(response.json()["trip"])


def _auth(ctx: RequestContext) -> dict[str, str]:
    return {"Authorization": f"Bearer {ctx.org_id}:{ctx.user_id}"}


def test_create_and_get_trip(client: TestClient) -> None:
    trip_id = _create(client)

    trip = _trip(client, trip_id)

    assert [d["dayNumber"] for d in trip["days"]] == [1, 2, 3]
    assert trip["savedLocations"] == []
    assert trip["days"][0]["included"]["food"] is True


def test_create_rejects_out_of_range_day_count(client: TestClient) -> None:
    response = client.post("/trips", json={"dayCount": 31})

    assert response.status_code == 400


def test_list_trips(client: TestClient) -> None:
    _create(client, 2)

    response = client.get("/trips")

    assert response.status_code == 200
    assert response.json()[0]["dayCount"] == 2
    assert response.json()[0]["travelStyle"] == "midRange"


def test_unknown_trip_is_404(client: TestClient) -> None:
    assert client.get(f"/trips/{uuid.uuid4()}").status_code == 404


def test_other_tenant_cannot_see_trip(client: TestClient, other_ctx: RequestContext) -> None:
    trip_id = _create(client)

    assert client.get(f"/trips/{trip_id}", headers=_auth(other_ctx)).status_code == 404


def test_save_accepts_legacy_days_list(client: TestClient) -> None:
    trip_id = _create(client)

    response = client.put(
        f"/trips/{trip_id}",
        json=[{"dayNumber": 1, "customCosts": {}}, {"dayNumber": 2}],
    )

    assert response.status_code == 200
    trip = _trip(client, trip_id)
    assert trip["savedLocations"] == []
    assert len(trip["days"]) == 2


def test_save_rejects_invalid_state(client: TestClient) -> None:
    trip_id = _create(client)
    bad_item = {"id": "x", "category": "FOOD", "amount": -5}

    response = client.put(
        f"/trips/{trip_id}",
        json={"days": [{"dayNumber": 1, "customItems": [bad_item]}], "savedLocations": []},
    )

    assert response.status_code == 422


def test_add_day_at_ceiling_returns_conflict(client: TestClient) -> None:
    trip_id = _create(client, 30)

    response = client.post(f"/trips/{trip_id}/days")

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "MAX_DAYS_REACHED"
    assert len(_trip(client, trip_id)["days"]) == 30


def test_add_and_remove_days(client: TestClient) -> None:
    trip_id = _create(client, 3)

    added = client.post(f"/trips/{trip_id}/days").json()
    removed = client.delete(f"/trips/{trip_id}/days/2").json()

    assert added["applied"] is True
    assert added["dayNumber"] == 4
    assert removed["applied"] is True
    assert [d["dayNumber"] for d in removed["trip"]["days"]] == [1, 2, 3]


def test_remove_missing_day_is_not_applied(client: TestClient) -> None:
    trip_id = _create(client, 2)

    response = client.delete(f"/trips/{trip_id}/days/9")

    assert response.status_code == 200
    assert response.json()["applied"] is False


def test_remove_last_day_returns_conflict(client: TestClient) -> None:
    trip_id = _create(client, 1)

    response = client.delete(f"/trips/{trip_id}/days/1")

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "MIN_DAYS_REQUIRED"


def test_item_lifecycle_and_duplicate(client: TestClient) -> None:
    trip_id = _create(client, 1)

    added = client.post(f"/trips/{trip_id}/days/1/items", json={"category": "FOOD"})
    assert added.status_code == 201
    item_id = added.json()["item"]["id"]

    patched = client.patch(
        f"/trips/{trip_id}/days/1/items/{item_id}",
        json={"name": "Bistro", "amount": 2000, "visits": 2},
    )
    assert patched.json()["item"]["amount"] == 2000

    duplicated = client.post(f"/trips/{trip_id}/days/1/duplicate").json()
    copy_items = duplicated["trip"]["days"][1]["customItems"]
    assert copy_items[0]["name"] == "Bistro"
    assert copy_items[0]["id"] != item_id

    deleted = client.delete(f"/trips/{trip_id}/days/1/items/{item_id}").json()
    assert deleted["applied"] is True
    assert deleted["trip"]["days"][0]["customItems"] == []
    assert client.delete(f"/trips/{trip_id}/days/1/items/{item_id}").json()["applied"] is False


def test_item_edit_on_missing_day_is_404(client: TestClient) -> None:
    trip_id = _create(client, 1)

    response = client.post(f"/trips/{trip_id}/days/5/items", json={"category": "FOOD"})

    assert response.status_code == 404


def test_update_day_toggles(client: TestClient) -> None:
    trip_id = _create(client, 2)

    response = client.patch(
        f"/trips/{trip_id}/days/2",
        json={"included": {"accommodation": False, "food": True, "transport": True, "activities": True}},
    )

    assert response.json()["applied"] is True
    assert _trip(client, trip_id)["days"][1]["included"]["accommodation"] is False


def test_update_day_rejects_null_items(client: TestClient) -> None:
    trip_id = _create(client, 1)
    client.post(f"/trips/{trip_id}/days/1/items", json={"category": "FOOD"})

    response = client.patch(
        f"/trips/{trip_id}/days/1", json={"customItems": None, "included": None}
    )

    assert response.status_code == 422
    day = _trip(client, trip_id)["days"][0]
    assert len(day["customItems"]) == 1
    assert day["included"]["food"] is True


def test_update_item_rejects_null_name(client: TestClient) -> None:
    trip_id = _create(client, 1)
    added = client.post(f"/trips/{trip_id}/days/1/items", json={"category": "FOOD"})
    item_id = added.json()["item"]["id"]

    response = client.patch(f"/trips/{trip_id}/days/1/items/{item_id}", json={"name": None})

    assert response.status_code == 422
    assert _trip(client, trip_id)["days"][0]["customItems"][0]["name"] == ""


def _add_located_item(
    client: TestClient, trip_id: str, day: int, location: dict[str, Any] | None, start: str
) -> str:
    added = client.post(f"/trips/{trip_id}/days/{day}/items", json={"category": "ACTIVITIES"})
    item_id = str(added.json()["item"]["id"])
    body: dict[str, Any] = {"timeSlot": {"startTime": start}}
    if location is not None:
        body["location"] = location
    client.patch(f"/trips/{trip_id}/days/{day}/items/{item_id}", json=body)
    return item_id


def test_itinerary_timeline_orders_by_time(client: TestClient) -> None:
    trip_id = _create(client, 2)
    lunch = _add_located_item(client, trip_id, 1, OTHER_HOTEL["location"], "12:00")
    breakfast = _add_located_item(client, trip_id, 1, HOTEL["location"], "08:00")

    response = client.get(f"/trips/{trip_id}/itinerary")

    assert response.status_code == 200
    day = response.json()["days"][0]
    assert [i["id"] for i in day["items"]] == [breakfast, lunch]
    assert day["legs"][0]["fromItemId"] == breakfast
    assert response.json()["stats"]["activities_with_time"] == 2
    stored = _trip(client, trip_id)["days"][0]["customItems"]
    assert [i["id"] for i in stored] == [lunch, breakfast]


def test_sync_day_copies_location_forward(client: TestClient) -> None:
    trip_id = _create(client, 2)
    _add_located_item(client, trip_id, 1, HOTEL["location"], "20:00")
    _add_located_item(client, trip_id, 2, None, "09:00")

    response = client.post(f"/trips/{trip_id}/days/2/sync")

    assert response.json()["applied"] is True
    first = _trip(client, trip_id)["days"][1]["customItems"][0]
    assert first["location"]["address"] == "45 Bd Raspail, Paris"
    assert client.post(f"/trips/{trip_id}/days/1/sync").status_code == 404
    assert client.post(f"/trips/{trip_id}/days/2/sync?mode=sideways").status_code == 422


def test_move_item_to_other_day_tab(client: TestClient) -> None:
    trip_id = _create(client, 3)
    item_id = client.post(f"/trips/{trip_id}/days/1/items", json={"category": "ACTIVITIES"}).json()[
        "item"
    ]["id"]

    response = client.post(f"/trips/{trip_id}/moves", json={"activeId": item_id, "overId": "tab-3"})

    body = response.json()
    assert body["kind"] == "move"
    assert body["activeDay"] == 3
    days = _trip(client, trip_id)["days"]
    assert days[0]["customItems"] == []
    assert [i["id"] for i in days[2]["customItems"]] == [item_id]


def test_unresolvable_move_is_noop(client: TestClient) -> None:
    trip_id = _create(client, 2)

    response = client.post(f"/trips/{trip_id}/moves", json={"activeId": "ghost", "overId": "tab-2"})

    assert response.status_code == 200
    assert response.json()["applied"] is False
    assert response.json()["kind"] == "noop"


def test_cost_summary(client: TestClient) -> None:
    trip_id = _create(client, 1)
    item_id = client.post(f"/trips/{trip_id}/days/1/items", json={"category": "FOOD"}).json()["item"]["id"]
    client.patch(f"/trips/{trip_id}/days/1/items/{item_id}", json={"amount": 2000, "visits": 2})

    response = client.post(f"/trips/{trip_id}/summary", json={"baseCosts": {"food": 5000}})

    assert response.status_code == 200
    body = response.json()
    assert body["tripTotalCents"] == 9000
    food = next(c for c in body["costs"][0]["categories"] if c["category"] == "FOOD")
    assert food["totalCents"] == 9000


def test_cost_summary_by_travel_style(client: TestClient) -> None:
    trip_id = _create(client, 2)
    style_costs = {
        "budget": {"food": 1000},
        "midRange": {"food": 3000},
        "luxury": {"food": 9000},
    }

    response = client.post(f"/trips/{trip_id}/summary", json={"styleCosts": style_costs})

    assert response.json()["tripTotalCents"] == 6000


def test_cost_summary_requires_costs(client: TestClient) -> None:
    trip_id = _create(client, 1)

    assert client.post(f"/trips/{trip_id}/summary", json={}).status_code == 400


def test_primary_location_confirmed_fills_days(client: TestClient) -> None:
    trip_id = _create(client, 2)

    response = client.post(f"/trips/{trip_id}/saved-locations?confirm=true", json=HOTEL)

    body = response.json()
    assert body["applied"] is True
    for day in body["trip"]["days"]:
        assert [i["autoFillSource"] for i in day["customItems"]] == ["L1", "L1"]
        assert [i["autoFillSlot"] for i in day["customItems"]] == ["checkOut", "checkIn"]


def test_declined_primary_change_leaves_trip_untouched(client: TestClient) -> None:
    trip_id = _create(client, 2)
    client.post(f"/trips/{trip_id}/saved-locations?confirm=true", json=HOTEL)
    client.post(f"/trips/{trip_id}/saved-locations", json=OTHER_HOTEL)
    before = _trip(client, trip_id)

    response = client.post(f"/trips/{trip_id}/saved-locations/L2/primary")

    body = response.json()
    assert response.status_code == 200
    assert body["applied"] is False
    assert body["notice"]["code"] == "CONFIRMATION_DECLINED"
    assert _trip(client, trip_id) == before


def test_confirmed_primary_change_repoints_items(client: TestClient) -> None:
    trip_id = _create(client, 2)
    client.post(f"/trips/{trip_id}/saved-locations?confirm=true", json=HOTEL)
    client.post(f"/trips/{trip_id}/saved-locations", json=OTHER_HOTEL)

    body = client.post(f"/trips/{trip_id}/saved-locations/L2/primary?confirm=true").json()

    assert body["applied"] is True
    assert body["affectedItems"] == 4
    names = [i["name"] for d in body["trip"]["days"] for i in d["customItems"]]
    assert names == ["Check-out: Hotel Regina", "Check-in: Hotel Regina"] * 2


def test_delete_primary_location(client: TestClient) -> None:
    trip_id = _create(client, 2)
    client.post(f"/trips/{trip_id}/saved-locations?confirm=true", json=HOTEL)

    body = client.delete(f"/trips/{trip_id}/saved-locations/L1?confirm=true").json()

    assert body["applied"] is True
    assert body["trip"]["savedLocations"] == []
    assert all(d["customItems"] == [] for d in body["trip"]["days"])


def test_duplicate_saved_location_conflicts(client: TestClient) -> None:
    trip_id = _create(client, 1)
    client.post(f"/trips/{trip_id}/saved-locations", json=OTHER_HOTEL)

    response = client.post(f"/trips/{trip_id}/saved-locations", json=OTHER_HOTEL)

    assert response.status_code == 409


def test_edit_location_id_mismatch(client: TestClient) -> None:
    trip_id = _create(client, 1)

    response = client.put(f"/trips/{trip_id}/saved-locations/L9", json=OTHER_HOTEL)

    assert response.status_code == 400


def test_repository_handlers_run_off_the_event_loop() -> None:
    """Handlers doing blocking storage I/O are sync so FastAPI runs them in its threadpool."""
    blocking = [
        route.path
        for route in router.routes
        if isinstance(route, APIRoute)
        and "saved-locations" not in route.path
        and inspect.iscoroutinefunction(route.endpoint)
    ]

    assert blocking == []
