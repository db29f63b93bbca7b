import pytest
from httpx import AsyncClient


async def setup_family(
    client: AsyncClient,
    email: str = "parent@example.com",
    timezone: str = "UTC",
) -> str:
    register_res = await client.post(
        "/auth/register",
        json={"email": email, "password": "testpass123", "name": "Parent", "color": "#8B5CF6"},
    )
    token = register_res.json()["token"]["access_token"]
    family_res = await client.post(
        "/families",
        json={"name": "Calendar Family", "timezone": timezone},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert family_res.status_code == 201
    return token


@pytest.mark.asyncio
async def test_create_all_day_event_and_list_it_in_month(client: AsyncClient) -> None:
    token = await setup_family(client)
    headers = {"Authorization": f"Bearer {token}"}

    create_res = await client.post(
        "/calendar/events",
        json={"title": "Field trip", "start": "2025-03-10", "all_day": True},
        headers=headers,
    )
    assert create_res.status_code == 201
    event = create_res.json()
    assert event["all_day"] is True
    assert event["start_time"].startswith("2025-03-10T00:00")
    assert event["end_time"].startswith("2025-03-10T23:59")
    assert event["color"] is None
    assert event["display_color"] == "#8B5CF6"
    assert event["creator"]["name"] == "Parent"

    month_res = await client.get("/calendar/events", params={"month": "2025-03"}, headers=headers)
    assert month_res.status_code == 200
    assert [item["id"] for item in month_res.json()["items"]] == [event["id"]]

    other_month = await client.get("/calendar/events", params={"month": "2025-04"}, headers=headers)
    assert other_month.json()["items"] == []


@pytest.mark.asyncio
async def test_timed_event_is_returned_in_family_timezone(client: AsyncClient) -> None:
    token = await setup_family(client, timezone="America/New_York")
    headers = {"Authorization": f"Bearer {token}"}

    create_res = await client.post(
        "/calendar/events",
        json={"title": "Dentist", "start": "2025-03-10T09:00", "color": "#ef4444"},
        headers=headers,
    )
    assert create_res.status_code == 201
    event = create_res.json()
    assert event["start_time"] == "2025-03-10T09:00:00-04:00"
    assert event["end_time"] == "2025-03-10T10:00:00-04:00"
    assert event["color"] == "#EF4444"
    assert event["display_color"] == "#EF4444"


@pytest.mark.asyncio
async def test_month_grid_places_events_on_their_day(client: AsyncClient) -> None:
    token = await setup_family(client)
    headers = {"Authorization": f"Bearer {token}"}
    for title, start in (("Soccer", "2025-03-10T17:00"), ("Piano", "2025-03-10T08:00")):
        await client.post("/calendar/events", json={"title": title, "start": start}, headers=headers)
    # Visible in the grid's trailing days but outside March itself.
    await client.post(
        "/calendar/events",
        json={"title": "Spring break", "start": "2025-04-02", "all_day": True},
        headers=headers,
    )

    grid_res = await client.get("/calendar/grid", params={"month": "2025-03"}, headers=headers)
    assert grid_res.status_code == 200
    grid = grid_res.json()
    assert grid["month"] == "2025-03"
    assert len(grid["days"]) % 7 == 0
    assert grid["days"][0]["date"] == "2025-02-23"
    assert grid["days"][-1]["date"] == "2025-04-05"

    by_date = {day["date"]: day for day in grid["days"]}
    assert [event["title"] for event in by_date["2025-03-10"]["events"]] == ["Piano", "Soccer"]
    assert by_date["2025-04-02"]["in_month"] is False
    assert [event["title"] for event in by_date["2025-04-02"]["events"]] == ["Spring break"]

    month_res = await client.get("/calendar/events", params={"month": "2025-03"}, headers=headers)
    assert [item["title"] for item in month_res.json()["items"]] == ["Piano", "Soccer"]


@pytest.mark.asyncio
async def test_event_validation(client: AsyncClient) -> None:
    token = await setup_family(client)
    headers = {"Authorization": f"Bearer {token}"}

    backwards = await client.post(
        "/calendar/events",
        json={"title": "Backwards", "start": "2025-03-10T10:00", "end": "2025-03-10T09:00"},
        headers=headers,
    )
    assert backwards.status_code == 422

    blank_title = await client.post(
        "/calendar/events",
        json={"title": "   ", "start": "2025-03-10T10:00"},
        headers=headers,
    )
    assert blank_title.status_code == 422

    bad_color = await client.post(
        "/calendar/events",
        json={"title": "Colorful", "start": "2025-03-10T10:00", "color": "#000000"},
        headers=headers,
    )
    assert bad_color.status_code == 422

    bad_month = await client.get("/calendar/grid", params={"month": "2025-13"}, headers=headers)
    assert bad_month.status_code == 422

    half_range = await client.get("/calendar/events", params={"start": "2025-03-01"}, headers=headers)
    assert half_range.status_code == 422


@pytest.mark.asyncio
async def test_update_and_delete_event(client: AsyncClient) -> None:
    token = await setup_family(client)
    headers = {"Authorization": f"Bearer {token}"}
    event = (
        await client.post(
            "/calendar/events",
            json={"title": "Practice", "start": "2025-03-10T17:00"},
            headers=headers,
        )
    ).json()

    update_res = await client.patch(
        f"/calendar/events/{event['id']}",
        json={"title": "Late practice", "start": "2025-03-10T18:00", "end": "2025-03-10T19:30"},
        headers=headers,
    )
    assert update_res.status_code == 200
    updated = update_res.json()
    assert updated["title"] == "Late practice"
    assert updated["start_time"].startswith("2025-03-10T18:00")
    assert updated["end_time"].startswith("2025-03-10T19:30")

    reversed_res = await client.patch(
        f"/calendar/events/{event['id']}",
        json={"end": "2025-03-10T17:00"},
        headers=headers,
    )
    assert reversed_res.status_code == 422

    range_res = await client.get(
        "/calendar/events",
        params={"start": "2025-03-10", "end": "2025-03-10"},
        headers=headers,
    )
    assert [item["title"] for item in range_res.json()["items"]] == ["Late practice"]

    delete_res = await client.delete(f"/calendar/events/{event['id']}", headers=headers)
    assert delete_res.status_code == 200
    assert delete_res.json()["event_id"] == event["id"]

    missing = await client.get(f"/calendar/events/{event['id']}", headers=headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_events_are_family_scoped(client: AsyncClient) -> None:
    owner_token = await setup_family(client, email="owner@example.com")
    stranger_token = await setup_family(client, email="stranger@example.com")
    event = (
        await client.post(
            "/calendar/events",
            json={"title": "Private", "start": "2025-03-10T09:00"},
            headers={"Authorization": f"Bearer {owner_token}"},
        )
    ).json()

    stranger = {"Authorization": f"Bearer {stranger_token}"}
    assert (await client.get(f"/calendar/events/{event['id']}", headers=stranger)).status_code == 404
    assert (await client.delete(f"/calendar/events/{event['id']}", headers=stranger)).status_code == 404
    listing = await client.get("/calendar/events", params={"month": "2025-03"}, headers=stranger)
    assert listing.json()["items"] == []
