import pytest

from conftest import make_fixture


@pytest.mark.asyncio
async def test_duplicate_fixtures_in_one_payload(client, app):
    fixture = make_fixture("Chelsea", "Manchester City", "2024-08-18T15:30:00+00:00", goals=(0, 2))
    app.state.feed_client.payload = {"response": [fixture, fixture, fixture]}

    response = await client.get("/api/matches")

    assert response.json()["count"] == 1
    assert response.json()["data"][0]["result"] == "0:2"


@pytest.mark.asyncio
async def test_defective_fixture_dropped_rest_ingested(client, app, admin_headers):
    broken = make_fixture("Spurs", "Leicester", date="not-a-date", fixture_id=7)
    good = make_fixture("Brentford", "Crystal Palace", "2024-08-18T13:00:00+00:00", fixture_id=8)
    app.state.feed_client.payload = {"response": [broken, good]}

    response = await client.post("/api/admin/ingest", headers=admin_headers)

    assert response.json() == {"inserted": 1, "skipped": 0, "failed": 0}

