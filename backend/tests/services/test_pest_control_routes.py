"""Pest Control Routes — checks scored against seeded standards and trap catalog.

Invariants:
    - Season derived from check_date unless supplied
    - Per-trap snapshot and overall status returned; LEVEL2 opens a CRITICAL action
    - Unconfigured traps reported, never an error
    - Invalid input maps to 400 (schema) or 422 (domain)
"""

import pytest
from sqlalchemy import select

from haccp_compliance.models.corrective_action import CorrectiveActionModel
from haccp_compliance.models.pest_catalog import (
    PestStandardModel, PestZoneModel, TrapLocationModel,
)


@pytest.fixture
async def seed_pest_catalog(test_db):
    test_db.add_all([
        PestZoneModel(id="zone-a", name="Filling room", grade="CLEAN"),
        PestZoneModel(id="zone-b", name="Warehouse", grade="GENERAL"),
    ])
    await test_db.flush()
    test_db.add_all([
        TrapLocationModel(id="R-01", zone_id="zone-a", hazard_category="RODENT"),
        TrapLocationModel(id="R-02", zone_id="zone-a", hazard_category="RODENT"),
        TrapLocationModel(id="F-01", zone_id="zone-b", hazard_category="AIRBORNE"),
        TrapLocationModel(id="R-99", zone_id="zone-a", hazard_category="RODENT", is_active=False),
        PestStandardModel(season="SUMMER", zone_grade="CLEAN", hazard_category="RODENT", level=1, upper_limit=2),
        PestStandardModel(season="SUMMER", zone_grade="CLEAN", hazard_category="RODENT", level=2, upper_limit=5),
        PestStandardModel(season="WINTER", zone_grade="CLEAN", hazard_category="RODENT", level=1, upper_limit=1),
        PestStandardModel(season="WINTER", zone_grade="CLEAN", hazard_category="RODENT", level=2, upper_limit=3),
    ])
    await test_db.commit()


def _body(catches, check_date="2024-07-01", season=None):
    body = {
        "check_date": check_date,
        "catches": [{"trap_location_id": k, "catch_count": v} for k, v in catches.items()],
    }
    if season:
        body["season"] = season
    return body


async def test_level1_check(client, seed_pest_catalog):
    res = await client.post("/api/v1/pest-control/checks", json=_body({"R-01": 0, "R-02": 2}))
    assert res.status_code == 201
    data = res.json()
    assert data["season"] == "SUMMER"
    assert data["overall_status"] == "LEVEL1"
    levels = {tc["trap_location_id"]: tc["level"] for tc in data["trap_checks"]}
    assert levels == {"R-01": 0, "R-02": 1}
    assert data["deviation_reference_id"].startswith("CA-")


async def test_level2_opens_critical_action(client, seed_pest_catalog, test_db):
    res = await client.post("/api/v1/pest-control/checks", json=_body({"R-01": 5}))
    data = res.json()
    assert data["overall_status"] == "LEVEL2"

    action = (await test_db.execute(select(CorrectiveActionModel))).scalar_one()
    assert action.severity == "CRITICAL"
    assert action.source_type == "PEST"
    assert action.source_id == data["id"]


async def test_winter_date_uses_winter_thresholds(client, seed_pest_catalog):
    res = await client.post(
        "/api/v1/pest-control/checks", json=_body({"R-01": 1}, check_date="2024-12-02"),
    )
    assert res.json()["season"] == "WINTER"
    assert res.json()["overall_status"] == "LEVEL1"


async def test_normal_check_has_no_action(client, seed_pest_catalog):
    res = await client.post("/api/v1/pest-control/checks", json=_body({"R-01": 1}))
    assert res.json()["overall_status"] == "NORMAL"
    assert res.json()["deviation_reference_id"] is None


async def test_unconfigured_trap_reported(client, seed_pest_catalog):
    res = await client.post("/api/v1/pest-control/checks", json=_body({"F-01": 30}))
    assert res.status_code == 201
    data = res.json()
    assert data["overall_status"] == "NORMAL"
    assert data["unconfigured_trap_ids"] == ["F-01"]
    assert data["trap_checks"][0]["configured"] is False


async def test_inactive_trap_is_unknown(client, seed_pest_catalog):
    res = await client.post("/api/v1/pest-control/checks", json=_body({"R-99": 0}))
    assert res.status_code == 422
    assert res.json()["error"]["code"] == "UNKNOWN_TRAP_LOCATION"


async def test_negative_count_is_422(client, seed_pest_catalog):
    res = await client.post("/api/v1/pest-control/checks", json=_body({"R-01": -1}))
    assert res.status_code == 422
    assert res.json()["error"]["code"] == "INVALID_CATCH_COUNT"


async def test_duplicate_trap_rejected(client, seed_pest_catalog):
    body = {
        "check_date": "2024-07-01",
        "catches": [
            {"trap_location_id": "R-01", "catch_count": 0},
            {"trap_location_id": "R-01", "catch_count": 3},
        ],
    }
    res = await client.post("/api/v1/pest-control/checks", json=body)
    assert res.status_code == 422
    assert res.json()["error"]["code"] == "DUPLICATE_TRAP_READING"
    assert res.json()["error"]["context"]["source_id"] == "R-01"


async def test_empty_catches_rejected(client, seed_pest_catalog):
    res = await client.post("/api/v1/pest-control/checks", json=_body({}))
    assert res.status_code == 400


async def test_verify_check(client, seed_pest_catalog):
    created = await client.post("/api/v1/pest-control/checks", json=_body({"R-01": 0}))
    check_id = created.json()["id"]
    res = await client.post(
        f"/api/v1/pest-control/checks/{check_id}/verify", json={"verified_by": "qa.lead"},
    )
    assert res.status_code == 200
    assert res.json()["state"] == "VERIFIED"

    fetched = await client.get(f"/api/v1/pest-control/checks/{check_id}")
    assert fetched.json()["trap_checks"][0]["zone_grade"] == "CLEAN"


async def test_list_checks_by_date(client, seed_pest_catalog):
    first = await client.post("/api/v1/pest-control/checks", json=_body({"R-01": 0}))
    second = await client.post("/api/v1/pest-control/checks", json=_body({"R-02": 3}))
    await client.post(
        "/api/v1/pest-control/checks", json=_body({"R-01": 0}, check_date="2024-07-02"),
    )

    res = await client.get("/api/v1/pest-control/checks", params={"check_date": "2024-07-01"})
    assert res.status_code == 200
    assert {c["id"] for c in res.json()} == {first.json()["id"], second.json()["id"]}


async def test_list_checks_requires_date(client, seed_pest_catalog):
    res = await client.get("/api/v1/pest-control/checks")
    assert res.status_code == 400
