"""CCP Routes — end-to-end submission through SQL catalog, notifier and repository.

Invariants:
    - POST /ccp/records returns 201 with the derived verdict
    - Out-of-limit record opens one corrective action (CA-YYYYMMDD-NNN)
    - Notifier failure still returns 201 with notification_error set
    - Domain errors map to the structured error envelope (404/409/422)
    - Boolean readings are rejected before evaluation (no record, no action)
    - Legacy singular critical_limit rows evaluate like the plural shape
"""

import pytest
from sqlalchemy import select

from haccp_compliance.infrastructure.corrective_actions import SqlCorrectiveActionNotifier
from haccp_compliance.models.ccp_definition import CCPDefinitionModel
from haccp_compliance.models.ccp_record import CCPRecordModel
from haccp_compliance.models.corrective_action import CorrectiveActionModel


@pytest.fixture
async def seed_definitions(test_db):
    test_db.add_all([
        CCPDefinitionModel(
            id="ccp-1b", ccp_number="CCP-1B", process="Sterilization",
            critical_limits=[
                {"parameter_code": "T", "parameter_name": "Core temperature",
                 "min": 85, "unit": "°C"},
                {"parameter_code": "pH", "parameter_name": "Acidity",
                 "min": 4.2, "max": 4.6, "unit": ""},
            ],
        ),
        CCPDefinitionModel(
            id="ccp-legacy", ccp_number="CCP-2", process="Cooling",
            critical_limits={"critical_limit": {"parameter": "Temp", "max": 5, "unit": "°C"}},
        ),
        CCPDefinitionModel(
            id="ccp-merged", ccp_number="CCP-9", process="Old line",
            critical_limits=[{"parameter_code": "T", "min": 70}], status="MERGED",
        ),
    ])
    await test_db.commit()


def _body(measurements, ccp_id="ccp-1b", action=None):
    return {
        "ccp_id": ccp_id,
        "record_date": "2024-06-03",
        "record_time": "09:30:00",
        "lot_number": "L-001",
        "measurements": measurements,
        "deviation_action": action,
    }


async def test_conforming_record_created(client, seed_definitions, test_db):
    res = await client.post("/api/v1/ccp/records", json=_body([
        {"parameter_code": "T", "value": 90},
        {"parameter_code": "pH", "value": "4.4"},
    ]))
    assert res.status_code == 201
    data = res.json()
    assert data["overall_within_limit"] is True
    assert data["state"] == "DRAFT"
    assert data["deviation_reference_id"] is None

    actions = (await test_db.execute(select(CorrectiveActionModel))).scalars().all()
    assert actions == []


async def test_deviation_opens_corrective_action(client, seed_definitions, test_db):
    res = await client.post("/api/v1/ccp/records", json=_body(
        [{"parameter_code": "T", "value": 85}, {"parameter_code": "pH", "value": 4.0}],
        action="Hold lot and re-acidify",
    ))
    assert res.status_code == 201
    data = res.json()
    assert data["overall_within_limit"] is False
    assert data["failing_parameters"] == ["pH"]
    assert data["deviation_reference_id"].startswith("CA-")
    assert data["notification_error"] is None

    actions = (await test_db.execute(select(CorrectiveActionModel))).scalars().all()
    assert len(actions) == 1
    assert actions[0].action_number == data["deviation_reference_id"]
    assert actions[0].source_id == data["id"]
    assert actions[0].severity == "CRITICAL"


async def test_action_numbers_increment(client, seed_definitions):
    refs = []
    for _ in range(2):
        res = await client.post("/api/v1/ccp/records", json=_body(
            [{"parameter_code": "T", "value": 60}], action="Reheat",
        ))
        refs.append(res.json()["deviation_reference_id"])
    assert refs[0].endswith("-001")
    assert refs[1].endswith("-002")


async def test_notifier_failure_is_non_fatal(client, seed_definitions, test_db, monkeypatch):
    async def broken(self, event):
        raise ConnectionError("action service down")

    monkeypatch.setattr(SqlCorrectiveActionNotifier, "on_deviation", broken)

    res = await client.post("/api/v1/ccp/records", json=_body(
        [{"parameter_code": "T", "value": 60}], action="Reheat",
    ))
    assert res.status_code == 201
    data = res.json()
    assert data["overall_within_limit"] is False
    assert data["deviation_reference_id"] is None
    assert "action service down" in data["notification_error"]

    row = (await test_db.execute(select(CCPRecordModel))).scalar_one()
    assert row.notification_error is not None


async def test_missing_action_is_422(client, seed_definitions):
    res = await client.post("/api/v1/ccp/records", json=_body(
        [{"parameter_code": "T", "value": 60}],
    ))
    assert res.status_code == 422
    assert res.json()["error"]["code"] == "MISSING_DEVIATION_ACTION"


async def test_unknown_parameter_is_422(client, seed_definitions):
    res = await client.post("/api/v1/ccp/records", json=_body(
        [{"parameter_code": "Brix", "value": 12}],
    ))
    assert res.status_code == 422
    assert res.json()["error"]["context"]["parameter_code"] == "Brix"


async def test_non_numeric_value_is_422(client, seed_definitions):
    res = await client.post("/api/v1/ccp/records", json=_body(
        [{"parameter_code": "T", "value": "hot"}],
    ))
    assert res.status_code == 422
    assert res.json()["error"]["code"] == "INVALID_MEASUREMENT"


async def test_boolean_value_rejected_at_boundary(client, seed_definitions, test_db):
    res = await client.post("/api/v1/ccp/records", json=_body(
        [{"parameter_code": "pH", "value": True}], action="Hold lot",
    ))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"

    assert (await test_db.execute(select(CCPRecordModel))).first() is None
    assert (await test_db.execute(select(CorrectiveActionModel))).first() is None


async def test_empty_measurements_rejected_at_boundary(client, seed_definitions):
    res = await client.post("/api/v1/ccp/records", json=_body([]))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_unknown_ccp_is_404(client, seed_definitions):
    res = await client.post("/api/v1/ccp/records", json=_body(
        [{"parameter_code": "T", "value": 90}], ccp_id="ccp-404",
    ))
    assert res.status_code == 404


async def test_legacy_singular_limit(client, seed_definitions):
    res = await client.post("/api/v1/ccp/records", json=_body(
        [{"parameter_code": "Temp", "value": 4.5}], ccp_id="ccp-legacy",
    ))
    assert res.status_code == 201
    assert res.json()["overall_within_limit"] is True


async def test_definitions_list_excludes_merged(client, seed_definitions):
    res = await client.get("/api/v1/ccp/definitions")
    assert res.status_code == 200
    ids = [d["id"] for d in res.json()]
    assert "ccp-merged" not in ids
    assert set(ids) == {"ccp-1b", "ccp-legacy"}


async def test_verify_flow(client, seed_definitions):
    created = await client.post("/api/v1/ccp/records", json=_body(
        [{"parameter_code": "T", "value": 90}],
    ))
    record_id = created.json()["id"]

    res = await client.post(
        f"/api/v1/ccp/records/{record_id}/verify", json={"verified_by": "qa.lead"},
    )
    assert res.status_code == 200
    assert res.json()["state"] == "VERIFIED"
    assert res.json()["verified_by"] == "qa.lead"

    again = await client.post(
        f"/api/v1/ccp/records/{record_id}/verify", json={"verified_by": "qa.lead"},
    )
    assert again.status_code == 409

    fetched = await client.get(f"/api/v1/ccp/records/{record_id}")
    assert fetched.json()["state"] == "VERIFIED"


async def test_get_unknown_record_is_404(client):
    res = await client.get("/api/v1/ccp/records/not-a-uuid")
    assert res.status_code == 404
