"""
Incident blotter endpoints
"""
import re

from fastapi import status
from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog
from app.models.incident import Incident
from app.services import incident_service

INCIDENTS_URL = "/api/v1/incidents"


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


def _incident_payload(**overrides):
    payload = {
        "incident_type": "Noise Complaint",
        "complainant_name": "Pedro Garcia",
        "description": "Loud karaoke past midnight",
        "incident_location": "Purok 3",
    }
    payload.update(overrides)
    return payload


def test_record_incident(client, secretary_token, db: Session):
    response = client.post(INCIDENTS_URL, json=_incident_payload(), headers=_auth(secretary_token))

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert re.match(r"^INC-\d{6}-\d{4}$", data["incident_number"])
    assert data["status"] == "open"
    assert data["reported_by"] == "Maria Santos"
    assert data["incident_date"]

    entry = db.query(AuditLog).filter(AuditLog.entity_type == "incident").one()
    assert entry.action == "create"
    assert entry.entity_id == data["incident_number"]


def test_incidents_require_bearer_token(client):
    response = client.get(INCIDENTS_URL)

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["code"] == "SESSION_INVALID"


def test_incidents_reject_invalid_token(client):
    response = client.get(INCIDENTS_URL, headers=_auth("bogus"))

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_incident_lifecycle(client, secretary_token, db: Session):
    number = client.post(INCIDENTS_URL, json=_incident_payload(), headers=_auth(secretary_token)).json()["incident_number"]

    investigating = client.post(f"{INCIDENTS_URL}/{number}/status", json={"status": "investigating"}, headers=_auth(secretary_token))
    resolved = client.post(f"{INCIDENTS_URL}/{number}/status", json={"status": "resolved"}, headers=_auth(secretary_token))

    assert investigating.status_code == status.HTTP_200_OK
    assert resolved.status_code == status.HTTP_200_OK
    data = resolved.json()
    assert data["status"] == "resolved"
    assert data["handled_by"] == "Maria Santos"
    assert data["resolution_date"].endswith("+08:00")
    assert db.query(AuditLog).filter(AuditLog.entity_type == "incident", AuditLog.action == "update").count() == 2


def test_incident_cannot_skip_investigation(client, secretary_token, db: Session):
    number = client.post(INCIDENTS_URL, json=_incident_payload(), headers=_auth(secretary_token)).json()["incident_number"]

    response = client.post(f"{INCIDENTS_URL}/{number}/status", json={"status": "resolved"}, headers=_auth(secretary_token))

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["code"] == "INVALID_TRANSITION"
    assert db.query(Incident).one().status == "open"


def test_unknown_incident(client, secretary_token):
    response = client.post(f"{INCIDENTS_URL}/INC-202001-0000/status", json={"status": "investigating"}, headers=_auth(secretary_token))

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_list_incidents_with_filter(client, secretary_token):
    first = client.post(INCIDENTS_URL, json=_incident_payload(), headers=_auth(secretary_token)).json()["incident_number"]
    client.post(INCIDENTS_URL, json=_incident_payload(incident_type="Theft"), headers=_auth(secretary_token))
    client.post(f"{INCIDENTS_URL}/{first}/status", json={"status": "investigating"}, headers=_auth(secretary_token))

    everything = client.get(INCIDENTS_URL, headers=_auth(secretary_token)).json()
    open_only = client.get(INCIDENTS_URL, params={"status": "open"}, headers=_auth(secretary_token)).json()

    assert everything["total"] == 2
    assert open_only["total"] == 1
    assert open_only["items"][0]["incident_type"] == "Theft"


def test_incident_requires_description(client, secretary_token):
    response = client.post(INCIDENTS_URL, json=_incident_payload(description=""), headers=_auth(secretary_token))

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["field"] == "description"


def test_incident_numbers_do_not_collide(client, secretary_token, db: Session, monkeypatch):
    first = client.post(INCIDENTS_URL, json=_incident_payload(), headers=_auth(secretary_token)).json()

    candidates = iter([first["incident_number"], "INC-202601-4242"])
    monkeypatch.setattr(incident_service, "generate_incident_number", lambda today=None: next(candidates))
    second = client.post(INCIDENTS_URL, json=_incident_payload(), headers=_auth(secretary_token)).json()

    assert second["incident_number"] == "INC-202601-4242"
    numbers = [i.incident_number for i in db.query(Incident).all()]
    assert len(set(numbers)) == 2


def test_duplicate_incident_number_resolves_to_oldest(client, secretary_token, db: Session, monkeypatch):
    monkeypatch.setattr(incident_service, "generate_incident_number", lambda today=None: "INC-202601-0007")
    client.post(INCIDENTS_URL, json=_incident_payload(complainant_name="First"), headers=_auth(secretary_token))
    client.post(INCIDENTS_URL, json=_incident_payload(complainant_name="Second"), headers=_auth(secretary_token))

    assert db.query(Incident).count() == 2
    assert incident_service.get_incident(db, "INC-202601-0007").complainant_name == "First"
