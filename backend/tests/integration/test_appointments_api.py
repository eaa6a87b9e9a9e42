# backend/tests/integration/test_appointments_api.py
"""
HTTP surface of the scheduling engine, exercised through FastAPI's TestClient.
"""

from datetime import datetime

import pytest

PROBLEM_JSON = "application/problem+json"


def parse_dt(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def book(client, catalog, start="2030-01-07T10:00:00Z", professional_id=None, **extra):
    payload = {
        "clientId": catalog.client_id,
        "professionalId": professional_id or catalog.barber_a_id,
        "serviceId": catalog.haircut_id,
        "startTime": start,
    }
    payload.update(extra)
    return client.post("/api/v1/appointments", json=payload)


@pytest.mark.integration
class TestCreateAppointmentApi:
    def test_books_with_override_duration_and_default_price(self, client, catalog):
        response = book(client, catalog, notes="  degradê baixo  ")

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "PENDING"
        assert body["total_price_cents"] == 5000
        assert body["notes"] == "degradê baixo"
        assert parse_dt(body["end_time"]) - parse_dt(body["start_time"]) == (
            parse_dt("2030-01-07T10:45:00Z") - parse_dt("2030-01-07T10:00:00Z")
        )

    def test_snake_case_fields_are_accepted(self, client, catalog):
        response = client.post(
            "/api/v1/appointments",
            json={
                "client_id": catalog.client_id,
                "professional_id": catalog.barber_b_id,
                "service_id": catalog.beard_trim_id,
                "start_time": "2030-01-07T09:00:00+00:00",
            },
        )

        assert response.status_code == 201
        assert parse_dt(response.json()["end_time"]) == parse_dt("2030-01-07T09:20:00Z")

    def test_missing_field_is_a_bad_request(self, client, catalog):
        response = client.post(
            "/api/v1/appointments",
            json={"clientId": catalog.client_id, "serviceId": catalog.haircut_id},
        )

        assert response.status_code == 400
        assert response.headers["content-type"].startswith(PROBLEM_JSON)
        body = response.json()
        assert body["code"] == "MISSING_REQUIRED_FIELDS"
        assert set(body["errors"]["missing"]) == {"professional_id", "start_time"}

    def test_unknown_service(self, client, catalog):
        response = book(client, catalog, serviceId="01J00000000000000000000000")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_SERVICE"

    def test_overlong_unknown_service_id(self, client, catalog):
        response = book(client, catalog, serviceId="X" * 64)

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_SERVICE"

    def test_start_time_at_end_of_calendar(self, client, catalog):
        response = book(client, catalog, start="9999-12-31T23:50:00Z")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_START_TIME"

    def test_inactive_service(self, client, catalog):
        response = book(client, catalog, serviceId=catalog.retired_id)

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_SERVICE"

    def test_overlap_is_a_conflict(self, client, catalog):
        assert book(client, catalog).status_code == 201

        response = book(client, catalog, start="2030-01-07T10:30:00Z")

        assert response.status_code == 409
        assert response.headers["content-type"].startswith(PROBLEM_JSON)
        assert response.json()["code"] == "APPOINTMENT_CONFLICT"

    def test_back_to_back_is_allowed(self, client, catalog):
        assert book(client, catalog).status_code == 201
        assert book(client, catalog, start="2030-01-07T10:45:00Z").status_code == 201

    def test_unknown_fields_are_rejected(self, client, catalog):
        response = book(client, catalog, discount=10)

        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"


@pytest.mark.integration
class TestAppointmentStatusApi:
    def test_cancel_is_idempotent(self, client, catalog):
        appointment_id = book(client, catalog).json()["id"]

        first = client.patch(f"/api/v1/appointments/{appointment_id}/cancel")
        second = client.patch(f"/api/v1/appointments/{appointment_id}/cancel")

        assert first.status_code == 200
        assert second.status_code == 200
        assert second.json()["status"] == "CANCELLED"

    def test_cancel_frees_the_slot(self, client, catalog):
        appointment_id = book(client, catalog).json()["id"]
        client.patch(f"/api/v1/appointments/{appointment_id}/cancel")

        assert book(client, catalog).status_code == 201

    def test_cancel_unknown_appointment(self, client, catalog):
        response = client.patch("/api/v1/appointments/01J00000000000000000000000/cancel")

        assert response.status_code == 404
        assert response.json()["code"] == "APPOINTMENT_NOT_FOUND"

    def test_status_transitions(self, client, catalog):
        appointment_id = book(client, catalog).json()["id"]
        url = f"/api/v1/appointments/{appointment_id}/status"

        assert client.post(url, json={"status": "CONFIRMED"}).json()["status"] == "CONFIRMED"
        completed = client.post(url, json={"status": "completed"})
        assert completed.status_code == 200
        assert completed.json()["status"] == "COMPLETED"

        rejected = client.post(url, json={"status": "CANCELLED"})
        assert rejected.status_code == 422
        assert rejected.json()["code"] == "INVALID_TRANSITION"

    def test_unknown_status(self, client, catalog):
        appointment_id = book(client, catalog).json()["id"]

        response = client.post(
            f"/api/v1/appointments/{appointment_id}/status", json={"status": "ARCHIVED"}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_STATUS"


@pytest.mark.integration
class TestAppointmentReadApi:
    def test_get_appointment(self, client, catalog):
        created = book(client, catalog).json()

        response = client.get(f"/api/v1/appointments/{created['id']}")

        assert response.status_code == 200
        assert response.json()["id"] == created["id"]
        assert response.json()["professional_id"] == catalog.barber_a_id

    def test_get_unknown_appointment(self, client, catalog):
        response = client.get("/api/v1/appointments/01J00000000000000000000000")

        assert response.status_code == 404
        assert response.headers["content-type"].startswith(PROBLEM_JSON)

    def test_client_history(self, client, catalog):
        early = book(client, catalog, start="2030-01-07T09:00:00Z").json()
        late = book(client, catalog, start="2030-01-08T09:00:00Z").json()
        client.patch(f"/api/v1/appointments/{early['id']}/cancel")

        response = client.get(f"/api/v1/clients/{catalog.client_id}/appointments")

        assert response.status_code == 200
        rows = response.json()
        assert [row["id"] for row in rows] == [late["id"], early["id"]]
        assert rows[0]["professional_name"] == "Bruno Barbeiro"
        assert rows[0]["service_name"] == "Corte"
        assert rows[1]["status"] == "CANCELLED"

    def test_professional_agenda(self, client, catalog):
        kept = book(client, catalog, start="2030-01-07T09:00:00Z").json()
        dropped = book(client, catalog, start="2030-01-07T11:00:00Z").json()
        book(client, catalog, start="2030-01-08T09:00:00Z")
        client.patch(f"/api/v1/appointments/{dropped['id']}/cancel")

        response = client.get(
            f"/api/v1/professionals/{catalog.barber_a_id}/appointments",
            params={"date": "2030-01-07"},
        )

        assert response.status_code == 200
        rows = response.json()
        assert [row["id"] for row in rows] == [kept["id"]]
        assert rows[0]["client_name"] == "Ana Cliente"

    def test_professional_agenda_rejects_bad_date(self, client, catalog):
        response = client.get(
            f"/api/v1/professionals/{catalog.barber_a_id}/appointments",
            params={"date": "07/01/2030"},
        )

        assert response.status_code == 422


@pytest.mark.integration
class TestOperationalEndpoints:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "db_pool" in response.json()

    def test_metrics_expose_service_operations(self, client, catalog):
        book(client, catalog)

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "barberbook_service_operations_total" in response.text
