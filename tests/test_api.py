"""HTTP API tests."""

from datetime import timedelta

from fastapi.testclient import TestClient

from clinicdesk.schemas.patient import Patient
from clinicdesk.services.store import Collection, DocumentStore
from clinicdesk.utils.time import format_datetime, utc_now
from tests.factories import make_appointment_data, make_patient_data, make_record_data


def _create_patient(client: TestClient, **overrides) -> dict:
    response = client.post("/api/v1/patients", json=make_patient_data(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:
    """Tests for health endpoints."""

    def test_health_check(self, client: TestClient) -> None:
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_readiness_counts_collections(self, client: TestClient) -> None:
        _create_patient(client)

        response = client.get("/api/v1/health/ready")

        assert response.status_code == 200
        assert response.json()["collections"] == {
            "patients": 1,
            "medical_records": 0,
            "appointments": 0,
        }

    def test_root_endpoint(self, client: TestClient) -> None:
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "ClinicDesk API"


class TestPatientEndpoints:
    """Tests for /patients."""

    def test_create_and_get(self, client: TestClient) -> None:
        created = _create_patient(client)

        assert created["id"].endswith("-001")
        assert created["firstName"] == "Anna"
        assert created["createdAt"].endswith("Z")

        response = client.get(f"/api/v1/patients/{created['id']}")
        assert response.status_code == 200
        assert response.json() == created

    def test_validation_errors(self, client: TestClient) -> None:
        data = make_patient_data(email="bad")
        del data["phone"]

        response = client.post("/api/v1/patients", json=data)

        assert response.status_code == 422
        assert response.json()["detail"] == [
            {"field": "email", "message": "Invalid email address"},
            {"field": "phone", "message": "Phone number is required"},
        ]

    def test_unknown_patient(self, client: TestClient) -> None:
        assert client.get("/api/v1/patients/2024-404").status_code == 404
        assert client.patch("/api/v1/patients/2024-404", json={"phone": "1"}).status_code == 404

    def test_search(self, client: TestClient) -> None:
        _create_patient(client)
        _create_patient(client, firstName="Mark", lastName="Bakker", email="mark@example.com")

        everyone = client.get("/api/v1/patients").json()
        found = client.get("/api/v1/patients", params={"q": "bak"}).json()

        assert len(everyone) == 2
        assert [p["lastName"] for p in found] == ["Bakker"]

    def test_update(self, client: TestClient) -> None:
        created = _create_patient(client)

        response = client.patch(
            f"/api/v1/patients/{created['id']}", json={"address": "Oudegracht 20, Utrecht"}
        )

        assert response.status_code == 200
        assert response.json()["address"] == "Oudegracht 20, Utrecht"
        assert response.json()["createdAt"] == created["createdAt"]

    def test_consent(self, client: TestClient) -> None:
        created = _create_patient(client)
        form = {
            "location": "Amsterdam",
            "date": "2024-06-01",
            "patientName": "Anna Jansen",
            "signature": "data:image/png;base64,AAAA",
        }

        signed = client.put(f"/api/v1/patients/{created['id']}/consent", json=form)
        missing = client.put(
            f"/api/v1/patients/{created['id']}/consent", json={**form, "signature": ""}
        )
        cleared = client.delete(f"/api/v1/patients/{created['id']}/consent")

        assert signed.status_code == 200
        assert signed.json()["consentForm"]["signedAt"].endswith("Z")
        assert missing.status_code == 422
        assert missing.json()["detail"][0]["message"] == "Please provide a signature"
        assert cleared.status_code == 200
        assert "consentForm" not in cleared.json()

    def test_delete_with_cascade(self, client: TestClient) -> None:
        created = _create_patient(client)
        client.post("/api/v1/medical-records", json=make_record_data(created["id"]))

        response = client.delete(f"/api/v1/patients/{created['id']}", params={"cascade": True})

        assert response.status_code == 204
        assert client.get(f"/api/v1/patients/{created['id']}").status_code == 404
        assert client.get("/api/v1/medical-records").json() == []

    def test_delete_without_cascade_leaves_orphans(self, client: TestClient) -> None:
        created = _create_patient(client)
        client.post("/api/v1/medical-records", json=make_record_data(created["id"]))

        client.delete(f"/api/v1/patients/{created['id']}", params={"cascade": False})

        records = client.get("/api/v1/medical-records", params={"patientId": created["id"]})
        assert len(records.json()) == 1

    def test_capacity_conflict(self, client: TestClient, store: DocumentStore) -> None:
        year = utc_now().year
        full = Patient.model_validate({**make_patient_data(), "id": f"{year}-999"})
        store.write(Collection.PATIENTS, [full.to_document()])

        response = client.post("/api/v1/patients", json=make_patient_data(email="x@example.com"))

        assert response.status_code == 409

    def test_write_failure_is_503(self, client: TestClient, store: DocumentStore) -> None:
        store.max_document_bytes = 10

        response = client.post("/api/v1/patients", json=make_patient_data())

        assert response.status_code == 503


class TestRecordEndpoints:
    """Tests for /medical-records and the patient history views."""

    def test_history_newest_first(self, client: TestClient) -> None:
        patient = _create_patient(client)
        for visit in ("2024-01-10", "2024-03-15"):
            response = client.post(
                "/api/v1/medical-records", json=make_record_data(patient["id"], date=visit)
            )
            assert response.status_code == 201

        history = client.get(f"/api/v1/patients/{patient['id']}/medical-records").json()
        last = client.get(f"/api/v1/patients/{patient['id']}/last-visit").json()

        assert [r["date"] for r in history] == ["2024-03-15", "2024-01-10"]
        assert last == {"patientId": patient["id"], "lastVisit": "2024-03-15"}

    def test_unknown_patient_is_404(self, client: TestClient) -> None:
        response = client.post("/api/v1/medical-records", json=make_record_data("2024-404"))

        assert response.status_code == 404

    def test_update_and_delete(self, client: TestClient) -> None:
        patient = _create_patient(client)
        record = client.post(
            "/api/v1/medical-records", json=make_record_data(patient["id"])
        ).json()

        updated = client.patch(f"/api/v1/medical-records/{record['id']}", json={"notes": "ok"})
        deleted = client.delete(f"/api/v1/medical-records/{record['id']}")

        assert updated.json()["notes"] == "ok"
        assert deleted.status_code == 204
        assert client.get(f"/api/v1/medical-records/{record['id']}").status_code == 404
        assert client.patch(f"/api/v1/medical-records/{record['id']}", json={}).status_code == 404


class TestAppointmentEndpoints:
    """Tests for /appointments."""

    def test_book_and_upcoming(self, client: TestClient) -> None:
        patient = _create_patient(client)
        start = utc_now() + timedelta(days=1)
        past = utc_now() - timedelta(days=1)

        booked = client.post(
            "/api/v1/appointments",
            json=make_appointment_data(
                patient["id"],
                start=format_datetime(start),
                end=format_datetime(start + timedelta(minutes=30)),
            ),
        )
        client.post(
            "/api/v1/appointments",
            json=make_appointment_data(
                patient["id"],
                start=format_datetime(past),
                end=format_datetime(past + timedelta(minutes=30)),
            ),
        )

        assert booked.status_code == 201
        assert booked.json()["status"] == "Scheduled"
        assert booked.json()["title"] == "Jansen, A.B. - Treatment"

        upcoming = client.get("/api/v1/appointments/upcoming").json()
        assert [a["id"] for a in upcoming] == [booked.json()["id"]]
        assert len(client.get("/api/v1/appointments").json()) == 2

    def test_required_fields(self, client: TestClient) -> None:
        response = client.post("/api/v1/appointments", json={"type": "Treatment"})

        assert response.status_code == 422
        assert response.json()["detail"][0] == {"field": "patientId", "message": "Patient is required"}

    def test_unknown_appointment(self, client: TestClient) -> None:
        assert client.get("/api/v1/appointments/nope").status_code == 404
        assert client.patch("/api/v1/appointments/nope", json={}).status_code == 404


class TestDataEndpoints:
    """Tests for export and import."""

    def test_export_then_import(self, client: TestClient) -> None:
        patient = _create_patient(client)
        client.post("/api/v1/medical-records", json=make_record_data(patient["id"]))
        exported = client.get("/api/v1/data/export").json()

        client.delete(f"/api/v1/patients/{patient['id']}", params={"cascade": True})
        response = client.post("/api/v1/data/import", json=exported)

        assert response.status_code == 200
        assert response.json() == {
            "imported": {"patients": 1, "medicalRecords": 1, "appointments": 0},
            "rejected": [],
        }
        assert client.get("/api/v1/data/export").json() == exported

    def test_malformed_json_is_400(self, client: TestClient) -> None:
        _create_patient(client)

        response = client.post(
            "/api/v1/data/import",
            content=b"{broken",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Snapshot is not valid JSON")
        assert len(client.get("/api/v1/patients").json()) == 1

    def test_invalid_collection_is_reported(self, client: TestClient) -> None:
        _create_patient(client)

        response = client.post(
            "/api/v1/data/import",
            json={"patients": [{"id": "x"}], "appointments": []},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["imported"] == {"appointments": 0}
        assert body["rejected"][0]["field"].startswith("patients.0.")
        assert len(client.get("/api/v1/patients").json()) == 1
