from datetime import timedelta

import pytest

from healthmonitor.database import DatabaseConfig, DatabaseManager, MemoryStore, SQLStore

from conftest import auth_header

SAMPLE = {
    "heartRate": 74,
    "spo2": 97,
    "systolicBP": 122,
    "diastolicBP": 81,
    "temperature": 36.9,
    "respiratoryRate": 17,
}


class TestPatientRecords:
    def test_admin_creates_and_owner_lists(self, client, admin_token, patient):
        user_id = patient["user"]["id"]
        response = client.post(
            f"/api/patients/{user_id}/records",
            json={"notes": "Routine checkup", "diagnosis": "Healthy"},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 201
        record = response.json()
        assert record["userId"] == user_id
        assert record["recordDate"]

        response = client.get(f"/api/patients/{user_id}/records", headers=auth_header(patient["token"]))
        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [record["id"]]

    def test_explicit_record_date(self, client, admin_token, patient):
        response = client.post(
            f"/api/patients/{patient['user']['id']}/records",
            json={"diagnosis": "Flu", "recordDate": "2025-11-02T09:30:00"},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 201
        assert response.json()["recordDate"].startswith("2025-11-02T09:30:00")

    def test_patient_cannot_create(self, client, patient):
        response = client.post(
            f"/api/patients/{patient['user']['id']}/records",
            json={"notes": "self-diagnosed"},
            headers=auth_header(patient["token"]),
        )
        assert response.status_code == 403

    def test_unknown_target_user(self, client, admin_token):
        response = client.post(
            "/api/patients/no-such-user/records", json={"notes": "x"}, headers=auth_header(admin_token),
        )
        assert response.status_code == 400
        assert response.json() == {"message": "User not found"}

    def test_other_patient_cannot_list(self, client, patient, other_patient):
        response = client.get(
            f"/api/patients/{other_patient['user']['id']}/records", headers=auth_header(patient["token"]),
        )
        assert response.status_code == 403


class TestEcgData:
    def test_latest_is_registration_baseline(self, client, patient):
        user_id = patient["user"]["id"]
        response = client.get(f"/api/ecg-data/latest/{user_id}", headers=auth_header(patient["token"]))
        assert response.status_code == 200
        body = response.json()
        assert body["userId"] == user_id
        assert {"heartRate", "spo2", "systolicBP", "diastolicBP", "temperature", "respiratoryRate"} <= set(body)

    def test_latest_missing(self, client, admin_token):
        admin_id = client.get("/api/admin/users", headers=auth_header(admin_token)).json()[0]["id"]
        response = client.get(f"/api/ecg-data/latest/{admin_id}", headers=auth_header(admin_token))
        assert response.status_code == 404
        assert response.json() == {"message": "No ECG data found"}

    def test_submit_ignores_client_id_and_timestamp(self, client, patient):
        user_id = patient["user"]["id"]
        payload = {**SAMPLE, "userId": user_id, "id": "client-chosen", "timestamp": "1999-01-01T00:00:00"}
        response = client.post("/api/ecg-data", json=payload, headers=auth_header(patient["token"]))
        assert response.status_code == 201
        body = response.json()
        assert body["id"] != "client-chosen"
        assert not body["timestamp"].startswith("1999")
        assert body["systolicBP"] == 122

        latest = client.get(f"/api/ecg-data/latest/{user_id}", headers=auth_header(patient["token"])).json()
        assert latest["id"] == body["id"]

    def test_submit_for_other_user_forbidden(self, client, patient, other_patient):
        payload = {**SAMPLE, "userId": other_patient["user"]["id"]}
        response = client.post("/api/ecg-data", json=payload, headers=auth_header(patient["token"]))
        assert response.status_code == 403

    def test_admin_submit_for_unknown_user(self, client, admin_token):
        payload = {**SAMPLE, "userId": "ghost"}
        response = client.post("/api/ecg-data", json=payload, headers=auth_header(admin_token))
        assert response.status_code == 400
        assert response.json() == {"message": "User not found"}

    def test_submit_missing_fields(self, client, patient):
        payload = {"userId": patient["user"]["id"], "heartRate": 70}
        response = client.post("/api/ecg-data", json=payload, headers=auth_header(patient["token"]))
        assert response.status_code == 400

    def test_submit_non_finite_temperature(self, client, patient):
        body = (
            f'{{"userId": "{patient["user"]["id"]}", "heartRate": 70, "spo2": 98, '
            f'"systolicBP": 120, "diastolicBP": 80, "temperature": NaN}}'
        )
        response = client.post(
            "/api/ecg-data", content=body.encode(),
            headers={**auth_header(patient["token"]), "Content-Type": "application/json"},
        )
        assert response.status_code == 400

    def test_history_newest_first(self, client, patient):
        user_id = patient["user"]["id"]
        created = client.post(
            "/api/ecg-data", json={**SAMPLE, "userId": user_id}, headers=auth_header(patient["token"]),
        ).json()

        response = client.get(f"/api/ecg-data/{user_id}", headers=auth_header(patient["token"]))
        assert response.status_code == 200
        history = response.json()
        assert len(history) == 2
        assert history[0]["id"] == created["id"]

    def test_history_filters(self, client, patient, clock):
        user_id = patient["user"]["id"]
        headers = auth_header(patient["token"])

        assert len(client.get(f"/api/ecg-data/{user_id}/day", headers=headers).json()) == 1
        assert len(client.get(f"/api/ecg-data/{user_id}/month", headers=headers).json()) == 1
        assert len(client.get(f"/api/ecg-data/{user_id}/year", headers=headers).json()) == 1
        assert len(client.get(f"/api/ecg-data/{user_id}/fortnight", headers=headers).json()) == 1

        clock.current += timedelta(days=400)
        assert client.get(f"/api/ecg-data/{user_id}/year", headers=headers).json() == []
        assert len(client.get(f"/api/ecg-data/{user_id}/fortnight", headers=headers).json()) == 1

    def test_other_patient_history_forbidden(self, client, patient, other_patient):
        response = client.get(
            f"/api/ecg-data/{other_patient['user']['id']}", headers=auth_header(patient["token"]),
        )
        assert response.status_code == 403


class TestSampleRecordLink:
    @pytest.fixture(params=["memory", "sql"])
    def store(self, request, clock, tmp_path):
        if request.param == "memory":
            return MemoryStore(clock=clock)
        config = DatabaseConfig(url=f"sqlite:///{tmp_path / 'routes.db'}")
        return SQLStore(DatabaseManager(config), clock=clock)

    def _create_record(self, client, admin_token, user_id):
        response = client.post(
            f"/api/patients/{user_id}/records", json={"notes": "intake"}, headers=auth_header(admin_token),
        )
        assert response.status_code == 201
        return response.json()["id"]

    def test_sample_linked_to_own_record(self, client, admin_token, patient):
        user_id = patient["user"]["id"]
        record_id = self._create_record(client, admin_token, user_id)
        response = client.post(
            "/api/ecg-data", json={**SAMPLE, "userId": user_id, "recordId": record_id},
            headers=auth_header(patient["token"]),
        )
        assert response.status_code == 201
        assert response.json()["recordId"] == record_id

    def test_unknown_record_rejected(self, client, patient):
        user_id = patient["user"]["id"]
        headers = auth_header(patient["token"])
        response = client.post(
            "/api/ecg-data", json={**SAMPLE, "userId": user_id, "recordId": "no-such-record"}, headers=headers,
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Record not found"}
        assert len(client.get(f"/api/ecg-data/{user_id}", headers=headers).json()) == 1

    def test_record_of_another_user_rejected(self, client, admin_token, patient, other_patient):
        foreign_record = self._create_record(client, admin_token, other_patient["user"]["id"])
        response = client.post(
            "/api/ecg-data",
            json={**SAMPLE, "userId": patient["user"]["id"], "recordId": foreign_record},
            headers=auth_header(patient["token"]),
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Record not found"}
