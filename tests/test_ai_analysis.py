import time
from datetime import datetime

import pytest

from healthmonitor.ai import LLMWrapper, build_sensor_data, render_health_report_prompt
from healthmonitor.auth import Role
from healthmonitor.database import User, VitalSample
from healthmonitor.errors import ServiceUnavailable

from conftest import auth_header


def test_report_for_self(client, patient, report_generator):
    response = client.post("/api/ai-analysis", json={}, headers=auth_header(patient["token"]))
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["report"] == report_generator.content
    assert body["generatedAt"]
    assert body["sensorData"]["timestamp"]
    assert body["sensorData"]["vitalSigns"]["heartRate"].endswith(" BPM")

    prompt = report_generator.prompts[-1]
    assert "alice@example.com" in prompt
    assert body["sensorData"]["vitalSigns"]["bloodPressure"] in prompt


def test_report_without_body_defaults_to_caller(client, patient, report_generator):
    response = client.post("/api/ai-analysis", headers=auth_header(patient["token"]))
    assert response.status_code == 200
    assert "alice@example.com" in report_generator.prompts[-1]


def test_admin_may_target_any_user(client, admin_token, other_patient, report_generator):
    response = client.post(
        "/api/ai-analysis", json={"userId": other_patient["user"]["id"]}, headers=auth_header(admin_token),
    )
    assert response.status_code == 200
    assert "bob@example.com" in report_generator.prompts[-1]


def test_patient_may_not_target_others(client, patient, other_patient, report_generator):
    response = client.post(
        "/api/ai-analysis", json={"userId": other_patient["user"]["id"]}, headers=auth_header(patient["token"]),
    )
    assert response.status_code == 403
    assert report_generator.prompts == []


def test_no_samples_is_404(client, admin_token, report_generator):
    response = client.post("/api/ai-analysis", json={}, headers=auth_header(admin_token))
    assert response.status_code == 404
    assert response.json() == {"message": "No sensor data found. Please ensure vital signs are being monitored."}


def test_unconfigured_generator(client, patient, report_generator):
    report_generator.configured = False
    response = client.post("/api/ai-analysis", json={}, headers=auth_header(patient["token"]))
    assert response.status_code == 500
    assert response.json() == {
        "message": "AI Analysis service is not configured. Please contact your administrator."
    }


def test_generation_failure(client, patient, report_generator):
    report_generator.error = ServiceUnavailable("Failed to generate AI analysis")
    response = client.post("/api/ai-analysis", json={}, headers=auth_header(patient["token"]))
    assert response.status_code == 500
    assert response.json() == {"message": "Failed to generate AI analysis"}


def test_generation_timeout(client, app, patient, report_generator, monkeypatch):
    monkeypatch.setattr(app.state.settings, "LLM_TIMEOUT_SECONDS", 0.05)
    monkeypatch.setattr(report_generator, "generate", lambda prompt, system_prompt: time.sleep(0.5))
    response = client.post("/api/ai-analysis", json={}, headers=auth_header(patient["token"]))
    assert response.status_code == 500
    assert response.json() == {"message": "AI analysis timed out"}


class TestPrompt:
    @pytest.fixture
    def user(self):
        return User(
            id="u1", email="eve@example.com", phone="5551234567", password_hash="x",
            blood_group="Others", custom_blood_group="Bombay", gender="Female", role=Role.PATIENT,
        )

    @pytest.fixture
    def sample(self):
        return VitalSample(
            id="s1", user_id="u1", timestamp=datetime(2026, 5, 15, 8, 30),
            heart_rate=72, spo2=98, systolic_bp=120, diastolic_bp=80,
            temperature=36.84, respiratory_rate=None,
        )

    def test_sensor_data_formatting(self, sample, user):
        data = build_sensor_data(sample, user)
        assert data["vitalSigns"] == {
            "heartRate": "72 BPM",
            "spo2": "98%",
            "bloodPressure": "120/80 mmHg",
            "temperature": "36.8°C",
            "respiratoryRate": "Not available",
        }
        assert data["patientInfo"]["bloodGroup"] == "Bombay"

    def test_prompt_structure(self, sample, user):
        prompt = render_health_report_prompt(build_sensor_data(sample, user))
        for heading in ("EXECUTIVE SUMMARY", "VITAL SIGNS ANALYSIS", "RECOMMENDATIONS"):
            assert heading in prompt
        assert "2026-05-15 08:30:00" in prompt
        assert "Not available" in prompt
        assert "eve@example.com" in prompt


def test_wrapper_without_api_key_refuses_to_generate():
    wrapper = LLMWrapper(api_key=None)
    assert wrapper.is_configured is False
    with pytest.raises(ServiceUnavailable) as excinfo:
        wrapper.generate("prompt")
    assert excinfo.value.status_code == 500
