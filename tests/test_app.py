import asyncio

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import SECURITY_HEADERS, create_app
from healthmonitor.auth import INSECURE_DEFAULT_SECRET
from healthmonitor.database import MemoryStore
from healthmonitor.errors import ConfigurationError

from conftest import auth_header, login, register


_TRACKED_STORE_METHODS = (
    "create_user", "get_user_by_id", "get_user_by_email", "list_users",
    "create_vital_sample", "get_latest_vital_sample", "get_device_binding", "health_check",
)


class LoopRecordingStore(MemoryStore):
    """Notes store calls made on a thread that is running the event loop."""

    def __init__(self, clock):
        super().__init__(clock=clock)
        self.calls_on_loop = []

    def _note(self, name):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return
        self.calls_on_loop.append(name)


def _recording(name):
    def method(self, *args, **kwargs):
        self._note(name)
        return getattr(MemoryStore, name)(self, *args, **kwargs)
    method.__name__ = name
    return method


for _name in _TRACKED_STORE_METHODS:
    setattr(LoopRecordingStore, _name, _recording(_name))


def make_settings(**overrides):
    values = {"_env_file": None, "ENVIRONMENT": "test", "SESSION_SECRET": "s3cret", "LOG_LEVEL": "WARNING"}
    values.update(overrides)
    return Settings(**values)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["environment"] == "test"
        assert body["uptime"] >= 0

    def test_ready(self, client):
        response = client.get("/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"
        assert response.json()["storage"] == {"backend": "memory", "healthy": True}

    def test_not_ready_when_store_unhealthy(self, client, store, monkeypatch):
        monkeypatch.setattr(store, "health_check", lambda: False)
        response = client.get("/ready")
        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"


class TestStartup:
    @pytest.mark.parametrize("secret", [None, INSECURE_DEFAULT_SECRET])
    def test_production_refuses_missing_secret(self, secret):
        with pytest.raises(ConfigurationError):
            create_app(make_settings(ENVIRONMENT="production", SESSION_SECRET=secret))

    def test_production_with_secret_starts(self):
        app = create_app(make_settings(ENVIRONMENT="production", SEED_ADMIN=False))
        assert app.state.jwt_handler.uses_insecure_default is False

    def test_development_falls_back_to_insecure_secret(self):
        app = create_app(make_settings(ENVIRONMENT="development", SESSION_SECRET=None))
        assert app.state.jwt_handler.uses_insecure_default is True

    def test_admin_seeded_once(self):
        app = create_app(make_settings())
        store = MemoryStore()
        app.state.store = store
        with TestClient(app):
            pass
        with TestClient(app):
            pass
        assert [u.email for u in store.list_users()] == ["admin@healthmonitor.com"]

    def test_seeding_can_be_disabled(self):
        app = create_app(make_settings(SEED_ADMIN=False))
        store = MemoryStore()
        app.state.store = store
        with TestClient(app):
            pass
        assert store.list_users() == []


class TestResponses:
    def test_security_headers_in_production(self):
        app = create_app(make_settings(ENVIRONMENT="production", SEED_ADMIN=False))
        with TestClient(app) as client:
            response = client.get("/health")
        for header, value in SECURITY_HEADERS.items():
            assert response.headers[header] == value

    def test_no_security_headers_outside_production(self, client):
        assert "X-Frame-Options" not in client.get("/health").headers

    def test_unknown_route_uses_message_body(self, client):
        response = client.get("/api/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"message": "Not Found"}

    def _broken_client(self, environment):
        app = create_app(make_settings(ENVIRONMENT=environment, SEED_ADMIN=False))

        @app.get("/api/boom")
        async def boom():
            raise RuntimeError("kaboom")

        return TestClient(app, raise_server_exceptions=False)

    def test_unhandled_error_hidden_in_production(self):
        with self._broken_client("production") as client:
            response = client.get("/api/boom")
        assert response.status_code == 500
        assert response.json() == {"message": "Internal Server Error"}

    def test_unhandled_error_detailed_in_development(self):
        with self._broken_client("development") as client:
            response = client.get("/api/boom")
        assert response.status_code == 500
        body = response.json()
        assert body["message"] == "kaboom"
        assert "RuntimeError" in body["stack"]


class TestStoreAccessOffEventLoop:
    @pytest.fixture
    def store(self, clock):
        return LoopRecordingStore(clock=clock)

    def test_async_routes_run_store_calls_in_worker_threads(self, client, store):
        store.calls_on_loop.clear()

        register(client, "carol@example.com")
        token = login(client, "carol@example.com")
        response = client.post("/api/vitals", json={"device_id": "esp32", "data_type": "vitals", "heart_rate": 80})
        assert response.status_code == 201
        assert client.post("/api/ai-analysis", json={}, headers=auth_header(token)).status_code == 200
        assert client.get("/ready").status_code == 200

        assert store.calls_on_loop == []
