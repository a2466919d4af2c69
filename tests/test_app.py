"""Application wiring: readiness gate, configuration checks and error bodies."""

import pytest
from fastapi.testclient import TestClient

from spiritlove.config import Settings, validate_settings
from spiritlove.main import app
from spiritlove.readiness import ReadinessGate


class TestReadinessGate:
    def test_routes_answer_503_until_ready(self, auth_client):
        test_client, _ = auth_client
        app.state.readiness = ReadinessGate()

        for method, path in [
            ("post", "/api/auth/login"),
            ("get", "/api/auth/me"),
            ("get", "/api/auth/check-setup/alice"),
            ("post", "/api/auth/password-reset/validate"),
            ("get", "/api/users/me"),
        ]:
            response = getattr(test_client, method)(path)
            assert response.status_code == 503
            assert response.json() == {
                "message": "Service temporarily unavailable - database initializing"
            }

        app.state.readiness.mark_ready()
        assert test_client.get("/api/auth/me").status_code == 401

    def test_health_reports_state(self, auth_client):
        test_client, _ = auth_client
        assert test_client.get("/health").json() == {"status": "healthy"}

        app.state.readiness = ReadinessGate()
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "starting"}

    def test_run_invokes_initializer_once(self):
        gate = ReadinessGate()
        calls = []

        gate.run(lambda: calls.append(1))
        gate.run(lambda: calls.append(2))

        assert calls == [1]
        assert gate.is_ready
        assert gate.error is None

    def test_failed_initializer_still_opens_gate(self):
        gate = ReadinessGate()

        def broken():
            raise RuntimeError("tables already exist")

        gate.run(broken)

        assert gate.is_ready
        assert isinstance(gate.error, RuntimeError)

    def test_gates_are_independent(self):
        first, second = ReadinessGate(), ReadinessGate()
        first.mark_ready()
        assert not second.is_ready


class TestValidateSettings:
    def test_development_defaults_pass(self):
        validate_settings(Settings(environment="development"))

    def test_production_requires_secret(self):
        with pytest.raises(RuntimeError, match="SESSION_SECRET"):
            validate_settings(Settings(environment="production"))

    def test_production_with_secret_passes(self):
        config = Settings(
            environment="production",
            session_secret="a" * 64,
            frontend_url="https://spiritloveplay.app",
        )
        validate_settings(config)
        assert config.cookie_secure is True

    def test_production_rejects_bad_frontend_url(self):
        config = Settings(environment="production", session_secret="a" * 64, frontend_url="app")
        with pytest.raises(RuntimeError, match="FRONTEND_URL"):
            validate_settings(config)

    def test_more_emails_than_names(self):
        config = Settings(
            environment="production",
            session_secret="a" * 64,
            couple_names=["daniel"],
            couple_emails=["d@x.com", "p@x.com"],
        )
        with pytest.raises(RuntimeError, match="COUPLE_EMAILS"):
            validate_settings(config)

    def test_cookie_not_secure_in_development(self):
        config = Settings(environment="development")
        assert config.cookie_secure is False
        assert config.session_max_age_seconds == 30 * 24 * 60 * 60


class TestErrorBodies:
    def test_malformed_json_is_400(self, auth_client):
        test_client, _ = auth_client
        response = test_client.post(
            "/api/auth/login",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request"

    def test_unknown_route_uses_message_body(self, auth_client):
        test_client, _ = auth_client
        response = test_client.get("/api/nope")
        assert response.status_code == 404
        assert "message" in response.json()

    def test_unexpected_error_is_500(self, auth_client, monkeypatch):
        from spiritlove.services.auth import LocalPasswordAuthFlow

        def explode(self, name):
            raise RuntimeError("boom")

        monkeypatch.setattr(LocalPasswordAuthFlow, "check_setup", explode)
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/api/auth/check-setup/alice")
        assert response.status_code == 500
        assert response.json() == {"message": "Internal server error"}
