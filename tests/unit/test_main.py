"""
Unit tests for backend/main.py

Part of IRL-13: HTTP surface
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from unittest.mock import patch

from backend.main import create_app, _init_sentry, _configure_cors, _log_storage_config
from backend.settings import Settings


@pytest.mark.unit
class TestCreateApp:
    """Test the create_app() factory function."""

    def test_create_app_returns_fastapi_instance(self):
        settings = Settings(environment="test", _env_file=None)
        app = create_app(settings=settings)
        assert isinstance(app, FastAPI)

    def test_create_app_uses_default_settings_when_none_provided(self):
        with patch("backend.main.get_settings") as mock_get_settings:
            mock_get_settings.return_value = Settings(environment="test", _env_file=None)

            app = create_app(settings=None)

            mock_get_settings.assert_called_once()
            assert isinstance(app, FastAPI)

    def test_create_app_configures_app_metadata(self):
        app = create_app(settings=Settings(environment="test", _env_file=None))

        assert app.title == "IronLog Progression API"
        assert app.version == "1.0.0"

    def test_routers_are_mounted(self):
        app = create_app(settings=Settings(environment="test", _env_file=None))
        paths = {route.path for route in app.routes}

        assert "/health" in paths
        assert "/state" in paths
        assert "/state/sync-status" in paths
        assert "/analytics/frequency" in paths


@pytest.mark.unit
class TestInitSentry:
    """Test Sentry initialization."""

    def test_init_sentry_skipped_when_no_dsn(self):
        settings = Settings(sentry_dsn=None, _env_file=None)

        with patch("backend.main.sentry_sdk.init") as mock_init:
            _init_sentry(settings)
            mock_init.assert_not_called()

    def test_init_sentry_called_when_dsn_provided(self):
        settings = Settings(
            sentry_dsn="https://test@sentry.io/123",
            environment="test",
            _env_file=None
        )

        with patch("backend.main.sentry_sdk.init") as mock_init:
            _init_sentry(settings)
            mock_init.assert_called_once_with(
                dsn="https://test@sentry.io/123",
                environment="test",
                traces_sample_rate=0.1,
                profiles_sample_rate=0.1,
                enable_tracing=True,
            )


@pytest.mark.unit
class TestConfigureCors:
    """Test CORS configuration."""

    def test_configure_cors_adds_middleware(self):
        app = FastAPI()
        initial_middleware_count = len(app.user_middleware)

        _configure_cors(app)

        assert len(app.user_middleware) == initial_middleware_count + 1

    def test_extra_origins_from_env(self, monkeypatch):
        monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://ironlog.app, ")
        app = FastAPI()

        _configure_cors(app)

        origins = app.user_middleware[0].kwargs["allow_origins"]
        assert "https://ironlog.app" in origins
        assert "" not in origins


@pytest.mark.unit
class TestLogStorageConfig:
    """Test startup storage logging."""

    def test_logs_slot_and_backend(self, caplog):
        settings = Settings(remote_backend="file", _env_file=None)

        with caplog.at_level("INFO"):
            _log_storage_config(settings)

        assert "ironlog_data_v5" in caplog.text
        assert "remote backend: file" in caplog.text

    def test_warns_for_memory_mirror_in_production(self, caplog):
        settings = Settings(environment="production", remote_backend="memory", _env_file=None)

        with caplog.at_level("WARNING"):
            _log_storage_config(settings)

        assert "in-memory in production" in caplog.text


@pytest.mark.integration
class TestAppIntegration:
    """Integration tests for the created app."""

    def test_health_endpoint(self):
        app = create_app(settings=Settings(environment="test", _env_file=None))
        client = TestClient(app)

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_cors_allows_requests(self):
        app = create_app(settings=Settings(environment="test", _env_file=None))

        @app.get("/test-cors")
        def cors_test():
            return {"cors": "enabled"}

        client = TestClient(app)
        response = client.get(
            "/test-cors",
            headers={"Origin": "http://localhost:3000"}
        )

        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers
