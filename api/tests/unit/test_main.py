"""Tests for main FastAPI application."""

import logging
import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient
from contextlib import asynccontextmanager

from listquery.config import Settings
from listquery.main import configure_logging, create_app, lifespan


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, log_level="ERROR", **overrides)


def _mock_pool():
    mock_pool = AsyncMock()
    mock_conn = AsyncMock()
    mock_conn.execute = AsyncMock()

    @asynccontextmanager
    async def mock_acquire():
        yield mock_conn

    mock_pool.acquire = mock_acquire
    return mock_pool


class TestMainApp:
    """Test main FastAPI application."""

    @pytest.fixture
    def memory_settings(self):
        with patch("listquery.main.get_settings", return_value=_settings(store_backend="memory")) as mock:
            yield mock

    @pytest.fixture
    def postgres_settings(self):
        with patch("listquery.main.get_settings", return_value=_settings(store_backend="postgres")) as mock:
            yield mock

    @pytest.fixture
    def mock_get_db_pool(self):
        """Mock get_db_pool function."""
        with patch("listquery.main.get_db_pool") as mock:
            mock.return_value = _mock_pool()
            yield mock

    def test_create_app(self, memory_settings):
        app = create_app()

        assert app.title == "List Query API"
        assert app.version == "1.0.0"
        assert app.docs_url == "/docs"
        assert app.openapi_url == "/openapi.json"

    def test_list_routes_registered(self, memory_settings):
        app = create_app()
        paths = {route.path for route in app.routes}

        assert "/v1/{entity}/list-page-data" in paths

    def test_root_endpoint(self, memory_settings):
        client = TestClient(create_app())

        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "List Query API"
        assert data["health"] == "/health"
        assert data["entities"] == ["product", "workspace"]

    def test_liveness_check(self, memory_settings):
        client = TestClient(create_app())

        response = client.get("/live")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_health_check_memory_store(self, memory_settings, mock_get_db_pool):
        client = TestClient(create_app())

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["store"] == "memory"
        assert "database" not in data
        mock_get_db_pool.assert_not_called()

    def test_health_check_postgres_store(self, postgres_settings, mock_get_db_pool):
        client = TestClient(create_app())

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    def test_health_check_database_failure(self, postgres_settings, mock_get_db_pool):
        mock_get_db_pool.side_effect = Exception("Database connection failed")
        client = TestClient(create_app())

        response = client.get("/health")

        assert response.status_code == 503
        assert response.headers["content-type"] == "application/problem+json"
        data = response.json()
        assert data["title"] == "Service Unavailable"
        assert "Database connection failed" in data["detail"]

    def test_cors_middleware(self, memory_settings):
        client = TestClient(create_app())

        response = client.options("/v1/workspace/list-page-data", headers={
            "Origin": "https://example.com",
            "Access-Control-Request-Method": "POST"
        })

        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers

    def test_openapi_docs_available(self, memory_settings):
        client = TestClient(create_app())

        response = client.get("/openapi.json")

        assert response.status_code == 200
        assert "/v1/{entity}/list-page-data" in response.json()["paths"]


class TestConfigureLogging:
    """Test logging setup from settings."""

    @patch("listquery.main.logging.basicConfig")
    def test_uses_configured_format(self, mock_basic_config):
        settings = _settings(log_format="%(levelname)s %(message)s")

        configure_logging(settings)

        mock_basic_config.assert_called_once_with(level=logging.ERROR, format="%(levelname)s %(message)s")

    @pytest.mark.asyncio
    @patch("listquery.main.db_manager")
    @patch("listquery.main.configure_logging")
    async def test_lifespan_applies_settings(self, mock_configure_logging, mock_db_manager):
        mock_db_manager.close = AsyncMock()
        settings = _settings(store_backend="memory", log_format="%(message)s")

        with patch("listquery.main.get_settings", return_value=settings):
            app = create_app()
            async with lifespan(app):
                mock_configure_logging.assert_called_once_with(settings)


class TestLifespan:
    """Test application lifespan events."""

    @pytest.mark.asyncio
    @patch("listquery.main.db_manager")
    @patch("listquery.main.get_db_pool")
    async def test_lifespan_postgres_startup(self, mock_get_db_pool, mock_db_manager):
        mock_db_manager.initialize = AsyncMock()
        mock_db_manager.close = AsyncMock()
        mock_get_db_pool.return_value = _mock_pool()

        with patch("listquery.main.get_settings", return_value=_settings(store_backend="postgres")):
            app = create_app()
            async with lifespan(app):
                mock_db_manager.initialize.assert_called_once()
                mock_get_db_pool.assert_called_once()

        mock_db_manager.close.assert_called_once()

    @pytest.mark.asyncio
    @patch("listquery.main.db_manager")
    async def test_lifespan_memory_skips_database(self, mock_db_manager):
        mock_db_manager.initialize = AsyncMock()
        mock_db_manager.close = AsyncMock()

        with patch("listquery.main.get_settings", return_value=_settings(store_backend="memory")):
            app = create_app()
            async with lifespan(app):
                mock_db_manager.initialize.assert_not_called()

    @pytest.mark.asyncio
    @patch("listquery.main.db_manager")
    async def test_lifespan_startup_failure(self, mock_db_manager):
        mock_db_manager.initialize = AsyncMock(side_effect=Exception("DB init failed"))

        with patch("listquery.main.get_settings", return_value=_settings(store_backend="postgres")):
            app = create_app()
            with pytest.raises(Exception, match="DB init failed"):
                async with lifespan(app):
                    pass

    @pytest.mark.asyncio
    @patch("listquery.main.db_manager")
    async def test_lifespan_shutdown_error(self, mock_db_manager):
        mock_db_manager.close = AsyncMock(side_effect=Exception("Shutdown error"))

        with patch("listquery.main.get_settings", return_value=_settings(store_backend="memory")):
            app = create_app()
            # Should not raise, just log the error
            async with lifespan(app):
                pass

        mock_db_manager.close.assert_called_once()
