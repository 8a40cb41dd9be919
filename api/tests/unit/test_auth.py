"""Tests for caller identification and authorization."""

import pytest
from fastapi import FastAPI
from fastapi.security import HTTPAuthorizationCredentials
from fastapi.testclient import TestClient

from listquery.auth import CurrentPrincipal, Principal, allow_all, get_principal, require_principal
from listquery.listdata.schema import WORKSPACE_SCHEMA


class TestGetPrincipal:
    """Test bearer token extraction."""

    @pytest.mark.asyncio
    async def test_bearer_token(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="abc123")

        principal = await get_principal(credentials)

        assert principal == Principal(token="abc123")

    @pytest.mark.asyncio
    async def test_no_credentials(self):
        assert await get_principal(None) is None

    @pytest.mark.asyncio
    async def test_empty_token(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="")

        assert await get_principal(credentials) is None

    def test_dependency_in_route(self):
        app = FastAPI()

        @app.get("/whoami")
        async def whoami(principal: CurrentPrincipal):
            return {"token": principal.token if principal else None}

        client = TestClient(app)

        assert client.get("/whoami").json() == {"token": None}
        assert client.get("/whoami", headers={"Authorization": "Bearer xyz"}).json() == {"token": "xyz"}


class TestAuthorizers:
    """Test the built-in authorizers."""

    @pytest.mark.asyncio
    async def test_allow_all(self):
        assert await allow_all(None, WORKSPACE_SCHEMA) is True

    @pytest.mark.asyncio
    async def test_require_principal(self):
        assert await require_principal(None, WORKSPACE_SCHEMA) is False
        assert await require_principal(Principal(token="t"), WORKSPACE_SCHEMA) is True
