"""
Tests for the bootstrap credential
"""

from unittest.mock import AsyncMock, patch

import pytest

from vtn.core.errors import Conflict
from vtn.core.identity import RoleKind
from vtn.data_source.memory import InMemoryDataSource
from vtn.services.bootstrap import ensure_bootstrap_credential_exists


@pytest.fixture
def bootstrap_settings():
    with patch("vtn.services.bootstrap.settings") as mock_settings:
        mock_settings.BOOTSTRAP_CLIENT_ID = "admin"
        mock_settings.BOOTSTRAP_CLIENT_SECRET = "admin-secret"
        yield mock_settings


class TestBootstrapCredential:
    @pytest.mark.asyncio
    async def test_creates_credential(self, bootstrap_settings):
        source = InMemoryDataSource()
        await ensure_bootstrap_credential_exists(source.auth)

        roles = await source.auth.check_credentials("admin", "admin-secret")
        assert {role.kind for role in roles} == {
            RoleKind.BUSINESS,
            RoleKind.USER_MANAGER,
            RoleKind.VEN_MANAGER,
        }

    @pytest.mark.asyncio
    async def test_second_run_is_noop(self, bootstrap_settings):
        source = InMemoryDataSource()
        await ensure_bootstrap_credential_exists(source.auth)
        await ensure_bootstrap_credential_exists(source.auth)

        assert await source.auth.check_credentials("admin", "admin-secret") is not None

    @pytest.mark.asyncio
    async def test_conflict_is_tolerated(self, bootstrap_settings):
        auth_source = AsyncMock()
        auth_source.add_credential.side_effect = Conflict("exists")

        await ensure_bootstrap_credential_exists(auth_source)
        auth_source.add_credential.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_skipped_without_secret(self, bootstrap_settings):
        bootstrap_settings.BOOTSTRAP_CLIENT_SECRET = None
        auth_source = AsyncMock()

        await ensure_bootstrap_credential_exists(auth_source)
        auth_source.add_credential.assert_not_called()
