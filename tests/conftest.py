"""
Shared fixtures for the VTN test suite.
"""

import os

# Cheap hashing and no database for the whole suite; must precede vtn imports
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.pop("DATABASE_URL", None)

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from vtn.core.database import create_engine, create_session_factory, init_database
from vtn.core.identity import AuthRole, Identity
from vtn.core.security import TokenManager
from vtn.data_source.memory import InMemoryDataSource
from vtn.data_source.sql import SqlDataSource
from vtn.main import create_app

TEST_SECRET = "vtn-test-secret-key-with-at-least-32-characters"


# ==================== Identities ====================

@pytest.fixture
def business():
    return Identity("business-client", [AuthRole.business()])


@pytest.fixture
def ven_manager():
    return Identity("ven-manager-client", [AuthRole.ven_manager()])


@pytest.fixture
def user_manager():
    return Identity("user-manager-client", [AuthRole.user_manager()])


@pytest.fixture
def admin():
    """Business, VEN manager and user manager at once"""
    return Identity(
        "admin-client",
        [AuthRole.business(), AuthRole.ven_manager(), AuthRole.user_manager()],
    )


@pytest.fixture
def ven_user():
    """Build an identity holding VEN roles for the given VEN ids"""
    def make(*ven_ids: str) -> Identity:
        return Identity("ven-client", [AuthRole.ven(ven_id) for ven_id in ven_ids])
    return make


# ==================== Storage backends ====================

async def make_sql_source() -> SqlDataSource:
    """SQLite in memory; the static pool keeps one connection alive"""
    engine = create_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_database(engine)
    return SqlDataSource(create_session_factory(engine), engine)


@pytest_asyncio.fixture(params=["memory", "sql"])
async def data_source(request):
    """Every behavioural test runs against both backends"""
    if request.param == "memory":
        source = InMemoryDataSource()
    else:
        source = await make_sql_source()
    yield source
    await source.close()


# ==================== HTTP ====================

@pytest.fixture
def token_manager():
    return TokenManager(secret_key=TEST_SECRET)


@pytest.fixture
def client(token_manager):
    app = create_app(data_source=InMemoryDataSource(), token_manager=token_manager)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(token_manager):
    """Build bearer headers for a set of roles"""
    def make(*roles: AuthRole, subject: str = "test-client"):
        token = token_manager.create_token(subject, roles)
        return {"Authorization": f"Bearer {token}"}
    return make
