"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator
from typing import Any

# Test database URL (use in-memory SQLite for unit tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("SLACK_ENABLED", "false")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from tests.factories import RecordingNotifier, build_benchmark  # noqa: E402
from vulcan.api.dependencies import notifier_dependency  # noqa: E402
from vulcan.api.main import app  # noqa: E402
from vulcan.database import Base, enable_sqlite_savepoints, get_db  # noqa: E402
from vulcan.models import Component, Project  # noqa: E402
from vulcan.services import ComponentDerivationService, GuideImportService  # noqa: E402


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
    )
    enable_sqlite_savepoints(engine.sync_engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture(scope="function")
async def client(
    test_session: AsyncSession,
    notifier: RecordingNotifier,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[notifier_dependency] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def benchmark_xml() -> str:
    """A three-rule XCCDF benchmark, version V2R4."""
    return build_benchmark()


@pytest_asyncio.fixture
async def project(test_session: AsyncSession) -> Project:
    project = Project(name="Operating Systems", description="OS components")
    test_session.add(project)
    await test_session.flush()
    return project


@pytest_asyncio.fixture
async def guide(test_session: AsyncSession, benchmark_xml: str):
    """An imported three-rule guide."""
    result = await GuideImportService(test_session).import_guide(benchmark_xml, filename="srg.xml")
    assert result.success, result.guide.errors.full_messages()
    return result.guide


@pytest.fixture
def make_component(project: Project):
    """Factory for unsaved components in the test project."""

    def _make(**attrs: Any) -> Component:
        values: dict[str, Any] = {
            "project_id": project.id,
            "name": "Photon OS 3",
            "prefix": "ABCD-00",
            "version": 1,
            "release": 1,
        }
        values.update(attrs)
        return Component(**values)

    return _make


@pytest_asyncio.fixture
async def component(test_session: AsyncSession, guide, make_component) -> Component:
    """A component derived from the three-rule guide."""
    result = await ComponentDerivationService(test_session).derive_from_guide(make_component(), guide)
    assert result.success, result.component.errors.full_messages()
    return result.component
