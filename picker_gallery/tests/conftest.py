"""Shared pytest fixtures for API tests and database isolation."""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from picker_gallery.api.deps import get_content_store, get_db, get_picker_client
from picker_gallery.core.config import settings
from picker_gallery.db.base import Base
from picker_gallery.main import app
from picker_gallery.services import ingestion_service
from picker_gallery.tests.utils import (
    ADMIN_PASSWORD,
    ADMIN_USERNAME,
    FakeContentStore,
    FakeDownloader,
    FakePickerClient,
)


@pytest.fixture(autouse=True)
def _admin_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "admin_username", ADMIN_USERNAME)
    monkeypatch.setattr(settings, "admin_password", ADMIN_PASSWORD)
    monkeypatch.setattr(settings, "admin_password_hash", None)
    monkeypatch.setattr(settings, "gallery_replace_mode", False)
    monkeypatch.setattr(settings, "health_allowlist", [])


@pytest_asyncio.fixture()
async def session(tmp_path) -> AsyncSession:
    # One SQLite file per test keeps unique-constraint behaviour identical to production.
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'gallery.db'}", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    TestingSession = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    try:
        async with TestingSession() as session:
            yield session
    finally:
        await engine.dispose()


@pytest.fixture()
def picker() -> FakePickerClient:
    return FakePickerClient()


@pytest.fixture()
def content_store() -> FakeContentStore:
    return FakeContentStore()


@pytest.fixture()
def downloader(monkeypatch: pytest.MonkeyPatch) -> FakeDownloader:
    fake = FakeDownloader()
    monkeypatch.setattr(ingestion_service, "download_asset", fake)
    return fake


@pytest_asyncio.fixture()
async def client(
    session: AsyncSession,
    picker: FakePickerClient,
    content_store: FakeContentStore,
) -> AsyncClient:
    async def _get_test_db():
        yield session

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_picker_client] = lambda: picker
    app.dependency_overrides[get_content_store] = lambda: content_store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as async_client:
        yield async_client
    app.dependency_overrides.clear()
