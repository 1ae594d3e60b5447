"""Shared fixtures: a throwaway SQLite database, an in-memory attachment store
and an HTTP client backed by the local filesystem store."""

import os
import tempfile
from pathlib import Path

# Settings are read at import time, so point them at a scratch area first.
_SCRATCH = Path(tempfile.mkdtemp(prefix="onboarding-tests-"))
_DB_FILE = _SCRATCH / "test.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_FILE}"
os.environ["APP_ENV"] = "test"
os.environ["AUDIT_ENABLED"] = "false"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["LOCAL_STORAGE_DIR"] = str(_SCRATCH / "media")
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ["COMPENSATE_ORPHANED_ATTACHMENTS"] = "false"
os.environ["NATURAL_KEY_MUTABLE_ON_UPDATE"] = "true"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import app.domain  # noqa: E402,F401
from app.core.config import settings  # noqa: E402
from app.db.base import Base, async_session_factory, engine  # noqa: E402
from tests.fakes import FakeAttachmentStore  # noqa: E402


@pytest.fixture
def store():
    return FakeAttachmentStore()


@pytest.fixture
async def db_session():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    async with async_session_factory() as session:
        yield session


@pytest.fixture
def client(tmp_path, monkeypatch):
    """TestClient over a fresh database, storing attachments under tmp_path."""
    _DB_FILE.unlink(missing_ok=True)
    monkeypatch.setattr(settings, "local_storage_dir", str(tmp_path / "media"))

    from app.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client
