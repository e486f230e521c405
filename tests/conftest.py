"""Shared pytest fixtures: a throwaway SQLite database and upload directory."""

import os
import tempfile
import uuid
from pathlib import Path

# Settings are read at import time, so the environment is fixed before importing the app
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="backoffice-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{(_TEST_ROOT / 'test.db').as_posix()}"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"
os.environ["UPLOAD_DIR"] = (_TEST_ROOT / "uploads").as_posix()

import pytest
from httpx import ASGITransport, AsyncClient

import backoffice.models  # noqa: F401
from backoffice.api import deps
from backoffice.config import settings
from backoffice.database import AsyncSessionLocal, Base, engine
from backoffice.main import app
from backoffice.services.attachment_service import AttachmentStore, UploadPolicy
from backoffice.services.directory_service import DirectoryService

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
PDF_BYTES = b"%PDF-1.4\n%test\n"


@pytest.fixture(autouse=True)
async def reset_database():
    """Fresh schema for every test; connections are dropped so no test shares a loop."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
async def db():
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads" / "dealerbills"


@pytest.fixture
def attachment_store(upload_dir: Path) -> AttachmentStore:
    return AttachmentStore(UploadPolicy(directory=upload_dir.as_posix()))


@pytest.fixture
def stored_files(upload_dir: Path):
    """Callable listing the files currently in the upload directory."""
    def _list():
        if not upload_dir.exists():
            return []
        return sorted(p.name for p in upload_dir.iterdir())
    return _list


@pytest.fixture
async def dealer(db):
    return await DirectoryService.create_dealer(db, "Sri Murugan Flour Mills")


@pytest.fixture
async def branch(db):
    return await DirectoryService.create_branch(db, "Anna Nagar")


@pytest.fixture
def api_base() -> str:
    return f"http://test{settings.API_V1_PREFIX}"


@pytest.fixture
async def async_client(api_base: str, attachment_store: AttachmentStore):
    """HTTP client against the app, with attachments going to the test directory."""
    app.dependency_overrides[deps.get_attachment_store] = lambda: attachment_store
    transport = ASGITransport(app=app)
    client = AsyncClient(transport=transport, base_url=api_base, timeout=30.0)
    yield client
    await client.aclose()
    app.dependency_overrides.clear()


@pytest.fixture
def unique_suffix() -> str:
    """Unique suffix for test data to avoid collisions."""
    return str(uuid.uuid4())[:8]
