import io
import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlmodel import SQLModel, select

REPO_ROOT = Path(__file__).resolve().parents[1]
BACKEND_PATH = REPO_ROOT / "backend"
if str(BACKEND_PATH) not in sys.path:
    sys.path.insert(0, str(BACKEND_PATH))

# Set environment variables BEFORE importing app modules; settings are cached
# on first use.
_TMP = Path(tempfile.mkdtemp(prefix="civic_tests_"))
os.environ["JWT_SECRET"] = "test-secret-key-for-pytest-only-12345"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP / 'test.db'}"
os.environ["STORAGE_PROVIDER"] = "local"
os.environ["LOCAL_STORAGE_PATH"] = str(_TMP / "storage")
os.environ["APP_ENV"] = "test"
# moto needs credentials to exist, even fake ones
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")

import civic_api.auth as auth  # noqa: E402
import civic_api.database as database  # noqa: E402
from civic_api.main import app  # noqa: E402
from civic_api.models import Profile, Report  # noqa: E402

TEST_PASSWORD = "testpass123"


def png_bytes(size=(8, 8), color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest_asyncio.fixture
async def db():
    """Fresh schema for every test."""
    async with database.engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield database.engine


@pytest_asyncio.fixture
async def session(db):
    async with database.async_session_factory() as s:
        yield s


@pytest_asyncio.fixture
async def client(db):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def make_user(db) -> Callable[..., Tuple[str, str]]:
    """Return a factory that creates a user directly in the DB and returns (id, token)."""

    async def _create(email: str, role: str = "user", full_name: str = None, points: int = 0, city: str = None):
        async with database.async_session_factory() as s:
            user = await auth.create_user(
                s,
                email=email,
                password=TEST_PASSWORD,
                full_name=full_name or email.split("@")[0],
                role=role,
            )
            user_id = user.id
            if points or city:
                profile = (await s.exec(select(Profile).where(Profile.user_id == user_id))).first()
                profile.points = points
                profile.city = city
                s.add(profile)
                await s.commit()
            roles = await auth.get_roles(s, user_id)
            return user_id, auth.create_access_token(subject=user_id, roles=roles)

    return _create


@pytest_asyncio.fixture
async def user_headers(make_user):
    _, token = await make_user("citizen@example.com")
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def admin_headers(make_user):
    _, token = await make_user("admin@example.com", role="admin")
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def insert_report(db):
    """Factory inserting a report row directly, bypassing the submission flow."""
    counter = {"n": 0}
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)

    async def _insert(**fields):
        counter["n"] += 1
        n = counter["n"]
        data = {
            "report_number": f"CIV20260101-{n:05d}",
            "category": "pothole",
            "title": f"Report {n}",
            "description": "Something is broken",
            "status": "submitted",
            "created_at": base + timedelta(minutes=n),
        }
        data.update(fields)
        async with database.async_session_factory() as s:
            report = Report(**data)
            s.add(report)
            await s.commit()
            await s.refresh(report)
            return report

    return _insert
