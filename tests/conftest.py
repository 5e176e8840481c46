import os
import tempfile
from pathlib import Path

_TMP_ROOT = Path(tempfile.mkdtemp(prefix="vidshare-tests-"))

os.environ.setdefault("APP_NAME", "vidshare-test")
os.environ.setdefault("APP_PORT", "8000")
os.environ.setdefault("SECRET_KEY", "test-access-secret-key-0123456789abcdef")
os.environ.setdefault("REFRESH_TOKEN_SECRET_KEY", "test-refresh-secret-key-0123456789abcdef")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "15")
os.environ.setdefault("REFRESH_TOKEN_EXPIRE_MINUTES", "60")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("LOG_FILE", str(_TMP_ROOT / "app.log"))
os.environ.setdefault("UPLOAD_TEMP_DIR", str(_TMP_ROOT / "uploads"))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import app.models as models  # noqa: F401
from app.core.config import get_app_settings
from app.core.exceptions import StorageError
from app.db.database import Base, get_db
from app.main import app
from app.services.storage_service import StoredBlob, get_blob_storage

API = "/api/v1"
PASSWORD = "secret1"


class FakeBlobStorage:
    """In-memory stand-in for the S3 adapter."""

    def __init__(self):
        self.uploads = []
        self.seen_paths = []
        self.fail = False

    async def upload(self, local_path, folder, content_type=None):
        path = Path(local_path)
        assert path.exists(), "staged file must exist while it is uploaded"
        self.seen_paths.append(path)
        if self.fail:
            raise StorageError("File could not be uploaded to storage")
        key = f"{folder}/{len(self.uploads)}-{path.name}"
        self.uploads.append(key)
        return StoredBlob(
            url=f"https://cdn.example.com/media/{key}",
            key=key,
            size=path.stat().st_size,
            content_type=content_type,
        )


@pytest.fixture
def storage():
    return FakeBlobStorage()


@pytest.fixture
def upload_dir():
    return Path(get_app_settings().upload_temp_dir)


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    db_path = tmp_path / "vidshare.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield maker

    await engine.dispose()


@pytest_asyncio.fixture
async def client(session_maker, storage):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_storage] = lambda: storage
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_blob_storage, None)


@pytest.fixture
def register(client):
    async def _register(username, email=None, fullname=None, password=PASSWORD, with_avatar=True, with_cover=False):
        files = {}
        if with_avatar:
            files["avatar"] = ("avatar.png", b"\x89PNG fake avatar", "image/png")
        if with_cover:
            files["cover"] = ("cover.jpg", b"fake cover", "image/jpeg")
        data = {
            "username": username,
            "fullname": fullname or username.title(),
            "email": email or f"{username.lower()}@example.com",
            "password": password,
        }
        return await client.post(f"{API}/users/register", data=data, files=files or None)

    return _register


@pytest.fixture
def login(client):
    async def _login(username, password=PASSWORD):
        resp = await client.post(f"{API}/users/login", json={"username": username, "password": password})
        assert resp.status_code == 200, resp.text
        client.cookies.clear()
        return resp.json()["data"]

    return _login


@pytest.fixture
def make_user(register, login):
    """Register and log in a user; returns (user data, auth headers)."""

    async def _make_user(username):
        resp = await register(username)
        assert resp.status_code == 201, resp.text
        tokens = await login(username)
        return resp.json()["data"], {"Authorization": f"Bearer {tokens['accessToken']}"}

    return _make_user


@pytest.fixture
def publish(client):
    async def _publish(headers, title="My video", description="A description", duration=None):
        data = {"title": title, "description": description}
        if duration is not None:
            data["duration"] = str(duration)
        files = {
            "thumbnail": ("thumb.jpg", b"fake thumbnail", "image/jpeg"),
            "videoFile": ("clip.mp4", b"fake-video-binary", "video/mp4"),
        }
        resp = await client.post(f"{API}/videos/", data=data, files=files, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _publish
