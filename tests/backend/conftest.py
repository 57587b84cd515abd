import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from vidtube.core import db as db_module
from vidtube.core.security import hash_password
from vidtube.main import app
from vidtube.models.user import User
from vidtube.services.asset_store import AssetStore, StoredAsset, get_asset_store


TEST_DB_URL = "sqlite://:memory:?cache=shared"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


class FakeAssetStore(AssetStore):
    """
    In-memory asset store.
    Records every upload and deletion; `fail_uploads` / `fail_deletes`
    switch the corresponding operation to failure.
    """

    def __init__(self):
        self.uploaded: list[StoredAsset] = []
        self.deleted: list[tuple[str, str]] = []
        self.fail_uploads = False
        self.fail_deletes = False
        self.video_duration = 42.5

    def is_available(self) -> bool:
        return True

    async def upload(self, path: str, resource_type: str = "auto"):
        assert os.path.exists(path), "upload must receive an existing local file"
        if self.fail_uploads:
            return None
        key = f"{resource_type}_{uuid.uuid4().hex[:10]}"
        asset = StoredAsset(
            url=f"https://assets.test/{key}",
            key=key,
            resource_type=resource_type,
            duration=self.video_duration if resource_type == "video" else None,
        )
        self.uploaded.append(asset)
        return asset

    async def delete(self, key: str, resource_type: str = "image") -> bool:
        if self.fail_deletes:
            return False
        self.deleted.append((key, resource_type))
        return True


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest.fixture
def asset_store():
    """Fake asset store injected in place of Cloudinary."""
    store = FakeAssetStore()
    app.dependency_overrides[get_asset_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_asset_store, None)


@pytest_asyncio.fixture
async def db():
    """Fresh database without an HTTP client, for service-level tests."""
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def client(asset_store):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    await _init_test_db()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def create_user():
    """
    Factory fixture to create users directly via ORM.
    """

    async def _create_user(password: str = "UserPass!23", username: str | None = None) -> tuple[User, str]:
        username = username or f"user_{uuid.uuid4().hex[:6]}"
        user = await User.create(
            username=username,
            email=f"{username}@example.com",
            fullname=f"Full {username}",
            avatar=f"https://assets.test/avatar_{username}",
            password_hash=hash_password(password),
        )
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the login endpoint.
    """

    async def _get_headers(username: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/v1/users/login",
            json={"username": username, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["data"]["accessToken"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers


@pytest_asyncio.fixture
async def signed_in(create_user, auth_header_factory):
    """
    Factory: create a user and return (user, headers).
    """

    async def _signed_in(username: str | None = None) -> tuple[User, dict[str, str]]:
        user, password = await create_user(username=username)
        headers = await auth_header_factory(user.username, password)
        return user, headers

    return _signed_in


def upload_files(**named_files) -> dict:
    """Build an httpx `files=` mapping of small in-memory uploads."""
    return {name: (filename, b"fake-bytes", "application/octet-stream") for name, filename in named_files.items()}


@pytest_asyncio.fixture
async def publish_video(client):
    """
    Factory: publish a video through the API and return its response data.
    """

    async def _publish(headers: dict, title: str = "My video", description: str = "About it") -> dict:
        resp = await client.post(
            "/api/v1/videos",
            headers=headers,
            data={"title": title, "description": description},
            files=upload_files(videoFile="clip.mp4", thumbnail="thumb.png"),
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _publish
