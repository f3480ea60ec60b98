"""
Shared fixtures: an app wired to the in-memory store and a temp upload dir.
"""
import pytest
from fastapi.testclient import TestClient

from inkpost.core.memory_redis import AsyncMemoryRedis
from inkpost.core.store import BlogStore
from inkpost.core.uploads import FileArea
from inkpost.main import create_app


PNG_HEADER = b"\x89PNG\r\n\x1a\n"


def png_bytes(size):
    """Return a fake PNG payload of exactly ``size`` bytes."""
    return PNG_HEADER + b"\0" * max(size - len(PNG_HEADER), 0)


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture(autouse=True)
def env(monkeypatch, upload_dir):
    monkeypatch.setenv("USE_FAKE_REDIS", "1")
    monkeypatch.setenv("UPLOAD_DIR", str(upload_dir))
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.delenv("THUMBNAIL_MAX_BYTES", raising=False)
    monkeypatch.delenv("AVATAR_MAX_BYTES", raising=False)
    monkeypatch.delenv("TOKEN_TTL_SECONDS", raising=False)


@pytest.fixture
def client():
    with TestClient(create_app()) as c:
        yield c


@pytest.fixture
def store():
    return BlogStore(AsyncMemoryRedis())


@pytest.fixture
def files(upload_dir):
    area = FileArea(str(upload_dir))
    area.ensure()
    return area


def register(client, name="Alice", email="a@x.com", password="secret1"):
    resp = client.post(
        "/api/users/register",
        json={"name": name, "email": email, "password": password, "password2": password},
    )
    assert resp.status_code == 201, resp.text
    return resp


def login(client, email="a@x.com", password="secret1"):
    resp = client.post("/api/users/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(client):
    """Registered and logged-in user A."""
    register(client)
    data = login(client)
    return {"id": data["id"], "headers": auth_headers(data["token"])}


@pytest.fixture
def bob(client):
    """Registered and logged-in user B."""
    register(client, name="Bob", email="b@x.com", password="secret2")
    data = login(client, email="b@x.com", password="secret2")
    return {"id": data["id"], "headers": auth_headers(data["token"])}


def create_post(client, user, title="First post", category="Art",
                description="A description long enough", size=1024, filename="pic.png"):
    return client.post(
        "/api/posts",
        data={"title": title, "category": category, "description": description},
        files={"thumbnail": (filename, png_bytes(size), "image/png")},
        headers=user["headers"],
    )
