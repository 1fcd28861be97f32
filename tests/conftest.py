import pytest
from fastapi.testclient import TestClient

from refashion.config import Settings
from refashion.main import create_app
from refashion.services.remote_store import SqliteRemoteStore
from refashion.state.background import BackgroundWriter
from refashion.state.storage import MemoryStorage


@pytest.fixture
def settings(tmp_path):
    return Settings(
        SQLITE_DB_PATH=str(tmp_path / "store.db"),
        LOCAL_STORAGE_BACKEND="memory",
        REMOTE_WRITE_ATTEMPTS=1,
        REMOTE_WRITE_BACKOFF=0,
        CHECKOUT_DELAY_SECONDS=0,
        RESEND_API_KEY="",
    )


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def writer():
    return BackgroundWriter(max_attempts=2, backoff=0)


@pytest.fixture
async def remote(tmp_path):
    store = SqliteRemoteStore(str(tmp_path / "remote.db"))
    await store.init()
    return store


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def signed_in(client):
    r = client.post(
        "/api/auth",
        json={"action": "signup", "name": "Asha", "email": "asha@example.com", "password": "x"},
    )
    assert r.status_code == 200
    return client
