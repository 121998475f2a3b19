import pytest
from fastapi.testclient import TestClient

from phishlens.config import Settings
from phishlens.errors import ExternalServiceError
from phishlens.main import create_app
from phishlens.services.store import InMemoryStore


def vt_payload(malicious=0, suspicious=0, harmless=60, undetected=10, status="completed"):
    return {
        "id": "u-analysis",
        "type": "analysis",
        "attributes": {
            "status": status,
            "stats": {
                "malicious": malicious,
                "suspicious": suspicious,
                "harmless": harmless,
                "undetected": undetected,
            },
        },
    }


class FakeReputation:
    """Records every URL it is asked about; URLs in ``fail`` raise."""

    def __init__(self, results=None, fail=(), default=None):
        self.calls = []
        self.results = results or {}
        self.fail = set(fail)
        self.default = default if default is not None else vt_payload()

    async def analyze(self, url):
        self.calls.append(url)
        if url in self.fail:
            raise ExternalServiceError("VirusTotal", {"error": {"code": "QuotaExceededError", "url": url}})
        return self.results.get(url, self.default)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        SECRET_KEY="test-secret",
        VIRUSTOTAL_API_KEY="test-key",
        URLSCAN_API_KEY="",
        BCRYPT_ROUNDS=4,
        STORE_BACKEND="memory",
        FRONTEND_DIR=str(tmp_path / "frontend"),
    )


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def reputation():
    return FakeReputation()


@pytest.fixture
def make_client(settings, store, reputation):
    clients = []

    def _make(**overrides):
        kwargs = {"settings": settings, "store": store, "reputation": reputation}
        kwargs.update(overrides)
        client = TestClient(create_app(**kwargs))
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for c in clients:
        c.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()


def register(client, email="alice@example.com", password="hunter22", name="Alice"):
    return client.post("/api/auth/register", json={"email": email, "password": password, "name": name})


@pytest.fixture
def authed_client(client):
    r = register(client)
    assert r.status_code == 200
    return client
