"""Shared fixtures: one throwaway SQLite database per test, httpx clients over ASGI."""

import httpx
import pytest

from smrt.main import create_app
from smrt.utils.database import init_models


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def app(anyio_backend, tmp_path):
    app = create_app(f"sqlite+aiosqlite:///{tmp_path / 'smrt.db'}")
    await init_models(app.state.engine)
    yield app
    await app.state.engine.dispose()


@pytest.fixture
async def db(app):
    async with app.state.sessionmaker() as session:
        yield session


@pytest.fixture
async def make_client(app):
    """Factory for independent clients; each one keeps its own cookie jar."""
    clients = []

    def _make(**kwargs) -> httpx.AsyncClient:
        client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://testserver", **kwargs
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        await client.aclose()


class Api:
    """Thin wrapper over the routes most tests need as setup."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def register(self, email: str, password: str = "pw", name: str = None) -> dict:
        payload = {"email": email, "password": password}
        if name is not None:
            payload["name"] = name
        res = await self.client.post("/api/open/user/register", json=payload)
        assert res.status_code == 201, res.text
        return res.json()

    async def login(self, email: str, password: str = "pw") -> httpx.Response:
        return await self.client.post("/api/open/user/login", json={"email": email, "password": password})

    async def create_project(self, name: str = "P1", **extra) -> dict:
        res = await self.client.post("/api/session/project/create", json={"name": name, **extra})
        assert res.status_code == 200, res.text
        return res.json()

    async def create_key(self, project_id: str, name: str = "K1") -> dict:
        res = await self.client.post(f"/api/session/project/{project_id}/keys", json={"name": name})
        assert res.status_code == 200, res.text
        return res.json()


@pytest.fixture
def make_api(make_client):
    def _make() -> Api:
        return Api(make_client())

    return _make


@pytest.fixture
async def alice(make_api) -> Api:
    """A registered (and therefore logged in) user."""
    api = make_api()
    await api.register("alice@test.com", name="Alice")
    return api


@pytest.fixture
async def bob(make_api) -> Api:
    api = make_api()
    await api.register("bob@test.com")
    return api


@pytest.fixture
async def cli_setup(alice):
    """Alice's project plus a CLI key; returns (project, key, headers)."""
    project = await alice.create_project("CLI Project")
    key = await alice.create_key(project["id"], "ci-bot")
    headers = {"x-cli-secret": key["secret"]}
    return project, key, headers
