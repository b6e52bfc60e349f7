import pytest
from httpx import ASGITransport, AsyncClient

from playerdir.api import create_app
from playerdir.directory import PlayerDirectory
from playerdir.errors import StorageError
from playerdir.persistence import MemoryPlayerTable


@pytest.fixture
async def client():
    app = create_app(PlayerDirectory(MemoryPlayerTable()))
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        async_client.app = app
        yield async_client


def _payload(email: str = "a@x.com", name: str = "A") -> dict:
    return {"email": email, "name": name, "nick_name": name.lower(), "age": 30}


@pytest.mark.anyio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.anyio
async def test_create_and_conflict(client: AsyncClient):
    resp = await client.post("/players", json=_payload())
    assert resp.status_code == 201
    body = resp.json()
    assert body["id"]
    assert body["nick_name"] == "a"
    assert body["matches"] == []

    resp = await client.post("/players", json=_payload(name="B"))
    assert resp.status_code == 409

    resp = await client.get("/players", params={"email": "a@x.com"})
    assert resp.status_code == 200
    assert [player["name"] for player in resp.json()] == ["A"]


@pytest.mark.anyio
async def test_create_validates_payload(client: AsyncClient):
    resp = await client.post("/players", json={"name": "No Email"})
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_list_players(client: AsyncClient):
    resp = await client.get("/players")
    assert resp.json() == []

    for idx in range(3):
        await client.post("/players", json=_payload(email=f"p{idx}@x.com"))

    resp = await client.get("/players")
    assert len(resp.json()) == 3


@pytest.mark.anyio
async def test_add_match(client: AsyncClient):
    created = (await client.post("/players", json=_payload())).json()

    for match_id in ("m1", "m2"):
        resp = await client.post(
            f"/players/{created['id']}/matches",
            json={"email": "a@x.com", "match_id": match_id},
        )
        assert resp.status_code == 200

    assert resp.json()["matches"] == ["m1", "m2"]


@pytest.mark.anyio
async def test_add_match_unknown_player(client: AsyncClient):
    await client.post("/players", json=_payload())

    resp = await client.post("/players/missing/matches", json={"email": "a@x.com", "match_id": "m1"})
    assert resp.status_code == 404


class _BrokenTable(MemoryPlayerTable):
    def scan_all(self):
        raise StorageError("throttled")


@pytest.mark.anyio
async def test_storage_error_is_service_unavailable():
    app = create_app(PlayerDirectory(_BrokenTable()))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        resp = await client.get("/players")
    assert resp.status_code == 503


@pytest.mark.anyio
async def test_empty_email_filter_matches_nothing(client: AsyncClient):
    await client.post("/players", json=_payload())

    resp = await client.get("/players", params={"email": ""})
    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.anyio
async def test_malformed_stored_item_is_service_unavailable():
    table = MemoryPlayerTable()
    table.put({"id": "p1", "name": "no email"})
    app = create_app(PlayerDirectory(table))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        resp = await client.get("/players")
    assert resp.status_code == 503
