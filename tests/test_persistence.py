import json

import pytest

from welcomesign_sdk.exceptions import WelcomeSignAPIError
from welcomesign_sdk.persistence import PersistentWelcomeSignClient
from welcomesign_sdk.persistence import create_client
from welcomesign_sdk.token_store import FileTokenStorage
from welcomesign_sdk.token_store import MemoryTokenStorage
from tests.fakes import MockTransport
from tests.fakes import json_response
from tests.fakes import make_client
from tests.fakes import make_settings

KEY = "welcomesign_tokens"


def stored(storage, key=KEY):
    raw = storage.get(key)
    return json.loads(raw) if raw else None


def auth_server(request):
    if request.path in ("/auth/login", "/auth/register", "/auth/refresh"):
        return json_response(
            200, {"data": {"token": "T-new", "refresh_token": "R-new", "expires_at": 1700000000}}
        )
    if request.path == "/devices/register":
        return json_response(201, {"device_token": "D-new"})
    if request.authorization == "Bearer T-new":
        return json_response(200, {"ok": True})
    return json_response(401, {"message": "expired"})


def persistent_client(storage, handler=auth_server, **kwargs):
    return make_client(
        handler, client_cls=PersistentWelcomeSignClient, storage=storage, **kwargs
    )


def test_saved_tokens_are_loaded():
    storage = MemoryTokenStorage(
        {KEY: json.dumps({"token": "T1", "refresh_token": "R1", "device_token": "D1"})}
    )

    client = create_client(make_settings(), storage=storage)

    assert client.get_tokens() == {"token": "T1", "refresh_token": "R1", "device_token": "D1"}


def test_corrupt_storage_is_ignored():
    storage = MemoryTokenStorage({KEY: "{not json"})

    client = create_client(make_settings(), storage=storage, token="T0")

    assert client.get_tokens()["token"] == "T0"


@pytest.mark.asyncio
async def test_login_saves_tokens_and_chains_callback():
    storage = MemoryTokenStorage()
    seen = []
    client, transport = persistent_client(storage, on_token_refresh=seen.append)

    await client.login("host@example.com", "secret")

    assert transport.request_calls[0].json() == {"email": "host@example.com", "password": "secret"}
    assert transport.request_calls[0].authorization is None
    assert stored(storage) == {
        "token": "T-new",
        "refresh_token": "R-new",
        "device_token": None,
        "expires_at": 1700000000,
    }
    assert [bundle.token for bundle in seen] == ["T-new"]


@pytest.mark.asyncio
async def test_refresh_saves_tokens_and_keeps_device_token():
    storage = MemoryTokenStorage(
        {KEY: json.dumps({"token": "T1", "refresh_token": "R1", "device_token": "D1"})}
    )
    client, _ = persistent_client(storage)

    assert await client.request("/users/me") == {"ok": True}

    assert stored(storage)["token"] == "T-new"
    assert stored(storage)["device_token"] == "D1"


@pytest.mark.asyncio
async def test_register_device_and_set_tokens_are_saved():
    storage = MemoryTokenStorage()
    client, _ = persistent_client(storage, token="T-new", refresh_token="R-new")

    await client.register_device({"code": "ABC123", "property_id": "p1", "platform": "roku"})
    assert stored(storage)["device_token"] == "D-new"

    client.set_tokens("T9", "R9")
    assert stored(storage)["token"] == "T9"


@pytest.mark.asyncio
async def test_logout_saves_cleared_user_tokens():
    storage = MemoryTokenStorage()
    client, _ = persistent_client(storage, token="T-new", refresh_token="R-new", device_token="D1")

    await client.logout()

    assert stored(storage) == {"token": None, "refresh_token": None, "device_token": "D1"}


@pytest.mark.asyncio
async def test_invalid_device_session_removes_stored_tokens_before_callback():
    storage = MemoryTokenStorage({KEY: json.dumps({"device_token": "D1"})})
    present_at_callback = []

    client, _ = persistent_client(
        storage,
        handler=lambda req: json_response(401, {"message": "unpaired"}),
        on_device_session_invalid=lambda: present_at_callback.append(KEY in storage),
    )

    with pytest.raises(WelcomeSignAPIError):
        await client.get_device_info()

    assert present_at_callback == [False]
    assert storage.get(KEY) is None


def test_storage_failures_are_logged_not_raised(caplog):
    class BrokenStorage:
        def get(self, key):
            raise OSError("disk gone")

        def set(self, key, value):
            raise OSError("disk gone")

        def remove(self, key):
            raise OSError("disk gone")

    client = create_client(make_settings(), storage=BrokenStorage())
    client.transport = MockTransport()

    client.set_tokens("T1", "R1")
    client.clear_tokens()

    assert client.get_tokens()["token"] is None
    assert "Failed to save tokens" in caplog.text
    assert "Failed to clear tokens" in caplog.text


def test_default_storage_is_file_at_settings_path(tmp_path):
    path = tmp_path / "tokens.json"
    client = create_client(make_settings(token_cache_path=path, storage_key="kiosk"))
    client.transport = MockTransport()

    client.set_device_token("D1")

    assert isinstance(client.storage, FileTokenStorage)
    assert json.loads(json.loads(path.read_text())["kiosk"])["device_token"] == "D1"


def test_file_storage_keeps_other_keys(tmp_path):
    storage = FileTokenStorage(tmp_path / "nested" / "store.json")

    assert storage.get("a") is None
    storage.set("a", "1")
    storage.set("b", "2")
    storage.remove("a")

    assert storage.get("a") is None
    assert storage.get("b") == "2"
    storage.remove("b")
    storage.remove("b")
    assert not storage.path.exists()


def test_file_storage_reads_unreadable_file_as_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("not json at all")

    assert FileTokenStorage(path).get(KEY) is None
