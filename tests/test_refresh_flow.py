"""
Tests for refresh-on-401 through the client dispatcher.

The fake server accepts whatever access token it issued last and answers
401 to anything else.
"""

import asyncio

import pytest

from welcomesign_sdk.exceptions import WelcomeSignAPIError
from tests.fakes import json_response
from tests.fakes import make_client


class FakeAuthServer:
    def __init__(self, valid_token="T2", refresh_status=200):
        self.valid_token = valid_token
        self.refresh_status = refresh_status
        self.issued = 1

    def __call__(self, request):
        if request.path == "/auth/refresh":
            if self.refresh_status != 200:
                return json_response(self.refresh_status, {"message": "refresh failed"})
            self.issued += 1
            return json_response(
                200,
                {
                    "data": {
                        "token": f"T{self.issued}",
                        "refresh_token": f"R{self.issued}",
                        "expires_at": "2026-10-19T14:00:00Z",
                    }
                },
            )
        if request.authorization == f"Bearer {self.valid_token}":
            return json_response(200, {"data": {"path": request.path}})
        return json_response(401, {"message": "Token expired"})


@pytest.mark.asyncio
async def test_retry_uses_newly_issued_token():
    """
    GIVEN: a stale access token T1 and refresh token R1
    WHEN: a request fails with 401
    THEN: the token is refreshed and the retry carries T2
    """
    refreshed = []
    client, transport = make_client(
        FakeAuthServer(), token="T1", refresh_token="R1", on_token_refresh=refreshed.append
    )

    result = await client.request("/properties/p1")

    assert result == {"path": "/properties/p1"}
    first, refresh, retry = transport.request_calls
    assert first.authorization == "Bearer T1"
    assert refresh.path == "/auth/refresh"
    assert refresh.method == "POST"
    assert refresh.authorization is None
    assert refresh.json() == {"refresh_token": "R1"}
    assert retry.authorization == "Bearer T2"
    assert client.get_tokens()["token"] == "T2"
    assert client.get_tokens()["refresh_token"] == "R2"
    assert [bundle.token for bundle in refreshed] == ["T2"]
    assert refreshed[0].expires_at == "2026-10-19T14:00:00Z"


@pytest.mark.asyncio
async def test_concurrent_401s_share_one_refresh():
    """
    GIVEN: {T1, R1} and two requests issued concurrently
    WHEN: both get 401 before any refresh has happened
    THEN: exactly one POST /auth/refresh with R1 is sent and both retry with T2
    """
    client, transport = make_client(FakeAuthServer(), token="T1", refresh_token="R1")

    a, b = await asyncio.gather(client.request("/properties/a"), client.request("/properties/b"))

    assert a == {"path": "/properties/a"}
    assert b == {"path": "/properties/b"}
    refreshes = transport.calls_to("/auth/refresh")
    assert len(refreshes) == 1
    assert refreshes[0].json() == {"refresh_token": "R1"}
    retries = [
        call for call in transport.request_calls
        if call.path != "/auth/refresh" and call.authorization == "Bearer T2"
    ]
    assert sorted(call.path for call in retries) == ["/properties/a", "/properties/b"]


@pytest.mark.asyncio
async def test_many_concurrent_401s_one_refresh_in_flight():
    in_flight = 0
    peak = 0
    server = FakeAuthServer()

    async def handler(request):
        nonlocal in_flight, peak
        if request.path == "/auth/refresh":
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
        return server(request)

    client, transport = make_client(handler, token="T1", refresh_token="R1")

    results = await asyncio.gather(*(client.request(f"/content/{i}") for i in range(20)))

    assert len(results) == 20
    assert peak == 1
    assert len(transport.calls_to("/auth/refresh")) == 1


@pytest.mark.asyncio
async def test_skip_token_refresh_never_refreshes():
    auth_errors = []
    client, transport = make_client(
        FakeAuthServer(), token="T1", refresh_token="R1", on_auth_error=auth_errors.append
    )

    with pytest.raises(WelcomeSignAPIError) as exc_info:
        await client.request("/properties", skip_token_refresh=True)

    assert exc_info.value.status_code == 401
    assert transport.calls_to("/auth/refresh") == []
    assert auth_errors == [exc_info.value]


@pytest.mark.asyncio
async def test_401_without_refresh_token_fires_auth_error():
    auth_errors = []
    client, transport = make_client(FakeAuthServer(), token="T1", on_auth_error=auth_errors.append)

    with pytest.raises(WelcomeSignAPIError) as exc_info:
        await client.request("/users/me")

    assert transport.request_count == 1
    assert len(auth_errors) == 1
    assert auth_errors[0] is exc_info.value
    assert auth_errors[0].message == "Token expired"


@pytest.mark.asyncio
async def test_second_401_after_refresh_is_not_refreshed_again():
    """
    GIVEN: the server rejects even the freshly issued token
    WHEN: a request fails with 401
    THEN: one refresh, one retry, then the 401 surfaces
    """
    client, transport = make_client(
        FakeAuthServer(valid_token="never"), token="T1", refresh_token="R1"
    )

    with pytest.raises(WelcomeSignAPIError) as exc_info:
        await client.request("/properties")

    assert exc_info.value.status_code == 401
    assert len(transport.calls_to("/auth/refresh")) == 1
    assert len(transport.calls_to("/properties")) == 2


@pytest.mark.asyncio
async def test_refresh_failure_keeps_tokens():
    """
    GIVEN: the refresh endpoint fails with 500
    WHEN: a request gets 401
    THEN: the caller gets the refresh failure and T1/R1 are left as-is
    """
    client, transport = make_client(
        FakeAuthServer(refresh_status=500), token="T1", refresh_token="R1"
    )

    with pytest.raises(WelcomeSignAPIError) as exc_info:
        await client.request("/properties")

    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "refresh failed"
    assert client.get_tokens()["token"] == "T1"
    assert client.get_tokens()["refresh_token"] == "R1"
    assert not client.auth.in_progress
    assert len(transport.calls_to("/properties")) == 1


@pytest.mark.asyncio
async def test_refresh_failure_reaches_every_waiter():
    client, transport = make_client(
        FakeAuthServer(refresh_status=500), token="T1", refresh_token="R1"
    )

    results = await asyncio.gather(
        client.request("/a"), client.request("/b"), return_exceptions=True
    )

    assert all(isinstance(r, WelcomeSignAPIError) and r.status_code == 500 for r in results)
    assert len(transport.calls_to("/auth/refresh")) == 1


@pytest.mark.asyncio
async def test_rejected_refresh_token_fires_auth_error_once():
    auth_errors = []

    def handler(request):
        return json_response(401, {"error": "invalid_token"})

    client, transport = make_client(
        handler, token="T1", refresh_token="R1", on_auth_error=auth_errors.append
    )

    with pytest.raises(WelcomeSignAPIError):
        await client.request("/properties")

    assert len(transport.calls_to("/auth/refresh")) == 1
    assert len(auth_errors) == 1
    assert client.get_tokens()["refresh_token"] == "R1"


@pytest.mark.asyncio
async def test_next_401_after_completed_refresh_starts_new_refresh():
    server = FakeAuthServer()
    client, transport = make_client(server, token="T1", refresh_token="R1")

    await client.request("/a")
    server.valid_token = "T3"
    await client.request("/b")

    refreshes = transport.calls_to("/auth/refresh")
    assert [r.json() for r in refreshes] == [{"refresh_token": "R1"}, {"refresh_token": "R2"}]
    assert client.get_tokens()["token"] == "T3"


@pytest.mark.asyncio
async def test_device_request_401_is_not_refreshed():
    client, transport = make_client(
        FakeAuthServer(), token="T1", refresh_token="R1", device_token="D1"
    )

    with pytest.raises(WelcomeSignAPIError):
        await client.device_heartbeat()

    assert transport.calls_to("/auth/refresh") == []
