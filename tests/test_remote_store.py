# tests/test_remote_store.py

from __future__ import annotations

import dataclasses
import json

import httpx
import pytest

from offline_tasks.core.errors import AuthError, NetworkError, RemoteRejectedError
from offline_tasks.core.ports import Identity
from offline_tasks.remote.remote_store import HttpRemoteTaskStore
from offline_tasks.tasks.task_models import Location, new_task

IDENT = Identity(user_id="u1", token="secret")


def _store(handler) -> HttpRemoteTaskStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpRemoteTaskStore("http://remote.test/api/", client=client)


@pytest.mark.asyncio
async def test_put_upserts_full_record_at_task_id() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    store = _store(handler)
    task = new_task("Water plants", scheduled_time="07:00", location=Location(lat=1.5, lng=2.5))
    await store.put(task, IDENT)
    await store.aclose()

    assert len(seen) == 1
    req = seen[0]
    assert req.method == "PUT"
    assert req.url.path == f"/api/users/u1/tasks/{task.id}"
    assert req.headers["Authorization"] == "Bearer secret"
    assert json.loads(req.content) == task.to_record()


@pytest.mark.asyncio
async def test_path_segments_are_percent_encoded() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    store = _store(handler)
    task = dataclasses.replace(new_task("x"), id="x/y?z")
    await store.put(task, Identity(user_id="a/b c", token="t"))
    await store.aclose()

    assert seen[0].url.raw_path == b"/api/users/a%2Fb%20c/tasks/x%2Fy%3Fz"
    assert seen[0].url.query == b""


@pytest.mark.asyncio
async def test_put_without_identity_fails_before_any_request() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    store = _store(handler)
    with pytest.raises(AuthError):
        await store.put(new_task("x"), None)
    assert calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403])
async def test_refused_credentials_map_to_auth_error(status: int) -> None:
    store = _store(lambda request: httpx.Response(status))
    with pytest.raises(AuthError):
        await store.put(new_task("x"), IDENT)


@pytest.mark.asyncio
async def test_server_error_maps_to_rejected_network_error() -> None:
    store = _store(lambda request: httpx.Response(503, text="down"))
    with pytest.raises(RemoteRejectedError) as ei:
        await store.put(new_task("x"), IDENT)
    assert ei.value.status_code == 503
    assert isinstance(ei.value, NetworkError)


@pytest.mark.asyncio
async def test_transport_failure_maps_to_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    store = _store(handler)
    with pytest.raises(NetworkError):
        await store.put(new_task("x"), IDENT)


@pytest.mark.asyncio
async def test_get_all_parses_items_and_skips_malformed() -> None:
    good = new_task("Remote one").mark_synced()

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/api/users/u1/tasks"
        return httpx.Response(200, json={"items": [good.to_record(), {"title": "no id"}]})

    store = _store(handler)
    items = await store.get_all(IDENT)

    assert items == [good]
