# src/offline_tasks/remote/remote_store.py

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from ..core.errors import AuthError, NetworkError, RemoteRejectedError
from ..core.ports import Identity
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

_AUTH_STATUSES = {401, 403}


class HttpRemoteTaskStore:
    """
    Remote task collection over JSON/HTTP.

    Layout:
      PUT {base_url}/users/{user_id}/tasks/{task_id}   body = task record (upsert)
      GET {base_url}/users/{user_id}/tasks             -> {"items": [record, ...]}

    The identity is passed into every call; the store never looks up a
    "current user" on its own. No timeout is layered on top of the client's.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---------- helpers ----------

    @staticmethod
    def _require_identity(identity: Identity | None) -> Identity:
        if identity is None:
            raise AuthError("an authenticated identity is required to reach the remote store")
        return identity

    def _tasks_url(self, identity: Identity) -> str:
        return f"{self.base_url}/users/{quote(identity.user_id, safe='')}/tasks"

    @staticmethod
    def _headers(identity: Identity) -> dict[str, str]:
        return {"Authorization": f"Bearer {identity.token}"}

    async def _request(self, method: str, url: str, identity: Identity, **kwargs: Any) -> httpx.Response:
        try:
            r = await self._client.request(method, url, headers=self._headers(identity), **kwargs)
        except httpx.TransportError as exc:
            raise NetworkError(f"{method} {url} failed: {exc}") from exc

        if r.status_code in _AUTH_STATUSES:
            raise AuthError(f"{method} {url} refused: {r.status_code}")
        if not r.is_success:
            raise RemoteRejectedError(
                f"{method} {url} failed: {r.status_code} {r.text}", status_code=r.status_code
            )
        return r

    # ---------- tasks ----------

    async def put(self, task: Task, identity: Identity | None) -> None:
        ident = self._require_identity(identity)
        url = f"{self._tasks_url(ident)}/{quote(task.id, safe='')}"
        await self._request("PUT", url, ident, json=task.to_record())
        logger.debug("Remote put ok id=%s user=%s", task.id, ident.user_id)

    async def get_all(self, identity: Identity | None) -> list[Task]:
        ident = self._require_identity(identity)
        r = await self._request("GET", self._tasks_url(ident), ident)
        try:
            items = r.json().get("items", [])
        except (ValueError, AttributeError) as exc:
            raise RemoteRejectedError(
                f"unexpected task listing payload: {exc}", status_code=r.status_code
            ) from exc

        out: list[Task] = []
        for item in items:
            try:
                out.append(Task.from_record(item))
            except (ValueError, TypeError, AttributeError):
                logger.warning("Skipping malformed remote task record: %r", item)
        return out
