"""
Project data client.

ProjectDataClient is the contract the dispatcher mutates projects through;
HttpProjectDataClient implements it against the project REST service
(`{"data": ...}` envelopes, PATCH for partial updates).
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from .config import Settings, get_settings
from .errors import ProjectDataError
from .models import ProjectList, ProjectSnapshot, Task


logger = logging.getLogger(__name__)


class ProjectDataClient(ABC):
    """Remote operations on a project's lists and tasks. Failures raise ProjectDataError."""

    @abstractmethod
    async def get_project(self, project_uid: str) -> ProjectSnapshot:
        ...

    @abstractmethod
    async def create_list(self, payload: Dict[str, Any]) -> ProjectList:
        ...

    @abstractmethod
    async def update_list(self, list_uid: str, changes: Dict[str, Any]) -> ProjectList:
        ...

    @abstractmethod
    async def delete_list(self, list_uid: str) -> None:
        ...

    @abstractmethod
    async def create_task(self, payload: Dict[str, Any]) -> Task:
        ...

    @abstractmethod
    async def update_task(self, task_uid: str, changes: Dict[str, Any]) -> Task:
        ...

    @abstractmethod
    async def delete_task(self, task_uid: str) -> None:
        ...

    async def close(self) -> None:
        return None


class HttpProjectDataClient(ProjectDataClient):
    """
    REST client for the project data service.

    Usage:
        client = HttpProjectDataClient.from_settings()
        snapshot = await client.get_project("proj_123")
        await client.close()
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Accept": "application/json", "User-Agent": "nest-assistant/0.1.0"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "HttpProjectDataClient":
        settings = settings or get_settings()
        return cls(
            base_url=settings.project_api_url,
            token=settings.project_api_token or None,
            timeout=settings.project_api_timeout,
        )

    # ----------------------------------------------------------------------- #
    # Internal: request + envelope handling
    # ----------------------------------------------------------------------- #

    @staticmethod
    def _unwrap(json_data: Any) -> Any:
        """Unwrap the standard response envelope: { "data": <actual_data>, ... }"""
        if isinstance(json_data, dict) and "data" in json_data:
            return json_data["data"]
        return json_data

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            for key in ("error", "message"):
                if body.get(key):
                    return str(body[key])
        return f"HTTP {resp.status_code}: {resp.text[:200]}"

    async def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        try:
            resp = await self._client.request(method, path, json=body)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ProjectDataError(str(e) or e.__class__.__name__) from e

        if resp.status_code >= 400:
            message = self._error_message(resp)
            logger.error(f"{method} {path} returned {resp.status_code}: {message}")
            raise ProjectDataError(message, status_code=resp.status_code)

        if resp.status_code == 204 or not resp.content:
            return None
        return self._unwrap(resp.json())

    # ----------------------------------------------------------------------- #
    # Projects
    # ----------------------------------------------------------------------- #

    async def get_project(self, project_uid: str) -> ProjectSnapshot:
        data = await self._request("GET", f"/projects/{project_uid}") or {}
        lists = []
        for raw_list in data.get("lists") or []:
            lists.append({**raw_list, "tasks": raw_list.get("tasks") or []})
        return ProjectSnapshot(
            project_uid=data.get("project_uid", project_uid),
            name=data.get("name"),
            lists=lists,
        )

    # ----------------------------------------------------------------------- #
    # Lists
    # ----------------------------------------------------------------------- #

    async def create_list(self, payload: Dict[str, Any]) -> ProjectList:
        data = await self._request("POST", "/lists", payload)
        return ProjectList.model_validate({"tasks": [], **data})

    async def update_list(self, list_uid: str, changes: Dict[str, Any]) -> ProjectList:
        data = await self._request("PATCH", f"/lists/{list_uid}", changes)
        return ProjectList.model_validate({"tasks": [], **data})

    async def delete_list(self, list_uid: str) -> None:
        await self._request("DELETE", f"/lists/{list_uid}")

    # ----------------------------------------------------------------------- #
    # Tasks
    # ----------------------------------------------------------------------- #

    async def create_task(self, payload: Dict[str, Any]) -> Task:
        data = await self._request("POST", "/tasks", payload)
        return Task.model_validate(data)

    async def update_task(self, task_uid: str, changes: Dict[str, Any]) -> Task:
        data = await self._request("PATCH", f"/tasks/{task_uid}", changes)
        return Task.model_validate(data)

    async def delete_task(self, task_uid: str) -> None:
        await self._request("DELETE", f"/tasks/{task_uid}")

    async def close(self) -> None:
        await self._client.aclose()
