"""Shared fakes: an in-memory project service and a scripted chat model."""

import asyncio
from typing import Any, Dict, List, Optional

import pytest
from langchain_core.messages import AIMessage

from nest_assistant.config import Settings
from nest_assistant.errors import ProjectDataError
from nest_assistant.models import ProjectList, ProjectSnapshot, Task
from nest_assistant.notifications import CollectingNotifier
from nest_assistant.project_client import ProjectDataClient


PROJECT_UID = "proj_1"


class InMemoryProjectClient(ProjectDataClient):
    """ProjectDataClient backed by a dict; records every call in order."""

    def __init__(self, snapshot: ProjectSnapshot):
        self.project_uid = snapshot.project_uid
        self.lists: Dict[str, ProjectList] = {
            lst.list_uid: lst.model_copy(deep=True) for lst in snapshot.lists
        }
        self.calls: List[tuple] = []
        self.failures: Dict[str, ProjectDataError] = {}
        self._counter = 0

    @property
    def mutations(self) -> List[tuple]:
        return [call for call in self.calls if call[0] != "get_project"]

    def _record(self, op: str, *args: Any) -> None:
        self.calls.append((op, *args))
        if op in self.failures:
            raise self.failures[op]

    def _next_uid(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}_new{self._counter}"

    def _find_task(self, task_uid: str) -> Optional[Task]:
        for lst in self.lists.values():
            for task in lst.tasks:
                if task.task_uid == task_uid:
                    return task
        return None

    async def get_project(self, project_uid: str) -> ProjectSnapshot:
        self._record("get_project", project_uid)
        return ProjectSnapshot(
            project_uid=self.project_uid,
            lists=[lst.model_copy(deep=True) for lst in self.lists.values()],
        )

    async def create_list(self, payload: Dict[str, Any]) -> ProjectList:
        self._record("create_list", dict(payload))
        new_list = ProjectList(
            list_uid=self._next_uid("list"),
            project_uid=payload["project_uid"],
            name=payload["name"],
            color=payload.get("color"),
            position=payload.get("position", len(self.lists)),
        )
        self.lists[new_list.list_uid] = new_list
        return new_list

    async def update_list(self, list_uid: str, changes: Dict[str, Any]) -> ProjectList:
        self._record("update_list", list_uid, dict(changes))
        if list_uid not in self.lists:
            raise ProjectDataError("List not found", status_code=404)
        updated = ProjectList.model_validate({**self.lists[list_uid].model_dump(), **changes})
        self.lists[list_uid] = updated
        return updated

    async def delete_list(self, list_uid: str) -> None:
        self._record("delete_list", list_uid)
        if self.lists.pop(list_uid, None) is None:
            raise ProjectDataError("List not found", status_code=404)

    async def create_task(self, payload: Dict[str, Any]) -> Task:
        self._record("create_task", dict(payload))
        target = self.lists.get(payload["list_uid"])
        if target is None:
            raise ProjectDataError("List not found", status_code=404)
        task = Task.model_validate({
            "task_uid": self._next_uid("task"),
            "position": len(target.tasks),
            **{key: value for key, value in payload.items() if value is not None},
        })
        target.tasks.append(task)
        return task

    async def update_task(self, task_uid: str, changes: Dict[str, Any]) -> Task:
        self._record("update_task", task_uid, dict(changes))
        task = self._find_task(task_uid)
        if task is None:
            raise ProjectDataError("Task not found", status_code=404)
        updated = Task.model_validate({**task.model_dump(), **changes})
        tasks = self.lists[task.list_uid].tasks
        tasks[tasks.index(task)] = updated
        return updated

    async def delete_task(self, task_uid: str) -> None:
        self._record("delete_task", task_uid)
        task = self._find_task(task_uid)
        if task is None:
            raise ProjectDataError("Task not found", status_code=404)
        self.lists[task.list_uid].tasks.remove(task)


class FakeChatModel:
    """Stands in for a tool-bound chat model: replays scripted AIMessages."""

    def __init__(self, responses: List[Any], delay: float = 0.0):
        self.responses = list(responses)
        self.received: List[list] = []
        self.delay = delay

    async def ainvoke(self, messages):
        self.received.append(list(messages))
        if self.delay:
            await asyncio.sleep(self.delay)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def tool_calls_message(*calls: tuple, content: str = "") -> AIMessage:
    """AIMessage proposing (name, args) calls with ids call_0, call_1, ..."""
    return AIMessage(
        content=content,
        tool_calls=[
            {"name": name, "args": args, "id": f"call_{index}"}
            for index, (name, args) in enumerate(calls)
        ],
    )


def make_snapshot() -> ProjectSnapshot:
    return ProjectSnapshot(
        project_uid=PROJECT_UID,
        name="ProjectNest",
        lists=[
            ProjectList(
                list_uid="list_a",
                project_uid=PROJECT_UID,
                name="Backend Tasks",
                color="#3B82F6",
                position=0,
                tasks=[
                    Task(
                        task_uid="t1",
                        list_uid="list_a",
                        title="Implement auth",
                        description="JWT based",
                        status="in_progress",
                        priority="high",
                        color="#EF4444",
                        due_date="2026-11-01",
                    ),
                ],
            ),
            ProjectList(
                list_uid="list_b",
                project_uid=PROJECT_UID,
                name="Frontend Tasks",
                color="#10B981",
                position=1,
                tasks=[
                    Task(task_uid="t2", list_uid="list_b", title="Fix login bug"),
                ],
            ),
        ],
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="test-key", turn_timeout_seconds=30.0, _env_file=None)


@pytest.fixture
def snapshot() -> ProjectSnapshot:
    return make_snapshot()


@pytest.fixture
def client(snapshot) -> InMemoryProjectClient:
    return InMemoryProjectClient(snapshot)


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()
