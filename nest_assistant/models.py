from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --------------------------------------------------------------------------- #
# Project entities (as served by the project-data service)
# --------------------------------------------------------------------------- #

class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Task(BaseModel):
    """A task inside a list."""

    model_config = ConfigDict(extra="ignore")

    task_uid: str
    list_uid: str
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    color: Optional[str] = None
    position: int = 0
    due_date: Optional[str] = None
    is_completed: bool = False

    # Audit fields
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProjectList(BaseModel):
    """A list inside a project, with its tasks in display order."""

    model_config = ConfigDict(extra="ignore")

    list_uid: str
    project_uid: str
    name: str
    color: Optional[str] = None
    position: int = 0
    tasks: List[Task] = Field(default_factory=list)


class ProjectSnapshot(BaseModel):
    """Point-in-time view of a project's lists and tasks."""

    project_uid: str
    name: Optional[str] = None
    lists: List[ProjectList] = Field(default_factory=list)
    fetched_at: datetime = Field(default_factory=_utcnow)

    @property
    def tasks(self) -> List[Task]:
        return [task for project_list in self.lists for task in project_list.tasks]

    def find_task(self, task_uid: str) -> Optional[Task]:
        for task in self.tasks:
            if task.task_uid == task_uid:
                return task
        return None


# --------------------------------------------------------------------------- #
# Actions
# --------------------------------------------------------------------------- #

class ActionType(str, Enum):
    CREATE_LIST = "create_list"
    UPDATE_LIST = "update_list"
    DELETE_LIST = "delete_list"
    CREATE_TASK = "create_task"
    UPDATE_TASK = "update_task"
    DELETE_TASK = "delete_task"
    MOVE_TASK = "move_task"
    GET_PROJECT_DATA = "get_project_data"


class ActionCall(BaseModel):
    """
    One action proposed by the model.

    `name` is kept as a plain string: it is only checked against the
    registry at dispatch time, and `args` stay unvalidated until then.
    """

    name: str
    args: Dict[str, Any] = Field(default_factory=dict)
    id: Optional[str] = None  # Tool-call id assigned by the model provider
    # Set when the provider could not parse the arguments; `args` is then empty
    args_error: Optional[str] = None

    def to_prompt_string(self) -> str:
        rendered = ", ".join(f"{key}={value!r}" for key, value in self.args.items())
        return f"{self.name}({rendered})"


class ActionResult(BaseModel):
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "ActionResult":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: str) -> "ActionResult":
        return cls(success=False, error=error)


# --------------------------------------------------------------------------- #
# Conversation
# --------------------------------------------------------------------------- #

MessageRole = Literal["user", "assistant"]


class ConversationMessage(BaseModel):
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)
    action_calls: Optional[List[ActionCall]] = None
    action_results: Optional[List[ActionResult]] = None

    # Set when the turn failed (timeout, model error) instead of completing
    error: Optional[str] = None
    pending: bool = False


class TurnReply(BaseModel):
    """What one model turn produced: free text plus proposed calls."""

    text: str = ""
    action_calls: List[ActionCall] = Field(default_factory=list)


class Notification(BaseModel):
    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"
