"""
Action schema registry for the project assistant.

The closed set of actions the model may propose. Each action has a Pydantic
input schema (the parameter contract) and a LangChain tool declaration that
is bound to the chat model as its capability manifest. Tools here only
describe; execution lives in the dispatcher.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Type

from langchain_core.tools import BaseTool, tool
from pydantic import BaseModel, Field

from .models import ActionType, TaskPriority, TaskStatus


# --------------------------------------------------------------------------- #
# Tool Input Schemas
# --------------------------------------------------------------------------- #

class CreateListInput(BaseModel):
    """Input for creating a list."""
    name: str = Field(..., description="The name of the list to create")
    color: Optional[str] = Field(None, description="The color of the list in hex format (e.g., #3B82F6). Optional.")
    position: Optional[int] = Field(None, description="The position of the list. Optional, defaults to end.")


class UpdateListInput(BaseModel):
    """Input for updating a list."""
    list_uid: str = Field(..., description="The UID of the list to update")
    name: Optional[str] = Field(None, description="The new name for the list. Optional.")
    color: Optional[str] = Field(None, description="The new color for the list in hex format. Optional.")
    position: Optional[int] = Field(None, description="The new position for the list. Optional.")


class DeleteListInput(BaseModel):
    """Input for deleting a list."""
    list_uid: str = Field(..., description="The UID of the list to delete")


class CreateTaskInput(BaseModel):
    """Input for creating a task."""
    list_uid: str = Field(..., description="The UID of the list to add the task to")
    title: str = Field(..., description="The title of the task")
    description: Optional[str] = Field(None, description="The description of the task. Optional.")
    priority: Optional[TaskPriority] = Field(None, description="The priority of the task (low, medium, high)")
    status: Optional[TaskStatus] = Field(None, description="The status of the task (todo, in_progress, completed)")
    color: Optional[str] = Field(None, description="The color of the task in hex format. Optional.")
    due_date: Optional[str] = Field(None, description="The due date of the task in ISO format (YYYY-MM-DD). Optional.")
    position: Optional[int] = Field(None, description="The position of the task in the list. Optional, defaults to end.")


class UpdateTaskInput(BaseModel):
    """Input for updating a task. Only supplied fields change."""
    task_uid: str = Field(..., description="The UID of the task to update")
    title: Optional[str] = Field(None, description="The new title for the task. Optional.")
    description: Optional[str] = Field(None, description="The new description for the task. Optional.")
    priority: Optional[TaskPriority] = Field(None, description="The new priority for the task (low, medium, high). Optional.")
    status: Optional[TaskStatus] = Field(None, description="The new status for the task (todo, in_progress, completed). Optional.")
    color: Optional[str] = Field(None, description="The new color for the task in hex format. Optional.")
    due_date: Optional[str] = Field(
        None,
        description="The new due date of the task in ISO format (YYYY-MM-DD). Optional. Use null to remove due date.",
    )
    is_completed: Optional[bool] = Field(None, description="Whether the task is completed. Optional.")


class DeleteTaskInput(BaseModel):
    """Input for deleting a task."""
    task_uid: str = Field(..., description="The UID of the task to delete")


class MoveTaskInput(BaseModel):
    """Input for moving a task to another list."""
    task_uid: str = Field(..., description="The UID of the task to move")
    target_list_uid: str = Field(..., description="The UID of the list to move the task to")
    position: Optional[int] = Field(None, description="The position in the target list. Optional.")


class GetProjectDataInput(BaseModel):
    """No parameters."""


# --------------------------------------------------------------------------- #
# Tool declarations (schema for LLM binding)
# --------------------------------------------------------------------------- #

@tool("create_list", args_schema=CreateListInput)
def create_list(**kwargs) -> str:
    """Create a new list in the project."""
    return "List action recorded"


@tool("update_list", args_schema=UpdateListInput)
def update_list(**kwargs) -> str:
    """Update an existing list."""
    return "List action recorded"


@tool("delete_list", args_schema=DeleteListInput)
def delete_list(**kwargs) -> str:
    """Delete a list and all its tasks."""
    return "List action recorded"


@tool("create_task", args_schema=CreateTaskInput)
def create_task(**kwargs) -> str:
    """Create a new task in a list."""
    return "Task action recorded"


@tool("update_task", args_schema=UpdateTaskInput)
def update_task(**kwargs) -> str:
    """Update an existing task."""
    return "Task action recorded"


@tool("delete_task", args_schema=DeleteTaskInput)
def delete_task(**kwargs) -> str:
    """Delete a task."""
    return "Task action recorded"


@tool("move_task", args_schema=MoveTaskInput)
def move_task(**kwargs) -> str:
    """Move a task from one list to another."""
    return "Task action recorded"


@tool("get_project_data", args_schema=GetProjectDataInput)
def get_project_data(**kwargs) -> str:
    """Get current project data including all lists and tasks for context."""
    return "Project data requested"


# --------------------------------------------------------------------------- #
# Tool Registry
# --------------------------------------------------------------------------- #

# List of tools for LLM binding
ALL_TOOLS: List[BaseTool] = [
    create_list,
    update_list,
    delete_list,
    create_task,
    update_task,
    delete_task,
    move_task,
    get_project_data,
]

# Parameter contract per action
ACTION_SCHEMAS: Dict[ActionType, Type[BaseModel]] = {
    ActionType.CREATE_LIST: CreateListInput,
    ActionType.UPDATE_LIST: UpdateListInput,
    ActionType.DELETE_LIST: DeleteListInput,
    ActionType.CREATE_TASK: CreateTaskInput,
    ActionType.UPDATE_TASK: UpdateTaskInput,
    ActionType.DELETE_TASK: DeleteTaskInput,
    ActionType.MOVE_TASK: MoveTaskInput,
    ActionType.GET_PROJECT_DATA: GetProjectDataInput,
}


def lookup_action(name: str) -> Optional[ActionType]:
    """Resolve a model-supplied action name, or None if it is not in the registry."""
    try:
        return ActionType(name)
    except ValueError:
        return None


def required_parameters(action: ActionType) -> List[str]:
    schema = ACTION_SCHEMAS[action]
    return [name for name, field in schema.model_fields.items() if field.is_required()]


def describe_actions() -> List[Dict[str, object]]:
    """
    Render the registry as plain descriptors.

    Returns:
        One dict per action: name, description and a parameter list of
        {name, type, required, description}.
    """
    descriptors = []
    for tool_ in ALL_TOOLS:
        schema = ACTION_SCHEMAS[ActionType(tool_.name)]
        json_schema = schema.model_json_schema()
        properties = json_schema.get("properties", {})
        required = set(json_schema.get("required", []))
        descriptors.append({
            "name": tool_.name,
            "description": tool_.description,
            "parameters": [
                {
                    "name": param,
                    "type": _primitive_type(spec),
                    "required": param in required,
                    "description": spec.get("description", ""),
                }
                for param, spec in properties.items()
            ],
        })
    return descriptors


def _primitive_type(spec: Dict[str, object]) -> str:
    if "type" in spec:
        return str(spec["type"])
    # Optional[...] renders as anyOf [<type>, null]; enums as $ref
    for option in spec.get("anyOf", []):
        if option.get("type") and option["type"] != "null":
            return str(option["type"])
        if "$ref" in option:
            return "string"
    return "string"
