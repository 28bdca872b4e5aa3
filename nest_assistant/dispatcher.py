"""
Action dispatcher.

Validates model-proposed action calls against the registry and executes
them against the project data client, one at a time and in order. A failing
call becomes a failed ActionResult; it never stops the rest of the batch.
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from .config import Settings, get_settings
from .errors import ProjectDataError
from .models import ActionCall, ActionResult, ActionType, ProjectSnapshot
from .notifications import LoggingNotifier, Notifier, send_notification
from .project_client import ProjectDataClient
from .tools import ACTION_SCHEMAS, lookup_action, required_parameters


logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], Awaitable[ActionResult]]

# Title of the notification sent after each successful mutation
_SUCCESS_TITLES: Dict[ActionType, str] = {
    ActionType.CREATE_LIST: "List created",
    ActionType.UPDATE_LIST: "List updated",
    ActionType.DELETE_LIST: "List deleted",
    ActionType.CREATE_TASK: "Task created",
    ActionType.UPDATE_TASK: "Task updated",
    ActionType.DELETE_TASK: "Task deleted",
    ActionType.MOVE_TASK: "Task moved",
}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _summarize_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(loc) for loc in item.get("loc", ())) or "input"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)


class ActionDispatcher:
    """
    Executes action calls for one project.

    Usage:
        dispatcher = ActionDispatcher(client, project_uid="proj_1")
        results = await dispatcher.dispatch_all(reply.action_calls)
    """

    def __init__(
        self,
        client: ProjectDataClient,
        project_uid: str,
        notifier: Optional[Notifier] = None,
        on_snapshot: Optional[Callable[[ProjectSnapshot], None]] = None,
        settings: Optional[Settings] = None,
    ):
        self._client = client
        self._project_uid = project_uid
        self._notifier = notifier or LoggingNotifier()
        self._on_snapshot = on_snapshot
        self._settings = settings or get_settings()
        self._handlers: Dict[ActionType, Handler] = {
            ActionType.CREATE_LIST: self._create_list,
            ActionType.UPDATE_LIST: self._update_list,
            ActionType.DELETE_LIST: self._delete_list,
            ActionType.CREATE_TASK: self._create_task,
            ActionType.UPDATE_TASK: self._update_task,
            ActionType.DELETE_TASK: self._delete_task,
            ActionType.MOVE_TASK: self._move_task,
            ActionType.GET_PROJECT_DATA: self._get_project_data,
        }

    # ----------------------------------------------------------------------- #
    # Entry points
    # ----------------------------------------------------------------------- #

    async def dispatch_all(self, calls: List[ActionCall]) -> List[ActionResult]:
        """Run calls strictly in order; returns one result per call, aligned by position."""
        results: List[ActionResult] = []
        for index, call in enumerate(calls, start=1):
            logger.info(f"Dispatching action {index}/{len(calls)}: {call.name}")
            results.append(await self.dispatch(call))
        return results

    async def dispatch(self, call: ActionCall) -> ActionResult:
        action = lookup_action(call.name)
        if action is None:
            logger.warning(f"Unknown function proposed: {call.name}")
            return ActionResult.fail(f"Unknown function: {call.name}")

        if call.args_error is not None:
            logger.warning(f"Rejected {call.name}: unparseable arguments ({call.args_error})")
            return ActionResult.fail(f"Invalid arguments for {call.name}: {call.args_error}")

        validated = self._validate(action, call.args)
        if isinstance(validated, ActionResult):
            logger.warning(f"Rejected {call.name}: {validated.error}")
            return validated

        logger.debug(f"{call.name} args: {validated}")
        try:
            result = await self._handlers[action](validated)
        except ProjectDataError as e:
            result = ActionResult.fail(e.message)
        except Exception as e:
            logger.exception(f"Unexpected error executing {call.name}")
            result = ActionResult.fail(str(e) or f"Failed to execute {call.name}")

        self._notify(action, result)
        return result

    # ----------------------------------------------------------------------- #
    # Validation
    # ----------------------------------------------------------------------- #

    def _validate(self, action: ActionType, args: Dict[str, Any]) -> Union[Dict[str, Any], ActionResult]:
        """
        Check args against the action's schema.

        Returns:
            The supplied parameters (only those the model actually set), or a
            failed ActionResult when a required parameter is missing or a value
            has the wrong shape.
        """
        missing = [name for name in required_parameters(action) if _is_blank(args.get(name))]
        if missing:
            return ActionResult.fail(f"Missing required parameter(s): {', '.join(missing)}")

        try:
            parsed = ACTION_SCHEMAS[action].model_validate(args)
        except ValidationError as e:
            return ActionResult.fail(f"Invalid parameters for {action.value}: {_summarize_validation_error(e)}")

        return parsed.model_dump(mode="json", exclude_unset=True)

    # ----------------------------------------------------------------------- #
    # Notifications
    # ----------------------------------------------------------------------- #

    def _notify(self, action: ActionType, result: ActionResult) -> None:
        if action == ActionType.GET_PROJECT_DATA:
            return
        if result.success:
            send_notification(self._notifier, _SUCCESS_TITLES[action], result.message or _SUCCESS_TITLES[action])
        else:
            send_notification(self._notifier, "Error", result.error or f"Failed to {action.value}", destructive=True)

    # ----------------------------------------------------------------------- #
    # Lists
    # ----------------------------------------------------------------------- #

    async def _create_list(self, params: Dict[str, Any]) -> ActionResult:
        payload = {
            "project_uid": self._project_uid,
            "name": params["name"],
            "color": params.get("color") or self._settings.default_list_color,
        }
        # No position: the service appends at the end
        if params.get("position") is not None:
            payload["position"] = params["position"]

        new_list = await self._client.create_list(payload)
        return ActionResult.ok(new_list, message=f'Created list "{new_list.name}"')

    async def _update_list(self, params: Dict[str, Any]) -> ActionResult:
        list_uid = params.pop("list_uid")
        changes = {key: value for key, value in params.items() if value is not None}
        updated = await self._client.update_list(list_uid, changes)
        return ActionResult.ok(updated, message=f'Updated list "{updated.name}"')

    async def _delete_list(self, params: Dict[str, Any]) -> ActionResult:
        # Contained tasks are removed by the service
        await self._client.delete_list(params["list_uid"])
        return ActionResult.ok(message="List has been deleted successfully")

    # ----------------------------------------------------------------------- #
    # Tasks
    # ----------------------------------------------------------------------- #

    async def _create_task(self, params: Dict[str, Any]) -> ActionResult:
        payload = {
            "list_uid": params["list_uid"],
            "title": params["title"],
            "description": params.get("description") or "",
            "status": params.get("status") or "todo",
            "priority": params.get("priority") or "medium",
            "color": params.get("color") or self._settings.default_task_color,
        }
        for optional in ("due_date", "position"):
            if params.get(optional) is not None:
                payload[optional] = params[optional]

        new_task = await self._client.create_task(payload)
        return ActionResult.ok(new_task, message=f'Created task "{new_task.title}"')

    async def _update_task(self, params: Dict[str, Any]) -> ActionResult:
        task_uid = params.pop("task_uid")
        # An explicit null due_date clears it; any other null means "leave as is"
        changes = {
            key: value for key, value in params.items()
            if value is not None or key == "due_date"
        }
        updated = await self._client.update_task(task_uid, changes)
        return ActionResult.ok(updated, message=f'Updated task "{updated.title}"')

    async def _delete_task(self, params: Dict[str, Any]) -> ActionResult:
        await self._client.delete_task(params["task_uid"])
        return ActionResult.ok(message="Task has been deleted successfully")

    async def _move_task(self, params: Dict[str, Any]) -> ActionResult:
        """Delete the task and recreate it in the target list (not atomic)."""
        task_uid = params["task_uid"]
        target_list_uid = params["target_list_uid"]

        snapshot = await self._client.get_project(self._project_uid)
        task = snapshot.find_task(task_uid)
        if task is None:
            return ActionResult.fail(f"Task not found: {task_uid}")
        if not any(lst.list_uid == target_list_uid for lst in snapshot.lists):
            return ActionResult.fail(f"Target list not found: {target_list_uid}")

        payload = {
            "list_uid": target_list_uid,
            "title": task.title,
            "description": task.description or "",
            "status": task.status.value,
            "priority": task.priority.value,
            "color": task.color,
            "is_completed": task.is_completed,
            "due_date": task.due_date,
        }
        if params.get("position") is not None:
            payload["position"] = params["position"]

        await self._client.delete_task(task_uid)
        try:
            moved = await self._client.create_task(payload)
        except Exception as e:
            logger.error(f"Task {task_uid} was deleted but could not be recreated in {target_list_uid}: {e!r}")
            reason = e.message if isinstance(e, ProjectDataError) else (str(e) or e.__class__.__name__)
            return ActionResult.fail(f"Task was removed from its list but could not be recreated: {reason}")

        return ActionResult.ok(moved, message=f'Moved task "{moved.title}"')

    # ----------------------------------------------------------------------- #
    # Project data
    # ----------------------------------------------------------------------- #

    async def _get_project_data(self, params: Dict[str, Any]) -> ActionResult:
        snapshot = await self._client.get_project(self._project_uid)
        if self._on_snapshot is not None:
            self._on_snapshot(snapshot)
        return ActionResult.ok(snapshot)
