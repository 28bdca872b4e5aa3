"""
Turns per-action outcomes into the single reply shown to the user.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from .models import ActionCall, ActionResult, ActionType, ProjectSnapshot


GENERIC_ACKNOWLEDGEMENT = "I processed your request. Let me know if you need anything else!"

# (phrase with entity, phrase without)
_SUCCESS_PHRASES: Dict[str, tuple] = {
    ActionType.CREATE_LIST.value: ('Created list "{}"', "Created list"),
    ActionType.UPDATE_LIST.value: ('Updated list "{}"', "Updated list"),
    ActionType.DELETE_LIST.value: ('Deleted list "{}"', "Deleted list"),
    ActionType.CREATE_TASK.value: ('Created task "{}"', "Created task"),
    ActionType.UPDATE_TASK.value: ('Updated task "{}"', "Updated task"),
    ActionType.DELETE_TASK.value: ('Deleted task "{}"', "Deleted task"),
    ActionType.MOVE_TASK.value: ('Moved task "{}"', "Moved task"),
}


def _entity_label(data: Any) -> Optional[str]:
    for attr in ("name", "title"):
        value = data.get(attr) if isinstance(data, dict) else getattr(data, attr, None)
        if value:
            return str(value)
    return None


def _label_from_snapshot(call: ActionCall, snapshot: Optional[ProjectSnapshot]) -> Optional[str]:
    """Name of the entity a call refers to by UID, as last seen in the snapshot."""
    if snapshot is None:
        return None
    list_uid = call.args.get("list_uid")
    task_uid = call.args.get("task_uid")
    if task_uid:
        task = snapshot.find_task(task_uid)
        return task.title if task else None
    if list_uid:
        for project_list in snapshot.lists:
            if project_list.list_uid == list_uid:
                return project_list.name
    return None


def _success_line(call: ActionCall, result: ActionResult, snapshot: Optional[ProjectSnapshot]) -> str:
    with_entity, without = _SUCCESS_PHRASES.get(call.name, (f"{call.name} completed",) * 2)
    label = _entity_label(result.data) if result.data is not None else None
    label = label or _label_from_snapshot(call, snapshot)
    if label and "{}" in with_entity:
        return f"✅ {with_entity.format(label)}"
    return f"✅ {without}"


def synthesize(
    calls: Sequence[ActionCall],
    results: Sequence[ActionResult],
    reply_text: str = "",
    snapshot: Optional[ProjectSnapshot] = None,
) -> str:
    """
    Summarize a batch in call order.

    Entities are named from the result data, falling back to `snapshot` for
    calls (deletes) whose result carries none. Successful get_project_data
    calls are left out. With nothing to report the model's own text is used,
    then a fixed acknowledgement, so the result is never empty.
    """
    succeeded: List[str] = []
    failed: List[str] = []

    for call, result in zip(calls, results):
        if result.success:
            if call.name == ActionType.GET_PROJECT_DATA.value:
                continue
            succeeded.append(_success_line(call, result, snapshot))
        else:
            failed.append(f"• {call.name}: {result.error or 'Unknown error'}")

    sections = []
    if succeeded:
        sections.append("\n".join(succeeded))
    if failed:
        sections.append("❌ Failed operations:\n" + "\n".join(failed))
    if sections:
        return "\n\n".join(sections)

    return (reply_text or "").strip() or GENERIC_ACKNOWLEDGEMENT
