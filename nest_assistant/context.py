"""
Grounding context for a conversation session.

Renders the current lists and tasks into the text block the model sees at
the start of a session, so that every action it proposes refers to real
identifiers.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from .models import ProjectList, Task


CONTEXT_ACKNOWLEDGEMENT = (
    "I understand the current project structure. I can help you create lists and tasks, "
    "update them, or answer questions about the project."
)


def _plain(value: object) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def build_context(lists: Sequence[ProjectList], tasks: Iterable[Task]) -> str:
    """
    Render lists and their tasks as a grounding statement.

    Tasks are grouped under the list whose uid they carry; list order and
    task order are preserved as given.
    """
    lines = ["Here is the current state of the project:", ""]

    if not lists:
        lines.append("No lists exist yet.")
    else:
        tasks = list(tasks)
        lines.append(f"Lists ({len(lists)} total):")
        for project_list in lists:
            list_tasks = [task for task in tasks if task.list_uid == project_list.list_uid]
            lines.append(
                f'- "{project_list.name}" (UID: {project_list.list_uid}, '
                f"Color: {project_list.color}, {len(list_tasks)} tasks)"
            )
            for task in list_tasks:
                lines.append(
                    f'  • "{task.title}" (UID: {task.task_uid}, '
                    f"Status: {_plain(task.status)}, Priority: {_plain(task.priority)})"
                )

    lines.append("")
    lines.append(
        "You can help me create new lists and tasks, update existing ones, "
        "or answer questions about the project."
    )
    return "\n".join(lines)


def build_seed_history(lists: Sequence[ProjectList], tasks: Iterable[Task]) -> List[BaseMessage]:
    """The synthetic first exchange: context statement plus acknowledgement."""
    return [
        HumanMessage(content=build_context(lists, tasks)),
        AIMessage(content=CONTEXT_ACKNOWLEDGEMENT),
    ]
