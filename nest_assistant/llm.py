"""
LLM integration for the project assistant.

A ConversationSession owns one model conversation: its ordered message
history, the cached project snapshot it was grounded with, and the live
tool-bound chat model. Turns are single-flight and bounded in time.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from uuid import uuid4

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage, ToolMessage
from langchain_openai import ChatOpenAI

from .config import Settings
from .context import build_seed_history
from .errors import SessionBusyError, TurnTimeoutError
from .models import ActionCall, ActionResult, ProjectSnapshot, TurnReply
from .tools import ALL_TOOLS, describe_actions


logger = logging.getLogger(__name__)

DEFAULT_TURN_TIMEOUT = 30.0


# --------------------------------------------------------------------------- #
# System Prompt
# --------------------------------------------------------------------------- #

_SYSTEM_PROMPT_TEMPLATE = """\
You are the ProjectNest assistant. You help users manage their project lists and tasks using natural language.

AVAILABLE FUNCTIONS:
{functions}

CONTEXT AWARENESS:
- At the start of each session you receive the current project state with all lists and their tasks
- Always use the UIDs from that context; never invent one
- After each function call you receive its result, including the UIDs of anything created

TASK CREATION RULES:
1. "Add a task" without a list: if there is only one list use it, otherwise choose the best match by name or ask
2. "Add a task to [list name]": find the list_uid in the context by name
3. A task for a list that doesn't exist: create the list first, then the task
4. Priority: "urgent"/"important" -> high, "low priority" -> low, otherwise medium. Status defaults to todo

DECISION LOGIC:
- CREATE operations -> call the create function directly
- UPDATE / DELETE operations -> resolve the UID from context, then call the function
- READ operations -> only call get_project_data if you need fresh data

RESPONSE STYLE:
- Be concise and friendly
- If clarification is needed, ask a simple question

DEFAULT VALUES:
- List color: "#3B82F6"
- Task status: "todo"
- Task priority: "medium"
- Task color: "#6B7280"
"""


def _format_function(descriptor: Dict[str, Any]) -> str:
    params = ", ".join(
        param["name"] if param["required"] else f"{param['name']}?"
        for param in descriptor["parameters"]
    )
    return f"- {descriptor['name']}({params}) -> {descriptor['description']}"


def build_system_prompt() -> str:
    """System prompt with the AVAILABLE FUNCTIONS block rendered from the action registry."""
    functions = "\n".join(_format_function(d) for d in describe_actions())
    return _SYSTEM_PROMPT_TEMPLATE.format(functions=functions)


# --------------------------------------------------------------------------- #
# Model construction
# --------------------------------------------------------------------------- #

ModelFactory = Callable[[], Any]


def default_model_factory(settings: Settings) -> ModelFactory:
    """Factory for a ChatOpenAI model bound to the action registry."""

    def _build():
        llm = ChatOpenAI(
            model=settings.llm_model,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            api_key=settings.openai_api_key,
        )
        return llm.bind_tools(ALL_TOOLS)

    return _build


# --------------------------------------------------------------------------- #
# Tool Call Parsing
# --------------------------------------------------------------------------- #

def _parse_tool_call(tool_call: Dict[str, Any]) -> ActionCall:
    """Parse a LangChain tool call into an ActionCall, assigning an id if missing."""
    args = tool_call.get("args") or {}
    return ActionCall(
        name=tool_call["name"],
        args=dict(args) if isinstance(args, dict) else {},
        id=tool_call.get("id") or f"call_{uuid4().hex[:12]}",
    )


def _parse_invalid_tool_call(tool_call: Dict[str, Any]) -> ActionCall:
    """A call whose arguments the provider could not parse; dispatch rejects it."""
    return ActionCall(
        name=tool_call.get("name") or "unknown",
        id=tool_call.get("id") or f"call_{uuid4().hex[:12]}",
        args_error=tool_call.get("error") or f"could not parse {tool_call.get('args')!r}",
    )


def _response_text(response: AIMessage) -> str:
    content = response.content
    if isinstance(content, str):
        return content.strip()
    # Multi-part content: keep only the text parts
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts).strip()


# --------------------------------------------------------------------------- #
# Conversation Session
# --------------------------------------------------------------------------- #

class ConversationSession:
    """
    One model conversation scoped to one open chat surface.

    History is an immutable tuple that is replaced, never edited, as turns
    complete. The chat model itself is created on the first real message.

    Usage:
        session = ConversationSession.start(snapshot, model_factory)
        reply = await session.send("Create a list called Testing")
        session.record_results(reply.action_calls, results)
    """

    def __init__(
        self,
        snapshot: ProjectSnapshot,
        history: Sequence[BaseMessage],
        model_factory: ModelFactory,
        timeout_seconds: float = DEFAULT_TURN_TIMEOUT,
    ):
        self._snapshot = snapshot
        self._history: Tuple[BaseMessage, ...] = tuple(history)
        self._model_factory = model_factory
        self._model = None
        self._busy = False
        self.timeout_seconds = timeout_seconds
        # Set once a turn times out: the remote conversation may have moved on
        self.indeterminate = False

    @classmethod
    def start(
        cls,
        snapshot: ProjectSnapshot,
        model_factory: ModelFactory,
        timeout_seconds: float = DEFAULT_TURN_TIMEOUT,
    ) -> "ConversationSession":
        """Create a new session grounded in `snapshot`."""
        history = [SystemMessage(content=build_system_prompt())]
        history.extend(build_seed_history(snapshot.lists, snapshot.tasks))
        logger.info(
            f"Starting session for project {snapshot.project_uid} "
            f"({len(snapshot.lists)} lists, {len(snapshot.tasks)} tasks)"
        )
        return cls(snapshot, history, model_factory, timeout_seconds)

    # ----------------------------------------------------------------------- #
    # State
    # ----------------------------------------------------------------------- #

    @property
    def history(self) -> Tuple[BaseMessage, ...]:
        return self._history

    @property
    def snapshot(self) -> ProjectSnapshot:
        return self._snapshot

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def model_started(self) -> bool:
        return self._model is not None

    def replace_snapshot(self, snapshot: ProjectSnapshot) -> None:
        """Swap in a freshly fetched snapshot (get_project_data only)."""
        self._snapshot = snapshot

    # ----------------------------------------------------------------------- #
    # Turns
    # ----------------------------------------------------------------------- #

    def _get_model(self):
        if self._model is None:
            logger.debug(f"Creating chat model with {len(self._history)} history items")
            self._model = self._model_factory()
        return self._model

    async def send(self, text: str) -> TurnReply:
        """
        Send one user message and return the model's reply.

        Raises:
            SessionBusyError: If a turn is already outstanding
            TurnTimeoutError: If the model does not answer within the timeout
        """
        if self._busy:
            raise SessionBusyError()

        self._busy = True
        try:
            model = self._get_model()
            messages = [*self._history, HumanMessage(content=text)]

            try:
                response = await asyncio.wait_for(model.ainvoke(messages), timeout=self.timeout_seconds)
            except asyncio.TimeoutError:
                self.indeterminate = True
                logger.warning(f"Model turn exceeded {self.timeout_seconds}s; session state is indeterminate")
                raise TurnTimeoutError(self.timeout_seconds)

            calls = [_parse_tool_call(tc) for tc in (response.tool_calls or [])]
            calls.extend(_parse_invalid_tool_call(tc) for tc in (response.invalid_tool_calls or []))
            reply_text = _response_text(response)
            logger.info(f"Model turn finished with {len(calls)} proposed action(s)")

            recorded = AIMessage(
                content=response.content,
                tool_calls=[{"name": c.name, "args": c.args, "id": c.id} for c in calls],
            )
            self._history = (*messages, recorded)
            return TurnReply(text=reply_text, action_calls=calls)
        finally:
            self._busy = False

    def record_results(self, calls: List[ActionCall], results: List[ActionResult]) -> None:
        """Append one tool message per executed call so later turns see outcomes."""
        if not calls:
            return
        tool_messages = [
            ToolMessage(
                content=json.dumps(result.model_dump(mode="json", exclude_none=True)),
                tool_call_id=call.id or "",
            )
            for call, result in zip(calls, results)
        ]
        self._history = (*self._history, *tool_messages)
