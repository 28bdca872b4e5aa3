from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .config import Settings, get_settings
from .dispatcher import ActionDispatcher
from .errors import MissingCredentialError, SessionBusyError, SessionClosedError, TurnTimeoutError
from .llm import ConversationSession, ModelFactory, default_model_factory
from .models import ActionResult, ConversationMessage, ProjectSnapshot
from .notifications import LoggingNotifier, Notifier, send_notification
from .project_client import ProjectDataClient
from .synthesizer import synthesize


logger = logging.getLogger(__name__)


# --------------------------------------------------------------------------- #
# Fixed assistant copy
# --------------------------------------------------------------------------- #

WELCOME_MESSAGE = (
    "Hello! I'm your ProjectNest AI assistant. I can help you create, update, and manage "
    "your lists and tasks using natural language. Just tell me what you'd like to do!\n\n"
    "For example:\n"
    "• \"Create a new list called 'Frontend Tasks'\"\n"
    "• \"Add a task to implement user login\"\n"
    "• \"Mark the API task as completed\"\n"
    "• \"Move the bug fix task to the done list\""
)

TIMEOUT_MESSAGE = (
    "Sorry, the request took too long to process. The operation might have completed - "
    "please check your lists and tasks. If not, please try again with a simpler request."
)

ERROR_MESSAGE = "Sorry, I encountered an error while processing your request. Please try again."


class ProjectAssistant:
    """
    Natural-language assistant for one project.

    Each user message produces exactly one assistant message: the model
    proposes actions, the dispatcher runs them in order, and the outcomes are
    summarized into the reply.

    Usage:
        assistant = ProjectAssistant("proj_1", HttpProjectDataClient.from_settings())
        await assistant.initialize_session()
        reply = await assistant.handle_user_message("Create a list called Testing")
    """

    def __init__(
        self,
        project_uid: str,
        client: ProjectDataClient,
        notifier: Optional[Notifier] = None,
        settings: Optional[Settings] = None,
        model_factory: Optional[ModelFactory] = None,
    ):
        settings = settings or get_settings()
        if not settings.openai_api_key:
            raise MissingCredentialError()

        self.project_uid = project_uid
        self._settings = settings
        self._client = client
        self._notifier = notifier or LoggingNotifier()
        self._model_factory = model_factory or default_model_factory(settings)
        self._dispatcher = ActionDispatcher(
            client,
            project_uid,
            notifier=self._notifier,
            on_snapshot=self._store_snapshot,
            settings=settings,
        )
        self._session: Optional[ConversationSession] = None
        self._messages: List[ConversationMessage] = [
            ConversationMessage(role="assistant", content=WELCOME_MESSAGE),
        ]
        self._busy = False
        self._closed = False

    # ----------------------------------------------------------------------- #
    # State
    # ----------------------------------------------------------------------- #

    @property
    def messages(self) -> Tuple[ConversationMessage, ...]:
        """Visible history (welcome message, user turns, assistant replies)."""
        return tuple(self._messages)

    @property
    def session(self) -> Optional[ConversationSession]:
        return self._session

    @property
    def busy(self) -> bool:
        return self._busy

    def _store_snapshot(self, snapshot: ProjectSnapshot) -> None:
        if self._session is not None:
            self._session.replace_snapshot(snapshot)

    # ----------------------------------------------------------------------- #
    # Session lifecycle
    # ----------------------------------------------------------------------- #

    async def initialize_session(self) -> ConversationSession:
        """
        Fetch the project and start a new conversation grounded in it.

        Raises:
            ProjectDataError: If the project cannot be fetched
        """
        snapshot = await self._client.get_project(self.project_uid)
        self._session = ConversationSession.start(
            snapshot,
            self._model_factory,
            timeout_seconds=self._settings.turn_timeout_seconds,
        )
        send_notification(self._notifier, "AI Ready", "Loaded current project context")
        return self._session

    def close(self) -> None:
        """Discard the conversation; nothing is persisted."""
        logger.info(f"Closing assistant session for project {self.project_uid}")
        self._closed = True
        self._session = None
        self._messages = []

    # ----------------------------------------------------------------------- #
    # Turns
    # ----------------------------------------------------------------------- #

    async def handle_user_message(self, text: str) -> ConversationMessage:
        """
        Run one user turn and return the assistant's reply.

        Raises:
            ValueError: If the message is empty
            SessionBusyError: If another message is still being processed
            SessionClosedError: If the assistant is closed before the turn completes
        """
        text = (text or "").strip()
        if not text:
            raise ValueError("Message text is empty")
        if self._closed:
            raise SessionClosedError("The session is closed")
        if self._busy:
            raise SessionBusyError()

        self._busy = True
        try:
            self._messages.append(ConversationMessage(role="user", content=text))
            placeholder_index = len(self._messages)
            self._messages.append(ConversationMessage(role="assistant", content="", pending=True))

            reply = await self._run_turn(text)
            if self._closed:
                raise SessionClosedError()
            self._messages[placeholder_index] = reply
            return reply
        finally:
            self._busy = False

    async def _run_turn(self, text: str) -> ConversationMessage:
        try:
            if self._session is None:
                await self.initialize_session()
            session = self._session
            turn = await session.send(text)
        except TurnTimeoutError as e:
            send_notification(self._notifier, "AI Error", e.message, destructive=True)
            return ConversationMessage(role="assistant", content=TIMEOUT_MESSAGE, error=e.message)
        except Exception as e:
            logger.exception("Model turn failed")
            send_notification(self._notifier, "AI Error", str(e) or ERROR_MESSAGE, destructive=True)
            return ConversationMessage(role="assistant", content=ERROR_MESSAGE, error=str(e) or e.__class__.__name__)

        if self._closed:
            # Closed while the model was answering: run nothing against the project
            logger.info(f"Dropping {len(turn.action_calls)} proposed action(s) for closed session {self.project_uid}")
            raise SessionClosedError()

        snapshot = session.snapshot
        results: List[ActionResult] = []
        if turn.action_calls:
            results = await self._dispatcher.dispatch_all(turn.action_calls)
            session.record_results(turn.action_calls, results)

        return ConversationMessage(
            role="assistant",
            content=synthesize(turn.action_calls, results, turn.text, snapshot=snapshot),
            action_calls=turn.action_calls or None,
            action_results=results or None,
        )
