from __future__ import annotations

from typing import Dict, List, Optional
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .config import Settings, configure_logging, get_settings
from .errors import (
    MissingCredentialError,
    ProjectDataError,
    SessionBusyError,
    SessionClosedError,
    SessionNotFoundError,
)
from .llm import ModelFactory
from .models import ConversationMessage
from .notifications import CollectingNotifier
from .orchestrator import ProjectAssistant
from .project_client import HttpProjectDataClient, ProjectDataClient


configure_logging()

app = FastAPI(title="Nest Assistant", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --------------------------------------------------------------------------- #
# Session registry (in-process, discarded on restart)
# --------------------------------------------------------------------------- #

class _OpenSession:
    def __init__(self, assistant: ProjectAssistant, notifier: CollectingNotifier, client: ProjectDataClient):
        self.assistant = assistant
        self.notifier = notifier
        self.client = client


_sessions: Dict[str, _OpenSession] = {}


def _get_open_session(session_id: str) -> _OpenSession:
    open_session = _sessions.get(session_id)
    if open_session is None:
        raise SessionNotFoundError(session_id)
    return open_session


# --------------------------------------------------------------------------- #
# Dependencies
# --------------------------------------------------------------------------- #

def get_project_client() -> ProjectDataClient:
    return HttpProjectDataClient.from_settings()


def get_model_factory() -> Optional[ModelFactory]:
    """None means the default ChatOpenAI factory."""
    return None


# --------------------------------------------------------------------------- #
# Schemas
# --------------------------------------------------------------------------- #

class OpenSessionRequest(BaseModel):
    project_uid: str


class SendMessageRequest(BaseModel):
    content: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    session_id: str
    project_uid: str
    messages: List[ConversationMessage]


class TurnResponse(BaseModel):
    message: ConversationMessage
    notifications: List[Dict[str, str]] = Field(default_factory=list)


# --------------------------------------------------------------------------- #
# Endpoints
# --------------------------------------------------------------------------- #

@app.post("/sessions", response_model=SessionResponse)
async def open_session(
    request: OpenSessionRequest,
    client: ProjectDataClient = Depends(get_project_client),
    model_factory: Optional[ModelFactory] = Depends(get_model_factory),
    settings: Settings = Depends(get_settings),
):
    notifier = CollectingNotifier()
    try:
        assistant = ProjectAssistant(
            request.project_uid,
            client,
            notifier=notifier,
            settings=settings,
            model_factory=model_factory,
        )
        await assistant.initialize_session()
    except MissingCredentialError as e:
        await client.close()
        raise HTTPException(status_code=503, detail=e.message)
    except ProjectDataError as e:
        await client.close()
        raise HTTPException(status_code=502, detail=e.message)

    session_id = uuid4().hex
    _sessions[session_id] = _OpenSession(assistant, notifier, client)
    return SessionResponse(
        session_id=session_id,
        project_uid=request.project_uid,
        messages=list(assistant.messages),
    )


@app.get("/sessions/{session_id}/messages", response_model=List[ConversationMessage])
def get_messages(session_id: str):
    try:
        open_session = _get_open_session(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return list(open_session.assistant.messages)


@app.post("/sessions/{session_id}/messages", response_model=TurnResponse)
async def send_message(session_id: str, request: SendMessageRequest):
    try:
        open_session = _get_open_session(session_id)
        message = await open_session.assistant.handle_user_message(request.content)
    except (SessionNotFoundError, SessionClosedError) as e:
        raise HTTPException(status_code=404, detail=e.message)
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    notifications = [n.model_dump() for n in open_session.notifier.drain()]
    return TurnResponse(message=message, notifications=notifications)


@app.delete("/sessions/{session_id}")
async def close_session(session_id: str):
    open_session = _sessions.pop(session_id, None)
    if open_session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    open_session.assistant.close()
    await open_session.client.close()
    return {"closed": session_id}
