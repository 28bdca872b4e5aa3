"""
Error types for the project assistant.
"""
from __future__ import annotations

from typing import Optional


class AssistantError(Exception):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class MissingCredentialError(AssistantError):
    def __init__(self, message: str = "OPENAI_API_KEY is not set"):
        super().__init__("missing_credential", message)


class SessionBusyError(AssistantError):
    def __init__(self, message: str = "A message is already being processed"):
        super().__init__("session_busy", message)


class SessionClosedError(AssistantError):
    def __init__(self, message: str = "The session was closed while the message was being processed"):
        super().__init__("session_closed", message)


class TurnTimeoutError(AssistantError):
    def __init__(self, seconds: float):
        super().__init__("turn_timeout", f"Message processing timeout after {seconds:g} seconds")
        self.seconds = seconds


class ProjectDataError(AssistantError):
    """Raised by the project-data client when the service rejects a call."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__("project_data_error", message)
        self.status_code = status_code


class SessionNotFoundError(AssistantError):
    def __init__(self, session_id: str):
        super().__init__("session_not_found", f"Session {session_id} not found")
