"""Domain errors raised by the service layer.

Learn: Services never raise HTTPException. They raise one of these, and a
single exception handler registered in main.py turns it into a JSON
response with the matching status code. This keeps services usable
outside HTTP (CLI, scripts, tests) while routes stay thin.
"""

from typing import Optional


class TaskboardError(Exception):
    """Base class for all errors surfaced to API callers."""

    status_code: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def headers(self) -> Optional[dict[str, str]]:
        return None


class AuthenticationRequired(TaskboardError):
    """A protected operation was called without a resolved identity."""

    status_code = 401
    default_message = "Authentication required. Please sign in"

    @property
    def headers(self) -> Optional[dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class InvalidCredentials(TaskboardError):
    """Sign-in failed. Same message for unknown email and wrong password."""

    status_code = 401
    default_message = "Invalid credentials"


class NotCollaborator(TaskboardError):
    """The identity is not on the task list's collaborator set."""

    status_code = 403
    default_message = "You are not a collaborator on this task list"


class NotFound(TaskboardError):
    status_code = 404
    default_message = "Not found"


class EmailAlreadyRegistered(TaskboardError):
    status_code = 409
    default_message = "Email already registered"
