"""
Request-level errors.

Every error carries a short ``message`` and a ``long_message`` that the API
returns verbatim, plus the HTTP status it maps to.
"""
from typing import Dict


class ShiptivityError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 400
    message = "Invalid request."
    long_message = "The request could not be processed."

    def __init__(self, long_message: str = None):
        if long_message is not None:
            self.long_message = long_message
        super().__init__(f"{self.message} {self.long_message}")

    def to_dict(self) -> Dict[str, str]:
        return {"message": self.message, "long_message": self.long_message}


class InvalidId(ShiptivityError):
    """Raised when an id is malformed or names no stored client."""
    message = "Invalid id provided."
    long_message = "Id can only be integer."


class InvalidStatus(ShiptivityError):
    """Raised when a status is not one of the board lanes."""
    message = "Invalid status provided."
    long_message = (
        "Status can only be one of the following: "
        "[backlog | in-progress | complete]."
    )


class InvalidPriority(ShiptivityError):
    """Raised when a priority is not an integer."""
    message = "Invalid priority provided."
    long_message = "Priority can only be integer."


class ClientNotFound(ShiptivityError):
    """Raised when a validated client disappears before the update runs."""
    status_code = 404
    message = "Client not found."
    long_message = "Cannot find client with that id."
