"""Error taxonomy for the engagement layer.

Every failed precondition in the services raises one of these exceptions.
They carry the taxonomy kind and the offending identifiers so the API layer
can translate them into status codes without inspecting messages.
"""

from __future__ import annotations

from typing import Any


class EngagementError(Exception):
    """Base class for all structured engagement errors."""

    kind: str = "engagement_error"

    def __init__(self, message: str, **identifiers: Any) -> None:
        super().__init__(message)
        self.message = message
        self.identifiers: dict[str, Any] = identifiers

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable description of the error."""
        return {
            "detail": self.message,
            "kind": self.kind,
            "identifiers": self.identifiers,
        }


class NotFoundError(EngagementError):
    """A referenced actor, target, post, or comment does not exist."""

    kind = "not_found"

    def __init__(self, entity: str, identifier: Any, message: str | None = None) -> None:
        super().__init__(
            message or f"{entity.capitalize()} not found",
            entity=entity,
            id=identifier,
        )
        self.entity = entity


class SelfReferenceError(EngagementError):
    """Actor and target of a follow are the same user."""

    kind = "self_reference"

    def __init__(self, user_id: int) -> None:
        super().__init__("You cannot follow yourself", user_id=user_id)


class InvalidStateError(EngagementError):
    """The target is in a state that forbids the requested operation."""

    kind = "invalid_state"


class AuthorizationError(EngagementError):
    """The actor does not own the record it tries to mutate."""

    kind = "authorization"


class PartialFailure(EngagementError):
    """A multi-record update landed on one side and failed on the other.

    The stored state is left as-is; callers decide whether to retry or run a
    reconciliation for the identifiers listed here.
    """

    kind = "partial_failure"

    def __init__(
        self,
        message: str,
        *,
        completed: str,
        failed: str,
        **identifiers: Any,
    ) -> None:
        super().__init__(message, completed=completed, failed=failed, **identifiers)
        self.completed = completed
        self.failed = failed


class ConflictError(EngagementError):
    """A unique attribute such as a username or email is already taken."""

    kind = "conflict"
