"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when domain validation fails."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class InvalidLoopModeError(ValidationError):
    """Raised when a loop mode outside off/one/all is requested."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid loop mode '{value}'. Use off, one or all.", field="loop_mode")
        self.value = value


class EntityNotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, identifier: str | int, message: str | None = None) -> None:
        msg = message or f"{entity_type} with id '{identifier}' not found"
        super().__init__(msg, code="ENTITY_NOT_FOUND")
        self.entity_type = entity_type
        self.identifier = identifier


class BusinessRuleViolationError(DomainError):
    """Raised when a business rule is violated."""

    def __init__(self, rule: str, message: str | None = None) -> None:
        msg = message or f"Business rule violated: {rule}"
        super().__init__(msg, code="BUSINESS_RULE_VIOLATION")
        self.rule = rule


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class PreconditionFailedError(InvalidOperationError):
    """Raised when a queue operation is not allowed in the session's current state.

    The session is left untouched, so callers can report the failure to the
    user and carry on.
    """

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        super().__init__(operation, current_state, message)
        self.code = "PRECONDITION_FAILED"


class ResolutionFailureError(DomainError):
    """Raised when no playable track could be found for a query."""

    def __init__(self, query: str, message: str | None = None) -> None:
        super().__init__(message or f"No playable track found for '{query}'", code="RESOLUTION_FAILURE")
        self.query = query


class MetadataOnlyError(DomainError):
    """Raised when a track has metadata but no stream locator to play from."""

    def __init__(self, title: str, message: str | None = None) -> None:
        msg = message or f"'{title}' was found but no playable stream is available"
        super().__init__(msg, code="METADATA_ONLY")
        self.title = title


class PlaybackFailureError(DomainError):
    """Raised by a voice transport when a track's stream cannot be started."""

    def __init__(self, title: str, reason: str | None = None) -> None:
        msg = f"Playback failed for '{title}'" + (f": {reason}" if reason else "")
        super().__init__(msg, code="PLAYBACK_FAILURE")
        self.title = title
        self.reason = reason
