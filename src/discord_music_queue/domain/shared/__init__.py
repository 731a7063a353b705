"""
Shared Domain Kernel

Contains value objects and exceptions shared across all bounded contexts.
"""

from discord_music_queue.domain.shared.exceptions import (
    BusinessRuleViolationError,
    DomainError,
    EntityNotFoundError,
    InvalidLoopModeError,
    InvalidOperationError,
    MetadataOnlyError,
    PlaybackFailureError,
    PreconditionFailedError,
    ResolutionFailureError,
    ValidationError,
)

__all__ = [
    "DomainError",
    "ValidationError",
    "InvalidLoopModeError",
    "EntityNotFoundError",
    "BusinessRuleViolationError",
    "InvalidOperationError",
    "PreconditionFailedError",
    "ResolutionFailureError",
    "MetadataOnlyError",
    "PlaybackFailureError",
]
