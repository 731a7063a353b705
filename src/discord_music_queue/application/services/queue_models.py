"""DTOs for the queue application service."""

from __future__ import annotations

from pydantic import BaseModel

from ...domain.music.entities import Track
from ...domain.shared.types import NonNegativeInt


class EnqueueResult(BaseModel):
    track: Track
    position: NonNegativeInt
    queue_length: NonNegativeInt
    should_start: bool = False
