"""Domain events published for downstream notification."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


def _now() -> datetime:
    return datetime.now(UTC)


class TripGenerated(BaseModel):
    """A new trip version was generated and persisted."""

    trip_id: int
    room_id: int
    occurred_at: datetime = Field(default_factory=_now)


class TripFailed(BaseModel):
    """Generation for a room failed."""

    room_id: int
    reason: str
    occurred_at: datetime = Field(default_factory=_now)


class ScheduleBatchUpdated(BaseModel):
    """A batch of schedule edits was committed."""

    trip_id: int
    room_id: int
    user_id: int
    day_number: int
    occurred_at: datetime = Field(default_factory=_now)
