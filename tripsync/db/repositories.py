"""Repository protocol interfaces for data access."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Protocol

from tripsync.models.common import TripStatus, VersionStatus


@dataclass
class RoomRecord:
    """Room data record (owned by the chat side of the product)."""

    room_id: int
    destination: str
    start_date: date
    end_date: date

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1


@dataclass
class RoomPreferences:
    """Chat-derived preferences collected for a room."""

    places: list[tuple[str, str]] = field(default_factory=list)
    must_visit: list[str] = field(default_factory=list)
    rules: list[str] = field(default_factory=list)
    chat: list[str] = field(default_factory=list)


@dataclass
class TripRecord:
    """Trip data record."""

    trip_id: int | None
    room_id: int
    destination: str
    version_status: VersionStatus
    trip_status: TripStatus
    travel_mode: str | None
    budget: int | None
    accommodation_cost_info: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class StopRecord:
    """Schedule (stop) data record. ``stop_id`` is None until persisted."""

    stop_id: int | None
    trip_id: int | None
    day_number: int
    date: date
    visit_order: int
    place_name: str
    place_tag: str
    latitude: float
    longitude: float
    is_visit: bool
    arrival: datetime
    departure: datetime
    travel_time: str | None = None
    estimated_cost: int | None = None
    cost_explanation: str | None = None


@dataclass
class ScheduleChanges:
    """Diff of a trip's stops, written in one atomic call."""

    deleted_ids: list[int] = field(default_factory=list)
    inserted: list[StopRecord] = field(default_factory=list)
    updated: list[StopRecord] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.deleted_ids or self.inserted or self.updated)


class RoomDirectory(Protocol):
    """Read access to rooms, membership and chat-derived preferences."""

    def get_room(self, room_id: int) -> RoomRecord | None:
        """Get room by ID.

        Args:
            room_id: Room ID

        Returns:
            Room record or None if not found
        """
        ...

    def is_member(self, room_id: int, user_id: int) -> bool:
        """Check whether a user participates in a room."""
        ...

    def count_active_members(self, room_id: int) -> int:
        """Count members currently in the room."""
        ...

    def collect_preferences(self, room_id: int) -> RoomPreferences:
        """Collect places, must-visit names, rules and chat excerpts for a room."""
        ...


class TripRepository(Protocol):
    """Repository for trip versions."""

    def get_trip(self, trip_id: int) -> TripRecord | None:
        """Get trip by ID."""
        ...

    def find_current_trip(self, room_id: int) -> TripRecord | None:
        """Get the room's NEW trip, if any."""
        ...

    def save_new_version(self, trip: TripRecord, stops: list[StopRecord]) -> TripRecord:
        """Persist a new NEW trip with its stops.

        The room's previous NEW trip is flipped to OLD in the same unit of work.

        Args:
            trip: Trip to insert (trip_id ignored)
            stops: Stops to insert (stop_id and trip_id ignored)

        Returns:
            The stored trip with its assigned ID
        """
        ...

    def list_trips(
        self, *, version_status: VersionStatus, trip_status: TripStatus
    ) -> list[TripRecord]:
        """List trips by version and lifecycle status."""
        ...

    def set_trip_status(self, trip_id: int, trip_status: TripStatus) -> None:
        """Update a trip's lifecycle status."""
        ...


class ScheduleStore(Protocol):
    """Ordered collection of stops per (trip, day)."""

    def list_day(self, trip_id: int, day_number: int) -> list[StopRecord]:
        """List a day's stops ordered by visit order."""
        ...

    def list_trip(self, trip_id: int) -> list[StopRecord]:
        """List all stops of a trip ordered by (day, visit order)."""
        ...

    def get_stop(self, trip_id: int, stop_id: int) -> StopRecord | None:
        """Get a stop by ID, scoped to its trip."""
        ...

    def apply_changes(self, trip_id: int, changes: ScheduleChanges) -> list[StopRecord]:
        """Apply deletes, inserts and updates atomically.

        Args:
            trip_id: Trip the changes belong to
            changes: Diff to apply

        Returns:
            Inserted stops with their assigned IDs, in input order
        """
        ...
