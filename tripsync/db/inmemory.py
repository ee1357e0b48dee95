"""In-memory implementations of repository interfaces.

Records are copied on the way in and out so callers can never mutate stored
state without going through ``apply_changes``.
"""

import threading
from dataclasses import replace
from datetime import UTC, datetime

from tripsync.db.repositories import (
    RoomPreferences,
    RoomRecord,
    ScheduleChanges,
    StopRecord,
    TripRecord,
)
from tripsync.models.common import TripStatus, VersionStatus


class InMemoryRoomDirectory:
    """In-memory implementation of RoomDirectory."""

    def __init__(self) -> None:
        self._rooms: dict[int, RoomRecord] = {}
        self._members: dict[int, set[int]] = {}
        self._preferences: dict[int, RoomPreferences] = {}

    def add_room(
        self,
        room: RoomRecord,
        member_ids: list[int],
        preferences: RoomPreferences | None = None,
    ) -> None:
        """Register a room with its members (seeding helper)."""
        self._rooms[room.room_id] = replace(room)
        self._members[room.room_id] = set(member_ids)
        self._preferences[room.room_id] = preferences or RoomPreferences()

    def get_room(self, room_id: int) -> RoomRecord | None:
        """Get room by ID."""
        room = self._rooms.get(room_id)
        return replace(room) if room else None

    def is_member(self, room_id: int, user_id: int) -> bool:
        """Check whether a user participates in a room."""
        return user_id in self._members.get(room_id, set())

    def count_active_members(self, room_id: int) -> int:
        """Count members currently in the room."""
        return len(self._members.get(room_id, set()))

    def collect_preferences(self, room_id: int) -> RoomPreferences:
        """Collect chat-derived preferences for a room."""
        prefs = self._preferences.get(room_id) or RoomPreferences()
        return RoomPreferences(
            places=list(prefs.places),
            must_visit=list(prefs.must_visit),
            rules=list(prefs.rules),
            chat=list(prefs.chat),
        )


class InMemoryScheduleStore:
    """In-memory implementation of ScheduleStore."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._stops: dict[int, StopRecord] = {}
        self._next_id = 1

    def list_day(self, trip_id: int, day_number: int) -> list[StopRecord]:
        """List a day's stops ordered by visit order."""
        with self.lock:
            stops = [
                replace(s)
                for s in self._stops.values()
                if s.trip_id == trip_id and s.day_number == day_number
            ]
        return sorted(stops, key=lambda s: (s.visit_order, s.stop_id))

    def list_trip(self, trip_id: int) -> list[StopRecord]:
        """List all stops of a trip ordered by (day, visit order)."""
        with self.lock:
            stops = [replace(s) for s in self._stops.values() if s.trip_id == trip_id]
        return sorted(stops, key=lambda s: (s.day_number, s.visit_order, s.stop_id))

    def get_stop(self, trip_id: int, stop_id: int) -> StopRecord | None:
        """Get a stop by ID, scoped to its trip."""
        with self.lock:
            stop = self._stops.get(stop_id)
            if stop is None or stop.trip_id != trip_id:
                return None
            return replace(stop)

    def apply_changes(self, trip_id: int, changes: ScheduleChanges) -> list[StopRecord]:
        """Apply deletes, inserts and updates atomically."""
        with self.lock:
            for stop in changes.updated:
                if stop.stop_id not in self._stops:
                    raise KeyError(f"stop {stop.stop_id} does not exist")
            for stop_id in changes.deleted_ids:
                self._stops.pop(stop_id, None)
            for stop in changes.updated:
                self._stops[stop.stop_id] = replace(stop, trip_id=trip_id)  # type: ignore[index]
            return self.insert_many(trip_id, changes.inserted)

    def insert_many(self, trip_id: int, stops: list[StopRecord]) -> list[StopRecord]:
        """Insert stops for a trip, assigning IDs."""
        inserted = []
        with self.lock:
            for stop in stops:
                stored = replace(stop, stop_id=self._next_id, trip_id=trip_id)
                self._stops[stored.stop_id] = stored  # type: ignore[index]
                self._next_id += 1
                inserted.append(replace(stored))
        return inserted


class InMemoryTripRepository:
    """In-memory implementation of TripRepository.

    Shares the schedule store's lock so a new version and its stops appear
    together.
    """

    def __init__(self, schedules: InMemoryScheduleStore) -> None:
        self._schedules = schedules
        self._trips: dict[int, TripRecord] = {}
        self._next_id = 1

    def get_trip(self, trip_id: int) -> TripRecord | None:
        """Get trip by ID."""
        with self._schedules.lock:
            trip = self._trips.get(trip_id)
            return replace(trip) if trip else None

    def find_current_trip(self, room_id: int) -> TripRecord | None:
        """Get the room's NEW trip, if any."""
        with self._schedules.lock:
            for trip in self._trips.values():
                if trip.room_id == room_id and trip.version_status == VersionStatus.NEW:
                    return replace(trip)
        return None

    def save_new_version(self, trip: TripRecord, stops: list[StopRecord]) -> TripRecord:
        """Persist a new NEW trip with its stops, retiring the previous one."""
        now = datetime.now(UTC)
        with self._schedules.lock:
            for existing in self._trips.values():
                if existing.room_id == trip.room_id and existing.version_status == VersionStatus.NEW:
                    existing.version_status = VersionStatus.OLD
                    existing.updated_at = now

            stored = replace(
                trip,
                trip_id=self._next_id,
                version_status=VersionStatus.NEW,
                created_at=now,
                updated_at=now,
            )
            self._trips[stored.trip_id] = stored  # type: ignore[index]
            self._next_id += 1
            self._schedules.insert_many(stored.trip_id, stops)  # type: ignore[arg-type]
            return replace(stored)

    def list_trips(
        self, *, version_status: VersionStatus, trip_status: TripStatus
    ) -> list[TripRecord]:
        """List trips by version and lifecycle status."""
        with self._schedules.lock:
            return [
                replace(t)
                for t in self._trips.values()
                if t.version_status == version_status and t.trip_status == trip_status
            ]

    def set_trip_status(self, trip_id: int, trip_status: TripStatus) -> None:
        """Update a trip's lifecycle status."""
        with self._schedules.lock:
            trip = self._trips.get(trip_id)
            if trip is None:
                return
            trip.trip_status = trip_status
            trip.updated_at = datetime.now(UTC)
