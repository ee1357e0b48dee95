"""SQL implementations of repository interfaces.

Each method runs in its own session and commits once, so every call is one
unit of work.
"""

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session, sessionmaker

from tripsync.db.models import Room, RoomMember, RoomPreference, Schedule, Trip
from tripsync.db.repositories import (
    RoomPreferences,
    RoomRecord,
    ScheduleChanges,
    StopRecord,
    TripRecord,
)
from tripsync.models.common import TripStatus, VersionStatus


def _to_trip_record(row: Trip) -> TripRecord:
    return TripRecord(
        trip_id=row.trip_id,
        room_id=row.room_id,
        destination=row.destination,
        version_status=VersionStatus(row.version_status),
        trip_status=TripStatus(row.trip_status),
        travel_mode=row.travel_mode,
        budget=row.budget,
        accommodation_cost_info=row.accommodation_cost_info,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_stop_record(row: Schedule) -> StopRecord:
    return StopRecord(
        stop_id=row.schedule_id,
        trip_id=row.trip_id,
        day_number=row.day_number,
        date=row.date,
        visit_order=row.visit_order,
        place_name=row.place_name,
        place_tag=row.place_tag,
        latitude=row.latitude,
        longitude=row.longitude,
        is_visit=row.is_visit,
        arrival=row.arrival,
        departure=row.departure,
        travel_time=row.travel_time,
        estimated_cost=row.estimated_cost,
        cost_explanation=row.cost_explanation,
    )


def _to_schedule_row(trip_id: int, stop: StopRecord) -> Schedule:
    return Schedule(
        trip_id=trip_id,
        day_number=stop.day_number,
        date=stop.date,
        visit_order=stop.visit_order,
        place_name=stop.place_name,
        place_tag=stop.place_tag,
        latitude=stop.latitude,
        longitude=stop.longitude,
        is_visit=stop.is_visit,
        arrival=stop.arrival,
        departure=stop.departure,
        travel_time=stop.travel_time,
        estimated_cost=stop.estimated_cost,
        cost_explanation=stop.cost_explanation,
    )


class SqlRoomDirectory:
    """SQL implementation of RoomDirectory."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_room(self, room_id: int) -> RoomRecord | None:
        """Get room by ID."""
        with self._session_factory() as session:
            room = session.get(Room, room_id)
            if room is None:
                return None
            return RoomRecord(
                room_id=room.room_id,
                destination=room.destination,
                start_date=room.start_date,
                end_date=room.end_date,
            )

    def is_member(self, room_id: int, user_id: int) -> bool:
        """Check whether a user participates in a room."""
        with self._session_factory() as session:
            stmt = select(RoomMember.id).where(
                RoomMember.room_id == room_id,
                RoomMember.user_id == user_id,
                RoomMember.is_active.is_(True),
            )
            return session.execute(stmt).first() is not None

    def count_active_members(self, room_id: int) -> int:
        """Count members currently in the room."""
        with self._session_factory() as session:
            stmt = select(func.count(RoomMember.id)).where(
                RoomMember.room_id == room_id, RoomMember.is_active.is_(True)
            )
            return int(session.execute(stmt).scalar_one())

    def collect_preferences(self, room_id: int) -> RoomPreferences:
        """Collect chat-derived preferences for a room."""
        prefs = RoomPreferences()
        with self._session_factory() as session:
            rows = session.scalars(
                select(RoomPreference)
                .where(RoomPreference.room_id == room_id)
                .order_by(RoomPreference.id)
            )
            for row in rows:
                if row.kind == "place":
                    prefs.places.append((row.content, row.place_tag or "OTHER"))
                elif row.kind == "must_visit":
                    prefs.must_visit.append(row.content)
                elif row.kind == "rule":
                    prefs.rules.append(row.content)
                elif row.kind == "chat":
                    prefs.chat.append(row.content)
        return prefs


class SqlTripRepository:
    """SQL implementation of TripRepository."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_trip(self, trip_id: int) -> TripRecord | None:
        """Get trip by ID."""
        with self._session_factory() as session:
            row = session.get(Trip, trip_id)
            return _to_trip_record(row) if row else None

    def find_current_trip(self, room_id: int) -> TripRecord | None:
        """Get the room's NEW trip, if any."""
        with self._session_factory() as session:
            row = session.scalars(
                select(Trip)
                .where(Trip.room_id == room_id, Trip.version_status == VersionStatus.NEW.value)
                .order_by(Trip.trip_id.desc())
                .limit(1)
            ).first()
            return _to_trip_record(row) if row else None

    def save_new_version(self, trip: TripRecord, stops: list[StopRecord]) -> TripRecord:
        """Persist a new NEW trip with its stops, retiring the previous one."""
        with self._session_factory() as session, session.begin():
            session.execute(
                update(Trip)
                .where(Trip.room_id == trip.room_id, Trip.version_status == VersionStatus.NEW.value)
                .values(version_status=VersionStatus.OLD.value)
            )

            row = Trip(
                room_id=trip.room_id,
                destination=trip.destination,
                version_status=VersionStatus.NEW.value,
                trip_status=trip.trip_status.value,
                travel_mode=trip.travel_mode,
                budget=trip.budget,
                accommodation_cost_info=trip.accommodation_cost_info,
            )
            session.add(row)
            session.flush()

            session.add_all([_to_schedule_row(row.trip_id, stop) for stop in stops])
            session.flush()
            session.refresh(row)
            return _to_trip_record(row)

    def list_trips(
        self, *, version_status: VersionStatus, trip_status: TripStatus
    ) -> list[TripRecord]:
        """List trips by version and lifecycle status."""
        with self._session_factory() as session:
            rows = session.scalars(
                select(Trip).where(
                    Trip.version_status == version_status.value,
                    Trip.trip_status == trip_status.value,
                )
            )
            return [_to_trip_record(row) for row in rows]

    def set_trip_status(self, trip_id: int, trip_status: TripStatus) -> None:
        """Update a trip's lifecycle status."""
        with self._session_factory() as session, session.begin():
            session.execute(
                update(Trip).where(Trip.trip_id == trip_id).values(trip_status=trip_status.value)
            )


class SqlScheduleStore:
    """SQL implementation of ScheduleStore."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def list_day(self, trip_id: int, day_number: int) -> list[StopRecord]:
        """List a day's stops ordered by visit order."""
        with self._session_factory() as session:
            rows = session.scalars(
                select(Schedule)
                .where(Schedule.trip_id == trip_id, Schedule.day_number == day_number)
                .order_by(Schedule.visit_order, Schedule.schedule_id)
            )
            return [_to_stop_record(row) for row in rows]

    def list_trip(self, trip_id: int) -> list[StopRecord]:
        """List all stops of a trip ordered by (day, visit order)."""
        with self._session_factory() as session:
            rows = session.scalars(
                select(Schedule)
                .where(Schedule.trip_id == trip_id)
                .order_by(Schedule.day_number, Schedule.visit_order, Schedule.schedule_id)
            )
            return [_to_stop_record(row) for row in rows]

    def get_stop(self, trip_id: int, stop_id: int) -> StopRecord | None:
        """Get a stop by ID, scoped to its trip."""
        with self._session_factory() as session:
            row = session.scalars(
                select(Schedule).where(
                    Schedule.schedule_id == stop_id, Schedule.trip_id == trip_id
                )
            ).first()
            return _to_stop_record(row) if row else None

    def apply_changes(self, trip_id: int, changes: ScheduleChanges) -> list[StopRecord]:
        """Apply deletes, inserts and updates in one transaction."""
        with self._session_factory() as session, session.begin():
            if changes.deleted_ids:
                session.execute(
                    delete(Schedule).where(
                        Schedule.trip_id == trip_id,
                        Schedule.schedule_id.in_(changes.deleted_ids),
                    )
                )

            for stop in changes.updated:
                row = session.get(Schedule, stop.stop_id)
                if row is None or row.trip_id != trip_id:
                    raise KeyError(f"stop {stop.stop_id} does not exist")
                row.day_number = stop.day_number
                row.date = stop.date
                row.visit_order = stop.visit_order
                row.place_name = stop.place_name
                row.place_tag = stop.place_tag
                row.latitude = stop.latitude
                row.longitude = stop.longitude
                row.is_visit = stop.is_visit
                row.arrival = stop.arrival
                row.departure = stop.departure
                row.travel_time = stop.travel_time
                row.estimated_cost = stop.estimated_cost
                row.cost_explanation = stop.cost_explanation

            new_rows = [_to_schedule_row(trip_id, stop) for stop in changes.inserted]
            session.add_all(new_rows)
            session.flush()
            return [_to_stop_record(row) for row in new_rows]
