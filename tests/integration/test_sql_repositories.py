"""Integration tests for SQL repositories on an in-memory SQLite database."""

from dataclasses import replace
from datetime import date, datetime

import pytest
from sqlalchemy.orm import Session, sessionmaker

from tests.support import (
    MEMBER_ID,
    OUTSIDER_ID,
    ROOM_ID,
    FakeRouteProvider,
    seed_stops,
    seed_trip,
)
from tripsync.db.models import Room, RoomMember, RoomPreference
from tripsync.db.repositories import ScheduleChanges
from tripsync.db.sql_repositories import SqlRoomDirectory, SqlScheduleStore, SqlTripRepository
from tripsync.events import InMemoryEventBus
from tripsync.models.common import TripStatus, VersionStatus
from tripsync.models.modification import DeleteStop, Reorder
from tripsync.scheduling.pipeline import ModificationPipeline
from tripsync.scheduling.recalc import RecalculationEngine
from tripsync.scheduling.service import ScheduleService


@pytest.fixture
def session_factory(sqlite_session_factory: sessionmaker[Session]) -> sessionmaker[Session]:
    """Database seeded with one room, two active members and one former member."""
    with sqlite_session_factory() as session, session.begin():
        session.add(
            Room(
                room_id=ROOM_ID,
                destination="Seoul",
                start_date=date(2025, 1, 1),
                end_date=date(2025, 1, 3),
            )
        )
        session.add_all(
            [
                RoomMember(room_id=ROOM_ID, user_id=MEMBER_ID, is_active=True),
                RoomMember(room_id=ROOM_ID, user_id=2, is_active=True),
                RoomMember(room_id=ROOM_ID, user_id=3, is_active=False),
                RoomPreference(
                    room_id=ROOM_ID, kind="place", content="Gyeongbokgung", place_tag="TOURIST_SPOT"
                ),
                RoomPreference(room_id=ROOM_ID, kind="must_visit", content="Gyeongbokgung"),
                RoomPreference(room_id=ROOM_ID, kind="rule", content="no early mornings"),
                RoomPreference(room_id=ROOM_ID, kind="chat", content="let's see palaces"),
            ]
        )
    return sqlite_session_factory


class TestSqlRoomDirectory:
    """Room reads."""

    def test_room_and_membership(self, session_factory: sessionmaker[Session]) -> None:
        """Test room lookup and active membership."""
        rooms = SqlRoomDirectory(session_factory)

        room = rooms.get_room(ROOM_ID)
        assert room is not None
        assert room.days == 3
        assert rooms.get_room(404) is None
        assert rooms.is_member(ROOM_ID, MEMBER_ID)
        assert not rooms.is_member(ROOM_ID, 3)
        assert not rooms.is_member(ROOM_ID, OUTSIDER_ID)
        assert rooms.count_active_members(ROOM_ID) == 2

    def test_collect_preferences(self, session_factory: sessionmaker[Session]) -> None:
        """Test preferences are grouped by kind."""
        prefs = SqlRoomDirectory(session_factory).collect_preferences(ROOM_ID)

        assert prefs.places == [("Gyeongbokgung", "TOURIST_SPOT")]
        assert prefs.must_visit == ["Gyeongbokgung"]
        assert prefs.rules == ["no early mornings"]
        assert prefs.chat == ["let's see palaces"]


class TestSqlTripRepository:
    """Trip versions."""

    def test_new_version_retires_previous(self, session_factory: sessionmaker[Session]) -> None:
        """Test saving a new version flips the old NEW trip to OLD."""
        trips = SqlTripRepository(session_factory)
        store = SqlScheduleStore(session_factory)

        first = trips.save_new_version(seed_trip(), seed_stops())
        second = trips.save_new_version(seed_trip(), seed_stops()[:2])

        assert first.trip_id is not None and second.trip_id is not None
        current = trips.find_current_trip(ROOM_ID)
        assert current is not None and current.trip_id == second.trip_id
        old = trips.get_trip(first.trip_id)
        assert old is not None and old.version_status == VersionStatus.OLD
        assert len(store.list_trip(first.trip_id)) == 7
        assert [s.place_name for s in store.list_day(second.trip_id, 1)] == ["A", "B"]

    def test_status_listing_and_update(self, session_factory: sessionmaker[Session]) -> None:
        """Test listing by status and promoting a trip."""
        trips = SqlTripRepository(session_factory)
        trip = trips.save_new_version(seed_trip(), [])
        assert trip.trip_id is not None

        ready = trips.list_trips(version_status=VersionStatus.NEW, trip_status=TripStatus.READY)
        assert [t.trip_id for t in ready] == [trip.trip_id]

        trips.set_trip_status(trip.trip_id, TripStatus.ACCEPTED)

        stored = trips.get_trip(trip.trip_id)
        assert stored is not None and stored.trip_status == TripStatus.ACCEPTED


class TestSqlScheduleStore:
    """Stop storage."""

    def test_apply_changes(self, session_factory: sessionmaker[Session]) -> None:
        """Test deletes, updates and inserts in one call."""
        trips = SqlTripRepository(session_factory)
        store = SqlScheduleStore(session_factory)
        trip = trips.save_new_version(seed_trip(), seed_stops())
        assert trip.trip_id is not None
        a, b, c = store.list_day(trip.trip_id, 1)
        new = replace(seed_stops()[2], place_name="New", visit_order=3)

        inserted = store.apply_changes(
            trip.trip_id,
            ScheduleChanges(
                deleted_ids=[b.stop_id],  # type: ignore[list-item]
                updated=[replace(c, visit_order=2, travel_time="5 min")],
                inserted=[new],
            ),
        )

        assert len(inserted) == 1 and inserted[0].stop_id is not None
        day = store.list_day(trip.trip_id, 1)
        assert [(s.place_name, s.visit_order) for s in day] == [("A", 1), ("C", 2), ("New", 3)]
        assert day[1].travel_time == "5 min"
        assert day[0].arrival == datetime(2025, 1, 1, 9, 0)
        assert store.get_stop(trip.trip_id, b.stop_id) is None  # type: ignore[arg-type]

    def test_update_of_missing_stop_rolls_back(self, session_factory: sessionmaker[Session]) -> None:
        """Test a failing change set leaves the stored stops untouched."""
        trips = SqlTripRepository(session_factory)
        store = SqlScheduleStore(session_factory)
        trip = trips.save_new_version(seed_trip(), seed_stops())
        assert trip.trip_id is not None
        before = store.list_trip(trip.trip_id)
        a = before[0]

        with pytest.raises(KeyError):
            store.apply_changes(
                trip.trip_id,
                ScheduleChanges(
                    deleted_ids=[a.stop_id],  # type: ignore[list-item]
                    updated=[replace(a, stop_id=9999)],
                ),
            )

        assert store.list_trip(trip.trip_id) == before

    def test_stop_is_scoped_to_trip(self, session_factory: sessionmaker[Session]) -> None:
        """Test a stop cannot be read through another trip."""
        trips = SqlTripRepository(session_factory)
        store = SqlScheduleStore(session_factory)
        first = trips.save_new_version(seed_trip(), seed_stops())
        second = trips.save_new_version(seed_trip(), [])
        stop = store.list_trip(first.trip_id)[0]  # type: ignore[arg-type]

        assert store.get_stop(second.trip_id, stop.stop_id) is None  # type: ignore[arg-type]


def test_edits_over_sql_storage(session_factory: sessionmaker[Session]) -> None:
    """Test single and batch edits end to end on the SQL repositories."""
    rooms = SqlRoomDirectory(session_factory)
    trips = SqlTripRepository(session_factory)
    store = SqlScheduleStore(session_factory)
    engine = RecalculationEngine(FakeRouteProvider(), store, trips)
    pipeline = ModificationPipeline(trips, rooms, store, engine)
    service = ScheduleService(trips, rooms, store, pipeline, InMemoryEventBus())
    trip = trips.save_new_version(seed_trip(), seed_stops())
    assert trip.trip_id is not None
    ids = {s.place_name: s.stop_id for s in store.list_trip(trip.trip_id)}

    service.reorder_stop(trip.trip_id, ids["C"], 1, MEMBER_ID)  # type: ignore[arg-type]
    day = service.batch_apply(
        trip.trip_id, 1, [DeleteStop(stop_id=ids["A"])], MEMBER_ID  # type: ignore[arg-type]
    )

    assert [s.place_name for s in day.stops] == ["C", "B"]
    stored = store.list_day(trip.trip_id, 1)
    assert [(s.place_name, s.visit_order, s.travel_time) for s in stored] == [
        ("C", 1, "25 min"),
        ("B", 2, None),
    ]
    assert stored[1].arrival == datetime(2025, 1, 1, 13, 10)

    preview = service.preview_modifications(
        trip.trip_id, 1, [Reorder(stop_id=ids["B"], new_visit_order=1)], MEMBER_ID  # type: ignore[arg-type]
    )
    assert [s.place_name for s in preview.stops] == ["B", "C"]
    assert [s.place_name for s in store.list_day(trip.trip_id, 1)] == ["C", "B"]
