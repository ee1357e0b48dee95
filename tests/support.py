"""Test doubles and seed data shared across suites."""

from dataclasses import dataclass, field
from datetime import date, datetime

from tripsync.db.inmemory import InMemoryRoomDirectory, InMemoryScheduleStore, InMemoryTripRepository
from tripsync.db.repositories import RoomPreferences, RoomRecord, StopRecord, TripRecord
from tripsync.events import InMemoryEventBus
from tripsync.models.common import Geo, TravelMode, TripStatus, VersionStatus
from tripsync.models.generation import ItineraryRequest, ItineraryResponse
from tripsync.scheduling.pipeline import ModificationPipeline
from tripsync.scheduling.recalc import RecalculationEngine
from tripsync.scheduling.service import ScheduleService

ROOM_ID = 10
MEMBER_ID = 1
OTHER_MEMBER_ID = 2
OUTSIDER_ID = 99


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class FakeRouteProvider:
    """Route provider returning a fixed duration and recording calls."""

    def __init__(self, minutes: int = 25, fail: bool = False) -> None:
        self.minutes = minutes
        self.fail = fail
        self.calls: list[tuple[Geo, Geo, TravelMode]] = []

    def travel_minutes(self, origin: Geo, destination: Geo, mode: TravelMode) -> int:
        self.calls.append((origin, destination, mode))
        if self.fail:
            raise RuntimeError("routing backend down")
        return self.minutes


class FakeItineraryClient:
    """Itinerary client returning a canned response or raising a canned error."""

    def __init__(
        self, response: ItineraryResponse | None = None, error: Exception | None = None
    ) -> None:
        self.response = response or sample_itinerary()
        self.error = error
        self.requests: list[ItineraryRequest] = []

    def generate(self, request: ItineraryRequest) -> ItineraryResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response


def sample_itinerary() -> ItineraryResponse:
    """Two-day itinerary in the AI service's wire format."""
    return ItineraryResponse.model_validate(
        {
            "budget": 350000,
            "travel_mode": "transit",
            "accommodation_cost_info": "Hotel 120000 per night",
            "itinerary": [
                {
                    "day": 1,
                    "visits": [
                        {
                            "order": 2,
                            "display_name": "Hotel",
                            "place_tag": "HOME",
                            "latitude": 37.56,
                            "longitude": 126.98,
                            "arrival": "18:00",
                            "departure": "09:00",
                            "travel_time": None,
                        },
                        {
                            "order": 1,
                            "display_name": "Gyeongbokgung",
                            "place_tag": "TOURIST_SPOT",
                            "latitude": 37.58,
                            "longitude": 126.97,
                            "arrival": "09:00",
                            "departure": "17:30",
                            "travel_time": 30,
                            "estimated_cost": 3000,
                            "cost_explanation": "Admission",
                        },
                    ],
                },
                {
                    "day": 2,
                    "visits": [
                        {
                            "order": 1,
                            "display_name": "Namsan Tower",
                            "place_tag": "tourist_spot",
                            "latitude": 37.55,
                            "longitude": 126.99,
                            "arrival": "10:00",
                            "departure": "11:30",
                        }
                    ],
                },
            ],
        }
    )


def make_stop(
    day: int,
    order: int,
    name: str,
    arrival: str,
    departure: str,
    travel: str | None = None,
    tag: str = "TOURIST_SPOT",
    departure_day_offset: int = 0,
) -> StopRecord:
    """Unsaved stop on the seeded trip; times are "HH:MM" on the day's date."""
    stop_date = date(2025, 1, day)
    dep_date = date(2025, 1, day + departure_day_offset)
    return StopRecord(
        stop_id=None,
        trip_id=None,
        day_number=day,
        date=stop_date,
        visit_order=order,
        place_name=name,
        place_tag=tag,
        latitude=37.5 + order / 100,
        longitude=127.0 + day / 100,
        is_visit=False,
        arrival=datetime.fromisoformat(f"{stop_date.isoformat()}T{arrival}"),
        departure=datetime.fromisoformat(f"{dep_date.isoformat()}T{departure}"),
        travel_time=travel,
        estimated_cost=1000 * order,
        cost_explanation=f"{name} ticket",
    )


def seed_stops() -> list[StopRecord]:
    """Three days: [A, B, C], [D, Hotel], [E, F]."""
    return [
        make_stop(1, 1, "A", "09:00", "10:00", "30 min"),
        make_stop(1, 2, "B", "10:30", "11:30", "15 min"),
        make_stop(1, 3, "C", "11:45", "12:45"),
        make_stop(2, 1, "D", "09:00", "11:00", "10 min"),
        make_stop(2, 2, "Hotel", "11:10", "08:00", tag="HOME", departure_day_offset=1),
        make_stop(3, 1, "E", "09:00", "10:00", "30 min"),
        make_stop(3, 2, "F", "10:30", "11:30"),
    ]


def seed_room() -> RoomRecord:
    return RoomRecord(
        room_id=ROOM_ID,
        destination="Seoul",
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 3),
    )


def seed_preferences() -> RoomPreferences:
    return RoomPreferences(
        places=[("Gyeongbokgung", "TOURIST_SPOT")],
        must_visit=["Gyeongbokgung"],
        rules=["no early mornings"],
        chat=["let's see palaces"],
    )


def seed_trip() -> TripRecord:
    return TripRecord(
        trip_id=None,
        room_id=ROOM_ID,
        destination="Seoul",
        version_status=VersionStatus.NEW,
        trip_status=TripStatus.READY,
        travel_mode="DRIVE",
        budget=500000,
        accommodation_cost_info="Hotel 120000 per night",
    )


@dataclass
class World:
    """In-memory stores with one seeded room and trip."""

    rooms: InMemoryRoomDirectory
    store: InMemoryScheduleStore
    trips: InMemoryTripRepository
    provider: FakeRouteProvider
    events: InMemoryEventBus
    engine: RecalculationEngine
    pipeline: ModificationPipeline
    service: ScheduleService
    trip_id: int
    ids: dict[str, int] = field(default_factory=dict)

    def stop(self, name: str) -> StopRecord:
        found = self.store.get_stop(self.trip_id, self.ids[name])
        assert found is not None
        return found

    def day(self, day_number: int) -> list[StopRecord]:
        return self.store.list_day(self.trip_id, day_number)


def build_world(provider: FakeRouteProvider | None = None) -> World:
    """Seed a room with two members and a three-day trip."""
    rooms = InMemoryRoomDirectory()
    rooms.add_room(seed_room(), member_ids=[MEMBER_ID, OTHER_MEMBER_ID], preferences=seed_preferences())
    store = InMemoryScheduleStore()
    trips = InMemoryTripRepository(store)
    trip = trips.save_new_version(seed_trip(), seed_stops())
    trip_id = trip.trip_id
    assert trip_id is not None

    provider = provider or FakeRouteProvider()
    events = InMemoryEventBus()
    engine = RecalculationEngine(provider, store, trips)
    pipeline = ModificationPipeline(trips, rooms, store, engine)
    service = ScheduleService(trips, rooms, store, pipeline, events)

    return World(
        rooms=rooms,
        store=store,
        trips=trips,
        provider=provider,
        events=events,
        engine=engine,
        pipeline=pipeline,
        service=service,
        trip_id=trip_id,
        ids={s.place_name: s.stop_id for s in store.list_trip(trip_id) if s.stop_id is not None},
    )

