"""Service wiring for the HTTP layer."""

from dataclasses import dataclass
from functools import lru_cache

import redis

from tripsync.config import Settings, get_settings
from tripsync.db.engine import create_engine_from_settings, create_session_factory
from tripsync.db.inmemory import InMemoryRoomDirectory, InMemoryScheduleStore, InMemoryTripRepository
from tripsync.db.repositories import RoomDirectory, ScheduleStore, TripRepository
from tripsync.db.sql_repositories import SqlRoomDirectory, SqlScheduleStore, SqlTripRepository
from tripsync.events import InMemoryEventBus
from tripsync.generation.ai_client import ItineraryServiceClient, get_itinerary_client
from tripsync.generation.coordinator import GenerationCoordinator
from tripsync.generation.lease import InMemoryLeaseStore, LeaseStore, RedisLeaseStore
from tripsync.routing.provider import RouteTimeProvider, get_route_provider
from tripsync.scheduling.pipeline import ModificationPipeline
from tripsync.scheduling.recalc import RecalculationEngine
from tripsync.scheduling.service import ScheduleService
from tripsync.scheduling.trip_status import TripStatusService


@dataclass
class Services:
    """Wired application services."""

    rooms: RoomDirectory
    trips: TripRepository
    store: ScheduleStore
    leases: LeaseStore
    events: InMemoryEventBus
    engine: RecalculationEngine
    pipeline: ModificationPipeline
    coordinator: GenerationCoordinator
    schedules: ScheduleService
    trip_status: TripStatusService


def build_services(
    settings: Settings,
    *,
    rooms: RoomDirectory | None = None,
    trips: TripRepository | None = None,
    store: ScheduleStore | None = None,
    leases: LeaseStore | None = None,
    provider: RouteTimeProvider | None = None,
    client: ItineraryServiceClient | None = None,
) -> Services:
    """Wire services from settings; explicit collaborators win over settings.

    Storage is SQL when DATABASE_URL is set, in-memory otherwise. Leases use
    Redis when REDIS_URL is set.
    """
    if rooms is None or trips is None or store is None:
        if settings.database_url:
            session_factory = create_session_factory(create_engine_from_settings(settings))
            rooms = rooms or SqlRoomDirectory(session_factory)
            trips = trips or SqlTripRepository(session_factory)
            store = store or SqlScheduleStore(session_factory)
        else:
            memory_store = InMemoryScheduleStore()
            rooms = rooms or InMemoryRoomDirectory()
            store = store or memory_store
            trips = trips or InMemoryTripRepository(memory_store)

    if leases is None:
        if settings.redis_url:
            client_redis = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
            leases = RedisLeaseStore(client_redis)
        else:
            leases = InMemoryLeaseStore()

    events = InMemoryEventBus()
    engine = RecalculationEngine(provider or get_route_provider(settings), store, trips)
    pipeline = ModificationPipeline(
        trips, rooms, store, engine, day_start=settings.default_day_start
    )
    coordinator = GenerationCoordinator(
        rooms,
        trips,
        leases,
        client or get_itinerary_client(settings),
        events,
        waiting_ttl_seconds=settings.lease_waiting_ttl_seconds,
        running_ttl_seconds=settings.lease_running_ttl_seconds,
        max_workers=settings.generation_workers,
    )
    return Services(
        rooms=rooms,
        trips=trips,
        store=store,
        leases=leases,
        events=events,
        engine=engine,
        pipeline=pipeline,
        coordinator=coordinator,
        schedules=ScheduleService(trips, rooms, store, pipeline, events),
        trip_status=TripStatusService(trips, rooms),
    )


@lru_cache
def get_services() -> Services:
    """Get cached application services (FastAPI dependency)."""
    return build_services(get_settings())
