"""Itinerary generation behind a per-room lease.

A request only acquires the lease and submits the job; the AI call and
persistence run on a worker thread. The lease is released on every exit path
of the job, so a poll reports a terminal state as soon as the job ends.
"""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

from tripsync.db.repositories import RoomDirectory, RoomRecord, TripRepository
from tripsync.errors import (
    LEASE_EXPIRED,
    TRIP_SAVE_FAIL,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    UpstreamError,
)
from tripsync.events import EventBus
from tripsync.generation.ai_client import ItineraryServiceClient
from tripsync.generation.lease import LeaseStore, lease_key
from tripsync.generation.mapping import build_itinerary_request, build_stops, build_trip
from tripsync.models.common import GenerationStatus, LeaseState
from tripsync.models.events import TripFailed, TripGenerated
from tripsync.utils.logging import StructuredGenerationLogger
from tripsync.utils.metrics import PrometheusEngineMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationPoll:
    """Result of polling a room's generation."""

    status: GenerationStatus
    trip_id: int | None = None


class GenerationCoordinator:
    """Serializes itinerary generation per room."""

    def __init__(
        self,
        rooms: RoomDirectory,
        trips: TripRepository,
        leases: LeaseStore,
        client: ItineraryServiceClient,
        events: EventBus,
        *,
        waiting_ttl_seconds: int = 600,
        running_ttl_seconds: int = 900,
        max_workers: int = 4,
        executor: ThreadPoolExecutor | None = None,
        metrics: PrometheusEngineMetrics | None = None,
    ) -> None:
        """Initialize coordinator.

        Args:
            rooms: Room directory (membership, dates, preferences)
            trips: Trip repository
            leases: Lease store
            client: AI itinerary service client
            events: Event bus for TripGenerated / TripFailed
            waiting_ttl_seconds: Lease TTL until the job starts
            running_ttl_seconds: Lease TTL while the AI call runs
            max_workers: Worker threads when no executor is given
            executor: Worker pool
            metrics: Metrics sink
        """
        self._rooms = rooms
        self._trips = trips
        self._leases = leases
        self._client = client
        self._events = events
        self._waiting_ttl = waiting_ttl_seconds
        self._running_ttl = running_ttl_seconds
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="trip-generation"
        )
        self._metrics = metrics or PrometheusEngineMetrics()
        self._log = StructuredGenerationLogger()

    def request_generation(self, room_id: int, user_id: int) -> "Future[int | None]":
        """Acquire the room's lease and schedule generation.

        Args:
            room_id: Room to generate for
            user_id: Caller

        Returns:
            Future of the job, resolving to the new trip ID or None on failure.
            HTTP callers ignore it and poll instead.

        Raises:
            AuthorizationError: If the caller is not in the room
            NotFoundError: If the room does not exist
            ConflictError: If a generation is already running for the room
        """
        room = self._rooms.get_room(room_id)
        if room is None:
            self._metrics.inc_generation_request("rejected")
            raise NotFoundError(f"Room {room_id} not found", code="ROOM_NOT_FOUND")

        if not self._rooms.is_member(room_id, user_id):
            self._metrics.inc_generation_request("rejected")
            raise AuthorizationError(
                f"User {user_id} is not in room {room_id}", code="USER_NOT_IN_ROOM"
            )

        key = lease_key(room_id)
        token = self._leases.acquire(key, LeaseState.WAITING.value, self._waiting_ttl)
        if token is None:
            self._metrics.inc_generation_request("conflict")
            raise ConflictError(f"Trip generation already in progress for room {room_id}")

        try:
            future = self._executor.submit(self._run, room, token)
        except Exception:
            self._leases.release(key, token)
            raise

        self._metrics.inc_generation_request("accepted")
        self._log.log_transition(room_id, LeaseState.WAITING.value, user_id=user_id)
        return future

    def _run(self, room: RoomRecord, token: str) -> int | None:
        """Generation job. Never raises; failures become TripFailed events."""
        key = lease_key(room.room_id)
        started = time.monotonic()
        try:
            request = build_itinerary_request(
                room,
                self._rooms.count_active_members(room.room_id),
                self._rooms.collect_preferences(room.room_id),
            )

            # The room may already belong to a newer request
            if not self._leases.renew(key, token, LeaseState.RUNNING.value, self._running_ttl):
                raise UpstreamError(
                    f"Lease for room {room.room_id} expired before the AI call",
                    code=LEASE_EXPIRED,
                )
            self._log.log_transition(room.room_id, LeaseState.RUNNING.value)

            response = self._client.generate(request)

            try:
                trip = self._trips.save_new_version(
                    build_trip(room, response), build_stops(room.start_date, response)
                )
            except Exception as e:
                raise UpstreamError(f"Failed to save trip: {e}", code=TRIP_SAVE_FAIL) from e

            trip_id = trip.trip_id
            self._events.publish(TripGenerated(trip_id=trip_id, room_id=room.room_id))  # type: ignore[arg-type]
            duration = time.monotonic() - started
            self._metrics.record_generation("success", "none", duration)
            self._log.log_outcome(room.room_id, "success", duration, trip_id=trip_id)
            return trip_id

        except UpstreamError as e:
            self._fail(room.room_id, e.code, started)
            return None
        except Exception:
            logger.exception(f"Unexpected error generating trip for room {room.room_id}")
            self._fail(room.room_id, TRIP_SAVE_FAIL, started)
            return None
        finally:
            self._leases.release(key, token)

    def _fail(self, room_id: int, reason: str, started: float) -> None:
        duration = time.monotonic() - started
        self._metrics.record_generation("failed", reason, duration)
        self._log.log_outcome(room_id, "failed", duration, error_reason=reason)
        self._events.publish(TripFailed(room_id=room_id, reason=reason))

    def poll_status(self, room_id: int, user_id: int | None = None) -> GenerationPoll:
        """Report WAITING while a lease exists, else SUCCESS with the NEW trip, else NOT_STARTED.

        Raises:
            AuthorizationError: If user_id is given and not in the room
        """
        if user_id is not None and not self._rooms.is_member(room_id, user_id):
            raise AuthorizationError(
                f"User {user_id} is not in room {room_id}", code="USER_NOT_IN_ROOM"
            )

        if self._leases.get(lease_key(room_id)) is not None:
            return GenerationPoll(status=GenerationStatus.WAITING)

        trip = self._trips.find_current_trip(room_id)
        if trip is not None:
            return GenerationPoll(status=GenerationStatus.SUCCESS, trip_id=trip.trip_id)
        return GenerationPoll(status=GenerationStatus.NOT_STARTED)

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker pool."""
        self._executor.shutdown(wait=wait)
