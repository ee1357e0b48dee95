"""Schedule operations exposed to clients.

Every operation checks that the caller belongs to the trip's room before
touching anything.
"""

from collections.abc import Sequence
from datetime import time

from tripsync.db.repositories import (
    RoomDirectory,
    ScheduleChanges,
    ScheduleStore,
    StopRecord,
    TripRecord,
    TripRepository,
)
from tripsync.errors import AuthorizationError, NotFoundError
from tripsync.events import EventBus
from tripsync.models.common import PlaceTag
from tripsync.models.events import ScheduleBatchUpdated
from tripsync.models.modification import (
    AddStop,
    DeleteStop,
    Modification,
    Reorder,
    UpdateAccommodation,
    UpdateStayDuration,
    UpdateVisitTime,
)
from tripsync.models.schedule import (
    AccommodationCost,
    DaySchedule,
    DeletedStop,
    StopCost,
    StopView,
)
from tripsync.scheduling.pipeline import ModificationPipeline
from tripsync.scheduling.snapshot import TripSnapshot


def to_view(stop: StopRecord) -> StopView:
    return StopView.model_validate(stop)


class ScheduleService:
    """Inbound facade over the modification pipeline."""

    def __init__(
        self,
        trips: TripRepository,
        rooms: RoomDirectory,
        store: ScheduleStore,
        pipeline: ModificationPipeline,
        events: EventBus,
    ) -> None:
        self._trips = trips
        self._rooms = rooms
        self._store = store
        self._pipeline = pipeline
        self._events = events

    def _authorize(self, trip_id: int, user_id: int) -> TripRecord:
        """Resolve the trip and check room membership.

        Raises:
            NotFoundError: If the trip does not exist
            AuthorizationError: If the user is not in the trip's room
        """
        trip = self._trips.get_trip(trip_id)
        if trip is None:
            raise NotFoundError(f"Trip {trip_id} not found", code="TRIP_NOT_FOUND")
        if not self._rooms.is_member(trip.room_id, user_id):
            raise AuthorizationError(
                f"User {user_id} is not part of trip {trip_id}", code="USER_NOT_IN_TRIP"
            )
        return trip

    def _stop(self, trip_id: int, stop_id: int) -> StopRecord:
        stop = self._store.get_stop(trip_id, stop_id)
        if stop is None:
            raise NotFoundError(
                f"Stop {stop_id} not found in trip {trip_id}", code="SCHEDULE_NOT_FOUND"
            )
        return stop

    def _day_view(self, snapshot: TripSnapshot, day_number: int) -> DaySchedule:
        return DaySchedule(
            trip_id=snapshot.trip_id,
            destination=snapshot.trip.destination,
            start_date=snapshot.start_date,
            end_date=snapshot.end_date,
            current_day=day_number,
            travel_mode=snapshot.travel_mode,
            budget=snapshot.trip.budget,
            stops=[to_view(s) for s in snapshot.day(day_number)],
        )

    # Reads

    def get_day_schedule(self, trip_id: int, day_number: int, user_id: int) -> DaySchedule:
        """Ordered stops of one day."""
        self._authorize(trip_id, user_id)
        snapshot = self._pipeline.load(trip_id)
        snapshot.check_day(day_number)
        return self._day_view(snapshot, day_number)

    def get_stop_cost(self, trip_id: int, stop_id: int, user_id: int) -> StopCost:
        """Estimated cost of one stop."""
        self._authorize(trip_id, user_id)
        stop = self._stop(trip_id, stop_id)
        return StopCost(
            stop_id=stop_id,
            place_name=stop.place_name,
            estimated_cost=stop.estimated_cost,
            cost_explanation=stop.cost_explanation,
        )

    def list_stop_costs(self, trip_id: int, user_id: int) -> list[StopCost]:
        """Estimated costs of every non-lodging stop, in trip order."""
        self._authorize(trip_id, user_id)
        return [
            StopCost(
                stop_id=s.stop_id,  # type: ignore[arg-type]
                place_name=s.place_name,
                estimated_cost=s.estimated_cost,
                cost_explanation=s.cost_explanation,
            )
            for s in self._store.list_trip(trip_id)
            if s.place_tag != PlaceTag.HOME.value
        ]

    def get_accommodation_cost(self, trip_id: int, user_id: int) -> AccommodationCost:
        """Lodging cost summary produced at generation time."""
        trip = self._authorize(trip_id, user_id)
        return AccommodationCost(
            trip_id=trip_id, accommodation_cost_info=trip.accommodation_cost_info
        )

    # Single-item edits

    def add_stop(self, trip_id: int, item: AddStop, user_id: int) -> StopView:
        """Append a stop to a day, looking up travel times immediately."""
        self._authorize(trip_id, user_id)
        result = self._pipeline.apply_now(trip_id, item)
        return to_view(result.target)  # type: ignore[arg-type]

    def delete_stop(self, trip_id: int, stop_id: int, user_id: int) -> DeletedStop:
        """Delete a stop and repair its day."""
        self._authorize(trip_id, user_id)
        self._pipeline.apply_now(trip_id, DeleteStop(stop_id=stop_id))
        return DeletedStop(deleted_stop_id=stop_id)

    def reorder_stop(
        self, trip_id: int, stop_id: int, new_visit_order: int, user_id: int
    ) -> DaySchedule:
        """Move a stop within its day; returns the whole day."""
        self._authorize(trip_id, user_id)
        result = self._pipeline.apply_now(
            trip_id, Reorder(stop_id=stop_id, new_visit_order=new_visit_order)
        )
        return self._day_view(result.snapshot, result.target.day_number)  # type: ignore[union-attr]

    def update_stay_duration(
        self, trip_id: int, stop_id: int, stay_minutes: int, user_id: int
    ) -> StopView:
        """Set a stop's dwell time and shift the rest of its day."""
        self._authorize(trip_id, user_id)
        result = self._pipeline.apply_now(
            trip_id, UpdateStayDuration(stop_id=stop_id, stay_minutes=stay_minutes)
        )
        return to_view(result.target)  # type: ignore[arg-type]

    def update_visit_time(
        self, trip_id: int, stop_id: int, new_arrival_time: time, user_id: int
    ) -> StopView:
        """Move a stop's arrival, keeping its dwell time."""
        self._authorize(trip_id, user_id)
        result = self._pipeline.apply_now(
            trip_id, UpdateVisitTime(stop_id=stop_id, new_arrival_time=new_arrival_time)
        )
        return to_view(result.target)  # type: ignore[arg-type]

    def update_accommodation(
        self,
        trip_id: int,
        stop_id: int,
        place_name: str,
        latitude: float,
        longitude: float,
        user_id: int,
    ) -> StopView:
        """Relocate a lodging stop and recompute the legs touching it."""
        self._authorize(trip_id, user_id)
        result = self._pipeline.apply_now(
            trip_id,
            UpdateAccommodation(
                stop_id=stop_id, place_name=place_name, latitude=latitude, longitude=longitude
            ),
        )
        return to_view(result.target)  # type: ignore[arg-type]

    def update_visit_status(
        self, trip_id: int, stop_id: int, is_visit: bool, user_id: int
    ) -> StopView:
        """Mark a stop as visited or not. Timing is unaffected."""
        self._authorize(trip_id, user_id)
        stop = self._stop(trip_id, stop_id)
        stop.is_visit = is_visit
        self._store.apply_changes(trip_id, ScheduleChanges(updated=[stop]))
        return to_view(stop)

    # Batches

    def preview_modifications(
        self, trip_id: int, day_number: int, items: Sequence[Modification], user_id: int
    ) -> DaySchedule:
        """Apply a batch to a copy and return the recalculated day. Nothing is stored."""
        self._authorize(trip_id, user_id)
        snapshot = self._pipeline.preview(trip_id, day_number, items)
        return self._day_view(snapshot, day_number)

    def batch_apply(
        self, trip_id: int, day_number: int, items: Sequence[Modification], user_id: int
    ) -> DaySchedule:
        """Apply and persist a batch, then announce it."""
        trip = self._authorize(trip_id, user_id)
        snapshot = self._pipeline.commit(trip_id, day_number, items)
        self._events.publish(
            ScheduleBatchUpdated(
                trip_id=trip_id, room_id=trip.room_id, user_id=user_id, day_number=day_number
            )
        )
        return self._day_view(snapshot, day_number)

