"""Batch and single-item schedule edits.

Batch edits are applied in a fixed order regardless of input order, then the
touched days get one chain pass. Batch handlers never call the route provider
except for the leg refresh after DELETE; single-item edits call it
synchronously.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, time, timedelta

from tripsync.db.repositories import (
    RoomDirectory,
    ScheduleStore,
    StopRecord,
    TripRepository,
)
from tripsync.errors import NotFoundError, ValidationError
from tripsync.models.common import PlaceTag
from tripsync.models.modification import (
    AddStop,
    DeleteStop,
    Modification,
    ModificationKind,
    Reorder,
    UpdateAccommodation,
    UpdateStayDuration,
    UpdateTravelTime,
    UpdateVisitTime,
)
from tripsync.scheduling.durations import humanize_minutes
from tripsync.scheduling.recalc import (
    RecalculationEngine,
    move_stop,
    place_after_last_activity,
    renumber,
    stay_of,
)
from tripsync.scheduling.snapshot import TripSnapshot
from tripsync.utils.metrics import PrometheusEngineMetrics

logger = logging.getLogger(__name__)

Handler = Callable[[TripSnapshot, Modification], TripSnapshot]

APPLICATION_ORDER: tuple[ModificationKind, ...] = (
    ModificationKind.DELETE,
    ModificationKind.ADD,
    ModificationKind.REORDER,
    ModificationKind.UPDATE_ACCOMMODATION,
    ModificationKind.UPDATE_VISIT_TIME,
    ModificationKind.UPDATE_STAY_DURATION,
    ModificationKind.UPDATE_TRAVEL_TIME,
)


def _new_stop(snapshot: TripSnapshot, item: AddStop, day: list[StopRecord]) -> StopRecord:
    """Validate an ADD and build its (unsaved, untimed) stop."""
    snapshot.check_day(item.day_number)
    if item.place_tag == PlaceTag.HOME and snapshot.lodging(item.day_number) is not None:
        raise ValidationError(
            f"Day {item.day_number} already has a lodging stop", code="DUPLICATE_ACCOMMODATION"
        )

    stop_date = day[0].date if day else snapshot.date_for(item.day_number)
    start = datetime.combine(stop_date, snapshot.day_start)
    return StopRecord(
        stop_id=None,
        trip_id=snapshot.trip_id,
        day_number=item.day_number,
        date=stop_date,
        visit_order=0,
        place_name=item.place_name,
        place_tag=item.place_tag.value,
        latitude=item.latitude,
        longitude=item.longitude,
        is_visit=False,
        arrival=start,
        departure=start + timedelta(minutes=item.stay_minutes),
    )


def apply_delete(snapshot: TripSnapshot, item: DeleteStop) -> TripSnapshot:
    stop = snapshot.find(item.stop_id)
    snapshot.remove(stop)
    renumber(snapshot.day(stop.day_number))
    snapshot.touch(stop.day_number, refresh_travel=True)
    return snapshot


def apply_add(snapshot: TripSnapshot, item: AddStop) -> TripSnapshot:
    """Append after the last activity, arriving when it departs. No route lookup."""
    day = snapshot.day(item.day_number)
    new_stop = _new_stop(snapshot, item, day)
    anchor = place_after_last_activity(day, new_stop)
    if anchor is not None:
        new_stop.arrival = anchor.departure
        new_stop.departure = anchor.departure + timedelta(minutes=item.stay_minutes)
    snapshot.insert(new_stop)
    return snapshot


def apply_reorder(snapshot: TripSnapshot, item: Reorder) -> TripSnapshot:
    """Permute a day's order only. No route lookup."""
    stop = snapshot.find(item.stop_id)
    if stop.visit_order == item.new_visit_order:
        return snapshot
    move_stop(snapshot.day(stop.day_number), stop, item.new_visit_order)
    snapshot.touch(stop.day_number)
    return snapshot


def _lodging_target(snapshot: TripSnapshot, stop_id: int) -> StopRecord:
    stop = snapshot.find(stop_id)
    if stop.place_tag != PlaceTag.HOME.value:
        raise ValidationError(
            f"Stop {stop_id} is not a lodging stop", code="INVALID_ACCOMMODATION_TARGET"
        )
    return stop


def apply_update_accommodation(snapshot: TripSnapshot, item: UpdateAccommodation) -> TripSnapshot:
    """Change the lodging's place only. No route lookup."""
    home = _lodging_target(snapshot, item.stop_id)
    home.place_name = item.place_name
    home.latitude = item.latitude
    home.longitude = item.longitude
    snapshot.touch(home.day_number)
    return snapshot


def apply_update_visit_time(snapshot: TripSnapshot, item: UpdateVisitTime) -> TripSnapshot:
    stop = snapshot.find(item.stop_id)
    stay = stay_of(stop)
    stop.arrival = datetime.combine(stop.date, item.new_arrival_time)
    stop.departure = stop.arrival + stay
    snapshot.touch(stop.day_number)
    return snapshot


def apply_update_stay_duration(snapshot: TripSnapshot, item: UpdateStayDuration) -> TripSnapshot:
    stop = snapshot.find(item.stop_id)
    stop.departure = stop.arrival + timedelta(minutes=item.stay_minutes)
    snapshot.touch(stop.day_number)
    return snapshot


def apply_update_travel_time(snapshot: TripSnapshot, item: UpdateTravelTime) -> TripSnapshot:
    stop = snapshot.find(item.stop_id)
    stop.travel_time = humanize_minutes(item.travel_minutes)
    snapshot.touch(stop.day_number)
    return snapshot


BATCH_HANDLERS: dict[ModificationKind, Handler] = {
    ModificationKind.DELETE: apply_delete,  # type: ignore[dict-item]
    ModificationKind.ADD: apply_add,  # type: ignore[dict-item]
    ModificationKind.REORDER: apply_reorder,  # type: ignore[dict-item]
    ModificationKind.UPDATE_ACCOMMODATION: apply_update_accommodation,  # type: ignore[dict-item]
    ModificationKind.UPDATE_VISIT_TIME: apply_update_visit_time,  # type: ignore[dict-item]
    ModificationKind.UPDATE_STAY_DURATION: apply_update_stay_duration,  # type: ignore[dict-item]
    ModificationKind.UPDATE_TRAVEL_TIME: apply_update_travel_time,  # type: ignore[dict-item]
}


@dataclass
class EditResult:
    """Outcome of a single-item edit."""

    snapshot: TripSnapshot
    target: StopRecord | None


class ModificationPipeline:
    """Applies edits to a trip snapshot and commits or discards the result."""

    def __init__(
        self,
        trips: TripRepository,
        rooms: RoomDirectory,
        store: ScheduleStore,
        engine: RecalculationEngine,
        day_start: time = time(9, 0),
        metrics: PrometheusEngineMetrics | None = None,
    ) -> None:
        self._trips = trips
        self._rooms = rooms
        self._store = store
        self._engine = engine
        self._day_start = day_start
        self._metrics = metrics or PrometheusEngineMetrics()

    def load(self, trip_id: int) -> TripSnapshot:
        """Capture a trip's stops.

        Raises:
            NotFoundError: If the trip or its room does not exist
        """
        trip = self._trips.get_trip(trip_id)
        if trip is None:
            raise NotFoundError(f"Trip {trip_id} not found", code="TRIP_NOT_FOUND")
        room = self._rooms.get_room(trip.room_id)
        if room is None:
            raise NotFoundError(f"Room {trip.room_id} not found", code="ROOM_NOT_FOUND")

        return TripSnapshot.capture(
            trip,
            self._store.list_trip(trip_id),
            start_date=room.start_date,
            end_date=room.end_date,
            day_start=self._day_start,
        )

    def run(
        self, snapshot: TripSnapshot, day_number: int, items: Sequence[Modification]
    ) -> TripSnapshot:
        """Apply a batch to a snapshot in APPLICATION_ORDER, then chain touched days."""
        snapshot.check_day(day_number)
        snapshot.touch(day_number)

        for kind in APPLICATION_ORDER:
            handler = BATCH_HANDLERS[kind]
            for item in items:
                if item.kind == kind.value:
                    snapshot = handler(snapshot, item)
            self._engine.settle(snapshot)

        self._engine.chain_touched_days(snapshot)
        return snapshot

    def commit(
        self, trip_id: int, day_number: int, items: Sequence[Modification]
    ) -> TripSnapshot:
        """Apply a batch and persist the result in one store call."""
        snapshot = self.run(self.load(trip_id), day_number, items)
        self._persist(snapshot)
        for item in items:
            self._metrics.inc_edit("commit", item.kind)
        logger.info(
            f"Committed {len(items)} edit(s) to trip {trip_id} day {day_number}",
            extra={"structured": {"trip_id": trip_id, "day_number": day_number, "items": len(items)}},
        )
        return snapshot

    def preview(
        self, trip_id: int, day_number: int, items: Sequence[Modification]
    ) -> TripSnapshot:
        """Apply a batch to a fresh copy and discard it."""
        snapshot = self.run(self.load(trip_id), day_number, items)
        for item in items:
            self._metrics.inc_edit("preview", item.kind)
        return snapshot

    def apply_now(self, trip_id: int, item: Modification) -> EditResult:
        """Apply one edit with synchronous route lookups and persist it."""
        snapshot = self.load(trip_id)
        target: StopRecord | None

        if isinstance(item, AddStop):
            target = self._add_now(snapshot, item)
        elif isinstance(item, DeleteStop):
            apply_delete(snapshot, item)
            target = None
        elif isinstance(item, Reorder):
            target = snapshot.find(item.stop_id)
            if target.visit_order != item.new_visit_order:
                move_stop(snapshot.day(target.day_number), target, item.new_visit_order)
                snapshot.touch(target.day_number, refresh_travel=True)
        elif isinstance(item, UpdateAccommodation):
            target = _lodging_target(snapshot, item.stop_id)
            apply_update_accommodation(snapshot, item)
            self._engine.relocate_lodging(snapshot, target)
        else:
            snapshot = BATCH_HANDLERS[ModificationKind(item.kind)](snapshot, item)
            target = snapshot.find(item.stop_id)

        self._engine.settle(snapshot)
        self._engine.chain_touched_days(snapshot)
        self._persist(snapshot)
        self._metrics.inc_edit("single", item.kind)
        return EditResult(snapshot=snapshot, target=target)

    def _add_now(self, snapshot: TripSnapshot, item: AddStop) -> StopRecord:
        """Append a stop, looking up the legs into and out of it."""
        mode = snapshot.travel_mode
        day = snapshot.day(item.day_number)
        new_stop = _new_stop(snapshot, item, day)
        anchor = place_after_last_activity(day, new_stop)

        if anchor is not None:
            minutes = self._engine.refresh_leg(anchor, new_stop, mode)
            new_stop.arrival = anchor.departure + timedelta(minutes=minutes)
            new_stop.departure = new_stop.arrival + timedelta(minutes=item.stay_minutes)
        snapshot.insert(new_stop)

        following = [s for s in day if s.visit_order == new_stop.visit_order + 1]
        if following:
            nxt = following[0]
            nxt_stay = stay_of(nxt)
            minutes = self._engine.refresh_leg(new_stop, nxt, mode)
            nxt.arrival = new_stop.departure + timedelta(minutes=minutes)
            nxt.departure = nxt.arrival + nxt_stay
        return new_stop

    def _persist(self, snapshot: TripSnapshot) -> None:
        changes = snapshot.changes()
        if changes.is_empty:
            return
        stored = self._store.apply_changes(snapshot.trip_id, changes)
        for live, saved in zip(changes.inserted, stored):
            live.stop_id = saved.stop_id
