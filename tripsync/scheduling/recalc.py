"""Ordering and time-chain recalculation for a day's stops.

The module-level functions are pure list transforms. ``RecalculationEngine``
adds the route provider on top and never lets a routing failure escape.
"""

import logging
from datetime import timedelta

from tripsync.db.repositories import ScheduleChanges, ScheduleStore, StopRecord, TripRepository
from tripsync.errors import NotFoundError, ValidationError
from tripsync.models.common import DEFAULT_TRAVEL_MODE, Geo, PlaceTag, TravelMode
from tripsync.routing.provider import RouteTimeProvider
from tripsync.scheduling.durations import humanize_minutes, parse_travel_minutes
from tripsync.scheduling.snapshot import TripSnapshot, order_key
from tripsync.utils.metrics import PrometheusEngineMetrics

logger = logging.getLogger(__name__)


def stay_of(stop: StopRecord) -> timedelta:
    """Dwell time of a stop. Never negative."""
    return max(stop.departure - stop.arrival, timedelta(0))


def renumber(stops: list[StopRecord]) -> list[StopRecord]:
    """Reassign contiguous visit orders 1..N, keeping relative order.

    Returns:
        The stops in their new order
    """
    ordered = sorted(stops, key=order_key)
    for position, stop in enumerate(ordered, start=1):
        stop.visit_order = position
    return ordered


def move_stop(stops: list[StopRecord], target: StopRecord, new_order: int) -> list[StopRecord]:
    """Move ``target`` to a 1-based position and renumber the day.

    Raises:
        ValidationError: If new_order is outside [1, len(stops)]
    """
    ordered = sorted(stops, key=order_key)
    if not 1 <= new_order <= len(ordered):
        raise ValidationError(
            f"Visit order must be between 1 and {len(ordered)}", code="INVALID_VISIT_ORDER"
        )

    ordered = [s for s in ordered if s is not target]
    ordered.insert(new_order - 1, target)
    for position, stop in enumerate(ordered, start=1):
        stop.visit_order = position
    return ordered


def chain_times(stops: list[StopRecord]) -> list[StopRecord]:
    """Re-derive arrival/departure across a day.

    The first stop's arrival is the anchor. Every stop keeps the dwell time it
    had before the pass; later stops arrive at the previous departure plus the
    previous leg's travel time.
    """
    ordered = sorted(stops, key=order_key)
    stays = [stay_of(s) for s in ordered]

    for index, stop in enumerate(ordered):
        if index > 0:
            previous = ordered[index - 1]
            stop.arrival = previous.departure + timedelta(
                minutes=parse_travel_minutes(previous.travel_time)
            )
        stop.departure = stop.arrival + stays[index]
    return ordered


def last_activity(stops: list[StopRecord]) -> StopRecord | None:
    """Last non-HOME stop by visit order."""
    for stop in reversed(sorted(stops, key=order_key)):
        if stop.place_tag != PlaceTag.HOME.value:
            return stop
    return None


def place_after_last_activity(day: list[StopRecord], new_stop: StopRecord) -> StopRecord | None:
    """Give ``new_stop`` the slot after the day's last activity.

    Stops at or after that slot (lodging) shift down by one. A day without
    activities gets the new stop first.

    Returns:
        The activity the new stop follows, or None
    """
    anchor = last_activity(day)
    new_order = anchor.visit_order + 1 if anchor else 1
    for stop in day:
        if stop.visit_order >= new_order:
            stop.visit_order += 1
    new_stop.visit_order = new_order
    return anchor


def _geo(stop: StopRecord) -> Geo:
    return Geo(lat=stop.latitude, lon=stop.longitude)


class RecalculationEngine:
    """Restores ordering and time-chain invariants after edits."""

    def __init__(
        self,
        provider: RouteTimeProvider,
        store: ScheduleStore,
        trips: TripRepository,
        metrics: PrometheusEngineMetrics | None = None,
    ) -> None:
        self._provider = provider
        self._store = store
        self._trips = trips
        self._metrics = metrics or PrometheusEngineMetrics()

    def leg_minutes(self, origin: StopRecord, destination: StopRecord, mode: TravelMode) -> int:
        """Travel minutes between two stops; 0 if the provider fails."""
        try:
            minutes = self._provider.travel_minutes(_geo(origin), _geo(destination), mode)
        except Exception as e:
            logger.warning(
                f"Route lookup failed, using 0 min: {type(e).__name__}",
                extra={
                    "structured": {
                        "origin_stop": origin.stop_id,
                        "destination_stop": destination.stop_id,
                        "mode": mode.value,
                        "error": str(e),
                    }
                },
            )
            self._metrics.inc_route_lookup("error")
            return 0

        self._metrics.inc_route_lookup("ok")
        return max(int(minutes), 0)

    def refresh_leg(self, stop: StopRecord, following: StopRecord, mode: TravelMode) -> int:
        """Store the humanized leg duration on the earlier stop."""
        minutes = self.leg_minutes(stop, following, mode)
        stop.travel_time = humanize_minutes(minutes)
        return minutes

    def refresh_travel_times(self, stops: list[StopRecord], mode: TravelMode) -> list[StopRecord]:
        """Recompute every leg of a day; the last stop's travel time is cleared."""
        ordered = sorted(stops, key=order_key)
        for stop, following in zip(ordered, ordered[1:]):
            self.refresh_leg(stop, following, mode)
        if ordered:
            ordered[-1].travel_time = None
        return ordered

    def settle(self, snapshot: TripSnapshot) -> None:
        """Refresh legs for days whose structure changed since the last settle."""
        for day_number in sorted(snapshot.pending_travel_days):
            self.refresh_travel_times(snapshot.day(day_number), snapshot.travel_mode)
        snapshot.pending_travel_days.clear()

    def chain_touched_days(self, snapshot: TripSnapshot) -> None:
        """One chain pass per touched day."""
        for day_number in sorted(snapshot.touched_days):
            chain_times(snapshot.day(day_number))

    def relocate_lodging(self, snapshot: TripSnapshot, home: StopRecord) -> None:
        """Recompute only the legs touching a lodging stop.

        previous activity -> HOME moves the lodging's arrival (dwell kept).
        HOME -> next stop uses the same day's next stop, or the next day's
        first stop, whose arrival is moved and whose day is re-chained.
        """
        mode = snapshot.travel_mode
        day = snapshot.day(home.day_number)
        index = next(i for i, s in enumerate(day) if s is home)
        home_stay = stay_of(home)

        if index > 0 and day[index - 1].place_tag != PlaceTag.HOME.value:
            previous = day[index - 1]
            minutes = self.refresh_leg(previous, home, mode)
            home.arrival = previous.departure + timedelta(minutes=minutes)
            home.departure = home.arrival + home_stay

        if index + 1 < len(day):
            self.refresh_leg(home, day[index + 1], mode)
        else:
            next_day = snapshot.day(home.day_number + 1)
            if next_day:
                first = next_day[0]
                first_stay = stay_of(first)
                minutes = self.refresh_leg(home, first, mode)
                first.arrival = home.departure + timedelta(minutes=minutes)
                first.departure = first.arrival + first_stay
                snapshot.touch(first.day_number)

        snapshot.touch(home.day_number)

    # Store-level operations on a single day

    def _mode_for(self, trip_id: int) -> TravelMode:
        trip = self._trips.get_trip(trip_id)
        if trip is None:
            raise NotFoundError(f"Trip {trip_id} not found", code="TRIP_NOT_FOUND")
        try:
            return TravelMode(trip.travel_mode) if trip.travel_mode else DEFAULT_TRAVEL_MODE
        except ValueError:
            return DEFAULT_TRAVEL_MODE

    def _write_day(self, trip_id: int, stops: list[StopRecord]) -> list[StopRecord]:
        self._store.apply_changes(trip_id, ScheduleChanges(updated=stops))
        return stops

    def reorder_day(self, trip_id: int, day_number: int) -> list[StopRecord]:
        """Persist contiguous visit orders for a day."""
        return self._write_day(trip_id, renumber(self._store.list_day(trip_id, day_number)))

    def recalc_travel_times(self, trip_id: int, day_number: int) -> list[StopRecord]:
        """Persist freshly looked-up travel times for a day."""
        mode = self._mode_for(trip_id)
        stops = self.refresh_travel_times(self._store.list_day(trip_id, day_number), mode)
        return self._write_day(trip_id, stops)

    def recalc_chain_times(self, trip_id: int, day_number: int) -> list[StopRecord]:
        """Persist the arrival/departure chain for a day."""
        return self._write_day(trip_id, chain_times(self._store.list_day(trip_id, day_number)))
