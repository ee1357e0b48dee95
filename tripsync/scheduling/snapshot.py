"""Working copy of a trip's stops.

Edits run against a snapshot. ``changes()`` turns it back into a diff for
the schedule store; a preview simply drops the snapshot.
"""

from dataclasses import dataclass, field, replace
from datetime import date, time, timedelta

from tripsync.db.repositories import ScheduleChanges, StopRecord, TripRecord
from tripsync.errors import NotFoundError, ValidationError
from tripsync.models.common import DEFAULT_TRAVEL_MODE, PlaceTag, TravelMode


def order_key(stop: StopRecord) -> tuple[int, bool, int]:
    """Sort by visit order, then stop ID. Unsaved stops sort last among ties."""
    return (stop.visit_order, stop.stop_id is None, stop.stop_id or 0)


@dataclass
class TripSnapshot:
    """Deep copy of one trip's stops plus the context edits need."""

    trip: TripRecord
    start_date: date
    end_date: date
    stops: list[StopRecord]
    day_start: time = time(9, 0)
    touched_days: set[int] = field(default_factory=set)
    pending_travel_days: set[int] = field(default_factory=set)
    _originals: dict[int, StopRecord] = field(default_factory=dict, repr=False)
    _deleted_ids: list[int] = field(default_factory=list, repr=False)

    @classmethod
    def capture(
        cls,
        trip: TripRecord,
        stops: list[StopRecord],
        start_date: date,
        end_date: date,
        day_start: time = time(9, 0),
    ) -> "TripSnapshot":
        """Copy stored stops into a new snapshot."""
        return cls(
            trip=replace(trip),
            start_date=start_date,
            end_date=end_date,
            stops=[replace(s) for s in stops],
            day_start=day_start,
            _originals={s.stop_id: replace(s) for s in stops if s.stop_id is not None},
        )

    @property
    def trip_id(self) -> int:
        return self.trip.trip_id  # type: ignore[return-value]

    @property
    def travel_mode(self) -> TravelMode:
        try:
            return TravelMode(self.trip.travel_mode) if self.trip.travel_mode else DEFAULT_TRAVEL_MODE
        except ValueError:
            return DEFAULT_TRAVEL_MODE

    @property
    def day_count(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def date_for(self, day_number: int) -> date:
        return self.start_date + timedelta(days=day_number - 1)

    def check_day(self, day_number: int) -> None:
        """Reject day numbers outside the trip's date range."""
        if not 1 <= day_number <= self.day_count:
            raise ValidationError(
                f"Day {day_number} is outside the trip (1-{self.day_count})",
                code="DAY_OUT_OF_RANGE",
            )

    def day(self, day_number: int) -> list[StopRecord]:
        """Stops of a day in visit order (live objects, not copies)."""
        return sorted((s for s in self.stops if s.day_number == day_number), key=order_key)

    def find(self, stop_id: int) -> StopRecord:
        """Resolve a stop of this trip.

        Raises:
            NotFoundError: If the stop is not part of the trip
        """
        for stop in self.stops:
            if stop.stop_id == stop_id:
                return stop
        raise NotFoundError(
            f"Stop {stop_id} not found in trip {self.trip_id}", code="SCHEDULE_NOT_FOUND"
        )

    def lodging(self, day_number: int) -> StopRecord | None:
        """First HOME stop of a day by visit order."""
        for stop in self.day(day_number):
            if stop.place_tag == PlaceTag.HOME.value:
                return stop
        return None

    def insert(self, stop: StopRecord) -> None:
        self.stops.append(stop)
        self.touch(stop.day_number)

    def remove(self, stop: StopRecord) -> None:
        self.stops = [s for s in self.stops if s is not stop]
        if stop.stop_id is not None:
            self._deleted_ids.append(stop.stop_id)
        self.touch(stop.day_number)

    def touch(self, day_number: int, *, refresh_travel: bool = False) -> None:
        """Mark a day for the final chain pass (and optionally a leg refresh)."""
        self.touched_days.add(day_number)
        if refresh_travel:
            self.pending_travel_days.add(day_number)

    def changes(self) -> ScheduleChanges:
        """Diff against the stops the snapshot was captured from."""
        inserted = [s for s in self.stops if s.stop_id is None]
        updated = [
            s
            for s in self.stops
            if s.stop_id is not None and s != self._originals.get(s.stop_id)
        ]
        return ScheduleChanges(
            deleted_ids=list(self._deleted_ids), inserted=inserted, updated=updated
        )
