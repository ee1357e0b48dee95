"""Tests for single-item schedule edits and reads."""

from datetime import datetime, time

import pytest

from tests.support import (
    MEMBER_ID,
    OTHER_MEMBER_ID,
    OUTSIDER_ID,
    FakeRouteProvider,
    World,
    build_world,
)
from tripsync.errors import AuthorizationError, NotFoundError, ValidationError
from tripsync.models.common import PlaceTag, TravelMode
from tripsync.models.modification import AddStop


def _dt(day: int, clock: str) -> datetime:
    hour, minute = clock.split(":")
    return datetime(2025, 1, day, int(hour), int(minute))


class TestReads:
    """Day view and cost lookups."""

    def test_get_day_schedule(self, world: World) -> None:
        """Test a day is returned in visit order with trip context."""
        day = world.service.get_day_schedule(world.trip_id, 2, MEMBER_ID)

        assert day.current_day == 2
        assert day.destination == "Seoul"
        assert day.travel_mode == TravelMode.DRIVE
        assert [s.place_name for s in day.stops] == ["D", "Hotel"]
        assert day.stops[1].place_tag == PlaceTag.HOME

    def test_day_out_of_range(self, world: World) -> None:
        """Test a day outside the trip is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            world.service.get_day_schedule(world.trip_id, 4, MEMBER_ID)

        assert exc_info.value.code == "DAY_OUT_OF_RANGE"

    def test_outsider_is_rejected(self, world: World) -> None:
        """Test a user outside the room cannot read the trip."""
        with pytest.raises(AuthorizationError) as exc_info:
            world.service.get_day_schedule(world.trip_id, 1, OUTSIDER_ID)

        assert exc_info.value.code == "USER_NOT_IN_TRIP"

    def test_unknown_trip(self, world: World) -> None:
        """Test an unknown trip is reported as not found."""
        with pytest.raises(NotFoundError) as exc_info:
            world.service.get_day_schedule(999, 1, MEMBER_ID)

        assert exc_info.value.code == "TRIP_NOT_FOUND"

    def test_stop_costs_exclude_lodging(self, world: World) -> None:
        """Test the cost list skips HOME stops."""
        costs = world.service.list_stop_costs(world.trip_id, OTHER_MEMBER_ID)

        assert [c.place_name for c in costs] == ["A", "B", "C", "D", "E", "F"]
        assert costs[1].estimated_cost == 2000

    def test_single_stop_cost(self, world: World) -> None:
        """Test one stop's cost."""
        cost = world.service.get_stop_cost(world.trip_id, world.ids["C"], MEMBER_ID)

        assert cost.estimated_cost == 3000
        assert cost.cost_explanation == "C ticket"

    def test_missing_stop_cost(self, world: World) -> None:
        """Test a cost lookup for a missing stop."""
        with pytest.raises(NotFoundError):
            world.service.get_stop_cost(world.trip_id, 404, MEMBER_ID)

    def test_accommodation_cost(self, world: World) -> None:
        """Test the lodging cost summary."""
        cost = world.service.get_accommodation_cost(world.trip_id, MEMBER_ID)

        assert cost.accommodation_cost_info == "Hotel 120000 per night"


class TestSingleEdits:
    """Single-item edits look up travel times synchronously."""

    def test_reorder_second_stop_to_front(self, world: World) -> None:
        """Test moving B first recomputes legs and keeps B's arrival as anchor."""
        day = world.service.reorder_stop(world.trip_id, world.ids["B"], 1, MEMBER_ID)

        assert [(s.place_name, s.visit_order) for s in day.stops] == [
            ("B", 1),
            ("A", 2),
            ("C", 3),
        ]
        b, a, c = day.stops
        assert [s.travel_time for s in day.stops] == ["25 min", "25 min", None]
        assert (b.arrival, b.departure) == (_dt(1, "10:30"), _dt(1, "11:30"))
        assert (a.arrival, a.departure) == (_dt(1, "11:55"), _dt(1, "12:55"))
        assert (c.arrival, c.departure) == (_dt(1, "13:20"), _dt(1, "14:20"))
        assert len(world.provider.calls) == 2

    def test_reorder_to_same_position_is_a_no_op(self, world: World) -> None:
        """Test reordering a stop onto its own position changes nothing."""
        before = world.day(1)

        world.service.reorder_stop(world.trip_id, world.ids["A"], 1, MEMBER_ID)

        assert world.day(1) == before
        assert world.provider.calls == []

    def test_reorder_out_of_range(self, world: World) -> None:
        """Test a position past the end of the day is rejected."""
        with pytest.raises(ValidationError):
            world.service.reorder_stop(world.trip_id, world.ids["A"], 5, MEMBER_ID)

    def test_delete_middle_stop(self, world: World) -> None:
        """Test deleting the second of three stops closes the gap."""
        deleted = world.service.delete_stop(world.trip_id, world.ids["B"], MEMBER_ID)

        assert deleted.deleted_stop_id == world.ids["B"]
        a, c = world.day(1)
        assert (a.place_name, a.visit_order, a.travel_time) == ("A", 1, "25 min")
        assert (c.place_name, c.visit_order, c.travel_time) == ("C", 2, None)
        assert (c.arrival, c.departure) == (_dt(1, "10:25"), _dt(1, "11:25"))

    def test_stay_duration_shifts_rest_of_day(self, world: World) -> None:
        """Test a longer first stop pushes the later stops back."""
        view = world.service.update_stay_duration(world.trip_id, world.ids["A"], 90, MEMBER_ID)

        assert view.departure == _dt(1, "10:30")
        b, c = world.stop("B"), world.stop("C")
        assert (b.arrival, b.departure) == (_dt(1, "11:00"), _dt(1, "12:00"))
        assert (c.arrival, c.departure) == (_dt(1, "12:15"), _dt(1, "13:15"))
        assert world.provider.calls == []

    def test_visit_time_on_first_stop_moves_day(self, world: World) -> None:
        """Test moving the first arrival re-anchors the whole day."""
        view = world.service.update_visit_time(world.trip_id, world.ids["A"], time(8, 0), MEMBER_ID)

        assert (view.arrival, view.departure) == (_dt(1, "08:00"), _dt(1, "09:00"))
        c = world.stop("C")
        assert (c.arrival, c.departure) == (_dt(1, "10:45"), _dt(1, "11:45"))

    def test_add_stop_before_lodging(self, world: World) -> None:
        """Test a new stop lands after the last activity and before the hotel."""
        item = AddStop(
            day_number=2,
            place_name="Market",
            place_tag=PlaceTag.SHOPPING,
            latitude=37.57,
            longitude=127.01,
            stay_minutes=30,
        )

        view = world.service.add_stop(world.trip_id, item, MEMBER_ID)

        assert view.stop_id is not None
        assert view.visit_order == 2
        assert (view.arrival, view.departure) == (_dt(2, "11:25"), _dt(2, "11:55"))
        assert view.travel_time == "25 min"

        d, market, hotel = world.day(2)
        assert (d.place_name, market.place_name, hotel.place_name) == ("D", "Market", "Hotel")
        assert d.travel_time == "25 min"
        assert hotel.visit_order == 3
        assert hotel.arrival == _dt(2, "12:20")
        assert hotel.departure == datetime(2025, 1, 3, 9, 10)
        assert len(world.provider.calls) == 2

    def test_add_stop_to_day_with_only_lodging(self, world: World) -> None:
        """Test a day without activities starts the new stop at 09:00."""
        world.service.delete_stop(world.trip_id, world.ids["D"], MEMBER_ID)
        item = AddStop(
            day_number=2,
            place_name="Bakery",
            place_tag=PlaceTag.CAFE,
            latitude=37.57,
            longitude=127.01,
            stay_minutes=30,
        )

        view = world.service.add_stop(world.trip_id, item, MEMBER_ID)

        assert view.visit_order == 1
        assert (view.arrival, view.departure) == (_dt(2, "09:00"), _dt(2, "09:30"))
        hotel = world.stop("Hotel")
        assert hotel.visit_order == 2
        assert hotel.arrival == _dt(2, "09:55")

    def test_relocate_lodging(self, world: World) -> None:
        """Test moving the hotel recomputes its legs into and out of it."""
        view = world.service.update_accommodation(
            world.trip_id, world.ids["Hotel"], "Guesthouse", 37.55, 126.95, MEMBER_ID
        )

        assert view.place_name == "Guesthouse"
        assert (view.arrival, view.departure) == (_dt(2, "11:25"), datetime(2025, 1, 3, 8, 15))
        assert view.travel_time == "25 min"
        assert world.stop("D").travel_time == "25 min"

        e, f = world.day(3)
        assert (e.arrival, e.departure) == (_dt(3, "08:40"), _dt(3, "09:40"))
        assert (f.arrival, f.departure) == (_dt(3, "10:10"), _dt(3, "11:10"))

    def test_relocate_non_lodging_is_rejected(self, world: World) -> None:
        """Test only HOME stops can be relocated."""
        with pytest.raises(ValidationError) as exc_info:
            world.service.update_accommodation(
                world.trip_id, world.ids["D"], "Inn", 37.5, 127.0, MEMBER_ID
            )

        assert exc_info.value.code == "INVALID_ACCOMMODATION_TARGET"

    def test_visit_status_keeps_times(self, world: World) -> None:
        """Test marking a stop visited touches nothing else."""
        before = world.stop("B")

        view = world.service.update_visit_status(world.trip_id, world.ids["B"], True, MEMBER_ID)

        assert view.is_visit is True
        after = world.stop("B")
        assert after.is_visit is True
        assert (after.arrival, after.departure) == (before.arrival, before.departure)

    def test_routing_failure_degrades_to_zero(self) -> None:
        """Test an edit still succeeds when every route lookup fails."""
        world = build_world(FakeRouteProvider(fail=True))

        day = world.service.reorder_stop(world.trip_id, world.ids["C"], 1, MEMBER_ID)

        assert [s.travel_time for s in day.stops] == ["0 min", "0 min", None]
        c, a, b = day.stops
        assert a.arrival == c.departure
        assert (b.arrival, b.departure) == (_dt(1, "13:45"), _dt(1, "14:45"))

    def test_outsider_cannot_edit(self, world: World) -> None:
        """Test edits are rejected for users outside the room."""
        before = world.store.list_trip(world.trip_id)

        with pytest.raises(AuthorizationError):
            world.service.delete_stop(world.trip_id, world.ids["A"], OUTSIDER_ID)

        assert world.store.list_trip(world.trip_id) == before
