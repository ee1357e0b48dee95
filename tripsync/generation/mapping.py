"""Mapping between room data, the AI service wire format and stored stops."""

import logging
from datetime import date, datetime, time, timedelta

from tripsync.db.repositories import RoomPreferences, RoomRecord, StopRecord, TripRecord
from tripsync.models.common import PlaceTag, TravelMode, TripStatus, VersionStatus
from tripsync.models.generation import ItineraryRequest, ItineraryResponse, PlacePreference
from tripsync.scheduling.durations import humanize_minutes

logger = logging.getLogger(__name__)


def build_itinerary_request(
    room: RoomRecord, member_count: int, preferences: RoomPreferences
) -> ItineraryRequest:
    """Build the AI request from a room and its chat-derived preferences."""
    return ItineraryRequest(
        days=room.days,
        start_date=room.start_date,
        country=room.destination,
        members=member_count,
        places=[PlacePreference(place_name=name, place_tag=tag) for name, tag in preferences.places],
        must_visit=preferences.must_visit,
        rule=preferences.rules,
        chat=preferences.chat,
    )


def parse_clock(value: str) -> time:
    """Parse "HH:MM" (or "HH:MM:SS") into a time.

    Raises:
        ValueError: If the value is not a clock time
    """
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue
    raise ValueError(f"invalid clock time: {value!r}")


def normalize_place_tag(tag: str) -> str:
    try:
        return PlaceTag(tag.upper()).value
    except ValueError:
        return PlaceTag.OTHER.value


def normalize_travel_mode(mode: str | None) -> str | None:
    if not mode:
        return None
    try:
        return TravelMode(mode.upper()).value
    except ValueError:
        logger.warning(f"Unknown travel mode from itinerary service: {mode!r}")
        return None


def build_trip(room: RoomRecord, response: ItineraryResponse) -> TripRecord:
    """New READY trip for a room from a generation response."""
    return TripRecord(
        trip_id=None,
        room_id=room.room_id,
        destination=room.destination,
        version_status=VersionStatus.NEW,
        trip_status=TripStatus.READY,
        travel_mode=normalize_travel_mode(response.travel_mode),
        budget=response.budget,
        accommodation_cost_info=response.accommodation_cost_info,
    )


def build_stops(start_date: date, response: ItineraryResponse) -> list[StopRecord]:
    """Stops for every generated visit.

    The stop date is ``start_date + (day - 1)``. A departure earlier than the
    arrival rolls over to the next morning (overnight lodging). Only the first
    lodging of a day keeps the HOME tag.

    Raises:
        ValueError: If a visit carries a malformed clock time
    """
    stops: list[StopRecord] = []
    for day_plan in response.itinerary:
        stop_date = start_date + timedelta(days=day_plan.day - 1)
        has_lodging = False

        for position, visit in enumerate(sorted(day_plan.visits, key=lambda v: v.order), start=1):
            arrival = datetime.combine(stop_date, parse_clock(visit.arrival))
            departure = datetime.combine(stop_date, parse_clock(visit.departure))
            if departure < arrival:
                departure += timedelta(days=1)

            tag = normalize_place_tag(visit.place_tag)
            if tag == PlaceTag.HOME.value:
                if has_lodging:
                    logger.warning(
                        f"Second lodging on day {day_plan.day} retagged as OTHER: {visit.display_name}"
                    )
                    tag = PlaceTag.OTHER.value
                has_lodging = True

            stops.append(
                StopRecord(
                    stop_id=None,
                    trip_id=None,
                    day_number=day_plan.day,
                    date=stop_date,
                    visit_order=position,
                    place_name=visit.display_name,
                    place_tag=tag,
                    latitude=visit.latitude,
                    longitude=visit.longitude,
                    is_visit=False,
                    arrival=arrival,
                    departure=departure,
                    travel_time=(
                        humanize_minutes(visit.travel_time) if visit.travel_time is not None else None
                    ),
                    estimated_cost=visit.estimated_cost,
                    cost_explanation=visit.cost_explanation,
                )
            )
    return stops
