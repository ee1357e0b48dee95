"""Schedule response models."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict

from tripsync.models.common import PlaceTag, TravelMode


class StopView(BaseModel):
    """One stop as returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    stop_id: int | None
    day_number: int
    date: date
    visit_order: int
    place_name: str
    place_tag: PlaceTag
    latitude: float
    longitude: float
    is_visit: bool
    arrival: datetime
    departure: datetime
    travel_time: str | None = None
    estimated_cost: int | None = None
    cost_explanation: str | None = None


class DaySchedule(BaseModel):
    """A single day of a trip with its ordered stops."""

    trip_id: int
    destination: str
    start_date: date
    end_date: date
    current_day: int
    travel_mode: TravelMode
    budget: int | None = None
    stops: list[StopView]


class StopCost(BaseModel):
    """Estimated cost of a stop."""

    stop_id: int
    place_name: str
    estimated_cost: int | None = None
    cost_explanation: str | None = None


class AccommodationCost(BaseModel):
    """Lodging cost summary for a trip."""

    trip_id: int
    accommodation_cost_info: str | None = None


class DeletedStop(BaseModel):
    """Response for a deleted stop."""

    deleted_stop_id: int
