"""Wire models for the AI itinerary service (snake_case JSON)."""

from datetime import date

from pydantic import BaseModel, Field


class PlacePreference(BaseModel):
    """A place mentioned in the room's chat."""

    place_name: str
    place_tag: str


class ItineraryRequest(BaseModel):
    """Request payload sent to the AI itinerary service."""

    days: int = Field(..., ge=1)
    start_date: date
    country: str
    members: int = Field(..., ge=0)
    places: list[PlacePreference] = Field(default_factory=list)
    must_visit: list[str] = Field(default_factory=list)
    rule: list[str] = Field(default_factory=list)
    chat: list[str] = Field(default_factory=list)


class VisitPlan(BaseModel):
    """One visit in a generated day. Times are "HH:MM" clock strings."""

    order: int
    display_name: str
    place_tag: str
    latitude: float
    longitude: float
    arrival: str
    departure: str
    travel_time: int | None = None
    estimated_cost: int | None = None
    cost_explanation: str | None = None


class DayPlan(BaseModel):
    """A generated day."""

    day: int = Field(..., ge=1)
    visits: list[VisitPlan] = Field(default_factory=list)


class ItineraryResponse(BaseModel):
    """Response returned by the AI itinerary service."""

    budget: int | None = None
    travel_mode: str | None = None
    accommodation_cost_info: str | None = None
    itinerary: list[DayPlan] = Field(default_factory=list)
