"""Schedule modification items.

Each item carries exactly the fields its kind needs. The ``kind`` field is the
discriminator, so a list of items can be parsed from JSON in one pass.
"""

from datetime import time
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from tripsync.models.common import PlaceTag


class ModificationKind(str, Enum):
    """Kind of schedule edit."""

    REORDER = "REORDER"
    UPDATE_STAY_DURATION = "UPDATE_STAY_DURATION"
    UPDATE_VISIT_TIME = "UPDATE_VISIT_TIME"
    ADD = "ADD"
    DELETE = "DELETE"
    UPDATE_ACCOMMODATION = "UPDATE_ACCOMMODATION"
    UPDATE_TRAVEL_TIME = "UPDATE_TRAVEL_TIME"


class Reorder(BaseModel):
    """Move a stop to a new 1-based position within its day."""

    kind: Literal["REORDER"] = "REORDER"
    stop_id: int
    new_visit_order: int = Field(..., ge=1)


class UpdateStayDuration(BaseModel):
    """Set a stop's dwell time."""

    kind: Literal["UPDATE_STAY_DURATION"] = "UPDATE_STAY_DURATION"
    stop_id: int
    stay_minutes: int = Field(..., gt=0)


class UpdateVisitTime(BaseModel):
    """Move a stop's arrival to a new clock time, keeping its dwell time."""

    kind: Literal["UPDATE_VISIT_TIME"] = "UPDATE_VISIT_TIME"
    stop_id: int
    new_arrival_time: time


class AddStop(BaseModel):
    """Append a new stop to a day."""

    kind: Literal["ADD"] = "ADD"
    day_number: int = Field(..., ge=1)
    place_name: str = Field(..., min_length=1)
    place_tag: PlaceTag
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    stay_minutes: int = Field(..., gt=0)


class DeleteStop(BaseModel):
    """Remove a stop."""

    kind: Literal["DELETE"] = "DELETE"
    stop_id: int


class UpdateAccommodation(BaseModel):
    """Relocate a lodging stop."""

    kind: Literal["UPDATE_ACCOMMODATION"] = "UPDATE_ACCOMMODATION"
    stop_id: int
    place_name: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class UpdateTravelTime(BaseModel):
    """Override the travel time from a stop to the next one."""

    kind: Literal["UPDATE_TRAVEL_TIME"] = "UPDATE_TRAVEL_TIME"
    stop_id: int
    travel_minutes: int = Field(..., gt=0)


Modification = Annotated[
    Reorder
    | UpdateStayDuration
    | UpdateVisitTime
    | AddStop
    | DeleteStop
    | UpdateAccommodation
    | UpdateTravelTime,
    Field(discriminator="kind"),
]


class ModificationBatch(BaseModel):
    """Batch of edits targeting one day of a trip."""

    day_number: int = Field(..., ge=1)
    modifications: list[Modification] = Field(default_factory=list)
