"""Models package - re-exports for convenience."""

from tripsync.models.common import (
    DEFAULT_TRAVEL_MODE,
    GenerationStatus,
    Geo,
    LeaseState,
    PlaceTag,
    TravelMode,
    TripStatus,
    VersionStatus,
)
from tripsync.models.events import ScheduleBatchUpdated, TripFailed, TripGenerated
from tripsync.models.generation import (
    DayPlan,
    ItineraryRequest,
    ItineraryResponse,
    PlacePreference,
    VisitPlan,
)
from tripsync.models.modification import (
    AddStop,
    DeleteStop,
    Modification,
    ModificationBatch,
    ModificationKind,
    Reorder,
    UpdateAccommodation,
    UpdateStayDuration,
    UpdateTravelTime,
    UpdateVisitTime,
)
from tripsync.models.schedule import (
    AccommodationCost,
    DaySchedule,
    DeletedStop,
    StopCost,
    StopView,
)

__all__ = [
    # Common
    "Geo",
    "PlaceTag",
    "TravelMode",
    "DEFAULT_TRAVEL_MODE",
    "VersionStatus",
    "TripStatus",
    "GenerationStatus",
    "LeaseState",
    # Events
    "TripGenerated",
    "TripFailed",
    "ScheduleBatchUpdated",
    # AI service wire models
    "ItineraryRequest",
    "ItineraryResponse",
    "DayPlan",
    "VisitPlan",
    "PlacePreference",
    # Modifications
    "ModificationKind",
    "Modification",
    "ModificationBatch",
    "Reorder",
    "UpdateStayDuration",
    "UpdateVisitTime",
    "AddStop",
    "DeleteStop",
    "UpdateAccommodation",
    "UpdateTravelTime",
    # Schedule responses
    "StopView",
    "DaySchedule",
    "StopCost",
    "AccommodationCost",
    "DeletedStop",
]
