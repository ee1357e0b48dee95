"""Common types and enums shared across all models."""

from enum import Enum

from pydantic import BaseModel, Field


class Geo(BaseModel):
    """Geographic coordinates (WGS84)."""

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class PlaceTag(str, Enum):
    """Category of a stop. HOME marks the day's lodging."""

    HOME = "HOME"
    TOURIST_SPOT = "TOURIST_SPOT"
    RESTAURANT = "RESTAURANT"
    CAFE = "CAFE"
    SHOPPING = "SHOPPING"
    ACTIVITY = "ACTIVITY"
    OTHER = "OTHER"


class TravelMode(str, Enum):
    """Travel mode used for route lookups."""

    DRIVE = "DRIVE"
    WALK = "WALK"
    BICYCLE = "BICYCLE"
    TRANSIT = "TRANSIT"
    TWO_WHEELER = "TWO_WHEELER"


DEFAULT_TRAVEL_MODE = TravelMode.DRIVE


class VersionStatus(str, Enum):
    """Trip version. Exactly one NEW trip per room."""

    NEW = "NEW"
    OLD = "OLD"


class TripStatus(str, Enum):
    """Trip lifecycle status."""

    READY = "READY"
    ACCEPTED = "ACCEPTED"


class GenerationStatus(str, Enum):
    """Pollable generation status for a room."""

    NOT_STARTED = "NOT_STARTED"
    WAITING = "WAITING"
    SUCCESS = "SUCCESS"


class LeaseState(str, Enum):
    """Sub-state stored in the generation lease."""

    WAITING = "WAITING"
    RUNNING = "RUNNING"
