"""Typed error taxonomy shared by services and the HTTP layer."""


class TripSyncError(Exception):
    """Base error carrying a machine-readable code."""

    code = "TRIPSYNC_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ValidationError(TripSyncError):
    """Request is well-formed but semantically invalid."""

    code = "INVALID_REQUEST"


class AuthorizationError(TripSyncError):
    """Caller is not a participant of the room that owns the resource."""

    code = "USER_NOT_IN_ROOM"


class NotFoundError(TripSyncError):
    """Trip, stop or room could not be resolved."""

    code = "NOT_FOUND"


class ConflictError(TripSyncError):
    """Generation is already in progress for the room."""

    code = "TRIP_CREATING_IN_PROGRESS"


class UpstreamError(TripSyncError):
    """AI itinerary service call failed."""

    code = "MODEL_ERROR"


# Upstream reason codes
MODEL_REQUEST_ERROR = "MODEL_REQUEST_ERROR"
MODEL_ERROR = "MODEL_ERROR"
MODEL_TIMEOUT = "MODEL_TIMEOUT"
MODEL_CONNECTION_FAIL = "MODEL_CONNECTION_FAIL"
TRIP_SAVE_FAIL = "TRIP_SAVE_FAIL"
LEASE_EXPIRED = "LEASE_EXPIRED"
