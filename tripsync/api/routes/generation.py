"""Trip generation endpoints - trigger and poll."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from tripsync.api.auth import get_current_user_id
from tripsync.api.deps import Services, get_services
from tripsync.models.common import GenerationStatus

router = APIRouter(prefix="/rooms", tags=["generation"])


class GenerationStatusResponse(BaseModel):
    """Generation status for a room."""

    room_id: int
    status: GenerationStatus
    trip_id: int | None = None


@router.post(
    "/{room_id}/trip-generation",
    response_model=GenerationStatusResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def request_generation(
    room_id: int,
    user_id: Annotated[int, Depends(get_current_user_id)],
    services: Annotated[Services, Depends(get_services)],
) -> GenerationStatusResponse:
    """Start generating a trip for the room.

    Returns as soon as the room's lease is held; poll the GET endpoint for the
    outcome.
    """
    services.coordinator.request_generation(room_id, user_id)
    return GenerationStatusResponse(room_id=room_id, status=GenerationStatus.WAITING)


@router.get("/{room_id}/trip-generation", response_model=GenerationStatusResponse)
def poll_generation(
    room_id: int,
    user_id: Annotated[int, Depends(get_current_user_id)],
    services: Annotated[Services, Depends(get_services)],
) -> GenerationStatusResponse:
    """Poll a room's generation status."""
    poll = services.coordinator.poll_status(room_id, user_id)
    return GenerationStatusResponse(room_id=room_id, status=poll.status, trip_id=poll.trip_id)
