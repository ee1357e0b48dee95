"""Schedule endpoints - day view, single edits, preview and batch update."""

from datetime import date, time
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from tripsync.api.auth import get_current_user_id
from tripsync.api.deps import Services, get_services
from tripsync.models.modification import AddStop, ModificationBatch
from tripsync.models.schedule import (
    AccommodationCost,
    DaySchedule,
    DeletedStop,
    StopCost,
    StopView,
)

router = APIRouter(prefix="/trips", tags=["schedules"])

UserId = Annotated[int, Depends(get_current_user_id)]
Deps = Annotated[Services, Depends(get_services)]


class ReorderRequest(BaseModel):
    """Request body for reordering a stop."""

    new_visit_order: int = Field(..., ge=1)


class StayDurationRequest(BaseModel):
    """Request body for changing a stop's dwell time."""

    stay_minutes: int = Field(..., gt=0)


class VisitTimeRequest(BaseModel):
    """Request body for moving a stop's arrival."""

    new_arrival_time: time


class AccommodationRequest(BaseModel):
    """Request body for relocating a lodging stop."""

    place_name: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class VisitStatusRequest(BaseModel):
    """Request body for marking a stop visited."""

    is_visit: bool


class PromotedTripsResponse(BaseModel):
    """Response for the past-trip promotion job."""

    promoted: int


@router.get("/{trip_id}/schedules", response_model=DaySchedule)
def get_day_schedule(
    trip_id: int, user_id: UserId, services: Deps, day: Annotated[int, Query(ge=1)] = 1
) -> DaySchedule:
    """Ordered stops of one day."""
    return services.schedules.get_day_schedule(trip_id, day, user_id)


@router.post("/{trip_id}/schedules", response_model=StopView, status_code=status.HTTP_201_CREATED)
def add_stop(trip_id: int, request: AddStop, user_id: UserId, services: Deps) -> StopView:
    """Append a stop to a day with immediate travel-time lookup."""
    return services.schedules.add_stop(trip_id, request, user_id)


@router.get("/{trip_id}/schedules/cost", response_model=list[StopCost])
def list_stop_costs(trip_id: int, user_id: UserId, services: Deps) -> list[StopCost]:
    """Estimated costs of all non-lodging stops."""
    return services.schedules.list_stop_costs(trip_id, user_id)


@router.post("/{trip_id}/schedules/preview", response_model=DaySchedule)
def preview_modifications(
    trip_id: int, request: ModificationBatch, user_id: UserId, services: Deps
) -> DaySchedule:
    """Recalculated day for a batch of edits, without saving anything."""
    return services.schedules.preview_modifications(
        trip_id, request.day_number, request.modifications, user_id
    )


@router.post("/{trip_id}/schedules/batch-update", response_model=DaySchedule)
def batch_update(
    trip_id: int, request: ModificationBatch, user_id: UserId, services: Deps
) -> DaySchedule:
    """Apply and save a batch of edits."""
    return services.schedules.batch_apply(
        trip_id, request.day_number, request.modifications, user_id
    )


@router.delete("/{trip_id}/schedules/{stop_id}", response_model=DeletedStop)
def delete_stop(trip_id: int, stop_id: int, user_id: UserId, services: Deps) -> DeletedStop:
    """Delete a stop."""
    return services.schedules.delete_stop(trip_id, stop_id, user_id)


@router.get("/{trip_id}/schedules/{stop_id}/cost", response_model=StopCost)
def get_stop_cost(trip_id: int, stop_id: int, user_id: UserId, services: Deps) -> StopCost:
    """Estimated cost of one stop."""
    return services.schedules.get_stop_cost(trip_id, stop_id, user_id)


@router.patch("/{trip_id}/schedules/{stop_id}/reorder", response_model=DaySchedule)
def reorder_stop(
    trip_id: int, stop_id: int, request: ReorderRequest, user_id: UserId, services: Deps
) -> DaySchedule:
    """Move a stop within its day."""
    return services.schedules.reorder_stop(trip_id, stop_id, request.new_visit_order, user_id)


@router.patch("/{trip_id}/schedules/{stop_id}/stay-duration", response_model=StopView)
def update_stay_duration(
    trip_id: int, stop_id: int, request: StayDurationRequest, user_id: UserId, services: Deps
) -> StopView:
    """Change a stop's dwell time."""
    return services.schedules.update_stay_duration(
        trip_id, stop_id, request.stay_minutes, user_id
    )


@router.patch("/{trip_id}/schedules/{stop_id}/visit-time", response_model=StopView)
def update_visit_time(
    trip_id: int, stop_id: int, request: VisitTimeRequest, user_id: UserId, services: Deps
) -> StopView:
    """Move a stop's arrival time."""
    return services.schedules.update_visit_time(
        trip_id, stop_id, request.new_arrival_time, user_id
    )


@router.patch("/{trip_id}/schedules/{stop_id}/accommodation", response_model=StopView)
def update_accommodation(
    trip_id: int, stop_id: int, request: AccommodationRequest, user_id: UserId, services: Deps
) -> StopView:
    """Relocate a lodging stop."""
    return services.schedules.update_accommodation(
        trip_id, stop_id, request.place_name, request.latitude, request.longitude, user_id
    )


@router.patch("/{trip_id}/schedules/{stop_id}/visit-status", response_model=StopView)
def update_visit_status(
    trip_id: int, stop_id: int, request: VisitStatusRequest, user_id: UserId, services: Deps
) -> StopView:
    """Mark a stop visited or not."""
    return services.schedules.update_visit_status(trip_id, stop_id, request.is_visit, user_id)


@router.get("/{trip_id}/accommodation-cost", response_model=AccommodationCost)
def get_accommodation_cost(trip_id: int, user_id: UserId, services: Deps) -> AccommodationCost:
    """Lodging cost summary."""
    return services.schedules.get_accommodation_cost(trip_id, user_id)


@router.post("/status/update-past", response_model=PromotedTripsResponse)
def promote_past_trips(services: Deps) -> PromotedTripsResponse:
    """Mark trips whose room has ended as ACCEPTED."""
    return PromotedTripsResponse(promoted=services.trip_status.promote_past_trips(date.today()))
