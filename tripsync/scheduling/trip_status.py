"""Promotion of finished trips from READY to ACCEPTED."""

import logging
from datetime import date

from tripsync.db.repositories import RoomDirectory, TripRepository
from tripsync.models.common import TripStatus, VersionStatus

logger = logging.getLogger(__name__)


class TripStatusService:
    """Marks current trips whose room has ended as ACCEPTED."""

    def __init__(self, trips: TripRepository, rooms: RoomDirectory) -> None:
        self._trips = trips
        self._rooms = rooms

    def promote_past_trips(self, today: date) -> int:
        """Flip every NEW/READY trip whose room ended before ``today``.

        Returns:
            Number of trips promoted
        """
        promoted = 0
        for trip in self._trips.list_trips(
            version_status=VersionStatus.NEW, trip_status=TripStatus.READY
        ):
            room = self._rooms.get_room(trip.room_id)
            if room is None or room.end_date >= today:
                continue
            self._trips.set_trip_status(trip.trip_id, TripStatus.ACCEPTED)  # type: ignore[arg-type]
            promoted += 1

        logger.info(f"Promoted {promoted} past trip(s) to ACCEPTED")
        return promoted
