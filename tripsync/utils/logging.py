"""Structured logging for generation jobs."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class StructuredGenerationLogger:
    """Structured logger for generation lifecycle events."""

    def log_transition(self, room_id: int, state: str, **fields: Any) -> None:
        """Log a lease state transition."""
        log_data: dict[str, Any] = {"room_id": room_id, "state": state, **fields}
        logger.info(f"Generation {state}: room {room_id}", extra={"structured": log_data})

    def log_outcome(
        self,
        room_id: int,
        outcome: str,
        duration_s: float,
        trip_id: int | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log the end of a generation job with structured data."""
        log_data: dict[str, Any] = {
            "room_id": room_id,
            "outcome": outcome,
            "duration_s": round(duration_s, 3),
        }
        if trip_id is not None:
            log_data["trip_id"] = trip_id
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Generation finished: room {room_id} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
