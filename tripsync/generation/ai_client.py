"""Client for the external AI itinerary service."""

import logging
from typing import Protocol

import httpx
import pydantic

from tripsync.config import Settings
from tripsync.errors import (
    MODEL_CONNECTION_FAIL,
    MODEL_ERROR,
    MODEL_REQUEST_ERROR,
    MODEL_TIMEOUT,
    TRIP_SAVE_FAIL,
    UpstreamError,
)
from tripsync.models.generation import ItineraryRequest, ItineraryResponse

logger = logging.getLogger(__name__)

GENERATE_PATH = "/api/v2/itinerary/generate"


class ItineraryServiceClient(Protocol):
    """Protocol for itinerary generation clients."""

    def generate(self, request: ItineraryRequest) -> ItineraryResponse:
        """Generate a day-by-day itinerary.

        Args:
            request: Room preferences and trip dates

        Returns:
            Parsed itinerary response

        Raises:
            UpstreamError: On any HTTP, network or decoding failure
        """
        ...


class HttpItineraryClient:
    """HTTP client for the AI itinerary service."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 600.0,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize client.

        Args:
            base_url: Service base URL
            timeout: Request timeout in seconds (generation is slow)
            client: Optional httpx client (for testing with mocks)
        """
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout)

    def generate(self, request: ItineraryRequest) -> ItineraryResponse:
        """POST the request and parse the response."""
        url = f"{self._base_url}{GENERATE_PATH}"
        try:
            response = self._client.post(url, json=request.model_dump(mode="json"))
            response.raise_for_status()
            return ItineraryResponse.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(
                f"Itinerary service returned {status_code}",
                extra={"structured": {"status_code": status_code, "body": e.response.text[:500]}},
            )
            code = MODEL_REQUEST_ERROR if status_code < 500 else MODEL_ERROR
            raise UpstreamError(f"Itinerary service returned {status_code}", code=code) from e
        except httpx.TimeoutException as e:
            raise UpstreamError("Itinerary service timed out", code=MODEL_TIMEOUT) from e
        except httpx.TransportError as e:
            raise UpstreamError(
                f"Itinerary service unreachable: {type(e).__name__}", code=MODEL_CONNECTION_FAIL
            ) from e
        except (ValueError, pydantic.ValidationError) as e:
            raise UpstreamError(
                "Itinerary service returned an unreadable body", code=TRIP_SAVE_FAIL
            ) from e

    def close(self) -> None:
        self._client.close()


def get_itinerary_client(settings: Settings) -> ItineraryServiceClient:
    """Build the itinerary client from settings."""
    return HttpItineraryClient(
        base_url=settings.ai_service_url, timeout=settings.ai_timeout_seconds
    )
