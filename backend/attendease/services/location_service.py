"""Geolocation provider boundary.

The device position is acquired by the client; the service only sees the
provider's answer, which is either a position or one of two distinct
failures: the user denied permission, or no fix arrived in time.
"""
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Dict, Optional

from attendease.services.geo_service import Coordinates
from attendease.utils.validators import Validator

logger = logging.getLogger(__name__)

class LocationError(Exception):
    """Position could not be obtained."""

class LocationDeniedError(LocationError):
    """The user refused location permission."""

class LocationUnavailableError(LocationError):
    """No position within the timeout, or the device reported an error."""

@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)

class LocationProvider(ABC):
    """One-shot "get current position"."""

    high_accuracy = True

    @abstractmethod
    def get_current_position(self, timeout: float) -> Position:
        """Return a Position or raise LocationDeniedError / LocationUnavailableError."""

class ReportedLocationProvider(LocationProvider):
    """Answer taken from the check-in request payload.

    Accepts ``{"location": {"latitude", "longitude", "accuracy"?}}`` or
    ``{"location_error": "denied" | "timeout" | "unavailable"}``.
    """

    DENIED = 'denied'

    def __init__(self, location: Optional[Dict] = None, location_error: Optional[str] = None):
        self.location = location
        self.location_error = location_error

    @classmethod
    def from_payload(cls, data: Dict) -> 'ReportedLocationProvider':
        return cls(location=data.get('location'), location_error=data.get('location_error'))

    def get_current_position(self, timeout: float) -> Position:
        if self.location_error:
            if str(self.location_error).lower() == self.DENIED:
                raise LocationDeniedError("Location permission denied")
            raise LocationUnavailableError(f"Device reported: {self.location_error}")

        if not isinstance(self.location, dict):
            raise LocationUnavailableError("No location was provided")

        accuracy = self.location.get('accuracy')
        return Position(
            latitude=Validator.validate_latitude(self.location.get('latitude')),
            longitude=Validator.validate_longitude(self.location.get('longitude')),
            accuracy=float(accuracy) if isinstance(accuracy, (int, float)) else None
        )

_executor = ThreadPoolExecutor(max_workers=8, thread_name_prefix='geolocation')

def acquire_position(provider: Optional[LocationProvider], timeout: float) -> Position:
    """Ask the provider for a position, giving up after ``timeout`` seconds.

    Anything other than an explicit denial surfaces as LocationUnavailableError.
    """
    if provider is None:
        raise LocationUnavailableError("No location provider")

    future = _executor.submit(provider.get_current_position, timeout)
    try:
        return future.result(timeout=timeout)
    except FutureTimeout:
        future.cancel()
        logger.info("Geolocation timed out after %ss", timeout)
        raise LocationUnavailableError(f"Location not acquired within {timeout}s")
    except LocationError:
        raise
    except Exception as exc:
        logger.info("Geolocation failed: %s", exc)
        raise LocationUnavailableError(str(exc)) from exc
