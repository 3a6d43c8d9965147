"""
Shipment Analysis Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from core.config.analysis_config import ConfigurationError

# Import only models (no I/O dependencies)
from .models import DelayClassification, LookupResult, Shipment, Tracking, WeatherOutcome


# =============================================================================
# Custom Exceptions
# =============================================================================


class ShipmentAnalysisError(Exception):
    """Base exception for shipment analysis"""
    pass


class SourceDataError(ShipmentAnalysisError):
    """Raised when a data source's backing data has an unusable structure"""
    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source} data invalid: {message}")


class ClassifierResponseError(ShipmentAnalysisError):
    """Raised when the external classifier reply is not the expected JSON shape"""
    def __init__(self, message: str, raw_output: Optional[str] = None):
        self.raw_output = raw_output
        super().__init__(message)


class WeatherApiError(ShipmentAnalysisError):
    """Raised when the weather service answers with an error"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


# =============================================================================
# Shipment Source Protocol
# =============================================================================


@runtime_checkable
class ShipmentSourceProtocol(Protocol):
    """
    Interface for shipment lookups (shipment-management system).

    Implementations:
    - TmsJsonShipmentSource (production - TMS JSON export)
    - MockShipmentSource (testing)
    """

    async def get_shipment_by_id(self, shipment_id: str) -> LookupResult[Shipment]:
        """
        Look up a shipment.

        Args:
            shipment_id: Shipment identifier

        Returns:
            FOUND with the shipment, NOT_FOUND if unknown, FAILED if the
            source could not be read
        """
        ...


# =============================================================================
# Tracking Source Protocol
# =============================================================================


@runtime_checkable
class TrackingSourceProtocol(Protocol):
    """
    Interface for container tracking lookups.

    Implementations:
    - WindwardJsonTrackingSource (production - Windward JSON export)
    - MockTrackingSource (testing)
    """

    async def get_tracking_by_container(self, container_number: str) -> LookupResult[Tracking]:
        """
        Look up tracking for a container.

        Args:
            container_number: Container number

        Returns:
            FOUND with tracking, NOT_FOUND if untracked, FAILED on fetch error
        """
        ...


# =============================================================================
# Weather Source Protocol
# =============================================================================


@runtime_checkable
class WeatherSourceProtocol(Protocol):
    """
    Interface for historical weather lookups.

    Implementations must short-circuit future dates to NO_DATA_AVAILABLE and
    report wind speed in m/s.

    Implementations:
    - OpenMeteoWeatherSource (production)
    - MockWeatherSource (offline demo)
    """

    async def get_weather(self, latitude: float, longitude: float, timestamp: datetime) -> WeatherOutcome:
        """
        Fetch observed weather at a point in time.

        Args:
            latitude: Latitude in degrees
            longitude: Longitude in degrees
            timestamp: Observation time (UTC)

        Returns:
            Tagged weather outcome
        """
        ...


# =============================================================================
# Delay Classifier Protocol
# =============================================================================


@runtime_checkable
class DelayClassifierProtocol(Protocol):
    """
    Interface for delay reason classification. Calls are independent.

    Implementations:
    - KeywordDelayClassifier (heuristic)
    - LLMDelayClassifier (external model)
    - FallbackDelayClassifier (primary with transparent fallback)
    """

    async def classify(self, reason: str) -> DelayClassification:
        """Classify one free-text delay reason"""
        ...


__all__ = [
    "ShipmentAnalysisError",
    "ConfigurationError",
    "SourceDataError",
    "ClassifierResponseError",
    "WeatherApiError",
    "ShipmentSourceProtocol",
    "TrackingSourceProtocol",
    "WeatherSourceProtocol",
    "DelayClassifierProtocol",
]
