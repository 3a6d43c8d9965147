"""
Shipment Analysis Service Models

Domain models, lookup results, weather outcomes and analysis output records.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

T = TypeVar("T")


def _ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive timestamps from upstream systems are UTC"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# =============================================================================
# Lookup Result (tri-state)
# =============================================================================

class LookupStatus(str, Enum):
    """Outcome of a source lookup"""
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class LookupResult(BaseModel, Generic[T]):
    """
    Found-with-data / found-without-data / fetch-error.

    NOT_FOUND is a normal answer, not an error; FAILED means the source could
    not answer at all.
    """
    model_config = ConfigDict(frozen=True)

    status: LookupStatus
    data: Optional[T] = None
    message: str = ""

    @model_validator(mode="after")
    def _check_payload(self) -> "LookupResult":
        if self.status == LookupStatus.FOUND and self.data is None:
            raise ValueError("FOUND lookup result requires data")
        if self.status != LookupStatus.FOUND and self.data is not None:
            raise ValueError(f"{self.status.value} lookup result must not carry data")
        return self

    @classmethod
    def found(cls, data: T, message: str = "") -> "LookupResult[T]":
        return cls(status=LookupStatus.FOUND, data=data, message=message)

    @classmethod
    def not_found(cls, message: str) -> "LookupResult[T]":
        return cls(status=LookupStatus.NOT_FOUND, message=message)

    @classmethod
    def failure(cls, message: str) -> "LookupResult[T]":
        return cls(status=LookupStatus.FAILED, message=message)

    @property
    def is_found(self) -> bool:
        return self.status == LookupStatus.FOUND

    @property
    def is_not_found(self) -> bool:
        return self.status == LookupStatus.NOT_FOUND

    @property
    def is_failure(self) -> bool:
        return self.status == LookupStatus.FAILED


# =============================================================================
# Domain Models
# =============================================================================

class Container(BaseModel):
    """Container belonging to a shipment"""
    model_config = ConfigDict(frozen=True)

    container_number: str = Field(..., min_length=1, description="Join key against tracking data")


class Shipment(BaseModel):
    """Shipment as known to the shipment-management system"""
    model_config = ConfigDict(frozen=True)

    shipment_id: str = Field(..., min_length=1)
    customer_name: str
    shipper_name: str
    containers: List[Container] = Field(default_factory=list)


class GeoLocation(BaseModel):
    """Geographic point"""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    name: Optional[str] = None


class Tracking(BaseModel):
    """Container tracking snapshot"""
    model_config = ConfigDict(frozen=True)

    container_number: str
    scac: str = Field(..., description="Standard Carrier Alpha Code")
    estimated_arrival: datetime
    actual_arrival: Optional[datetime] = None
    delay_reasons: List[str] = Field(default_factory=list, description="Ordered as reported")
    destination_port: Optional[GeoLocation] = None

    @field_validator("estimated_arrival", "actual_arrival")
    @classmethod
    def _utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _ensure_utc(v)


class DelayClassification(BaseModel):
    """Weather-relatedness verdict for one delay reason"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    is_weather_related: bool = Field(..., alias="isWeatherRelated")
    reasoning: str
    confidence: float = Field(..., ge=0, le=1)


# =============================================================================
# Weather
# =============================================================================

class WeatherFetchStatus(str, Enum):
    """Weather enrichment status"""
    SUCCESS = "SUCCESS"
    NO_DATA_AVAILABLE = "NO_DATA_AVAILABLE"
    RETRY_EXHAUSTED = "RETRY_EXHAUSTED"
    FATAL_ERROR = "FATAL_ERROR"


class WeatherData(BaseModel):
    """Measurements at the destination port; each may be missing"""
    model_config = ConfigDict(frozen=True)

    temperature: Optional[float] = Field(None, description="Temperature in Celsius")
    wind_speed: Optional[float] = Field(None, description="Wind speed in m/s")
    wind_direction: Optional[float] = Field(None, description="Wind direction in degrees")


class WeatherOutcome(BaseModel):
    """Tagged result of a weather lookup"""
    model_config = ConfigDict(frozen=True)

    status: WeatherFetchStatus
    data: Optional[WeatherData] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _check_variant(self) -> "WeatherOutcome":
        if self.status != WeatherFetchStatus.SUCCESS and self.data is not None:
            raise ValueError(f"{self.status.value} outcome must not carry weather data")
        if self.status in (WeatherFetchStatus.RETRY_EXHAUSTED, WeatherFetchStatus.FATAL_ERROR) and not self.error:
            raise ValueError(f"{self.status.value} outcome requires an error message")
        return self

    @classmethod
    def success(cls, data: WeatherData) -> "WeatherOutcome":
        return cls(status=WeatherFetchStatus.SUCCESS, data=data)

    @classmethod
    def no_data(cls, error: Optional[str] = None) -> "WeatherOutcome":
        return cls(status=WeatherFetchStatus.NO_DATA_AVAILABLE, error=error)

    @classmethod
    def retry_exhausted(cls, error: str) -> "WeatherOutcome":
        return cls(status=WeatherFetchStatus.RETRY_EXHAUSTED, error=error)

    @classmethod
    def fatal(cls, error: str) -> "WeatherOutcome":
        return cls(status=WeatherFetchStatus.FATAL_ERROR, error=error)


# =============================================================================
# Analysis Output
# =============================================================================

class AnalysisErrorType(str, Enum):
    """Non-fatal error taxonomy"""
    SHIPMENT_NOT_FOUND = "SHIPMENT_NOT_FOUND"
    SHIPMENT_FETCH_ERROR = "SHIPMENT_FETCH_ERROR"
    TRACKING_FETCH_ERROR = "TRACKING_FETCH_ERROR"
    DELAY_ANALYSIS_LOW_CONFIDENCE = "DELAY_ANALYSIS_LOW_CONFIDENCE"
    WEATHER_FETCH_ERROR = "WEATHER_FETCH_ERROR"


class AnalysisError(BaseModel):
    """
    One captured failure.

    container_number holds the shipment ID for shipment-level errors and
    "unknown" for unexpected task failures.
    """
    model_config = ConfigDict(frozen=True)

    container_number: str
    error_type: AnalysisErrorType
    message: str


class AnalysisRecord(BaseModel):
    """One output row per (shipment, container), or a placeholder for an unresolved shipment"""
    model_config = ConfigDict(frozen=True)

    shipment_id: str
    customer_name: str = ""
    shipper_name: str = ""
    container_number: str = ""
    scac: Optional[str] = None
    initial_carrier_eta: Optional[str] = Field(None, description="ISO 8601")
    actual_arrival_at: Optional[str] = Field(None, description="ISO 8601")
    delay_reasons: Optional[str] = Field(None, description="Joined with '; '")
    temperature: Optional[float] = None
    wind_speed: Optional[float] = None
    weather_fetch_status: Optional[WeatherFetchStatus] = None
    last_updated: str = Field(..., description="ISO 8601 timestamp of analysis")
    error: Optional[str] = None


class AnalysisResult(BaseModel):
    """Records plus the parallel error list"""
    records: List[AnalysisRecord] = Field(default_factory=list)
    errors: List[AnalysisError] = Field(default_factory=list)


# Request Models

class AnalyzeRequest(BaseModel):
    """Analysis request"""
    shipment_ids: List[str] = Field(..., min_length=1, description="Shipment identifiers to analyze")


# Response Models

class AnalyzeResponse(BaseModel):
    """Analysis response with error-enriched records"""
    success: bool = True
    records: List[AnalysisRecord]
    errors: List[AnalysisError]
    timestamp: str


__all__ = [
    "LookupStatus",
    "LookupResult",
    "Container",
    "Shipment",
    "GeoLocation",
    "Tracking",
    "DelayClassification",
    "WeatherFetchStatus",
    "WeatherData",
    "WeatherOutcome",
    "AnalysisErrorType",
    "AnalysisError",
    "AnalysisRecord",
    "AnalysisResult",
    "AnalyzeRequest",
    "AnalyzeResponse",
]
