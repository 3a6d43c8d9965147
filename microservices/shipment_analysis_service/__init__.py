"""
Shipment Analysis Service Microservice

Weather-delay analysis: joins shipments with container tracking, classifies
delay reasons and enriches weather-delayed containers with port weather.
"""

from .analysis_service import ShipmentAnalysisService
from .models import (
    AnalysisError,
    AnalysisErrorType,
    AnalysisRecord,
    AnalysisResult,
    DelayClassification,
    LookupResult,
    Shipment,
    Tracking,
    WeatherFetchStatus,
    WeatherOutcome,
)

__version__ = "1.0.0"
__all__ = [
    "ShipmentAnalysisService",
    "AnalysisError",
    "AnalysisErrorType",
    "AnalysisRecord",
    "AnalysisResult",
    "DelayClassification",
    "LookupResult",
    "Shipment",
    "Tracking",
    "WeatherFetchStatus",
    "WeatherOutcome",
]
