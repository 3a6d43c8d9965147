"""
Shipment Analysis Service Factory

Factory functions for creating service instances with real dependencies.
This is the ONLY place that imports I/O-dependent modules.

Usage:
    from .factory import create_analysis_service
    service = create_analysis_service(config)
"""
from typing import Optional

from core.config import AnalysisConfig, ConfigurationError, get_settings

from .analysis_service import ShipmentAnalysisService
from .delay_classifiers import FallbackDelayClassifier, KeywordDelayClassifier, LLMDelayClassifier
from .protocols import (
    DelayClassifierProtocol, ShipmentSourceProtocol,
    TrackingSourceProtocol, WeatherSourceProtocol,
)


def create_delay_classifier(config: AnalysisConfig) -> DelayClassifierProtocol:
    """
    Create the configured delay classifier.

    "keyword" selects the heuristic alone; "llm" wraps the external model with
    the heuristic as fallback.

    Raises:
        ConfigurationError: LLM classifier selected without OPENAI_API_KEY
    """
    if config.classifier == "keyword":
        return KeywordDelayClassifier()

    if not config.model.api_key:
        raise ConfigurationError("OPENAI_API_KEY environment variable is required")

    from openai import AsyncOpenAI

    client = AsyncOpenAI(api_key=config.model.api_key, base_url=config.model.base_url)
    return FallbackDelayClassifier(
        primary=LLMDelayClassifier(client, config.model, config.retry),
        fallback=KeywordDelayClassifier(),
    )


def create_weather_source(config: AnalysisConfig) -> WeatherSourceProtocol:
    """Create the configured weather source"""
    from .providers import MockWeatherSource, OpenMeteoWeatherSource

    if config.weather_provider == "mock":
        return MockWeatherSource()
    return OpenMeteoWeatherSource(retry_policy=config.retry)


def create_analysis_service(config: Optional[AnalysisConfig] = None) -> ShipmentAnalysisService:
    """
    Create ShipmentAnalysisService with real dependencies.

    Use this in production, NOT in tests.

    Args:
        config: Analysis configuration, loaded from environment if omitted

    Returns:
        Configured ShipmentAnalysisService instance

    Raises:
        ConfigurationError: Invalid or incomplete configuration
    """
    from .providers import TmsJsonShipmentSource, WindwardJsonTrackingSource

    config = (config or get_settings()).validate()
    delay_classifier = create_delay_classifier(config)

    return ShipmentAnalysisService(
        shipment_source=TmsJsonShipmentSource(config.tms_data_path),
        tracking_source=WindwardJsonTrackingSource(config.windward_data_path),
        weather_source=create_weather_source(config),
        delay_classifier=delay_classifier,
        batch_size=config.batch_size,
    )


def create_analysis_service_for_testing(
    mock_shipment_source: ShipmentSourceProtocol,
    mock_tracking_source: TrackingSourceProtocol,
    mock_weather_source: WeatherSourceProtocol,
    mock_delay_classifier: Optional[DelayClassifierProtocol] = None,
    batch_size: int = 5,
) -> ShipmentAnalysisService:
    """
    Create ShipmentAnalysisService with mock dependencies for testing.

    Args:
        mock_shipment_source: Mock shipment source
        mock_tracking_source: Mock tracking source
        mock_weather_source: Mock weather source
        mock_delay_classifier: Mock classifier (keyword heuristic if omitted)
        batch_size: Shipments per batch

    Returns:
        ShipmentAnalysisService configured for testing
    """
    return ShipmentAnalysisService(
        shipment_source=mock_shipment_source,
        tracking_source=mock_tracking_source,
        weather_source=mock_weather_source,
        delay_classifier=mock_delay_classifier or KeywordDelayClassifier(),
        batch_size=batch_size,
    )


class ShipmentAnalysisServiceFactory:
    """
    Factory class for creating ShipmentAnalysisService instances.

    Usage:
        # Production
        service = ShipmentAnalysisServiceFactory.create_service()

        # Testing
        service = ShipmentAnalysisServiceFactory.create_for_testing(
            mock_shipment_source=MockShipmentSource(),
            mock_tracking_source=MockTrackingSource(),
            mock_weather_source=MockWeatherSource(),
        )
    """

    @staticmethod
    def create_service(config: Optional[AnalysisConfig] = None) -> ShipmentAnalysisService:
        return create_analysis_service(config=config)

    @staticmethod
    def create_for_testing(
        mock_shipment_source: ShipmentSourceProtocol,
        mock_tracking_source: TrackingSourceProtocol,
        mock_weather_source: WeatherSourceProtocol,
        mock_delay_classifier: Optional[DelayClassifierProtocol] = None,
        batch_size: int = 5,
    ) -> ShipmentAnalysisService:
        return create_analysis_service_for_testing(
            mock_shipment_source=mock_shipment_source,
            mock_tracking_source=mock_tracking_source,
            mock_weather_source=mock_weather_source,
            mock_delay_classifier=mock_delay_classifier,
            batch_size=batch_size,
        )


__all__ = [
    "create_analysis_service",
    "create_analysis_service_for_testing",
    "create_delay_classifier",
    "create_weather_source",
    "ShipmentAnalysisServiceFactory",
]
