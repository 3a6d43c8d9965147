"""
Shipment Analysis Service - Business Logic

Joins shipment and tracking data per container, classifies delay reasons
behind a confidence gate and enriches weather-delayed containers with the
observed weather at the destination port.

Every failure below the batch level is captured as an AnalysisError; analyze()
only raises for programming errors outside the per-shipment tasks.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from core.config.analysis_config import ConfigurationError, MAX_BATCH_SIZE, MIN_BATCH_SIZE
from core.retry import RetryExhaustedError

from .models import (
    AnalysisError, AnalysisErrorType, AnalysisRecord, AnalysisResult,
    DelayClassification, Shipment, Tracking, WeatherFetchStatus, WeatherOutcome,
)
from .protocols import (
    DelayClassifierProtocol, ShipmentSourceProtocol,
    TrackingSourceProtocol, WeatherSourceProtocol,
)
from .result_aggregator import ResultAggregator, UnitOutcome

logger = logging.getLogger(__name__)

CONFIDENCE_THRESHOLD = 0.8
MAX_CONFIDENCE_RETRIES = 1
DELAY_REASON_SEPARATOR = "; "


def chunk_list(items: Sequence[str], size: int) -> List[List[str]]:
    """Split into consecutive chunks of at most ``size`` items"""
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ShipmentAnalysisService:
    """
    Analysis orchestrator

    Shipment IDs are processed in chunks of ``batch_size``: chunks run one after
    another, the shipments of a chunk run concurrently, and so do the containers
    of each shipment.
    """

    def __init__(
        self,
        shipment_source: ShipmentSourceProtocol,
        tracking_source: TrackingSourceProtocol,
        weather_source: WeatherSourceProtocol,
        delay_classifier: DelayClassifierProtocol,
        batch_size: int = 5,
    ):
        if not MIN_BATCH_SIZE <= batch_size <= MAX_BATCH_SIZE:
            raise ConfigurationError(
                f"batch_size must be between {MIN_BATCH_SIZE} and {MAX_BATCH_SIZE}, got {batch_size}"
            )
        self.shipment_source = shipment_source
        self.tracking_source = tracking_source
        self.weather_source = weather_source
        self.delay_classifier = delay_classifier
        self.batch_size = batch_size

    async def close(self):
        """Release collaborators that hold connections"""
        for collaborator in (
            self.shipment_source, self.tracking_source,
            self.weather_source, self.delay_classifier,
        ):
            closer = getattr(collaborator, "close", None)
            if closer:
                await closer()

    # =============================================================================
    # Entry Point
    # =============================================================================

    async def analyze(self, shipment_ids: Sequence[str]) -> AnalysisResult:
        """
        Analyze shipments.

        Args:
            shipment_ids: Shipment identifiers, in output order

        Returns:
            Records (one per container, or one placeholder per unresolved
            shipment) and the parallel error list
        """
        aggregator = ResultAggregator()
        chunks = chunk_list(shipment_ids, self.batch_size)
        logger.info(f"Analyzing {len(shipment_ids)} shipments in {len(chunks)} batches of <= {self.batch_size}")

        for index, chunk in enumerate(chunks, start=1):
            settled = await asyncio.gather(
                *(self._process_shipment(shipment_id) for shipment_id in chunk),
                return_exceptions=True,
            )
            aggregator.add_settled(settled, AnalysisErrorType.SHIPMENT_FETCH_ERROR, "Shipment processing")
            logger.debug(f"Batch {index}/{len(chunks)} done ({len(chunk)} shipments)")

        result = aggregator.to_result()
        logger.info(f"Analysis complete: {len(result.records)} records, {len(result.errors)} errors")
        return result

    # =============================================================================
    # Shipment Level
    # =============================================================================

    async def _process_shipment(self, shipment_id: str) -> UnitOutcome:
        shipment_result = await self.shipment_source.get_shipment_by_id(shipment_id)

        if not shipment_result.is_found:
            error_type = (
                AnalysisErrorType.SHIPMENT_FETCH_ERROR
                if shipment_result.is_failure
                else AnalysisErrorType.SHIPMENT_NOT_FOUND
            )
            logger.warning(f"Shipment {shipment_id} unresolved ({error_type.value}): {shipment_result.message}")
            return UnitOutcome(
                records=[self._build_placeholder_record(shipment_id)],
                errors=[AnalysisError(
                    container_number=shipment_id,
                    error_type=error_type,
                    message=shipment_result.message,
                )],
            )

        shipment = shipment_result.data
        settled = await asyncio.gather(
            *(self._process_container(shipment, c.container_number) for c in shipment.containers),
            return_exceptions=True,
        )
        aggregator = ResultAggregator()
        aggregator.add_settled(settled, AnalysisErrorType.TRACKING_FETCH_ERROR, "Container processing")
        return aggregator.to_outcome()

    # =============================================================================
    # Container Level
    # =============================================================================

    async def _process_container(self, shipment: Shipment, container_number: str) -> UnitOutcome:
        errors: List[AnalysisError] = []

        tracking_result = await self.tracking_source.get_tracking_by_container(container_number)
        tracking: Optional[Tracking] = None
        if tracking_result.is_failure:
            errors.append(AnalysisError(
                container_number=container_number,
                error_type=AnalysisErrorType.TRACKING_FETCH_ERROR,
                message=tracking_result.message,
            ))
        elif tracking_result.is_found:
            tracking = tracking_result.data

        fields = self._base_record_fields(shipment, container_number, tracking)

        if tracking is not None and await self._has_weather_related_delay(tracking, container_number, errors):
            outcome = await self._fetch_weather_safely(tracking, container_number, errors)
            if outcome.status == WeatherFetchStatus.SUCCESS and outcome.data is not None:
                fields["temperature"] = outcome.data.temperature
                fields["wind_speed"] = outcome.data.wind_speed
            fields["weather_fetch_status"] = outcome.status

        return UnitOutcome(records=[AnalysisRecord(**fields)], errors=errors)

    # =============================================================================
    # Delay Classification
    # =============================================================================

    async def _has_weather_related_delay(
        self, tracking: Tracking, container_number: str, errors: List[AnalysisError]
    ) -> bool:
        """True on the first reason with an accepted weather-related verdict"""
        for reason in tracking.delay_reasons:
            classification = await self._classify_with_confidence_gate(reason, container_number, errors)
            if classification is None:
                # discarded: counts as neither weather-related nor not
                continue
            if classification.is_weather_related:
                return True
        return False

    async def _classify_with_confidence_gate(
        self, reason: str, container_number: str, errors: List[AnalysisError]
    ) -> Optional[DelayClassification]:
        """
        Classify once, retry once when below threshold, discard if still below.

        Returns:
            The accepted classification, or None if discarded
        """
        classification = await self.delay_classifier.classify(reason)
        retries = 0
        while classification.confidence < CONFIDENCE_THRESHOLD and retries < MAX_CONFIDENCE_RETRIES:
            retries += 1
            logger.warning(
                f"[Low Confidence] Container {container_number}: confidence {classification.confidence} "
                f"< {CONFIDENCE_THRESHOLD}, retrying"
            )
            classification = await self.delay_classifier.classify(reason)

        if classification.confidence >= CONFIDENCE_THRESHOLD:
            if retries:
                logger.info(
                    f"[Retry Success] Container {container_number}: confidence improved to {classification.confidence}"
                )
            return classification

        message = (
            f"Delay analysis confidence too low ({classification.confidence}) "
            f"even after retry for delay: \"{reason}\""
        )
        logger.error(f"[Analysis Failed] Container {container_number}: {message}")
        errors.append(AnalysisError(
            container_number=container_number,
            error_type=AnalysisErrorType.DELAY_ANALYSIS_LOW_CONFIDENCE,
            message=message,
        ))
        return None

    # =============================================================================
    # Weather
    # =============================================================================

    async def _fetch_weather_safely(
        self, tracking: Tracking, container_number: str, errors: List[AnalysisError]
    ) -> WeatherOutcome:
        if tracking.destination_port is None or tracking.actual_arrival is None:
            return WeatherOutcome.no_data("Missing port location or arrival date")

        try:
            outcome = await self.weather_source.get_weather(
                tracking.destination_port.latitude,
                tracking.destination_port.longitude,
                tracking.actual_arrival,
            )
        except RetryExhaustedError as e:
            outcome = WeatherOutcome.retry_exhausted(
                f"Failed to fetch weather data after {e.attempts} attempts: {e.last_error}"
            )
        except Exception as e:
            outcome = WeatherOutcome.fatal(str(e) or type(e).__name__)

        if outcome.status in (WeatherFetchStatus.RETRY_EXHAUSTED, WeatherFetchStatus.FATAL_ERROR):
            logger.error(f"Weather fetch failed for container {container_number}: {outcome.error}")
            errors.append(AnalysisError(
                container_number=container_number,
                error_type=AnalysisErrorType.WEATHER_FETCH_ERROR,
                message=outcome.error,
            ))
        return outcome

    # =============================================================================
    # Record Builders
    # =============================================================================

    def _build_placeholder_record(self, shipment_id: str) -> AnalysisRecord:
        return AnalysisRecord(
            shipment_id=shipment_id,
            customer_name="",
            shipper_name="",
            container_number="",
            last_updated=_utc_now_iso(),
        )

    def _base_record_fields(
        self, shipment: Shipment, container_number: str, tracking: Optional[Tracking]
    ) -> Dict[str, Any]:
        fields: Dict[str, Any] = {
            "shipment_id": shipment.shipment_id,
            "customer_name": shipment.customer_name,
            "shipper_name": shipment.shipper_name,
            "container_number": container_number,
            "last_updated": _utc_now_iso(),
        }
        if tracking is not None:
            fields["scac"] = tracking.scac
            fields["initial_carrier_eta"] = tracking.estimated_arrival.isoformat()
            if tracking.actual_arrival is not None:
                fields["actual_arrival_at"] = tracking.actual_arrival.isoformat()
            fields["delay_reasons"] = DELAY_REASON_SEPARATOR.join(tracking.delay_reasons)
        return fields


__all__ = [
    "CONFIDENCE_THRESHOLD",
    "MAX_CONFIDENCE_RETRIES",
    "ShipmentAnalysisService",
    "chunk_list",
]
