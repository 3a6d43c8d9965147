"""
Model Invariants and Result Aggregation Unit Tests
"""
import asyncio

import pytest
from pydantic import ValidationError

from microservices.shipment_analysis_service.models import (
    AnalysisError,
    AnalysisErrorType,
    AnalysisRecord,
    DelayClassification,
    LookupResult,
    LookupStatus,
    WeatherData,
    WeatherFetchStatus,
    WeatherOutcome,
)
from microservices.shipment_analysis_service.result_aggregator import (
    UNKNOWN_KEY,
    ResultAggregator,
    UnitOutcome,
    build_error_index,
    enrich_records_with_errors,
)

pytestmark = [pytest.mark.unit]

STAMP = "2024-02-01T00:00:00+00:00"


def _record(shipment_id, container_number="", **kwargs):
    return AnalysisRecord(shipment_id=shipment_id, container_number=container_number, last_updated="", **kwargs)


def _error(key, error_type=AnalysisErrorType.TRACKING_FETCH_ERROR, message="boom"):
    return AnalysisError(container_number=key, error_type=error_type, message=message)


# =============================================================================
# LookupResult
# =============================================================================

class TestLookupResult:

    def test_found_carries_data(self):
        result = LookupResult.found({"id": 1})
        assert result.status == LookupStatus.FOUND
        assert result.is_found and not result.is_not_found and not result.is_failure

    def test_not_found_and_failure_carry_message_only(self):
        assert LookupResult.not_found("missing").is_not_found
        failure = LookupResult.failure("disk error")
        assert failure.is_failure
        assert failure.data is None
        assert failure.message == "disk error"

    def test_found_requires_data(self):
        with pytest.raises(ValidationError):
            LookupResult(status=LookupStatus.FOUND)

    def test_not_found_rejects_data(self):
        with pytest.raises(ValidationError):
            LookupResult(status=LookupStatus.NOT_FOUND, data={"id": 1})


# =============================================================================
# WeatherOutcome / DelayClassification
# =============================================================================

class TestWeatherOutcome:

    def test_success_holds_data(self):
        outcome = WeatherOutcome.success(WeatherData(temperature=1.0, wind_speed=2.0))
        assert outcome.status == WeatherFetchStatus.SUCCESS
        assert outcome.error is None

    def test_no_data_error_is_optional(self):
        assert WeatherOutcome.no_data().error is None

    @pytest.mark.parametrize("status", [WeatherFetchStatus.RETRY_EXHAUSTED, WeatherFetchStatus.FATAL_ERROR])
    def test_failures_require_message(self, status):
        with pytest.raises(ValidationError):
            WeatherOutcome(status=status)

    def test_non_success_rejects_data(self):
        with pytest.raises(ValidationError):
            WeatherOutcome(status=WeatherFetchStatus.NO_DATA_AVAILABLE, data=WeatherData())


class TestDelayClassification:

    def test_accepts_wire_alias(self):
        verdict = DelayClassification.model_validate(
            {"isWeatherRelated": True, "reasoning": "fog", "confidence": 0.9}
        )
        assert verdict.is_weather_related is True

    @pytest.mark.parametrize("confidence", [-0.1, 1.01])
    def test_confidence_bounds(self, confidence):
        with pytest.raises(ValidationError):
            DelayClassification(is_weather_related=True, reasoning="x", confidence=confidence)


# =============================================================================
# ResultAggregator
# =============================================================================

class TestResultAggregator:

    def test_preserves_submission_order(self):
        aggregator = ResultAggregator()
        aggregator.add(UnitOutcome(records=[_record("S1", "C1")], errors=[_error("C1")]))
        aggregator.add(UnitOutcome(records=[_record("S2", "C2"), _record("S2", "C3")]))

        result = aggregator.to_result()

        assert [r.container_number for r in result.records] == ["C1", "C2", "C3"]
        assert [e.container_number for e in result.errors] == ["C1"]

    def test_failed_branch_becomes_unknown_error(self):
        aggregator = ResultAggregator()
        settled = [UnitOutcome(records=[_record("S1", "C1")]), RuntimeError("kaboom")]

        aggregator.add_settled(settled, AnalysisErrorType.SHIPMENT_FETCH_ERROR, "Shipment processing")

        assert len(aggregator.records) == 1
        error = aggregator.errors[0]
        assert error.container_number == UNKNOWN_KEY
        assert error.error_type == AnalysisErrorType.SHIPMENT_FETCH_ERROR
        assert error.message == "Shipment processing failed: kaboom"

    def test_cancellation_is_not_swallowed(self):
        aggregator = ResultAggregator()

        with pytest.raises(asyncio.CancelledError):
            aggregator.add_settled(
                [asyncio.CancelledError()], AnalysisErrorType.SHIPMENT_FETCH_ERROR, "Shipment processing"
            )

    def test_to_outcome_is_a_copy(self):
        aggregator = ResultAggregator()
        aggregator.add(UnitOutcome(records=[_record("S1")]))

        outcome = aggregator.to_outcome()
        aggregator.add(UnitOutcome(records=[_record("S2")]))

        assert len(outcome.records) == 1


# =============================================================================
# Error enrichment
# =============================================================================

class TestErrorEnrichment:

    def test_index_joins_errors_per_key(self):
        index = build_error_index([
            _error("C1", AnalysisErrorType.DELAY_ANALYSIS_LOW_CONFIDENCE, "low"),
            _error("C2"),
            _error("C1", AnalysisErrorType.WEATHER_FETCH_ERROR, "timeout"),
        ])

        assert index["C1"] == "DELAY_ANALYSIS_LOW_CONFIDENCE: low; WEATHER_FETCH_ERROR: timeout"
        assert index["C2"] == "TRACKING_FETCH_ERROR: boom"

    def test_shipment_id_match_takes_precedence(self):
        records = [_record("S1", "C1")]
        errors = [
            _error("C1", message="container level"),
            _error("S1", AnalysisErrorType.SHIPMENT_FETCH_ERROR, "shipment level"),
        ]

        enriched = enrich_records_with_errors(records, errors, STAMP)

        assert enriched[0].error == "SHIPMENT_FETCH_ERROR: shipment level"

    def test_container_match_and_timestamp(self):
        records = [_record("S1", "C1"), _record("S1", "C2")]

        enriched = enrich_records_with_errors(records, [_error("C2")], STAMP)

        assert enriched[0].error is None
        assert enriched[1].error == "TRACKING_FETCH_ERROR: boom"
        assert all(r.last_updated == STAMP for r in enriched)

    def test_unknown_errors_attach_to_nothing(self):
        enriched = enrich_records_with_errors([_record("S1", "C1")], [_error(UNKNOWN_KEY)], STAMP)

        assert enriched[0].error is None

    def test_input_records_are_not_mutated(self):
        records = [_record("S1", "C1")]

        enrich_records_with_errors(records, [_error("C1")], STAMP)

        assert records[0].error is None
        assert records[0].last_updated == ""
