"""
Result Aggregator

Collects per-unit outcomes (including failed concurrent branches) into the
final record and error lists, and attaches error summaries to records.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Union

from .models import AnalysisError, AnalysisErrorType, AnalysisRecord, AnalysisResult

logger = logging.getLogger(__name__)

UNKNOWN_KEY = "unknown"
ERROR_SEPARATOR = "; "


@dataclass
class UnitOutcome:
    """Records and errors produced by one shipment or one container"""
    records: List[AnalysisRecord] = field(default_factory=list)
    errors: List[AnalysisError] = field(default_factory=list)


class ResultAggregator:
    """
    Accumulates outcomes in submission order.

    No deduplication, sorting or record/error cross-checking happens here.
    """

    def __init__(self):
        self.records: List[AnalysisRecord] = []
        self.errors: List[AnalysisError] = []

    def add(self, outcome: UnitOutcome) -> None:
        self.records.extend(outcome.records)
        self.errors.extend(outcome.errors)

    def add_settled(
        self,
        settled: Sequence[Union[UnitOutcome, BaseException]],
        failure_type: AnalysisErrorType,
        failure_label: str,
    ) -> None:
        """
        Merge the results of ``asyncio.gather(..., return_exceptions=True)``.

        A failed branch becomes one synthetic error keyed "unknown".
        Cancellation and other non-Exception signals are re-raised.
        """
        for outcome in settled:
            if isinstance(outcome, Exception):
                logger.error(f"{failure_label} failed: {outcome!r}")
                self.errors.append(AnalysisError(
                    container_number=UNKNOWN_KEY,
                    error_type=failure_type,
                    message=f"{failure_label} failed: {outcome}",
                ))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                self.add(outcome)

    def to_outcome(self) -> UnitOutcome:
        return UnitOutcome(records=list(self.records), errors=list(self.errors))

    def to_result(self) -> AnalysisResult:
        return AnalysisResult(records=list(self.records), errors=list(self.errors))


def build_error_index(errors: Iterable[AnalysisError]) -> Dict[str, str]:
    """Key (shipment ID or container number) -> joined "TYPE: message" summaries"""
    index: Dict[str, str] = {}
    for error in errors:
        summary = f"{error.error_type.value}: {error.message}"
        existing = index.get(error.container_number)
        index[error.container_number] = f"{existing}{ERROR_SEPARATOR}{summary}" if existing else summary
    return index


def enrich_records_with_errors(
    records: Sequence[AnalysisRecord],
    errors: Sequence[AnalysisError],
    timestamp: str,
) -> List[AnalysisRecord]:
    """
    Stamp every record with ``timestamp`` and attach the errors matching its
    shipment ID (checked first) or container number. Records with no match
    keep ``error`` unset.
    """
    index = build_error_index(errors)
    enriched = []
    for record in records:
        error = index.get(record.shipment_id) or index.get(record.container_number)
        enriched.append(record.model_copy(update={"last_updated": timestamp, "error": error}))
    return enriched


__all__ = [
    "UNKNOWN_KEY",
    "UnitOutcome",
    "ResultAggregator",
    "build_error_index",
    "enrich_records_with_errors",
]
