"""
Windward JSON Tracking Source

Serves container tracking from a Windward export: a JSON array of
``{"trackedShipments": {"count": n, "data": [{"shipment": {...}}]}}`` pages.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError

from ..models import GeoLocation, LookupResult, Tracking
from ..protocols import SourceDataError
from .base import JsonFileSource, format_validation_error

logger = logging.getLogger(__name__)


# Windward export shape

class WindwardDelayReason(BaseModel):
    delayReasonDescription: str


class WindwardDelay(BaseModel):
    reasons: List[WindwardDelayReason] = Field(default_factory=list)


class WindwardStatus(BaseModel):
    actualArrivalAt: Optional[datetime] = None
    delay: Optional[WindwardDelay] = None


class WindwardPort(BaseModel):
    name: str
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class WindwardShipment(BaseModel):
    containerNumber: str = Field(..., min_length=1)
    scac: str = Field(..., min_length=2, max_length=4)
    initialCarrierETA: datetime
    status: WindwardStatus
    destinationPort: Optional[WindwardPort] = None

    def to_tracking(self) -> Tracking:
        port = None
        if self.destinationPort is not None:
            port = GeoLocation(
                latitude=self.destinationPort.lat,
                longitude=self.destinationPort.lon,
                name=self.destinationPort.name,
            )
        reasons = self.status.delay.reasons if self.status.delay else []
        return Tracking(
            container_number=self.containerNumber,
            scac=self.scac,
            estimated_arrival=self.initialCarrierETA,
            actual_arrival=self.status.actualArrivalAt,
            delay_reasons=[r.delayReasonDescription for r in reasons],
            destination_port=port,
        )


def _iter_shipments(raw: Any):
    if not isinstance(raw, list):
        raise SourceDataError("Windward", f"expected a JSON array, got {type(raw).__name__}")
    for page in raw:
        try:
            entries = page["trackedShipments"]["data"]
        except (KeyError, TypeError) as e:
            raise SourceDataError("Windward", f"missing trackedShipments.data ({e})") from e
        if not isinstance(entries, list):
            raise SourceDataError("Windward", "trackedShipments.data must be an array")
        for entry in entries:
            yield entry.get("shipment") if isinstance(entry, dict) else entry


class WindwardJsonTrackingSource(JsonFileSource[Tracking]):
    """Tracking lookups backed by a Windward JSON export"""

    source_name = "Windward"
    load_error_prefix = "Failed to load Windward tracking data"

    async def get_tracking_by_container(self, container_number: str) -> LookupResult[Tracking]:
        return await self._lookup(
            container_number,
            f"Tracking for container {container_number} not found in Windward system",
        )

    def _build_index(self, raw: Any) -> Tuple[Dict[str, Tracking], int]:
        index: Dict[str, Tracking] = {}
        skipped = 0
        for shipment in _iter_shipments(raw):
            try:
                tracking = WindwardShipment.model_validate(shipment).to_tracking()
            except ValidationError as e:
                skipped += 1
                container = shipment.get("containerNumber") if isinstance(shipment, dict) else None
                logger.warning(
                    f"[Windward] Skipping invalid tracking record {container or 'UNKNOWN'}: "
                    f"{format_validation_error(e)}"
                )
                continue
            index[tracking.container_number] = tracking
        return index, skipped


__all__ = ["WindwardJsonTrackingSource", "WindwardShipment"]
