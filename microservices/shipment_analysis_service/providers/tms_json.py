"""
TMS JSON Shipment Source

Serves shipments from a TMS export: a JSON array of ``{"sgl": {...}}`` entries.
"""

import logging
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, Field, ValidationError

from ..models import Container, LookupResult, Shipment
from ..protocols import SourceDataError
from .base import JsonFileSource, format_validation_error

logger = logging.getLogger(__name__)


# TMS export shape

class TmsHeader(BaseModel):
    sglShipmentNo: str = Field(..., min_length=1)


class TmsParty(BaseModel):
    name: str = Field(..., min_length=1)


class TmsParties(BaseModel):
    customer: TmsParty
    shipper: TmsParty


class TmsContainer(BaseModel):
    containerNo: str = Field(..., min_length=1)
    containerType: str = ""


class TmsSgl(BaseModel):
    header: TmsHeader
    parties: TmsParties
    containers: List[TmsContainer]


class TmsShipmentEntry(BaseModel):
    sgl: TmsSgl

    def to_shipment(self) -> Shipment:
        return Shipment(
            shipment_id=self.sgl.header.sglShipmentNo,
            customer_name=self.sgl.parties.customer.name,
            shipper_name=self.sgl.parties.shipper.name,
            containers=[Container(container_number=c.containerNo) for c in self.sgl.containers],
        )


def _entry_id(entry: Any) -> str:
    try:
        return entry["sgl"]["header"]["sglShipmentNo"] or "UNKNOWN"
    except (KeyError, TypeError):
        return "UNKNOWN"


class TmsJsonShipmentSource(JsonFileSource[Shipment]):
    """Shipment lookups backed by a TMS JSON export"""

    source_name = "TMS"
    load_error_prefix = "Failed to load TMS data"

    async def get_shipment_by_id(self, shipment_id: str) -> LookupResult[Shipment]:
        return await self._lookup(shipment_id, f"Shipment {shipment_id} not found in TMS system")

    def _build_index(self, raw: Any) -> Tuple[Dict[str, Shipment], int]:
        if not isinstance(raw, list):
            raise SourceDataError("TMS", f"expected a JSON array, got {type(raw).__name__}")

        index: Dict[str, Shipment] = {}
        skipped = 0
        for entry in raw:
            try:
                shipment = TmsShipmentEntry.model_validate(entry).to_shipment()
            except ValidationError as e:
                skipped += 1
                logger.warning(
                    f"[TMS] Skipping invalid shipment record {_entry_id(entry)}: {format_validation_error(e)}"
                )
                continue
            index[shipment.shipment_id] = shipment
        return index, skipped


__all__ = ["TmsJsonShipmentSource", "TmsShipmentEntry"]
