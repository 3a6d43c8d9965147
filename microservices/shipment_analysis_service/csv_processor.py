"""
CSV Processor

Reads shipment IDs from an input CSV and writes the enriched analysis report.
"""

import logging
from pathlib import Path
from typing import Dict, List, Sequence, Union

import pandas as pd

from .models import AnalysisRecord

logger = logging.getLogger(__name__)

SHIPMENT_ID_COLUMN = "shipmentId"

# report column -> AnalysisRecord field
CSV_COLUMNS: Dict[str, str] = {
    "sglShipmentNo": "shipment_id",
    "customerName": "customer_name",
    "shipperName": "shipper_name",
    "containerNumber": "container_number",
    "scac": "scac",
    "initialCarrierETA": "initial_carrier_eta",
    "actualArrivalAt": "actual_arrival_at",
    "delayReasons": "delay_reasons",
    "temperature": "temperature",
    "windSpeed": "wind_speed",
    "weatherFetchStatus": "weather_fetch_status",
    "lastUpdated": "last_updated",
    "error": "error",
}


class CsvProcessor:
    """CSV input/output for batch reports"""

    def read_shipment_ids(self, path: Union[str, Path]) -> List[str]:
        """
        Read the ``shipmentId`` column, skipping blank cells, in file order.

        Raises:
            OSError: File cannot be read
            ValueError: Not a CSV with a shipmentId header
        """
        df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
        if SHIPMENT_ID_COLUMN not in df.columns:
            raise ValueError(f"CSV {path} has no '{SHIPMENT_ID_COLUMN}' column")

        column = df[SHIPMENT_ID_COLUMN].fillna("").astype(str).str.strip()
        ids = [value for value in column.tolist() if value]
        logger.info(f"Read {len(ids)} shipment IDs from {path}")
        return ids

    def write_enriched_csv(self, path: Union[str, Path], records: Sequence[AnalysisRecord]) -> None:
        """Write one row per record with a header; absent values are blank cells"""
        rows = []
        for record in records:
            data = record.model_dump(mode="json")
            rows.append({column: data.get(field) for column, field in CSV_COLUMNS.items()})

        df = pd.DataFrame(rows, columns=list(CSV_COLUMNS))
        df.to_csv(path, index=False)
        logger.info(f"Wrote {len(rows)} records to {path}")


__all__ = ["CSV_COLUMNS", "CsvProcessor"]
