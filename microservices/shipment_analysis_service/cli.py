"""
Shipment Analysis Command Line

Usage:
    python -m microservices.shipment_analysis_service.cli analyze SGL001 SGL002
    python -m microservices.shipment_analysis_service.cli report --input in.csv --output out.csv
"""

import argparse
import asyncio
import sys
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from core.config import ConfigurationError, get_settings
from core.logger import setup_service_logger

from .csv_processor import CsvProcessor
from .factory import create_analysis_service
from .models import AnalyzeResponse
from .result_aggregator import enrich_records_with_errors

logger = setup_service_logger("shipment_analysis_service")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shipment-analysis",
        description="Analyze shipments for weather-related delays",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze shipment IDs and print JSON")
    analyze.add_argument("shipment_ids", nargs="+", help="Shipment identifiers")

    report = subparsers.add_parser("report", help="Analyze IDs from a CSV and write an enriched CSV")
    report.add_argument("--input", required=True, help="CSV with a shipmentId column")
    report.add_argument("--output", required=True, help="Path of the enriched CSV")
    return parser


async def run_analysis(shipment_ids: Sequence[str]) -> AnalyzeResponse:
    """Analyze with production collaborators and enrich the records"""
    service = create_analysis_service(get_settings())
    try:
        result = await service.analyze(shipment_ids)
    finally:
        await service.close()

    timestamp = datetime.now(timezone.utc).isoformat()
    return AnalyzeResponse(
        success=True,
        records=enrich_records_with_errors(result.records, result.errors, timestamp),
        errors=result.errors,
        timestamp=timestamp,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    processor = CsvProcessor()

    if args.command == "report":
        try:
            shipment_ids = processor.read_shipment_ids(args.input)
        except (OSError, ValueError) as e:
            logger.error(f"Cannot read input: {e}")
            return 1
    else:
        shipment_ids = args.shipment_ids

    try:
        response = asyncio.run(run_analysis(shipment_ids))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    if args.command == "report":
        try:
            processor.write_enriched_csv(args.output, response.records)
        except OSError as e:
            logger.error(f"Cannot write report: {e}")
            return 1
        logger.info(f"Report written to {args.output}")

    print(response.model_dump_json(exclude_none=True, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
