"""
Shipment Analysis Service - Main Application

Weather-delay analysis over shipment and container tracking data.
"""

from fastapi import FastAPI, HTTPException
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import sys
import os

# Add parent directory to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from core.config import get_settings
from core.logger import setup_service_logger
from .factory import create_analysis_service
from .models import AnalyzeRequest, AnalyzeResponse
from .result_aggregator import enrich_records_with_errors

SERVICE_NAME = "shipment_analysis_service"
SERVICE_VERSION = "1.0.0"

# Setup logger
app_logger = setup_service_logger(SERVICE_NAME)
logger = app_logger


# Service instance
class AnalysisMicroservice:
    def __init__(self):
        self.service = None

    async def initialize(self):
        config = get_settings()
        self.service = create_analysis_service(config)
        logger.info(
            f"Shipment analysis service initialized "
            f"(classifier={config.classifier}, weather={config.weather_provider}, batch_size={config.batch_size})"
        )

    async def shutdown(self):
        if self.service:
            await self.service.close()
        logger.info("Shipment analysis service shutting down")


# Global instance
microservice = AnalysisMicroservice()


# Lifespan management
@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # Startup
    await microservice.initialize()

    yield

    # Shutdown
    await microservice.shutdown()


# Create FastAPI application
app = FastAPI(
    title="Shipment Analysis Service",
    description="Weather-related shipment delay analysis",
    version=SERVICE_VERSION,
    lifespan=lifespan
)


# =============================================================================
# Health Check
# =============================================================================

@app.get("/health")
async def health_check():
    """健康检查"""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION
    }


# =============================================================================
# Analysis Endpoints
# =============================================================================

@app.post("/api/v1/analyze", response_model=AnalyzeResponse, response_model_exclude_none=True)
async def analyze_shipments(request: AnalyzeRequest):
    """
    Analyze shipments for weather-related delays

    - **shipment_ids**: Non-empty list of shipment identifiers
    """
    if microservice.service is None:
        raise HTTPException(status_code=503, detail="Service not initialized")

    try:
        result = await microservice.service.analyze(request.shipment_ids)
        timestamp = datetime.now(timezone.utc).isoformat()
        records = enrich_records_with_errors(result.records, result.errors, timestamp)
        return AnalyzeResponse(
            success=True,
            records=records,
            errors=result.errors,
            timestamp=timestamp,
        )
    except Exception as e:
        logger.error(f"Error analyzing shipments: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Internal server error")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=get_settings().api_port)
