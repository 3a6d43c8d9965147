"""
Component Test Layer Configuration (Layer 3)

Structure:
    tests/component/
    └── tdd/shipment_analysis_service/   Orchestrator, sources, classifier, CSV, CLI

Collaborators are in-memory mocks (tdd/shipment_analysis_service/mocks.py);
the weather HTTP boundary uses httpx.MockTransport.

Usage:
    pytest tests/component -v
"""
import os
import sys

import pytest

# Set testing environment BEFORE any imports
os.environ["ENV"] = "testing"
os.environ["ENVIRONMENT"] = "testing"

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from tests.component.tdd.shipment_analysis_service.mocks import (
    MockDelayClassifier,
    MockShipmentSource,
    MockTrackingSource,
    MockWeatherSource,
)
from tests.contracts.shipment_analysis import ShipmentAnalysisTestDataFactory


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "component: marks tests as component tests"
    )


# =============================================================================
# Collaborator Mocks
# =============================================================================

@pytest.fixture
def mock_shipment_source() -> MockShipmentSource:
    return MockShipmentSource()


@pytest.fixture
def mock_tracking_source() -> MockTrackingSource:
    return MockTrackingSource()


@pytest.fixture
def mock_weather_source() -> MockWeatherSource:
    return MockWeatherSource()


@pytest.fixture
def mock_classifier() -> MockDelayClassifier:
    return MockDelayClassifier()


@pytest.fixture
def factory():
    return ShipmentAnalysisTestDataFactory


@pytest.fixture
def no_sleep():
    """Awaitable sleep that records delays instead of waiting"""
    delays = []

    async def _sleep(seconds: float):
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep
