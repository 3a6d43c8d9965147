"""
API Test Layer Configuration

Layer 1: API Contract Tests
- Drives the FastAPI app in-process through httpx.ASGITransport
- The analysis service behind the endpoints is mocked
- Validates status codes, response schemas and error formats

Usage:
    pytest tests/api -v                    # Run all API tests
    pytest tests/api -v -k "analyze"       # Run analyze endpoint tests
"""

import os
import sys
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio

# Add project root
sys.path.insert(
    0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
)

from microservices.shipment_analysis_service.main import app


# =============================================================================
# HTTP Client Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client bound to the app (lifespan is not run)"""
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# =============================================================================
# Assertion Helpers
# =============================================================================


class APIAssertions:
    """API-specific assertion helpers"""

    @staticmethod
    def assert_success(response: httpx.Response, expected_status: int = 200):
        """Assert response is successful"""
        assert response.status_code == expected_status, (
            f"Expected {expected_status}, got {response.status_code}: {response.text}"
        )

    @staticmethod
    def assert_error_detail(response: httpx.Response, expected_status: int):
        """Assert an HTTPException-style error body"""
        assert response.status_code == expected_status, (
            f"Expected {expected_status}, got {response.status_code}: {response.text}"
        )
        assert "detail" in response.json()


@pytest.fixture
def api_assert() -> APIAssertions:
    """Provide API assertion helpers"""
    return APIAssertions()


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line("markers", "api: marks tests as API contract tests")
