"""
Root conftest.py - Global fixtures and configuration for all test layers.

Test Layers (Top-Down TDD):
    - api/        : API contract tests (in-process app, mocked service)
    - component/  : Component tests (mocked collaborators, mocked HTTP transport)
    - unit/       : Unit tests (pure functions, no I/O)
"""
import os
import sys
from typing import Any, Dict, List

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)


# =============================================================================
# Assertion Helpers
# =============================================================================

class AssertionHelpers:
    """Custom assertion helpers for tests"""

    @staticmethod
    def assert_has_fields(data: Dict[str, Any], fields: List[str]):
        """Assert dict has required fields"""
        missing = [f for f in fields if f not in data]
        assert not missing, f"Missing fields: {missing}"

    @staticmethod
    def assert_error_types(errors, expected: List[str]):
        """Assert analysis errors carry the expected types, in order"""
        actual = [getattr(e.error_type, "value", e.error_type) for e in errors]
        assert actual == expected, f"Expected error types {expected}, got {actual}"


@pytest.fixture
def assertions() -> AssertionHelpers:
    """Provide assertion helpers"""
    return AssertionHelpers()


# =============================================================================
# Markers
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line("markers", "api: API contract tests")
    config.addinivalue_line("markers", "component: Component tests")
    config.addinivalue_line("markers", "unit: Unit tests")


# =============================================================================
# Logging Configuration
# =============================================================================

@pytest.fixture(autouse=True)
def test_logger(request):
    """Log test start/end for debugging"""
    test_name = request.node.name
    print(f"\n{'='*60}")
    print(f"Starting: {test_name}")
    print(f"{'='*60}")

    yield

    print(f"\n{'='*60}")
    print(f"Finished: {test_name}")
    print(f"{'='*60}")
