"""
Unit Test Layer Configuration (Layer 4)

Structure:
    tests/unit/
    └── tdd/shipment_analysis_service/
        ├── test_retry.py                     Backoff schedule, predicates
        ├── test_models_and_aggregation.py    Model invariants, result merging
        ├── test_delay_classification.py      Keyword heuristic, reply parsing
        ├── test_config_and_batching.py       Environment config, chunking
        └── test_weather_parsing.py           Archive payload conversion

Usage:
    pytest tests/unit -v                 # All unit tests
    pytest tests/unit -m unit -v         # By marker
"""
import os
import sys

import pytest

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))


def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
