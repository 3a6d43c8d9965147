#!/usr/bin/env python3
"""
Core Module

Shared infrastructure for the shipment analysis service.

COMPONENTS:
    - config/: Dataclass configuration loaded from environment (dotenv-aware)
    - logger.py: Service logger setup
    - retry.py: Bounded retry with exponential backoff and jitter

USAGE:
    from core.config import get_settings
    from core.retry import RetryPolicy, retry_with_backoff
"""

__version__ = "1.0.0"
