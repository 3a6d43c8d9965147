#!/usr/bin/env python3
"""Shipment analysis configuration

Data source locations, batching, retry schedule and collaborator selection
for the shipment analysis service.
"""
import os
from dataclasses import dataclass, field

from core.retry import RetryPolicy
from .model_config import ModelConfig

MIN_BATCH_SIZE = 1
MAX_BATCH_SIZE = 50

CLASSIFIER_CHOICES = ("llm", "keyword")
WEATHER_PROVIDER_CHOICES = ("open_meteo", "mock")


class ConfigurationError(ValueError):
    """Raised when configuration is missing or invalid at startup"""
    pass


def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass
class AnalysisConfig:
    """Shipment analysis settings"""

    # ===========================================
    # Data sources
    # ===========================================
    tms_data_path: str = "./context/tms-data.json"
    windward_data_path: str = "./context/windward-data.json"

    # ===========================================
    # Orchestration
    # ===========================================
    batch_size: int = 5
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    # ===========================================
    # Collaborators
    # ===========================================
    classifier: str = "llm"
    weather_provider: str = "open_meteo"
    model: ModelConfig = field(default_factory=ModelConfig)

    # ===========================================
    # HTTP API
    # ===========================================
    api_port: int = 3001

    def validate(self) -> 'AnalysisConfig':
        """Check value ranges; raises ConfigurationError"""
        if not MIN_BATCH_SIZE <= self.batch_size <= MAX_BATCH_SIZE:
            raise ConfigurationError(
                f"BATCH_SIZE must be between {MIN_BATCH_SIZE} and {MAX_BATCH_SIZE}, got {self.batch_size}"
            )
        if self.classifier not in CLASSIFIER_CHOICES:
            raise ConfigurationError(
                f"DELAY_CLASSIFIER must be one of {', '.join(CLASSIFIER_CHOICES)}, got {self.classifier!r}"
            )
        if self.weather_provider not in WEATHER_PROVIDER_CHOICES:
            raise ConfigurationError(
                f"WEATHER_PROVIDER must be one of {', '.join(WEATHER_PROVIDER_CHOICES)}, got {self.weather_provider!r}"
            )
        return self

    @classmethod
    def from_env(cls) -> 'AnalysisConfig':
        """Load analysis configuration from environment variables"""
        try:
            retry = RetryPolicy(
                max_retries=_int(os.getenv("RETRY_MAX_ATTEMPTS", "3"), 3),
                base_delay=_int(os.getenv("RETRY_BASE_DELAY_MS", "1000"), 1000),
                max_delay=_int(os.getenv("RETRY_MAX_DELAY_MS", "10000"), 10000),
                jitter_factor=_float(os.getenv("RETRY_JITTER_FACTOR", "0.1"), 0.1),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid retry configuration: {e}") from e

        config = cls(
            tms_data_path=os.getenv("TMS_DATA_PATH", "./context/tms-data.json"),
            windward_data_path=os.getenv("WINDWARD_DATA_PATH", "./context/windward-data.json"),
            batch_size=_int(os.getenv("BATCH_SIZE", "5"), 5),
            retry=retry,
            classifier=os.getenv("DELAY_CLASSIFIER", "llm").lower(),
            weather_provider=os.getenv("WEATHER_PROVIDER", "open_meteo").lower(),
            model=ModelConfig.from_env(),
            api_port=_int(os.getenv("API_PORT", "3001"), 3001),
        )
        return config.validate()
