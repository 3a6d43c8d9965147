#!/usr/bin/env python3
"""Configuration for the shipment analysis service

Configuration hierarchy:
- analysis_config: Data sources, batching, retry schedule, collaborator selection
- model_config: LLM settings for the delay classifier
- logging_config: Logging configuration
"""
import os
from typing import Optional

from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .model_config import ModelConfig
from .analysis_config import AnalysisConfig, ConfigurationError

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": ".env",
    "dev": ".env",
    "testing": ".env.test",
    "test": ".env.test",
    "staging": ".env.staging",
    "production": ".env.production",
}
env_file = env_files.get(env, ".env")
load_dotenv(env_file, override=False)

# Loaded on first use so that a bad value surfaces at startup, not at import
settings: Optional[AnalysisConfig] = None

def get_settings() -> AnalysisConfig:
    """Get global settings instance"""
    global settings
    if settings is None:
        settings = AnalysisConfig.from_env()
    return settings

def reload_settings() -> AnalysisConfig:
    """Reload settings from environment"""
    global settings
    settings = AnalysisConfig.from_env()
    return settings

__all__ = [
    # Main config
    'AnalysisConfig',
    'ConfigurationError',
    'get_settings',
    'reload_settings',
    'settings',
    # Sub-configs
    'LoggingConfig',
    'ModelConfig',
]
