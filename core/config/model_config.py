#!/usr/bin/env python3
"""Model configuration for the delay classifier

Centralizes the LLM settings used by the external delay classifier.
"""
import os
from dataclasses import dataclass
from typing import Optional

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
class ModelConfig:
    """LLM configuration for delay classification"""

    # ===========================================
    # Provider Connection
    # ===========================================
    api_key: str = ""
    base_url: Optional[str] = None

    # ===========================================
    # Model parameters
    # ===========================================
    model: str = "gpt-3.5-turbo"
    max_tokens: int = 150
    temperature: float = 0.0

    @classmethod
    def from_env(cls) -> 'ModelConfig':
        """Load model configuration from environment variables"""
        return cls(
            api_key=os.getenv("OPENAI_API_KEY", ""),
            base_url=os.getenv("OPENAI_BASE_URL") or None,
            model=os.getenv("OPENAI_MODEL", "gpt-3.5-turbo"),
            max_tokens=_int(os.getenv("OPENAI_MAX_TOKENS", "150"), 150),
            temperature=_float(os.getenv("LLM_TEMPERATURE", "0.0"), 0.0),
        )
