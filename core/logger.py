#!/usr/bin/env python3
"""Service logger setup

Configures a named logger from LoggingConfig, together with the package
loggers that module-level ``logging.getLogger(__name__)`` calls resolve to.
Safe to call repeatedly: handlers are attached once per logger.
"""
import logging
import sys
from typing import Optional

from core.config.logging_config import LoggingConfig


def _configure(logger: logging.Logger, config: LoggingConfig) -> None:
    logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

    if getattr(logger, "_service_configured", False):
        return

    formatter = logging.Formatter(config.log_format)

    if config.enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger._service_configured = True


def setup_service_logger(service_name: str, config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Create or fetch the logger for a service.

    Also configures ``microservices.<service_name>`` and ``core`` so that
    module loggers inside the service and shared infrastructure are emitted
    with the same handlers.

    Args:
        service_name: Logger name (e.g. "shipment_analysis_service")
        config: Logging configuration, loaded from environment if omitted

    Returns:
        Configured logger
    """
    config = config or LoggingConfig.from_env()
    for name in (f"microservices.{service_name}", "core"):
        _configure(logging.getLogger(name), config)

    logger = logging.getLogger(service_name)
    _configure(logger, config)
    return logger


__all__ = ["setup_service_logger"]
