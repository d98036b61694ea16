"""
Core Infrastructure - Logging and Configuration

Usage:
    from teamgraph.core import get_config, get_logger

    logger = get_logger(__name__)
    api_config = get_config().get_api_config()
"""

from teamgraph.core.logging_config import get_logger, log_with_context, setup_logging
from teamgraph.secure_config import (
    ConfigurationError,
    DashboardApiConfig,
    GraphSettings,
    SecureConfig,
    get_config,
    reset_config,
)

__all__ = [
    # Logging
    "get_logger",
    "log_with_context",
    "setup_logging",
    # Configuration
    "get_config",
    "reset_config",
    "ConfigurationError",
    "SecureConfig",
    "DashboardApiConfig",
    "GraphSettings",
]
