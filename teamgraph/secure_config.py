"""
Secure Configuration Management

Provides centralized, validated configuration for the dependency graph tooling.
Replaces scattered os.getenv() calls with strict validation and fail-fast behavior.

Usage:
    from teamgraph.secure_config import get_config

    config = get_config()
    api_config = config.get_api_config()
    print(api_config.api_root)

Environment:
    DASHBOARD_API_BASE_URL       Metrics backend root (required, https unless localhost)
    DASHBOARD_API_VERSION        API version segment (default: v1)
    DASHBOARD_API_TIMEOUT        Request timeout in seconds (default: 30)
    GRAPH_LAYOUT_MODE            hierarchical | circular (default: hierarchical)
    GRAPH_ZERO_MAGNITUDE_POLICY  floor_at_one | drop (default: floor_at_one)

Raises:
    ConfigurationError: If configuration is missing or invalid
"""

import os
import re
from dataclasses import dataclass
from urllib.parse import urlparse

from dotenv import load_dotenv

from teamgraph.domain.dependency import LayoutMode, ZeroMagnitudePolicy

LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


@dataclass
class DashboardApiConfig:
    """
    Validated metrics backend configuration.
    """

    base_url: str
    api_version: str = "v1"
    timeout_seconds: float = 30.0

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self):
        """
        Validate backend configuration.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.base_url:
            raise ConfigurationError("DASHBOARD_API_BASE_URL is required")

        parsed = urlparse(self.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ConfigurationError(f"DASHBOARD_API_BASE_URL must be an absolute URL: {self.base_url}")

        # Plain HTTP is only tolerated against a local backend
        if parsed.scheme != "https" and parsed.hostname not in LOCAL_HOSTS:
            raise ConfigurationError(f"DASHBOARD_API_BASE_URL must use HTTPS: {self.base_url}")

        if not re.match(r"^v\d+$", self.api_version):
            raise ConfigurationError(f"DASHBOARD_API_VERSION must look like 'v1': {self.api_version}")

        if self.timeout_seconds <= 0:
            raise ConfigurationError(f"DASHBOARD_API_TIMEOUT must be positive: {self.timeout_seconds}")

    @property
    def api_root(self) -> str:
        """Versioned API root, e.g. https://metrics.example.com/api/v1"""
        return f"{self.base_url.rstrip('/')}/api/{self.api_version}"

    def endpoint_url(self, endpoint: str) -> str:
        """Build a full URL for an endpoint path (leading slash optional)."""
        clean_endpoint = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        return f"{self.api_root}{clean_endpoint}"


@dataclass
class GraphSettings:
    """
    Validated graph pipeline defaults.
    """

    layout_mode: LayoutMode = LayoutMode.HIERARCHICAL
    zero_magnitude_policy: ZeroMagnitudePolicy = ZeroMagnitudePolicy.FLOOR_AT_ONE

    @classmethod
    def from_values(cls, layout_mode: str | None, zero_magnitude_policy: str | None) -> "GraphSettings":
        """
        Parse settings from raw strings.

        Raises:
            ConfigurationError: If a value is not one of the known options
        """
        try:
            mode = LayoutMode((layout_mode or LayoutMode.HIERARCHICAL.value).lower())
        except ValueError:
            options = ", ".join(m.value for m in LayoutMode)
            raise ConfigurationError(f"GRAPH_LAYOUT_MODE must be one of {options}: {layout_mode}") from None

        try:
            policy = ZeroMagnitudePolicy((zero_magnitude_policy or ZeroMagnitudePolicy.FLOOR_AT_ONE.value).lower())
        except ValueError:
            options = ", ".join(p.value for p in ZeroMagnitudePolicy)
            raise ConfigurationError(
                f"GRAPH_ZERO_MAGNITUDE_POLICY must be one of {options}: {zero_magnitude_policy}"
            ) from None

        return cls(layout_mode=mode, zero_magnitude_policy=policy)


class SecureConfig:
    """
    Configuration manager.

    Loads .env once and builds validated configuration objects on demand.
    """

    def __init__(self):
        """Initialize configuration (loads .env file)."""
        load_dotenv()

    def get_api_config(self) -> DashboardApiConfig:
        """
        Get validated metrics backend configuration.

        Raises:
            ConfigurationError: If configuration is missing or invalid
        """
        timeout_raw = os.getenv("DASHBOARD_API_TIMEOUT", "30")
        try:
            timeout = float(timeout_raw)
        except ValueError:
            raise ConfigurationError(f"DASHBOARD_API_TIMEOUT must be a number: {timeout_raw}") from None

        return DashboardApiConfig(
            base_url=os.getenv("DASHBOARD_API_BASE_URL", ""),
            api_version=os.getenv("DASHBOARD_API_VERSION", "v1"),
            timeout_seconds=timeout,
        )

    def get_graph_settings(self) -> GraphSettings:
        """
        Get validated graph pipeline defaults.

        Raises:
            ConfigurationError: If a setting is invalid
        """
        return GraphSettings.from_values(
            os.getenv("GRAPH_LAYOUT_MODE"),
            os.getenv("GRAPH_ZERO_MAGNITUDE_POLICY"),
        )


_config_instance: SecureConfig | None = None


def get_config() -> SecureConfig:
    """
    Get the global configuration instance (singleton pattern).

    Returns:
        SecureConfig: The configuration manager
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = SecureConfig()
    return _config_instance


def reset_config() -> None:
    """Drop the cached configuration instance (used by tests)."""
    global _config_instance
    _config_instance = None


def validate_config_on_startup(required_services: list[str]) -> None:
    """
    Validate required configuration at application startup.

    Args:
        required_services: Services to validate ('api', 'graph')

    Raises:
        ConfigurationError: If any required configuration is missing or invalid
        ValueError: If a service name is unknown
    """
    config = get_config()

    for service in required_services:
        if service == "api":
            config.get_api_config()
        elif service == "graph":
            config.get_graph_settings()
        else:
            raise ValueError(f"Unknown service: {service}")
