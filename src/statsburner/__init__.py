"""Statsburner: aggregated feed statistics from the FeedBurner Awareness API."""

__version__ = "3.0"

from .core.client import StatsClient  # noqa: E402
from .core.config import ClientConfig  # noqa: E402
from .core.container import DIContainer  # noqa: E402

__all__ = [
    "StatsClient",
    "ClientConfig",
    "DIContainer",
    "domain",
    "dates",
    "reports",
    "cache",
    "transport",
    "core",
    "utils",
]
