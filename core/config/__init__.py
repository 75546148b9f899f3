"""
Runtime Configuration Module

Provides configuration loading for stores, retries, polling and timeouts.
"""

from .runtime import (
    FetchConfig,
    PackageConfig,
    PollConfig,
    RuntimeConfig,
    StoreConfig,
    TimeoutConfig,
)

__all__ = [
    "FetchConfig",
    "PackageConfig",
    "PollConfig",
    "RuntimeConfig",
    "StoreConfig",
    "TimeoutConfig",
]
