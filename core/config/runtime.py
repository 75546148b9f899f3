"""
Runtime Configuration

Central configuration for the content store, fetch retries, result polling
and the on-chain timeout race.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from core.schemas.versioning import MANIFEST_VERSION, PRIMARY_FILENAME

load_dotenv()


@dataclass
class StoreConfig:
    """Configuration for the IPFS gateway and pinning service."""
    gateway: str = "https://ipfs.io"
    pinning_service: str = "https://api.pinata.cloud"
    pinning_key: Optional[str] = None
    timeout: float = 30.0


@dataclass
class FetchConfig:
    """Retry policy for content fetches."""
    max_retries: int = 3
    backoff_ms: int = 2000


@dataclass
class PollConfig:
    """Ledger polling for evaluation results (60 x 5s, about five minutes)."""
    interval_seconds: float = 5.0
    max_attempts: int = 60


@dataclass
class TimeoutConfig:
    """On-chain timeout finalize timing; matches the contract's default window."""
    response_timeout_seconds: int = 300
    safety_margin_ms: int = 15_000

    @property
    def wait_seconds(self) -> float:
        return self.response_timeout_seconds + self.safety_margin_ms / 1000


@dataclass
class PackageConfig:
    """Defaults used when assembling packages."""
    manifest_version: str = MANIFEST_VERSION
    primary_filename: str = PRIMARY_FILENAME


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    store: StoreConfig = field(default_factory=StoreConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    poll: PollConfig = field(default_factory=PollConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    package: PackageConfig = field(default_factory=PackageConfig)
    proxy: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - JURYPACK_IPFS_GATEWAY: IPFS gateway base URL
        - IPFS_PINNING_SERVICE: pinning service base URL
        - IPFS_PINNING_KEY: pinning service bearer key
        - JURYPACK_FETCH_RETRIES: attempts per content fetch
        - JURYPACK_FETCH_BACKOFF_MS: fixed delay between fetch attempts
        - JURYPACK_POLL_INTERVAL: seconds between ledger polls
        - JURYPACK_POLL_MAX_ATTEMPTS: ledger poll budget
        - JURYPACK_RESPONSE_TIMEOUT: contract response window in seconds
        - JURYPACK_SAFETY_MARGIN_MS: extra wait before finalizing a timeout
        - JURYPACK_HTTP_PROXY: HTTP proxy URL
        """
        overrides: dict[str, Any] = {}

        if os.getenv("JURYPACK_IPFS_GATEWAY"):
            overrides.setdefault("store", {})["gateway"] = os.getenv("JURYPACK_IPFS_GATEWAY")
        if os.getenv("IPFS_PINNING_SERVICE"):
            overrides.setdefault("store", {})["pinning_service"] = os.getenv("IPFS_PINNING_SERVICE")
        if os.getenv("IPFS_PINNING_KEY"):
            overrides.setdefault("store", {})["pinning_key"] = os.getenv("IPFS_PINNING_KEY")

        if os.getenv("JURYPACK_FETCH_RETRIES"):
            overrides.setdefault("fetch", {})["max_retries"] = int(os.getenv("JURYPACK_FETCH_RETRIES"))
        if os.getenv("JURYPACK_FETCH_BACKOFF_MS"):
            overrides.setdefault("fetch", {})["backoff_ms"] = int(os.getenv("JURYPACK_FETCH_BACKOFF_MS"))

        if os.getenv("JURYPACK_POLL_INTERVAL"):
            overrides.setdefault("poll", {})["interval_seconds"] = float(os.getenv("JURYPACK_POLL_INTERVAL"))
        if os.getenv("JURYPACK_POLL_MAX_ATTEMPTS"):
            overrides.setdefault("poll", {})["max_attempts"] = int(os.getenv("JURYPACK_POLL_MAX_ATTEMPTS"))

        if os.getenv("JURYPACK_RESPONSE_TIMEOUT"):
            overrides.setdefault("timeout", {})["response_timeout_seconds"] = int(
                os.getenv("JURYPACK_RESPONSE_TIMEOUT")
            )
        if os.getenv("JURYPACK_SAFETY_MARGIN_MS"):
            overrides.setdefault("timeout", {})["safety_margin_ms"] = int(
                os.getenv("JURYPACK_SAFETY_MARGIN_MS")
            )

        if os.getenv("JURYPACK_HTTP_PROXY"):
            overrides["proxy"] = os.getenv("JURYPACK_HTTP_PROXY")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        store_data = data.get("store", {}) or {}
        fetch_data = data.get("fetch", {}) or {}
        poll_data = data.get("poll", {}) or {}
        timeout_data = data.get("timeout", {}) or {}
        package_data = data.get("package", {}) or {}

        return cls(
            store=StoreConfig(**store_data),
            fetch=FetchConfig(**fetch_data),
            poll=PollConfig(**poll_data),
            timeout=TimeoutConfig(**timeout_data),
            package=PackageConfig(**package_data),
            proxy=data.get("proxy"),
            extra=data.get("extra", {}) or {},
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        Allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for section in ("store", "fetch", "poll", "timeout"):
            for key, value in overrides.get(section, {}).items():
                setattr(getattr(new_config, section), key, value)
        if "proxy" in overrides:
            new_config.proxy = overrides["proxy"]
        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary (the pinning key is masked)."""
        return {
            "store": {
                "gateway": self.store.gateway,
                "pinning_service": self.store.pinning_service,
                "pinning_key": "***" if self.store.pinning_key else None,
                "timeout": self.store.timeout,
            },
            "fetch": {
                "max_retries": self.fetch.max_retries,
                "backoff_ms": self.fetch.backoff_ms,
            },
            "poll": {
                "interval_seconds": self.poll.interval_seconds,
                "max_attempts": self.poll.max_attempts,
            },
            "timeout": {
                "response_timeout_seconds": self.timeout.response_timeout_seconds,
                "safety_margin_ms": self.timeout.safety_margin_ms,
            },
            "package": {
                "manifest_version": self.package.manifest_version,
                "primary_filename": self.package.primary_filename,
            },
            "proxy": self.proxy,
            "extra": self.extra,
        }
