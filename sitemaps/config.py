"""Configuration management for sitemaps."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sitemaps.errors import ConfigError
from sitemaps.store import Store, StoreType, create_store

logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "~/.sitemaps/config.json"
CONFIG_ENV_VAR = "SITEMAPS_CONFIG"
DEFAULT_DATA_PATH = "~/.sitemaps/data.db"
DEFAULT_HOME_URL = "http://localhost:8000"

# Upper bound of URLs in a single sitemap page. The sitemaps protocol allows
# 50,000; a smaller page keeps each listing query cheap.
DEFAULT_MAX_URLS = 2000

# Seconds between a lastmod cache miss and its recompute job.
DEFAULT_LASTMOD_DELAY = 500.0

DEFAULT_PROVIDERS = ["posts", "taxonomies", "users"]


@dataclass
class Config:
    """Application configuration."""

    home_url: str = DEFAULT_HOME_URL
    pretty_urls: bool = True
    store_type: StoreType = StoreType.SQLITE
    store_path: str = DEFAULT_DATA_PATH
    max_urls: int = DEFAULT_MAX_URLS
    max_urls_by_provider: dict[str, int] = field(default_factory=dict)
    providers: list[str] = field(default_factory=lambda: list(DEFAULT_PROVIDERS))
    lastmod_delay_seconds: float = DEFAULT_LASTMOD_DELAY
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.max_urls < 1:
            raise ConfigError(f"max_urls must be at least 1, got {self.max_urls}")
        for name, limit in self.max_urls_by_provider.items():
            if limit < 1:
                raise ConfigError(f"max_urls for '{name}' must be at least 1, got {limit}")
        self.home_url = self.home_url.rstrip("/")

    @classmethod
    def load(cls, path: str = DEFAULT_CONFIG_PATH) -> "Config":
        """Load config from a JSON file, or return defaults if not found."""
        config_path = Path(path).expanduser()

        if not config_path.exists():
            return cls()

        try:
            data = json.loads(config_path.read_text())
            return cls(
                home_url=data.get("home_url", DEFAULT_HOME_URL),
                pretty_urls=data.get("pretty_urls", True),
                store_type=StoreType.parse(data.get("store_type", "sqlite")),
                store_path=data.get("store_path", DEFAULT_DATA_PATH),
                max_urls=int(data.get("max_urls", DEFAULT_MAX_URLS)),
                max_urls_by_provider={
                    k: int(v) for k, v in data.get("max_urls_by_provider", {}).items()
                },
                providers=list(data.get("providers", DEFAULT_PROVIDERS)),
                lastmod_delay_seconds=float(
                    data.get("lastmod_delay_seconds", DEFAULT_LASTMOD_DELAY)
                ),
                extra=data.get("extra", {}),
            )
        except (
            json.JSONDecodeError, AttributeError, KeyError, ValueError, TypeError, ConfigError,
        ) as e:
            # Wrong-shaped values (a list where a mapping belongs) raise AttributeError
            logger.warning(f"Ignoring invalid config at {config_path}: {e}")
            return cls()

    def save(self, path: str = DEFAULT_CONFIG_PATH) -> None:
        """Save config to a JSON file."""
        config_path = Path(path).expanduser()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "home_url": self.home_url,
            "pretty_urls": self.pretty_urls,
            "store_type": self.store_type.value,
            "store_path": self.store_path,
            "max_urls": self.max_urls,
            "max_urls_by_provider": self.max_urls_by_provider,
            "providers": self.providers,
            "lastmod_delay_seconds": self.lastmod_delay_seconds,
            "extra": self.extra,
        }
        config_path.write_text(json.dumps(data, indent=2))

    def max_urls_for(self, provider_name: str) -> int:
        """Page size for a provider, falling back to the global limit."""
        return self.max_urls_by_provider.get(provider_name, self.max_urls)

    def create_store(self) -> Store:
        """Create a store instance from this config."""
        return create_store(self.store_type, self.store_path)
