"""
Configuration management for Bitpin Monitor.
Handles loading/saving settings including proxy, polling and pagination.
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from typing import Optional
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class ProxyConfig:
    """Proxy configuration settings."""
    enabled: bool = False
    type: str = "http"  # "http" or "socks5"
    host: str = "127.0.0.1"
    port: int = 7890
    username: str = ""
    password: str = ""

    def get_proxy_url(self) -> Optional[str]:
        """Get proxy URL string for requests."""
        if not self.enabled:
            return None

        auth = ""
        if self.username and self.password:
            auth = f"{self.username}:{self.password}@"

        protocol = "socks5" if self.type == "socks5" else "http"
        return f"{protocol}://{auth}{self.host}:{self.port}"


@dataclass
class PollingConfig:
    """Order book / trade tape refresh settings."""
    interval_ms: int = 3000
    order_row_cap: int = 10
    request_timeout: int = 10  # seconds


@dataclass
class PaginationConfig:
    """Market listing pagination."""
    page_size: int = 12
    display_limit: int = 5


@dataclass
class ApiConfig:
    """Bitpin public API endpoints."""
    markets_url: str = "https://api.bitpin.ir/v1/mkt/markets/"
    base_url: str = "https://api.bitpin.org"


@dataclass
class LoggingConfig:
    """Log file and verbosity."""
    level: str = "INFO"
    directory: str = ""  # empty: <config dir>/logs
    filename: str = "monitor.log"
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    console: bool = True


@dataclass
class AppSettings:
    """Application settings."""
    version: str = "1.0.0"

    proxy: ProxyConfig = field(default_factory=ProxyConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    default_quote: str = "IRT"  # "IRT" or "USDT"
    display_places: int = 4


def default_config_dir() -> Path:
    """Per-user configuration directory."""
    if os.name == 'nt':  # Windows
        return Path(os.environ.get('APPDATA', '')) / 'bitpin-monitor'
    return Path.home() / '.config' / 'bitpin-monitor'


def _section(data: dict, key: str, cls):
    """Build a nested config dataclass, ignoring unknown keys."""
    raw = data.pop(key, {})
    if not isinstance(raw, dict):
        raw = {}
    known = cls.__dataclass_fields__.keys()
    return cls(**{k: v for k, v in raw.items() if k in known})


class SettingsManager:
    """Manages application settings persistence."""

    def __init__(self, config_dir: Optional[Path] = None):
        if config_dir is None:
            config_dir = default_config_dir()

        self.config_dir = config_dir
        self.config_file = config_dir / 'settings.json'
        self.settings = AppSettings()

        # Ensure config directory exists
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load(self) -> AppSettings:
        """
        Load settings from file.

        Missing files yield defaults; corrupt files are reported and reset
        to defaults.

        Returns:
            Loaded settings
        """
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)

                if not isinstance(data, dict):
                    raise TypeError(f"Expected a JSON object, got {type(data).__name__}")

                proxy_config = _section(data, 'proxy', ProxyConfig)
                polling_config = _section(data, 'polling', PollingConfig)
                pagination_config = _section(data, 'pagination', PaginationConfig)
                api_config = _section(data, 'api', ApiConfig)
                logging_config = _section(data, 'logging', LoggingConfig)

                # Only keep recognized fields in data
                recognized_fields = {'version', 'default_quote', 'display_places'}
                filtered_data = {k: v for k, v in data.items() if k in recognized_fields}

                self.settings = AppSettings(
                    proxy=proxy_config,
                    polling=polling_config,
                    pagination=pagination_config,
                    api=api_config,
                    logging=logging_config,
                    **filtered_data
                )
            except (json.JSONDecodeError, TypeError, KeyError) as e:
                logger.warning(f"Error loading settings: {e}. Resetting to default settings")
                self.settings = AppSettings()

        return self.settings

    def save(self) -> None:
        """Save settings to file."""
        data = asdict(self.settings)

        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def update_proxy(self, proxy: ProxyConfig) -> None:
        """Update proxy configuration."""
        self.settings.proxy = proxy
        self.save()
        self._apply_proxy_env()

    def update_default_quote(self, quote: str) -> None:
        """Remember the listing tab to open with."""
        self.settings.default_quote = quote.upper()
        self.save()

    def _apply_proxy_env(self) -> None:
        """Apply proxy settings to environment variables."""
        proxy_url = self.settings.proxy.get_proxy_url()

        if proxy_url:
            os.environ['HTTP_PROXY'] = proxy_url
            os.environ['HTTPS_PROXY'] = proxy_url
            os.environ['http_proxy'] = proxy_url
            os.environ['https_proxy'] = proxy_url
        else:
            # Clear proxy environment variables
            for key in ['HTTP_PROXY', 'HTTPS_PROXY', 'http_proxy', 'https_proxy']:
                os.environ.pop(key, None)

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        logger.info("Resetting configuration to defaults")
        self.settings = AppSettings()
        self.save()


# Global settings instance
_settings_manager: Optional[SettingsManager] = None


def get_settings_manager() -> SettingsManager:
    """Get the global settings manager instance."""
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
        _settings_manager.load()
    return _settings_manager
