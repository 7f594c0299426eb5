"""Configuration management for the codepulse heartbeat agent."""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .utils import get_data_directory

DEFAULT_CONFIG = {
    "enabled": True,
    "api_key": "",  # nosec B105 - Bearer token for the heartbeat API
    "base_url": "https://ziit.app",
    "api_prefix": "/api/external",
    "keystroke_timeout": 15,  # minutes
    "heartbeat_interval": 120,
    "flush_interval": 30,
    "summary_interval": 30,
    "batch_size": 1000,
    "connect_timeout": 5,
    "read_timeout": 15,
    "editor": "codepulse",
    "verbose_logging": True,
}

INT_KEYS = [
    "keystroke_timeout",
    "heartbeat_interval",
    "flush_interval",
    "summary_interval",
    "batch_size",
    "connect_timeout",
    "read_timeout",
]

BOOL_KEYS = ["enabled", "verbose_logging"]


class Config:
    """Configuration manager for the heartbeat agent."""

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_dir: Custom configuration directory path
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = get_data_directory() / "config"

        self.config_file = self.config_dir / "settings.json"
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file or create default."""
        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    config = json.load(f)
                if not isinstance(config, dict):
                    raise ValueError("settings must be a JSON object")
                # Merge with defaults to ensure all keys exist
                merged_config = DEFAULT_CONFIG.copy()
                merged_config.update(config)
                return merged_config
            except (json.JSONDecodeError, ValueError, IOError) as e:
                print(f"Warning: Could not load config file: {e}")
                print("Using default configuration.")

        return DEFAULT_CONFIG.copy()

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2, ensure_ascii=False)
        except IOError as e:
            print(f"Warning: Could not save config file: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self._config[key] = value

    def update(self, config_dict: Dict[str, Any]) -> None:
        """Update multiple configuration values."""
        self._config.update(config_dict)

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        self._config = DEFAULT_CONFIG.copy()

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        return self._config.copy()

    def is_configured(self) -> bool:
        """True when both an API key and a base URL are set."""
        return bool(self.api_key) and bool(self.base_url)

    # Convenience properties for common settings
    @property
    def enabled(self) -> bool:
        return bool(self.get("enabled", True))

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self.set("enabled", value)

    @property
    def api_key(self) -> str:
        """Get the bearer token used for every request."""
        return self.get("api_key", "")

    @api_key.setter
    def api_key(self, value: str) -> None:
        self.set("api_key", value)

    @property
    def base_url(self) -> str:
        """Get the service base URL without a trailing slash."""
        return (self.get("base_url", "") or "").rstrip("/")

    @base_url.setter
    def base_url(self, value: str) -> None:
        self.set("base_url", value)

    @property
    def api_prefix(self) -> str:
        return self.get("api_prefix", "/api/external")

    @property
    def keystroke_timeout(self) -> int:
        """Get inactivity threshold in minutes."""
        return self.get("keystroke_timeout", 15)

    @keystroke_timeout.setter
    def keystroke_timeout(self, value: int) -> None:
        self.set("keystroke_timeout", value)

    @property
    def heartbeat_interval(self) -> int:
        return self.get("heartbeat_interval", 120)

    @property
    def flush_interval(self) -> int:
        return self.get("flush_interval", 30)

    @property
    def summary_interval(self) -> int:
        return self.get("summary_interval", 30)

    @property
    def batch_size(self) -> int:
        return self.get("batch_size", 1000)

    @property
    def request_timeout(self) -> tuple:
        """(connect, read) timeout pair passed to requests."""
        return (self.get("connect_timeout", 5), self.get("read_timeout", 15))

    @property
    def editor(self) -> str:
        return self.get("editor", "codepulse")

    @property
    def verbose_logging(self) -> bool:
        return self.get("verbose_logging", True)

    @verbose_logging.setter
    def verbose_logging(self, value: bool) -> None:
        self.set("verbose_logging", value)

    @property
    def data_dir(self) -> Path:
        """Get data directory path (offline queue lives here)."""
        data_dir = self.get("data_dir")
        if data_dir:
            return Path(data_dir)
        return get_data_directory()


def load_config_from_env() -> Dict[str, Any]:
    """Load configuration from environment variables.

    Returns:
        Configuration dictionary from environment
    """
    env_config: Dict[str, Any] = {}

    env_mappings = {
        "CODEPULSE_DATA_DIR": "data_dir",
        "CODEPULSE_API_KEY": "api_key",  # nosec B105
        "CODEPULSE_BASE_URL": "base_url",
        "CODEPULSE_ENABLED": "enabled",
        "CODEPULSE_KEYSTROKE_TIMEOUT": "keystroke_timeout",
        "CODEPULSE_HEARTBEAT_INTERVAL": "heartbeat_interval",
        "CODEPULSE_FLUSH_INTERVAL": "flush_interval",
        "CODEPULSE_SUMMARY_INTERVAL": "summary_interval",
        "CODEPULSE_BATCH_SIZE": "batch_size",
        "CODEPULSE_VERBOSE": "verbose_logging",
    }

    for env_var, config_key in env_mappings.items():
        value = os.getenv(env_var)
        if value is not None:
            if config_key in INT_KEYS:
                try:
                    env_config[config_key] = int(value)
                except ValueError:
                    print(f"Warning: Invalid integer value for {env_var}: {value}")
            elif config_key in BOOL_KEYS:
                env_config[config_key] = value.lower() in ("true", "1", "yes", "on")
            else:
                env_config[config_key] = value

    return env_config


# Global config instance
_global_config: Optional[Config] = None


def get_config() -> Config:
    """Get global configuration instance with environment overrides applied."""
    global _global_config
    if _global_config is None:
        _global_config = Config()
        env_config = load_config_from_env()
        if env_config:
            _global_config.update(env_config)
    return _global_config


def reload_config() -> Config:
    """Reload configuration from file."""
    global _global_config
    _global_config = None
    return get_config()
