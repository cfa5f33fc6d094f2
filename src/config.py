import json
import logging
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_FILE_PATH = "config.json"
WEBHOOK_ENV_VAR = "DISCORD_WEBHOOK_URL"

# Expected type(s) for each recognised key
_KEY_TYPES = {
    "sitemap_url": str,
    "locale": str,
    "user_agent": str,
    "timeout": (int, float),
    "max_attempts": int,
    "retry_delay": (int, float),
    "interval_seconds": (int, float),
    "data_directory": str,
    "snapshot_file": str,
    "changes_file": str,
    "webhook_url": str,
    "change_url_base": str,
    "max_items": int,
    "webhook_timeout": (int, float),
    "log_level": str,
}


@dataclass(frozen=True)
class MonitorConfig:
    """Immutable settings for one monitor process."""
    sitemap_url: str
    locale: str = "en-us"
    user_agent: str = "ProductCatalogMonitor/1.0"
    timeout: float = 600
    max_attempts: int = 3
    retry_delay: float = 2.0
    interval_seconds: float = 3600
    data_directory: str = "output"
    snapshot_file: str = "products.json"
    changes_file: str = "changes.json"
    webhook_url: str = ""
    change_url_base: str = "http://localhost:5196/change/"
    max_items: int = 10
    webhook_timeout: float = 30
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "MonitorConfig":
        """Builds settings from a validated config dict, applying defaults.
        The webhook URL is a secret, so the environment overrides the file."""
        known = {k: v for k, v in config.items() if k in _KEY_TYPES}
        env_webhook = os.getenv(WEBHOOK_ENV_VAR)
        if env_webhook:
            known["webhook_url"] = env_webhook
        return cls(**known)

    @property
    def snapshot_path(self) -> str:
        return os.path.join(self.data_directory, self.snapshot_file)

    @property
    def changes_path(self) -> str:
        return os.path.join(self.data_directory, self.changes_file)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: str = CONFIG_FILE_PATH) -> Optional[Dict[str, Any]]:
    """Loads the configuration from config.json."""
    if not os.path.exists(path):
        logger.error(f"Configuration file not found: {path}")
        return None
    try:
        with open(path, 'r', encoding='utf-8') as f:
            config_data = json.load(f)
        logger.info(f"Successfully loaded configuration from {path}")
        if not validate_config(config_data):
            return None
        return config_data
    except json.JSONDecodeError as e:
        logger.error(f"Error decoding JSON from {path}: {e}")
        return None
    except OSError as e:
        logger.error(f"Could not read configuration file {path}: {e}")
        return None


def validate_config(config: Dict[str, Any]) -> bool:
    """Validates the structure and content of the configuration."""
    if not isinstance(config, dict):
        logger.error("Configuration must be a dictionary.")
        return False

    sitemap_url = config.get("sitemap_url")
    if not isinstance(sitemap_url, str) or not sitemap_url.strip():
        logger.error("'sitemap_url' key is missing or not a non-empty string.")
        return False
    if not sitemap_url.startswith(("http://", "https://")):
        logger.error(f"'sitemap_url' must be an http(s) URL, got: {sitemap_url}")
        return False

    for key, expected in _KEY_TYPES.items():
        if key not in config:
            continue
        value = config[key]
        # bool is an int subclass; reject it for numeric settings
        if isinstance(value, bool) or not isinstance(value, expected):
            logger.error(f"Value for '{key}' has the wrong type: {value!r}")
            return False

    for key in ("timeout", "max_attempts", "interval_seconds", "max_items", "webhook_timeout"):
        if key in config and config[key] <= 0:
            logger.error(f"Value for '{key}' must be positive, got {config[key]}.")
            return False
    if config.get("retry_delay", 0) < 0:
        logger.error("'retry_delay' cannot be negative.")
        return False

    unknown = sorted(set(config) - set(_KEY_TYPES))
    if unknown:
        logger.warning(f"Ignoring unknown configuration keys: {unknown}")

    if not config.get("webhook_url") and not os.getenv(WEBHOOK_ENV_VAR):
        logger.warning(f"No 'webhook_url' configured and {WEBHOOK_ENV_VAR} not set. Notifications will be skipped.")
        # Not fatal: the monitor still records changes.

    logger.info("Configuration validation successful.")
    return True
