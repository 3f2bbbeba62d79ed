"""Runtime configuration.

Values come from the process environment. The CLI calls ``load_dotenv()``
first, so a local ``.env`` file works too:

  COC_EMAIL          developer portal account email
  COC_PASSWORD       developer portal account password
  COC_KEY_NAME       name given to keys owned by this tool
  COC_DEV_SITE_URL   developer portal API base URL
  COC_API_URL        production API base URL
  COC_HTTP_TIMEOUT   per-request timeout in seconds
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from coc_keygen.errors import ConfigurationError

DEV_SITE_BASE_URL = "https://developer.clashofclans.com/api"
API_BASE_URL = "https://api.clashofclans.com/v1"

DEFAULT_KEY_NAME = "clashofclans.js.keys"
DEFAULT_TIMEOUT = 15.0

# Hard limit enforced by the portal.
MAX_KEYS_PER_ACCOUNT = 10


@dataclass
class Settings:
    email: str = ""
    password: str = ""
    key_name: str = DEFAULT_KEY_NAME
    dev_site_url: str = DEV_SITE_BASE_URL
    api_url: str = API_BASE_URL
    timeout: float = DEFAULT_TIMEOUT


def _parse_timeout(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"COC_HTTP_TIMEOUT must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigurationError("COC_HTTP_TIMEOUT must be positive")
    return value


def settings_from_env() -> Settings:
    """Build settings from environment variables, falling back to defaults."""
    timeout_raw = os.environ.get("COC_HTTP_TIMEOUT", "").strip()
    return Settings(
        email=os.environ.get("COC_EMAIL", ""),
        password=os.environ.get("COC_PASSWORD", ""),
        key_name=os.environ.get("COC_KEY_NAME", "") or DEFAULT_KEY_NAME,
        dev_site_url=(os.environ.get("COC_DEV_SITE_URL", "") or DEV_SITE_BASE_URL).rstrip("/"),
        api_url=(os.environ.get("COC_API_URL", "") or API_BASE_URL).rstrip("/"),
        timeout=_parse_timeout(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT,
    )
