"""
Settings for Sun Resource

Values come from a .env file (via python-dotenv) or the process
environment. Only Settings.from_env() reads the environment; everything
downstream receives the values explicitly.

Environment variables:
    NREL_API_KEY          - developer.nrel.gov API key (required to fetch)
    SUN_RESOURCE_LAT      - latitude in degrees (default 40.0)
    SUN_RESOURCE_LON      - longitude in degrees (default -105.0)
    SUN_RESOURCE_TIMEOUT  - request timeout in seconds (default 30)
    SUN_RESOURCE_OUTPUT   - artifact directory (default outputs)
    LOG_LEVEL             - logging level (default INFO)
"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from sun_resource.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_LAT = 40.0
DEFAULT_LON = -105.0
DEFAULT_TIMEOUT = 30.0
DEFAULT_OUTPUT_DIR = Path("outputs")


def _parse_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def validate_coordinates(lat: float, lon: float) -> None:
    """Raise ConfigError unless lat/lon are inside the valid ranges."""
    if not -90.0 <= lat <= 90.0:
        raise ConfigError(f"Latitude {lat} is outside [-90, 90]")
    if not -180.0 <= lon <= 180.0:
        raise ConfigError(f"Longitude {lon} is outside [-180, 180]")


@dataclass(frozen=True)
class Settings:
    """Run configuration. The API key is masked in repr()."""
    api_key: Optional[str] = field(default=None, repr=False)
    lat: float = DEFAULT_LAT
    lon: float = DEFAULT_LON
    timeout_seconds: float = DEFAULT_TIMEOUT
    output_dir: Path = DEFAULT_OUTPUT_DIR
    log_level: str = "INFO"

    def __post_init__(self):
        validate_coordinates(self.lat, self.lon)
        if self.timeout_seconds <= 0:
            raise ConfigError(f"Timeout must be positive, got {self.timeout_seconds}")

    def __repr__(self) -> str:
        key_state = "***" if self.api_key else None
        return (
            f"Settings(api_key={key_state!r}, lat={self.lat}, lon={self.lon}, "
            f"timeout_seconds={self.timeout_seconds}, output_dir={str(self.output_dir)!r}, "
            f"log_level={self.log_level!r})"
        )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None,
                 dotenv: bool = True) -> "Settings":
        """
        Build Settings from environment variables.

        Args:
            env: Mapping to read instead of os.environ (used by tests)
            dotenv: Load a .env file into os.environ first

        Returns:
            Settings instance
        """
        if env is None:
            if dotenv:
                load_dotenv()
            env = os.environ

        api_key = env.get("NREL_API_KEY") or None
        settings = cls(
            api_key=api_key.strip() if api_key else None,
            lat=_parse_float(env, "SUN_RESOURCE_LAT", DEFAULT_LAT),
            lon=_parse_float(env, "SUN_RESOURCE_LON", DEFAULT_LON),
            timeout_seconds=_parse_float(env, "SUN_RESOURCE_TIMEOUT", DEFAULT_TIMEOUT),
            output_dir=Path(env.get("SUN_RESOURCE_OUTPUT") or DEFAULT_OUTPUT_DIR),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )
        logger.debug(f"[Settings] Loaded {settings!r}")
        return settings

    def with_overrides(self, **changes) -> "Settings":
        """Return a copy with the non-None values in changes applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def require_api_key(self) -> str:
        """Return the API key or raise ConfigError when it is not set."""
        if not self.api_key:
            raise ConfigError(
                "NREL_API_KEY is not set (add it to .env or the environment)"
            )
        return self.api_key
