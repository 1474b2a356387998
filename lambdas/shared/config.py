"""Environment configuration for Lambda functions."""
import os
from dataclasses import dataclass, field

from .contingent_limits import ContingentLimits
from .exceptions import ConfigurationError
from .models import PrivilegedDevice
from .utils import env_bool, env_int

DEFAULT_NAMESPACE = "MLT_translations_statistics"
DEFAULT_TRANSLATE_API_URL = "https://translation.googleapis.com/language/translate/v2"


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    table_name: str
    environment: str
    log_level: str
    namespace: str = DEFAULT_NAMESPACE
    simulate_translation: bool = False
    limits: ContingentLimits = field(default_factory=ContingentLimits)
    max_input_length: int = 1000
    max_target_languages: int = 5
    translate_api_url: str = DEFAULT_TRANSLATE_API_URL
    translate_timeout_seconds: int = 10
    privileged_devices: list[PrivilegedDevice] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Returns:
            Config instance with values from environment

        Raises:
            ConfigurationError: If required environment variables are missing
                or values cannot be parsed
        """
        table_name = os.environ.get("TABLE_NAME")
        if not table_name:
            raise ConfigurationError(
                "TABLE_NAME environment variable is required",
                config_key="TABLE_NAME",
            )

        return cls(
            table_name=table_name,
            environment=os.environ.get("ENVIRONMENT", "dev"),
            log_level=os.environ.get("POWERTOOLS_LOG_LEVEL", "INFO"),
            namespace=os.environ.get("STATS_NAMESPACE") or DEFAULT_NAMESPACE,
            simulate_translation=env_bool("SIMULATE_TRANSLATION", False),
            limits=ContingentLimits.from_env(),
            max_input_length=env_int("MAX_INPUT_LENGTH", 1000),
            max_target_languages=env_int("MAX_TARGET_LANGUAGES", 5),
            translate_api_url=os.environ.get(
                "TRANSLATE_API_URL", DEFAULT_TRANSLATE_API_URL
            ),
            translate_timeout_seconds=env_int("TRANSLATE_TIMEOUT_SECONDS", 10),
            privileged_devices=parse_privileged_devices(
                os.environ.get("PRIVILEGED_DEVICES", "")
            ),
        )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "prod"


def parse_privileged_devices(value: str) -> list[PrivilegedDevice]:
    """Parse the deploy-time privileged device list.

    Entries are comma-separated ``user_id:device name`` pairs; the name is
    optional and defaults to "unknown".

    Args:
        value: Raw PRIVILEGED_DEVICES value

    Returns:
        Privileged devices in configured order

    Raises:
        ConfigurationError: If an entry has no user ID
    """
    devices = []
    for entry in value.split(","):
        if not entry.strip():
            continue
        user_id, _, name = entry.partition(":")
        if not user_id.strip():
            raise ConfigurationError(
                f"PRIVILEGED_DEVICES entry {entry!r} has no user ID",
                config_key="PRIVILEGED_DEVICES",
            )
        devices.append(
            PrivilegedDevice(user_id=user_id.strip(), name=name.strip() or "unknown")
        )
    return devices


def get_config() -> Config:
    """Get cached configuration instance.

    Returns:
        Config instance (cached after first call)
    """
    if not hasattr(get_config, "_config"):
        get_config._config = Config.from_env()
    return get_config._config


def reset_config() -> None:
    """Drop the cached configuration (for testing)."""
    if hasattr(get_config, "_config"):
        del get_config._config
