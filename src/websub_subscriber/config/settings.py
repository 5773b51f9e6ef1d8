"""
Configuration management for the WebSub subscriber.

Settings are read once from environment variables at startup and handed
to the callback server and the subscription renewer as a frozen record.
"""

import os
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_HUB_URL = "https://pubsubhubbub.appspot.com/"
TOPIC_URL_TEMPLATE = "https://www.youtube.com/feeds/videos.xml?channel_id={channel_id}"

# Environment variable -> Settings field
ENV_VARS: Dict[str, str] = {
    "PORT": "port",
    "PUBLIC_BASE_URL": "public_base_url",
    "YOUTUBE_CHANNEL_ID": "youtube_channel_id",
    "VERIFY_TOKEN": "verify_token",
    "WEBSUB_HUB_URL": "hub_url",
    "WEBSUB_CALLBACK_PATH": "callback_path",
    "WEBSUB_RENEW_INTERVAL_SECONDS": "renew_interval_seconds",
    "WEBSUB_HUB_TIMEOUT_SECONDS": "hub_timeout_seconds",
    "WEBSUB_LOG_LEVEL": "log_level",
    "WEBSUB_LOG_FORMAT": "log_format",
}

REQUIRED_ENV_VARS = ("PUBLIC_BASE_URL", "YOUTUBE_CHANNEL_ID")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_FORMATS = ["json", "console"]


class ConfigError(ValueError):
    """Raised when the environment does not describe a usable configuration."""


class Settings(BaseModel):
    """Startup configuration shared by the callback server and the renewer."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    port: int = Field(default=8080, ge=1, le=65535, description="Listen port")
    public_base_url: str = Field(description="Publicly reachable base URL of this service")
    youtube_channel_id: str = Field(description="Channel whose video feed is the topic")
    verify_token: str = Field(default="devtoken", description="Token sent with subscribe requests")
    hub_url: str = Field(default=DEFAULT_HUB_URL, description="WebSub hub base URL")
    callback_path: str = Field(default="/websub", description="Path of the callback endpoint")
    renew_interval_seconds: float = Field(
        default=24 * 60 * 60, gt=0, description="Delay between subscribe requests"
    )
    hub_timeout_seconds: Optional[float] = Field(
        default=None, gt=0, description="Hub request timeout (None keeps the transport default)"
    )
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log rendering: json or console")

    @field_validator("public_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("hub_url")
    @classmethod
    def ensure_trailing_slash(cls, v: str) -> str:
        return v if v.endswith("/") else v + "/"

    @field_validator("callback_path")
    @classmethod
    def validate_callback_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError(f"Callback path must start with '/': {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        v_upper = v.upper()
        if v_upper not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {LOG_LEVELS}")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in LOG_FORMATS:
            raise ValueError(f"Invalid log format: {v}. Must be one of {LOG_FORMATS}")
        return v_lower

    @property
    def callback_url(self) -> str:
        """URL the hub uses to verify and deliver notifications."""
        return self.public_base_url + self.callback_path

    @property
    def topic_url(self) -> str:
        """Feed URL of the configured channel."""
        return TOPIC_URL_TEMPLATE.format(channel_id=self.youtube_channel_id)


def load_config(
    environ: Optional[Mapping[str, str]] = None, **overrides: Any
) -> Settings:
    """
    Load settings from environment variables.

    Args:
        environ: Mapping to read instead of ``os.environ``
        **overrides: Field values taking precedence over the environment
                     (used by CLI options); ``None`` values are ignored

    Returns:
        Validated, immutable settings

    Raises:
        ConfigError: If a required variable is missing or a value is invalid
    """
    if environ is None:
        environ = os.environ

    # An empty variable counts as unset
    config_data: Dict[str, Any] = {
        field: environ[name] for name, field in ENV_VARS.items() if environ.get(name)
    }
    config_data.update({k: v for k, v in overrides.items() if v is not None})

    for name in REQUIRED_ENV_VARS:
        if ENV_VARS[name] not in config_data:
            raise ConfigError(f"missing required env {name}")

    try:
        return Settings(**config_data)
    except ValidationError as e:
        raise ConfigError(f"invalid configuration: {e}") from e
