"""Load an EngineConfig from the environment or a ``.env`` file."""

from __future__ import annotations

from typing import Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .const import (
    DEFAULT_AUTOLOCK_DELAY,
    DEFAULT_LISTENER_HOST,
    DEFAULT_LISTENER_PORT,
    DEFAULT_METHOD,
    DEFAULT_NAME,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TIMEOUT,
    DEFAULT_TOKEN_TIMEOUT,
)
from .enums import AutolockMode
from .exceptions import ConfigurationError
from .models import EngineConfig


class Settings(BaseSettings):
    """Engine settings read from ``SMOOTHLOCK_*`` variables.

    Durations are in seconds. ``SMOOTHLOCK_TOKEN_TIMEOUT=0`` disables token
    validation on the listener.
    """

    NAME: str = DEFAULT_NAME
    DEVICE_ROOT: str = ""
    POLL_INTERVAL: float = DEFAULT_POLL_INTERVAL
    LISTENER_HOST: str = DEFAULT_LISTENER_HOST
    LISTENER_PORT: int = DEFAULT_LISTENER_PORT
    AUTOLOCK: AutolockMode = AutolockMode.NONE
    AUTOLOCK_DELAY: int = DEFAULT_AUTOLOCK_DELAY
    USERNAME: Optional[str] = None
    PASSWORD: Optional[str] = None
    TIMEOUT: float = DEFAULT_TIMEOUT
    METHOD: str = DEFAULT_METHOD
    TOKEN_TIMEOUT: float = DEFAULT_TOKEN_TIMEOUT
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="SMOOTHLOCK_", env_file=".env", extra="ignore"
    )

    def to_engine_config(self) -> EngineConfig:
        """Return the validated engine configuration."""
        try:
            return EngineConfig(
                name=self.NAME,
                device_root=self.DEVICE_ROOT,
                poll_interval=self.POLL_INTERVAL,
                listener_host=self.LISTENER_HOST,
                listener_port=self.LISTENER_PORT,
                autolock=self.AUTOLOCK,
                autolock_delay=self.AUTOLOCK_DELAY,
                username=self.USERNAME,
                password=self.PASSWORD,
                timeout=self.TIMEOUT,
                method=self.METHOD,
                token_timeout=self.TOKEN_TIMEOUT,
            )
        except ValidationError as err:
            raise ConfigurationError(f"Invalid smoothlock configuration: {err}") from err
