"""Typed payloads and configuration for smoothlock."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import __version__
from .const import (
    DEFAULT_AUTOLOCK_DELAY,
    DEFAULT_LISTENER_HOST,
    DEFAULT_LISTENER_PORT,
    DEFAULT_MANUFACTURER,
    DEFAULT_METHOD,
    DEFAULT_NAME,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TIMEOUT,
    DEFAULT_TOKEN_TIMEOUT,
    PACKAGE_NAME,
)
from .enums import AutolockMode, LockState, TargetState
from .exceptions import ParseError


class EngineConfig(BaseModel):
    """Resolved configuration for one lock.

    Accepts the camelCase keys of the accessory configuration block
    (``deviceRoot``, ``pollInterval``, ...) as well as the field names.
    Every duration is expressed in seconds.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(DEFAULT_NAME, alias="name")
    device_root: str = Field(alias="deviceRoot", min_length=1)
    poll_interval: float = Field(DEFAULT_POLL_INTERVAL, alias="pollInterval", gt=0)
    listener_host: str = Field(DEFAULT_LISTENER_HOST, alias="listenerHost")
    listener_port: int = Field(DEFAULT_LISTENER_PORT, alias="listenerPort", ge=0, le=65535)
    autolock: AutolockMode = Field(AutolockMode.NONE, alias="autolock")
    autolock_delay: int = Field(DEFAULT_AUTOLOCK_DELAY, alias="autolockDelay", ge=0)
    username: Optional[str] = Field(None, alias="username")
    password: Optional[str] = Field(None, alias="password")
    timeout: float = Field(DEFAULT_TIMEOUT, alias="timeout", gt=0)
    method: str = Field(DEFAULT_METHOD, alias="method")
    token_timeout: float = Field(DEFAULT_TOKEN_TIMEOUT, alias="tokenTimeout", ge=0)

    manufacturer: str = Field(DEFAULT_MANUFACTURER, alias="manufacturer")
    model: str = Field(PACKAGE_NAME, alias="model")
    serial: Optional[str] = Field(None, alias="serial")
    firmware: str = Field(__version__, alias="firmware")

    @field_validator("device_root")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("method")
    @classmethod
    def _upper_method(cls, v: str) -> str:
        return v.strip().upper() or DEFAULT_METHOD

    @property
    def has_credentials(self) -> bool:
        """Return True if both basic-auth username and password are set."""
        return self.username is not None and self.password is not None

    @property
    def validation_enabled(self) -> bool:
        """Return True if inbound tokens must be validated."""
        return self.token_timeout != 0


class AccessoryInfo(BaseModel):
    """Descriptive information the bridge shows for the lock."""

    model_config = ConfigDict(frozen=True)

    manufacturer: str
    model: str
    serial: str
    firmware: str

    @classmethod
    def from_config(cls, config: EngineConfig) -> AccessoryInfo:
        return cls(
            manufacturer=config.manufacturer,
            model=config.model,
            serial=config.serial or config.device_root,
            firmware=config.firmware,
        )


class DeviceStatusResponse(BaseModel):
    """Body of ``GET {deviceRoot}/status``."""

    model_config = ConfigDict(extra="ignore")

    current: int
    target: int

    @classmethod
    def parse(cls, body: str) -> DeviceStatusResponse:
        """Parse a raw response body, raising ``ParseError`` if it is unusable."""
        try:
            return cls.model_validate_json(body)
        except ValidationError as err:
            raise ParseError(f"Invalid status response: {err}", body=body) from err

    @property
    def current_state(self) -> LockState:
        return LockState.from_device(self.current)

    @property
    def target_state(self) -> TargetState:
        return TargetState.from_device(self.target)


class LockSnapshot(BaseModel):
    """The current/target pair owned by the engine."""

    model_config = ConfigDict(frozen=True)

    current: LockState = LockState.UNKNOWN
    target: TargetState = TargetState.SECURED

    def as_tuple(self) -> tuple[LockState, TargetState]:
        return self.current, self.target
