"""Enums for smoothlock."""

from __future__ import annotations

from enum import Enum, IntEnum


class LockState(IntEnum):
    """Current (device reported) state of the lock."""

    UNSECURED = 0
    SECURED = 1
    UNKNOWN = 3

    @classmethod
    def from_device(cls, value: int) -> LockState:
        """Map a device status value, where only ``1`` means secured."""
        return cls.SECURED if value == 1 else cls.UNSECURED


class TargetState(IntEnum):
    """State last requested for the lock."""

    UNSECURED = 0
    SECURED = 1

    @classmethod
    def from_device(cls, value: int) -> TargetState:
        """Map a device status value, where only ``1`` means secured."""
        return cls.SECURED if value == 1 else cls.UNSECURED


class AutolockMode(str, Enum):
    """Who re-secures the lock after an unlock."""

    NONE = "none"
    DEVICE = "device"
    PLUGIN = "plugin"
