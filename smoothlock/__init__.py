"""Provide a package for smoothlock."""

__version__ = "0.1.0"

from .engine import LockStateEngine
from .enums import AutolockMode, LockState, TargetState
from .models import DeviceStatusResponse, EngineConfig
