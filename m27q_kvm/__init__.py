"""Gigabyte M27Q KVM switching over the monitor's USB billboard device."""

__version__ = "0.1.0"

from .commands import ControlCommand, KvmInput, build_queue, parse_input
from .errors import (
    DeviceNotFoundError,
    DeviceOpenError,
    EnumerationError,
    InvalidInputError,
    KvmError,
    TransferError,
    UsbInitError,
)

__all__ = [
    "ControlCommand",
    "KvmInput",
    "build_queue",
    "parse_input",
    "KvmError",
    "UsbInitError",
    "DeviceNotFoundError",
    "EnumerationError",
    "DeviceOpenError",
    "TransferError",
    "InvalidInputError",
]
