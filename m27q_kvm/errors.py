"""Errors raised while talking to the M27Q billboard device."""

import typing as t

if t.TYPE_CHECKING:
    from .commands import ControlCommand


class KvmError(IOError):
    """Base class for every device-side failure."""


class UsbInitError(KvmError):
    """libusb could not be loaded at all."""


class DeviceNotFoundError(KvmError):
    """No attached device matched the requested VID/PID."""


class EnumerationError(DeviceNotFoundError):
    """The host USB stack could not be queried."""


class DeviceOpenError(KvmError):
    """The device was found but could not be claimed (permissions, busy)."""


class TransferError(KvmError):
    """A control transfer failed; nothing after ``index`` was sent."""

    def __init__(self, message: str, index: int, command: "ControlCommand"):
        super().__init__(message)
        self.index = index
        self.command = command


class InvalidInputError(ValueError):
    """Raised for an input name other than HDMI1, HDMI2 or DP."""
