# For Gigabyte M27Q KVM connected over USB
#
# Based on: https://gist.github.com/wadimw/4ac972d07ed1f3b6f22a101375ecac41
"""
Locating the monitor's USB billboard device and sending KVM commands to it.

Switching to the USB-C input is not available over DDC/CI, but the monitor
exposes it through vendor control transfers on its VIA Labs billboard device.
"""

import logging
import sys
import typing as t
from time import sleep

import usb.backend.libusb1
import usb.core
import usb.util

from .commands import ControlCommand
from .errors import (
    DeviceNotFoundError,
    DeviceOpenError,
    EnumerationError,
    TransferError,
    UsbInitError,
)

log = logging.getLogger(__name__)

M27Q_VID = 0x2109  # (VIA Labs, Inc.)
M27Q_PID = 0x8883  # USB Billboard Device

_INTERFACE = 0
_CONFIGURATION = 1
_TIMEOUT_MS = 1000
_USB_DELAY = 50 / 1000  # 50 ms sleep after every usb op


def open_backend():
    """Load libusb once; the returned backend is passed to open_device()."""
    backend = usb.backend.libusb1.get_backend()
    if backend is None:
        raise UsbInitError("could not initialize libusb")
    return backend


class MonitorControl:
    """Exclusive handle on one billboard device.

    Created claimed by open_device(); leaving the ``with`` block releases the
    interface and gives the kernel driver back.
    """

    def __init__(self, dev: usb.core.Device):
        self._dev = dev
        self._had_driver = False
        self._claimed = False
        self._usb_delay = _USB_DELAY

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _kernel_driver_active(self) -> bool:
        try:
            return self._dev.is_kernel_driver_active(_INTERFACE)
        except NotImplementedError:
            # Backend cannot tell; nothing to detach
            return False

    def open(self):
        try:
            if sys.platform != "win32" and self._kernel_driver_active():
                self._dev.detach_kernel_driver(_INTERFACE)
                self._had_driver = True
                log.debug("Detached kernel driver from interface %d", _INTERFACE)

            self._dev.set_configuration(_CONFIGURATION)
            usb.util.claim_interface(self._dev, _INTERFACE)
            self._claimed = True
        except usb.core.USBError as e:
            self.close()
            raise DeviceOpenError(f"Failed to open device: {e}") from e

    def close(self):
        try:
            if self._claimed:
                usb.util.release_interface(self._dev, _INTERFACE)
                self._claimed = False
            if self._had_driver:
                self._dev.attach_kernel_driver(_INTERFACE)
                self._had_driver = False
        except usb.core.USBError as e:
            log.warning("Failed to release device: %s", e)
        finally:
            usb.util.dispose_resources(self._dev)

    def usb_write(self, cmd: ControlCommand):
        log.debug("ctrl_transfer 0x%02x/%d: %s", cmd.rtype, cmd.request, cmd.hex())
        written = self._dev.ctrl_transfer(
            cmd.rtype, cmd.request, cmd.value, cmd.index, cmd.payload, timeout=_TIMEOUT_MS
        )
        if written != len(cmd.payload):
            raise IOError("Transferred message length mismatch")
        sleep(self._usb_delay)


def open_device(backend=None, vid: int = M27Q_VID, pid: int = M27Q_PID) -> MonitorControl:
    """Open the first attached device matching vid/pid.

    Devices are walked on the backend directly rather than through
    usb.core.find(), so one unreadable descriptor only skips that device.

    Raises EnumerationError if the bus cannot be scanned, DeviceNotFoundError
    if nothing matches and DeviceOpenError if the match cannot be claimed.
    """
    if backend is None:
        backend = open_backend()

    try:
        raw_devices = list(backend.enumerate_devices())
    except usb.core.USBError as e:
        raise EnumerationError(f"could not enumerate USB devices: {e}") from e

    for raw in raw_devices:
        try:
            dev = usb.core.Device(raw, backend)
        except usb.core.USBError as e:
            log.warning("Skipping device, descriptor read failed: %s", e)
            continue
        ids = (dev.idVendor, dev.idProduct)
        log.debug("Found device: %04x:%04x", *ids)

        if ids == (vid, pid):
            handle = MonitorControl(dev)
            handle.open()
            log.info("Successfully opened m27q connection")
            return handle

    raise DeviceNotFoundError(f"Device VID_{vid:04x}&PID_{pid:04x} not found")


def dispatch(handle: MonitorControl, commands: t.Sequence[ControlCommand]):
    """Send commands in order, stopping at the first failure."""
    for index, cmd in enumerate(commands):
        try:
            handle.usb_write(cmd)
        except IOError as e:
            raise TransferError(
                f"Transfer {index} ({cmd.hex()}) failed: {e}", index, cmd
            ) from e


def execute(
    commands: t.Sequence[ControlCommand],
    backend=None,
    vid: int = M27Q_VID,
    pid: int = M27Q_PID,
) -> bool:
    """Run one queue against a freshly opened device.

    Returns False when the monitor is not attached; every other failure is
    raised.
    """
    if not commands:
        log.info("No KVM commands queued")
        return True

    if backend is None:
        backend = open_backend()

    try:
        handle = open_device(backend, vid, pid)
    except DeviceNotFoundError as e:
        log.warning("could not find m27q: %s", e)
        return False

    with handle:
        dispatch(handle, commands)

    log.info("Success!")
    return True
