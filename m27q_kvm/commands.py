"""
KVM control-transfer payloads for the Gigabyte M27Q.

Both payloads were captured from the vendor's OSD Sidekick tool.  They share
the same envelope (vendor OUT request 178, wValue 0, wIndex 0) and differ only
in the tail: ``e0 6b <input>`` stores the input to switch back to, ``e0 69 01``
pulses the KVM switch itself.  The monitor applies a pending switch-back input
on the next trigger, so a select must be queued before the trigger.
"""

import enum
import logging
import typing as t
from dataclasses import dataclass

from .errors import InvalidInputError

log = logging.getLogger(__name__)

REQUEST_TYPE = 0x40  # vendor, host-to-device
REQUEST = 178

_OSD_PREFIX = (0x6E, 0x51, 0x84, 0x03, 0xE0)
_SELECT_OPCODE = 0x6B
_TRIGGER = (0x69, 0x01)


class KvmInput(enum.Enum):
    HDMI1 = 0x00
    HDMI2 = 0x01
    DP = 0x02

    def __str__(self):
        return self.name

    @property
    def code(self) -> int:
        return self.value


@dataclass(frozen=True)
class ControlCommand:
    rtype: int
    request: int
    value: int
    index: int
    payload: bytes

    def hex(self) -> str:
        return " ".join(f"{b:02x}" for b in self.payload)


def select_input_command(kvm_input: KvmInput) -> ControlCommand:
    return ControlCommand(
        rtype=REQUEST_TYPE,
        request=REQUEST,
        value=0,
        index=0,
        payload=bytes(_OSD_PREFIX + (_SELECT_OPCODE, kvm_input.code)),
    )


def trigger_command() -> ControlCommand:
    return ControlCommand(
        rtype=REQUEST_TYPE,
        request=REQUEST,
        value=0,
        index=0,
        payload=bytes(_OSD_PREFIX + _TRIGGER),
    )


def build_queue(
    switch_back_input: t.Optional[KvmInput] = None, run_trigger: bool = False
) -> t.List[ControlCommand]:
    """Build the ordered command list: optional select first, optional trigger second."""
    cmds = []

    if switch_back_input is not None:
        log.info("Input switch supplied, writing %s to kvm switch back", switch_back_input)
        cmds.append(select_input_command(switch_back_input))
    if run_trigger:
        log.info("Triggering KVM switch...")
        cmds.append(trigger_command())

    return cmds


def parse_input(name: str) -> KvmInput:
    # Exact, case-sensitive match only
    try:
        return KvmInput[name]
    except KeyError:
        raise InvalidInputError(
            "Invalid KVM input - valid inputs are HDMI1,HDMI2,DP"
        ) from None
