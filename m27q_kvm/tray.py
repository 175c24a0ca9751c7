"""System tray menu: one item per KVM action, each a full device run."""

import logging
import threading
import typing as t

from .commands import KvmInput, build_queue
from .device import execute
from .errors import KvmError

log = logging.getLogger(__name__)

TRAY_NAME = "M27Q"

# (label, switch_back_input, run_trigger)
MENU_ACTIONS: t.List[t.Tuple[str, t.Optional[KvmInput], bool]] = [
    ("KVM Switch", None, True),
] + [(str(kvm_input), kvm_input, True) for kvm_input in KvmInput]

_run_lock = threading.Lock()


def run_action(switch_back_input: t.Optional[KvmInput], run_trigger: bool, icon=None) -> bool:
    """Build a fresh queue and run it to completion; never overlaps another run."""
    with _run_lock:
        try:
            return execute(build_queue(switch_back_input, run_trigger))
        except KvmError as e:
            log.error("KVM action failed: %s", e)
            if icon is not None and icon.HAS_NOTIFICATION:
                icon.notify(str(e), TRAY_NAME)
            return False


def create_icon_image():
    """Draw a small monitor glyph for the tray."""
    from PIL import Image, ImageDraw

    image = Image.new("RGB", (64, 64), "white")
    dc = ImageDraw.Draw(image)
    dc.rectangle([10, 10, 54, 40], fill="black", outline="black")
    dc.rectangle([12, 12, 52, 38], fill="white", outline="white")
    dc.rectangle([28, 40, 36, 48], fill="black", outline="black")
    dc.rectangle([20, 48, 44, 52], fill="black", outline="black")
    return image


def _menu_callback(switch_back_input, run_trigger):
    def callback(icon, item):
        run_action(switch_back_input, run_trigger, icon)

    return callback


def build_menu():
    from pystray import Menu, MenuItem

    (switch_label, switch_input, switch_trigger), *input_actions = MENU_ACTIONS
    items = [MenuItem(switch_label, _menu_callback(switch_input, switch_trigger)), Menu.SEPARATOR]
    items += [
        MenuItem(label, _menu_callback(kvm_input, run_trigger))
        for label, kvm_input, run_trigger in input_actions
    ]
    items += [Menu.SEPARATOR, MenuItem("Quit", lambda icon, item: icon.stop())]
    return Menu(*items)


def launch_tray():
    """Show the tray icon; blocks until Quit is selected."""
    from pystray import Icon

    icon = Icon(TRAY_NAME, create_icon_image(), TRAY_NAME, build_menu())
    log.info("Tray started")
    icon.run()
    return 0
