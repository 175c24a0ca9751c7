#!/usr/bin/env python3
"""
M27Q KVM - Command Line Interface

Writes the KVM switch-back input and/or pulses the KVM switch on a
Gigabyte M27Q over its USB billboard device.
"""

import argparse
import logging
import sys

from . import __version__
from .commands import build_queue, parse_input
from .errors import InvalidInputError, KvmError

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_FOUND = 3


def _input_type(value):
    try:
        return parse_input(value)
    except InvalidInputError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def setup_logging(verbose=0):
    if verbose >= 2:
        logging.basicConfig(level=logging.DEBUG, format='[%(levelname)s] %(name)s: %(message)s')
        logging.getLogger('PIL').setLevel(logging.WARNING)
    elif verbose == 1:
        logging.basicConfig(level=logging.INFO, format='[%(levelname)s] %(message)s')
    else:
        logging.basicConfig(level=logging.WARNING)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="m27q-kvm",
        description="Gigabyte M27Q KVM switch control over USB",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    m27q-kvm --kvm-trigger                           Switch KVM to the other input
    m27q-kvm --switch-back-input DP --kvm-trigger    Switch, coming back to DP next time
    m27q-kvm --tray                                  Run from the system tray
        """
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v, -vv)"
    )
    parser.add_argument(
        "--switch-back-input",
        type=_input_type,
        metavar="{HDMI1,HDMI2,DP}",
        help="Input the KVM switches back to on the next trigger"
    )
    parser.add_argument("--kvm-trigger", action="store_true", help="Trigger the KVM switch")
    parser.add_argument("--tray", action="store_true", help="Launch the system tray menu")
    return parser


def run(switch_back_input=None, run_trigger=False):
    """Execute one run and map its outcome to an exit code."""
    from .device import execute

    cmds = build_queue(switch_back_input, run_trigger)
    try:
        found = execute(cmds)
    except KvmError as e:
        log.error("%s", e)
        return EXIT_ERROR

    return EXIT_OK if found else EXIT_NOT_FOUND


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    if args.tray:
        from .tray import launch_tray
        return launch_tray()

    return run(args.switch_back_input, args.kvm_trigger)


if __name__ == "__main__":
    sys.exit(main())
