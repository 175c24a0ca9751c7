"""
Tests for cli -- argument parsing, logging setup and exit codes.
"""

import io
import unittest
from contextlib import redirect_stderr
from unittest.mock import patch

from m27q_kvm.cli import EXIT_ERROR, EXIT_NOT_FOUND, EXIT_OK, build_parser, main, run
from m27q_kvm.commands import KvmInput, select_input_command, trigger_command
from m27q_kvm.errors import DeviceOpenError, TransferError


class TestParser(unittest.TestCase):

    def test_defaults(self):
        args = build_parser().parse_args([])
        self.assertIsNone(args.switch_back_input)
        self.assertFalse(args.kvm_trigger)
        self.assertFalse(args.tray)
        self.assertEqual(args.verbose, 0)

    def test_switch_back_input_parsed(self):
        args = build_parser().parse_args(["--switch-back-input", "HDMI2", "--kvm-trigger"])
        self.assertIs(args.switch_back_input, KvmInput.HDMI2)
        self.assertTrue(args.kvm_trigger)

    def test_verbose_count(self):
        args = build_parser().parse_args(["-vv"])
        self.assertEqual(args.verbose, 2)

    def test_invalid_input_rejected(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr), self.assertRaises(SystemExit) as ctx:
            build_parser().parse_args(["--switch-back-input", "hdmi1"])
        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("valid inputs are HDMI1,HDMI2,DP", stderr.getvalue())


class TestMain(unittest.TestCase):

    @patch("m27q_kvm.device.execute", return_value=True)
    def test_select_and_trigger(self, mock_exec):
        rc = main(["--switch-back-input", "DP", "--kvm-trigger"])
        self.assertEqual(rc, EXIT_OK)
        mock_exec.assert_called_once_with(
            [select_input_command(KvmInput.DP), trigger_command()]
        )

    @patch("m27q_kvm.device.execute", return_value=True)
    def test_no_actions(self, mock_exec):
        self.assertEqual(main([]), EXIT_OK)
        mock_exec.assert_called_once_with([])

    @patch("m27q_kvm.device.execute")
    def test_invalid_input_never_touches_device(self, mock_exec):
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            main(["--switch-back-input", "VGA", "--kvm-trigger"])
        mock_exec.assert_not_called()

    @patch("m27q_kvm.tray.launch_tray", return_value=0)
    @patch("m27q_kvm.device.execute")
    def test_tray(self, mock_exec, mock_tray):
        self.assertEqual(main(["--tray", "--kvm-trigger"]), 0)
        mock_tray.assert_called_once_with()
        mock_exec.assert_not_called()


class TestRun(unittest.TestCase):

    @patch("m27q_kvm.device.execute", return_value=False)
    def test_not_found(self, _):
        self.assertEqual(run(run_trigger=True), EXIT_NOT_FOUND)

    @patch("m27q_kvm.device.execute", side_effect=DeviceOpenError("Access denied"))
    def test_open_error(self, _):
        with self.assertLogs("m27q_kvm.cli", level="ERROR"):
            self.assertEqual(run(run_trigger=True), EXIT_ERROR)

    @patch("m27q_kvm.device.execute")
    def test_transfer_error(self, mock_exec):
        mock_exec.side_effect = TransferError("timeout", 0, trigger_command())
        with self.assertLogs("m27q_kvm.cli", level="ERROR"):
            self.assertEqual(run(KvmInput.HDMI1, True), EXIT_ERROR)


if __name__ == '__main__':
    unittest.main()
