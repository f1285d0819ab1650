"""Tests for the xrandr backend: query parsing and command construction."""

import logging
import subprocess
from unittest.mock import patch

import pytest

from vscreen.core.cvt import cvt_modeline
from vscreen.core.xrandr import XRandRBackend, parse_query
from vscreen.errors import ErrorCode, ExtensionError
from vscreen.models import Geometry, Orientation, Position

from tests.fixtures.xrandr_samples import QUERY_GARBLED, QUERY_IDLE, QUERY_MIXED


def completed(args, stdout="", stderr="", returncode=0):
    return subprocess.CompletedProcess(args=args, returncode=returncode, stdout=stdout, stderr=stderr)


class TestParseQuery:
    """Parsing of captured `xrandr --query` output."""

    def test_outputs_in_order(self):
        outputs, _ = parse_query(QUERY_MIXED)

        assert [o.name for o in outputs] == ["eDP-1", "HDMI-1", "VIRTUAL1", "VIRTUAL2", "VIRTUAL3", "VIRTUAL4"]

    def test_physical_output(self):
        outputs, _ = parse_query(QUERY_MIXED)
        edp = outputs[0]

        assert edp.connected and edp.primary and edp.active
        assert edp.geometry == Geometry(x=0, y=0, width=1920, height=1080)
        assert edp.mode == "1920x1080"
        assert edp.modes == ["1920x1080", "1680x1050", "1280x1024"]

    def test_disconnected_but_active_virtual_output(self):
        """Virtual outputs report 'disconnected' even while they carry a mode."""
        outputs, _ = parse_query(QUERY_MIXED)
        virtual1 = outputs[2]

        assert not virtual1.connected
        assert virtual1.active
        assert str(virtual1.geometry) == "1920x1080+1920+0"
        assert virtual1.mode == "vscreen-1920x1080"

    def test_rotation_comes_from_header_not_supported_list(self):
        outputs, _ = parse_query(QUERY_MIXED)
        by_name = {o.name: o for o in outputs}

        assert by_name["VIRTUAL2"].rotation is Orientation.LEFT
        assert by_name["VIRTUAL1"].rotation is Orientation.NORMAL
        assert by_name["VIRTUAL3"].rotation is Orientation.NORMAL

    def test_inactive_output_keeps_attached_modes(self):
        outputs, _ = parse_query(QUERY_MIXED)
        virtual3 = outputs[4]

        assert not virtual3.active
        assert virtual3.geometry is None
        assert virtual3.mode is None
        assert virtual3.modes == ["vscreen-1920x1080"]

    def test_modes_include_unassociated_detailed_modes(self):
        _, modes = parse_query(QUERY_MIXED)
        by_name = {m.name: m for m in modes}

        assert (by_name["vscreen-1366x768"].width, by_name["vscreen-1366x768"].height) == (1366, 768)
        assert (by_name["vscreen-1600x900"].width, by_name["vscreen-1600x900"].height) == (1600, 900)
        assert "1920x1080" in by_name
        assert len(modes) == len(by_name)

    def test_detailed_mode_not_attached_to_previous_output(self):
        outputs, _ = parse_query(QUERY_MIXED)
        assert outputs[5].modes == []

    def test_idle_query(self):
        outputs, modes = parse_query(QUERY_IDLE)

        assert [o.active for o in outputs] == [True, False, False]
        assert [m.name for m in modes] == ["1920x1080"]

    def test_unrecognized_header(self):
        with pytest.raises(ValueError, match="Unrecognized xrandr output line"):
            parse_query(QUERY_GARBLED)


class TestXRandRBackend:
    """Command construction with subprocess mocked out."""

    @patch("vscreen.core.xrandr.subprocess.run")
    def test_query_outputs(self, mock_run):
        mock_run.return_value = completed(["xrandr", "--query"], stdout=QUERY_MIXED)

        outputs = XRandRBackend().query_outputs()

        assert len(outputs) == 6
        args = mock_run.call_args[0][0]
        assert args == ["xrandr", "--query"]

    @patch("vscreen.core.xrandr.subprocess.run")
    def test_display_is_passed_in_environment(self, mock_run):
        mock_run.return_value = completed(["xrandr", "--query"], stdout=QUERY_IDLE)

        XRandRBackend(display=":7").query_modes()

        assert mock_run.call_args[1]["env"]["DISPLAY"] == ":7"

    @patch("vscreen.core.xrandr.subprocess.run")
    def test_create_mode(self, mock_run):
        mock_run.return_value = completed([])

        XRandRBackend().create_mode("vscreen-1920x1080", cvt_modeline(1920, 1080))

        assert mock_run.call_args[0][0] == [
            "xrandr", "--newmode", "vscreen-1920x1080",
            "173.00", "1920", "2048", "2248", "2576", "1080", "1083", "1088", "1120",
            "-hsync", "+vsync",
        ]

    @patch("vscreen.core.xrandr.subprocess.run")
    def test_set_output_attaches_missing_mode(self, mock_run):
        mock_run.side_effect = [
            completed(["xrandr", "--query"], stdout=QUERY_IDLE),
            completed([]),
            completed([]),
        ]

        XRandRBackend().set_output("VIRTUAL1", "vscreen-1600x900", Orientation.RIGHT, Position(x=1920, y=0))

        commands = [c[0][0] for c in mock_run.call_args_list]
        assert commands[1] == ["xrandr", "--addmode", "VIRTUAL1", "vscreen-1600x900"]
        assert commands[2] == [
            "xrandr", "--output", "VIRTUAL1",
            "--mode", "vscreen-1600x900",
            "--rotate", "right",
            "--pos", "1920x0",
        ]

    @patch("vscreen.core.xrandr.subprocess.run")
    def test_set_output_skips_addmode_when_attached(self, mock_run):
        mock_run.side_effect = [
            completed(["xrandr", "--query"], stdout=QUERY_MIXED),
            completed([]),
        ]

        XRandRBackend().set_output("VIRTUAL3", "vscreen-1920x1080", Orientation.NORMAL, Position())

        commands = [c[0][0] for c in mock_run.call_args_list]
        assert len(commands) == 2
        assert commands[1][:3] == ["xrandr", "--output", "VIRTUAL3"]

    @patch("vscreen.core.xrandr.subprocess.run")
    def test_set_output_unknown_output(self, mock_run):
        mock_run.return_value = completed(["xrandr", "--query"], stdout=QUERY_IDLE)

        with pytest.raises(ExtensionError, match="VIRTUAL9 does not exist"):
            XRandRBackend().set_output("VIRTUAL9", "vscreen-1920x1080", Orientation.NORMAL, Position())

        assert mock_run.call_count == 1

    @patch("vscreen.core.xrandr.subprocess.run")
    def test_remove_mode_detaches_first(self, mock_run):
        mock_run.side_effect = [
            completed(["xrandr", "--query"], stdout=QUERY_MIXED),
            completed([]),
            completed([]),
            completed([]),
        ]

        XRandRBackend().remove_mode("vscreen-1920x1080")

        commands = [c[0][0] for c in mock_run.call_args_list]
        # attached to VIRTUAL1 and VIRTUAL3
        assert commands[1:] == [
            ["xrandr", "--delmode", "VIRTUAL1", "vscreen-1920x1080"],
            ["xrandr", "--delmode", "VIRTUAL3", "vscreen-1920x1080"],
            ["xrandr", "--rmmode", "vscreen-1920x1080"],
        ]

    @patch("vscreen.core.xrandr.subprocess.run")
    def test_clear_output(self, mock_run):
        mock_run.return_value = completed([])

        XRandRBackend().clear_output("VIRTUAL2")

        assert mock_run.call_args[0][0] == ["xrandr", "--output", "VIRTUAL2", "--off"]

    @patch("vscreen.core.xrandr.subprocess.run")
    def test_nonzero_exit_raises_with_stderr(self, mock_run):
        mock_run.return_value = completed(
            [], stderr="X Error of failed request:  BadName (named color or font does not exist)", returncode=1
        )

        with pytest.raises(ExtensionError) as exc_info:
            XRandRBackend().clear_output("VIRTUAL1")

        error = exc_info.value
        assert error.returncode == 1
        assert "BadName" in error.stderr
        assert "returned error code 1" in error.message
        assert error.context["command"] == "xrandr --output VIRTUAL1 --off"

    @patch("vscreen.core.xrandr.subprocess.run")
    def test_missing_executable(self, mock_run):
        mock_run.side_effect = FileNotFoundError(2, "No such file or directory")

        with pytest.raises(ExtensionError) as exc_info:
            XRandRBackend(command="xrandr-missing").query_outputs()

        assert exc_info.value.code == ErrorCode.BACKEND_UNAVAILABLE

    @patch("vscreen.core.xrandr.subprocess.run")
    def test_unrunnable_executable(self, mock_run):
        mock_run.side_effect = PermissionError(13, "Permission denied")

        with pytest.raises(ExtensionError, match="Could not run xrandr") as exc_info:
            XRandRBackend().clear_output("VIRTUAL1")

        assert exc_info.value.code == ErrorCode.BACKEND_UNAVAILABLE

    @patch("vscreen.core.xrandr.subprocess.run")
    def test_unparseable_query(self, mock_run):
        mock_run.return_value = completed(["xrandr", "--query"], stdout=QUERY_GARBLED)

        with pytest.raises(ExtensionError) as exc_info:
            XRandRBackend().query_outputs()

        assert exc_info.value.code == ErrorCode.QUERY_PARSE_FAILED

    @patch("vscreen.core.xrandr.subprocess.run")
    def test_stderr_on_success_is_a_warning(self, mock_run, caplog):
        mock_run.return_value = completed([], stderr="warning: output VIRTUAL1 not found; ignoring")

        with caplog.at_level(logging.WARNING, logger="vscreen"):
            XRandRBackend().clear_output("VIRTUAL1")

        assert "did not report an error" in caplog.text

    @patch("vscreen.core.xrandr.subprocess.run")
    def test_calls_are_traced_at_debug(self, mock_run, caplog):
        mock_run.return_value = completed([])

        with caplog.at_level(logging.DEBUG, logger="vscreen"):
            XRandRBackend().clear_output("VIRTUAL4")

        assert "Subprocess call: xrandr --output VIRTUAL4 --off" in caplog.text
        assert "Return code: 0" in caplog.text
