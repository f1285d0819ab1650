"""Tests for JSON and rich output formatting."""

import json

from rich.console import Console

from vscreen.cli.formatters import format_purge_table, format_resolution_table, format_slot_table
from vscreen.cli.output import (
    OutputFormatter,
    format_purge_json,
    format_resolution_list_json,
    format_slot_json,
    format_slot_list_json,
)
from vscreen.core.catalog import list_resolutions
from vscreen.errors import NotActiveError
from vscreen.models import Orientation, Position, PurgeResult, Size, SlotState, VirtualOutputSlot


def active_slot():
    return VirtualOutputSlot(
        index=2,
        name="VIRTUAL2",
        state=SlotState.ACTIVE,
        mode="vscreen-1600x900",
        size=Size(width=1600, height=900),
        position=Position(x=1920, y=0),
        orientation=Orientation.LEFT,
    )


def render(table) -> str:
    console = Console(width=120, record=True)
    console.print(table)
    return console.export_text()


class TestOutputFormatter:

    def test_json_mode_collects_single_document(self, capsys):
        fmt = OutputFormatter(json_mode=True)
        fmt.print_info("not part of the document")
        fmt.print_success("VIRTUAL1 activated")
        fmt.output({"slots": []})

        data = json.loads(capsys.readouterr().out)
        assert data == {"status": "success", "message": "VIRTUAL1 activated", "slots": []}

    def test_json_error_with_remediation(self, capsys):
        fmt = OutputFormatter(json_mode=True)
        fmt.print_error("VIRTUAL3 is not active", "Activate it first")
        fmt.output()

        data = json.loads(capsys.readouterr().out)
        assert data["status"] == "error"
        assert data["remediation"] == "Activate it first"

    def test_text_mode_prints_immediately(self, capsys):
        fmt = OutputFormatter(json_mode=False)
        fmt.print_success("VIRTUAL1 activated")
        fmt.print_error("bad", "fix it")
        fmt.output()

        captured = capsys.readouterr()
        assert "✓" in captured.out and "VIRTUAL1 activated" in captured.out
        assert "Error:" in captured.err and "Remediation:" in captured.err

    def test_json_warnings_accumulate(self, capsys):
        fmt = OutputFormatter(json_mode=True)
        fmt.print_warning("VIRTUAL2 at 1024x768+0+0 overlaps VIRTUAL1")
        fmt.print_warning("VIRTUAL3 at 1024x768+0+0 overlaps VIRTUAL1")
        fmt.output()

        data = json.loads(capsys.readouterr().out)
        assert len(data["warnings"]) == 2

    def test_encoder_handles_models_and_errors(self, capsys):
        fmt = OutputFormatter(json_mode=True)
        fmt.output({"slot": active_slot(), "error": NotActiveError("VIRTUAL3")})

        data = json.loads(capsys.readouterr().out)
        assert data["slot"]["orientation"] == "left"
        assert data["error"]["code"] == 1101


class TestJsonFormatters:

    def test_slot_json(self):
        data = format_slot_json(active_slot())

        assert data["state"] == "active"
        assert data["size"] == "1600x900"
        assert data["position"] == {"x": 1920, "y": 0}
        assert data["geometry"] == "900x1600+1920+0"

    def test_free_slot_json(self):
        data = format_slot_json(VirtualOutputSlot(index=1, name="VIRTUAL1"))

        assert data["state"] == "free"
        assert data["mode"] is None and data["geometry"] is None

    def test_slot_list_json(self):
        data = format_slot_list_json([active_slot(), VirtualOutputSlot(index=1, name="VIRTUAL1")], "all")

        assert data["total"] == 2
        assert data["active"] == 1

    def test_purge_json(self):
        data = format_purge_json(PurgeResult(removed=["vscreen-800x600"], skipped=["vscreen-1920x1080"]))
        assert data["removed_count"] == 1

    def test_resolution_list_json(self):
        data = format_resolution_list_json(list_resolutions())
        assert data["resolutions"][0] == {"id": 1, "name": "FHD", "width": 1920, "height": 1080}


class TestRichTables:

    def test_slot_table(self):
        text = render(format_slot_table([VirtualOutputSlot(index=1, name="VIRTUAL1"), active_slot()]))

        assert "VIRTUAL1" in text and "free" in text
        assert "900x1600+1920+0" in text and "left" in text

    def test_resolution_table(self):
        text = render(format_resolution_table(list_resolutions()))

        assert "HD+10" in text
        assert "1680x1050" in text

    def test_purge_table(self):
        text = render(format_purge_table(PurgeResult(removed=["vscreen-800x600"], skipped=["vscreen-1920x1080"])))

        assert "removed" in text
        assert "skipped (in use)" in text
