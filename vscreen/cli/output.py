"""Output formatting utilities for CLI commands.

Provides both rich formatted output and machine-readable JSON output
(--json) for listings, purges and dry runs.
"""

import json
import sys
from enum import Enum
from typing import Any, Dict, List, Optional

from ..models.mode import PurgeResult
from ..models.resolution import ResolutionSpec
from ..models.slot import VirtualOutputSlot


class OutputFormatter:
    """Format output as either rich text or JSON.

    Examples:
        >>> fmt = OutputFormatter(json_mode=False)
        >>> fmt.print_success("VIRTUAL1 activated")
        ✓ VIRTUAL1 activated

        >>> fmt = OutputFormatter(json_mode=True)
        >>> fmt.print_success("VIRTUAL1 activated")
        >>> fmt.output()
        {"status": "success", "message": "VIRTUAL1 activated"}
    """

    def __init__(self, json_mode: bool = False):
        """Initialize output formatter.

        Args:
            json_mode: If True, output JSON instead of rich text
        """
        self.json_mode = json_mode
        self._json_result: Dict[str, Any] = {}

    def set_result(self, **kwargs: Any) -> None:
        """Set JSON result fields."""
        self._json_result.update(kwargs)

    def print_success(self, message: str) -> None:
        if self.json_mode:
            self.set_result(status="success", message=message)
        else:
            from .commands import print_success
            print_success(message)

    def print_error(self, message: str, remediation: Optional[str] = None) -> None:
        """Print error message.

        Args:
            message: Error message
            remediation: Optional remediation steps
        """
        if self.json_mode:
            result = {"status": "error", "message": message}
            if remediation:
                result["remediation"] = remediation
            self.set_result(**result)
        else:
            if remediation:
                from .commands import print_error_with_remediation
                print_error_with_remediation(message, remediation)
            else:
                from .commands import print_error
                print_error(message)

    def print_info(self, message: str) -> None:
        # Info messages are not part of the JSON document
        if not self.json_mode:
            from .commands import print_info
            print_info(message)

    def print_warning(self, message: str) -> None:
        if self.json_mode:
            self._json_result.setdefault("warnings", []).append(message)
        else:
            from .commands import print_warning
            print_warning(message)

    def output(self, data: Optional[Dict[str, Any]] = None, file=None) -> None:
        """Output final result.

        In JSON mode, prints the accumulated result as one document.
        In rich mode, does nothing (output already printed).

        Args:
            data: Optional data to merge into JSON result
            file: Output file (default: stdout)
        """
        if self.json_mode:
            if file is None:
                file = sys.stdout
            if data:
                self._json_result.update(data)
            print(json.dumps(self._json_result, indent=2, cls=VscreenJSONEncoder), file=file)


class VscreenJSONEncoder(json.JSONEncoder):
    """JSON encoder for vscreen models.

    Handles pydantic models, enums and objects with ``to_dict()``.
    """

    def default(self, obj: Any) -> Any:
        if hasattr(obj, "model_dump"):
            return obj.model_dump(mode="json")
        elif isinstance(obj, Enum):
            return obj.value
        elif hasattr(obj, "to_dict"):
            return obj.to_dict()
        return super().default(obj)


def format_slot_json(slot: VirtualOutputSlot) -> Dict[str, Any]:
    """Format a single slot as JSON.

    Args:
        slot: Slot to format

    Returns:
        JSON-serializable dictionary
    """
    geometry = slot.geometry
    return {
        "index": slot.index,
        "name": slot.name,
        "state": slot.state.value,
        "mode": slot.mode,
        "size": str(slot.size) if slot.size else None,
        "position": {"x": slot.position.x, "y": slot.position.y} if slot.position else None,
        "orientation": slot.orientation.value if slot.orientation else None,
        "geometry": str(geometry) if geometry else None,
    }


def format_slot_list_json(slots: List[VirtualOutputSlot], which: str = "all") -> Dict[str, Any]:
    """Format a pool listing as JSON.

    Args:
        slots: Slots in the listing
        which: Partition that was listed (all, active, free)

    Returns:
        JSON-serializable dictionary
    """
    return {
        "list": which,
        "total": len(slots),
        "active": sum(1 for s in slots if s.is_active),
        "slots": [format_slot_json(s) for s in slots],
    }


def format_purge_json(result: PurgeResult) -> Dict[str, Any]:
    return {
        "removed": result.removed,
        "skipped": result.skipped,
        "removed_count": result.removed_count,
    }


def format_resolution_list_json(specs: List[ResolutionSpec]) -> Dict[str, Any]:
    return {
        "resolutions": [
            {"id": s.id, "name": s.name, "width": s.width, "height": s.height}
            for s in specs
        ]
    }
