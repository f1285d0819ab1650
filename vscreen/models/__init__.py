"""Data models for vscreen.

- geometry: Size, Position, Geometry
- orientation: Orientation enum with alias table
- resolution: ResolutionSpec
- mode: Modeline, ModeInfo, ModeRecord, PurgeResult
- slot: SlotState, OutputInfo, VirtualOutputSlot
"""

from .geometry import Geometry, Position, Size
from .mode import ModeInfo, ModeRecord, Modeline, PurgeResult
from .orientation import ALIASES, Orientation, resolve_orientation
from .resolution import ResolutionSpec
from .slot import OutputInfo, SlotState, VirtualOutputSlot

__all__ = [
    "ALIASES",
    "Geometry",
    "ModeInfo",
    "ModeRecord",
    "Modeline",
    "Orientation",
    "OutputInfo",
    "Position",
    "PurgeResult",
    "ResolutionSpec",
    "Size",
    "SlotState",
    "VirtualOutputSlot",
    "resolve_orientation",
]
