"""Virtual output slots and backend output snapshots."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .geometry import Geometry, Position, Size
from .orientation import Orientation


class SlotState(str, Enum):
    """Lifecycle state of a virtual output slot."""

    FREE = "free"
    ACTIVE = "active"


class OutputInfo(BaseModel):
    """One output as reported by the display backend.

    ``geometry`` is the on-screen footprint (already rotated) and is only set
    for active outputs. ``mode`` is the name of the current mode when the
    backend can tell.
    """

    name: str = Field(..., description="Output identifier (VIRTUAL1, eDP-1, ...)")
    connected: bool = False
    active: bool = False
    primary: bool = False
    geometry: Optional[Geometry] = None
    rotation: Orientation = Orientation.NORMAL
    mode: Optional[str] = None
    modes: List[str] = Field(default_factory=list, description="Modes attached to this output")


class VirtualOutputSlot(BaseModel):
    """A single addressable virtual output.

    A slot's mode, position and orientation are set iff it is active.
    """

    index: int = Field(..., ge=1, description="Stable index within the pool")
    name: str = Field(..., description="System output name, e.g. VIRTUAL1")
    state: SlotState = SlotState.FREE
    mode: Optional[str] = None
    size: Optional[Size] = Field(None, description="Unrotated mode size")
    position: Optional[Position] = None
    orientation: Optional[Orientation] = None

    @property
    def is_active(self) -> bool:
        return self.state == SlotState.ACTIVE

    @property
    def footprint(self) -> Optional[Size]:
        """Size the slot occupies on screen after rotation."""
        if self.size is None:
            return None
        if self.orientation is not None and self.orientation.swaps_axes:
            return self.size.transposed()
        return self.size

    @property
    def geometry(self) -> Optional[Geometry]:
        if not self.is_active or self.position is None or self.footprint is None:
            return None
        return Geometry.from_parts(self.position, self.footprint)

    def cleared(self) -> "VirtualOutputSlot":
        """Copy of this slot in the free state."""
        return VirtualOutputSlot(index=self.index, name=self.name)

    @classmethod
    def from_output(cls, index: int, name: str, output: Optional[OutputInfo]) -> "VirtualOutputSlot":
        """Build a slot from the backend's view of its output."""
        if output is None or not output.active or output.geometry is None:
            return cls(index=index, name=name)

        rotation = output.rotation
        footprint = output.geometry.size
        size = footprint.transposed() if rotation.swaps_axes else footprint
        return cls(
            index=index,
            name=name,
            state=SlotState.ACTIVE,
            mode=output.mode or str(size),
            size=size,
            position=output.geometry.position,
            orientation=rotation,
        )
