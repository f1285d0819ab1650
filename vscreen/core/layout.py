"""Layout engine: where a virtual output goes on the screen.

Placement is one of absolute, relative to another output, automatic
tiling (append to the right of the rightmost active output) or disabled
(origin). Every decision reads the current layout from the backend.
"""

import logging
import re
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, model_validator

from ..errors import FormatError, NotFoundError
from ..models.geometry import Geometry, Position, Size
from .backend import DisplayBackend
from .pool import OutputPool

logger = logging.getLogger("vscreen.layout")

POSITION_PATTERN = re.compile(r"(-?[0-9]+)x(-?[0-9]+)")


class PlacementKind(str, Enum):
    ABSOLUTE = "absolute"
    RELATIVE = "relative"
    AUTO = "auto"
    DISABLED = "disabled"


class Direction(str, Enum):
    """Relative placement, named after the CLI flag."""

    RIGHT_OF = "right-of"
    LEFT_OF = "left-of"
    ABOVE = "above"
    BELOW = "below"


class PlacementRequest(BaseModel):
    """How the caller wants an output placed."""

    kind: PlacementKind = PlacementKind.AUTO
    position: Optional[Position] = None
    direction: Optional[Direction] = None
    reference: Optional[str] = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_fields(self) -> "PlacementRequest":
        if self.kind == PlacementKind.ABSOLUTE and self.position is None:
            raise ValueError("absolute placement requires a position")
        if self.kind == PlacementKind.RELATIVE and (self.direction is None or not self.reference):
            raise ValueError("relative placement requires a direction and a reference output")
        return self

    @classmethod
    def absolute(cls, x: int, y: int) -> "PlacementRequest":
        return cls(kind=PlacementKind.ABSOLUTE, position=Position(x=x, y=y))

    @classmethod
    def relative(cls, direction: Direction, reference: str) -> "PlacementRequest":
        return cls(kind=PlacementKind.RELATIVE, direction=direction, reference=reference)

    @classmethod
    def auto(cls) -> "PlacementRequest":
        return cls(kind=PlacementKind.AUTO)

    @classmethod
    def disabled(cls) -> "PlacementRequest":
        return cls(kind=PlacementKind.DISABLED)

    @property
    def is_explicit(self) -> bool:
        return self.kind in (PlacementKind.ABSOLUTE, PlacementKind.RELATIVE)

    def describe(self) -> str:
        if self.kind == PlacementKind.ABSOLUTE:
            return f"at {self.position}"
        if self.kind == PlacementKind.RELATIVE:
            return f"{self.direction.value} {self.reference}"
        return self.kind.value


def parse_position(text: str) -> Position:
    """Parse a ``--pos`` value of the form ``<int>x<int>``.

    Raises:
        FormatError: If text does not match
    """
    match = POSITION_PATTERN.fullmatch(str(text))
    if not match:
        raise FormatError(
            f"Invalid position format: '{text}'",
            suggestion="Use XxY, e.g. --pos 1920x0",
            context={"position": text},
        )
    return Position(x=int(match.group(1)), y=int(match.group(2)))


def offset_from(reference: Geometry, direction: Direction, size: Size) -> Position:
    """Position that puts a box of size on the given side of reference."""
    if direction == Direction.RIGHT_OF:
        return Position(x=reference.right, y=reference.y)
    if direction == Direction.LEFT_OF:
        return Position(x=reference.x - size.width, y=reference.y)
    if direction == Direction.ABOVE:
        return Position(x=reference.x, y=reference.y - size.height)
    return Position(x=reference.x, y=reference.bottom)


class LayoutEngine:
    """Computes positions against the live layout."""

    def __init__(self, pool: OutputPool, backend: DisplayBackend, tile_after_physical: bool = False):
        self.pool = pool
        self.backend = backend
        self.tile_after_physical = tile_after_physical

    def occupied(self, exclude: Optional[int] = None) -> List[Tuple[str, Geometry]]:
        """Bounding boxes auto-placement must avoid, in tie-break order.

        Active physical outputs come first when tile_after_physical is set,
        followed by active slots in index order.

        Args:
            exclude: Slot index to leave out (the one being placed)
        """
        boxes: List[Tuple[str, Geometry]] = []
        slot_names = set()
        for slot in self.pool.list_all():
            slot_names.add(slot.name)
            if slot.index != exclude and slot.geometry is not None:
                boxes.append((slot.name, slot.geometry))

        if self.tile_after_physical:
            physical = [
                (output.name, output.geometry)
                for output in self.backend.query_outputs()
                if output.active and output.geometry is not None and output.name not in slot_names
            ]
            boxes = physical + boxes
        return boxes

    def overlapping(self, box: Geometry, exclude: Optional[int] = None) -> List[str]:
        """Names of occupied outputs (see occupied()) that share pixels with box."""
        return [name for name, other in self.occupied(exclude) if box.overlaps(other)]

    def reference_geometry(self, name: str) -> Geometry:
        """Current bounding box of a named output.

        Raises:
            NotFoundError: If the output does not exist or is not active
        """
        slot = self.pool.find_by_name(name)
        if slot is not None:
            if slot.geometry is None:
                raise NotFoundError(
                    f"Reference output {name} is not active",
                    suggestion=f"Activate {name} first or choose another reference",
                    context={"reference": name},
                )
            return slot.geometry

        for output in self.backend.query_outputs():
            if output.name == name:
                if not output.active or output.geometry is None:
                    raise NotFoundError(
                        f"Reference output {name} is not active",
                        context={"reference": name},
                    )
                return output.geometry

        raise NotFoundError(
            f"Reference output not found: {name}",
            suggestion="Run 'xrandr --query' to list output names",
            context={"reference": name},
        )

    def compute_position(
        self,
        request: PlacementRequest,
        size: Size,
        exclude: Optional[int] = None,
    ) -> Position:
        """Resolve a placement request to a top-left position.

        Args:
            request: Placement request
            size: On-screen footprint of the output being placed
            exclude: Slot index being placed, ignored in the layout scan

        Returns:
            Position for the output

        Raises:
            NotFoundError: If a relative reference is unknown or inactive
        """
        if request.kind == PlacementKind.ABSOLUTE:
            position = request.position
        elif request.kind == PlacementKind.RELATIVE:
            reference = self.reference_geometry(request.reference)
            position = offset_from(reference, request.direction, size)
        elif request.kind == PlacementKind.DISABLED:
            position = Position()
        else:
            position = self._auto(exclude)

        logger.debug(f"Placement {request.describe()} for {size} -> {position}")
        return position

    def _auto(self, exclude: Optional[int]) -> Position:
        rightmost: Optional[Tuple[str, Geometry]] = None
        for name, box in self.occupied(exclude):
            # strict comparison keeps the earliest entry on ties
            if rightmost is None or box.right > rightmost[1].right:
                rightmost = (name, box)

        if rightmost is None:
            return Position()
        logger.debug(f"Auto-tiling right of {rightmost[0]} ({rightmost[1]})")
        return Position(x=rightmost[1].right, y=rightmost[1].y)
