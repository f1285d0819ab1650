"""Screen geometry primitives.

Positions and sizes follow xrandr conventions: sizes print as ``WxH`` and
geometries as ``WxH+X+Y`` with the origin at the top-left of the screen.
"""

import re
from typing import Tuple

from pydantic import BaseModel, Field


GEOMETRY_PATTERN = re.compile(r"^(\d+)x(\d+)([+-]\d+)([+-]\d+)$")


class Size(BaseModel):
    """Width and height in pixels."""

    width: int = Field(..., gt=0, description="Width in pixels")
    height: int = Field(..., gt=0, description="Height in pixels")

    model_config = {"frozen": True}

    def transposed(self) -> "Size":
        """Return the size with width and height swapped."""
        return Size(width=self.height, height=self.width)

    def as_tuple(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


class Position(BaseModel):
    """Top-left corner of an output on the screen."""

    x: int = Field(0, description="Horizontal offset in pixels")
    y: int = Field(0, description="Vertical offset in pixels")

    model_config = {"frozen": True}

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def __str__(self) -> str:
        # xrandr --pos syntax
        return f"{self.x}x{self.y}"


class Geometry(BaseModel):
    """Bounding box of an output: position plus (rotated) size."""

    x: int = 0
    y: int = 0
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    model_config = {"frozen": True}

    @classmethod
    def from_parts(cls, position: Position, size: Size) -> "Geometry":
        return cls(x=position.x, y=position.y, width=size.width, height=size.height)

    @classmethod
    def parse(cls, text: str) -> "Geometry":
        """Parse an xrandr geometry token such as ``1920x1080+1920+0``.

        Raises:
            ValueError: If the token is not a geometry
        """
        match = GEOMETRY_PATTERN.match(text.strip())
        if not match:
            raise ValueError(f"Not a geometry: {text!r}")
        width, height, x, y = match.groups()
        return cls(x=int(x), y=int(y), width=int(width), height=int(height))

    @property
    def position(self) -> Position:
        return Position(x=self.x, y=self.y)

    @property
    def size(self) -> Size:
        return Size(width=self.width, height=self.height)

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def overlaps(self, other: "Geometry") -> bool:
        """True if the two boxes share any pixel (touching edges do not count)."""
        return (
            self.x < other.right
            and other.x < self.right
            and self.y < other.bottom
            and other.y < self.bottom
        )

    def __str__(self) -> str:
        return f"{self.width}x{self.height}{self.x:+d}{self.y:+d}"
