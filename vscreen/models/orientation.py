"""Output orientation: tagged enumeration plus short alias table."""

from enum import Enum
from typing import Dict, Optional

from ..errors import NotFoundError


class Orientation(str, Enum):
    """Rotation applied to a virtual output.

    Values are the tokens xrandr accepts for ``--rotate``.
    """

    NORMAL = "normal"
    RIGHT = "right"
    LEFT = "left"
    INVERTED = "inverted"

    @property
    def degrees(self) -> int:
        """Clockwise rotation in degrees."""
        return _DEGREES[self]

    @property
    def swaps_axes(self) -> bool:
        """True if the output's footprint is the mode transposed."""
        return self in (Orientation.RIGHT, Orientation.LEFT)

    @property
    def alias(self) -> str:
        return _ALIAS_BY_ORIENTATION[self]

    @classmethod
    def from_str(cls, value: str) -> "Orientation":
        """Resolve a full token or short alias.

        Both full tokens and aliases are matched exactly.

        Raises:
            NotFoundError: If value is neither a token nor an alias
        """
        if value in ALIASES:
            return ALIASES[value]
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(f"{o.value}/{o.alias}" for o in cls)
            raise NotFoundError(
                f"Invalid orientation '{value}'",
                suggestion=f"Use one of: {valid}",
                context={"orientation": value},
            )


_DEGREES = {
    Orientation.NORMAL: 0,
    Orientation.RIGHT: 90,
    Orientation.INVERTED: 180,
    Orientation.LEFT: 270,
}

# L = landscape, PR/PL = portrait right/left, LF = landscape flipped
ALIASES: Dict[str, Orientation] = {
    "L": Orientation.NORMAL,
    "PR": Orientation.RIGHT,
    "PL": Orientation.LEFT,
    "LF": Orientation.INVERTED,
}

_ALIAS_BY_ORIENTATION = {value: key for key, value in ALIASES.items()}


def resolve_orientation(token: Optional[str]) -> Orientation:
    """Resolve an optional ``-o`` argument; omission means normal."""
    if token is None:
        return Orientation.NORMAL
    return Orientation.from_str(token)
