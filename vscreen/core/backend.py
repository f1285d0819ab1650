"""Display backend capability consumed by the engine.

The live display server is the only source of truth: callers query it at
every decision point and never cache results across steps.
"""

from typing import List, Optional, Protocol

from ..models.geometry import Position
from ..models.mode import ModeInfo, Modeline
from ..models.orientation import Orientation
from ..models.slot import OutputInfo


class DisplayBackend(Protocol):
    """Output-configuration capability of the windowing environment.

    Every method may raise ExtensionError.
    """

    def query_outputs(self) -> List[OutputInfo]:
        """All outputs, connected or not, with current geometry."""
        ...

    def query_modes(self) -> List[ModeInfo]:
        """Every mode known to the server, attached to an output or not."""
        ...

    def create_mode(self, name: str, modeline: Modeline) -> None:
        ...

    def remove_mode(self, name: str) -> None:
        ...

    def set_output(
        self,
        name: str,
        mode: str,
        rotation: Orientation,
        position: Position,
    ) -> None:
        ...

    def clear_output(self, name: str) -> None:
        ...


def find_output(backend: DisplayBackend, name: str) -> Optional[OutputInfo]:
    """Fresh lookup of a single output by name."""
    for output in backend.query_outputs():
        if output.name == name:
            return output
    return None
