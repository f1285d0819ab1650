"""Shell completion helpers for the vscreen CLI (argcomplete).

Provides custom completers for:
- Resolution ids and names
- Orientation tokens and aliases
- Slot numbers
- Output names for relative placement
"""

from typing import List

from ..core.catalog import list_resolutions
from ..core.config import load_config
from ..core.pool import OutputPool
from ..core.xrandr import XRandRBackend
from ..errors import VscreenError
from ..models.orientation import ALIASES, Orientation


def _filter(candidates: List[str], prefix: str) -> List[str]:
    if prefix:
        return [c for c in candidates if c.startswith(prefix)]
    return candidates


def complete_resolutions(prefix: str, **kwargs) -> List[str]:
    """Complete ``-r`` values: catalog ids and names.

    Args:
        prefix: Current prefix being typed

    Returns:
        Matching ids and names
    """
    candidates = []
    for spec in list_resolutions():
        candidates.append(str(spec.id))
        candidates.append(spec.name)
    return _filter(candidates, prefix)


def complete_orientations(prefix: str, **kwargs) -> List[str]:
    """Complete ``-o`` values: rotation names and their short aliases."""
    candidates = [o.value for o in Orientation] + list(ALIASES)
    return _filter(candidates, prefix)


def complete_output_names(prefix: str, **kwargs) -> List[str]:
    """Complete names of outputs the X server currently reports.

    Completion never fails: when xrandr is unavailable nothing is offered.
    """
    try:
        config = load_config()
        backend = XRandRBackend(config.xrandr_command, config.display)
        names = [output.name for output in backend.query_outputs()]
    except VscreenError:
        return []
    return _filter(sorted(names), prefix)


def complete_slot_numbers(prefix: str, **kwargs) -> List[str]:
    """Complete ``--output/--off/--change`` slot numbers."""
    try:
        config = load_config()
        pool = OutputPool(XRandRBackend(config.xrandr_command, config.display), config)
        size = pool.size
    except VscreenError:
        return []
    return _filter([str(i) for i in range(1, size + 1)], prefix)


__all__ = [
    'complete_resolutions',
    'complete_orientations',
    'complete_output_names',
    'complete_slot_numbers',
]
