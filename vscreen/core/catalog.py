"""Resolution catalog: predefined sizes by id and name, plus custom ``WxH``."""

import logging
import re
from typing import Dict, List, Union

from ..errors import FormatError, NotFoundError
from ..models.resolution import ResolutionSpec

logger = logging.getLogger("vscreen.catalog")

SIZE_PATTERN = re.compile(r"([0-9]+)x([0-9]+)")
ID_PATTERN = re.compile(r"[0-9]+")

# Order matters: ids are positional and printed in this order.
CATALOG: List[ResolutionSpec] = [
    ResolutionSpec(id=1, name="FHD", width=1920, height=1080),
    ResolutionSpec(id=2, name="HD+", width=1600, height=900),
    ResolutionSpec(id=3, name="HD", width=1366, height=768),
    ResolutionSpec(id=4, name="HD10", width=1280, height=800),
    ResolutionSpec(id=5, name="HD+10", width=1680, height=1050),
    ResolutionSpec(id=6, name="SD", width=1024, height=768),
]

_BY_ID: Dict[int, ResolutionSpec] = {spec.id: spec for spec in CATALOG}
_BY_NAME: Dict[str, ResolutionSpec] = {spec.name: spec for spec in CATALOG}


def list_resolutions() -> List[ResolutionSpec]:
    """All catalog entries in id order."""
    return list(CATALOG)


def resolve_by_id(resolution_id: Union[int, str]) -> ResolutionSpec:
    """Look up a catalog entry by numeric id.

    Raises:
        NotFoundError: If the id is not in the catalog
    """
    try:
        key = int(resolution_id)
    except (TypeError, ValueError):
        key = None
    if key not in _BY_ID:
        raise NotFoundError(
            f"Invalid resolution ID: {resolution_id}",
            suggestion=f"Use an id between 1 and {len(CATALOG)} (see --list-resolutions)",
            context={"resolution": resolution_id},
        )
    return _BY_ID[key]


def resolve_by_name(name: str) -> ResolutionSpec:
    """Look up a catalog entry by mnemonic name (case-sensitive).

    Raises:
        NotFoundError: If the name is not in the catalog
    """
    if name not in _BY_NAME:
        raise NotFoundError(
            f"Invalid resolution name: {name}",
            suggestion=f"Use one of: {', '.join(_BY_NAME)}",
            context={"resolution": name},
        )
    return _BY_NAME[name]


def resolve(token: str) -> ResolutionSpec:
    """Resolve a ``-r`` argument: all digits is an id, anything else a name."""
    if ID_PATTERN.fullmatch(token):
        return resolve_by_id(token)
    return resolve_by_name(token)


def parse_custom(text: str) -> ResolutionSpec:
    """Parse a custom ``WIDTHxHEIGHT`` size.

    Args:
        text: Size token, e.g. ``2560x1440``

    Returns:
        Ephemeral ResolutionSpec (not added to the catalog)

    Raises:
        FormatError: If text is not two positive integers joined by ``x``
    """
    match = SIZE_PATTERN.fullmatch(text or "")
    if not match or int(match.group(1)) <= 0 or int(match.group(2)) <= 0:
        raise FormatError(
            f"Invalid size format: '{text}'",
            suggestion="Use WIDTHxHEIGHT with positive integers, e.g. 1920x1080",
            context={"size": text},
        )
    width, height = int(match.group(1)), int(match.group(2))
    logger.debug(f"Parsed custom size {width}x{height}")
    return ResolutionSpec(width=width, height=height)
