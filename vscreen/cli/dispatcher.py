"""Command dispatcher: validate a parsed command line, then sequence it.

Validation happens in two passes, both before anything is mutated:

1. build_request() checks the arguments on their own: token formats,
   unknown ids/names/orientations and flag combinations.
2. The handlers check the arguments against the live display state
   (slot range, slot state, placement references) before registering a
   mode or touching an output.
"""

import logging
from contextlib import nullcontext
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ..core import catalog
from ..core.backend import DisplayBackend
from ..core.config import VscreenConfig
from ..core.layout import Direction, LayoutEngine, PlacementRequest, parse_position
from ..core.modes import ModeRegistry
from ..core.pool import OutputPool, parse_slot_id
from ..errors import ConflictError, ErrorCode, FormatError
from ..models.geometry import Geometry, Position, Size
from ..models.mode import PurgeResult
from ..models.orientation import Orientation, resolve_orientation
from ..models.resolution import ResolutionSpec
from ..models.slot import VirtualOutputSlot

logger = logging.getLogger("vscreen.dispatcher")


class Action(str, Enum):
    ACTIVATE = "output"
    CHANGE = "change"
    OFF = "off"
    OFF_ALL = "off-all"
    PURGE = "purge-modes"
    LIST = "list"
    RESOLUTIONS = "list-resolutions"

    @property
    def flag(self) -> str:
        return f"--{self.value}"

    @property
    def mutates(self) -> bool:
        return self not in (Action.LIST, Action.RESOLUTIONS)


# Relative placement flags, as argparse dests
RELATIVE_FLAGS = {
    "right_of": Direction.RIGHT_OF,
    "left_of": Direction.LEFT_OF,
    "above": Direction.ABOVE,
    "below": Direction.BELOW,
}


@dataclass
class CommandRequest:
    """A command line reduced to one validated action."""

    action: Optional[Action] = None
    target: Optional[int] = None
    resolution: Optional[ResolutionSpec] = None
    orientation: Optional[Orientation] = None
    placement: Optional[PlacementRequest] = None
    list_filter: str = "all"


@dataclass
class DispatchResult:
    """What a dispatched command did (or, under --dry-run, would do)."""

    action: Action
    message: str = ""
    slots: List[VirtualOutputSlot] = field(default_factory=list)
    purge: Optional[PurgeResult] = None
    resolutions: List[ResolutionSpec] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _selected_actions(args) -> List[Tuple[Action, object]]:
    candidates = [
        (Action.ACTIVATE, getattr(args, "output", None)),
        (Action.OFF, getattr(args, "off", None)),
        (Action.CHANGE, getattr(args, "change", None)),
        (Action.OFF_ALL, getattr(args, "off_all", False) or None),
        (Action.PURGE, getattr(args, "purge_modes", False) or None),
        (Action.LIST, getattr(args, "list", None)),
        (Action.RESOLUTIONS, getattr(args, "list_resolutions", False) or None),
    ]
    return [(action, value) for action, value in candidates if value is not None]


def _parse_resolution(args) -> Optional[ResolutionSpec]:
    token = getattr(args, "resolution", None)
    size = getattr(args, "size", None)

    by_catalog = catalog.resolve(token) if token is not None else None
    custom = catalog.parse_custom(size) if size is not None else None
    if by_catalog is not None and custom is not None:
        raise ConflictError(
            "Specify either -r or --size, not both",
            suggestion="Use -r for a catalog resolution or --size WxH for a custom one",
        )
    return by_catalog if by_catalog is not None else custom


def _parse_placement(args) -> Optional[PlacementRequest]:
    pos = getattr(args, "pos", None)
    relative = [
        (direction, getattr(args, dest))
        for dest, direction in RELATIVE_FLAGS.items()
        if getattr(args, dest, None) is not None
    ]
    if (pos is not None) + len(relative) > 1:
        raise ConflictError(
            "Only one placement option may be given",
            suggestion="Choose one of --pos, --right-of, --left-of, --above, --below",
        )
    if pos is not None:
        position = parse_position(pos)
        return PlacementRequest.absolute(position.x, position.y)
    if relative:
        direction, reference = relative[0]
        if not reference.strip():
            raise FormatError(
                f"--{direction.value} needs an output name",
                suggestion="Name an output such as eDP-1 or VIRTUAL1 (see xrandr --query)",
                context={"placement": direction.value},
            )
        return PlacementRequest.relative(direction, reference)
    return None


def build_request(args) -> CommandRequest:
    """Validate an argparse namespace into a CommandRequest.

    Values are checked before combinations, so ``-r 99`` without a target
    still reports the unknown id.

    Args:
        args: Parsed command line

    Returns:
        CommandRequest; its action is None when no action flag was given

    Raises:
        FormatError, NotFoundError: For malformed or unknown values
        ConflictError: For invalid flag combinations
    """
    resolution = _parse_resolution(args)
    orientation = None
    if getattr(args, "orientation", None) is not None:
        orientation = resolve_orientation(args.orientation)
    placement = _parse_placement(args)
    no_auto = getattr(args, "no_auto", False)

    selected = _selected_actions(args)
    if len(selected) > 1:
        flags = ", ".join(action.flag for action, _ in selected)
        raise ConflictError(
            f"Only one action per invocation (got {flags})",
            context={"actions": [action.value for action, _ in selected]},
        )

    if not selected:
        if resolution is not None:
            raise ConflictError(
                "-r/--size requires --output or --change",
                code=ErrorCode.MISSING_ARGUMENT,
            )
        if orientation is not None or placement is not None or no_auto:
            raise ConflictError(
                "Orientation and placement options require --output or --change",
                code=ErrorCode.MISSING_ARGUMENT,
            )
        return CommandRequest()

    action, value = selected[0]
    request = CommandRequest(action=action)

    if action in (Action.ACTIVATE, Action.CHANGE, Action.OFF):
        request.target = parse_slot_id(value)

    if action == Action.ACTIVATE:
        if resolution is None:
            raise ConflictError(
                "--output requires -r <id|name> or --size WxH",
                suggestion="e.g. vscreen --output 1 -r FHD",
                code=ErrorCode.MISSING_ARGUMENT,
            )
        request.resolution = resolution
        request.orientation = orientation
        if placement is not None:
            request.placement = placement
        elif no_auto:
            request.placement = PlacementRequest.disabled()
        else:
            request.placement = PlacementRequest.auto()

    elif action == Action.CHANGE:
        if resolution is None and orientation is None and placement is None:
            raise ConflictError(
                "--change requires at least one of -r, --size, -o, --pos or a relative placement",
                code=ErrorCode.MISSING_ARGUMENT,
            )
        if no_auto and placement is not None:
            raise ConflictError("--no-auto cannot be combined with an explicit placement on --change")
        request.resolution = resolution
        request.orientation = orientation
        request.placement = placement

    else:
        if resolution is not None or orientation is not None or placement is not None or no_auto:
            raise ConflictError(
                f"{action.flag} does not accept resolution, orientation or placement options"
            )
        if action == Action.LIST:
            request.list_filter = value

    logger.debug(f"Validated request: {request}")
    return request


class CommandDispatcher:
    """Sequences a validated request through the engine components."""

    def __init__(self, backend: DisplayBackend, config: VscreenConfig):
        self.backend = backend
        self.config = config
        self.pool = OutputPool(backend, config)
        self.modes = ModeRegistry(backend, config)
        self.layout = LayoutEngine(self.pool, backend, config.tile_after_physical)

    def dispatch(self, args) -> DispatchResult:
        """Validate and execute a parsed command line."""
        return self.execute(build_request(args))

    def execute(self, request: CommandRequest) -> DispatchResult:
        """Execute a validated request.

        Raises:
            ValidationError: If the request does not fit the live display state
            ExtensionError: If the backend fails
        """
        if request.action is None:
            raise ConflictError(
                "No action given",
                suggestion="See 'vscreen --help'",
                code=ErrorCode.MISSING_ARGUMENT,
            )
        handlers = {
            Action.ACTIVATE: self._activate,
            Action.CHANGE: self._change,
            Action.OFF: self._off,
            Action.OFF_ALL: self._off_all,
            Action.PURGE: self._purge,
            Action.LIST: self._list,
            Action.RESOLUTIONS: self._resolutions,
        }
        logger.info(f"Dispatching {request.action.flag}")
        return handlers[request.action](request)

    #################### handlers ####################

    def _activate(self, request: CommandRequest) -> DispatchResult:
        slot = self.pool.require_free(request.target)
        spec = request.resolution
        orientation = request.orientation or Orientation.NORMAL
        footprint = spec.size.transposed() if orientation.swaps_axes else spec.size

        position = self.layout.compute_position(request.placement, footprint, exclude=slot.index)
        warnings = self._overlap_warnings(slot.name, position, footprint, slot.index)
        with self.modes.reserved(spec) as mode:
            slot = self.pool.activate(slot.index, mode, position, orientation)

        return DispatchResult(
            action=Action.ACTIVATE,
            message=f"{slot.name} activated: {spec.label()} at {position} ({orientation.value})",
            slots=[slot],
            warnings=warnings,
        )

    def _change(self, request: CommandRequest) -> DispatchResult:
        current = self.pool.require_active(request.target)
        orientation = request.orientation or current.orientation
        size = request.resolution.size if request.resolution else current.size
        footprint = size.transposed() if orientation.swaps_axes else size

        position = None
        if request.placement is not None:
            position = self.layout.compute_position(request.placement, footprint, exclude=current.index)
        warnings = self._overlap_warnings(
            current.name, position or current.position, footprint, current.index
        )

        if request.resolution is not None:
            reservation = self.modes.reserved(request.resolution)
        else:
            reservation = nullcontext()
        with reservation as mode:
            slot = self.pool.change(
                current.index,
                mode=mode,
                orientation=request.orientation,
                position=position,
            )
        return DispatchResult(
            action=Action.CHANGE,
            message=f"{slot.name} changed: {slot.size} at {slot.position} ({slot.orientation.value})",
            slots=[slot],
            warnings=warnings,
        )

    def _overlap_warnings(self, name: str, position: Position, footprint: Size, index: int) -> List[str]:
        box = Geometry.from_parts(position, footprint)
        overlapped = self.layout.overlapping(box, exclude=index)
        if not overlapped:
            return []
        message = f"{name} at {box} overlaps {', '.join(overlapped)}"
        logger.debug(message)
        return [message]

    def _off(self, request: CommandRequest) -> DispatchResult:
        slot = self.pool.deactivate(request.target)
        return DispatchResult(action=Action.OFF, message=f"{slot.name} deactivated", slots=[slot])

    def _off_all(self, request: CommandRequest) -> DispatchResult:
        released = self.pool.deactivate_all()
        if released:
            message = f"Deactivated {len(released)} output(s): {', '.join(s.name for s in released)}"
        else:
            message = "No active virtual outputs"
        return DispatchResult(action=Action.OFF_ALL, message=message, slots=released)

    def _purge(self, request: CommandRequest) -> DispatchResult:
        result = self.modes.purge_all()
        message = f"Removed {result.removed_count} mode(s)"
        if result.skipped:
            message += f", skipped {len(result.skipped)} still in use"
        return DispatchResult(action=Action.PURGE, message=message, purge=result)

    def _list(self, request: CommandRequest) -> DispatchResult:
        listings = {
            "all": self.pool.list_all,
            "active": self.pool.list_active,
            "free": self.pool.list_free,
        }
        slots = listings[request.list_filter]()
        return DispatchResult(action=Action.LIST, slots=slots)

    def _resolutions(self, request: CommandRequest) -> DispatchResult:
        return DispatchResult(action=Action.RESOLUTIONS, resolutions=catalog.list_resolutions())
