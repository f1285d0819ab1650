"""Display backend driving the ``xrandr`` command-line client.

Queries parse ``xrandr --query``; mutations map one-to-one onto
``--newmode``/``--addmode``/``--delmode``/``--rmmode`` and
``--output NAME --mode/--rotate/--pos`` or ``--off``.
"""

import logging
import os
import re
import subprocess
from typing import Dict, List, Optional, Tuple

from ..cli.logging_config import log_subprocess_call
from ..errors import ErrorCode, ExtensionError
from ..models.geometry import GEOMETRY_PATTERN, Geometry, Position
from ..models.mode import ModeInfo, Modeline
from ..models.orientation import Orientation
from ..models.slot import OutputInfo
from .backend import find_output

logger = logging.getLogger("vscreen.xrandr")

ROTATIONS = {o.value for o in Orientation}

# "  vscreen-1920x1080 (0x4a) 173.000MHz -HSync +VSync"
DETAILED_MODE = re.compile(r"^\s+(\S+)\s+\((0x[0-9a-fA-F]+)\)\s+[\d.]+MHz")
# "        h: width  1920 start 2048 ..." / "        v: height 1080 start ..."
TIMING_LINE = re.compile(r"^\s+([hv]):\s+(?:width|height)\s+(\d+)")
# "   1920x1080     60.02*+  59.93"
MODE_ENTRY = re.compile(r"^\s+(\S+)(.*)$")
SIZE_IN_NAME = re.compile(r"(\d+)x(\d+)")


def parse_query(text: str) -> Tuple[List[OutputInfo], List[ModeInfo]]:
    """Parse ``xrandr --query`` output.

    Args:
        text: Raw stdout of xrandr

    Returns:
        (outputs, modes) where modes holds every distinct mode name seen,
        whether attached to an output or listed as unassociated

    Raises:
        ValueError: If an output header cannot be parsed
    """
    outputs: List[OutputInfo] = []
    modes: Dict[str, ModeInfo] = {}
    current: Optional[dict] = None
    pending: Optional[dict] = None  # detailed mode waiting for its h:/v: lines

    def flush_output():
        if current is not None:
            outputs.append(OutputInfo(**current))

    for line in text.splitlines():
        if not line.strip() or line.startswith("Screen "):
            continue

        if not line[0].isspace():
            flush_output()
            current = _parse_header(line)
            pending = None
            continue

        timing = TIMING_LINE.match(line)
        if timing:
            if pending is not None:
                pending["width" if timing.group(1) == "h" else "height"] = int(timing.group(2))
                if "width" in pending and "height" in pending:
                    modes.setdefault(pending["name"], ModeInfo(**pending))
                    pending = None
            continue

        detailed = DETAILED_MODE.match(line)
        if detailed:
            pending = {"name": detailed.group(1)}
            continue

        entry = MODE_ENTRY.match(line)
        if entry and current is not None:
            name, rest = entry.group(1), entry.group(2)
            current["modes"].append(name)
            if "*" in rest:
                current["mode"] = name
            size = SIZE_IN_NAME.search(name)
            if size:
                modes.setdefault(
                    name, ModeInfo(name=name, width=int(size.group(1)), height=int(size.group(2)))
                )

    flush_output()
    return outputs, list(modes.values())


def _parse_header(line: str) -> dict:
    """Parse an output header such as
    ``VIRTUAL2 connected 1600x900+1920+0 right (normal left ...) 0mm x 0mm``.
    """
    line = line.replace("unknown connection", "unknown-connection")
    # Everything from "(" on lists supported rotations, not the current one
    head = line.split("(")[0].split()
    if len(head) < 2 or head[1] not in ("connected", "disconnected", "unknown-connection"):
        raise ValueError(f"Unrecognized xrandr output line: {line!r}")

    info = {
        "name": head[0],
        "connected": head[1] != "disconnected",
        "primary": "primary" in head,
        "active": False,
        "geometry": None,
        "rotation": Orientation.NORMAL,
        "mode": None,
        "modes": [],
    }
    for token in head[2:]:
        if GEOMETRY_PATTERN.match(token):
            info["geometry"] = Geometry.parse(token)
            info["active"] = True
        elif token in ROTATIONS and info["active"]:
            info["rotation"] = Orientation(token)
    return info


class XRandRBackend:
    """DisplayBackend implementation over the xrandr CLI."""

    def __init__(self, command: str = "xrandr", display: Optional[str] = None):
        """Create a backend.

        Args:
            command: xrandr executable
            display: X display to target (default: $DISPLAY)
        """
        self.command = command
        self.environ = dict(os.environ)
        if display:
            self.environ["DISPLAY"] = display

    #################### calling xrandr ####################

    def _run(self, *args: str) -> str:
        cmd = [self.command, *args]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, env=self.environ)
        except OSError as e:
            raise ExtensionError(
                f"Could not run {self.command}: {e}",
                command=cmd,
                code=ErrorCode.BACKEND_UNAVAILABLE,
            )

        log_subprocess_call(cmd, result, logger)

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise ExtensionError(
                f"{self.command} returned error code {result.returncode}: {stderr or 'no output'}",
                command=cmd,
                returncode=result.returncode,
                stderr=stderr,
            )
        if result.stderr:
            logger.warning(
                f"{self.command} wrote to stderr, but did not report an error "
                f"(Message was: {result.stderr.strip()!r})"
            )
        return result.stdout

    #################### queries ####################

    def _query(self) -> Tuple[List[OutputInfo], List[ModeInfo]]:
        text = self._run("--query")
        try:
            return parse_query(text)
        except ValueError as e:
            raise ExtensionError(
                f"Could not parse xrandr output: {e}",
                command=[self.command, "--query"],
                code=ErrorCode.QUERY_PARSE_FAILED,
            )

    def query_outputs(self) -> List[OutputInfo]:
        outputs, _ = self._query()
        logger.debug(f"Queried {len(outputs)} output(s), {sum(o.active for o in outputs)} active")
        return outputs

    def query_modes(self) -> List[ModeInfo]:
        _, modes = self._query()
        return modes

    #################### mutations ####################

    def create_mode(self, name: str, modeline: Modeline) -> None:
        logger.info(f"Creating mode {name}: {modeline}")
        self._run("--newmode", name, *modeline.to_args())

    def remove_mode(self, name: str) -> None:
        """Detach the mode from every output that lists it, then delete it."""
        for output in self.query_outputs():
            if name in output.modes:
                logger.debug(f"Detaching mode {name} from {output.name}")
                self._run("--delmode", output.name, name)
        logger.info(f"Removing mode {name}")
        self._run("--rmmode", name)

    def set_output(
        self,
        name: str,
        mode: str,
        rotation: Orientation,
        position: Position,
    ) -> None:
        """Attach the mode if needed and configure the output."""
        output = find_output(self, name)
        if output is None:
            raise ExtensionError(
                f"Output {name} does not exist on this display",
                command=[self.command, "--output", name],
            )
        if mode not in output.modes:
            logger.debug(f"Attaching mode {mode} to {name}")
            self._run("--addmode", name, mode)

        logger.info(f"Configuring {name}: mode {mode}, rotate {rotation.value}, pos {position}")
        self._run(
            "--output", name,
            "--mode", mode,
            "--rotate", rotation.value,
            "--pos", str(position),
        )

    def clear_output(self, name: str) -> None:
        logger.info(f"Turning off {name}")
        self._run("--output", name, "--off")
