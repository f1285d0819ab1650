"""CLI entry point for vscreen.

Parses the command line, sets up logging and configuration, and hands the
request to the CommandDispatcher. Exit codes: 0 on success, 1 on a
validation or display error, 2 on an argparse usage error.
"""

import argparse
import sys
from typing import List, Optional

import argcomplete

from .. import __version__
from ..core.backend import DisplayBackend
from ..core.config import VscreenConfig, load_config
from ..core.xrandr import XRandRBackend
from ..errors import VscreenError
from .completers import (
    complete_orientations,
    complete_output_names,
    complete_resolutions,
    complete_slot_numbers,
)
from .dispatcher import Action, CommandDispatcher, CommandRequest, DispatchResult, build_request
from .dryrun import DryRunBackend, DryRunContext
from .logging_config import get_global_logger, init_logging, log_timing
from .output import (
    OutputFormatter,
    format_purge_json,
    format_resolution_list_json,
    format_slot_json,
    format_slot_list_json,
)


# ANSI color codes for output
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    BLUE = "\033[34m"
    GRAY = "\033[90m"


def print_success(message: str) -> None:
    """Print success message in green."""
    print(f"{Colors.GREEN}✓{Colors.RESET} {message}")


def print_error(message: str) -> None:
    """Print error message in red."""
    print(f"{Colors.RED}✗ Error:{Colors.RESET} {message}", file=sys.stderr)


def print_info(message: str) -> None:
    """Print info message in blue."""
    print(f"{Colors.BLUE}ℹ{Colors.RESET} {message}")


def print_warning(message: str) -> None:
    """Print warning message in yellow."""
    print(f"{Colors.YELLOW}⚠{Colors.RESET} {message}")


def print_error_with_remediation(error: str, remediation: str) -> None:
    """Print error with remediation steps.

    Args:
        error: Description of the error
        remediation: Steps to remediate the issue

    Examples:
        >>> print_error_with_remediation(
        ...     "VIRTUAL2 is not active",
        ...     "Activate it first with --output <n> -r <id|name>"
        ... )
    """
    print(f"{Colors.RED}✗ Error:{Colors.RESET} {error}", file=sys.stderr)
    print(f"{Colors.BLUE}  Remediation:{Colors.RESET} {remediation}", file=sys.stderr)


# ============================================================================
# Argument parsing
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    """Build the vscreen argument parser with shell completion hooks."""
    parser = argparse.ArgumentParser(
        prog="vscreen",
        description="Manage virtual X11 outputs (VIRTUAL1..N) through xrandr",
        epilog="Example: vscreen --output 1 -r FHD -o PR --right-of eDP-1",
        allow_abbrev=False,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"vscreen {__version__}"
    )

    # Actions (one per invocation; the dispatcher enforces exclusivity)
    actions = parser.add_argument_group("actions")
    actions.add_argument(
        "--list",
        nargs="?",
        const="all",
        choices=["all", "active", "free"],
        help="List virtual outputs (default: all)"
    )
    actions.add_argument(
        "--list-resolutions",
        action="store_true",
        help="List the predefined resolutions"
    )
    actions.add_argument(
        "--output",
        metavar="N",
        help="Activate virtual output N"
    ).completer = complete_slot_numbers
    actions.add_argument(
        "--off",
        metavar="N",
        help="Deactivate virtual output N"
    ).completer = complete_slot_numbers
    actions.add_argument(
        "--off-all",
        action="store_true",
        help="Deactivate every virtual output"
    )
    actions.add_argument(
        "--change",
        metavar="N",
        help="Change resolution, orientation or position of active output N"
    ).completer = complete_slot_numbers
    actions.add_argument(
        "--purge-modes",
        action="store_true",
        help="Remove vscreen-created modes that no active output uses"
    )

    # Output attributes
    attrs = parser.add_argument_group("output options")
    attrs.add_argument(
        "-r", "--resolution",
        metavar="ID|NAME",
        help="Predefined resolution by id or name (see --list-resolutions)"
    ).completer = complete_resolutions
    attrs.add_argument(
        "--size",
        metavar="WxH",
        help="Custom resolution, e.g. 2560x1440"
    )
    attrs.add_argument(
        "-o", "--orientation",
        metavar="ORIENTATION",
        help="normal|L, right|PR, left|PL, inverted|LF (default: normal)"
    ).completer = complete_orientations

    # Placement
    placement = parser.add_argument_group("placement")
    placement.add_argument(
        "--pos",
        metavar="XxY",
        help="Absolute position, e.g. 1920x0"
    )
    for flag in ("--right-of", "--left-of", "--above", "--below"):
        placement.add_argument(
            flag,
            metavar="OUTPUT",
            help=f"Place {flag[2:].replace('-', ' ')} another output"
        ).completer = complete_output_names
    placement.add_argument(
        "--no-auto",
        action="store_true",
        help="Place at 0x0 instead of tiling right of the active outputs"
    )

    # Global flags
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and show what would change without applying it"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format"
    )
    parser.add_argument(
        "--display",
        metavar="DISPLAY",
        help="X display to manage (default: $DISPLAY)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging (INFO level)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging, including every xrandr call"
    )

    return parser


# ============================================================================
# Rendering
# ============================================================================


def render_result(result: DispatchResult, fmt: OutputFormatter, request: CommandRequest) -> None:
    """Print a dispatch result as rich text or collect it for JSON."""
    from .formatters import console, format_purge_table, format_resolution_table, format_slot_table

    if result.action == Action.LIST:
        if fmt.json_mode:
            fmt.set_result(**format_slot_list_json(result.slots, request.list_filter))
        elif not result.slots:
            fmt.print_info(f"No {request.list_filter} virtual outputs")
        else:
            console.print(format_slot_table(result.slots, title=f"Virtual Outputs ({request.list_filter})"))

    elif result.action == Action.RESOLUTIONS:
        if fmt.json_mode:
            fmt.set_result(**format_resolution_list_json(result.resolutions))
        else:
            console.print(format_resolution_table(result.resolutions))

    elif result.action == Action.PURGE:
        if fmt.json_mode:
            fmt.set_result(**format_purge_json(result.purge))
        elif result.purge.removed or result.purge.skipped:
            console.print(format_purge_table(result.purge))
        fmt.print_success(result.message)

    else:
        fmt.print_success(result.message)
        for warning in result.warnings:
            fmt.print_warning(warning)
        if fmt.json_mode:
            fmt.set_result(slots=[format_slot_json(s) for s in result.slots])


def run_command(
    request: CommandRequest,
    backend: DisplayBackend,
    config: VscreenConfig,
    fmt: OutputFormatter,
    dry_run: bool = False,
) -> int:
    """Execute a validated request and print its outcome.

    Args:
        request: Validated request
        backend: Display backend (real or fake)
        config: Loaded configuration
        fmt: Output formatter
        dry_run: Record mutations instead of applying them

    Returns:
        Exit code
    """
    logger = get_global_logger()

    if not dry_run:
        dispatcher = CommandDispatcher(backend, config)
        with log_timing(request.action.flag, logger):
            result = dispatcher.execute(request)
        render_result(result, fmt, request)
        fmt.output()
        return 0

    with DryRunContext() as ctx:
        dispatcher = CommandDispatcher(DryRunBackend(backend, ctx.result), config)
        result = dispatcher.execute(request)

    for warning in result.warnings:
        ctx.result.add_warning(warning)

    if not request.action.mutates:
        render_result(result, fmt, request)
    elif fmt.json_mode:
        fmt.set_result(**ctx.result.to_dict(), message=result.message)
    else:
        print(ctx.result)
        fmt.print_info(f"Would have: {result.message}")
    fmt.output()
    return 0


def cli_main(argv: Optional[List[str]] = None, backend: Optional[DisplayBackend] = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Arguments (default: sys.argv[1:])
        backend: Display backend to drive (default: xrandr per configuration)

    Returns:
        Exit code
    """
    parser = build_parser()
    argcomplete.autocomplete(parser)

    args = parser.parse_args(argv)

    init_logging(verbose=args.verbose, debug=args.debug)
    logger = get_global_logger()
    if args.debug:
        logger.debug("Debug logging enabled")
    elif args.verbose:
        logger.info("Verbose logging enabled")

    fmt = OutputFormatter(json_mode=args.json)

    try:
        request = build_request(args)
        if request.action is None:
            parser.print_help()
            return 0

        config = load_config(display=args.display)
        if backend is None:
            backend = XRandRBackend(config.xrandr_command, config.display)
        return run_command(request, backend, config, fmt, dry_run=args.dry_run)

    except VscreenError as e:
        logger.debug(f"{type(e).__name__} ({e.code.name}): {e.message}")
        if e.suggestion:
            fmt.print_error(e.message, e.suggestion)
        else:
            fmt.print_error(e.message)
        fmt.set_result(error=e.to_dict())
        fmt.output()
        return 1


if __name__ == "__main__":
    sys.exit(cli_main())
