"""Dry-run mode support.

A DryRunBackend wraps the real display backend: queries pass through so
validation and placement see the live layout, while every mutating call
is recorded as a DryRunChange instead of being executed.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.backend import DisplayBackend
from ..models.geometry import Position
from ..models.mode import ModeInfo, Modeline
from ..models.orientation import Orientation
from ..models.slot import OutputInfo

logger = logging.getLogger("vscreen.dryrun")


@dataclass
class DryRunChange:
    """A single backend mutation that would be made.

    Attributes:
        action: Type of action (create, set, clear, delete)
        target: Mode or output being changed
        details: Additional details about the change
        old_value: Previous value (for clears/deletes)
        new_value: New value (for creates/sets)
    """

    action: str
    target: str
    details: str = ""
    old_value: Optional[Any] = None
    new_value: Optional[Any] = None

    def __str__(self) -> str:
        """Format change as human-readable string."""
        if self.action == "create":
            return f"  [CREATE] {self.target}: {self.new_value}"
        elif self.action == "set":
            return f"  [SET] {self.target}: {self.new_value}"
        elif self.action == "clear":
            return f"  [CLEAR] {self.target}: {self.old_value or 'off'}"
        elif self.action == "delete":
            return f"  [DELETE] {self.target}: {self.old_value}"
        else:
            return f"  [{self.action.upper()}] {self.target}: {self.details}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        result = {
            "action": self.action,
            "target": self.target,
        }
        if self.details:
            result["details"] = self.details
        if self.old_value is not None:
            result["old_value"] = str(self.old_value)
        if self.new_value is not None:
            result["new_value"] = str(self.new_value)
        return result


@dataclass
class DryRunResult:
    """Everything a dry run would have done.

    Attributes:
        changes: Mutations that would be made, in order
        success: Whether the operation would succeed
        error_message: Why it would fail, if it would
        warnings: Notes about the operation
    """

    changes: List[DryRunChange] = field(default_factory=list)
    success: bool = True
    error_message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    def add_change(
        self,
        action: str,
        target: str,
        details: str = "",
        old_value: Optional[Any] = None,
        new_value: Optional[Any] = None,
    ) -> None:
        self.changes.append(
            DryRunChange(
                action=action,
                target=target,
                details=details,
                old_value=old_value,
                new_value=new_value,
            )
        )

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def set_error(self, message: str) -> None:
        self.success = False
        self.error_message = message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "dry_run": True,
            "success": self.success,
            "changes": [c.to_dict() for c in self.changes],
            "error": self.error_message,
            "warnings": self.warnings,
        }

    def __str__(self) -> str:
        """Format result as human-readable string."""
        from .commands import Colors

        lines = []

        lines.append(f"\n{Colors.BOLD}Dry-run mode: No changes will be applied{Colors.RESET}")
        lines.append(f"{Colors.GRAY}{'─' * 60}{Colors.RESET}\n")

        if self.changes:
            lines.append(f"{Colors.BOLD}Would make {len(self.changes)} change(s):{Colors.RESET}\n")
            for change in self.changes:
                lines.append(str(change))
        else:
            lines.append(f"{Colors.GRAY}No changes would be made{Colors.RESET}")

        if self.warnings:
            lines.append(f"\n{Colors.YELLOW}{Colors.BOLD}Warnings:{Colors.RESET}")
            for warning in self.warnings:
                lines.append(f"  {Colors.YELLOW}⚠{Colors.RESET} {warning}")

        if self.error_message:
            lines.append(f"\n{Colors.RED}{Colors.BOLD}Would fail:{Colors.RESET}")
            lines.append(f"  {Colors.RED}✗{Colors.RESET} {self.error_message}")

        lines.append("")
        return "\n".join(lines)


class DryRunContext:
    """Context manager collecting a DryRunResult.

    Usage:
        >>> with DryRunContext() as ctx:
        ...     backend = DryRunBackend(XRandRBackend(), ctx.result)
        ...     dispatcher = CommandDispatcher(backend, config)
        ...     dispatcher.dispatch(args)
        >>> print(ctx.result)
    """

    def __init__(self):
        self.result = DryRunResult()

    def __enter__(self) -> "DryRunContext":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            # Record the failure but let it propagate
            self.result.set_error(str(exc_val) or exc_type.__name__)
        return False


class DryRunBackend:
    """DisplayBackend that reads from a real backend and records writes."""

    def __init__(self, backend: DisplayBackend, result: Optional[DryRunResult] = None):
        self.backend = backend
        self.result = result if result is not None else DryRunResult()

    def query_outputs(self) -> List[OutputInfo]:
        return self.backend.query_outputs()

    def query_modes(self) -> List[ModeInfo]:
        return self.backend.query_modes()

    def create_mode(self, name: str, modeline: Modeline) -> None:
        logger.debug(f"Dry run: skipping creation of mode {name}")
        self.result.add_change("create", f"mode {name}", new_value=modeline)

    def remove_mode(self, name: str) -> None:
        logger.debug(f"Dry run: skipping removal of mode {name}")
        self.result.add_change("delete", f"mode {name}", old_value=name)

    def set_output(self, name: str, mode: str, rotation: Orientation, position: Position) -> None:
        logger.debug(f"Dry run: skipping configuration of {name}")
        self.result.add_change(
            "set",
            f"output {name}",
            new_value=f"mode {mode}, rotate {rotation.value}, pos {position}",
        )

    def clear_output(self, name: str) -> None:
        logger.debug(f"Dry run: skipping --off for {name}")
        self.result.add_change("clear", f"output {name}")
