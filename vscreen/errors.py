"""
Error handling for vscreen.

Two tiers share one hierarchy rooted at VscreenError:

- Validation errors: detected from parsed input and the queried display
  state before anything is mutated.
- Operational errors: the display backend (xrandr) rejected a call.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """
    Error codes for vscreen.

    - 1000-1099: Validation errors
    - 1100-1199: Lifecycle state errors
    - 1200-1299: Configuration errors
    - 1400-1499: Display backend errors
    """

    # Validation errors (1000-1099)
    VALIDATION_FAILED = 1000
    FORMAT_ERROR = 1001
    NOT_FOUND = 1002
    CONFLICTING_ARGUMENTS = 1003
    MISSING_ARGUMENT = 1004
    INVALID_SLOT = 1005

    # Lifecycle state errors (1100-1199)
    ALREADY_ACTIVE = 1100
    NOT_ACTIVE = 1101

    # Configuration errors (1200-1299)
    CONFIG_LOAD_FAILED = 1200

    # Display backend errors (1400-1499)
    EXTENSION_FAILED = 1400
    BACKEND_UNAVAILABLE = 1401
    QUERY_PARSE_FAILED = 1402


class VscreenError(Exception):
    """Base exception for all reported vscreen failures."""

    code = ErrorCode.VALIDATION_FAILED

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        code: Optional[ErrorCode] = None,
    ):
        """
        Initialize error.

        Args:
            message: Human-readable error message
            suggestion: Suggested recovery action
            context: Additional context for debugging
            code: Override for the class default error code
        """
        if code is not None:
            self.code = code
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for JSON output.

        Returns:
            Error dictionary with code, message, suggestion, and context
        """
        result = {
            "code": self.code.value,
            "message": self.message
        }

        if self.suggestion:
            result["suggestion"] = self.suggestion

        if self.context:
            result["context"] = self.context

        return result


class ValidationError(VscreenError):
    """Request rejected before any state was touched."""

    code = ErrorCode.VALIDATION_FAILED


class FormatError(ValidationError):
    """A size, position or target token is malformed."""

    code = ErrorCode.FORMAT_ERROR


class NotFoundError(ValidationError):
    """Unknown resolution id/name, orientation, or reference output."""

    code = ErrorCode.NOT_FOUND


class ConflictError(ValidationError):
    """Mutually exclusive arguments were combined, or one is missing."""

    code = ErrorCode.CONFLICTING_ARGUMENTS


class InvalidSlotError(ValidationError):
    """Slot number outside the configured pool."""

    code = ErrorCode.INVALID_SLOT

    def __init__(self, slot_id: Any, pool_size: int):
        self.slot_id = slot_id
        self.pool_size = pool_size
        super().__init__(
            f"Invalid output number: {slot_id} (pool has {pool_size} slot(s))",
            suggestion=f"Use a number between 1 and {pool_size}; see 'vscreen --list all'",
            context={"slot": slot_id, "pool_size": pool_size},
        )


class AlreadyActiveError(ValidationError):
    """Activation requested for a slot that is already active."""

    code = ErrorCode.ALREADY_ACTIVE

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"{name} is already active",
            suggestion="Use --change to modify it or --off to release it first",
            context={"output": name},
        )


class NotActiveError(ValidationError):
    """Change or deactivation requested for a free slot."""

    code = ErrorCode.NOT_ACTIVE

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"{name} is not active",
            suggestion="Activate it first with --output <n> -r <id|name>",
            context={"output": name},
        )


class ConfigurationError(VscreenError):
    """The configuration file or environment overrides are invalid."""

    code = ErrorCode.CONFIG_LOAD_FAILED


class ExtensionError(VscreenError):
    """The display backend failed to carry out a call."""

    code = ErrorCode.EXTENSION_FAILED

    def __init__(
        self,
        message: str,
        command: Optional[list] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
        code: Optional[ErrorCode] = None,
    ):
        """
        Initialize backend error.

        Args:
            message: Error message
            command: Command line that failed
            returncode: Exit status of the command
            stderr: Captured standard error
            code: Override for the default error code
        """
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        context: Dict[str, Any] = {}
        if command:
            context["command"] = " ".join(command)
        if returncode is not None:
            context["returncode"] = returncode
        if stderr:
            context["stderr"] = stderr.strip()
        super().__init__(message, context=context, code=code)
