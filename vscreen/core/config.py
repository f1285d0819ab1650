"""Configuration for vscreen.

Settings are read from ``~/.config/vscreen/config.json`` (or the file named
by ``VSCREEN_CONFIG``) and then overridden by environment variables. Nothing
is ever written back.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ConfigurationError

logger = logging.getLogger("vscreen.config")

DEFAULT_CONFIG_FILE = Path.home() / ".config" / "vscreen" / "config.json"

# Environment variable -> config field
ENV_OVERRIDES = {
    "VSCREEN_POOL_SIZE": "pool_size",
    "VSCREEN_OUTPUT_PREFIX": "output_prefix",
    "VSCREEN_MODE_PREFIX": "mode_prefix",
    "VSCREEN_REFRESH": "refresh_rate",
    "VSCREEN_XRANDR": "xrandr_command",
    "VSCREEN_TILE_AFTER_PHYSICAL": "tile_after_physical",
}


class VscreenConfig(BaseModel):
    """Runtime configuration.

    Attributes:
        pool_size: Number of virtual slots; None sizes the pool from the
            ``<output_prefix>N`` outputs the X server reports
        output_prefix: Name prefix of virtual outputs (VIRTUAL -> VIRTUAL1..N)
        mode_prefix: Prefix marking modes created by vscreen
        refresh_rate: Refresh rate used for generated modelines
        xrandr_command: xrandr executable
        display: X display passed to xrandr (None keeps $DISPLAY)
        tile_after_physical: Auto-placement also avoids active physical outputs
    """

    pool_size: Optional[int] = Field(None, ge=1, le=64)
    output_prefix: str = Field("VIRTUAL", min_length=1)
    mode_prefix: str = Field("vscreen-", min_length=1)
    refresh_rate: float = Field(60.0, gt=0, le=480)
    xrandr_command: str = Field("xrandr", min_length=1)
    display: Optional[str] = None
    tile_after_physical: bool = False

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("output_prefix", "mode_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Prefixes become part of xrandr names and may not contain spaces."""
        if any(ch.isspace() for ch in v):
            raise ValueError("prefix cannot contain whitespace")
        return v

    def slot_name(self, index: int) -> str:
        """System output name for a slot index."""
        return f"{self.output_prefix}{index}"

    def mode_name(self, width: int, height: int) -> str:
        """Deterministic registry mode name for a size."""
        return f"{self.mode_prefix}{width}x{height}"


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.debug(f"No config file at {path}, using defaults")
        return {}
    try:
        with path.open("r") as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        raise ConfigurationError(
            f"Failed to load configuration from {path}: {e}",
            suggestion="Fix or remove the file",
            context={"path": str(path)},
        )
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration in {path} must be a JSON object",
            context={"path": str(path)},
        )
    logger.debug(f"Loaded config file {path}: {sorted(data)}")
    return data


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> VscreenConfig:
    """Load configuration from file, environment and explicit overrides.

    Precedence (lowest to highest): defaults, config file, environment,
    keyword overrides whose value is not None.

    Args:
        path: Config file (default: $VSCREEN_CONFIG or ~/.config/vscreen/config.json)
        environ: Environment mapping (default: os.environ)
        **overrides: Field values from the command line

    Returns:
        Validated VscreenConfig

    Raises:
        ConfigurationError: If the file or any override is invalid
    """
    env = os.environ if environ is None else environ
    if path is None:
        path = Path(env["VSCREEN_CONFIG"]) if env.get("VSCREEN_CONFIG") else DEFAULT_CONFIG_FILE

    data = _read_config_file(path)

    for var, field in ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            data[field] = value
            logger.debug(f"Config override from {var}: {field}={value}")

    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return VscreenConfig(**data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e}",
            context={"path": str(path)},
        )
