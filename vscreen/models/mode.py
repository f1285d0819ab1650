"""Display mode models: registry records and CVT modelines."""

from typing import List, Optional

from pydantic import BaseModel, Field

from .geometry import Size


class Modeline(BaseModel):
    """Timing parameters accepted by ``xrandr --newmode``."""

    clock_mhz: float = Field(..., gt=0, description="Pixel clock in MHz")
    hdisplay: int
    hsync_start: int
    hsync_end: int
    htotal: int
    vdisplay: int
    vsync_start: int
    vsync_end: int
    vtotal: int
    hsync_polarity: str = "-hsync"
    vsync_polarity: str = "+vsync"

    model_config = {"frozen": True}

    @property
    def refresh_hz(self) -> float:
        return self.clock_mhz * 1_000_000 / (self.htotal * self.vtotal)

    def to_args(self) -> List[str]:
        """Arguments following the mode name on an xrandr --newmode call."""
        return [
            f"{self.clock_mhz:.2f}",
            str(self.hdisplay),
            str(self.hsync_start),
            str(self.hsync_end),
            str(self.htotal),
            str(self.vdisplay),
            str(self.vsync_start),
            str(self.vsync_end),
            str(self.vtotal),
            self.hsync_polarity,
            self.vsync_polarity,
        ]

    def __str__(self) -> str:
        return " ".join(self.to_args())


class ModeInfo(BaseModel):
    """A mode as reported by the display backend."""

    name: str
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    model_config = {"frozen": True}


class ModeRecord(BaseModel):
    """Registry view of a mode.

    ``managed`` distinguishes modes created by vscreen (and therefore subject
    to purge) from modes intrinsic to the X server.
    """

    name: str
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    managed: bool = True
    modeline: Optional[Modeline] = None

    model_config = {"frozen": True}

    @property
    def size(self) -> Size:
        return Size(width=self.width, height=self.height)

    def __str__(self) -> str:
        return self.name


class PurgeResult(BaseModel):
    """Outcome of a bulk purge of managed modes."""

    removed: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list, description="Still used by an active slot")

    @property
    def removed_count(self) -> int:
        return len(self.removed)
