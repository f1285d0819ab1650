"""Resolution specifications for catalog and custom sizes."""

from typing import Optional

from pydantic import BaseModel, Field

from .geometry import Size


class ResolutionSpec(BaseModel):
    """A requested output resolution.

    Catalog entries carry both an id and a mnemonic name; custom sizes parsed
    from ``WxH`` leave both unset.
    """

    width: int = Field(..., gt=0, description="Width in pixels")
    height: int = Field(..., gt=0, description="Height in pixels")
    id: Optional[int] = Field(None, ge=1, description="Catalog id")
    name: Optional[str] = Field(None, description="Catalog mnemonic (FHD, HD+, ...)")

    model_config = {"frozen": True}

    @property
    def size(self) -> Size:
        return Size(width=self.width, height=self.height)

    @property
    def is_custom(self) -> bool:
        return self.id is None

    def label(self) -> str:
        """Human-readable label, e.g. ``FHD (1920x1080)``."""
        if self.name:
            return f"{self.name} ({self.width}x{self.height})"
        return f"{self.width}x{self.height}"
