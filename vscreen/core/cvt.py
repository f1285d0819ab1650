"""VESA Coordinated Video Timings (CVT 1.1) modeline calculation.

Produces the same timings as the ``cvt`` utility for progressive modes
without margins whose width is a multiple of 8. Modes can be registered
with ``xrandr --newmode`` without an external helper.
"""

from ..models.mode import Modeline

CVT_H_GRANULARITY = 8
CVT_MIN_V_PORCH = 3
CVT_MIN_VSYNC_BP = 550.0  # microseconds
CVT_HSYNC_PERCENTAGE = 8
CVT_CLOCK_STEP = 250  # kHz

# Blanking formula gradient and offset, already scaled by K/256
CVT_M_PRIME = 600 * 128 / 256
CVT_C_PRIME = (40 - 20) * 128 / 256 + 20

CVT_MIN_HBLANK_PERCENTAGE = 20.0


def _vsync_width(width: int, height: int) -> int:
    """Vertical sync width encodes the aspect ratio."""
    if height % 3 == 0 and height * 4 // 3 == width:
        return 4
    if height % 9 == 0 and height * 16 // 9 == width:
        return 5
    if height % 10 == 0 and height * 16 // 10 == width:
        return 6
    if height % 4 == 0 and height * 5 // 4 == width:
        return 7
    if height % 9 == 0 and height * 15 // 9 == width:
        return 7
    return 10


def cvt_modeline(width: int, height: int, refresh: float = 60.0) -> Modeline:
    """Compute CVT timings for a progressive mode.

    Args:
        width: Horizontal active pixels
        height: Vertical active lines
        refresh: Vertical refresh rate in Hz

    Returns:
        Modeline with pixel clock rounded down to a 0.25 MHz step

    Raises:
        ValueError: If any argument is not positive
    """
    if width <= 0 or height <= 0 or refresh <= 0:
        raise ValueError(f"Invalid mode {width}x{height}@{refresh}")

    # Active width stays exact so the output footprint matches the request;
    # only blanking intervals are aligned to the character cell.
    hdisplay = width
    vdisplay = height
    vsync = _vsync_width(width, height)

    # Estimated horizontal period in microseconds
    hperiod = (1_000_000.0 / refresh - CVT_MIN_VSYNC_BP) / (vdisplay + CVT_MIN_V_PORCH)

    vsync_bp = int(CVT_MIN_VSYNC_BP / hperiod) + 1
    if vsync_bp < vsync + CVT_MIN_V_PORCH:
        vsync_bp = vsync + CVT_MIN_V_PORCH
    vtotal = vdisplay + vsync_bp + CVT_MIN_V_PORCH

    hblank_percentage = CVT_C_PRIME - CVT_M_PRIME * hperiod / 1000.0
    if hblank_percentage < CVT_MIN_HBLANK_PERCENTAGE:
        hblank_percentage = CVT_MIN_HBLANK_PERCENTAGE

    hblank = int(hdisplay * hblank_percentage / (100.0 - hblank_percentage))
    hblank -= hblank % (2 * CVT_H_GRANULARITY)
    htotal = hdisplay + hblank

    hsync_end = hdisplay + hblank // 2
    hsync_width = int(htotal * CVT_HSYNC_PERCENTAGE / 100)
    hsync_width -= hsync_width % CVT_H_GRANULARITY
    hsync_start = hsync_end - hsync_width

    vsync_start = vdisplay + CVT_MIN_V_PORCH
    vsync_end = vsync_start + vsync

    clock_khz = int(htotal * 1000.0 / hperiod)
    clock_khz -= clock_khz % CVT_CLOCK_STEP

    return Modeline(
        clock_mhz=clock_khz / 1000.0,
        hdisplay=hdisplay,
        hsync_start=hsync_start,
        hsync_end=hsync_end,
        htotal=htotal,
        vdisplay=vdisplay,
        vsync_start=vsync_start,
        vsync_end=vsync_end,
        vtotal=vtotal,
    )
