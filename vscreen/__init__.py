"""vscreen - virtual display output manager for X11 RandR.

This package provides:
- A fixed pool of VIRTUALn output slots with activate/change/off lifecycle
- Catalog and custom resolutions backed by CVT modelines
- Automatic left-to-right tiling plus absolute/relative placement
- Dry-run and debug tracing of every xrandr call
"""

__version__ = "1.2.0"
__author__ = "vscreen contributors"
__license__ = "MIT"

__all__ = ["__version__", "__author__", "__license__"]
