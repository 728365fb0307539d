"""Ocean surface tiles, god rays, render passes and ocean scene state."""

__version__ = "0.1.0"