"""vdicompact - compact VirtualBox VDI disk images with CloneVDI."""

__version__ = "0.1.0"
