"""Prepare a USB drive that boots a ThreeFold Grid V3 node over iPXE."""

__version__ = "0.1.0"
