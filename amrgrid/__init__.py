"""Adaptive mesh refinement grid with cell lookup, neighbours, plane slices and Tecplot output."""

__version__ = "0.1.0"
__all__ = ["cli", "mesh"]