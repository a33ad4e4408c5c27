"""Boundary detection and canvas composition for imagepad."""

from .boundary import BoundaryDetector
from .engine import CompositionEngine
from .resize import high_quality_resize

__all__ = ["BoundaryDetector", "CompositionEngine", "high_quality_resize"]
