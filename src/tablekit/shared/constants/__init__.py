"""
tablekit Constants Module

Centralized constants for tablekit. Defaults for reset runs, logging and
progress bar rendering are defined here so every module reads the same values.
"""

from .display import Percentage, ProgressGlyphs
from .system import Logging, Reset

__all__ = [
    "Logging",
    "Percentage",
    "ProgressGlyphs",
    "Reset",
]
