"""Progress bar display constants."""

from __future__ import annotations


class ProgressGlyphs:
    """Glyphs used to draw progress bars."""

    FULL = "█"  # full block
    EMPTY = "░"  # light shade

    MIN_LENGTH = 3

    # rich styles for console rendering
    FULL_STYLE = "green"
    EMPTY_STYLE = "dim"


class Percentage:
    """Percentage formatting constants."""

    DEFAULT_PRECISION = 0
    HUNDRED = 100


__all__ = ["Percentage", "ProgressGlyphs"]
