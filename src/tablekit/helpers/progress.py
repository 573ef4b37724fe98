"""
Percentage and progress bar helpers.

Turns a ratio in [0, 1] into a display percentage and draws fixed width
progress bars from it, either as an HTML ``<span>`` with the percentage as
tooltip or as a rich ``Text`` for console output.

The full and empty states are reserved for the exact boundaries: a ratio
strictly between 0 and 1 never prints as "0%" or "100%" and never draws a
completely empty or completely filled bar, however close it is to either end.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from html import escape
from typing import Any

from rich.text import Text

from tablekit.shared.constants import Percentage, ProgressGlyphs
from tablekit.shared.errors import InvalidArgumentError


def _check_precision(precision: int) -> None:
    if precision < 0:
        raise InvalidArgumentError(
            f"Precision must be a non-negative integer, got {precision}",
            argument="precision",
        )


def calculate_percentage(
    value: float,
    *,
    precision: int = Percentage.DEFAULT_PRECISION,
    multiply: bool = False,
) -> float:
    """
    Round a ratio for display without faking the full or empty state.

    ``value`` is expected in [0, 1]; callers clamp upstream. Values at or
    beyond the boundaries return the boundary exactly. Everything else is
    rounded half up to ``precision`` decimals of the percentage and then
    kept at least one display unit away from 0% and 100%.

    Args:
        value: Ratio to convert
        precision: Decimals of the displayed percentage
        multiply: Return the percentage (49.0) instead of the ratio (0.49)

    Returns:
        The rounded ratio, or percentage when ``multiply`` is set

    Example:
        >>> calculate_percentage(0.49, multiply=True)
        49.0
        >>> calculate_percentage(0.999)
        0.99
        >>> calculate_percentage(0.0001, multiply=True)
        1.0
    """
    _check_precision(precision)

    scale = Percentage.HUNDRED
    if value <= 0:
        return 0.0
    if value >= 1:
        return float(scale) if multiply else 1.0

    with localcontext() as ctx:
        # Every digit of the percentage must fit: three integer digits plus the decimals
        ctx.prec = max(ctx.prec, precision + 3)
        unit = Decimal(1).scaleb(-precision)
        percent = (Decimal(str(value)) * scale).quantize(unit, rounding=ROUND_HALF_UP)
        if percent <= 0:
            percent = unit
        elif percent >= scale:
            percent = scale - unit

        return float(percent if multiply else percent / scale)


def percentage_ratio(
    total: float,
    piece: float,
    *,
    precision: int = Percentage.DEFAULT_PRECISION,
    multiply: bool = False,
) -> float:
    """Return ``piece / total`` through calculate_percentage, 0.0 for an empty total."""
    ratio = piece / total if total else 0.0
    return calculate_percentage(ratio, precision=precision, multiply=multiply)


def format_percentage(value: float, *, precision: int = Percentage.DEFAULT_PRECISION) -> str:
    """Format a ratio as a percentage string, e.g. ``"49%"``."""
    percent = calculate_percentage(value, precision=precision, multiply=True)
    return f"{percent:.{precision}f}%"


class ProgressBar:
    """
    Fixed width progress bar built from two glyphs.

    Each cell is either full or empty; partial cells are not drawn. The
    number of full cells is the calculated ratio times the length,
    truncated, and kept within ``[1, length - 1]`` for any ratio strictly
    between 0 and 1.
    """

    def __init__(
        self,
        *,
        full: str = ProgressGlyphs.FULL,
        empty: str = ProgressGlyphs.EMPTY,
        precision: int = Percentage.DEFAULT_PRECISION,
    ) -> None:
        """
        Initialize the progress bar.

        Args:
            full: Glyph of a filled cell
            empty: Glyph of an empty cell
            precision: Decimals of the percentage shown as title

        Raises:
            InvalidArgumentError: If a glyph is not a single character or
                the precision is negative
        """
        for name, glyph in (("full", full), ("empty", empty)):
            if len(glyph) != 1:
                raise InvalidArgumentError(
                    f"Glyph '{name}' must be a single character, got {glyph!r}",
                    argument=name,
                )
        _check_precision(precision)

        self.full = full
        self.empty = empty
        self.precision = precision

    def filled_cells(self, value: float, length: int) -> int:
        """
        Number of full cells for ``value`` in a bar of ``length`` cells.

        Raises:
            InvalidArgumentError: If length is below three cells
        """
        if length < ProgressGlyphs.MIN_LENGTH:
            raise InvalidArgumentError(
                f"Progress bar length must be at least {ProgressGlyphs.MIN_LENGTH}, got {length}",
                argument="length",
            )

        ratio = calculate_percentage(value, precision=self.precision)
        if ratio <= 0:
            return 0
        if ratio >= 1:
            return length

        filled = math.floor(Decimal(str(ratio)) * length)
        return min(max(filled, 1), length - 1)

    def draw(self, value: float, length: int) -> str:
        """Draw the bar as a plain string of exactly ``length`` glyphs."""
        filled = self.filled_cells(value, length)
        return self.full * filled + self.empty * (length - filled)

    def render(self, value: float, length: int, **attrs: Any) -> str:
        """
        Render the bar as an HTML span with the percentage as title.

        Args:
            value: Ratio in [0, 1]
            length: Number of cells, at least three
            **attrs: Extra HTML attributes; ``title`` replaces the percentage

        Returns:
            Markup such as ``<span title="49%">█████░░░░░</span>``
        """
        bar = self.draw(value, length)
        attributes = {"title": format_percentage(value, precision=self.precision)}
        attributes.update(attrs)
        rendered = " ".join(
            f'{escape(str(name))}="{escape(str(attr))}"' for name, attr in attributes.items()
        )
        return f"<span {rendered}>{escape(bar)}</span>"

    def to_text(self, value: float, length: int, *, show_percentage: bool = True) -> Text:
        """Build a styled rich Text of the bar, optionally followed by the percentage."""
        filled = self.filled_cells(value, length)
        text = Text.assemble(
            (self.full * filled, ProgressGlyphs.FULL_STYLE),
            (self.empty * (length - filled), ProgressGlyphs.EMPTY_STYLE),
        )
        if show_percentage:
            text.append(f" {format_percentage(value, precision=self.precision)}")
        return text


def render(value: float, length: int, **options: Any) -> str:
    """
    Render an HTML progress bar in one call.

    ``full``, ``empty`` and ``precision`` configure the bar, every other
    keyword becomes an HTML attribute.
    """
    bar_options = {key: options.pop(key) for key in ("full", "empty", "precision") if key in options}
    return ProgressBar(**bar_options).render(value, length, **options)


__all__ = [
    "ProgressBar",
    "calculate_percentage",
    "format_percentage",
    "percentage_ratio",
    "render",
]
