"""Rendering helpers."""

from .progress import (
    ProgressBar,
    calculate_percentage,
    format_percentage,
    percentage_ratio,
    render,
)

__all__ = [
    "ProgressBar",
    "calculate_percentage",
    "format_percentage",
    "percentage_ratio",
    "render",
]
