"""Test utilities."""

from .console_output import ConsoleOutput

__all__ = ["ConsoleOutput"]
