"""Shared building blocks for tablekit: errors, logging and constants."""
