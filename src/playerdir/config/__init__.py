"""Configuration helpers for choosing and opening the player table."""

from .settings import BACKENDS, Settings, build_directory, build_table

__all__ = [
    "BACKENDS",
    "Settings",
    "build_directory",
    "build_table",
]
