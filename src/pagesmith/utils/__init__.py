"""Shared utilities."""

from ._entrypoint import load_entrypoint, parse_entrypoint
from ._io import atomic_write_text, ensure_directory
from ._logging import create_render_logger

__all__ = [
    "atomic_write_text",
    "create_render_logger",
    "ensure_directory",
    "load_entrypoint",
    "parse_entrypoint",
]
