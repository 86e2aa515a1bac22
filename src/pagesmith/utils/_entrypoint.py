"""Resolution of ``module.path:attribute`` references."""

from __future__ import annotations

import importlib
import re

# module.path:attribute.path
_ENTRYPOINT_PATTERN = re.compile(
    r"^(?P<module>[A-Za-z_][\w]*(?:\.[A-Za-z_][\w]*)*)"
    r":(?P<attr>[A-Za-z_][\w]*(?:\.[A-Za-z_][\w]*)*)$"
)


def parse_entrypoint(entrypoint: str) -> tuple[str, str] | None:
    """Split an entrypoint reference into module path and attribute path.

    Args:
        entrypoint: Reference as "module.path:attribute".

    Returns:
        Tuple of (module_path, attribute_path), or None if malformed.
    """
    match = _ENTRYPOINT_PATTERN.match(entrypoint.strip())
    if match is None:
        return None
    return match.group("module"), match.group("attr")


def load_entrypoint(entrypoint: str) -> object:
    """Import the object an entrypoint reference points to.

    Args:
        entrypoint: Reference as "module.path:attribute".

    Returns:
        The referenced object.

    Raises:
        ValueError: If the reference is malformed.
        ImportError: If the module cannot be imported.
        AttributeError: If the attribute does not exist.
    """
    parsed = parse_entrypoint(entrypoint)
    if parsed is None:
        msg = f"Invalid entrypoint format: {entrypoint!r} (expected 'module:attribute')"
        raise ValueError(msg)

    module_path, attr_path = parsed
    target: object = importlib.import_module(module_path)
    for attr in attr_path.split("."):
        target = getattr(target, attr)
    return target
