# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""TOML configuration file loading and merging."""

from __future__ import annotations

import json
import os
import re
import tomllib
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from pagesmith.exceptions import ConfigLoadError

from ._models import RendererConfig

if TYPE_CHECKING:
    from pathlib import Path

ENV_PREFIX = "PAGESMITH_"

# Environment keys consumed elsewhere, never treated as config overrides
_RESERVED_ENV_KEYS = frozenset({"DEBUG"})


def read_toml_file(path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Read and parse a TOML file.

    Args:
        path: Path to the TOML file.

    Returns:
        Parsed TOML content as dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigLoadError: If the file cannot be parsed.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse TOML file: {e}"
        line, column = _error_location(e)
        raise ConfigLoadError(
            msg,
            path=path,
            line=line,
            column=column,
        ) from e


# tomllib messages end with "(at line L, column C)"
_LOCATION_PATTERN = re.compile(r"\(at line (\d+), column (\d+)\)")


def _error_location(error: tomllib.TOMLDecodeError) -> tuple[int | None, int | None]:
    """Return the 1-based line and column of a TOML parse error, if known.

    ``lineno`` and ``colno`` are only set on Python 3.14 and later; older
    interpreters carry the location in the message alone.
    """
    line: int | None = getattr(error, "lineno", None)
    column: int | None = getattr(error, "colno", None)
    if line is not None and column is not None:
        return line, column

    match = _LOCATION_PATTERN.search(str(error))
    if match is None:
        return None, None
    return int(match.group(1)), int(match.group(2))


def deep_merge(
    base: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    override: dict[str, Any],  # pyright: ignore[reportExplicitAny]
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Deep merge two configuration dictionaries.

    Neither input is modified. Dictionaries merge recursively; lists and
    scalars from ``override`` replace those in ``base``.

    Args:
        base: Base configuration (lower precedence).
        override: Override configuration (higher precedence).

    Returns:
        Merged configuration dictionary.
    """
    result: dict[str, Any] = {k: _copy_value(v) for k, v in base.items()}  # pyright: ignore[reportExplicitAny]

    for key, override_val in override.items():
        base_val = result.get(key)
        if isinstance(base_val, dict) and isinstance(override_val, dict):
            result[key] = deep_merge(base_val, override_val)
        else:
            result[key] = _copy_value(override_val)

    return result


def _copy_value(value: Any) -> Any:  # pyright: ignore[reportExplicitAny]
    if isinstance(value, dict):
        return {k: _copy_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_copy_value(item) for item in value]
    return value


def set_nested_key(
    data: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    dotted_key: str,
    value: Any,  # pyright: ignore[reportExplicitAny]
) -> None:
    """Set ``value`` at a dotted key path, creating intermediate tables.

    Args:
        data: Dictionary to modify in place.
        dotted_key: Key path such as ``"jinja.extension"``.
        value: Value to store.
    """
    parts = dotted_key.split(".")
    current = data
    for part in parts[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[parts[-1]] = value


def parse_env_vars(
    prefix: str = ENV_PREFIX,
    environ: dict[str, str] | None = None,
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Parse environment variables into config dictionary.

    Args:
        prefix: Environment variable prefix (default: "PAGESMITH_").
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        Dictionary of parsed config values with nested structure.

    Environment variable naming:
        - Add prefix (PAGESMITH_)
        - Convert to uppercase
        - Replace dots with double underscores
        - Example: jinja.extension -> PAGESMITH_JINJA__EXTENSION
    """
    if environ is None:
        environ = dict(os.environ)

    result: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]

    for key, value in environ.items():
        if not key.startswith(prefix):
            continue

        config_key = key[len(prefix) :]
        if not config_key or config_key in _RESERVED_ENV_KEYS:
            continue

        # PAGESMITH_JINJA__EXTENSION -> jinja.extension
        config_path = config_key.replace("__", ".").lower()
        set_nested_key(result, config_path, _parse_env_value(value))

    return result


def _parse_env_value(value: str) -> Any:  # pyright: ignore[reportExplicitAny]
    """Parse environment variable value with type inference.

    Order of type inference:
        1. Boolean: true/false (case-insensitive)
        2. JSON array or object
        3. String: anything else
    """
    lower_value = value.lower()
    if lower_value in ("true", "false"):
        return lower_value == "true"

    if (value.startswith("[") and value.endswith("]")) or (
        value.startswith("{") and value.endswith("}")
    ):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


def load_config(
    path: Path | None = None,
    *,
    include_env: bool = True,
    environ: dict[str, str] | None = None,
) -> RendererConfig:
    """Load renderer configuration.

    Precedence, highest first: environment variables, the TOML file,
    model defaults.

    Args:
        path: Optional TOML file. A path that does not exist is an error.
        include_env: Whether to apply ``PAGESMITH_*`` overrides.
        environ: Environment mapping, for tests. Defaults to ``os.environ``.

    Returns:
        The validated configuration.

    Raises:
        ConfigLoadError: If the file cannot be read, parsed or validated.
    """
    data: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]

    if path is not None:
        try:
            data = read_toml_file(path)
        except FileNotFoundError as e:
            msg = f"Config file not found: {path}"
            raise ConfigLoadError(msg, path=path) from e
        except OSError as e:
            msg = f"Failed to read config file: {e}"
            raise ConfigLoadError(msg, path=path) from e

    if include_env:
        data = deep_merge(data, parse_env_vars(environ=environ))

    try:
        return RendererConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigLoadError(msg, path=path) from e
