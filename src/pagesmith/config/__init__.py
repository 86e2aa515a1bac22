"""Renderer configuration loading and models."""

from ._loader import deep_merge, load_config, parse_env_vars, read_toml_file
from ._models import JinjaConfig, LogFormat, LoggingConfig, LogLevel, RendererConfig

__all__ = [
    "JinjaConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "RendererConfig",
    "deep_merge",
    "load_config",
    "parse_env_vars",
    "read_toml_file",
]
