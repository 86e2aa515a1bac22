"""Configuration models.

This module provides the Pydantic models describing renderer configuration:
the Jinja2 engine section, template model bindings, locale and logging.
"""

from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty logs to stderr).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""


class JinjaConfig(BaseModel):
    """Template engine configuration section.

    Attributes:
        extension: Template file extension, without the leading dot.
        strict_undefined: Raise on undefined variables instead of rendering
            them as empty strings.
        trim_blocks: Remove first newline after a block tag.
        lstrip_blocks: Strip leading whitespace before block tags.
        auto_import_templates: Namespace to template path, imported into
            every render.
        auto_include_templates: Template paths included, in order, ahead of
            every render.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    extension: str = "j2"
    strict_undefined: bool = False
    trim_blocks: bool = False
    lstrip_blocks: bool = False
    auto_import_templates: dict[str, str] = Field(default_factory=dict)
    auto_include_templates: tuple[str, ...] = ()

    @field_validator("extension")
    @classmethod
    def _strip_leading_dot(cls, value: str) -> str:
        value = value.lstrip(".")
        if not value:
            msg = "extension must not be empty"
            raise ValueError(msg)
        return value

    @field_validator("auto_import_templates")
    @classmethod
    def _check_namespaces(cls, value: dict[str, str]) -> dict[str, str]:
        for namespace in value:
            if not namespace.isidentifier():
                msg = f"auto import namespace is not an identifier: {namespace!r}"
                raise ValueError(msg)
        return value


class RendererConfig(BaseModel):
    """Top-level renderer configuration.

    Attributes:
        locale: Optional locale tag exposed to templates as ``locale``.
        jinja: Template engine settings.
        template_models: Model name to factory identifier
            (``"package.module:factory"``).
        logging: Logging settings.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    locale: str | None = None
    jinja: JinjaConfig = Field(default_factory=JinjaConfig)
    template_models: dict[str, str] = Field(default_factory=dict)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
