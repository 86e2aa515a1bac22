"""Jinja2 Environment factory."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ._auto import AutoTemplates

if TYPE_CHECKING:
    from jinja2 import BaseLoader, Environment
    from structlog.typing import FilteringBoundLogger

    from pagesmith.config import RendererConfig


@dataclass(slots=True, frozen=True)
class EnvironmentConfig:
    """Configuration for the Jinja2 Environment.

    Attributes:
        extension: Template file extension, without the leading dot.
        autoescape: Enable autoescaping (default: False, bodies arrive as
            already converted markup).
        trim_blocks: Remove first newline after a block tag.
        lstrip_blocks: Strip leading whitespace before block tags.
        keep_trailing_newline: Preserve trailing newline in templates.
        strict_undefined: Raise on undefined variables.
        locale: Locale tag exposed to templates as the ``locale`` global.
        auto: Auto imports and includes applied to every render.
    """

    extension: str = "j2"
    autoescape: bool = False
    trim_blocks: bool = False
    lstrip_blocks: bool = False
    keep_trailing_newline: bool = True
    strict_undefined: bool = False
    locale: str | None = None
    auto: AutoTemplates = field(default_factory=AutoTemplates)

    @classmethod
    def from_config(
        cls,
        config: RendererConfig,
        logger: FilteringBoundLogger | None = None,
    ) -> EnvironmentConfig:
        """Derive the environment configuration from renderer configuration."""
        return cls(
            extension=config.jinja.extension,
            trim_blocks=config.jinja.trim_blocks,
            lstrip_blocks=config.jinja.lstrip_blocks,
            strict_undefined=config.jinja.strict_undefined,
            locale=config.locale,
            auto=AutoTemplates.from_config(config.jinja, logger),
        )


def create_environment(
    loader: BaseLoader,
    *,
    config: EnvironmentConfig | None = None,
) -> Environment:
    """Create a Jinja2 Environment over the given loader.

    Args:
        loader: Template loader, normally the resolution chain.
        config: Optional environment configuration. If None, uses defaults.

    Returns:
        Configured Jinja2 Environment.
    """
    from jinja2 import Environment, StrictUndefined, Undefined  # noqa: PLC0415

    if config is None:
        config = EnvironmentConfig()

    # Note: autoescape is intentionally disabled, bodies are already markup
    env: Environment = Environment(
        loader=loader,
        autoescape=config.autoescape,  # noqa: S701
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
        keep_trailing_newline=config.keep_trailing_newline,
        undefined=StrictUndefined if config.strict_undefined else Undefined,
    )

    if config.locale is not None:
        env.globals["locale"] = config.locale

    return env
