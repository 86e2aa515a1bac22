"""Site context consumed by the renderer."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from pagesmith.config import RendererConfig

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from jinja2 import BaseLoader


@dataclass(slots=True, frozen=True)
class PluginContributions:
    """Objects contributed by already-loaded plugins.

    Attributes:
        loaders: Extra template sources, consulted after the bundled
            templates in the order given.
        models: Named template model instances.
    """

    loaders: tuple[BaseLoader, ...] = ()
    models: Mapping[str, object] = field(
        default_factory=lambda: MappingProxyType({})
    )


@dataclass(slots=True, frozen=True)
class Site:
    """The owning site as seen by the rendering subsystem.

    Attributes:
        templates_dir: Site or theme template directory; layouts live here.
        working_dir: Build working directory. Working templates are written
            to its ``templates`` subdirectory.
        config: Renderer configuration.
        plugins: Plugin contributions.
    """

    templates_dir: Path
    working_dir: Path
    config: RendererConfig = field(default_factory=RendererConfig)
    plugins: PluginContributions = field(default_factory=PluginContributions)

    @property
    def working_templates_dir(self) -> Path:
        """Directory holding materialized working templates."""
        return self.working_dir / "templates"
