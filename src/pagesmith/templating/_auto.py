"""Auto-imported and auto-included templates.

Configured once, then applied to every render: each auto import binds a
namespace to the exported macros and variables of a template, and each auto
include is rendered ahead of the main template's output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from jinja2 import Environment
    from structlog.typing import FilteringBoundLogger

    from pagesmith.config import JinjaConfig


@dataclass(slots=True, frozen=True)
class AutoTemplates:
    """Immutable set of auto imports and auto includes.

    Attributes:
        imports: (namespace, template path) pairs.
        includes: Template paths, in include order.
    """

    imports: tuple[tuple[str, str], ...] = ()
    includes: tuple[str, ...] = ()

    @classmethod
    def from_config(
        cls,
        config: JinjaConfig,
        logger: FilteringBoundLogger | None = None,
    ) -> AutoTemplates:
        """Collect auto imports and includes from engine configuration."""
        imports = tuple(config.auto_import_templates.items())
        includes = tuple(config.auto_include_templates)

        if logger is not None:
            for namespace, path in imports:
                logger.debug("auto_import_added", namespace=namespace, template=path)
            for path in includes:
                logger.debug("auto_include_added", template=path)

        return cls(imports=imports, includes=includes)

    @property
    def is_empty(self) -> bool:
        return not self.imports and not self.includes

    def import_namespaces(
        self,
        environment: Environment,
        context: Mapping[str, object],
    ) -> dict[str, object]:
        """Load every auto import as a template module.

        Args:
            environment: Environment to load the templates from.
            context: Render context the modules are evaluated with.

        Returns:
            Namespace name to template module.
        """
        return {
            namespace: environment.get_template(path).make_module(dict(context))
            for namespace, path in self.imports
        }

    def render_includes(
        self,
        environment: Environment,
        context: Mapping[str, object],
    ) -> Iterator[str]:
        """Yield the output of every auto include, in configured order."""
        for path in self.includes:
            yield from environment.get_template(path).generate(dict(context))
