"""Template resolution chain.

Templates are looked up by logical name across an ordered list of sources.
The first source that has the name wins:

1. working: materialized working templates
2. site: the site or theme template directory
3. bundled: default templates shipped with pagesmith
4. plugin-N: loaders contributed by plugins, in registration order
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from jinja2 import BaseLoader, FileSystemLoader, PackageLoader, TemplateNotFound

from pagesmith.exceptions import ResolutionError
from pagesmith.utils import ensure_directory

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from pathlib import Path

    from jinja2 import Environment

BUNDLED_PACKAGE = "pagesmith"
BUNDLED_TEMPLATES_DIR = "templates"


@dataclass(slots=True, frozen=True)
class ResolvedTemplate:
    """A template found by the resolution chain.

    Attributes:
        name: Logical name that was looked up.
        source: Template source text.
        filename: File the source was read from, if file backed.
        origin: Label of the source that supplied it.
    """

    name: str
    source: str
    filename: str | None
    origin: str


class TemplateResolutionChain(BaseLoader):
    """Jinja2 loader consulting labelled sources in a fixed order.

    The order is set at construction and never changes afterwards.
    """

    def __init__(self, sources: Sequence[tuple[str, BaseLoader]]) -> None:
        self._sources: tuple[tuple[str, BaseLoader], ...] = tuple(sources)

    @property
    def origins(self) -> tuple[str, ...]:
        """Source labels, highest precedence first."""
        return tuple(label for label, _ in self._sources)

    def _lookup(
        self, environment: Environment, template: str
    ) -> tuple[str, tuple[str, str | None, Callable[[], bool] | None]]:
        for label, loader in self._sources:
            try:
                return label, loader.get_source(environment, template)
            except TemplateNotFound:
                continue
        raise TemplateNotFound(template)

    def get_source(
        self, environment: Environment, template: str
    ) -> tuple[str, str | None, Callable[[], bool] | None]:
        _, found = self._lookup(environment, template)
        return found

    def list_templates(self) -> list[str]:
        found: set[str] = set()
        for _, loader in self._sources:
            try:
                found.update(loader.list_templates())
            except TypeError:
                # Loader cannot enumerate its templates
                continue
        return sorted(found)

    def resolve(
        self, name: str, environment: Environment | None = None
    ) -> ResolvedTemplate:
        """Find a template by logical name.

        Args:
            name: Logical template name.
            environment: Environment passed to the underlying loaders. A
                bare environment is used when omitted.

        Returns:
            The template from the first source that has it.

        Raises:
            ResolutionError: If no source has the name.
        """
        if environment is None:
            from jinja2 import Environment  # noqa: PLC0415

            environment = Environment(loader=self)

        try:
            origin, (source, filename, _) = self._lookup(environment, name)
        except TemplateNotFound as e:
            msg = f"Template not found: {name} (searched {', '.join(self.origins)})"
            raise ResolutionError(msg, name=name) from e

        return ResolvedTemplate(
            name=name, source=source, filename=filename, origin=origin
        )


def build_resolution_chain(
    working_dir: Path,
    templates_dir: Path,
    extra_loaders: Iterable[BaseLoader] = (),
) -> TemplateResolutionChain:
    """Build the resolution chain in its fixed precedence order.

    Args:
        working_dir: Working template directory. Created if missing.
        templates_dir: Site or theme template directory. Must exist.
        extra_loaders: Plugin-contributed loaders, appended last.

    Returns:
        The resolution chain.

    Raises:
        ConfigurationError: If a directory cannot be created or read.
    """
    working = ensure_directory(working_dir, create=True)
    site = ensure_directory(templates_dir)

    sources: list[tuple[str, BaseLoader]] = [
        ("working", FileSystemLoader(str(working), encoding="utf-8")),
        ("site", FileSystemLoader(str(site), encoding="utf-8")),
        ("bundled", PackageLoader(BUNDLED_PACKAGE, BUNDLED_TEMPLATES_DIR)),
    ]
    sources.extend(
        (f"plugin-{index}", loader) for index, loader in enumerate(extra_loaders)
    )

    return TemplateResolutionChain(sources)
