"""Layout discovery and layout working templates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ._materializer import layout_working_template_name

if TYPE_CHECKING:
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

    from ._materializer import WorkingTemplate, WorkingTemplateMaterializer

LAYOUT_PREFIX = "_"


@dataclass(slots=True, frozen=True)
class Layout:
    """A layout file found in the template directory.

    Attributes:
        name: Layout name, the file name minus prefix and extension.
        path: Path to the layout file.
    """

    name: str
    path: Path


class LayoutRegistrar:
    """Keeps one layout working template per layout file up to date."""

    def __init__(
        self,
        templates_dir: Path,
        materializer: WorkingTemplateMaterializer,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self.templates_dir: Path = templates_dir
        self._materializer: WorkingTemplateMaterializer = materializer
        self._logger: FilteringBoundLogger | None = logger

    def discover(self) -> list[Layout]:
        """List layout files, ``_<name>.<ext>``, sorted by file name."""
        suffix = f".{self._materializer.extension}"
        layouts: list[Layout] = []

        for path in sorted(self.templates_dir.iterdir()):
            filename = path.name
            if not (filename.startswith(LAYOUT_PREFIX) and filename.endswith(suffix)):
                continue
            name = filename[len(LAYOUT_PREFIX) : -len(suffix)]
            if name and path.is_file():
                layouts.append(Layout(name=name, path=path))

        return layouts

    def prepare_all(self) -> list[WorkingTemplate]:
        """Materialize the working template of every discovered layout.

        Each working template is rewritten only if its layout file is newer.

        Returns:
            One working template per layout, in discovery order.
        """
        if self._logger is not None:
            self._logger.debug(
                "preparing_layout_working_templates",
                templates_dir=str(self.templates_dir),
            )

        prepared: list[WorkingTemplate] = []
        for layout in self.discover():
            name = layout_working_template_name(
                layout.name, self._materializer.extension
            )
            prepared.append(
                self._materializer.materialize(
                    name,
                    layout.path.stat().st_mtime,
                    layout=layout.name,
                    body=None,
                )
            )

        return prepared
