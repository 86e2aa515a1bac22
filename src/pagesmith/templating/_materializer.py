"""Working template materialization.

A working template wraps a body in a layout macro and is cached in the
working directory. Two kinds exist:

- page working templates, ``{directory}/{name}.{layout}.{ext}``, embed the
  body verbatim so it is rendered as template code
- layout working templates, ``_{layout}.content.{ext}``, defer to the
  ``content`` variable and are shared by every page using the layout

A working template is rewritten only when its source is newer than the file
already on disk.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pagesmith.exceptions import SynthesisIOError
from pagesmith.utils import atomic_write_text

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

    from ._content import ContentUnit

LAYOUT_MACRO_SUFFIX = "Layout"
CONTENT_PLACEHOLDER = "{{ content }}"


@dataclass(slots=True, frozen=True)
class WorkingTemplate:
    """A materialized working template.

    Attributes:
        logical_name: Name the template resolves under.
        file_path: Location in the working directory.
        source_mtime: Modification time of the source it was derived from.
        content: Synthesized text, or None when the cached file was fresh
            and nothing was synthesized.
        written: Whether the file was (re)written by this call.
    """

    logical_name: str
    file_path: Path
    source_mtime: float
    content: str | None
    written: bool


def layout_macro_name(layout: str) -> str:
    return f"{layout}{LAYOUT_MACRO_SUFFIX}"


def layout_template_name(layout: str, extension: str) -> str:
    """Name of a layout's own template, e.g. ``_post.j2``."""
    return f"_{layout}.{extension}"


def layout_working_template_name(layout: str, extension: str) -> str:
    """Name of a layout's shared working template, e.g. ``_post.content.j2``."""
    return f"_{layout}.content.{extension}"


def page_working_template_name(
    unit: ContentUnit, layout: str | None, extension: str
) -> str:
    """Name of a page working template, e.g. ``posts/hello.md.post.j2``."""
    filename = f"{unit.name}.{layout or 'none'}.{extension}"
    directory = unit.relative_directory
    return f"{directory}/{filename}" if directory else filename


def synthesize(layout: str | None, body: str | None, *, extension: str) -> str:
    """Build working template text.

    Args:
        layout: Layout to wrap with, or None for no wrapper.
        body: Body embedded verbatim, or None to defer to ``content``.
        extension: Template file extension.

    Returns:
        The template source.
    """
    parts: list[str] = []

    if layout is not None:
        macro = layout_macro_name(layout)
        template = layout_template_name(layout, extension)
        parts.append(f'{{% from "/{template}" import {macro} with context %}}')
        parts.append(f"{{% call {macro}() %}}")

    parts.append(body if body is not None else CONTENT_PLACEHOLDER)

    if layout is not None:
        parts.append("{% endcall %}")

    return "".join(parts)


class WorkingTemplateMaterializer:
    """Writes working templates into the working directory when stale.

    Materializations of the same logical name are serialized within the
    process. Files are replaced atomically, so writers in other processes
    never observe a partial file.
    """

    def __init__(
        self,
        working_dir: Path,
        *,
        extension: str = "j2",
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self.working_dir: Path = working_dir
        self.extension: str = extension
        self._logger: FilteringBoundLogger | None = logger
        self._locks: dict[str, _NamedLock] = {}
        self._locks_guard: threading.Lock = threading.Lock()

    @contextmanager
    def _locked(self, logical_name: str) -> Iterator[None]:
        """Hold the lock for ``logical_name``; drop it once nobody waits."""
        with self._locks_guard:
            entry = self._locks.get(logical_name)
            if entry is None:
                entry = _NamedLock()
                self._locks[logical_name] = entry
            entry.users += 1

        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[logical_name]

    def path_for(self, logical_name: str) -> Path:
        return self.working_dir.joinpath(*logical_name.split("/"))

    def prepare(
        self,
        layout: str | None,
        is_valid_layout: bool,  # noqa: FBT001
        body: str | None,
        is_body_render_required: bool,  # noqa: FBT001
        unit: ContentUnit,
    ) -> str:
        """Materialize the working template for a content unit.

        Args:
            layout: Layout name.
            is_valid_layout: Whether ``layout`` names a real layout; if not,
                no wrapper is emitted.
            body: Body text, embedded when ``is_body_render_required``.
            is_body_render_required: Embed the body as template code in a
                per-page working template. Otherwise the layout's shared
                working template is used and the body is supplied through
                the ``content`` variable at render time.
            unit: The content unit; its mtime drives the staleness check.

        Returns:
            Logical name of the working template.

        Raises:
            SynthesisIOError: If the working template cannot be written.
        """
        if self._logger is not None:
            self._logger.debug("preparing_working_template", source=str(unit.path))

        wrapper = layout if is_valid_layout else None

        if is_body_render_required:
            name = page_working_template_name(unit, layout, self.extension)
            embedded = body if body is not None else ""
        else:
            name = layout_working_template_name(layout or "none", self.extension)
            embedded = None

        result = self.materialize(
            name, unit.last_modified, layout=wrapper, body=embedded
        )
        return result.logical_name

    def materialize(
        self,
        logical_name: str,
        source_mtime: float,
        *,
        layout: str | None,
        body: str | None,
    ) -> WorkingTemplate:
        """Write a working template unless a fresh one already exists.

        The cached file is fresh when its mtime is greater than or equal to
        ``source_mtime``.

        Args:
            logical_name: Name of the working template.
            source_mtime: Modification time of the source.
            layout: Layout to wrap with, or None.
            body: Body embedded verbatim, or None to defer to ``content``.

        Returns:
            The working template.

        Raises:
            SynthesisIOError: If the file cannot be written.
        """
        target = self.path_for(logical_name)

        with self._locked(logical_name):
            try:
                fresh = _is_fresh(target, source_mtime)
            except OSError as e:
                msg = f"Cannot check working template {target}: {e}"
                raise SynthesisIOError(msg, path=target, cause=e) from e

            if fresh:
                if self._logger is not None:
                    self._logger.debug("working_template_fresh", path=str(target))
                return WorkingTemplate(
                    logical_name=logical_name,
                    file_path=target,
                    source_mtime=source_mtime,
                    content=None,
                    written=False,
                )

            content = synthesize(layout, body, extension=self.extension)
            try:
                atomic_write_text(target, content)
            except OSError as e:
                msg = f"Failed to write working template {target}: {e}"
                raise SynthesisIOError(msg, path=target, cause=e) from e

        if self._logger is not None:
            self._logger.debug("working_template_created", path=str(target))

        return WorkingTemplate(
            logical_name=logical_name,
            file_path=target,
            source_mtime=source_mtime,
            content=content,
            written=True,
        )


def _is_fresh(target: Path, source_mtime: float) -> bool:
    try:
        return target.stat().st_mtime >= source_mtime
    except (FileNotFoundError, NotADirectoryError):
        return False


@dataclass(slots=True)
class _NamedLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0
