"""Content units and layout name classification."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath

# Layout values that mean "render without a layout"
NO_LAYOUT_SENTINELS = frozenset({"nil", "null", "none"})


def parse_layout(value: str | None) -> str | None:
    """Classify a layout value.

    Args:
        value: Raw layout name from content metadata.

    Returns:
        None for a missing, empty or sentinel value ("nil", "null", "none",
        any case); otherwise the name unchanged.
    """
    if not value or value.lower() in NO_LAYOUT_SENTINELS:
        return None
    return value


def is_valid_layout(value: str | None) -> bool:
    """Return True if ``value`` names a layout rather than "no layout"."""
    return parse_layout(value) is not None


@dataclass(slots=True, frozen=True)
class ContentUnit:
    """One source file being built into a page.

    Attributes:
        path: Path to the source file.
        name: Source file name, e.g. ``hello.md``.
        directory: Site-relative directory, e.g. ``/posts``. Empty or ``/``
            for the site root.
        last_modified: Source modification time, seconds since the epoch.
        body: Body text, already converted from its source format.
        layout: Raw layout name from metadata.
    """

    path: Path
    name: str
    directory: str
    last_modified: float
    body: str
    layout: str | None = None

    def __post_init__(self) -> None:
        # Working template paths are built from these; keep them inside the
        # working directory
        if ".." in PurePosixPath(self.directory).parts:
            msg = f"Content directory must not contain '..': {self.directory!r}"
            raise ValueError(msg)
        if self.name in {"", ".", ".."} or "/" in self.name:
            msg = f"Content name must be a plain file name: {self.name!r}"
            raise ValueError(msg)

    @classmethod
    def from_file(
        cls,
        path: Path,
        *,
        root: Path,
        body: str,
        layout: str | None = None,
    ) -> ContentUnit:
        """Build a content unit for a file below ``root``.

        Args:
            path: Source file.
            root: Site source root the directory is relative to.
            body: Converted body text.
            layout: Raw layout name.

        Returns:
            ContentUnit with name, directory and mtime read from disk.
        """
        relative_parent = path.parent.relative_to(root)
        directory = "/" + relative_parent.as_posix() if relative_parent.parts else "/"
        return cls(
            path=path,
            name=path.name,
            directory=directory,
            last_modified=path.stat().st_mtime,
            body=body,
            layout=layout,
        )

    @property
    def relative_directory(self) -> str:
        """Directory without leading or trailing slashes ("" for the root)."""
        return PurePosixPath("/", self.directory).as_posix().strip("/")
